"""
Shared test configuration for DocLens.

Provides a deterministic whitespace tokenizer so segmentation and chunking
tests never download a model, plus sample documents for the detectors.
"""

import pytest

from doclens.config import LazyConfig
from doclens.scoring import FeatureExtractor


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests spanning scoring and chunking")


class WordTokenizer:
    """Counts whitespace separated words."""

    def count_tokens(self, text: str) -> int:
        return len(text.split())


def words(count: int, stem: str = "word") -> str:
    """A paragraph of exactly ``count`` whitespace tokens."""
    return " ".join(f"{stem}{i}" for i in range(count))


@pytest.fixture
def word_tokenizer() -> WordTokenizer:
    return WordTokenizer()


@pytest.fixture
def make_words():
    return words


@pytest.fixture(autouse=True)
def reset_lazy_config():
    yield
    LazyConfig.reset()


@pytest.fixture
def extractor() -> FeatureExtractor:
    return FeatureExtractor(tracked_terms=("motion", "seconded", "complete", "submit", "vulnerability", "threat"))


# ============================================================================
# Sample documents
# ============================================================================


@pytest.fixture
def policy_text() -> str:
    return (
        "Policy Number: AR-4027\n"
        "Effective Date: 01/15/2020\n"
        "Purpose: This regulation establishes the requirements for retaining student records in all schools.\n"
        "Scope: It applies to every school, department and contractor that handles student records.\n"
        "Definitions: A student record is any information directly related to a student and kept by the district.\n"
        "Responsibilities: Principals shall ensure that records are stored securely and reviewed each year.\n"
        "Procedures: Records must be retained for seven years and then destroyed in a secure manner.\n"
    )


@pytest.fixture
def technical_text() -> str:
    return (
        "Orders Service Guide\n\n"
        "The orders service exposes two endpoints.\n\n"
        "GET /api/orders returns every order for the caller.\n"
        "POST /api/orders/{id} updates a single order.\n\n"
        "```python\nclient = OrdersClient(base_url)\n```\n\n"
        "```python\norders = client.list_orders()\n```\n\n"
        "```python\nclient.update_order(order_id, status='shipped')\n```\n"
    )


@pytest.fixture
def privacy_text() -> str:
    return (
        "Privacy Policy\n\n"
        "This page explains how the district handles personal information.\n\n"
        "Information We Collect\n"
        "We collect names, addresses and contact details when families register.\n\n"
        "How We Use Information\n"
        "We use this information to provide educational services and to contact families.\n"
    )


@pytest.fixture
def financial_text() -> str:
    return (
        "Balance Sheet\n\n"
        "The district closed Fiscal Year 2023 with a modest surplus.\n"
        "Planning for FY2024 continues with the same priorities.\n"
    )


@pytest.fixture
def report_text() -> str:
    return (
        "Annual Report\n\n"
        "Executive Summary\n"
        "Enrolment grew across most schools this year.\n\n"
        "Findings\n"
        "Attendance improved in the elementary grades.\n\n"
        "Recommendations\n"
        "Expand the tutoring programme to secondary schools.\n"
    )


@pytest.fixture
def board_text() -> str:
    return (
        "Board Minutes\n\n"
        "The meeting was called to order at 7:00 pm by the chair.\n"
        "A motion to approve the school calendar was seconded and carried.\n"
        "The meeting adjourned at 9:15 pm.\n"
    )
