"""Unit tests for the built-in document type detectors."""

from __future__ import annotations

import pytest

from doclens.config import ScoringConfig
from doclens.exceptions import ConfigurationError
from doclens.scoring import DocumentLocation, DocumentMetadata, FeatureExtractor, create_engine
from doclens.scoring.profiles import (
    board_detector,
    build_detectors,
    financial_detector,
    forms_detector,
    policy_detector,
    privacy_terms_detector,
    report_detector,
    security_detector,
    technical_detector,
    web_detector,
)
from doclens.scoring.profiles.policy import middle_of_document


def detect(detector, content, metadata=None):
    metadata = metadata or DocumentMetadata()
    features = FeatureExtractor(tracked_terms=detector.tracked_terms).extract(content, metadata)
    return detector.detect(content, features, metadata)


class TestPolicyDetector:
    """Test Policy & Legal detection."""

    def test_complete_policy_document_short_circuits(self, policy_text):
        """Identifier plus several standard sections is conclusive."""
        score = detect(policy_detector(), policy_text)

        assert score.short_circuited
        assert score.confidence >= 95
        features = [e.feature for e in score.evidence]
        assert "Policy Identifier" in features
        assert "Policy Metadata Block" in features
        assert any(f.startswith("Complete Policy Document") for f in features)

    def test_short_page_rejected(self):
        """Pages with under 200 characters of visible text are not policies."""
        content = "<html><body><h1>Welcome</h1><p>short text</p></body></html>"
        score = detect(policy_detector(), content)

        assert score.confidence == 0
        assert score.rejection_reason == "Insufficient text content"

    @pytest.mark.parametrize(
        "metadata, reason",
        [
            (DocumentMetadata(file_name="district_newsletter_may.html"), "File name suggests non-policy content (news)"),
            (DocumentMetadata(title="Spring Concert Invitation"), "Title suggests non-policy content (invitation)"),
        ],
    )
    def test_non_policy_names_rejected(self, policy_text, metadata, reason):
        score = detect(policy_detector(), policy_text, metadata)

        assert score.confidence == 0
        assert score.rejection_reason == reason

    def test_policy_word_in_title_overrides_title_filter(self, policy_text):
        """A title naming a policy is never treated as an announcement."""
        score = detect(policy_detector(), policy_text, DocumentMetadata(title="Policy Update: Student Records"))

        assert score.rejection_reason is None
        assert score.confidence >= 95

    def test_navigation_heavy_page_rejected(self):
        content = " ".join(["nav-item menu-link footer-content"] * 5) + " " + "x" * 300
        score = detect(policy_detector(), content)

        assert score.confidence == 0
        assert "navigation" in score.rejection_reason

    def test_sections_without_markers_do_not_short_circuit(self):
        """Section headings alone are not enough for the short-circuit."""
        content = (
            "Purpose: Describe how the library lends laptops to students during the school year.\n"
            "Scope: All campus libraries and their staff members who handle the laptop lending desk.\n"
            "Procedures: Students sign the lending sheet and return devices within two weeks of pickup.\n"
        )
        score = detect(policy_detector(), content)

        assert not score.short_circuited
        assert score.confidence < 95

    def test_middle_of_document_keeps_short_text(self):
        assert middle_of_document("short") == "short"
        text = "a" * 100 + "b" * 800 + "c" * 100
        assert middle_of_document(text) == "b" * 800


class TestTechnicalDetector:
    """Test Technical Documentation detection."""

    def test_code_and_endpoints_short_circuit(self, technical_text):
        score = detect(technical_detector(), technical_text)

        assert score.short_circuited
        assert score.confidence == 95.0
        features = [e.feature for e in score.evidence]
        assert features == ["Code Blocks", "API Endpoints"]

    def test_openapi_document(self):
        score = detect(technical_detector(), "openapi: 3.0.0\ninfo:\n  title: Orders\n")

        assert score.confidence == 95.0
        assert score.evidence[0].feature == "OpenAPI/Swagger Specification"

    def test_technical_file_name_with_code(self):
        content = "Use the endpoint below.\n\nGET /v1/status\n"
        score = detect(technical_detector(), content, DocumentMetadata(file_name="api_reference_doc.md"))

        assert score.confidence == 75.0

    def test_single_weak_signal_is_capped(self):
        """A document with one piece of evidence never exceeds the cap."""
        score = detect(technical_detector(), "Run the job.\n\nPOST /jobs\n")

        assert len(score.evidence) == 1
        assert score.confidence <= 40.0


class TestFinancialDetector:
    """Test Financial Document detection."""

    def test_three_indicators_short_circuit(self, financial_text):
        metadata = DocumentMetadata(title="Annual Budget 2023-2024")
        score = detect(financial_detector(), financial_text, metadata)

        assert score.short_circuited
        # Statement 40 + fiscal years 30 + title 30, capped
        assert score.confidence == 95.0

    def test_other_document_vocabulary_rejected(self):
        content = "The motion was seconded and carried. " * 4
        score = detect(financial_detector(), content)

        assert score.confidence == 0
        assert score.rejection_reason.startswith("Vocabulary of another document type")


class TestPrivacyTermsDetector:
    """Test Privacy & Terms detection."""

    def test_two_indicators_short_circuit(self, privacy_text):
        score = detect(privacy_terms_detector(), privacy_text)

        assert score.short_circuited
        # Title 45 + collection and use 40
        assert score.confidence == 85.0

    def test_supported_match_lifted_to_floor(self):
        content = (
            "We explain the use of cookies on this site. "
            "Our data retention period is two years for account records kept by the service."
        )
        score = detect(privacy_terms_detector(), content)

        assert not score.short_circuited
        assert len(score.evidence) >= 2
        assert score.confidence == 50.0

    def test_unrelated_text_scores_zero(self):
        score = detect(privacy_terms_detector(), "The bus leaves at noon from the east gate of the school.")

        assert score.confidence == 0.0


class TestReportDetector:
    """Test Report detection."""

    def test_report_markers_short_circuit(self, report_text):
        score = detect(report_detector(), report_text)

        assert score.short_circuited
        assert score.confidence == 92.0

    def test_specialized_file_name_rejected(self, report_text):
        score = detect(report_detector(), report_text, DocumentMetadata(file_name="board_minutes_2024.html"))

        assert score.confidence == 0
        assert "minutes" in score.rejection_reason


class TestSecurityDetector:
    """Test Information Security detection."""

    def test_security_policy(self):
        content = (
            "Information Security Policy\n\n"
            "Access control is reviewed every quarter. A risk assessment identifies each threat "
            "and every vulnerability before new software goes live."
        )
        score = detect(security_detector(), content)

        # Title-located marker 90, access control 20, risk assessment 20, threat 2, vulnerability 2
        assert score.confidence == pytest.approx(67.0)
        assert {e.feature for e in score.evidence} == {
            "Information Security Policy",
            "Access Control",
            "Risk Assessment",
            "threat",
            "vulnerability",
        }
        assert score.evidence[0].location is DocumentLocation.TITLE

    def test_marker_in_title_metadata(self):
        metadata = DocumentMetadata(title="System Security Plan 2024")
        score = detect(security_detector(), "Backups run nightly and are tested monthly.", metadata)

        assert score.confidence == pytest.approx(45.0)
        assert score.evidence[0].value == "System Security Plan 2024"

    def test_isms_marker_matches_inside_words(self):
        """Definitive markers are plain substrings, so "mechanisms" carries "ISMS"."""
        score = detect(security_detector(), "Reporting mechanisms for staff are listed in the handbook.")

        marker = next(e for e in score.evidence if e.feature == "ISMS")
        assert marker.value == "isms"
        assert score.confidence > 0

    def test_unrelated_content_scores_zero(self):
        score = detect(security_detector(), "The cafeteria menu changes every week.")

        assert score.confidence == 0
        assert score.evidence == []


class TestTableDrivenDetectors:
    """Test the board, forms and web detectors."""

    def test_board_minutes(self, board_text):
        score = detect(board_detector(), board_text)

        # Title-located marker 90, motion 3, seconded 3, call to order 20, adjournment 15
        assert score.confidence == pytest.approx(131 / 150 * 100)
        assert score.evidence[0].feature == "Board Minutes"

    def test_form_without_fields_penalized(self):
        score = detect(forms_detector(), "Registration Form\nPlease read the guidance before you begin.")

        assert ("Missing required feature: has_fillable_fields", 15.0) in score.penalties

    def test_form_with_fields(self):
        content = "Registration Form\nName: ________\nSignature: ________\nPlease submit by Friday."
        score = detect(forms_detector(), content)

        assert score.penalties == []
        assert score.confidence > 50

    @pytest.mark.parametrize(
        "metadata, eligible",
        [
            (DocumentMetadata(source="web", file_type="pdf"), True),
            (DocumentMetadata(file_type=".html"), True),
            (DocumentMetadata(), True),
            (DocumentMetadata(file_type="pdf"), False),
        ],
    )
    def test_web_detector_eligibility(self, metadata, eligible):
        assert web_detector().can_handle(metadata) is eligible


class TestBuildDetectors:
    """Test the detector catalogue."""

    def test_default_excludes_web_content(self):
        types = [detector.document_type for detector in build_detectors()]

        assert "Web Content" not in types
        assert types[0] == "Privacy & Terms"
        assert len(types) == 8

    def test_unknown_type_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown document type"):
            build_detectors(["Recipes"])

    def test_unknown_type_in_config_rejected(self):
        with pytest.raises(ConfigurationError, match="Recipes"):
            create_engine(ScoringConfig(enabled_detectors=["Report", "Recipes"]))
