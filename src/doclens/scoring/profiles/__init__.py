"""
Detector catalogue.

Each factory builds a fresh detector; ``build_detectors`` assembles them in
registration order, which the engine uses to break ties between equal
priorities.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from doclens.exceptions import ConfigurationError

from ..detector import ProfileDetector
from ..models import (
    BOARD_DOCUMENTS,
    FINANCIAL,
    FORMS_TEMPLATES,
    INFORMATION_SECURITY,
    POLICY_LEGAL,
    PRIVACY_TERMS,
    REPORT,
    TECHNICAL,
    WEB_CONTENT,
)
from .financial import financial_detector
from .policy import policy_detector
from .privacy import privacy_terms_detector
from .report import report_detector
from .simple import board_detector, forms_detector, security_detector, web_detector
from .technical import technical_detector

DETECTOR_FACTORIES: Dict[str, Callable[[], ProfileDetector]] = {
    PRIVACY_TERMS: privacy_terms_detector,
    POLICY_LEGAL: policy_detector,
    TECHNICAL: technical_detector,
    FINANCIAL: financial_detector,
    INFORMATION_SECURITY: security_detector,
    BOARD_DOCUMENTS: board_detector,
    FORMS_TEMPLATES: forms_detector,
    REPORT: report_detector,
    WEB_CONTENT: web_detector,
}


def build_detectors(document_types: Optional[Iterable[str]] = None) -> List[ProfileDetector]:
    """Instantiate detectors for the given document types (all but Web Content by default)."""
    if document_types is None:
        document_types = [name for name in DETECTOR_FACTORIES if name != WEB_CONTENT]
    detectors = []
    for name in document_types:
        try:
            factory = DETECTOR_FACTORIES[name]
        except KeyError:
            raise ConfigurationError(f"Unknown document type: {name!r}") from None
        detectors.append(factory())
    return detectors


__all__ = [
    "DETECTOR_FACTORIES",
    "board_detector",
    "build_detectors",
    "financial_detector",
    "forms_detector",
    "policy_detector",
    "privacy_terms_detector",
    "report_detector",
    "security_detector",
    "technical_detector",
    "web_detector",
]
