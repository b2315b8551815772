"""
Detectors driven by their weight tables alone.
"""

from __future__ import annotations

import re

from ..detector import ProfileDetector
from ..models import (
    BOARD_DOCUMENTS,
    FORMS_TEMPLATES,
    INFORMATION_SECURITY,
    WEB_CONTENT,
    DocumentMetadata,
    EvidenceTier,
    ScoringProfile,
    StructuralFeature,
)
from ..rules import PatternRule

HTML_FILE_TYPES = ("html", "htm")

BOARD_PROFILE = ScoringProfile(
    document_type=BOARD_DOCUMENTS,
    priority=35,
    max_possible_score=150.0,
    definitive={"Board Minutes": 45.0, "Meeting Minutes": 40.0, "Board Agenda": 40.0},
    lexical={"motion": 3.0, "seconded": 3.0},
    conflicting={StructuralFeature.HAS_CODE_BLOCKS: 20.0},
)

FORMS_PROFILE = ScoringProfile(
    document_type=FORMS_TEMPLATES,
    priority=40,
    max_possible_score=160.0,
    definitive={"Application Form": 45.0, "Registration Form": 45.0, "Consent Form": 40.0},
    structural={StructuralFeature.HAS_FILLABLE_FIELDS: 30.0, StructuralFeature.HAS_SIGNATURE_BLOCK: 25.0},
    lexical={"complete": 2.0, "submit": 2.0},
    conflicting={StructuralFeature.HAS_CODE_BLOCKS: 20.0},
    required=(StructuralFeature.HAS_FILLABLE_FIELDS,),
)

SECURITY_PROFILE = ScoringProfile(
    document_type=INFORMATION_SECURITY,
    priority=25,
    max_possible_score=200.0,
    definitive={"Information Security Policy": 45.0, "System Security Plan": 45.0, "ISMS": 40.0},
    lexical={"vulnerability": 2.0, "threat": 2.0},
)

WEB_PROFILE = ScoringProfile(
    document_type=WEB_CONTENT,
    priority=50,
    max_possible_score=100.0,
    definitive={"<html": 50.0, "<!DOCTYPE": 50.0, "<body": 30.0},
    structural={StructuralFeature.HAS_HTML_TAGS: 30.0},
    lexical={"href": 2.0, "http": 2.0},
)


def board_detector() -> ProfileDetector:
    return ProfileDetector(
        BOARD_PROFILE,
        rules=(
            PatternRule("Call to Order", re.compile(r"\bcall(?:ed)?\s+to\s+order\b", re.IGNORECASE), EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Adjournment", re.compile(r"\badjourn(?:ment|ed)\b", re.IGNORECASE), EvidenceTier.STRUCTURAL, 15.0),
        ),
    )


def forms_detector() -> ProfileDetector:
    return ProfileDetector(FORMS_PROFILE)


def security_detector() -> ProfileDetector:
    return ProfileDetector(
        SECURITY_PROFILE,
        rules=(
            PatternRule("Access Control", re.compile(r"\baccess\s+control\b", re.IGNORECASE), EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Risk Assessment", re.compile(r"\brisk\s+assessment\b", re.IGNORECASE), EvidenceTier.STRUCTURAL, 20.0),
        ),
    )


def is_web_document(metadata: DocumentMetadata) -> bool:
    """Web sources and HTML files qualify, as does anything without a declared file type."""
    if metadata.source.lower() == "web":
        return True
    file_type = metadata.file_type.lower().lstrip(".")
    return not file_type or file_type in HTML_FILE_TYPES


def web_detector() -> ProfileDetector:
    return ProfileDetector(WEB_PROFILE, eligibility=is_web_document)
