"""
Policy & Legal detector: board policies, administrative regulations, by-laws.
"""

from __future__ import annotations

import re
from typing import Optional

from ..detector import EvidenceCap, InformalLanguagePenalty, ProfileDetector, Verdict
from ..models import POLICY_LEGAL, DocumentConfidenceScore, EvidenceTier, ScoringEvidence, ScoringProfile
from ..rules import DetectionContext, DistinctTermsRule, GatedRule, PatternRule, SectionRule

NON_POLICY_INDICATORS = (
    "announcement",
    "news",
    "article",
    "blog",
    "newsletter",
    "update",
    "notice",
    "alert",
    "reminder",
    "invitation",
    "agenda",
    "minutes",
    "report card",
    "calendar",
    "schedule",
    "event",
    "welcome",
)

NAVIGATION = re.compile(r"(?:nav|menu|footer|header|breadcrumb|sitemap)[\s\-_]?(?:item|link|content)?", re.IGNORECASE)
MAX_NAVIGATION_MATCHES = 10
MIN_TEXT_LENGTH = 200

TITLE_IDENTIFIER = re.compile(
    r"(?:Policy|Procedure|Regulation|By-?law|Administrative\s+Regulation)[\s:]*([A-Z]{2,4}[-\s]?\d{3,4})",
    re.IGNORECASE,
)
ALPHANUMERIC_IDENTIFIER = re.compile(
    r"(?:^|\n)\s*(?:Policy|Regulation|By-?law|AR|Administrative\s+Regulation)\s*(?:Number|#|No\.?)?[\s:]*"
    r"([A-Z]{2,4}[-\s]?\d{3,4}(?:\.\d+)?)",
    re.IGNORECASE | re.MULTILINE,
)
NUMERIC_CODE = re.compile(r"Policy\s*(?:Code|Number|#|No\.?)[\s:]*(\d{1,4}(?:\.\d+)?)", re.IGNORECASE)
TITLE_FIELD = re.compile(r"Policy\s+Title[\s:]+(.+?)(?:\r?\n|$)", re.IGNORECASE)
METADATA_FIELDS = re.compile(
    r"(?:Cross\s+Reference|Legal\s+Reference|Adoption\s+Date|Amendment\s+Date|Effective\s+Date|Review\s+Date)[\s:]+",
    re.IGNORECASE,
)
METADATA_BLOCK = re.compile(
    r"Policy\s*(?:Number|#|No\.?)[\s:]*[\w-]+.*?Effective\s+Date[\s:]*\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}",
    re.IGNORECASE | re.DOTALL,
)

POLICY_SECTIONS = SectionRule(
    feature="Policy Sections",
    names=(
        "Purpose",
        "Scope",
        "Definitions",
        "Policy Statement",
        "Responsibilities",
        "Procedures",
        "Authority",
        "References",
        "Compliance",
        "Enforcement",
        "Exceptions",
        "Effective Date",
        "Guidelines",
        "Policy",
        "Background",
        "Application",
    ),
    template=r"(?:^|\n)\s*{name}\s*[:|\n]",
    min_count=3,
    per_section=0.0,
    cap=0.0,
)
COMPLETE_DOCUMENT_SECTIONS = 3
COMPLETE_DOCUMENT_CONFIDENCE = 98.0


def non_policy_file_name(ctx: DetectionContext) -> Optional[str]:
    file_name = ctx.metadata.file_name.lower()
    for indicator in NON_POLICY_INDICATORS:
        if indicator in file_name:
            return f"File name suggests non-policy content ({indicator})"
    return None


def non_policy_title(ctx: DetectionContext) -> Optional[str]:
    title = ctx.metadata.title.lower()
    if "policy" in title or "procedure" in title:
        return None
    for indicator in NON_POLICY_INDICATORS:
        if indicator in title:
            return f"Title suggests non-policy content ({indicator})"
    return None


def navigation_content(ctx: DetectionContext) -> Optional[str]:
    matches = sum(1 for _ in NAVIGATION.finditer(ctx.content))
    if matches > MAX_NAVIGATION_MATCHES:
        return f"Primarily navigation content ({matches} navigation markers)"
    return None


def insufficient_content(ctx: DetectionContext) -> Optional[str]:
    if len(ctx.visible_text) < MIN_TEXT_LENGTH:
        return "Insufficient text content"
    return None


def middle_of_document(content: str) -> str:
    """Drop the first and last tenth of long documents, where page chrome tends to live."""
    if len(content) < 1000:
        return content
    margin = len(content) // 10
    return content[margin : len(content) - margin]


def complete_policy_document(ctx: DetectionContext, score: DocumentConfidenceScore) -> Optional[Verdict]:
    """A policy marker backed by several standard policy sections is conclusive."""
    if not score.evidence:
        return None
    sections = POLICY_SECTIONS.found(ctx)
    if len(sections) < COMPLETE_DOCUMENT_SECTIONS:
        return None
    evidence = ScoringEvidence.flat(
        f"Complete Policy Document ({len(sections)} sections)", ", ".join(sections), EvidenceTier.DEFINITIVE, 50.0
    )
    return Verdict(confidence=COMPLETE_DOCUMENT_CONFIDENCE, evidence=(evidence,))


PROFILE = ScoringProfile(
    document_type=POLICY_LEGAL,
    priority=10,
    max_possible_score=200.0,
)


def policy_detector(evidence_cap: float = 45.0, informal_factor: float = 0.8) -> ProfileDetector:
    return ProfileDetector(
        PROFILE,
        negative_filters=(non_policy_file_name, non_policy_title, navigation_content, insufficient_content),
        marker_rules=(
            PatternRule("Policy Identifier in Title", TITLE_IDENTIFIER, EvidenceTier.DEFINITIVE, 50.0, target="title"),
            PatternRule("Policy Identifier", ALPHANUMERIC_IDENTIFIER, EvidenceTier.DEFINITIVE, 50.0),
            PatternRule("Policy Code", NUMERIC_CODE, EvidenceTier.DEFINITIVE, 50.0),
            GatedRule(NUMERIC_CODE, PatternRule("Policy Title Field", TITLE_FIELD, EvidenceTier.STRUCTURAL, 30.0)),
            PatternRule("Policy Metadata Fields", METADATA_FIELDS, EvidenceTier.STRUCTURAL, 40.0, min_count=2),
            PatternRule("Policy Metadata Block", METADATA_BLOCK, EvidenceTier.DEFINITIVE, 45.0),
        ),
        short_circuit=complete_policy_document,
        rules=(
            DistinctTermsRule(
                "Policy Terminology",
                ("policy", "procedure", "regulation", "guideline", "directive", "standard"),
                min_distinct=3,
                tier=EvidenceTier.LEXICAL,
                weight=20.0,
                target="focus",
            ),
            PatternRule(
                "Regulatory References",
                re.compile(r"\b(?:Act|Regulation|Statute|Law|Code)\b"),
                EvidenceTier.LEXICAL,
                15.0,
                target="focus",
            ),
            PatternRule(
                "Numbered Sections",
                re.compile(r"^\s*\d+\.\s+[A-Z]", re.MULTILINE),
                EvidenceTier.STRUCTURAL,
                25.0,
                min_count=3,
                target="focus",
            ),
            PatternRule(
                "Subsections",
                re.compile(r"^\s*[a-z]\.\s+|\s+[ivx]+\.\s+", re.MULTILINE),
                EvidenceTier.STRUCTURAL,
                15.0,
                min_count=5,
                target="focus",
            ),
        ),
        adjustments=(InformalLanguagePenalty(factor=informal_factor), EvidenceCap(cap=evidence_cap)),
        focus=middle_of_document,
    )
