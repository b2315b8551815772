"""
Privacy & Terms detector: privacy policies, notices, terms of use and similar agreements.

These documents anchor compliance review, so the detector has no negative
filters and lifts weakly supported matches to a floor instead of capping them.
"""

from __future__ import annotations

import re
from typing import Optional

from ..detector import EvidenceFloor, ProfileDetector, Verdict
from ..models import PRIVACY_TERMS, DocumentConfidenceScore, EvidenceTier, ScoringProfile
from ..rules import (
    CoOccurrenceRule,
    DensityRule,
    DetectionContext,
    DistinctTermsRule,
    MetadataRule,
    PatternRule,
    SectionRule,
    contains_any,
)

PRIVACY_TITLE = re.compile(
    r"(?:Privacy\s+(?:Policy|Notice|Statement)|Data\s+(?:Privacy|Protection)\s+(?:Policy|Notice)"
    r"|Personal\s+(?:Information|Data)\s+(?:Collection|Protection))",
    re.IGNORECASE,
)
TERMS_TITLE = re.compile(
    r"(?:Terms\s+(?:of\s+(?:Use|Service)|and\s+Conditions)|User\s+Agreement|Service\s+Agreement"
    r"|End\s+User\s+License\s+Agreement|EULA|Acceptable\s+Use\s+Policy)",
    re.IGNORECASE,
)
DATA_COLLECTION = re.compile(
    r"(?:Information\s+We\s+Collect|Data\s+Collection|Types\s+of\s+(?:Information|Data)"
    r"|Personal\s+(?:Information|Data)\s+(?:Collected|We\s+Collect))",
    re.IGNORECASE,
)
DATA_USE = re.compile(
    r"(?:How\s+We\s+Use|Use\s+of\s+(?:Information|Data)|Purpose\s+of\s+(?:Collection|Processing)|Why\s+We\s+Collect)",
    re.IGNORECASE,
)
USER_RIGHTS = re.compile(
    r"(?:Your\s+(?:Rights|Choices)|User\s+Rights|Data\s+Subject\s+Rights|Right\s+to\s+(?:Access|Delete|Correct|Opt.?Out)"
    r"|GDPR\s+Rights|CCPA\s+Rights)",
    re.IGNORECASE,
)
# Acronyms are matched case-sensitively.
COMPLIANCE = re.compile(
    r"(?:GDPR|CCPA|COPPA|PIPEDA|FERPA|HIPAA|Privacy\s+Act|Data\s+Protection\s+Act|Compliance\s+with\s+(?:Law|Regulations))"
)
COOKIES = re.compile(
    r"(?:Cookie\s+(?:Policy|Notice|Use)|Use\s+of\s+Cookies|Cookies\s+and\s+(?:Similar|Tracking)\s+Technologies)",
    re.IGNORECASE,
)
SECURITY = re.compile(
    r"(?:(?:Data|Information)\s+Security|Security\s+(?:Measures|Practices)|How\s+We\s+Protect"
    r"|Protection\s+of\s+(?:Information|Data))",
    re.IGNORECASE,
)
RETENTION = re.compile(
    r"(?:Data\s+Retention|Retention\s+(?:Period|Policy)|How\s+Long\s+We\s+(?:Keep|Store|Retain)"
    r"|Storage\s+(?:Period|Duration))",
    re.IGNORECASE,
)
LAST_UPDATED = re.compile(
    r"(?:Last\s+(?:Updated|Modified|Revised)|Effective\s+(?:Date|as\s+of))[\s:]*"
    r"(?:January|February|March|April|May|June|July|August|September|October|November|December)\s+\d{1,2},?\s+\d{4}",
    re.IGNORECASE,
)

PRIVACY_TERMS_SECTIONS = (
    "Information We Collect",
    "Types of Information",
    "Personal Information",
    "How We Use Information",
    "Use of Data",
    "Purpose of Collection",
    "Information Sharing",
    "Third Parties",
    "Disclosure",
    "Data Retention",
    "How Long We Keep",
    "Storage Period",
    "Your Rights",
    "Your Choices",
    "User Rights",
    "Data Subject Rights",
    "Cookies",
    "Tracking Technologies",
    "Analytics",
    "Security",
    "Data Security",
    "Protection Measures",
    "Children's Privacy",
    "Children Under 13",
    "COPPA",
    "International Transfers",
    "Cross-Border Transfers",
    "Contact Us",
    "Contact Information",
    "Privacy Officer",
    "Acceptance of Terms",
    "Agreement to Terms",
    "Binding Agreement",
    "Use License",
    "Grant of License",
    "Permitted Use",
    "User Obligations",
    "User Responsibilities",
    "Prohibited Uses",
    "Intellectual Property",
    "Copyright",
    "Trademarks",
    "Disclaimers",
    "Limitation of Liability",
    "Indemnification",
    "Termination",
    "Suspension",
    "Account Termination",
    "Governing Law",
    "Jurisdiction",
    "Dispute Resolution",
    "Changes to Terms",
    "Modifications",
    "Updates",
)

PRIVACY_TERMS_VOCABULARY = (
    "privacy",
    "consent",
    "opt-in",
    "opt-out",
    "cookies",
    "tracking",
    "analytics",
    "disclosure",
    "retention",
    "deletion",
    "encryption",
    "anonymization",
    "pseudonymization",
    "terms",
    "conditions",
    "agreement",
    "license",
    "permitted",
    "prohibited",
    "restrictions",
    "obligations",
    "liability",
    "indemnify",
    "warranty",
    "disclaimer",
    "termination",
    "jurisdiction",
    "arbitration",
    "dispute",
)

LEGAL_COMPLIANCE_TERMS = (
    "GDPR",
    "CCPA",
    "COPPA",
    "PIPEDA",
    "FERPA",
    "HIPAA",
    "General Data Protection Regulation",
    "California Consumer Privacy Act",
    "Children's Online Privacy Protection Act",
    "Privacy Act",
    "Data Protection Act",
    "Privacy Shield",
    "Standard Contractual Clauses",
)

SHORT_CIRCUIT_CAP = 98.0
MIN_STRONG_INDICATORS = 2
SINGLE_INDICATOR_SCORE = 60.0


def strong_privacy_indicators(ctx: DetectionContext, score: DocumentConfidenceScore) -> Optional[Verdict]:
    """Two strong indicators, or one carrying enough weight on its own, are conclusive."""
    indicators = len(score.evidence)
    if indicators >= MIN_STRONG_INDICATORS or (indicators >= 1 and score.definitive_score >= SINGLE_INDICATOR_SCORE):
        return Verdict(confidence=min(SHORT_CIRCUIT_CAP, score.definitive_score))
    return None


PROFILE = ScoringProfile(
    document_type=PRIVACY_TERMS,
    priority=5,
    max_possible_score=220.0,
)


def privacy_terms_detector(floor: float = 50.0) -> ProfileDetector:
    return ProfileDetector(
        PROFILE,
        marker_rules=(
            PatternRule("Privacy Policy Title", PRIVACY_TITLE, EvidenceTier.DEFINITIVE, 45.0),
            PatternRule("Terms of Use Title", TERMS_TITLE, EvidenceTier.DEFINITIVE, 45.0),
            CoOccurrenceRule("Data Collection & Use Sections", (DATA_COLLECTION, DATA_USE), EvidenceTier.DEFINITIVE, 40.0),
            PatternRule("User Rights Section", USER_RIGHTS, EvidenceTier.DEFINITIVE, 35.0),
            PatternRule("Legal Compliance References", COMPLIANCE, EvidenceTier.DEFINITIVE, 35.0, min_count=2),
            MetadataRule(
                "Privacy/Terms Document Title",
                contains_any("privacy", "terms of", "data protection", "cookie"),
                EvidenceTier.DEFINITIVE,
                30.0,
            ),
        ),
        short_circuit=strong_privacy_indicators,
        rules=(
            PatternRule("Cookies Section", COOKIES, EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Security Section", SECURITY, EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Data Retention Section", RETENTION, EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Last Updated Date", LAST_UPDATED, EvidenceTier.STRUCTURAL, 15.0),
            SectionRule(
                "Privacy/Terms Sections",
                PRIVACY_TERMS_SECTIONS,
                template=r"(?:^|\n)\s*\d*\.?\s*{name}\s*[:.\n]",
                min_count=3,
                per_section=8.0,
                cap=40.0,
                max_sections=9,
            ),
            DistinctTermsRule(
                "Legal Compliance Terms",
                LEGAL_COMPLIANCE_TERMS,
                min_distinct=2,
                tier=EvidenceTier.STRUCTURAL,
                per_term=10.0,
                cap=30.0,
            ),
            DensityRule("Privacy/Terms Term Density", PRIVACY_TERMS_VOCABULARY, threshold=2.0, multiplier=10.0, cap=30.0),
            MetadataRule(
                "Privacy/Terms Filename",
                contains_any("privacy", "terms", "tos", "eula", "cookie", "gdpr", "ccpa", "data-protection"),
                EvidenceTier.STRUCTURAL,
                25.0,
                target="file_name",
            ),
        ),
        adjustments=(EvidenceFloor(floor=floor),),
    )
