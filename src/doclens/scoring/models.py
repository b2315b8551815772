"""
Data models for evidence-weighted document classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

UNKNOWN = "Unknown"
PRIVACY_TERMS = "Privacy & Terms"
POLICY_LEGAL = "Policy & Legal"
TECHNICAL = "Technical Documentation"
FINANCIAL = "Financial Document"
INFORMATION_SECURITY = "Information Security"
BOARD_DOCUMENTS = "Board Documents"
FORMS_TEMPLATES = "Forms & Templates"
REPORT = "Report"
WEB_CONTENT = "Web Content"


class EvidenceTier(Enum):
    """Trust level of a matched signal, highest first."""

    DEFINITIVE = "definitive"
    STRUCTURAL = "structural"
    LEXICAL = "lexical"


class DocumentLocation(Enum):
    """Where in a document a signal was found."""

    TITLE = "title"
    METADATA_BLOCK = "metadata_block"
    FIRST_PARAGRAPH = "first_paragraph"
    SECTION_HEADER = "section_header"
    HEADER_FOOTER = "header_footer"
    BODY_TEXT = "body_text"
    DEEP_CONTENT = "deep_content"

    @property
    def multiplier(self) -> float:
        return _LOCATION_MULTIPLIERS[self]

    @classmethod
    def for_offset(cls, content: str, index: int) -> DocumentLocation:
        """Map the character offset of a match to a location by its relative position."""
        if index < 0 or not content:
            return cls.BODY_TEXT
        relative = index / len(content)
        if relative <= 0.05:
            return cls.TITLE
        if relative <= 0.10:
            return cls.FIRST_PARAGRAPH
        if relative <= 0.15:
            return cls.HEADER_FOOTER
        if relative >= 0.80:
            return cls.DEEP_CONTENT
        return cls.BODY_TEXT


_LOCATION_MULTIPLIERS = {
    DocumentLocation.TITLE: 2.0,
    DocumentLocation.METADATA_BLOCK: 1.5,
    DocumentLocation.FIRST_PARAGRAPH: 1.3,
    DocumentLocation.SECTION_HEADER: 1.2,
    DocumentLocation.HEADER_FOOTER: 1.2,
    DocumentLocation.BODY_TEXT: 1.0,
    DocumentLocation.DEEP_CONTENT: 0.8,
}


class ConfidenceLevel(Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @classmethod
    def from_confidence(cls, confidence: float) -> ConfidenceLevel:
        if confidence >= 95:
            return cls.VERY_HIGH
        if confidence >= 85:
            return cls.HIGH
        if confidence >= 70:
            return cls.MEDIUM
        if confidence >= 50:
            return cls.LOW
        return cls.VERY_LOW


class StructuralFeature(Enum):
    """Boolean flags of DocumentFeatures that profiles may weight."""

    HAS_NUMBERED_SECTIONS = "has_numbered_sections"
    HAS_METADATA_BLOCK = "has_metadata_block"
    HAS_TABLE_OF_CONTENTS = "has_table_of_contents"
    HAS_CODE_BLOCKS = "has_code_blocks"
    HAS_TABLES = "has_tables"
    HAS_FILLABLE_FIELDS = "has_fillable_fields"
    HAS_SIGNATURE_BLOCK = "has_signature_block"
    HAS_HTML_TAGS = "has_html_tags"
    USES_PRESCRIPTIVE_LANGUAGE = "uses_prescriptive_language"


@dataclass(slots=True, frozen=True)
class DocumentMetadata:
    """Caller-supplied facts about a document."""

    file_name: str = ""
    file_path: str = ""
    file_type: str = ""
    source: str = ""
    title: str = ""
    extracted_fields: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extracted_fields", MappingProxyType(dict(self.extracted_fields)))


@dataclass(slots=True, frozen=True)
class DocumentFeatures:
    """Read-only structural and lexical snapshot of a document."""

    keyword_frequencies: Mapping[str, int] = field(default_factory=dict)
    keyword_groups: Mapping[str, int] = field(default_factory=dict)
    section_headers: Tuple[str, ...] = ()
    control_identifiers: Tuple[str, ...] = ()
    policy_numbers: Tuple[str, ...] = ()
    has_numbered_sections: bool = False
    has_metadata_block: bool = False
    has_table_of_contents: bool = False
    has_code_blocks: bool = False
    has_tables: bool = False
    has_fillable_fields: bool = False
    has_signature_block: bool = False
    has_html_tags: bool = False
    uses_prescriptive_language: bool = False
    passive_voice_ratio: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "keyword_frequencies", MappingProxyType(dict(self.keyword_frequencies)))
        object.__setattr__(self, "keyword_groups", MappingProxyType(dict(self.keyword_groups)))

    def has(self, feature: StructuralFeature) -> bool:
        return bool(getattr(self, feature.value))

    def frequency(self, term: str) -> int:
        return self.keyword_frequencies.get(term.lower(), 0)


@dataclass(slots=True, frozen=True)
class ScoringEvidence:
    """One matched signal and what it contributed."""

    feature: str
    value: str
    tier: EvidenceTier
    base_weight: float
    contribution: float
    location: DocumentLocation = DocumentLocation.BODY_TEXT
    location_multiplier: float = 1.0

    @classmethod
    def located(
        cls,
        feature: str,
        value: str,
        tier: EvidenceTier,
        weight: float,
        location: DocumentLocation = DocumentLocation.BODY_TEXT,
    ) -> ScoringEvidence:
        """Build evidence whose contribution is the weight scaled by the location multiplier."""
        return cls(
            feature=feature,
            value=value,
            tier=tier,
            base_weight=weight,
            contribution=weight * location.multiplier,
            location=location,
            location_multiplier=location.multiplier,
        )

    @classmethod
    def flat(
        cls,
        feature: str,
        value: str,
        tier: EvidenceTier,
        weight: float,
        location: DocumentLocation = DocumentLocation.BODY_TEXT,
    ) -> ScoringEvidence:
        """Build evidence whose contribution is the weight as given."""
        return cls(feature=feature, value=value, tier=tier, base_weight=weight, contribution=weight, location=location)


@dataclass(slots=True)
class DocumentConfidenceScore:
    """Per-detector accumulator of tiered evidence and penalties."""

    document_type: str
    max_possible_score: float
    definitive_score: float = 0.0
    structural_score: float = 0.0
    lexical_score: float = 0.0
    penalty_score: float = 0.0
    evidence: List[ScoringEvidence] = field(default_factory=list)
    penalties: List[Tuple[str, float]] = field(default_factory=list)
    confidence: float = 0.0
    short_circuited: bool = False
    rejection_reason: Optional[str] = None

    def add_evidence(self, evidence: ScoringEvidence) -> bool:
        """Record evidence once per feature; returns False when the feature already counted."""
        if any(existing.feature == evidence.feature for existing in self.evidence):
            return False
        self.evidence.append(evidence)
        if evidence.tier is EvidenceTier.DEFINITIVE:
            self.definitive_score += evidence.contribution
        elif evidence.tier is EvidenceTier.STRUCTURAL:
            self.structural_score += evidence.contribution
        else:
            self.lexical_score += evidence.contribution
        return True

    def add_penalty(self, reason: str, amount: float) -> None:
        self.penalties.append((reason, amount))
        self.penalty_score += amount

    @property
    def raw_score(self) -> float:
        return self.definitive_score + self.structural_score + self.lexical_score - self.penalty_score

    def normalize(self) -> float:
        if self.max_possible_score <= 0:
            self.confidence = 0.0
        else:
            self.set_confidence(self.raw_score / self.max_possible_score * 100)
        return self.confidence

    def set_confidence(self, value: float) -> None:
        self.confidence = max(0.0, min(100.0, value))

    def reject(self, reason: str) -> None:
        self.rejection_reason = reason
        self.confidence = 0.0

    @property
    def level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_confidence(self.confidence)


@dataclass(slots=True, frozen=True)
class ScoringProfile:
    """Declarative weight tables for one document type."""

    document_type: str
    priority: int
    max_possible_score: float
    definitive: Mapping[str, float] = field(default_factory=dict)
    structural: Mapping[StructuralFeature, float] = field(default_factory=dict)
    lexical: Mapping[str, float] = field(default_factory=dict)
    conflicting: Mapping[StructuralFeature, float] = field(default_factory=dict)
    required: Tuple[StructuralFeature, ...] = ()

    def __post_init__(self) -> None:
        if self.max_possible_score <= 0:
            raise ValueError("max_possible_score must be positive")
        for name in ("definitive", "structural", "lexical", "conflicting"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))


@dataclass(slots=True, frozen=True)
class ClassificationResult:
    """Outcome of classifying one document."""

    success: bool
    document_type: str
    confidence: float
    level: ConfidenceLevel
    method: str
    evidence: Tuple[ScoringEvidence, ...] = ()
    features: DocumentFeatures = field(default_factory=DocumentFeatures)
    threshold: float = 85.0
    error: Optional[str] = None
    rejection_reason: Optional[str] = None
    candidates: Tuple[Tuple[str, float], ...] = ()
    failed_detectors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not (0.0 <= self.confidence <= 100.0):
            raise ValueError("Confidence must be between 0 and 100")

    @property
    def requires_ai_verification(self) -> bool:
        return self.confidence < self.threshold

    @property
    def best_candidate_confidence(self) -> float:
        return max((confidence for _, confidence in self.candidates), default=0.0)
