"""
Declarative evidence rules shared by the detector profiles.

Each rule inspects a DetectionContext and yields at most one ScoringEvidence
item. Rules carry flat point values: location is recorded for audit but does
not scale the contribution (only definitive-table hits are location-weighted).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .models import DocumentConfidenceScore, DocumentFeatures, DocumentLocation, DocumentMetadata, EvidenceTier, ScoringEvidence

Target = Literal["content", "focus", "title", "file_name"]

DENSITY_SEPARATORS = re.compile(r"[ \n\r\t.,;:()]+")
TAG_PATTERN = re.compile(r"<[^>]+>")


@dataclass(slots=True, frozen=True)
class DetectionContext:
    """Everything a rule may look at for one document."""

    content: str
    features: DocumentFeatures
    metadata: DocumentMetadata
    focus: str

    @classmethod
    def build(
        cls,
        content: str,
        features: DocumentFeatures,
        metadata: Optional[DocumentMetadata] = None,
        focus: Optional[str] = None,
    ) -> DetectionContext:
        return cls(
            content=content,
            features=features,
            metadata=metadata or DocumentMetadata(),
            focus=content if focus is None else focus,
        )

    def text(self, target: Target) -> str:
        if target == "content":
            return self.content
        if target == "focus":
            return self.focus
        if target == "title":
            return self.metadata.title
        return self.metadata.file_name

    @property
    def visible_text(self) -> str:
        return TAG_PATTERN.sub(" ", self.content).strip()


@runtime_checkable
class EvidenceRule(Protocol):
    feature: str

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        ...


def _location_of(ctx: DetectionContext, target: Target, index: int) -> DocumentLocation:
    if target in ("title", "file_name"):
        return DocumentLocation.TITLE
    if target == "focus":
        # Focus offsets are relative to the slice; locate them within the full content.
        start = ctx.content.find(ctx.focus)
        if start < 0:
            return DocumentLocation.BODY_TEXT
        index += start
    return DocumentLocation.for_offset(ctx.content, index)


def _points(count: int, weight: float, per_match: Optional[float], cap: Optional[float]) -> float:
    points = per_match * count if per_match is not None else weight
    return min(cap, points) if cap is not None else points


@dataclass(slots=True, frozen=True)
class PatternRule:
    """Awards points when a pattern matches at least ``min_count`` times."""

    feature: str
    pattern: re.Pattern[str]
    tier: EvidenceTier
    weight: float = 0.0
    min_count: int = 1
    per_match: Optional[float] = None
    cap: Optional[float] = None
    target: Target = "content"

    def count(self, ctx: DetectionContext) -> int:
        return sum(1 for _ in self.pattern.finditer(ctx.text(self.target)))

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        text = ctx.text(self.target)
        first = self.pattern.search(text)
        if first is None:
            return None
        count = sum(1 for _ in self.pattern.finditer(text))
        if count < self.min_count:
            return None
        value = first.group(0).strip() if count == 1 else f"{count} matches"
        return ScoringEvidence.flat(
            self.feature,
            value,
            self.tier,
            _points(count, self.weight, self.per_match, self.cap),
            location=_location_of(ctx, self.target, first.start()),
        )


@dataclass(slots=True, frozen=True)
class CoOccurrenceRule:
    """Awards ``weight`` when every pattern matches, or ``partial_weight`` when only some do."""

    feature: str
    patterns: Tuple[re.Pattern[str], ...]
    tier: EvidenceTier
    weight: float
    partial_feature: Optional[str] = None
    partial_weight: Optional[float] = None
    target: Target = "content"

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        text = ctx.text(self.target)
        hits = [match for match in (pattern.search(text) for pattern in self.patterns) if match is not None]
        if not hits:
            return None
        location = _location_of(ctx, self.target, min(hit.start() for hit in hits))
        if len(hits) == len(self.patterns):
            return ScoringEvidence.flat(self.feature, "All present", self.tier, self.weight, location=location)
        if self.partial_feature is None or self.partial_weight is None:
            return None
        return ScoringEvidence.flat(self.partial_feature, "Partial", self.tier, self.partial_weight, location=location)


@dataclass(slots=True, frozen=True)
class SectionRule:
    """Counts recognizable section headings and scales points by the count."""

    feature: str
    names: Tuple[str, ...]
    template: str
    min_count: int
    per_section: float
    cap: float
    tier: EvidenceTier = EvidenceTier.STRUCTURAL
    max_sections: Optional[int] = None
    target: Target = "content"
    _patterns: Tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        patterns = tuple(
            re.compile(self.template.format(name=re.escape(name)), re.IGNORECASE | re.MULTILINE) for name in self.names
        )
        object.__setattr__(self, "_patterns", patterns)

    def found(self, ctx: DetectionContext) -> list[str]:
        text = ctx.text(self.target)
        found: list[str] = []
        for name, pattern in zip(self.names, self._patterns):
            if pattern.search(text):
                found.append(name)
                if self.max_sections is not None and len(found) >= self.max_sections:
                    break
        return found

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        found = self.found(ctx)
        if len(found) < self.min_count:
            return None
        points = min(self.cap, len(found) * self.per_section)
        return ScoringEvidence.flat(self.feature, ", ".join(found), self.tier, points)


@dataclass(slots=True, frozen=True)
class DensityRule:
    """Awards points when vocabulary terms exceed a share of all words."""

    feature: str
    terms: Tuple[str, ...]
    threshold: float
    multiplier: float
    cap: float
    tier: EvidenceTier = EvidenceTier.LEXICAL
    separators: re.Pattern[str] = DENSITY_SEPARATORS
    target: Target = "content"

    def density(self, ctx: DetectionContext) -> float:
        text = ctx.text(self.target)
        words = [word.lower() for word in self.separators.split(text) if word]
        if not words:
            return 0.0
        vocabulary = {term.lower() for term in self.terms}
        hits = sum(1 for word in words if word in vocabulary)
        return hits / len(words) * 100

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        density = self.density(ctx)
        if density <= self.threshold:
            return None
        return ScoringEvidence.flat(
            self.feature, f"{density:.1f}%", self.tier, min(self.cap, density * self.multiplier)
        )


@dataclass(slots=True, frozen=True)
class DistinctTermsRule:
    """Counts how many distinct terms appear as whole words."""

    feature: str
    terms: Tuple[str, ...]
    min_distinct: int
    tier: EvidenceTier
    weight: float = 0.0
    per_term: Optional[float] = None
    cap: Optional[float] = None
    target: Target = "content"
    _patterns: Tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        patterns = tuple(re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE) for term in self.terms)
        object.__setattr__(self, "_patterns", patterns)

    def found(self, ctx: DetectionContext) -> list[str]:
        text = ctx.text(self.target)
        return [term for term, pattern in zip(self.terms, self._patterns) if pattern.search(text)]

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        found = self.found(ctx)
        if len(found) < self.min_distinct:
            return None
        return ScoringEvidence.flat(
            self.feature, ", ".join(found), self.tier, _points(len(found), self.weight, self.per_term, self.cap)
        )


@dataclass(slots=True, frozen=True)
class MetadataRule:
    """Awards points when a predicate accepts the lowercased title or file name."""

    feature: str
    predicate: Callable[[str], bool]
    tier: EvidenceTier
    weight: float
    target: Literal["title", "file_name"] = "title"

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        text = ctx.text(self.target)
        if not text or not self.predicate(text.lower()):
            return None
        return ScoringEvidence.flat(self.feature, text, self.tier, self.weight, location=DocumentLocation.TITLE)


def contains_any(*terms: str) -> Callable[[str], bool]:
    """Predicate true when any term occurs in the (already lowercased) text."""
    return lambda text: any(term in text for term in terms)


def count_whole_words(text: str, terms: Iterable[str]) -> int:
    """Total whole-word, case-insensitive occurrences of every term."""
    return sum(len(re.findall(r"\b" + re.escape(term) + r"\b", text, re.IGNORECASE)) for term in terms)


def apply_rules(rules: Sequence[EvidenceRule], ctx: DetectionContext, score: DocumentConfidenceScore) -> None:
    for rule in rules:
        evidence = rule.evaluate(ctx)
        if evidence is not None:
            score.add_evidence(evidence)


@dataclass(slots=True, frozen=True)
class GatedRule:
    """Evaluates ``rule`` only when ``gate`` matches the same target text."""

    gate: re.Pattern[str]
    rule: EvidenceRule

    @property
    def feature(self) -> str:
        return self.rule.feature

    def evaluate(self, ctx: DetectionContext) -> Optional[ScoringEvidence]:
        if self.gate.search(ctx.content) is None:
            return None
        return self.rule.evaluate(ctx)
