"""
Generic profile-driven detector.

A ProfileDetector scores a document against one ScoringProfile. Detectors that
need more than the weight tables plug in named hooks: negative filters that
reject a document outright, marker rules evaluated before a short-circuit
check, extra weighted rules, and post-normalization adjustments.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple, runtime_checkable

import structlog

from .models import (
    DocumentConfidenceScore,
    DocumentFeatures,
    DocumentLocation,
    DocumentMetadata,
    EvidenceTier,
    ScoringEvidence,
    ScoringProfile,
)
from .rules import DetectionContext, EvidenceRule, apply_rules

logger = structlog.get_logger(__name__)

MISSING_REQUIRED_PENALTY = 15.0


@dataclass(slots=True, frozen=True)
class Verdict:
    """Fixed confidence assigned by a short-circuit hook."""

    confidence: float
    evidence: Tuple[ScoringEvidence, ...] = ()


NegativeFilter = Callable[[DetectionContext], Optional[str]]
ShortCircuit = Callable[[DetectionContext, DocumentConfidenceScore], Optional[Verdict]]
Adjustment = Callable[[DetectionContext, DocumentConfidenceScore], None]
FocusFn = Callable[[str], str]


@runtime_checkable
class Detector(Protocol):
    """A self-contained rule set scoring a document against one candidate type."""

    @property
    def document_type(self) -> str: ...

    @property
    def priority(self) -> int: ...

    @property
    def tracked_terms(self) -> Tuple[str, ...]: ...

    def can_handle(self, metadata: DocumentMetadata) -> bool: ...

    def detect(
        self, content: str, features: DocumentFeatures, metadata: DocumentMetadata
    ) -> DocumentConfidenceScore: ...


@dataclass(slots=True, frozen=True)
class EvidenceCap:
    """Caps confidence when too little evidence supports a high score."""

    min_evidence: int = 2
    above: float = 50.0
    cap: float = 45.0

    def __call__(self, ctx: DetectionContext, score: DocumentConfidenceScore) -> None:
        if len(score.evidence) < self.min_evidence and score.confidence > self.above:
            logger.debug("Insufficient evidence, capping confidence", document_type=score.document_type, cap=self.cap)
            score.set_confidence(min(self.cap, score.confidence))


@dataclass(slots=True, frozen=True)
class EvidenceFloor:
    """Raises confidence to a floor once enough evidence has been collected."""

    min_evidence: int = 2
    below: float = 50.0
    floor: float = 50.0

    def __call__(self, ctx: DetectionContext, score: DocumentConfidenceScore) -> None:
        if len(score.evidence) >= self.min_evidence and score.confidence < self.below:
            logger.debug("Boosting low confidence to floor", document_type=score.document_type, floor=self.floor)
            score.set_confidence(self.floor)


@dataclass(slots=True, frozen=True)
class InformalLanguagePenalty:
    """Scales confidence down when several informal expressions appear."""

    terms: Tuple[str, ...] = ("hey", "hi there", "thanks", "cheers", "lol", "fyi")
    min_hits: int = 2
    factor: float = 0.8

    def __call__(self, ctx: DetectionContext, score: DocumentConfidenceScore) -> None:
        hits = sum(1 for term in self.terms if re.search(r"\b" + re.escape(term) + r"\b", ctx.content, re.IGNORECASE))
        if hits >= self.min_hits:
            score.set_confidence(score.confidence * self.factor)


class ProfileDetector:
    """Scores documents with a ScoringProfile plus optional special-case hooks."""

    def __init__(
        self,
        profile: ScoringProfile,
        *,
        negative_filters: Sequence[NegativeFilter] = (),
        marker_rules: Sequence[EvidenceRule] = (),
        short_circuit: Optional[ShortCircuit] = None,
        rules: Sequence[EvidenceRule] = (),
        adjustments: Sequence[Adjustment] = (),
        focus: Optional[FocusFn] = None,
        eligibility: Optional[Callable[[DocumentMetadata], bool]] = None,
    ):
        self.profile = profile
        self.negative_filters = tuple(negative_filters)
        self.marker_rules = tuple(marker_rules)
        self.short_circuit = short_circuit
        self.rules = tuple(rules)
        self.adjustments = tuple(adjustments)
        self.focus = focus
        self.eligibility = eligibility
        self.logger = logger.bind(component="ProfileDetector", document_type=profile.document_type)

    @property
    def document_type(self) -> str:
        return self.profile.document_type

    @property
    def priority(self) -> int:
        return self.profile.priority

    @property
    def tracked_terms(self) -> Tuple[str, ...]:
        return tuple(self.profile.lexical)

    def can_handle(self, metadata: DocumentMetadata) -> bool:
        return self.eligibility is None or self.eligibility(metadata)

    def detect(
        self, content: str, features: DocumentFeatures, metadata: DocumentMetadata
    ) -> DocumentConfidenceScore:
        score = DocumentConfidenceScore(
            document_type=self.profile.document_type,
            max_possible_score=self.profile.max_possible_score,
        )
        focus = self.focus(content) if self.focus is not None else None
        ctx = DetectionContext.build(content, features, metadata, focus=focus)

        for negative_filter in self.negative_filters:
            reason = negative_filter(ctx)
            if reason:
                self.logger.debug("Negative indicator found", reason=reason)
                score.reject(reason)
                return score

        apply_rules(self.marker_rules, ctx, score)
        self._score_definitive(ctx, score)

        if self.short_circuit is not None:
            verdict = self.short_circuit(ctx, score)
            if verdict is not None:
                for evidence in verdict.evidence:
                    score.add_evidence(evidence)
                score.short_circuited = True
                score.set_confidence(verdict.confidence)
                self.logger.debug("Short-circuit accepted", confidence=score.confidence)
                return score

        self._score_structural(features, score)
        self._score_lexical(features, score)
        apply_rules(self.rules, ctx, score)
        self._apply_penalties(features, score)

        score.normalize()
        for adjustment in self.adjustments:
            adjustment(ctx, score)
        return score

    def _score_definitive(self, ctx: DetectionContext, score: DocumentConfidenceScore) -> None:
        lowered = ctx.content.lower()
        for marker, weight in self.profile.definitive.items():
            if marker in ctx.metadata.extracted_fields:
                location = DocumentLocation.METADATA_BLOCK
                value = ctx.metadata.extracted_fields[marker]
            elif ctx.metadata.title and marker.lower() in ctx.metadata.title.lower():
                location = DocumentLocation.TITLE
                value = ctx.metadata.title
            else:
                index = lowered.find(marker.lower())
                if index < 0:
                    continue
                location = DocumentLocation.for_offset(ctx.content, index)
                value = ctx.content[index : index + len(marker)]
            score.add_evidence(ScoringEvidence.located(marker, value, EvidenceTier.DEFINITIVE, weight, location))

    def _score_structural(self, features: DocumentFeatures, score: DocumentConfidenceScore) -> None:
        for feature, weight in self.profile.structural.items():
            if features.has(feature):
                score.add_evidence(ScoringEvidence.flat(feature.value, "True", EvidenceTier.STRUCTURAL, weight))

    def _score_lexical(self, features: DocumentFeatures, score: DocumentConfidenceScore) -> None:
        for term, weight in self.profile.lexical.items():
            frequency = features.frequency(term)
            if frequency <= 0:
                continue
            contribution = min(weight * frequency, weight * 3)
            score.add_evidence(
                ScoringEvidence(
                    feature=term,
                    value=str(frequency),
                    tier=EvidenceTier.LEXICAL,
                    base_weight=weight,
                    contribution=contribution,
                )
            )

    def _apply_penalties(self, features: DocumentFeatures, score: DocumentConfidenceScore) -> None:
        for feature, penalty in self.profile.conflicting.items():
            if features.has(feature):
                score.add_penalty(f"Conflicting feature: {feature.value}", penalty)
        for feature in self.profile.required:
            if not features.has(feature):
                score.add_penalty(f"Missing required feature: {feature.value}", MISSING_REQUIRED_PENALTY)

    def __repr__(self) -> str:
        return f"ProfileDetector({self.document_type!r}, priority={self.priority})"
