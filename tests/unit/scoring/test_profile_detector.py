"""Unit tests for the generic profile detector and score accumulation."""

from __future__ import annotations

import re

import pytest

from doclens.scoring import (
    ConfidenceLevel,
    DocumentConfidenceScore,
    DocumentFeatures,
    DocumentLocation,
    DocumentMetadata,
    EvidenceCap,
    EvidenceFloor,
    EvidenceTier,
    FeatureExtractor,
    InformalLanguagePenalty,
    ProfileDetector,
    ScoringEvidence,
    ScoringProfile,
    StructuralFeature,
    Verdict,
)
from doclens.scoring.rules import DetectionContext, PatternRule

SAMPLE_PROFILE = ScoringProfile(
    document_type="Sample",
    priority=10,
    max_possible_score=100.0,
    definitive={"Sample Marker": 20.0},
    structural={StructuralFeature.HAS_NUMBERED_SECTIONS: 10.0},
    lexical={"widget": 5.0},
    conflicting={StructuralFeature.HAS_CODE_BLOCKS: 10.0},
    required=(StructuralFeature.HAS_FILLABLE_FIELDS,),
)


def _score(detector, content, metadata=None):
    metadata = metadata or DocumentMetadata()
    extractor = FeatureExtractor(tracked_terms=detector.tracked_terms)
    return detector.detect(content, extractor.extract(content, metadata), metadata)


class TestDocumentConfidenceScore:
    """Test evidence accumulation and normalization."""

    def test_duplicate_feature_counted_once(self):
        """A second item for the same feature is ignored."""
        score = DocumentConfidenceScore(document_type="Sample", max_possible_score=100.0)
        first = ScoringEvidence.flat("Marker", "a", EvidenceTier.DEFINITIVE, 30.0)
        second = ScoringEvidence.flat("Marker", "b", EvidenceTier.STRUCTURAL, 10.0)

        assert score.add_evidence(first) is True
        assert score.add_evidence(second) is False
        assert score.definitive_score == 30.0
        assert score.structural_score == 0.0
        assert len(score.evidence) == 1

    def test_normalize_clamps_to_range(self):
        """Penalties cannot push confidence below zero, bonuses not above 100."""
        score = DocumentConfidenceScore(document_type="Sample", max_possible_score=50.0)
        score.add_evidence(ScoringEvidence.flat("Marker", "a", EvidenceTier.DEFINITIVE, 80.0))
        assert score.normalize() == 100.0

        score.add_penalty("Conflict", 200.0)
        assert score.normalize() == 0.0

    def test_reject_zeroes_confidence(self):
        score = DocumentConfidenceScore(document_type="Sample", max_possible_score=50.0, confidence=70.0)
        score.reject("Not this kind of document")

        assert score.confidence == 0.0
        assert score.rejection_reason == "Not this kind of document"
        assert score.level is ConfidenceLevel.VERY_LOW

    def test_located_evidence_scaled_by_multiplier(self):
        """Location multipliers scale located evidence only."""
        located = ScoringEvidence.located("Marker", "x", EvidenceTier.DEFINITIVE, 40.0, DocumentLocation.TITLE)
        flat = ScoringEvidence.flat("Marker", "x", EvidenceTier.DEFINITIVE, 40.0, DocumentLocation.TITLE)

        assert located.contribution == 80.0
        assert located.location_multiplier == 2.0
        assert flat.contribution == 40.0

    @pytest.mark.parametrize(
        "index, location",
        [(0, DocumentLocation.TITLE), (7, DocumentLocation.FIRST_PARAGRAPH), (12, DocumentLocation.HEADER_FOOTER),
         (50, DocumentLocation.BODY_TEXT), (90, DocumentLocation.DEEP_CONTENT)],
    )  # fmt: skip
    def test_location_for_offset(self, index, location):
        assert DocumentLocation.for_offset("x" * 100, index) is location


class TestProfileDetector:
    """Test the table-driven scoring flow."""

    def test_all_tiers_and_penalties(self):
        """Definitive, structural and lexical points add up, minus penalties."""
        content = "1. Overview\n" + "filler " * 20 + "\nSample Marker appears here with a widget and a widget.\n"
        score = _score(ProfileDetector(SAMPLE_PROFILE), content)

        marker = next(e for e in score.evidence if e.feature == "Sample Marker")
        assert marker.location is DocumentLocation.BODY_TEXT
        assert score.definitive_score == 20.0
        assert score.structural_score == 10.0
        assert score.lexical_score == 10.0
        # Missing fillable fields
        assert score.penalty_score == 15.0
        assert score.confidence == pytest.approx(25.0)

    def test_lexical_contribution_capped_at_three_matches(self):
        content = "widget " * 10 + "Name: ______"
        score = _score(ProfileDetector(SAMPLE_PROFILE), content)

        widget = next(e for e in score.evidence if e.feature == "widget")
        assert widget.value == "10"
        assert widget.contribution == 15.0

    def test_marker_in_title_uses_title_multiplier(self):
        """A definitive marker named in the title counts at the title location."""
        metadata = DocumentMetadata(title="Sample Marker 2024")
        score = _score(ProfileDetector(SAMPLE_PROFILE), "Nothing relevant. Name: ______", metadata)

        marker = score.evidence[0]
        assert marker.location is DocumentLocation.TITLE
        assert marker.contribution == 40.0

    def test_marker_in_extracted_fields_uses_metadata_location(self):
        metadata = DocumentMetadata(extracted_fields={"Sample Marker": "SM-1"})
        score = _score(ProfileDetector(SAMPLE_PROFILE), "Name: ______", metadata)

        marker = score.evidence[0]
        assert marker.location is DocumentLocation.METADATA_BLOCK
        assert marker.value == "SM-1"
        assert marker.contribution == 30.0

    def test_conflicting_feature_penalized(self):
        content = "```python\nprint(1)\n```\nName: ______"
        score = _score(ProfileDetector(SAMPLE_PROFILE), content)

        assert ("Conflicting feature: has_code_blocks", 10.0) in score.penalties

    def test_negative_filter_rejects(self):
        """A negative filter returns a zero score before any evidence is gathered."""
        detector = ProfileDetector(SAMPLE_PROFILE, negative_filters=(lambda ctx: "Blocked",))
        score = _score(detector, "Sample Marker")

        assert score.confidence == 0.0
        assert score.rejection_reason == "Blocked"
        assert score.evidence == []

    def test_short_circuit_returns_verdict(self):
        """A verdict ends detection with its fixed confidence."""
        rule = PatternRule("Magic Word", re.compile("abracadabra"), EvidenceTier.DEFINITIVE, 50.0)

        def verdict(ctx, score):
            if score.evidence:
                return Verdict(confidence=97.0, evidence=(ScoringEvidence.flat("Bonus", "y", EvidenceTier.DEFINITIVE, 5.0),))
            return None

        detector = ProfileDetector(SAMPLE_PROFILE, marker_rules=(rule,), short_circuit=verdict)
        score = _score(detector, "abracadabra widget")

        assert score.short_circuited
        assert score.confidence == 97.0
        assert [e.feature for e in score.evidence] == ["Magic Word", "Bonus"]
        assert score.penalties == []

    def test_eligibility_controls_can_handle(self):
        detector = ProfileDetector(SAMPLE_PROFILE, eligibility=lambda metadata: metadata.file_type == "pdf")

        assert detector.can_handle(DocumentMetadata(file_type="pdf"))
        assert not detector.can_handle(DocumentMetadata(file_type="docx"))
        assert detector.tracked_terms == ("widget",)


class TestAdjustments:
    """Test post-normalization confidence adjustments."""

    def _context(self, content="text"):
        return DetectionContext.build(content, DocumentFeatures())

    def _with_evidence(self, count, confidence):
        score = DocumentConfidenceScore(document_type="Sample", max_possible_score=100.0)
        for i in range(count):
            score.add_evidence(ScoringEvidence.flat(f"F{i}", "v", EvidenceTier.STRUCTURAL, 1.0))
        score.set_confidence(confidence)
        return score

    def test_cap_applies_with_single_evidence(self):
        score = self._with_evidence(1, 80.0)
        EvidenceCap(cap=40.0)(self._context(), score)
        assert score.confidence == 40.0

    def test_cap_ignored_with_enough_evidence(self):
        score = self._with_evidence(2, 80.0)
        EvidenceCap(cap=40.0)(self._context(), score)
        assert score.confidence == 80.0

    def test_floor_lifts_supported_scores(self):
        score = self._with_evidence(2, 20.0)
        EvidenceFloor(floor=50.0)(self._context(), score)
        assert score.confidence == 50.0

    def test_floor_needs_enough_evidence(self):
        score = self._with_evidence(1, 20.0)
        EvidenceFloor(floor=50.0)(self._context(), score)
        assert score.confidence == 20.0

    def test_informal_language_scales_confidence(self):
        score = self._with_evidence(2, 80.0)
        InformalLanguagePenalty(factor=0.5)(self._context("Hey team, thanks for the notes."), score)
        assert score.confidence == 40.0

    def test_single_informal_term_is_tolerated(self):
        score = self._with_evidence(2, 80.0)
        InformalLanguagePenalty()(self._context("Thanks for reading."), score)
        assert score.confidence == 80.0
