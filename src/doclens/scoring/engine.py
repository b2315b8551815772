"""
Scoring engine: runs every eligible detector and selects the best candidate.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from doclens.exceptions import DetectorError
from doclens.observability.metrics import METRICS

from .detector import Detector
from .features import FeatureExtractor
from .models import UNKNOWN, ClassificationResult, ConfidenceLevel, DocumentConfidenceScore, DocumentMetadata
from .profiles import build_detectors

if TYPE_CHECKING:
    from doclens.config.config import ScoringConfig

logger = structlog.get_logger(__name__)

METHOD_DETERMINISTIC = "Deterministic"
METHOD_LOW_CONFIDENCE = "Low Confidence"
METHOD_NO_MATCH = "No match found"
METHOD_REJECTED = "Rejected"
EMPTY_CONTENT_ERROR = "Document content is empty"


class ScoringEngine:
    """
    Classifies documents by running a pool of detectors over shared features.

    Every detector whose ``can_handle`` accepts the metadata runs; priority
    orders evaluation and breaks ties but never stops evaluation early. The
    engine keeps no per-document state, so one instance may classify many
    documents concurrently.
    """

    def __init__(
        self,
        detectors: Sequence[Detector],
        *,
        confidence_threshold: float = 85.0,
        confidence_floor: float = 30.0,
        evidence_limit: int = 10,
        custom_thresholds: Optional[Mapping[str, float]] = None,
        isolate_failures: bool = True,
        extractor: Optional[FeatureExtractor] = None,
    ):
        if not detectors:
            raise ValueError("At least one detector is required")
        # sorted() is stable, so equal priorities keep registration order.
        self._detectors: Tuple[Detector, ...] = tuple(sorted(detectors, key=lambda d: d.priority))
        self.confidence_threshold = confidence_threshold
        self.confidence_floor = confidence_floor
        self.evidence_limit = evidence_limit
        self.custom_thresholds: Dict[str, float] = dict(custom_thresholds or {})
        self.isolate_failures = isolate_failures
        self.extractor = extractor or FeatureExtractor(
            tracked_terms=[term for detector in self._detectors for term in detector.tracked_terms]
        )
        self.logger = logger.bind(component="ScoringEngine")

    @property
    def detectors(self) -> Tuple[Detector, ...]:
        return self._detectors

    def threshold_for(self, document_type: str) -> float:
        return self.custom_thresholds.get(document_type, self.confidence_threshold)

    def classify(self, content: str, metadata: Optional[DocumentMetadata] = None) -> ClassificationResult:
        """Classify one document; never raises for bad input, only for unisolated detector defects."""
        if not content or not content.strip():
            return ClassificationResult(
                success=False,
                document_type=UNKNOWN,
                confidence=0.0,
                level=ConfidenceLevel.VERY_LOW,
                method=METHOD_REJECTED,
                threshold=self.confidence_threshold,
                error=EMPTY_CONTENT_ERROR,
            )

        start = time.perf_counter()
        metadata = metadata or DocumentMetadata()
        features = self.extractor.extract(content, metadata)

        best: Optional[DocumentConfidenceScore] = None
        candidates: List[Tuple[str, float]] = []
        failed: List[str] = []
        for detector in self._detectors:
            if not detector.can_handle(metadata):
                continue
            try:
                score = detector.detect(content, features, metadata)
            except Exception as exc:
                if not self.isolate_failures:
                    raise DetectorError(detector.document_type, str(exc)) from exc
                self.logger.error("Detector failed", detector=detector.document_type, error=str(exc), exc_info=True)
                METRICS["detector_failures"].labels(detector=detector.document_type).inc()
                failed.append(detector.document_type)
                continue
            # Injected detectors may report any value; results stay within [0, 100].
            score.set_confidence(score.confidence)
            candidates.append((score.document_type, score.confidence))
            if best is None or score.confidence > best.confidence:
                best = score

        result = self._build_result(best, features, tuple(candidates), tuple(failed))
        METRICS["classification_duration_seconds"].observe(time.perf_counter() - start)
        METRICS["documents_classified"].labels(document_type=result.document_type, method=result.method).inc()
        self.logger.debug(
            "Document classified",
            file_name=metadata.file_name or None,
            document_type=result.document_type,
            confidence=round(result.confidence, 2),
            method=result.method,
        )
        return result

    async def classify_async(self, content: str, metadata: Optional[DocumentMetadata] = None) -> ClassificationResult:
        """Classify in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.classify, content, metadata)

    def _build_result(
        self,
        best: Optional[DocumentConfidenceScore],
        features,
        candidates: Tuple[Tuple[str, float], ...],
        failed: Tuple[str, ...],
    ) -> ClassificationResult:
        evidence = ()
        if best is not None:
            ranked = sorted(best.evidence, key=lambda item: item.contribution, reverse=True)
            evidence = tuple(ranked[: self.evidence_limit])

        if best is None or best.confidence < self.confidence_floor:
            return ClassificationResult(
                success=False,
                document_type=UNKNOWN,
                confidence=0.0,
                level=ConfidenceLevel.VERY_LOW,
                method=METHOD_NO_MATCH,
                evidence=evidence,
                features=features,
                threshold=self.confidence_threshold,
                rejection_reason=best.rejection_reason if best is not None else None,
                candidates=candidates,
                failed_detectors=failed,
            )

        threshold = self.threshold_for(best.document_type)
        return ClassificationResult(
            success=True,
            document_type=best.document_type,
            confidence=best.confidence,
            level=best.level,
            method=METHOD_DETERMINISTIC if best.confidence >= threshold else METHOD_LOW_CONFIDENCE,
            evidence=evidence,
            features=features,
            threshold=threshold,
            candidates=candidates,
            failed_detectors=failed,
        )


def create_engine(
    config: Optional[ScoringConfig] = None,
    detectors: Optional[Sequence[Detector]] = None,
) -> ScoringEngine:
    """Build an engine from configuration, optionally with an explicit detector set."""
    if config is None:
        from doclens.config.config import ScoringConfig

        config = ScoringConfig()
    if detectors is None:
        detectors = build_detectors(config.enabled_detectors)
    return ScoringEngine(
        detectors,
        confidence_threshold=config.confidence_threshold,
        confidence_floor=config.confidence_floor,
        evidence_limit=config.evidence_limit,
        custom_thresholds=config.custom_thresholds,
        isolate_failures=config.isolate_detector_failures,
    )
