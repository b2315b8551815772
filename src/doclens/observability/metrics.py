"""
Defines Prometheus metrics for classification and chunking.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Importing this module more than once (test suites, reloads) must not raise
# duplicate registration errors.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "documents_classified": Counter(
            "doclens_documents_classified_total",
            "Documents classified, by winning document type and method",
            ["document_type", "method"],
        ),
        "classification_duration_seconds": Histogram(
            "doclens_classification_duration_seconds",
            "Time taken to classify one document",
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
        ),
        "detector_failures": Counter(
            "doclens_detector_failures_total",
            "Detectors that raised while scoring a document",
            ["detector"],
        ),
        "chunks_produced": Counter(
            "doclens_chunks_produced_total",
            "Chunks produced by the hybrid orchestrator, by chunking path",
            ["path"],
        ),
        "semantic_chunking_failures": Counter(
            "doclens_semantic_chunking_failures_total",
            "Sections for which the semantic chunking service failed",
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
