"""
Document ingestion: scoring decisions, run statistics and HTML ingestion.
"""

from __future__ import annotations

from .decision import DecisionKind, ScoringDecision
from .integration import (
    CHUNKING_STRATEGIES,
    DocumentIngestor,
    IngestionResult,
    ScoringIntegration,
    build_ingestor,
    chunking_strategy_for,
    is_navigation_page,
    rejection_reason_for,
)
from .stats import ScoringStats, StatsSnapshot

__all__ = [
    "CHUNKING_STRATEGIES",
    "DecisionKind",
    "DocumentIngestor",
    "IngestionResult",
    "ScoringDecision",
    "ScoringIntegration",
    "ScoringStats",
    "StatsSnapshot",
    "build_ingestor",
    "chunking_strategy_for",
    "is_navigation_page",
    "rejection_reason_for",
]
