"""
Routing decisions produced for each analyzed document.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from doclens.scoring.models import UNKNOWN, ClassificationResult


class DecisionKind(Enum):
    """What the ingestion pipeline should do with a document."""

    DETERMINISTIC = "deterministic"
    AI_REQUIRED = "ai_required"
    REJECTED = "rejected"
    NAVIGATION = "navigation"
    UNCLASSIFIED = "unclassified"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class ScoringDecision:
    kind: DecisionKind
    document_type: str = UNKNOWN
    confidence: float = 0.0
    method: str = ""
    chunking_strategy: Optional[str] = None
    rejection_reason: Optional[str] = None
    error: Optional[str] = None
    result: Optional[ClassificationResult] = None

    @property
    def requires_ai_verification(self) -> bool:
        return self.kind is DecisionKind.AI_REQUIRED

    @property
    def skipped(self) -> bool:
        return self.kind in (DecisionKind.NAVIGATION, DecisionKind.ERROR)
