"""
Run-wide scoring statistics.

A ScoringStats instance is passed explicitly through the ingestion call chain.
Workers may share one accumulator (updates are locked) or keep their own and
fold them together with ``merge``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from .decision import DecisionKind, ScoringDecision

AI_COST_PER_DOCUMENT = 0.001


@dataclass(slots=True, frozen=True)
class StatsSnapshot:
    """Point-in-time copy of the counters with derived rates."""

    total: int
    deterministic: int
    ai_required: int
    rejected: int
    navigation_skipped: int
    unclassified: int
    errors: int
    session_start: datetime

    def _rate(self, count: int) -> float:
        return count / self.total * 100 if self.total else 0.0

    @property
    def deterministic_rate(self) -> float:
        return self._rate(self.deterministic)

    @property
    def ai_required_rate(self) -> float:
        return self._rate(self.ai_required)

    @property
    def rejected_rate(self) -> float:
        return self._rate(self.rejected)

    @property
    def estimated_savings(self) -> float:
        """AI verification cost avoided by deterministic classifications, in USD."""
        return self.deterministic * AI_COST_PER_DOCUMENT

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "deterministic": self.deterministic,
            "ai_required": self.ai_required,
            "rejected": self.rejected,
            "navigation_skipped": self.navigation_skipped,
            "unclassified": self.unclassified,
            "errors": self.errors,
            "deterministic_rate": round(self.deterministic_rate, 1),
            "ai_required_rate": round(self.ai_required_rate, 1),
            "rejected_rate": round(self.rejected_rate, 1),
            "estimated_savings_usd": round(self.estimated_savings, 3),
            "session_start": self.session_start.isoformat(),
        }


class ScoringStats:
    """Thread-safe accumulator of scoring decisions."""

    _FIELDS = {
        DecisionKind.DETERMINISTIC: "deterministic",
        DecisionKind.AI_REQUIRED: "ai_required",
        DecisionKind.REJECTED: "rejected",
        DecisionKind.NAVIGATION: "navigation_skipped",
        DecisionKind.UNCLASSIFIED: "unclassified",
        DecisionKind.ERROR: "errors",
    }

    def __init__(self, session_start: Optional[datetime] = None):
        self._lock = threading.Lock()
        self.session_start = session_start or datetime.now(timezone.utc)
        self.total = 0
        self.deterministic = 0
        self.ai_required = 0
        self.rejected = 0
        self.navigation_skipped = 0
        self.unclassified = 0
        self.errors = 0

    def record(self, decision: ScoringDecision) -> None:
        field_name = self._FIELDS[decision.kind]
        with self._lock:
            self.total += 1
            setattr(self, field_name, getattr(self, field_name) + 1)

    def merge(self, other: ScoringStats) -> None:
        """Fold another accumulator's counts into this one."""
        theirs = other.snapshot()
        with self._lock:
            self.total += theirs.total
            self.deterministic += theirs.deterministic
            self.ai_required += theirs.ai_required
            self.rejected += theirs.rejected
            self.navigation_skipped += theirs.navigation_skipped
            self.unclassified += theirs.unclassified
            self.errors += theirs.errors
            self.session_start = min(self.session_start, theirs.session_start)

    def reset(self) -> None:
        with self._lock:
            self.session_start = datetime.now(timezone.utc)
            self.total = self.deterministic = self.ai_required = self.rejected = 0
            self.navigation_skipped = self.unclassified = self.errors = 0

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                total=self.total,
                deterministic=self.deterministic,
                ai_required=self.ai_required,
                rejected=self.rejected,
                navigation_skipped=self.navigation_skipped,
                unclassified=self.unclassified,
                errors=self.errors,
                session_start=self.session_start,
            )

    def log_summary(self, logger: Any = None) -> StatsSnapshot:
        snapshot = self.snapshot()
        (logger or structlog.get_logger(__name__)).info("Scoring statistics", **snapshot.as_dict())
        return snapshot
