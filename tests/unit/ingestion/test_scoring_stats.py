"""Unit tests for run-wide scoring statistics."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from doclens.ingestion import DecisionKind, ScoringDecision, ScoringStats


def decision(kind: DecisionKind) -> ScoringDecision:
    return ScoringDecision(kind=kind)


class TestScoringStats:
    """Test counting, derived rates and merging."""

    def test_empty_stats_have_zero_rates(self):
        snapshot = ScoringStats().snapshot()

        assert snapshot.total == 0
        assert snapshot.deterministic_rate == 0.0
        assert snapshot.estimated_savings == 0.0

    def test_record_counts_each_kind(self):
        stats = ScoringStats()
        for kind in (DecisionKind.DETERMINISTIC, DecisionKind.DETERMINISTIC, DecisionKind.AI_REQUIRED, DecisionKind.REJECTED):
            stats.record(decision(kind))
        stats.record(decision(DecisionKind.NAVIGATION))
        stats.record(decision(DecisionKind.ERROR))

        snapshot = stats.snapshot()
        assert snapshot.total == 6
        assert snapshot.deterministic == 2
        assert snapshot.ai_required == 1
        assert snapshot.rejected == 1
        assert snapshot.navigation_skipped == 1
        assert snapshot.errors == 1

    def test_rates_and_savings(self):
        stats = ScoringStats()
        for kind in (DecisionKind.DETERMINISTIC,) * 3 + (DecisionKind.AI_REQUIRED,):
            stats.record(decision(kind))

        snapshot = stats.snapshot()
        assert snapshot.deterministic_rate == pytest.approx(75.0)
        assert snapshot.ai_required_rate == pytest.approx(25.0)
        assert snapshot.estimated_savings == pytest.approx(0.003)
        assert snapshot.as_dict()["estimated_savings_usd"] == 0.003

    def test_merge_folds_worker_stats(self):
        earlier = datetime.now(timezone.utc) - timedelta(hours=1)
        main = ScoringStats()
        worker = ScoringStats(session_start=earlier)
        main.record(decision(DecisionKind.DETERMINISTIC))
        worker.record(decision(DecisionKind.REJECTED))
        worker.record(decision(DecisionKind.DETERMINISTIC))

        main.merge(worker)

        snapshot = main.snapshot()
        assert snapshot.total == 3
        assert snapshot.deterministic == 2
        assert snapshot.rejected == 1
        assert snapshot.session_start == earlier

    def test_reset(self):
        stats = ScoringStats()
        stats.record(decision(DecisionKind.ERROR))
        stats.reset()

        assert stats.snapshot().total == 0

    def test_concurrent_recording(self):
        """Counts stay exact when many threads share one accumulator."""
        stats = ScoringStats()

        def work():
            for _ in range(500):
                stats.record(decision(DecisionKind.DETERMINISTIC))

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats.snapshot().deterministic == 4000

    def test_log_summary(self):
        stats = ScoringStats()
        stats.record(decision(DecisionKind.DETERMINISTIC))
        logger = Mock()

        snapshot = stats.log_summary(logger)

        logger.info.assert_called_once()
        args, kwargs = logger.info.call_args
        assert args == ("Scoring statistics",)
        assert kwargs["deterministic"] == 1
        assert snapshot.total == 1
