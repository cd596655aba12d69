"""
Tests for core.cli: setup_logger and RenameStats.
"""
from datetime import datetime, timedelta

import pytest

from namesweep.core.cli import RenameStats, setup_logger
from namesweep.core.logging_manager import NamesweepLogger


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_creates_operations_dir(self, log_dir):
        logger = setup_logger(log_dir, "rename")
        assert isinstance(logger, NamesweepLogger)
        assert (log_dir / "operations").is_dir()
        assert logger.log_dir == log_dir / "operations"
        assert logger.component_name == "rename"


class TestRenameStats:
    """Tests for RenameStats."""

    def test_defaults(self):
        stats = RenameStats()
        assert stats.entities_updated == 0
        assert stats.failures == 0

    def test_rejects_negative_counts(self):
        with pytest.raises(ValueError, match="chronicles_planned"):
            RenameStats(chronicles_planned=-1)

    def test_failures_count_unwritten_records(self):
        stats = RenameStats(
            chronicles_planned=3, chronicles_updated=2,
            events_planned=2, events_updated=1,
        )
        assert stats.failures == 2

    def test_summary_mentions_failures(self):
        stats = RenameStats(
            entities_updated=2, chronicles_planned=2, chronicles_updated=1,
        )
        summary = stats.summary()
        assert "2 entities" in summary
        assert "1/2 chronicles" in summary
        assert "1 failed" in summary

    def test_summary_without_failures(self):
        stats = RenameStats(entities_updated=1)
        assert "failed" not in stats.summary()

    def test_duration_is_cached(self):
        stats = RenameStats(start_time=datetime.now() - timedelta(seconds=5))
        first = stats.duration()
        assert first >= 5
        assert stats.duration() == first

    def test_to_dict(self):
        data = RenameStats(events_planned=1, events_updated=1).to_dict()
        assert data["events_updated"] == 1
        assert data["failures"] == 0
        assert "duration" in data
