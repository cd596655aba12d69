#!/usr/bin/env python3
"""
cli.py
------
Shared CLI utilities and statistics for namesweep commands.

Functions:
    setup_logger: Initialize NamesweepLogger for CLI operations

Classes:
    RenameStats: Counts of records patched during an apply run

Usage:
    from namesweep.core.cli import setup_logger, RenameStats

    logger = setup_logger(log_dir, "rename", verbose=True)
    stats = RenameStats(chronicles_planned=3)
    stats.chronicles_updated += 1
    print(stats.summary())
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

# --- Local imports ---
from namesweep.core.logging_manager import NamesweepLogger


# ═══════════════════════════════════════════════════════════════════════════
# LOGGER SETUP
# ═══════════════════════════════════════════════════════════════════════════

def setup_logger(
    log_dir: Path, component_name: str, verbose: bool = False
) -> NamesweepLogger:
    """
    Setup logging for CLI operations.

    Creates the operations log directory if it doesn't exist and initializes
    a NamesweepLogger instance for the specified component.

    Args:
        log_dir: Base log directory (typically from paths.LOG_DIR)
        component_name: Component identifier for logging (e.g., 'rename')
        verbose: Echo every record to stderr, not just warnings

    Returns:
        Configured NamesweepLogger instance
    """
    operations_log_dir = log_dir / "operations"
    operations_log_dir.mkdir(parents=True, exist_ok=True)
    return NamesweepLogger(
        operations_log_dir, component_name=component_name, verbose=verbose
    )


# ═══════════════════════════════════════════════════════════════════════════
# STATISTICS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class RenameStats:
    """
    Statistics for a rename apply run.

    Planned counts come from the patch set; updated counts come from the
    executors. A chronicle or event count below its planned count means
    some records were skipped after a read/write failure.

    Attributes:
        entities_updated: Entities rewritten (always includes the target)
        chronicles_planned: Chronicle patches built
        chronicles_updated: Chronicle patches written successfully
        events_planned: Event patches built
        events_updated: Event patches written successfully
        start_time: Operation start timestamp
    """
    entities_updated: int = 0
    chronicles_planned: int = 0
    chronicles_updated: int = 0
    events_planned: int = 0
    events_updated: int = 0
    start_time: datetime = field(default_factory=datetime.now)
    _duration_cached: Optional[float] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate statistics on initialization."""
        for name in (
            "entities_updated",
            "chronicles_planned",
            "chronicles_updated",
            "events_planned",
            "events_updated",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    @property
    def failures(self) -> int:
        """Records that were planned but not written."""
        return (self.chronicles_planned - self.chronicles_updated) + (
            self.events_planned - self.events_updated
        )

    def duration(self) -> float:
        """
        Get elapsed time in seconds (cached after first call).

        Returns:
            Seconds elapsed since start_time
        """
        if self._duration_cached is None:
            self._duration_cached = (datetime.now() - self.start_time).total_seconds()
        return self._duration_cached

    def summary(self) -> str:
        """Get formatted summary string."""
        parts = [
            f"{self.entities_updated} entities",
            f"{self.chronicles_updated}/{self.chronicles_planned} chronicles",
            f"{self.events_updated}/{self.events_planned} events",
        ]
        if self.failures:
            parts.append(f"{self.failures} failed")
        parts.append(f"{self.duration():.2f}s")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "entities_updated": self.entities_updated,
            "chronicles_planned": self.chronicles_planned,
            "chronicles_updated": self.chronicles_updated,
            "events_planned": self.events_planned,
            "events_updated": self.events_updated,
            "failures": self.failures,
            "duration": self.duration(),
        }
