#!/usr/bin/env python3
"""
overlap.py
----------
Raw-range bookkeeping that keeps matches in one field disjoint.

Ranges are half-open ``[start, end)`` and tracked per
``(source_type, source_id, field)`` key. A candidate is refused when it
intersects anything already claimed under its key. Because the scanner
claims full-name hits before partial hits, a full match always wins.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Dict, List, Tuple

# --- Local imports ---
from namesweep.rename.models import SourceType

FieldKey = Tuple[SourceType, str, str]


class OverlapTracker:
    """Claimed raw ranges per record field."""

    def __init__(self) -> None:
        self._claimed: Dict[FieldKey, List[Tuple[int, int]]] = {}

    def is_overlapping(self, key: FieldKey, start: int, end: int) -> bool:
        for claimed_start, claimed_end in self._claimed.get(key, ()):
            if start < claimed_end and end > claimed_start:
                return True
        return False

    def claim(self, key: FieldKey, start: int, end: int) -> bool:
        """
        Claim ``[start, end)`` under ``key``.

        Returns:
            True if the range was free and is now claimed, False if it
            overlaps an existing claim (nothing is recorded then)
        """
        if self.is_overlapping(key, start, end):
            return False
        self._claimed.setdefault(key, []).append((start, end))
        return True

    def claimed(self, key: FieldKey) -> List[Tuple[int, int]]:
        return list(self._claimed.get(key, ()))
