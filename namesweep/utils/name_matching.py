#!/usr/bin/env python3
"""
name_matching.py
----------------
Partial-name generation for reference scanning.

A multi-word name is often referred to by part of itself: "Frost Widow
of the North" turns up as "the Widow", "Frost Widow", "Widow of the
North". This module derives the slugs of every contiguous run of words
in a name so the scanner can look for them.

Rules:
    - Single-word names have no partials
    - The full name itself is never a partial
    - Slugs shorter than the minimum length (default 3) are dropped
    - A lone stop word ("the", "of", ...) is dropped; stop words inside
      a longer run are kept ("widow-of-the-north")
    - Output is de-duplicated and sorted longest-first so the scanner
      claims the longest applicable fragment before shorter ones

Usage:
    from namesweep.utils.name_matching import generate_partials

    generate_partials("Frost Widow of the North")
    # ['frost-widow-of-the', 'widow-of-the-north', 'frost-widow-of', ...]
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from typing import AbstractSet, Dict, List, Optional

# --- Local imports ---
from namesweep.core.config import STOP_WORDS
from namesweep.utils.slugify import normalize_slug

_WORD_SPLIT = re.compile(r"[^a-zA-Z0-9]+")


def split_name_words(name: str) -> List[str]:
    """Split a name into its ASCII alphanumeric words."""
    if not name:
        return []
    return [w for w in _WORD_SPLIT.split(name) if w]


def generate_partials(
    name: str,
    min_length: int = 3,
    stop_words: Optional[AbstractSet[str]] = None,
) -> List[str]:
    """
    Generate the partial-name slugs of ``name``, longest first.

    Args:
        name: Full entity name
        min_length: Shortest slug to keep
        stop_words: Words never kept on their own (default: STOP_WORDS)

    Returns:
        De-duplicated slugs sorted by descending length; ties keep
        generation order (by start word, then by run length)

    Examples:
        >>> generate_partials("Frost Widow")
        ['frost', 'widow']
        >>> generate_partials("Aurora")
        []
        >>> "the" in generate_partials("The Frost Widow")
        False
    """
    words = split_name_words(name)
    if len(words) <= 1:
        return []

    stop = STOP_WORDS if stop_words is None else stop_words
    full_slug = normalize_slug(name)

    # dict preserves first-insertion order for the stable sort below
    partials: Dict[str, None] = {}
    for start in range(len(words)):
        for end in range(start + 1, len(words) + 1):
            run = words[start:end]
            slug = normalize_slug(" ".join(run))

            if not slug or len(slug) < min_length:
                continue
            if slug == full_slug:
                continue
            if len(run) == 1 and slug in stop:
                continue

            partials.setdefault(slug, None)

    return sorted(partials, key=len, reverse=True)
