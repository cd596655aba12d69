#!/usr/bin/env python3
"""
occurrences.py
--------------
Word-boundary slug search with raw-span recovery, and display context.

Search runs on the matching slug of a field (see utils.slugify). A hit
counts only when it starts and ends on a slug boundary: the start of
the slug or a separator before it, the end of the slug or a separator
after it. Hits are mapped back to raw offsets through the index map;
the raw end is then pushed forward over attached punctuation (a
possessive "'s" apostrophe, a closing bracket, a "~") so replacements
swallow it, stopping at whitespace or the next ASCII letter/digit.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from typing import List, Sequence, Tuple

# --- Local imports ---
from namesweep.utils.slugify import SEPARATOR, is_ascii_alnum

ELLIPSIS = "..."


@dataclass(frozen=True)
class RawSpan:
    """A hit in raw-text coordinates; ``end`` is exclusive."""

    start: int
    end: int
    matched_text: str


def find_all_occurrences(
    slug: str,
    normalized: str,
    index_map: Sequence[int],
    original: str,
) -> List[RawSpan]:
    """
    Find every word-boundary occurrence of ``slug`` in ``normalized``.

    Args:
        slug: Slug to look for
        normalized: Matching slug of ``original``
        index_map: Raw offsets for each character of ``normalized``
        original: The raw text

    Returns:
        Raw spans in order of appearance. Spans of one call may overlap
        each other only if the slug overlaps itself; de-duplication
        across slugs is the overlap tracker's job.
    """
    if not slug or not normalized:
        return []

    spans: List[RawSpan] = []
    length = len(slug)
    search_from = 0

    while search_from <= len(normalized) - length:
        idx = normalized.find(slug, search_from)
        if idx == -1:
            break

        hit_end = idx + length
        before_ok = idx == 0 or normalized[idx - 1] == SEPARATOR
        after_ok = hit_end == len(normalized) or normalized[hit_end] == SEPARATOR

        if before_ok and after_ok:
            raw_start = index_map[idx]
            raw_end = index_map[hit_end - 1] + 1
            while raw_end < len(original):
                char = original[raw_end]
                if char.isspace() or is_ascii_alnum(char):
                    break
                raw_end += 1
            spans.append(RawSpan(raw_start, raw_end, original[raw_start:raw_end]))

        search_from = idx + 1

    return spans


def absorbed_suffix(matched_text: str) -> str:
    """
    Trailing punctuation a match span took in past the name itself.

    Examples:
        >>> absorbed_suffix("Frost Widow'")
        "'"
        >>> absorbed_suffix("Frost Widow")
        ''
    """
    end = len(matched_text)
    while end > 0 and not is_ascii_alnum(matched_text[end - 1]):
        end -= 1
    return matched_text[end:]


def extract_context(
    text: str,
    start: int,
    end: int,
    size: int = 60,
) -> Tuple[str, str]:
    """
    Return up to ``size`` characters either side of ``text[start:end]``.

    The before-context gets a leading "..." when it stops short of the
    start of the text, the after-context a trailing "..." when it stops
    short of the end.

    Examples:
        >>> extract_context("Frost Widow commands the ice.", 0, 11)
        ('', ' commands the ice.')
        >>> extract_context("abcdefgh", 4, 5, size=2)
        ('...cd', 'fg...')
    """
    before_start = max(0, start - size)
    after_end = min(len(text), end + size)

    before = text[before_start:start]
    after = text[end:after_end]

    if before_start > 0:
        before = ELLIPSIS + before
    if after_end < len(text):
        after = after + ELLIPSIS

    return before, after
