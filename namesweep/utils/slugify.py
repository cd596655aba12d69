#!/usr/bin/env python3
"""
slugify.py
----------
Matching slugs with a map back to the raw text.

A matching slug is the lower-cased text reduced to ASCII letters and
digits, with every run of other characters collapsed into a single
hyphen and no leading or trailing hyphen. Alongside the slug we keep
an index map: ``index_map[i]`` is the offset in the raw text of the
character that produced ``slug[i]``. Every raw span reported by the
scanner is recovered through this map, never by searching the raw text
again.

Non-ASCII letters count as separators, so "Åsa" slugs to "sa". This is
a known limitation of the matching alphabet.

Usage:
    from namesweep.utils.slugify import normalize_for_match, normalize_slug

    norm = normalize_for_match("The Frost-Widow's keep")
    norm.normalized   # "the-frost-widow-s-keep"
    norm.index_map[4] # 4  (the "f" of "Frost")

    normalize_slug("Frost Widow")  # "frost-widow"
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from typing import List

SEPARATOR = "-"


@dataclass(frozen=True)
class NormalizedText:
    """
    A matching slug plus its raw-offset map.

    Attributes:
        normalized: The slug
        index_map: Raw-text offset for each slug character
    """

    normalized: str
    index_map: List[int]


def is_ascii_alnum(char: str) -> bool:
    """True for a-z, A-Z and 0-9 only."""
    return ("a" <= char <= "z") or ("A" <= char <= "Z") or ("0" <= char <= "9")


def normalize_for_match(text: str) -> NormalizedText:
    """
    Build the matching slug of ``text`` and its index map.

    Args:
        text: Arbitrary raw text

    Returns:
        NormalizedText whose index_map has one entry per slug character

    Examples:
        >>> normalize_for_match("  Frost  Widow!").normalized
        'frost-widow'
        >>> normalize_for_match("  Frost  Widow!").index_map
        [2, 3, 4, 5, 6, 7, 9, 10, 11, 12, 13]
    """
    chars: List[str] = []
    index_map: List[int] = []
    prev_separator = True

    for i, char in enumerate(text):
        if is_ascii_alnum(char):
            chars.append(char.lower())
            index_map.append(i)
            prev_separator = False
        elif not prev_separator:
            chars.append(SEPARATOR)
            index_map.append(i)
            prev_separator = True

    # Only a trailing separator can survive; leading ones are never emitted
    if chars and chars[-1] == SEPARATOR:
        chars.pop()
        index_map.pop()

    return NormalizedText("".join(chars), index_map)


def normalize_slug(text: str) -> str:
    """
    Return only the matching slug of ``text``.

    Examples:
        >>> normalize_slug("Frost Widow of the North")
        'frost-widow-of-the-north'
        >>> normalize_slug("!!!")
        ''
    """
    if not text:
        return ""
    return normalize_for_match(text).normalized
