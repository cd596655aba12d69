"""
Text utilities for namesweep.

- slugify: matching slugs with raw-offset index maps
- name_matching: partial-name generation

Import commonly-used utilities directly from this package:
    from namesweep.utils import normalize_for_match, generate_partials
"""

from .slugify import NormalizedText, is_ascii_alnum, normalize_for_match, normalize_slug
from .name_matching import generate_partials, split_name_words

__all__ = [
    "NormalizedText",
    "is_ascii_alnum",
    "normalize_for_match",
    "normalize_slug",
    "generate_partials",
    "split_name_words",
]
