"""
Tests for occurrences module.

Covers word-boundary slug search, raw-span recovery with punctuation
extension, and display context extraction.
"""
import re

import pytest

from namesweep.rename.occurrences import extract_context, find_all_occurrences
from namesweep.utils.slugify import normalize_for_match


def find(slug, text):
    norm = normalize_for_match(text)
    return find_all_occurrences(slug, norm.normalized, norm.index_map, text)


class TestFindAllOccurrences:
    """Tests for find_all_occurrences."""

    def test_exact_span(self):
        spans = find("frost-widow", "Frost Widow commands the ice.")
        assert len(spans) == 1
        assert (spans[0].start, spans[0].end) == (0, 11)
        assert spans[0].matched_text == "Frost Widow"

    def test_multiple_hits_in_order(self):
        spans = find("widow", "Widow here, widow there")
        assert [s.start for s in spans] == [0, 12]

    def test_requires_word_boundaries(self):
        """'widow' inside 'widowed' or 'nonwidow' is not a hit."""
        assert find("widow", "She was widowed by nonwidow rules.") == []

    def test_name_split_by_punctuation_still_matches(self):
        spans = find("frost-widow", "the Frost-Widow, again")
        assert spans[0].matched_text == "Frost-Widow,"

    def test_possessive_absorbed(self):
        spans = find("widow", "the Widow's old ally")
        assert spans[0].matched_text == "Widow'"
        assert spans[0].start == 4

    def test_trailing_punctuation_absorbed_up_to_whitespace(self):
        spans = find("widow", "Beware the Widow!) now")
        assert spans[0].matched_text == "Widow!)"

    def test_stops_at_end_of_text(self):
        spans = find("widow", "the Widow.")
        assert spans[0].matched_text == "Widow."
        assert spans[0].end == 10

    def test_multi_space_raw_gap(self):
        spans = find("frost-widow", "Frost   Widow")
        assert spans[0].matched_text == "Frost   Widow"

    def test_case_insensitive(self):
        assert find("frost-widow", "FROST WIDOW")[0].matched_text == "FROST WIDOW"

    @pytest.mark.parametrize("slug,text", [("", "text"), ("widow", ""), ("widow", "!!!")])
    def test_empty_inputs(self, slug, text):
        assert find(slug, text) == []

    def test_spans_agree_with_naive_word_search(self):
        """Raw spans start where a plain regex search finds the word."""
        text = "The Widow met a widow; WIDOW-kind, and the Widow's son."
        spans = find("widow", text)
        naive = [m.start() for m in re.finditer(r"\bwidow\b", text, re.IGNORECASE)]
        assert [s.start for s in spans] == naive
        for span in spans:
            assert text[span.start:span.start + 5].lower() == "widow"


class TestExtractContext:
    """Tests for extract_context."""

    def test_short_text_has_no_ellipsis(self):
        assert extract_context("Frost Widow commands the ice.", 0, 11) == (
            "", " commands the ice.",
        )

    def test_ellipsis_on_both_sides(self):
        assert extract_context("abcdefgh", 4, 5, size=2) == ("...cd", "fg...")

    def test_default_size_is_sixty(self):
        text = "x" * 100 + "NAME" + "y" * 100
        before, after = extract_context(text, 100, 104)
        assert before == "..." + "x" * 60
        assert after == "y" * 60 + "..."

    def test_exact_fit_has_no_ellipsis(self):
        before, after = extract_context("ab NAME cd", 3, 7, size=3)
        assert (before, after) == ("ab ", " cd")
