"""Tests for literal, case-insensitive label highlighting."""

import pytest
from hypothesis import given, strategies as st

from typeahead.domain.highlight import highlight
from typeahead.domain.value_objects import Segment


class TestHighlight:
    """Segmenting labels around the typed needle."""

    def test_marks_case_insensitive_prefix(self):
        assert highlight("Tractores", "tra") == [
            Segment("Tra", True),
            Segment("ctores", False),
        ]

    def test_marks_every_occurrence(self):
        segments = highlight("Banana", "an")

        assert segments == [
            Segment("B", False),
            Segment("an", True),
            Segment("an", True),
            Segment("a", False),
        ]

    def test_match_keeps_label_casing(self):
        segments = highlight("JOHN DEERE", "deere")
        assert [s.text for s in segments if s.matched] == ["DEERE"]

    def test_no_match_yields_single_unmatched_segment(self):
        assert highlight("Tractores", "xyz") == [Segment("Tractores", False)]

    @pytest.mark.parametrize("needle", ["", "   ", None])
    def test_blank_needle_yields_single_unmatched_segment(self, needle):
        assert highlight("Tractores", needle) == [Segment("Tractores", False)]

    def test_empty_label(self):
        assert highlight("", "tra") == [Segment("", False)]

    def test_needle_is_trimmed(self):
        segments = highlight("Tractores", "  tra ")
        assert segments[0] == Segment("Tra", True)

    @pytest.mark.parametrize("needle", ["(", "a*", "[x", "\\", ".+?", "$^"])
    def test_regex_metacharacters_are_literal(self, needle):
        label = f"foo {needle} bar"

        segments = highlight(label, needle)

        assert "".join(s.text for s in segments) == label
        assert [s.text for s in segments if s.matched] == [needle]

    def test_unbalanced_group_in_needle(self):
        assert highlight("Tractor (2020)", "(20") == [
            Segment("Tractor ", False),
            Segment("(20", True),
            Segment("20)", False),
        ]

    def test_metacharacters_do_not_match_other_text(self):
        assert highlight("abc", ".") == [Segment("abc", False)]

    @given(label=st.text(max_size=40), needle=st.text(max_size=6))
    def test_segments_always_reassemble_label(self, label, needle):
        segments = highlight(label, needle)

        assert "".join(s.text for s in segments) == label
        for segment in segments:
            if segment.matched:
                assert len(segment.text) == len(needle.strip())
