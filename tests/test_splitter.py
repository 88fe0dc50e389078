"""
Tests for the splitter — four strategies for breaking up content

These tests validate:
- Equal split cut points per ending type, and lossless reassembly
- Delimiter split with and without keeping the delimiter
- Paragraph filtering and grouping
- Pattern split with and without the matched text
- Bad configuration returns the text unchanged
"""

import pytest

from promptozaurus.core.splitter import (
    EndingType, SplitMethod, SplitOptions,
    split_into_equal_parts, split_by_delimiter, split_by_paragraphs, split_by_pattern,
    split_content,
)


class TestEqualParts:
    """split_into_equal_parts."""

    def test_sentence_ending(self):
        """The cut moves forward to just after the next sentence mark."""
        parts = split_into_equal_parts("One. Two. Three. Four.", 2, "sentence")
        assert parts == ["One. Two. Three.", " Four."]

    def test_exact_ending(self):
        """Exact cuts at ceil(len / parts) with the remainder last."""
        assert split_into_equal_parts("abcdefghij", 3, EndingType.EXACT) == ["abcd", "efgh", "ij"]

    def test_paragraph_ending(self):
        parts = split_into_equal_parts("aaa\n\nbbb\n\nccc", 2, "paragraph")
        assert parts == ["aaa\n\nbbb\n\n", "ccc"]

    def test_delimiter_ending(self):
        """Cuts land at the start of the next custom delimiter."""
        text = "Chapter 1 abc Chapter 2 def"
        parts = split_into_equal_parts(text, 2, "delimiter", "Chapter")
        assert parts == ["Chapter 1 abc ", "Chapter 2 def"]

    def test_delimiter_is_literal_text(self):
        """Regex characters in the custom delimiter are matched literally."""
        text = "intro text (a) more (a) end"
        parts = split_into_equal_parts(text, 2, "delimiter", "(a)")
        assert "".join(parts) == text
        assert parts[1].startswith("(a)")

    def test_no_boundary_uses_raw_offset(self):
        assert split_into_equal_parts("abcdef", 2, "sentence") == ["abc", "def"]

    @pytest.mark.parametrize("ending", ["sentence", "paragraph", "delimiter", "exact"])
    def test_concatenation_restores_text(self, ending):
        """Parts always reassemble into the input, whatever the ending type."""
        text = "First line. Second!\n\nChapter 2 starts? Yes.\nThe end."
        parts = split_into_equal_parts(text, 3, ending, "Chapter")
        assert len(parts) == 3
        assert "".join(parts) == text

    def test_fewer_than_two_parts(self):
        assert split_into_equal_parts("abc", 1) == ["abc"]
        assert split_into_equal_parts("abc", 0) == ["abc"]

    def test_empty_text(self):
        assert split_into_equal_parts("", 3) == [""]


class TestDelimiter:
    """split_by_delimiter."""

    def test_drops_delimiter(self):
        assert split_by_delimiter("a---b---c", "---") == ["a", "b", "c"]

    def test_include_delimiter_reassembles(self):
        """Kept delimiters stay with the preceding part, so joining restores the text."""
        parts = split_by_delimiter("a---b---c", "---", include_delimiter=True)
        assert parts == ["a---", "b---", "c"]
        assert "".join(parts) == "a---b---c"

    def test_case_insensitive_by_default(self):
        assert split_by_delimiter("aXbxc", "x") == ["a", "b", "c"]

    def test_case_sensitive(self):
        assert split_by_delimiter("aXbxc", "x", case_sensitive=True) == ["aXb", "c"]

    def test_empty_parts_dropped(self):
        assert split_by_delimiter("---a------b---", "---") == ["a", "b"]

    def test_invalid_regex_returns_text(self):
        assert split_by_delimiter("a(b", "(") == ["a(b"]

    def test_empty_delimiter_returns_text(self):
        assert split_by_delimiter("abc", "") == ["abc"]


class TestParagraphs:
    """split_by_paragraphs."""

    TEXT = "First paragraph here.\n\nSecond one.\n\n\nThird paragraph text."

    def test_one_per_part(self):
        assert split_by_paragraphs(self.TEXT) == [
            "First paragraph here.", "Second one.", "Third paragraph text.",
        ]

    def test_min_size_filters_short_paragraphs(self):
        assert split_by_paragraphs(self.TEXT, min_paragraph_size=12) == [
            "First paragraph here.", "Third paragraph text.",
        ]

    def test_grouping(self):
        assert split_by_paragraphs(self.TEXT, paragraphs_per_group=2) == [
            "First paragraph here.\n\nSecond one.", "Third paragraph text.",
        ]

    def test_single_group_falls_back_to_paragraphs(self):
        """Grouping everything into one part is no split; paragraphs are returned instead."""
        parts = split_by_paragraphs("aa\n\nbb", paragraphs_per_group=5)
        assert parts == ["aa", "bb"]

    def test_everything_filtered_returns_text(self):
        assert split_by_paragraphs(self.TEXT, min_paragraph_size=1000) == [self.TEXT]


class TestPattern:
    """split_by_pattern."""

    TEXT = "Intro\nChapter 1\nalpha\nChapter 2\nbeta"
    PATTERN = SplitOptions.pattern

    def test_match_leads_part(self):
        assert split_by_pattern(self.TEXT, self.PATTERN) == [
            "Intro\n", "Chapter 1\nalpha\n", "Chapter 2\nbeta",
        ]

    def test_match_dropped(self):
        assert split_by_pattern(self.TEXT, self.PATTERN, include_match=False) == [
            "Intro\n", "\nalpha\n", "\nbeta",
        ]

    def test_no_match_returns_text(self):
        assert split_by_pattern("nothing here", self.PATTERN) == ["nothing here"]

    def test_invalid_pattern_returns_text(self):
        assert split_by_pattern(self.TEXT, "[unclosed") == [self.TEXT]

    def test_multiline_anchor(self):
        """^ matches at every line start."""
        parts = split_by_pattern("# A\nx\n# B\ny", r"^# ")
        assert parts == ["# A\nx\n", "# B\ny"]


class TestSplitContent:
    """Dispatch by method name."""

    def test_dispatch_by_string(self):
        options = SplitOptions(delimiter="---")
        assert split_content("a---b", "delimiter", options) == ["a", "b"]

    def test_dispatch_by_enum(self):
        options = SplitOptions(parts_count=2, ending_type="exact")
        assert split_content("abcd", SplitMethod.EQUAL, options) == ["ab", "cd"]

    def test_default_options(self):
        assert split_content("a---b", "delimiter") == ["a", "b"]

    def test_unknown_method_returns_text(self):
        assert split_content("abc", "sideways") == ["abc"]

    def test_options_from_dict_ignores_unknown(self):
        options = SplitOptions.from_dict({"parts_count": 4, "part_label": "Part", "bogus": 1})
        assert options.parts_count == 4
        assert options.delimiter == "---"
