"""Tests for query term highlighting."""

from pdfsearch.modules.search import highlight_terms


class TestHighlightTerms:
    """Test highlight_terms."""

    def test_marks_each_query_word(self):
        text = "Machine learning at scale"
        assert highlight_terms(text, "machine learning") == "<mark>Machine</mark> <mark>learning</mark> at scale"

    def test_preserves_original_case(self):
        assert highlight_terms("NEURAL nets, Neural nets", "neural") == "<mark>NEURAL</mark> nets, <mark>Neural</mark> nets"

    def test_whole_words_only(self):
        assert highlight_terms("gardening in the garden", "garden") == "gardening in the <mark>garden</mark>"

    def test_ignores_short_words(self):
        assert highlight_terms("AI is in the lab", "AI in lab") == "AI is in the <mark>lab</mark>"

    def test_no_nested_marks_for_overlapping_words(self):
        """Test that one occurrence is never wrapped twice."""
        result = highlight_terms("network networks", "network networks")

        assert result == "<mark>network</mark> <mark>networks</mark>"
        assert "<mark><mark>" not in result

    def test_regex_characters_are_literal(self):
        assert highlight_terms("costs (usd) rose", "(usd)") == "costs (usd) rose"
        assert highlight_terms("c++ and c#", "c++") == "c++ and c#"
        assert highlight_terms("version 1.2.3 ships", "1.2.3") == "version <mark>1.2.3</mark> ships"

    def test_empty_inputs(self):
        assert highlight_terms("", "machine") == ""
        assert highlight_terms("machine", "") == "machine"
