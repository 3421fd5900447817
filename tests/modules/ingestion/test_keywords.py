"""Tests for keyword extraction."""

from pdfsearch.modules.ingestion.keywords import STOP_WORDS, extract_keywords


class TestExtractKeywords:
    """Test extract_keywords ranking and filtering."""

    def test_orders_by_frequency(self):
        """Test that more frequent tokens come first."""
        text = "graph nodes graph edges graph nodes"
        assert extract_keywords(text) == ["graph", "nodes", "edges"]

    def test_ties_keep_first_occurrence_order(self):
        """Test that equally frequent tokens keep their order of appearance."""
        text = "zebra apple mango zebra apple mango"
        assert extract_keywords(text) == ["zebra", "apple", "mango"]

    def test_ignores_short_tokens_and_stop_words(self):
        """Test that tokens under four characters and stop words are skipped."""
        text = "The cat and the dog were there with their owners"
        assert extract_keywords(text) == ["owners"]

    def test_spanish_stop_words(self):
        """Test that Spanish function words are filtered too."""
        assert "entre" in STOP_WORDS
        assert extract_keywords("entre cuando sobre montañas") == ["montañas"]

    def test_lowercases_and_strips_punctuation(self):
        """Test case folding and punctuation removal."""
        text = "Neural, NEURAL; neural! Networks?"
        assert extract_keywords(text) == ["neural", "networks"]

    def test_respects_limit(self):
        """Test that at most ``limit`` keywords are returned."""
        words = [f"token{i:02d}" for i in range(30)]
        keywords = extract_keywords(" ".join(words), limit=20)

        assert len(keywords) == 20
        assert keywords == words[:20]

    def test_empty_text(self):
        """Test that empty or all-filtered text yields no keywords."""
        assert extract_keywords("") == []
        assert extract_keywords("a an the of") == []
