"""
Tests for Embedding Suitability Analyzer
========================================
"""

import pytest

from embedding_analyzer import (
    EmbeddingAnalyzer, is_concept_word, extract_topic_words, sentence_overlap,
    calculate_paragraph_coherence, calculate_topic_coherence, count_context_switches,
)
from text_metrics import TextMetrics


@pytest.fixture
def analyzer() -> EmbeddingAnalyzer:
    return EmbeddingAnalyzer()


class TestConceptWords:
    """Tests for the concept word heuristic."""

    @pytest.mark.parametrize("word,expected", [
        ("the", False),
        ("cat", False),
        ("ab", False),
        ("Python", True),
        ("API", True),
        ("embedding", True),
        ("unity", True),
    ])
    def test_is_concept_word(self, word, expected):
        """Test length, suffix and capitalization rules."""
        assert is_concept_word(word) is expected

    def test_topic_words_need_repeats(self):
        """Test only repeated concept words become topic words."""
        words = ["vector", "vector", "vector", "embedding", "embedding", "cat", "cat", "index"]
        assert extract_topic_words(words) == ["vector", "embedding"]


class TestCoherence:
    """Tests for overlap and coherence helpers."""

    def test_sentence_overlap(self):
        """Test overlap relative to the smaller sentence."""
        assert sentence_overlap("a b c", "b c d") == pytest.approx(200 / 3)
        assert sentence_overlap("", "b c d") == 0.0

    def test_single_sentence_paragraph(self):
        """Test single-sentence paragraphs default to 50."""
        assert calculate_paragraph_coherence(["Just one sentence here"]) == 50

    def test_no_paragraphs(self):
        """Test no paragraphs gives zero coherence."""
        assert calculate_paragraph_coherence([]) == 0.0

    def test_topic_coherence(self):
        """Test share of sentences mentioning a topic word."""
        sentences = ["vectors are stored", "the sky is blue"]
        assert calculate_topic_coherence(["vector"], sentences) == 50.0
        assert calculate_topic_coherence([], sentences) == 0.0

    def test_context_switches(self):
        """Test transition adverbials are counted per sentence."""
        sentences = ["However it works", "plain sentence", "Furthermore, more", "On the other hand"]
        assert count_context_switches(sentences) == 3


class TestEmbeddingAnalyzer:
    """End-to-end tests for EmbeddingAnalyzer."""

    def test_semantic_richness_empty(self, analyzer):
        """Test no words scores zero."""
        semantic = analyzer.analyze_semantic_richness(TextMetrics.from_text(""))
        assert semantic.score == 0

    def test_semantic_richness_formula(self, analyzer):
        """Test 0.4 diversity + 0.6 density, as a percentage."""
        # 4 unique of 4 words, 2 concept words
        semantic = analyzer.analyze_semantic_richness(TextMetrics.from_text("big cat Python embedding"))
        assert semantic.vocabulary_diversity == 100
        assert semantic.concept_density == 50
        assert semantic.score == 70

    def test_punctuation_tokens_count_once(self, analyzer):
        """Test standalone punctuation adds one distinct vocabulary entry."""
        semantic = analyzer.analyze_semantic_richness(TextMetrics.from_text("word - word --"))
        # {'word', ''} over 4 tokens
        assert semantic.vocabulary_diversity == 50

    def test_short_paragraph_penalty(self, analyzer):
        """Test short single-sentence paragraphs."""
        structural = analyzer.analyze_structure(TextMetrics.from_text("Short paragraph here."))
        # (100 - 15) * 50 / 100
        assert structural.score == 43
        assert structural.paragraph_count == 1

    def test_context_stability(self, analyzer):
        """Test each switch costs ten points of stability."""
        text = "However one. Meanwhile two. Furthermore three."
        contextual = analyzer.analyze_contextual_coherence(TextMetrics.from_text(text))
        assert contextual.context_switches == 3
        assert contextual.context_stability == 70

    def test_findings_for_thin_text(self, analyzer, hello_text):
        """Test a tiny text triggers paragraph findings."""
        result = analyzer.analyze(hello_text)
        assert "Short Paragraphs" in [i.type for i in result.issues]
        assert "Expand Paragraphs" in [r.title for r in result.recommendations]
        assert "Improve Topic Flow" in [r.title for r in result.recommendations]

    def test_score_and_metrics(self, analyzer, guide_text):
        """Test score range and reported metrics."""
        result = analyzer.analyze(guide_text)
        assert 0 <= result.score <= 100
        assert result.analyzer == "embedding"
        for key in ('semantic_richness', 'structural_suitability', 'contextual_coherence',
                    'concept_density', 'vocabulary_diversity', 'context_switches'):
            assert key in result.metrics
