"""
Tests for Token Estimator
=========================
Token estimate, line classification and efficiency scoring.
"""

import pytest

from text_metrics import round_half_up
from token_analyzer import (
    TokenAnalyzer, estimate_tokens, classify_line, count_filler_words,
)


@pytest.fixture
def analyzer() -> TokenAnalyzer:
    return TokenAnalyzer()


class TestEstimateTokens:
    """Tests for estimate_tokens."""

    def test_hello(self, hello_text):
        """Test the larger of the char and word estimates wins."""
        estimate = estimate_tokens(hello_text)
        assert estimate.total == 2
        assert estimate.tokens_per_word == 2.0
        assert estimate.tokens_per_char == 0.333

    def test_empty(self):
        """Test empty text has zero tokens and zero ratios."""
        estimate = estimate_tokens("")
        assert estimate.total == 0
        assert estimate.tokens_per_word == 0
        assert estimate.tokens_per_char == 0

    @pytest.mark.parametrize("text", [
        "a", "one two three", "supercalifragilistic expialidocious",
        "x " * 200,
    ])
    def test_word_floor(self, text):
        """Test the estimate never falls below the word based estimate."""
        word_count = len(text.split())
        assert estimate_tokens(text).total >= round_half_up(word_count * 1.3)

    def test_monotonic_in_characters(self):
        """Test longer words never lower the estimate for a fixed word count."""
        totals = [
            estimate_tokens(f"{'a' * n} {'b' * n} {'c' * n}").total
            for n in range(1, 30)
        ]
        assert totals == sorted(totals)


class TestLineClassification:
    """Tests for header/metadata/content bucketing."""

    def test_header(self):
        """Test headers win over other buckets."""
        assert classify_line("# Intro") == 'headers'
        assert classify_line("Author: Jane Doe") == 'headers'

    def test_metadata(self):
        """Test key: value lines are metadata."""
        assert classify_line("version: 1.2.0") == 'metadata'
        assert classify_line("status: draft.") == 'metadata'

    def test_content(self):
        """Test ordinary sentences are content."""
        assert classify_line("the quick brown fox jumps.") == 'content'

    def test_distribution(self, analyzer):
        """Test per-bucket token totals."""
        distribution = analyzer.analyze_distribution("# Title\nversion: 1.0\n\nbody text here.")
        assert distribution.headers == 3
        assert distribution.metadata == 3
        assert distribution.content == 4


class TestEfficiency:
    """Tests for efficiency scoring and findings."""

    def test_filler_words(self):
        """Test filler words are counted after normalization."""
        assert count_filler_words("The very big dog, really.") == 3

    def test_filler_heavy_text(self, analyzer):
        """Test a filler-only text loses 20 points."""
        result = analyzer.analyze("the a an and or but the a")
        assert result.score == 80
        assert result.metrics['filler_ratio'] == 100
        assert "Excessive Filler Words" in [i.type for i in result.issues]
        assert "Remove Filler Words" in [r.title for r in result.recommendations]

    def test_long_repetitive_text(self, analyzer):
        """Test token count and redundancy findings."""
        result = analyzer.analyze("lorem " * 3100)
        types = [i.type for i in result.issues]
        assert result.metrics['total_tokens'] > 4000
        assert result.metrics['redundancy_score'] == 50
        assert "High Token Count" in types
        assert "High Redundancy" in types
        assert "Split Content" in [r.title for r in result.recommendations]
        # 100 - 15 (dense sentence) - 25 (redundancy)
        assert result.score == 60

    def test_no_sentences(self, analyzer):
        """Test text without words scores without dividing by zero."""
        result = analyzer.analyze("   ")
        assert result.metrics['avg_tokens_per_sentence'] == 0
        assert 0 <= result.score <= 100

    def test_metric_keys(self, analyzer, guide_text):
        """Test the reported metrics."""
        result = analyzer.analyze(guide_text)
        for key in ('total_tokens', 'header_tokens', 'content_tokens', 'metadata_tokens',
                    'tokens_per_word', 'tokens_per_char', 'redundancy_score'):
            assert key in result.metrics
