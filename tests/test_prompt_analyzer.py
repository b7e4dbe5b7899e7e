"""
Tests for Prompt Coverage Analyzer
==================================
Intent coverage, answerability and section completeness.
"""

import pytest

from prompt_analyzer import (
    PromptCoverageAnalyzer, INTENT_TAXONOMY, IntentSpec, classify_section,
)
from text_metrics import TextMetrics


ALL_INTENTS_TEXT = (
    "What is retrieval? Here is how to set it up. We do this because it helps. "
    "Run it when ready. Store it where the data lives. For example, a wiki. "
    "Compared to search, it differs."
)

SECTIONED_TEXT = "\n\n".join([
    "Introduction", "Intro text here.",
    "Definition of terms", "Terms defined here.",
    "How it works", "Process text here.",
    "Examples", "Sample text here.",
    "Summary", "Closing text here.",
])


@pytest.fixture
def analyzer() -> PromptCoverageAnalyzer:
    return PromptCoverageAnalyzer()


class TestTaxonomy:
    """Tests for the intent table."""

    def test_weights_sum_to_one(self):
        """Test the intent weights form a distribution."""
        assert sum(i.weight for i in INTENT_TAXONOMY) == pytest.approx(1.0)
        assert len(INTENT_TAXONOMY) == 7

    def test_custom_taxonomy(self):
        """Test a new intent is a table row, not a code change."""
        taxonomy = INTENT_TAXONOMY + (IntentSpec("Who", "person", 0.1, ("who",)),)
        coverage = PromptCoverageAnalyzer(taxonomy).analyze_coverage("Who wrote it?")
        assert [m.intent.name for m in coverage.matches] == ["Who"]


class TestCoverage:
    """Tests for intent matching."""

    def test_all_intents(self, analyzer):
        """Test every intent matched gives full coverage."""
        coverage = analyzer.analyze_coverage(ALL_INTENTS_TEXT)
        assert coverage.missing == ()
        assert coverage.percentage == pytest.approx(100.0)

    def test_whole_word_matching(self, analyzer):
        """Test patterns do not match inside longer words."""
        coverage = analyzer.analyze_coverage("A canvas timeline.")
        assert {i.name for i in coverage.missing} >= {"Comparison", "When"}

    def test_match_counts(self, analyzer):
        """Test every occurrence is counted."""
        coverage = analyzer.analyze_coverage("Why? Because. The reason and purpose.")
        why = [m for m in coverage.matches if m.intent.name == "Why"][0]
        assert why.count == 4


class TestAnswerability:
    """Tests for question versus answer cues."""

    def test_question_and_answer(self, analyzer):
        """Test a sentence can carry both cues."""
        answerability = analyzer.analyze_answerability(TextMetrics.from_text("What is it? It is a tool."))
        assert answerability.question_count == 1
        assert answerability.answer_count == 2
        assert answerability.score == 67
        assert answerability.ratio == 2.0

    def test_ratio_rounds_half_up(self, analyzer):
        """Test 1 answer to 8 questions gives 0.13, not 0.12."""
        text = "Why now? " * 8 + "It helps because of speed."
        answerability = analyzer.analyze_answerability(TextMetrics.from_text(text))
        assert answerability.question_count == 8
        assert answerability.answer_count == 1
        assert answerability.ratio == 0.13

    def test_declarative_with_answers(self, analyzer):
        """Test declarative text with answer cues scores 80."""
        assert analyzer.analyze_answerability(TextMetrics.from_text("It is good.")).score == 80

    def test_declarative_without_answers(self, analyzer):
        """Test declarative text without answer cues scores 60."""
        assert analyzer.analyze_answerability(TextMetrics.from_text("Lorem ipsum.")).score == 60


class TestCompleteness:
    """Tests for section classification and completeness."""

    @pytest.mark.parametrize("header,expected", [
        ("Background", "introduction"),
        ("What is RAG", "definition"),
        ("Steps", "explanation"),
        ("Case studies", "examples"),
        ("Final thoughts", "conclusion"),
        ("Pricing", "general"),
    ])
    def test_classify_section(self, header, expected):
        """Test header keywords select the section type."""
        assert classify_section(header) == expected

    def test_all_sections(self, analyzer):
        """Test all five section types with bonuses clamp to 100."""
        completeness = analyzer.analyze_completeness(TextMetrics.from_text(SECTIONED_TEXT))
        assert completeness.found_sections == 5
        assert completeness.missing_sections == ()
        assert completeness.score == 100

    def test_no_sections(self, analyzer):
        """Test no headers scores zero."""
        completeness = analyzer.analyze_completeness(TextMetrics.from_text("Lorem ipsum."))
        assert completeness.score == 0
        assert len(completeness.missing_sections) == 5


class TestPromptCoverageAnalyzer:
    """End-to-end tests for PromptCoverageAnalyzer."""

    def test_bare_text(self, analyzer):
        """Test text with no intents, cues or sections."""
        result = analyzer.analyze("Lorem ipsum.")
        types = [i.type for i in result.issues]
        titles = [r.title for r in result.recommendations]

        # 0.5 * 0 + 0.3 * 60 + 0.2 * 0
        assert result.score == 18
        assert "Poor Prompt Coverage" in types
        assert "Incomplete Coverage" in types
        assert titles == [
            "Add Missing Question Types",
            "Improve Answer Clarity",
            "Add Missing Sections",
            "Add Step-by-Step Instructions",
            "Include More Examples",
        ]
        assert result.recommendations[0].description == "Address What is, How to questions"

    def test_unanswered_questions(self, analyzer):
        """Test question-heavy text is flagged."""
        result = analyzer.analyze("Why? When? Where? Who?")
        assert "Too Many Unanswered Questions" in [i.type for i in result.issues]
        assert "Low Answerability" in [i.type for i in result.issues]

    def test_score_in_range(self, analyzer, guide_text):
        """Test score range and analyzer name."""
        result = analyzer.analyze(guide_text)
        assert 0 <= result.score <= 100
        assert result.analyzer == "prompt_coverage"
