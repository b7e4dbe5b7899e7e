"""
Tests for Structure Analyzer
============================
Headers, readability, clarity and the sequential score blend.
"""

import pytest

from structure_analyzer import (
    StructureAnalyzer, combine_structure_score, calculate_hierarchy_score,
    estimate_header_level, readability_label, readability_score_for_grade,
)
from text_metrics import TextMetrics


@pytest.fixture
def analyzer() -> StructureAnalyzer:
    return StructureAnalyzer()


def issue_types(result):
    return [issue.type for issue in result.issues]


def rec_titles(result):
    return [rec.title for rec in result.recommendations]


class TestCombineStructureScore:
    """The blend is sequential reweighting; these values are exact."""

    def test_no_headers_perfect_readability_and_clarity(self):
        """Test 100 -> 70 -> 82 -> 87.4 rounds to 87."""
        assert combine_structure_score(0, 100, 100) == 87

    def test_single_header(self):
        """Test 100 -> 85 -> 91 -> 93.7 rounds to 94."""
        assert combine_structure_score(50, 100, 100) == 94

    def test_order_matters(self):
        """Test the result differs from a flat weighted sum."""
        # Sequential: 100 -> 100 -> 80 -> 56
        assert combine_structure_score(100, 50, 0) == 56
        flat = round(0.3 * 100 + 0.4 * 50 + 0.3 * 0)
        assert flat != 56

    def test_all_zero(self):
        """Test the running start value keeps a floor."""
        # 100 -> 70 -> 42 -> 29.4
        assert combine_structure_score(0, 0, 0) == 29


class TestHeaders:
    """Tests for header detection and hierarchy."""

    def test_hierarchy_zero_without_headers(self):
        """Test no headers scores zero."""
        assert calculate_hierarchy_score([]) == 0

    def test_hierarchy_positive_with_one_header(self):
        """Test any header scores at least 50."""
        assert calculate_hierarchy_score([1]) == 50

    def test_hierarchy_proper_nesting(self):
        """Test step-by-step nesting scores full marks."""
        assert calculate_hierarchy_score([1, 2, 3, 2, 1]) == 100

    def test_hierarchy_skipped_level(self):
        """Test a jump of two levels loses credit."""
        assert calculate_hierarchy_score([1, 3]) == 50

    @pytest.mark.parametrize("text,current,expected", [
        ("1. Introduction", 3, 1),
        ("a) Detail", 2, 3),
        ("OVERVIEW", 3, 1),
        ("Some Section", 2, 2),
        ("Some Section", 0, 1),
    ])
    def test_estimate_header_level(self, text, current, expected):
        """Test inferred header levels."""
        assert estimate_header_level(text, current) == expected

    def test_markdown_levels(self, analyzer):
        """Test markdown headers take their level from the hashes."""
        headers = analyzer.analyze_headers("# Top\n\nbody text.\n\n## Sub\n\n### Leaf")
        assert list(headers.structure) == [1, 2, 3]
        assert headers.hierarchy_score == 100

    def test_body_lines_are_not_headers(self, analyzer):
        """Test sentences with terminators are not counted."""
        headers = analyzer.analyze_headers("This is a sentence.\nanother one here")
        assert headers.count == 0


class TestReadability:
    """Tests for the readability estimate."""

    def test_bucket_boundaries(self):
        """Test grade to score buckets."""
        assert readability_score_for_grade(17) == 30
        assert readability_score_for_grade(14) == 50
        assert readability_score_for_grade(11) == 70
        assert readability_score_for_grade(9) == 85
        assert readability_score_for_grade(8) == 100

    def test_labels(self):
        """Test grade labels."""
        assert readability_label(-11.69) == "Elementary"
        assert readability_label(12) == "High School"
        assert readability_label(16) == "College"
        assert readability_label(16.5) == "Graduate"

    def test_simple_sentences(self, analyzer):
        """Test ten short plain words per sentence is elementary."""
        sentence = "a cat sat on the mat and it was ok."
        metrics = TextMetrics.from_text(" ".join([sentence] * 3))
        readability = analyzer.analyze_readability(metrics)
        assert readability.raw_grade == pytest.approx(0.39 * 10 - 15.59)
        assert readability.score == 100
        assert readability.level == "Elementary"
        assert readability.complex_words_percent == 0

    def test_no_words(self, analyzer):
        """Test empty text is unknown rather than an error."""
        readability = analyzer.analyze_readability(TextMetrics.from_text(""))
        assert readability.score == 0
        assert readability.level == "Unknown"


class TestClarity:
    """Tests for clarity heuristics."""

    def test_passive_voice(self, analyzer):
        """Test passive-heavy text is penalized."""
        metrics = TextMetrics.from_text("The report was created. The code was tested.")
        clarity = analyzer.analyze_clarity(metrics)
        assert clarity.score == 85
        assert "Excessive passive voice" in clarity.findings

    def test_jargon(self, analyzer):
        """Test jargon-heavy text is penalized."""
        metrics = TextMetrics.from_text("Optimization paradigm synergy.")
        clarity = analyzer.analyze_clarity(metrics)
        assert "High jargon content" in clarity.findings


class TestStructureAnalyzer:
    """End-to-end tests for StructureAnalyzer."""

    def test_hello(self, analyzer, hello_text):
        """Test a one-word document."""
        result = analyzer.analyze(hello_text)
        assert result.score == 87
        assert result.metrics['header_count'] == 0
        assert result.metrics['hierarchy_score'] == 0
        assert "Missing Headers" in issue_types(result)

    def test_single_title_long_body(self, analyzer, long_body_text):
        """Test one header over 500 words asks for more headers."""
        result = analyzer.analyze(long_body_text)
        assert result.metrics['header_count'] == 1
        assert result.metrics['hierarchy_score'] == 50
        assert "Add Section Headers" in rec_titles(result)
        assert "Missing Headers" not in issue_types(result)

    def test_long_sentences(self, analyzer):
        """Test long sentence issue and recommendation."""
        text = " ".join(["word"] * 30) + "."
        result = analyzer.analyze(text)
        assert "Long Sentences" in issue_types(result)
        assert "Shorten Sentences" in rec_titles(result)

    def test_score_in_range(self, analyzer, guide_text):
        """Test the score is clamped to 0-100."""
        result = analyzer.analyze(guide_text)
        assert 0 <= result.score <= 100
        assert result.analyzer == "structure"

    def test_uses_supplied_metrics(self, analyzer, guide_text):
        """Test precomputed metrics give the same result."""
        metrics = TextMetrics.from_text(guide_text)
        assert analyzer.analyze(guide_text, metrics) == analyzer.analyze(guide_text)
