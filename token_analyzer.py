#!/usr/bin/env python3
"""
Token Estimator v1.0.0
======================
Approximates LLM token usage and how efficiently the text spends it.

Token counts are deliberately approximate: the larger of a character based
(4 chars/token) and a word based (1.3 tokens/word) estimate is used so the
context-window risk is not under-counted.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Dict, Any, Optional

from base_analyzer import BaseAnalyzer, AnalyzerResult, Issue, Recommendation
from text_metrics import (
    TextMetrics, is_header_line, normalize_word, round_half_up, round_to,
)

__version__ = "1.0.0"

CHARS_PER_TOKEN = 4
TOKENS_PER_WORD = 1.3

METADATA_PATTERNS = [
    re.compile(r'^(author|date|title|version|created|modified):', re.IGNORECASE),
    re.compile(r'^\w+:\s*\w+'),
]

FILLER_WORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'very', 'really', 'quite', 'rather', 'somewhat',
    'actually', 'basically', 'literally', 'obviously', 'clearly',
])


@dataclass(frozen=True)
class TokenEstimate:
    total: int
    tokens_per_word: float
    tokens_per_char: float


@dataclass(frozen=True)
class TokenDistribution:
    headers: int = 0
    content: int = 0
    metadata: int = 0


@dataclass(frozen=True)
class EfficiencyAnalysis:
    score: int
    redundancy: int
    avg_tokens_per_sentence: int
    filler_ratio: int  # percent


def estimate_tokens(text: str) -> TokenEstimate:
    """Conservative token estimate for a piece of text."""
    word_count = len(text.split())
    char_count = len(text)

    total = max(
        round_half_up(char_count / CHARS_PER_TOKEN),
        round_half_up(word_count * TOKENS_PER_WORD),
    )

    return TokenEstimate(
        total=total,
        tokens_per_word=round_to(total / word_count, 2) if word_count else 0,
        tokens_per_char=round_to(total / char_count, 3) if char_count else 0,
    )


def is_metadata_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in METADATA_PATTERNS)


def classify_line(line: str) -> str:
    """Bucket a trimmed line as header, metadata or content."""
    if is_header_line(line):
        return 'headers'
    if is_metadata_line(line):
        return 'metadata'
    return 'content'


def count_filler_words(text: str) -> int:
    return sum(1 for word in text.lower().split() if normalize_word(word) in FILLER_WORDS)


class TokenAnalyzer(BaseAnalyzer):
    """Token totals, distribution and efficiency."""

    ANALYZER_NAME = "tokens"
    ANALYZER_VERSION = "1.0.0"

    def analyze(self, text: str, metrics: Optional[TextMetrics] = None) -> AnalyzerResult:
        metrics = self.metrics_for(text, metrics)

        estimate = estimate_tokens(text)
        distribution = self.analyze_distribution(text)
        efficiency = self.analyze_efficiency(text, estimate, metrics)

        self._logger.debug(
            "Token analysis complete",
            total_tokens=estimate.total, efficiency=efficiency.score,
        )

        result_metrics: Dict[str, Any] = {
            'total_tokens': estimate.total,
            'header_tokens': distribution.headers,
            'content_tokens': distribution.content,
            'metadata_tokens': distribution.metadata,
            'tokens_per_word': estimate.tokens_per_word,
            'tokens_per_char': estimate.tokens_per_char,
            'redundancy_score': efficiency.redundancy,
            'avg_tokens_per_sentence': efficiency.avg_tokens_per_sentence,
            'filler_ratio': efficiency.filler_ratio,
        }

        return self.make_result(
            efficiency.score,
            result_metrics,
            self._identify_issues(estimate, efficiency),
            self._generate_recommendations(estimate, efficiency),
        )

    def analyze_distribution(self, text: str) -> TokenDistribution:
        buckets = {'headers': 0, 'content': 0, 'metadata': 0}
        for line in text.split('\n'):
            trimmed = line.strip()
            if not trimmed:
                continue
            buckets[classify_line(trimmed)] += estimate_tokens(trimmed).total
        return TokenDistribution(**buckets)

    def analyze_efficiency(self, text: str, estimate: TokenEstimate,
                           metrics: TextMetrics) -> EfficiencyAnalysis:
        score = 100.0

        # Words longer than 3 letters repeated more than 5 times
        frequency = Counter(
            cleaned for cleaned in (normalize_word(w) for w in metrics.words)
            if len(cleaned) > 3
        )
        if frequency:
            repeated = sum(1 for count in frequency.values() if count > 5)
            redundancy = min(50.0, repeated / len(frequency) * 100)
        else:
            redundancy = 0.0

        if metrics.sentence_count:
            avg_tokens_per_sentence = estimate.total / metrics.sentence_count
        else:
            avg_tokens_per_sentence = 0.0
        if avg_tokens_per_sentence > 30:
            score -= 15

        if metrics.word_count:
            filler_ratio = count_filler_words(text) / metrics.word_count
        else:
            filler_ratio = 0.0
        if filler_ratio > 0.15:
            score -= 20

        score -= redundancy * 0.5

        return EfficiencyAnalysis(
            score=max(0, round_half_up(score)),
            redundancy=round_half_up(redundancy),
            avg_tokens_per_sentence=round_half_up(avg_tokens_per_sentence),
            filler_ratio=round_half_up(filler_ratio * 100),
        )

    def _identify_issues(self, estimate: TokenEstimate,
                         efficiency: EfficiencyAnalysis) -> List[Issue]:
        issues = []

        if estimate.total > 4000:
            issues.append(self.create_issue(
                "High Token Count",
                "Document may exceed typical LLM context windows",
                "high",
            ))

        if efficiency.redundancy > 30:
            issues.append(self.create_issue(
                "High Redundancy",
                "Content contains excessive repetition",
                "medium",
            ))

        if efficiency.avg_tokens_per_sentence > 40:
            issues.append(self.create_issue(
                "Dense Sentences",
                "Sentences are too token-heavy for optimal processing",
                "medium",
            ))

        if efficiency.filler_ratio > 20:
            issues.append(self.create_issue(
                "Excessive Filler Words",
                "Too many low-value words reduce content efficiency",
                "low",
            ))

        return issues

    def _generate_recommendations(self, estimate: TokenEstimate,
                                  efficiency: EfficiencyAnalysis) -> List[Recommendation]:
        recommendations = []

        if estimate.total > 3000:
            recommendations.append(self.create_recommendation(
                "Split Content",
                "Break document into smaller chunks for better LLM processing",
                20,
            ))

        if efficiency.redundancy > 25:
            recommendations.append(self.create_recommendation(
                "Reduce Redundancy",
                "Remove repetitive content and consolidate similar information",
                15,
            ))

        if efficiency.filler_ratio > 15:
            recommendations.append(self.create_recommendation(
                "Remove Filler Words",
                "Eliminate unnecessary words to improve token efficiency",
                10,
            ))

        if estimate.tokens_per_word > 1.5:
            recommendations.append(self.create_recommendation(
                "Simplify Vocabulary",
                "Use shorter, simpler words to reduce token consumption",
                8,
            ))

        return recommendations
