#!/usr/bin/env python3
"""
Structure Analyzer v1.0.0
=========================
Scores how well a document is organized for machine consumption:
- Header detection and hierarchy
- Readability grade estimate
- Clarity heuristics (long sentences, passive voice, jargon)
"""

import re
from dataclasses import dataclass
from typing import List, Dict, Any, Optional

from base_analyzer import BaseAnalyzer, AnalyzerResult, Issue, Recommendation
from text_metrics import (
    TextMetrics, MARKDOWN_HEADER, HEADER_PATTERNS, normalize_word,
    round_half_up, clamp_score,
)

__version__ = "1.0.0"

COMPLEX_SUFFIXES = re.compile(r'(tion|sion|ment|ness|ical|ible|able)$')
PASSIVE_VOICE = re.compile(r'\b(was|were|been|being)\s+\w+ed\b')
JARGON_PATTERNS = [
    re.compile(r'ization$'),
    re.compile(r'methodology'),
    re.compile(r'paradigm'),
    re.compile(r'synergy'),
    re.compile(r'optimization'),
    re.compile(r'implementation'),
]

# (grade above, readability score), checked in order
READABILITY_BUCKETS = [(16, 30), (13, 50), (10, 70), (8, 85)]
# (grade at most, label), checked in order
READABILITY_LABELS = [(8, "Elementary"), (12, "High School"), (16, "College")]

LONG_SENTENCE_WORDS = 25


@dataclass(frozen=True)
class Header:
    text: str
    level: int
    kind: str  # markdown or inferred


@dataclass(frozen=True)
class HeaderAnalysis:
    headers: tuple
    structure: tuple
    hierarchy_score: int

    @property
    def count(self) -> int:
        return len(self.headers)


@dataclass(frozen=True)
class ReadabilityAnalysis:
    score: int
    level: str
    complex_words_percent: int
    grade_level: int = 0
    raw_grade: float = 0.0


@dataclass(frozen=True)
class ClarityAnalysis:
    score: int
    findings: tuple


def estimate_header_level(text: str, current_level: int) -> int:
    """Infer the nesting level of a non-markdown header."""
    if re.match(r'^\d+\.', text):
        return 1
    if re.match(r'^[a-z]\)', text):
        return current_level + 1
    if len(text) < 50 and text == text.upper():
        return 1
    return max(1, current_level)


def calculate_hierarchy_score(structure: List[int]) -> int:
    """
    Score header nesting.

    50 points for having any headers plus up to 50 for the share of
    transitions that go at most one level deeper.
    """
    if not structure:
        return 0

    score = 50.0
    if len(structure) > 1:
        proper = sum(
            1 for prev, curr in zip(structure, structure[1:])
            if curr <= prev + 1
        )
        score += proper / (len(structure) - 1) * 50
    return round_half_up(score)


def is_complex_word(word: str) -> bool:
    cleaned = normalize_word(word)
    return len(cleaned) > 6 or bool(COMPLEX_SUFFIXES.search(cleaned))


def is_jargon(word: str) -> bool:
    lowered = word.lower()
    return any(pattern.search(lowered) for pattern in JARGON_PATTERNS)


def readability_label(grade: float) -> str:
    for limit, label in READABILITY_LABELS:
        if grade <= limit:
            return label
    return "Graduate"


def readability_score_for_grade(grade: float) -> int:
    for threshold, score in READABILITY_BUCKETS:
        if grade > threshold:
            return score
    return 100


def combine_structure_score(hierarchy: float, readability: float, clarity: float) -> int:
    """
    Blend component scores by sequential reweighting.

    Each step discounts the running value and adds the next component, so
    the order hierarchy, readability, clarity is part of the result.
    """
    score = 100.0
    score = score * 0.7 + hierarchy * 0.3
    score = score * 0.6 + readability * 0.4
    score = score * 0.7 + clarity * 0.3
    return round_half_up(clamp_score(score))


class StructureAnalyzer(BaseAnalyzer):
    """Headers, readability and clarity."""

    ANALYZER_NAME = "structure"
    ANALYZER_VERSION = "1.0.0"

    def analyze(self, text: str, metrics: Optional[TextMetrics] = None) -> AnalyzerResult:
        metrics = self.metrics_for(text, metrics)

        headers = self.analyze_headers(text)
        readability = self.analyze_readability(metrics)
        clarity = self.analyze_clarity(metrics)

        score = combine_structure_score(
            headers.hierarchy_score, readability.score, clarity.score
        )

        self._logger.debug(
            "Structure analysis complete",
            score=score, headers=headers.count, grade=readability.grade_level,
        )

        result_metrics: Dict[str, Any] = {
            'clarity_score': clarity.score,
            'readability_level': readability.level,
            'readability_score': readability.score,
            'grade_level': readability.grade_level,
            'avg_sentence_length': metrics.avg_words_per_sentence,
            'complex_words_percent': readability.complex_words_percent,
            'header_count': headers.count,
            'header_structure': list(headers.structure),
            'hierarchy_score': headers.hierarchy_score,
            'headers': [
                {'text': h.text, 'level': h.level, 'kind': h.kind}
                for h in headers.headers
            ],
        }

        return self.make_result(
            score,
            result_metrics,
            self._identify_issues(headers, readability, clarity, metrics),
            self._generate_recommendations(headers, readability, metrics),
        )

    def analyze_headers(self, text: str) -> HeaderAnalysis:
        headers: List[Header] = []
        current_level = 0

        for line in text.split('\n'):
            trimmed = line.strip()
            if not trimmed:
                continue

            markdown = MARKDOWN_HEADER.match(trimmed)
            if markdown:
                headers.append(Header(markdown.group(2), len(markdown.group(1)), 'markdown'))
                continue

            if any(pattern.search(trimmed) for pattern in HEADER_PATTERNS):
                level = estimate_header_level(trimmed, current_level)
                headers.append(Header(trimmed, level, 'inferred'))
                current_level = level

        structure = [h.level for h in headers]
        return HeaderAnalysis(
            headers=tuple(headers),
            structure=tuple(structure),
            hierarchy_score=calculate_hierarchy_score(structure),
        )

    def analyze_readability(self, metrics: TextMetrics) -> ReadabilityAnalysis:
        words = metrics.words
        if not words or not metrics.sentence_count:
            return ReadabilityAnalysis(score=0, level="Unknown", complex_words_percent=0)

        avg_sentence_length = len(words) / metrics.sentence_count
        complex_ratio = sum(1 for w in words if is_complex_word(w)) / len(words)

        # Simplified Flesch-Kincaid grade level
        grade = 0.39 * avg_sentence_length + 11.8 * complex_ratio - 15.59

        return ReadabilityAnalysis(
            score=readability_score_for_grade(grade),
            level=readability_label(grade),
            complex_words_percent=round_half_up(complex_ratio * 100),
            grade_level=round_half_up(grade),
            raw_grade=grade,
        )

    def analyze_clarity(self, metrics: TextMetrics) -> ClarityAnalysis:
        sentences = metrics.sentences
        words = metrics.words
        score = 100
        findings: List[str] = []

        long_sentences = sum(1 for s in sentences if len(s.split()) > LONG_SENTENCE_WORDS)
        if long_sentences > len(sentences) * 0.3:
            score -= 20
            findings.append("Too many long sentences")

        passive = sum(1 for s in sentences if PASSIVE_VOICE.search(s.lower()))
        if passive > len(sentences) * 0.4:
            score -= 15
            findings.append("Excessive passive voice")

        jargon = sum(1 for w in words if is_jargon(w))
        if jargon > len(words) * 0.1:
            score -= 10
            findings.append("High jargon content")

        return ClarityAnalysis(score=max(0, score), findings=tuple(findings))

    def _identify_issues(self, headers: HeaderAnalysis, readability: ReadabilityAnalysis,
                         clarity: ClarityAnalysis, metrics: TextMetrics) -> List[Issue]:
        issues = []

        if headers.count == 0:
            issues.append(self.create_issue(
                "Missing Headers",
                "Document lacks clear section headers for better organization",
                "high",
            ))

        if readability.grade_level > 16:
            issues.append(self.create_issue(
                "High Reading Level",
                "Content is too complex for general audiences",
                "medium",
            ))

        if metrics.avg_words_per_sentence > 25:
            issues.append(self.create_issue(
                "Long Sentences",
                "Sentences are too long, reducing readability",
                "medium",
            ))

        for finding in clarity.findings:
            issues.append(self.create_issue("Clarity Issue", finding, "low"))

        return issues

    def _generate_recommendations(self, headers: HeaderAnalysis,
                                  readability: ReadabilityAnalysis,
                                  metrics: TextMetrics) -> List[Recommendation]:
        recommendations = []

        if headers.count < 3 and metrics.word_count > 500:
            recommendations.append(self.create_recommendation(
                "Add Section Headers",
                "Break content into clear sections with descriptive headers",
                15,
            ))

        if readability.complex_words_percent > 20:
            recommendations.append(self.create_recommendation(
                "Simplify Language",
                "Replace complex terms with simpler alternatives where possible",
                12,
            ))

        if metrics.avg_words_per_sentence > 20:
            recommendations.append(self.create_recommendation(
                "Shorten Sentences",
                "Break long sentences into shorter, more digestible chunks",
                10,
            ))

        return recommendations
