#!/usr/bin/env python3
"""
Content Gap Detector v1.0.0
===========================
Finds topics and information types a reader (or an LLM answering on the
document's behalf) would expect but the document does not provide.

Three gap sources feed one ranked list:
- Prompt gaps: expected question categories with no trigger phrase present
- Contextual gaps: expected context elements with no indicator present
- Information gaps: conditions evaluated directly on the text

Also extracts the document's main topics by keyword frequency.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple, Callable, Sequence

from base_analyzer import BaseAnalyzer, ContentGap
from text_metrics import TextMetrics, normalize_word

__version__ = "1.0.0"

MAX_GAPS = 10
MAX_TOPICS = 5

PRIORITY_PENALTY = {'High': 15, 'Medium': 8, 'Low': 3}

TOPIC_STOPWORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'up', 'about', 'into', 'through', 'during',
    'before', 'after', 'above', 'below', 'between', 'among', 'this', 'that',
    'these', 'those', 'is', 'was', 'are', 'were', 'been', 'be', 'have',
    'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could', 'should',
])

NUMBER = re.compile(r'\b\d+(\.\d+)?\b')
NUMBERED_ITEM = re.compile(r'\d+\.')


@dataclass(frozen=True)
class GapSpec:
    """A reference entry: absent when none of its triggers appear."""
    topic: str
    triggers: Tuple[str, ...]
    description: str
    priority: str
    query_frequency: int


@dataclass(frozen=True)
class TextSignals:
    """Facts about the text that the information gap conditions test."""
    has_numbers: bool
    has_details: bool
    has_lists: bool
    avg_sentence_length: float
    sentence_count: int


@dataclass(frozen=True)
class ConditionSpec:
    """A reference entry: present when its condition holds for the text."""
    topic: str
    condition: Callable[[TextSignals], bool]
    description: str
    priority: str
    query_frequency: int


PROMPT_GAPS: Tuple[GapSpec, ...] = (
    GapSpec("Definition", ("what is", "what are", "definition"),
            "Clear definitions of key terms", "High", 85),
    GapSpec("Benefits", ("benefit", "advantage", "why use"),
            "Benefits and advantages explanation", "High", 78),
    GapSpec("How-to Instructions", ("how to", "step by step", "instructions"),
            "Step-by-step guidance and instructions", "High", 82),
    GapSpec("Best Practices", ("best practice", "recommended", "should"),
            "Best practices and recommendations", "Medium", 65),
    GapSpec("Troubleshooting", ("problem", "issue", "error", "troubleshoot"),
            "Common problems and solutions", "Medium", 71),
    GapSpec("Examples", ("example", "for instance", "case study"),
            "Concrete examples and use cases", "Medium", 68),
    GapSpec("Comparison", ("vs", "versus", "compare", "difference"),
            "Comparisons with alternatives", "Low", 45),
    GapSpec("Pricing/Cost", ("cost", "price", "pricing", "expensive"),
            "Cost and pricing information", "Medium", 58),
)

CONTEXTUAL_GAPS: Tuple[GapSpec, ...] = (
    GapSpec("Prerequisites", ("prerequisite", "requirement", "before", "needed"),
            "Prerequisites and requirements", "Medium", 62),
    GapSpec("Getting Started", ("getting started", "begin", "first step", "setup"),
            "Getting started guidance", "High", 79),
    GapSpec("Advanced Topics", ("advanced", "expert", "complex", "detailed"),
            "Advanced or detailed information", "Low", 38),
    GapSpec("Related Topics", ("related", "see also", "similar", "connection"),
            "Related topics and cross-references", "Low", 42),
    GapSpec("Updates/Changes", ("update", "change", "new", "recent", "version"),
            "Recent updates and changes", "Medium", 55),
)

INFORMATION_GAPS: Tuple[ConditionSpec, ...] = (
    ConditionSpec("Quantitative Data", lambda s: not s.has_numbers,
                  "Specific numbers, statistics, or measurements", "Medium", 63),
    ConditionSpec("Detailed Explanations", lambda s: not s.has_details,
                  "More detailed explanations and specifications", "Medium", 67),
    ConditionSpec("Structured Lists", lambda s: not s.has_lists,
                  "Organized lists and bullet points", "Low", 48),
    ConditionSpec("Comprehensive Content", lambda s: s.avg_sentence_length < 15,
                  "More comprehensive and detailed content", "Medium", 59),
    ConditionSpec("Content Depth", lambda s: s.sentence_count < 10,
                  "Deeper exploration of the topic", "High", 73),
)


@dataclass(frozen=True)
class MainTopic:
    word: str
    frequency: int
    relevance: float

    def to_dict(self) -> Dict[str, Any]:
        return {'word': self.word, 'frequency': self.frequency, 'relevance': self.relevance}


@dataclass(frozen=True)
class ContentGapResult:
    """Ranked gaps (top 10), coverage score over all gaps, main topics."""
    gaps: Tuple[ContentGap, ...]
    coverage_score: int
    gap_count: int
    main_topics: Tuple[MainTopic, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gaps': [g.to_dict() for g in self.gaps],
            'coverage_score': self.coverage_score,
            'gap_count': self.gap_count,
            'main_topics': [t.to_dict() for t in self.main_topics],
        }


def find_absent(lowered_text: str, table: Sequence[GapSpec], source_kind: str) -> List[ContentGap]:
    """Gaps for every table entry none of whose triggers occur in the text."""
    return [
        ContentGap(entry.topic, entry.description, entry.priority, entry.query_frequency, source_kind)
        for entry in table
        if not any(trigger in lowered_text for trigger in entry.triggers)
    ]


def collect_signals(text: str, metrics: TextMetrics) -> TextSignals:
    if metrics.sentence_count:
        avg_length = metrics.word_count / metrics.sentence_count
    else:
        avg_length = 0.0

    return TextSignals(
        has_numbers=bool(NUMBER.search(text)),
        # Case-sensitive
        has_details='detail' in text or 'specific' in text,
        has_lists='•' in text or '-' in text or bool(NUMBERED_ITEM.search(text)),
        avg_sentence_length=avg_length,
        sentence_count=metrics.sentence_count,
    )


def rank_gaps(gaps: Sequence[ContentGap]) -> List[ContentGap]:
    """High priority first; order otherwise unchanged."""
    return sorted(gaps, key=lambda gap: gap.priority != 'High')


def calculate_coverage_score(gaps: Sequence[ContentGap]) -> int:
    if not gaps:
        return 100
    penalty = sum(PRIORITY_PENALTY[gap.priority] for gap in gaps)
    return max(0, 100 - penalty)


def extract_topic_keywords(words: Sequence[str]) -> List[str]:
    keywords = []
    for word in words:
        lowered = word.lower()
        if len(lowered) <= 3 or lowered in TOPIC_STOPWORDS:
            continue
        cleaned = normalize_word(lowered)
        if len(cleaned) > 3:
            keywords.append(cleaned)
    return keywords


def identify_main_topics(words: Sequence[str], limit: int = MAX_TOPICS) -> List[MainTopic]:
    """Most frequent repeated keywords with a relevance weight."""
    keywords = extract_topic_keywords(words)
    if not keywords:
        return []

    frequency = Counter(keywords)
    repeated = [(word, count) for word, count in frequency.items() if count > 1]
    repeated.sort(key=lambda item: item[1], reverse=True)

    return [
        MainTopic(word, count, min(100.0, count / len(keywords) * 1000))
        for word, count in repeated[:limit]
    ]


class ContentGapAnalyzer(BaseAnalyzer):
    """Prompt, contextual and information gaps plus main topics."""

    ANALYZER_NAME = "content_gaps"
    ANALYZER_VERSION = "1.0.0"

    def __init__(self,
                 prompt_gaps: Tuple[GapSpec, ...] = PROMPT_GAPS,
                 contextual_gaps: Tuple[GapSpec, ...] = CONTEXTUAL_GAPS,
                 information_gaps: Tuple[ConditionSpec, ...] = INFORMATION_GAPS):
        super().__init__()
        self.prompt_gaps = prompt_gaps
        self.contextual_gaps = contextual_gaps
        self.information_gaps = information_gaps

    def analyze(self, text: str, metrics: Optional[TextMetrics] = None) -> ContentGapResult:
        metrics = self.metrics_for(text, metrics)
        lowered = text.lower()

        all_gaps = rank_gaps(
            self.identify_prompt_gaps(lowered)
            + self.identify_contextual_gaps(lowered)
            + self.identify_information_gaps(text, metrics)
        )
        coverage = calculate_coverage_score(all_gaps)

        self._logger.debug(
            "Content gap analysis complete",
            gap_count=len(all_gaps), coverage_score=coverage,
        )

        return ContentGapResult(
            gaps=tuple(all_gaps[:MAX_GAPS]),
            coverage_score=coverage,
            gap_count=len(all_gaps),
            main_topics=tuple(identify_main_topics(metrics.words)),
        )

    def identify_prompt_gaps(self, lowered_text: str) -> List[ContentGap]:
        return find_absent(lowered_text, self.prompt_gaps, 'prompt')

    def identify_contextual_gaps(self, lowered_text: str) -> List[ContentGap]:
        return find_absent(lowered_text, self.contextual_gaps, 'contextual')

    def identify_information_gaps(self, text: str, metrics: TextMetrics) -> List[ContentGap]:
        signals = collect_signals(text, metrics)
        return [
            ContentGap(entry.topic, entry.description, entry.priority,
                       entry.query_frequency, 'information')
            for entry in self.information_gaps
            if entry.condition(signals)
        ]
