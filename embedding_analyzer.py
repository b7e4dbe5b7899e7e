#!/usr/bin/env python3
"""
Embedding Suitability Analyzer v1.0.0
=====================================
Estimates how well the text will chunk and embed for retrieval.

Three sub-analyses, weighted 0.4 / 0.3 / 0.3:
- Semantic richness: vocabulary diversity and concept density
- Structural suitability: paragraph length and adjacent-sentence overlap
- Contextual coherence: topic word coverage and context switches

All signals are lexical; "concept words" are a length/suffix/capitalization
proxy for domain terms, not part-of-speech tags.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Sequence

from base_analyzer import BaseAnalyzer, AnalyzerResult, Issue, Recommendation
from text_metrics import TextMetrics, normalize_word, round_half_up, split_sentences

__version__ = "1.0.0"

WEIGHTS = {
    'semantic': 0.4,
    'structural': 0.3,
    'contextual': 0.3,
}

STOPWORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'up', 'about', 'into', 'through', 'during',
    'before', 'after', 'above', 'below', 'between', 'among', 'this', 'that',
    'these', 'those', 'is', 'was', 'are', 'were', 'been', 'be', 'have',
    'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could', 'should',
])

CONCEPT_SUFFIXES = re.compile(r'(tion|sion|ment|ness|ity|ism)$')

CONTEXT_SWITCH_MARKERS = (
    'however', 'meanwhile', 'furthermore', 'additionally', 'in contrast',
    'on the other hand', 'alternatively', 'conversely', 'nevertheless',
)

MAX_TOPIC_WORDS = 20
SINGLE_SENTENCE_COHERENCE = 50


@dataclass(frozen=True)
class SemanticAnalysis:
    score: int
    vocabulary_diversity: int  # percent
    concept_density: int  # percent


@dataclass(frozen=True)
class StructuralAnalysis:
    score: int
    avg_paragraph_length: int
    paragraph_count: int
    coherence_score: int


@dataclass(frozen=True)
class ContextualAnalysis:
    score: int
    topic_coherence: int
    context_stability: int
    topic_words: int
    context_switches: int


def is_concept_word(word: str) -> bool:
    cleaned = normalize_word(word)
    if cleaned in STOPWORDS or len(cleaned) < 3:
        return False
    return (
        len(cleaned) > 4
        or bool(CONCEPT_SUFFIXES.search(cleaned))
        or bool(re.match(r'^[A-Z]', word))
    )


def extract_topic_words(words: Sequence[str]) -> List[str]:
    """Most frequent concept words that occur more than once."""
    frequency = Counter(normalize_word(w) for w in words if is_concept_word(w))
    repeated = [(word, count) for word, count in frequency.items() if count > 1]
    repeated.sort(key=lambda item: item[1], reverse=True)
    return [word for word, _ in repeated[:MAX_TOPIC_WORDS]]


def calculate_topic_coherence(topic_words: Sequence[str], sentences: Sequence[str]) -> float:
    """Percentage of sentences mentioning at least one topic word."""
    if not topic_words or not sentences:
        return 0.0

    coherent = 0
    for sentence in sentences:
        sentence_words = sentence.lower().split()
        if any(topic in word for topic in topic_words for word in sentence_words):
            coherent += 1
    return coherent / len(sentences) * 100


def count_context_switches(sentences: Sequence[str]) -> int:
    return sum(
        1 for sentence in sentences
        if any(marker in sentence.lower() for marker in CONTEXT_SWITCH_MARKERS)
    )


def sentence_overlap(previous: str, current: str) -> float:
    """Shared words relative to the smaller sentence, as a percentage."""
    prev_words = set(previous.lower().split())
    curr_words = set(current.lower().split())
    smaller = min(len(prev_words), len(curr_words))
    if not smaller:
        return 0.0
    return len(prev_words & curr_words) / smaller * 100


def calculate_paragraph_coherence(paragraphs: Sequence[str]) -> float:
    if not paragraphs:
        return 0.0

    total = 0.0
    for paragraph in paragraphs:
        sentences = split_sentences(paragraph)
        if len(sentences) < 2:
            total += SINGLE_SENTENCE_COHERENCE
            continue
        overlaps = [sentence_overlap(a, b) for a, b in zip(sentences, sentences[1:])]
        total += sum(overlaps) / len(overlaps)
    return total / len(paragraphs)


class EmbeddingAnalyzer(BaseAnalyzer):
    """Semantic richness, chunk structure and topical coherence."""

    ANALYZER_NAME = "embedding"
    ANALYZER_VERSION = "1.0.0"

    def analyze(self, text: str, metrics: Optional[TextMetrics] = None) -> AnalyzerResult:
        metrics = self.metrics_for(text, metrics)

        semantic = self.analyze_semantic_richness(metrics)
        structural = self.analyze_structure(metrics)
        contextual = self.analyze_contextual_coherence(metrics)

        score = round_half_up(
            semantic.score * WEIGHTS['semantic']
            + structural.score * WEIGHTS['structural']
            + contextual.score * WEIGHTS['contextual']
        )

        self._logger.debug(
            "Embedding analysis complete",
            score=score, concept_density=semantic.concept_density,
            context_switches=contextual.context_switches,
        )

        result_metrics: Dict[str, Any] = {
            'semantic_richness': semantic.score,
            'structural_suitability': structural.score,
            'contextual_coherence': contextual.score,
            'concept_density': semantic.concept_density,
            'vocabulary_diversity': semantic.vocabulary_diversity,
            'avg_paragraph_length': structural.avg_paragraph_length,
            'paragraph_count': structural.paragraph_count,
            'paragraph_coherence': structural.coherence_score,
            'topic_coherence': contextual.topic_coherence,
            'context_stability': contextual.context_stability,
            'topic_words': contextual.topic_words,
            'context_switches': contextual.context_switches,
        }

        return self.make_result(
            score,
            result_metrics,
            self._identify_issues(semantic, structural, contextual),
            self._generate_recommendations(semantic, structural, contextual),
        )

    def analyze_semantic_richness(self, metrics: TextMetrics) -> SemanticAnalysis:
        words = metrics.words
        if not words:
            return SemanticAnalysis(score=0, vocabulary_diversity=0, concept_density=0)

        # Punctuation-only tokens normalize to "" and count as one distinct entry
        unique = {normalize_word(w) for w in words}
        diversity = len(unique) / len(words)
        density = sum(1 for w in words if is_concept_word(w)) / len(words)

        return SemanticAnalysis(
            score=round_half_up(min(100.0, (0.4 * diversity + 0.6 * density) * 100)),
            vocabulary_diversity=round_half_up(diversity * 100),
            concept_density=round_half_up(density * 100),
        )

    def analyze_structure(self, metrics: TextMetrics) -> StructuralAnalysis:
        paragraphs = metrics.paragraphs
        score = 100.0

        lengths = [len(p.split()) for p in paragraphs]
        avg_length = sum(lengths) / len(lengths) if lengths else 0.0

        if avg_length < 20:
            score -= 15  # too short for meaningful chunks
        elif avg_length > 200:
            score -= 20  # too long for a coherent chunk

        coherence = calculate_paragraph_coherence(paragraphs)
        score *= coherence / 100

        return StructuralAnalysis(
            score=round_half_up(max(0.0, score)),
            avg_paragraph_length=round_half_up(avg_length),
            paragraph_count=len(paragraphs),
            coherence_score=round_half_up(coherence),
        )

    def analyze_contextual_coherence(self, metrics: TextMetrics) -> ContextualAnalysis:
        sentences = metrics.sentences

        topic_words = extract_topic_words(metrics.words)
        topic_coherence = calculate_topic_coherence(topic_words, sentences)

        switches = count_context_switches(sentences)
        stability = max(0, 100 - switches * 10)

        return ContextualAnalysis(
            score=round_half_up((topic_coherence + stability) / 2),
            topic_coherence=round_half_up(topic_coherence),
            context_stability=stability,
            topic_words=len(topic_words),
            context_switches=switches,
        )

    def _identify_issues(self, semantic: SemanticAnalysis, structural: StructuralAnalysis,
                         contextual: ContextualAnalysis) -> List[Issue]:
        issues = []

        if semantic.concept_density < 15:
            issues.append(self.create_issue(
                "Low Concept Density",
                "Content lacks meaningful concepts for rich embeddings",
                "high",
            ))

        if structural.avg_paragraph_length < 15:
            issues.append(self.create_issue(
                "Short Paragraphs",
                "Paragraphs too short for meaningful semantic chunks",
                "medium",
            ))

        if contextual.context_switches > 10:
            issues.append(self.create_issue(
                "Frequent Context Switches",
                "Content jumps between topics too frequently",
                "medium",
            ))

        if semantic.vocabulary_diversity < 30:
            issues.append(self.create_issue(
                "Limited Vocabulary",
                "Repetitive vocabulary reduces embedding richness",
                "low",
            ))

        return issues

    def _generate_recommendations(self, semantic: SemanticAnalysis,
                                  structural: StructuralAnalysis,
                                  contextual: ContextualAnalysis) -> List[Recommendation]:
        recommendations = []

        if semantic.concept_density < 20:
            recommendations.append(self.create_recommendation(
                "Increase Concept Density",
                "Add more specific terms and technical concepts",
                18,
            ))

        if structural.avg_paragraph_length < 20:
            recommendations.append(self.create_recommendation(
                "Expand Paragraphs",
                "Combine related sentences into more substantial paragraphs",
                15,
            ))

        if contextual.topic_coherence < 70:
            recommendations.append(self.create_recommendation(
                "Improve Topic Flow",
                "Better organize content to maintain topic coherence",
                12,
            ))

        if semantic.vocabulary_diversity < 40:
            recommendations.append(self.create_recommendation(
                "Diversify Vocabulary",
                "Use more varied terminology and synonyms",
                8,
            ))

        return recommendations
