#!/usr/bin/env python3
"""
Prompt Coverage Analyzer v1.0.0
===============================
Checks how many common question intents the document can answer.

Scoring blends three signals:
- Intent coverage (50%): weighted share of the intent taxonomy matched
- Answerability (30%): balance of question cues versus answer cues
- Completeness (20%): expected section types present under headers

The intent taxonomy is data (INTENT_TAXONOMY); adding an intent means adding
a row, not a branch.
"""

import re
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple

from base_analyzer import BaseAnalyzer, AnalyzerResult, Issue, Recommendation
from text_metrics import TextMetrics, is_header_line, round_half_up, round_to

__version__ = "1.0.0"


@dataclass(frozen=True)
class IntentSpec:
    """One question intent and the lexical triggers that satisfy it."""
    name: str
    kind: str
    weight: float
    patterns: Tuple[str, ...]
    # Dedicated recommendation when this intent is missing and weight exceeds the minimum
    recommendation: Optional[Tuple[str, str, int]] = None
    recommendation_min_weight: float = 0.0


INTENT_TAXONOMY: Tuple[IntentSpec, ...] = (
    IntentSpec("What is", "definition", 0.20,
               ("what is", "what are", "define", "definition of")),
    IntentSpec("How to", "instruction", 0.25,
               ("how to", "how do", "how can", "steps to", "process"),
               recommendation=("Add Step-by-Step Instructions",
                               "Include practical how-to guidance", 18),
               recommendation_min_weight=0.2),
    IntentSpec("Why", "explanation", 0.15,
               ("why", "reason", "because", "purpose", "benefit")),
    IntentSpec("When", "temporal", 0.10,
               ("when", "timing", "schedule", "time")),
    IntentSpec("Where", "location", 0.10,
               ("where", "location", "place")),
    IntentSpec("Examples", "example", 0.15,
               ("example", "for instance", "such as", "including"),
               recommendation=("Include More Examples",
                               "Add concrete examples and use cases", 10),
               recommendation_min_weight=0.1),
    IntentSpec("Comparison", "comparison", 0.05,
               ("vs", "versus", "compared to", "difference", "similar")),
)

HIGH_VALUE_WEIGHT = 0.15

QUESTION_CUE = re.compile(r'\b(what|how|why|when|where|who|which)\b')
ANSWER_CUES = [
    re.compile(r'\b(is|are|means|refers|involves|includes)\b'),
    re.compile(r'\b(because|due to|results in|leads to)\b'),
    re.compile(r'\b(for example|such as|including)\b'),
]

# Section type -> header keywords, checked in order; unmatched headers are "general"
SECTION_TYPES: Tuple[Tuple[str, re.Pattern], ...] = (
    ("introduction", re.compile(r'intro|overview|background')),
    ("definition", re.compile(r'definition|what is|meaning')),
    ("explanation", re.compile(r'how|process|steps|method')),
    ("examples", re.compile(r'example|instance|case|sample')),
    ("conclusion", re.compile(r'conclusion|summary|final')),
)
EXPECTED_SECTIONS = tuple(name for name, _ in SECTION_TYPES)


@dataclass(frozen=True)
class IntentMatch:
    intent: IntentSpec
    count: int


@dataclass(frozen=True)
class CoverageAnalysis:
    matches: Tuple[IntentMatch, ...]
    missing: Tuple[IntentSpec, ...]
    percentage: float


@dataclass(frozen=True)
class AnswerabilityAnalysis:
    score: int
    question_count: int
    answer_count: int
    ratio: float


@dataclass(frozen=True)
class CompletenessAnalysis:
    score: int
    found_sections: int
    total_sections: int
    missing_sections: Tuple[str, ...]


def _intent_regex(pattern: str) -> re.Pattern:
    return re.compile(r'\b' + re.escape(pattern) + r'\b', re.IGNORECASE)


def classify_section(header: str) -> str:
    lowered = header.lower()
    for name, keywords in SECTION_TYPES:
        if keywords.search(lowered):
            return name
    return "general"


def identify_sections(metrics: TextMetrics) -> List[Tuple[str, str]]:
    """(header text, section type) for every header line."""
    sections = []
    for line in metrics.lines:
        trimmed = line.strip()
        if is_header_line(trimmed):
            sections.append((trimmed, classify_section(trimmed)))
    return sections


class PromptCoverageAnalyzer(BaseAnalyzer):
    """Intent coverage, answerability and section completeness."""

    ANALYZER_NAME = "prompt_coverage"
    ANALYZER_VERSION = "1.0.0"

    def __init__(self, taxonomy: Tuple[IntentSpec, ...] = INTENT_TAXONOMY):
        super().__init__()
        self.taxonomy = taxonomy
        self._compiled = {
            intent.name: [_intent_regex(p) for p in intent.patterns]
            for intent in taxonomy
        }

    def analyze(self, text: str, metrics: Optional[TextMetrics] = None) -> AnalyzerResult:
        metrics = self.metrics_for(text, metrics)

        coverage = self.analyze_coverage(text)
        answerability = self.analyze_answerability(metrics)
        completeness = self.analyze_completeness(metrics)

        score = round_half_up(
            coverage.percentage * 0.5
            + answerability.score * 0.3
            + completeness.score * 0.2
        )

        self._logger.debug(
            "Prompt coverage analysis complete",
            score=score, missing_intents=len(coverage.missing),
        )

        result_metrics: Dict[str, Any] = {
            'coverage_percentage': round_half_up(coverage.percentage),
            'prompt_matches': {
                m.intent.name: {'count': m.count, 'weight': m.intent.weight, 'type': m.intent.kind}
                for m in coverage.matches
            },
            'missing_prompt_types': [
                {'type': i.name, 'weight': i.weight, 'expected_patterns': list(i.patterns)}
                for i in coverage.missing
            ],
            'answerability_score': answerability.score,
            'question_count': answerability.question_count,
            'answer_count': answerability.answer_count,
            'answer_ratio': answerability.ratio,
            'completeness_score': completeness.score,
            'found_sections': completeness.found_sections,
            'total_sections': completeness.total_sections,
            'missing_sections': list(completeness.missing_sections),
        }

        return self.make_result(
            score,
            result_metrics,
            self._identify_issues(coverage, answerability, completeness),
            self._generate_recommendations(coverage, answerability, completeness),
        )

    def analyze_coverage(self, text: str) -> CoverageAnalysis:
        lowered = text.lower()
        matches: List[IntentMatch] = []
        missing: List[IntentSpec] = []

        for intent in self.taxonomy:
            count = sum(len(regex.findall(lowered)) for regex in self._compiled[intent.name])
            if count:
                matches.append(IntentMatch(intent, count))
            else:
                missing.append(intent)

        total_weight = sum(intent.weight for intent in self.taxonomy)
        covered_weight = sum(m.intent.weight for m in matches)
        percentage = covered_weight / total_weight * 100 if total_weight else 0.0

        return CoverageAnalysis(tuple(matches), tuple(missing), percentage)

    def analyze_answerability(self, metrics: TextMetrics) -> AnswerabilityAnalysis:
        questions = 0
        answers = 0

        for sentence in metrics.sentences:
            lowered = sentence.lower().strip()
            if QUESTION_CUE.search(lowered) or lowered.endswith('?'):
                questions += 1
            if any(cue.search(lowered) for cue in ANSWER_CUES):
                answers += 1

        if questions == 0:
            # Declarative content is not penalized for lacking explicit Q&A
            score = 80.0 if answers > 0 else 60.0
        else:
            score = answers / (questions + answers) * 100

        return AnswerabilityAnalysis(
            score=round_half_up(min(100.0, score)),
            question_count=questions,
            answer_count=answers,
            ratio=round_to(answers / questions, 2) if questions else 0,
        )

    def analyze_completeness(self, metrics: TextMetrics) -> CompletenessAnalysis:
        sections = identify_sections(metrics)
        found_types = {kind for _, kind in sections if kind in EXPECTED_SECTIONS}

        score = len(found_types) / len(EXPECTED_SECTIONS) * 100
        if len(sections) >= 5:
            score += 10
        if len(sections) >= 3 and len(metrics.paragraphs) >= 4:
            score += 15

        return CompletenessAnalysis(
            score=round_half_up(min(100.0, score)),
            found_sections=len(found_types),
            total_sections=len(sections),
            missing_sections=tuple(s for s in EXPECTED_SECTIONS if s not in found_types),
        )

    def _identify_issues(self, coverage: CoverageAnalysis,
                         answerability: AnswerabilityAnalysis,
                         completeness: CompletenessAnalysis) -> List[Issue]:
        issues = []

        if len(coverage.missing) > 3:
            issues.append(self.create_issue(
                "Poor Prompt Coverage",
                "Content doesn't address many common question types",
                "high",
            ))

        if answerability.score < 50:
            issues.append(self.create_issue(
                "Low Answerability",
                "Content raises questions without providing clear answers",
                "medium",
            ))

        if completeness.score < 60:
            issues.append(self.create_issue(
                "Incomplete Coverage",
                "Content lacks comprehensive coverage of the topic",
                "medium",
            ))

        if answerability.question_count > answerability.answer_count * 2:
            issues.append(self.create_issue(
                "Too Many Unanswered Questions",
                "Content poses more questions than it answers",
                "low",
            ))

        return issues

    def _generate_recommendations(self, coverage: CoverageAnalysis,
                                  answerability: AnswerabilityAnalysis,
                                  completeness: CompletenessAnalysis) -> List[Recommendation]:
        recommendations = []

        high_value = [i.name for i in coverage.missing if i.weight > HIGH_VALUE_WEIGHT]
        if high_value:
            recommendations.append(self.create_recommendation(
                "Add Missing Question Types",
                f"Address {', '.join(high_value)} questions",
                20,
            ))

        if answerability.score < 70:
            recommendations.append(self.create_recommendation(
                "Improve Answer Clarity",
                "Provide clearer, more direct answers to implied questions",
                15,
            ))

        if completeness.missing_sections:
            recommendations.append(self.create_recommendation(
                "Add Missing Sections",
                f"Include {', '.join(completeness.missing_sections)} sections",
                12,
            ))

        for intent in coverage.missing:
            if intent.recommendation and intent.weight > intent.recommendation_min_weight:
                recommendations.append(self.create_recommendation(*intent.recommendation))

        return recommendations
