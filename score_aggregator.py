#!/usr/bin/env python3
"""
Score Aggregator v1.0.0
=======================
Joins the five analyzer results into one AnalysisReport.

The overall score is the unweighted mean of the four primary analyzer scores
(each rounded first). Aggregation never produces a partial report: every
result must be present.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Mapping

from base_analyzer import AnalyzerResult, Issue, Recommendation, ContentGap, freeze, thaw
from config_logging import AggregationFailure, get_logger
from content_gap_analyzer import ContentGapResult, MainTopic
from text_metrics import TextMetrics, round_half_up

__version__ = "1.0.0"

MAX_ISSUES = 10
MAX_RECOMMENDATIONS = 8

REQUIRED_RESULTS = ('structure', 'tokens', 'embedding', 'prompt_coverage', 'content_gaps')


@dataclass(frozen=True)
class AnalysisReport:
    """Complete readiness report for one document."""
    overall_score: int
    structure_score: int
    clarity_score: int
    token_efficiency: int
    embedding_potential: int
    prompt_coverage: int
    token_count: int
    readability_level: str
    avg_sentence_length: int
    complex_words_percent: int
    potential_improvement: int
    token_breakdown: Mapping[str, int]
    issues: Tuple[Issue, ...]
    recommendations: Tuple[Recommendation, ...]
    content_gaps: Tuple[ContentGap, ...]
    gap_coverage_score: int
    main_topics: Tuple[MainTopic, ...]
    text_metrics: TextMetrics
    source: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'token_breakdown', freeze(self.token_breakdown))
        if self.source is not None:
            object.__setattr__(self, 'source', freeze(self.source))

    def __hash__(self):
        return hash((
            self.overall_score, self.token_count, tuple(sorted(self.token_breakdown.items())),
            self.issues, self.recommendations, self.content_gaps, self.text_metrics,
        ))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'overall_score': self.overall_score,
            'structure_score': self.structure_score,
            'clarity_score': self.clarity_score,
            'token_efficiency': self.token_efficiency,
            'embedding_potential': self.embedding_potential,
            'prompt_coverage': self.prompt_coverage,
            'token_count': self.token_count,
            'readability_level': self.readability_level,
            'avg_sentence_length': self.avg_sentence_length,
            'complex_words_percent': self.complex_words_percent,
            'potential_improvement': self.potential_improvement,
            'token_breakdown': thaw(self.token_breakdown),
            'issues': [i.to_dict() for i in self.issues],
            'recommendations': [r.to_dict() for r in self.recommendations],
            'content_gaps': [g.to_dict() for g in self.content_gaps],
            'gap_coverage_score': self.gap_coverage_score,
            'main_topics': [t.to_dict() for t in self.main_topics],
            'text_metrics': self.text_metrics.to_dict(),
        }
        if self.source is not None:
            data['source'] = thaw(self.source)
        return data


class ScoreAggregator:
    """Builds the AnalysisReport from the analyzer results."""

    def __init__(self):
        self._logger = get_logger('aggregator')

    def aggregate(
        self,
        structure: Optional[AnalyzerResult],
        tokens: Optional[AnalyzerResult],
        embedding: Optional[AnalyzerResult],
        prompt: Optional[AnalyzerResult],
        gaps: Optional[ContentGapResult],
        metrics: TextMetrics,
        source: Optional[Mapping[str, Any]] = None,
    ) -> AnalysisReport:
        """
        Combine sub-results into a report.

        Raises:
            AggregationFailure: if any of the five results is missing
        """
        supplied = dict(zip(REQUIRED_RESULTS, (structure, tokens, embedding, prompt, gaps)))
        missing = [name for name, result in supplied.items() if result is None]
        if missing:
            self._logger.error("Aggregation aborted", missing=missing)
            raise AggregationFailure(missing)

        primary = (structure, tokens, embedding, prompt)
        rounded = [round_half_up(r.score) for r in primary]
        overall = round_half_up(sum(rounded) / len(rounded))

        all_issues = self.collect_issues(primary)
        all_recommendations = self.collect_recommendations(primary)
        improvement = self.potential_improvement(all_recommendations)

        structure_metrics = structure.metrics
        token_metrics = tokens.metrics

        return AnalysisReport(
            overall_score=overall,
            structure_score=rounded[0],
            clarity_score=structure_metrics.get('clarity_score', 0),
            token_efficiency=rounded[1],
            embedding_potential=rounded[2],
            prompt_coverage=rounded[3],
            token_count=token_metrics.get('total_tokens', 0),
            readability_level=structure_metrics.get('readability_level', 'Unknown'),
            avg_sentence_length=structure_metrics.get('avg_sentence_length', 0),
            complex_words_percent=structure_metrics.get('complex_words_percent', 0),
            potential_improvement=improvement,
            token_breakdown={
                'headers': token_metrics.get('header_tokens', 0),
                'content': token_metrics.get('content_tokens', 0),
                'metadata': token_metrics.get('metadata_tokens', 0),
            },
            issues=tuple(all_issues[:MAX_ISSUES]),
            recommendations=tuple(all_recommendations[:MAX_RECOMMENDATIONS]),
            content_gaps=tuple(gaps.gaps),
            gap_coverage_score=gaps.coverage_score,
            main_topics=tuple(gaps.main_topics),
            text_metrics=metrics,
            source=source,
        )

    @staticmethod
    def collect_issues(results) -> List[Issue]:
        """Issues in analyzer order, dropping entries without a type."""
        return [issue for r in results for issue in r.issues if issue.type]

    @staticmethod
    def collect_recommendations(results) -> List[Recommendation]:
        return [rec for r in results for rec in r.recommendations if rec.title]

    @staticmethod
    def potential_improvement(recommendations: List[Recommendation]) -> int:
        if not recommendations:
            return 0
        total = sum(r.expected_improvement for r in recommendations)
        return round_half_up(total / len(recommendations))
