#!/usr/bin/env python3
"""
Base Analyzer Contract v1.0.0
=============================
Defines the value types every analyzer produces and the interface all
analyzers must implement.

Analyzers are pure functions of the document text: they hold no per-document
state, so one instance can serve concurrent analyses.
"""

from types import MappingProxyType
from typing import List, Dict, Any, Optional, Tuple, Mapping
from dataclasses import dataclass, field

from config_logging import AnalyzerFailure, get_logger
from text_metrics import TextMetrics, clamp_score

__version__ = "1.0.0"

SEVERITIES = ('low', 'medium', 'high')
PRIORITIES = ('High', 'Medium', 'Low')
GAP_SOURCES = ('prompt', 'contextual', 'information')


def freeze(value: Any) -> Any:
    """Read-only copy of nested metric values: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Plain dict/list copy of a frozen value, for serialization."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Issue:
    """A problem an analyzer found in the document."""
    type: str
    description: str
    severity: str  # low, medium, high

    def __post_init__(self):
        if self.severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {self.severity}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'description': self.description,
            'severity': self.severity,
        }


@dataclass(frozen=True)
class Recommendation:
    """An action expected to raise the document's score."""
    title: str
    description: str
    expected_improvement: int  # percentage points, 0-100

    def __post_init__(self):
        if not 0 <= self.expected_improvement <= 100:
            raise ValueError(f"expected_improvement out of range: {self.expected_improvement}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'description': self.description,
            'expected_improvement': self.expected_improvement,
        }


@dataclass(frozen=True)
class ContentGap:
    """A topic or information type the document appears to be missing."""
    topic: str
    description: str
    priority: str  # High, Medium, Low
    query_frequency: int  # 0-100
    source_kind: str  # prompt, contextual, information

    def __post_init__(self):
        if self.priority not in PRIORITIES:
            raise ValueError(f"Invalid priority: {self.priority}")
        if self.source_kind not in GAP_SOURCES:
            raise ValueError(f"Invalid gap source: {self.source_kind}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'topic': self.topic,
            'description': self.description,
            'priority': self.priority,
            'query_frequency': self.query_frequency,
            'source_kind': self.source_kind,
        }


@dataclass(frozen=True)
class AnalyzerResult:
    """Score, analyzer-specific metrics, issues and recommendations."""
    analyzer: str
    score: float
    metrics: Mapping[str, Any] = field(default_factory=dict)
    issues: Tuple[Issue, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'metrics', freeze(self.metrics))

    def __hash__(self):
        return hash((self.analyzer, self.score, self.issues, self.recommendations))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'analyzer': self.analyzer,
            'score': self.score,
            'metrics': thaw(self.metrics),
            'issues': [i.to_dict() for i in self.issues],
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


class BaseAnalyzer:
    """
    Base class for all document analyzers.

    All analyzers must implement:
    - analyze() returning the analyzer's result value
    - ANALYZER_NAME and ANALYZER_VERSION class attributes
    """

    ANALYZER_NAME = "base"
    ANALYZER_VERSION = "1.0.0"

    def __init__(self):
        self._logger = get_logger(self.ANALYZER_NAME)

    def analyze(self, text: str, metrics: Optional[TextMetrics] = None):
        """
        Analyze the document text.

        Args:
            text: Extracted plain text
            metrics: Precomputed metrics for ``text``; derived when omitted

        Returns:
            The analyzer's result value
        """
        raise NotImplementedError("Subclasses must implement analyze()")

    def run(self, text: str, metrics: Optional[TextMetrics] = None):
        """Run analyze(), reporting unexpected faults as AnalyzerFailure."""
        try:
            return self.analyze(text, metrics)
        except AnalyzerFailure:
            raise
        except Exception as e:
            self._logger.exception(f"{self.ANALYZER_NAME} analyzer raised: {e}",
                                   analyzer=self.ANALYZER_NAME)
            raise AnalyzerFailure(self.ANALYZER_NAME, f"{type(e).__name__}: {e}") from e

    def make_result(
        self,
        score: float,
        metrics: Dict[str, Any],
        issues: List[Issue],
        recommendations: List[Recommendation],
    ) -> AnalyzerResult:
        """Package a clamped score with the analyzer's findings."""
        return AnalyzerResult(
            analyzer=self.ANALYZER_NAME,
            score=clamp_score(score),
            metrics=metrics,
            issues=tuple(issues),
            recommendations=tuple(recommendations),
        )

    @staticmethod
    def create_issue(issue_type: str, description: str, severity: str) -> Issue:
        return Issue(type=issue_type, description=description, severity=severity)

    @staticmethod
    def create_recommendation(title: str, description: str,
                              expected_improvement: int) -> Recommendation:
        return Recommendation(title=title, description=description,
                              expected_improvement=expected_improvement)

    @staticmethod
    def metrics_for(text: str, metrics: Optional[TextMetrics]) -> TextMetrics:
        return metrics if metrics is not None else TextMetrics.from_text(text)
