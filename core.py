#!/usr/bin/env python3
"""
LLM Readiness Core Engine
=========================
Scores how ready a document is for retrieval and consumption by LLM systems.

Runs the five analyzers concurrently over one immutable text and joins their
results into a single AnalysisReport. Any analyzer failure or cancellation
aborts the whole analysis; a partial report is never returned.
Version is read from version.json via config_logging module.

Usage:
    python core.py guide.pdf
    python core.py notes.md --json
"""

import argparse
import json
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Optional, Callable, Any, Mapping

from base_analyzer import BaseAnalyzer
from config_logging import (
    VERSION as __version__, AnalyzerConfig, AnalysisCancelled, AnalyzerFailure,
    ReadinessError, ValidationError, StructuredLogger, get_config, get_logger,
)
from content_gap_analyzer import ContentGapAnalyzer
from embedding_analyzer import EmbeddingAnalyzer
from job_manager import JobManager, JobPhase, get_job_manager
from prompt_analyzer import PromptCoverageAnalyzer
from score_aggregator import AnalysisReport, ScoreAggregator
from structure_analyzer import StructureAnalyzer
from text_extractor import AnalysisInput
from text_metrics import TextMetrics
from token_analyzer import TokenAnalyzer

MODULE_VERSION = __version__


def default_analyzers() -> Dict[str, BaseAnalyzer]:
    """The five analyzers, keyed by the name the aggregator expects."""
    return {
        'structure': StructureAnalyzer(),
        'tokens': TokenAnalyzer(),
        'embedding': EmbeddingAnalyzer(),
        'prompt_coverage': PromptCoverageAnalyzer(),
        'content_gaps': ContentGapAnalyzer(),
    }


class AnalysisEngine:
    """
    LLM readiness analysis engine.
    Fans the analyzers out over a thread pool and aggregates their results.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None,
                 analyzers: Optional[Dict[str, BaseAnalyzer]] = None):
        self.config = config or get_config()
        self.analyzers = analyzers if analyzers is not None else default_analyzers()
        self.aggregator = ScoreAggregator()
        self._logger = get_logger('core')

    def analyze(self, text: str, source: Optional[Mapping[str, Any]] = None,
                cancellation_check: Optional[Callable[[], bool]] = None,
                progress_callback: Optional[Callable[[str, int, int], None]] = None
                ) -> AnalysisReport:
        """
        Analyze extracted document text.

        Args:
            text: Non-empty plain text
            source: Optional display facts about the input, carried into the report
            cancellation_check: Polled at submission and after each analyzer
                                completes. Signature: check() -> bool
            progress_callback: Called as each analyzer completes.
                               Signature: callback(name, completed, total)

        Returns:
            AnalysisReport

        Raises:
            ValidationError: empty or whitespace-only text
            AnalyzerFailure: an analyzer raised; the analysis is abandoned
            AnalysisCancelled: cancellation_check returned True
            AggregationFailure: a required result is missing
        """
        if not text or not text.strip():
            raise ValidationError("Text content is required for analysis", field='text')

        def is_cancelled() -> bool:
            if cancellation_check:
                try:
                    return bool(cancellation_check())
                except Exception as e:
                    self._logger.warning(f"Cancellation check error: {e}")
            return False

        def report_progress(name: str, completed: int, total: int):
            if progress_callback:
                try:
                    progress_callback(name, completed, total)
                except Exception as e:
                    self._logger.warning(f"Progress callback error: {e}")

        correlation_id = StructuredLogger.new_correlation_id()
        metrics = TextMetrics.from_text(text)

        with self._logger.log_operation('analysis', words=metrics.word_count,
                                        characters=metrics.character_count):
            results = self._run_analyzers(text, metrics, is_cancelled, report_progress,
                                          correlation_id)
            return self.aggregator.aggregate(
                results.get('structure'),
                results.get('tokens'),
                results.get('embedding'),
                results.get('prompt_coverage'),
                results.get('content_gaps'),
                metrics,
                source=source,
            )

    def _run_analyzers(self, text: str, metrics: TextMetrics,
                       is_cancelled: Callable[[], bool],
                       report_progress: Callable[[str, int, int], None],
                       correlation_id: Optional[str] = None) -> Dict[str, Any]:
        """Fan out every analyzer and join; first failure or cancellation aborts."""
        results: Dict[str, Any] = {}
        total = len(self.analyzers)
        workers = max(1, min(self.config.max_workers, total))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='analyzer') as executor:
            futures = {}
            try:
                for name, analyzer in self.analyzers.items():
                    if is_cancelled():
                        raise AnalysisCancelled(stage='submission')
                    futures[executor.submit(
                        self._run_one, analyzer, text, metrics, correlation_id)] = name

                for future in as_completed(futures):
                    name = futures[future]
                    try:
                        results[name] = future.result()
                    except AnalyzerFailure:
                        raise
                    except Exception as e:
                        raise AnalyzerFailure(name, f"{type(e).__name__}: {e}") from e

                    report_progress(name, len(results), total)
                    if is_cancelled():
                        raise AnalysisCancelled(stage='analysis', completed=len(results))
            except ReadinessError as e:
                for pending in futures:
                    pending.cancel()
                self._logger.warning(f"Analysis aborted: {e.message}", code=e.code)
                raise

        return results

    @staticmethod
    def _run_one(analyzer: BaseAnalyzer, text: str, metrics: TextMetrics,
                 correlation_id: Optional[str]):
        """Run one analyzer on a pool thread under the analysis correlation ID."""
        if correlation_id:
            StructuredLogger.set_correlation_id(correlation_id)
        return analyzer.run(text, metrics)

    def run_job(self, job_id: str, text: str,
                job_manager: Optional[JobManager] = None,
                source: Optional[Mapping[str, Any]] = None) -> Optional[AnalysisReport]:
        """
        Drive one stored job over already extracted text.

        Failures are recorded on the job; a cancelled job never receives a result.

        Returns:
            The report, or None if the job failed, was cancelled or is unknown
        """
        manager = job_manager or get_job_manager()
        if not manager.start_job(job_id):
            return None
        return self._analyze_job(manager, job_id, text, source)

    def run_payload_job(self, job_id: str, payload: bytes,
                        content_type: Optional[str] = None,
                        filename: Optional[str] = None,
                        job_manager: Optional[JobManager] = None) -> Optional[AnalysisReport]:
        """
        Drive one stored job from raw document bytes: extract, analyze, aggregate.

        Returns:
            The report, or None if the job failed, was cancelled or is unknown
        """
        manager = job_manager or get_job_manager()
        if not manager.start_job(job_id):
            return None

        manager.update_phase(job_id, JobPhase.EXTRACTING, "Extracting text...")
        try:
            source = AnalysisInput.from_payload(payload, content_type, filename)
        except ReadinessError as e:
            manager.fail_job(job_id, e.to_dict()['error'])
            return None
        except Exception as e:
            manager.fail_job(job_id, internal_error(e))
            raise

        manager.update_phase_progress(job_id, 100, f"Extracted {source.file_size} {source.file_type}")
        return self._analyze_job(manager, job_id, source.text, source.display())

    def _analyze_job(self, manager: JobManager, job_id: str, text: str,
                     source: Optional[Mapping[str, Any]]) -> Optional[AnalysisReport]:
        manager.update_phase(job_id, JobPhase.ANALYZING, "Running analyzers...")

        def on_progress(name: str, completed: int, total: int):
            manager.update_analyzer_progress(job_id, name, completed, total)
            if completed == total:
                manager.update_phase(job_id, JobPhase.AGGREGATING, "Aggregating scores...")

        try:
            report = self.analyze(
                text,
                source=source,
                cancellation_check=lambda: manager.is_cancelled(job_id),
                progress_callback=on_progress,
            )
        except AnalysisCancelled:
            manager.cancel_job(job_id)
            return None
        except ReadinessError as e:
            manager.fail_job(job_id, e.to_dict()['error'])
            return None
        except Exception as e:
            manager.fail_job(job_id, internal_error(e))
            raise

        if not manager.complete_job(job_id, report):
            # Cancelled between the last check and completion
            return None
        return report


def internal_error(error: Exception) -> Dict[str, Any]:
    """Job error payload for a fault outside the error taxonomy."""
    return {
        'code': 'INTERNAL_ERROR',
        'message': f"{type(error).__name__}: {error}",
        'details': {},
    }


# Shared engine instance
_engine: Optional[AnalysisEngine] = None


def get_engine() -> AnalysisEngine:
    """Get or create the shared analysis engine."""
    global _engine
    if _engine is None:
        _engine = AnalysisEngine()
    return _engine


def analyze(text: str) -> AnalysisReport:
    """Analyze text with the shared engine."""
    return get_engine().analyze(text)


def _print_summary(report: AnalysisReport, source: AnalysisInput):
    print(f"{source.filename} ({source.file_type}, {source.file_size})")
    print("=" * 50)
    print(f"  Overall score:       {report.overall_score}")
    print(f"  Structure:           {report.structure_score}")
    print(f"  Token efficiency:    {report.token_efficiency}")
    print(f"  Embedding potential: {report.embedding_potential}")
    print(f"  Prompt coverage:     {report.prompt_coverage}")
    print(f"  Gap coverage:        {report.gap_coverage_score}")
    print(f"  Tokens:              {report.token_count}")
    print(f"  Readability:         {report.readability_level}")

    if report.issues:
        print("\nIssues:")
        for issue in report.issues:
            print(f"  [{issue.severity}] {issue.type}: {issue.description}")

    if report.recommendations:
        print(f"\nRecommendations (potential +{report.potential_improvement}):")
        for rec in report.recommendations:
            print(f"  - {rec.title}: {rec.description}")

    if report.content_gaps:
        print("\nContent gaps:")
        for gap in report.content_gaps:
            print(f"  [{gap.priority}] {gap.topic}: {gap.description}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description=f"LLM Readiness Analyzer v{MODULE_VERSION}"
    )
    parser.add_argument('file', help='Document to analyze (.pdf, .docx, .doc, .html, .txt, .md)')
    parser.add_argument('--json', action='store_true', help='Print the full report as JSON')
    parser.add_argument('--workers', type=int, default=None, help='Analyzer worker threads')
    args = parser.parse_args(argv)

    config = AnalyzerConfig.from_env()
    if args.workers is not None:
        config.max_workers = args.workers
    valid, errors = config.validate()
    if not valid:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 2

    path = Path(args.file)
    try:
        source = AnalysisInput.from_payload(path.read_bytes(), filename=path.name)
        report = AnalysisEngine(config).analyze(source.text, source=source.display())
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return 1
    except ReadinessError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        _print_summary(report, source)
    return 0


if __name__ == "__main__":
    sys.exit(main())
