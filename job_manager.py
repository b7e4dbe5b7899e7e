#!/usr/bin/env python3
"""
LLM Readiness - Job Manager Module
==================================
Version: reads from version.json (module v1.0)

In-memory result store for readiness analyses, kept outside the pipeline.

Features:
- Job records with short unique job_id
- Phase-based progress tracking (extract → analyze → aggregate)
- Per-analyzer completion counts during the ANALYZING phase
- Elapsed time and ETA calculation
- Cancellation (a cancelled job never receives a result)
- TTL and capacity eviction of finished jobs
- Thread-safe storage (re-entrant lock)
"""

import uuid
import time
import threading
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from datetime import datetime

from config_logging import get_config, get_logger

__version__ = "1.0.0"

logger = get_logger('job_manager')


class JobPhase(Enum):
    """Processing phases for one analysis."""
    QUEUED = "queued"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    AGGREGATING = "aggregating"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobStatus(Enum):
    """Overall job status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


FINISHED = (JobStatus.COMPLETE, JobStatus.FAILED, JobStatus.CANCELLED)

# Phase weights for progress calculation (total = 100)
PHASE_WEIGHTS = {
    JobPhase.QUEUED: 0,
    JobPhase.EXTRACTING: 20,
    JobPhase.ANALYZING: 70,
    JobPhase.AGGREGATING: 10,
    JobPhase.COMPLETE: 100,
    JobPhase.FAILED: 0,
    JobPhase.CANCELLED: 0,
}

# Cumulative progress at start of each phase
PHASE_PROGRESS_START = {
    JobPhase.QUEUED: 0,
    JobPhase.EXTRACTING: 0,
    JobPhase.ANALYZING: 20,
    JobPhase.AGGREGATING: 90,
    JobPhase.COMPLETE: 100,
}


@dataclass
class JobProgress:
    """Progress tracking for a job."""
    phase: JobPhase = JobPhase.QUEUED
    phase_progress: float = 0.0  # 0-100 within current phase
    overall_progress: float = 0.0  # 0-100 overall
    current_analyzer: Optional[str] = None
    analyzers_completed: int = 0
    analyzers_total: int = 0
    last_log: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "phase_progress": round(self.phase_progress, 1),
            "overall_progress": round(self.overall_progress, 1),
            "current_analyzer": self.current_analyzer,
            "analyzers_completed": self.analyzers_completed,
            "analyzers_total": self.analyzers_total,
            "last_log": self.last_log
        }


@dataclass
class Job:
    """One analysis request and, once complete, its report."""
    job_id: str
    status: JobStatus = JobStatus.PENDING
    progress: JobProgress = field(default_factory=JobProgress)
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    completed_at: Optional[float] = None
    result: Optional[Any] = None  # AnalysisReport
    error: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def elapsed_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        end_time = self.completed_at or time.time()
        return end_time - self.started_at

    @property
    def elapsed_formatted(self) -> str:
        """Get formatted elapsed time (e.g., '1m 23s')."""
        elapsed = self.elapsed_seconds
        if elapsed < 60:
            return f"{elapsed:.1f}s"
        minutes = int(elapsed // 60)
        seconds = int(elapsed % 60)
        return f"{minutes}m {seconds}s"

    @property
    def eta_seconds(self) -> Optional[float]:
        """Linear estimate of the remaining time."""
        progress = self.progress.overall_progress
        if progress <= 0:
            return None
        if progress >= 100:
            return 0.0
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return None
        rate = progress / elapsed
        return (100 - progress) / rate

    @property
    def is_cancelled(self) -> bool:
        return self.status == JobStatus.CANCELLED

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED

    def to_dict(self, include_result: bool = False) -> Dict[str, Any]:
        """Convert to a status dictionary."""
        data = {
            "job_id": self.job_id,
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "created_at": datetime.fromtimestamp(self.created_at).isoformat(),
            "started_at": datetime.fromtimestamp(self.started_at).isoformat() if self.started_at else None,
            "completed_at": datetime.fromtimestamp(self.completed_at).isoformat() if self.completed_at else None,
            "elapsed": self.elapsed_formatted,
            "eta_seconds": self.eta_seconds,
            "error": self.error,
            "metadata": self.metadata
        }
        if include_result and self.result is not None:
            data["result"] = self.result.to_dict()
        return data


class JobManager:
    """
    Thread-safe store of analysis jobs.

    Usage:
        manager = JobManager()
        job_id = manager.create_job(metadata={'filename': 'guide.pdf'})

        # In worker thread:
        manager.start_job(job_id)
        manager.update_phase(job_id, JobPhase.ANALYZING)
        manager.update_analyzer_progress(job_id, 'structure', 1, 5)
        manager.complete_job(job_id, report)
    """

    def __init__(self, max_jobs: Optional[int] = None, job_ttl: Optional[float] = None):
        """
        Args:
            max_jobs: Maximum jobs to keep (defaults to configuration)
            job_ttl: Seconds a finished job is kept (defaults to configuration)
        """
        config = get_config()
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.RLock()
        self._max_jobs = max_jobs if max_jobs is not None else config.max_jobs
        self._job_ttl = job_ttl if job_ttl is not None else config.job_ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def create_job(self, metadata: Optional[Dict[str, Any]] = None) -> str:
        """Register a new pending job and return its ID."""
        with self._lock:
            self._cleanup_old_jobs()

            job_id = str(uuid.uuid4())[:8]
            while job_id in self._jobs:
                job_id = str(uuid.uuid4())[:8]

            self._jobs[job_id] = Job(job_id=job_id, metadata=metadata or {})
            logger.debug("Job created", job_id=job_id)
            return job_id

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def start_job(self, job_id: str) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.status != JobStatus.PENDING:
                return False
            job.status = JobStatus.RUNNING
            job.started_at = time.time()
            job.progress.phase = JobPhase.QUEUED
            return True

    def update_phase(self, job_id: str, phase: JobPhase, log_message: Optional[str] = None) -> bool:
        """Move a running job into a new phase."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.is_finished:
                return False

            job.progress.phase = phase
            job.progress.phase_progress = 0.0
            job.progress.overall_progress = PHASE_PROGRESS_START.get(phase, 0)

            if log_message:
                job.progress.last_log = log_message

            return True

    def update_phase_progress(self, job_id: str, progress: float, log_message: Optional[str] = None) -> bool:
        """Update progress within the current phase (0-100)."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.is_finished:
                return False

            job.progress.phase_progress = min(100, max(0, progress))

            phase = job.progress.phase
            phase_start = PHASE_PROGRESS_START.get(phase, 0)
            phase_weight = PHASE_WEIGHTS.get(phase, 0)
            job.progress.overall_progress = phase_start + (job.progress.phase_progress / 100) * phase_weight

            if log_message:
                job.progress.last_log = log_message

            return True

    def update_analyzer_progress(self, job_id: str, analyzer_name: str,
                                 completed: int, total: int) -> bool:
        """Record that an analyzer finished during the ANALYZING phase."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.is_finished:
                return False

            job.progress.current_analyzer = analyzer_name
            job.progress.analyzers_completed = completed
            job.progress.analyzers_total = total

            if total > 0:
                return self.update_phase_progress(
                    job_id,
                    completed / total * 100,
                    f"{analyzer_name} analyzer finished"
                )

            return True

    def complete_job(self, job_id: str, result: Any) -> bool:
        """Attach the report to a running job. Cancelled jobs are left alone."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.is_finished:
                return False

            job.status = JobStatus.COMPLETE
            job.progress.phase = JobPhase.COMPLETE
            job.progress.overall_progress = 100
            job.progress.phase_progress = 100
            job.completed_at = time.time()
            job.result = result
            job.progress.last_log = "Complete"
            logger.info("Job complete", job_id=job_id,
                        duration_ms=round(job.elapsed_seconds * 1000, 2))

            return True

    def fail_job(self, job_id: str, error: Dict[str, Any]) -> bool:
        """
        Mark job as failed.

        Args:
            job_id: Job ID
            error: Error payload, usually ReadinessError.to_dict()['error']
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.is_finished:
                return False

            job.status = JobStatus.FAILED
            job.progress.phase = JobPhase.FAILED
            job.completed_at = time.time()
            job.error = error
            job.progress.last_log = f"Error: {error.get('message')}"
            logger.warning("Job failed", job_id=job_id, error_code=error.get('code'))

            return True

    def cancel_job(self, job_id: str) -> bool:
        """Cancel a pending or running job."""
        with self._lock:
            job = self._jobs.get(job_id)
            if not job or job.is_finished:
                return False

            job.status = JobStatus.CANCELLED
            job.progress.phase = JobPhase.CANCELLED
            job.completed_at = time.time()
            job.progress.last_log = "Cancelled"
            logger.info("Job cancelled", job_id=job_id)
            return True

    def is_cancelled(self, job_id: str) -> bool:
        """True if the job was cancelled or no longer exists."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job is None or job.is_cancelled

    def delete_job(self, job_id: str) -> bool:
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def list_jobs(self, status: Optional[JobStatus] = None,
                  limit: int = 20) -> List[Dict[str, Any]]:
        """Job summaries, most recent first."""
        with self._lock:
            jobs = list(self._jobs.values())

            if status:
                jobs = [j for j in jobs if j.status == status]

            jobs.sort(key=lambda j: j.created_at, reverse=True)

            return [j.to_dict() for j in jobs[:limit]]

    def _cleanup_old_jobs(self):
        """Evict finished jobs past their TTL, then the oldest finished jobs over capacity."""
        with self._lock:
            now = time.time()
            expired = [
                job_id for job_id, job in self._jobs.items()
                if job.is_finished and job.completed_at and (now - job.completed_at) > self._job_ttl
            ]
            for job_id in expired:
                del self._jobs[job_id]

            if len(self._jobs) >= self._max_jobs:
                finished = sorted(
                    (j for j in self._jobs.values() if j.is_finished),
                    key=lambda j: j.completed_at or 0
                )
                while len(self._jobs) >= self._max_jobs and finished:
                    del self._jobs[finished.pop(0).job_id]

            if expired:
                logger.debug("Evicted expired jobs", count=len(expired))


# Global job manager instance
_job_manager: Optional[JobManager] = None


def get_job_manager() -> JobManager:
    """Get or create the global job manager instance."""
    global _job_manager
    if _job_manager is None:
        _job_manager = JobManager()
    return _job_manager


# =============================================================================
# HELPER FUNCTIONS FOR INTEGRATION
# =============================================================================

def create_analysis_job(filename: Optional[str] = None, size: Optional[int] = None,
                        mime_type: Optional[str] = None) -> str:
    """Create a job carrying display metadata for the analyzed document."""
    return get_job_manager().create_job(metadata={
        'filename': filename,
        'size': size,
        'mime_type': mime_type,
    })


def get_job_status(job_id: str) -> Optional[Dict[str, Any]]:
    job = get_job_manager().get_job(job_id)
    if job:
        return job.to_dict()
    return None


def get_job_result(job_id: str) -> Optional[Dict[str, Any]]:
    """Job dict including the serialized report, or None."""
    job = get_job_manager().get_job(job_id)
    if job:
        return job.to_dict(include_result=True)
    return None


def list_recent_analyses(limit: int = 20) -> List[Dict[str, Any]]:
    return get_job_manager().list_jobs(limit=limit)
