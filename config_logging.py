#!/usr/bin/env python3
"""
LLM Readiness Analyzer Configuration & Logging Module
=====================================================
Centralized configuration, structured logging, and the error taxonomy shared
by the extraction step, the analyzers and the engine.

Version: reads from version.json (module v1.0)
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, List
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_MAX_UPLOAD_MB = 50          # Default max payload size in megabytes
MAX_SAFE_UPLOAD_MB = 500            # Maximum safe payload limit in megabytes
DEFAULT_MAX_WORKERS = 5             # One worker per analyzer
DEFAULT_JOB_TTL = 3600              # Seconds a finished job stays in the store
DEFAULT_MAX_JOBS = 100              # Store capacity
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

DEFAULT_MAX_UPLOAD_BYTES = DEFAULT_MAX_UPLOAD_MB * 1024 * 1024
MAX_SAFE_UPLOAD_BYTES = MAX_SAFE_UPLOAD_MB * 1024 * 1024

ENV_PREFIX = 'LLMR_'


# =============================================================================
# VERSION - Read from version.json (Single Source of Truth)
# =============================================================================
def _load_version():
    """Load version from version.json file."""
    version_file = Path(__file__).parent / 'version.json'
    try:
        with open(version_file, 'r', encoding='utf-8') as f:
            return json.load(f).get('version', '1.0.0')
    except (OSError, ValueError):
        return '1.0.0'

__version__ = _load_version()
VERSION = __version__
APP_NAME = "LLMReadiness"


def _env(name: str, default: str) -> str:
    return os.environ.get(f'{ENV_PREFIX}{name}', default)


def _env_bool(name: str, default: bool) -> bool:
    return _env(name, 'true' if default else 'false').lower() == 'true'


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AnalyzerConfig:
    """Pipeline configuration with conservative defaults."""

    # Concurrency
    max_workers: int = DEFAULT_MAX_WORKERS

    # Extraction limits
    max_content_length: int = DEFAULT_MAX_UPLOAD_BYTES

    # Result store
    job_ttl: float = DEFAULT_JOB_TTL
    max_jobs: int = DEFAULT_MAX_JOBS

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_console: bool = True
    log_to_file: bool = False
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    def __post_init__(self):
        """Normalize settings and prepare the log directory."""
        self.log_dir = Path(self.log_dir)
        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        # Production runs stay quiet
        if _env('ENV', 'development').lower() == 'production':
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AnalyzerConfig':
        """Load configuration from LLMR_* environment variables."""
        return cls(
            max_workers=int(_env('MAX_WORKERS', str(DEFAULT_MAX_WORKERS))),
            max_content_length=int(_env('MAX_UPLOAD', str(DEFAULT_MAX_UPLOAD_BYTES))),
            job_ttl=float(_env('JOB_TTL', str(DEFAULT_JOB_TTL))),
            max_jobs=int(_env('MAX_JOBS', str(DEFAULT_MAX_JOBS))),
            log_level=_env('LOG_LEVEL', 'INFO'),
            log_format=_env('LOG_FORMAT', 'json'),
            log_to_console=_env_bool('LOG_TO_CONSOLE', True),
            log_to_file=_env_bool('LOG_TO_FILE', False),
            log_dir=Path(_env('LOG_DIR', str(Path(__file__).parent / 'logs'))),
        )

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors: List[str] = []

        if self.max_workers < 1:
            errors.append("max_workers must be at least 1")

        if self.max_content_length <= 0:
            errors.append("Max content length must be positive")
        elif self.max_content_length > MAX_SAFE_UPLOAD_BYTES:
            errors.append(f"Max content length exceeds safe limit ({MAX_SAFE_UPLOAD_MB}MB)")

        if self.job_ttl <= 0:
            errors.append("job_ttl must be positive")

        if self.max_jobs < 1:
            errors.append("max_jobs must be at least 1")

        if self.log_format not in ('json', 'text'):
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            errors.append(f"Invalid log_level: {self.log_level}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AnalyzerConfig] = None

def get_config() -> AnalyzerConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AnalyzerConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AnalyzerConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(f"{APP_NAME.lower()}.{self.name}")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()
        self.logger.propagate = False

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            self.config.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _emit(self, level: int, message: str, exc_info: bool = False, **kwargs):
        fields = {'correlation_id': self.get_correlation_id(), **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra={'fields': fields})

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._emit(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._emit(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._emit(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._emit(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._emit(logging.CRITICAL, message, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.info(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), **context)
            raise
        duration_ms = (time.time() - start_time) * 1000
        self.info(f"{operation} completed", operation=operation, status='completed',
                  duration_ms=round(duration_ms, 2), **context)


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        fields = getattr(record, 'fields', None)
        if fields:
            log_data.update(fields)

        return json.dumps(log_data, default=str)


# Factory function for getting loggers
def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING
# =============================================================================

class ReadinessError(Exception):
    """Base exception for the readiness pipeline."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a caller-facing error payload."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(ReadinessError):
    """Input rejected before the pipeline runs (empty text, oversized payload)."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


class ExtractionError(ReadinessError):
    """Text could not be extracted from a payload."""
    def __init__(self, message: str, content_type: Optional[str] = None, **kwargs):
        super().__init__(message, code="EXTRACTION_ERROR", status_code=422,
                         details={'content_type': content_type, **kwargs})


class AnalyzerFailure(ReadinessError):
    """An individual analyzer raised an unexpected fault."""
    def __init__(self, analyzer: str, message: str, **kwargs):
        super().__init__(f"{analyzer} analyzer failed: {message}",
                         code="ANALYZER_FAILURE", status_code=500,
                         details={'analyzer': analyzer, **kwargs})
        self.analyzer = analyzer


class AggregationFailure(ReadinessError):
    """Not every required sub-result is available for aggregation."""
    def __init__(self, missing: List[str], **kwargs):
        super().__init__(f"Cannot aggregate report, missing results: {', '.join(missing)}",
                         code="AGGREGATION_FAILURE", status_code=500,
                         details={'missing': list(missing), **kwargs})
        self.missing = list(missing)


class AnalysisCancelled(ReadinessError):
    """The caller abandoned the analysis before it completed."""
    def __init__(self, message: str = "Analysis cancelled", **kwargs):
        super().__init__(message, code="CANCELLED", status_code=499, details=kwargs)


def handle_errors(logger: Optional[StructuredLogger] = None,
                  wrap: Callable[[str], ReadinessError] = ExtractionError):
    """Decorator mapping unexpected exceptions onto the pipeline taxonomy."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger(func.__module__)
            try:
                return func(*args, **kwargs)
            except ReadinessError:
                raise
            except Exception as e:
                _logger.exception(f"Unexpected error in {func.__name__}: {e}")
                raise wrap(f"{type(e).__name__}: {e}") from e
        return wrapper
    return decorator


# =============================================================================
# INPUT UTILITIES
# =============================================================================

def sanitize_filename(filename: str) -> str:
    """Reduce a filename to a safe display name."""
    import re
    filename = filename.replace('/', '').replace('\\', '').replace('\x00', '')
    filename = filename.lstrip('.')
    filename = re.sub(r'[^\w\-_\. ]', '_', filename)
    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255-len(ext)] + ext
    return filename or 'unnamed'
