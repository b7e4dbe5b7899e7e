"""
Tests for Configuration & Logging
=================================
Environment configuration, structured logging and the error taxonomy.
"""

import json
import logging

import pytest

from config_logging import (
    AnalyzerConfig, JsonFormatter, StructuredLogger, get_config, reset_config,
    ReadinessError, ValidationError, ExtractionError, AnalyzerFailure,
    AggregationFailure, AnalysisCancelled, handle_errors, sanitize_filename,
)


class TestAnalyzerConfig:
    """Tests for AnalyzerConfig."""

    def test_defaults_are_valid(self):
        """Test the default configuration validates."""
        config = AnalyzerConfig()
        assert config.max_workers == 5
        assert config.job_ttl == 3600
        assert config.max_jobs == 100
        assert config.validate() == (True, [])

    def test_from_env(self, monkeypatch):
        """Test LLMR_ variables override defaults."""
        monkeypatch.setenv('LLMR_MAX_WORKERS', '3')
        monkeypatch.setenv('LLMR_JOB_TTL', '90')
        monkeypatch.setenv('LLMR_LOG_FORMAT', 'text')
        config = AnalyzerConfig.from_env()
        assert config.max_workers == 3
        assert config.job_ttl == 90.0
        assert config.log_format == 'text'

    def test_production_forces_warning(self, monkeypatch):
        """Test production runs log warnings and above."""
        monkeypatch.setenv('LLMR_ENV', 'production')
        assert AnalyzerConfig(log_level='DEBUG').log_level == 'WARNING'

    def test_validate_reports_every_error(self):
        """Test all invalid settings are reported together."""
        config = AnalyzerConfig(max_workers=0, max_jobs=0, log_format='xml', log_level='LOUD')
        valid, errors = config.validate()
        assert not valid
        assert len(errors) == 4

    def test_global_config_is_cached(self):
        """Test get_config returns one instance until reset."""
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first


class TestStructuredLogging:
    """Tests for StructuredLogger and JsonFormatter."""

    def test_json_formatter_merges_fields(self):
        """Test extra fields land in the JSON record."""
        record = logging.LogRecord('llmreadiness.test', logging.INFO, __file__, 1,
                                   "Analysis complete", None, None)
        record.fields = {'correlation_id': 'abc123', 'score': 87}
        data = json.loads(JsonFormatter().format(record))
        assert data['message'] == "Analysis complete"
        assert data['score'] == 87
        assert data['correlation_id'] == 'abc123'
        assert data['level'] == 'INFO'

    def test_logger_name_and_handlers(self):
        """Test loggers are namespaced and silent without outputs."""
        logger = StructuredLogger('unit', AnalyzerConfig(log_to_console=False))
        assert logger.logger.name == 'llmreadiness.unit'
        assert not logger.logger.propagate
        assert all(isinstance(h, logging.NullHandler) for h in logger.logger.handlers)

    def test_correlation_id(self):
        """Test correlation ids are kept per thread."""
        correlation_id = StructuredLogger.new_correlation_id()
        assert StructuredLogger.get_correlation_id() == correlation_id

    def test_log_operation_reraises(self):
        """Test failures inside an operation propagate."""
        logger = StructuredLogger('unit', AnalyzerConfig(log_to_console=False))
        with pytest.raises(KeyError):
            with logger.log_operation('lookup'):
                raise KeyError('missing')

    def test_file_logging(self, tmp_path):
        """Test rotating file output."""
        config = AnalyzerConfig(log_to_console=False, log_to_file=True, log_dir=tmp_path)
        logger = StructuredLogger('filetest', config)
        logger.info("written", score=1)
        for handler in logger.logger.handlers:
            handler.flush()
        line = (tmp_path / 'filetest.log').read_text(encoding='utf-8').strip()
        assert json.loads(line)['message'] == "written"


class TestErrors:
    """Tests for the error taxonomy."""

    @pytest.mark.parametrize("error,code,status", [
        (ValidationError("empty", field='text'), 'VALIDATION_ERROR', 400),
        (ExtractionError("bad pdf", content_type='application/pdf'), 'EXTRACTION_ERROR', 422),
        (AnalyzerFailure('tokens', 'boom'), 'ANALYZER_FAILURE', 500),
        (AggregationFailure(['tokens']), 'AGGREGATION_FAILURE', 500),
        (AnalysisCancelled(), 'CANCELLED', 499),
    ])
    def test_codes(self, error, code, status):
        """Test each error's code and status."""
        assert isinstance(error, ReadinessError)
        assert error.code == code
        assert error.status_code == status
        payload = error.to_dict()
        assert payload['success'] is False
        assert payload['error']['code'] == code

    def test_details(self):
        """Test structured details travel with the error."""
        assert ValidationError("empty", field='text').details['field'] == 'text'
        assert AnalyzerFailure('tokens', 'boom').details['analyzer'] == 'tokens'
        assert AggregationFailure(['a', 'b']).details['missing'] == ['a', 'b']

    def test_handle_errors_wraps(self):
        """Test unexpected exceptions are mapped and chained."""
        @handle_errors(wrap=ExtractionError)
        def parse():
            raise ValueError("bad bytes")

        with pytest.raises(ExtractionError) as excinfo:
            parse()
        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_handle_errors_passes_taxonomy_through(self):
        """Test pipeline errors are not re-wrapped."""
        @handle_errors()
        def validate():
            raise ValidationError("empty")

        with pytest.raises(ValidationError):
            validate()


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    def test_strips_paths(self):
        """Test path separators and leading dots are removed."""
        assert sanitize_filename("../etc/passwd") == "etcpasswd"

    def test_replaces_unsafe_characters(self):
        """Test unsafe characters become underscores."""
        assert sanitize_filename("my<file>.txt") == "my_file_.txt"

    def test_empty(self):
        """Test an empty result gets a placeholder."""
        assert sanitize_filename("...") == "unnamed"
