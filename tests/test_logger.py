"""
Tests for logger functionality.
"""

from freelancematch.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(name="test", level="INFO", log_dir=tmp_path, enable_console=False)

        assert logger.logger.name == "test"
        assert logger.metrics["llm_calls"] == 0
        assert logger.logger.propagate is False

    def test_log_file_written(self, tmp_path):
        """Messages and their context land in the daily log file."""
        logger = StructuredLogger(name="test_file", log_dir=tmp_path, enable_console=False)

        logger.info("Message with context", freelancer_id=5, score=82.75)
        for handler in logger.logger.handlers:
            handler.flush()

        files = list(tmp_path.glob("freelancematch_*.log"))
        assert len(files) == 1
        content = files[0].read_text(encoding="utf-8")
        assert "Message with context" in content
        assert '"freelancer_id": 5' in content

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_console_goes_to_stderr(self, capsys):
        """Console output must not mix with CLI output on stdout."""
        logger = StructuredLogger(name="test_console", enable_file=False)

        logger.warning("Careful")

        captured = capsys.readouterr()
        assert "Careful" in captured.err
        assert "Careful" not in captured.out

    def test_configure_replaces_handlers(self, tmp_path):
        """Reconfiguring keeps metrics and swaps output."""
        logger = StructuredLogger(name="test_configure", enable_file=False, enable_console=False)
        logger.record_fallback()

        logger.configure(level="DEBUG", log_dir=tmp_path / "logs", enable_console=False)

        assert len(logger.logger.handlers) == 1
        assert (tmp_path / "logs").is_dir()
        assert logger.metrics["fallbacks"] == 1

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_llm_call()
        logger.record_llm_call()
        logger.record_llm_call()
        logger.record_llm_failure("Timeout")
        logger.record_match_request(candidates=4)
        logger.record_match_request(candidates=2)
        logger.record_fallback()
        logger.record_error("ValueError")
        logger.record_error("ValueError")

        metrics = logger.get_metrics()
        assert metrics["llm_calls"] == 3
        assert metrics["llm_failures"] == 1
        assert metrics["matches_requested"] == 2
        assert metrics["freelancers_scored"] == 6
        assert metrics["fallbacks"] == 1
        assert metrics["errors_by_type"] == {"Timeout": 1, "ValueError": 2}
        assert metrics["llm_success_rate"] == 0.667

    def test_success_rate_without_calls(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        assert logger.get_metrics()["llm_success_rate"] is None

    def test_get_metrics_is_a_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        metrics = logger.get_metrics()
        metrics["errors_by_type"]["Injected"] = 1
        assert logger.metrics["errors_by_type"] == {}

    def test_metrics_summary(self, tmp_path):
        """Metrics summary should not raise."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_llm_call()
        logger.record_error("LLMError")
        logger.log_metrics_summary()


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self):
        """get_logger should return same instance."""
        saved = get_logger()
        reset_logger()
        try:
            logger1 = get_logger(enable_file=False, enable_console=False)
            logger2 = get_logger()
            assert logger1 is logger2
        finally:
            reset_logger()
            import freelancematch.logger as logger_module
            logger_module._global_logger = saved

    def test_reset_logger(self):
        """reset_logger should create a new instance."""
        saved = get_logger()
        try:
            reset_logger()
            logger1 = get_logger(enable_file=False, enable_console=False)
            reset_logger()
            logger2 = get_logger(enable_file=False, enable_console=False)
            assert logger1 is not logger2
        finally:
            import freelancematch.logger as logger_module
            logger_module._global_logger = saved
