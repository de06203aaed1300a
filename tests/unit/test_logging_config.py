"""Tests for structured logging configuration.

Verifies that structured logging is properly configured for both development
and production environments.
"""

import json

import pytest
import structlog

from headcount.logging_config import get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    """Test logging setup function."""

    def test_json_mode_ends_with_json_renderer(self):
        setup_logging(json_logs=True, log_level="INFO")
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def test_console_mode_ends_with_console_renderer(self):
        setup_logging(json_logs=False, log_level="INFO")
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "info"])
    def test_accepts_log_levels(self, level):
        setup_logging(json_logs=False, log_level=level)

    def test_json_renderer_keeps_chinese_readable(self):
        setup_logging(json_logs=True)
        renderer = structlog.get_config()["processors"][-1]
        out = renderer(None, "info", {"event": "report_submitted", "town": "岳口"})
        assert json.loads(out)["town"] == "岳口"
        assert "岳口" in out


class TestGetLogger:
    """Test logger retrieval."""

    def test_logger_has_standard_methods(self):
        setup_logging(json_logs=False)
        logger = get_logger("headcount.test")

        for method in ("debug", "info", "warning", "error", "critical"):
            assert hasattr(logger, method)

    def test_event_with_context_does_not_raise(self):
        setup_logging(json_logs=True)
        logger = get_logger("headcount.test")
        logger.info("report_submitted", company_id=12, report_month="2026-10-01")
        logger.error("audit_write_failed", action="REJECT_REPORT", error="disk full")
