"""Tests for structured logging and run id propagation."""

import pytest

from trade_analytics.core.errors import ConfigError
from trade_analytics.observability.logger import (
    _add_run_id,
    get_logger,
    get_run_id,
    run_context,
    setup_logging,
)


class TestRunContext:
    def test_fresh_run_id(self):
        with run_context() as rid:
            assert len(rid) == 32
            assert get_run_id() == rid
        assert get_run_id() == ""

    def test_explicit_run_id(self):
        with run_context("abc") as rid:
            assert rid == "abc"
            assert get_run_id() == "abc"

    def test_nested_restores_outer(self):
        with run_context("outer"):
            with run_context("inner"):
                assert get_run_id() == "inner"
            assert get_run_id() == "outer"

    def test_restored_on_error(self):
        with pytest.raises(RuntimeError):
            with run_context("boom"):
                raise RuntimeError("x")
        assert get_run_id() == ""


class TestRunIdProcessor:
    def test_adds_run_id(self):
        with run_context("run-1"):
            event = _add_run_id(None, "info", {"event": "x"})
        assert event["run_id"] == "run-1"

    def test_keeps_explicit_run_id(self):
        with run_context("run-1"):
            event = _add_run_id(None, "info", {"event": "x", "run_id": "other"})
        assert event["run_id"] == "other"

    def test_skips_outside_run(self):
        assert "run_id" not in _add_run_id(None, "info", {"event": "x"})


class TestSetupLogging:
    def test_json_setup(self):
        setup_logging(level="DEBUG", format="json")
        get_logger("test").info("configured", value=1)

    def test_console_setup(self):
        setup_logging(level="warning", format="console")
        assert get_logger("test") is not None

    def test_unknown_format(self):
        with pytest.raises(ConfigError, match="log format"):
            setup_logging(format="xml")

    def test_unknown_level(self):
        with pytest.raises(ConfigError, match="log level"):
            setup_logging(level="LOUD")
