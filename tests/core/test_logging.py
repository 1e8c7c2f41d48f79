"""Tests for structlog configuration helpers."""

from __future__ import annotations

import logging

import pytest
import structlog

from restify.core.errors import ConfigError
from restify.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestConfigureLogging:
    def test_json_renderer(self):
        configure_logging(level="DEBUG", json_format=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_logging(level="INFO", json_format=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_without_timestamp(self):
        configure_logging(json_format=True, add_timestamp=False)
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_level_name_case_insensitive(self):
        configure_logging(level="debug", json_format=True)
        assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(
            logging.DEBUG
        )

    def test_unknown_level(self):
        with pytest.raises(ConfigError, match="Unknown log level 'foo'"):
            configure_logging(level="foo")

    def test_get_logger(self):
        assert get_logger(__name__) is not None


class TestContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_bind_and_unbind(self):
        bind_context(operation="sync", database="shop")
        assert structlog.contextvars.get_contextvars() == {
            "operation": "sync",
            "database": "shop",
        }
        unbind_context("operation")
        assert structlog.contextvars.get_contextvars() == {"database": "shop"}

    def test_log_context_scoped(self):
        with LogContext(operation="reset"):
            assert structlog.contextvars.get_contextvars()["operation"] == "reset"
        assert "operation" not in structlog.contextvars.get_contextvars()

    def test_log_context_unbinds_on_error(self):
        try:
            with LogContext(operation="reset"):
                raise RuntimeError("x")
        except RuntimeError:
            pass
        assert structlog.contextvars.get_contextvars() == {}
