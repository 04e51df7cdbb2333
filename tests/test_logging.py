"""Tests for structlog/stdlib logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from xcmake.core.logging import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    before, level = set(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)
    logging.getLogger("xcmake").setLevel(logging.NOTSET)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_level_from_env(self, monkeypatch, restore_logging):
        monkeypatch.setenv("XCMAKE_LOG_LEVEL", "warning")
        setup_logging()
        assert logging.getLogger("xcmake").level == logging.WARNING

    def test_explicit_level_overrides_env(self, monkeypatch, restore_logging):
        monkeypatch.setenv("XCMAKE_LOG_LEVEL", "ERROR")
        setup_logging("DEBUG")
        assert logging.getLogger("xcmake").level == logging.DEBUG

    def test_json_renderer(self, monkeypatch, restore_logging):
        monkeypatch.setenv("XCMAKE_LOG_FORMAT", "json")
        setup_logging()
        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, structlog.stdlib.ProcessorFormatter)
        assert any(
            isinstance(p, structlog.processors.JSONRenderer) for p in formatter.processors
        )
