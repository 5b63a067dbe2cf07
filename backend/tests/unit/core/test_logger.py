"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

import pytest

from vending.core.logger import JSONFormatter, configure_logging


@pytest.fixture()
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG


def test_json_formatter_includes_known_extras() -> None:
    record = logging.LogRecord("vending", logging.INFO, __file__, 1, "purchase.completed", (), None)
    record.user_id = 7
    record.total = 50
    record.password = "never-logged"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "purchase.completed"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == 7
    assert payload["total"] == 50
    assert "password" not in payload
