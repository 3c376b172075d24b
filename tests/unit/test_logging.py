"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from workflow_designer.logging import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="workflow_designer.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Definition saved %s",
        args=("ok",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_nests_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(definition_id=7, _private="hidden")))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "workflow_designer.test"
    assert payload["message"] == "Definition saved ok"
    assert payload["extra"] == {"definition_id": 7}
    assert "timestamp" in payload


def test_json_formatter_stringifies_unknown_values() -> None:
    payload = json.loads(JsonFormatter().format(_record(path=object())))
    assert isinstance(payload["extra"]["path"], str)


def test_configure_logging_replaces_handlers(restore_root_logger: logging.Logger) -> None:
    configure_logging("debug")
    configure_logging("warning", "text")

    root = restore_root_logger
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_configure_logging_defaults_to_json(restore_root_logger: logging.Logger) -> None:
    configure_logging("INFO")
    assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)
