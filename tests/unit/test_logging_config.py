"""Tests for structured JSON logging."""

from __future__ import annotations

import io
import json
import logging

import pytest

from csvbridge.core.logging_config import configure_logging, get_logger, reset_logging


@pytest.fixture
def stream():
    reset_logging()
    buf = io.StringIO()
    configure_logging(level="DEBUG", stream=buf)
    yield buf
    reset_logging()


def _lines(buf: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in buf.getvalue().splitlines()]


def test_logger_namespace():
    assert get_logger("ingest.mapper").name == "csvbridge.ingest.mapper"


def test_emits_one_json_line_with_extras(stream):
    get_logger("test").info("import_finished", extra={"session_id": "abc", "current": 3})
    (entry,) = _lines(stream)
    assert entry["message"] == "import_finished"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "csvbridge.test"
    assert entry["session_id"] == "abc"
    assert entry["current"] == 3


def test_exception_details(stream):
    try:
        raise ValueError("boom")
    except ValueError:
        get_logger("test").exception("record_write_crashed")
    (entry,) = _lines(stream)
    assert entry["exc_type"] == "ValueError"
    assert entry["exc_message"] == "boom"
    assert "Traceback" in entry["traceback"]


def test_configure_is_idempotent(stream):
    configure_logging(level="DEBUG", stream=stream)
    assert len(logging.getLogger("csvbridge").handlers) == 1
