"""Tests for structured logging."""

import io
import json
import logging

import pytest

from pdfnorm.logger import (
    StructuredFormatter,
    StructuredLogger,
    clear_context,
    get_context,
    set_context,
)


@pytest.fixture
def captured():
    """Fresh logger writing into a buffer."""
    log = StructuredLogger("pdfnorm.test", level="INFO")
    buffer = io.StringIO()
    log._logger.handlers[0].setStream(buffer)
    yield log, buffer
    clear_context()


def records(buffer):
    return [json.loads(line) for line in buffer.getvalue().splitlines()]


class TestStructuredFormatter:
    """Tests for the JSON record layout."""

    def test_layout(self):
        record = logging.LogRecord(
            "pdfnorm", logging.INFO, "/src/stage_grid.py", 42, "grid built", None, None, func="build"
        )
        record.extra_fields = {"cells": 6}

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["msg"] == "grid built"
        assert entry["source"] == {"function": "build", "file": "/src/stage_grid.py", "line": 42}
        assert entry["cells"] == 6
        assert "time" in entry


class TestStructuredLogger:
    """Tests for keyword-field logging."""

    def test_fields_and_caller(self, captured):
        log, buffer = captured
        log.info("page extracted", page=3)

        (entry,) = records(buffer)
        assert entry["page"] == 3
        assert entry["source"]["function"] == "test_fields_and_caller"

    def test_level_filter(self, captured):
        log, buffer = captured
        log.debug("hidden")
        assert buffer.getvalue() == ""

        log.set_level("debug")
        log.debug("shown")
        assert records(buffer)[0]["msg"] == "shown"
        assert log.level == logging.DEBUG

    def test_context_fields(self, captured):
        log, buffer = captured
        set_context(document="invoices.pdf")
        set_context(run=1)
        log.warn("page skipped", page=2)

        entry = records(buffer)[0]
        assert entry["level"] == "WARNING"
        assert entry["run"] == 1
        assert entry["document"] == "invoices.pdf"
        assert get_context() == {"document": "invoices.pdf", "run": 1}

        clear_context()
        assert get_context() == {}

    def test_exception_included(self, captured):
        log, buffer = captured
        try:
            raise ValueError("boom")
        except ValueError:
            log.error("failed", exc_info=True)

        entry = records(buffer)[0]
        assert "ValueError: boom" in entry["exception"]
