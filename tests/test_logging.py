"""Tests for log formatting and setup."""

from __future__ import annotations

import json
import logging

from universal_gateway.core.config import Settings
from universal_gateway.core.logging import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("universal_gateway.test", logging.WARNING, __file__, 1, "failed %s", ("x",), None)
    for name, value in extra.items():
        setattr(record, name, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "WARNING"
        assert data["logger"] == "universal_gateway.test"
        assert data["message"] == "failed x"
        assert "request_id" not in data

    def test_call_fields_lifted(self):
        record = _record(request_id="req_abc", target="github", call_name="github-get-user", duration_ms=12.5)
        data = json.loads(JSONFormatter().format(record))
        assert data["request_id"] == "req_abc"
        assert data["target"] == "github"
        assert data["call_name"] == "github-get-user"
        assert data["duration_ms"] == 12.5


class TestSetupLogging:
    def test_json_handler_installed(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(Settings(_env_file=None, log_json=True, log_level="debug"))
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert root.level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
