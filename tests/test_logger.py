"""Unit tests for structured JSON logging."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import json
import logging
import pytest
from logger import JSONFormatter


def make_record(msg="Created new session", exc_info=None, **extra):
    record = logging.LogRecord(
        name="services.session_store",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test suite for JSONFormatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "services.session_store"
        assert data["message"] == "Created new session"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        record = make_record(session_id="abc", error_code="TIMEOUT_ERROR")

        data = json.loads(JSONFormatter().format(record))

        assert data["session_id"] == "abc"
        assert data["error_code"] == "TIMEOUT_ERROR"

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = make_record(exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad" in data["exception"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
