"""Structured Logging — JSON formatter output."""

import json
import logging

from uden.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "uden.test", logging.WARNING, __file__, 1, "Order failed", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_core_fields():
    out = json.loads(JSONFormatter().format(_record()))

    assert out["level"] == "WARNING"
    assert out["logger"] == "uden.test"
    assert out["message"] == "Order failed"
    assert "timestamp" in out


def test_json_formatter_surfaces_known_extras_only():
    out = json.loads(JSONFormatter().format(
        _record(user_id="u-1", transaction_id="t-1", password="hunter2"),
    ))

    assert out["user_id"] == "u-1"
    assert out["transaction_id"] == "t-1"
    assert "password" not in out
