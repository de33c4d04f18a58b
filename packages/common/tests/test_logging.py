"""Tests for JSON logging and audit events."""

import json
import logging

import pytest

from packages.common.logging import JSONFormatter, get_request_id, set_request_id
from packages.common.tracing import audit_event


def test_formatter_carries_request_and_fields() -> None:
    record = logging.LogRecord("portal.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.fields = {"audit": {"verb": "created"}}
    set_request_id("req-42")
    try:
        line = json.loads(JSONFormatter("alumni-portal").format(record))
    finally:
        set_request_id(None)
    if line["msg"] != "hello world" or line["request_id"] != "req-42" or line["service"] != "alumni-portal":
        pytest.fail(f"Unexpected log line: {line}")
    if line["audit"] != {"verb": "created"}:
        pytest.fail("Structured fields should be merged into the line")


def test_audit_event_logs_structured_payload(caplog) -> None:
    set_request_id("req-7")
    try:
        with caplog.at_level(logging.INFO, logger="portal.audit"):
            event = audit_event("user_1", "deleted", "event:abc", reason="duplicate")
    finally:
        set_request_id(None)
    if get_request_id() is not None:
        pytest.fail("Request id should be cleared")
    if (event["actor"], event["object"], event["request_id"]) != ("user_1", "event:abc", "req-7"):
        pytest.fail(f"Unexpected audit payload: {event}")
    if not event["ts"].endswith("Z") or event["extras"] != {"reason": "duplicate"}:
        pytest.fail(f"Unexpected audit payload: {event}")
    records = [r for r in caplog.records if r.name == "portal.audit"]
    if not records or records[-1].fields["audit"] is not event:
        pytest.fail("Audit record should carry the payload")
