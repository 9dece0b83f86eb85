"""Unit tests for observability logging – redaction, processors, audit."""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import structlog

from roleacl.access.grants import Possession
from roleacl.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    AuditLogger,
    AuditOutcome,
    JsonLoggerFactory,
    SensitiveFieldsFilter,
    bind_query,
    get_logger,
)


# ---------------------------------------------------------------------------
# SensitiveFieldsFilter
# ---------------------------------------------------------------------------


class TestSensitiveFieldsFilter:
    def test_redacts_all_default_sensitive_fields(self) -> None:
        data = {name: "value" for name in DEFAULT_SENSITIVE_FIELDS}
        result = SensitiveFieldsFilter().redact_deep(data)
        assert set(result.values()) == {SensitiveFieldsFilter.REDACTED}

    def test_case_insensitive(self) -> None:
        assert SensitiveFieldsFilter().redact_deep({"Password": "x"}) == {"Password": "[REDACTED]"}

    def test_nested_dicts_and_lists(self) -> None:
        data = {"user": {"token": "t", "name": "n"}, "items": [{"secret": "s"}, 3]}
        assert SensitiveFieldsFilter().redact_deep(data) == {
            "user": {"token": "[REDACTED]", "name": "n"},
            "items": [{"secret": "[REDACTED]"}, 3],
        }

    def test_custom_fields(self) -> None:
        f = SensitiveFieldsFilter(frozenset({"ssn"}))
        assert f.redact_deep({"ssn": "1", "password": "p"}) == {"ssn": "[REDACTED]", "password": "p"}

    def test_does_not_mutate_input(self) -> None:
        data = {"password": "p"}
        SensitiveFieldsFilter().redact_deep(data)
        assert data == {"password": "p"}

    def test_works_as_processor(self) -> None:
        event = SensitiveFieldsFilter()(None, "info", {"event": "e", "token": "t"})
        assert event == {"event": "e", "token": "[REDACTED]"}


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


class TestBindQuery:
    def test_flattens_query(self) -> None:
        query = SimpleNamespace(roles=("user",), resource="doc", action="read", possession=Possession.OWN)
        event = bind_query(None, "debug", {"event": "permission.resolved", "query": query})
        assert event == {
            "event": "permission.resolved",
            "roles": ["user"],
            "resource": "doc",
            "action": "read",
            "possession": "own",
        }

    def test_without_query(self) -> None:
        assert bind_query(None, "debug", {"event": "x"}) == {"event": "x"}


class TestGetLogger:
    def test_binds_initial_values(self) -> None:
        with structlog.testing.capture_logs() as logs:
            get_logger("roleacl.test", component="store").info("hello", n=1)
        assert logs == [{"component": "store", "n": 1, "event": "hello", "log_level": "info"}]


class TestJsonLoggerFactory:
    def test_configures_root_logger(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            JsonLoggerFactory.configure("debug", sensitive_fields=frozenset({"password"}))
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            structlog.reset_defaults()

    def test_renders_json_with_redaction(self, capsys: pytest.CaptureFixture[str]) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            JsonLoggerFactory.configure(logging.INFO, sensitive_fields=frozenset({"password"}))
            structlog.get_logger("roleacl.json").info("login", password="p", user="u")
            line = capsys.readouterr().err.strip().splitlines()[-1]
            payload = json.loads(line)
            assert payload["event"] == "login"
            assert payload["password"] == "[REDACTED]"
            assert payload["level"] == "info"
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            structlog.reset_defaults()


# ---------------------------------------------------------------------------
# AuditLogger
# ---------------------------------------------------------------------------


class TestAuditLogger:
    def test_entry_shape(self) -> None:
        sink = MagicMock()
        AuditLogger(service="svc", logger=sink).log_decision(
            ["user"], "doc", "read:own", AuditOutcome.GRANTED, attributes=("*",), request_id="r1"
        )
        sink.warning.assert_called_once()
        fields = sink.warning.call_args.kwargs
        assert sink.warning.call_args.args == ("audit.decision",)
        assert fields["service"] == "svc"
        assert fields["roles"] == ["user"]
        assert fields["outcome"] == "granted"
        assert fields["attributes"] == ["*"]
        assert fields["request_id"] == "r1"
        assert "timestamp" in fields
        assert "context" not in fields

    def test_plain_string_outcome(self) -> None:
        sink = MagicMock()
        AuditLogger(logger=sink).log_decision([], None, None, "custom")
        assert sink.warning.call_args.kwargs["outcome"] == "custom"
        assert sink.warning.call_args.kwargs["service"] == "roleacl"

    def test_context_is_redacted(self) -> None:
        sink = MagicMock()
        AuditLogger(logger=sink).log_decision(
            ["u"], "doc", "read", AuditOutcome.DENIED, context={"user": {"api_key": "k", "id": 1}}
        )
        assert sink.warning.call_args.kwargs["context"] == {"user": {"api_key": "[REDACTED]", "id": 1}}

    def test_default_logger_emits_warning(self) -> None:
        with structlog.testing.capture_logs() as logs:
            AuditLogger().log_decision(["u"], "doc", "read", AuditOutcome.ERROR)
        assert logs[0]["event"] == "audit.decision"
        assert logs[0]["log_level"] == "warning"
