"""Tests for hookrelay.core.logging — structured logging setup."""

from __future__ import annotations

import json
import logging

import structlog

from hookrelay.core.logging import (
    REDACTED,
    bind_delivery,
    clear_delivery,
    get_logger,
    redact_secrets,
    setup_logging,
)


class TestSetupLogging:
    def test_sets_root_level(self):
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_case_insensitive(self):
        setup_logging("warning")
        assert logging.getLogger().level == logging.WARNING

    def test_default_level(self):
        setup_logging()
        assert logging.getLogger().level == logging.INFO

    def test_no_duplicate_handlers_on_repeat_calls(self):
        setup_logging("INFO")
        setup_logging("INFO")
        assert len(logging.getLogger().handlers) == 1

    def test_silences_noisy_loggers(self):
        setup_logging("DEBUG")
        for name in ("httpx", "httpcore", "uvicorn.access"):
            assert logging.getLogger(name).level >= logging.WARNING


class TestGetLogger:
    def test_logger_has_expected_methods(self):
        setup_logging("INFO")
        logger = get_logger("test")
        for method in ("debug", "info", "warning", "error", "exception"):
            assert callable(getattr(logger, method, None))

    def test_logger_can_bind_context(self):
        setup_logging("INFO")
        assert get_logger("test").bind(request_id="abc123") is not None


class TestDeliveryContext:
    def test_bind_and_clear(self):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="r-1")

        bind_delivery("d-1", "push")
        context = structlog.contextvars.get_contextvars()
        assert context["delivery_id"] == "d-1"
        assert context["event_kind"] == "push"

        clear_delivery()
        context = structlog.contextvars.get_contextvars()
        assert "delivery_id" not in context
        assert context["request_id"] == "r-1"
        structlog.contextvars.clear_contextvars()


class TestRedactSecrets:
    def test_masks_sensitive_keys(self):
        event = {"event": "sent", "token": "gho_x", "signature": "sha256=ab", "repo": "org/app"}
        redacted = redact_secrets(None, "info", event)
        assert redacted["token"] == REDACTED
        assert redacted["signature"] == REDACTED
        assert redacted["repo"] == "org/app"

    def test_rendered_output_never_contains_secret(self, capsys):
        setup_logging("INFO")
        get_logger("test").info("credential_used", token="gho_leak", repo="org/app")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["token"] == REDACTED
        assert "gho_leak" not in line
