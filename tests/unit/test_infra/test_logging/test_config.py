"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging
from logging.handlers import QueueHandler

import pytest

from storage_api.core.settings.logs import LoggingSettings
from storage_api.infra.logging import config as logging_config
from storage_api.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    set_log_context,
)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging_config.shutdown()
    logging_config._LOGGING_INITIALIZED = False
    clear_log_context()


def _queue_handlers() -> list[QueueHandler]:
    return [h for h in logging.getLogger().handlers if isinstance(h, QueueHandler)]


@pytest.mark.unit
def test_configure_logging_installs_single_queue_handler():
    logging_config.configure_logging(log_level="debug", console_enabled=False)
    logging_config.configure_logging(log_level="info", console_enabled=False)

    handlers = _queue_handlers()
    assert len(handlers) == 1
    assert any(isinstance(f, ContextInjectingFilter) for f in handlers[0].filters)
    assert logging.getLogger().level == logging.INFO


@pytest.mark.unit
def test_json_file_logging_includes_context(tmp_path):
    log_file = tmp_path / "logs" / "app.jsonl"
    logging_config.configure_logging(
        log_level="INFO",
        console_enabled=False,
        file_path=log_file,
        service_name="storage-api",
    )

    set_log_context(request_id="req-9")
    logging.getLogger("storage_api.test").info("Bucket created", extra={"bucket": "reports"})
    logging_config.shutdown()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    data = json.loads(line)
    assert data["message"] == "Bucket created"
    assert data["service"] == "storage-api"
    assert data["bucket"] == "reports"
    assert data["request_id"] == "req-9"


@pytest.mark.unit
def test_setup_logging_is_idempotent(monkeypatch: pytest.MonkeyPatch):
    calls: list[dict] = []
    monkeypatch.setattr(logging_config, "configure_logging", lambda **kw: calls.append(kw))

    settings = LoggingSettings(console_enabled=False)
    logging_config.setup_logging(settings)
    logging_config.setup_logging(settings)
    logging_config.setup_logging(settings, force=True, log_level="ERROR")

    assert len(calls) == 2
    assert calls[1]["log_level"] == "ERROR"


@pytest.mark.unit
def test_json_file_logging_keeps_exception(tmp_path):
    log_file = tmp_path / "app.jsonl"
    logging_config.configure_logging(
        log_level="INFO",
        console_enabled=False,
        file_path=log_file,
    )

    try:
        raise ValueError("boom")
    except ValueError:
        logging.getLogger("storage_api.test").exception("Could not %s", "list buckets")
    logging_config.shutdown()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    data = json.loads(line)
    assert data["message"] == "Could not list buckets"
    assert data["level"] == "ERROR"
    assert "ValueError: boom" in data["exception"]
    assert "Traceback" in data["exception"]
