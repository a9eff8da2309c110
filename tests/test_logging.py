"""Tests for logging setup."""

import json
import logging

from leafpress.config import LoggingConfig
from leafpress.utils.logging import log_event, setup_logging


def test_setup_logging_writes_jsonl_events(tmp_path):
    cfg = LoggingConfig(console=False, file=True, format="jsonl", filename="build.jsonl")
    logger = setup_logging(cfg, tmp_path)

    log_event(logger, "Build start", event="build_start", input="posts")
    for handler in logger.handlers:
        handler.flush()

    line = (tmp_path / "build.jsonl").read_text(encoding="utf-8").splitlines()[0]
    payload = json.loads(line)
    assert payload["message"] == "Build start"
    assert payload["event"] == "build_start"
    assert payload["input"] == "posts"
    assert payload["logger"] == "leafpress"

    setup_logging(LoggingConfig(console=False), None)


def test_setup_logging_replaces_handlers():
    logger = setup_logging(LoggingConfig(console=True, level="debug"), None)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False

    logger = setup_logging(LoggingConfig(console=False), None)
    assert logger.handlers == []


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing", event="noop")
