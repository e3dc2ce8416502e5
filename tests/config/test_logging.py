from __future__ import annotations

import logging

from inbox_assistant.config.logging import get_logger


def test_log_level_is_reread_on_every_call(monkeypatch) -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        monkeypatch.setenv("INBOX_ASSISTANT_LOG_LEVEL", "WARNING")
        get_logger("inbox_assistant.test.first")
        assert root.level == logging.WARNING

        monkeypatch.setenv("INBOX_ASSISTANT_LOG_LEVEL", "debug")
        logger = get_logger("inbox_assistant.test.second")
        assert root.level == logging.DEBUG
        assert logger.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_unknown_level_falls_back_to_info(monkeypatch) -> None:
    monkeypatch.setenv("INBOX_ASSISTANT_LOG_LEVEL", "chatty")

    assert get_logger("inbox_assistant.test.unknown").level == logging.INFO
