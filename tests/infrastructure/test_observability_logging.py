from __future__ import annotations

import logging

from mystat.infrastructure.observability import ContextualFormatter, get_logger, log_context
from mystat.infrastructure.observability import logging as logging_module


def _format(message: str) -> str:
    record = logging.LogRecord("mystat.test", logging.INFO, __file__, 1, message, None, None)
    return ContextualFormatter("%(message)s").format(record)


def test_context_fields_appended_and_restored() -> None:
    with log_context(method="GET", path="reviews/index/list"):
        with log_context(attempt=2):
            assert _format("Sending request") == (
                "Sending request [method=GET path=reviews/index/list attempt=2]"
            )
        assert _format("Sending request") == "Sending request [method=GET path=reviews/index/list]"
    assert _format("Sending request") == "Sending request"


def test_secret_fields_are_redacted() -> None:
    with log_context(username="student", password="s3cret", token="abc"):
        line = _format("Logging in")
    assert "s3cret" not in line and "abc" not in line
    assert "username=student" in line
    assert "password=***" in line


def test_library_logger_is_silent_by_default(monkeypatch) -> None:
    monkeypatch.setattr(logging_module, "_configured", False)
    logger = get_logger("mystat.some.module")
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


def test_formatting_leaves_record_untouched() -> None:
    formatter = ContextualFormatter("%(message)s")
    record = logging.LogRecord(
        "mystat.test", logging.INFO, __file__, 1, "Fetched %d items", (3,), None
    )

    with log_context(path="100%/list"):
        first = formatter.format(record)
        second = formatter.format(record)

    assert first == second == "Fetched 3 items [path=100%/list]"
    assert record.msg == "Fetched %d items"
