"""Tests for logging setup and the JSON formatter."""

from __future__ import annotations

import json
import logging

from objstore.common.logging import JsonFormatter, setup_logging


def _record(msg: str, *args, **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="objstore.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_payload(self) -> None:
        payload = json.loads(JsonFormatter().format(_record("Deleting bucket %s", "b1")))

        assert payload == {
            "level": "WARNING",
            "logger": "objstore.test",
            "message": "Deleting bucket b1",
        }

    def test_merges_extra_payload(self) -> None:
        record = _record("uploaded", extra={"bucket": "b1", "key": "k"})

        payload = json.loads(JsonFormatter().format(record))

        assert payload["bucket"] == "b1"
        assert payload["key"] == "k"

    def test_ignores_non_dict_extra(self) -> None:
        payload = json.loads(JsonFormatter().format(_record("x", extra="oops")))

        assert "extra" not in payload

    def test_includes_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            import sys

            record = _record("failed")
            record.exc_info = sys.exc_info()

        payload = json.loads(JsonFormatter().format(record))

        assert "ValueError: bad" in payload["exception"]


def test_setup_logging_applies_level_and_format() -> None:
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    try:
        setup_logging("DEBUG", "plain")

        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("botocore").level == logging.WARNING

        setup_logging()

        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
