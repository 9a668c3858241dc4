from __future__ import annotations

import json
import logging

from required_actions_check.checker.logging import JsonFormatter, configure_logging


def test_json_formatter_nests_extra_fields() -> None:
    record = logging.LogRecord(
        "required_actions_check.test", logging.ERROR, __file__, 1, "Workflow not found", None, None
    )
    record.workflow = "o/r/.github/workflows/a.yml@main"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "ERROR"
    assert payload["logger"] == "required_actions_check.test"
    assert payload["message"] == "Workflow not found"
    assert payload["extra"] == {"workflow": "o/r/.github/workflows/a.yml@main"}


def test_json_formatter_omits_empty_extra() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello %s", ("world",), None)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "hello world"
    assert "extra" not in payload


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        configure_logging("debug")
        configure_logging("warning", json_output=False)

        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("github").level == logging.WARNING
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
