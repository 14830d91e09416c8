from __future__ import annotations

import json
import logging

from infra.logging import RuntimeJsonFormatter


def test_json_formatter_adds_run_metadata() -> None:
    formatter = RuntimeJsonFormatter(run_id="20260101T000000Z", environment="test")
    record = logging.LogRecord(
        name="dockernotify.watcher",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="docker event stream failed: %s",
        args=("reset",),
        exc_info=None,
    )

    line = json.loads(formatter.format(record))

    assert line["message"] == "docker event stream failed: reset"
    assert line["run_id"] == "20260101T000000Z"
    assert line["environment"] == "test"
    assert line["logger"] == "dockernotify.watcher"
    assert line["level"] == "WARNING"
