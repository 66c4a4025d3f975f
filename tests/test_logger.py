import json
import logging

from askbot.logger import JsonFormatter, get_logger


def test_json_formatter_single_line():
    record = logging.LogRecord("askbot.search", logging.WARNING, __file__, 10, "Vector query %s", ("failed",), None)
    record.extra_fields = {"query": "music"}
    line = JsonFormatter().format(record)

    data = json.loads(line)
    assert "\n" not in line
    assert data["level"] == "WARNING"
    assert data["logger"] == "askbot.search"
    assert data["message"] == "Vector query failed"
    assert data["query"] == "music"


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad page")
    except ValueError:
        import sys

        record = logging.LogRecord("askbot", logging.ERROR, __file__, 1, "oops", (), sys.exc_info())
    data = json.loads(JsonFormatter().format(record))
    assert "ValueError: bad page" in data["exception"]


def test_get_logger_is_namespaced():
    assert get_logger("askbot.app").name == "askbot.app"
