import json
import logging

from chatbot.logging_config import _JsonFormatter


def test_json_formatter_emits_one_object_per_record() -> None:
    record = logging.LogRecord("chatbot.pipeline", logging.INFO, __file__, 1, "Loaded %d subject names", (3,), None)

    payload = json.loads(_JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "chatbot.pipeline"
    assert payload["msg"] == "Loaded 3 subject names"
    assert "exc_info" not in payload
