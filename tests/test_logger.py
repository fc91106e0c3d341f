import json
import logging

from transform_gateway.util.logger import JSONFormatter, configure_logging

def _record(msg):
    return logging.LogRecord("transform_gateway.relay.client", logging.WARNING, __file__, 1, msg, None, None)

def test_json_formatter_plain_message():
    out = json.loads(JSONFormatter().format(_record("upstream said no")))
    assert out["level"] == "WARNING"
    assert out["message"] == "upstream said no"
    assert out["name"] == "transform_gateway.relay.client"

def test_json_formatter_merges_dict_messages():
    out = json.loads(JSONFormatter().format(_record({"event": "relay_failure", "status": 503})))
    assert out["event"] == "relay_failure"
    assert out["status"] == 503
    assert "message" not in out

def test_configure_logging_replaces_root_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("debug", json_logs=True)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
