import json

import pytest
from typer.testing import CliRunner

from transform_gateway.main import app
from transform_gateway.relay.client import ClassificationClient

from conftest import COMPLETION_BODY, FakeResponse, FakeSession

runner = CliRunner()

@pytest.fixture
def fake_upstream(monkeypatch):
    monkeypatch.setenv("TRANSFORM_API_KEY", "test-key")
    monkeypatch.setenv("TRANSFORM_MAX_RETRIES", "0")
    monkeypatch.setattr("transform_gateway.main.configure_logging", lambda *a, **kw: None)
    session = FakeSession()
    build = ClassificationClient.from_settings.__func__
    monkeypatch.setattr(
        ClassificationClient, "from_settings",
        classmethod(lambda cls, settings, session_=None: build(cls, settings, session=session)),
    )
    return session

def test_mediate_routes_request(fake_upstream, tmp_path):
    fake_upstream.outcomes[:] = [FakeResponse(200, "{}"), FakeResponse(200, COMPLETION_BODY)]
    body = tmp_path / "req.json"
    body.write_text(json.dumps({"model": "gpt-4", "prompt": "Where is my parcel?"}))

    result = runner.invoke(app, ["mediate", str(body)])

    assert result.exit_code == 0, result.output
    assert "routed" in result.output
    assert fake_upstream.calls[1]["json"]["messages"][0]["content"] == "Where is my parcel?"

def test_mediate_failure_exits_nonzero(fake_upstream, tmp_path):
    fake_upstream.outcomes[:] = [FakeResponse(200, "{}"), FakeResponse(500, "boom")]
    body = tmp_path / "req.json"
    body.write_text(json.dumps({"input": "hello"}))

    result = runner.invoke(app, ["mediate", str(body)])

    assert result.exit_code == 1
    assert "failed" in result.output

def test_classify_prints_text(fake_upstream):
    fake_upstream.outcomes[:] = [FakeResponse(200, COMPLETION_BODY)]
    result = runner.invoke(app, ["classify", "Refund please", "--system", "Label the request"])
    assert result.exit_code == 0, result.output
    assert "billing" in result.output
    assert fake_upstream.calls[0]["json"]["messages"][0]["role"] == "system"

def test_health_reports_unavailable(fake_upstream):
    fake_upstream.outcomes[:] = [FakeResponse(401, "no")]
    result = runner.invoke(app, ["health"])
    assert result.exit_code == 1
    assert "Unavailable" in result.output

def test_classify_raw_tolerates_non_json_body(fake_upstream):
    fake_upstream.outcomes[:] = [FakeResponse(200, "<html>upstream proxy page</html>")]
    result = runner.invoke(app, ["classify", "hi", "--raw"])
    assert result.exit_code == 0, result.output
    assert "<html>upstream proxy page</html>" in result.output
