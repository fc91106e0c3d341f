import pytest
from transform_gateway.config import load_settings, Settings, DEFAULT_MODEL

def test_load_settings_requires_api_key(monkeypatch):
    monkeypatch.delenv("TRANSFORM_API_KEY", raising=False)
    with pytest.raises(RuntimeError):
        load_settings()

def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("TRANSFORM_API_KEY", " secret ")
    monkeypatch.setenv("TRANSFORM_MAX_RETRIES", "3")
    monkeypatch.setenv("TRANSFORM_TEMPERATURE", "0.4")
    monkeypatch.setenv("TRANSFORM_LOG_LEVEL", "debug")
    monkeypatch.delenv("TRANSFORM_MODEL", raising=False)
    s = load_settings()
    assert s.api_key == "secret"
    assert s.max_retries == 3
    assert s.temperature == 0.4
    assert s.log_level == "DEBUG"
    assert s.model == DEFAULT_MODEL

def test_malformed_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TRANSFORM_API_KEY", "k")
    monkeypatch.setenv("TRANSFORM_TIMEOUT_MS", "soon")
    monkeypatch.setenv("TRANSFORM_TEMPERATURE", "warm")
    s = load_settings()
    assert s.timeout_ms == 30000
    assert s.temperature == 0.1

def test_with_overrides_ignores_none():
    s = Settings(api_key="k")
    t = s.with_overrides(model="other", api_url=None)
    assert t.model == "other"
    assert t.api_url == s.api_url
    assert s.model == DEFAULT_MODEL
