from __future__ import annotations

import os
from dataclasses import dataclass, replace
from dotenv import load_dotenv

load_dotenv()

def _env(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    return v

def _env_int(key: str, default: int) -> int:
    v = _env(key)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default

def _env_float(key: str, default: float) -> float:
    v = _env(key)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default

DEFAULT_API_URL = "https://api.mistral.ai/v1/chat/completions"
DEFAULT_MODEL = "mistral-large-latest"
DEFAULT_ENDPOINT_ID = "mistral_transform_endpoint"

@dataclass(frozen=True)
class Settings:
    # Upstream chat-completion service
    api_key: str
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL  # forced onto every mediated request
    temperature: float = 0.1
    health_check_max_tokens: int = 5
    health_check_prompt: str = "test"

    # Retry helper
    timeout_ms: int = 30000
    max_retries: int = 1
    retry_backoff_ms: int = 150

    # Routing
    endpoint_id: str = DEFAULT_ENDPOINT_ID

    # Metrics + logging
    metrics_host: str = "127.0.0.1"
    metrics_port: int = 9110
    log_level: str = "INFO"

    def with_overrides(self, **changes) -> "Settings":
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)

def load_settings() -> Settings:
    key = _env("TRANSFORM_API_KEY")
    if not key:
        raise RuntimeError("TRANSFORM_API_KEY is required. Set it in .env or environment.")
    return Settings(
        api_key=key.strip(),
        api_url=_env("TRANSFORM_API_URL", DEFAULT_API_URL) or DEFAULT_API_URL,
        model=_env("TRANSFORM_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL,
        temperature=_env_float("TRANSFORM_TEMPERATURE", 0.1),
        health_check_max_tokens=_env_int("TRANSFORM_HEALTH_MAX_TOKENS", 5),
        timeout_ms=_env_int("TRANSFORM_TIMEOUT_MS", 30000),
        max_retries=_env_int("TRANSFORM_MAX_RETRIES", 1),
        retry_backoff_ms=_env_int("TRANSFORM_RETRY_BACKOFF_MS", 150),
        endpoint_id=_env("TRANSFORM_ENDPOINT_ID", DEFAULT_ENDPOINT_ID) or DEFAULT_ENDPOINT_ID,
        metrics_host=_env("TRANSFORM_METRICS_HOST", "127.0.0.1") or "127.0.0.1",
        metrics_port=_env_int("TRANSFORM_METRICS_PORT", 9110),
        log_level=(_env("TRANSFORM_LOG_LEVEL", "INFO") or "INFO").upper(),
    )
