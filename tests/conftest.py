from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from transform_gateway.config import Settings
from transform_gateway.relay.client import ClassificationClient

COMPLETION_BODY = json.dumps({
    "id": "cmpl-1",
    "object": "chat.completion",
    "model": "mistral-large-latest",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "  billing  "}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 9, "completion_tokens": 1, "total_tokens": 10},
})


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = COMPLETION_BODY):
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Replays queued responses or exceptions; records every request."""

    def __init__(self, *outcomes):
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        if not self.outcomes:
            raise AssertionError("unexpected request")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", max_retries=0, retry_backoff_ms=0)


@pytest.fixture
def make_client(settings):
    def _make(*outcomes, **overrides):
        session = FakeSession(*outcomes)
        client = ClassificationClient.from_settings(settings.with_overrides(**overrides), session=session)
        return client, session
    return _make
