from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from ..config import Settings
from ..obs.metrics import RELAY_CALL_MS, RELAY_ERRORS
from .errors import RelayTimeout
from .http import execute_with_retries
from .models import ChatCompletionRequest, ChatCompletionResponse, Message, RelayResult

logger = logging.getLogger(__name__)

class ClassificationClient:
    """
    Best-effort client for an OpenAI-compatible chat-completion endpoint.

    Every public entry point returns a value: parsed text, the raw body,
    a RelayResult or a bool. Transport and parse failures are logged and
    turned into None / False / an error result.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.1,
        timeout_ms: int = 30000,
        max_retries: int = 1,
        retry_backoff_ms: int = 150,
        health_check_max_tokens: int = 5,
        health_check_prompt: str = "test",
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.strip()
        self.api_key = api_key.strip() if api_key else ""
        self.model = model
        self.temperature = temperature
        self.timeout_s = max(0.1, timeout_ms / 1000.0)
        self.max_retries = max(0, int(max_retries))
        self.backoff_s = max(0.0, retry_backoff_ms / 1000.0)
        self.health_check_max_tokens = health_check_max_tokens
        self.health_check_prompt = health_check_prompt
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "ClassificationClient":
        return cls(
            api_url=settings.api_url,
            api_key=settings.api_key,
            model=settings.model,
            temperature=settings.temperature,
            timeout_ms=settings.timeout_ms,
            max_retries=settings.max_retries,
            retry_backoff_ms=settings.retry_backoff_ms,
            health_check_max_tokens=settings.health_check_max_tokens,
            health_check_prompt=settings.health_check_prompt,
            session=session,
        )

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ClassificationClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -- payloads -----------------------------------------------------------

    def build_payload(
        self,
        *messages: Message,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        req = ChatCompletionRequest(
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=list(messages),
        )
        return req.to_payload()

    def _prompt_payload(self, prompt: str, system_prompt: Optional[str] = None) -> Dict[str, Any]:
        messages = [Message(role="user", content=prompt)]
        if system_prompt is not None:
            messages.insert(0, Message(role="system", content=system_prompt))
        return self.build_payload(*messages, temperature=self.temperature)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    # -- transport ----------------------------------------------------------

    def send(self, payload: Dict[str, Any]) -> RelayResult:
        """POST one payload and classify the outcome. Never raises."""
        t0 = time.perf_counter()
        try:
            r = execute_with_retries(
                self._session,
                "POST",
                self.api_url,
                timeout_s=self.timeout_s,
                max_retries=self.max_retries,
                backoff_s=self.backoff_s,
                json=payload,
                headers=self._headers(),
            )
        except RelayTimeout as e:
            RELAY_ERRORS.labels(kind="transport").inc()
            logger.warning(f"Error calling chat-completion API: {e}")
            return RelayResult.failure(str(e))
        except (requests.RequestException, ValueError) as e:
            # Invalid URLs and client setup problems land here
            RELAY_ERRORS.labels(kind="client").inc()
            logger.warning(f"Error executing HTTP request: {e}")
            return RelayResult.failure(str(e))
        except Exception as e:
            RELAY_ERRORS.labels(kind="unexpected").inc()
            logger.warning(f"Unexpected error calling chat-completion API: {e!r}")
            return RelayResult.failure(repr(e))
        finally:
            RELAY_CALL_MS.observe((time.perf_counter() - t0) * 1000.0)

        if r.status_code != 200:
            RELAY_ERRORS.labels(kind="status").inc()
            logger.warning(f"Chat-completion API returned HTTP {r.status_code}")
            return RelayResult.failure(f"HTTP {r.status_code}: {r.text[:500]}", status_code=r.status_code)

        body = r.text
        if not body:
            logger.warning("Chat-completion API returned an empty body")
            return RelayResult.empty(status_code=r.status_code)
        return RelayResult.success(body, status_code=r.status_code)

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> RelayResult:
        return self.send(self._prompt_payload(prompt, system_prompt))

    # -- parsed text --------------------------------------------------------

    @staticmethod
    def parse_content(body: str) -> Optional[str]:
        """Return choices[0].message.content stripped, or None."""
        try:
            resp = ChatCompletionResponse.model_validate_json(body)
        except ValidationError as e:
            RELAY_ERRORS.labels(kind="parse").inc()
            logger.warning(f"Error parsing chat-completion response: {e.error_count()} validation error(s)")
            return None
        if not resp.choices:
            logger.warning("Chat-completion response has no choices")
            return None
        return resp.choices[0].message.content.strip()

    def classify_request(self, prompt: str) -> Optional[str]:
        result = self.complete(prompt)
        return self.parse_content(result.body) if result.ok else None

    def classify_request_with_system_prompt(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        result = self.complete(user_prompt, system_prompt=system_prompt)
        return self.parse_content(result.body) if result.ok else None

    # -- raw body -----------------------------------------------------------

    def get_full_json_response(self, prompt: str) -> Optional[str]:
        result = self.complete(prompt)
        return result.body if result.ok else None

    def get_full_json_response_with_system_prompt(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        result = self.complete(user_prompt, system_prompt=system_prompt)
        return result.body if result.ok else None

    # -- health -------------------------------------------------------------

    def is_service_available(self) -> bool:
        """Minimal low-budget request; True only on HTTP 200."""
        payload = self.build_payload(
            Message(role="user", content=self.health_check_prompt),
            max_tokens=self.health_check_max_tokens,
        )
        return self.send(payload).status_code == 200
