"""
User content extraction and model rewriting for inbound chat payloads.

Inbound bodies come in three shapes, checked in this order:

- ``messages``: a conversation list; only the last entry's ``content`` counts.
  A non-list ``messages`` value is used as the text itself
- ``prompt``: a single completion-style prompt
- ``input``: a single embeddings/responses-style input

Anything else decodes to ``Unrecognized``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from .context import MessageContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationList:
    messages: List[Any]

    @property
    def text(self) -> Optional[str]:
        if not self.messages:
            return None
        last = self.messages[-1]
        if not isinstance(last, dict):
            return None
        return _as_text(last.get("content"))


@dataclass(frozen=True)
class PromptField:
    value: Any

    @property
    def text(self) -> Optional[str]:
        return _as_text(self.value)


@dataclass(frozen=True)
class InputField:
    value: Any

    @property
    def text(self) -> Optional[str]:
        return _as_text(self.value)


@dataclass(frozen=True)
class Unrecognized:
    reason: str = "no messages, prompt or input field"

    @property
    def text(self) -> Optional[str]:
        return None


Content = Union[ConversationList, PromptField, InputField, Unrecognized]


@dataclass(frozen=True)
class Extraction:
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def empty(self) -> bool:
        return self.text is None or not self.text.strip()


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value and all(isinstance(p, dict) for p in value):
        # multimodal content parts: keep the text ones
        parts = [p["text"] for p in value if p.get("type") == "text" and isinstance(p.get("text"), str)]
        if parts:
            return "\n".join(parts)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def decode_content(payload: Any) -> Content:
    """Decode a parsed JSON body into one of the content variants."""
    if not isinstance(payload, dict):
        return Unrecognized(reason=f"payload is a {type(payload).__name__}, not an object")

    messages = payload.get("messages")
    if isinstance(messages, list):
        return ConversationList(messages=messages)
    if messages is not None:
        # a scalar or object under messages is taken verbatim as the text
        return PromptField(value=messages)
    if payload.get("prompt") is not None:
        return PromptField(value=payload["prompt"])
    if payload.get("input") is not None:
        return InputField(value=payload["input"])
    return Unrecognized()


def extract_from_json(json_payload: str) -> Extraction:
    try:
        payload = json.loads(json_payload)
    except ValueError as e:
        logger.warning(f"Error parsing JSON payload for content extraction: {e}")
        return Extraction(error=str(e))
    content = decode_content(payload)
    if isinstance(content, Unrecognized):
        logger.debug(f"No extractable content: {content.reason}")
    return Extraction(text=content.text)


def extract_user_content(context: MessageContext) -> Extraction:
    """Pull the user's content out of the context's JSON body, best effort."""
    try:
        json_payload = context.json_payload_to_string()
    except Exception as e:
        logger.warning(f"Error extracting user request content: {e}", exc_info=True)
        return Extraction(error=str(e))
    if json_payload is None:
        return Extraction()
    return extract_from_json(json_payload)


def force_model(context: MessageContext, model: str) -> bool:
    """
    Overwrite the body's ``model`` with the given one, in place.

    Other fields and their order are preserved. Returns False when the body
    could not be rewritten; the original model value then stays.
    """
    try:
        json_payload = context.json_payload_to_string()
        if json_payload is None:
            return False
        payload = json.loads(json_payload)
        if not isinstance(payload, dict):
            logger.warning("Error removing user model from request: payload is not a JSON object")
            return False
        payload["model"] = model
        context.remove_json_payload()
        context.set_json_payload(json.dumps(payload, ensure_ascii=False))
    except Exception as e:
        logger.warning(f"Error removing user model from request: {e}")
        return False
    logger.debug(f"Replaced user model with fixed model: {model}")
    return True
