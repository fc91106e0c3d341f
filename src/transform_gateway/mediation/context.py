"""In-process stand-in for the gateway's per-request message container.

The gateway owns two property scopes: message-level properties read by later
mediators, and transport-level properties read by the HTTP sender. The JSON
payload travels next to both.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

# Message-level property names
TARGET_ENDPOINT = "TARGET_ENDPOINT"
REJECT_ENDPOINT = "REJECT"
LLM_ROUTE_CONFIGS = "LLM_ROUTE_CONFIGS"
LLM_TARGET_MODEL_ENDPOINT = "TARGET_MODEL_ENDPOINT"
SUSPEND_DURATION = "SUSPEND_DURATION"

# Transport-level property names
HTTP_SC = "HTTP_SC"
MESSAGE_TYPE = "messageType"
CONTENT_TYPE = "ContentType"

JSON_MEDIA_TYPE = "application/json"


class MessageContext:
    def __init__(
        self,
        payload: Union[str, bytes, Dict[str, Any], None] = None,
        content_type: Optional[str] = JSON_MEDIA_TYPE,
    ):
        self.properties: Dict[str, Any] = {}
        self.transport_properties: Dict[str, Any] = {}
        if content_type:
            self.transport_properties[CONTENT_TYPE] = content_type
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        elif isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        self._payload: Optional[str] = payload

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def set_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    @property
    def content_type(self) -> Optional[str]:
        return self.transport_properties.get(CONTENT_TYPE)

    def has_json_payload(self) -> bool:
        ctype = (self.content_type or "").split(";")[0].strip().lower()
        is_json = ctype == JSON_MEDIA_TYPE or ctype.endswith("+json")
        return is_json and self._payload is not None

    def json_payload_to_string(self) -> Optional[str]:
        if not self.has_json_payload():
            return None
        return self._payload

    def remove_json_payload(self) -> None:
        self._payload = None

    def set_json_payload(self, text: str) -> None:
        """Replace the payload. Raises ValueError if text is not JSON."""
        json.loads(text)
        self._payload = text
        self.transport_properties[CONTENT_TYPE] = JSON_MEDIA_TYPE

    def __repr__(self) -> str:
        return f"MessageContext(properties={sorted(self.properties)}, content_type={self.content_type!r})"
