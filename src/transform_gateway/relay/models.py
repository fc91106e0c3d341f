from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional

class Message(BaseModel):
    role: str
    content: str

class ChatCompletionRequest(BaseModel):
    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    messages: List[Message]

    def to_payload(self) -> Dict[str, Any]:
        # Unset optionals are left out of the wire body entirely
        return self.model_dump(exclude_none=True)

class ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str

class Choice(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: ResponseMessage

class ChatCompletionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    choices: List[Choice]

class RelayStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"

class RelayResult(BaseModel):
    """Outcome of one upstream call. Failures are values, never exceptions."""
    status: RelayStatus
    body: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RelayStatus.OK

    @classmethod
    def success(cls, body: str, status_code: int = 200) -> "RelayResult":
        return cls(status=RelayStatus.OK, body=body, status_code=status_code)

    @classmethod
    def empty(cls, status_code: int = 200) -> "RelayResult":
        return cls(status=RelayStatus.EMPTY, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "RelayResult":
        return cls(status=RelayStatus.ERROR, error=error, status_code=status_code)
