from __future__ import annotations


class RelayError(Exception):
    """Base class for upstream relay failures."""


class RelayHTTPError(RelayError):
    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")


class RelayTimeout(RelayError):
    """Every attempt of a retried request failed."""
