"""Shared HTTP execution helper with a fixed retry policy.

Callers own the session and the interpretation of the final response; this
module only decides when an attempt is worth repeating.
"""

from __future__ import annotations

import logging
import time

import requests

from .errors import RelayHTTPError, RelayTimeout

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({502, 503, 504})


def execute_with_retries(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout_s: float,
    max_retries: int = 1,
    backoff_s: float = 0.15,
    **kwargs,
) -> requests.Response:
    """
    Send a request, repeating it on timeouts, connection errors and gateway errors.

    Args:
        session: Session used for every attempt
        method: HTTP method
        url: Target URL
        timeout_s: Per-attempt timeout in seconds
        max_retries: Extra attempts after the first one
        backoff_s: Sleep between attempts

    Returns:
        The last response received. A retryable status on the final attempt is
        returned as-is so the caller can inspect it.

    Raises:
        RelayTimeout: when every attempt raised a transport error
    """
    attempts = max(0, int(max_retries)) + 1
    last_err: Exception | None = None

    for attempt in range(attempts):
        try:
            r = session.request(method, url, timeout=timeout_s, **kwargs)
            if r.status_code not in RETRYABLE_STATUS or attempt == attempts - 1:
                return r
            last_err = RelayHTTPError(r.status_code, r.text[:500])
            logger.debug(f"Retryable status {r.status_code} from {url} (attempt {attempt + 1}/{attempts})")
        except (requests.Timeout, requests.ConnectionError) as e:
            last_err = e
            logger.debug(f"Transport error calling {url} (attempt {attempt + 1}/{attempts}): {e}")

        if attempt < attempts - 1 and backoff_s > 0:
            time.sleep(backoff_s)

    raise RelayTimeout(f"Request to {url} failed after {attempts} attempt(s): {last_err}")
