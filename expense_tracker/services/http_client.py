from __future__ import annotations

"""Minimal JSON-over-HTTP GET with bounded retries.

Used for the single exchange-rate request. Transient failures (network
errors, timeouts, 5xx, 429, undecodable bodies) are retried with exponential
backoff; other 4xx responses fail immediately. Every failure surfaces as
HttpError so callers handle one exception type.
"""
import http.client
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

logger = logging.getLogger("expense_tracker.http")

USER_AGENT = "expense-tracker/0.1"


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _is_retryable(err: Exception) -> bool:
    if isinstance(err, HttpError) and err.status is not None:
        return err.status >= 500 or err.status == 429
    return True


def _fetch_once(request: urllib.request.Request, timeout: float) -> Dict[str, Any]:
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise HttpError(f"HTTP {e.code} for {request.full_url}", status=e.code) from e
    except (OSError, http.client.HTTPException) as e:
        # urlopen leaves errors raised while reading the body unwrapped
        raise HttpError(f"connection failed for {request.full_url}: {e}") from e
    data = json.loads(body.decode("utf-8"))
    if not isinstance(data, dict):
        raise HttpError(f"expected a JSON object from {request.full_url}")
    return data


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 2, backoff: float = 0.5
) -> Dict[str, Any]:
    request = urllib.request.Request(
        url, headers={"Accept": "application/json", "User-Agent": USER_AGENT}
    )
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            return _fetch_once(request, timeout)
        except (HttpError, ValueError) as e:
            last_err = e
            logger.debug("GET %s failed (attempt %d): %s", url, attempt + 1, e)
            if attempt == retries or not _is_retryable(e):
                break
            time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
