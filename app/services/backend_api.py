"""Thin httpx wrapper around the order-processing backend.

The backend answers with an envelope ``{"success": bool, "data": ..., "message": str}``.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import API_URL, API_TIMEOUT

logger = logging.getLogger(__name__)


class BackendAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def api_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=API_URL, timeout=API_TIMEOUT)


def error_message(response: httpx.Response, default: str) -> str:
    """Best message from an error response: ``message``, ``error`` or the status line."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.reason_phrase or 'Unknown error'}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or default
    return default


async def request(method: str, path: str, **kwargs) -> Dict[str, Any]:
    """Send a request and return the decoded JSON envelope.

    Raises BackendAPIError for transport errors, non-2xx answers and bodies
    that are not a JSON object.
    """
    try:
        async with api_client() as client:
            response = await client.request(method, path, **kwargs)
    except httpx.RequestError as e:
        raise BackendAPIError(f"Backend unreachable: {e}") from e

    if response.is_error:
        message = error_message(response, "Backend API failed")
        logger.error("Backend %s %s failed (%s): %s", method, path, response.status_code, message)
        raise BackendAPIError(message, response.status_code)
    try:
        body = response.json()
    except ValueError as e:
        raise BackendAPIError("Backend returned invalid JSON", response.status_code) from e
    if not isinstance(body, dict):
        raise BackendAPIError("Unexpected backend response", response.status_code)
    return body
