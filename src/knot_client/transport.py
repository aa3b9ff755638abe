"""HTTP transport for the Knot backend.

Performs a single request per call and folds every outcome into an
``ApiResult``: HTTP errors, unparseable bodies and transport exceptions all
come back as ``success=False`` with a message. Nothing is raised to callers.
"""

import logging
from typing import Any

import requests

from knot_client.config import get_base_url
from knot_client.models import ApiResult

logger = logging.getLogger(__name__)

PARSE_ERROR = "Failed to parse response"


class HttpTransport:
    """Thin wrapper over a requests.Session bound to one backend base URL."""

    def __init__(self, base_url: str | None = None, session: requests.Session | None = None):
        self.base_url = (base_url or get_base_url()).rstrip("/")
        self.session = session or requests.Session()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def request(self, method: str, path: str, body: Any = None) -> ApiResult:
        """Send one request and return the normalized result."""
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            if body is None:
                response = self.session.request(method, url)
            else:
                response = self.session.request(method, url, json=body)
        except (requests.RequestException, TypeError, ValueError) as e:
            # TypeError/ValueError: body that cannot be encoded as JSON
            logger.warning("%s %s failed: %s", method, url, e)
            return ApiResult.fail(str(e))

        return _handle_response(method, url, response)


def _handle_response(method: str, url: str, response: requests.Response) -> ApiResult:
    if not 200 <= response.status_code < 300:
        logger.warning("%s %s returned %s", method, url, response.status_code)
        return ApiResult.fail(f"HTTP Error: {response.status_code} {response.reason}")

    try:
        payload = response.json()
    except ValueError:
        logger.warning("%s %s returned a body that is not JSON", method, url)
        return ApiResult.fail(PARSE_ERROR)

    if isinstance(payload, dict) and "success" in payload:
        # Backend envelope; application-level failures pass through as-is
        error = payload.get("error")
        return ApiResult(
            success=bool(payload["success"]),
            data=payload.get("data"),
            error=None if error is None else str(error),
        )
    return ApiResult.ok(payload)
