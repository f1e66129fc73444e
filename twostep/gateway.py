"""Submission gateway: POST a JSON payload to a named backend endpoint.

Each call is a single attempt. The blocking request runs in the default
executor so the event loop (and any TUI on it) stays responsive while the
call is outstanding.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

import requests
from loguru import logger

from twostep.config import Config, get_config

# Endpoint names
LOGIN_WITH_EMAIL = "loginWithEmail"
LOGIN_WITH_MOBILE = "loginWithMobile"
OTP = "otp"


@dataclass
class GatewayResult:
    """Outcome of a gateway call.

    Attributes:
        ok: True if the backend accepted the payload
        data: Decoded response body on success (JSON if possible, else text)
        error: Failure detail on failure
        status_code: HTTP status, if a response was received
    """

    ok: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def success(cls, data: Any = None, status_code: Optional[int] = None) -> "GatewayResult":
        return cls(ok=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "GatewayResult":
        return cls(ok=False, error=error, status_code=status_code)


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class SubmissionGateway:
    """Sends form payloads to the backend.

    Attributes:
        base_url: Backend base URL; endpoints are appended to it
        timeout: Request timeout in seconds, or None to wait indefinitely
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        config: Optional[Config] = None,
    ):
        """Initialize gateway.

        Args:
            base_url: Backend base URL (defaults to configured base_url)
            timeout: Request timeout (defaults to configured request_timeout)
            session: Optional requests session to reuse connections
            config: Config to read defaults from (defaults to global config)
        """
        config = config or get_config()
        self.base_url = (base_url or config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.session = session or requests.Session()

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _post(self, endpoint: str, payload: dict) -> GatewayResult:
        url = self.endpoint_url(endpoint)
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            return GatewayResult.failure(str(e))

        if not response.ok:
            body = _decode_body(response)
            detail = body.get("message") if isinstance(body, dict) else body
            error = f"HTTP {response.status_code}: {detail or response.reason}"
            logger.error(f"{endpoint} rejected: {error}")
            return GatewayResult.failure(error, status_code=response.status_code)

        logger.debug(f"{endpoint} succeeded with HTTP {response.status_code}")
        return GatewayResult.success(_decode_body(response), status_code=response.status_code)

    async def submit(self, endpoint: str, payload: dict) -> GatewayResult:
        """Submit a payload to a named endpoint.

        Args:
            endpoint: Endpoint name (e.g., 'loginWithEmail')
            payload: JSON-serializable payload

        Returns:
            GatewayResult with the response data or the failure detail
        """
        logger.debug(f"Submitting to {endpoint} (fields: {', '.join(payload)})")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._post, endpoint, payload)
