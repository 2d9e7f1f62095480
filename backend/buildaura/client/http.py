"""Shared httpx plumbing for the BuildAura API clients.

Configuration:
- BUILDAURA_API_URL: Base URL of the API (default: http://localhost:8000)
- BUILDAURA_HTTP_TIMEOUT: Seconds to wait for a response (default: 120).
  Generation calls wait on the LLM, well past httpx's 5 second default.
"""

import logging
import os
from typing import Any, Optional

import httpx
from dotenv import load_dotenv

from buildaura.client.session import SessionContext
from buildaura.errors import Unauthenticated

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("BUILDAURA_API_URL", "http://localhost:8000")
DEFAULT_TIMEOUT = float(os.getenv("BUILDAURA_HTTP_TIMEOUT", "120"))


def response_detail(response: httpx.Response) -> str:
    """Best-effort error text from an API error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict) and "detail" in body:
        detail = body["detail"]
        return detail if isinstance(detail, str) else str(detail)
    return str(body)[:500]


class ApiClient:
    """Base class holding the session, base URL and transport.

    A fresh ``httpx.AsyncClient`` is opened per call; pass ``transport`` to
    route requests through ``httpx.MockTransport`` or ``httpx.ASGITransport``.
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.session = session
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout
        self._transport = transport

    def _auth_headers(self) -> dict:
        if not self.session.is_authenticated:
            raise Unauthenticated("No active session")
        return {"Authorization": f"Bearer {self.session.access_token}"}

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one authenticated request; transport errors propagate as ``httpx.HTTPError``."""
        headers = self._auth_headers()
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            logger.debug("%s %s", method, path)
            return await client.request(method, path, headers=headers, **kwargs)
