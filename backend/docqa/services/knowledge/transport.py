# backend/docqa/services/knowledge/transport.py
"""
HTTP transport used by the provider gateway.

The gateway only needs "POST this JSON, give me status + body". Timeouts and
connection failures are reported as UpstreamError so that callers see a
single failure shape for anything that goes wrong on the wire.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from docqa.core.config import settings
from docqa.core.exceptions import UpstreamError
from docqa.core.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    status_text: str
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parses the body. Raises ValueError if it is not JSON."""
        return json.loads(self.content)


@runtime_checkable
class Transport(Protocol):
    """Anything that can POST a JSON body and report status plus raw body."""

    async def post(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> TransportResponse:
        ...


class HttpxTransport:
    """Transport backed by httpx.AsyncClient.

    A client can be injected (e.g. one built on httpx.MockTransport); otherwise
    a short-lived client is created per request.
    """

    def __init__(self, timeout: Optional[float] = None, client: Optional[httpx.AsyncClient] = None):
        self.timeout = settings.LLM_REQUEST_TIMEOUT if timeout is None else timeout
        self._client = client

    async def post(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> TransportResponse:
        log.info(f"[Transport] POST {url}")
        try:
            if self._client is not None:
                response = await self._client.post(url, headers=headers, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            log.warning(f"[Transport] Timeout after {self.timeout}s for {url}: {e!r}")
            raise UpstreamError(504, "Gateway Timeout") from e
        except httpx.RequestError as e:
            log.warning(f"[Transport] Request to {url} failed: {e!r}")
            raise UpstreamError(502, f"Bad Gateway: {e}") from e

        log.info(f"[Transport] {url} -> {response.status_code} {response.reason_phrase}")
        return TransportResponse(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            content=response.content,
        )
