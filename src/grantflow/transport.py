# HTTP transport - token endpoint requests over httpx.
# Created: 2026-02-12

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from grantflow.config import get_settings

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


@dataclass
class TokenRequest:
    """A POST to the token endpoint, body already form-encoded."""

    url: str
    body: str
    method: str = "POST"
    headers: dict[str, str] = field(
        default_factory=lambda: {
            "Content-Type": FORM_CONTENT_TYPE,
            "Accept": "application/json",
        }
    )


@dataclass
class TransportResponse:
    """Status, headers and raw body returned by a transport."""

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Sends token requests.

    Implementations raise ``httpx.HTTPError`` or ``OSError`` when the request
    could not be completed; an HTTP error status is a normal response.
    """

    async def send(self, request: TokenRequest) -> TransportResponse: ...


class HttpxTransport:
    """Default transport, one short-lived ``httpx.AsyncClient`` per request.

    Pass ``client`` to reuse a long-lived client (connection pooling, proxies).
    """

    def __init__(self, timeout: float | None = None, client: httpx.AsyncClient | None = None):
        self.timeout = timeout if timeout is not None else get_settings().request_timeout
        self._client = client

    async def send(self, request: TokenRequest) -> TransportResponse:
        if self._client is not None:
            resp = await self._send(self._client, request)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await self._send(client, request)

        return TransportResponse(
            status_code=resp.status_code,
            body=resp.content,
            headers=dict(resp.headers),
        )

    async def _send(self, client: httpx.AsyncClient, request: TokenRequest) -> httpx.Response:
        logger.debug("%s %s", request.method, request.url)
        return await client.request(
            request.method,
            request.url,
            content=request.body.encode("utf-8"),
            headers=request.headers,
            timeout=self.timeout,
        )
