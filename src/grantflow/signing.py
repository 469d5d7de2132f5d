# Request signing - bearer token Authorization header.
# Created: 2026-02-14

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING

import httpx

from grantflow.errors import ConfigurationError

if TYPE_CHECKING:
    from grantflow.flow import OAuth2Flow

__all__ = ["BearerAuth", "sign_request"]


def sign_request(request: httpx.Request, flow: OAuth2Flow) -> httpx.Request:
    """Set ``Authorization: Bearer <token>`` on *request* and return it.

    Raises:
        ConfigurationError: the flow has no access token yet.
    """
    if not flow.access_token:
        raise ConfigurationError("Cannot sign the request with an empty access token")
    request.headers["Authorization"] = f"Bearer {flow.access_token}"
    return request


class BearerAuth(httpx.Auth):
    """httpx auth that signs each request with the flow's current token.

    Usage::

        async with httpx.AsyncClient(auth=BearerAuth(flow)) as client:
            resp = await client.get("https://api.example.com/me")
    """

    def __init__(self, flow: OAuth2Flow):
        self.flow = flow

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        yield sign_request(request, self.flow)
