# Tests for bearer token request signing.
# Created: 2026-02-14

import httpx
import pytest

from grantflow.errors import ConfigurationError
from grantflow.implicit_grant import ImplicitGrantFlow
from grantflow.signing import BearerAuth, sign_request

SETTINGS = {
    "client_id": "abc",
    "authorize_uri": "https://auth.example.com/authorize",
    "redirect_uris": ["myapp://oauth/callback"],
}


@pytest.fixture
def flow():
    return ImplicitGrantFlow(SETTINGS)


class TestSignRequest:
    def test_sets_header(self, flow):
        flow.access_token = "T1"
        request = sign_request(httpx.Request("GET", "https://api.example.com/me"), flow)
        assert request.headers["Authorization"] == "Bearer T1"

    def test_replaces_existing_header(self, flow):
        flow.access_token = "T2"
        request = httpx.Request(
            "GET", "https://api.example.com/me", headers={"Authorization": "Basic xxx"}
        )
        assert sign_request(request, flow).headers["Authorization"] == "Bearer T2"

    def test_empty_token(self, flow):
        with pytest.raises(ConfigurationError, match="empty access token"):
            sign_request(httpx.Request("GET", "https://api.example.com/me"), flow)


class TestBearerAuth:
    def test_client_requests_signed(self, flow):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json={"ok": True})

        flow.access_token = "T1"
        with httpx.Client(transport=httpx.MockTransport(handler), auth=BearerAuth(flow)) as client:
            client.get("https://api.example.com/me")
            flow.access_token = "T2"
            client.get("https://api.example.com/me")

        assert seen == ["Bearer T1", "Bearer T2"]

    async def test_async_client(self, flow):
        async def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"auth": request.headers["Authorization"]})

        flow.access_token = "T3"
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), auth=BearerAuth(flow)
        ) as client:
            resp = await client.get("https://api.example.com/me")

        assert resp.json() == {"auth": "Bearer T3"}

    def test_no_token(self, flow):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        with httpx.Client(transport=httpx.MockTransport(handler), auth=BearerAuth(flow)) as client:
            with pytest.raises(ConfigurationError):
                client.get("https://api.example.com/me")
