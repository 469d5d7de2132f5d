# Tests for the implicit grant.
# Created: 2026-02-13

import urllib.parse
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from grantflow.errors import OAuth2ErrorKind
from grantflow.implicit_grant import ImplicitGrantFlow

SETTINGS = {
    "client_id": "abc",
    "authorize_uri": "https://auth.example.com/authorize",
    "redirect_uris": ["myapp://oauth/callback"],
    "state_for_testing": "S1",
}

REDIRECT = "myapp://oauth/callback"


@pytest.fixture
def flow():
    flow = ImplicitGrantFlow(SETTINGS, transport=AsyncMock())
    flow.on_authorize = MagicMock()
    flow.on_failure = MagicMock()
    flow.after_authorize_or_failure = MagicMock()
    return flow


def _error(flow):
    flow.on_authorize.assert_not_called()
    flow.on_failure.assert_called_once()
    error = flow.on_failure.call_args.args[0]
    flow.after_authorize_or_failure.assert_called_once_with(True, error)
    return error


def test_authorize_url_response_type(flow):
    url = flow.authorize_url()
    query = dict(urllib.parse.parse_qsl(urllib.parse.urlsplit(url).query))
    assert query["response_type"] == "token"
    assert query["state"] == "S1"


async def test_bearer_token_accepted(flow):
    await flow.handle_redirect_url(
        f"{REDIRECT}#access_token=T1&token_type=bearer&state=S1&expires_in=3600"
    )

    assert flow.access_token == "T1"
    expected = datetime.now(UTC) + timedelta(seconds=3600)
    assert abs((flow.access_token_expiry - expected).total_seconds()) < 5
    flow.on_authorize.assert_called_once_with(
        {"access_token": "T1", "token_type": "bearer", "state": "S1", "expires_in": "3600"}
    )
    flow.on_failure.assert_not_called()
    flow.after_authorize_or_failure.assert_called_once_with(False, None)
    assert flow.has_unexpired_access_token() is True


async def test_state_not_cleared(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=Bearer&state=S1")
    assert flow.state == "S1"


async def test_token_type_case_insensitive(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=BEARER&state=S1")
    assert flow.access_token == "T1"


async def test_no_expiry(flow):
    flow.access_token_expiry = datetime.now(UTC) - timedelta(days=1)
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=bearer&state=S1")
    assert flow.access_token_expiry is None


async def test_non_integer_expiry_ignored(flow):
    await flow.handle_redirect_url(
        f"{REDIRECT}#access_token=T1&token_type=bearer&state=S1&expires_in=soon"
    )
    assert flow.access_token == "T1"
    assert flow.access_token_expiry is None


@pytest.mark.parametrize("expires_in", ["99999999999999", "%C2%B2", "%D9%A3"])
async def test_unusable_expiry_still_authorizes(flow, expires_in):
    await flow.handle_redirect_url(
        f"{REDIRECT}#access_token=T1&token_type=bearer&state=S1&expires_in={expires_in}"
    )

    assert flow.access_token == "T1"
    assert flow.access_token_expiry is None
    flow.on_authorize.assert_called_once()
    flow.on_failure.assert_not_called()
    flow.after_authorize_or_failure.assert_called_once_with(False, None)


async def test_padded_token_kept(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=YWJj==&token_type=bearer&state=S1")
    assert flow.access_token == "YWJj=="


async def test_mac_token_unsupported(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=mac&state=S1")

    error = _error(flow)
    assert error.kind == OAuth2ErrorKind.UNSUPPORTED
    assert flow.access_token == ""


async def test_missing_token_type(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&state=S1")
    assert _error(flow).kind == OAuth2ErrorKind.PREREQUISITE_FAILED


async def test_missing_state(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=bearer")

    assert _error(flow).kind == OAuth2ErrorKind.INVALID_STATE
    assert flow.access_token == ""


async def test_wrong_state(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=bearer&state=S2")

    error = _error(flow)
    assert error.kind == OAuth2ErrorKind.INVALID_STATE
    assert "S2" in error.message


async def test_state_required_even_if_none_issued():
    flow = ImplicitGrantFlow({**SETTINGS, "state_for_testing": None})
    on_failure = MagicMock()
    flow.on_failure = on_failure

    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=bearer&state=")

    assert on_failure.call_args.args[0].kind == OAuth2ErrorKind.INVALID_STATE


async def test_no_fragment(flow):
    await flow.handle_redirect_url(f"{REDIRECT}?access_token=T1")
    assert _error(flow).kind == OAuth2ErrorKind.PREREQUISITE_FAILED


async def test_empty_fragment(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#")
    assert _error(flow).kind == OAuth2ErrorKind.PREREQUISITE_FAILED


async def test_error_in_fragment(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#error=access_denied&state=S1")

    error = _error(flow)
    assert error.kind == OAuth2ErrorKind.AUTHORIZATION_ERROR
    assert error.message == "The resource owner or authorization server denied the request."


async def test_empty_access_token(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=&token_type=bearer&state=S1")

    error = _error(flow)
    assert error.kind == OAuth2ErrorKind.AUTHORIZATION_ERROR
    assert error.message == "Unknown error."


async def test_no_network_used(flow):
    await flow.handle_redirect_url(f"{REDIRECT}#access_token=T1&token_type=bearer&state=S1")
    flow.transport.send.assert_not_called()
