# Authorization code grant - redirect validation, code exchange, token refresh.
# Created: 2026-02-13

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Mapping
from typing import Any

import httpx

from grantflow.config import ClientConfig
from grantflow.dispatch import Dispatcher
from grantflow.errors import (
    OAuth2Error,
    OAuth2ErrorKind,
    error_from_response,
    error_message_from_response,
)
from grantflow.flow import OAuth2Flow, expiry_from, mask_token
from grantflow.parsers import JSONTokenParser, TokenResponseParser
from grantflow.query import build_url, decode_query, split_url
from grantflow.transport import TokenRequest, Transport

logger = logging.getLogger(__name__)


class CodeGrantFlow(OAuth2Flow):
    """Authorization code grant for confidential clients.

    The redirect carries a short-lived ``code`` which is POSTed to the token
    endpoint together with the client secret. Meant for clients that can keep
    that secret, which a distributed desktop or mobile app cannot.

    Pass ``response_parser`` for providers whose token endpoint does not
    answer with JSON (see ``grantflow.parsers``).
    """

    def __init__(
        self,
        settings: ClientConfig | Mapping[str, Any],
        *,
        dispatcher: Dispatcher | None = None,
        transport: Transport | None = None,
        response_parser: TokenResponseParser | None = None,
    ):
        super().__init__(settings, dispatcher=dispatcher, transport=transport)
        self.token_url = self.config.token_endpoint
        self._require_https(self.token_url)
        self.refresh_token = ""
        self.response_parser: TokenResponseParser = response_parser or JSONTokenParser()

    def authorize_url_with_redirect(
        self,
        redirect: str | None = None,
        scope: str | None = None,
        params: Mapping[str, str] | None = None,
    ) -> str:
        return self.build_authorize_url(self.auth_url, redirect, scope, "code", params)

    def forget_tokens(self) -> None:
        super().forget_tokens()
        self.refresh_token = ""

    # -- redirect handling --

    async def handle_redirect_url(self, url: str) -> None:
        """Extract the code from the redirect and exchange it for a token."""
        self._log("Handling redirect URL %s", url)
        try:
            code = self.validate_redirect_url(url)
        except OAuth2Error as e:
            logger.warning("Invalid redirect URL: %s", e.message)
            self.did_fail(e)
            return

        await self.exchange_code_for_token(code)

    def validate_redirect_url(self, url: str) -> str:
        """Return the code from *url*, clearing the CSRF state.

        Raises:
            OAuth2Error: no query, state missing or mismatched, or the
                provider sent an error response.
        """
        query_string = urllib.parse.urlsplit(url).query
        if not query_string:
            raise OAuth2Error(
                "The redirect URL contains no query fragment",
                OAuth2ErrorKind.PREREQUISITE_FAILED,
            )

        query = decode_query(query_string, unquote=True)
        state_matches = bool(self.state) and query.get("state") == self.state

        if "code" in query:
            if not state_matches:
                raise OAuth2Error(
                    "Invalid state, will not use the code",
                    OAuth2ErrorKind.INVALID_STATE,
                    params=query,
                )
            self.state = ""
            self._log("Successfully validated redirect URL")
            return query["code"]

        if "error" not in query and not state_matches:
            raise OAuth2Error(
                "Invalid state, no code received",
                OAuth2ErrorKind.INVALID_STATE,
                params=query,
            )
        raise error_from_response(query)

    # -- token requests --

    def token_request(self, code: str, params: Mapping[str, str] | None = None) -> TokenRequest:
        """POST exchanging *code* for an access token."""
        body = dict(params or {})
        body["code"] = code
        body["grant_type"] = "authorization_code"
        if self.client_secret is not None:
            body["client_secret"] = self.client_secret
        return self._token_endpoint_request(body)

    def refresh_token_request(self, params: Mapping[str, str] | None = None) -> TokenRequest:
        """POST exchanging the refresh token for a new access token."""
        body = dict(params or {})
        body["refresh_token"] = self.refresh_token
        body["grant_type"] = "refresh_token"
        body["client_id"] = self.client_id
        if self.client_secret is not None:
            body["client_secret"] = self.client_secret
        if self.scope is not None:
            body["scope"] = self.scope
        return self._token_endpoint_request(body)

    def _token_endpoint_request(self, params: dict[str, str]) -> TokenRequest:
        if self.redirect is None and self.config.redirect_uris:
            self.redirect = self.config.redirect_uris[0]

        self._require_https(self.token_url)
        params["client_id"] = self.client_id
        if self.redirect:
            params["redirect_uri"] = self.redirect

        # Same escaping as the authorize URL, then the query moves into the body.
        url, body = split_url(build_url(self.token_url, params))
        return TokenRequest(url=url, body=body)

    async def exchange_code_for_token(self, code: str) -> None:
        """Trade *code* for tokens; the outcome goes to the callbacks."""
        if not code:
            logger.warning("No code to exchange for a token, cannot continue")
            self.did_fail(
                OAuth2Error(
                    "I don't have a code to exchange, let the user authorize first",
                    OAuth2ErrorKind.PREREQUISITE_FAILED,
                )
            )
            return

        request = self.token_request(code)
        self._log("Exchanging code %s for token at %s", mask_token(code), request.url)
        await self._perform_token_request(request)

    async def refresh_authorization_token(self) -> None:
        """Get a new access token with the refresh token, if there is one."""
        if not self.refresh_token:
            logger.warning("No refresh token to exchange, cannot continue")
            self.did_fail(
                OAuth2Error(
                    "I don't have a refresh token to exchange, let the user authorize first",
                    OAuth2ErrorKind.PREREQUISITE_FAILED,
                )
            )
            return

        request = self.refresh_token_request()
        self._log(
            "Exchanging refresh token %s for token at %s",
            mask_token(self.refresh_token),
            request.url,
        )
        await self._perform_token_request(request)

    async def _perform_token_request(self, request: TokenRequest) -> None:
        try:
            response = await self.transport.send(request)
        except (httpx.HTTPError, OSError) as e:
            logger.warning("Token request to %s failed: %s", request.url, e)
            self.did_fail(
                OAuth2Error(
                    f"Connection error while requesting a token: {e}",
                    OAuth2ErrorKind.NETWORK_ERROR,
                )
            )
            return

        try:
            payload = self.response_parser.parse(response.body)
        except ValueError as e:
            logger.warning("Unparseable token response (HTTP %s): %s", response.status_code, e)
            self.did_fail(
                OAuth2Error(
                    f"Unknown connection error for response with status {response.status_code}",
                    OAuth2ErrorKind.NETWORK_ERROR,
                )
            )
            return

        if response.status_code == 200:
            self.apply_token_response(payload)
            self._log(
                "Did receive access token: %s, refresh token: %s",
                mask_token(self.access_token),
                mask_token(self.refresh_token) if self.refresh_token else "none",
            )
            self.did_authorize(payload)
            return

        if "error" in payload or "error_description" in payload:
            error = error_from_response(payload)
        else:
            error = OAuth2Error(
                f"HTTP {response.status_code}: "
                f"{httpx.codes.get_reason_phrase(response.status_code) or 'error'}",
                OAuth2ErrorKind.AUTHORIZATION_ERROR,
                params=payload,
            )
        logger.warning(
            "Token endpoint refused (HTTP %s): %s",
            response.status_code,
            error_message_from_response(payload),
        )
        self.did_fail(error)

    def apply_token_response(self, payload: Mapping[str, Any]) -> None:
        """Copy access token, expiry and refresh token from a token response."""
        access = payload.get("access_token")
        if isinstance(access, str):
            self.access_token = access
        self.access_token_expiry = expiry_from(payload.get("expires_in"))
        refresh = payload.get("refresh_token")
        if isinstance(refresh, str):
            self.refresh_token = refresh
