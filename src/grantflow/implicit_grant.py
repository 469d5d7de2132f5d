# Implicit grant - the access token comes back in the redirect URL fragment.
# Created: 2026-02-13

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Mapping

from grantflow.errors import OAuth2Error, OAuth2ErrorKind, error_from_response
from grantflow.flow import OAuth2Flow, expiry_from, mask_token
from grantflow.query import decode_query

logger = logging.getLogger(__name__)


class ImplicitGrantFlow(OAuth2Flow):
    """Implicit grant for public clients such as distributed desktop apps."""

    def authorize_url_with_redirect(
        self,
        redirect: str | None = None,
        scope: str | None = None,
        params: Mapping[str, str] | None = None,
    ) -> str:
        return self.build_authorize_url(self.auth_url, redirect, scope, "token", params)

    async def handle_redirect_url(self, url: str) -> None:
        self._log("Handling redirect URL %s", url)
        try:
            params = self.extract_token(url)
        except OAuth2Error as e:
            logger.warning("Error handling redirect URL: %s", e.message)
            self.did_fail(e)
            return

        self.did_authorize(params)

    def extract_token(self, url: str) -> dict[str, str]:
        """Store the bearer token from *url*'s fragment and return all fragment params.

        The CSRF state is checked but, unlike the code grant, not cleared.

        Raises:
            OAuth2Error: no fragment, provider error, missing or non-bearer
                token type, or missing/mismatched state.
        """
        fragment = urllib.parse.urlsplit(url).fragment
        if not fragment:
            raise OAuth2Error(
                f"Invalid redirect URL: {url}", OAuth2ErrorKind.PREREQUISITE_FAILED
            )

        params = decode_query(fragment, unquote=True)
        token = params.get("access_token")
        if not token:
            raise error_from_response(params)

        token_type = params.get("token_type")
        if token_type is None:
            raise OAuth2Error(
                "No token type received, will not use the token",
                OAuth2ErrorKind.PREREQUISITE_FAILED,
                params=params,
            )
        if token_type.lower() != "bearer":
            raise OAuth2Error(
                f'Only "bearer" token is supported, but received "{token_type}"',
                OAuth2ErrorKind.UNSUPPORTED,
                params=params,
            )

        returned_state = params.get("state")
        if returned_state is None:
            raise OAuth2Error(
                "No state returned, will not use the token",
                OAuth2ErrorKind.INVALID_STATE,
                params=params,
            )
        if not self.state or returned_state != self.state:
            raise OAuth2Error(
                f"Invalid state {returned_state}, will not use the token",
                OAuth2ErrorKind.INVALID_STATE,
                params=params,
            )

        self.access_token = token
        self.access_token_expiry = None
        expires_in = params.get("expires_in")
        if expires_in is not None and expires_in.isascii() and expires_in.isdigit():
            self.access_token_expiry = expiry_from(int(expires_in))

        self._log("Successfully extracted access token %s", mask_token(token))
        return params
