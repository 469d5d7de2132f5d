# OAuth2 errors - error taxonomy and provider error-response interpretation.
# Created: 2026-02-11

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class OAuth2ErrorKind(str, Enum):
    """What went wrong during an authorization attempt."""

    GENERIC = "generic"
    UNSUPPORTED = "unsupported"  # e.g. a non-bearer token type
    NETWORK_ERROR = "network_error"  # transport failure or unparseable body
    PREREQUISITE_FAILED = "prerequisite_failed"  # missing code, refresh token, query
    INVALID_STATE = "invalid_state"  # CSRF state missing or mismatched
    AUTHORIZATION_ERROR = "authorization_error"  # provider refused


class OAuth2Error(Exception):
    """A runtime authorization failure, delivered through ``on_failure``."""

    def __init__(
        self,
        message: str,
        kind: OAuth2ErrorKind = OAuth2ErrorKind.GENERIC,
        params: Mapping[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.params: dict[str, Any] = dict(params or {})

    def __repr__(self) -> str:
        return f"OAuth2Error(kind={self.kind.value!r}, message={self.message!r})"


class ConfigurationError(ValueError):
    """Setup fault raised at the call site: bad client config, no redirect URI,
    non-https endpoint or signing without a token. Never delivered to callbacks."""


# RFC 6749 section 4.1.2.1
ERROR_MESSAGES: dict[str, str] = {
    "invalid_request": (
        "The request is missing a required parameter, includes an invalid parameter value, "
        "includes a parameter more than once, or is otherwise malformed."
    ),
    "unauthorized_client": (
        "The client is not authorized to request an access token using this method."
    ),
    "access_denied": "The resource owner or authorization server denied the request.",
    "unsupported_response_type": (
        "The authorization server does not support obtaining an access token using this method."
    ),
    "invalid_scope": "The requested scope is invalid, unknown, or malformed.",
    "server_error": (
        "The authorization server encountered an unexpected condition that prevented it "
        "from fulfilling the request."
    ),
    "temporarily_unavailable": (
        "The authorization server is currently unable to handle the request due to a "
        "temporary overloading or maintenance of the server."
    ),
}


def error_message_from_response(params: Mapping[str, Any]) -> str:
    """Pick the most descriptive message from an OAuth2 error response."""
    description = params.get("error_description")
    if isinstance(description, str) and description:
        return description.replace("+", " ")

    code = params.get("error")
    if isinstance(code, str) and code:
        return ERROR_MESSAGES.get(code, f"Authorization error: {code}.")

    return "Unknown error."


def error_from_response(params: Mapping[str, Any]) -> OAuth2Error:
    """Turn the parameters of an error redirect or token response into an error.

    ``error_description`` wins over the canned message for ``error``; the full
    parameter mapping is kept on the error for diagnostics.
    """
    return OAuth2Error(
        error_message_from_response(params),
        kind=OAuth2ErrorKind.AUTHORIZATION_ERROR,
        params=params,
    )
