# OAuth2 flow base - client config, CSRF state, token state and callbacks.
# Created: 2026-02-12
#
# Grant-specific subclasses (code_grant, implicit_grant) build the authorize
# URL for their response type and know how to read the redirect.

from __future__ import annotations

import logging
import math
import urllib.parse
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from grantflow.config import ClientConfig
from grantflow.dispatch import Dispatcher, InlineDispatcher
from grantflow.errors import ConfigurationError, OAuth2Error
from grantflow.interceptor import RedirectInterceptor
from grantflow.query import build_url
from grantflow.signing import sign_request
from grantflow.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

STATE_LENGTH = 8

AuthorizeCallback = Callable[[dict[str, Any]], None]
FailureCallback = Callable[[OAuth2Error | None], None]
CompletionCallback = Callable[[bool, OAuth2Error | None], None]


def mask_token(token: str) -> str:
    """Shorten a credential for log output."""
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}****"


def expiry_from(expires_in: Any) -> datetime | None:
    """Absolute UTC expiry for an ``expires_in`` value in seconds, if it is one.

    Values that are not a finite number or fall outside the datetime range
    give ``None``.
    """
    if expires_in is None or isinstance(expires_in, bool):
        return None
    try:
        seconds = float(expires_in)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(seconds):
        return None
    try:
        return datetime.now(UTC) + timedelta(seconds=seconds)
    except OverflowError:
        return None


class OAuth2Flow(ABC):
    """Base class for the authorization flows.

    Holds the client configuration plus the mutable per-attempt state:

    - ``redirect``: the redirect URI in use, resolved on first URL build
    - ``scope``: current scope, replaced by per-call overrides
    - ``state``: 8-character CSRF token, regenerated whenever it is empty
    - ``access_token`` / ``access_token_expiry``: ``""`` / ``None`` when absent

    One authorization attempt at a time; use a separate instance per
    concurrent login.

    Callbacks (all optional) are delivered through ``dispatcher``:

    - ``on_authorize(parameters)`` on success
    - ``on_failure(error)`` on failure, ``error`` is ``None`` on cancellation
    - ``after_authorize_or_failure(was_failure, error)`` after either one
    """

    def __init__(
        self,
        settings: ClientConfig | Mapping[str, Any],
        *,
        dispatcher: Dispatcher | None = None,
        transport: Transport | None = None,
    ):
        if isinstance(settings, ClientConfig):
            self.config = settings
        else:
            self.config = ClientConfig.from_settings(settings)

        self.client_id = self.config.client_id
        self.client_secret = self.config.client_secret
        self.auth_url = self.config.authorize_uri
        self.verbose = self.config.verbose

        self.redirect: str | None = None
        self.scope: str | None = self.config.scope
        self.state = self.config.state_for_testing or ""
        self.access_token = ""
        self.access_token_expiry: datetime | None = None

        self.on_authorize: AuthorizeCallback | None = None
        self.on_failure: FailureCallback | None = None
        self.after_authorize_or_failure: CompletionCallback | None = None

        self.dispatcher: Dispatcher = dispatcher or InlineDispatcher()
        self.transport: Transport = transport or HttpxTransport()

        self._log("Initialized with client id %s", self.client_id)

    # -- token state --

    def has_unexpired_access_token(self) -> bool:
        """True if there is an access token whose expiry (if any) is still ahead."""
        if not self.access_token:
            return False
        if self.access_token_expiry is None:
            return True
        return self.access_token_expiry > datetime.now(UTC)

    def forget_tokens(self) -> None:
        """Drop all credentials, e.g. on logout."""
        self.access_token = ""
        self.access_token_expiry = None

    # -- authorize URL --

    def build_authorize_url(
        self,
        base: str,
        redirect: str | None = None,
        scope: str | None = None,
        response_type: str | None = None,
        params: Mapping[str, str] | None = None,
    ) -> str:
        """Construct an authorize URL against *base*.

        *params* can carry extra query parameters; ``client_id``,
        ``redirect_uri``, ``state``, ``scope`` and ``response_type`` always
        overwrite values of the same name.

        Raises:
            ConfigurationError: no redirect URI, non-https *base*, or the URL
                cannot be assembled.
        """
        if redirect is not None:
            self.redirect = redirect
        elif self.redirect is None and self.config.redirect_uris:
            self.redirect = self.config.redirect_uris[0]
        if not self.redirect:
            raise ConfigurationError("I need a redirect URI, cannot construct an authorize URL")

        self._require_https(base)

        if not self.state:
            self.state = str(uuid.uuid4())[:STATE_LENGTH]

        url_params = dict(params or {})
        url_params["client_id"] = self.client_id
        url_params["redirect_uri"] = self.redirect
        url_params["state"] = self.state

        if scope is not None:
            self.scope = scope
        if self.scope is not None:
            url_params["scope"] = self.scope
        if response_type is not None:
            url_params["response_type"] = response_type

        try:
            url = build_url(base, url_params)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Failed to create authorize URL: {e}") from e

        self._log("Authorizing against %s", url)
        return url

    def authorize_url(self) -> str:
        """Authorize URL built only from the configured defaults."""
        return self.authorize_url_with_redirect()

    @abstractmethod
    def authorize_url_with_redirect(
        self,
        redirect: str | None = None,
        scope: str | None = None,
        params: Mapping[str, str] | None = None,
    ) -> str:
        """Authorize URL for this grant type."""

    @abstractmethod
    async def handle_redirect_url(self, url: str) -> None:
        """Consume the redirect the provider sent the browser to.

        Never raises for authorization outcomes; they go to the callbacks.
        """

    # -- outcome delivery --

    def did_authorize(self, parameters: dict[str, Any]) -> None:
        def deliver() -> None:
            if self.on_authorize:
                self.on_authorize(parameters)
            if self.after_authorize_or_failure:
                self.after_authorize_or_failure(False, None)

        self.dispatcher.dispatch(deliver)

    def did_fail(self, error: OAuth2Error | None) -> None:
        """Report failure; ``None`` means the user cancelled."""

        def deliver() -> None:
            if self.on_failure:
                self.on_failure(error)
            if self.after_authorize_or_failure:
                self.after_authorize_or_failure(True, error)

        self.dispatcher.dispatch(deliver)

    # -- requests --

    def request(self, url: str, method: str = "GET", **kwargs: Any) -> httpx.Request:
        """An ``httpx.Request`` for *url* signed with the current access token."""
        return sign_request(httpx.Request(method, url, **kwargs), self)

    def interceptor(self) -> RedirectInterceptor:
        """Redirect interceptor for the redirect URI resolved by the last URL build."""
        if not self.redirect:
            raise ConfigurationError("Build an authorize URL before intercepting redirects")
        return RedirectInterceptor(self, self.redirect)

    # -- helpers --

    @staticmethod
    def _require_https(url: str) -> None:
        try:
            parts = urllib.parse.urlsplit(url)
        except ValueError as e:
            raise ConfigurationError(f"Invalid URL {url!r}: {e}") from e
        if parts.scheme != "https" or not parts.netloc:
            raise ConfigurationError(f"You MUST use HTTPS, got {url!r}")

    def _log(self, msg: str, *args: Any) -> None:
        if self.verbose:
            logger.info(msg, *args)
