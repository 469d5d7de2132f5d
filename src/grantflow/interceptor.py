# Redirect interceptor - spots the provider's redirect in a browser's navigation.
# Created: 2026-02-14
#
# The host UI (web view, embedded browser, local callback server) asks
# ``should_load`` for every navigation and calls ``cancel`` when the user
# closes the login window.

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import urllib.parse
from typing import TYPE_CHECKING

from grantflow.errors import ConfigurationError

if TYPE_CHECKING:
    from grantflow.flow import OAuth2Flow

logger = logging.getLogger(__name__)


def _url_key(url: str) -> tuple[str, str, str]:
    parts = urllib.parse.urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower(), parts.path or "/"


class RedirectInterceptor:
    """Hands the first navigation to the redirect URI over to the flow.

    Matching compares scheme, host (with port) and path; query and fragment
    are ignored. Each interceptor handles one redirect, later matches are
    swallowed so the flow never sees the same attempt twice.
    """

    def __init__(
        self,
        flow: OAuth2Flow,
        intercept_url: str,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        try:
            key = _url_key(intercept_url)
        except ValueError as e:
            raise ConfigurationError(f"Failed to parse redirect URL {intercept_url!r}") from e
        if not key[0]:
            raise ConfigurationError(f"Redirect URL {intercept_url!r} has no scheme")

        self.flow = flow
        self.intercept_url = intercept_url
        self.loop = loop
        self.handled = False
        self.pending: asyncio.Future | concurrent.futures.Future | None = None
        self._key = key

    def matches(self, url: str) -> bool:
        try:
            return _url_key(url) == self._key
        except ValueError:
            return False

    def should_load(self, url: str) -> bool:
        """Navigation hook: ``False`` means the host must not load *url*.

        A matching URL is handed to the flow on the event loop; this returns
        without waiting for the token exchange. Hosts calling from outside a
        running loop (a UI thread) must pass ``loop`` to the constructor.

        Raises:
            ConfigurationError: no ``loop`` was given and none is running.
        """
        if not self.matches(url):
            return True
        if self.handled:
            logger.debug("Redirect already handled, ignoring %s", url)
            return False

        if self.loop is not None:
            self.pending = asyncio.run_coroutine_threadsafe(
                self.flow.handle_redirect_url(url), self.loop
            )
        else:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise ConfigurationError(
                    "No running event loop, pass loop= to RedirectInterceptor"
                ) from e
            self.pending = loop.create_task(self.flow.handle_redirect_url(url))
        self.handled = True
        return False

    async def intercept(self, url: str) -> bool:
        """Like ``should_load`` but waits for the flow; True if *url* was intercepted."""
        if not self.matches(url):
            return False
        if self.handled:
            return True

        self.handled = True
        await self.flow.handle_redirect_url(url)
        return True

    def cancel(self) -> None:
        """The user closed the login UI before the redirect arrived."""
        if self.handled:
            return
        self.handled = True
        logger.info("Authorization cancelled by user")
        self.flow.did_fail(None)
