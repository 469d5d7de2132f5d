# Query strings - encode/decode ``key=value&key=value`` and URL assembly.
# Created: 2026-02-11

from __future__ import annotations

import urllib.parse
from collections.abc import Mapping

__all__ = ["build_url", "decode_query", "encode_query", "split_url"]


def encode_query(params: Mapping[str, str]) -> str:
    """Join ``key=value`` pairs with ``&``.

    Values are not escaped here; ``build_url`` does that when the string
    becomes part of a URL.
    """
    return "&".join(f"{key}={value}" for key, value in params.items())


def decode_query(query: str, *, unquote: bool = False) -> dict[str, str]:
    """Parse a query string or URL fragment into a dict.

    Each part is split on the first ``=`` only, so base64 padding in a value
    survives. Parts without ``=`` or with an empty key are dropped.

    With ``unquote=True`` keys and values are percent-decoded after splitting,
    which is what the flows want for redirect URLs. ``+`` is left alone.
    """
    params: dict[str, str] = {}
    for part in query.split("&"):
        key, sep, value = part.partition("=")
        if not sep or not key:
            continue
        if unquote:
            key = urllib.parse.unquote(key)
            value = urllib.parse.unquote(value)
        params[key] = value
    return params


def build_url(base: str, params: Mapping[str, str]) -> str:
    """Return *base* with its query replaced by the percent-escaped *params*."""
    parts = urllib.parse.urlsplit(base)
    escaped = {
        urllib.parse.quote(key, safe=""): urllib.parse.quote(value, safe="")
        for key, value in params.items()
    }
    return urllib.parse.urlunsplit(
        (parts.scheme, parts.netloc, parts.path, encode_query(escaped), parts.fragment)
    )


def split_url(url: str) -> tuple[str, str]:
    """Split *url* into ``(url_without_query, query)``."""
    parts = urllib.parse.urlsplit(url)
    bare = urllib.parse.urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))
    return bare, parts.query
