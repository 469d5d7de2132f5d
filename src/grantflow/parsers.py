# Token response parsers - turn a token endpoint body into a parameter dict.
# Created: 2026-02-13

from __future__ import annotations

import json
from typing import Any, Protocol

from grantflow.query import decode_query


class TokenResponseParser(Protocol):
    """Parses the body returned by a token endpoint.

    Raises ``ValueError`` when the body is not in the expected format; the
    flow reports that as a network error.
    """

    def parse(self, body: bytes) -> dict[str, Any]: ...


class JSONTokenParser:
    """RFC 6749 token responses: a JSON object."""

    def parse(self, body: bytes) -> dict[str, Any]:
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return data


class FormTokenParser:
    """Providers that answer with ``access_token=...&expires=...`` instead of JSON.

    Facebook's older Graph API versions do this. A JSON body (used by the same
    providers for errors) is accepted too.
    """

    def parse(self, body: bytes) -> dict[str, Any]:
        text = body.decode("utf-8").strip()
        if text.startswith("{"):
            return JSONTokenParser().parse(body)

        params = decode_query(text, unquote=True)
        if not params:
            raise ValueError("Empty or malformed form-encoded token response")
        # Facebook names it "expires"
        if "expires_in" not in params and "expires" in params:
            params["expires_in"] = params["expires"]
        return params


PARSERS: dict[str, type[JSONTokenParser] | type[FormTokenParser]] = {
    "json": JSONTokenParser,
    "form": FormTokenParser,
}


def get_parser(name: str) -> TokenResponseParser:
    """Parser instance by format name (``json`` or ``form``)."""
    try:
        return PARSERS[name]()
    except KeyError:
        raise ValueError(f"Unknown token response format: {name}") from None
