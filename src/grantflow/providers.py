# Provider presets - well-known OAuth2 endpoints.
# Created: 2026-02-15

from __future__ import annotations

from typing import Any

from grantflow.code_grant import CodeGrantFlow
from grantflow.config import ClientConfig
from grantflow.flow import OAuth2Flow
from grantflow.implicit_grant import ImplicitGrantFlow
from grantflow.parsers import get_parser

# "token_format" only matters for the code grant.
PROVIDERS: dict[str, dict[str, str]] = {
    "google": {
        "authorize_uri": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "grant": "code",
        "token_format": "json",
    },
    "github": {
        "authorize_uri": "https://github.com/login/oauth/authorize",
        "token_uri": "https://github.com/login/oauth/access_token",
        "grant": "code",
        "token_format": "json",
    },
    "spotify": {
        "authorize_uri": "https://accounts.spotify.com/authorize",
        "token_uri": "https://accounts.spotify.com/api/token",
        "grant": "code",
        "token_format": "json",
    },
    "facebook": {
        "authorize_uri": "https://www.facebook.com/dialog/oauth",
        "token_uri": "https://graph.facebook.com/oauth/access_token",
        "grant": "code",
        "token_format": "form",
    },
}

GRANTS: dict[str, type[OAuth2Flow]] = {
    "code": CodeGrantFlow,
    "implicit": ImplicitGrantFlow,
}


def provider_settings(provider: str, **overrides: Any) -> dict[str, Any]:
    """Settings mapping for *provider* with the endpoints filled in."""
    preset = PROVIDERS.get(provider)
    if not preset:
        raise ValueError(f"Unknown OAuth provider: {provider}")

    settings: dict[str, Any] = {
        "authorize_uri": preset["authorize_uri"],
        "token_uri": preset["token_uri"],
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return settings


def create_flow(
    provider: str,
    client_id: str,
    client_secret: str | None = None,
    redirect_uris: list[str] | None = None,
    scope: str | None = None,
    grant: str | None = None,
    **kwargs: Any,
) -> OAuth2Flow:
    """Build a flow for a known provider.

    Args:
        provider: Key of ``PROVIDERS`` (e.g. "google").
        client_id: OAuth client ID.
        client_secret: OAuth client secret, code grant only.
        redirect_uris: Candidate redirect URIs, the first one is used.
        scope: Space-separated scopes to request.
        grant: "code" or "implicit"; defaults to the provider's grant.
        **kwargs: Passed to the flow (dispatcher, transport).

    Raises:
        ValueError: unknown provider or grant.
    """
    settings = provider_settings(
        provider,
        client_id=client_id,
        client_secret=client_secret,
        redirect_uris=redirect_uris,
        scope=scope,
    )
    return flow_for_grant(grant or PROVIDERS[provider]["grant"], settings, provider, **kwargs)


def flow_for_grant(
    grant: str,
    settings: ClientConfig | dict[str, Any],
    provider: str | None = None,
    **kwargs: Any,
) -> OAuth2Flow:
    """Instantiate the flow class for *grant*, picking the provider's token parser."""
    flow_cls = GRANTS.get(grant)
    if flow_cls is None:
        raise ValueError(f"Unknown grant type: {grant}")

    if flow_cls is CodeGrantFlow and provider in PROVIDERS and "response_parser" not in kwargs:
        kwargs["response_parser"] = get_parser(PROVIDERS[provider]["token_format"])
    return flow_cls(settings, **kwargs)
