"""grantflow: client-side OAuth2 authorization code and implicit grant flows.

Usage:
    from grantflow import CodeGrantFlow

    flow = CodeGrantFlow({
        "client_id": "abc",
        "client_secret": "xyz",
        "authorize_uri": "https://provider.example/oauth/authorize",
        "token_uri": "https://provider.example/oauth/token",
        "redirect_uris": ["myapp://oauth/callback"],
    })
    flow.on_authorize = lambda params: ...
    url = flow.authorize_url()       # show this in a browser
    await flow.handle_redirect_url(redirected_url)
"""

from grantflow.code_grant import CodeGrantFlow
from grantflow.config import ClientConfig, Settings, get_settings
from grantflow.dispatch import Dispatcher, InlineDispatcher, LoopDispatcher
from grantflow.errors import (
    ConfigurationError,
    OAuth2Error,
    OAuth2ErrorKind,
    error_from_response,
)
from grantflow.flow import OAuth2Flow
from grantflow.implicit_grant import ImplicitGrantFlow
from grantflow.interceptor import RedirectInterceptor
from grantflow.parsers import FormTokenParser, JSONTokenParser, TokenResponseParser
from grantflow.providers import PROVIDERS, create_flow
from grantflow.query import decode_query, encode_query
from grantflow.signing import BearerAuth, sign_request
from grantflow.transport import HttpxTransport, TokenRequest, Transport, TransportResponse

__all__ = [
    "PROVIDERS",
    "BearerAuth",
    "ClientConfig",
    "CodeGrantFlow",
    "ConfigurationError",
    "Dispatcher",
    "FormTokenParser",
    "HttpxTransport",
    "ImplicitGrantFlow",
    "InlineDispatcher",
    "JSONTokenParser",
    "LoopDispatcher",
    "OAuth2Error",
    "OAuth2ErrorKind",
    "OAuth2Flow",
    "RedirectInterceptor",
    "Settings",
    "TokenRequest",
    "TokenResponseParser",
    "Transport",
    "TransportResponse",
    "create_flow",
    "decode_query",
    "encode_query",
    "error_from_response",
    "get_settings",
    "sign_request",
]
