# Tests for provider presets.
# Created: 2026-02-15

import pytest

from grantflow.code_grant import CodeGrantFlow
from grantflow.implicit_grant import ImplicitGrantFlow
from grantflow.parsers import FormTokenParser, JSONTokenParser, get_parser
from grantflow.providers import PROVIDERS, create_flow, flow_for_grant, provider_settings


class TestProviders:
    def test_providers_config(self):
        for name, preset in PROVIDERS.items():
            assert preset["authorize_uri"].startswith("https://"), name
            assert preset["token_uri"].startswith("https://"), name
            assert preset["grant"] in ("code", "implicit")

    def test_create_google_flow(self):
        flow = create_flow(
            "google",
            client_id="id",
            client_secret="secret",
            redirect_uris=["https://localhost/callback"],
            scope="email",
        )
        assert isinstance(flow, CodeGrantFlow)
        assert flow.token_url == "https://oauth2.googleapis.com/token"
        assert flow.scope == "email"
        assert isinstance(flow.response_parser, JSONTokenParser)
        assert "accounts.google.com" in flow.authorize_url()

    def test_facebook_uses_form_parser(self):
        flow = create_flow("facebook", client_id="id", redirect_uris=["https://x.example/cb"])
        assert isinstance(flow.response_parser, FormTokenParser)

    def test_implicit_grant(self):
        flow = create_flow("spotify", client_id="id", grant="implicit")
        assert isinstance(flow, ImplicitGrantFlow)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown OAuth provider"):
            create_flow("myspace", client_id="id")

    def test_unknown_grant(self):
        with pytest.raises(ValueError, match="Unknown grant"):
            flow_for_grant("password", {"client_id": "a", "authorize_uri": "https://a.example"})

    def test_provider_settings_overrides(self):
        settings = provider_settings("github", client_id="id", scope=None)
        assert settings["client_id"] == "id"
        assert "scope" not in settings
        assert settings["token_uri"] == "https://github.com/login/oauth/access_token"


class TestParsers:
    def test_get_parser(self):
        assert isinstance(get_parser("json"), JSONTokenParser)
        assert isinstance(get_parser("form"), FormTokenParser)
        with pytest.raises(ValueError):
            get_parser("xml")

    def test_form_parser(self):
        params = FormTokenParser().parse(b"access_token=A%2FB&expires=60")
        assert params["access_token"] == "A/B"
        assert params["expires_in"] == "60"

    def test_form_parser_json_error_body(self):
        params = FormTokenParser().parse(b'{"error": {"message": "bad"}}')
        assert params == {"error": {"message": "bad"}}

    def test_form_parser_garbage(self):
        with pytest.raises(ValueError):
            FormTokenParser().parse(b"garbage")

    def test_json_parser_rejects_list(self):
        with pytest.raises(ValueError):
            JSONTokenParser().parse(b"[]")
