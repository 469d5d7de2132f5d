# Configuration - OAuth2 client settings and library-wide defaults.
# Created: 2026-02-11

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grantflow.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Library defaults, overridable through ``GRANTFLOW_*`` env vars."""

    model_config = SettingsConfigDict(env_prefix="GRANTFLOW_", extra="ignore")

    request_timeout: float = 20.0  # seconds, applies to token exchange requests
    verbose: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


class ClientConfig(BaseModel):
    """OAuth2 client registration, immutable once a flow is built.

    Keys follow the MITREid client registration names so that a provider's
    JSON client description can be passed straight to ``from_settings``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: str
    client_secret: str | None = None
    authorize_uri: str
    token_uri: str | None = None
    redirect_uris: list[str] = Field(default_factory=list)
    scope: str | None = None
    verbose: bool = False
    # Pins the first CSRF state instead of generating one; tests only.
    state_for_testing: str | None = None

    @field_validator("client_id")
    @classmethod
    def _client_id_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("client_id must not be empty")
        return value

    @property
    def token_endpoint(self) -> str:
        """Where codes and refresh tokens are exchanged."""
        return self.token_uri or self.authorize_uri

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> ClientConfig:
        """Build from a settings mapping; unknown keys are ignored.

        Raises:
            ConfigurationError: ``client_id`` is missing or any value is invalid.
        """
        if not settings.get("client_id"):
            raise ConfigurationError("Must supply `client_id` upon initialization")

        data = dict(settings)
        if "verbose" not in data:
            data["verbose"] = get_settings().verbose
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid OAuth2 client settings: {e}") from e
