"""
Shared configuration management for the Hydra consent client.

Environment variables are read here and nowhere else. ``load_config`` builds
an immutable ``HydraConfig`` once at startup; the client only ever receives
that object.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError

DEFAULT_AUTHORIZE_PATH = "/oauth2/auth"
DEFAULT_TOKEN_PATH = "/oauth2/token"
DEFAULT_SCOPE = "hydra.keys.get"
DEFAULT_CHALLENGE_KEY_SET = "hydra.consent.challenge"
DEFAULT_RESPONSE_KEY_SET = "hydra.consent.response"


class HydraSettings(BaseSettings):
    """Flat, environment-sourced defaults (``HYDRA_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="HYDRA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    client_id: Optional[str] = None
    client_secret: Optional[str] = Field(default=None, repr=False)
    url: Optional[str] = None
    authorize_path: str = DEFAULT_AUTHORIZE_PATH
    token_path: str = DEFAULT_TOKEN_PATH
    scope: str = DEFAULT_SCOPE
    use_body_auth: bool = False
    use_basic_authorization_header: bool = True

    http_timeout: float = 10.0
    key_cache_ttl: float = 0.0
    log_level: str = "info"

    challenge_key_set: str = DEFAULT_CHALLENGE_KEY_SET
    response_key_set: str = DEFAULT_RESPONSE_KEY_SET
    challenge_issuer: Optional[str] = None
    challenge_audience: Optional[str] = None


class ClientCredentials(BaseModel):
    """Identity of this process towards the provider."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    secret: Optional[str] = Field(default=None, repr=False)


class ProviderEndpoints(BaseModel):
    """Provider base URL and token/authorize paths."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token_host: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("token_host", "tokenHost")
    )
    authorize_path: str = Field(
        default=DEFAULT_AUTHORIZE_PATH,
        validation_alias=AliasChoices("authorize_path", "authorizePath"),
    )
    token_path: str = Field(
        default=DEFAULT_TOKEN_PATH,
        validation_alias=AliasChoices("token_path", "tokenPath"),
    )

    @property
    def token_url(self) -> str:
        return f"{(self.token_host or '').rstrip('/')}{self.token_path}"


class CredentialTransport(BaseModel):
    """How client credentials travel to the token endpoint."""

    model_config = ConfigDict(frozen=True)

    use_body_auth: bool = Field(
        default=False, validation_alias=AliasChoices("use_body_auth", "useBodyAuth")
    )
    use_basic_authorization_header: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "use_basic_authorization_header", "useBasicAuthorizationHeader"
        ),
    )


class ConsentKeySets(BaseModel):
    """Key sets and claim checks used by the consent flow."""

    model_config = ConfigDict(frozen=True)

    challenge_key_set: str = DEFAULT_CHALLENGE_KEY_SET
    response_key_set: str = DEFAULT_RESPONSE_KEY_SET
    challenge_issuer: Optional[str] = None
    challenge_audience: Optional[str] = None


class HydraConfig(BaseModel):
    """Complete, immutable client configuration."""

    model_config = ConfigDict(frozen=True)

    client: ClientCredentials = ClientCredentials()
    auth: ProviderEndpoints = ProviderEndpoints()
    scope: str = DEFAULT_SCOPE
    options: CredentialTransport = CredentialTransport()
    consent: ConsentKeySets = ConsentKeySets()
    http_timeout: float = 10.0
    key_cache_ttl: float = 0.0
    log_level: str = "info"

    @property
    def endpoint(self) -> str:
        return (self.auth.token_host or "").rstrip("/")

    def validate_complete(self) -> "HydraConfig":
        """Raise ConfigurationError unless the provider can actually be reached."""
        missing = []
        if not self.auth.token_host:
            missing.append("auth.token_host")
        if not self.client.id:
            missing.append("client.id")
        if not self.client.secret:
            missing.append("client.secret")
        if missing:
            raise ConfigurationError(
                "Incomplete Hydra configuration",
                details={"missing": missing},
            )
        if not (self.options.use_body_auth or self.options.use_basic_authorization_header):
            raise ConfigurationError(
                "Client credentials must be sent via body or basic authorization header",
                details={"options": self.options.model_dump()},
            )
        return self


def _settings_to_dict(settings: HydraSettings) -> Dict[str, Any]:
    return {
        "client": {"id": settings.client_id, "secret": settings.client_secret},
        "auth": {
            "token_host": settings.url,
            "authorize_path": settings.authorize_path,
            "token_path": settings.token_path,
        },
        "scope": settings.scope,
        "options": {
            "use_body_auth": settings.use_body_auth,
            "use_basic_authorization_header": settings.use_basic_authorization_header,
        },
        "consent": {
            "challenge_key_set": settings.challenge_key_set,
            "response_key_set": settings.response_key_set,
            "challenge_issuer": settings.challenge_issuer,
            "challenge_audience": settings.challenge_audience,
        },
        "http_timeout": settings.http_timeout,
        "key_cache_ttl": settings.key_cache_ttl,
        "log_level": settings.log_level,
    }


# camelCase keys accepted in overrides, mapped onto the snake_case defaults
_OVERRIDE_ALIASES = {
    "tokenHost": "token_host",
    "authorizePath": "authorize_path",
    "tokenPath": "token_path",
    "useBodyAuth": "use_body_auth",
    "useBasicAuthorizationHeader": "use_basic_authorization_header",
}


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        key = _OVERRIDE_ALIASES.get(key, key)
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    settings: Optional[HydraSettings] = None,
) -> HydraConfig:
    """Build a HydraConfig from environment defaults and a partial nested override."""
    settings = settings or HydraSettings()
    merged = _deep_merge(_settings_to_dict(settings), overrides or {})
    return HydraConfig.model_validate(merged)
