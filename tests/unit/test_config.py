"""
Unit tests for configuration loading.
"""

import pytest

from shared.config import HydraConfig, HydraSettings, load_config
from shared.errors import ConfigurationError
from shared.test_helpers import MockEnvironment


@pytest.fixture
def hydra_env(monkeypatch):
    """Populate HYDRA_* defaults in the environment."""
    for key, value in MockEnvironment.get_mock_config().items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def overrides():
    return {
        "client": {"id": "client", "secret": "secret"},
        "auth": {
            "tokenHost": "http://foo.localhost",
            "authorizePath": "/oauth2/auth",
            "tokenPath": "/oauth2/token",
        },
        "scope": "foo",
    }


def _settings():
    return HydraSettings(_env_file=None)


def test_overrides_replace_defaults(hydra_env, overrides):
    config = load_config(overrides, settings=_settings())

    assert config.client.id == "client"
    assert config.client.secret == "secret"
    assert config.auth.token_host == "http://foo.localhost"
    assert config.endpoint == "http://foo.localhost"
    assert config.scope == "foo"


def test_defaults_come_from_environment(hydra_env):
    config = load_config(settings=_settings())

    assert config.client.id == "default_client"
    assert config.client.secret == "default_secret"
    assert config.endpoint == "http://default.localhost"
    assert config.auth.authorize_path == "/oauth2/auth"
    assert config.auth.token_path == "/oauth2/token"
    assert config.scope == "hydra.keys.get"
    assert config.options.use_basic_authorization_header is True
    assert config.options.use_body_auth is False


def test_partial_override_keeps_remaining_defaults(hydra_env):
    config = load_config(
        {"client": {"id": "foo"}, "auth": {"tokenHost": "http://bar.localhost"}},
        settings=_settings(),
    )

    assert config.client.id == "foo"
    assert config.client.secret == "default_secret"
    assert config.endpoint == "http://bar.localhost"
    assert config.auth.token_path == "/oauth2/token"
    assert config.scope == "hydra.keys.get"


def test_consent_settings_from_environment(monkeypatch):
    monkeypatch.setenv("HYDRA_CHALLENGE_ISSUER", "https://hydra.example")
    monkeypatch.setenv("HYDRA_KEY_CACHE_TTL", "120")

    config = load_config(settings=_settings())

    assert config.consent.challenge_issuer == "https://hydra.example"
    assert config.consent.challenge_key_set == "hydra.consent.challenge"
    assert config.consent.response_key_set == "hydra.consent.response"
    assert config.key_cache_ttl == 120


def test_config_is_immutable(overrides):
    config = load_config(overrides, settings=_settings())

    with pytest.raises(Exception):
        config.scope = "other"


def test_endpoint_strips_trailing_slash():
    config = HydraConfig.model_validate({"auth": {"token_host": "http://foo.localhost/"}})

    assert config.endpoint == "http://foo.localhost"
    assert config.auth.token_url == "http://foo.localhost/oauth2/token"


def test_validate_complete_lists_missing_fields():
    with pytest.raises(ConfigurationError) as exc_info:
        HydraConfig().validate_complete()

    assert exc_info.value.details["missing"] == ["auth.token_host", "client.id", "client.secret"]


def test_validate_complete_requires_a_credential_transport(overrides):
    overrides["options"] = {"useBodyAuth": False, "useBasicAuthorizationHeader": False}
    config = load_config(overrides, settings=_settings())

    with pytest.raises(ConfigurationError):
        config.validate_complete()


def test_secret_not_in_repr(overrides):
    config = load_config(overrides, settings=_settings())

    assert "secret'" not in repr(config.client)
