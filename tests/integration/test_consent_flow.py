"""
Integration tests for the complete consent flow against a mock Hydra.
"""

import time

import pytest
from jose import jwt

from hydra_client import HydraClient, load_config
from shared.config import HydraSettings
from shared.test_helpers import (
    ChallengeTokenGenerator,
    MockEnvironment,
    MockHydraProvider,
    generate_rsa_key_pair,
)


class TestConsentFlow:
    """Integration tests for verify-then-sign."""

    @pytest.fixture(scope="class")
    def key_pair(self):
        return generate_rsa_key_pair()

    @pytest.fixture
    def provider(self, key_pair):
        provider = MockHydraProvider(host="http://default.localhost")
        provider.add_key("hydra.consent.challenge", "public", key_pair.public_jwk)
        provider.add_key("hydra.consent.response", "private", key_pair.private_jwk_without_crt())
        return provider

    @pytest.fixture
    def config(self, monkeypatch):
        for key, value in MockEnvironment.get_mock_config().items():
            monkeypatch.setenv(key, value)
        return load_config(settings=HydraSettings(_env_file=None))

    @pytest.mark.asyncio
    async def test_consent_round_trip(self, config, provider, key_pair):
        challenge_claims = {
            "aud": "ae3a8b6a-d011-4837-9346-6e5e38fc658a",
            "exp": int(time.time()) + 360,
            "jti": "3c87e681-7c77-440e-b4b4-15a1f963d073",
            "redir": "https://localhost:8000/oauth2/auth?client_id=ae3a8b6a-d011-4837-9346-6e5e38fc658a",
            "scp": ["hydra", "offline", "openid"],
        }
        challenge = ChallengeTokenGenerator(key_pair.private_jwk).generate_challenge(challenge_claims)

        async with HydraClient(config, http_client=provider.http_client()) as hydra:
            verified = await hydra.verify_consent_challenge(challenge)
            result = await hydra.generate_consent_response(
                challenge, "foobar", ["foo"], {"bar": "foo"}, {"baz": "foo"}
            )

        assert verified["aud"] == challenge_claims["aud"]
        assert verified["exp"] == challenge_claims["exp"]
        assert verified["jti"] == challenge_claims["jti"]

        response = jwt.decode(
            result["consent"],
            key_pair.public_jwk,
            algorithms=["RS256"],
            audience=challenge_claims["aud"],
        )
        assert response["sub"] == "foobar"
        assert response["at_ext"]["bar"] == "foo"
        assert response["id_ext"]["baz"] == "foo"
        assert response["jti"] == "3c87e681-7c77-440e-b4b4-15a1f963d073"

        # Both steps ran on a single client-credentials token.
        assert provider.issued == 1
        token_request = provider.calls_to("/oauth2/token")[0]
        assert token_request.headers["Authorization"].startswith("Basic ")
