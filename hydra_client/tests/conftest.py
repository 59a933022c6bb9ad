"""
Shared fixtures for Hydra client unit tests.
"""

import pytest

from hydra_client.app.client import HydraClient
from shared.config import HydraSettings, load_config
from shared.test_helpers import (
    ChallengeTokenGenerator,
    FakeClock,
    MockHydraProvider,
    generate_rsa_key_pair,
)

CHALLENGE_SET = "hydra.consent.challenge"
RESPONSE_SET = "hydra.consent.response"


@pytest.fixture(scope="session")
def key_pair():
    """RSA key pair shared by the challenge and response key sets."""
    return generate_rsa_key_pair()


@pytest.fixture
def provider(key_pair):
    """Mock Hydra serving the consent key sets."""
    provider = MockHydraProvider()
    provider.add_key(CHALLENGE_SET, "public", key_pair.public_jwk)
    provider.add_key(RESPONSE_SET, "private", key_pair.private_jwk_without_crt())
    return provider


@pytest.fixture
def config(provider):
    """Client configuration pointing at the mock provider."""
    return load_config(
        {
            "client": {"id": "client", "secret": "secret"},
            "auth": {"tokenHost": provider.host},
            "scope": "foo",
        },
        settings=HydraSettings(_env_file=None),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hydra(config, provider, clock):
    """HydraClient wired to the mock provider."""
    return HydraClient(config, http_client=provider.http_client(), clock=clock)


@pytest.fixture
def challenges(key_pair):
    return ChallengeTokenGenerator(key_pair.private_jwk)
