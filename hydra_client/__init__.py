"""
Client for the ORY Hydra consent flow.

Obtains client-credentials access tokens, fetches JWKs from Hydra's key
sets, verifies consent challenges and signs consent responses.
"""

from hydra_client.app.client import HydraClient
from hydra_client.app.models import AccessToken
from shared.config import HydraConfig, HydraSettings, load_config
from shared.errors import (
    AuthenticationError,
    ChallengeVerificationError,
    ConfigurationError,
    ConsentSigningError,
    HydraError,
    KeyRetrievalError,
    RemoteCallError,
)

__version__ = "1.0.0"

__all__ = [
    "AccessToken",
    "AuthenticationError",
    "ChallengeVerificationError",
    "ConfigurationError",
    "ConsentSigningError",
    "HydraClient",
    "HydraConfig",
    "HydraError",
    "HydraSettings",
    "KeyRetrievalError",
    "RemoteCallError",
    "load_config",
]
