"""
Access token acquisition for provider calls.

- token_store: holds the cached token; serializes refreshes.
- authenticator: performs the client-credentials exchange.
"""

from .authenticator import Authenticator
from .token_store import TokenStore

__all__ = ["Authenticator", "TokenStore"]
