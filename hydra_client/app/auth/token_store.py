"""
In-memory holder for the current access token.
"""

import asyncio
import dataclasses
import time
from typing import Awaitable, Callable, Optional

from shared.logging import get_logger

from ..models import AccessToken

# Lifetime given to a token issued without expiry so the caller that
# triggered the exchange can use it.
SINGLE_USE_LIFETIME = 1.0


class TokenStore:
    """Caches one access token and decides between reuse and refresh.

    ``get_or_refresh`` is the only way a new token enters the store. It checks
    the cached token, and when a refresh is needed takes a lock and checks
    again, so concurrent callers racing an expired token share a single
    exchange. The store is written only after the exchange succeeds; a failed
    refresh leaves whatever was cached before.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()
        self.logger = get_logger("hydra.tokens")

    def now(self) -> float:
        return self._clock()

    def peek(self) -> Optional[AccessToken]:
        """Return the cached token if it is still valid, else None."""
        token = self._token
        if token is not None and not token.expired(self._clock()):
            return token
        return None

    async def get_or_refresh(self, refresh: Callable[[], Awaitable[AccessToken]]) -> AccessToken:
        token = self.peek()
        if token is not None:
            return token

        async with self._lock:
            # Another caller may have refreshed while we waited.
            token = self.peek()
            if token is not None:
                return token

            fresh = await refresh()
            if fresh.expired(self._clock()):
                # No usable lifetime: valid for this caller only, never cached.
                self.logger.warning("Access token issued without a usable expiry")
                return dataclasses.replace(fresh, expires_at=self._clock() + SINGLE_USE_LIFETIME)

            self._token = fresh
            return fresh

    def clear(self) -> None:
        self._token = None
