"""
Authenticated JWK retrieval from Hydra's key endpoint.
"""

import time
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from shared.errors import KeyRetrievalError
from shared.logging import get_logger

from ..auth import Authenticator
from ..models import JWK


class KeyFetcher:
    """Fetches single keys from ``{endpoint}/keys/{set}/{kid}``."""
    
    def __init__(
        self,
        endpoint: str,
        authenticator: Authenticator,
        http_client: httpx.AsyncClient,
        cache_ttl: float = 0.0,
        clock: Callable[[], float] = time.time,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.authenticator = authenticator
        self.cache_ttl = cache_ttl
        self.logger = get_logger("hydra.keys")
        self._client = http_client
        self._clock = clock
        
        # (set, kid) -> (fetched_at, key)
        self._key_cache: Dict[Tuple[str, str], Tuple[float, JWK]] = {}
    
    def key_url(self, set_name: str, kid: str) -> str:
        return f"{self.endpoint}/keys/{quote(set_name, safe='')}/{quote(kid, safe='')}"
    
    async def get_key(self, set_name: str, kid: str) -> JWK:
        """Return the first key of the addressed key set."""
        cached = self._cached(set_name, kid)
        if cached is not None:
            return cached

        token = await self.authenticator.ensure_token()
        details = {"set": set_name, "kid": kid}

        try:
            response = await self._client.get(
                self.key_url(set_name, kid),
                headers=token.authorization_header(),
            )
        except httpx.HTTPError as e:
            self.logger.error("Key endpoint unreachable", error=str(e), **details)
            raise KeyRetrievalError(details=details, cause=e) from e

        if not response.is_success:
            self.logger.warning("Key retrieval rejected", status_code=response.status_code, **details)
            raise KeyRetrievalError(details={**details, "status_code": response.status_code})

        try:
            payload = response.json()
        except ValueError as e:
            raise KeyRetrievalError(
                "Key set response is not valid JSON",
                details=details,
                cause=e,
            ) from e

        keys = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(keys, list) or not keys:
            raise KeyRetrievalError("Key set response contained no keys", details=details)

        key = keys[0]
        if not isinstance(key, dict):
            raise KeyRetrievalError("Key set entry is not a JSON object", details=details)

        if len(keys) > 1:
            self.logger.debug("Key set holds several keys, using the first", count=len(keys), **details)

        if self.cache_ttl > 0:
            self._key_cache[(set_name, kid)] = (self._clock(), dict(key))

        self.logger.info("Key fetched", kty=key.get("kty"), **details)
        return dict(key)
    
    def _cached(self, set_name: str, kid: str) -> Optional[JWK]:
        if self.cache_ttl <= 0:
            return None
        entry = self._key_cache.get((set_name, kid))
        if entry is None:
            return None
        fetched_at, key = entry
        if self._clock() - fetched_at >= self.cache_ttl:
            del self._key_cache[(set_name, kid)]
            return None
        return dict(key)
    
    def clear_cache(self):
        """Drop all cached keys."""
        self._key_cache.clear()
        self.logger.info("Key cache cleared")
