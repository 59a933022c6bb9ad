"""
Hydra client facade.
"""

import time
from typing import Any, Callable, Dict, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx

from shared.config import HydraConfig, HydraSettings, load_config
from shared.errors import RemoteCallError
from shared.logging import configure_logging, get_logger

from .auth import Authenticator, TokenStore
from .consent import ConsentSigner, ConsentVerifier
from .jwks import KeyFetcher
from .models import JWK, AccessToken


class HydraClient:
    """Authenticated access to a Hydra provider and its consent flow.

    One instance owns one token cache and one configuration. Pass an
    ``http_client`` to share a connection pool; the client then leaves
    closing it to the caller.
    """

    def __init__(
        self,
        config: HydraConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._config = config.validate_complete()
        self.logger = get_logger("hydra.client")

        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.http_timeout)

        self.token_store = TokenStore(clock)
        self.authenticator = Authenticator(config, self._http, self.token_store)
        self.key_fetcher = KeyFetcher(
            config.endpoint,
            self.authenticator,
            self._http,
            cache_ttl=config.key_cache_ttl,
            clock=clock,
        )
        self.verifier = ConsentVerifier(
            self.key_fetcher,
            config.consent.challenge_key_set,
            issuer=config.consent.challenge_issuer,
            audience=config.consent.challenge_audience,
        )
        self.signer = ConsentSigner(
            self.verifier, self.key_fetcher, config.consent.response_key_set
        )

    @classmethod
    def from_environment(
        cls,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        settings: Optional[HydraSettings] = None,
        **kwargs: Any,
    ) -> "HydraClient":
        """Load configuration from ``HYDRA_*`` settings, configure logging at
        the configured level and build a client.
        """
        config = load_config(overrides, settings=settings)
        configure_logging("hydra", config.log_level)
        return cls(config, **kwargs)

    @property
    def config(self) -> HydraConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def scope(self) -> str:
        return self._config.scope

    async def __aenter__(self) -> "HydraClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def authenticate(self) -> AccessToken:
        return await self.authenticator.ensure_token()

    async def get_key(self, set_name: str, kid: str) -> JWK:
        return await self.key_fetcher.get_key(set_name, kid)

    async def get_client(self, client_id: str) -> Dict[str, Any]:
        """Look up an OAuth2 client record."""
        return await self._authorized_request(
            "GET",
            f"/clients/{quote(client_id, safe='')}",
            failure="Could not retrieve client.",
        )

    async def validate_token(self, token: str) -> Dict[str, Any]:
        """Introspect ``token``; inactive tokens come back with ``active`` false."""
        return await self._authorized_request(
            "POST",
            "/oauth2/introspect",
            failure="Introspection failed.",
            data={"token": token},
        )

    async def verify_consent_challenge(self, challenge: str) -> Dict[str, Any]:
        return await self.verifier.verify_challenge(challenge)

    async def generate_consent_response(
        self,
        challenge: str,
        subject: str,
        scopes: Sequence[str],
        access_token_extra: Optional[Dict[str, Any]] = None,
        id_token_extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        return await self.signer.generate_response(
            challenge, subject, scopes, access_token_extra, id_token_extra
        )

    async def _authorized_request(
        self,
        method: str,
        path: str,
        *,
        failure: str,
        data: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        token = await self.authenticator.ensure_token()
        url = f"{self.endpoint}{path}"

        try:
            response = await self._http.request(
                method, url, data=data, headers=token.authorization_header()
            )
        except httpx.HTTPError as e:
            self.logger.error("Provider call failed", method=method, path=path, error=str(e))
            raise RemoteCallError(failure, details={"path": path}, cause=e) from e

        if not response.is_success:
            self.logger.warning(
                "Provider call rejected",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise RemoteCallError(
                failure,
                details={"path": path, "status_code": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallError(
                f"{failure} Response is not valid JSON.",
                details={"path": path, "status_code": response.status_code},
                cause=e,
            ) from e
