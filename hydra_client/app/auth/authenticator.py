"""
Client-credentials exchange against the provider's token endpoint.
"""

import base64
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from shared.config import HydraConfig
from shared.errors import AuthenticationError
from shared.logging import get_logger

from ..models import AccessToken
from .token_store import TokenStore


def basic_authorization_header(client_id: str, client_secret: str) -> str:
    """HTTP Basic credentials, form-encoding id and secret first (RFC 6749 2.3.1)."""
    raw = f"{quote(client_id, safe='')}:{quote(client_secret, safe='')}"
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class Authenticator:
    """Obtains access tokens and keeps the latest one in a TokenStore."""
    
    def __init__(
        self,
        config: HydraConfig,
        http_client: httpx.AsyncClient,
        store: Optional[TokenStore] = None,
    ):
        self.config = config
        self.store = store or TokenStore()
        self.logger = get_logger("hydra.auth")
        self._client = http_client
    
    async def ensure_token(self) -> AccessToken:
        """Return a valid access token, exchanging credentials only when needed."""
        return await self.store.get_or_refresh(self._exchange)
    
    def _build_request(self) -> Dict[str, Any]:
        credentials = self.config.client
        options = self.config.options
        data = {"grant_type": "client_credentials", "scope": self.config.scope}
        headers = {"Accept": "application/json"}

        if options.use_basic_authorization_header:
            headers["Authorization"] = basic_authorization_header(
                credentials.id or "", credentials.secret or ""
            )
        if options.use_body_auth:
            data["client_id"] = credentials.id or ""
            data["client_secret"] = credentials.secret or ""

        return {"data": data, "headers": headers}
    
    async def _exchange(self) -> AccessToken:
        token_url = self.config.auth.token_url
        request = self._build_request()

        try:
            response = await self._client.post(token_url, **request)
        except httpx.HTTPError as e:
            self.logger.error("Token endpoint unreachable", token_url=token_url, error=str(e))
            raise AuthenticationError(
                "Token endpoint unreachable",
                details={"token_url": token_url},
                cause=e,
            ) from e

        if not response.is_success:
            body = _error_body(response)
            self.logger.warning(
                "Token exchange rejected",
                status_code=response.status_code,
                error=body.get("error"),
            )
            raise AuthenticationError(
                f"Token exchange failed: {response.status_code}",
                details={
                    "status_code": response.status_code,
                    "error": body.get("error"),
                    "error_description": body.get("error_description"),
                },
            )

        try:
            token = AccessToken.from_response(response.json(), now=self.store.now())
        except (ValueError, AttributeError) as e:
            self.logger.error("Malformed token response", error=str(e))
            raise AuthenticationError(
                "Token endpoint returned a malformed response",
                details={"status_code": response.status_code},
                cause=e,
            ) from e

        self.logger.info(
            "Access token refreshed",
            scope=self.config.scope,
            expires_at=token.expires_at,
        )
        return token
