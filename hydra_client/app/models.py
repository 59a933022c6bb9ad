"""
Data models shared across the Hydra client components.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

# A JSON Web Key as delivered by the provider (RFC 7517 members).
JWK = Dict[str, Any]


@dataclass(frozen=True)
class AccessToken:
    """Access token issued by a client-credentials exchange."""

    value: str = field(repr=False)
    token_type: str = "bearer"
    expires_at: Optional[float] = None
    scope: Optional[str] = None
    refresh_token: Optional[str] = field(default=None, repr=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, body: Mapping[str, Any], now: Optional[float] = None) -> "AccessToken":
        """Build a token from a token endpoint response body.

        ``expires_in`` is converted to an absolute ``expires_at``; a missing,
        zero or unparsable lifetime leaves ``expires_at`` unset, which makes
        the token count as expired.
        """
        value = body.get("access_token")
        if not isinstance(value, str) or not value:
            raise ValueError("token response is missing 'access_token'")

        now = time.time() if now is None else now
        expires_at: Optional[float] = None
        try:
            expires_in = float(body.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        if expires_in > 0:
            expires_at = now + expires_in

        return cls(
            value=value,
            token_type=str(body.get("token_type") or "bearer"),
            expires_at=expires_at,
            scope=body.get("scope"),
            refresh_token=body.get("refresh_token"),
            raw=dict(body),
        )

    def expired(self, now: Optional[float] = None) -> bool:
        if not self.expires_at:
            return True
        now = time.time() if now is None else now
        return not now < self.expires_at

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.value}"}
