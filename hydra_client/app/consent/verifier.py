"""
Verification of consent challenges issued by Hydra.
"""

from typing import Any, Dict, Optional

from jose import jwk, jwt
from jose.constants import ALGORITHMS
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from shared.errors import ChallengeVerificationError
from shared.logging import get_logger

from ..jwks import KeyFetcher
from ..models import JWK

PUBLIC_KID = "public"


class ConsentVerifier:
    """Verifies challenge tokens against the public key of the challenge key set."""
    
    def __init__(
        self,
        key_fetcher: KeyFetcher,
        key_set: str,
        *,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        self.key_fetcher = key_fetcher
        self.key_set = key_set
        self.issuer = issuer
        self.audience = audience
        self.logger = get_logger("hydra.consent.verifier")
    
    async def verify_challenge(self, token: str) -> Dict[str, Any]:
        """Verify ``token`` and return its claims."""
        key_data = await self.key_fetcher.get_key(self.key_set, PUBLIC_KID)
        return self.verify_with_key(token, key_data)
    
    def verify_with_key(self, token: str, key_data: JWK) -> Dict[str, Any]:
        try:
            public_key = jwk.construct(key_data, algorithm=ALGORITHMS.RS256)
        except Exception as e:
            raise self._rejected("key", e, "Could not convert challenge key") from e

        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise self._rejected("malformed", e, "Consent challenge is malformed") from e

        try:
            claims = jwt.decode(
                token,
                public_key,
                algorithms=[ALGORITHMS.RS256],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError as e:
            raise self._rejected("expired", e, "Consent challenge has expired") from e
        except JWTClaimsError as e:
            raise self._rejected("claims", e, "Consent challenge claims are invalid") from e
        except JWTError as e:
            raise self._rejected("signature", e, "Consent challenge signature is invalid") from e

        self.logger.info("Consent challenge verified", jti=claims.get("jti"), aud=claims.get("aud"))
        return claims
    
    def _rejected(self, reason: str, cause: Exception, message: str) -> ChallengeVerificationError:
        self.logger.warning("Consent challenge rejected", reason=reason, error=str(cause))
        return ChallengeVerificationError(message, details={"reason": reason}, cause=cause)
