"""
Signing of consent responses for verified consent challenges.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from jose import jwt
from jose.constants import ALGORITHMS

from shared.errors import ConsentSigningError, HydraError
from shared.logging import get_logger

from ..jwks import KeyFetcher
from .keys import construct_private_key
from .verifier import ConsentVerifier

PRIVATE_KID = "private"

# Carried over from the verified challenge, never taken from the caller.
CHALLENGE_BOUND_CLAIMS = ("jti", "aud", "exp")


def build_consent_claims(
    challenge: Mapping[str, Any],
    subject: str,
    scopes: Sequence[str],
    access_token_extra: Optional[Dict[str, Any]] = None,
    id_token_extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Assemble the consent response claim set for a verified challenge."""
    missing = [name for name in CHALLENGE_BOUND_CLAIMS if challenge.get(name) is None]
    if missing:
        raise ValueError(f"challenge is missing claims: {', '.join(missing)}")
    if isinstance(scopes, (str, bytes)):
        raise TypeError("scopes must be a sequence of scope names, not a string")

    claims = {name: challenge[name] for name in CHALLENGE_BOUND_CLAIMS}
    claims.update(
        scp=list(scopes),
        sub=subject,
        at_ext=dict(access_token_extra or {}),
        id_ext=dict(id_token_extra or {}),
    )
    return claims


@contextmanager
def signing_stage(stage: str, passthrough: bool = False) -> Iterator[None]:
    """Run one pipeline stage; failures become ConsentSigningError.

    With ``passthrough`` the stage's own HydraError subclasses propagate
    unchanged.
    """
    try:
        yield
    except Exception as e:
        if passthrough and isinstance(e, HydraError):
            raise
        raise ConsentSigningError(
            f"Could not sign consent response ({stage} failed).",
            details={"stage": stage},
            cause=e,
        ) from e


class ConsentSigner:
    """Verify a challenge, then sign the matching consent response.

    The stages run strictly in order: verify, fetch_key, reconstruct_key,
    build_claims, sign. The private key is only fetched once the challenge
    has verified, and the response is built from exactly the claims that
    verification returned.
    """

    def __init__(self, verifier: ConsentVerifier, key_fetcher: KeyFetcher, key_set: str):
        self.verifier = verifier
        self.key_fetcher = key_fetcher
        self.key_set = key_set
        self.logger = get_logger("hydra.consent.signer")

    async def generate_response(
        self,
        challenge_token: str,
        subject: str,
        scopes: Sequence[str],
        access_token_extra: Optional[Dict[str, Any]] = None,
        id_token_extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        with signing_stage("verify", passthrough=True):
            challenge = await self.verifier.verify_challenge(challenge_token)

        with signing_stage("fetch_key"):
            key_data = await self.key_fetcher.get_key(self.key_set, PRIVATE_KID)

        with signing_stage("reconstruct_key"):
            private_key = construct_private_key(key_data)

        with signing_stage("build_claims"):
            claims = build_consent_claims(
                challenge, subject, scopes, access_token_extra, id_token_extra
            )

        with signing_stage("sign"):
            headers = {"kid": key_data["kid"]} if key_data.get("kid") else None
            consent = jwt.encode(claims, private_key, algorithm=ALGORITHMS.RS256, headers=headers)

        self.logger.info("Consent response signed", jti=claims["jti"], sub=subject)
        return {"consent": consent}
