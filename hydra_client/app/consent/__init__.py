"""
Consent challenge verification and consent response signing.
"""

from .keys import construct_private_key, fill_missing_crt_params
from .signer import ConsentSigner, build_consent_claims
from .verifier import ConsentVerifier

__all__ = [
    "ConsentSigner",
    "ConsentVerifier",
    "build_consent_claims",
    "construct_private_key",
    "fill_missing_crt_params",
]
