"""
Reconstruction of RSA signing keys from provider JWKs.

Hydra may deliver a private JWK with ``d``, ``p`` and ``q`` but without the
CRT members ``dp``, ``dq`` and ``qi``. RFC 7518 6.3.2 makes those optional,
but python-jose refuses a key that carries ``p``/``q`` without all three.
``fill_missing_crt_params`` fills the absent members before construction.
"""

from typing import Any, Dict, Mapping

from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk
from jose.backends.base import Key
from jose.constants import ALGORITHMS
from jose.utils import base64_to_long, long_to_base64

CRT_PARAMETERS = ("dp", "dq", "qi")
PRIME_PARAMETERS = ("p", "q")


def _encode(value: int) -> str:
    return long_to_base64(value).decode("ascii")


def fill_missing_crt_params(key_data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``key_data`` whose absent or empty CRT members are filled.

    With both primes present the members are derived from ``d``, ``p`` and
    ``q``. Without them, every precomputed member is dropped and the backend
    recovers the primes from ``n``, ``e`` and ``d`` instead. Public keys and
    complete private keys come back unchanged.
    """
    normalized = dict(key_data)
    if not normalized.get("d"):
        return normalized

    missing = [name for name in CRT_PARAMETERS if not normalized.get(name)]
    if not missing:
        return normalized

    if not all(normalized.get(name) for name in PRIME_PARAMETERS):
        for name in PRIME_PARAMETERS + CRT_PARAMETERS:
            normalized.pop(name, None)
        return normalized

    d = base64_to_long(normalized["d"])
    p = base64_to_long(normalized["p"])
    q = base64_to_long(normalized["q"])
    derived = {
        "dp": rsa.rsa_crt_dmp1(d, p),
        "dq": rsa.rsa_crt_dmq1(d, q),
        "qi": rsa.rsa_crt_iqmp(p, q),
    }
    for name in missing:
        normalized[name] = _encode(derived[name])
    return normalized


def construct_private_key(key_data: Mapping[str, Any]) -> Key:
    """Build an RS256 signing key from a private JWK."""
    if not key_data.get("d"):
        raise ValueError("JWK does not contain private key material")
    return jwk.construct(fill_missing_crt_params(key_data), algorithm=ALGORITHMS.RS256)
