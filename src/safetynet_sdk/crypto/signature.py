"""
JWS signature verification for SafetyNet attestation responses

Signatures are checked with PyJWT against the leaf certificate's public key.
Only the asymmetric algorithms SafetyNet actually uses are accepted; the
header's ``alg`` can never select anything else.
"""

import logging
from typing import Union

import jwt
from jwt.api_jws import PyJWS
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..jws.structure import DecodedStructure

logger = logging.getLogger(__name__)

# Not configurable
ALLOWED_ALGORITHMS = ("ES256", "RS256")

_EXPECTED_KEY_TYPES = {
    "ES256": ec.EllipticCurvePublicKey,
    "RS256": rsa.RSAPublicKey,
}

PublicKey = Union[ec.EllipticCurvePublicKey, rsa.RSAPublicKey]


def is_allowed_algorithm(algorithm: object) -> bool:
    """Check a declared ``alg`` value against the allow-list"""
    return isinstance(algorithm, str) and algorithm in ALLOWED_ALGORITHMS


def verify_jws_signature(structure: DecodedStructure, public_key: PublicKey) -> bool:
    """
    Verify a decoded JWS against a public key.

    Args:
        structure: Decoded compact JWS
        public_key: Public key taken from the leaf certificate

    Returns:
        bool: True if the signature is valid, False otherwise (including
              rejected algorithms and unusable keys)
    """
    algorithm = structure.algorithm
    if not is_allowed_algorithm(algorithm):
        logger.debug(f"Rejected JWS algorithm: {structure.header.get('alg')!r}")
        return False

    if not isinstance(public_key, _EXPECTED_KEY_TYPES[algorithm]):
        logger.debug(f"Leaf key type {type(public_key).__name__} cannot verify {algorithm}")
        return False

    verifier = PyJWS(algorithms=list(ALLOWED_ALGORITHMS))
    try:
        verifier.decode_complete(
            structure.compact,
            key=public_key,
            algorithms=list(ALLOWED_ALGORITHMS),
        )
        return True
    except (jwt.PyJWTError, InvalidSignature, ValueError, TypeError) as e:
        logger.debug(f"JWS signature verification failed: {e}")
        return False
