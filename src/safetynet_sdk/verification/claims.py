"""
Claim checks for SafetyNet attestation payloads

Each check is an independent predicate over the decoded payload or the leaf
certificate. They return booleans; the orchestrator maps a False to the
matching error.
"""

import base64
import binascii
import logging
import secrets
from typing import Union

from cryptography import x509

from ..jws.certificates import common_name
from ..jws.structure import Claims

logger = logging.getLogger(__name__)

VALID_SUBJECT_HOSTNAME = "attest.android.com"
LEEWAY = 60  # seconds

NONCE_CLAIM = "nonce"
TIMESTAMP_CLAIM = "timestampMs"
CTS_PROFILE_MATCH_CLAIM = "ctsProfileMatch"
BASIC_INTEGRITY_CLAIM = "basicIntegrity"

Challenge = Union[bytes, bytearray, str]


def valid_nonce(payload: Claims, expected: Challenge) -> bool:
    """
    Compare the attested nonce with the expected challenge in constant time.

    Args:
        payload: Decoded attestation payload
        expected: Raw challenge bytes (compared with the base64-decoded
                  ``nonce`` claim) or the base64 text itself

    Returns:
        bool: True if they are equal
    """
    attested = payload.get_str(NONCE_CLAIM)

    if isinstance(expected, (bytes, bytearray)):
        try:
            attested_bytes = base64.b64decode(attested, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("Attested nonce is not valid base64")
            return False
        return secrets.compare_digest(attested_bytes, bytes(expected))

    if isinstance(expected, str):
        return secrets.compare_digest(attested.encode("utf-8"), expected.encode("utf-8"))

    logger.debug(f"Unsupported expected challenge type: {type(expected).__name__}")
    return False


def valid_attestation_domain(leaf: x509.Certificate, hostname: str = VALID_SUBJECT_HOSTNAME) -> bool:
    """Check that the leaf certificate was issued to the attestation service"""
    name = common_name(leaf)
    if name is None:
        logger.debug("Leaf certificate has no Common Name")
        return False
    return name == hostname


def timestamp_seconds(timestamp_ms: int) -> int:
    """Convert milliseconds to whole seconds, rounding halves up"""
    return (timestamp_ms + 500) // 1000


def check_timestamp_freshness(timestamp_ms: int, now: float, leeway: float = LEEWAY) -> bool:
    """
    Check that a timestamp lies within ``[now - leeway, now]``

    Args:
        timestamp_ms: Milliseconds since the epoch
        now: Current time in seconds since the epoch
        leeway: Accepted age in seconds

    Returns:
        bool: True if the timestamp is fresh (bounds inclusive)
    """
    issued_at = timestamp_seconds(timestamp_ms)
    return now - leeway <= issued_at <= now


def valid_timestamp(payload: Claims, now: float, leeway: float = LEEWAY) -> bool:
    """Check the payload's ``timestampMs`` claim for freshness"""
    return check_timestamp_freshness(payload.get_int(TIMESTAMP_CLAIM), now, leeway)
