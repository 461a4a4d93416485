"""
Cryptographic operations for SafetyNet Attestation SDK
"""

from .signature import (
    ALLOWED_ALGORITHMS,
    is_allowed_algorithm,
    verify_jws_signature,
)

__all__ = [
    'ALLOWED_ALGORITHMS',
    'is_allowed_algorithm',
    'verify_jws_signature',
]
