"""
Compact JWS decoding for SafetyNet attestation responses

Structural parsing only: nothing in this package decides whether a
response can be trusted.
"""

from .structure import (
    Claims,
    DecodedStructure,
    decode_compact,
    encode_compact,
    base64url_decode,
    base64url_encode,
)
from .certificates import (
    CERTIFICATE_CHAIN_HEADER,
    CertificateChain,
    extract_certificate_chain,
    load_certificate,
    common_name,
)

__all__ = [
    'Claims',
    'DecodedStructure',
    'decode_compact',
    'encode_compact',
    'base64url_decode',
    'base64url_encode',
    'CERTIFICATE_CHAIN_HEADER',
    'CertificateChain',
    'extract_certificate_chain',
    'load_certificate',
    'common_name',
]
