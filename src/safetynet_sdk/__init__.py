"""
SafetyNet Attestation SDK
Server-side verification of Android SafetyNet attestation responses
"""

from .version import __version__
from .exceptions import (
    SafetyNetSDKError,
    VerificationErrorCodes,
    AttestationVerificationError,
    ResponseMissingError,
    NonceMismatchError,
    LeafCertificateSubjectError,
    SignatureError,
    TimestampError,
    TrustworthinessError,
    MalformedStructureError,
    TrustStoreError,
    ConfigurationError,
)
from .jws import (
    Claims,
    DecodedStructure,
    CertificateChain,
    decode_compact,
    extract_certificate_chain,
)
from .crypto import (
    ALLOWED_ALGORITHMS,
    verify_jws_signature,
)
from .trust import (
    TrustAnchors,
    TrustStoreHandle,
    get_default_trust_store,
    set_default_trust_anchors,
)
from .verification import (
    VALID_SUBJECT_HOSTNAME,
    LEEWAY,
    VerificationStatus,
    VerificationGate,
    VerificationResult,
    AttestationResponse,
    verify_attestation,
    AttestationInspector,
    quick_diagnostic,
)
from .config import (
    AttestationConfigManager,
    LoggingConfig,
    load_attestation_config_from_json,
    load_attestation_config_from_file,
)

__all__ = [
    '__version__',
    # Exceptions
    'SafetyNetSDKError',
    'VerificationErrorCodes',
    'AttestationVerificationError',
    'ResponseMissingError',
    'NonceMismatchError',
    'LeafCertificateSubjectError',
    'SignatureError',
    'TimestampError',
    'TrustworthinessError',
    'MalformedStructureError',
    'TrustStoreError',
    'ConfigurationError',
    # JWS structure
    'Claims',
    'DecodedStructure',
    'CertificateChain',
    'decode_compact',
    'extract_certificate_chain',
    # Signature
    'ALLOWED_ALGORITHMS',
    'verify_jws_signature',
    # Trust store
    'TrustAnchors',
    'TrustStoreHandle',
    'get_default_trust_store',
    'set_default_trust_anchors',
    # Verification
    'VALID_SUBJECT_HOSTNAME',
    'LEEWAY',
    'VerificationStatus',
    'VerificationGate',
    'VerificationResult',
    'AttestationResponse',
    'verify_attestation',
    'AttestationInspector',
    'quick_diagnostic',
    # Configuration
    'AttestationConfigManager',
    'LoggingConfig',
    'load_attestation_config_from_json',
    'load_attestation_config_from_file',
]
