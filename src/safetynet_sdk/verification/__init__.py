"""
Attestation verification module for SafetyNet Attestation SDK

This module provides:
- Gate-by-gate verification of attestation responses
- Individual claim checks (nonce, leaf subject, timestamp)
- Non-raising evaluation results
- Developer debugging utilities
"""

# Export types
from .types import (
    Clock,
    VerificationStatus,
    VerificationGate,
    VerificationResult,
)

# Export claim checks
from .claims import (
    VALID_SUBJECT_HOSTNAME,
    LEEWAY,
    Challenge,
    valid_nonce,
    valid_attestation_domain,
    valid_timestamp,
    check_timestamp_freshness,
    timestamp_seconds,
)

# Export response verification
from .attestation_response import (
    AttestationResponse,
    verify_attestation,
)

# Export inspector
from .inspector import (
    AttestationInspector,
    create_inspector,
    quick_diagnostic,
)

__all__ = [
    # Types
    'Clock',
    'VerificationStatus',
    'VerificationGate',
    'VerificationResult',

    # Claim checks
    'VALID_SUBJECT_HOSTNAME',
    'LEEWAY',
    'Challenge',
    'valid_nonce',
    'valid_attestation_domain',
    'valid_timestamp',
    'check_timestamp_freshness',
    'timestamp_seconds',

    # Response verification
    'AttestationResponse',
    'verify_attestation',

    # Inspector
    'AttestationInspector',
    'create_inspector',
    'quick_diagnostic',
]
