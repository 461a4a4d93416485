"""
Type definitions for attestation verification

This module provides the result types returned by the non-raising
verification entry points and the diagnostics produced by the inspector.
"""

from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import AttestationVerificationError

Clock = Callable[[], float]


class VerificationStatus(str, Enum):
    """Verification result status"""
    VALID = "valid"
    INVALID = "invalid"


class VerificationGate(str, Enum):
    """Verification gates, in the order they run"""
    RESPONSE = "response"
    NONCE = "nonce"
    ATTESTATION_DOMAIN = "attestation_domain"
    SIGNATURE = "signature"
    TIMESTAMP = "timestamp"
    TRUSTWORTHINESS = "trustworthiness"


@dataclass
class VerificationResult:
    """
    Outcome of one verification.

    A result is either VALID with no error, or INVALID carrying the error
    raised by the first failing gate. ``checks`` records the gates that ran.
    """
    status: VerificationStatus
    checks: Dict[str, bool] = field(default_factory=dict)
    error: Optional[AttestationVerificationError] = None
    failed_gate: Optional[VerificationGate] = None
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.status == VerificationStatus.VALID

    @property
    def error_code(self) -> Optional[str]:
        return self.error.error_code if self.error else None

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_for_status(self) -> None:
        """Re-raise the stored error for an invalid result"""
        if self.error is not None:
            raise self.error

    @classmethod
    def success(cls, checks: Dict[str, bool]) -> 'VerificationResult':
        return cls(status=VerificationStatus.VALID, checks=checks)

    @classmethod
    def failure(
        cls,
        error: AttestationVerificationError,
        checks: Dict[str, bool],
        failed_gate: Optional[VerificationGate] = None
    ) -> 'VerificationResult':
        return cls(
            status=VerificationStatus.INVALID,
            checks=checks,
            error=error,
            failed_gate=failed_gate,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'checks': dict(self.checks),
            'failed_gate': self.failed_gate.value if self.failed_gate else None,
            'error': {
                'code': self.error.error_code,
                'message': self.error.message,
                'details': self.error.details,
            } if self.error else None,
            'diagnostics': dict(self.diagnostics),
        }
