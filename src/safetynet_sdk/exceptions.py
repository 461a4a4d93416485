"""
Exception classes for SafetyNet Attestation SDK
"""

from typing import Optional, Dict, Any


class SafetyNetSDKError(Exception):
    """Base exception for all SafetyNet SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class VerificationErrorCodes:
    """Standard error codes for attestation verification"""

    RESPONSE_MISSING = "RESPONSE_MISSING"
    NONCE_MISMATCH = "NONCE_MISMATCH"
    LEAF_CERTIFICATE_SUBJECT = "LEAF_CERTIFICATE_SUBJECT"
    SIGNATURE = "SIGNATURE"
    TIMESTAMP = "TIMESTAMP"
    TRUSTWORTHINESS = "TRUSTWORTHINESS"
    MALFORMED_STRUCTURE = "MALFORMED_STRUCTURE"


class AttestationVerificationError(SafetyNetSDKError):
    """Base class for every way an attestation can be rejected"""

    default_code = "VERIFICATION_FAILED"
    default_message = "Attestation verification failed"

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message or self.default_message,
            error_code or self.default_code,
            details
        )


class ResponseMissingError(AttestationVerificationError):
    """Raised when there is no attestation response or no certificate in it"""
    default_code = VerificationErrorCodes.RESPONSE_MISSING
    default_message = "Attestation response is missing"


class NonceMismatchError(AttestationVerificationError):
    """Raised when the attested nonce differs from the expected challenge"""
    default_code = VerificationErrorCodes.NONCE_MISMATCH
    default_message = "Attestation nonce does not match the expected challenge"


class LeafCertificateSubjectError(AttestationVerificationError):
    """Raised when the leaf certificate was not issued to the attestation service"""
    default_code = VerificationErrorCodes.LEAF_CERTIFICATE_SUBJECT
    default_message = "Leaf certificate subject does not match the attestation hostname"


class SignatureError(AttestationVerificationError):
    """Raised when the JWS signature is invalid or uses a rejected algorithm"""
    default_code = VerificationErrorCodes.SIGNATURE
    default_message = "Attestation signature is invalid"


class TimestampError(AttestationVerificationError):
    """Raised when the attestation timestamp is outside the accepted window"""
    default_code = VerificationErrorCodes.TIMESTAMP
    default_message = "Attestation timestamp is not fresh"


class TrustworthinessError(AttestationVerificationError):
    """Raised when the certificate chain does not lead to a trusted root"""
    default_code = VerificationErrorCodes.TRUSTWORTHINESS
    default_message = "Attestation certificate chain is not trusted"


class MalformedStructureError(AttestationVerificationError):
    """Raised when the response is not a well-formed compact JWS"""
    default_code = VerificationErrorCodes.MALFORMED_STRUCTURE
    default_message = "Attestation response is malformed"


class TrustStoreError(SafetyNetSDKError):
    """Exception raised when trust anchor material cannot be loaded"""
    pass


class ConfigurationError(SafetyNetSDKError):
    """Exception raised for invalid SDK configuration"""
    pass
