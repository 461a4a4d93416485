"""
SafetyNet attestation response verification

``AttestationResponse`` wraps one compact JWS returned by the SafetyNet
Attestation API and checks it gate by gate: response presence, nonce,
leaf certificate subject, signature, timestamp and, optionally, the
certificate chain. The first failing gate decides the outcome.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Tuple, Type, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm

from ..crypto.signature import verify_jws_signature
from ..exceptions import (
    AttestationVerificationError,
    LeafCertificateSubjectError,
    NonceMismatchError,
    ResponseMissingError,
    SignatureError,
    TimestampError,
    TrustworthinessError,
)
from ..jws.certificates import CertificateChain, extract_certificate_chain
from ..jws.structure import Claims, DecodedStructure, decode_compact
from ..trust.store import TrustAnchors, TrustStoreHandle, get_default_trust_store
from .claims import (
    BASIC_INTEGRITY_CLAIM,
    CTS_PROFILE_MATCH_CLAIM,
    LEEWAY,
    TIMESTAMP_CLAIM,
    Challenge,
    valid_attestation_domain,
    valid_nonce,
    valid_timestamp,
)
from .types import Clock, VerificationGate, VerificationResult

logger = logging.getLogger(__name__)

TrustStore = Union[TrustStoreHandle, TrustAnchors]
Gate = Tuple[VerificationGate, Callable[[], bool], Type[AttestationVerificationError]]


class AttestationResponse:
    """
    A SafetyNet attestation response awaiting verification.

    Decoding happens once, on first use, and is reused by every check and
    accessor on the same instance.
    """

    def __init__(
        self,
        response: Optional[str],
        *,
        trust_store: Optional[TrustStore] = None,
        leeway: float = LEEWAY,
        clock: Clock = time.time
    ):
        """
        Args:
            response: Compact JWS from the attestation API
            trust_store: Handle or anchors to validate the chain against
                         (defaults to the process-wide handle)
            leeway: Accepted timestamp age in seconds
            clock: Source of the current time in seconds since the epoch
        """
        if leeway < 0:
            raise ValueError("Leeway cannot be negative")

        self.response = response
        self.trust_store = trust_store
        self.leeway = leeway
        self.clock = clock
        self._structure: Optional[DecodedStructure] = None
        self._certificate_chain: Optional[CertificateChain] = None

    def verify(self, nonce: Challenge, trustworthiness: bool = True) -> bool:
        """
        Verify the response, raising on the first failing gate.

        Args:
            nonce: Expected challenge
            trustworthiness: Validate the certificate chain against the trust store

        Returns:
            bool: True when every gate passes

        Raises:
            ResponseMissingError, MalformedStructureError, NonceMismatchError,
            LeafCertificateSubjectError, SignatureError, TimestampError,
            TrustworthinessError
        """
        result = self.evaluate(nonce, trustworthiness)
        result.raise_for_status()
        return True

    def evaluate(self, nonce: Challenge, trustworthiness: bool = True) -> VerificationResult:
        """
        Run the same gates as ``verify`` and return the outcome instead of raising.

        Returns:
            VerificationResult: VALID, or INVALID with the first gate's error
        """
        checks = {}

        for gate, check, error_class in self.gates(nonce, trustworthiness):
            error = run_gate(gate, check, error_class)
            checks[gate.value] = error is None
            if error is not None:
                return VerificationResult.failure(error, checks, gate)

        return VerificationResult.success(checks)

    def gates(self, nonce: Challenge, trustworthiness: bool) -> List[Gate]:
        gates: List[Gate] = [
            (VerificationGate.RESPONSE, self._response_present, ResponseMissingError),
            (VerificationGate.NONCE, lambda: valid_nonce(self.payload, nonce), NonceMismatchError),
            (VerificationGate.ATTESTATION_DOMAIN, self.valid_attestation_domain, LeafCertificateSubjectError),
            (VerificationGate.SIGNATURE, self.valid_signature, SignatureError),
            (VerificationGate.TIMESTAMP, self.valid_timestamp, TimestampError),
        ]

        if trustworthiness:
            # Snapshot once so a concurrent replacement cannot change anchors mid-check
            anchors = self.trust_anchors()
            gates.append((VerificationGate.TRUSTWORTHINESS, lambda: self.trustworthy(anchors), TrustworthinessError))
        else:
            logger.warning("Certificate chain validation skipped at caller's request")

        return gates

    def _response_present(self) -> bool:
        if not self.response:
            return False
        self._ensure_decoded()
        return True

    def _ensure_decoded(self) -> None:
        if self._structure is not None:
            return
        if not self.response:
            raise ResponseMissingError()

        structure = decode_compact(self.response)
        chain = extract_certificate_chain(structure.header)
        self._structure = structure
        self._certificate_chain = chain

    # Checks

    def valid_attestation_domain(self) -> bool:
        return valid_attestation_domain(self.leaf_certificate)

    def valid_signature(self) -> bool:
        try:
            public_key = self.leaf_certificate.public_key()
        except (ValueError, UnsupportedAlgorithm) as e:
            logger.debug(f"Leaf certificate public key is unusable: {e}")
            return False
        return verify_jws_signature(self.structure, public_key)

    def valid_timestamp(self) -> bool:
        """Check timestamp freshness on its own, outside of ``verify``"""
        return valid_timestamp(self.payload, self.clock(), self.leeway)

    def trust_anchors(self) -> TrustAnchors:
        if self.trust_store is None:
            return get_default_trust_store().snapshot()
        if isinstance(self.trust_store, TrustStoreHandle):
            return self.trust_store.snapshot()
        return self.trust_store

    def trustworthy(self, anchors: Optional[TrustAnchors] = None) -> bool:
        anchors = anchors if anchors is not None else self.trust_anchors()
        chain = self.certificate_chain
        at_time = datetime.fromtimestamp(self.clock(), tz=timezone.utc)
        return anchors.verify_chain(chain.leaf, chain.intermediates, at_time)

    # Accessors

    @property
    def structure(self) -> DecodedStructure:
        self._ensure_decoded()
        return self._structure

    @property
    def headers(self) -> Claims:
        return self.structure.header

    @property
    def payload(self) -> Claims:
        return self.structure.payload

    @property
    def certificate_chain(self) -> CertificateChain:
        self._ensure_decoded()
        return self._certificate_chain

    @property
    def leaf_certificate(self) -> x509.Certificate:
        return self.certificate_chain.leaf

    @property
    def signing_certificates(self) -> Tuple[x509.Certificate, ...]:
        return self.certificate_chain.intermediates

    @property
    def cts_profile_match(self) -> bool:
        """Whether the device passed Android compatibility testing"""
        return self.payload.get_bool(CTS_PROFILE_MATCH_CLAIM)

    @property
    def basic_integrity(self) -> bool:
        return self.payload.get_bool(BASIC_INTEGRITY_CLAIM)

    @property
    def timestamp_ms(self) -> int:
        return self.payload.get_int(TIMESTAMP_CLAIM)

    @property
    def apk_package_name(self) -> Optional[str]:
        return self.payload.get_str("apkPackageName", default=None)

    @property
    def apk_certificate_digest_sha256(self) -> Optional[List[Any]]:
        return self.payload.get_list("apkCertificateDigestSha256", default=None)

    @property
    def advice(self) -> Optional[str]:
        return self.payload.get_str("advice", default=None)

    @property
    def evaluation_type(self) -> Optional[str]:
        return self.payload.get_str("evaluationType", default=None)


def run_gate(
    gate: VerificationGate,
    check: Callable[[], bool],
    error_class: Type[AttestationVerificationError]
) -> Optional[AttestationVerificationError]:
    """
    Run one gate and return its error, or None when it passes.

    SDK errors raised by the check are returned as they are. Library errors
    (ValueError, TypeError) become the gate's own error class.
    """
    try:
        passed = check()
    except AttestationVerificationError as error:
        logger.debug(f"Attestation gate '{gate.value}' failed: {error}")
        return error
    except (ValueError, TypeError) as e:
        logger.debug(f"Attestation gate '{gate.value}' raised {type(e).__name__}: {e}")
        error = error_class(details={"cause": f"{type(e).__name__}: {e}"})
        error.__cause__ = e
        return error

    if not passed:
        logger.debug(f"Attestation gate '{gate.value}' rejected the response")
        return error_class()
    return None


def verify_attestation(
    response: Optional[str],
    nonce: Challenge,
    trustworthiness: bool = True,
    **kwargs
) -> bool:
    """
    Verify an attestation response in one call

    Args:
        response: Compact JWS from the attestation API
        nonce: Expected challenge
        trustworthiness: Validate the certificate chain
        **kwargs: Passed to ``AttestationResponse``

    Returns:
        bool: True on success; raises on failure
    """
    return AttestationResponse(response, **kwargs).verify(nonce, trustworthiness)
