"""
Attestation inspection and debugging utilities

Unlike ``AttestationResponse.verify``, the inspector keeps running after a
gate fails so that a single report shows every problem with a response.
It is meant for troubleshooting; acceptance decisions belong to ``verify``.
"""

import time
from typing import Any, Dict, Optional, Union

from ..exceptions import AttestationVerificationError
from ..jws.certificates import common_name
from .attestation_response import AttestationResponse, run_gate
from .claims import Challenge, TIMESTAMP_CLAIM, timestamp_seconds
from .types import VerificationGate, VerificationResult, VerificationStatus


class AttestationInspector:
    """
    Attestation inspector for debugging and analysis
    """

    def inspect(
        self,
        attestation: Union[AttestationResponse, str],
        nonce: Challenge,
        trustworthiness: bool = True
    ) -> VerificationResult:
        """
        Run every gate and collect the results.

        Args:
            attestation: Response object or compact JWS string
            nonce: Expected challenge
            trustworthiness: Include certificate chain validation

        Returns:
            VerificationResult: Per-gate checks, the first error and diagnostics
        """
        if not isinstance(attestation, AttestationResponse):
            attestation = AttestationResponse(attestation)

        checks: Dict[str, bool] = {}
        first_error: Optional[AttestationVerificationError] = None
        failed_gate: Optional[VerificationGate] = None

        for gate, check, error_class in attestation.gates(nonce, trustworthiness):
            error = run_gate(gate, check, error_class)
            passed = error is None

            checks[gate.value] = passed
            if error is not None and first_error is None:
                first_error = error
                failed_gate = gate

            # Nothing else can be inspected without a decoded response
            if gate == VerificationGate.RESPONSE and not passed:
                break

        return VerificationResult(
            status=VerificationStatus.VALID if first_error is None else VerificationStatus.INVALID,
            checks=checks,
            error=first_error,
            failed_gate=failed_gate,
            diagnostics=self._collect_diagnostics(attestation, checks),
        )

    def _collect_diagnostics(self, attestation: AttestationResponse, checks: Dict[str, bool]) -> Dict[str, Any]:
        if not checks.get(VerificationGate.RESPONSE.value):
            return {}

        structure = attestation.structure
        chain = attestation.certificate_chain
        payload = structure.payload

        diagnostics: Dict[str, Any] = {
            'algorithm': structure.header.get('alg'),
            'chain_length': len(chain),
            'chain_subjects': [cert.subject.rfc4514_string() for cert in chain],
            'leaf_common_name': common_name(chain.leaf),
            'payload_claims': sorted(payload.keys()),
            'cts_profile_match': payload.get('ctsProfileMatch'),
            'basic_integrity': payload.get('basicIntegrity'),
            'trust_disabled': attestation.trust_anchors().is_disabled,
        }

        timestamp_ms = payload.get(TIMESTAMP_CLAIM)
        if isinstance(timestamp_ms, int) and not isinstance(timestamp_ms, bool):
            diagnostics['timestamp_age'] = attestation.clock() - timestamp_seconds(timestamp_ms)

        return diagnostics

    def generate_diagnostic_report(self, result: VerificationResult) -> str:
        """
        Generate diagnostic report

        Args:
            result: Result produced by ``inspect`` or ``evaluate``

        Returns:
            str: Formatted diagnostic report
        """
        lines = []

        lines.append('=== SafetyNet Attestation Report ===')
        lines.append('')
        lines.append(f'Overall Status: {result.status.value.upper()}')
        if result.error is not None:
            lines.append(f'First Failure: {result.failed_gate.value if result.failed_gate else "N/A"} '
                         f'[{result.error.error_code}] {result.error.message}')
        lines.append('')

        lines.append('=== Individual Checks ===')
        for check, passed in result.checks.items():
            status = '✓' if passed else '✗'
            label = check.replace('_', ' ').title()
            lines.append(f'{status} {label}')
        lines.append('')

        diagnostics = result.diagnostics
        if diagnostics:
            lines.append('=== Response Analysis ===')
            lines.append(f'Algorithm: {diagnostics.get("algorithm") or "N/A"}')
            lines.append(f'Leaf Common Name: {diagnostics.get("leaf_common_name") or "N/A"}')
            lines.append(f'Chain Length: {diagnostics.get("chain_length", 0)}')
            for index, subject in enumerate(diagnostics.get('chain_subjects', [])):
                lines.append(f'  [{index}] {subject}')

            if 'timestamp_age' in diagnostics:
                lines.append(f'Timestamp Age: {diagnostics["timestamp_age"]:.0f} seconds')

            lines.append(f'CTS Profile Match: {diagnostics.get("cts_profile_match")}')
            lines.append(f'Basic Integrity: {diagnostics.get("basic_integrity")}')
            if diagnostics.get('trust_disabled'):
                lines.append('WARNING: trust anchor validation is disabled')
            lines.append('')

        lines.append(f'Generated: {time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime())}')
        return '\n'.join(lines)


def create_inspector() -> AttestationInspector:
    """
    Create a new attestation inspector

    Returns:
        AttestationInspector: Inspector instance
    """
    return AttestationInspector()


def quick_diagnostic(response: Union[AttestationResponse, str], nonce: Challenge, trustworthiness: bool = True) -> str:
    """
    Inspect a response and render the report in one call

    Args:
        response: Response object or compact JWS string
        nonce: Expected challenge
        trustworthiness: Include certificate chain validation

    Returns:
        str: Diagnostic report
    """
    inspector = create_inspector()
    result = inspector.inspect(response, nonce, trustworthiness)
    return inspector.generate_diagnostic_report(result)
