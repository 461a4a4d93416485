"""
Certificate chain extraction from the JWS ``x5c`` header
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID

from ..exceptions import MalformedStructureError, ResponseMissingError
from .structure import Claims

logger = logging.getLogger(__name__)

CERTIFICATE_CHAIN_HEADER = "x5c"


@dataclass(frozen=True)
class CertificateChain:
    """
    Certificates from the ``x5c`` header in their original order.

    Index 0 is the leaf that signed the JWS; everything after it is a
    candidate intermediate for path building.
    """
    certificates: Tuple[x509.Certificate, ...]

    def __post_init__(self):
        if not self.certificates:
            raise ResponseMissingError("Certificate chain is empty")

    @property
    def leaf(self) -> x509.Certificate:
        return self.certificates[0]

    @property
    def intermediates(self) -> Tuple[x509.Certificate, ...]:
        return self.certificates[1:]

    def __len__(self) -> int:
        return len(self.certificates)

    def __iter__(self) -> Iterator[x509.Certificate]:
        return iter(self.certificates)

    def __getitem__(self, index):
        return self.certificates[index]


def load_certificate(encoded: str, position: int = 0) -> x509.Certificate:
    """
    Parse one standard-base64 DER certificate from an ``x5c`` entry.

    Raises:
        MalformedStructureError: If the entry is not base64 DER
    """
    if not isinstance(encoded, str):
        raise MalformedStructureError(
            f"x5c entry {position} must be a string",
            details={"position": position, "type": type(encoded).__name__}
        )

    try:
        der = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedStructureError(
            f"x5c entry {position} is not valid base64: {e}",
            details={"position": position}
        ) from e

    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as e:
        raise MalformedStructureError(
            f"x5c entry {position} is not a DER certificate: {e}",
            details={"position": position}
        ) from e


def extract_certificate_chain(header: Claims) -> CertificateChain:
    """
    Build the certificate chain declared in a JWS header.

    Args:
        header: Decoded JWS header

    Returns:
        CertificateChain: Parsed chain, leaf first

    Raises:
        ResponseMissingError: If ``x5c`` is absent or empty
        MalformedStructureError: If ``x5c`` is not an array or holds a bad entry
    """
    entries = header.get_list(CERTIFICATE_CHAIN_HEADER, default=None)
    if not entries:
        raise ResponseMissingError(
            "JWS header carries no certificate chain",
            details={"header": CERTIFICATE_CHAIN_HEADER}
        )

    certificates = tuple(
        load_certificate(entry, position) for position, entry in enumerate(entries)
    )
    logger.debug(f"Extracted certificate chain of length {len(certificates)}")
    return CertificateChain(certificates)


def common_name(certificate: x509.Certificate) -> Optional[str]:
    """Return the first subject Common Name, or None when there is none"""
    attributes = certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return None
    value = attributes[0].value
    return value if isinstance(value, str) else value.decode("utf-8", "replace")
