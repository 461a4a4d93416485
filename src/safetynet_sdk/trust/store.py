"""
Trust anchor store and certificate path validation

Trust anchors are immutable snapshots. A ``TrustStoreHandle`` holds the
current snapshot behind a lock so it can be replaced while verifications are
running; each verification reads one snapshot and keeps using it.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

import certifi
from cryptography import x509
from OpenSSL import crypto

from ..exceptions import TrustStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustAnchors:
    """
    A set of trusted root certificates.

    Attributes:
        roots: Explicitly trusted root certificates
        use_platform_roots: Also trust the platform CA bundle (certifi)
        enabled: False means chain validation is skipped entirely
    """
    roots: Tuple[x509.Certificate, ...] = ()
    use_platform_roots: bool = False
    enabled: bool = True

    @classmethod
    def platform(cls) -> 'TrustAnchors':
        """Trust the platform's default root certificates"""
        return cls(use_platform_roots=True)

    @classmethod
    def from_certificates(cls, certificates: Iterable[x509.Certificate]) -> 'TrustAnchors':
        roots = tuple(certificates)
        if not roots:
            raise TrustStoreError("At least one root certificate is required", "EMPTY_TRUST_STORE")
        return cls(roots=roots)

    @classmethod
    def from_pem_bytes(cls, data: bytes) -> 'TrustAnchors':
        try:
            certificates = x509.load_pem_x509_certificates(data)
        except ValueError as e:
            raise TrustStoreError(f"Invalid PEM trust anchors: {e}", "INVALID_TRUST_ANCHOR") from e
        return cls.from_certificates(certificates)

    @classmethod
    def from_pem_files(cls, paths: Sequence[Union[str, Path]]) -> 'TrustAnchors':
        certificates = []
        for path in paths:
            try:
                data = Path(path).read_bytes()
            except OSError as e:
                raise TrustStoreError(
                    f"Failed to read trust anchor file: {e}",
                    "TRUST_ANCHOR_FILE_ERROR",
                    {"path": str(path)}
                ) from e
            certificates.extend(cls.from_pem_bytes(data).roots)
        return cls.from_certificates(certificates)

    @classmethod
    def disabled(cls) -> 'TrustAnchors':
        """
        Skip chain validation.

        Every chain is then considered trustworthy, which removes the
        guarantee that the attestation came from the genuine service.
        """
        return cls(enabled=False)

    @property
    def is_disabled(self) -> bool:
        return not self.enabled

    def build_store(self, at_time: Optional[datetime] = None) -> crypto.X509Store:
        """
        Create a fresh OpenSSL store for one verification

        Raises:
            crypto.Error: If the platform CA bundle cannot be loaded
        """
        store = crypto.X509Store()
        if self.use_platform_roots:
            store.load_locations(certifi.where())
        for root in self.roots:
            store.add_cert(crypto.X509.from_cryptography(root))
        if at_time is not None:
            store.set_time(at_time)
        return store

    def verify_chain(
        self,
        leaf: x509.Certificate,
        intermediates: Sequence[x509.Certificate] = (),
        at_time: Optional[datetime] = None
    ) -> bool:
        """
        Validate a certification path from ``leaf`` to one of the anchors.

        Args:
            leaf: End-entity certificate
            intermediates: Untrusted certificates available for path building
            at_time: Validation time (defaults to the current time)

        Returns:
            bool: True if a valid path exists or trust checking is disabled
        """
        if self.is_disabled:
            return True

        try:
            store = self.build_store(at_time)
        except crypto.Error as e:
            logger.warning(f"Trust store could not be built: {e}")
            return False

        context = crypto.X509StoreContext(
            store,
            crypto.X509.from_cryptography(leaf),
            chain=[crypto.X509.from_cryptography(cert) for cert in intermediates],
        )
        try:
            context.verify_certificate()
            return True
        except crypto.X509StoreContextError as e:
            logger.debug(f"Certificate path validation failed: {e}")
            return False


class TrustStoreHandle:
    """
    Thread-safe holder for the current trust anchors.

    Readers take a snapshot; ``replace`` swaps the whole snapshot at once so
    a reader never sees a partially updated set.
    """

    def __init__(self, anchors: Optional[TrustAnchors] = None):
        self._lock = threading.RLock()
        self._anchors = anchors if anchors is not None else TrustAnchors.platform()

    def snapshot(self) -> TrustAnchors:
        with self._lock:
            return self._anchors

    def replace(self, anchors: TrustAnchors) -> None:
        if not isinstance(anchors, TrustAnchors):
            raise TrustStoreError("Trust anchors must be a TrustAnchors instance", "INVALID_TRUST_STORE")

        with self._lock:
            self._anchors = anchors

        if anchors.is_disabled:
            logger.warning("Certificate chain validation disabled; attestations will not be checked against trusted roots")
        else:
            logger.info(
                f"Trust anchors replaced: {len(anchors.roots)} root(s), "
                f"platform roots {'enabled' if anchors.use_platform_roots else 'disabled'}"
            )


_default_handle: Optional[TrustStoreHandle] = None
_default_handle_lock = threading.Lock()


def get_default_trust_store() -> TrustStoreHandle:
    """
    Get the process-wide trust store handle

    Returns:
        TrustStoreHandle: Default handle, trusting the platform roots until replaced
    """
    global _default_handle
    with _default_handle_lock:
        if _default_handle is None:
            _default_handle = TrustStoreHandle(TrustAnchors.platform())
        return _default_handle


def set_default_trust_anchors(anchors: TrustAnchors) -> None:
    """Replace the anchors used by verifications without an explicit store"""
    get_default_trust_store().replace(anchors)
