"""
Shared fixtures for attestation tests

Builds a throwaway three-level PKI (root, intermediate, leaf) and signs
attestation responses with it, so every test runs against real
certificates and real signatures.
"""

import base64
import datetime
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from safetynet_sdk.jws.structure import encode_compact
from safetynet_sdk.trust.store import TrustAnchors

ATTEST_HOSTNAME = "attest.android.com"
NONCE = b"server-issued-challenge-0001"


@dataclass
class Issuer:
    key: Any
    certificate: x509.Certificate


def _name(common_name: str) -> x509.Name:
    return x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "SafetyNet Test PKI"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])


def _validity():
    now = datetime.datetime.now(datetime.timezone.utc)
    return now - datetime.timedelta(days=1), now + datetime.timedelta(days=365)


def issue_certificate(
    subject_key,
    subject: x509.Name,
    issuer: Optional[Issuer] = None,
    ca: bool = False
) -> x509.Certificate:
    """Issue a certificate; without an issuer it is self-signed"""
    not_before, not_after = _validity()
    signing_key = issuer.key if issuer else subject_key
    issuer_name = issuer.certificate.subject if issuer else subject

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer_name)
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=not ca,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=ca,
                crl_sign=ca,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
    )
    return builder.sign(signing_key, hashes.SHA256())


def new_ec_key():
    return ec.generate_private_key(ec.SECP256R1())


def new_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def x5c_entry(certificate: x509.Certificate) -> str:
    return base64.b64encode(certificate.public_bytes(serialization.Encoding.DER)).decode("ascii")


def pem_bytes(certificate: x509.Certificate) -> bytes:
    return certificate.public_bytes(serialization.Encoding.PEM)


class AttestationPKI:
    """Root, intermediate and leaf issuing helpers"""

    def __init__(self, root_name: str = "Test Root CA"):
        root_key = new_ec_key()
        self.root = Issuer(root_key, issue_certificate(root_key, _name(root_name), ca=True))

        intermediate_key = new_ec_key()
        self.intermediate = Issuer(
            intermediate_key,
            issue_certificate(intermediate_key, _name("Test Intermediate CA"), self.root, ca=True),
        )

        self.leaf = self.issue_leaf()

    def issue_leaf(self, common_name: str = ATTEST_HOSTNAME, key=None) -> Issuer:
        key = key or new_ec_key()
        return Issuer(key, issue_certificate(key, _name(common_name), self.intermediate))

    def issue_rsa_leaf(self, common_name: str = ATTEST_HOSTNAME) -> Issuer:
        return self.issue_leaf(common_name, key=new_rsa_key())

    def root_pem(self) -> bytes:
        return pem_bytes(self.root.certificate)

    def anchors(self) -> TrustAnchors:
        return TrustAnchors.from_certificates([self.root.certificate])

    def x5c(self, leaf: Optional[Issuer] = None) -> List[str]:
        leaf = leaf or self.leaf
        return [x5c_entry(leaf.certificate), x5c_entry(self.intermediate.certificate)]


@pytest.fixture(scope="session")
def pki():
    """A PKI shared by the whole test session"""
    return AttestationPKI()


@pytest.fixture(scope="session")
def other_pki():
    """An unrelated PKI whose root is never trusted"""
    return AttestationPKI(root_name="Untrusted Root CA")


@pytest.fixture
def nonce() -> bytes:
    """The challenge embedded in signed fixtures"""
    return NONCE


@pytest.fixture
def now():
    """Current time in whole seconds, frozen for the test"""
    return float(int(time.time()))


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def claims(now) -> Dict[str, Any]:
    """A fresh, passing attestation payload"""
    return {
        "nonce": base64.b64encode(NONCE).decode("ascii"),
        "timestampMs": int(now * 1000),
        "apkPackageName": "com.example.app",
        "apkCertificateDigestSha256": ["dGVzdC1kaWdlc3Q="],
        "ctsProfileMatch": True,
        "basicIntegrity": True,
        "evaluationType": "BASIC",
    }


@pytest.fixture
def sign_attestation(pki, claims):
    """
    Factory for signed attestation responses.

    Keyword overrides replace payload claims; ``leaf`` and ``x5c`` replace
    the signer and the declared chain.
    """
    def _sign(leaf: Optional[Issuer] = None, x5c: Optional[List[str]] = None,
              algorithm: str = "ES256", **overrides) -> str:
        leaf = leaf or pki.leaf
        payload = dict(claims)
        payload.update(overrides)
        headers = {"x5c": x5c if x5c is not None else pki.x5c(leaf)}
        return jwt.encode(payload, leaf.key, algorithm=algorithm, headers=headers)

    return _sign


@pytest.fixture
def attestation(sign_attestation) -> str:
    """A valid signed attestation response"""
    return sign_attestation()


@pytest.fixture
def unsigned_attestation(pki, claims):
    """Factory for responses carrying an arbitrary algorithm and signature"""
    def _build(algorithm: str, signature: bytes = b"") -> str:
        return encode_compact({"alg": algorithm, "x5c": pki.x5c()}, claims, signature)

    return _build
