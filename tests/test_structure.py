"""
Unit tests for compact JWS structure decoding and certificate extraction
"""

import base64

import pytest
from cryptography import x509

from safetynet_sdk.exceptions import MalformedStructureError, ResponseMissingError
from safetynet_sdk.jws import (
    Claims,
    CertificateChain,
    base64url_decode,
    base64url_encode,
    common_name,
    decode_compact,
    encode_compact,
    extract_certificate_chain,
    load_certificate,
)


class TestBase64Url:
    """Test base64url segment decoding"""

    def test_decodes_unpadded_segment(self):
        """Test that missing padding is tolerated"""
        assert base64url_decode("aGk") == b"hi"

    def test_decodes_url_safe_alphabet(self):
        """Test that '-' and '_' decode as in RFC 4648 section 5"""
        data = bytes([0xfb, 0xff, 0xfe])
        encoded = base64url_encode(data)
        assert "-" in encoded or "_" in encoded
        assert base64url_decode(encoded) == data

    def test_rejects_invalid_characters(self):
        """Test that characters outside the alphabet are rejected"""
        with pytest.raises(MalformedStructureError):
            base64url_decode("a+b/")

    def test_rejects_non_string(self):
        """Test that only strings are accepted"""
        with pytest.raises(MalformedStructureError):
            base64url_decode(b"aGk")

    def test_decodes_padded_segment(self):
        """Test that up to two trailing '=' are tolerated"""
        assert base64url_decode("aGk=") == b"hi"
        assert base64url_decode("aA==") == b"h"

    def test_rejects_excess_padding(self):
        with pytest.raises(MalformedStructureError, match="more than two padding"):
            base64url_decode("aA===")

    def test_rejects_padding_inside_segment(self):
        with pytest.raises(MalformedStructureError, match="base64url alphabet"):
            base64url_decode("aG=k")


class TestDecodeCompact:
    """Test compact JWS decoding"""

    def test_decode_signed_response(self, attestation, claims):
        """Test decoding a response signed with PyJWT"""
        structure = decode_compact(attestation)

        assert structure.algorithm == "ES256"
        assert structure.header["x5c"]
        assert structure.payload.to_dict() == claims
        assert len(structure.signature) == 64
        assert structure.compact == attestation

    def test_signing_input_is_first_two_segments(self, attestation):
        """Test that the signing input is exactly header.payload as received"""
        structure = decode_compact(attestation)
        header_segment, payload_segment, _ = attestation.split(".")

        assert structure.signing_input == f"{header_segment}.{payload_segment}".encode("ascii")

    def test_encode_then_decode_preserves_parts(self):
        """Test that an assembled structure decodes to the same parts"""
        compact = encode_compact({"alg": "ES256"}, {"nonce": "abc"}, b"\x01\x02")
        structure = decode_compact(compact)

        assert structure.header.to_dict() == {"alg": "ES256"}
        assert structure.payload.to_dict() == {"nonce": "abc"}
        assert structure.signature == b"\x01\x02"

    def test_padded_segments(self, attestation, claims):
        """Test decoding a response whose segments carry base64 padding"""
        padded = ".".join(segment + "=" * (-len(segment) % 4) for segment in attestation.split("."))
        assert decode_compact(padded).payload.to_dict() == claims

    def test_surrounding_whitespace_is_ignored(self, attestation):
        """Test that a trailing newline does not break decoding"""
        assert decode_compact(f"{attestation}\n").compact == attestation

    @pytest.mark.parametrize("response", ["", "a.b", "a.b.c.d", "onlyonesegment"])
    def test_wrong_segment_count(self, response):
        """Test that anything but three segments is malformed"""
        with pytest.raises(MalformedStructureError, match="3 segments"):
            decode_compact(response)

    def test_header_not_json(self):
        """Test that a non-JSON header is malformed"""
        compact = ".".join([base64url_encode(b"not json"), base64url_encode(b"{}"), ""])
        with pytest.raises(MalformedStructureError, match="header is not valid JSON"):
            decode_compact(compact)

    def test_payload_not_object(self):
        """Test that a JSON array payload is malformed"""
        compact = ".".join([base64url_encode(b"{}"), base64url_encode(b"[1, 2]"), ""])
        with pytest.raises(MalformedStructureError, match="payload must be a JSON object"):
            decode_compact(compact)

    def test_non_string_response(self):
        """Test that bytes are rejected"""
        with pytest.raises(MalformedStructureError):
            decode_compact(b"a.b.c")


class TestClaims:
    """Test typed claim access"""

    def test_typed_accessors(self):
        """Test reading values of the right type"""
        claims = Claims({"s": "x", "i": 5, "b": False, "l": [1], "d": {"k": 1}}, "payload")

        assert claims.get_str("s") == "x"
        assert claims.get_int("i") == 5
        assert claims.get_bool("b") is False
        assert claims.get_list("l") == [1]
        assert claims.get_dict("d") == {"k": 1}

    def test_missing_required_value(self):
        """Test that a missing value without default is malformed"""
        claims = Claims({}, "payload")

        with pytest.raises(MalformedStructureError, match="Missing payload field 'nonce'") as exc_info:
            claims.get_str("nonce")
        assert exc_info.value.details == {"field": "nonce"}

    def test_missing_value_with_default(self):
        """Test that a default is returned for an absent value"""
        assert Claims({}, "payload").get_str("advice", default=None) is None

    def test_wrong_type_is_not_coerced(self):
        """Test that a numeric string is not treated as an int"""
        with pytest.raises(MalformedStructureError, match="must be an integer"):
            Claims({"timestampMs": "1700000000000"}).get_int("timestampMs")

    def test_bool_is_not_an_int(self):
        """Test that True does not pass as 1"""
        with pytest.raises(MalformedStructureError):
            Claims({"timestampMs": True}).get_int("timestampMs")

    def test_mapping_interface(self):
        """Test that claims behave as a read-only mapping"""
        claims = Claims({"a": 1, "b": 2})

        assert len(claims) == 2
        assert set(claims) == {"a", "b"}
        assert claims.get("missing") is None
        with pytest.raises(TypeError):
            claims["a"] = 3


class TestCertificateChain:
    """Test x5c certificate chain extraction"""

    def test_extract_chain(self, pki):
        """Test extracting leaf and intermediate in order"""
        chain = extract_certificate_chain(Claims({"x5c": pki.x5c()}, "header"))

        assert len(chain) == 2
        assert chain.leaf == pki.leaf.certificate
        assert chain.intermediates == (pki.intermediate.certificate,)
        assert chain[1] == pki.intermediate.certificate

    def test_common_name(self, pki):
        """Test reading the leaf Common Name"""
        assert common_name(pki.leaf.certificate) == "attest.android.com"

    def test_common_name_absent(self, pki):
        """Test that a subject without CN yields None"""
        certificate = pki.leaf.certificate
        no_cn = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([]))
            .issuer_name(pki.intermediate.certificate.subject)
            .public_key(pki.leaf.key.public_key())
            .serial_number(1)
            .not_valid_before(certificate.not_valid_before_utc)
            .not_valid_after(certificate.not_valid_after_utc)
            .sign(pki.intermediate.key, certificate.signature_hash_algorithm)
        )
        assert common_name(no_cn) is None

    @pytest.mark.parametrize("header", [{}, {"x5c": []}, {"x5c": None}])
    def test_missing_or_empty_chain(self, header):
        """Test that an absent or empty x5c means no response to check"""
        with pytest.raises(ResponseMissingError):
            extract_certificate_chain(Claims(header, "header"))

    def test_chain_not_an_array(self):
        """Test that a string x5c is malformed"""
        with pytest.raises(MalformedStructureError, match="must be an array"):
            extract_certificate_chain(Claims({"x5c": "MIIB"}, "header"))

    def test_entry_not_base64(self):
        """Test that a non-base64 entry is malformed"""
        with pytest.raises(MalformedStructureError, match="x5c entry 0 is not valid base64"):
            load_certificate("***")

    def test_entry_not_der(self, pki):
        """Test that base64 garbage after a valid leaf is malformed"""
        garbage = base64.b64encode(b"not a certificate").decode("ascii")
        with pytest.raises(MalformedStructureError, match="x5c entry 1 is not a DER certificate"):
            extract_certificate_chain(Claims({"x5c": [pki.x5c()[0], garbage]}, "header"))

    def test_empty_chain_object(self):
        """Test that a chain cannot be constructed empty"""
        with pytest.raises(ResponseMissingError):
            CertificateChain(())
