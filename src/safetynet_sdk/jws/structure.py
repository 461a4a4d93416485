"""
Compact JWS structure decoding

This module splits a compact JWS (``header.payload.signature``) into its
segments and decodes them without verifying authenticity. Trust decisions
are made later by the signature and chain checks.
"""

import base64
import binascii
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import MalformedStructureError

SEGMENT_SEPARATOR = "."
SEGMENT_COUNT = 3

_MISSING = object()
_BASE64URL_PATTERN = re.compile(r"[A-Za-z0-9_-]*")


def base64url_decode(segment: str) -> bytes:
    """
    Decode a base64url segment, with or without padding.

    Raises:
        MalformedStructureError: If the segment is not valid base64url
    """
    if not isinstance(segment, str):
        raise MalformedStructureError("JWS segment must be a string")

    unpadded = segment.rstrip("=")
    if len(segment) - len(unpadded) > 2:
        raise MalformedStructureError(
            "JWS segment has more than two padding characters",
            details={"segment": segment[:32]}
        )

    if not _BASE64URL_PATTERN.fullmatch(unpadded):
        raise MalformedStructureError(
            "JWS segment contains characters outside the base64url alphabet",
            details={"segment": segment[:32]}
        )

    padded = unpadded + "=" * (-len(unpadded) % 4)
    try:
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise MalformedStructureError(
            f"Invalid base64url segment: {e}",
            details={"segment": segment[:32]}
        ) from e


def base64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url"""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


class Claims(Mapping):
    """
    Read-only view over a decoded JSON object.

    Values keep their JSON types. The typed accessors refuse to coerce:
    asking for an int and finding a string (or a bool) raises
    MalformedStructureError instead of guessing.
    """

    def __init__(self, data: Dict[str, Any], section: str = "claims"):
        if not isinstance(data, dict):
            raise MalformedStructureError(
                f"JWS {section} must be a JSON object",
                details={"type": type(data).__name__}
            )
        self._data = dict(data)
        self.section = section

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Claims({self.section}, keys={sorted(self._data)})"

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def _typed(self, key: str, expected: tuple, type_name: str, default: Any) -> Any:
        value = self._data.get(key, _MISSING)
        if value is _MISSING or value is None:
            if default is not _MISSING:
                return default
            raise MalformedStructureError(
                f"Missing {_field_label(self.section, key)}",
                details={"field": key}
            )

        # bool is an int subclass; never let True pass as 1
        if isinstance(value, bool) and bool not in expected:
            valid = False
        else:
            valid = isinstance(value, expected)

        if not valid:
            raise MalformedStructureError(
                f"{_field_label(self.section, key)} must be {type_name}",
                details={"field": key, "type": type(value).__name__}
            )
        return value

    def get_str(self, key: str, default: Any = _MISSING) -> Optional[str]:
        return self._typed(key, (str,), "a string", default)

    def get_int(self, key: str, default: Any = _MISSING) -> Optional[int]:
        return self._typed(key, (int,), "an integer", default)

    def get_bool(self, key: str, default: Any = _MISSING) -> Optional[bool]:
        return self._typed(key, (bool,), "a boolean", default)

    def get_list(self, key: str, default: Any = _MISSING) -> Optional[List[Any]]:
        return self._typed(key, (list,), "an array", default)

    def get_dict(self, key: str, default: Any = _MISSING) -> Optional[Dict[str, Any]]:
        return self._typed(key, (dict,), "an object", default)


def _field_label(section: str, key: str) -> str:
    return f"{section} field '{key}'"


@dataclass(frozen=True)
class DecodedStructure:
    """
    A compact JWS split into its parts.

    Attributes:
        header: Decoded protected header
        payload: Decoded claims
        signature: Raw signature bytes (unverified)
        header_segment: Header exactly as received
        payload_segment: Payload exactly as received
        signature_segment: Signature exactly as received
    """
    header: Claims
    payload: Claims
    signature: bytes
    header_segment: str
    payload_segment: str
    signature_segment: str

    @property
    def signing_input(self) -> bytes:
        """The bytes the signature was computed over"""
        return f"{self.header_segment}{SEGMENT_SEPARATOR}{self.payload_segment}".encode("ascii")

    @property
    def algorithm(self) -> Optional[str]:
        alg = self.header.get("alg")
        return alg if isinstance(alg, str) else None

    @property
    def compact(self) -> str:
        return SEGMENT_SEPARATOR.join(
            [self.header_segment, self.payload_segment, self.signature_segment]
        )


def _decode_json_segment(segment: str, section: str) -> Claims:
    raw = base64url_decode(segment)
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedStructureError(
            f"JWS {section} is not valid JSON: {e}",
            details={"section": section}
        ) from e
    return Claims(data, section)


def decode_compact(response: str) -> DecodedStructure:
    """
    Decode a compact JWS without verifying it.

    Args:
        response: ``base64url(header).base64url(payload).base64url(signature)``

    Returns:
        DecodedStructure: The decoded parts

    Raises:
        MalformedStructureError: If the input does not have three segments or a
            segment cannot be decoded
    """
    if not isinstance(response, str):
        raise MalformedStructureError(
            "Attestation response must be a string",
            details={"type": type(response).__name__}
        )

    segments = response.strip().split(SEGMENT_SEPARATOR)
    if len(segments) != SEGMENT_COUNT:
        raise MalformedStructureError(
            f"Compact JWS must have {SEGMENT_COUNT} segments, got {len(segments)}",
            details={"segments": len(segments)}
        )

    header_segment, payload_segment, signature_segment = segments

    return DecodedStructure(
        header=_decode_json_segment(header_segment, "header"),
        payload=_decode_json_segment(payload_segment, "payload"),
        signature=base64url_decode(signature_segment),
        header_segment=header_segment,
        payload_segment=payload_segment,
        signature_segment=signature_segment,
    )


def encode_compact(header: Dict[str, Any], payload: Dict[str, Any], signature: bytes) -> str:
    """
    Assemble a compact JWS from already-computed parts.

    No signing happens here; the caller supplies the signature bytes. Used to
    build fixtures and to re-encode decoded structures.
    """
    header_segment = base64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_segment = base64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    return SEGMENT_SEPARATOR.join([header_segment, payload_segment, base64url_encode(signature)])
