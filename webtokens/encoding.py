"""
Token segment encoding utilities.

Every token segment is compact JSON wrapped in unpadded URL-safe base64
(RFC 4648 section 5):

    base64url(JSON(header)).base64url(JSON(payload)).base64url(signature)
"""

import base64
import binascii
import json
from calendar import timegm
from datetime import datetime, timezone
from typing import Any

from webtokens.exceptions import DecodeError

# Claims that may be given as datetime objects on encode
TIME_CLAIMS = ("exp", "nbf", "iat")


def base64url_encode(data: bytes) -> str:
    """Encode bytes to URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(data: str | bytes, canonical: bool = True) -> bytes:
    """
    Decode URL-safe base64 with padding tolerance.

    With canonical=False, non-zero unused trailing bits are ignored.

    Raises:
        DecodeError: If the input is not valid base64url.
    """
    if isinstance(data, str):
        try:
            data = data.encode("ascii")
        except UnicodeEncodeError as e:
            raise DecodeError("Invalid segment encoding") from e

    # b64decode maps altchars but still accepts the standard alphabet
    if b"+" in data or b"/" in data:
        raise DecodeError("Invalid segment encoding")

    padding = -len(data) % 4
    try:
        decoded = base64.b64decode(
            data + b"=" * padding, altchars=b"-_", validate=True
        )
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Invalid segment encoding") from e

    # Reject non-zero trailing bits so each value has one encoding
    if canonical and base64url_encode(decoded).encode("ascii") != data.rstrip(b"="):
        raise DecodeError("Invalid segment encoding")
    return decoded


def json_encode(value: Any, json_encoder: type[json.JSONEncoder] | None = None) -> bytes:
    """
    Serialize to compact UTF-8 JSON, keeping key insertion order.

    Raises:
        ValueError: For NaN or infinite floats, which JSON cannot represent.
    """
    return json.dumps(value, separators=(",", ":"), allow_nan=False, cls=json_encoder).encode("utf-8")


def encode_segment(value: Any, json_encoder: type[json.JSONEncoder] | None = None) -> str:
    """Serialize a value to JSON and base64url-encode it."""
    return base64url_encode(json_encode(value, json_encoder))


def decode_segment(segment: str | bytes) -> Any:
    """
    Decode a base64url JSON segment.

    Raises:
        DecodeError: On malformed base64, UTF-8 or JSON.
    """
    raw = base64url_decode(segment)
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError("Invalid segment encoding") from e


def to_timestamp(value: Any) -> Any:
    """
    Convert a datetime claim value to integer UTC epoch seconds.

    Naive datetimes are taken to be UTC. Anything else is returned unchanged.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return timegm(value.utctimetuple())
    return value
