"""
JWT encode/decode for webtokens.

Supports HS256/384/512, RS256/384/512 and the unsigned "none" algorithm.

Decoding never trusts the token's own "alg" header on its own: the caller
pins the acceptable algorithms (or they are derived from the key type),
and a token declaring anything else is rejected before its signature is
checked.
"""

import json
import logging
from typing import Any, Iterable, Mapping, NamedTuple

from webtokens.algorithms import (
    Algorithm,
    algorithms_for_key,
    get_algorithm,
    resolve_algorithm,
    resolve_algorithms,
)
from webtokens.claims import validate_claims
from webtokens.config import ValidationOptions, get_settings
from webtokens.encoding import (
    TIME_CLAIMS,
    base64url_decode,
    base64url_encode,
    decode_segment,
    encode_segment,
    to_timestamp,
)
from webtokens.exceptions import (
    DecodeError,
    IncorrectAlgorithm,
    InvalidKeyError,
    InvalidSignatureError,
)

logger = logging.getLogger(__name__)

_DEFAULT = object()


class DecodedToken(NamedTuple):
    """Decoded token components."""
    payload: dict[str, Any]
    header: dict[str, Any]
    signature: bytes


def encode(
    payload: Mapping[str, Any],
    key: Any,
    algorithm: str | Algorithm | None = _DEFAULT,
    headers: Mapping[str, Any] | None = None,
    json_encoder: type[json.JSONEncoder] | None = None,
) -> str:
    """
    Create a signed JWT.

    exp, nbf and iat given as datetime objects are converted to epoch
    seconds. Neither payload nor headers is modified.

    Args:
        payload: Claims dictionary. Reserved claims (sub, iss, aud, etc.)
                 are passed through as-is.
        key: HMAC secret (str/bytes), RSA private key (object or PEM), or
             None for algorithm "none".
        algorithm: Algorithm name (default: settings.default_algorithm,
                   normally "HS256"). None means "none".
        headers: Extra header fields such as "kid". "typ" and "alg" entries
                 are ignored; the header always carries typ "JWT" and the
                 signing algorithm.
        json_encoder: Optional JSONEncoder subclass for non-JSON types.

    Returns:
        JWT string (header.payload.signature).

    Raises:
        UnsupportedAlgorithm: If the algorithm is not recognized.
        InvalidKeyError: If the key does not fit the algorithm.
        TypeError: If payload or headers is not a mapping.
    """
    if not isinstance(payload, Mapping):
        raise TypeError(f"Payload must be a mapping, got {type(payload).__name__}")
    if headers is not None and not isinstance(headers, Mapping):
        raise TypeError(f"Headers must be a mapping, got {type(headers).__name__}")

    if algorithm is _DEFAULT:
        algorithm = get_settings().default_algorithm
    alg = resolve_algorithm(Algorithm.NONE if algorithm is None else algorithm)
    signer = get_algorithm(alg)

    # Build
    header = {"typ": "JWT"}
    if headers:
        header.update((k, v) for k, v in headers.items() if k not in ("typ", "alg"))
    header["alg"] = alg.value

    claims = dict(payload)
    for claim in TIME_CLAIMS:
        if claim in claims:
            claims[claim] = to_timestamp(claims[claim])

    # Serialize
    header_b64 = encode_segment(header, json_encoder)
    payload_b64 = encode_segment(claims, json_encoder)

    # Sign
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    signature = signer.sign(signing_input, key)

    return f"{header_b64}.{payload_b64}.{base64url_encode(signature)}"


def _split(token: str | bytes) -> tuple[bytes, bytes, bytes]:
    if isinstance(token, str):
        try:
            token = token.encode("ascii")
        except UnicodeEncodeError as e:
            raise DecodeError("Invalid token: non-ASCII characters") from e
    elif not isinstance(token, bytes):
        raise DecodeError(f"Invalid token type: {type(token).__name__}")

    parts = token.split(b".")
    if len(parts) != 3:
        raise DecodeError(f"Invalid token format: expected 3 parts, got {len(parts)}")
    return parts[0], parts[1], parts[2]


def _decode_header(header_b64: bytes) -> dict[str, Any]:
    header = decode_segment(header_b64)
    if not isinstance(header, dict):
        raise DecodeError("Invalid token header: must be a JSON object")
    if not isinstance(header.get("alg"), str):
        raise DecodeError("Invalid token header: missing alg")
    return header


def _allowed_algorithms(key: Any, algorithms: Iterable[Any] | None) -> frozenset[Algorithm]:
    if algorithms is not None:
        return resolve_algorithms(algorithms)
    return algorithms_for_key(key)


def _verify_signature(
    signing_input: bytes,
    signature: bytes,
    header: Mapping[str, Any],
    key: Any,
    algorithms: Iterable[Any] | None,
) -> None:
    allowed = _allowed_algorithms(key, algorithms)
    token_alg = header["alg"]

    if not allowed:
        logger.debug("Rejected token: no key or algorithms to verify with")
        raise DecodeError("A key or explicit algorithms are required to verify a token")

    if token_alg not in {alg.value for alg in allowed}:
        logger.debug(f"Rejected token: algorithm {token_alg!r} not allowed")
        raise IncorrectAlgorithm(
            f"Algorithm mismatch: token uses {token_alg!r}, expected one of "
            f"{sorted(alg.value for alg in allowed)}",
            algorithm=token_alg,
        )

    try:
        valid = get_algorithm(token_alg).verify(signing_input, signature, key)
    except InvalidKeyError as e:
        # Key fits another pinned algorithm: the token chose the wrong one
        usable = algorithms_for_key(key) | ({Algorithm.NONE} if key is None else set())
        if not usable & allowed:
            raise
        logger.debug(f"Rejected token: key does not fit algorithm {token_alg!r}")
        raise IncorrectAlgorithm(
            f"Algorithm mismatch: token uses {token_alg!r}, which the key does not support",
            algorithm=token_alg,
        ) from e

    if not valid:
        logger.debug(f"Rejected token: {token_alg} signature mismatch")
        raise InvalidSignatureError("Signature verification failed")


def _resolve_options(options: ValidationOptions | Mapping[str, Any] | None) -> ValidationOptions:
    if options is None:
        return ValidationOptions()
    if isinstance(options, ValidationOptions):
        return options
    if isinstance(options, Mapping):
        return ValidationOptions.from_mapping(options)
    raise TypeError(f"options must be ValidationOptions or a mapping, got {type(options).__name__}")


def decode_complete(
    token: str | bytes,
    key: Any = None,
    verify: bool = True,
    options: ValidationOptions | Mapping[str, Any] | None = None,
    algorithms: Iterable[str | Algorithm] | None = None,
    now: float | None = None,
) -> DecodedToken:
    """
    Verify a JWT and return its payload, header and signature.

    Args:
        token: JWT string to decode.
        key: Verification key: HMAC secret, RSA public key (object or
             PEM), or None together with algorithms=["none"].
        verify: False skips signature and claim checks entirely.
        options: ValidationOptions, or a mapping of option overrides.
        algorithms: Algorithms the caller accepts. Defaults to the family
                    matching the key type; "none" is only accepted when
                    listed here.
        now: Current time as epoch seconds (default: time.time()).

    Returns:
        DecodedToken(payload, header, signature).

    Raises:
        DecodeError: If the token is malformed or its signature is invalid.
        IncorrectAlgorithm: If the token's algorithm is not allowed.
        ExpiredSignature: If the exp claim has passed.
        ImmatureSignature: If the nbf claim is in the future.
        UnsupportedAlgorithm: If algorithms names an unknown algorithm.
    """
    options = _resolve_options(options)

    # Split
    header_b64, payload_b64, signature_b64 = _split(token)

    # Decode segments
    header = _decode_header(header_b64)
    payload = decode_segment(payload_b64)
    if not isinstance(payload, dict):
        raise DecodeError("Invalid token payload: must be a JSON object")
    verifying = verify and options.verify
    signature = base64url_decode(signature_b64, canonical=verifying)

    if verifying:
        # Always against the literal bytes from the token
        signing_input = header_b64 + b"." + payload_b64
        _verify_signature(signing_input, signature, header, key, algorithms)
        validate_claims(payload, options, now=now)

    return DecodedToken(payload=payload, header=header, signature=signature)


def decode(
    token: str | bytes,
    key: Any = None,
    verify: bool = True,
    options: ValidationOptions | Mapping[str, Any] | None = None,
    algorithms: Iterable[str | Algorithm] | None = None,
    now: float | None = None,
) -> dict[str, Any]:
    """
    Verify a JWT and return the payload.

    Shortcut for decode_complete(...).payload; see decode_complete for
    arguments and errors.
    """
    return decode_complete(
        token, key, verify=verify, options=options, algorithms=algorithms, now=now
    ).payload


def get_unverified_header(token: str | bytes) -> dict[str, Any]:
    """
    Decode a JWT header without verification.

    Useful for choosing a verification key (e.g. by "kid") before decoding.

    Raises:
        DecodeError: If token format is invalid.
    """
    header_b64, _, _ = _split(token)
    return _decode_header(header_b64)
