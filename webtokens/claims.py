"""
Reserved claim validation.

Only the time-based claims are enforced: exp and nbf. iss, aud, jti, iat
and sub are passed through to the caller unchanged.
"""

import math
import time
from typing import Any, Callable, Mapping

from webtokens.config import ValidationOptions
from webtokens.exceptions import ExpiredSignature, ImmatureSignature, InvalidClaimError


def _numeric_claim(payload: Mapping[str, Any], claim: str) -> float | None:
    if claim not in payload:
        return None
    value = payload[claim]
    # bool is an int subclass but never a timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidClaimError(f"Invalid claim type: {claim} must be a number", claim=claim)
    if not math.isfinite(value):
        raise InvalidClaimError(f"Invalid claim type: {claim} must be finite", claim=claim)
    return value


def validate_exp(payload: Mapping[str, Any], now: float, leeway: float = 0) -> None:
    """
    Check the expiration time claim.

    Raises:
        ExpiredSignature: If now is past exp + leeway.
        InvalidClaimError: If exp is not numeric.
    """
    exp = _numeric_claim(payload, "exp")
    if exp is not None and now > exp + leeway:
        raise ExpiredSignature("Signature has expired")


def validate_nbf(payload: Mapping[str, Any], now: float, leeway: float = 0) -> None:
    """
    Check the not-before claim.

    Raises:
        ImmatureSignature: If now + leeway is before nbf.
        InvalidClaimError: If nbf is not numeric.
    """
    nbf = _numeric_claim(payload, "nbf")
    if nbf is not None and now + leeway < nbf:
        raise ImmatureSignature("The token is not yet valid (nbf)")


# Checks in the order they run, each gated by its option flag
_VALIDATORS: tuple[tuple[str, Callable[[Mapping[str, Any], float, float], None]], ...] = (
    ("verify_expiration", validate_exp),
    ("verify_not_before", validate_nbf),
)


def validate_claims(
    payload: Mapping[str, Any],
    options: ValidationOptions,
    now: float | None = None,
) -> None:
    """Run the enabled claim checks, stopping at the first failure."""
    if now is None:
        now = time.time()

    for flag, validator in _VALIDATORS:
        if getattr(options, flag):
            validator(payload, now, options.leeway)
