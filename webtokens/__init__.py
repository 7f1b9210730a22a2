"""
webtokens - Compact signed JSON Web Tokens.

Encode and verify JWTs signed with HMAC (HS256/384/512), RSA
(RS256/384/512), or unsigned ("none", opt-in only). Key storage and
rotation are left to the caller.
"""

from webtokens.algorithms import (
    Algorithm,
    get_supported_algorithms,
)
from webtokens.api import (
    encode,
    decode,
    decode_complete,
    get_unverified_header,
    DecodedToken,
)
from webtokens.config import (
    Settings,
    ValidationOptions,
    get_settings,
    configure_logging,
)
from webtokens.exceptions import (
    TokenError,
    DecodeError,
    IncorrectAlgorithm,
    InvalidSignatureError,
    InvalidClaimError,
    ExpiredSignature,
    ImmatureSignature,
    InvalidKeyError,
    UnsupportedAlgorithm,
)

__version__ = "0.1.0"

__all__ = [
    # Tokens
    "encode",
    "decode",
    "decode_complete",
    "get_unverified_header",
    "DecodedToken",
    # Algorithms
    "Algorithm",
    "get_supported_algorithms",
    # Configuration
    "Settings",
    "ValidationOptions",
    "get_settings",
    "configure_logging",
    # Errors
    "TokenError",
    "DecodeError",
    "IncorrectAlgorithm",
    "InvalidSignatureError",
    "InvalidClaimError",
    "ExpiredSignature",
    "ImmatureSignature",
    "InvalidKeyError",
    "UnsupportedAlgorithm",
]
