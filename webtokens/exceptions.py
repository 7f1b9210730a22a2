"""
Exception classes for webtokens.
"""


class TokenError(Exception):
    """Base exception for token operations."""
    pass


class DecodeError(TokenError):
    """Token could not be decoded or failed verification."""
    pass


class IncorrectAlgorithm(DecodeError):
    """Token algorithm is not one of the algorithms the caller allows."""

    def __init__(self, message: str, algorithm: str | None = None):
        super().__init__(message)
        self.algorithm = algorithm


class InvalidSignatureError(DecodeError):
    """Token signature verification failed."""
    pass


class InvalidClaimError(DecodeError):
    """A reserved claim has a value of the wrong type."""

    def __init__(self, message: str, claim: str | None = None):
        super().__init__(message)
        self.claim = claim


class ExpiredSignature(TokenError):
    """Token has expired (exp claim)."""
    pass


class ImmatureSignature(TokenError):
    """Token is not yet valid (nbf claim)."""
    pass


class InvalidKeyError(TokenError):
    """Key cannot be used with the requested algorithm."""
    pass


class UnsupportedAlgorithm(TokenError, NotImplementedError):
    """Algorithm name is not recognized."""
    pass
