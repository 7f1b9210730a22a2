"""Token signing algorithms.

Provides signing and verification for the JWS algorithms webtokens supports:
- HS256 / HS384 / HS512: HMAC with SHA-2 (shared secret)
- RS256 / RS384 / RS512: RSASSA-PKCS1-v1_5 with SHA-2 (key pair)
- none: unsigned tokens, only accepted when explicitly allowed

Every implementation follows the same contract:
    prepare_key(key) -> key usable by sign/verify
    sign(signing_input, key) -> signature bytes
    verify(signing_input, signature, key) -> bool

Security Notes:
- HMAC verification uses constant-time comparison
- PEM/SSH public key material is refused as an HMAC secret, so a public
  RSA key cannot be used to forge HS* tokens
- RSA keys under 2048 bits are accepted but logged as weak
"""

import hashlib
import hmac
import logging
from enum import Enum
from typing import Any, Iterable, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from webtokens.config import get_settings
from webtokens.exceptions import InvalidKeyError, UnsupportedAlgorithm

logger = logging.getLogger(__name__)

RSAKey = Union[rsa.RSAPrivateKey, rsa.RSAPublicKey]

# Markers of asymmetric key material that must never be an HMAC secret
_ASYMMETRIC_KEY_PREFIXES = (
    b"-----BEGIN ",
    b"ssh-rsa ",
    b"ssh-ed25519 ",
    b"ecdsa-sha2-",
)


class Algorithm(str, Enum):
    """Supported token algorithms."""
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    NONE = "none"


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _is_pem(key: Any) -> bool:
    return isinstance(key, (str, bytes, bytearray)) and _to_bytes(key).lstrip().startswith(
        _ASYMMETRIC_KEY_PREFIXES
    )


class HMACAlgorithm:
    """HMAC-SHA2 signing with a shared secret."""

    def __init__(self, name: Algorithm, hash_func):
        self.name = name
        self.hash_func = hash_func

    def prepare_key(self, key: Any) -> bytes:
        if not isinstance(key, (str, bytes, bytearray)):
            raise InvalidKeyError(
                f"{self.name.value} requires a str or bytes secret, got {type(key).__name__}"
            )

        key = _to_bytes(key)
        if _is_pem(key):
            raise InvalidKeyError(
                "The specified key is asymmetric key material and must not be used as an HMAC secret"
            )

        min_length = get_settings().min_hmac_key_length
        if len(key) < min_length:
            logger.warning(
                f"{self.name.value} secret is {len(key)} bytes; at least {min_length} bytes is recommended"
            )
        return key

    def sign(self, signing_input: bytes, key: Any) -> bytes:
        return hmac.new(self.prepare_key(key), signing_input, self.hash_func).digest()

    def verify(self, signing_input: bytes, signature: bytes, key: Any) -> bool:
        expected = self.sign(signing_input, key)
        return hmac.compare_digest(expected, signature)


class RSAAlgorithm:
    """
    RSASSA-PKCS1-v1_5 signing.

    Signing needs a private key. Verification accepts a public key, or a
    private key whose public half is used. Either may be given as a
    cryptography key object or as PEM text.
    """

    def __init__(self, name: Algorithm, hash_alg: type[hashes.HashAlgorithm]):
        self.name = name
        self.hash_alg = hash_alg

    def prepare_key(self, key: Any) -> RSAKey:
        if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            loaded = key
        elif isinstance(key, (str, bytes, bytearray)):
            loaded = self._load_pem(_to_bytes(key).strip())
        else:
            raise InvalidKeyError(
                f"{self.name.value} requires an RSA key or PEM data, got {type(key).__name__}"
            )

        min_size = get_settings().min_rsa_key_size
        if loaded.key_size < min_size:
            logger.warning(
                f"{self.name.value} key is {loaded.key_size} bits; at least {min_size} bits is recommended"
            )
        return loaded

    def _load_pem(self, data: bytes) -> RSAKey:
        try:
            if b"PRIVATE KEY" in data:
                loaded = serialization.load_pem_private_key(data, password=None)
            elif data.startswith(b"ssh-rsa "):
                loaded = serialization.load_ssh_public_key(data)
            else:
                loaded = serialization.load_pem_public_key(data)
        except (ValueError, TypeError) as e:
            raise InvalidKeyError(f"Could not load RSA key: {e}") from e

        if not isinstance(loaded, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            raise InvalidKeyError(f"{self.name.value} requires an RSA key")
        return loaded

    def sign(self, signing_input: bytes, key: Any) -> bytes:
        private_key = self.prepare_key(key)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise InvalidKeyError(f"{self.name.value} signing requires an RSA private key")
        return private_key.sign(signing_input, padding.PKCS1v15(), self.hash_alg())

    def verify(self, signing_input: bytes, signature: bytes, key: Any) -> bool:
        public_key = self.prepare_key(key)
        if isinstance(public_key, rsa.RSAPrivateKey):
            public_key = public_key.public_key()
        try:
            public_key.verify(signature, signing_input, padding.PKCS1v15(), self.hash_alg())
        except InvalidSignature:
            return False
        return True


class NoneAlgorithm:
    """Unsigned tokens. The key must be None and the signature empty."""

    name = Algorithm.NONE

    def prepare_key(self, key: Any) -> None:
        if key is not None:
            raise InvalidKeyError('Algorithm "none" does not take a key')
        return None

    def sign(self, signing_input: bytes, key: Any) -> bytes:
        self.prepare_key(key)
        return b""

    def verify(self, signing_input: bytes, signature: bytes, key: Any) -> bool:
        self.prepare_key(key)
        return signature == b""


ALGORITHMS = {
    Algorithm.HS256: HMACAlgorithm(Algorithm.HS256, hashlib.sha256),
    Algorithm.HS384: HMACAlgorithm(Algorithm.HS384, hashlib.sha384),
    Algorithm.HS512: HMACAlgorithm(Algorithm.HS512, hashlib.sha512),
    Algorithm.RS256: RSAAlgorithm(Algorithm.RS256, hashes.SHA256),
    Algorithm.RS384: RSAAlgorithm(Algorithm.RS384, hashes.SHA384),
    Algorithm.RS512: RSAAlgorithm(Algorithm.RS512, hashes.SHA512),
    Algorithm.NONE: NoneAlgorithm(),
}

HMAC_ALGORITHMS = frozenset({Algorithm.HS256, Algorithm.HS384, Algorithm.HS512})
RSA_ALGORITHMS = frozenset({Algorithm.RS256, Algorithm.RS384, Algorithm.RS512})


def resolve_algorithm(name: Any) -> Algorithm:
    """
    Map an algorithm name to its identifier.

    Raises:
        UnsupportedAlgorithm: If the name is not a supported algorithm.
    """
    if isinstance(name, Algorithm):
        return name
    try:
        return Algorithm(name)
    except ValueError:
        raise UnsupportedAlgorithm(f"Algorithm not supported: {name!r}") from None


def get_algorithm(name: Any):
    """Get the signing implementation for an algorithm name."""
    return ALGORITHMS[resolve_algorithm(name)]


def get_supported_algorithms() -> list[str]:
    """Names of all supported algorithms."""
    return [alg.value for alg in ALGORITHMS]


def algorithms_for_key(key: Any) -> frozenset[Algorithm]:
    """
    Algorithms a key can verify when the caller pins none explicitly.

    RSA keys and PEM data map to the RS family, other secrets to the HS
    family. "none" is never included; callers must ask for it by name.
    """
    if key is None:
        return frozenset()
    if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)) or _is_pem(key):
        return RSA_ALGORITHMS
    if isinstance(key, (str, bytes, bytearray)):
        return HMAC_ALGORITHMS
    return frozenset()


def resolve_algorithms(names: Iterable[Any]) -> frozenset[Algorithm]:
    """Resolve a caller-supplied list of algorithm names."""
    if isinstance(names, (str, Algorithm)):
        names = [names]
    return frozenset(resolve_algorithm(name) for name in names)
