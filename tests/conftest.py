"""Pytest fixtures for webtokens tests."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from webtokens.config import get_settings

# Test key (30 bytes, above the 16 byte recommendation)
TEST_KEY = b"super-secret-key-for-testing!!"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def hmac_key():
    """Shared secret for HS* tests."""
    return TEST_KEY


@pytest.fixture(scope="session")
def rsa_private_key():
    """2048-bit RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key(rsa_private_key):
    """Public half of rsa_private_key."""
    return rsa_private_key.public_key()


@pytest.fixture(scope="session")
def other_rsa_private_key():
    """A second, unrelated RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_private_pem(rsa_private_key):
    """rsa_private_key as unencrypted PKCS8 PEM."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def rsa_public_pem(rsa_public_key):
    """rsa_public_key as SubjectPublicKeyInfo PEM."""
    return rsa_public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
