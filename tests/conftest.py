"""Shared fixtures for the cookie jar tests."""

import pytest

from cookie_jar_policy import CookieJarPolicy, CryptoError, FernetCipher, MemoryCookieStore

TEST_CRYPT_KEY = "test-crypt-key-do-not-use-in-production"

# Keeps key derivation fast; the work factor is irrelevant to behaviour.
TEST_ITERATIONS = 1_000


class BrokenCipher:
    """Cipher that always fails."""

    def encrypt_with_password(self, plaintext: str, password: str) -> str:
        raise CryptoError("encryption unavailable")

    def decrypt_with_password(self, ciphertext: str, password: str) -> str:
        raise CryptoError("decryption unavailable")


@pytest.fixture
def cipher():
    return FernetCipher(iterations=TEST_ITERATIONS)


@pytest.fixture
def store():
    return MemoryCookieStore()


@pytest.fixture
def jar(store, cipher):
    return CookieJarPolicy(store, crypt_key=TEST_CRYPT_KEY, cipher=cipher, path="/")


class InvalidTokenCipher:
    """Cipher that leaks the underlying library's exception instead of `CryptoError`."""

    def encrypt_with_password(self, plaintext: str, password: str) -> str:
        raise RuntimeError("backend unavailable")

    def decrypt_with_password(self, ciphertext: str, password: str) -> str:
        from cryptography.fernet import InvalidToken

        raise InvalidToken
