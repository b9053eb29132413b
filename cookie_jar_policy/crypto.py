"""
Password-based authenticated encryption for cookie values and names.

Provides `FernetCipher`, which derives a Fernet key from a password and a fresh
random salt for every message. The same plaintext therefore never encrypts to the
same ciphertext twice, and the output only uses characters valid in a cookie name.
"""

import base64
import binascii
import os
from functools import lru_cache
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import CryptoError


class Cipher(Protocol):
    """Keyed encrypt/decrypt service used by the value codec."""

    def encrypt_with_password(self, plaintext: str, password: str) -> str:
        """Encrypt ``plaintext``, raising `CryptoError` on failure."""
        ...

    def decrypt_with_password(self, ciphertext: str, password: str) -> str:
        """Decrypt ``ciphertext``, raising `CryptoError` on failure."""
        ...


# Not st.cache_data: the jar also runs outside a Streamlit script run, where
# there is no cache to use. Every message has its own salt, so the cache mostly
# pays off when the same cookie is decrypted again, e.g. during a reverse search.
@lru_cache(maxsize=256)
def derive_key_from_password(salt: bytes, iterations: int, password: str) -> bytes:
    """
    Derive a cryptographic key from a password using PBKDF2HMAC.

    Returns:
        bytes: URL-safe base64-encoded key suitable for Fernet.

    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,  # 256 bits, suitable for Fernet
        salt=salt,
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))


def _b64encode(data: bytes) -> str:
    # "=" is not allowed in cookie names
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class FernetCipher:
    """
    Encrypt and decrypt strings with a password using Fernet.

    The ciphertext is the unpadded URL-safe base64 encoding of ``salt || token``
    where ``token`` is the raw Fernet token.
    """

    _SALT_SIZE = 16

    # Same work factor as the password mode of common PHP crypto libraries.
    _PBKDF2_ITERATIONS = 100_000

    def __init__(self, *, iterations: int | None = None) -> None:
        """
        Initialize the cipher.

        Args:
            iterations: PBKDF2 iterations used to derive each message key. Lower values
                make the ENCRYPT naming mode cheaper at the cost of brute-force resistance.

        Raises:
            ValueError: If ``iterations`` is not a positive integer.

        """
        iterations = iterations if iterations is not None else self._PBKDF2_ITERATIONS
        if not isinstance(iterations, int) or iterations < 1:
            msg = f"iterations must be a positive integer, got {iterations!r}."
            raise ValueError(msg)
        self._iterations = iterations

    def __repr__(self) -> str:
        return f"<FernetCipher iterations={self._iterations}>"

    def encrypt_with_password(self, plaintext: str, password: str) -> str:
        """
        Encrypt a string with a password.

        Returns:
            str: Cookie-safe ciphertext.

        Raises:
            CryptoError: If the plaintext or password is not a string.

        """
        if not isinstance(plaintext, str) or not isinstance(password, str):
            msg = "Plaintext and password must be strings."
            raise CryptoError(msg)

        salt = os.urandom(self._SALT_SIZE)
        key = derive_key_from_password(salt, self._iterations, password)
        token = Fernet(key).encrypt(plaintext.encode("utf-8"))
        return _b64encode(salt + base64.urlsafe_b64decode(token))

    def decrypt_with_password(self, ciphertext: str, password: str) -> str:
        """
        Decrypt a ciphertext produced by `encrypt_with_password`.

        Returns:
            str: The original plaintext.

        Raises:
            CryptoError: If the ciphertext is malformed, was tampered with or the
                password is wrong.

        """
        if not isinstance(ciphertext, str) or not isinstance(password, str):
            msg = "Ciphertext and password must be strings."
            raise CryptoError(msg)

        try:
            raw = _b64decode(ciphertext)
        except (ValueError, binascii.Error) as err:
            msg = "Ciphertext is not valid base64."
            raise CryptoError(msg) from err

        if len(raw) <= self._SALT_SIZE:
            msg = "Ciphertext is too short."
            raise CryptoError(msg)

        salt, token = raw[: self._SALT_SIZE], base64.urlsafe_b64encode(raw[self._SALT_SIZE :])
        key = derive_key_from_password(salt, self._iterations, password)
        try:
            plaintext = Fernet(key).decrypt(token)
        except InvalidToken as err:
            msg = "Ciphertext is corrupted or the password is wrong."
            raise CryptoError(msg) from err

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as err:
            msg = "Decrypted value is not valid UTF-8."
            raise CryptoError(msg) from err
