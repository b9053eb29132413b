"""
Value codec for the "safe" cookie operations.

Wraps a `Cipher` so that encryption failures become values instead of exceptions.
`try_encrypt`/`try_decrypt` return a `CipherResult`; `encrypt`/`decrypt` apply the
empty-sentinel policy on top of it.
"""

from dataclasses import dataclass

from .crypto import Cipher, FernetCipher
from .exceptions import CryptoError

#: Returned by `ValueCodec.encrypt` and `ValueCodec.decrypt` when the cipher fails.
FAILURE_SENTINEL = ""


@dataclass(frozen=True)
class CipherResult:
    """Outcome of a single cipher call."""

    value: str = FAILURE_SENTINEL
    error: CryptoError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ValueCodec:
    """
    Encrypt and decrypt cookie values without ever raising.

    Whatever the injected cipher raises is reported as a `CryptoError` in the result.
    """

    def __init__(self, cipher: Cipher | None = None) -> None:
        """
        Initialize the codec.

        Args:
            cipher: The cipher service to delegate to. Defaults to `FernetCipher`.

        """
        self._cipher: Cipher = cipher if cipher is not None else FernetCipher()

    @property
    def cipher(self) -> Cipher:
        return self._cipher

    def try_encrypt(self, plaintext: str, key: str) -> CipherResult:
        """
        Encrypt ``plaintext`` with ``key``.

        Returns:
            CipherResult: The ciphertext, or the error raised by the cipher.

        """
        try:
            return CipherResult(self._cipher.encrypt_with_password(plaintext, key))
        except CryptoError as err:
            return CipherResult(error=err)
        except Exception as err:  # noqa: BLE001
            return CipherResult(error=_wrap(err))

    def try_decrypt(self, ciphertext: str, key: str) -> CipherResult:
        """
        Decrypt ``ciphertext`` with ``key``.

        The failure sentinel itself never decrypts, whatever the cipher.

        Returns:
            CipherResult: The plaintext, or the error raised by the cipher.

        """
        if ciphertext == FAILURE_SENTINEL:
            return CipherResult(error=CryptoError("Cannot decrypt an empty ciphertext."))
        try:
            return CipherResult(self._cipher.decrypt_with_password(ciphertext, key))
        except CryptoError as err:
            return CipherResult(error=err)
        except Exception as err:  # noqa: BLE001
            return CipherResult(error=_wrap(err))

    def encrypt(self, plaintext: str, key: str) -> str:
        """Return the ciphertext of ``plaintext``, or `FAILURE_SENTINEL`."""
        return self.try_encrypt(plaintext, key).value

    def decrypt(self, ciphertext: str, key: str) -> str:
        """Return the plaintext of ``ciphertext``, or `FAILURE_SENTINEL`."""
        return self.try_decrypt(ciphertext, key).value


def _wrap(err: Exception) -> CryptoError:
    wrapped = CryptoError(str(err))
    wrapped.__cause__ = err
    return wrapped
