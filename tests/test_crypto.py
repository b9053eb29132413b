"""Tests for the password-based Fernet cipher."""

import re

import pytest

from cookie_jar_policy import CryptoError, FernetCipher

PASSWORD = "correct horse battery staple"


def test_round_trip(cipher):
    ciphertext = cipher.encrypt_with_password("hello, wörld", PASSWORD)
    assert cipher.decrypt_with_password(ciphertext, PASSWORD) == "hello, wörld"


def test_empty_plaintext_round_trip(cipher):
    ciphertext = cipher.encrypt_with_password("", PASSWORD)
    assert ciphertext
    assert cipher.decrypt_with_password(ciphertext, PASSWORD) == ""


def test_encryption_is_not_deterministic(cipher):
    assert cipher.encrypt_with_password("session", PASSWORD) != cipher.encrypt_with_password("session", PASSWORD)


def test_ciphertext_is_a_valid_cookie_name(cipher):
    for plaintext in ["a", "session", "x" * 100]:
        ciphertext = cipher.encrypt_with_password(plaintext, PASSWORD)
        assert re.fullmatch(r"[A-Za-z0-9_-]+", ciphertext)


def test_wrong_password_fails(cipher):
    ciphertext = cipher.encrypt_with_password("secret", PASSWORD)
    with pytest.raises(CryptoError):
        cipher.decrypt_with_password(ciphertext, "another password")


def test_tampered_ciphertext_fails(cipher):
    ciphertext = cipher.encrypt_with_password("secret", PASSWORD)
    i = len(ciphertext) // 2
    flipped = "A" if ciphertext[i] != "A" else "B"
    with pytest.raises(CryptoError):
        cipher.decrypt_with_password(ciphertext[:i] + flipped + ciphertext[i + 1 :], PASSWORD)


@pytest.mark.parametrize("ciphertext", ["", "abc", "PHPSESSID", "not base64 at all!"])
def test_malformed_ciphertext_fails(cipher, ciphertext):
    with pytest.raises(CryptoError):
        cipher.decrypt_with_password(ciphertext, PASSWORD)


def test_non_string_input_fails(cipher):
    with pytest.raises(CryptoError):
        cipher.encrypt_with_password(b"bytes", PASSWORD)
    with pytest.raises(CryptoError):
        cipher.decrypt_with_password("abc", None)


def test_ciphers_with_different_iterations_do_not_interoperate():
    ciphertext = FernetCipher(iterations=1_000).encrypt_with_password("secret", PASSWORD)
    with pytest.raises(CryptoError):
        FernetCipher(iterations=1_001).decrypt_with_password(ciphertext, PASSWORD)


@pytest.mark.parametrize("iterations", [0, -1, 1.5])
def test_invalid_iterations(iterations):
    with pytest.raises(ValueError):
        FernetCipher(iterations=iterations)
