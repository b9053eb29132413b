"""Exceptions and warnings raised by the cookie jar and its collaborators."""


class CryptoError(Exception):
    """Raise when a cipher cannot encrypt or decrypt a value."""


class CookiesNotReady(Exception):
    """Raise when the cookie store has not yet synced cookies from the browser."""


class CookieCipherWarning(UserWarning):
    """Warn when a cookie value could not be encrypted or decrypted."""
