"""
Cookie jar with optional value encryption and name anonymization.

`CookieJarPolicy` composes a `NamingResolver`, a `ValueCodec` and a `CookieStore`.
None of its operations raise at runtime: a disabled jar, an empty name, an
unresolvable key or a cipher failure all yield ``""`` or ``False``.
"""

import os
import warnings
from collections.abc import Mapping
from dataclasses import replace

from .codec import ValueCodec
from .crypto import Cipher
from .exceptions import CookieCipherWarning
from .naming import AnonymizeMode, NamingResolver
from .stores import CookieAttributes, CookieStore

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = f"Invalid boolean for {name}: {raw!r}."
    raise ValueError(msg)


def _check_type(name: str, value: object, expected: type) -> None:
    if not isinstance(value, expected):
        msg = f"{name} must be {expected.__name__}, got {type(value).__name__}."
        raise TypeError(msg)


class CookieJarPolicy:
    """
    Read, write and delete cookies, optionally encrypted and under hidden names.

    Plain values go through `get`/`set`, encrypted values through
    `get_safe`/`set_safe`. A value that fails to decrypt is removed from the store
    so a tampered cookie does not linger.
    """

    def __init__(
        self,
        store: CookieStore,
        *,
        crypt_key: str = "",
        cipher: Cipher | None = None,
        path: str = "",
        domain: str = "",
        secure: bool = False,
        http_only: bool = False,
        enabled: bool = True,
    ) -> None:
        """
        Initialize the jar.

        Args:
            store: The cookie store of the current request.
            crypt_key: Password used to encrypt values and, in ENCRYPT mode, names.
            cipher: Cipher service. Defaults to `FernetCipher`.
            path: Cookie path attribute.
            domain: Cookie domain attribute.
            secure: Whether cookies are only sent over HTTPS.
            http_only: Whether cookies are hidden from JavaScript.
            enabled: Master switch. A disabled jar never touches the store.

        """
        self._store = store
        self._codec = ValueCodec(cipher)
        self._resolver = NamingResolver(self._codec)
        self._attributes = CookieAttributes()
        self._crypt_key = ""
        self._enabled = True

        self.set_crypt_key(crypt_key)
        self.set_path(path).set_domain(domain).set_secure(secure).set_http_only(http_only)
        self.set_state(enabled)

    @classmethod
    def from_env(
        cls,
        store: CookieStore,
        environ: Mapping[str, str] | None = None,
        *,
        prefix: str = "COOKIE_",
        cipher: Cipher | None = None,
    ) -> "CookieJarPolicy":
        """
        Build a jar configured from environment variables.

        Reads ``ENABLED``, ``CRYPT_KEY``, ``ANONYMIZE`` (``disabled``, ``hash`` or
        ``encrypt``), ``SALT``, ``PREFIX``, ``PATH``, ``DOMAIN``, ``SECURE`` and
        ``HTTP_ONLY``, each with ``prefix`` in front. Missing variables keep the defaults.

        Returns:
            CookieJarPolicy: The configured jar.

        Raises:
            ValueError: If a boolean or the anonymize mode cannot be parsed.

        """
        env = os.environ if environ is None else environ

        def read(key: str, default: str = "") -> str:
            return env.get(prefix + key, default)

        jar = cls(
            store,
            crypt_key=read("CRYPT_KEY"),
            cipher=cipher,
            path=read("PATH"),
            domain=read("DOMAIN"),
            secure=_parse_bool(prefix + "SECURE", read("SECURE")),
            http_only=_parse_bool(prefix + "HTTP_ONLY", read("HTTP_ONLY")),
            enabled=_parse_bool(prefix + "ENABLED", read("ENABLED", "1")),
        )
        mode = read("ANONYMIZE").strip().lower() or AnonymizeMode.DISABLED.value
        return jar.anonymize(mode, read("SALT"), read("PREFIX"))

    def __repr__(self) -> str:
        state = "enabled" if self._enabled else "disabled"
        return f"<CookieJarPolicy {state} anonymize={self.anonymize_mode.value} store={self._store!r}>"

    # --- Configuration ---

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def anonymize_mode(self) -> AnonymizeMode:
        return self._resolver.mode

    @property
    def salt(self) -> str:
        return self._resolver.salt

    @property
    def prefix(self) -> str:
        return self._resolver.prefix

    @property
    def attributes(self) -> CookieAttributes:
        return self._attributes

    @property
    def store(self) -> CookieStore:
        return self._store

    def set_state(self, state: bool) -> "CookieJarPolicy":
        _check_type("state", state, bool)
        self._enabled = state
        return self

    def enable(self) -> "CookieJarPolicy":
        return self.set_state(True)

    def disable(self) -> "CookieJarPolicy":
        return self.set_state(False)

    def anonymize(
        self,
        mode: AnonymizeMode | str | bool,
        salt: str | None = None,
        prefix: str | None = None,
    ) -> "CookieJarPolicy":
        """
        Choose how cookie names are hidden.

        Args:
            mode: An `AnonymizeMode`, its value, or a bool (True selects HASH).
            salt: Salt mixed into hashed names. Unchanged if None.
            prefix: Clear-text prefix put in front of anonymized names. Unchanged if None.

        Returns:
            CookieJarPolicy: The jar itself.

        Raises:
            TypeError: If an argument has the wrong type.
            ValueError: If ``mode`` is not a known mode.

        """
        if isinstance(mode, bool):
            mode = AnonymizeMode.HASH if mode else AnonymizeMode.DISABLED
        elif isinstance(mode, str):
            try:
                mode = AnonymizeMode(mode)
            except ValueError as err:
                msg = f"Unknown anonymize mode {mode!r}."
                raise ValueError(msg) from err
        _check_type("mode", mode, AnonymizeMode)
        if salt is not None:
            _check_type("salt", salt, str)
        if prefix is not None:
            _check_type("prefix", prefix, str)

        self._resolver.mode = mode
        if salt is not None:
            self._resolver.salt = salt
        if prefix is not None:
            self._resolver.prefix = prefix
        return self

    def set_crypt_key(self, crypt_key: str) -> "CookieJarPolicy":
        _check_type("crypt_key", crypt_key, str)
        self._crypt_key = crypt_key
        return self

    def set_path(self, path: str) -> "CookieJarPolicy":
        _check_type("path", path, str)
        self._attributes = replace(self._attributes, path=path)
        return self

    def set_domain(self, domain: str) -> "CookieJarPolicy":
        _check_type("domain", domain, str)
        self._attributes = replace(self._attributes, domain=domain)
        return self

    def set_secure(self, secure: bool) -> "CookieJarPolicy":
        _check_type("secure", secure, bool)
        self._attributes = replace(self._attributes, secure=secure)
        return self

    def set_http_only(self, http_only: bool) -> "CookieJarPolicy":
        _check_type("http_only", http_only, bool)
        self._attributes = replace(self._attributes, http_only=http_only)
        return self

    # --- Operations ---

    def get(self, name: str) -> str:
        """
        Return the raw value of cookie ``name``.

        Returns:
            str: The value, or an empty string if absent or unavailable.

        """
        key = self._read_key(name)
        if not key:
            return ""
        value = self._store.get_raw(key)
        return value if value is not None else ""

    def set(self, name: str, value: str, expire: int = 0) -> bool:
        """
        Store ``value`` as cookie ``name``.

        Args:
            name: Logical cookie name.
            value: Raw value.
            expire: Expiry as a Unix timestamp, 0 for a session cookie.

        Returns:
            bool: Whether the store accepted the cookie.

        """
        key = self._write_key(name)
        if not key:
            return False
        return self._store.set_raw(key, value, expire, self._attributes)

    def get_safe(self, name: str) -> str:
        """
        Return the decrypted value of cookie ``name``.

        A cookie that fails to decrypt is removed from the store.

        Returns:
            str: The plaintext, or an empty string if absent or undecryptable.

        """
        key = self._read_key(name)
        if not key:
            return ""
        ciphertext = self._store.get_raw(key)
        if ciphertext is None:
            return ""

        result = self._codec.try_decrypt(ciphertext, self._crypt_key)
        if not result.ok:
            warnings.warn(
                f"Cookie '{name}' could not be decrypted and was removed: {result.error}",
                CookieCipherWarning,
                stacklevel=2,
            )
            self._store.remove_raw(key, self._attributes)
            return ""
        return result.value

    def set_safe(self, name: str, value: str, expire: int = 0) -> bool:
        """
        Encrypt ``value`` and store it as cookie ``name``.

        If encryption fails nothing is written, the previous value of the cookie is
        removed and False is returned.

        Returns:
            bool: Whether the store accepted the cookie.

        """
        if not self._enabled or not name:
            return False

        result = self._codec.try_encrypt(value, self._crypt_key)
        if not result.ok:
            warnings.warn(
                f"Cookie '{name}' could not be encrypted and was not written: {result.error}",
                CookieCipherWarning,
                stacklevel=2,
            )
            self._resolver.purge(name, self._store, self._crypt_key, self._attributes)
            return False

        key = self._write_key(name)
        if not key:
            return False
        return self._store.set_raw(key, result.value, expire, self._attributes)

    def delete(self, name: str) -> bool:
        """
        Expire cookie ``name`` immediately.

        Returns:
            bool: Whether a stored cookie was found and the store accepted every removal.

        """
        if not self._enabled or not name:
            return False
        return self._resolver.purge(name, self._store, self._crypt_key, self._attributes)

    def _read_key(self, name: str) -> str:
        if not self._enabled or not name:
            return ""
        return self._resolver.resolve_read(name, self._store, self._crypt_key)

    def _write_key(self, name: str) -> str:
        if not self._enabled or not name:
            return ""
        return self._resolver.resolve_write(name, self._store, self._crypt_key, self._attributes)
