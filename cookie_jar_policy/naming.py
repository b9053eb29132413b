"""
Mapping of logical cookie names to the physical keys used in the store.

Three modes are supported:

- ``DISABLED``: the key is the name itself.
- ``HASH``: the key is ``prefix + sha1(name + salt)``. Deterministic, so reads and
  writes derive the same key. SHA-1 is kept so already issued cookies stay readable.
- ``ENCRYPT``: the key is ``prefix + encrypt(name)``. Every write mints a new key and
  removes the keys previously issued for the same name. Reads cannot derive the key
  and instead decrypt every stored key carrying the prefix until one matches, which
  costs one password-based decryption per cookie in the store.

Resolution never raises: when no key can be produced the resolver returns
`NO_KEY` and the caller aborts the operation.
"""

import hashlib
from collections.abc import Iterator
from enum import Enum

from .codec import ValueCodec
from .stores import CookieAttributes, CookieStore

NO_KEY = ""


class AnonymizeMode(Enum):
    """Strategy used to hide cookie names."""

    DISABLED = "disabled"
    HASH = "hash"
    ENCRYPT = "encrypt"


class NamingResolver:
    """Resolve logical names to physical keys for one jar configuration."""

    def __init__(
        self,
        codec: ValueCodec,
        *,
        mode: AnonymizeMode = AnonymizeMode.DISABLED,
        salt: str = "",
        prefix: str = "",
    ) -> None:
        self.codec = codec
        self.mode = mode
        self.salt = salt
        self.prefix = prefix

    def __repr__(self) -> str:
        return f"<NamingResolver mode={self.mode.value} prefix={self.prefix!r}>"

    def hash_name(self, name: str) -> str:
        return self.prefix + hashlib.sha1((name + self.salt).encode("utf-8", "surrogatepass")).hexdigest()  # noqa: S324

    def resolve_read(self, name: str, store: CookieStore, password: str) -> str:
        """
        Return the key under which ``name`` is currently stored.

        In ``DISABLED`` and ``HASH`` modes the key is derived and returned whether or
        not the store holds it.

        Returns:
            str: The physical key, or `NO_KEY`.

        """
        if self.mode is AnonymizeMode.DISABLED:
            return name
        if self.mode is AnonymizeMode.HASH:
            return self.hash_name(name)
        if self.mode is AnonymizeMode.ENCRYPT:
            for key in self._search(name, store, password):
                return key
        return NO_KEY

    def resolve_write(self, name: str, store: CookieStore, password: str, attributes: CookieAttributes) -> str:
        """
        Return the key under which ``name`` must be written.

        In ``ENCRYPT`` mode a fresh key is minted and the keys previously issued for
        ``name`` are removed from ``store``.

        Returns:
            str: The physical key, or `NO_KEY` if none could be produced.

        """
        if self.mode is AnonymizeMode.DISABLED:
            return name
        if self.mode is AnonymizeMode.HASH:
            return self.hash_name(name)
        if self.mode is AnonymizeMode.ENCRYPT:
            encrypted = self.codec.encrypt(name, password)
            if not encrypted:
                return NO_KEY
            self.purge(name, store, password, attributes)
            return self.prefix + encrypted
        return NO_KEY

    def find_keys(self, name: str, store: CookieStore, password: str) -> list[str]:
        """
        Return every key present in ``store`` that belongs to ``name``.

        Returns:
            list[str]: Physical keys. At most one outside of ``ENCRYPT`` mode.

        """
        if self.mode is AnonymizeMode.ENCRYPT:
            return list(self._search(name, store, password))
        key = self.resolve_read(name, store, password)
        if key and store.get_raw(key) is not None:
            return [key]
        return []

    def purge(self, name: str, store: CookieStore, password: str, attributes: CookieAttributes) -> bool:
        """
        Remove every key present in ``store`` that belongs to ``name``.

        Returns:
            bool: True if at least one key was found and all removals succeeded.

        """
        keys = self.find_keys(name, store, password)
        removed = [store.remove_raw(key, attributes) for key in keys]
        return bool(removed) and all(removed)

    def _search(self, name: str, store: CookieStore, password: str) -> Iterator[str]:
        # Snapshot the keys: removals by the caller must not disturb the iteration.
        for key in list(store.list_keys()):
            if not key.startswith(self.prefix):
                continue
            result = self.codec.try_decrypt(key[len(self.prefix) :], password)
            if result.ok and result.value == name:
                yield key
