"""
Cookie store interface and an in-memory implementation.

A store is the transport under the jar: it knows physical cookie keys and raw
values only. `MemoryCookieStore` mirrors the request cookies in a dictionary and
records every Set-Cookie instruction it would emit.
"""

import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class CookieAttributes:
    """Attributes sent along with every cookie written by the jar."""

    path: str = ""
    domain: str = ""
    secure: bool = False
    http_only: bool = False


class CookieStore(Protocol):
    """Key-value access to the cookies of the current request."""

    def get_raw(self, key: str) -> str | None:
        """Return the raw value stored under ``key``, or None if absent."""
        ...

    def set_raw(self, key: str, value: str, expire: int, attributes: CookieAttributes) -> bool:
        """Store ``value`` under ``key``. Return whether the cookie could be sent."""
        ...

    def remove_raw(self, key: str, attributes: CookieAttributes) -> bool:
        """Expire ``key`` immediately. Return whether the cookie could be sent."""
        ...

    def list_keys(self) -> list[str]:
        """Return the keys of all cookies currently visible."""
        ...


class MemoryCookieStore:
    """
    Store cookies in memory.

    ``cookies`` plays the role of the incoming request cookies and is updated on
    every write, so reads within the same request see the new values. ``headers``
    lists the Set-Cookie instructions in the order they were issued.
    """

    # Expired cookies are sent with a date one hour in the past.
    _EXPIRED_OFFSET = 3600

    def __init__(self, cookies: Mapping[str, str] | None = None, *, headers_sent: bool = False) -> None:
        """
        Initialize the store.

        Args:
            cookies: Cookies received with the request.
            headers_sent: If True, behave as if the response headers were already sent:
                every write fails and leaves the cookies untouched.

        """
        self.cookies: dict[str, str] = dict(cookies or {})
        self.headers: list[dict[str, Any]] = []
        self.headers_sent = headers_sent

    def __repr__(self) -> str:
        return f"<MemoryCookieStore: {self.cookies!r}>"

    def get_raw(self, key: str) -> str | None:
        return self.cookies.get(key)

    def set_raw(self, key: str, value: str, expire: int, attributes: CookieAttributes) -> bool:
        if not self._emit(key, value, expire, attributes):
            return False
        self.cookies[key] = value
        return True

    def remove_raw(self, key: str, attributes: CookieAttributes) -> bool:
        if not self._emit(key, "", int(time.time()) - self._EXPIRED_OFFSET, attributes):
            return False
        self.cookies.pop(key, None)
        return True

    def list_keys(self) -> list[str]:
        return list(self.cookies)

    def _emit(self, key: str, value: str, expire: int, attributes: CookieAttributes) -> bool:
        if self.headers_sent:
            return False
        self.headers.append({"name": key, "value": value, "expire": expire, **asdict(attributes)})
        return True
