"""
Streamlit-backed cookie store.

Provides `StreamlitCookieStore`, which reads browser cookies through a Streamlit
component and queues changes in session state until `save()` sends them back.
"""

from collections.abc import Callable, Mapping, MutableMapping
from datetime import UTC, datetime
from functools import cache
from pathlib import Path
from typing import Any, cast
from urllib.parse import unquote

import streamlit as st
from streamlit.components.v1 import declare_component

from .crypto import Cipher
from .exceptions import CookiesNotReady
from .jar import CookieJarPolicy
from .stores import CookieAttributes

build_path = Path(__file__).parent / "build"


@cache
def _get_component() -> Callable[..., Any]:
    """
    Declare the cookie sync component on first use.

    Returns:
        Callable[..., Any]: The component function.

    Raises:
        RuntimeError: If the frontend build directory is missing.

    """
    try:
        return declare_component("CookieJarPolicy.sync_cookies", path=str(build_path))
    except FileNotFoundError as err:
        message = (
            "Could not find the component's 'build' directory at "
            f"'{build_path}'. Make sure to run 'npm run build' in your frontend "
            "directory and ensure that the 'build' folder is included in your package data."
        )
        raise RuntimeError(message) from err


def parse_cookies(raw_cookie: str) -> Mapping[str, str]:
    """
    Parse a raw cookie header into a dictionary.

    Returns a mapping from cookie names to values. Malformed parts are ignored.

    Returns:
        Mapping[str, str]: The parsed cookie dictionary.

    """
    cookies: dict[str, str] = {}
    if not raw_cookie:
        return cookies

    for part_raw in raw_cookie.split(";"):
        part = part_raw.strip()
        if not part:
            continue
        try:
            name, value = part.split("=", 1)
        except ValueError:
            # e.g. "name" without a value
            continue
        if name:
            cookies[unquote(name)] = unquote(value)
    return cookies


class StreamlitCookieStore:
    """
    Cookie store backed by the browser through a Streamlit component.

    Writes and removals are queued and visible to reads immediately, but only reach
    the browser once `save()` is called.
    """

    _QUEUE_KEY_PREFIX = "CookieJarPolicy.queue."
    _SYNC_KEY_PREFIX = "CookieJarPolicy.sync_cookies."
    _SAVE_KEY_PREFIX = "CookieJarPolicy.sync_cookies.save."

    def __init__(self, *, key: str = "", session_state: MutableMapping[str, Any] | None = None) -> None:
        """
        Initialize the store and sync cookies from the browser.

        Args:
            key: Distinguishes several stores on the same page.
            session_state: Where pending changes are kept between reruns.
                Defaults to ``st.session_state``.

        """
        state = session_state if session_state is not None else st.session_state
        self._key = key
        self._queue: dict[str, dict[str, Any]] = state.setdefault(self._QUEUE_KEY_PREFIX + key, {})

        raw_cookie = self._run_component(save_only=False, key=self._SYNC_KEY_PREFIX + key)
        if raw_cookie is None:
            # The component has not returned data yet.
            self._cookies: Mapping[str, str] | None = None
        else:
            self._cookies = parse_cookies(raw_cookie)
            self._clean_queue()

    def __repr__(self) -> str:
        if self.ready():
            return f"<StreamlitCookieStore: {self._get_cookies()!r}>"
        return "<StreamlitCookieStore: not ready>"

    def ready(self) -> bool:
        """
        Return whether the component has synced cookies from the browser.

        Returns:
            bool: True if cookies from the browser are available.

        """
        return self._cookies is not None

    def save(self) -> None:
        """Send queued cookie changes to the browser."""
        if self._queue:
            self._run_component(save_only=True, key=self._SAVE_KEY_PREFIX + self._key)

    def get_raw(self, key: str) -> str | None:
        return self._get_cookies().get(key)

    def set_raw(self, key: str, value: str, expire: int, attributes: CookieAttributes) -> bool:
        # Skip unchanged values to avoid needless component reruns.
        if self._get_cookies().get(key) != value:
            self._queue[key] = {
                "value": value,
                "expires_at": datetime.fromtimestamp(expire, tz=UTC).isoformat() if expire else None,
                **self._attribute_spec(attributes),
            }
        return True

    def remove_raw(self, key: str, attributes: CookieAttributes) -> bool:
        if key in self._get_cookies():
            self._queue[key] = {"value": None, **self._attribute_spec(attributes)}
        return True

    def list_keys(self) -> list[str]:
        return list(self._get_cookies())

    @staticmethod
    def _attribute_spec(attributes: CookieAttributes) -> dict[str, Any]:
        return {
            "path": attributes.path or "/",
            "domain": attributes.domain or None,
            "secure": attributes.secure,
            "httpOnly": attributes.http_only,
        }

    def _run_component(self, *, save_only: bool, key: str) -> str | None:
        return cast("str | None", _get_component()(queue=self._queue, saveOnly=save_only, key=key))

    def _clean_queue(self) -> None:
        """Remove queued changes the browser has already applied."""
        if self._cookies is None:
            return

        for name in list(self._queue):
            spec = self._queue[name]
            if spec["value"] is None:
                if name not in self._cookies:
                    del self._queue[name]
            elif self._cookies.get(name) == spec["value"]:
                del self._queue[name]

    def _get_cookies(self) -> Mapping[str, str]:
        """
        Return the browser cookies with queued changes applied.

        Returns:
            Mapping[str, str]: Cookies as the next request will see them.

        Raises:
            CookiesNotReady: If the component hasn't synced with the browser yet.

        """
        if self._cookies is None:
            msg = (
                "StreamlitCookieStore is not ready. The component has not synced with the browser yet. "
                "You need to wait for a rerun after initialization or check `ready()` first."
            )
            raise CookiesNotReady(msg)

        cookies = dict(self._cookies)
        for name, spec in self._queue.items():
            if spec["value"] is not None:
                cookies[name] = spec["value"]
            else:
                cookies.pop(name, None)
        return cookies


def streamlit_cookie_jar(
    *,
    crypt_key: str,
    key: str = "",
    cipher: Cipher | None = None,
    **options: Any,
) -> CookieJarPolicy:
    """
    Build a jar over the browser cookies of the running Streamlit session.

    Stops the script run until the browser has sent its cookies; Streamlit reruns
    the script once the component returns.

    Args:
        crypt_key: Password used by the jar.
        key: Distinguishes several jars on the same page.
        cipher: Cipher service. Defaults to `FernetCipher`.
        **options: Further keyword arguments for `CookieJarPolicy`.

    Returns:
        CookieJarPolicy: A jar over a ready `StreamlitCookieStore`.

    """
    store = StreamlitCookieStore(key=key)
    if not store.ready():
        st.stop()
    return CookieJarPolicy(store, crypt_key=crypt_key, cipher=cipher, **options)
