"""
Cookie jar with encrypted values and anonymized cookie names.

This package exposes:
- `CookieJarPolicy`: get/set/delete cookies, with `get_safe`/`set_safe` for encrypted values.
- `AnonymizeMode`: how cookie names are hidden (disabled, hashed or encrypted).
- `MemoryCookieStore` and `StreamlitCookieStore`: stores the jar can run on.
"""

from .codec import CipherResult, ValueCodec
from .cookie_manager import StreamlitCookieStore, streamlit_cookie_jar
from .crypto import Cipher, FernetCipher
from .exceptions import CookieCipherWarning, CookiesNotReady, CryptoError
from .jar import CookieJarPolicy
from .naming import AnonymizeMode, NamingResolver
from .stores import CookieAttributes, CookieStore, MemoryCookieStore

__all__ = [
    "AnonymizeMode",
    "Cipher",
    "CipherResult",
    "CookieAttributes",
    "CookieCipherWarning",
    "CookieJarPolicy",
    "CookieStore",
    "CookiesNotReady",
    "CryptoError",
    "FernetCipher",
    "MemoryCookieStore",
    "NamingResolver",
    "StreamlitCookieStore",
    "ValueCodec",
    "streamlit_cookie_jar",
]
