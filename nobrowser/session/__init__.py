"""
Session module for nobrowser.

This module provides:
- Session: async navigation with redirects and cookies
- CookieJar/CookieData: per-session cookie storage
- CurlTransport: the default curl_cffi transport

Example usage:
    from nobrowser.session import Session

    async with Session(impersonate="chrome") as session:
        page = await session.navigate("https://example.com")
        print(page.status, page.title)
"""

from nobrowser.session.client import Session
from nobrowser.session.cookies import CookieData, CookieJar, parse_set_cookie
from nobrowser.session.transport import CurlTransport

__all__ = [
    "Session",
    "CookieData",
    "CookieJar",
    "parse_set_cookie",
    "CurlTransport",
]
