"""
Cookie storage for sessions.

Cookies are keyed by (domain, path, name) and selected for a request by
domain, path, secure flag and expiry, following RFC 6265. ``Set-Cookie``
headers are parsed here so the session can store them hop by hop.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def _now() -> float:
    return datetime.now(timezone.utc).timestamp()


@dataclass
class CookieData:
    """A stored cookie.

    ``domain`` is kept without a leading dot. An empty domain matches every
    host (cookies configured up front); ``host_only`` cookies match their
    exact host only.
    """

    name: str
    value: str
    domain: str = ""
    path: str = "/"
    expires: Optional[float] = None
    http_only: bool = False
    secure: bool = False
    same_site: str = "Lax"
    host_only: bool = False

    def is_expired(self) -> bool:
        """Check if cookie has expired."""
        if self.expires is None:
            return False
        return _now() >= self.expires

    def matches_domain(self, domain: str) -> bool:
        """Check if cookie matches the given host."""
        if not self.domain:
            return True
        cookie_domain = self.domain.lstrip(".").lower()
        target_domain = domain.lstrip(".").lower()
        if self.host_only:
            return target_domain == cookie_domain
        return (
            target_domain == cookie_domain
            or target_domain.endswith(f".{cookie_domain}")
        )

    def matches_path(self, path: str) -> bool:
        """Check if cookie matches the given request path."""
        if self.path == "/" or path == self.path:
            return True
        if not path.startswith(self.path):
            return False
        return self.path.endswith("/") or path[len(self.path)] == "/"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format."""
        result: dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "httpOnly": self.http_only,
            "secure": self.secure,
            "sameSite": self.same_site,
        }
        if self.expires is not None:
            result["expires"] = self.expires
        return result


def default_path(request_path: str) -> str:
    """Compute the default cookie path for a request path (RFC 6265 5.1.4)."""
    if not request_path.startswith("/") or request_path.count("/") == 1:
        return "/"
    return request_path[: request_path.rindex("/")]


def parse_set_cookie(header: str, url: str) -> Optional[CookieData]:
    """Parse one ``Set-Cookie`` header received from ``url``.

    Returns None when the header is malformed or names a domain the
    response host may not set cookies for. ``Max-Age`` takes precedence
    over ``Expires``; a non-positive ``Max-Age`` yields an already expired
    cookie (a deletion).
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()

    pair, *attributes = header.split(";")
    if "=" not in pair:
        return None
    name, value = (part.strip() for part in pair.split("=", 1))
    if not name:
        return None

    cookie = CookieData(
        name=name,
        value=value,
        domain=host,
        path=default_path(parsed.path or "/"),
        host_only=True,
    )
    max_age: Optional[int] = None

    for attribute in attributes:
        key, _, attr_value = attribute.partition("=")
        key = key.strip().lower()
        attr_value = attr_value.strip()

        if key == "expires":
            try:
                expires = parsedate_to_datetime(attr_value)
            except (TypeError, ValueError):
                continue
            if expires is not None:
                if expires.tzinfo is None:
                    expires = expires.replace(tzinfo=timezone.utc)
                cookie.expires = expires.timestamp()
        elif key == "max-age":
            try:
                max_age = int(attr_value)
            except ValueError:
                continue
        elif key == "domain":
            domain = attr_value.lstrip(".").lower()
            if not domain:
                continue
            if host != domain and not host.endswith(f".{domain}"):
                logger.debug("Rejecting cookie %s for foreign domain %s", name, domain)
                return None
            cookie.domain = domain
            cookie.host_only = False
        elif key == "path":
            if attr_value.startswith("/"):
                cookie.path = attr_value
        elif key == "secure":
            cookie.secure = True
        elif key == "httponly":
            cookie.http_only = True
        elif key == "samesite":
            cookie.same_site = attr_value.capitalize() or "Lax"

    if max_age is not None:
        cookie.expires = 0.0 if max_age <= 0 else _now() + max_age

    return cookie


@dataclass
class CookieJar:
    """Cookie storage for one Session.

    Cookies are keyed by domain, path and name; storing a cookie with an
    existing key replaces it, and storing an expired one removes it.
    """

    _cookies: dict[str, CookieData] = field(default_factory=dict)
    _domain_index: dict[str, set[str]] = field(default_factory=dict)

    def _make_key(self, name: str, domain: str, path: str) -> str:
        """Create unique key for cookie."""
        return f"{domain}|{path}|{name}"

    def set(self, cookie: CookieData) -> None:
        """Add, update or (when expired) remove a cookie.

        Args:
            cookie: Cookie to store.
        """
        if cookie.is_expired():
            self.delete(cookie.name, cookie.domain, cookie.path)
            return

        key = self._make_key(cookie.name, cookie.domain, cookie.path)
        self._cookies[key] = cookie

        domain = cookie.domain.lstrip(".")
        if domain not in self._domain_index:
            self._domain_index[domain] = set()
        self._domain_index[domain].add(key)

    def get(self, name: str, domain: str = "", path: str = "/") -> Optional[CookieData]:
        """Get a specific cookie.

        Args:
            name: Cookie name.
            domain: Cookie domain.
            path: Cookie path.

        Returns:
            Cookie if found, None otherwise.
        """
        key = self._make_key(name, domain, path)
        cookie = self._cookies.get(key)
        if cookie and cookie.is_expired():
            self.delete(name, domain, path)
            return None
        return cookie

    def delete(self, name: str, domain: str = "", path: str = "/") -> bool:
        """Delete a specific cookie.

        Returns:
            True if cookie was deleted, False if not found.
        """
        key = self._make_key(name, domain, path)
        if key in self._cookies:
            del self._cookies[key]
            domain_clean = domain.lstrip(".")
            if domain_clean in self._domain_index:
                self._domain_index[domain_clean].discard(key)
            return True
        return False

    def get_for_url(self, url: str) -> list[CookieData]:
        """Get all cookies that should be sent for a URL.

        Cookies with longer paths come first, as RFC 6265 recommends.

        Args:
            url: Target URL.

        Returns:
            List of applicable cookies.
        """
        parsed = urlparse(url)
        domain = parsed.hostname or ""
        path = parsed.path or "/"
        is_secure = parsed.scheme == "https"

        result = []
        self._cleanup_expired()

        for cookie in self._cookies.values():
            if not cookie.matches_domain(domain):
                continue
            if not cookie.matches_path(path):
                continue
            if cookie.secure and not is_secure:
                continue
            result.append(cookie)

        result.sort(key=lambda c: len(c.path), reverse=True)
        return result

    def header_for(self, url: str) -> Optional[str]:
        """Build the ``Cookie`` request header for a URL, if any apply."""
        cookies = self.get_for_url(url)
        if not cookies:
            return None
        return "; ".join(f"{c.name}={c.value}" for c in cookies)

    def update_from_headers(self, url: str, headers: Iterable[str]) -> int:
        """Store every ``Set-Cookie`` header of a response from ``url``.

        Returns:
            Number of headers that were applied.
        """
        applied = 0
        for header in headers:
            cookie = parse_set_cookie(header, url)
            if cookie is None:
                continue
            self.set(cookie)
            applied += 1
            logger.debug(
                "Cookie %s %s for %s%s",
                cookie.name,
                "expired" if cookie.is_expired() else "stored",
                cookie.domain,
                cookie.path,
            )
        return applied

    def get_for_domain(self, domain: str) -> list[CookieData]:
        """Get all cookies for a domain."""
        self._cleanup_expired()
        return [
            cookie for cookie in self._cookies.values()
            if cookie.matches_domain(domain)
        ]

    def get_all(self) -> list[CookieData]:
        """Get all non-expired cookies."""
        self._cleanup_expired()
        return list(self._cookies.values())

    def clear(self, domain: Optional[str] = None) -> None:
        """Clear cookies.

        Args:
            domain: If provided, only clear cookies for this domain.
        """
        if domain is None:
            self._cookies.clear()
            self._domain_index.clear()
        else:
            domain_clean = domain.lstrip(".")
            if domain_clean in self._domain_index:
                for key in list(self._domain_index[domain_clean]):
                    self._cookies.pop(key, None)
                del self._domain_index[domain_clean]

    def _cleanup_expired(self) -> None:
        """Remove expired cookies."""
        expired_keys = [
            key for key, cookie in self._cookies.items()
            if cookie.is_expired()
        ]
        for key in expired_keys:
            cookie = self._cookies.pop(key)
            domain = cookie.domain.lstrip(".")
            if domain in self._domain_index:
                self._domain_index[domain].discard(key)

    def update_from_list(self, cookies: list[CookieData]) -> None:
        """Add or update every cookie of a list."""
        for cookie in cookies:
            self.set(cookie)

    def to_dict(self) -> dict[str, str]:
        """Get a simple name -> value mapping of all cookies."""
        return {cookie.name: cookie.value for cookie in self.get_all()}

    def __len__(self) -> int:
        """Return number of cookies."""
        return len(self._cookies)

    def __contains__(self, name: str) -> bool:
        """Check if cookie name exists (any domain)."""
        return any(
            cookie.name == name for cookie in self._cookies.values()
        )
