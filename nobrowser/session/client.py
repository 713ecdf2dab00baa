"""
Navigation session.

A :class:`Session` fetches pages, follows redirects hop by hop, keeps the
cookie jar up to date between hops and hands back immutable
:class:`~nobrowser.dom.document.Document` objects. Forms extracted from those
documents are submitted through the same Session.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import urldefrag, urlencode, urljoin, urlsplit, urlunsplit

from nobrowser.config.options import SessionOptions
from nobrowser.dom.document import Document
from nobrowser.exceptions import RedirectLimitExceeded
from nobrowser.forms.encoder import Submitter, encode
from nobrowser.forms.form import Form
from nobrowser.interfaces import Transport
from nobrowser.models import RequestDescriptor, SessionState
from nobrowser.session.cookies import CookieData, CookieJar
from nobrowser.session.transport import CurlTransport

logger = logging.getLogger(__name__)

Referrer = Union[None, str, Document]

_BODY_HEADERS = ("content-type", "content-length")


def _referrer_url(referrer: Referrer) -> Optional[str]:
    if referrer is None:
        return None
    if isinstance(referrer, Document):
        return referrer.url
    return referrer


def _with_params(url: str, params: Mapping[str, Any]) -> str:
    scheme, netloc, path, query, fragment = urlsplit(url)
    extra = urlencode(list(params.items()), doseq=True)
    query = f"{query}&{extra}" if query else extra
    return urlunsplit((scheme, netloc, path, query, fragment))


class Session:
    """A browsing session without a browser.

    The session owns a cookie jar and a transport. It runs one request at a
    time: concurrent calls on the same Session wait for each other.
    With ``cookie_store=False`` the jar is neither updated nor sent.

    Example:
        async with Session() as session:
            page = await session.navigate("https://example.com/search")
            form = page.form_by_id("search")
            form.input("text", "q").set_value("rust")
            results = await session.submit(form, page)
            print(results.url, results.status)
    """

    def __init__(
        self,
        options: Optional[SessionOptions] = None,
        *,
        transport: Optional[Transport] = None,
        **overrides: Any,
    ) -> None:
        """Initialize Session.

        Args:
            options: Session options; defaults are used when omitted.
            transport: HTTP transport. A CurlTransport built from the options
                is used when omitted.
            **overrides: Individual SessionOptions fields overriding
                ``options`` (e.g. ``max_redirects=3``).
        """
        if options is None:
            options = SessionOptions(**overrides)
        elif overrides:
            options = SessionOptions(**{**options.model_dump(), **overrides})
        self._options = options

        if transport is None:
            transport = CurlTransport(
                impersonate=options.impersonate,
                proxy=options.proxy,
                timeout=options.timeout,
                verify=options.get_verify(),
            )
            self._owns_transport = True
        else:
            self._owns_transport = False
        self._transport = transport

        self._headers = options.request_headers()
        self._jar = CookieJar()
        for name, value in options.cookies.items():
            self._jar.set(CookieData(name=name, value=value))

        self._lock = asyncio.Lock()
        self._state = SessionState.IDLE
        self._closed = False

    @property
    def options(self) -> SessionOptions:
        """Get the session options."""
        return self._options

    @property
    def state(self) -> SessionState:
        """Get whether a request is in flight."""
        return self._state

    @property
    def headers(self) -> dict[str, str]:
        """Get the headers sent with every request."""
        return self._headers.copy()

    @property
    def cookies(self) -> CookieJar:
        """Get the session's cookie jar."""
        return self._jar

    def get_cookies(self) -> dict[str, str]:
        """Get current cookies as a name -> value mapping."""
        return self._jar.to_dict()

    def set_cookie(
        self,
        name: str,
        value: str,
        domain: str = "",
        path: str = "/",
        **kwargs: Any,
    ) -> None:
        """Store a cookie as if a server had set it.

        An empty domain sends the cookie to every host.
        """
        self._jar.set(CookieData(name=name, value=value, domain=domain, path=path, **kwargs))

    def clear_cookies(self, domain: Optional[str] = None) -> None:
        """Remove all cookies, or those stored for one domain."""
        self._jar.clear(domain)

    # Navigation

    async def navigate(
        self,
        url: str,
        referrer: Referrer = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Document:
        """Fetch a page with GET.

        Args:
            url: Absolute URL to fetch.
            referrer: URL (or Document) sent as ``Referer``.
            params: Query parameters appended to the URL.
            headers: Extra headers for this navigation.

        Returns:
            The final page. 4xx/5xx responses are returned like any other.

        Raises:
            TransportError: If the request could not be completed.
            RedirectLimitExceeded: If the redirect chain is too long.
        """
        if params:
            url = _with_params(url, params)
        descriptor = RequestDescriptor(method="GET", url=url, headers=headers or {})
        return await self.request(descriptor, referrer)

    async def submit(
        self,
        form: Form,
        referrer: Referrer = None,
        *,
        submitter: Submitter = None,
    ) -> Document:
        """Submit a form.

        Args:
            form: The form to submit.
            referrer: URL (or Document) sent as ``Referer``; usually the
                page the form came from.
            submitter: The button that was clicked, if any.

        Returns:
            The page the submission leads to.

        Raises:
            MissingFileContent: If a file field has no content attached.
            TransportError: If the request could not be completed.
            RedirectLimitExceeded: If the redirect chain is too long.
        """
        return await self.request(encode(form, submitter), referrer)

    async def submit_with(
        self,
        form: Form,
        button_name: str,
        referrer: Referrer = None,
        value: Optional[str] = None,
    ) -> Document:
        """Submit a form by clicking the submit button named ``button_name``.

        Raises:
            FieldNotFound: If the form has no such button.
            AmbiguousField: If several buttons share the name and ``value``
                does not pick one.
        """
        return await self.submit(form, referrer, submitter=form.submitter(button_name, value))

    async def request(
        self,
        descriptor: RequestDescriptor,
        referrer: Referrer = None,
    ) -> Document:
        """Issue a request, following redirects and storing cookies.

        Raises:
            TransportError: If a request of the chain could not be completed.
            RedirectLimitExceeded: If the redirect chain is too long.
        """
        if self._closed:
            raise RuntimeError("Session is closed")
        async with self._lock:
            self._state = SessionState.REQUESTING
            try:
                return await self._fetch(descriptor, _referrer_url(referrer))
            finally:
                self._state = SessionState.IDLE

    async def _fetch(self, descriptor: RequestDescriptor, referer: Optional[str]) -> Document:
        method = descriptor.method.upper()
        url, _ = urldefrag(descriptor.url)
        body = descriptor.body
        extra = dict(descriptor.headers)
        requested_url = url
        history = [url]
        max_redirects = self._options.max_redirects
        cookie_store = self._options.cookie_store

        while True:
            headers = {**self._headers, **extra}
            if referer:
                headers["Referer"] = referer

            cookie_header = self._jar.header_for(url) if cookie_store else None
            logger.debug("%s %s", method, url)
            response = await self._transport.execute(method, url, headers, body, cookie_header)
            logger.debug("%s %s -> %d", method, url, response.status)

            if cookie_store:
                self._jar.update_from_headers(url, response.header_list("set-cookie"))

            if not (self._options.follow_redirects and response.is_redirect):
                return Document.from_response(
                    response,
                    requested_url=requested_url,
                    method=method,
                    history=history,
                )

            if len(history) > max_redirects:
                raise RedirectLimitExceeded(requested_url, max_redirects, history)

            if response.status == 303 or (response.status in (301, 302) and method == "POST"):
                if method != "HEAD":
                    method = "GET"
                body = None
                extra = {k: v for k, v in extra.items() if k.lower() not in _BODY_HEADERS}

            url, _ = urldefrag(urljoin(url, response.header("location").strip()))
            history.append(url)

    # Lifecycle

    async def close(self) -> None:
        """Close the session and the transport it created."""
        if self._closed:
            return
        self._closed = True
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<Session state={self._state.value} cookies={len(self._jar)}>"
