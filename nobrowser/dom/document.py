"""
Parsed HTML documents.

A :class:`Document` is an immutable snapshot of one fetched page: the lxml
tree, the URL it was requested from, the URL it was finally served from and
the response metadata. Forms are extracted from it as detached
:class:`~nobrowser.forms.form.Form` objects.
"""

import codecs
import logging
import re
from typing import TYPE_CHECKING, Iterator, Optional, Union
from urllib.parse import parse_qs, urljoin, urlsplit

from lxml import etree, html
from lxml.html import HtmlElement

from nobrowser.dom.element import ElementView
from nobrowser.exceptions import (
    FormNotFound,
    NoMatchingElement,
    NotAForm,
    UnknownQueryParam,
)
from nobrowser.forms.extract import extract_form

if TYPE_CHECKING:
    from nobrowser.forms.form import Form
    from nobrowser.models import RawResponse

logger = logging.getLogger(__name__)

_CHARSET_HEADER_RE = re.compile(r"charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)
_CHARSET_META_RE = re.compile(
    rb"<meta[^>]+charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE
)
_EMPTY_DOCUMENT = b"<html><head></head><body></body></html>"


def _valid_encoding(name: Optional[Union[str, bytes]]) -> Optional[str]:
    if not name:
        return None
    if isinstance(name, bytes):
        name = name.decode("ascii", "ignore")
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None


def sniff_encoding(body: bytes, content_type: Optional[str] = None) -> str:
    """Determine the character encoding of an HTML body.

    Order: ``charset`` of the Content-Type header, then a ``<meta charset>``
    declaration in the first 2 KiB, then UTF-8. A UTF-16 or UTF-32 label in
    a meta tag means UTF-8, since the tag itself was readable as ASCII.
    """
    if content_type:
        match = _CHARSET_HEADER_RE.search(content_type)
        if match:
            encoding = _valid_encoding(match.group(1))
            if encoding:
                return encoding
    match = _CHARSET_META_RE.search(body[:2048])
    if match:
        encoding = _valid_encoding(match.group(1))
        if encoding:
            if encoding.startswith(("utf-16", "utf-32")):
                return "utf-8"
            return encoding
    return "utf-8"


def _parse_tree(body: bytes, encoding: str) -> HtmlElement:
    # libxml2 knows fewer charsets than Python's codecs, so the body is
    # decoded here and handed to the parser as UTF-8.
    text = body.decode(encoding, errors="replace")
    if text.startswith("\ufeff"):
        text = text[1:]
    data = text.encode("utf-8")
    parser = html.HTMLParser(encoding="utf-8")
    if not data.strip():
        data = _EMPTY_DOCUMENT
    try:
        return html.document_fromstring(data, parser=parser)
    except etree.ParserError:
        # lxml refuses documents with no element at all (comment-only,
        # stray text in some encodings); such pages are treated as empty.
        logger.debug("Body has no parsable element; using an empty document")
        return html.document_fromstring(_EMPTY_DOCUMENT, parser=parser)


class Document:
    """An immutable, queryable HTML page.

    Example:
        doc = Document.parse(b"<a href='/x'>x</a>", "https://example.com/")
        link = doc.select_first("a")
        print(link.attribute("href"))
    """

    def __init__(
        self,
        tree: HtmlElement,
        url: str,
        *,
        requested_url: Optional[str] = None,
        method: str = "GET",
        status: int = 200,
        headers: Optional[list[tuple[str, str]]] = None,
        content: bytes = b"",
        encoding: str = "utf-8",
        history: Optional[list[str]] = None,
    ) -> None:
        """Initialize Document.

        Prefer :meth:`parse` or :meth:`from_response`.

        Args:
            tree: Parsed lxml document root.
            url: Final URL the page was served from (after redirects).
            requested_url: URL originally requested; defaults to ``url``.
            method: HTTP method of the final request.
            status: HTTP status code of the final response.
            headers: Response headers as ordered pairs.
            content: Raw response body.
            encoding: Encoding used to decode the body.
            history: URLs of the redirect chain, ending with ``url``.
        """
        self._tree = tree
        self._url = url
        self._requested_url = requested_url or url
        self._method = method.upper()
        self._status = status
        self._headers = tuple(headers or ())
        self._content = content
        self._encoding = encoding
        self._history = tuple(history or (url,))
        self._base_url = self._find_base_url()

    @classmethod
    def parse(
        cls,
        body: Union[bytes, str],
        url: str,
        *,
        requested_url: Optional[str] = None,
        method: str = "GET",
        status: int = 200,
        headers: Optional[list[tuple[str, str]]] = None,
        history: Optional[list[str]] = None,
    ) -> "Document":
        """Parse an HTML body into a Document.

        Never fails on malformed markup; an empty body yields an empty page.

        Args:
            body: Raw body bytes (or already decoded text).
            url: Final URL of the page.
            requested_url: URL originally requested.
            method: HTTP method of the final request.
            status: HTTP status code.
            headers: Response headers as ordered pairs.
            history: URLs of the redirect chain.

        Returns:
            The parsed Document.
        """
        if isinstance(body, str):
            content = body.encode("utf-8")
            encoding = "utf-8"
        else:
            content = body
            content_type = None
            for name, value in headers or ():
                if name.lower() == "content-type":
                    content_type = value
                    break
            encoding = sniff_encoding(content, content_type)

        tree = _parse_tree(content, encoding)
        return cls(
            tree,
            url,
            requested_url=requested_url,
            method=method,
            status=status,
            headers=headers,
            content=content,
            encoding=encoding,
            history=history,
        )

    @classmethod
    def from_response(
        cls,
        response: "RawResponse",
        *,
        requested_url: Optional[str] = None,
        method: str = "GET",
        history: Optional[list[str]] = None,
    ) -> "Document":
        """Build a Document from a transport response."""
        return cls.parse(
            response.body,
            response.url,
            requested_url=requested_url,
            method=method,
            status=response.status,
            headers=list(response.headers),
            history=history,
        )

    def _find_base_url(self) -> str:
        for base in self._tree.iter("base"):
            href = (base.get("href") or "").strip()
            if href:
                return urljoin(self._url, href)
        return self._url

    # Response metadata

    @property
    def url(self) -> str:
        """Get the final URL after redirects."""
        return self._url

    @property
    def requested_url(self) -> str:
        """Get the URL that was originally requested."""
        return self._requested_url

    @property
    def redirected(self) -> bool:
        """Whether the page was reached through at least one redirect."""
        return len(self._history) > 1

    @property
    def history(self) -> list[str]:
        """Get the URLs of the redirect chain, ending with :attr:`url`."""
        return list(self._history)

    @property
    def base_url(self) -> str:
        """Get the URL relative links are resolved against."""
        return self._base_url

    @property
    def method(self) -> str:
        """Get the HTTP method of the request that produced this page."""
        return self._method

    @property
    def status(self) -> int:
        """Get the HTTP status code."""
        return self._status

    @property
    def ok(self) -> bool:
        """Check if the response was successful (2xx status)."""
        return 200 <= self._status < 300

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Get response headers as ordered pairs."""
        return list(self._headers)

    def header(self, name: str) -> Optional[str]:
        """Get the first value of a response header (case-insensitive)."""
        name = name.lower()
        for key, value in self._headers:
            if key.lower() == name:
                return value
        return None

    @property
    def content(self) -> bytes:
        """Get the raw response body."""
        return self._content

    @property
    def encoding(self) -> str:
        """Get the encoding the body was decoded with."""
        return self._encoding

    @property
    def text(self) -> str:
        """Get the response body as text."""
        return self._content.decode(self._encoding, errors="replace")

    def query_param(self, name: str) -> str:
        """Get the first value of a query parameter of :attr:`url`.

        Raises:
            UnknownQueryParam: If the parameter is absent.
        """
        query = urlsplit(self._url).query
        values = parse_qs(query, keep_blank_values=True).get(name)
        if not values:
            raise UnknownQueryParam(name, query)
        return values[0]

    # Querying

    @property
    def root(self) -> ElementView:
        """Get the ``<html>`` element."""
        return ElementView(self._tree, self)

    def select(self, selector: str) -> Iterator[ElementView]:
        """Find all elements matching a CSS selector.

        Raises:
            InvalidSelector: If the selector is malformed.
        """
        return self.root.select(selector)

    def select_first(self, selector: str) -> ElementView:
        """Find the first element matching a CSS selector.

        Raises:
            InvalidSelector: If the selector is malformed.
            NoMatchingElement: If nothing matches.
        """
        return self.root.select_first(selector)

    def xpath(self, expression: str) -> list[ElementView]:
        """Evaluate an XPath expression against the whole document."""
        return self.root.xpath(expression)

    @property
    def title(self) -> Optional[str]:
        """Get the page title."""
        for title in self._tree.iter("title"):
            return title.text_content().strip()
        return None

    def links(self) -> list[str]:
        """Get the absolute URLs of all ``<a href>`` elements."""
        return [
            urljoin(self._base_url, el.get("href").strip())
            for el in self._tree.iter("a")
            if el.get("href")
        ]

    # Forms

    def forms(self) -> list["Form"]:
        """Extract every form of the page, in document order."""
        return [extract_form(el, self) for el in self._tree.iter("form")]

    def form(self, index: int) -> "Form":
        """Extract the form at ``index`` (document order).

        Raises:
            FormNotFound: If the page has fewer forms.
        """
        elements = list(self._tree.iter("form"))
        if not 0 <= index < len(elements):
            raise FormNotFound(index)
        return extract_form(elements[index], self)

    def form_by_id(self, form_id: str) -> "Form":
        """Extract the form whose ``id`` attribute equals ``form_id``.

        Raises:
            FormNotFound: If no element has that id.
            NotAForm: If the element with that id is not a ``<form>``.
        """
        matches = self._tree.xpath("//*[@id=$form_id]", form_id=form_id)
        if not matches:
            raise FormNotFound(form_id)
        element = matches[0]
        if element.tag != "form":
            raise NotAForm(form_id, element.tag)
        return extract_form(element, self)

    def form_by_selector(self, selector: str) -> "Form":
        """Extract the first form matching a CSS selector.

        Raises:
            InvalidSelector: If the selector is malformed.
            FormNotFound: If nothing matches.
            NotAForm: If the first match is not a ``<form>``.
        """
        try:
            view = self.select_first(selector)
        except NoMatchingElement:
            raise FormNotFound(selector) from None
        if view.tag != "form":
            raise NotAForm(selector, view.tag)
        return extract_form(view.element, self)

    def __repr__(self) -> str:
        return f"<Document [{self._status}] {self._url}>"
