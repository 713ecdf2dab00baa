"""
Shared fixtures for nobrowser tests.

Network behaviour is exercised against an in-memory transport that serves
scripted responses and records every request it receives.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

import pytest

from nobrowser.exceptions import TransportError
from nobrowser.interfaces import Transport
from nobrowser.models import RawResponse


@dataclass
class RecordedRequest:
    """A request as seen by the fake transport."""

    method: str
    url: str
    headers: dict[str, str]
    body: Optional[bytes]
    cookie_header: Optional[str]


Handler = Callable[[RecordedRequest], Union[RawResponse, Exception]]


class FakeTransport(Transport):
    """Transport serving responses from a route table.

    Routes map ``"METHOD url"`` or plain ``url`` keys to a RawResponse, a
    callable returning one, or an exception to raise. Unknown URLs get 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Union[RawResponse, Handler, Exception]] = {}
        self.requests: list[RecordedRequest] = []
        self.closed = False

    def add(
        self,
        url: str,
        body: Union[str, bytes] = b"",
        status: int = 200,
        headers: Optional[list[tuple[str, str]]] = None,
        method: Optional[str] = None,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        if headers is None:
            headers = [("Content-Type", "text/html; charset=utf-8")]
        key = f"{method} {url}" if method else url
        self.routes[key] = RawResponse(status=status, url=url, headers=headers, body=body)

    def redirect(self, url: str, location: str, status: int = 302, cookies: Optional[list[str]] = None) -> None:
        headers = [("Location", location)]
        headers += [("Set-Cookie", c) for c in cookies or []]
        self.routes[url] = RawResponse(status=status, url=url, headers=headers)

    def handle(self, url: str, handler: Union[Handler, Exception]) -> None:
        self.routes[url] = handler

    async def execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
        cookie_header: Optional[str] = None,
    ) -> RawResponse:
        request = RecordedRequest(method, url, dict(headers), body, cookie_header)
        self.requests.append(request)

        route = self.routes.get(f"{method} {url}", self.routes.get(url))
        if route is None:
            return RawResponse(status=404, url=url, body=b"<html><body>Not found</body></html>")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            result = route(request)
            if isinstance(result, Exception):
                raise result
            return result
        return route

    async def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connection_refused() -> TransportError:
    return TransportError("connection refused", "GET", "http://down.test/")


SEARCH_PAGE = """
<html>
<head><title>Search</title></head>
<body>
  <form id="search" action="/search" method="get">
    <input type="text" name="q" value="">
    <select name="lang">
      <option value="en" selected>English</option>
      <option value="de">Deutsch</option>
      <option value="fr">Français</option>
    </select>
    <input type="submit" name="go" value="Search">
  </form>
  <div id="not-a-form"></div>
</body>
</html>
"""


@pytest.fixture
def search_page() -> str:
    return SEARCH_PAGE
