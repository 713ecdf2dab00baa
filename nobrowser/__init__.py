"""
nobrowser: a programmatic browser without a browser.

Fetches HTML pages over HTTP, parses them into queryable documents, and
fills in and submits HTML forms the way a browser would, keeping cookies
and following redirects across navigations. No JavaScript, no rendering.

Basic usage:
    from nobrowser import Session

    async with Session() as session:
        page = await session.navigate("https://example.com/search")
        form = page.form_by_id("search")
        form.input("text", "q").set_value("rust")
        form.input("select-one", "lang").set_value("de")
        results = await session.submit(form, page)
        for link in results.select("a.result"):
            print(link.attribute("href"))

Synchronous usage:
    from nobrowser import SyncSession

    with SyncSession() as session:
        page = session.navigate("https://example.com")
        print(page.title)
"""

__version__ = "0.1.0"
__license__ = "MIT"

from nobrowser.config import NoBrowserConfig, SessionOptions, load_config
from nobrowser.dom import Document, ElementView
from nobrowser.exceptions import (
    AmbiguousError,
    AmbiguousField,
    ConfigurationError,
    DocumentReleased,
    FieldNotFound,
    FormNotFound,
    InvalidFieldOperation,
    InvalidOptionValue,
    InvalidSelector,
    InvalidStateError,
    MissingFileContent,
    NoBrowserError,
    NoMatchingElement,
    NotAForm,
    NotFoundError,
    ParseError,
    RedirectLimitExceeded,
    TooManyRedirects,
    TransportError,
    UnknownQueryParam,
)
from nobrowser.forms import (
    ButtonField,
    CheckboxField,
    Field,
    FileField,
    Form,
    RadioField,
    RadioGroup,
    SelectField,
    SelectOption,
    TextField,
    encode,
)
from nobrowser.interfaces import Transport
from nobrowser.models import (
    Enctype,
    FieldKind,
    FormMethod,
    RawResponse,
    RequestDescriptor,
    SessionState,
)
from nobrowser.session import CookieData, CookieJar, CurlTransport, Session
from nobrowser.sync import SyncSession, run_sync

__all__ = [
    # Version info
    "__version__",
    # Sessions
    "Session",
    "SyncSession",
    "run_sync",
    "Transport",
    "CurlTransport",
    "CookieJar",
    "CookieData",
    # Documents
    "Document",
    "ElementView",
    # Forms
    "Form",
    "Field",
    "TextField",
    "CheckboxField",
    "RadioField",
    "RadioGroup",
    "SelectField",
    "SelectOption",
    "FileField",
    "ButtonField",
    "encode",
    # Models
    "FieldKind",
    "FormMethod",
    "Enctype",
    "RequestDescriptor",
    "RawResponse",
    "SessionState",
    # Configuration
    "NoBrowserConfig",
    "SessionOptions",
    "load_config",
    # Errors
    "NoBrowserError",
    "ParseError",
    "InvalidSelector",
    "NotFoundError",
    "NoMatchingElement",
    "FormNotFound",
    "NotAForm",
    "FieldNotFound",
    "UnknownQueryParam",
    "AmbiguousError",
    "AmbiguousField",
    "InvalidStateError",
    "InvalidFieldOperation",
    "InvalidOptionValue",
    "MissingFileContent",
    "DocumentReleased",
    "TransportError",
    "RedirectLimitExceeded",
    "TooManyRedirects",
    "ConfigurationError",
]
