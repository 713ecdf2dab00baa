"""
Core data models for nobrowser.

This module defines the value types shared between the form encoder, the
transport and the session: HTTP methods, form encodings, field kinds, the
request descriptor produced by the encoder and the raw response returned by
a transport.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FormMethod(str, Enum):
    """Methods a form can be submitted with."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FormMethod":
        """Map a ``method`` attribute to a FormMethod; anything unknown is GET."""
        if value and value.strip().upper() == "POST":
            return cls.POST
        return cls.GET


class Enctype(str, Enum):
    """Body encodings for POSTed forms."""

    URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Enctype":
        """Map an ``enctype`` attribute to an Enctype; unknown is url-encoded."""
        if value and value.strip().lower() == cls.MULTIPART.value:
            return cls.MULTIPART
        return cls.URLENCODED


class FieldKind(str, Enum):
    """Form control categories.

    Text-like kinds share one behaviour (free text value); the others each
    have dedicated mutation rules.
    """

    TEXT = "text"
    SEARCH = "search"
    EMAIL = "email"
    PASSWORD = "password"
    HIDDEN = "hidden"
    URL = "url"
    TEL = "tel"
    NUMBER = "number"
    RANGE = "range"
    DATE = "date"
    DATETIME_LOCAL = "datetime-local"
    MONTH = "month"
    WEEK = "week"
    TIME = "time"
    COLOR = "color"
    TEXTAREA = "textarea"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select-one"
    SELECT_MULTIPLE = "select-multiple"
    FILE = "file"
    SUBMIT = "submit"
    IMAGE = "image"
    RESET = "reset"
    BUTTON = "button"

    @property
    def is_text(self) -> bool:
        """Whether the kind holds a free-text value."""
        return self in TEXT_KINDS

    @property
    def is_button(self) -> bool:
        """Whether the kind is a button (never submitted unless clicked)."""
        return self in BUTTON_KINDS


TEXT_KINDS = frozenset(
    {
        FieldKind.TEXT,
        FieldKind.SEARCH,
        FieldKind.EMAIL,
        FieldKind.PASSWORD,
        FieldKind.HIDDEN,
        FieldKind.URL,
        FieldKind.TEL,
        FieldKind.NUMBER,
        FieldKind.RANGE,
        FieldKind.DATE,
        FieldKind.DATETIME_LOCAL,
        FieldKind.MONTH,
        FieldKind.WEEK,
        FieldKind.TIME,
        FieldKind.COLOR,
        FieldKind.TEXTAREA,
    }
)

BUTTON_KINDS = frozenset(
    {FieldKind.SUBMIT, FieldKind.IMAGE, FieldKind.RESET, FieldKind.BUTTON}
)


class SessionState(str, Enum):
    """Navigation state of a Session."""

    IDLE = "idle"
    REQUESTING = "requesting"


class RequestDescriptor(BaseModel):
    """A fully encoded HTTP request, ready to hand to a transport."""

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Optional[bytes] = None

    @property
    def content_type(self) -> Optional[str]:
        """Get the Content-Type header, if any."""
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return None


class RawResponse(BaseModel):
    """A single HTTP response as returned by a transport.

    Headers are kept as an ordered list of pairs so repeated headers
    (``Set-Cookie`` in particular) survive.
    """

    status: int
    url: str
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""
    reason: str = ""

    def header(self, name: str) -> Optional[str]:
        """Get the first value of a header (case-insensitive)."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None

    def header_list(self, name: str) -> list[str]:
        """Get every value of a header (case-insensitive)."""
        name = name.lower()
        return [value for key, value in self.headers if key.lower() == name]

    @property
    def is_redirect(self) -> bool:
        """Whether the response is a redirect the session should follow."""
        return self.status in REDIRECT_STATUSES and self.header("location") is not None


REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
