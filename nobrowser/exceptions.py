"""
Exception hierarchy for nobrowser.

Every error raised by the library derives from :class:`NoBrowserError` and
belongs to one of a handful of categories, so callers can catch as broadly
or as narrowly as they need:

- ParseError: a CSS selector or XPath expression could not be compiled
- NotFoundError: an element, form or field is absent
- AmbiguousError: several candidates matched where exactly one was required
- InvalidStateError: a constraint on a field or document was violated
- TransportError: the network request itself failed
- RedirectLimitExceeded: a redirect chain exceeded the configured bound

HTTP error statuses (4xx/5xx) are never turned into exceptions.
"""

from typing import Any, Optional


class NoBrowserError(Exception):
    """Base class for all nobrowser errors."""


# Parse errors


class ParseError(NoBrowserError):
    """A selector or expression could not be parsed."""


class InvalidSelector(ParseError):
    """A CSS selector (or XPath expression) is syntactically invalid."""

    def __init__(self, selector: str, reason: str) -> None:
        """Initialize InvalidSelector.

        Args:
            selector: The offending selector string.
            reason: Parser error message.
        """
        super().__init__(f"Failed to parse selector {selector!r}: {reason}")
        self.selector = selector
        self.reason = reason


# Lookup errors


class NotFoundError(NoBrowserError):
    """A requested element, form or field does not exist."""


class NoMatchingElement(NotFoundError):
    """A selector matched no elements."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Selector {selector!r} matched no elements")
        self.selector = selector


class FormNotFound(NotFoundError):
    """No form matched the given id, selector or index."""

    def __init__(self, locator: Any) -> None:
        super().__init__(f"No form found for {locator!r}")
        self.locator = locator


class NotAForm(NotFoundError):
    """The element located for a form lookup is not a ``<form>``."""

    def __init__(self, locator: str, tag: str) -> None:
        super().__init__(f"Element for {locator!r} is <{tag}>, not <form>")
        self.locator = locator
        self.tag = tag


class FieldNotFound(NotFoundError):
    """A form contains no field of the requested kind and name."""

    def __init__(self, kind: Any, name: str, value: Optional[str] = None) -> None:
        message = f"Form has no {kind} field named {name!r}"
        if value is not None:
            message += f" with value {value!r}"
        super().__init__(message)
        self.kind = kind
        self.name = name
        self.value = value


class UnknownQueryParam(NotFoundError):
    """A query parameter is not present in a document URL."""

    def __init__(self, param: str, query: str) -> None:
        super().__init__(f"Query param {param!r} is not defined in {query!r}")
        self.param = param
        self.query = query


# Ambiguity errors


class AmbiguousError(NoBrowserError):
    """More than one candidate matched where one was required."""


class AmbiguousField(AmbiguousError):
    """Several fields share kind and name and no value was given to pick one."""

    def __init__(self, kind: Any, name: str, count: int) -> None:
        super().__init__(
            f"{count} {kind} fields are named {name!r}; "
            "pass value= to pick one"
        )
        self.kind = kind
        self.name = name
        self.count = count


# Constraint violations


class InvalidStateError(NoBrowserError):
    """An operation would violate a field or document constraint."""


class InvalidFieldOperation(InvalidStateError):
    """A mutation does not apply to the field's kind."""

    def __init__(self, field_name: str, kind: Any, message: str) -> None:
        super().__init__(f"{kind} field {field_name!r}: {message}")
        self.field_name = field_name
        self.kind = kind


class InvalidOptionValue(InvalidStateError):
    """A select field was set to a value none of its options declare."""

    def __init__(self, field_name: str, value: str, choices: list[str]) -> None:
        super().__init__(
            f"Select {field_name!r} has no option {value!r} "
            f"(choices: {', '.join(repr(c) for c in choices)})"
        )
        self.field_name = field_name
        self.value = value
        self.choices = choices


class MissingFileContent(InvalidStateError):
    """A file field names a file but no content was attached to it."""

    def __init__(self, field_name: str, filename: str) -> None:
        super().__init__(
            f"File field {field_name!r} selects {filename!r} but no content "
            "is attached; call attach() first"
        )
        self.field_name = field_name
        self.filename = filename


class DocumentReleased(InvalidStateError):
    """An element view outlived the document it was taken from."""


# Network errors


class TransportError(NoBrowserError):
    """The HTTP request could not be completed (connect, TLS, read...)."""

    def __init__(self, message: str, method: str, url: str) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class RedirectLimitExceeded(NoBrowserError):
    """A redirect chain was longer than the configured hop limit."""

    def __init__(self, url: str, max_redirects: int, history: list[str]) -> None:
        super().__init__(
            f"Exceeded {max_redirects} redirects while fetching {url}"
        )
        self.url = url
        self.max_redirects = max_redirects
        self.history = history


TooManyRedirects = RedirectLimitExceeded


# Configuration


class ConfigurationError(NoBrowserError):
    """Configuration loading or parsing error."""


__all__ = [
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
