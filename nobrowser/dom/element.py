"""
Element views over parsed documents.

Provides a read-only, DOM-like interface for elements of a
:class:`~nobrowser.dom.document.Document` parsed with lxml.
"""

import logging
import weakref
from typing import TYPE_CHECKING, Iterator, Optional

from lxml import etree
from lxml.cssselect import CSSSelector, SelectorError
from lxml.html import HtmlElement

from nobrowser.exceptions import DocumentReleased, InvalidSelector, NoMatchingElement

if TYPE_CHECKING:
    from nobrowser.dom.document import Document

logger = logging.getLogger(__name__)


def compile_selector(selector: str) -> CSSSelector:
    """Compile a CSS selector for lxml.

    Args:
        selector: CSS selector string.

    Returns:
        The compiled selector.

    Raises:
        InvalidSelector: If the selector cannot be parsed or translated.
    """
    try:
        return CSSSelector(selector, translator="html")
    except SelectorError as exc:
        raise InvalidSelector(selector, str(exc)) from exc


def _is_element(node: object) -> bool:
    # Comments and processing instructions are lxml elements too, but their
    # tag is a factory function rather than a string.
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


class ElementView:
    """Read-only handle to one element of a Document.

    The view keeps only a weak reference to its Document; the underlying
    lxml element stays readable on its own, but :attr:`document` raises
    :class:`DocumentReleased` once the Document has been collected.
    """

    def __init__(self, element: HtmlElement, document: "Document") -> None:
        """Initialize ElementView.

        Args:
            element: The lxml element to wrap.
            document: The Document the element belongs to.
        """
        self._element = element
        self._document_ref = weakref.ref(document)

    @property
    def document(self) -> "Document":
        """Get the Document this element belongs to."""
        document = self._document_ref()
        if document is None:
            raise DocumentReleased(
                f"The document holding <{self.tag}> has been released"
            )
        return document

    @property
    def element(self) -> HtmlElement:
        """Get the underlying lxml element (treat as read-only)."""
        return self._element

    @property
    def tag(self) -> str:
        """Get the element's tag name."""
        return self._element.tag

    @property
    def text(self) -> str:
        """Get the text content of the element (including children)."""
        return self._element.text_content().strip()

    @property
    def outer_html(self) -> str:
        """Get the outer HTML of the element."""
        return etree.tostring(
            self._element, encoding="unicode", method="html", with_tail=False
        )

    @property
    def inner_html(self) -> str:
        """Get the inner HTML of the element."""
        parts = []
        if self._element.text:
            parts.append(self._element.text)
        for child in self._element:
            parts.append(etree.tostring(child, encoding="unicode", method="html"))
        return "".join(parts)

    @property
    def attrs(self) -> dict[str, str]:
        """Get all attributes as a dictionary."""
        return dict(self._element.attrib)

    def attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get an attribute value.

        Args:
            name: Attribute name.
            default: Value returned when the attribute is absent.

        Returns:
            The attribute value or default.
        """
        return self._element.get(name, default)

    def has_attribute(self, name: str) -> bool:
        """Check whether the attribute is present (even if empty)."""
        return name in self._element.attrib

    def __getitem__(self, name: str) -> Optional[str]:
        """Get an attribute value using subscript notation."""
        return self._element.get(name)

    @property
    def id(self) -> Optional[str]:
        """Get the element's id attribute."""
        return self._element.get("id")

    @property
    def classes(self) -> list[str]:
        """Get list of class names."""
        return self._element.get("class", "").split()

    @property
    def parent(self) -> Optional["ElementView"]:
        """Get the parent element."""
        parent = self._element.getparent()
        if parent is not None:
            return ElementView(parent, self.document)
        return None

    @property
    def children(self) -> list["ElementView"]:
        """Get all child elements."""
        document = self.document
        return [
            ElementView(child, document)
            for child in self._element
            if _is_element(child)
        ]

    def select(self, selector: str) -> Iterator["ElementView"]:
        """Find elements matching a CSS selector within this subtree.

        The selector is compiled immediately, so syntax errors surface here
        rather than on first iteration.

        Args:
            selector: CSS selector.

        Returns:
            Lazy iterator over matching elements, in document order.

        Raises:
            InvalidSelector: If the selector is malformed.
        """
        compiled = compile_selector(selector)
        return self._iter_matches(compiled)

    def _iter_matches(self, compiled: CSSSelector) -> Iterator["ElementView"]:
        document = self.document
        for node in compiled(self._element):
            yield ElementView(node, document)

    def select_first(self, selector: str) -> "ElementView":
        """Find the first element matching a CSS selector.

        Raises:
            InvalidSelector: If the selector is malformed.
            NoMatchingElement: If nothing matches.
        """
        for view in self.select(selector):
            return view
        raise NoMatchingElement(selector)

    def xpath(self, expression: str) -> list["ElementView"]:
        """Evaluate an XPath expression and return matching elements.

        Non-element results (strings, numbers) are dropped.

        Raises:
            InvalidSelector: If the expression is malformed.
        """
        try:
            results = self._element.xpath(expression)
        except etree.XPathError as exc:
            raise InvalidSelector(expression, str(exc)) from exc
        if not isinstance(results, list):
            return []
        document = self.document
        return [ElementView(el, document) for el in results if _is_element(el)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementView):
            return NotImplemented
        return self._element is other._element

    def __hash__(self) -> int:
        return hash(id(self._element))

    def __repr__(self) -> str:
        """String representation of the element."""
        attrs = " ".join(f'{k}="{v}"' for k, v in list(self.attrs.items())[:3])
        if attrs:
            return f"<ElementView <{self.tag} {attrs}>>"
        return f"<ElementView <{self.tag}>>"

    def __len__(self) -> int:
        """Return number of child elements."""
        return len(self.children)

    def __bool__(self) -> bool:
        return True
