"""
Form extraction.

Turns a ``<form>`` element into a detached :class:`~nobrowser.forms.form.Form`
following HTML semantics: controls owned by the form (descendants, plus
controls elsewhere that name it with ``form="<id>"``) in document order,
unknown input types treated as text, fieldset-disabled controls disabled.
"""

import codecs
import logging
import re
from typing import TYPE_CHECKING, Iterator, Optional
from urllib.parse import urljoin

from lxml.html import HtmlElement

from nobrowser.forms.fields import (
    ButtonField,
    CheckboxField,
    Field,
    FileField,
    RadioField,
    SelectField,
    SelectOption,
    TextField,
)
from nobrowser.forms.form import Form
from nobrowser.models import Enctype, FieldKind, FormMethod

if TYPE_CHECKING:
    from nobrowser.dom.document import Document

logger = logging.getLogger(__name__)

CONTROL_TAGS = ("input", "select", "textarea", "button")

_WHITESPACE_RE = re.compile(r"\s+")

# Input types that are not spelled as <input type=...>.
_NON_INPUT_KINDS = frozenset(
    {FieldKind.TEXTAREA, FieldKind.SELECT, FieldKind.SELECT_MULTIPLE}
)


def extract_form(form_element: HtmlElement, document: "Document") -> Form:
    """Build a Form from a ``<form>`` element of ``document``.

    Extraction is pure: the same element always yields an equal Form, and
    the Form shares no mutable state with the document tree.

    Args:
        form_element: The ``<form>`` element.
        document: The Document the element belongs to (for URL resolution
            and the fallback charset).

    Returns:
        The extracted Form.
    """
    fields = [_build_field(control, document.base_url) for control in iter_controls(form_element)]

    action = (form_element.get("action") or "").strip()
    action = urljoin(document.base_url, action) if action else document.url

    enctype = Enctype.parse(form_element.get("enctype"))
    if any(isinstance(f, FileField) for f in fields):
        enctype = Enctype.MULTIPART

    form = Form(
        action=action,
        method=FormMethod.parse(form_element.get("method")),
        enctype=enctype,
        fields=fields,
        id=form_element.get("id"),
        name=form_element.get("name"),
        accept_charset=_form_charset(form_element.get("accept-charset"), document.encoding),
    )
    logger.debug("Extracted %r with fields %s", form, [f.name for f in fields])
    return form


def iter_controls(form_element: HtmlElement) -> Iterator[HtmlElement]:
    """Yield the controls owned by a form, in document order."""
    root = form_element.getroottree().getroot()
    for control in root.iter(*CONTROL_TAGS):
        if _form_owner(control) is form_element:
            yield control


def _form_owner(control: HtmlElement) -> Optional[HtmlElement]:
    form_id = control.get("form")
    if form_id is not None:
        # An explicit form attribute wins over nesting, even when it points
        # at nothing (the control then has no owner).
        matches = control.getroottree().xpath("//*[@id=$form_id]", form_id=form_id)
        if matches and matches[0].tag == "form":
            return matches[0]
        return None
    for ancestor in control.iterancestors("form"):
        return ancestor
    return None


def _in_disabled_fieldset(control: HtmlElement) -> bool:
    child = control
    for ancestor in control.iterancestors():
        if ancestor.tag == "fieldset" and "disabled" in ancestor.attrib:
            # Controls in the first <legend> stay enabled.
            legend = next((c for c in ancestor if c.tag == "legend"), None)
            if child is not legend:
                return True
        child = ancestor
    return False


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _form_charset(accept_charset: Optional[str], fallback: str) -> str:
    for candidate in (accept_charset or "").replace(",", " ").split():
        try:
            return codecs.lookup(candidate).name
        except LookupError:
            continue
    return fallback


def _build_field(control: HtmlElement, base_url: str) -> Field:
    name = control.get("name") or ""
    attrs = dict(control.attrib)
    disabled = "disabled" in control.attrib or _in_disabled_fieldset(control)

    if control.tag == "textarea":
        text = control.text_content()
        if text.startswith("\r\n"):
            text = text[2:]
        elif text.startswith("\n"):
            text = text[1:]
        return TextField(name, FieldKind.TEXTAREA, disabled, attrs, text=text)

    if control.tag == "select":
        return _build_select(control, name, attrs, disabled)

    if control.tag == "button":
        kind = _button_kind(control.get("type"), FieldKind.SUBMIT)
        return _build_button(
            control, kind, name, attrs, disabled, base_url, control.text_content().strip()
        )

    kind = _input_kind(control.get("type"))
    if kind in (FieldKind.CHECKBOX, FieldKind.RADIO):
        cls = RadioField if kind == FieldKind.RADIO else CheckboxField
        return cls(
            name,
            kind,
            disabled,
            attrs,
            checked="checked" in control.attrib,
            submit_value=control.get("value", "on"),
        )
    if kind == FieldKind.FILE:
        return FileField(name, kind, disabled, attrs)
    if kind.is_button:
        label = control.get("alt" if kind == FieldKind.IMAGE else "value") or ""
        return _build_button(control, kind, name, attrs, disabled, base_url, label)
    return TextField(name, kind, disabled, attrs, text=control.get("value", ""))


def _input_kind(type_attr: Optional[str]) -> FieldKind:
    try:
        kind = FieldKind((type_attr or "text").strip().lower())
    except ValueError:
        return FieldKind.TEXT
    return FieldKind.TEXT if kind in _NON_INPUT_KINDS else kind


def _button_kind(type_attr: Optional[str], default: FieldKind) -> FieldKind:
    value = (type_attr or "").strip().lower()
    if value in ("submit", "reset", "button"):
        return FieldKind(value)
    return default


def _build_button(
    control: HtmlElement,
    kind: FieldKind,
    name: str,
    attrs: dict[str, str],
    disabled: bool,
    base_url: str,
    label: str,
) -> ButtonField:
    formaction = (control.get("formaction") or "").strip()
    return ButtonField(
        name,
        kind,
        disabled,
        attrs,
        button_value=control.get("value"),
        label=label,
        formaction=urljoin(base_url, formaction) if formaction else None,
        formmethod=control.get("formmethod"),
        formenctype=control.get("formenctype"),
    )


def _build_select(
    control: HtmlElement,
    name: str,
    attrs: dict[str, str],
    disabled: bool,
) -> SelectField:
    multiple = "multiple" in control.attrib
    options = []
    for option in control.iter("option"):
        text = _collapse(option.text_content())
        value = option.get("value")
        group = option.getparent()
        options.append(
            SelectOption(
                label=option.get("label") or text,
                value=value if value is not None else text,
                selected="selected" in option.attrib,
                disabled=(
                    "disabled" in option.attrib
                    or (group is not None and group.tag == "optgroup" and "disabled" in group.attrib)
                ),
            )
        )

    if not multiple and options:
        chosen = next((i for i, o in enumerate(options) if o.selected), 0)
        for i, option in enumerate(options):
            option.selected = i == chosen

    kind = FieldKind.SELECT_MULTIPLE if multiple else FieldKind.SELECT
    return SelectField(name, kind, disabled, attrs, options=options, multiple=multiple)
