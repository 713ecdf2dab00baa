"""
HTML form handling for nobrowser.

This module provides:
- Form: detached snapshot of a ``<form>`` and its controls
- Field variants: TextField, CheckboxField, RadioField, SelectField,
  FileField, ButtonField
- extract_form: build a Form from a parsed ``<form>`` element
- encode: turn a Form into a RequestDescriptor

Example usage:
    form = doc.form_by_id("search")
    form.input("text", "q").set_value("rust")
    request = encode(form)
"""

from nobrowser.forms.encoder import collect_entries, encode, encode_multipart, urlencode_entries
from nobrowser.forms.extract import extract_form
from nobrowser.forms.fields import (
    ButtonField,
    CheckboxField,
    Field,
    FileEntry,
    FileField,
    RadioField,
    RadioGroup,
    SelectField,
    SelectOption,
    TextField,
)
from nobrowser.forms.form import Form

__all__ = [
    "Form",
    "Field",
    "TextField",
    "CheckboxField",
    "RadioField",
    "RadioGroup",
    "SelectField",
    "SelectOption",
    "FileField",
    "FileEntry",
    "ButtonField",
    "extract_form",
    "encode",
    "collect_entries",
    "urlencode_entries",
    "encode_multipart",
]
