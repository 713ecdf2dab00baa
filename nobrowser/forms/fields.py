"""
Form field model.

Each HTML control extracted from a form becomes one :class:`Field`. Field
kinds with different mutation rules get their own class, so a checkbox
cannot be given free text and a select cannot be set to an undeclared
option:

- TextField: text-like inputs and textareas (free text, or ``None``)
- CheckboxField: independent on/off controls
- RadioField: on/off controls that are mutually exclusive per name
- SelectField: single and multiple selects over declared options
- FileField: file inputs with optionally attached content
- ButtonField: submit, image, reset and plain buttons

Every field exposes ``value`` and ``set_value()``; operations that make no
sense for a kind raise :class:`~nobrowser.exceptions.InvalidFieldOperation`.
"""

import mimetypes
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from nobrowser.exceptions import InvalidFieldOperation, InvalidOptionValue
from nobrowser.models import FieldKind


@dataclass(frozen=True)
class FileEntry:
    """File data contributed by a file field to a submission."""

    filename: str
    content: Optional[bytes]
    content_type: str = "application/octet-stream"


EntryValue = Union[str, FileEntry]
Entry = tuple[str, EntryValue]


@dataclass
class Field(ABC):
    """Base class for form fields.

    Attributes:
        name: The control's ``name`` attribute, verbatim (may be empty).
        kind: The control category.
        disabled: Whether the control is disabled (never submitted).
        attrs: All markup attributes of the control.
    """

    name: str
    kind: FieldKind
    disabled: bool = False
    attrs: dict[str, str] = field(default_factory=dict)

    @property
    def submittable(self) -> bool:
        """Whether the field can contribute to a submission at all."""
        return bool(self.name) and not self.disabled

    @property
    @abstractmethod
    def value(self) -> Any:
        """Get the field's current value."""

    @abstractmethod
    def set_value(self, value: Any) -> None:
        """Set the field's value; the accepted type depends on the kind."""

    def matches_value(self, value: str) -> bool:
        """Whether the markup ``value`` of this control equals ``value``."""
        return self.attrs.get("value") == value

    @abstractmethod
    def entries(self) -> list[Entry]:
        """Name/value pairs this field contributes when submitted."""

    # Kind-specific operations; the matching subclasses override them.

    def check(self) -> None:
        """Check a checkbox or radio button."""
        self._reject("check() applies to checkboxes and radio buttons only")

    def uncheck(self) -> None:
        """Uncheck a checkbox or radio button."""
        self._reject("uncheck() applies to checkboxes and radio buttons only")

    def select_index(self, index: int) -> None:
        """Select an option by position."""
        self._reject("select_index() applies to select fields only")

    def attach(
        self,
        content: Union[bytes, str],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> None:
        """Bind upload content to a file field."""
        self._reject("attach() applies to file fields only")

    def _reject(self, message: str) -> None:
        raise InvalidFieldOperation(self.name, self.kind.value, message)

    def __repr__(self) -> str:
        flags = " disabled" if self.disabled else ""
        return f"<{type(self).__name__} {self.kind.value} {self.name!r}={self.value!r}{flags}>"


@dataclass(repr=False)
class TextField(Field):
    """Free-text control (text-like inputs and textareas).

    ``value`` is ``None`` when the field should be left out of the
    submission entirely, as opposed to ``""`` which submits an empty value.
    """

    text: Optional[str] = ""

    @property
    def value(self) -> Optional[str]:
        return self.text

    def set_value(self, value: Optional[str]) -> None:
        if value is not None and not isinstance(value, str):
            self._reject(f"expected str or None, got {type(value).__name__}")
        self.text = value

    def clear(self) -> None:
        """Set the value to the empty string (still submitted)."""
        self.text = ""

    def entries(self) -> list[Entry]:
        if self.text is None:
            return []
        return [(self.name, self.text)]


@dataclass(repr=False)
class CheckboxField(Field):
    """An on/off control; ``value`` is the checked state."""

    checked: bool = False
    submit_value: str = "on"

    @property
    def value(self) -> bool:
        return self.checked

    def set_value(self, value: bool) -> None:
        if not isinstance(value, bool):
            self._reject(f"expected bool, got {type(value).__name__}")
        if value:
            self.check()
        else:
            self.uncheck()

    def check(self) -> None:
        self.checked = True

    def uncheck(self) -> None:
        self.checked = False

    def matches_value(self, value: str) -> bool:
        return self.submit_value == value

    def entries(self) -> list[Entry]:
        if not self.checked:
            return []
        return [(self.name, self.submit_value)]


@dataclass(repr=False)
class RadioField(CheckboxField):
    """A radio button; checking it unchecks the rest of its group."""

    group: Optional["RadioGroup"] = field(default=None, compare=False, repr=False)

    def check(self) -> None:
        if self.group is not None:
            self.group.select(self)
        else:
            self.checked = True


class RadioGroup:
    """All radio buttons of one form sharing a name."""

    def __init__(self, name: str, members: Iterable[RadioField]) -> None:
        self.name = name
        self.members = list(members)
        checked = [m for m in self.members if m.checked]
        # Markup may check several radios of a group; the last one wins.
        for member in checked[:-1]:
            member.checked = False
        for member in self.members:
            member.group = self

    @property
    def checked(self) -> Optional[RadioField]:
        """Get the checked member, if any."""
        for member in self.members:
            if member.checked:
                return member
        return None

    @property
    def value(self) -> Optional[str]:
        """Get the submit value of the checked member, if any."""
        member = self.checked
        return member.submit_value if member is not None else None

    def select(self, member: RadioField) -> None:
        """Check ``member`` and uncheck every other member."""
        for other in self.members:
            other.checked = other is member

    def clear(self) -> None:
        """Uncheck every member."""
        for member in self.members:
            member.checked = False

    def __len__(self) -> int:
        return len(self.members)

    def __repr__(self) -> str:
        return f"<RadioGroup {self.name!r} value={self.value!r} members={len(self.members)}>"


@dataclass
class SelectOption:
    """One ``<option>`` of a select field."""

    label: str
    value: str
    selected: bool = False
    disabled: bool = False


@dataclass(repr=False)
class SelectField(Field):
    """A ``<select>`` control.

    For single selects ``value`` is the selected option's value (or ``None``
    when the select has no options); for multiple selects it is the list of
    selected values.
    """

    options: list[SelectOption] = field(default_factory=list)
    multiple: bool = False

    @property
    def value(self) -> Union[Optional[str], list[str]]:
        selected = [o.value for o in self.options if o.selected]
        if self.multiple:
            return selected
        return selected[0] if selected else None

    @property
    def selected_indices(self) -> list[int]:
        """Get the positions of the selected options."""
        return [i for i, o in enumerate(self.options) if o.selected]

    @property
    def choices(self) -> list[str]:
        """Get the values of all enabled options."""
        return [o.value for o in self.options if not o.disabled]

    def set_value(self, value: Union[str, Iterable[str]]) -> None:
        if self.multiple:
            if isinstance(value, str):
                values = [value]
            else:
                try:
                    values = list(value)
                except TypeError:
                    self._reject(f"expected str or list of str, got {type(value).__name__}")
            indices = {self._index_of(v) for v in values}
            for i, option in enumerate(self.options):
                option.selected = i in indices
            return

        if not isinstance(value, str):
            self._reject(f"expected str, got {type(value).__name__}")
        self._select_only(self._index_of(value))

    def select_index(self, index: int) -> None:
        if not 0 <= index < len(self.options) or self.options[index].disabled:
            raise InvalidOptionValue(self.name, f"#{index}", self.choices)
        if self.multiple:
            self.options[index].selected = True
        else:
            self._select_only(index)

    def deselect(self, value: str) -> None:
        """Unselect an option of a multiple select."""
        if not self.multiple:
            self._reject("a single select always keeps one option selected")
        self.options[self._index_of(value)].selected = False

    def _index_of(self, value: str) -> int:
        if not isinstance(value, str):
            self._reject(f"option values are str, got {type(value).__name__}")
        for i, option in enumerate(self.options):
            if option.value == value and not option.disabled:
                return i
        raise InvalidOptionValue(self.name, value, self.choices)

    def _select_only(self, index: int) -> None:
        for i, option in enumerate(self.options):
            option.selected = i == index

    def entries(self) -> list[Entry]:
        return [
            (self.name, o.value)
            for o in self.options
            if o.selected and not o.disabled
        ]


@dataclass(repr=False)
class FileField(Field):
    """A file input.

    ``value`` is the chosen filename (a placeholder until content is
    attached with :meth:`attach` or :meth:`attach_file`).
    """

    filename: Optional[str] = None
    content: Optional[bytes] = field(default=None, repr=False)
    content_type: Optional[str] = None

    @property
    def value(self) -> Optional[str]:
        return self.filename

    def set_value(self, value: Optional[str]) -> None:
        if value is not None and not isinstance(value, str):
            self._reject(f"expected filename str or None, got {type(value).__name__}")
        if value != self.filename:
            self.content = None
            self.content_type = None
        self.filename = value

    def attach(
        self,
        content: Union[bytes, str],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        if filename is not None:
            self.filename = filename
        elif self.filename is None:
            self._reject("attach() needs a filename when none was set")
        self.content = content
        self.content_type = content_type

    def attach_file(self, path: Union[str, Path], content_type: Optional[str] = None) -> None:
        """Read ``path`` from disk and attach it under its base name."""
        path = Path(path)
        self.attach(path.read_bytes(), filename=path.name, content_type=content_type)

    @property
    def basename(self) -> str:
        """Get the filename without any directory part."""
        if not self.filename:
            return ""
        return posixpath.basename(self.filename.replace("\\", "/"))

    def entries(self) -> list[Entry]:
        content_type = self.content_type
        if content_type is None:
            guessed, _ = mimetypes.guess_type(self.basename)
            content_type = guessed or "application/octet-stream"
        return [(self.name, FileEntry(self.basename, self.content, content_type))]


@dataclass(repr=False)
class ButtonField(Field):
    """A button: submit, image, reset or plain.

    Buttons contribute to a submission only when they are the submitter.
    ``formaction``, ``formmethod`` and ``formenctype`` hold the overrides a
    submit button declares for the form.
    """

    button_value: Optional[str] = None
    label: str = ""
    formaction: Optional[str] = None
    formmethod: Optional[str] = None
    formenctype: Optional[str] = None

    @property
    def value(self) -> Optional[str]:
        return self.button_value

    @property
    def can_submit(self) -> bool:
        """Whether clicking this button submits the form."""
        return self.kind in (FieldKind.SUBMIT, FieldKind.IMAGE)

    def set_value(self, value: Optional[str]) -> None:
        if value is not None and not isinstance(value, str):
            self._reject(f"expected str or None, got {type(value).__name__}")
        self.button_value = value

    def entries(self) -> list[Entry]:
        if self.kind == FieldKind.IMAGE:
            prefix = f"{self.name}." if self.name else ""
            return [(f"{prefix}x", "0"), (f"{prefix}y", "0")]
        if not self.can_submit:
            return []
        return [(self.name, self.button_value or "")]


__all__ = [
    "Field",
    "TextField",
    "CheckboxField",
    "RadioField",
    "RadioGroup",
    "SelectField",
    "SelectOption",
    "FileField",
    "ButtonField",
    "FileEntry",
    "Entry",
    "EntryValue",
]
