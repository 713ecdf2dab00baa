"""
Detached form snapshots.

A :class:`Form` is built from a ``<form>`` element of a Document and then
lives on its own: mutating it never touches the Document, and the Document
can be released while the Form is still being filled in.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from nobrowser.exceptions import (
    AmbiguousField,
    FieldNotFound,
    InvalidFieldOperation,
)
from nobrowser.forms.fields import ButtonField, FileField, Field, RadioField, RadioGroup
from nobrowser.models import Enctype, FieldKind, FormMethod


def _field_kind(kind: Union[FieldKind, str]) -> Optional[FieldKind]:
    try:
        return FieldKind(kind)
    except ValueError:
        return None


@dataclass(eq=False)
class Form:
    """An HTML form with its controls.

    Attributes:
        action: Absolute URL the form submits to.
        method: Submission method.
        enctype: Body encoding for POST submissions.
        fields: Controls in document order.
        id: The form's ``id`` attribute.
        name: The form's ``name`` attribute.
        accept_charset: Character encoding used for submitted values.

    Example:
        form = doc.form_by_id("search")
        form.input("text", "q").set_value("rust")
        form.input("select-one", "lang").set_value("de")
        page = await session.submit(form)
    """

    action: str
    method: FormMethod = FormMethod.GET
    enctype: Enctype = Enctype.URLENCODED
    fields: list[Field] = field(default_factory=list)
    id: Optional[str] = None
    name: Optional[str] = None
    accept_charset: str = "utf-8"

    def __post_init__(self) -> None:
        self._groups: dict[str, RadioGroup] = {}
        self._link_radio_groups()

    def _link_radio_groups(self) -> None:
        members: dict[str, list[RadioField]] = {}
        for f in self.fields:
            if isinstance(f, RadioField):
                members.setdefault(f.name, []).append(f)
        self._groups = {name: RadioGroup(name, radios) for name, radios in members.items()}

    # Lookup

    def inputs(
        self,
        kind: Optional[Union[FieldKind, str]] = None,
        name: Optional[str] = None,
    ) -> list[Field]:
        """List fields, optionally filtered by kind and/or name."""
        wanted = None
        if kind is not None:
            wanted = _field_kind(kind)
            if wanted is None:
                return []
        return [
            f
            for f in self.fields
            if (wanted is None or f.kind == wanted) and (name is None or f.name == name)
        ]

    def input(
        self,
        kind: Union[FieldKind, str],
        name: str,
        value: Optional[str] = None,
    ) -> Field:
        """Get the single field of a kind and name.

        The returned field is live: mutating it mutates this Form.

        Args:
            kind: Field kind, as a FieldKind or its string value.
            name: Field name.
            value: Markup value distinguishing fields that share kind and
                name (radio buttons, checkboxes, submit buttons).

        Returns:
            The matching field.

        Raises:
            FieldNotFound: If no field matches.
            AmbiguousField: If several fields match and ``value`` is None.
        """
        candidates = self.inputs(kind, name)
        if value is not None:
            candidates = [f for f in candidates if f.matches_value(value)]
        if not candidates:
            raise FieldNotFound(getattr(kind, "value", kind), name, value)
        if len(candidates) > 1:
            raise AmbiguousField(candidates[0].kind.value, name, len(candidates))
        return candidates[0]

    def has_input(self, kind: Union[FieldKind, str], name: str) -> bool:
        """Check whether a field of that kind and name exists."""
        return bool(self.inputs(kind, name))

    def radio_group(self, name: str) -> RadioGroup:
        """Get the radio buttons sharing ``name``.

        Raises:
            FieldNotFound: If the form has no radio with that name.
        """
        group = self._groups.get(name)
        if group is None:
            raise FieldNotFound(FieldKind.RADIO.value, name)
        return group

    def submitter(self, name: str, value: Optional[str] = None) -> ButtonField:
        """Get a submit or image button by name (and value).

        Raises:
            FieldNotFound: If no such button exists.
            AmbiguousField: If several match and ``value`` is None.
        """
        candidates = [
            f
            for f in self.fields
            if isinstance(f, ButtonField) and f.can_submit and f.name == name
        ]
        if value is not None:
            candidates = [f for f in candidates if f.matches_value(value)]
        if not candidates:
            raise FieldNotFound(FieldKind.SUBMIT.value, name, value)
        if len(candidates) > 1:
            raise AmbiguousField(FieldKind.SUBMIT.value, name, len(candidates))
        return candidates[0]

    @property
    def submit_buttons(self) -> list[ButtonField]:
        """Get every button that can submit the form."""
        return [f for f in self.fields if isinstance(f, ButtonField) and f.can_submit]

    @property
    def has_file_fields(self) -> bool:
        """Whether the form contains a file input."""
        return any(isinstance(f, FileField) for f in self.fields)

    # Name-only access

    def get(self, name: str) -> Any:
        """Get the current value of the control(s) named ``name``.

        Radio groups yield the checked member's value; other names yield the
        value of the first non-button field.

        Raises:
            FieldNotFound: If no such field exists.
        """
        if name in self._groups:
            return self._groups[name].value
        for f in self.fields:
            if f.name == name and not f.kind.is_button:
                return f.value
        raise FieldNotFound("any", name)

    def set(self, name: str, value: Any) -> None:
        """Set the value of the control(s) named ``name``.

        A radio group is set by the submit value of the member to check
        (``None`` clears the group). Otherwise exactly one non-button field
        must carry the name.

        Raises:
            FieldNotFound: If no field (or radio with that value) exists.
            AmbiguousField: If several non-radio fields share the name.
            InvalidFieldOperation: If the value does not suit the kind.
        """
        if name in self._groups:
            group = self._groups[name]
            if value is None:
                group.clear()
                return
            if not isinstance(value, str):
                raise InvalidFieldOperation(
                    name, FieldKind.RADIO.value, f"expected str or None, got {type(value).__name__}"
                )
            for member in group.members:
                if member.submit_value == value:
                    member.check()
                    return
            raise FieldNotFound(FieldKind.RADIO.value, name, value)

        candidates = [f for f in self.fields if f.name == name and not f.kind.is_button]
        if not candidates:
            raise FieldNotFound("any", name)
        if len(candidates) > 1:
            raise AmbiguousField(candidates[0].kind.value, name, len(candidates))
        candidates[0].set_value(value)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)

    def copy(self) -> "Form":
        """Return an independent copy of the form and its fields."""
        clone = copy.deepcopy(self)
        clone._link_radio_groups()
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Form):
            return NotImplemented
        return (
            self.action == other.action
            and self.method == other.method
            and self.enctype == other.enctype
            and self.fields == other.fields
            and self.id == other.id
            and self.name == other.name
            and self.accept_charset == other.accept_charset
        )

    def __repr__(self) -> str:
        label = f" #{self.id}" if self.id else ""
        return f"<Form{label} {self.method.value} {self.action} fields={len(self.fields)}>"
