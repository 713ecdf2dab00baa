"""
Tests for form extraction and field mutation.
"""

import pytest

from nobrowser.dom import Document
from nobrowser.exceptions import (
    AmbiguousField,
    FieldNotFound,
    InvalidFieldOperation,
    InvalidOptionValue,
)
from nobrowser.forms import (
    ButtonField,
    CheckboxField,
    Field,
    FileField,
    Form,
    RadioField,
    SelectField,
    TextField,
)
from nobrowser.models import Enctype, FieldKind, FormMethod

PAGE = """
<html><body>
<form id="profile" action="save?draft=1#top" method="POST">
  <input type="text" name="user" value="alice">
  <input type="password" name="pw">
  <input type="weird" name="nick" value="al">
  <input type="checkbox" name="remember" checked>
  <input type="checkbox" name="tags" value="a">
  <input type="checkbox" name="tags" value="b" checked>
  <input type="radio" name="color" value="red" checked>
  <input type="radio" name="color" value="blue" checked>
  <input type="radio" name="color" value="green">
  <select name="size">
    <option>  Small
       size </option>
    <option value="m" selected>Medium</option>
    <option value="l" disabled>Large</option>
  </select>
  <select name="multi" multiple>
    <option value="1" selected>One</option>
    <option value="2">Two</option>
    <optgroup label="More" disabled><option value="3">Three</option></optgroup>
    <option value="4" selected>Four</option>
  </select>
  <select name="first"><option value="x">X</option><option value="y">Y</option></select>
  <textarea name="bio">
Line one
Line two</textarea>
  <input type="text" value="orphan">
  <input type="text" name="off" value="x" disabled>
  <fieldset disabled>
    <legend><input type="text" name="in_legend" value="l"></legend>
    <input type="text" name="fenced" value="f">
  </fieldset>
  <input type="text" name="elsewhere" value="e" form="other">
  <button name="save" value="s">Save it</button>
  <button type="button" name="noop">Noop</button>
  <button type="reset" name="clear">Clear</button>
  <input type="submit" name="go" value="Go">
  <input type="image" name="pic" src="go.png" alt="Go!">
</form>
<input type="hidden" name="outside" value="o" form="profile">
<form id="other" action=""></form>
<form id="upload" action="/up">
  <input type="file" name="doc">
</form>
</body></html>
"""

URL = "https://example.test/app/page"


@pytest.fixture
def doc() -> Document:
    return Document.parse(PAGE.encode("utf-8"), URL)


@pytest.fixture
def form(doc) -> Form:
    return doc.form_by_id("profile")


class TestExtraction:
    """Tests for building Forms from markup."""

    def test_form_attributes(self, form):
        """Test action, method and enctype."""
        assert form.action == "https://example.test/app/save?draft=1#top"
        assert form.method == FormMethod.POST
        assert form.enctype == Enctype.URLENCODED
        assert form.id == "profile"
        assert form.accept_charset == "utf-8"

    def test_field_order(self, form):
        """Test fields appear in document order, including associated controls."""
        names = [f.name for f in form.fields]
        assert names == [
            "user", "pw", "nick", "remember", "tags", "tags",
            "color", "color", "color", "size", "multi", "first", "bio",
            "", "off", "in_legend", "fenced",
            "save", "noop", "clear", "go", "pic", "outside",
        ]

    def test_control_owned_by_other_form_skipped(self, doc, form):
        """Test a nested control naming another form belongs to that form."""
        assert "elsewhere" not in form
        assert [f.name for f in doc.form_by_id("other").fields] == ["elsewhere"]

    def test_unknown_type_is_text(self, form):
        """Test unknown input types behave as text."""
        nick = form.input(FieldKind.TEXT, "nick")
        assert isinstance(nick, TextField)
        assert nick.value == "al"

    def test_missing_value_is_empty(self, form):
        """Test a text input without value submits an empty string."""
        assert form.input("password", "pw").value == ""

    def test_checkbox_defaults(self, form):
        """Test checked state and default value."""
        remember = form.input("checkbox", "remember")
        assert isinstance(remember, CheckboxField)
        assert remember.value is True
        assert remember.submit_value == "on"
        assert form.input("checkbox", "tags", "a").value is False

    def test_radio_last_checked_wins(self, form):
        """Test several checked radios normalize to the last one."""
        assert form.get("color") == "blue"
        assert form.input("radio", "color", "red").value is False

    def test_select_defaults(self, form):
        """Test option values and initial selection."""
        size = form.input("select-one", "size")
        assert isinstance(size, SelectField)
        assert size.value == "m"
        assert size.options[0].value == "Small size"
        assert size.options[0].label == "Small size"
        assert size.options[2].disabled is True
        assert size.selected_indices == [1]

    def test_select_without_selection_uses_first(self, form):
        """Test a single select with no selected option picks the first."""
        assert form.get("first") == "x"

    def test_multi_select(self, form):
        """Test every selected option is kept and optgroup disables."""
        multi = form.input("select-multiple", "multi")
        assert multi.value == ["1", "4"]
        assert multi.options[2].disabled is True

    def test_textarea(self, form):
        """Test one leading newline is dropped."""
        assert form.get("bio") == "Line one\nLine two"

    def test_unnamed_not_submittable(self, form):
        """Test unnamed controls are kept but flagged."""
        orphan = form.fields[13]
        assert orphan.value == "orphan"
        assert orphan.submittable is False

    def test_disabled(self, form):
        """Test disabled and fieldset-disabled controls."""
        assert form.input("text", "off").disabled is True
        assert form.input("text", "fenced").disabled is True
        assert form.input("text", "in_legend").disabled is False

    def test_buttons(self, form):
        """Test button kinds, labels and values."""
        save = form.input("submit", "save")
        assert isinstance(save, ButtonField)
        assert save.value == "s"
        assert save.label == "Save it"
        assert form.input("button", "noop").can_submit is False
        assert form.input("reset", "clear").can_submit is False
        assert form.input("image", "pic").label == "Go!"
        assert [b.name for b in form.submit_buttons] == ["save", "go", "pic"]

    def test_empty_action_uses_document_url(self, doc):
        """Test an empty action submits back to the page."""
        assert doc.form_by_id("other").action == URL
        assert doc.form_by_id("other").method == FormMethod.GET

    def test_file_input_forces_multipart(self, doc):
        """Test file inputs switch the enctype."""
        upload = doc.form_by_id("upload")
        assert upload.enctype == Enctype.MULTIPART
        assert isinstance(upload.input("file", "doc"), FileField)
        assert upload.input("file", "doc").value is None

    def test_extraction_is_deterministic(self, doc):
        """Test extracting twice yields equal, independent forms."""
        first = doc.form_by_id("profile")
        second = doc.form_by_id("profile")
        assert first == second

        first.input("text", "user").set_value("bob")
        assert first != second
        assert doc.form_by_id("profile").get("user") == "alice"

    def test_form_does_not_alias_document(self, doc):
        """Test mutating a form leaves the markup untouched."""
        doc.form_by_id("profile").input("text", "user").set_value("mallory")
        assert doc.select_first("input[name=user]").attribute("value") == "alice"


class TestLookup:
    """Tests for Form.input and friends."""

    def test_missing_field(self, form):
        """Test unknown kind/name raises FieldNotFound."""
        with pytest.raises(FieldNotFound):
            form.input("text", "nope")
        with pytest.raises(FieldNotFound):
            form.input("checkbox", "user")

    def test_unknown_kind(self, form):
        """Test a kind that names no control type is a missing field."""
        with pytest.raises(FieldNotFound) as exc_info:
            form.input("select", "size")
        assert exc_info.value.kind == "select"
        assert exc_info.value.name == "size"
        assert form.inputs("dropdown") == []
        assert form.has_input("select", "size") is False
        assert form.has_input(FieldKind.SELECT, "size") is True

    def test_ambiguous_field(self, form):
        """Test shared kind and name needs a value."""
        with pytest.raises(AmbiguousField) as exc_info:
            form.input("radio", "color")
        assert exc_info.value.count == 3

    def test_disambiguate_by_value(self, form):
        """Test value picks one of several fields."""
        assert form.input("radio", "color", "green").submit_value == "green"
        with pytest.raises(FieldNotFound):
            form.input("radio", "color", "purple")

    def test_inputs_filter(self, form):
        """Test listing fields by kind."""
        assert len(form.inputs("checkbox")) == 3
        assert len(form.inputs(name="tags")) == 2

    def test_get_unknown_name(self, form):
        """Test get on a missing name raises."""
        with pytest.raises(FieldNotFound):
            form.get("nope")


class TestMutation:
    """Tests for setting field values."""

    def test_base_field_is_abstract(self):
        """Test only concrete kinds can be built."""
        with pytest.raises(TypeError):
            Field(name="x", kind=FieldKind.TEXT)
        assert isinstance(TextField(name="x", kind=FieldKind.TEXT), Field)

    def test_set_text(self, form):
        """Test free text, empty and absent values."""
        user = form.input("text", "user")
        user.set_value("bob")
        assert form["user"] == "bob"
        user.set_value("")
        assert user.value == ""
        user.set_value(None)
        assert user.value is None

    def test_text_rejects_non_string(self, form):
        """Test type mismatch raises InvalidFieldOperation."""
        with pytest.raises(InvalidFieldOperation):
            form.input("text", "user").set_value(5)

    def test_checkbox(self, form):
        """Test checking and unchecking."""
        tag = form.input("checkbox", "tags", "a")
        tag.check()
        assert tag.value is True
        tag.set_value(False)
        assert tag.value is False
        with pytest.raises(InvalidFieldOperation):
            tag.set_value("on")

    def test_radio_exclusive(self, form):
        """Test checking a radio clears its siblings."""
        form.input("radio", "color", "green").set_value(True)
        values = [r.value for r in form.inputs("radio", "color")]
        assert values == [False, False, True]
        assert form.radio_group("color").value == "green"

    def test_radio_set_by_name(self, form):
        """Test Form.set addresses a group by value."""
        form.set("color", "red")
        assert form.get("color") == "red"
        form["color"] = None
        assert form.get("color") is None
        with pytest.raises(FieldNotFound):
            form.set("color", "purple")

    def test_select_valid(self, form):
        """Test selecting a declared option."""
        size = form.input("select-one", "size")
        size.set_value("Small size")
        assert size.value == "Small size"
        assert size.selected_indices == [0]

    def test_select_invalid(self, form):
        """Test undeclared and disabled options are rejected."""
        size = form.input("select-one", "size")
        with pytest.raises(InvalidOptionValue) as exc_info:
            size.set_value("xl")
        assert exc_info.value.choices == ["Small size", "m"]
        with pytest.raises(InvalidOptionValue):
            size.set_value("l")
        assert size.value == "m"

    def test_select_by_index(self, form):
        """Test choosing an option by position."""
        size = form.input("select-one", "size")
        size.select_index(0)
        assert size.value == "Small size"
        with pytest.raises(InvalidOptionValue):
            size.select_index(9)

    def test_multi_select(self, form):
        """Test lists, single values and clearing."""
        multi = form.input("select-multiple", "multi")
        multi.set_value(["2", "1"])
        assert multi.value == ["1", "2"]
        multi.set_value("4")
        assert multi.value == ["4"]
        multi.set_value([])
        assert multi.value == []
        multi.select_index(1)
        assert multi.value == ["2"]
        multi.deselect("2")
        assert multi.value == []

    def test_single_select_cannot_deselect(self, form):
        """Test a single select keeps a selection."""
        with pytest.raises(InvalidFieldOperation):
            form.input("select-one", "size").deselect("m")

    def test_kind_mismatched_operations(self, form):
        """Test operations reserved for other kinds raise."""
        user = form.input("text", "user")
        with pytest.raises(InvalidFieldOperation):
            user.check()
        with pytest.raises(InvalidFieldOperation):
            user.select_index(0)
        with pytest.raises(InvalidFieldOperation):
            user.attach(b"data", "f.txt")

    def test_set_ambiguous_name(self, form):
        """Test Form.set refuses names shared by several non-radio fields."""
        with pytest.raises(AmbiguousField):
            form.set("tags", True)

    def test_file_attach(self, doc):
        """Test binding content to a file field."""
        upload = doc.form_by_id("upload")
        field = upload.input("file", "doc")
        field.attach("hello", "notes.txt")
        assert field.value == "notes.txt"
        assert field.content == b"hello"
        field.set_value("other.txt")
        assert field.content is None

    def test_file_attach_from_disk(self, doc, tmp_path):
        """Test attaching a file read from disk."""
        path = tmp_path / "report.csv"
        path.write_bytes(b"a,b\n")
        field = doc.form_by_id("upload").input("file", "doc")
        field.attach_file(path)
        assert field.value == "report.csv"
        assert field.content == b"a,b\n"


class TestCopy:
    """Tests for Form.copy."""

    def test_copy_is_independent(self, form):
        """Test copies share no field state."""
        clone = form.copy()
        clone.input("text", "user").set_value("bob")
        assert form.get("user") == "alice"
        assert clone != form
        assert form.copy() == form

    def test_copy_keeps_radio_groups(self, form):
        """Test radio groups are rebuilt inside the copy."""
        clone = form.copy()
        clone.input("radio", "color", "red").check()
        assert clone.get("color") == "red"
        assert form.get("color") == "blue"

    def test_manual_form(self):
        """Test Forms can be built directly."""
        form = Form(
            action="https://x.test/",
            fields=[
                RadioField("r", FieldKind.RADIO, checked=True, submit_value="1"),
                RadioField("r", FieldKind.RADIO, checked=True, submit_value="2"),
            ],
        )
        assert form.get("r") == "2"
