"""
Tests for nobrowser data models.
"""

import pytest

from nobrowser.models import (
    Enctype,
    FieldKind,
    FormMethod,
    RawResponse,
    RequestDescriptor,
    SessionState,
)


class TestEnums:
    """Tests for enum parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, FormMethod.GET),
            ("", FormMethod.GET),
            ("post", FormMethod.POST),
            (" POST ", FormMethod.POST),
            ("dialog", FormMethod.GET),
            ("put", FormMethod.GET),
        ],
    )
    def test_form_method_parse(self, raw, expected):
        """Test method attributes map to GET or POST."""
        assert FormMethod.parse(raw) == expected

    def test_enctype_parse(self):
        """Test enctype attributes map to known encodings."""
        assert Enctype.parse("Multipart/Form-Data") == Enctype.MULTIPART
        assert Enctype.parse("text/plain") == Enctype.URLENCODED
        assert Enctype.parse(None) == Enctype.URLENCODED

    def test_field_kind_groups(self):
        """Test text and button kind groupings."""
        assert FieldKind.PASSWORD.is_text
        assert FieldKind.TEXTAREA.is_text
        assert not FieldKind.CHECKBOX.is_text
        assert FieldKind.IMAGE.is_button
        assert not FieldKind.FILE.is_button

    def test_string_values(self):
        """Test enums compare equal to their markup spelling."""
        assert FieldKind("select-one") == FieldKind.SELECT
        assert FieldKind.SELECT == "select-one"
        assert SessionState.IDLE.value == "idle"


class TestRequestDescriptor:
    """Tests for RequestDescriptor."""

    def test_defaults(self):
        """Test default method and empty headers."""
        request = RequestDescriptor(url="https://x.test/")
        assert request.method == "GET"
        assert request.headers == {}
        assert request.body is None
        assert request.content_type is None

    def test_content_type_lookup(self):
        """Test case-insensitive content type access."""
        request = RequestDescriptor(
            method="POST", url="https://x.test/", headers={"content-type": "text/plain"}
        )
        assert request.content_type == "text/plain"

    def test_frozen(self):
        """Test descriptors are immutable."""
        request = RequestDescriptor(url="https://x.test/")
        with pytest.raises(ValueError):
            request.url = "https://y.test/"


class TestRawResponse:
    """Tests for RawResponse."""

    def test_repeated_headers(self):
        """Test repeated headers are all kept."""
        response = RawResponse(
            status=200,
            url="https://x.test/",
            headers=[("Set-Cookie", "a=1"), ("set-cookie", "b=2"), ("X-One", "1")],
        )
        assert response.header("SET-COOKIE") == "a=1"
        assert response.header_list("Set-Cookie") == ["a=1", "b=2"]
        assert response.header("missing") is None

    @pytest.mark.parametrize("status", [301, 302, 303, 307, 308])
    def test_redirect_statuses(self, status):
        """Test redirect detection needs a Location header."""
        with_location = RawResponse(status=status, url="u", headers=[("Location", "/x")])
        without = RawResponse(status=status, url="u")
        assert with_location.is_redirect
        assert not without.is_redirect

    def test_other_statuses_not_redirects(self):
        """Test 200 and 304 are never followed."""
        assert not RawResponse(status=304, url="u", headers=[("Location", "/x")]).is_redirect
        assert not RawResponse(status=200, url="u", headers=[("Location", "/x")]).is_redirect
