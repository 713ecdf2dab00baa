"""
Tests for Document parsing and ElementView queries.
"""

import gc
import types

import pytest

from nobrowser.dom import Document, ElementView, sniff_encoding
from nobrowser.exceptions import (
    DocumentReleased,
    FormNotFound,
    InvalidSelector,
    NoMatchingElement,
    NotAForm,
    UnknownQueryParam,
)

PAGE = """
<html>
<head><title> Example page </title></head>
<body>
  <div id="main" class="content wide">
    <p class="intro">Hello <b>world</b></p>
    <p>Second</p>
    <a href="/about">About</a>
    <a href="https://other.test/x">Other</a>
    <a>No href</a>
  </div>
  <div id="side"><p>Side</p></div>
  <form id="login" action="/login"></form>
</body>
</html>
"""


@pytest.fixture
def doc() -> Document:
    return Document.parse(PAGE.encode("utf-8"), "https://example.test/dir/page.html")


class TestDocumentParse:
    """Tests for Document.parse."""

    def test_metadata(self, doc):
        """Test default response metadata."""
        assert doc.url == "https://example.test/dir/page.html"
        assert doc.requested_url == doc.url
        assert doc.redirected is False
        assert doc.history == [doc.url]
        assert doc.status == 200
        assert doc.ok is True
        assert doc.method == "GET"

    def test_title(self, doc):
        """Test the title is stripped."""
        assert doc.title == "Example page"

    def test_malformed_markup(self):
        """Test unclosed and misnested tags still parse."""
        doc = Document.parse(b"<div><p>one<span>two</div><p>three", "https://x.test/")
        assert [p.text for p in doc.select("p")][-1] == "three"

    def test_empty_body(self):
        """Test an empty body gives an empty page instead of failing."""
        doc = Document.parse(b"", "https://x.test/")
        assert list(doc.select("p")) == []
        assert doc.select_first("body").tag == "body"

    def test_str_body(self):
        """Test an already decoded body is accepted."""
        doc = Document.parse("<p>café</p>", "https://x.test/")
        assert doc.select_first("p").text == "café"

    def test_status_kept_for_errors(self):
        """Test 4xx pages are ordinary documents."""
        doc = Document.parse(b"<h1>Gone</h1>", "https://x.test/", status=404)
        assert doc.status == 404
        assert doc.ok is False
        assert doc.select_first("h1").text == "Gone"

    def test_header_lookup(self):
        """Test case-insensitive header access."""
        doc = Document.parse(
            b"", "https://x.test/", headers=[("Content-Type", "text/html"), ("X-Id", "7")]
        )
        assert doc.header("x-id") == "7"
        assert doc.header("missing") is None


class TestEncoding:
    """Tests for charset detection."""

    def test_header_charset(self):
        """Test the Content-Type charset wins."""
        assert sniff_encoding(b"", "text/html; charset=ISO-8859-1") == "iso8859-1"

    def test_meta_charset(self):
        """Test <meta charset> is used when the header has none."""
        body = b'<html><head><meta charset="windows-1252"></head></html>'
        assert sniff_encoding(body, "text/html") == "cp1252"

    def test_unknown_charset_falls_back(self):
        """Test an unknown charset falls back to UTF-8."""
        assert sniff_encoding(b"", "text/html; charset=klingon") == "utf-8"

    def test_decodes_latin1_body(self):
        """Test a latin-1 body is decoded with the header charset."""
        doc = Document.parse(
            "<p>café</p>".encode("latin-1"),
            "https://x.test/",
            headers=[("Content-Type", "text/html; charset=latin-1")],
        )
        assert doc.select_first("p").text == "café"
        assert doc.text == "<p>café</p>"

    @pytest.mark.parametrize(
        "label,codec,word",
        [
            ("EUC-KR", "euc-kr", "안녕"),
            ("ks_c_5601-1987", "euc-kr", "안녕"),
            ("EUC-JP", "euc-jp", "日本語"),
            ("Shift_JIS", "shift_jis", "日本語"),
            ("macintosh", "mac-roman", "café"),
        ],
    )
    def test_charsets_outside_libxml2(self, label, codec, word):
        """Test charsets known to Python but not to the HTML parser."""
        body = f'<meta charset="{label}"><p>{word}</p>'.encode(codec)
        doc = Document.parse(
            body,
            "https://x.test/",
            headers=[("Content-Type", f"text/html; charset={label}")],
        )
        assert doc.select_first("p").text == word
        assert word in doc.text

    def test_meta_only_legacy_charset(self):
        """Test a meta-declared charset is applied without a header."""
        body = '<meta charset="euc-kr"><p>안녕</p>'.encode("euc-kr")
        doc = Document.parse(body, "https://x.test/")
        assert doc.encoding == "euc_kr"
        assert doc.select_first("p").text == "안녕"

    def test_byte_order_mark(self):
        """Test a UTF-8 BOM is not part of the page text."""
        doc = Document.parse(
            b"\xef\xbb\xbf<title>Home</title><p>x</p>",
            "https://x.test/",
            headers=[("Content-Type", "text/html; charset=utf-8-sig")],
        )
        assert doc.title == "Home"
        assert doc.select_first("p").text == "x"

    @pytest.mark.parametrize("label", ["utf-16", "UTF-16LE", "utf-32"])
    def test_wide_meta_label_means_utf8(self, label):
        """Test a UTF-16/32 meta label on an ASCII body is read as UTF-8."""
        body = f'<meta charset="{label}"><p>x</p>'.encode("ascii")
        assert sniff_encoding(body) == "utf-8"
        doc = Document.parse(body, "https://x.test/")
        assert doc.select_first("p").text == "x"


class TestSelectors:
    """Tests for CSS selection."""

    def test_select_is_lazy(self, doc):
        """Test select returns an iterator, not a list."""
        result = doc.select("p")
        assert isinstance(result, types.GeneratorType)
        assert [p.text for p in result] == ["Hello world", "Second", "Side"]

    def test_invalid_selector_raises_at_call(self, doc):
        """Test syntax errors surface before iteration."""
        with pytest.raises(InvalidSelector) as exc_info:
            doc.select("a[")
        assert exc_info.value.selector == "a["

    def test_select_first(self, doc):
        """Test select_first returns the first match."""
        assert doc.select_first("p.intro").text == "Hello world"

    def test_select_first_no_match(self, doc):
        """Test select_first raises when nothing matches."""
        with pytest.raises(NoMatchingElement):
            doc.select_first("table")

    def test_scoped_select(self, doc):
        """Test nested selection only searches the subtree."""
        side = doc.select_first("#side")
        assert [p.text for p in side.select("p")] == ["Side"]

    def test_xpath(self, doc):
        """Test XPath queries return element views."""
        links = doc.xpath("//a[@href]")
        assert [a.text for a in links] == ["About", "Other"]

    def test_invalid_xpath(self, doc):
        """Test malformed XPath raises InvalidSelector."""
        with pytest.raises(InvalidSelector):
            doc.xpath("//a[")


class TestElementView:
    """Tests for ElementView accessors."""

    def test_attributes(self, doc):
        """Test attribute access."""
        main = doc.select_first("#main")
        assert main.tag == "div"
        assert main.id == "main"
        assert main.classes == ["content", "wide"]
        assert main.attribute("class") == "content wide"
        assert main.attribute("missing") is None
        assert main.attribute("missing", "x") == "x"
        assert main["id"] == "main"
        assert main.has_attribute("class")

    def test_inner_and_outer_html(self, doc):
        """Test HTML serialization."""
        intro = doc.select_first("p.intro")
        assert intro.inner_html == "Hello <b>world</b>"
        assert intro.outer_html == '<p class="intro">Hello <b>world</b></p>'

    def test_navigation(self, doc):
        """Test parent and children."""
        intro = doc.select_first("p.intro")
        assert intro.parent.id == "main"
        assert [c.tag for c in intro.children] == ["b"]

    def test_equality(self, doc):
        """Test views of the same element compare equal."""
        assert doc.select_first("#main") == doc.select_first("div")
        assert len({doc.select_first("#main"), doc.select_first("div.content")}) == 1

    def test_document_backref(self, doc):
        """Test the view knows its document."""
        assert doc.select_first("p").document is doc

    def test_document_released(self):
        """Test a view outliving its document cannot reach it."""
        doc = Document.parse(b"<p>kept</p>", "https://x.test/")
        view = doc.select_first("p")
        del doc
        gc.collect()
        assert view.text == "kept"
        with pytest.raises(DocumentReleased):
            view.document

    def test_view_type(self, doc):
        """Test root returns an ElementView of <html>."""
        assert isinstance(doc.root, ElementView)
        assert doc.root.tag == "html"


class TestUrls:
    """Tests for URL handling."""

    def test_links_resolved(self, doc):
        """Test links are absolute."""
        assert doc.links() == ["https://example.test/about", "https://other.test/x"]

    def test_base_href(self):
        """Test <base href> changes the base URL."""
        doc = Document.parse(
            b'<head><base href="/static/"></head><a href="img.png">i</a>',
            "https://x.test/a/b",
        )
        assert doc.base_url == "https://x.test/static/"
        assert doc.links() == ["https://x.test/static/img.png"]

    def test_query_param(self):
        """Test query parameter lookup on the final URL."""
        doc = Document.parse(b"", "https://x.test/r?id=5&empty=")
        assert doc.query_param("id") == "5"
        assert doc.query_param("empty") == ""
        with pytest.raises(UnknownQueryParam):
            doc.query_param("nope")


class TestFormLookup:
    """Tests for locating forms."""

    def test_form_by_id(self, doc):
        """Test lookup by id."""
        assert doc.form_by_id("login").action == "https://example.test/login"

    def test_form_by_id_missing(self, doc):
        """Test a missing id raises FormNotFound."""
        with pytest.raises(FormNotFound):
            doc.form_by_id("nope")

    def test_form_by_id_not_a_form(self, doc):
        """Test an id on a non-form element raises NotAForm."""
        with pytest.raises(NotAForm) as exc_info:
            doc.form_by_id("main")
        assert exc_info.value.tag == "div"

    def test_form_by_selector(self, doc):
        """Test lookup by selector."""
        assert doc.form_by_selector("form#login").id == "login"
        with pytest.raises(FormNotFound):
            doc.form_by_selector("form.none")
        with pytest.raises(NotAForm):
            doc.form_by_selector("#side")

    def test_form_by_index(self, doc):
        """Test lookup by position."""
        assert doc.form(0).id == "login"
        assert len(doc.forms()) == 1
        with pytest.raises(FormNotFound):
            doc.form(1)
