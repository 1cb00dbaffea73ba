"""Tests for brokersign.core.viewer -- rendering DTBS documents."""

from __future__ import annotations

import base64
import io

import lxml.html
import pytest
from PIL import Image

from brokersign.core.models import DocumentFormat, SignatureFormat
from brokersign.core.viewer import render_document
from brokersign.core.viewer.htmlview import embed_html, rewrite_local_anchors
from brokersign.core.viewer.pdf import render_pdf
from brokersign.core.viewer.text import escape_text, plain_text_to_html
from brokersign.core.viewer.xslt import transform_xml
from brokersign.errors import DocumentError

XSL = b"""<?xml version="1.0"?>
<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:output method="html"/>
  <xsl:template match="/">
    <html><body><ul><xsl:for-each select="order/item"><li><xsl:value-of select="."/></li></xsl:for-each></ul></body></html>
  </xsl:template>
</xsl:stylesheet>"""

ORDER = b"<order><item>Apples</item><item>Pears</item></order>"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _srcdoc(page: str) -> str:
    frame = lxml.html.document_fromstring(page).xpath("//iframe")[0]
    return frame.get("srcdoc")


# ── plain text ───────────────────────────────────────────────────────


def test_escape_text_markup_characters():
    assert escape_text("<a href='x'>&\"") == "&#60;a href=&#39;x&#39;&#62;&#38;&#34;"


@pytest.mark.parametrize("char", ["\u00a0", "æ", "€", "\u9999"])
def test_escape_text_unsafe_range(char):
    assert escape_text(char) == f"&#{ord(char)};"


def test_escape_text_leaves_ascii_and_high_cjk():
    assert escape_text("abc 123") == "abc 123"
    assert escape_text("\u99aa") == "\u99aa"


def test_plain_text_line_breaks():
    html = plain_text_to_html("one\r\ntwo\nthree")
    assert html == '<html><body style="font: medium Helvetica">one<br />two<br />three</body></html>'


def test_plain_text_monospace():
    html = plain_text_to_html("a < b", monospace=True)
    assert html == '<html><body><pre style="font: medium Courier">a &#60; b</pre></body></html>'


# ── HTML frame ───────────────────────────────────────────────────────


def test_embed_html_isolates_in_sandboxed_frame():
    page = embed_html("<body>Hi</body>")
    frame = lxml.html.document_fromstring(page).xpath("//iframe")[0]
    assert frame.get("sandbox") == "allow-scripts"
    assert frame.get("srcdoc") == "<body>Hi</body>"


def test_rewrite_local_anchors():
    markup = '<p><a href="#sec2">Go</a></p><a name="sec2">Section 2</a><a href="https://x.example">ext</a>'
    doc = lxml.html.document_fromstring(rewrite_local_anchors(markup))
    local, target, external = doc.xpath("//a")
    assert 'getElementsByName("sec2")' in local.get("onclick")
    assert "return false" in local.get("onclick")
    assert target.get("onclick") is None
    assert external.get("onclick") is None


def test_rewrite_without_local_anchors_is_identity():
    assert rewrite_local_anchors("<body>Hi</body>") == "<body>Hi</body>"


# ── XSLT ─────────────────────────────────────────────────────────────


def test_transform_xml():
    html = transform_xml(ORDER, XSL)
    assert "<li>Apples</li>" in html
    assert "<li>Pears</li>" in html


def test_transform_malformed_document():
    with pytest.raises(DocumentError, match="Error parsing XML"):
        transform_xml(b"<order>", XSL)


def test_transform_malformed_stylesheet():
    with pytest.raises(DocumentError, match="Error parsing XML"):
        transform_xml(ORDER, b"<xsl:stylesheet")


def test_transform_invalid_stylesheet():
    with pytest.raises(DocumentError):
        transform_xml(ORDER, b"<notxsl/>")


def test_transform_apply_error():
    xsl = b"""<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
      <xsl:template match="/"><xsl:message terminate="yes">stop</xsl:message></xsl:template>
    </xsl:stylesheet>"""
    with pytest.raises(DocumentError):
        transform_xml(ORDER, xsl)


def test_transform_cannot_read_files():
    xsl = b"""<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
      <xsl:template match="/"><xsl:copy-of select="document('/etc/passwd')"/></xsl:template>
    </xsl:stylesheet>"""
    with pytest.raises(DocumentError):
        transform_xml(ORDER, xsl)


# ── PDF ──────────────────────────────────────────────────────────────


def test_render_pdf_first_page(valid_pdf_bytes):
    rendered = render_pdf(valid_pdf_bytes)
    assert rendered.kind == "pdf-image"
    assert rendered.media_type == "image/png"
    assert rendered.page_count == 2
    assert (rendered.width, rendered.height) == (612, 792)
    image = Image.open(io.BytesIO(rendered.content))
    assert image.format == "PNG"
    assert image.size == (612, 792)


def test_render_pdf_not_a_pdf():
    with pytest.raises(DocumentError, match="not a PDF"):
        render_pdf(b"hello")


def test_render_pdf_corrupt():
    with pytest.raises(DocumentError):
        render_pdf(b"%PDF-1.7\ngarbage")


# ── render_document ──────────────────────────────────────────────────


def test_render_pades(valid_pdf_bytes):
    rendered = render_document(SignatureFormat.PADES, DocumentFormat.PDF, _b64(valid_pdf_bytes))
    assert rendered.kind == "pdf-image"
    assert rendered.page_count == 2


def test_render_xades_pdf(make_container, valid_pdf_bytes):
    rendered = render_document("XAdES", "PDF", make_container(valid_pdf_bytes))
    assert rendered.kind == "pdf-image"
    assert rendered.width == 612


def test_render_xades_html_in_isolated_frame():
    container = "<SignersDocument><Document>PGJvZHk+SGk8L2JvZHk+</Document></SignersDocument>"
    rendered = render_document("XAdES", "HTML", _b64(container.encode()))
    assert rendered.kind == "html"
    assert rendered.media_type == "text/html"
    assert rendered.source == "<body>Hi</body>"
    assert _srcdoc(rendered.content) == "<body>Hi</body>"


def test_render_xades_xhtml_with_declaration_and_local_anchor(make_container):
    xhtml = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<html><body><a href="#s">go</a><a name="s">Sektion æ</a></body></html>'
    )
    rendered = render_document("XAdES", "HTML", make_container(xhtml))
    srcdoc = _srcdoc(rendered.content).encode("utf-8")
    doc = lxml.html.document_fromstring(srcdoc, parser=lxml.html.HTMLParser(encoding="utf-8"))
    link, target = doc.xpath("//a")
    assert 'getElementsByName("s")' in link.get("onclick")
    assert target.text == "Sektion æ"


def test_render_xades_text(make_container):
    rendered = render_document("XAdES", "TEXT", make_container("Pris: 5 €\nTak"))
    assert rendered.source == (
        '<html><body style="font: medium Helvetica">Pris: 5 &#8364;<br />Tak</body></html>'
    )


@pytest.mark.parametrize("flag", ["true", "TRUE", "True"])
def test_render_xades_text_monospace(make_container, flag):
    rendered = render_document("XAdES", "TEXT", make_container("x", monospace=flag))
    assert '<pre style="font: medium Courier">' in rendered.source


def test_render_xades_text_monospace_false(make_container):
    rendered = render_document("XAdES", "TEXT", make_container("x", monospace="false"))
    assert "Helvetica" in rendered.source


def test_render_xades_xml(make_container):
    rendered = render_document("XAdES", "XML", make_container(ORDER, transformation=XSL))
    assert rendered.kind == "html"
    assert "<li>Apples</li>" in rendered.source
    assert "<li>Apples</li>" in _srcdoc(rendered.content)


def test_render_xades_xml_without_transformation(make_container):
    with pytest.raises(DocumentError, match="no Transformation element"):
        render_document("XAdES", "XML", make_container(ORDER))


def test_render_xades_xml_malformed_document(make_container):
    with pytest.raises(DocumentError, match="Error parsing XML"):
        render_document("XAdES", "XML", make_container(b"<order>", transformation=XSL))


def test_render_xades_missing_document():
    with pytest.raises(DocumentError, match="no Document element"):
        render_document("XAdES", "HTML", _b64(b"<SignersDocument/>"))


def test_render_invalid_dtbs_base64():
    with pytest.raises(DocumentError):
        render_document("PAdES", "PDF", "not base64!")


def test_render_unknown_format():
    with pytest.raises(ValueError, match="signatureFormat"):
        render_document("CAdES", "PDF", "")


def test_write_to(tmp_path, make_container):
    rendered = render_document("XAdES", "TEXT", make_container("hello"))
    path = rendered.write_to(tmp_path / "out.html")
    assert "hello" in path.read_text(encoding="utf-8")
    assert rendered.suffix == ".html"
