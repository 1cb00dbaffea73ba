"""
PDF rendering: page 1 rasterized at scale 1.

The image is sized to the page's viewport (media box in points times
the scale), like a canvas in a browser viewer.
"""

from __future__ import annotations

__all__ = ["render_pdf", "render_pdf_base64"]

import io
import logging

from ...constants import PDF_MAGIC
from ...errors import DocumentError
from .. import require_pikepdf
from ..encoding import base64_to_bytes
from .rendered import KIND_PDF_IMAGE, RenderedDocument

_logger = logging.getLogger(__name__)


def _page_count(data: bytes) -> int:
    pikepdf = require_pikepdf()
    try:
        with pikepdf.open(io.BytesIO(data)) as pdf:
            return len(pdf.pages)
    except pikepdf.PasswordError as e:
        raise DocumentError("PDF is encrypted and cannot be displayed") from e
    except pikepdf.PdfError as e:
        raise DocumentError(f"Invalid PDF: {e}") from e


def render_pdf(data: bytes, *, page_index: int = 0, scale: float = 1.0) -> RenderedDocument:
    """
    Rasterize one page of a PDF to PNG.

    Args:
        data: PDF bytes.
        page_index: 0-based page to render (the viewer shows page 1).
        scale: Pixels per PDF point.

    Raises:
        DocumentError: If *data* is not a readable PDF.
    """
    if not data.startswith(PDF_MAGIC):
        raise DocumentError("Document is not a PDF (missing %PDF header)")
    page_count = _page_count(data)
    if not 0 <= page_index < page_count:
        raise DocumentError(f"PDF has {page_count} page(s); cannot show page {page_index + 1}")

    import pypdfium2 as pdfium

    try:
        pdf = pdfium.PdfDocument(data)
    except pdfium.PdfiumError as e:
        raise DocumentError(f"Cannot render PDF: {e}") from e
    try:
        page = pdf[page_index]
        try:
            image = page.render(scale=scale).to_pil()
        finally:
            page.close()
    except pdfium.PdfiumError as e:
        raise DocumentError(f"Cannot render PDF page {page_index + 1}: {e}") from e
    finally:
        pdf.close()

    buf = io.BytesIO()
    image.save(buf, format="PNG")
    width, height = image.size
    _logger.debug("Rendered PDF page %d at %.1fx: %dx%d px", page_index + 1, scale, width, height)
    return RenderedDocument(
        kind=KIND_PDF_IMAGE,
        content=buf.getvalue(),
        media_type="image/png",
        width=width,
        height=height,
        page_count=page_count,
    )


def render_pdf_base64(data: str) -> RenderedDocument:
    """Decode a Base64 PDF and render its first page.

    Raises:
        DocumentError: If *data* is not Base64 or not a readable PDF.
    """
    try:
        raw = base64_to_bytes("".join(data.split()), "PDF")
    except ValueError as e:
        raise DocumentError(str(e)) from e
    return render_pdf(raw)
