"""Rendered signer's document, as produced by the viewer."""

from __future__ import annotations

__all__ = ["RenderedDocument"]

import logging
from dataclasses import dataclass
from pathlib import Path

_logger = logging.getLogger(__name__)

KIND_PDF_IMAGE = "pdf-image"
KIND_HTML = "html"


@dataclass(frozen=True)
class RenderedDocument:
    """A document ready for display.

    Attributes:
        kind: ``"pdf-image"`` (PNG of page 1) or ``"html"`` (a page
            embedding the document in an isolated frame).
        content: PNG bytes or HTML text, depending on *kind*.
        media_type: ``image/png`` or ``text/html``.
        width: Image width in pixels (PDF only).
        height: Image height in pixels (PDF only).
        page_count: Number of pages in the PDF (PDF only).
        source: The document as extracted from the DTBS, before
            framing (HTML only).
    """

    kind: str
    content: bytes | str
    media_type: str
    width: int | None = None
    height: int | None = None
    page_count: int | None = None
    source: str | None = None

    @property
    def suffix(self) -> str:
        """File extension matching *media_type*."""
        return ".png" if self.kind == KIND_PDF_IMAGE else ".html"

    def to_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")

    def write_to(self, path: str | Path) -> Path:
        """Write the rendered content to *path* and return it."""
        target = Path(path)
        target.write_bytes(self.to_bytes())
        _logger.info("Wrote %s document to %s", self.kind, target)
        return target
