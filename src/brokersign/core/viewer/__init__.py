"""
Document viewer -- show the signer's document from a DTBS.

PAdES DTBS are PDFs; XAdES DTBS are XML containers whose ``Document``
element holds the document in the format named by the signature
parameters.  PDFs come out as a PNG of page 1, everything else as an
HTML page embedding the document in an isolated frame.
"""

from __future__ import annotations

__all__ = [
    "RenderedDocument",
    "render_document",
    "render_xades",
]

import logging

from ...errors import DocumentError
from ..models import DocumentFormat, SignatureFormat, parse_enum
from .container import decode_container, element_text, parse_container
from .htmlview import embed_html
from .pdf import render_pdf_base64
from .rendered import KIND_HTML, RenderedDocument
from .text import plain_text_to_html
from .xslt import transform_xml

_logger = logging.getLogger(__name__)

ELEMENT_DOCUMENT = "Document"
ELEMENT_TRANSFORMATION = "Transformation"
ELEMENT_MONOSPACE = "UseMonoSpaceFont"


def _html(markup: str) -> RenderedDocument:
    return RenderedDocument(
        kind=KIND_HTML,
        content=embed_html(markup),
        media_type="text/html",
        source=markup,
    )


def _decoded_text(data: bytes, what: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DocumentError(f"{what} is not UTF-8 text: {e}") from e


def _required(root, name: str, decode: bool = True):
    value = element_text(root, name, decode=decode)
    if value is None:
        raise DocumentError(f"DTBS container has no {name} element")
    return value


def render_xades(document_format: DocumentFormat, container_xml: str) -> RenderedDocument:
    """
    Render the document inside a XAdES DTBS container.

    Args:
        document_format: Format of the embedded document.
        container_xml: The decoded container.

    Raises:
        DocumentError: If the container is malformed or lacks an element
            the format needs.
    """
    root = parse_container(container_xml)

    if document_format is DocumentFormat.PDF:
        return render_pdf_base64(_required(root, ELEMENT_DOCUMENT, decode=False))

    if document_format is DocumentFormat.HTML:
        markup = _decoded_text(_required(root, ELEMENT_DOCUMENT), "HTML document")
        return _html(markup)

    if document_format is DocumentFormat.TEXT:
        text = _decoded_text(_required(root, ELEMENT_DOCUMENT), "Text document")
        monospace = (element_text(root, ELEMENT_MONOSPACE) or "").lower() == "true"
        return _html(plain_text_to_html(text, monospace=monospace))

    if document_format is DocumentFormat.XML:
        document = _required(root, ELEMENT_DOCUMENT)
        stylesheet = _required(root, ELEMENT_TRANSFORMATION)
        return _html(transform_xml(document, stylesheet))

    raise DocumentError(f"Unsupported document format: {document_format}")


def render_document(
    signature_format: SignatureFormat | str,
    document_format: DocumentFormat | str,
    dtbs: str,
) -> RenderedDocument:
    """
    Render a Base64 DTBS for display.

    Args:
        signature_format: ``PAdES`` or ``XAdES``.
        document_format: ``TEXT``, ``HTML``, ``XML`` or ``PDF``.
        dtbs: Base64-encoded Document To Be Signed.

    Raises:
        DocumentError: If the DTBS cannot be decoded or rendered.
        ValueError: If a format name is not recognized.
    """
    sig_format = parse_enum(SignatureFormat, signature_format, "signatureFormat")
    doc_format = parse_enum(DocumentFormat, document_format, "documentFormat")
    _logger.info("Rendering %s DTBS (%s document)", sig_format.value, doc_format.value)

    if sig_format is SignatureFormat.PADES:
        return render_pdf_base64(dtbs)
    return render_xades(doc_format, decode_container(dtbs))
