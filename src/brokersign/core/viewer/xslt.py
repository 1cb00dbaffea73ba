"""
XML documents: apply the container's XSLT and serialize the result.

Both the document and the stylesheet come from the signer's DTBS, so
parsing never resolves entities, loads DTDs or touches the network,
and the stylesheet may not read or write files.
"""

from __future__ import annotations

__all__ = ["transform_xml"]

import logging

from lxml import etree

from ...errors import DocumentError

_logger = logging.getLogger(__name__)


def _safe_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
    )


def _parse(data: bytes, what: str) -> etree._ElementTree:
    try:
        return etree.ElementTree(etree.fromstring(data, parser=_safe_parser()))
    except etree.XMLSyntaxError as e:
        _logger.warning("Error parsing XML %s: %s", what, e)
        raise DocumentError(f"Error parsing XML ({what}): {e}") from e


def transform_xml(document: bytes, stylesheet: bytes) -> str:
    """
    Transform *document* with *stylesheet* and return the output as text.

    Raises:
        DocumentError: If either input is not well-formed XML, or the
            stylesheet is invalid or fails to apply.
    """
    doc = _parse(document, "document")
    xsl = _parse(stylesheet, "transformation")
    try:
        transform = etree.XSLT(xsl, access_control=etree.XSLTAccessControl.DENY_ALL)
        result = transform(doc)
    except (etree.XSLTParseError, etree.XSLTApplyError) as e:
        _logger.warning("XSLT failed: %s", e)
        raise DocumentError(f"Error parsing XML (transformation): {e}") from e
    output = str(result)
    _logger.debug("XSLT produced %d characters", len(output))
    return output
