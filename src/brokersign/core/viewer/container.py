"""
Element lookup in a XAdES DTBS container.

The container wraps the signer's document in a ``Document`` element
(Base64), optionally with a ``Transformation`` stylesheet (Base64) and
a ``UseMonoSpaceFont`` flag.  Two ways to get at them:

- :func:`find_element` / :func:`element_text` parse the container as a
  tree and match elements by local name, ignoring namespace prefixes.
  The viewer uses these.
- :func:`extract_xml_element` is the older first-open/first-close
  regular expression scan.  It does not understand nesting, and a name
  also matches longer tag names sharing the prefix (``Document`` matches
  ``<DocumentFormat>``).
"""

from __future__ import annotations

__all__ = [
    "decode_container",
    "element_text",
    "extract_xml_element",
    "find_element",
    "parse_container",
]

import logging
import re
from xml.etree.ElementTree import Element
from xml.etree.ElementTree import ParseError as _XMLParseError

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from ...errors import DocumentError
from ..encoding import base64_to_bytes, truncate

_logger = logging.getLogger(__name__)


def _strip_namespace(tag: str) -> str:
    """Strip XML namespace from a tag name."""
    return tag.split("}")[-1] if "}" in tag else tag


def decode_container(dtbs: str) -> str:
    """Base64-decode a XAdES DTBS into its XML text (UTF-8).

    Raises:
        DocumentError: If *dtbs* is not Base64 or not UTF-8.
    """
    try:
        return base64_to_bytes(dtbs, "DTBS").decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise DocumentError(f"Cannot decode DTBS container: {e}") from e


# ── Regular expression scan ──────────────────────────────────────────


def extract_xml_element(
    xml: str, name: str, content: bool = True, decode: bool = False
) -> str | bytes | None:
    """
    Cut an element out of *xml* by scanning for its tags.

    Finds the first ``<name ...>`` (any namespace prefix) and the first
    ``</name>`` and returns what lies between them, or the whole element
    including both tags if *content* is false.

    Args:
        xml: Container text.
        name: Element name without prefix.
        content: Return only the inner text.
        decode: Base64-decode the result.

    Returns:
        The substring (bytes if *decode*), or None if either tag is missing.

    Raises:
        ValueError: If *decode* is set and the text is not Base64.
    """
    escaped = re.escape(name)
    start = re.search(rf"<(\w+:)?{escaped}[^>]*>", xml)
    end = re.search(rf"</(\w+:)?{escaped}>", xml)
    if start is None or end is None:
        return None
    if content:
        result = xml[start.end() : end.start()]
    else:
        result = xml[start.start() : end.end()]
    if decode:
        return base64_to_bytes("".join(result.split()), name)
    return result


# ── Tree lookup ──────────────────────────────────────────────────────


def parse_container(xml: str | bytes) -> Element:
    """Parse container XML (defusedxml).

    Raises:
        DocumentError: If *xml* is not well-formed.
    """
    try:
        return ET.fromstring(xml)
    except (_XMLParseError, DefusedXmlException) as e:
        preview = xml if isinstance(xml, str) else xml.decode("utf-8", errors="replace")
        _logger.debug("Unparsable container: %s", truncate(preview))
        raise DocumentError(f"Error parsing XML: {e}") from e


def find_element(xml: str | bytes | Element, name: str) -> Element | None:
    """
    First element (document order, root included) whose local name is *name*.

    Raises:
        DocumentError: If *xml* is not well-formed.
    """
    root = xml if isinstance(xml, Element) else parse_container(xml)
    for elem in root.iter():
        if isinstance(elem.tag, str) and _strip_namespace(elem.tag) == name:
            return elem
    return None


def element_text(
    xml: str | bytes | Element, name: str, decode: bool = False
) -> str | bytes | None:
    """
    Text of the first element named *name*, stripped; optionally Base64-decoded.

    Returns None if there is no such element.

    Raises:
        DocumentError: If *xml* is not well-formed or the text is not Base64.
    """
    elem = find_element(xml, name)
    if elem is None:
        return None
    text = "".join(elem.itertext()).strip()
    if not decode:
        return text
    try:
        return base64_to_bytes("".join(text.split()), name)
    except ValueError as e:
        raise DocumentError(str(e)) from e
