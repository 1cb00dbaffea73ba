"""
HTML documents: embed in an isolated frame.

The document is placed in the ``srcdoc`` of a sandboxed ``<iframe>`` so
its CSS and scripts cannot affect the surrounding page.  Links to local
anchors (``href="#name"``) would load the whole page inside the frame;
they are rewritten to scroll to the matching ``<a name="...">`` instead.
"""

from __future__ import annotations

__all__ = ["embed_html", "rewrite_local_anchors"]

import html
import json
import logging

import lxml.html
from lxml import etree

from ...errors import DocumentError

_logger = logging.getLogger(__name__)

# Bytes in, so XHTML with an encoding declaration parses too
_UTF8_PARSER = lxml.html.HTMLParser(encoding="utf-8")

_SCROLL_SCRIPT = (
    "var t=document.getElementsByName({name});"
    "if(t.length){{t[0].scrollIntoView();}}return false;"
)

_PAGE_TEMPLATE = (
    "<!DOCTYPE html>\n"
    '<html><head><meta charset="utf-8"><title>{title}</title>'
    "<style>html,body{{margin:0;height:100%}}"
    ".html-viewer-frame{{border:0;width:100%;height:100%}}</style></head>\n"
    '<body><iframe class="html-viewer-frame" sandbox="allow-scripts" '
    'srcdoc="{srcdoc}"></iframe></body></html>\n'
)


def rewrite_local_anchors(markup: str) -> str:
    """
    Make ``<a href="#x">`` scroll to ``<a name="x">`` within the frame.

    Markup without local anchors is returned unchanged.

    Raises:
        DocumentError: If the markup cannot be parsed.
    """
    if 'href="#' not in markup and "href='#" not in markup:
        return markup
    try:
        doc = lxml.html.document_fromstring(markup.encode("utf-8"), parser=_UTF8_PARSER)
    except (etree.ParserError, ValueError) as e:
        raise DocumentError(f"Cannot parse HTML document: {e}") from e

    links = doc.xpath('//a[starts-with(@href, "#")]')
    for link in links:
        name = link.get("href")[1:]
        link.set("onclick", _SCROLL_SCRIPT.format(name=json.dumps(name)))
    _logger.debug("Rewrote %d local anchor link(s)", len(links))
    return lxml.html.tostring(doc, encoding="unicode")


def embed_html(markup: str, title: str = "Document") -> str:
    """Wrap *markup* in a page that shows it inside a sandboxed iframe."""
    return _PAGE_TEMPLATE.format(
        title=html.escape(title),
        srcdoc=html.escape(rewrite_local_anchors(markup), quote=True),
    )
