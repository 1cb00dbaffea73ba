"""Plain-text documents as HTML, in the fonts used for PAdES rendering."""

from __future__ import annotations

__all__ = ["escape_text", "plain_text_to_html"]

import re

_UNSAFE_RE = re.compile(r"[\u00a0-\u9999<>&'\"]")
_NEWLINE_RE = re.compile(r"\r?\n")


def escape_text(text: str) -> str:
    """Replace markup characters and U+00A0..U+9999 with numeric entities.

    >>> escape_text("a<b & æ")
    'a&#60;b &#38; &#230;'
    """
    return _UNSAFE_RE.sub(lambda m: f"&#{ord(m.group())};", text)


def plain_text_to_html(text: str, monospace: bool = False) -> str:
    """Escape *text*, turn line breaks into ``<br />`` and wrap it in a page."""
    body = "<br />".join(_NEWLINE_RE.split(escape_text(text)))
    if monospace:
        return f'<html><body><pre style="font: medium Courier">{body}</pre></body></html>'
    return f'<html><body style="font: medium Helvetica">{body}</body></html>'
