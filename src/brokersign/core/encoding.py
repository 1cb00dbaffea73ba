"""
Byte, text and digest conversions used along the signing flow.

The signer SDK speaks in lists of byte values; the signing API speaks
in hex and Base64 strings.  These helpers convert between the two.
"""

from __future__ import annotations

__all__ = [
    "base64_to_bytes",
    "bytes_to_base64",
    "bytes_to_char_string",
    "bytes_to_hex",
    "compute_sha512_digest",
    "encode_saml_assertion",
    "hex_to_bytes",
    "to_utf8_array",
    "truncate",
]

import base64
import binascii
import hashlib
import re
from collections.abc import Iterable

from ..constants import PREVIEW_LENGTH

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def hex_to_bytes(hex_str: str) -> list[int]:
    """Convert a hex string to byte values, two hex characters per byte.

    >>> hex_to_bytes("48656c6c6f")
    [72, 101, 108, 108, 111]

    Raises:
        ValueError: On odd length or non-hex characters.
    """
    if len(hex_str) % 2:
        raise ValueError(f"Hex string has odd length {len(hex_str)}")
    if not _HEX_RE.match(hex_str):
        raise ValueError("Hex string contains non-hex characters")
    return list(bytes.fromhex(hex_str))


def bytes_to_hex(values: Iterable[int]) -> str:
    """Lower-case hex string of byte values."""
    return bytes(values).hex()


def bytes_to_char_string(values: Iterable[int]) -> str:
    """One character per byte value (code points 0-255)."""
    return "".join(chr(n) for n in values)


def bytes_to_base64(values: Iterable[int]) -> str:
    """Base64 of byte values.

    Same result as Base64-encoding :func:`bytes_to_char_string` read as
    Latin-1, which is how the signature leaves the SDK.

    Raises:
        ValueError: If a value is outside 0-255.
    """
    return base64.b64encode(bytes(values)).decode("ascii")


def base64_to_bytes(data: str, what: str = "data") -> bytes:
    """Strictly decode Base64, naming *what* in the error.

    Raises:
        ValueError: If *data* is not valid Base64.
    """
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid Base64 in {what}: {e}") from e


def to_utf8_array(text: str) -> list[int]:
    """UTF-8 encode *text* into byte values.

    Raises:
        UnicodeEncodeError: If *text* contains unpaired surrogates.
    """
    return list(text.encode("utf-8"))


def encode_saml_assertion(sad: str) -> list[int]:
    """Turn the SAD from issue-certificate into the SDK's session argument.

    The SAD is Base64-decoded into a binary string (one character per
    byte) and that string is UTF-8 encoded.  Bytes above 0x7F therefore
    become two-byte sequences; the SDK expects exactly this.
    """
    raw = base64_to_bytes(sad, "SAD")
    return to_utf8_array(raw.decode("latin-1"))


def compute_sha512_digest(value: str | bytes) -> bytes:
    """SHA-512 digest (64 bytes). Text is UTF-8 encoded first."""
    if isinstance(value, str):
        value = value.encode("utf-8")
    return hashlib.sha512(value).digest()


def truncate(text: str | None, length: int = PREVIEW_LENGTH) -> str | None:
    """Shorten *text* to *length* characters, ending in ``...`` when cut."""
    if text and len(text) > length:
        return text[: length - 3] + "..."
    return text
