"""
Common CLI helper functions for Brokersign.

File handling and output formatting shared by the CLI commands.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from ..core.models import SignatureFormat

if TYPE_CHECKING:
    from .workflows import FlowResult

__all__ = [
    "atomic_write",
    "default_output_path",
    "default_preview_path",
    "format_size_kb",
    "print_flow_failure",
    "safe_read_file",
]

_BYTES_PER_KB = 1024


def format_size_kb(size_bytes: int) -> str:
    """Format a byte count as a human-readable KB string (e.g. '123.4 KB')."""
    return f"{size_bytes / _BYTES_PER_KB:.1f} KB"


def default_output_path(payload_path: Path, signature_format: SignatureFormat) -> Path:
    """Default path for a signed document: '<stem>_signed.pdf' or '<stem>_signed.xml'."""
    suffix = ".pdf" if signature_format is SignatureFormat.PADES else ".xml"
    return payload_path.with_name(f"{payload_path.stem}_signed{suffix}")


def default_preview_path(payload_path: Path, suffix: str) -> Path:
    """Default path for a rendered document: '<stem>_preview<suffix>'."""
    return payload_path.with_name(f"{payload_path.stem}_preview{suffix}")


def safe_read_file(path: Path, kind: str = "file") -> bytes | None:
    """
    Read a file with uniform error handling.

    Args:
        path: Path to the file to read.
        kind: Descriptive name for error messages (e.g., "payload").

    Returns:
        File contents as bytes, or None if the file doesn't exist or can't be read.
    """
    if not path.exists():
        print(f"Error: {kind} not found: {path}", file=sys.stderr)
        return None

    try:
        return path.read_bytes()
    except OSError as e:
        print(f"Error reading {kind}: {e}", file=sys.stderr)
        return None


def print_flow_failure(result: FlowResult) -> None:
    """Print a failed signing flow to stderr, naming the step that failed."""
    print(f"FAILED at {result.stage}", file=sys.stderr)
    print(f"  {result.error_message}", file=sys.stderr)
    if result.status is not None:
        print(f"  HTTP status: {result.status}", file=sys.stderr)
    if result.retryable:
        print("  The error looks transient; start a new signing flow to retry.", file=sys.stderr)
    if result.output_path is not None:
        print(f"  Signed document was saved: {result.output_path}", file=sys.stderr)
    if result.correlation_id:
        print(f"  Correlation id: {result.correlation_id}", file=sys.stderr)


def atomic_write(path: Path, data: bytes) -> None:
    """Write data to a file atomically using temp file + rename.

    Args:
        path: Target file path.
        data: Bytes to write.
    """
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        os.write(fd, data)
        os.fsync(fd)
        os.close(fd)
        fd = -1
        tmp.replace(path)
    except Exception:
        if fd >= 0:
            os.close(fd)
        tmp.unlink(missing_ok=True)
        raise
