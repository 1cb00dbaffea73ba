"""Viewing and inspection command handlers for Brokersign CLI."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from ...constants import PDF_MAGIC
from ...core.encoding import bytes_to_base64
from ...core.models import parse_signature_parameters
from ..helpers import default_preview_path, format_size_kb, safe_read_file
from ..workflows import render_payload, save_rendered
from .sign import load_payload


def _read_text(path: Path, kind: str) -> str:
    raw = safe_read_file(path, kind)
    if raw is None:
        sys.exit(1)
    return raw.decode("utf-8", errors="replace").strip()


def _read_document(path: Path) -> str:
    """Bare document as Base64: raw PDF or XML (e.g. a signed result) is encoded."""
    raw = safe_read_file(path, "DTBS")
    if raw is None:
        sys.exit(1)
    head = raw.lstrip()
    if head.startswith((PDF_MAGIC, b"<")):
        return bytes_to_base64(raw)
    return raw.decode("utf-8", errors="replace").strip()


def cmd_view(args: argparse.Namespace) -> None:
    """Render the document of a payload (or a bare Base64 DTBS) to a file.

    With a payload, formats come from its signature parameters unless
    overridden.  A bare DTBS needs both formats on the command line.
    """
    source = Path(args.file)
    signature_format = args.signature_format
    document_format = args.document_format

    if args.dtbs:
        if not signature_format or not document_format:
            print(
                "Error: --dtbs requires --signature-format and --document-format",
                file=sys.stderr,
            )
            sys.exit(1)
        dtbs = _read_document(source)
    else:
        payload = load_payload(source)
        try:
            params = payload.parameters()
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        signature_format = signature_format or params.signature_format
        document_format = document_format or params.document_format
        dtbs = payload.dtbs

    result = render_payload(signature_format, document_format, dtbs)
    if not result.ok or result.rendered is None:
        print(f"Error: {result.error_message}", file=sys.stderr)
        sys.exit(1)

    output = Path(args.output) if args.output else default_preview_path(
        source, result.rendered.suffix
    )
    result = save_rendered(result.rendered, output)
    if not result.ok:
        print(f"Error: {result.error_message}", file=sys.stderr)
        sys.exit(1)

    rendered = result.rendered
    print(f"Rendered {source.name} -> {output} ({format_size_kb(result.output_size)})")
    if rendered is not None and rendered.page_count is not None:
        print(f"  Page 1 of {rendered.page_count}, {rendered.width}x{rendered.height} px")


def cmd_params(args: argparse.Namespace) -> None:
    """Print the decoded signature parameters of a payload or bare JWS."""
    source = Path(args.file)
    if args.jws:
        jws = _read_text(source, "JWS")
    else:
        jws = load_payload(source).signature_parameters

    try:
        params = parse_signature_parameters(jws)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(params.raw, indent=2, ensure_ascii=False))
