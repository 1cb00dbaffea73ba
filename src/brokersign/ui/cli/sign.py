"""Signing command handler for Brokersign CLI."""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path
from typing import Any

from ...config import get_client_config
from ...core.models import SignatureProfile, SigningPayload, parse_enum
from ...errors import BrokerSignError
from ...network import SignerSDKFactory
from ..helpers import (
    default_output_path,
    default_preview_path,
    format_size_kb,
    print_flow_failure,
    safe_read_file,
)
from ..workflows import run_signing_flow


def load_sdk_factory(spec: str) -> SignerSDKFactory:
    """Import an SDK factory given as ``module:attribute``.

    Raises:
        BrokerSignError: If the module or attribute cannot be loaded.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise BrokerSignError(f"SDK factory must be given as module:attribute, got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise BrokerSignError(f"Cannot import SDK module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise BrokerSignError(f"{spec!r} is not a callable SDK factory")
    return factory


def load_payload(path: Path) -> SigningPayload:
    """Read a signing payload JSON file, exiting on failure."""
    raw = safe_read_file(path, "payload")
    if raw is None:
        sys.exit(1)
    try:
        return SigningPayload.from_json(raw)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _load_saml(path_str: str | None) -> dict[str, Any] | None:
    if path_str is None:
        return None
    raw = safe_read_file(Path(path_str), "SAML assertion")
    if raw is None:
        sys.exit(1)
    try:
        data = json.loads(raw)
    except ValueError as e:
        print(f"Error: SAML assertion file is not JSON: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print("Error: SAML assertion file must hold a JSON object", file=sys.stderr)
        sys.exit(1)
    return data


def cmd_sign(args: argparse.Namespace) -> None:
    """Run a complete signing flow for one payload."""
    payload_path = Path(args.payload)
    payload = load_payload(payload_path)

    try:
        params = payload.parameters()
        profile = parse_enum(SignatureProfile, args.profile, "profile")
        config = get_client_config(
            args.url,
            timeout=args.timeout,
            origin=args.origin,
            mock_environment=True if args.mock else None,
        )
        factory = load_sdk_factory(args.sdk)
    except (BrokerSignError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    saml_payload = _load_saml(args.saml)
    output_path = Path(args.output) if args.output else default_output_path(
        payload_path, params.signature_format
    )

    print(
        f"Signing {payload_path.name} as {params.signature_format.value}-{profile.value} "
        f"({params.document_format.value}) via {config.signing_api_url}..."
    )
    if params.reference_text:
        print(f"  Reference: {params.reference_text}")

    result = run_signing_flow(
        payload,
        factory,
        config,
        profile=profile,
        saml_payload=saml_payload,
        output_path=output_path,
        preview=args.preview is not None,
        view_result=args.view_result is not None,
    )

    if not result.ok:
        print_flow_failure(result)
        sys.exit(1)

    if result.rendered is not None:
        preview_path = Path(args.preview) if args.preview else default_preview_path(
            payload_path, result.rendered.suffix
        )
        result.rendered.write_to(preview_path)
        print(f"  Preview: {preview_path}")

    if result.rendered_result is not None:
        view_path = Path(args.view_result) if args.view_result else default_preview_path(
            output_path, result.rendered_result.suffix
        )
        result.rendered_result.write_to(view_path)
        print(f"  Signed document view: {view_path}")

    print(f"  Signed: {result.output_path} ({format_size_kb(result.output_size)})")
    print(f"  Correlation id: {result.correlation_id}")
