"""
Command-line interface for Brokersign.

Argument parsing, dispatch, and configuration subcommands.
Signing lives in ``sign``, viewing and inspection in ``view``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ...config import CONFIG_FILE, ClientConfig, get_client_config, reset_config, save_client_config
from ...constants import (
    DEFAULT_TIMEOUT_HTTP,
    ENV_MOCK,
    ENV_ORIGIN,
    ENV_TIMEOUT,
    ENV_URL,
    __version__,
)
from ...errors import BrokerSignError
from .sign import cmd_sign
from .view import cmd_params, cmd_view

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(verbosity: int) -> None:
    """-v shows flow milestones, -vv adds wire detail."""
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


def _cmd_config(args: argparse.Namespace) -> None:
    """Show or update the saved client configuration."""
    changing = any(
        value is not None for value in (args.url, args.origin, args.timeout, args.mock)
    )
    try:
        current = get_client_config()
    except BrokerSignError:
        current = None

    if not changing:
        if current is None:
            print("No signing API configured.")
            print(f"Run 'brokersign config --url URL' or set {ENV_URL}.")
            return
        print(f"Config file:     {CONFIG_FILE}")
        print(f"Signing API:     {current.signing_api_url}")
        print(f"Broker origin:   {current.broker_origin}")
        print(f"Timeout:         {current.timeout}s")
        print(f"Mock environment: {'yes' if current.mock_environment else 'no'}")
        return

    url = args.url or (current.signing_api_url if current else None)
    if not url:
        print("Error: --url is required for the first configuration", file=sys.stderr)
        sys.exit(1)
    try:
        updated = ClientConfig(
            signing_api_url=url,
            timeout=args.timeout
            if args.timeout is not None
            else (current.timeout if current else DEFAULT_TIMEOUT_HTTP),
            origin=args.origin if args.origin is not None else (current.origin if current else None),
            mock_environment=args.mock
            if args.mock is not None
            else (current.mock_environment if current else False),
        )
        save_client_config(updated)
    except (BrokerSignError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Configuration saved to {CONFIG_FILE}")


def _cmd_reset() -> None:
    """Clear all saved configuration."""
    reset_config()
    print("All configuration cleared.")
    print("Run 'brokersign config --url URL' to reconfigure.")


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--url", default=None, help="Signing API base URL")
    parser.add_argument(
        "--origin",
        default=None,
        help="Broker origin hosting the signer forwarder (default: scheme and host of --url)",
    )
    parser.add_argument("--timeout", type=int, default=None, help="HTTP timeout in seconds")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="brokersign",
        description="Signing client for a NemLog-In signing broker.",
        epilog=(
            "Environment variables:\n"
            f"  {ENV_URL}      Signing API base URL\n"
            f"  {ENV_ORIGIN}   Broker origin for the signer forwarder\n"
            f"  {ENV_TIMEOUT}  Timeout in seconds (default: {DEFAULT_TIMEOUT_HTTP})\n"
            f"  {ENV_MOCK}     Set to 'true' when talking to the broker mock\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"brokersign {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log flow progress (-v) or wire detail (-vv) to stderr",
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # sign
    p_sign = sub.add_parser("sign", help="Run a signing flow for a payload")
    p_sign.add_argument(
        "payload", help="Payload JSON with 'signatureParameters' (JWS) and 'dtbs' (Base64)"
    )
    p_sign.add_argument(
        "--sdk",
        required=True,
        help="Signer SDK factory as module:attribute, called with (forwarder_url, timeout_ms)",
    )
    p_sign.add_argument(
        "--profile",
        default="LTV",
        choices=["LTV", "LTA", "ltv", "lta"],
        help="Signature profile (default: LTV)",
    )
    p_sign.add_argument(
        "--saml",
        default=None,
        help="JSON file with the issue-certificate body (default: fetched from the mock)",
    )
    p_sign.add_argument(
        "--mock",
        action="store_true",
        default=False,
        help="Talk to the broker mock (fetches the SAML assertion from it)",
    )
    p_sign.add_argument("-o", "--output", help="Output file for the signed document")
    p_sign.add_argument(
        "--preview",
        nargs="?",
        const="",
        default=None,
        help="Also render the document before signing (optional output path)",
    )
    p_sign.add_argument(
        "--view-result",
        nargs="?",
        const="",
        default=None,
        help="Render the signed document after signing (optional output path)",
    )
    _add_connection_args(p_sign)

    # view
    p_view = sub.add_parser("view", help="Render the document of a payload to PNG or HTML")
    p_view.add_argument(
        "file",
        help="Payload JSON, or with --dtbs a Base64 DTBS or a raw PDF/XML document",
    )
    p_view.add_argument("-o", "--output", help="Output file (default: <stem>_preview.png/.html)")
    p_view.add_argument(
        "--dtbs",
        action="store_true",
        default=False,
        help="FILE holds a bare document (Base64, or raw such as a signed result)",
    )
    p_view.add_argument("--signature-format", default=None, help="PAdES or XAdES")
    p_view.add_argument("--document-format", default=None, help="TEXT, HTML, XML or PDF")

    # params
    p_params = sub.add_parser("params", help="Show decoded signature parameters")
    p_params.add_argument("file", help="Payload JSON (or a JWS with --jws)")
    p_params.add_argument(
        "--jws", action="store_true", default=False, help="FILE holds a bare JWS"
    )

    # config
    p_config = sub.add_parser("config", help="Show or update the saved configuration")
    _add_connection_args(p_config)
    mock_group = p_config.add_mutually_exclusive_group()
    mock_group.add_argument(
        "--mock", dest="mock", action="store_true", default=None, help="Enable the mock environment"
    )
    mock_group.add_argument(
        "--no-mock", dest="mock", action="store_false", help="Disable the mock environment"
    )

    # reset
    sub.add_parser("reset", help="Clear all saved configuration")

    args = parser.parse_args()
    _configure_logging(args.verbose)

    if args.command == "sign":
        cmd_sign(args)
    elif args.command == "view":
        cmd_view(args)
    elif args.command == "params":
        cmd_params(args)
    elif args.command == "config":
        _cmd_config(args)
    elif args.command == "reset":
        _cmd_reset()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
