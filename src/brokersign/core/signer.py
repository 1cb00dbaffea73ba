"""
Signer SDK adapter -- produce the signature value for a signing flow.

Takes the issue-certificate response (hex digest + SAD), opens a
session on the remote signing device through the vendor SDK, signs
the digest with the first key of the first policy and returns the
signature Base64-encoded.  The SDK session is always logged off and
freed, whatever happens in between.
"""

from __future__ import annotations

__all__ = ["create_signature_value", "forwarder_url", "signer_session"]

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from ..constants import PATH_SIGNER_FORWARDER
from ..errors import SignerError
from .encoding import bytes_to_base64, encode_saml_assertion, hex_to_bytes
from .models import SignatureValue

if TYPE_CHECKING:
    from ..network.protocol import KeyEntry, PolicyEntry, SignerSDK
    from .models import IssueCertificateResponse

_logger = logging.getLogger(__name__)


def forwarder_url(origin: str, session_id: str, correlation_id: str) -> str:
    """Signer forwarder URL the SDK talks to, scoped to one flow.

    >>> forwarder_url("https://broker.example", "s 1", "c1")
    'https://broker.example/signer-forwarder?sessionId=s%201&correlationId=c1'
    """
    query = urlencode(
        {"sessionId": session_id, "correlationId": correlation_id},
        safe="!~*'()",
        quote_via=quote,
    )
    return f"{origin.rstrip('/')}{PATH_SIGNER_FORWARDER}?{query}"


def _release(sdk: SignerSDK) -> None:
    """Log off and free the SDK. Failures are logged, not raised."""
    try:
        sdk.logoff()
    except Exception:
        _logger.warning("Signer SDK logoff failed", exc_info=True)
    try:
        sdk.free()
    except Exception:
        _logger.warning("Signer SDK free failed", exc_info=True)


@contextmanager
def signer_session(sdk: SignerSDK, saml_assertion: list[int]) -> Iterator[Sequence[PolicyEntry]]:
    """Open an SDK signing session and yield its policies.

    The SDK is initialized first.  On exit (normal or not) the session
    is logged off and the SDK freed.

    Raises:
        SignerError: If initialization or session creation fails.
    """
    try:
        try:
            sdk.initialize()
            policies = sdk.create_session(saml_assertion)
        except SignerError:
            raise
        except Exception as e:
            raise SignerError(f"Failed to open signer session: {e}") from e
        yield policies
    finally:
        _release(sdk)


def _first_key(policies: Sequence[PolicyEntry]) -> KeyEntry:
    if not policies:
        raise SignerError("Signer session offers no signing policy")
    policy = policies[0]
    if not policy.keys:
        raise SignerError(f"Signing policy {policy.name!r} has no keys")
    return policy.keys[0]


def create_signature_value(
    issue_cert_response: IssueCertificateResponse,
    sdk: SignerSDK,
) -> SignatureValue:
    """Sign the issued digest through the vendor SDK.

    Args:
        issue_cert_response: Response of issue-certificate.
        sdk: SDK instance bound to the flow's forwarder URL.

    Returns:
        Base64 signature ready for the create-* call.

    Raises:
        SignerError: If the SAD or digest is malformed, or the SDK fails.
    """
    try:
        saml = encode_saml_assertion(issue_cert_response.sad)
        digest = hex_to_bytes(issue_cert_response.digest_to_be_signed)
    except ValueError as e:
        raise SignerError(str(e)) from e

    try:
        with signer_session(sdk, saml) as policies:
            key = _first_key(policies)
            _logger.info("Signing %d-byte digest with key %s", len(digest), key.key_id)
            try:
                signature = sdk.sign(key, digest)
            except Exception as e:
                raise SignerError(f"Signer SDK failed to sign: {e}") from e
    except SignerError:
        _logger.exception("Signature creation failed")
        raise

    try:
        value = bytes_to_base64(signature)
    except (TypeError, ValueError) as e:
        raise SignerError(f"Signer SDK returned an invalid signature: {e}") from e
    _logger.debug("Signature value: %d bytes", len(signature))
    return SignatureValue(value)
