"""Shared signing and viewing workflows.

UI-agnostic orchestration of a broker signing flow and of document
rendering.  The CLI is a thin wrapper around these functions.

Constraints:
- No stdout/stderr output (no print)
- No sys.exit()
- No argparse imports
- No threading (caller's responsibility)
- Returns structured results, never raises on business errors
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..constants import DEFAULT_SIGNER_TIMEOUT_MS
from ..core.encoding import base64_to_bytes, compute_sha512_digest
from ..core.models import (
    BeginSignatureFlowResponse,
    CreateSignatureResponse,
    IssueCertificateResponse,
    SignatureProfile,
)
from ..core.signer import create_signature_value, forwarder_url
from ..core.viewer import render_document
from ..errors import BrokerSignError, ConfigError, ServerError, TransportError
from ..network import SigningApiClient, SigningSession
from .helpers import atomic_write

if TYPE_CHECKING:
    from pathlib import Path

    from ..config import ClientConfig
    from ..core.models import SigningPayload
    from ..core.viewer import RenderedDocument
    from ..network import SignerSDKFactory

_logger = logging.getLogger(__name__)

STAGE_PARAMETERS = "signature-parameters"
STAGE_RENDER = "render"
STAGE_BEGIN = "begin-signature-flow"
STAGE_SAML = "saml-assertion"
STAGE_ISSUE = "issue-certificate"
STAGE_SIGNER = "signer"
STAGE_CREATE = "create-signature"
STAGE_OUTPUT = "output"
STAGE_VIEW_RESULT = "view-result"


# ── Result types ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FlowResult:
    """Result of one signing flow."""

    ok: bool
    stage: str | None = None
    error_message: str | None = None
    status: int | None = None
    retryable: bool = False
    correlation_id: str | None = None
    session_id: str | None = None
    signed_document: str | None = None
    output_path: Path | None = None
    output_size: int = 0
    rendered: RenderedDocument | None = None
    rendered_result: RenderedDocument | None = None


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Result of rendering a document for display."""

    ok: bool
    error_message: str | None = None
    rendered: RenderedDocument | None = None
    output_path: Path | None = None
    output_size: int = 0


# ── Error classification ──────────────────────────────────────────


def _classify_error(
    error: Exception, stage: str, session: SigningSession | None = None
) -> FlowResult:
    """Convert a caught exception into a failed FlowResult."""
    ids: dict[str, Any] = {}
    if session is not None:
        ids = {"correlation_id": session.correlation_id, "session_id": session.session_id}

    if isinstance(error, ServerError):
        return FlowResult(
            ok=False, stage=stage, error_message=str(error), status=error.status, **ids
        )

    if isinstance(error, TransportError):
        return FlowResult(
            ok=False, stage=stage, error_message=str(error), retryable=error.retryable, **ids
        )

    if isinstance(error, (BrokerSignError, ValueError)):
        return FlowResult(ok=False, stage=stage, error_message=str(error), **ids)

    _logger.exception("Unexpected error during %s", stage)
    return FlowResult(
        ok=False,
        stage=stage,
        error_message="An unexpected error occurred. Check logs for details.",
        **ids,
    )


# ── Signing workflow ──────────────────────────────────────────────


def _saml_payload(
    client: SigningApiClient, config: ClientConfig, saml_payload: dict[str, Any] | None
) -> dict[str, Any]:
    if saml_payload is not None:
        return saml_payload
    if config.mock_environment:
        return client.saml_assertion()
    raise ConfigError(
        "No SAML assertion available: pass one explicitly or enable the mock environment"
    )


def run_signing_flow(
    payload: SigningPayload,
    sdk_factory: SignerSDKFactory,
    config: ClientConfig,
    *,
    profile: SignatureProfile = SignatureProfile.LTV,
    saml_payload: dict[str, Any] | None = None,
    output_path: Path | None = None,
    preview: bool = False,
    view_result: bool = False,
    signer_timeout_ms: int = DEFAULT_SIGNER_TIMEOUT_MS,
) -> FlowResult:
    """Orchestrate a complete broker signing flow.

    begin-signature-flow -> SAML assertion -> issue-certificate ->
    signer SDK -> create-{xades,pades}-{ltv,lta} -> (optional) viewer.
    Each run uses a new correlation id.  Never raises on business
    errors -- all captured in the result, together with the step that
    failed.  A failure after create-* still carries the signed document.

    Args:
        payload: Signature parameters and DTBS from the service provider.
        sdk_factory: Builds the vendor SDK for the flow's forwarder URL.
        config: Signing API connection settings.
        profile: LTV or LTA.
        saml_payload: Issue-certificate body from the broker IdP.  In the
            mock environment it is fetched when omitted.
        output_path: Where to write the decoded signed document.
        preview: Render the DTBS before signing and return it in the result.
        view_result: Render the signed document after create-* and return
            it in the result.
        signer_timeout_ms: Timeout handed to the SDK factory.

    Returns:
        FlowResult with outcome, signed document and output details.
    """
    stage = STAGE_PARAMETERS
    session = SigningSession()
    try:
        params = payload.parameters()
        _logger.info(
            "Starting %s/%s flow (%s), correlation id %s",
            params.signature_format.value,
            profile.value,
            params.document_format.value,
            session.correlation_id,
        )
        _logger.debug("DTBS SHA-512: %s", compute_sha512_digest(payload.dtbs).hex())

        rendered = None
        if preview:
            stage = STAGE_RENDER
            rendered = render_document(params.signature_format, params.document_format, payload.dtbs)

        client = SigningApiClient(config, session)

        stage = STAGE_BEGIN
        begin = BeginSignatureFlowResponse.from_json(
            client.begin_signature_flow(payload.signature_parameters)
        )
        if begin.signing_session_id:
            session.bind(begin.signing_session_id)

        stage = STAGE_SAML
        saml = _saml_payload(client, config, saml_payload)

        stage = STAGE_ISSUE
        issued = IssueCertificateResponse.from_json(client.issue_certificate(saml))

        stage = STAGE_SIGNER
        url = forwarder_url(config.broker_origin, session.session_id or "", session.correlation_id)
        signature = create_signature_value(issued, sdk_factory(url, signer_timeout_ms))

        stage = STAGE_CREATE
        created = CreateSignatureResponse.from_json(
            client.create_signature(params.signature_format, profile, signature.to_request()),
            f"create-{params.signature_format.value.lower()}-{profile.value.lower()}",
        )
    except Exception as e:
        return _classify_error(e, stage, session)

    output_size = 0

    def _failed(stage: str, message: str) -> FlowResult:
        return FlowResult(
            ok=False,
            stage=stage,
            error_message=message,
            correlation_id=session.correlation_id,
            session_id=session.session_id,
            signed_document=created.signed_document,
            output_path=output_path if output_size else None,
            output_size=output_size,
            rendered=rendered,
        )

    if output_path is not None:
        try:
            document = base64_to_bytes("".join(created.signed_document.split()), "signed document")
            atomic_write(output_path, document)
        except ValueError as e:
            return _failed(STAGE_OUTPUT, str(e))
        except PermissionError:
            return _failed(STAGE_OUTPUT, f"Permission denied: {output_path}")
        except OSError as e:
            return _failed(STAGE_OUTPUT, f"Cannot write {output_path}: {e.strerror or e}")
        output_size = len(document)

    rendered_result = None
    if view_result:
        try:
            rendered_result = render_document(
                params.signature_format, params.document_format, created.signed_document
            )
        except (BrokerSignError, ValueError) as e:
            return _failed(STAGE_VIEW_RESULT, str(e))

    _logger.info("Signing flow %s completed", session.correlation_id)
    return FlowResult(
        ok=True,
        correlation_id=session.correlation_id,
        session_id=session.session_id,
        signed_document=created.signed_document,
        output_path=output_path,
        output_size=output_size,
        rendered=rendered,
        rendered_result=rendered_result,
    )


# ── Viewing workflow ──────────────────────────────────────────────


def render_payload(
    signature_format: str,
    document_format: str,
    dtbs: str,
    output_path: Path | None = None,
) -> RenderResult:
    """Render a DTBS (or signed document) and optionally save it.

    Never raises on business errors -- all captured in the result.
    """
    try:
        rendered = render_document(signature_format, document_format, dtbs)
    except (BrokerSignError, ValueError) as e:
        return RenderResult(ok=False, error_message=str(e))

    if output_path is None:
        return RenderResult(ok=True, rendered=rendered)
    return save_rendered(rendered, output_path)


def save_rendered(rendered: RenderedDocument, output_path: Path) -> RenderResult:
    """Write a rendered document atomically."""
    data = rendered.to_bytes()
    try:
        atomic_write(output_path, data)
    except PermissionError:
        return RenderResult(ok=False, error_message=f"Permission denied: {output_path}")
    except OSError as e:
        return RenderResult(ok=False, error_message=f"Cannot write {output_path}: {e.strerror or e}")
    return RenderResult(ok=True, rendered=rendered, output_path=output_path, output_size=len(data))
