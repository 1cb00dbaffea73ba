"""
Signing API client.

One method per remote operation.  Each takes a plain request object,
serializes it to JSON, POSTs it to the signing API and returns the
decoded JSON object.  Requests are not validated locally and failed
calls are not retried; errors from the transport propagate untouched.
"""

from __future__ import annotations

__all__ = ["SigningApiClient"]

import json
import logging
from typing import TYPE_CHECKING, Any

from ..constants import (
    PATH_BEGIN_SIGNATURE_FLOW,
    PATH_CREATE_PADES_LTA,
    PATH_CREATE_PADES_LTV,
    PATH_CREATE_XADES_LTA,
    PATH_CREATE_XADES_LTV,
    PATH_ISSUE_CERTIFICATE,
    PATH_SAML_ASSERTION,
)
from ..core.encoding import truncate
from ..core.models import SignatureFormat, SignatureProfile
from ..errors import BrokerSignError, ServerError
from .headers import SigningSession
from .transport import http_get, http_post

if TYPE_CHECKING:
    from ..config import ClientConfig

_logger = logging.getLogger(__name__)

_CREATE_PATHS: dict[tuple[SignatureFormat, SignatureProfile], str] = {
    (SignatureFormat.XADES, SignatureProfile.LTV): PATH_CREATE_XADES_LTV,
    (SignatureFormat.XADES, SignatureProfile.LTA): PATH_CREATE_XADES_LTA,
    (SignatureFormat.PADES, SignatureProfile.LTV): PATH_CREATE_PADES_LTV,
    (SignatureFormat.PADES, SignatureProfile.LTA): PATH_CREATE_PADES_LTA,
}


def _decode_json(body: bytes, path: str) -> dict[str, Any]:
    text = body.decode("utf-8", errors="replace")
    try:
        data = json.loads(text) if text.strip() else {}
    except ValueError as e:
        raise ServerError(f"{path}: response is not JSON: {truncate(text)}") from e
    if not isinstance(data, dict):
        raise ServerError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


class SigningApiClient:
    """Client for the signing API endpoints used by a broker.

    Args:
        config: Resolved connection settings.
        session: Correlation/session identifiers of the current flow.
            A fresh session (new correlation id) is created if omitted.
    """

    def __init__(self, config: ClientConfig, session: SigningSession | None = None) -> None:
        self.config = config
        self.session = session or SigningSession()

    def _post(self, path: str, payload: object) -> dict[str, Any]:
        url = self.config.endpoint(path)
        body = json.dumps(payload).encode("utf-8")
        _logger.info("Calling signing API -> %s", url)
        _logger.debug("Request body: %s", truncate(body.decode("utf-8")))
        response = http_post(
            url, body, headers=self.session.headers(), timeout=self.config.timeout
        )
        data = _decode_json(response, path)
        _logger.debug("Response from %s: %s", path, truncate(json.dumps(data)))
        return data

    # ── Signing API ──────────────────────────────────────────────────

    def begin_signature_flow(self, signature_parameters: str | dict[str, Any]) -> dict[str, Any]:
        """POST /signing/begin-signature-flow with the sealed parameters."""
        return self._post(PATH_BEGIN_SIGNATURE_FLOW, {"signatureParameters": signature_parameters})

    def issue_certificate(self, saml_payload: dict[str, Any]) -> dict[str, Any]:
        """POST /signing/issue-certificate; *saml_payload* is sent as-is."""
        return self._post(PATH_ISSUE_CERTIFICATE, saml_payload)

    def create_xades_ltv(self, req: dict[str, Any]) -> dict[str, Any]:
        return self._post(PATH_CREATE_XADES_LTV, req)

    def create_xades_lta(self, req: dict[str, Any]) -> dict[str, Any]:
        return self._post(PATH_CREATE_XADES_LTA, req)

    def create_pades_ltv(self, req: dict[str, Any]) -> dict[str, Any]:
        return self._post(PATH_CREATE_PADES_LTV, req)

    def create_pades_lta(self, req: dict[str, Any]) -> dict[str, Any]:
        return self._post(PATH_CREATE_PADES_LTA, req)

    def create_signature(
        self,
        signature_format: SignatureFormat,
        profile: SignatureProfile,
        req: dict[str, Any],
    ) -> dict[str, Any]:
        """Dispatch to the create-* call matching format and profile."""
        path = _CREATE_PATHS[(SignatureFormat(signature_format), SignatureProfile(profile))]
        return self._post(path, req)

    # ── Mock environment ─────────────────────────────────────────────

    def saml_assertion(self) -> dict[str, Any]:
        """GET /saml/saml-assertion on the broker origin (mock only).

        Simulates sign-in at the broker IdP and returns
        ``{"samlAssertion": ...}``, which is the issue-certificate body.
        The mock requires the signing session header, so call this after
        begin-signature-flow.

        Raises:
            BrokerSignError: If the client is not configured for the
                mock environment, or no session is bound.
        """
        if not self.config.mock_environment:
            raise BrokerSignError("The SAML assertion endpoint only exists in the mock environment")
        if not self.session.session_id:
            raise BrokerSignError("No signing session bound; call begin_signature_flow first")
        url = f"{self.config.broker_origin}{PATH_SAML_ASSERTION}"
        _logger.info("Fetching mock SAML assertion -> %s", url)
        body = http_get(url, headers=self.session.headers(), timeout=self.config.timeout)
        return _decode_json(body, PATH_SAML_ASSERTION)
