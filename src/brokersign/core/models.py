"""
Request and response values exchanged during one signing flow.

Nothing here is persisted; every value lives for a single flow and is
handed from one call to the next.
"""

from __future__ import annotations

__all__ = [
    "BeginSignatureFlowResponse",
    "CreateSignatureResponse",
    "DocumentFormat",
    "FlowType",
    "IssueCertificateResponse",
    "SignatureFormat",
    "SignatureParameters",
    "SignatureProfile",
    "SignatureValue",
    "SigningPayload",
    "parse_enum",
    "parse_signature_parameters",
]

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import ServerError

_logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    """Format of the signer's document inside the DTBS."""

    TEXT = "TEXT"
    HTML = "HTML"
    XML = "XML"
    PDF = "PDF"


class SignatureFormat(str, Enum):
    """Advanced electronic signature container format."""

    XADES = "XAdES"
    PADES = "PAdES"


class SignatureProfile(str, Enum):
    """Long-term signature profile requested from create-*."""

    LTV = "LTV"
    LTA = "LTA"


class FlowType(str, Enum):
    SERVICE_PROVIDER = "ServiceProvider"
    BROKER = "Broker"


def parse_enum(enum_cls: type[Enum], value: object, field_name: str) -> Any:
    """Look up an enum member by value, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        for member in enum_cls:
            if member.value.lower() == value.strip().lower():
                return member
    valid = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"Invalid {field_name} {value!r}. Valid: {valid}")


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded)


@dataclass(frozen=True)
class SignatureParameters:
    """Signature parameters sealed by the service provider.

    Only the fields the client acts on are typed; everything else the
    provider put in the payload is kept in ``raw`` and passed on as-is.
    """

    document_format: DocumentFormat
    signature_format: SignatureFormat
    signer_subject_name_id: str | None = None
    flow_type: FlowType | None = None
    entity_id: str | None = None
    reference_text: str | None = None
    dtbs_digest: str | None = None
    dtbs_digest_algorithm: str | None = None
    version: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureParameters:
        flow_type = data.get("flowType")
        version = data.get("version")
        return cls(
            document_format=parse_enum(DocumentFormat, data.get("documentFormat"), "documentFormat"),
            signature_format=parse_enum(
                SignatureFormat, data.get("signatureFormat"), "signatureFormat"
            ),
            signer_subject_name_id=data.get("signerSubjectNameID"),
            flow_type=parse_enum(FlowType, flow_type, "flowType") if flow_type else None,
            entity_id=data.get("entityID"),
            reference_text=data.get("referenceText"),
            dtbs_digest=data.get("dtbsDigest"),
            dtbs_digest_algorithm=data.get("dtbsDigestAlgorithm"),
            version=version if isinstance(version, int) else None,
            raw=dict(data),
        )


def parse_signature_parameters(jws: str) -> SignatureParameters:
    """Decode the payload of JWS-sealed signature parameters.

    The JWS signature is not verified; that is the signing API's job.

    Raises:
        ValueError: If *jws* is not a compact JWS with a JSON object payload.
    """
    parts = jws.strip().split(".")
    if len(parts) != 3:
        raise ValueError("Signature parameters are not a compact JWS (expected 3 segments)")
    try:
        payload = json.loads(_b64url_decode(parts[1]))
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Cannot decode signature parameters payload: {e}") from e
    if not isinstance(payload, dict):
        raise ValueError("Signature parameters payload is not a JSON object")
    return SignatureParameters.from_dict(payload)


@dataclass(frozen=True)
class SigningPayload:
    """What the service provider hands to the signing client.

    Attributes:
        signature_parameters: JWS-sealed signature parameters (opaque).
        dtbs: Base64-encoded Document To Be Signed.
    """

    signature_parameters: str
    dtbs: str

    @classmethod
    def from_json(cls, text: str | bytes) -> SigningPayload:
        """Load ``{"signatureParameters": ..., "dtbs": ...}``.

        Raises:
            ValueError: If the JSON is malformed or a field is missing.
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ValueError(f"Signing payload is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Signing payload is not a JSON object")
        params = data.get("signatureParameters")
        dtbs = data.get("dtbs")
        if not isinstance(params, str) or not isinstance(dtbs, str):
            raise ValueError("Signing payload requires string fields 'signatureParameters' and 'dtbs'")
        return cls(signature_parameters=params, dtbs=dtbs)

    def parameters(self) -> SignatureParameters:
        return parse_signature_parameters(self.signature_parameters)


def _require_str(data: dict[str, Any], key: str, operation: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ServerError(f"{operation} response is missing '{key}'")
    return value


@dataclass(frozen=True)
class BeginSignatureFlowResponse:
    signing_session_id: str | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> BeginSignatureFlowResponse:
        session_id = data.get("signingSessionId") or data.get("sessionId")
        if not isinstance(session_id, str):
            _logger.warning("begin-signature-flow returned no signing session id")
            session_id = None
        return cls(signing_session_id=session_id, raw=data)


@dataclass(frozen=True)
class IssueCertificateResponse:
    """Result of issue-certificate, consumed once by the signer adapter.

    Attributes:
        digest_to_be_signed: Hex-encoded digest the signer must sign.
        sad: Base64 Signature Activation Data (SAML-derived token).
    """

    digest_to_be_signed: str
    sad: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> IssueCertificateResponse:
        return cls(
            digest_to_be_signed=_require_str(data, "digestToBeSigned", "issue-certificate"),
            sad=_require_str(data, "sad", "issue-certificate"),
            raw=data,
        )


@dataclass(frozen=True)
class SignatureValue:
    """Base64-encoded signature bytes produced by the signer SDK."""

    value: str

    def to_request(self) -> dict[str, str]:
        """Request body for the create-* calls."""
        return {"signatureValue": self.value}

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CreateSignatureResponse:
    """Result of a create-{xades,pades}-{ltv,lta} call.

    Attributes:
        signed_document: Base64-encoded signed document.
    """

    signed_document: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_json(cls, data: dict[str, Any], operation: str = "create-signature") -> CreateSignatureResponse:
        return cls(signed_document=_require_str(data, "signedDocument", operation), raw=data)
