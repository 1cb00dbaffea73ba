"""
brokersign -- Python client for a NemLog-In signing broker.

Drives a signing flow against the signing API (begin-signature-flow,
issue-certificate, create-{xades,pades}-{ltv,lta}), signs through a
vendor signer SDK and renders the signer's document for display.
"""

from __future__ import annotations

from .config import ClientConfig, get_client_config
from .constants import __version__
from .core.encoding import compute_sha512_digest, encode_saml_assertion, hex_to_bytes, truncate
from .core.models import (
    DocumentFormat,
    SignatureFormat,
    SignatureParameters,
    SignatureProfile,
    SignatureValue,
    SigningPayload,
    parse_signature_parameters,
)
from .core.signer import create_signature_value, forwarder_url, signer_session
from .core.viewer import RenderedDocument, render_document
from .core.viewer.container import element_text, extract_xml_element, find_element
from .errors import (
    BrokerSignError,
    ConfigError,
    DocumentError,
    ServerError,
    SignerError,
    TransportError,
)
from .network import SignerSDK, SigningApiClient, SigningSession

__all__ = [
    "BrokerSignError",
    "ClientConfig",
    "ConfigError",
    "DocumentError",
    "DocumentFormat",
    "RenderedDocument",
    "ServerError",
    "SignatureFormat",
    "SignatureParameters",
    "SignatureProfile",
    "SignatureValue",
    "SignerError",
    "SignerSDK",
    "SigningApiClient",
    "SigningPayload",
    "SigningSession",
    "TransportError",
    "__version__",
    "compute_sha512_digest",
    "create_signature_value",
    "element_text",
    "encode_saml_assertion",
    "extract_xml_element",
    "find_element",
    "forwarder_url",
    "get_client_config",
    "hex_to_bytes",
    "parse_signature_parameters",
    "render_document",
    "signer_session",
    "truncate",
]
