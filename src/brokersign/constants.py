"""
Application-wide constants for Brokersign.

Timeouts, size limits, endpoint paths, header names and environment
variable names are centralized here.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("brokersign")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "BYTES_PER_MB",
    "CONTENT_TYPE_JSON",
    "DEFAULT_SIGNER_TIMEOUT_MS",
    "DEFAULT_TIMEOUT_HTTP",
    "ENV_MOCK",
    "ENV_ORIGIN",
    "ENV_TIMEOUT",
    "ENV_URL",
    "HEADER_CORRELATION_ID",
    "HEADER_SIGNING_SESSION_ID",
    "LOOPBACK_HOSTS",
    "MAX_RESPONSE_SIZE",
    "MAX_TIMEOUT",
    "MIN_TIMEOUT",
    "PATH_BEGIN_SIGNATURE_FLOW",
    "PATH_CREATE_PADES_LTA",
    "PATH_CREATE_PADES_LTV",
    "PATH_CREATE_XADES_LTA",
    "PATH_CREATE_XADES_LTV",
    "PATH_ISSUE_CERTIFICATE",
    "PATH_SAML_ASSERTION",
    "PATH_SIGNER_FORWARDER",
    "PDF_MAGIC",
    "PREVIEW_LENGTH",
    "RECV_BUFFER_SIZE",
    "__version__",
]

# ── Timeout values ────────────────────────────────────────────────────

# Signing API request timeout (seconds)
DEFAULT_TIMEOUT_HTTP = 60

# Vendor signer SDK request timeout (milliseconds, passed to the SDK as-is)
DEFAULT_SIGNER_TIMEOUT_MS = 10000

MIN_TIMEOUT = 1
MAX_TIMEOUT = 3600


# ── Size limits (bytes) ───────────────────────────────────────────────

BYTES_PER_MB = 1024 * 1024

# Maximum response body size accepted from the signing API (50 MB)
MAX_RESPONSE_SIZE = 50 * 1024 * 1024

RECV_BUFFER_SIZE = 8192

# Payload preview length in log lines and error messages (characters)
PREVIEW_LENGTH = 300


# ── Signing API ───────────────────────────────────────────────────────

PATH_BEGIN_SIGNATURE_FLOW = "/signing/begin-signature-flow"
PATH_ISSUE_CERTIFICATE = "/signing/issue-certificate"
PATH_CREATE_XADES_LTV = "/signing/create-xades-ltv"
PATH_CREATE_XADES_LTA = "/signing/create-xades-lta"
PATH_CREATE_PADES_LTV = "/signing/create-pades-ltv"
PATH_CREATE_PADES_LTA = "/signing/create-pades-lta"

# Only served by the broker mock environment
PATH_SAML_ASSERTION = "/saml/saml-assertion"

# Vendor SDK forwarder, relative to the broker origin
PATH_SIGNER_FORWARDER = "/signer-forwarder"

CONTENT_TYPE_JSON = "application/json"
HEADER_CORRELATION_ID = "CorrelationIdManager.CorrelationId"
HEADER_SIGNING_SESSION_ID = "X-DIGST-Signing-SessionId"

# Plain HTTP is accepted for these hosts only (local mock environment)
LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


# ── Environment variable names ────────────────────────────────────────

ENV_URL = "BROKERSIGN_URL"
ENV_TIMEOUT = "BROKERSIGN_TIMEOUT"
ENV_ORIGIN = "BROKERSIGN_ORIGIN"
ENV_MOCK = "BROKERSIGN_MOCK"


# ── Documents ─────────────────────────────────────────────────────────

PDF_MAGIC = b"%PDF-"
