"""Network transport, signing API client and signer SDK protocol."""

from __future__ import annotations

from .headers import SigningSession, build_headers
from .protocol import KeyEntry, PolicyEntry, SignerSDK, SignerSDKFactory
from .signing_api import SigningApiClient

__all__ = [
    "KeyEntry",
    "PolicyEntry",
    "SignerSDK",
    "SignerSDKFactory",
    "SigningApiClient",
    "SigningSession",
    "build_headers",
]
