"""Brokersign error types."""

from __future__ import annotations

from typing import Any

__all__ = [
    "BrokerSignError",
    "ConfigError",
    "DocumentError",
    "ServerError",
    "SignerError",
    "TransportError",
]


class BrokerSignError(Exception):
    """Base error for Brokersign operations."""


class TransportError(BrokerSignError):
    """Connection, TLS or timeout error.

    Args:
        message: Human-readable error description.
        retryable: Whether the failure looks transient (timeouts,
            refused connections). Informational only -- the client
            never retries on its own.
    """

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable

    def __reduce__(self) -> tuple[type[TransportError], tuple[str], dict[str, bool]]:
        """Preserve retryable flag across pickle/unpickle."""
        return (type(self), (str(self),), {"retryable": self.retryable})

    def __setstate__(self, state: dict[str, Any] | None) -> None:
        if state is None:
            return
        self.retryable = state.get("retryable", False)


class ServerError(BrokerSignError):
    """Signing API returned an error status or an unusable response.

    Args:
        message: Human-readable error description.
        status: HTTP status code, or None if the response itself was
            malformed (non-JSON body, missing fields).
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def __reduce__(self) -> tuple[type[ServerError], tuple[str], dict[str, int | None]]:
        return (type(self), (str(self),), {"status": self.status})

    def __setstate__(self, state: dict[str, Any] | None) -> None:
        if state is None:
            return
        self.status = state.get("status")


class SignerError(BrokerSignError):
    """Vendor signer SDK failure (session, key selection or signing)."""


class DocumentError(BrokerSignError):
    """DTBS container, XML, XSLT or PDF could not be read or rendered."""


class ConfigError(BrokerSignError):
    """Configuration validation error."""
