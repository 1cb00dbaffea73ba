"""
Vendor signer SDK abstraction.

The signing key lives in a remote signing device reached through the
vendor's SDK and the broker's signer forwarder.  The signer adapter
depends on this protocol, not on a concrete SDK binding; a binding
raises instead of invoking reject callbacks.
"""

from __future__ import annotations

__all__ = ["KeyEntry", "PolicyEntry", "SignerSDK", "SignerSDKFactory"]

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class KeyEntry:
    """A signing key offered by the SDK for a policy."""

    key_id: str
    raw: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class PolicyEntry:
    """A signing policy and the keys available under it."""

    name: str
    keys: Sequence[KeyEntry] = ()
    raw: Any = field(default=None, compare=False, repr=False)


class SignerSDK(Protocol):
    """Protocol for a vendor signer SDK session.

    Lifecycle: ``initialize`` -> ``create_session`` -> ``sign`` ->
    ``logoff`` -> ``free``.  ``logoff`` and ``free`` must be safe to
    call after a failed ``create_session`` or ``sign``.
    """

    def initialize(self) -> None:
        """Prepare the SDK for use."""
        ...

    def create_session(self, saml_assertion: list[int]) -> Sequence[PolicyEntry]:
        """
        Open a signing session authorized by a SAML assertion.

        Args:
            saml_assertion: UTF-8 byte values of the assertion.

        Returns:
            Available signing policies, each with its keys.

        Raises:
            Exception: Any SDK failure (wrapped by the adapter).
        """
        ...

    def sign(self, key: KeyEntry, digest: list[int]) -> list[int]:
        """
        Sign a digest with the given key.

        Args:
            key: Key taken from a policy returned by create_session.
            digest: Digest byte values.

        Returns:
            Signature byte values.
        """
        ...

    def logoff(self) -> None:
        """End the signing session."""
        ...

    def free(self) -> None:
        """Release SDK resources."""
        ...


class SignerSDKFactory(Protocol):
    """Builds an SDK bound to a signer forwarder URL."""

    def __call__(self, forwarder_url: str, timeout_ms: int) -> SignerSDK: ...
