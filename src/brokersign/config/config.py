"""
Client configuration for Brokersign.

Resolves the signing API base URL, broker origin, timeout and mock
environment flag from environment variables and ~/.brokersign/config.json.
The resolved :class:`ClientConfig` is passed explicitly into the client;
nothing here is read at request time.
"""

from __future__ import annotations

__all__ = [
    "ClientConfig",
    "get_client_config",
    "reset_config",
    "save_client_config",
]

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from ..constants import (
    DEFAULT_TIMEOUT_HTTP,
    ENV_MOCK,
    ENV_ORIGIN,
    ENV_TIMEOUT,
    ENV_URL,
    MAX_TIMEOUT,
    MIN_TIMEOUT,
)
from ..errors import ConfigError
from ._storage import load_config, load_raw_config, save_config

_logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for one signing flow.

    Attributes:
        signing_api_url: Base URL of the signing API (no trailing slash).
        timeout: HTTP timeout in seconds.
        origin: Broker origin used to build the signer forwarder URL.
            Defaults to the scheme and host of *signing_api_url*.
        mock_environment: True when talking to the broker mock, which
            serves the SAML assertion endpoint.
    """

    signing_api_url: str
    timeout: int = DEFAULT_TIMEOUT_HTTP
    origin: str | None = None
    mock_environment: bool = False

    def __post_init__(self) -> None:
        parsed = urlparse(self.signing_api_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ConfigError(f"Invalid signing API URL: {self.signing_api_url!r}")
        if not MIN_TIMEOUT <= self.timeout <= MAX_TIMEOUT:
            raise ConfigError(
                f"Timeout {self.timeout}s out of range [{MIN_TIMEOUT}, {MAX_TIMEOUT}]"
            )
        object.__setattr__(self, "signing_api_url", self.signing_api_url.rstrip("/"))
        if self.origin is not None:
            object.__setattr__(self, "origin", self.origin.rstrip("/"))

    @property
    def broker_origin(self) -> str:
        """Origin hosting the signer forwarder."""
        if self.origin:
            return self.origin
        parsed = urlparse(self.signing_api_url)
        return f"{parsed.scheme}://{parsed.netloc}"

    def endpoint(self, path: str) -> str:
        """Absolute URL for an API path such as ``/signing/issue-certificate``."""
        return f"{self.signing_api_url}{path}"


def _env_timeout() -> int | None:
    raw = os.environ.get(ENV_TIMEOUT, "").strip()
    if not raw:
        return None
    try:
        timeout = int(raw)
    except ValueError:
        _logger.warning("Invalid %s value %r, ignoring", ENV_TIMEOUT, raw)
        return None
    if timeout < MIN_TIMEOUT or timeout > MAX_TIMEOUT:
        _logger.warning(
            "%s=%d out of range [%d, %d], ignoring", ENV_TIMEOUT, timeout, MIN_TIMEOUT, MAX_TIMEOUT
        )
        return None
    return timeout


def get_client_config(
    url: str | None = None,
    *,
    timeout: int | None = None,
    origin: str | None = None,
    mock_environment: bool | None = None,
) -> ClientConfig:
    """
    Resolve the client configuration.

    Priority per field: explicit argument > env var > config file > default.

    Raises:
        ConfigError: If no signing API URL can be determined.
    """
    config = load_config()

    resolved_url = url or os.environ.get(ENV_URL, "").strip() or config.get("url")
    if not resolved_url:
        raise ConfigError(
            "No signing API URL configured. "
            f"Pass --url, set {ENV_URL}, or run `brokersign config --url ...`."
        )

    resolved_timeout = timeout
    if resolved_timeout is None:
        resolved_timeout = _env_timeout()
    if resolved_timeout is None:
        resolved_timeout = config.get("timeout", DEFAULT_TIMEOUT_HTTP)

    resolved_origin = origin or os.environ.get(ENV_ORIGIN, "").strip() or config.get("origin")

    resolved_mock = mock_environment
    if resolved_mock is None:
        env_mock = os.environ.get(ENV_MOCK, "").strip().lower()
        resolved_mock = env_mock in _TRUE_VALUES if env_mock else config.get("mock", False)

    return ClientConfig(
        signing_api_url=resolved_url,
        timeout=resolved_timeout,
        origin=resolved_origin or None,
        mock_environment=resolved_mock,
    )


def save_client_config(client_config: ClientConfig) -> None:
    """Persist a client configuration, preserving unknown keys."""
    raw = load_raw_config()
    raw["url"] = client_config.signing_api_url
    raw["timeout"] = client_config.timeout
    raw["mock"] = client_config.mock_environment
    if client_config.origin:
        raw["origin"] = client_config.origin
    else:
        raw.pop("origin", None)
    save_config(raw)


def reset_config() -> None:
    """Clear all saved configuration."""
    save_config({})
