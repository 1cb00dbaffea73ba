"""
HTTP transport for the signing API.

Plain ``urllib.request`` with system TLS.  HTTPS is required, except
for loopback hosts where the broker mock environment runs over HTTP.
Redirects from HTTPS to HTTP are refused.

Failed calls are not retried; the current signing flow ends and the
user restarts it.

Public API:
- http_get / http_post for HTTP requests
"""

from __future__ import annotations

__all__ = ["http_get", "http_post"]

import logging
import urllib.error
import urllib.request
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlparse

from ..constants import (
    BYTES_PER_MB,
    DEFAULT_TIMEOUT_HTTP,
    LOOPBACK_HOSTS,
    MAX_RESPONSE_SIZE,
    PREVIEW_LENGTH,
    RECV_BUFFER_SIZE,
)
from ..errors import BrokerSignError, ServerError, TransportError

if TYPE_CHECKING:
    import http.client

_logger = logging.getLogger(__name__)


def _require_secure_url(url: str) -> None:
    """Reject plaintext URLs unless they point at a loopback host.

    SAML assertions and SAD tokens travel in request bodies, so they
    must not cross the network unencrypted.

    Raises:
        BrokerSignError: If the URL is not https (or http on loopback).
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if not parsed.hostname:
        raise BrokerSignError(f"Cannot extract hostname from URL: {url}")
    if scheme == "https":
        return
    if scheme == "http" and parsed.hostname in LOOPBACK_HOSTS:
        return
    raise BrokerSignError(
        f"Only HTTPS URLs are allowed (got {scheme}://{parsed.hostname}). "
        "Plain HTTP is accepted for localhost only."
    )


class _Readable(Protocol):
    def read(self, amt: int = ...) -> bytes: ...


def _read_with_limit(response: _Readable, url: str) -> bytes:
    """Read an HTTP response body with a size limit."""
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = response.read(RECV_BUFFER_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > MAX_RESPONSE_SIZE:
            raise BrokerSignError(
                f"Response from {url} exceeds {MAX_RESPONSE_SIZE // BYTES_PER_MB} MB limit"
            )
        chunks.append(chunk)
    return b"".join(chunks)


class _SafeRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Redirect handler that refuses HTTPS to HTTP downgrades."""

    def redirect_request(  # type: ignore[override]  # urllib stubs use incompatible signature
        self,
        req: urllib.request.Request,
        fp: http.client.HTTPResponse,
        code: int,
        msg: str,
        headers: http.client.HTTPMessage,
        newurl: str,
    ) -> urllib.request.Request | None:
        parsed_orig = urlparse(req.full_url)
        parsed_new = urlparse(newurl)
        if parsed_orig.scheme == "https" and parsed_new.scheme == "http":
            raise BrokerSignError(f"Refused redirect from HTTPS to HTTP: {newurl}")
        return super().redirect_request(req, fp, code, msg, headers, newurl)


_safe_opener = urllib.request.build_opener(_SafeRedirectHandler)


def _safe_urlopen(request: urllib.request.Request, *, timeout: int) -> http.client.HTTPResponse:
    """Open a Request with safe redirect handling. Thin wrapper to simplify testing."""
    return _safe_opener.open(request, timeout=timeout)


def _error_body_preview(exc: urllib.error.HTTPError) -> str:
    try:
        body = exc.read()
    except OSError:
        return ""
    if not body:
        return ""
    return body.decode("utf-8", errors="replace")[:PREVIEW_LENGTH]


def _send(request: urllib.request.Request, timeout: int) -> bytes:
    url = request.full_url
    method = request.get_method()
    try:
        with _safe_urlopen(request, timeout=timeout) as response:
            data = _read_with_limit(response, url)
            _logger.debug("%s %s -> %d bytes", method, url, len(data))
            return data
    except urllib.error.HTTPError as exc:
        preview = _error_body_preview(exc)
        _logger.warning("%s %s -> HTTP %d", method, url, exc.code)
        message = f"{method} {url} failed: HTTP {exc.code} {exc.reason}"
        if preview:
            message += f": {preview}"
        raise ServerError(message, status=exc.code) from exc
    except urllib.error.URLError as exc:
        raise TransportError(f"{method} {url} failed: {exc.reason}", retryable=True) from exc
    except TimeoutError as exc:
        raise TransportError(
            f"Connection timed out after {timeout}s: {url}", retryable=True
        ) from exc


# ── Public API ───────────────────────────────────────────────────────


def http_get(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: int = DEFAULT_TIMEOUT_HTTP,
) -> bytes:
    """
    Fetch a URL.

    Args:
        url: Target URL.
        headers: HTTP headers to send.
        timeout: HTTP timeout in seconds.

    Returns:
        Response body as bytes.

    Raises:
        TransportError: On connection/TLS issues and timeouts.
        ServerError: On HTTP error statuses.
        BrokerSignError: On insecure URLs or oversized responses.
    """
    _require_secure_url(url)
    _logger.debug("GET %s (timeout=%ds)", url, timeout)
    req = urllib.request.Request(url, method="GET")  # noqa: S310 -- scheme checked by _require_secure_url
    for k, v in (headers or {}).items():
        req.add_header(k, v)
    return _send(req, timeout)


def http_post(
    url: str,
    body: bytes,
    *,
    headers: dict[str, str] | None = None,
    timeout: int = DEFAULT_TIMEOUT_HTTP,
) -> bytes:
    """
    Send an HTTP POST.

    Args:
        url: Target URL.
        body: Request body bytes.
        headers: HTTP headers to send.
        timeout: HTTP timeout in seconds.

    Returns:
        Response body as bytes.

    Raises:
        TransportError: On connection/TLS issues and timeouts.
        ServerError: On HTTP error statuses.
        BrokerSignError: On insecure URLs or oversized responses.
    """
    _require_secure_url(url)
    _logger.debug("POST %s (timeout=%ds, %d bytes)", url, timeout, len(body))
    req = urllib.request.Request(url, data=body, method="POST")  # noqa: S310 -- scheme checked by _require_secure_url
    for k, v in (headers or {}).items():
        req.add_header(k, v)
    return _send(req, timeout)
