"""Request headers for the signing API.

Every call carries the JSON content headers and the correlation id of
the current flow.  Once begin-signature-flow has returned a signing
session id, it is sent along as well.
"""

from __future__ import annotations

__all__ = ["SigningSession", "build_headers", "new_correlation_id"]

import logging
import uuid

from ..constants import CONTENT_TYPE_JSON, HEADER_CORRELATION_ID, HEADER_SIGNING_SESSION_ID

_logger = logging.getLogger(__name__)


def new_correlation_id() -> str:
    return str(uuid.uuid4())


def build_headers(correlation_id: str, session_id: str | None = None) -> dict[str, str]:
    """Build the header set for one signing API request.

    Args:
        correlation_id: Correlation id of the flow.
        session_id: Signing session id, omitted from the headers when falsy.
    """
    headers = {
        "Content-Type": CONTENT_TYPE_JSON,
        "Accept": CONTENT_TYPE_JSON,
        HEADER_CORRELATION_ID: correlation_id,
    }
    if session_id:
        headers[HEADER_SIGNING_SESSION_ID] = session_id
    return headers


class SigningSession:
    """Correlation and session identifiers for a single signing flow."""

    def __init__(self, correlation_id: str | None = None, session_id: str | None = None) -> None:
        self.correlation_id = correlation_id or new_correlation_id()
        self.session_id = session_id

    def bind(self, session_id: str | None) -> str | None:
        """Attach the session id returned by begin-signature-flow.

        Returns the session id, so calls can be chained the way the
        flow reads: ``session.bind(response.signing_session_id)``.
        """
        self.session_id = session_id or None
        _logger.debug(
            "Bound signing session %s (correlation id %s)", self.session_id, self.correlation_id
        )
        return self.session_id

    def headers(self) -> dict[str, str]:
        return build_headers(self.correlation_id, self.session_id)

    def __repr__(self) -> str:
        return (
            f"SigningSession(correlation_id={self.correlation_id!r}, "
            f"session_id={self.session_id!r})"
        )
