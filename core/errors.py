"""
core/errors.py -- Error taxonomy shared by the auth gate, validation engine,
and stores.

Every failure the service reports to a client is one of these classes. Each
carries a machine-readable code, a short English message, and the HTTP status
the API layer maps it to. api/main.py registers one exception handler for
BoardError and renders the standard error envelope; nothing below this module
knows about HTTP responses.

Layer rule: core/ is the kernel. No imports from api/, auth/, or board/.
"""

from __future__ import annotations


class BoardError(Exception):
    """Base class for every client-visible failure."""

    status_code: int = 500
    default_code: str = "error"

    def __init__(self, message: str, code: str | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail = detail


class Unauthorized(BoardError):
    """Missing or malformed Authorization header, unknown token, no session, or expired session."""

    status_code = 401
    default_code = "unauthorized"


class Rejected(BoardError):
    """An entry draft failed a validation rule. code names the rule that fired."""

    status_code = 400
    default_code = "rejected"


class NotFound(BoardError):
    status_code = 404
    default_code = "not_found"


class Upstream(BoardError):
    """The data store failed: connectivity, query error, or pool timeout.

    message is safe to show to clients. The underlying driver error is
    chained via `raise ... from exc` and logged, never returned.
    """

    status_code = 500
    default_code = "upstream_error"
