"""
auth/gate.py -- Bearer extraction and the login / authorize policy.

Two-step policy:
  login(token)     -- token must exist in the credential store. Starts (or
                      restarts) the session. Never looks at session state.
  authorize(token) -- token must have a live session. Refreshes it. Never
                      re-checks the credential store.

The asymmetry is intentional: once logged in, the session table is the source
of truth. A token removed from the store after login stays usable until its
session goes idle past the limit.

AuthGate is the only writer of the SessionTable.

Layer rule: no imports from api/ or board/.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fastapi.concurrency import run_in_threadpool

from auth.sessions import SessionExpired, SessionNotFound, SessionTable
from auth.store import CredentialStore
from core.errors import Unauthorized

logger = logging.getLogger("mitfahrboerse.auth")

_BEARER_PREFIX = "Bearer "


def mask_token(token: str) -> str:
    """Shorten a token for log lines. Full tokens are never logged.

    At most a quarter of the token (and never more than four characters) is
    kept, so tokens shorter than four characters show nothing at all.
    """
    shown = min(4, len(token) // 4)
    return f"{token[:shown]}..."


def extract_bearer(headers: Mapping[str, str]) -> str:
    """Return the token from an `Authorization: Bearer <token>` header.

    The prefix is case-sensitive and must be followed by exactly one space.
    Surrounding whitespace on the token itself is trimmed.

    Raises Unauthorized if the header is missing, uses another scheme, or the
    token is empty after trimming.
    """
    header = headers.get("Authorization")
    if header is None:
        raise Unauthorized("Missing Authorization header", code="missing_authorization")
    if not header.startswith(_BEARER_PREFIX):
        raise Unauthorized("Expected: Bearer <token>", code="malformed_authorization")
    token = header[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Empty token", code="empty_token")
    return token


class AuthGate:
    """Applies the login / authorize policy on top of the session table."""

    def __init__(self, sessions: SessionTable, credentials: CredentialStore) -> None:
        self.sessions = sessions
        self.credentials = credentials

    async def login(self, token: str) -> None:
        """Start a session for token if the credential store knows it.

        Raises Upstream if the store fails, Unauthorized("Invalid token") if
        the token is not registered.
        """
        exists = await run_in_threadpool(self.credentials.token_exists, token)
        if not exists:
            logger.info("Login rejected for unknown token %s", mask_token(token))
            raise Unauthorized("Invalid token", code="invalid_token")
        await self.sessions.begin(token)
        logger.info("Session started for %s", mask_token(token))

    async def authorize(self, token: str) -> None:
        """Require a live session for token and refresh it.

        Call exactly once per protected request, before doing any other work.
        """
        try:
            await self.sessions.touch_if_active(token)
        except SessionNotFound:
            raise Unauthorized(
                "Not logged in",
                code="not_logged_in",
                detail="Call POST /login/{token} first.",
            ) from None
        except SessionExpired:
            logger.info("Session expired for %s", mask_token(token))
            raise Unauthorized(
                "Session expired",
                code="session_expired",
                detail="Idle limit exceeded. Call POST /login/{token} again.",
            ) from None

    async def logout(self, token: str) -> bool:
        """End token's session if it has one. Returns True if a session was dropped."""
        ended = await self.sessions.end(token)
        if ended:
            logger.info("Session ended for %s", mask_token(token))
        return ended
