"""
auth/dependencies.py -- FastAPI Depends() helpers for session-gated routes.

require_session() is the hard gate: it extracts the bearer token and calls
AuthGate.authorize() once. FastAPI caches a dependency's result for the
duration of a request, so a route that depends on it (directly or through
another dependency) still authorizes exactly once.

require_session_for_listing() is the variant used by GET /entries: it skips
the gate when the deployment serves the entry list publicly.

Layer rule: no imports from api/ or board/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.gate import AuthGate, extract_bearer


def get_gate(request: Request) -> AuthGate:
    return request.app.state.gate


async def require_session(request: Request) -> str:
    """Require a bearer token with a live session. Returns the token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(token: str = Depends(require_session)): ...
    """
    token = extract_bearer(request.headers)
    await get_gate(request).authorize(token)
    return token


async def require_session_for_listing(request: Request) -> str | None:
    """Like require_session(), unless PUBLIC_ENTRY_LIST is on. Returns None when skipped."""
    if request.app.state.settings.public_entry_list:
        return None
    return await require_session(request)
