"""
api/routes/auth.py -- Login, logout, and user listing.

Routes:
  POST /login/{token}  -- start a session if the token is registered
  POST /logout         -- end the caller's session (bearer header, no live session needed)
  GET  /users          -- list all users (requires session)

Auth policy:
  - POST /login/{token}: public -- the path token is the credential
  - POST /logout:        bearer header only -- ending a stale or missing
                         session is not an error
  - GET  /users:         requires session (require_session)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from api.models import OkResponse, UserResponse
from auth.dependencies import get_gate, require_session
from auth.gate import AuthGate, extract_bearer
from auth.store import CredentialStore

router = APIRouter()


@router.post("/login/{token}", response_model=OkResponse)
async def login(token: str, gate: AuthGate = Depends(get_gate)) -> OkResponse:
    """Start (or restart) the session for token.

    401 if the token is not registered; 500 if the credential store fails.
    """
    await gate.login(token)
    return OkResponse()


@router.post("/logout", response_model=OkResponse)
async def logout(request: Request, gate: AuthGate = Depends(get_gate)) -> OkResponse:
    """Drop the caller's session. Idempotent."""
    token = extract_bearer(request.headers)
    await gate.logout(token)
    return OkResponse()


@router.get("/users", response_model=list[UserResponse])
async def list_users(request: Request, _token: str = Depends(require_session)) -> list[UserResponse]:
    credentials: CredentialStore = request.app.state.credentials
    users = await run_in_threadpool(credentials.list_users)
    return [UserResponse.from_user(u) for u in users]
