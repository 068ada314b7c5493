"""
api/routes/entries.py -- Bulletin-board entry routes.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET  /entries                -- list all entries
  POST /entries                -- create an entry
  GET  /entries/{entry_id}     -- single entry
  GET  /entries/{entry_id}/contact -- owner's email for an entry

Every route authorizes through the session gate before touching the store.
GET /entries is the one exception when PUBLIC_ENTRY_LIST is set.

POST /entries pipeline:
  authorize -> parse body -> validate_entry()
    -> owner lookup (BIND_ENTRY_OWNER) -> insert.
  A rejected draft never reaches the database, and an entry is either fully
  inserted or not at all.

Store calls are blocking SQLAlchemy calls, so they run in the thread pool via
run_in_threadpool and never stall the event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from api.models import ContactResponse, EntryCreate, EntryResponse
from auth.dependencies import require_session, require_session_for_listing
from auth.gate import mask_token
from auth.store import CredentialStore
from board.store import EntryStore
from board.validation import validate_entry
from core.config import Settings
from core.errors import NotFound, Upstream

logger = logging.getLogger("mitfahrboerse.api")

router = APIRouter()


# ---------------------------------------------------------------------------
# GET /entries -- list all entries
# ---------------------------------------------------------------------------


@router.get("/entries", response_model=list[EntryResponse])
async def list_entries(
    request: Request,
    _token: str | None = Depends(require_session_for_listing),
) -> list[EntryResponse]:
    """Return every entry, in the store's natural order."""
    store: EntryStore = request.app.state.entries
    entries = await run_in_threadpool(store.list_all)
    return [EntryResponse.from_entry(e) for e in entries]


# ---------------------------------------------------------------------------
# POST /entries -- create an entry
# ---------------------------------------------------------------------------


async def _read_entry_body(request: Request) -> EntryCreate:
    """Parse the JSON body. Malformed or mistyped bodies get the usual 422."""
    try:
        return EntryCreate.model_validate_json(await request.body())
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from None


# The body is read inside the handler so require_session runs before parsing.
@router.post(
    "/entries",
    response_model=EntryResponse,
    status_code=201,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": EntryCreate.model_json_schema()}},
        }
    },
)
async def create_entry(
    request: Request,
    token: str = Depends(require_session),
) -> EntryResponse:
    """Validate and store a new entry; 400 with the first broken rule otherwise."""
    settings: Settings = request.app.state.settings
    store: EntryStore = request.app.state.entries

    body = await _read_entry_body(request)
    draft = body.to_draft()
    validate_entry(draft)

    owner_id = None
    if settings.bind_entry_owner:
        credentials: CredentialStore = request.app.state.credentials
        owner = await run_in_threadpool(credentials.get_by_token, token)
        if owner is None:
            # Session outlived the user record (removed after login).
            logger.warning("No user record for session token %s; entry not created", mask_token(token))
            raise Upstream("Owner record not found.", code="owner_missing")
        owner_id = owner.id

    entry = await run_in_threadpool(store.insert, draft, owner_id)
    logger.info("Entry %d created (%s, %d seats)", entry.id, entry.entry_type, entry.seats)
    return EntryResponse.from_entry(entry)


# ---------------------------------------------------------------------------
# GET /entries/{entry_id} -- single entry
# ---------------------------------------------------------------------------


@router.get("/entries/{entry_id}", response_model=EntryResponse)
async def get_entry(
    request: Request,
    entry_id: int,
    _token: str = Depends(require_session),
) -> EntryResponse:
    store: EntryStore = request.app.state.entries
    entry = await run_in_threadpool(store.get_by_id, entry_id)
    if entry is None:
        raise NotFound(f"Entry {entry_id} not found.")
    return EntryResponse.from_entry(entry)


# ---------------------------------------------------------------------------
# GET /entries/{entry_id}/contact -- owner's email
# ---------------------------------------------------------------------------


@router.get("/entries/{entry_id}/contact", response_model=ContactResponse)
async def get_entry_contact(
    request: Request,
    entry_id: int,
    _token: str = Depends(require_session),
) -> ContactResponse:
    """Return the email of the user who created the entry.

    404 when the entry does not exist or has no owner on record.
    """
    store: EntryStore = request.app.state.entries
    contact = await run_in_threadpool(store.get_contact, entry_id)
    if contact is None:
        raise NotFound(f"No contact for entry {entry_id}.")
    return ContactResponse.from_contact(contact)
