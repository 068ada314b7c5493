"""
API request and response models for the Mitfahrbörse REST endpoints.

These Pydantic v2 models define the HTTP transport contract. Field names are
the German wire names existing clients already send and read (titel,
nachricht, typ, sitzplaetze, nachname). They are intentionally separate from
the dataclasses in board/models.py and auth/models.py, which own the internal
domain representation. Route handlers map between the two.

EntryCreate carries no length, enum, or whitespace constraints: blank fields
and unknown types must reach board.validation so the client gets the same
ordered rejection reasons as every other rule. It is strict about JSON types,
though: sitzplaetze must be a JSON integer in the signed 32-bit range, so
`true`, `"3"` and out-of-range numbers are 422 rather than coerced or left to
the database.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from board.models import Entry, EntryContact, EntryDraft

SEATS_MIN = -(2**31)
SEATS_MAX = 2**31 - 1

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class EntryCreate(BaseModel):
    """Request body for POST /entries."""

    model_config = ConfigDict(strict=True)

    titel: str
    nachricht: str
    typ: str
    sitzplaetze: int = Field(ge=SEATS_MIN, le=SEATS_MAX)

    def to_draft(self) -> EntryDraft:
        return EntryDraft(
            title=self.titel,
            message=self.nachricht,
            entry_type=self.typ,
            seats=self.sitzplaetze,
        )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class EntryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    titel: str
    nachricht: str
    typ: str
    sitzplaetze: int

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryResponse":
        """Build the wire shape from a domain Entry.

        This is the Factory Method pattern -- the mapping lives here, colocated
        with the output model, rather than scattered across route handlers.
        """
        return cls(
            id=entry.id,
            titel=entry.title,
            nachricht=entry.message,
            typ=entry.entry_type,
            sitzplaetze=entry.seats,
        )


class ContactResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str

    @classmethod
    def from_contact(cls, contact: EntryContact) -> "ContactResponse":
        return cls(email=contact.email)


class UserResponse(BaseModel):
    """One row of GET /users. Includes the token, as the existing clients expect."""

    model_config = ConfigDict(frozen=True)

    id: int
    nachname: str
    email: str
    status: str
    token: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            nachname=user.surname,
            email=user.email,
            status=user.status,
            token=user.token,
        )


class OkResponse(BaseModel):
    """Response for POST /login/{token} and POST /logout."""

    model_config = ConfigDict(frozen=True)

    ok: bool = True


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    sessions: int
