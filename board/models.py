"""
board/models.py -- Domain dataclasses for bulletin-board entries.

These are pure data containers with zero logic. The admissibility rules live
in board/validation.py; persistence lives in board/store.py.

Separation of concerns: these dataclasses are the board's domain truth.
api/models.py owns the wire shape (German field names) and maps to and from
these.
"""

from dataclasses import dataclass
from typing import Optional

OFFER = "Angebot"
REQUEST = "Anfrage"


@dataclass
class EntryDraft:
    """A submitted entry before validation and before the store assigns an id.

    Fields are carried exactly as received. Trimming and case-folding happen
    inside the validation rules, never on the stored values.
    """

    title: str
    message: str
    entry_type: str  # "Angebot" | "Anfrage"
    seats: int


@dataclass
class Entry:
    """A persisted entry. id is None before the record is written to the database."""

    title: str
    message: str
    entry_type: str
    seats: int
    id: Optional[int] = None
    owner_id: Optional[int] = None


@dataclass
class EntryContact:
    email: str
