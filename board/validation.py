"""
board/validation.py -- Admissibility rules for new entries.

validate_entry() runs a fixed chain of rules and raises Rejected for the first
one that fails. The order is part of the API contract: when a draft breaks
several rules, the client always sees the same single reason.

  1. content filter   -- no advertising or sale language in the message
  2. type / capacity  -- typ must be Angebot or Anfrage; an Angebot needs seats
  3. required fields  -- titel and nachricht must not be blank

Pure functions, no I/O, no session state.
"""

from __future__ import annotations

from collections.abc import Callable

from board.models import OFFER, REQUEST, EntryDraft
from core.errors import Rejected

BANNED_TERMS = ("werbung", "verkauf")
ENTRY_TYPES = (OFFER, REQUEST)


def check_content(draft: EntryDraft) -> None:
    """Reject messages containing a banned term, case-insensitively, anywhere in the text."""
    message = draft.message.lower()
    if any(term in message for term in BANNED_TERMS):
        raise Rejected("Entry rejected: advertising/selling content", code="advertising")


def check_type_and_capacity(draft: EntryDraft) -> None:
    if draft.entry_type not in ENTRY_TYPES:
        raise Rejected("typ must be 'Angebot' or 'Anfrage'", code="invalid_type")
    # Anfrage places no constraint on seats.
    if draft.entry_type == OFFER and draft.seats <= 0:
        raise Rejected("Typ 'Angebot' requires sitzplaetze > 0", code="capacity")


def check_required_fields(draft: EntryDraft) -> None:
    if not draft.title.strip():
        raise Rejected("titel must not be empty", code="empty_title")
    if not draft.message.strip():
        raise Rejected("nachricht must not be empty", code="empty_message")


RULES: tuple[Callable[[EntryDraft], None], ...] = (
    check_content,
    check_type_and_capacity,
    check_required_fields,
)


def validate_entry(draft: EntryDraft) -> None:
    """Raise Rejected for the first rule draft breaks; return None if it passes all of them."""
    for rule in RULES:
        rule(draft)
