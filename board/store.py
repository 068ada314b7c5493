"""
board/store.py -- SQLAlchemy Core persistence layer for entries.

Pattern: Repository + Data Mapper (same as auth/store.py).
EntryStore is the repository; _row_to_entry is the mapper.

Table and column names (eintrag, titel, ...) follow the existing deployment
schema. schueler_id is nullable: deployments that do not bind an owner leave
it empty, and such entries have no contact.

The contact lookup joins against the schueler table owned by auth/store.py.
It is written as a bound-parameter text() query so this module does not import
auth/ -- both stores only share the engine.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or auth/.
"""

import logging
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, text
from sqlalchemy.engine import Engine

from board.models import Entry, EntryContact, EntryDraft
from core.database import translate_errors

logger = logging.getLogger("mitfahrboerse.board")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

eintrag = Table(
    "eintrag",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("titel", Text, nullable=False),
    Column("nachricht", Text, nullable=False),
    Column("typ", String(20), nullable=False),
    Column("sitzplaetze", Integer, nullable=False),
    Column("schueler_id", Integer),  # NULL when the owner is not bound
)

_CONTACT_SQL = text(
    """
    SELECT schueler.email
    FROM eintrag
    INNER JOIN schueler ON eintrag.schueler_id = schueler.id
    WHERE eintrag.id = :entry_id
    """
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class EntryStore:
    """Repository for Entry records.

    Usage:
        store = EntryStore(engine)
        entry = store.insert(EntryDraft("Mitfahrt Berlin", "Suche Mitfahrer", "Angebot", 3), owner_id=1)
        store.get_by_id(entry.id)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        with translate_errors(logger, "schema setup"):
            _metadata.create_all(self.engine)

    def list_all(self) -> list[Entry]:
        """Return every entry in the store's natural order."""
        with translate_errors(logger, "entry listing"), self.engine.connect() as conn:
            rows = conn.execute(eintrag.select()).fetchall()
        return [_row_to_entry(r) for r in rows]

    def get_by_id(self, entry_id: int) -> Optional[Entry]:
        """Return the entry with this id, or None if it does not exist."""
        with translate_errors(logger, "entry lookup"), self.engine.connect() as conn:
            row = conn.execute(eintrag.select().where(eintrag.c.id == entry_id)).fetchone()
        return _row_to_entry(row) if row is not None else None

    def get_contact(self, entry_id: int) -> Optional[EntryContact]:
        """Return the owner's email for an entry.

        None if the entry does not exist, has no bound owner, or its owner
        record is gone -- the inner join misses in all three cases.
        """
        with translate_errors(logger, "contact lookup"), self.engine.connect() as conn:
            row = conn.execute(_CONTACT_SQL, {"entry_id": entry_id}).fetchone()
        return EntryContact(email=row.email) if row is not None else None

    def insert(self, draft: EntryDraft, owner_id: Optional[int] = None) -> Entry:
        """Persist a validated draft and return it with its assigned id.

        Callers must run board.validation.validate_entry() first; the store
        writes whatever it is given.
        """
        with translate_errors(logger, "entry insert"), self.engine.connect() as conn:
            result = conn.execute(
                eintrag.insert().values(
                    titel=draft.title,
                    nachricht=draft.message,
                    typ=draft.entry_type,
                    sitzplaetze=draft.seats,
                    schueler_id=owner_id,
                )
            )
            conn.commit()
            entry_id = result.inserted_primary_key[0]
        return Entry(
            id=entry_id,
            title=draft.title,
            message=draft.message,
            entry_type=draft.entry_type,
            seats=draft.seats,
            owner_id=owner_id,
        )


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_entry(row) -> Entry:
    return Entry(
        id=row.id,
        title=row.titel,
        message=row.nachricht,
        entry_type=row.typ,
        seats=row.sitzplaetze,
        owner_id=row.schueler_id,
    )
