"""
auth/store.py -- SQLAlchemy Core persistence layer for user records.

Pattern: Repository + Data Mapper (same as board/store.py).
CredentialStore is the repository; _row_to_user is the mapper.
Route and gate code never touches SQL directly.

The table and column names (schueler, nachname, ...) follow the existing
deployment schema so the service can point at the production database as-is.

From the service's point of view this store is read-only. create_user() exists
for out-of-band provisioning scripts and test fixtures; no route calls it.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or board/.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, Integer, MetaData, String, Table, exists, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.database import translate_errors

logger = logging.getLogger("mitfahrboerse.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

schueler = Table(
    "schueler",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nachname", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("status", String(50), nullable=False, server_default="aktiv"),
    Column("token", String(255), nullable=False, unique=True),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for User records, keyed by their opaque token.

    Usage:
        store = CredentialStore(engine)
        store.token_exists("abc123")   # True / False
        user = store.get_by_token("abc123")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        with translate_errors(logger, "schema setup"):
            _metadata.create_all(self.engine)

    def token_exists(self, token: str) -> bool:
        """Return True if a user owns this exact token (case-sensitive)."""
        with translate_errors(logger, "token lookup"), self.engine.connect() as conn:
            found = conn.execute(select(exists().where(schueler.c.token == token))).scalar()
        return bool(found)

    def get_by_token(self, token: str) -> User | None:
        """Return the user owning token, or None if no such user exists."""
        with translate_errors(logger, "user lookup"), self.engine.connect() as conn:
            row = conn.execute(schueler.select().where(schueler.c.token == token)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users in the store's natural order."""
        with translate_errors(logger, "user listing"), self.engine.connect() as conn:
            rows = conn.execute(schueler.select()).fetchall()
        return [_row_to_user(r) for r in rows]

    def create_user(self, user: User) -> int:
        """Insert a user record and return its assigned ID.

        Raises Upstream (wrapping IntegrityError) if the token is already taken.
        """
        with translate_errors(logger, "user insert"), self.engine.connect() as conn:
            result = conn.execute(
                schueler.insert().values(
                    nachname=user.surname,
                    email=user.email,
                    status=user.status,
                    token=user.token,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        surname=row.nachname,
        email=row.email,
        status=row.status,
        token=row.token,
    )
