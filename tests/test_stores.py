"""Unit tests for auth/store.py and board/store.py.

Covers:
- CredentialStore: token_exists (case-sensitive), get_by_token, list_users,
  duplicate token -> Upstream
- EntryStore: insert assigns ids, get_by_id, list_all, get_contact join
  (bound owner, unbound owner, missing entry)
- driver failures surface as Upstream
"""

import pytest

from auth.models import User
from board.models import EntryDraft
from core.errors import Upstream


def _draft(**overrides) -> EntryDraft:
    fields = {"title": "Mitfahrt Berlin", "message": "Suche Mitfahrer", "entry_type": "Angebot", "seats": 3}
    fields.update(overrides)
    return EntryDraft(**fields)


# ---------------------------------------------------------------------------
# CredentialStore
# ---------------------------------------------------------------------------


class TestCredentialStore:
    def test_token_exists(self, credentials):
        assert credentials.token_exists("abc123") is True
        assert credentials.token_exists("ABC123") is False
        assert credentials.token_exists("unknown") is False

    def test_get_by_token(self, credentials):
        user = credentials.get_by_token("abc123")
        assert user is not None
        assert user.surname == "Albrecht"
        assert user.email == "alice@example.org"
        assert user.status == "aktiv"
        assert user.id is not None

    def test_get_by_token_missing(self, credentials):
        assert credentials.get_by_token("unknown") is None

    def test_list_users(self, credentials):
        users = credentials.list_users()
        assert {u.token for u in users} == {"abc123", "tok-bob"}

    def test_duplicate_token_is_upstream(self, credentials):
        with pytest.raises(Upstream):
            credentials.create_user(User(surname="Clone", email="clone@example.org", token="abc123"))


# ---------------------------------------------------------------------------
# EntryStore
# ---------------------------------------------------------------------------


class TestEntryStore:
    def test_insert_assigns_id_and_echoes_fields(self, entries, credentials):
        owner = credentials.get_by_token("abc123")
        entry = entries.insert(_draft(), owner_id=owner.id)
        assert entry.id is not None
        assert entry.title == "Mitfahrt Berlin"
        assert entry.entry_type == "Angebot"
        assert entry.seats == 3
        assert entry.owner_id == owner.id

    def test_get_by_id_roundtrip(self, entries):
        created = entries.insert(_draft(entry_type="Anfrage", seats=0))
        fetched = entries.get_by_id(created.id)
        assert fetched == created

    def test_get_by_id_missing(self, entries):
        assert entries.get_by_id(99999) is None

    def test_list_all(self, entries):
        assert entries.list_all() == []
        first = entries.insert(_draft(title="Eins"))
        second = entries.insert(_draft(title="Zwei"))
        ids = {e.id for e in entries.list_all()}
        assert ids == {first.id, second.id}

    def test_contact_for_bound_owner(self, entries, credentials):
        owner = credentials.get_by_token("tok-bob")
        entry = entries.insert(_draft(), owner_id=owner.id)
        contact = entries.get_contact(entry.id)
        assert contact is not None
        assert contact.email == "bob@example.org"

    def test_contact_missing_when_owner_unbound(self, entries):
        entry = entries.insert(_draft())
        assert entries.get_contact(entry.id) is None

    def test_contact_missing_entry(self, entries):
        assert entries.get_contact(99999) is None


def test_driver_failure_is_upstream(entries, monkeypatch):
    """A driver-level error inside a query is translated, not leaked."""
    from sqlalchemy.exc import OperationalError

    def _boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(entries.engine, "connect", _boom)
    with pytest.raises(Upstream) as exc_info:
        entries.list_all()
    assert exc_info.value.message == "Data store unavailable."
    assert "refused" not in exc_info.value.message
