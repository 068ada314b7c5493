"""
tests/conftest.py -- Shared test fixtures for Mitfahrbörse tests.

This module provides:
  - FakeClock: a monotonic clock the tests advance by hand
  - engine: an isolated named shared-memory SQLite engine
  - credentials / entries: stores on that engine, with two seeded users
  - make_client(): TestClient factory wired to the test stores and clock
  - api_client: the default TestClient harness

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because store calls run in a thread pool (run_in_threadpool, and TestClient's
own worker thread). Plain :memory: DBs are per-connection and would present a
blank schema to each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process. Each test gets its own name, so
no state leaks between tests.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from auth.gate import AuthGate
from auth.models import User
from auth.sessions import SessionTable
from auth.store import CredentialStore
from board.store import EntryStore
from core.config import Settings
from core.database import create_db_engine

ALICE_TOKEN = "abc123"
BOB_TOKEN = "tok-bob"
IDLE_SECONDS = 600


class FakeClock:
    """Stand-in for time.monotonic(); only moves when advance() is called."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class Harness:
    client: TestClient
    clock: FakeClock
    sessions: SessionTable
    credentials: CredentialStore
    entries: EntryStore
    alice_id: int
    bob_id: int

    def login(self, token: str = ALICE_TOKEN) -> dict[str, str]:
        """Log token in and return the matching Authorization header."""
        resp = self.client.post(f"/login/{token}")
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    url = f"sqlite:///file:test_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = create_db_engine(url)
    yield eng
    eng.dispose()


@pytest.fixture
def credentials(engine: Engine) -> CredentialStore:
    """CredentialStore with alice (abc123) and bob (tok-bob) provisioned."""
    store = CredentialStore(engine)
    store.create_user(User(surname="Albrecht", email="alice@example.org", token=ALICE_TOKEN))
    store.create_user(User(surname="Bauer", email="bob@example.org", token=BOB_TOKEN, status="inaktiv"))
    return store


@pytest.fixture
def entries(engine: Engine, credentials: CredentialStore) -> EntryStore:
    return EntryStore(engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(settings: Settings, credentials: CredentialStore, entries: EntryStore, sessions: SessionTable):
    """Return an async context manager that replaces the real lifespan.

    Wires the test stores and the fake-clock session table into app.state so
    routes see isolated test state rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.credentials = credentials
        app.state.entries = entries
        app.state.sessions = sessions
        app.state.gate = AuthGate(sessions, credentials)
        app.state.sweep_task = None
        yield

    return test_lifespan


@pytest.fixture
def make_client(
    credentials: CredentialStore, entries: EntryStore, clock: FakeClock
) -> Generator[Callable[..., Harness], None, None]:
    """Factory: make_client(**settings_overrides) -> Harness.

    Settings are built with _env_file=None so a developer's .env never leaks
    into tests.
    """
    original_lifespan = app.router.lifespan_context
    clients: list[TestClient] = []
    alice_id = credentials.get_by_token(ALICE_TOKEN).id
    bob_id = credentials.get_by_token(BOB_TOKEN).id

    def _make(**overrides) -> Harness:
        settings = Settings(_env_file=None, session_idle_seconds=IDLE_SECONDS, **overrides)
        sessions = SessionTable(idle_limit=settings.session_idle_seconds, shards=4, clock=clock)
        app.router.lifespan_context = _patch_lifespan(settings, credentials, entries, sessions)
        client = TestClient(app, raise_server_exceptions=True)
        client.__enter__()
        clients.append(client)
        return Harness(client, clock, sessions, credentials, entries, alice_id, bob_id)

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
    app.router.lifespan_context = original_lifespan


@pytest.fixture
def api_client(make_client: Callable[..., Harness]) -> Harness:
    """Default harness: fully gated, owner binding on."""
    return make_client()
