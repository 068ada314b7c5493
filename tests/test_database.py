"""Unit tests for core/database.py.

Covers:
- file SQLite gets the configured pool bound (size, no overflow, timeout)
- pool exhaustion surfaces as Upstream through translate_errors
- in-memory SQLite URLs still build without pool arguments
"""

import logging
import uuid

import pytest
from sqlalchemy import text

from core.database import create_db_engine, translate_errors
from core.errors import Upstream

logger = logging.getLogger("mitfahrboerse.tests")


@pytest.fixture
def file_engine(tmp_path):
    eng = create_db_engine(f"sqlite:///{tmp_path / 'board.db'}", pool_size=1, pool_timeout=0.1)
    yield eng
    eng.dispose()


def test_file_sqlite_uses_configured_pool(file_engine):
    assert file_engine.pool.size() == 1
    assert file_engine.pool.timeout() == 0.1


def test_file_sqlite_pool_has_no_overflow(file_engine):
    with file_engine.connect():
        with pytest.raises(Upstream) as exc_info:
            with translate_errors(logger, "second checkout"):
                file_engine.connect()
    assert exc_info.value.detail == "second checkout"


def test_connection_is_reusable_after_release(file_engine):
    with file_engine.connect() as conn:
        assert conn.execute(text("SELECT 1")).scalar() == 1
    with file_engine.connect() as conn:
        assert conn.execute(text("SELECT 2")).scalar() == 2


@pytest.mark.parametrize(
    "url",
    [
        "sqlite://",
        "sqlite:///:memory:",
        f"sqlite:///file:db_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true",
    ],
)
def test_memory_sqlite_builds_without_pool_arguments(url):
    eng = create_db_engine(url, pool_size=1, pool_timeout=0.1)
    try:
        with eng.connect() as conn:
            assert conn.execute(text("SELECT 1")).scalar() == 1
    finally:
        eng.dispose()
