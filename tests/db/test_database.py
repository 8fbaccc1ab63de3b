"""Unit tests for chessrules/db/database.py"""

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from chessrules.core.config import Settings
from chessrules.db.database import get_db, get_engine


def test_get_db_yields_a_session_with_tables() -> None:
    sessions = get_db(Settings(database_url="sqlite:///:memory:"))
    db = next(sessions)
    try:
        assert isinstance(db, Session)
        assert "games" in inspect(db.get_bind()).get_table_names()
    finally:
        sessions.close()


def test_one_engine_per_database() -> None:
    assert get_engine("sqlite:///:memory:") is get_engine("sqlite:///:memory:")
