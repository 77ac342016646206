"""Database package for Party Sheets."""
from party_sheets.database.engine import (
    get_engine,
    get_session_context,
    init_db,
    ping_database,
    close_db,
)
from party_sheets.database.models import CharacterRow
from party_sheets.database.repositories import CharacterRepository

__all__ = [
    "get_engine",
    "get_session_context",
    "init_db",
    "ping_database",
    "close_db",
    "CharacterRow",
    "CharacterRepository",
]
