"""
Database models for Party Sheets.

Uses SQLModel (SQLAlchemy + Pydantic) for type-safe database access.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlmodel import SQLModel, Field, Column, JSON


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# CHARACTER MODEL
# =============================================================================

class CharacterRow(SQLModel, table=True):
    """
    Persistent character storage.

    ``data`` holds the normalized record as JSON; renaming only touches
    ``name``.
    """
    __tablename__ = "characters"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)

    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    uploaded_at: datetime = Field(default_factory=utc_now, index=True)
