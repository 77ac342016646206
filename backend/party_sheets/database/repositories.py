"""
Repository pattern for database access.

Provides clean abstractions for CRUD operations on database models.
"""
from typing import List, Optional, Dict, Any

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from party_sheets.database.models import CharacterRow, utc_now


# =============================================================================
# CHARACTER REPOSITORY
# =============================================================================

class CharacterRepository:
    """Repository for stored character CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, character_id: str, name: str, data: Dict[str, Any]) -> CharacterRow:
        """Store a normalized character under the given id."""
        row = CharacterRow(
            id=character_id,
            name=name,
            data=data,
            uploaded_at=utc_now(),
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_by_id(self, character_id: str) -> Optional[CharacterRow]:
        """Get a character by ID."""
        result = await self.session.execute(
            select(CharacterRow).where(CharacterRow.id == character_id)
        )
        return result.scalar_one_or_none()

    async def get_all(self, limit: Optional[int] = None) -> List[CharacterRow]:
        """Get all characters in upload order."""
        query = select(CharacterRow).order_by(CharacterRow.uploaded_at.asc(), CharacterRow.id.asc())
        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def rename(self, character_id: str, name: str) -> Optional[CharacterRow]:
        """Change a character's display name."""
        row = await self.get_by_id(character_id)
        if not row:
            return None

        row.name = name
        await self.session.flush()
        return row

    async def delete(self, character_id: str) -> bool:
        """Permanently delete a character."""
        result = await self.session.execute(
            delete(CharacterRow).where(CharacterRow.id == character_id)
        )
        return result.rowcount > 0
