"""
Character Store

Persistence for imported characters behind one async interface:
- DatabaseCharacterStore: SQL table via the async repository
- LocalCharacterStore: a single JSON file holding the whole collection
- FallbackCharacterStore: primary store with a fallback when it is unreachable

The normalizer never touches a store; routes receive one through
dependency injection.
"""

import asyncio
import json
import logging
import random
import string
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional

from pydantic import BaseModel, ValidationError, field_validator
from sqlalchemy.exc import SQLAlchemyError

from party_sheets.core.errors import CharacterNotFoundError, StorageError
from party_sheets.database.engine import get_session_context
from party_sheets.database.models import CharacterRow
from party_sheets.database.repositories import CharacterRepository
from party_sheets.models.character import CharacterRecord

logger = logging.getLogger("party_sheets.store")

UNNAMED_CHARACTER = "Unnamed Character"
_ID_ALPHABET = string.digits + string.ascii_lowercase


class StoredCharacter(BaseModel):
    """A normalized character as kept in a store."""
    id: str
    name: str
    data: CharacterRecord
    uploaded_at: datetime

    @field_validator("uploaded_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; every store writes UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def generate_character_id() -> str:
    """Generate an id like ``char-1718000000000-k3j9x0a2b``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"char-{millis}-{suffix}"


def display_name(record: CharacterRecord, name: Optional[str] = None) -> str:
    """Caller-supplied name, else the character's own name, else a placeholder."""
    for candidate in (name, record.name):
        if candidate and candidate.strip():
            return candidate.strip()
    return UNNAMED_CHARACTER


class CharacterStore(ABC):
    """Operations every character store supports."""

    @abstractmethod
    async def list_characters(self) -> List[StoredCharacter]:
        """All stored characters in upload order."""

    @abstractmethod
    async def get_character(self, character_id: str) -> Optional[StoredCharacter]:
        """One character, or ``None`` when the id is unknown."""

    @abstractmethod
    async def save_character(self, record: CharacterRecord, name: Optional[str] = None) -> str:
        """Store a record and return its new id."""

    @abstractmethod
    async def delete_character(self, character_id: str) -> None:
        """Remove a character. Raises CharacterNotFoundError for unknown ids."""

    @abstractmethod
    async def rename_character(self, character_id: str, name: str) -> None:
        """Change the stored display name only. Raises CharacterNotFoundError for unknown ids."""


# =============================================================================
# DATABASE STORE
# =============================================================================

class DatabaseCharacterStore(CharacterStore):
    """Characters kept in the ``characters`` table."""

    def __init__(self, session_context: Callable = get_session_context):
        self._session_context = session_context

    @asynccontextmanager
    async def _repository(self) -> AsyncIterator[CharacterRepository]:
        try:
            async with self._session_context() as session:
                yield CharacterRepository(session)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(details={"backend": "database", "reason": str(e)}) from e

    @staticmethod
    def _to_stored(row: CharacterRow) -> StoredCharacter:
        return StoredCharacter(
            id=row.id,
            name=row.name,
            data=CharacterRecord.model_validate(row.data),
            uploaded_at=row.uploaded_at,
        )

    async def list_characters(self) -> List[StoredCharacter]:
        async with self._repository() as repo:
            rows = await repo.get_all()
            return [self._to_stored(row) for row in rows]

    async def get_character(self, character_id: str) -> Optional[StoredCharacter]:
        async with self._repository() as repo:
            row = await repo.get_by_id(character_id)
            return self._to_stored(row) if row else None

    async def save_character(self, record: CharacterRecord, name: Optional[str] = None) -> str:
        character_id = generate_character_id()
        async with self._repository() as repo:
            await repo.create(character_id, display_name(record, name), record.model_dump(mode="json"))
        return character_id

    async def delete_character(self, character_id: str) -> None:
        async with self._repository() as repo:
            deleted = await repo.delete(character_id)
        if not deleted:
            raise CharacterNotFoundError(character_id)

    async def rename_character(self, character_id: str, name: str) -> None:
        async with self._repository() as repo:
            row = await repo.rename(character_id, name)
        if row is None:
            raise CharacterNotFoundError(character_id)


# =============================================================================
# LOCAL FILE STORE
# =============================================================================

class LocalCharacterStore(CharacterStore):
    """
    Characters kept in one JSON file.

    The whole collection is read and rewritten on every change. An
    unreadable or corrupt file reads as an empty collection.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> List[StoredCharacter]:
        if not self.path.exists():
            return []
        try:
            entries = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable character file {self.path}: {e}")
            return []
        if not isinstance(entries, list):
            return []

        characters = []
        for entry in entries:
            try:
                characters.append(StoredCharacter.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping malformed stored character in {self.path}: {e}")
        return characters

    def _write(self, characters: List[StoredCharacter]) -> None:
        payload = [character.model_dump(mode="json") for character in characters]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StorageError(details={"backend": "local", "reason": str(e)}) from e

    # File access runs in a worker thread so a slow disk never blocks the loop

    async def list_characters(self) -> List[StoredCharacter]:
        async with self._lock:
            return await asyncio.to_thread(self._read)

    async def get_character(self, character_id: str) -> Optional[StoredCharacter]:
        async with self._lock:
            characters = await asyncio.to_thread(self._read)
        for character in characters:
            if character.id == character_id:
                return character
        return None

    async def save_character(self, record: CharacterRecord, name: Optional[str] = None) -> str:
        stored = StoredCharacter(
            id=generate_character_id(),
            name=display_name(record, name),
            data=record,
            uploaded_at=datetime.now(timezone.utc),
        )
        async with self._lock:
            characters = await asyncio.to_thread(self._read)
            characters.append(stored)
            await asyncio.to_thread(self._write, characters)
        return stored.id

    async def delete_character(self, character_id: str) -> None:
        async with self._lock:
            characters = await asyncio.to_thread(self._read)
            remaining = [c for c in characters if c.id != character_id]
            if len(remaining) == len(characters):
                raise CharacterNotFoundError(character_id)
            await asyncio.to_thread(self._write, remaining)

    async def rename_character(self, character_id: str, name: str) -> None:
        async with self._lock:
            characters = await asyncio.to_thread(self._read)
            for index, character in enumerate(characters):
                if character.id == character_id:
                    characters[index] = character.model_copy(update={"name": name})
                    await asyncio.to_thread(self._write, characters)
                    return
        raise CharacterNotFoundError(character_id)


# =============================================================================
# FALLBACK STORE
# =============================================================================

class FallbackCharacterStore(CharacterStore):
    """
    Use ``primary`` and switch to ``fallback`` whenever it raises StorageError.

    Characters saved to the fallback during an outage stay reachable after
    the primary recovers: listings merge both stores, and lookups, renames
    and deletes the primary does not know about go to the fallback.
    """

    def __init__(self, primary: CharacterStore, fallback: CharacterStore):
        self.primary = primary
        self.fallback = fallback

    def _log_failure(self, operation: str, error: StorageError, store: str = "Primary") -> None:
        logger.warning(
            f"{store} character store failed on {operation} "
            f"({error.details.get('reason', error.message)})"
        )

    async def list_characters(self) -> List[StoredCharacter]:
        try:
            primary = await self.primary.list_characters()
        except StorageError as e:
            self._log_failure("list_characters", e)
            return await self.fallback.list_characters()

        try:
            fallback = await self.fallback.list_characters()
        except StorageError as e:
            self._log_failure("list_characters", e, store="Fallback")
            return primary

        merged = {character.id: character for character in primary}
        for character in fallback:
            merged.setdefault(character.id, character)
        return sorted(merged.values(), key=lambda character: character.uploaded_at)

    async def get_character(self, character_id: str) -> Optional[StoredCharacter]:
        try:
            stored = await self.primary.get_character(character_id)
        except StorageError as e:
            self._log_failure("get_character", e)
            stored = None
        if stored is None:
            stored = await self.fallback.get_character(character_id)
        return stored

    async def save_character(self, record: CharacterRecord, name: Optional[str] = None) -> str:
        try:
            return await self.primary.save_character(record, name)
        except StorageError as e:
            self._log_failure("save_character", e)
            return await self.fallback.save_character(record, name)

    async def delete_character(self, character_id: str) -> None:
        try:
            await self.primary.delete_character(character_id)
        except StorageError as e:
            self._log_failure("delete_character", e)
            await self.fallback.delete_character(character_id)
        except CharacterNotFoundError:
            await self.fallback.delete_character(character_id)

    async def rename_character(self, character_id: str, name: str) -> None:
        try:
            await self.primary.rename_character(character_id, name)
        except StorageError as e:
            self._log_failure("rename_character", e)
            await self.fallback.rename_character(character_id, name)
        except CharacterNotFoundError:
            await self.fallback.rename_character(character_id, name)
