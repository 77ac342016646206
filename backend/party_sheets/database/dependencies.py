"""
FastAPI dependencies for character storage.

Provides dependency injection for the character store,
enabling clean separation of concerns and easy testing.
"""
from functools import lru_cache
from pathlib import Path

from party_sheets.config import get_settings
from party_sheets.services.character_store import (
    CharacterStore,
    DatabaseCharacterStore,
    FallbackCharacterStore,
    LocalCharacterStore,
)


@lru_cache()
def _default_store() -> CharacterStore:
    settings = get_settings()
    return FallbackCharacterStore(
        primary=DatabaseCharacterStore(),
        fallback=LocalCharacterStore(Path(settings.LOCAL_STORE_PATH)),
    )


async def get_character_store() -> CharacterStore:
    """Dependency for the application's CharacterStore."""
    return _default_store()
