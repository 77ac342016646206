# Business Logic Services
"""
Services package for Party Sheets.

Provides character parsing, import, storage and view services.
"""

from .character_parser import FoundryCharacterParser, normalize
from .character_service import (
    load_character_json,
    import_character,
    validate_character,
)
from .character_store import (
    CharacterStore,
    StoredCharacter,
    DatabaseCharacterStore,
    LocalCharacterStore,
    FallbackCharacterStore,
)

__all__ = [
    'FoundryCharacterParser',
    'normalize',
    'load_character_json',
    'import_character',
    'validate_character',
    'CharacterStore',
    'StoredCharacter',
    'DatabaseCharacterStore',
    'LocalCharacterStore',
    'FallbackCharacterStore',
]
