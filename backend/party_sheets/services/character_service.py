"""
Character Service

File intake and import: turns uploaded bytes into a stored, normalized
character.
"""

from typing import Any, Dict, List, Optional, Union
import json
import logging

from party_sheets.core.errors import MalformedInputError, StorageError
from party_sheets.models.character import CharacterRecord
from party_sheets.services.character_parser import normalize
from party_sheets.services.character_store import CharacterStore, StoredCharacter

logger = logging.getLogger("party_sheets.import")


def load_character_json(content: Union[bytes, str]) -> Dict[str, Any]:
    """
    Decode an uploaded export into a JSON object.

    Args:
        content: Raw file content

    Returns:
        The decoded top-level object

    Raises:
        MalformedInputError: content is not UTF-8 JSON or not an object
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedInputError("File is not UTF-8 text") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e

    if not isinstance(data, dict):
        raise MalformedInputError(f"Expected a JSON object, got {type(data).__name__}")

    return data


def validate_character(record: CharacterRecord) -> List[str]:
    """
    Collect warnings about a normalized character.

    These are informational only; an import never fails on them.

    Args:
        record: Normalized character

    Returns:
        List of warning messages (empty if all good)
    """
    warnings = []

    if not record.name:
        warnings.append("Character name is missing")

    if record.ability_scores is None:
        warnings.append("No ability scores found - stats view will be empty")
    else:
        for stat, score in record.ability_scores.items():
            if score.value < 1 or score.value > 30:
                warnings.append(f"Unusual {stat.upper()} score: {score.value}")

    if record.hp is not None and record.hp.max <= 0:
        warnings.append("Hit points should be greater than 0")

    if not record.character_class:
        warnings.append("Class could not be resolved")

    known_containers = record.container_map()
    dangling = sorted({
        item.container_id for item in record.items
        if item.container_id is not None and item.container_id not in known_containers
    })
    if dangling:
        warnings.append(f"{len(dangling)} item container reference(s) point at missing containers")

    return warnings


async def import_character(
    content: Union[bytes, str],
    store: CharacterStore,
    name: Optional[str] = None,
) -> StoredCharacter:
    """
    Import an uploaded export: decode, normalize and save.

    Args:
        content: Raw file content
        store: Where to save the character
        name: Optional display name overriding the character's own

    Returns:
        The stored character
    """
    record = normalize(load_character_json(content))
    character_id = await store.save_character(record, name)
    stored = await store.get_character(character_id)
    if stored is None:
        raise StorageError(
            "Character was saved but could not be read back",
            details={"character_id": character_id},
        )

    logger.info(f"Imported character {record.name!r} as {character_id}")
    return stored
