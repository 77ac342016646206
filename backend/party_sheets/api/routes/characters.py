"""
Character API Routes

Import, list, view, rename and delete stored characters, plus the
per-character spell and inventory views.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import BaseModel, Field, field_validator

from party_sheets.config import get_settings
from party_sheets.core.errors import CharacterNotFoundError, FileTooLargeError, MalformedInputError
from party_sheets.core.progression import get_xp_for_next_level, xp_to_next_level
from party_sheets.core.skills import get_skill_display_name
from party_sheets.database.dependencies import get_character_store
from party_sheets.services.character_service import import_character, validate_character
from party_sheets.services.character_store import CharacterStore, StoredCharacter
from party_sheets.services.inventory import group_items_by_container, item_types
from party_sheets.services.spellbook import group_spells_by_level

router = APIRouter()


# ==================== Request/Response Models ====================

class CharacterSummary(BaseModel):
    """Party list entry."""
    id: str
    name: str
    uploaded_at: datetime
    level: int
    race: str
    character_class: str

    @classmethod
    def from_stored(cls, stored: StoredCharacter) -> "CharacterSummary":
        return cls(
            id=stored.id,
            name=stored.name,
            uploaded_at=stored.uploaded_at,
            level=stored.data.level,
            race=stored.data.race,
            character_class=stored.data.character_class,
        )


class RenameRequest(BaseModel):
    """Request to change a character's display name."""
    name: str = Field(min_length=1, max_length=120)

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        # Length limits apply to the trimmed name
        return value.strip() if isinstance(value, str) else value


async def _get_or_404(store: CharacterStore, character_id: str) -> StoredCharacter:
    stored = await store.get_character(character_id)
    if stored is None:
        raise CharacterNotFoundError(character_id)
    return stored


# ==================== Import ====================

@router.post("/import", status_code=status.HTTP_201_CREATED)
async def import_character_file(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    store: CharacterStore = Depends(get_character_store),
):
    """
    Import a character from a Foundry VTT JSON export.

    Args:
        file: JSON file upload
        name: Optional display name (defaults to the character's name)

    Returns:
        The stored character and any import warnings
    """
    settings = get_settings()
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise FileTooLargeError(len(content), settings.MAX_UPLOAD_BYTES)
    if not content:
        raise MalformedInputError("File is empty")

    stored = await import_character(content, store, name=name)

    return {
        "success": True,
        "character_id": stored.id,
        "character": stored.model_dump(mode="json"),
        "warnings": validate_character(stored.data),
        "message": f"Successfully imported {stored.name}",
    }


# ==================== Party List ====================

@router.get("", response_model=List[CharacterSummary])
async def list_characters(store: CharacterStore = Depends(get_character_store)):
    """List all stored characters in upload order."""
    return [CharacterSummary.from_stored(stored) for stored in await store.list_characters()]


@router.get("/{character_id}", response_model=StoredCharacter)
async def get_character(character_id: str, store: CharacterStore = Depends(get_character_store)):
    """Get a stored character with its full normalized record."""
    return await _get_or_404(store, character_id)


@router.patch("/{character_id}", response_model=CharacterSummary)
async def rename_character(
    character_id: str,
    request: RenameRequest,
    store: CharacterStore = Depends(get_character_store),
):
    """Rename a stored character. The normalized record is left untouched."""
    await store.rename_character(character_id, request.name)
    return CharacterSummary.from_stored(await _get_or_404(store, character_id))


@router.delete("/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_character(character_id: str, store: CharacterStore = Depends(get_character_store)):
    """Delete a stored character."""
    await store.delete_character(character_id)


# ==================== Views ====================

@router.get("/{character_id}/stats")
async def get_stats(character_id: str, store: CharacterStore = Depends(get_character_store)):
    """Stats view: vitals, abilities, skills with display names, proficiencies and features."""
    record = (await _get_or_404(store, character_id)).data

    skills = {
        key: {**skill.model_dump(), "name": get_skill_display_name(key)}
        for key, skill in (record.skills or {}).items()
    }

    return {
        "name": record.name,
        "level": record.level,
        "experience": record.experience,
        "next_level_xp": get_xp_for_next_level(record.level),
        "xp_to_next_level": xp_to_next_level(record.experience),
        "proficiency_bonus": record.proficiency_bonus,
        "race": record.race,
        "character_class": record.character_class,
        "background": record.background,
        "alignment": record.alignment,
        "hp": record.hp.model_dump() if record.hp else None,
        "armor_class": record.armor_class,
        "speed": record.speed,
        "ability_scores": (
            {key: score.model_dump() for key, score in record.ability_scores.items()}
            if record.ability_scores is not None else None
        ),
        "skills": skills if record.skills is not None else None,
        "proficiencies": record.proficiencies.model_dump(),
        "features": [feature.model_dump() for feature in record.features],
    }


@router.get("/{character_id}/spells")
async def get_spells(
    character_id: str,
    level: Optional[int] = Query(None, ge=0, le=9),
    prepared: str = Query("all", pattern="^(all|prepared|unprepared)$"),
    store: CharacterStore = Depends(get_character_store),
):
    """Spells grouped by level, with spell slots."""
    record = (await _get_or_404(store, character_id)).data
    groups = group_spells_by_level(record, level="all" if level is None else level, prepared=prepared)

    return {
        "spell_count": sum(len(group.spells) for group in groups),
        "spell_slots": [slot.model_dump() for slot in record.spell_slots],
        "levels": [group.to_dict() for group in groups],
    }


@router.get("/{character_id}/inventory")
async def get_inventory(
    character_id: str,
    item_type: str = Query("all", alias="type"),
    equipped: str = Query("all", pattern="^(all|equipped|unequipped)$"),
    store: CharacterStore = Depends(get_character_store),
):
    """Items grouped by container, loose items first."""
    record = (await _get_or_404(store, character_id)).data
    groups = group_items_by_container(record, item_type=item_type, equipped=equipped)

    return {
        "item_types": item_types(record.items),
        "containers": [container.model_dump() for container in record.containers],
        "groups": [group.to_dict() for group in groups],
    }
