"""
Party Sheets - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import copy
import pytest
from typing import Dict, Any
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


_FOUNDRY_EXPORT: Dict[str, Any] = {
    "name": "Elara Moonwhisper",
    "type": "character",
    "system": {
        "abilities": {
            "str": {"value": 8, "proficient": 0},
            "dex": {"value": 14, "proficient": 0},
            "con": {"value": 13, "proficient": 0},
            "int": {"value": 17, "proficient": 1},
            "wis": {"value": 12, "proficient": 1},
            "cha": {"value": 10, "proficient": 0},
        },
        "attributes": {
            "hp": {"value": 22, "max": 28, "temp": 5},
            "ac": {"flat": 12, "calc": "default"},
            "movement": {"walk": 30, "units": "ft"},
        },
        "details": {
            "xp": {"value": 6500},
            "alignment": "Neutral Good",
            "race": "raceElf0001",
            "originalClass": "clsWizard001",
            "background": "bgSage000001",
        },
        "skills": {
            "arc": {"value": 2, "ability": "int", "bonuses": {"check": ""}},
            "his": {"value": 1, "ability": "int", "bonuses": {"check": "1"}},
            "prc": {"value": 0, "ability": "wis"},
            "ste": {"value": 0, "ability": "dex", "bonuses": {"check": "@prof"}},
        },
        "spells": {
            "spell1": {"value": 3, "max": 4},
            "spell2": {"value": 0, "max": 3},
            "spell3": {"value": 2, "override": None},
            "spell4": {"value": None, "max": 0},
        },
        "traits": {
            "languages": {"value": ["common", "elvish", "draconic"]},
            "weaponProf": {"value": ["dagger", "quarterstaff"]},
            "armorProf": {"value": []},
        },
    },
    "items": [
        {"_id": "raceElf0001", "name": "High Elf", "type": "race", "system": {}},
        {"_id": "clsWizard001", "name": "Wizard", "type": "class", "system": {"levels": 5}},
        {"_id": "bgSage000001", "name": "Sage", "type": "background", "system": {}},
        {
            "_id": "spFireBolt01",
            "name": "Fire Bolt",
            "type": "spell",
            "system": {
                "level": 0,
                "school": "evo",
                "description": {"value": "<p>You hurl a mote of fire.</p>"},
                "components": {"vocal": True, "somatic": True, "material": False},
                "range": {"value": 120, "units": "ft"},
                "time": {"value": "1 action"},
                "duration": {"value": "Instantaneous"},
            },
        },
        {
            "_id": "spShield0001",
            "name": "Shield",
            "type": "spell",
            "system": {
                "level": 1,
                "school": {"value": "abj"},
                "preparation": {"prepared": True},
                "components": {"vocal": True, "somatic": True},
            },
        },
        {
            "_id": "spDetectMag1",
            "name": "Detect Magic",
            "type": "spell",
            "system": {
                "level": 1,
                "school": "div",
                "components": {"vocal": True, "somatic": True, "ritual": True},
                "duration": {"value": "10 minutes", "concentration": True},
            },
        },
        {
            "_id": "ctBackpack01",
            "name": "Backpack",
            "type": "container",
            "system": {"weight": {"value": 5}},
        },
        {
            "_id": "wpQstaff0001",
            "name": "Quarterstaff",
            "type": "weapon",
            "system": {
                "quantity": 1,
                "weight": {"value": 4, "units": "lb"},
                "equipped": True,
                "properties": {"value": ["ver"]},
                "container": None,
            },
        },
        {
            "_id": "lootRations1",
            "name": "Rations",
            "type": "consumable",
            "system": {"quantity": 5, "weight": {"value": 2}, "container": "ctBackpack01"},
        },
        {
            "_id": "eqRingProt01",
            "name": "Ring of Protection",
            "type": "equipment",
            "system": {"attunement": "required", "rarity": "rare", "equipped": True},
        },
        {
            "_id": "lootGem00001",
            "name": "Moonstone",
            "type": "loot",
            "system": {"container": "ctLostBag001", "attuned": True},
        },
        {
            "_id": "ftArcRecov01",
            "name": "Arcane Recovery",
            "type": "feat",
            "system": {"description": {"value": "<p>Recover spell slots on a short rest.</p>"}},
        },
    ],
}


@pytest.fixture
def foundry_export() -> Dict[str, Any]:
    """A realistic Foundry VTT export of a 5th level wizard."""
    return copy.deepcopy(_FOUNDRY_EXPORT)


@pytest.fixture
def minimal_export() -> Dict[str, Any]:
    """The smallest export that still names a character."""
    return {
        "name": "Aria",
        "system": {
            "details": {"xp": {"value": 900}},
            "abilities": {"str": {"value": 14, "proficient": 1}},
        },
        "items": [],
    }


@pytest.fixture
def local_store(tmp_path):
    """A character store backed by a JSON file in a temp directory."""
    from party_sheets.services.character_store import LocalCharacterStore
    return LocalCharacterStore(tmp_path / "characters.json")
