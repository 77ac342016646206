"""
Skill System.

The eighteen D&D 5e skills under the short keys used by character exports.
The governing ability of a skill is read from each export rather than from
a fixed table, so house-ruled remaps survive import.
"""

from enum import IntEnum
from typing import Dict, List


SKILL_NAMES: Dict[str, str] = {
    "acr": "Acrobatics",
    "ani": "Animal Handling",
    "arc": "Arcana",
    "ath": "Athletics",
    "dec": "Deception",
    "his": "History",
    "ins": "Insight",
    "itm": "Intimidation",
    "inv": "Investigation",
    "med": "Medicine",
    "nat": "Nature",
    "prc": "Perception",
    "prf": "Performance",
    "per": "Persuasion",
    "rel": "Religion",
    "slt": "Sleight of Hand",
    "ste": "Stealth",
    "sur": "Survival",
}

SKILL_KEYS: List[str] = list(SKILL_NAMES)


class ProficiencyTier(IntEnum):
    """Skill proficiency as encoded in exports: 0 none, 1 proficient, 2 expertise."""
    NONE = 0
    PROFICIENT = 1
    EXPERTISE = 2

    @classmethod
    def from_source(cls, value) -> "ProficiencyTier":
        """Only the exact values 1 and 2 carry meaning; anything else is NONE."""
        if isinstance(value, bool):
            return cls.NONE
        if value == 1:
            return cls.PROFICIENT
        if value == 2:
            return cls.EXPERTISE
        return cls.NONE


def get_skill_display_name(skill_key: str) -> str:
    """Get human-readable skill name, falling back to the raw key."""
    return SKILL_NAMES.get(skill_key, skill_key)


def calculate_skill_total(
    ability_modifier: int,
    proficiency_bonus: int,
    tier: ProficiencyTier,
    misc_bonus: int = 0,
) -> int:
    """
    Calculate a skill's total modifier.

    Expertise applies the proficiency bonus twice.
    """
    return ability_modifier + proficiency_bonus * int(tier) + misc_bonus
