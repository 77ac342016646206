"""
Ability scores.

The six D&D 5e abilities, keyed the way character exports key them.
"""
from enum import Enum
from typing import Dict, List


class Ability(str, Enum):
    """Ability score keys."""
    STRENGTH = "str"
    DEXTERITY = "dex"
    CONSTITUTION = "con"
    INTELLIGENCE = "int"
    WISDOM = "wis"
    CHARISMA = "cha"


ABILITY_KEYS: List[str] = [ability.value for ability in Ability]

ABILITY_NAMES: Dict[str, str] = {
    "str": "Strength",
    "dex": "Dexterity",
    "con": "Constitution",
    "int": "Intelligence",
    "wis": "Wisdom",
    "cha": "Charisma",
}

DEFAULT_SCORE = 10

# Tri-state flag used by exports for saving throw proficiency;
# only this literal value means proficient.
PROFICIENT_FLAG = 1


def get_ability_modifier(score: int) -> int:
    """Calculate ability modifier from score (D&D 5e formula, floors toward -inf)."""
    return (score - 10) // 2
