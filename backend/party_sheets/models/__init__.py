# Character Models

from .character import (
    CharacterRecord,
    HitPoints,
    AbilityScore,
    Skill,
    Spell,
    SpellComponents,
    SpellSlot,
    Item,
    Container,
    Feature,
    Proficiencies,
)

__all__ = [
    "CharacterRecord",
    "HitPoints",
    "AbilityScore",
    "Skill",
    "Spell",
    "SpellComponents",
    "SpellSlot",
    "Item",
    "Container",
    "Feature",
    "Proficiencies",
]
