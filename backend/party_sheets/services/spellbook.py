"""
Spellbook Views

Filtering and level grouping for a character's spells. The normalized
record keeps spells in export order; grouping happens only here.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from party_sheets.models.character import CharacterRecord, Spell, SpellSlot

PREPARED_FILTERS = ("all", "prepared", "unprepared")


@dataclass
class SpellLevelGroup:
    """Spells of one level with the matching slot, if any."""
    level: int
    spells: List[Spell] = field(default_factory=list)
    slot: Optional[SpellSlot] = None

    @property
    def label(self) -> str:
        return "Cantrips" if self.level == 0 else f"Level {self.level}"

    def to_dict(self) -> Dict:
        return {
            "level": self.level,
            "label": self.label,
            "slot": self.slot.model_dump() if self.slot else None,
            "spells": [spell.model_dump() for spell in self.spells],
        }


def filter_spells(
    spells: Iterable[Spell],
    level: Union[int, str] = "all",
    prepared: str = "all",
) -> List[Spell]:
    """
    Filter spells by level and preparation.

    Args:
        spells: Spells to filter
        level: A spell level 0-9, or "all"
        prepared: "all", "prepared" or "unprepared"
    """
    if prepared not in PREPARED_FILTERS:
        raise ValueError(f"prepared must be one of {PREPARED_FILTERS}, got {prepared!r}")

    result = []
    for spell in spells:
        if level != "all" and spell.level != level:
            continue
        if prepared == "prepared" and not spell.prepared:
            continue
        if prepared == "unprepared" and spell.prepared:
            continue
        result.append(spell)
    return result


def group_spells_by_level(
    record: CharacterRecord,
    level: Union[int, str] = "all",
    prepared: str = "all",
) -> List[SpellLevelGroup]:
    """Group a character's (filtered) spells by ascending level."""
    slots = {slot.level: slot for slot in record.spell_slots}
    groups: Dict[int, SpellLevelGroup] = {}

    for spell in filter_spells(record.spells, level, prepared):
        if spell.level not in groups:
            groups[spell.level] = SpellLevelGroup(level=spell.level, slot=slots.get(spell.level))
        groups[spell.level].spells.append(spell)

    return [groups[key] for key in sorted(groups)]
