"""
Foundry VTT Character Parser

Normalizes Foundry VTT (dnd5e system) actor exports into CharacterRecord.

Exports are loosely structured: a top-level ``name``, a ``system`` object
holding attributes/abilities/skills/spell slots/details, and one flat
``items`` list that mixes spells, equipment, containers, feats and the
race/class/background descriptors, told apart only by ``type``. Every read
is defaulted; the only failure is an input that is not a JSON object.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
import logging

from party_sheets.core.abilities import (
    ABILITY_KEYS,
    DEFAULT_SCORE,
    PROFICIENT_FLAG,
    get_ability_modifier,
)
from party_sheets.core.errors import MalformedInputError
from party_sheets.core.navigation import (
    as_bool,
    as_int,
    as_list,
    as_mapping,
    as_number,
    as_text,
    dig,
    first_match,
    string_list,
)
from party_sheets.core.progression import get_level_for_xp, get_proficiency_bonus
from party_sheets.core.skills import SKILL_KEYS, ProficiencyTier, calculate_skill_total
from party_sheets.models.character import (
    AbilityScore,
    CharacterRecord,
    Container,
    Feature,
    HitPoints,
    Item,
    Proficiencies,
    Skill,
    Spell,
    SpellComponents,
    SpellSlot,
)

logger = logging.getLogger("party_sheets.parser")

CONTAINER_TYPE = "container"
SPELL_TYPE = "spell"
FEAT_TYPE = "feat"
DESCRIPTOR_TYPES = ("race", "class", "background")

# Where each descriptor's reference id lives under system.details
DESCRIPTOR_ID_FIELDS = {
    "race": "race",
    "class": "originalClass",
    "background": "background",
}

SPELL_SLOT_LEVELS = range(1, 10)
UNNAMED_CONTAINER = "Unnamed Container"


@dataclass
class ItemBuckets:
    """
    Entries of the export's ``items`` list, classified once.

    Each entry lands in at most one typed bucket; entries that are not
    objects or carry no ``type`` are left out of them. ``entries`` keeps
    every object entry in source order for lookups by ``_id``.
    """
    entries: List[Mapping[str, Any]] = field(default_factory=list)
    spells: List[Mapping[str, Any]] = field(default_factory=list)
    feats: List[Mapping[str, Any]] = field(default_factory=list)
    containers: List[Mapping[str, Any]] = field(default_factory=list)
    descriptors: List[Mapping[str, Any]] = field(default_factory=list)
    inventory: List[Mapping[str, Any]] = field(default_factory=list)


def classify_items(entries: Any) -> ItemBuckets:
    """Split the flat ``items`` list into typed buckets in a single pass."""
    buckets = ItemBuckets()
    for entry in as_list(entries):
        if not isinstance(entry, Mapping):
            continue
        buckets.entries.append(entry)
        item_type = entry.get("type")
        if not item_type or not isinstance(item_type, str):
            continue

        if item_type == SPELL_TYPE:
            buckets.spells.append(entry)
        elif item_type == FEAT_TYPE:
            buckets.feats.append(entry)
        elif item_type in DESCRIPTOR_TYPES:
            buckets.descriptors.append(entry)
        elif item_type == CONTAINER_TYPE:
            buckets.containers.append(entry)
        else:
            buckets.inventory.append(entry)
    return buckets


class FoundryCharacterParser:
    """Parse Foundry VTT character exports."""

    def parse(self, raw: Any) -> CharacterRecord:
        """
        Parse a Foundry VTT actor export.

        Args:
            raw: Decoded JSON value of the export

        Returns:
            Normalized CharacterRecord

        Raises:
            MalformedInputError: if ``raw`` is not a JSON object
        """
        if not isinstance(raw, Mapping):
            raise MalformedInputError(f"Expected a JSON object, got {type(raw).__name__}")

        buckets = classify_items(raw.get("items"))

        experience = self._extract_experience(raw)
        level = get_level_for_xp(experience)
        proficiency_bonus = get_proficiency_bonus(level)
        ability_scores = self._extract_ability_scores(raw)

        record = CharacterRecord(
            name=as_text(raw.get("name")),
            level=level,
            experience=experience,
            proficiency_bonus=proficiency_bonus,
            race=self._resolve_descriptor(raw, buckets, "race"),
            character_class=self._resolve_descriptor(raw, buckets, "class"),
            background=self._resolve_descriptor(raw, buckets, "background"),
            alignment=as_text(dig(raw, "system", "details", "alignment")),
            hp=self._extract_hp(raw),
            armor_class=as_int(dig(raw, "system", "attributes", "ac", "flat"), default=None),
            speed=as_int(dig(raw, "system", "attributes", "movement", "walk"), default=None),
            ability_scores=ability_scores,
            skills=self._extract_skills(raw, ability_scores, proficiency_bonus),
            spells=[self._parse_spell(entry) for entry in buckets.spells],
            spell_slots=self._extract_spell_slots(raw),
            items=[self._parse_item(entry) for entry in buckets.inventory],
            containers=self._extract_containers(buckets),
            proficiencies=self._extract_proficiencies(raw),
            features=[self._parse_feature(entry) for entry in buckets.feats],
            traits=[],
        )

        logger.debug(
            "Parsed %r: level %d, %d spells, %d items, %d containers",
            record.name, record.level, len(record.spells),
            len(record.items), len(record.containers),
        )
        return record

    # ==================== Identity ====================

    def _extract_experience(self, raw: Mapping[str, Any]) -> int:
        xp = as_int(dig(raw, "system", "details", "xp", "value"), default=0)
        return max(xp, 0)

    def _resolve_descriptor(
        self,
        raw: Mapping[str, Any],
        buckets: ItemBuckets,
        category: str,
    ) -> str:
        """
        Resolve race/class/background to a display name.

        The export references the descriptor entry by id, but is not
        reliable about it, so an entry of the matching type is accepted
        too. Any entry may carry the referenced id; the first hit in
        source order wins.
        """
        reference = dig(raw, "system", "details", DESCRIPTOR_ID_FIELDS[category])
        if not reference:
            return ""

        match = first_match(
            buckets.entries,
            lambda entry: entry.get("_id") == reference or entry.get("type") == category,
        )
        if match is None:
            return ""
        return as_text(match.get("name"))

    # ==================== Vitals ====================

    def _extract_hp(self, raw: Mapping[str, Any]) -> Optional[HitPoints]:
        hp = dig(raw, "system", "attributes", "hp")
        if not isinstance(hp, Mapping):
            return None

        value = as_int(hp.get("value"), default=0)
        return HitPoints(
            value=value,
            max=as_int(hp.get("max"), default=value),
            temp=as_int(hp.get("temp"), default=0),
        )

    # ==================== Abilities & Skills ====================

    def _extract_ability_scores(self, raw: Mapping[str, Any]) -> Optional[Dict[str, AbilityScore]]:
        abilities = dig(raw, "system", "abilities")
        if not isinstance(abilities, Mapping):
            return None

        scores: Dict[str, AbilityScore] = {}
        for key in ABILITY_KEYS:
            block = abilities.get(key)
            if not isinstance(block, Mapping):
                continue
            value = as_int(block.get("value"), default=DEFAULT_SCORE)
            scores[key] = AbilityScore(
                value=value,
                modifier=get_ability_modifier(value),
                proficient=_is_flag(block.get("proficient"), PROFICIENT_FLAG),
            )

        return scores or None

    def _extract_skills(
        self,
        raw: Mapping[str, Any],
        ability_scores: Optional[Dict[str, AbilityScore]],
        proficiency_bonus: int,
    ) -> Optional[Dict[str, Skill]]:
        skills = dig(raw, "system", "skills")
        if not isinstance(skills, Mapping):
            return None

        ability_scores = ability_scores or {}
        result: Dict[str, Skill] = {}
        for key in SKILL_KEYS:
            entry = skills.get(key)
            if not isinstance(entry, Mapping):
                continue

            ability = as_text(entry.get("ability"))
            score = ability_scores.get(ability)
            modifier = score.modifier if score else 0
            tier = ProficiencyTier.from_source(entry.get("value"))
            misc_bonus = as_int(dig(entry, "bonuses", "check"), default=0)

            result[key] = Skill(
                total=calculate_skill_total(modifier, proficiency_bonus, tier, misc_bonus),
                governing_ability=ability,
                proficient=tier >= ProficiencyTier.PROFICIENT,
                expertise=tier == ProficiencyTier.EXPERTISE,
                misc_bonus=misc_bonus,
            )

        return result or None

    # ==================== Spells ====================

    def _parse_spell(self, entry: Mapping[str, Any]) -> Spell:
        system = as_mapping(entry.get("system"))
        components = as_mapping(system.get("components"))

        level = as_int(system.get("level"), default=0)
        return Spell(
            name=as_text(entry.get("name")),
            level=min(max(level, 0), 9),
            school=self._parse_school(system.get("school")),
            prepared=as_bool(dig(system, "preparation", "prepared")),
            ritual=as_bool(components.get("ritual")),
            description=as_text(dig(system, "description", "value")),
            components=SpellComponents(
                verbal=as_bool(components.get("vocal")),
                somatic=as_bool(components.get("somatic")),
                material=as_bool(components.get("material")),
                materials=as_text(dig(components, "materials", "value"))
                or as_text(dig(system, "materials", "value")),
            ),
            range=as_text(dig(system, "range", "value")),
            duration=as_text(dig(system, "duration", "value")),
            casting_time=as_text(dig(system, "time", "value")),
            concentration=as_bool(dig(system, "duration", "concentration")),
        )

    def _parse_school(self, school: Any) -> str:
        """School is either a plain string or an object with a ``value``."""
        if isinstance(school, Mapping):
            return as_text(school.get("value"))
        return as_text(school)

    def _extract_spell_slots(self, raw: Mapping[str, Any]) -> List[SpellSlot]:
        spells = as_mapping(dig(raw, "system", "spells"))

        slots = []
        for level in SPELL_SLOT_LEVELS:
            slot = spells.get(f"spell{level}")
            if not isinstance(slot, Mapping):
                continue
            current = as_int(slot.get("value"), default=None)
            if current is None:
                continue
            slots.append(SpellSlot(
                level=level,
                current=current,
                max=as_int(slot.get("max"), default=current),
            ))
        return slots

    # ==================== Inventory ====================

    def _parse_item(self, entry: Mapping[str, Any]) -> Item:
        system = as_mapping(entry.get("system"))

        container_id = system.get("container")
        if container_id is not None and not isinstance(container_id, str):
            container_id = str(container_id)

        return Item(
            name=as_text(entry.get("name")),
            type=as_text(entry.get("type"), default="misc"),
            quantity=as_int(system.get("quantity"), default=1),
            weight=self._parse_weight(system.get("weight")),
            description=as_text(dig(system, "description", "value")),
            equipped=as_bool(system.get("equipped")),
            attunement=system.get("attunement") == "required" or system.get("attuned") is True,
            rarity=as_text(system.get("rarity")),
            properties=self._parse_properties(system.get("properties")),
            container_id=container_id or None,
        )

    def _parse_weight(self, weight: Any) -> Optional[float]:
        """Weight is ``{"value": n, "units": ...}`` in current exports, a bare number in old ones."""
        if isinstance(weight, Mapping):
            return as_number(weight.get("value"))
        return as_number(weight)

    def _parse_properties(self, properties: Any) -> List[str]:
        if isinstance(properties, Mapping):
            return string_list(properties.get("value"))
        return string_list(properties)

    def _extract_containers(self, buckets: ItemBuckets) -> List[Container]:
        containers = []
        for entry in buckets.containers:
            container_id = entry.get("_id")
            if not container_id:
                continue
            containers.append(Container(
                id=str(container_id),
                name=as_text(entry.get("name"), default=UNNAMED_CONTAINER),
            ))
        return containers

    # ==================== Proficiencies & Features ====================

    def _extract_proficiencies(self, raw: Mapping[str, Any]) -> Proficiencies:
        traits = as_mapping(dig(raw, "system", "traits"))
        abilities = as_mapping(dig(raw, "system", "abilities"))

        saving_throws = [
            key for key in ABILITY_KEYS
            if _is_flag(dig(abilities, key, "proficient"), PROFICIENT_FLAG)
        ]

        return Proficiencies(
            armor=string_list(dig(traits, "armorProf", "value")),
            weapons=string_list(dig(traits, "weaponProf", "value")),
            tools=[],
            languages=string_list(dig(traits, "languages", "value")),
            saving_throws=saving_throws,
        )

    def _parse_feature(self, entry: Mapping[str, Any]) -> Feature:
        return Feature(
            name=as_text(entry.get("name")),
            description=as_text(dig(entry, "system", "description", "value")),
        )


def _is_flag(value: Any, flag: int) -> bool:
    """Exact numeric match that does not treat ``True`` as 1."""
    return not isinstance(value, bool) and value == flag


_default_parser = FoundryCharacterParser()


def normalize(raw: Any) -> CharacterRecord:
    """Normalize a decoded Foundry VTT export into a CharacterRecord."""
    return _default_parser.parse(raw)
