"""
Normalized Character Record - Data Models.

Defines the Pydantic models produced by the character parser. Records are
frozen: they are built once per import and only ever read afterwards.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Base for immutable record parts."""
    model_config = ConfigDict(frozen=True)


class HitPoints(FrozenModel):
    """Current, maximum and temporary hit points."""
    value: int = 0
    max: int = 0
    temp: int = 0


class AbilityScore(FrozenModel):
    """A single ability score with its derived modifier."""
    value: int = 10
    modifier: int = 0
    proficient: bool = False  # Saving throw proficiency


class Skill(FrozenModel):
    """A skill with its precomputed total modifier."""
    total: int = 0
    governing_ability: str = ""
    proficient: bool = False
    expertise: bool = False
    misc_bonus: int = 0


class SpellComponents(FrozenModel):
    """Verbal, somatic and material components."""
    verbal: bool = False
    somatic: bool = False
    material: bool = False
    materials: str = ""


class Spell(FrozenModel):
    """A known or prepared spell."""
    name: str = ""
    level: int = Field(default=0, ge=0, le=9)
    school: str = ""
    prepared: bool = False
    ritual: bool = False
    description: str = ""  # HTML, passed through untouched
    components: SpellComponents = Field(default_factory=SpellComponents)
    range: str = ""
    duration: str = ""
    casting_time: str = ""
    concentration: bool = False

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0


class SpellSlot(FrozenModel):
    """Spell slots for one spell level."""
    level: int = Field(ge=1, le=9)
    current: int = 0
    max: int = 0


class Item(FrozenModel):
    """
    An inventory item.

    ``container_id`` of ``None`` means the item is not inside any container.
    A non-null id that matches no known container is kept as-is; views
    label it "Unknown Container".
    """
    name: str = ""
    type: str = "misc"
    quantity: int = 1
    weight: Optional[float] = None
    description: str = ""
    equipped: bool = False
    attunement: bool = False
    rarity: str = ""
    properties: List[str] = Field(default_factory=list)
    container_id: Optional[str] = None


class Container(FrozenModel):
    """Lookup entry for items that hold other items."""
    id: str
    name: str = "Unnamed Container"


class Feature(FrozenModel):
    """A feat, class feature or racial trait."""
    name: str = ""
    description: str = ""


class Proficiencies(FrozenModel):
    """Armor, weapon, tool and language proficiencies plus saving throws."""
    armor: List[str] = Field(default_factory=list)
    weapons: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)  # Not read from exports yet
    languages: List[str] = Field(default_factory=list)
    saving_throws: List[str] = Field(default_factory=list)


class CharacterRecord(FrozenModel):
    """
    A character normalized from a Foundry VTT export.

    ``ability_scores`` and ``skills`` are ``None`` when the export has no
    such section at all, which is distinct from a section of defaults.
    """
    name: str = ""
    level: int = Field(default=1, ge=1, le=20)
    experience: int = 0
    proficiency_bonus: int = 2

    race: str = ""
    character_class: str = ""
    background: str = ""
    alignment: str = ""

    hp: Optional[HitPoints] = None
    armor_class: Optional[int] = None
    speed: Optional[int] = None  # Walking speed in feet

    ability_scores: Optional[Dict[str, AbilityScore]] = None
    skills: Optional[Dict[str, Skill]] = None

    spells: List[Spell] = Field(default_factory=list)
    spell_slots: List[SpellSlot] = Field(default_factory=list)

    items: List[Item] = Field(default_factory=list)
    containers: List[Container] = Field(default_factory=list)

    proficiencies: Proficiencies = Field(default_factory=Proficiencies)
    features: List[Feature] = Field(default_factory=list)
    traits: List[Feature] = Field(default_factory=list)

    def container_map(self) -> Dict[str, str]:
        """Container id -> name lookup."""
        return {container.id: container.name for container in self.containers}

    def ability_modifier(self, ability: str) -> int:
        """Modifier for an ability key, 0 when the score is unknown."""
        score = (self.ability_scores or {}).get(ability)
        return score.modifier if score else 0
