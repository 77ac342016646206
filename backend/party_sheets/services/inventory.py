"""
Inventory Views

Filtering and container grouping for one character's items and for the
whole party. Container references are resolved here: an item with no
container is "No Container", and an id that matches no known container is
"Unknown Container", never treated as "no container".
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from party_sheets.models.character import CharacterRecord, Item

NO_CONTAINER_LABEL = "No Container"
UNKNOWN_CONTAINER_LABEL = "Unknown Container"

EQUIPPED_FILTERS = ("all", "equipped", "unequipped")


@dataclass
class ContainerGroup:
    """Items held by one container (or by none)."""
    container_id: Optional[str]
    label: str
    items: List[Item] = field(default_factory=list)

    @property
    def total_weight(self) -> float:
        return item_weight(self.items)

    def to_dict(self) -> Dict:
        return {
            "container_id": self.container_id,
            "label": self.label,
            "items": [item.model_dump() for item in self.items],
            "total_weight": self.total_weight,
        }


@dataclass
class CharacterInventory:
    """One character's grouped inventory inside the party view."""
    character_id: str
    character_name: str
    groups: List[ContainerGroup] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(len(group.items) for group in self.groups)

    @property
    def total_weight(self) -> float:
        return sum(group.total_weight for group in self.groups)

    def to_dict(self) -> Dict:
        return {
            "character_id": self.character_id,
            "character_name": self.character_name,
            "item_count": self.item_count,
            "total_weight": self.total_weight,
            "groups": [group.to_dict() for group in self.groups],
        }


@dataclass
class PartyInventory:
    """Inventory of every stored character plus party totals."""
    characters: List[CharacterInventory] = field(default_factory=list)
    item_types: List[str] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        return sum(character.item_count for character in self.characters)

    @property
    def total_weight(self) -> float:
        return sum(character.total_weight for character in self.characters)

    def to_dict(self) -> Dict:
        return {
            "character_count": len(self.characters),
            "total_items": self.total_items,
            "total_weight": round(self.total_weight, 2),
            "item_types": self.item_types,
            "characters": [character.to_dict() for character in self.characters],
        }


def container_label(container_id: Optional[str], containers: Mapping[str, str]) -> str:
    """Display label for an item's container reference."""
    if container_id is None:
        return NO_CONTAINER_LABEL
    return containers.get(container_id, UNKNOWN_CONTAINER_LABEL)


def item_weight(items: Iterable[Item]) -> float:
    """Total carried weight; items without a weight count as zero."""
    return sum((item.weight or 0) * item.quantity for item in items)


def item_types(items: Iterable[Item]) -> List[str]:
    """Sorted distinct item types, containers excluded."""
    return sorted({item.type for item in items if item.type != "container"})


def filter_items(
    items: Iterable[Item],
    item_type: str = "all",
    equipped: str = "all",
) -> List[Item]:
    """
    Filter items by type and equipped state.

    Args:
        items: Items to filter
        item_type: An item type, or "all"
        equipped: "all", "equipped" or "unequipped"

    Returns:
        Matching items in their original order
    """
    if equipped not in EQUIPPED_FILTERS:
        raise ValueError(f"equipped must be one of {EQUIPPED_FILTERS}, got {equipped!r}")

    result = []
    for item in items:
        if item.type == "container":
            continue
        if item_type != "all" and item.type != item_type:
            continue
        if equipped == "equipped" and not item.equipped:
            continue
        if equipped == "unequipped" and item.equipped:
            continue
        result.append(item)
    return result


def group_items_by_container(
    record: CharacterRecord,
    item_type: str = "all",
    equipped: str = "all",
) -> List[ContainerGroup]:
    """
    Group a character's (filtered) items by container.

    Loose items come first, then containers ordered by label. Items keep
    their source order inside each group.
    """
    containers = record.container_map()
    groups: Dict[Optional[str], ContainerGroup] = {}

    for item in filter_items(record.items, item_type, equipped):
        group = groups.get(item.container_id)
        if group is None:
            group = ContainerGroup(
                container_id=item.container_id,
                label=container_label(item.container_id, containers),
            )
            groups[item.container_id] = group
        group.items.append(item)

    return sorted(
        groups.values(),
        key=lambda group: (group.container_id is not None, group.label.lower()),
    )


def party_inventory(
    characters: Iterable,
    item_type: str = "all",
    equipped: str = "all",
) -> PartyInventory:
    """
    Build the cross-character inventory.

    Args:
        characters: Stored characters (anything with ``id``, ``name`` and ``data``)
        item_type: An item type, or "all"
        equipped: "all", "equipped" or "unequipped"
    """
    party = PartyInventory()
    all_types = set()

    for stored in characters:
        all_types.update(item_types(stored.data.items))
        party.characters.append(CharacterInventory(
            character_id=stored.id,
            character_name=stored.name,
            groups=group_items_by_container(stored.data, item_type, equipped),
        ))

    party.item_types = sorted(all_types)
    return party
