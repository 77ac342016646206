"""
Party Inventory API Routes

Items across every stored character.
"""

from fastapi import APIRouter, Depends, Query

from party_sheets.database.dependencies import get_character_store
from party_sheets.services.character_store import CharacterStore
from party_sheets.services.inventory import party_inventory

router = APIRouter()


@router.get("/inventory")
async def get_party_inventory(
    item_type: str = Query("all", alias="type"),
    equipped: str = Query("all", pattern="^(all|equipped|unequipped)$"),
    store: CharacterStore = Depends(get_character_store),
):
    """
    Get the party inventory.

    Args:
        item_type: Only items of this type ("all" for every type)
        equipped: "all", "equipped" or "unequipped"

    Returns:
        Per-character container groups plus party totals
    """
    characters = await store.list_characters()
    return party_inventory(characters, item_type=item_type, equipped=equipped).to_dict()
