"""
Character Progression for D&D 5e

Exports carry experience points, not levels. Everything level-related
is derived here.
"""

from typing import Dict, Optional


# Minimum XP for each level
XP_THRESHOLDS: Dict[int, int] = {
    1: 0,
    2: 300,
    3: 900,
    4: 2700,
    5: 6500,
    6: 14000,
    7: 23000,
    8: 34000,
    9: 48000,
    10: 64000,
    11: 85000,
    12: 100000,
    13: 120000,
    14: 140000,
    15: 165000,
    16: 195000,
    17: 225000,
    18: 265000,
    19: 305000,
    20: 355000,
}

MAX_LEVEL = 20


def get_level_for_xp(xp: int) -> int:
    """
    Level reached with ``xp`` experience points.

    A threshold reached exactly grants the level. Anything below zero
    counts as zero and anything past the last threshold stays at 20.
    """
    for level in range(MAX_LEVEL, 1, -1):
        if xp >= XP_THRESHOLDS[level]:
            return level
    return 1


def get_proficiency_bonus(level: int) -> int:
    """Proficiency bonus for a character level: +2 at 1, +3 at 5, ... +6 at 17."""
    level = max(1, min(level, MAX_LEVEL))
    return (level - 1) // 4 + 2


def get_xp_for_next_level(current_level: int) -> Optional[int]:
    """XP threshold of the following level, or None at level 20."""
    if current_level >= MAX_LEVEL:
        return None
    return XP_THRESHOLDS[max(current_level, 1) + 1]


def xp_to_next_level(xp: int) -> Optional[int]:
    """
    Experience still missing before the next level.

    Args:
        xp: Total experience points

    Returns:
        Remaining XP, or None once the character is level 20
    """
    threshold = get_xp_for_next_level(get_level_for_xp(xp))
    if threshold is None:
        return None
    return threshold - max(xp, 0)
