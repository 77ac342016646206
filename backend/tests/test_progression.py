"""Tests for XP-derived level, proficiency bonus and ability modifiers."""
import pytest

from party_sheets.core.abilities import ABILITY_KEYS, get_ability_modifier
from party_sheets.core.progression import (
    XP_THRESHOLDS,
    MAX_LEVEL,
    get_level_for_xp,
    get_proficiency_bonus,
    get_xp_for_next_level,
    xp_to_next_level,
)
from party_sheets.core.skills import (
    SKILL_KEYS,
    ProficiencyTier,
    calculate_skill_total,
    get_skill_display_name,
)


class TestLevelForXP:
    """Tests for the XP threshold table."""

    def test_zero_xp_is_level_one(self):
        assert get_level_for_xp(0) == 1

    def test_just_below_first_threshold(self):
        assert get_level_for_xp(299) == 1

    def test_exact_threshold_grants_level(self):
        """Reaching a threshold exactly grants that level."""
        assert get_level_for_xp(300) == 2
        assert get_level_for_xp(900) == 3
        assert get_level_for_xp(355000) == 20

    def test_clamped_at_max_level(self):
        assert get_level_for_xp(1_000_000) == MAX_LEVEL

    def test_negative_xp_is_level_one(self):
        assert get_level_for_xp(-50) == 1

    @pytest.mark.parametrize("level,threshold", list(XP_THRESHOLDS.items()))
    def test_every_threshold(self, level, threshold):
        assert get_level_for_xp(threshold) == level
        if threshold > 0:
            assert get_level_for_xp(threshold - 1) == level - 1

    def test_monotonic(self):
        """Level never decreases as XP grows."""
        previous = 1
        for xp in range(0, 400000, 250):
            level = get_level_for_xp(xp)
            assert level >= previous
            previous = level


class TestProficiencyBonus:
    """Tests for the level-derived proficiency bonus."""

    @pytest.mark.parametrize("level,bonus", [
        (1, 2), (4, 2), (5, 3), (8, 3), (9, 4), (13, 5), (17, 6), (20, 6),
    ])
    def test_bonus_by_level(self, level, bonus):
        assert get_proficiency_bonus(level) == bonus

    def test_next_level_xp(self):
        assert get_xp_for_next_level(1) == 300
        assert get_xp_for_next_level(19) == 355000
        assert get_xp_for_next_level(20) is None

    def test_xp_to_next_level(self):
        assert xp_to_next_level(0) == 300
        assert xp_to_next_level(6500) == 7500
        assert xp_to_next_level(-20) == 300
        assert xp_to_next_level(400000) is None


class TestAbilityModifier:
    """Tests for the ability modifier formula."""

    @pytest.mark.parametrize("score,modifier", [
        (1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (12, 1), (20, 5), (30, 10),
    ])
    def test_modifier(self, score, modifier):
        assert get_ability_modifier(score) == modifier

    def test_floor_toward_negative_infinity(self):
        for score in range(1, 31):
            assert get_ability_modifier(score) == (score - 10) // 2

    def test_six_abilities(self):
        assert ABILITY_KEYS == ["str", "dex", "con", "int", "wis", "cha"]


class TestSkills:
    """Tests for skill keys and totals."""

    def test_eighteen_skills(self):
        assert len(SKILL_KEYS) == 18
        assert get_skill_display_name("slt") == "Sleight of Hand"

    def test_unknown_skill_name_falls_back_to_key(self):
        assert get_skill_display_name("xyz") == "xyz"

    def test_tier_from_source(self):
        assert ProficiencyTier.from_source(0) == ProficiencyTier.NONE
        assert ProficiencyTier.from_source(1) == ProficiencyTier.PROFICIENT
        assert ProficiencyTier.from_source(2) == ProficiencyTier.EXPERTISE
        assert ProficiencyTier.from_source(0.5) == ProficiencyTier.NONE
        assert ProficiencyTier.from_source(None) == ProficiencyTier.NONE
        assert ProficiencyTier.from_source(True) == ProficiencyTier.NONE

    def test_proficient_total(self):
        """+3 modifier, proficient, bonus 2 -> 5."""
        assert calculate_skill_total(3, 2, ProficiencyTier.PROFICIENT) == 5

    def test_expertise_total(self):
        """Expertise applies the bonus twice: 3 + 2 + 2."""
        assert calculate_skill_total(3, 2, ProficiencyTier.EXPERTISE) == 7

    def test_misc_bonus_added(self):
        assert calculate_skill_total(-1, 3, ProficiencyTier.NONE, misc_bonus=2) == 1
