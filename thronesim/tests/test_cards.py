"""
Tests for the card catalog.

Tests:
- House cards per house
- Ability stages
- Westeros and wildling decks
"""

import pytest

from ..engine_core.state import CombatStage, House
from ..games.thrones.cards import ABILITY_STAGES, CATALOG, AbilityTag


class TestHouseCards:
    """Tests for combat cards."""

    def test_seven_cards_per_house(self):
        for house in House:
            assert len(CATALOG.house_cards(house)) == 7

    def test_total_cards(self):
        assert len(CATALOG.all_cards()) == 42

    @pytest.mark.parametrize("house", list(House))
    def test_strength_spread(self, house):
        """Every house has the same printed strengths: 4, 3, 2, 2, 1, 1, 0."""
        strengths = sorted((c.strength for c in CATALOG.house_cards(house)), reverse=True)
        assert strengths == [4, 3, 2, 2, 1, 1, 0]

    def test_card_lookup(self):
        card = CATALOG.card("eddard_stark")
        assert card.house == House.STARK
        assert card.strength == 4
        assert card.swords == 2

    def test_ability_lookup(self):
        assert CATALOG.ability("tyrion_lannister") == AbilityTag.TYRION
        assert CATALOG.ability("ser_loras_tyrell") is None
        assert CATALOG.ability(None) is None


class TestAbilityStages:
    """Each ability fires at exactly one combat stage."""

    def test_every_tag_has_a_stage(self):
        assert set(ABILITY_STAGES) == set(AbilityTag)

    def test_stage_examples(self):
        assert CATALOG.card("tyrion_lannister").stage == CombatStage.CARD_SELECTION
        assert CATALOG.card("catelyn_stark").stage == CombatStage.STRENGTH_CALCULATION
        assert CATALOG.card("the_blackfish").stage == CombatStage.RESOLUTION
        assert CATALOG.card("robb_stark").stage == CombatStage.RESOLUTION
        assert CATALOG.card("tywin_lannister").stage == CombatStage.POST_COMBAT
        assert CATALOG.card("ser_loras_tyrell").stage is None


class TestDecks:
    """Tests for Westeros and wildling decks."""

    @pytest.mark.parametrize("deck", [1, 2, 3])
    def test_westeros_deck_size(self, deck):
        cards = CATALOG.westeros_deck(deck)
        assert len(cards) == 10
        assert all(c.deck == deck for c in cards)

    def test_westeros_deck_is_fresh_copy(self):
        """Each call returns a new list the caller may shuffle."""
        assert CATALOG.westeros_deck(1) is not CATALOG.westeros_deck(1)

    def test_wildling_deck(self):
        assert len(CATALOG.wildling_deck()) == 9
