"""
Tests for Westeros phase cards.
"""

from ..engine_core.action import Action
from ..engine_core.machine import advance
from ..engine_core.orders import usable_tokens
from ..engine_core.reducer import apply_action
from ..engine_core.state import (
    DecisionType,
    House,
    OrderType,
    Phase,
    Track,
    UnitType,
    WesterosCard,
    WesterosCardType,
)
from ..engine_core.supply import calculate_supply
from ..engine_core.westeros import resolve_card
from ..games.thrones import areas as A
from .conftest import put

W = WesterosCardType


def card(card_type):
    return WesterosCard(deck=1, card_type=card_type)


class TestCards:
    """Tests for individual card effects."""

    def test_supply(self, three_player_state):
        state = three_player_state
        state.houses[House.STARK].supply = 0
        resolve_card(state, card(W.SUPPLY))
        assert state.houses[House.STARK].supply == calculate_supply(state, House.STARK)
        assert state.supply_check_due

    def test_mustering_queues_every_house(self, three_player_state):
        resolve_card(three_player_state, card(W.MUSTERING))
        assert three_player_state.muster_queue == three_player_state.turn_order

    def test_game_of_thrones(self, empty_board_state):
        state = empty_board_state
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN)
        put(state, A.KARHOLD, House.STARK, UnitType.FOOTMAN)
        power = state.houses[House.STARK].power
        resolve_card(state, card(W.GAME_OF_THRONES))
        assert state.houses[House.STARK].power == power + 2
        assert state.houses[House.LANNISTER].power == power

    def test_restriction(self, three_player_state):
        state = three_player_state
        resolve_card(state, card(W.SEA_OF_STORMS))
        resolve_card(state, card(W.RAINS_OF_AUTUMN))
        assert state.restricted_orders == [OrderType.RAID]
        assert state.restricted_star_orders == [OrderType.MARCH]
        tokens = usable_tokens(state.restricted_orders, state.restricted_star_orders)
        assert 2 not in tokens
        assert 0 in tokens and 1 in tokens
        assert not {9, 10, 11} & set(tokens)

    def test_wildling_attack_without_threat(self, three_player_state):
        three_player_state.wildling_threat = 0
        resolve_card(three_player_state, card(W.WILDLING_ATTACK))
        assert three_player_state.bidding is None

    def test_clash_of_kings_starts_bidding(self, three_player_state):
        resolve_card(three_player_state, card(W.CLASH_OF_KINGS))
        assert three_player_state.bidding.track == Track.IRON_THRONE


class TestChoices:
    """Tests for cards whose effect a track holder chooses."""

    def test_dark_wings_holder_chooses(self, three_player_state):
        state = three_player_state
        resolve_card(state, card(W.DARK_WINGS_DARK_WORDS))
        pending = state.pending
        assert pending.decision_type == DecisionType.WESTEROS_CHOICE
        assert pending.house == House.LANNISTER
        assert pending.options == ["clash_of_kings", "game_of_thrones", "nothing"]

        assert apply_action(state, Action.westeros_choice(House.LANNISTER, 1)).success
        assert state.westeros_queue[0].card_type == W.GAME_OF_THRONES

    def test_choose_nothing(self, three_player_state):
        state = three_player_state
        resolve_card(state, card(W.PUT_TO_THE_SWORD))
        assert state.pending.house == House.STARK
        queued = len(state.westeros_queue)
        assert apply_action(state, Action.westeros_choice(House.STARK, 2)).success
        assert len(state.westeros_queue) == queued

    def test_choice_out_of_range(self, three_player_state):
        state = three_player_state
        resolve_card(state, card(W.A_THRONE_OF_BLADES))
        assert not apply_action(state, Action.westeros_choice(state.pending.house, 3)).success


class TestPhase:
    """Tests for the Westeros phase flow."""

    def test_wildling_attack_at_full_threat(self, three_player_state):
        state = three_player_state
        state.phase = Phase.WESTEROS
        state.westeros_cards_dealt = True
        state.wildling_threat = 12
        state.wildling_attack_due = True
        pending = advance(state)
        assert pending.decision_type == DecisionType.BID
        assert state.wildling_attack_due is False

    def test_deal_draws_one_card_per_deck(self, three_player_state):
        state = three_player_state
        state.phase = Phase.WESTEROS
        state.westeros_cards_dealt = False
        sizes = [len(deck) for deck in state.westeros_decks]
        advance(state)
        assert state.westeros_cards_dealt
        assert [c.deck for c in state.westeros_drawn[:3]] == [1, 2, 3]
        assert sum(len(deck) for deck in state.westeros_decks) < sum(sizes)
