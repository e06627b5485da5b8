"""
Tests for sealed bidding.

Tests:
- Clash of Kings: track order, power deduction, Iron Throne tiebreak
- Wildling attacks: each card's win and loss effect
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.bidding import begin_track_bidding, begin_wildling_bidding, ranking
from ..engine_core.machine import advance
from ..engine_core.reducer import apply_action
from ..engine_core.state import BiddingType, DecisionType, House, Track, UnitType, WildlingCardType
from ..games.thrones import areas as A
from .conftest import answer

B, L, S = House.BARATHEON, House.LANNISTER, House.STARK
W = WildlingCardType


def bid_all(state, bids):
    """Answer one round of BID decisions; returns the next decision."""
    pending = advance(state)
    for _ in bids:
        assert pending.decision_type == DecisionType.BID
        pending = answer(state, Action.bid(pending.house, bids[pending.house]))
    return pending


def count(state, house, unit_type):
    return sum(1 for _, u in state.iter_units(house) if u.unit_type == unit_type)


class TestTrackBidding:
    """Tests for Clash of Kings bidding."""

    def test_asks_in_turn_order(self, three_player_state):
        begin_track_bidding(three_player_state)
        pending = advance(three_player_state)
        assert pending.decision_type == DecisionType.BID
        assert pending.house == B
        assert pending.bidding_type == BiddingType.TRACK
        assert pending.track == Track.IRON_THRONE
        assert pending.limit == 5

    def test_resolves_all_tracks(self, three_player_state):
        state = three_player_state
        begin_track_bidding(state)
        bid_all(state, {B: 1, L: 3, S: 3})
        assert state.tracks[Track.IRON_THRONE] == [L, S, B]
        assert state.houses[L].power == 2
        assert state.houses[S].power == 2
        assert state.houses[B].power == 4

        # Zero bids keep the new Iron Throne order on the other tracks
        pending = bid_all(state, {B: 0, L: 0, S: 0})
        assert state.tracks[Track.FIEFDOMS] == [L, S, B]
        assert pending.decision_type == DecisionType.BID
        assert pending.track == Track.KINGS_COURT

        pending = bid_all(state, {B: 0, L: 0, S: 0})
        assert state.bidding is None
        assert state.tracks[Track.KINGS_COURT] == [L, S, B]
        assert pending.decision_type == DecisionType.PLACE_ORDERS
        assert pending.house == L

    def test_bids_sealed_until_resolved(self, three_player_state):
        state = three_player_state
        begin_track_bidding(state)
        pending = advance(state)
        answer(state, Action.bid(pending.house, 2))
        assert state.revealed_bids == {}
        assert state.bidding.bids == {B: 2}

    @pytest.mark.parametrize("amount", [-1, 6, "3", True])
    def test_invalid_bid(self, three_player_state, amount):
        begin_track_bidding(three_player_state)
        advance(three_player_state)
        result = apply_action(three_player_state, Action.bid(B, amount))
        assert not result.success
        assert three_player_state.bidding.bids == {}

    def test_ranking_tiebreak(self, three_player_state):
        assert ranking(three_player_state, {S: 2, L: 2, B: 2}) == [B, L, S]
        assert ranking(three_player_state, {S: 4, L: 2, B: 2}) == [S, B, L]


class TestWildlingBidding:
    """Tests for wildling attacks."""

    def attack(self, state, card, threat, bids):
        state.wildling_threat = threat
        state.wildling_deck.remove(card)
        state.wildling_deck.insert(0, card)
        begin_wildling_bidding(state)
        return bid_all(state, bids)

    def test_silence_at_the_wall_loss(self, three_player_state):
        state = three_player_state
        self.attack(state, WildlingCardType.SILENCE_AT_THE_WALL, 12, {B: 0, L: 0, S: 0})
        assert state.tracks[Track.KINGS_COURT] == [L, B, S]
        assert state.houses[S].power == 5
        assert state.houses[L].power == 4
        assert state.houses[B].power == 4
        assert state.wildling_threat == 2
        assert state.last_wildling_card == WildlingCardType.SILENCE_AT_THE_WALL
        assert state.wildling_deck[-1] == WildlingCardType.SILENCE_AT_THE_WALL

    def test_silence_at_the_wall_win(self, three_player_state):
        state = three_player_state
        self.attack(state, WildlingCardType.SILENCE_AT_THE_WALL, 2, {B: 1, L: 2, S: 0})
        assert state.wildling_threat == 0
        assert state.houses[L].power == 5 - 2 + 3
        assert state.houses[B].power == 4
        assert state.revealed_bids == {B: 1, L: 2, S: 0}

    def test_preemptive_raid_penalty(self, three_player_state):
        state = three_player_state
        pending = self.attack(state, WildlingCardType.PREEMPTIVE_RAID, 8, {B: 1, L: 1, S: 0})
        assert pending.decision_type == DecisionType.WILDLING_PENALTY
        assert pending.house == S
        assert state.houses[B].power == 3
        assert state.houses[L].power == 3

        answer(state, Action.wildling_penalty(S, 1))
        assert state.tracks[Track.FIEFDOMS] == [B, L, S]

    def test_skinchanger_scout_loss(self, three_player_state):
        state = three_player_state
        self.attack(state, WildlingCardType.SKINCHANGER_SCOUT, 10, {B: 2, L: 1, S: 1})
        # Stark and Lannister tie; Stark is lower on the Iron Throne
        assert state.houses[S].power == 0
        assert state.houses[L].power == 2
        assert state.houses[B].power == 1

    # Threat 12 against zero bids loses with Stark lowest (last on the Iron
    # Throne); threat 2 against Stark's bid of 2 wins with Stark highest.
    LOSE = (12, {B: 0, L: 0, S: 0})
    WIN = (2, {B: 0, L: 0, S: 2})

    def test_king_beyond_the_wall_loss(self, three_player_state):
        state = three_player_state
        self.attack(state, W.A_KING_BEYOND_THE_WALL, *self.LOSE)
        assert state.tracks[Track.IRON_THRONE] == [B, L, S]
        assert state.tracks[Track.FIEFDOMS] == [B, L, S]
        assert state.tracks[Track.KINGS_COURT] == [L, B, S]

    def test_king_beyond_the_wall_win(self, three_player_state):
        state = three_player_state
        self.attack(state, W.A_KING_BEYOND_THE_WALL, *self.WIN)
        assert state.tracks[Track.IRON_THRONE] == [S, B, L]
        assert state.houses[S].power == 3

    def test_crow_killers_loss(self, three_player_state):
        state = three_player_state
        assert all(count(state, h, UnitType.KNIGHT) == 1 for h in (B, L, S))
        self.attack(state, W.CROW_KILLERS, *self.LOSE)
        for house in (B, L, S):
            assert count(state, house, UnitType.KNIGHT) == 0
            assert count(state, house, UnitType.FOOTMAN) == 3

    def test_crow_killers_win(self, three_player_state):
        state = three_player_state
        self.attack(state, W.CROW_KILLERS, *self.WIN)
        assert count(state, S, UnitType.KNIGHT) == 3
        assert count(state, S, UnitType.FOOTMAN) == 0
        assert count(state, L, UnitType.KNIGHT) == 1

    def test_mammoth_riders_loss(self, three_player_state):
        state = three_player_state
        self.attack(state, W.MAMMOTH_RIDERS, *self.LOSE)
        assert state.unit_count(S) == 1
        assert state.unit_count(L) == 2
        assert state.unit_count(B) == 3
        assert count(state, S, UnitType.KNIGHT) == 1

    def test_mammoth_riders_win(self, three_player_state):
        state = three_player_state
        stark = state.houses[S]
        for card_id in ("eddard_stark", "ser_rodrik_cassel"):
            stark.hand.remove(card_id)
        stark.discards = ["ser_rodrik_cassel", "eddard_stark"]
        self.attack(state, W.MAMMOTH_RIDERS, *self.WIN)
        assert "eddard_stark" in stark.hand
        assert stark.discards == ["ser_rodrik_cassel"]

    def test_massing_on_the_milkwater_loss(self, three_player_state):
        state = three_player_state
        self.attack(state, W.MASSING_ON_THE_MILKWATER, *self.LOSE)
        assert state.houses[S].discards == ["eddard_stark"]
        assert state.houses[L].discards == ["tywin_lannister"]
        assert state.houses[B].discards == ["stannis_baratheon"]
        assert len(state.houses[B].hand) == 6

    def test_massing_on_the_milkwater_win(self, three_player_state):
        state = three_player_state
        stark = state.houses[S]
        for card_id in ("eddard_stark", "robb_stark"):
            stark.hand.remove(card_id)
        stark.discards = ["eddard_stark", "robb_stark"]
        self.attack(state, W.MASSING_ON_THE_MILKWATER, *self.WIN)
        assert len(stark.hand) == 7
        assert stark.discards == []

    def test_rattleshirts_raiders_loss(self, three_player_state):
        state = three_player_state
        supply = {h: state.houses[h].supply for h in (B, L, S)}
        self.attack(state, W.RATTLESHIRTS_RAIDERS, *self.LOSE)
        assert state.houses[S].supply == max(0, supply[S] - 2)
        assert state.houses[L].supply == supply[L] - 1
        assert state.houses[B].supply == supply[B] - 1

    def test_rattleshirts_raiders_win(self, three_player_state):
        state = three_player_state
        supply = state.houses[S].supply
        self.attack(state, W.RATTLESHIRTS_RAIDERS, *self.WIN)
        assert state.houses[S].supply == supply + 1
        assert state.wildling_threat == 0

    def test_the_horde_descends_loss(self, three_player_state):
        state = three_player_state
        self.attack(state, W.THE_HORDE_DESCENDS, *self.LOSE)
        # Stark's two losses are the footmen in its castles
        assert state.areas[A.WHITE_HARBOR].units == []
        assert [u.unit_type for u in state.areas[A.WINTERFELL].units] == [UnitType.KNIGHT]
        assert state.unit_count(S) == 2
        assert state.unit_count(L) == 3
        assert state.unit_count(B) == 4

    def test_the_horde_descends_win(self, three_player_state):
        state = three_player_state
        pending = self.attack(state, W.THE_HORDE_DESCENDS, *self.WIN)
        assert pending.decision_type == DecisionType.MUSTER
        assert pending.house == S
        assert pending.limit == 1
