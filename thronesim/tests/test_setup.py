"""
Tests for game setup.

Tests:
- Player count and seed validation
- Houses, tracks and starting positions
- Garrisons and decks
- Determinism
"""

import pytest

from ..config import RulesConfig
from ..engine_core.errors import InvalidPlayerCount, InvalidSeed
from ..engine_core.record import fingerprint
from ..engine_core.state import House, Phase, Track, UnitType
from ..games.thrones import areas as A
from ..games.thrones.setup import (
    NEUTRAL_HOME_GARRISON,
    STARTING_POWER,
    create_initial_state,
    houses_for,
)


class TestValidation:
    """Tests for argument validation."""

    @pytest.mark.parametrize("player_count", [0, 2, 7, True, "3", 3.0])
    def test_invalid_player_count(self, player_count):
        with pytest.raises(InvalidPlayerCount):
            create_initial_state(player_count, 1)

    @pytest.mark.parametrize("seed", [-1, 2 ** 64, 1.5, "42", None])
    def test_invalid_seed(self, seed):
        with pytest.raises(InvalidSeed):
            create_initial_state(3, seed)

    def test_errors_are_value_errors(self):
        """Setup errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            create_initial_state(9, 1)

    def test_largest_seed_accepted(self):
        state = create_initial_state(3, 2 ** 64 - 1)
        assert state.seed == 2 ** 64 - 1


class TestHouses:
    """Tests for houses in play."""

    def test_houses_per_count(self):
        assert houses_for(3) == [House.STARK, House.LANNISTER, House.BARATHEON]
        assert House.GREYJOY in houses_for(4)
        assert House.TYRELL in houses_for(5)
        assert houses_for(6) == list(House)

    @pytest.mark.parametrize("player_count", [3, 4, 5, 6])
    def test_player_count(self, player_count):
        state = create_initial_state(player_count, 1)
        assert state.player_count == player_count
        for track in Track:
            assert sorted(h.value for h in state.tracks[track]) == sorted(h.value for h in state.houses)

    def test_starting_records(self, six_player_state):
        for house, record in six_player_state.houses.items():
            assert record.power == STARTING_POWER
            assert len(record.hand) == 7
            assert record.discards == []

    def test_starting_tracks(self, six_player_state):
        """Printed starting positions."""
        assert six_player_state.holder(Track.IRON_THRONE) == House.BARATHEON
        assert six_player_state.holder(Track.FIEFDOMS) == House.GREYJOY
        assert six_player_state.holder(Track.KINGS_COURT) == House.LANNISTER

    def test_three_player_turn_order(self, three_player_state):
        assert three_player_state.turn_order == [House.BARATHEON, House.LANNISTER, House.STARK]


class TestBoard:
    """Tests for units, control and garrisons."""

    def test_stark_units(self, three_player_state):
        units = three_player_state.areas[A.WINTERFELL].units
        assert sorted(u.unit_type.value for u in units) == ["footman", "knight"]
        assert three_player_state.areas[A.WINTERFELL].house == House.STARK
        assert three_player_state.areas[A.WINTERFELL_PORT].house == House.STARK

    def test_pool_accounts_for_placed_units(self, three_player_state):
        pool = three_player_state.houses[House.BARATHEON].pool
        assert pool.available(UnitType.SHIP) == 6 - 2
        assert pool.available(UnitType.KNIGHT) == 5 - 1

    def test_home_garrisons(self, three_player_state):
        garrison = three_player_state.areas[A.WINTERFELL].garrison
        assert garrison.house == House.STARK
        assert garrison.strength == 2

    def test_neutral_garrisons(self, four_or_more):
        state = create_initial_state(four_or_more, 1)
        assert state.areas[A.KINGS_LANDING].garrison.house is None
        assert state.areas[A.KINGS_LANDING].garrison.strength == 5
        if four_or_more < 6:
            assert state.areas[A.SUNSPEAR].garrison.strength == NEUTRAL_HOME_GARRISON

    def test_starts_in_planning(self, three_player_state):
        assert three_player_state.round == 1
        assert three_player_state.phase == Phase.PLANNING
        assert three_player_state.pending is None
        assert three_player_state.wildling_threat == 2

    @pytest.fixture(params=[4, 5, 6])
    def four_or_more(self, request):
        return request.param


class TestDecksAndDeterminism:
    """Tests for seeded decks."""

    def test_decks_dealt(self, three_player_state):
        assert [len(d) for d in three_player_state.westeros_decks] == [10, 10, 10]
        assert len(three_player_state.wildling_deck) == 9

    def test_same_seed_same_state(self):
        """create_initial_state(6, 42) twice gives identical states."""
        first = create_initial_state(6, 42)
        second = create_initial_state(6, 42)
        assert first == second
        assert fingerprint(first) == fingerprint(second)

    def test_different_seed_different_decks(self):
        orders = {
            tuple(c.card_type for c in create_initial_state(6, seed).westeros_decks[2])
            for seed in range(10)
        }
        assert len(orders) > 1

    def test_config_is_carried(self):
        config = RulesConfig(round_limit=3)
        state = create_initial_state(3, 1, config)
        assert state.config.round_limit == 3
