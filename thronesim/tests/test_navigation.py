"""
Tests for movement, transport, retreat, raid and support legality.
"""

from ..engine_core.navigation import (
    raid_targets,
    retreat_areas,
    support_areas,
    transport_reachable,
    unit_strength,
    valid_destinations,
)
from ..engine_core.state import Garrison, House, Order, OrderType, Unit, UnitType
from ..games.thrones import areas as A
from .conftest import put


class TestUnitStrength:
    """Tests for base unit strength."""

    def test_values(self):
        assert unit_strength(Unit(UnitType.FOOTMAN, House.STARK)) == 1
        assert unit_strength(Unit(UnitType.KNIGHT, House.STARK)) == 2
        assert unit_strength(Unit(UnitType.SHIP, House.STARK)) == 1

    def test_siege_engine_only_against_castles(self):
        siege = Unit(UnitType.SIEGE_ENGINE, House.STARK)
        assert unit_strength(siege) == 0
        assert unit_strength(siege, attacking_castle=True) == 4

    def test_routed_units_have_no_strength(self):
        assert unit_strength(Unit(UnitType.KNIGHT, House.STARK, routed=True)) == 0


class TestDestinations:
    """Tests for march destinations."""

    def test_winterfell_start(self, three_player_state):
        """Land neighbors plus Widow's Watch by transport over the Shivering Sea."""
        destinations = valid_destinations(three_player_state, House.STARK, A.WINTERFELL)
        assert destinations == [
            A.CASTLE_BLACK, A.KARHOLD, A.THE_STONY_SHORE,
            A.WHITE_HARBOR, A.WIDOWS_WATCH, A.MOAT_CAILIN,
        ]

    def test_transport_needs_own_ships(self, three_player_state):
        reachable = transport_reachable(three_player_state, House.STARK, A.WINTERFELL)
        assert A.WIDOWS_WATCH in reachable
        assert A.FLINTS_FINGER not in reachable

    def test_neutral_garrison_too_strong(self, three_player_state):
        """A lone footman cannot march on King's Landing (garrison 5)."""
        destinations = valid_destinations(three_player_state, House.BARATHEON, A.KINGSWOOD)
        assert A.KINGS_LANDING not in destinations
        assert A.BLACKWATER in destinations

    def test_blocked_areas_excluded(self, three_player_state):
        destinations = valid_destinations(three_player_state, House.BARATHEON, A.KINGSWOOD)
        assert A.THE_BONEWAY not in destinations

    def test_ships_stay_at_sea(self, three_player_state):
        destinations = valid_destinations(three_player_state, House.BARATHEON, A.SHIPBREAKER_BAY)
        assert A.KINGSWOOD not in destinations
        assert A.THE_NARROW_SEA in destinations
        assert A.DRAGONSTONE_PORT in destinations

    def test_port_ships_leave_to_their_sea(self, empty_board_state):
        put(empty_board_state, A.LANNISPORT, House.LANNISTER, UnitType.FOOTMAN)
        put(empty_board_state, A.LANNISPORT_PORT, House.LANNISTER, UnitType.SHIP)
        destinations = valid_destinations(empty_board_state, House.LANNISTER, A.LANNISPORT_PORT)
        assert destinations == [A.THE_GOLDEN_SOUND]


class TestRetreat:
    """Tests for retreat options."""

    def test_excludes_enemy_and_origin(self, empty_board_state):
        state = empty_board_state
        put(state, A.STONEY_SEPT, House.LANNISTER, UnitType.FOOTMAN)
        put(state, A.RIVERRUN, House.STARK, UnitType.FOOTMAN)
        options = retreat_areas(state, House.LANNISTER, A.STONEY_SEPT, attacker_origin=A.HARRENHAL)
        assert A.RIVERRUN not in options
        assert A.HARRENHAL not in options
        assert A.LANNISPORT in options
        assert A.BLACKWATER in options

    def test_excludes_foreign_garrison(self, empty_board_state):
        state = empty_board_state
        put(state, A.HARRENHAL, House.LANNISTER, UnitType.FOOTMAN)
        options = retreat_areas(state, House.LANNISTER, A.HARRENHAL)
        assert A.KINGS_LANDING in options
        state.areas[A.KINGS_LANDING].garrison = Garrison(house=None, strength=5)
        assert A.KINGS_LANDING not in retreat_areas(state, House.LANNISTER, A.HARRENHAL)


class TestRaidAndSupport:
    """Tests for raid targets and support reach."""

    def _order(self, house, order_type, strength=0, star=False):
        return Order(order_type=order_type, strength=strength, star=star, house=house, token_index=0)

    def test_land_raid_ignores_sea(self, empty_board_state):
        state = empty_board_state
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN)
        put(state, A.KARHOLD, House.LANNISTER, UnitType.FOOTMAN)
        put(state, A.THE_SHIVERING_SEA, House.LANNISTER, UnitType.SHIP)
        state.areas[A.KARHOLD].order = self._order(House.LANNISTER, OrderType.SUPPORT)
        state.areas[A.THE_SHIVERING_SEA].order = self._order(House.LANNISTER, OrderType.SUPPORT)
        assert raid_targets(state, House.STARK, A.WINTERFELL, starred=False) == [A.KARHOLD]

    def test_defense_needs_starred_raid(self, empty_board_state):
        state = empty_board_state
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN)
        put(state, A.KARHOLD, House.LANNISTER, UnitType.FOOTMAN)
        state.areas[A.KARHOLD].order = self._order(House.LANNISTER, OrderType.DEFENSE, 1)
        assert raid_targets(state, House.STARK, A.WINTERFELL, starred=False) == []
        assert raid_targets(state, House.STARK, A.WINTERFELL, starred=True) == [A.KARHOLD]

    def test_sea_support_into_land(self, empty_board_state):
        state = empty_board_state
        put(state, A.THE_SHIVERING_SEA, House.STARK, UnitType.SHIP)
        put(state, A.CASTLE_BLACK, House.STARK, UnitType.FOOTMAN)
        state.areas[A.THE_SHIVERING_SEA].order = self._order(House.STARK, OrderType.SUPPORT)
        state.areas[A.CASTLE_BLACK].order = self._order(House.STARK, OrderType.SUPPORT)
        assert support_areas(state, A.KARHOLD) == [A.CASTLE_BLACK, A.THE_SHIVERING_SEA]
        # Land units cannot support a sea battle
        assert support_areas(state, A.BAY_OF_ICE) == []
