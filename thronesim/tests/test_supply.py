"""
Tests for supply limits and reconciliation.
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.machine import advance
from ..engine_core.reducer import apply_action
from ..engine_core.state import DecisionType, House, UnitType
from ..engine_core.supply import (
    MAX_SUPPLY,
    SUPPLY_LIMITS,
    calculate_supply,
    find_violations,
    fits_supply,
    house_fits,
    reconcile_areas,
)
from ..games.thrones import areas as A
from .conftest import put


class TestLimits:
    """Tests for the supply table."""

    def test_single_units_never_count(self):
        assert fits_supply([1, 1, 1, 1, 1, 1, 1], 0)

    def test_level_one(self):
        assert fits_supply([3, 2], 1)
        assert not fits_supply([3, 3], 1)
        assert not fits_supply([2, 2, 2], 1)

    def test_level_six(self):
        assert fits_supply([4, 3, 2, 2, 2], 6)
        assert not fits_supply([4, 4], 6)

    @pytest.mark.parametrize("level", range(MAX_SUPPLY))
    def test_monotonic(self, level):
        """A higher level never allows less than a lower one."""
        lower, higher = SUPPLY_LIMITS[level], SUPPLY_LIMITS[level + 1]
        assert len(higher) >= len(lower)
        assert all(h >= l for h, l in zip(higher, lower))

    def test_level_clamped(self):
        assert fits_supply([4, 3], 9)
        assert fits_supply([2, 2], -1)


class TestCalculation:
    """Tests for supply barrels."""

    def test_starting_supply_matches_board(self, six_player_state):
        for house, record in six_player_state.houses.items():
            assert calculate_supply(six_player_state, house) == record.supply

    def test_capped_at_six(self, empty_board_state):
        state = empty_board_state
        for area_id in (A.LANNISPORT, A.BLACKWATER, A.THE_STONY_SHORE, A.WIDOWS_WATCH,
                        A.GREYWATER_WATCH, A.THE_FINGERS, A.SEAGARD):
            state.areas[area_id].house = House.LANNISTER
        assert calculate_supply(state, House.LANNISTER) == 6


class TestReconciliation:
    """Tests for over-supply detection and RECONCILE."""

    def test_violation_detected(self, empty_board_state):
        state = empty_board_state
        state.houses[House.STARK].supply = 1
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN, UnitType.FOOTMAN, UnitType.FOOTMAN)
        put(state, A.KARHOLD, House.STARK, UnitType.FOOTMAN, UnitType.FOOTMAN, UnitType.FOOTMAN)
        assert not house_fits(state, House.STARK)
        assert find_violations(state) == [House.STARK]
        assert reconcile_areas(state, House.STARK) == [A.KARHOLD, A.WINTERFELL]

    def test_delta(self, empty_board_state):
        """A hypothetical move is checked without mutating the board."""
        state = empty_board_state
        state.houses[House.STARK].supply = 0
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN, UnitType.FOOTMAN)
        put(state, A.KARHOLD, House.STARK, UnitType.FOOTMAN)
        assert house_fits(state, House.STARK)
        assert house_fits(state, House.STARK, {A.WINTERFELL: -1, A.KARHOLD: 1})
        assert not house_fits(state, House.STARK, {A.KARHOLD: 2})
        assert len(state.areas[A.KARHOLD].units) == 1

    def test_reconcile_until_fits(self, empty_board_state):
        """The machine asks for disbands until every house fits."""
        state = empty_board_state
        state.houses[House.STARK].supply = 1
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN, UnitType.FOOTMAN, UnitType.FOOTMAN)
        put(state, A.KARHOLD, House.STARK, UnitType.FOOTMAN, UnitType.FOOTMAN, UnitType.FOOTMAN)
        state.supply_check_due = True

        pending = advance(state)
        assert pending.decision_type == DecisionType.RECONCILE
        assert pending.house == House.STARK

        result = apply_action(state, Action.reconcile(House.STARK, A.KARHOLD, 0))
        assert result.success
        assert len(state.areas[A.KARHOLD].units) == 2
        assert house_fits(state, House.STARK)

        pending = advance(state)
        assert state.supply_check_due is False
        assert pending is None or pending.decision_type != DecisionType.RECONCILE

    def test_reconcile_rejects_foreign_unit(self, empty_board_state):
        state = empty_board_state
        state.houses[House.STARK].supply = 0
        put(state, A.WINTERFELL, House.STARK, UnitType.FOOTMAN, UnitType.FOOTMAN, UnitType.FOOTMAN)
        state.supply_check_due = True
        advance(state)
        result = apply_action(state, Action.reconcile(House.STARK, A.WINTERFELL, 7))
        assert not result.success
        assert len(state.areas[A.WINTERFELL].units) == 3
