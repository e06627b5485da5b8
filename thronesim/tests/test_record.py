"""
Tests for state persistence.
"""

import json

from ..engine_core.action import Action
from ..engine_core.machine import advance
from ..engine_core.orders import default_assignment
from ..engine_core.record import fingerprint, from_json, from_record, to_json, to_record
from ..engine_core.state import House, UnitType
from ..games.thrones import areas as A
from ..games.thrones.setup import create_initial_state
from .conftest import answer, attack, put


class TestRoundTrip:
    """Tests for record and JSON round trips."""

    def test_initial_state(self, six_player_state):
        assert from_record(to_record(six_player_state)) == six_player_state

    def test_record_is_plain_json(self, three_player_state):
        record = to_record(three_player_state)
        assert json.loads(json.dumps(record)) == record

    def test_json(self, planning_state):
        restored = from_json(to_json(planning_state))
        assert restored == planning_state
        assert restored.pending == planning_state.pending

    def test_mid_combat(self, empty_board_state):
        state = empty_board_state
        attack(state, House.STARK, [UnitType.KNIGHT] * 4, House.LANNISTER,
               [UnitType.KNIGHT] + [UnitType.FOOTMAN] * 3)
        assert state.combat is not None
        restored = from_json(to_json(state, indent=2))
        assert restored == state
        assert restored.combat.attacking_units == state.combat.attacking_units

    def test_restored_game_continues_identically(self, three_player_state):
        state = three_player_state
        put(state, A.KARHOLD, House.STARK, UnitType.FOOTMAN)
        restored = from_record(to_record(state))
        assert advance(restored) == advance(state)
        assert fingerprint(restored) == fingerprint(state)

        pending = state.pending
        orders = default_assignment(pending.areas, pending.tokens, pending.limit)
        answer(state, Action.place_orders(pending.house, orders))
        answer(restored, Action.place_orders(pending.house, dict(orders)))
        assert restored == state


class TestFingerprint:
    """Tests for canonical fingerprints."""

    def test_same_seed_same_fingerprint(self):
        assert fingerprint(create_initial_state(4, 9)) == fingerprint(create_initial_state(4, 9))

    def test_seed_changes_fingerprint(self):
        assert fingerprint(create_initial_state(4, 9)) != fingerprint(create_initial_state(4, 10))

    def test_any_change_changes_fingerprint(self, three_player_state):
        before = fingerprint(three_player_state)
        three_player_state.houses[House.STARK].power += 1
        assert fingerprint(three_player_state) != before
