"""
Integration tests - Whole games driven by the game runner.

Tests the complete flow:
1. Create the initial state
2. Advance to each decision
3. Ask the deciding house's agent
4. Apply, retry or fall back
"""

import pytest

from ..bots import PassiveAgent, RandomAgent
from ..config import RulesConfig
from ..engine_core.record import fingerprint
from ..engine_core.state import UnitPool, UnitType
from ..games.thrones.setup import houses_for
from ..session import GameRunner, run_game


def random_agents(player_count, seed):
    return {h: RandomAgent(seed * 10 + i) for i, h in enumerate(houses_for(player_count))}


class TestFullGame:
    """Tests for complete games."""

    def test_passive_game_ends(self):
        """Passive houses never fight; the round limit decides."""
        agents = {h: PassiveAgent() for h in houses_for(3)}
        result = run_game(agents, 3, seed=1)
        assert result.completed
        assert result.winner is not None
        assert result.rounds == 10
        assert all(p.illegal_actions == 0 for p in result.players)
        assert all(p.fallbacks == 0 for p in result.players)

    @pytest.mark.parametrize("player_count", [3, 4, 5, 6])
    def test_random_game_completes(self, player_count):
        result = run_game(random_agents(player_count, 7), player_count, seed=7)
        assert result.completed
        assert result.rounds <= 10
        assert result.players[0].house == result.winner
        assert [p.rank for p in result.players] == list(range(1, player_count + 1))

    def test_deterministic(self):
        """Same seeds, same agents: identical games."""
        first = run_game(random_agents(4, 3), 4, seed=3)
        second = run_game(random_agents(4, 3), 4, seed=3)
        assert first.decisions == second.decisions
        assert first.winner == second.winner
        assert fingerprint(first.state) == fingerprint(second.state)

    def test_units_conserved(self):
        """Units on the board plus the pool always match the full set."""
        result = run_game(random_agents(5, 11), 5, seed=11)
        state = result.state
        full = UnitPool()
        for house, record in state.houses.items():
            for unit_type in UnitType:
                on_board = sum(1 for _, u in state.iter_units(house) if u.unit_type == unit_type)
                assert on_board + record.pool.available(unit_type) == full.available(unit_type)

    def test_short_round_limit(self):
        config = RulesConfig(round_limit=2)
        result = run_game(random_agents(3, 2), 3, seed=2, config=config)
        assert result.completed
        assert result.rounds <= 2


class TestRunner:
    """Tests for the runner's bookkeeping."""

    def test_decision_budget(self):
        result = run_game(None, 3, seed=4, max_decisions=5)
        assert not result.completed
        assert result.winner is None
        assert result.decisions == 5

    def test_missing_agents_are_passive(self):
        runner = GameRunner()
        result = runner.run(3, seed=5)
        assert result.completed
        assert {p.agent for p in result.players} == {"PassiveAgent"}

    def test_player_lookup(self):
        result = run_game(None, 3, seed=6, max_decisions=1)
        for player in result.players:
            assert result.player(player.house) is player
