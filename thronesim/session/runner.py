"""
Game Runner - Drives one game from setup to a winner.

The loop:
1. advance() until a decision is pending (or the game is over)
2. Project the state for the deciding house
3. Ask that house's agent for an Action
4. apply_action(); on failure retry the agent, then fall back to the
   passive answer
5. Repeat

The runner owns no rules. It only shuttles views and actions between the
engine and the agents.
"""

from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping

from ..bots.policy import Agent, PassiveAgent
from ..config import RulesConfig
from ..engine_core.errors import EngineInvariantError
from ..engine_core.machine import advance
from ..engine_core.reducer import apply_action
from ..engine_core.rules import castle_count, standings
from ..engine_core.state import GameState, House, Track
from ..engine_core.visibility import player_view
from ..games.thrones.setup import create_initial_state

logger = logging.getLogger(__name__)


@dataclass
class PlayerResult:
    """Final standing of one house."""
    house: House
    rank: int
    castles: int
    supply: int
    power: int
    fiefdoms: int
    agent: str
    illegal_actions: int = 0
    fallbacks: int = 0


@dataclass
class GameResult:
    """
    Outcome of a finished (or abandoned) game.

    completed is False when max_decisions ran out before a winner.
    """
    player_count: int
    seed: int
    winner: House | None
    rounds: int
    decisions: int
    completed: bool
    players: list[PlayerResult] = field(default_factory=list)
    state: GameState | None = None

    def player(self, house: House) -> PlayerResult:
        return next(p for p in self.players if p.house == house)


class GameRunner:
    """
    Single-game driver.

    Usage:
        runner = GameRunner({House.STARK: RandomAgent(1)})
        result = runner.run(player_count=3, seed=42)

    Houses without an agent are played by a PassiveAgent.
    """

    def __init__(
        self,
        agents: Mapping[House, Agent] | None = None,
        max_decisions: int = 100_000,
        max_retries: int = 3,
    ):
        self.agents = dict(agents or {})
        self.max_decisions = max_decisions
        self.max_retries = max_retries
        self.fallback = PassiveAgent()

    def agent_for(self, house: House) -> Agent:
        return self.agents.get(house, self.fallback)

    def run(self, player_count: int, seed: int, config: RulesConfig | None = None) -> GameResult:
        state = create_initial_state(player_count, seed, config)
        return self.play(state)

    def play(self, state: GameState) -> GameResult:
        """Play an existing state to the end."""
        illegal: Counter[House] = Counter()
        fallbacks: Counter[House] = Counter()
        decisions = 0

        while True:
            pending = advance(state)
            if pending is None:
                break
            if decisions >= self.max_decisions:
                logger.warning(
                    f"Stopped after {decisions} decisions in round {state.round} without a winner"
                )
                break

            house = pending.house
            if not self._ask(state, self.agent_for(house), house, illegal):
                fallbacks[house] += 1
                logger.warning(
                    f"{house.value}: falling back to passive answer for {pending.decision_type.value}"
                )
                result = apply_action(state, self.fallback.decide(player_view(state, house)))
                if not result.success:
                    raise EngineInvariantError(f"Passive answer rejected: {result.error}")
            decisions += 1

        if state.winner is not None:
            logger.info(f"{state.winner.value} wins after {decisions} decisions (round {state.round})")
        return self._result(state, decisions, illegal, fallbacks)

    def _ask(self, state: GameState, agent: Agent, house: House, illegal: Counter[House]) -> bool:
        """Give an agent max_retries attempts. Returns True on success."""
        for attempt in range(1, self.max_retries + 1):
            action = agent.decide(player_view(state, house))
            result = apply_action(state, action)
            if result.success:
                return True
            illegal[house] += 1
            logger.warning(
                f"{agent.get_name()} ({house.value}) attempt {attempt}: "
                f"[{result.error_code}] {result.error}"
            )
        return False

    def _result(
        self,
        state: GameState,
        decisions: int,
        illegal: Counter[House],
        fallbacks: Counter[House],
    ) -> GameResult:
        weighted = state.config.tiebreak == "weighted"
        players = []
        for rank, house in enumerate(standings(state), start=1):
            record = state.houses[house]
            players.append(PlayerResult(
                house=house,
                rank=rank,
                castles=castle_count(state, house, weighted),
                supply=record.supply,
                power=record.power,
                fiefdoms=state.position(house, Track.FIEFDOMS),
                agent=self.agent_for(house).get_name(),
                illegal_actions=illegal[house],
                fallbacks=fallbacks[house],
            ))
        return GameResult(
            player_count=state.player_count,
            seed=state.seed,
            winner=state.winner,
            rounds=state.round,
            decisions=decisions,
            completed=state.winner is not None,
            players=players,
            state=state,
        )


def run_game(
    agents: Mapping[House, Agent] | None,
    player_count: int,
    seed: int,
    max_decisions: int = 100_000,
    max_retries: int = 3,
    config: RulesConfig | None = None,
) -> GameResult:
    """Play one game; see GameRunner."""
    runner = GameRunner(agents, max_decisions=max_decisions, max_retries=max_retries)
    return runner.run(player_count, seed, config)
