"""
State Machine - Pure progression of the game.

advance() runs deterministic steps until a decision is needed or the game
is over. Each step does exactly one thing: a phase transition, an automatic
resolution, a seeded draw, or setting the PendingDecision.

Step priority (first match wins):
1. Supply reconciliation owed after a supply change
2. Active bidding
3. Active combat
4. A land area vacated by a march (power token decision)
5. The current phase: Westeros, Planning or Action

Loop safety: every step must change the state. The fingerprint of the
state is compared before and after each step; an unchanged state, or more
steps than RulesConfig.max_advance_steps, raises EngineInvariantError.
"""

from __future__ import annotations
import logging

from ..games.thrones.areas import BOARD
from . import bidding, combat, westeros
from .errors import EngineInvariantError
from .muster import consolidate_amount, muster_areas, muster_decision
from .navigation import raid_targets, valid_destinations
from .orders import max_orders, star_order_limit, usable_tokens
from .record import fingerprint
from .rules import check_victory, end_turn, gain_power, release_if_empty, standings
from .state import (
    ActionSubPhase,
    DecisionType,
    GameState,
    OrderType,
    PendingDecision,
    Phase,
    Track,
)
from .supply import find_violations, reconcile_areas

logger = logging.getLogger(__name__)

_SUB_PHASE_ORDERS = {
    ActionSubPhase.RAID: OrderType.RAID,
    ActionSubPhase.MARCH: OrderType.MARCH,
    ActionSubPhase.CONSOLIDATE_POWER: OrderType.CONSOLIDATE_POWER,
}

_NEXT_SUB_PHASE = {
    ActionSubPhase.RAID: ActionSubPhase.MARCH,
    ActionSubPhase.MARCH: ActionSubPhase.CONSOLIDATE_POWER,
    ActionSubPhase.CONSOLIDATE_POWER: None,
}


class StateMachine:
    """
    Drives a GameState forward until someone has to decide something.

    Stateless - all state is in GameState.
    """

    def advance(self, state: GameState) -> PendingDecision | None:
        """
        Progress the game.

        Returns the pending decision, or None when the game is over.
        """
        steps = 0
        while state.pending is None and state.winner is None:
            steps += 1
            if steps > state.config.max_advance_steps:
                raise EngineInvariantError(
                    f"advance() exceeded {state.config.max_advance_steps} steps"
                )
            before = fingerprint(state)
            self._step(state)
            if fingerprint(state) == before:
                raise EngineInvariantError(
                    f"No progress in round {state.round}, phase {state.phase.value}"
                )
        return state.pending

    def _step(self, state: GameState) -> None:
        if state.supply_check_due:
            self._step_reconcile(state)
        elif state.bidding is not None:
            bidding.step(state)
        elif state.combat is not None:
            combat.step(state)
        elif state.vacated_area is not None:
            self._step_vacated(state)
        elif state.phase == Phase.WESTEROS:
            westeros.step(state)
        elif state.phase == Phase.PLANNING:
            self._step_planning(state)
        else:
            self._step_action(state)

    # -- Interrupts --------------------------------------------------------

    def _step_reconcile(self, state: GameState) -> None:
        # Marching units off the board cannot be disbanded until their combat ends
        for house in find_violations(state):
            areas = reconcile_areas(state, house)
            if areas:
                state.pending = PendingDecision(
                    decision_type=DecisionType.RECONCILE,
                    house=house,
                    areas=areas,
                )
                return
        state.supply_check_due = False

    def _step_vacated(self, state: GameState) -> None:
        area_id = state.vacated_area
        area = state.areas[area_id]
        state.vacated_area = None
        house = area.house
        if area.units or house is None or area.power_token:
            return
        if area.garrison is not None and area.garrison.house == house:
            return
        if state.houses[house].power > 0:
            state.pending = PendingDecision(
                decision_type=DecisionType.LEAVE_POWER_TOKEN,
                house=house,
                area_id=area_id,
            )
        else:
            release_if_empty(state, area_id)

    # -- Planning ----------------------------------------------------------

    def _step_planning(self, state: GameState) -> None:
        for house in state.turn_order:
            if house in state.houses_ordered:
                continue
            state.houses_ordered.append(house)
            areas = [
                a for a in state.areas_with_units(house)
                if not BOARD.is_blocked(a, state.player_count)
            ]
            tokens = usable_tokens(state.restricted_orders, state.restricted_star_orders)
            limit = star_order_limit(state.player_count, state.position(house, Track.KINGS_COURT))
            count = min(len(areas), max_orders(tokens, limit))
            if count > 0:
                state.pending = PendingDecision(
                    decision_type=DecisionType.PLACE_ORDERS,
                    house=house,
                    areas=areas,
                    tokens=tokens,
                    count=count,
                    limit=limit,
                )
            return

        if not state.orders_revealed:
            state.orders_revealed = True
            return

        if not state.raven_used:
            state.raven_used = True
            raven = state.holder(Track.KINGS_COURT)
            if state.orders_of(raven):
                state.pending = PendingDecision(
                    decision_type=DecisionType.MESSENGER_RAVEN,
                    house=raven,
                    areas=sorted(state.orders_of(raven)),
                    tokens=usable_tokens(state.restricted_orders, state.restricted_star_orders),
                    limit=star_order_limit(state.player_count, 1),
                )
            return

        state.phase = Phase.ACTION
        state.action_sub_phase = ActionSubPhase.RAID
        state.action_player_index = 0
        logger.debug(f"Round {state.round}: Action phase")

    # -- Action ------------------------------------------------------------

    def _step_action(self, state: GameState) -> None:
        if state.action_sub_phase is None:
            state.action_sub_phase = ActionSubPhase.RAID
            state.action_player_index = 0
            return

        order_type = _SUB_PHASE_ORDERS[state.action_sub_phase]
        order = state.turn_order
        for offset in range(len(order)):
            index = (state.action_player_index + offset) % len(order)
            house = order[index]
            areas = sorted(a for a, o in state.orders_of(house).items() if o.order_type == order_type)
            if not areas:
                continue
            if offset:
                state.action_player_index = index
                return
            self._resolve_order(state, house, areas[0], order_type)
            return

        following = _NEXT_SUB_PHASE[state.action_sub_phase]
        if following is not None:
            state.action_sub_phase = following
            state.action_player_index = 0
            logger.debug(f"Round {state.round}: {following.value} orders")
        else:
            self._cleanup(state)

    def _resolve_order(self, state: GameState, house, area_id: int, order_type: OrderType) -> None:
        area = state.areas[area_id]
        if order_type == OrderType.RAID:
            targets = raid_targets(state, house, area_id, area.order.star)
            if targets:
                state.pending = PendingDecision(
                    decision_type=DecisionType.CHOOSE_RAID,
                    house=house,
                    area_id=area_id,
                    areas=targets,
                )
            else:
                area.order = None
                end_turn(state)
            return

        if order_type == OrderType.MARCH:
            destinations = valid_destinations(state, house, area_id)
            movable = [i for i, u in enumerate(area.units) if u.house == house and not u.routed]
            if destinations and movable:
                state.pending = PendingDecision(
                    decision_type=DecisionType.CHOOSE_MARCH,
                    house=house,
                    area_id=area_id,
                    areas=destinations,
                    units=movable,
                )
            else:
                area.order = None
                end_turn(state)
            return

        if area.order.star and BOARD.area(area_id).has_castle:
            castle = [m for m in muster_areas(state, house) if m.area_id == area_id]
            if castle:
                state.pending = muster_decision(state, house, castle, limit=1, area_id=area_id)
                return
        area.order = None
        gain_power(state, house, consolidate_amount(state, area_id))
        end_turn(state)

    def _cleanup(self, state: GameState) -> None:
        for area in state.areas:
            area.order = None
            for unit in area.units:
                unit.routed = False
        state.action_sub_phase = None
        state.action_player_index = 0
        state.restricted_orders = []
        state.restricted_star_orders = []
        state.houses_ordered = []
        state.orders_revealed = False
        state.raven_used = False
        state.blade_used = False
        state.revealed_bids = {}
        state.westeros_drawn = []
        state.westeros_cards_dealt = False

        if check_victory(state) is not None:
            logger.info(f"{state.winner.value} wins in round {state.round}")
            return

        if state.round >= state.config.round_limit:
            state.winner = standings(state)[0]
            logger.info(f"Round limit reached; {state.winner.value} wins on tiebreak")
            return
        state.round += 1
        state.phase = Phase.WESTEROS
        logger.debug(f"Round {state.round}: Westeros phase")


_MACHINE = StateMachine()


def advance(state: GameState) -> PendingDecision | None:
    """Progress the game until a decision is pending or a winner is set."""
    return _MACHINE.advance(state)
