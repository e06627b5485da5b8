"""
Reducer - Applies actions to game state.

The reducer is the single point where agents change the game. It accepts
exactly one Action answering the outstanding PendingDecision.

Design principles:
- Validates completely before applying; a failure leaves the state untouched
- Returns ActionResult with success/failure and an error code
- Never progresses the game further; call advance() afterwards
- Delegates combat, bidding, Westeros and muster answers to their modules
"""

from __future__ import annotations
import logging
from typing import Callable

from ..games.thrones.areas import BOARD
from . import bidding, combat, muster, westeros
from .action import Action, ActionResult
from .combat import begin_combat
from .errors import IllegalAction
from .navigation import unit_strength
from .orders import ORDER_TOKENS
from .rules import (
    check_victory,
    end_turn,
    gain_power,
    lose_power,
    place_units,
    release_if_empty,
)
from .state import DecisionType, GameState, OrderType
from .supply import house_fits

logger = logging.getLogger(__name__)

Handler = Callable[[GameState, Action], str]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action answering the pending decision.

        Returns ActionResult; on failure the state is unchanged.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            message, code = validation_error
            return ActionResult.failure(message, error_code=code)

        handler = self._get_handler(action.action_type)
        try:
            change = handler(state, action)
        except IllegalAction as e:
            logger.debug(f"Rejected {action.action_type.value} from {action.house.value}: {e}")
            return ActionResult.failure(str(e), error_code=e.error_code)

        state.pending = None
        return ActionResult.success_with([change])

    def _validate_action(self, state: GameState, action: Action) -> tuple[str, str] | None:
        """Tag and house checks shared by every decision type."""
        if state.winner is not None:
            return "Game is over - no actions allowed", "GAME_OVER"
        if state.pending is None:
            return "No decision is pending", "NO_PENDING"
        if not isinstance(action, Action) or not isinstance(action.action_type, DecisionType):
            return "Not an Action", "TAG_MISMATCH"
        if action.action_type != state.pending.decision_type:
            return (
                f"Expected {state.pending.decision_type.value}, got {action.action_type.value}",
                "TAG_MISMATCH",
            )
        if action.house != state.pending.house:
            return f"Decision belongs to {state.pending.house.value}", "WRONG_HOUSE"
        return None

    def _get_handler(self, action_type: DecisionType) -> Handler:
        """Get the handler function for a decision type."""
        handlers: dict[DecisionType, Handler] = {
            DecisionType.PLACE_ORDERS: self._handle_place_orders,
            DecisionType.MESSENGER_RAVEN: self._handle_messenger_raven,
            DecisionType.CHOOSE_RAID: self._handle_choose_raid,
            DecisionType.CHOOSE_MARCH: self._handle_choose_march,
            DecisionType.LEAVE_POWER_TOKEN: self._handle_leave_power_token,
            DecisionType.MUSTER: muster.handle_muster,
            DecisionType.RECONCILE: self._handle_reconcile,
            DecisionType.BID: bidding.handle_bid,
            DecisionType.WESTEROS_CHOICE: westeros.handle_westeros_choice,
            DecisionType.WILDLING_PENALTY: bidding.handle_wildling_penalty,
            DecisionType.SELECT_CARD: combat.handle_select_card,
            DecisionType.DECLARE_SUPPORT: combat.handle_declare_support,
            DecisionType.USE_BLADE: combat.handle_use_blade,
            DecisionType.CHOOSE_CASUALTIES: combat.handle_choose_casualties,
            DecisionType.RETREAT: combat.handle_retreat,
            DecisionType.TYRION_REPLACE: combat.handle_tyrion_replace,
            DecisionType.AERON_SWAP: combat.handle_aeron_swap,
            DecisionType.QUEEN_OF_THORNS: combat.handle_queen_of_thorns,
            DecisionType.DORAN_CHOOSE_TRACK: combat.handle_doran_choose_track,
            DecisionType.ROBB_RETREAT: combat.handle_robb_retreat,
            DecisionType.CERSEI_REMOVE_ORDER: combat.handle_cersei_remove_order,
            DecisionType.PATCHFACE_DISCARD: combat.handle_patchface_discard,
        }
        return handlers[action_type]

    # -- Planning ----------------------------------------------------------

    def _handle_place_orders(self, state: GameState, action: Action) -> str:
        decision = state.pending
        orders = action.payload.orders
        if not isinstance(orders, dict):
            raise IllegalAction("Orders must map area ids to token indices")
        if len(orders) != decision.count:
            raise IllegalAction(f"Place exactly {decision.count} orders")
        for area_id, token in orders.items():
            if not _is_int(area_id) or area_id not in decision.areas:
                raise IllegalAction(f"Cannot place an order in area {area_id}")
            if not _is_int(token) or token not in decision.tokens:
                raise IllegalAction(f"Order token {token} is not usable")
        if len(set(orders.values())) != len(orders):
            raise IllegalAction("Each order token can be used once")
        stars = sum(1 for t in orders.values() if ORDER_TOKENS[t].star)
        if stars > decision.limit:
            raise IllegalAction(f"At most {decision.limit} starred orders")

        for area_id, token in orders.items():
            state.areas[area_id].order = ORDER_TOKENS[token].place(action.house, token)
        return f"{action.house.value} placed {len(orders)} orders"

    def _handle_messenger_raven(self, state: GameState, action: Action) -> str:
        decision = state.pending
        area_id = action.payload.area_id
        token = action.payload.token_index
        if area_id is None and token is None:
            return "Messenger raven not used"
        if area_id not in decision.areas:
            raise IllegalAction(f"No order of yours in area {area_id}")
        if not _is_int(token) or token not in decision.tokens:
            raise IllegalAction(f"Order token {token} is not usable")
        others = {a: o for a, o in state.orders_of(action.house).items() if a != area_id}
        if any(o.token_index == token for o in others.values()):
            raise IllegalAction(f"Order token {token} is already on the board")
        stars = sum(1 for o in others.values() if o.star) + ORDER_TOKENS[token].star
        if stars > decision.limit:
            raise IllegalAction(f"At most {decision.limit} starred orders")

        state.areas[area_id].order = ORDER_TOKENS[token].place(action.house, token)
        return f"{action.house.value} swapped the order in {BOARD.name(area_id)}"

    # -- Action phase ------------------------------------------------------

    def _handle_choose_raid(self, state: GameState, action: Action) -> str:
        decision = state.pending
        target = action.payload.area_id
        origin = state.areas[decision.area_id]
        if target is None:
            origin.order = None
            end_turn(state)
            return f"{action.house.value} discarded a raid"
        if target not in decision.areas:
            raise IllegalAction(f"Cannot raid area {target}")

        victim = state.areas[target].order
        if victim.order_type == OrderType.CONSOLIDATE_POWER:
            if lose_power(state, victim.house, 1):
                gain_power(state, action.house, 1)
        state.areas[target].order = None
        origin.order = None
        end_turn(state)
        return f"{action.house.value} raided {BOARD.name(target)}"

    def _handle_choose_march(self, state: GameState, action: Action) -> str:
        decision = state.pending
        house = action.house
        origin_id = decision.area_id
        origin = state.areas[origin_id]
        dest_id = action.payload.area_id
        indices = action.payload.unit_indices or []

        if dest_id is None:
            if indices:
                raise IllegalAction("A skipped march moves no units")
            origin.order = None
            end_turn(state)
            return f"{house.value} discarded a march"

        if dest_id not in decision.areas:
            raise IllegalAction(f"Cannot march to area {dest_id}")
        if not indices or len(set(indices)) != len(indices):
            raise IllegalAction("Choose at least one distinct unit to march")
        if any(i not in decision.units for i in indices):
            raise IllegalAction("Unit cannot march")

        moving = [origin.units[i] for i in sorted(indices)]
        target = state.areas[dest_id]
        march_strength = origin.order.strength
        enemies = [u for u in target.units if u.house != house]
        defender = enemies[0].house if enemies else None
        if defender is None and target.garrison is not None and target.garrison.house not in (None, house):
            defender = target.garrison.house
        neutral = target.garrison is not None and target.garrison.house is None

        if neutral:
            attacking_castle = BOARD.area(dest_id).has_castle
            strength = march_strength + sum(unit_strength(u, attacking_castle) for u in moving)
            if strength < target.garrison.strength:
                raise IllegalAction(f"Strength {strength} cannot beat the neutral garrison")
        if not house_fits(state, house, {origin_id: -len(moving), dest_id: len(moving)}):
            raise IllegalAction("March would exceed supply")

        chosen = set(indices)
        origin.order = None
        origin.units = [u for i, u in enumerate(origin.units) if i not in chosen]

        if defender is not None:
            begin_combat(state, house, defender, dest_id, origin_id, moving, march_strength)
            return f"{house.value} attacks {BOARD.name(dest_id)}"

        if neutral:
            target.garrison = None
        place_units(state, dest_id, moving, house)
        if BOARD.is_land(origin_id) and not origin.units and origin.house == house:
            state.vacated_area = origin_id
        else:
            release_if_empty(state, origin_id)
        check_victory(state)
        end_turn(state)
        return f"{house.value} marched to {BOARD.name(dest_id)}"

    def _handle_leave_power_token(self, state: GameState, action: Action) -> str:
        area_id = state.pending.area_id
        leave = action.payload.accept
        if not isinstance(leave, bool):
            raise IllegalAction("Answer must be yes or no")
        if leave:
            if state.houses[action.house].power < 1:
                raise IllegalAction("No power token available")
            lose_power(state, action.house, 1)
            state.areas[area_id].power_token = True
            return f"{action.house.value} left a power token in {BOARD.name(area_id)}"
        release_if_empty(state, area_id)
        return f"{action.house.value} abandoned {BOARD.name(area_id)}"

    # -- Supply ------------------------------------------------------------

    def _handle_reconcile(self, state: GameState, action: Action) -> str:
        area_id = action.payload.area_id
        indices = action.payload.unit_indices or []
        if area_id not in state.pending.areas:
            raise IllegalAction(f"No army to reduce in area {area_id}")
        if len(indices) != 1 or not _is_int(indices[0]):
            raise IllegalAction("Disband exactly one unit")
        units = state.areas[area_id].units
        index = indices[0]
        if not 0 <= index < len(units) or units[index].house != action.house:
            raise IllegalAction(f"No unit of yours at index {index}")
        state.remove_unit(area_id, units[index])
        return f"{action.house.value} disbanded a unit in {BOARD.name(area_id)}"


_REDUCER = Reducer()


def apply_action(state: GameState, action: Action) -> ActionResult:
    """Apply an action; see Reducer.apply."""
    return _REDUCER.apply(state, action)


def apply_action_or_raise(state: GameState, action: Action) -> ActionResult:
    """Like apply_action, but raises IllegalAction on failure."""
    result = _REDUCER.apply(state, action)
    if not result.success:
        raise IllegalAction(result.error, result.error_code)
    return result
