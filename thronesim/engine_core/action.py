"""
Action System - Answers to pending decisions, and their results.

Every Action carries:
1. The DecisionType tag it answers (must equal the pending tag)
2. The house answering (must equal the pending house)
3. A payload; which fields matter depends on the tag

Validation happens in the reducer; an Action is only a request.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import DecisionType, House, SupportChoice, Track, UnitType


@dataclass
class MusterStep:
    """
    One unit built (or upgraded) with a castle's muster points.

    area_id is the castle/stronghold spending the points. target_area is
    where the unit appears: the castle itself for land units, its port for
    ships. For an upgrade, a footman in area_id becomes a knight.
    """
    area_id: int
    unit_type: UnitType
    target_area: int | None = None
    upgrade: bool = False


@dataclass
class ActionPayload:
    """
    Payload for an action - generic container for answer parameters.

    Different decision types use different fields; the rest stay None.
    """
    # Planning: area -> order token index
    orders: dict[int, int] | None = None

    # Destination, raid target, retreat area, order to remove, raven area
    area_id: int | None = None
    unit_indices: list[int] | None = None

    # Card answers
    card_id: str | None = None

    # Yes/no answers (leave power token, use blade)
    accept: bool | None = None

    # Option index (Westeros choice, wildling penalty)
    choice_index: int | None = None

    amount: int | None = None
    token_index: int | None = None
    track: Track | None = None
    support: SupportChoice | None = None
    musters: list[MusterStep] = field(default_factory=list)


@dataclass
class Action:
    """
    A complete answer to a PendingDecision.

    Build one with the factory classmethods rather than by hand.
    """
    action_type: DecisionType
    house: House
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def place_orders(cls, house: House, orders: dict[int, int]) -> Action:
        """Factory for order placement: {area_id: token_index}."""
        return cls(DecisionType.PLACE_ORDERS, house, ActionPayload(orders=dict(orders)))

    @classmethod
    def messenger_raven(cls, house: House, area_id: int | None = None, token_index: int | None = None) -> Action:
        """Swap the order in area_id for token_index; both None to pass."""
        return cls(
            DecisionType.MESSENGER_RAVEN, house,
            ActionPayload(area_id=area_id, token_index=token_index),
        )

    @classmethod
    def raid(cls, house: House, target: int | None) -> Action:
        """Raid target area, or None to discard the raid."""
        return cls(DecisionType.CHOOSE_RAID, house, ActionPayload(area_id=target))

    @classmethod
    def march(cls, house: House, destination: int, unit_indices: list[int]) -> Action:
        return cls(
            DecisionType.CHOOSE_MARCH, house,
            ActionPayload(area_id=destination, unit_indices=list(unit_indices)),
        )

    @classmethod
    def skip_march(cls, house: House) -> Action:
        return cls(DecisionType.CHOOSE_MARCH, house, ActionPayload())

    @classmethod
    def leave_power_token(cls, house: House, leave: bool) -> Action:
        return cls(DecisionType.LEAVE_POWER_TOKEN, house, ActionPayload(accept=leave))

    @classmethod
    def muster(cls, house: House, steps: list[MusterStep]) -> Action:
        return cls(DecisionType.MUSTER, house, ActionPayload(musters=list(steps)))

    @classmethod
    def reconcile(cls, house: House, area_id: int, unit_index: int) -> Action:
        """Disband one unit from an over-supply army."""
        return cls(
            DecisionType.RECONCILE, house,
            ActionPayload(area_id=area_id, unit_indices=[unit_index]),
        )

    @classmethod
    def bid(cls, house: House, amount: int) -> Action:
        return cls(DecisionType.BID, house, ActionPayload(amount=amount))

    @classmethod
    def westeros_choice(cls, house: House, choice_index: int) -> Action:
        return cls(DecisionType.WESTEROS_CHOICE, house, ActionPayload(choice_index=choice_index))

    @classmethod
    def wildling_penalty(cls, house: House, choice_index: int) -> Action:
        return cls(DecisionType.WILDLING_PENALTY, house, ActionPayload(choice_index=choice_index))

    @classmethod
    def select_card(cls, house: House, card_id: str) -> Action:
        return cls(DecisionType.SELECT_CARD, house, ActionPayload(card_id=card_id))

    @classmethod
    def declare_support(cls, house: House, choice: SupportChoice) -> Action:
        return cls(DecisionType.DECLARE_SUPPORT, house, ActionPayload(support=choice))

    @classmethod
    def use_blade(cls, house: House, use: bool) -> Action:
        return cls(DecisionType.USE_BLADE, house, ActionPayload(accept=use))

    @classmethod
    def choose_casualties(cls, house: House, unit_indices: list[int]) -> Action:
        return cls(DecisionType.CHOOSE_CASUALTIES, house, ActionPayload(unit_indices=list(unit_indices)))

    @classmethod
    def retreat(cls, house: House, area_id: int) -> Action:
        return cls(DecisionType.RETREAT, house, ActionPayload(area_id=area_id))

    @classmethod
    def robb_retreat(cls, house: House, area_id: int) -> Action:
        """Robb Stark's owner picks where the loser retreats."""
        return cls(DecisionType.ROBB_RETREAT, house, ActionPayload(area_id=area_id))

    @classmethod
    def tyrion_replace(cls, house: House, card_id: str | None) -> Action:
        """Replacement card after Tyrion's cancel; None only when no card is left."""
        return cls(DecisionType.TYRION_REPLACE, house, ActionPayload(card_id=card_id))

    @classmethod
    def aeron_swap(cls, house: House, card_id: str | None) -> Action:
        """Pay two power to swap Aeron for card_id, or None to keep him."""
        return cls(DecisionType.AERON_SWAP, house, ActionPayload(card_id=card_id))

    @classmethod
    def queen_of_thorns(cls, house: House, area_id: int | None) -> Action:
        return cls(DecisionType.QUEEN_OF_THORNS, house, ActionPayload(area_id=area_id))

    @classmethod
    def doran_choose_track(cls, house: House, track: Track) -> Action:
        return cls(DecisionType.DORAN_CHOOSE_TRACK, house, ActionPayload(track=track))

    @classmethod
    def cersei_remove_order(cls, house: House, area_id: int | None) -> Action:
        return cls(DecisionType.CERSEI_REMOVE_ORDER, house, ActionPayload(area_id=area_id))

    @classmethod
    def patchface_discard(cls, house: House, card_id: str) -> Action:
        return cls(DecisionType.PATCHFACE_DISCARD, house, ActionPayload(card_id=card_id))


@dataclass
class ActionResult:
    """
    Result of applying an action.

    On failure the state is untouched and error_code says why:
    NO_PENDING, GAME_OVER, TAG_MISMATCH, WRONG_HOUSE or ILLEGAL_ACTION.
    """
    success: bool
    error: str | None = None
    error_code: str | None = None
    changes: list[str] = field(default_factory=list)

    @classmethod
    def success_with(cls, changes: list[str] | None = None) -> ActionResult:
        return cls(success=True, changes=changes or [])

    @classmethod
    def failure(cls, error: str, error_code: str = "ILLEGAL_ACTION") -> ActionResult:
        return cls(success=False, error=error, error_code=error_code)
