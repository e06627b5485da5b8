"""
Bidding - Sealed power bids for the influence tracks and against wildlings.

Track bidding (Clash of Kings) resolves Iron Throne, Fiefdoms and King's
Court in that order. Wildling bidding compares the total of all bids with
the wildling threat and applies the drawn wildling card:

- Total >= threat: win effect for the highest bidder, threat drops to 0
- Total <  threat: loss effect for everyone, the lowest bidder suffers
  the harshest part, threat becomes 2

Bids stay sealed (only "has bid" is public) until the contest resolves.
"""

from __future__ import annotations
import logging
from typing import Callable

from ..games.thrones.cards import CATALOG
from .action import Action
from .errors import IllegalAction
from .muster import muster_areas, muster_decision
from .rules import (
    best_card,
    best_track,
    destroy_units,
    gain_power,
    lose_power,
    move_down,
    move_to_bottom,
    move_to_top,
    replace_unit,
)
from .state import (
    BiddingState,
    BiddingType,
    DecisionType,
    GameState,
    House,
    PendingDecision,
    Track,
    UnitType,
    WildlingCardType,
)
from .supply import MAX_SUPPLY

logger = logging.getLogger(__name__)

THREAT_AFTER_LOSS = 2
PENALTY_OPTIONS = ["destroy_units", "lose_influence"]


def begin_track_bidding(state: GameState) -> None:
    state.bidding = BiddingState(
        bidding_type=BiddingType.TRACK,
        bid_order=list(state.turn_order),
        track=Track.IRON_THRONE,
        remaining_tracks=[Track.FIEFDOMS, Track.KINGS_COURT],
    )


def begin_wildling_bidding(state: GameState) -> None:
    state.bidding = BiddingState(
        bidding_type=BiddingType.WILDLING,
        bid_order=list(state.turn_order),
    )


def step(state: GameState) -> None:
    """Ask the next house for its bid, or resolve when all have bid."""
    bidding = state.bidding
    for house in bidding.bid_order:
        if house not in bidding.bids:
            state.pending = PendingDecision(
                decision_type=DecisionType.BID,
                house=house,
                bidding_type=bidding.bidding_type,
                track=bidding.track,
                limit=state.houses[house].power,
            )
            return

    if bidding.bidding_type == BiddingType.TRACK:
        _resolve_track(state, bidding)
    else:
        _resolve_wildlings(state, bidding)


def handle_bid(state: GameState, action: Action) -> str:
    amount = action.payload.amount
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise IllegalAction("Bid must be an integer")
    power = state.houses[action.house].power
    if not 0 <= amount <= power:
        raise IllegalAction(f"Bid must be between 0 and {power}")
    state.bidding.bids[action.house] = amount
    return f"{action.house.value} placed a sealed bid"


def _deduct(state: GameState, bids: dict[House, int]) -> None:
    for house, amount in bids.items():
        lose_power(state, house, amount)


def ranking(state: GameState, bids: dict[House, int]) -> list[House]:
    """Highest bid first; ties broken by current Iron Throne order."""
    return sorted(bids, key=lambda h: (-bids[h], state.position(h, Track.IRON_THRONE)))


def _resolve_track(state: GameState, bidding: BiddingState) -> None:
    _deduct(state, bidding.bids)
    order = ranking(state, bidding.bids)
    state.tracks[bidding.track] = order
    state.revealed_bids = dict(bidding.bids)
    logger.debug(f"{bidding.track.value} resolved: {[h.value for h in order]}")

    if bidding.remaining_tracks:
        bidding.track = bidding.remaining_tracks.pop(0)
        bidding.bid_order = list(state.turn_order)
        bidding.bids = {}
    else:
        state.bidding = None


def _resolve_wildlings(state: GameState, bidding: BiddingState) -> None:
    bids = dict(bidding.bids)
    _deduct(state, bids)
    state.revealed_bids = bids
    state.bidding = None

    card = state.wildling_deck.pop(0)
    state.wildling_deck.append(card)
    state.last_wildling_card = card

    total = sum(bids.values())
    order = ranking(state, bids)
    if total >= state.wildling_threat:
        highest = order[0]
        logger.debug(f"Wildlings ({card.value}) repelled with {total}; {highest.value} rewarded")
        state.wildling_threat = 0
        _WIN_EFFECTS[card](state, highest, bids)
    else:
        lowest = min(bids, key=lambda h: (bids[h], -state.position(h, Track.IRON_THRONE)))
        others = [h for h in state.turn_order if h != lowest]
        logger.debug(f"Wildlings ({card.value}) win against {total}; {lowest.value} bid lowest")
        state.wildling_threat = THREAT_AFTER_LOSS
        _LOSS_EFFECTS[card](state, lowest, others)


# -- Wildling effects -------------------------------------------------------------

def _downgrade_knights(state: GameState, house: House, limit: int | None) -> None:
    knights = [(a, u) for a, u in state.iter_units(house) if u.unit_type == UnitType.KNIGHT]
    if limit is not None:
        knights = knights[:limit]
    for area_id, knight in knights:
        if not replace_unit(state, area_id, knight, UnitType.FOOTMAN):
            state.remove_unit(area_id, knight)


def _upgrade_footmen(state: GameState, house: House, limit: int) -> None:
    footmen = [(a, u) for a, u in state.iter_units(house) if u.unit_type == UnitType.FOOTMAN]
    for area_id, footman in footmen[:limit]:
        replace_unit(state, area_id, footman, UnitType.KNIGHT)


def _discard_strongest(state: GameState, house: House, all_of_them: bool) -> None:
    record = state.houses[house]
    if not record.hand:
        return
    if all_of_them:
        top = max(CATALOG.card(c).strength for c in record.hand)
        doomed = [c for c in record.hand if CATALOG.card(c).strength == top]
    else:
        doomed = [best_card(record.hand)]
    for card_id in doomed:
        record.hand.remove(card_id)
        record.discards.append(card_id)


def _change_supply(state: GameState, house: House, amount: int) -> None:
    record = state.houses[house]
    record.supply = max(0, min(MAX_SUPPLY, record.supply + amount))
    state.supply_check_due = True


def _loss_king_beyond_the_wall(state: GameState, lowest: House, others: list[House]) -> None:
    for house in others:
        move_to_bottom(state, Track.FIEFDOMS, house)
    for track in Track:
        move_to_bottom(state, track, lowest)


def _loss_crow_killers(state: GameState, lowest: House, others: list[House]) -> None:
    _downgrade_knights(state, lowest, None)
    for house in others:
        _downgrade_knights(state, house, 2)


def _loss_mammoth_riders(state: GameState, lowest: House, others: list[House]) -> None:
    destroy_units(state, lowest, 3)
    for house in others:
        destroy_units(state, house, 2)


def _loss_massing_on_the_milkwater(state: GameState, lowest: House, others: list[House]) -> None:
    _discard_strongest(state, lowest, all_of_them=True)
    for house in others:
        if len(state.houses[house].hand) > 1:
            _discard_strongest(state, house, all_of_them=False)


def _loss_preemptive_raid(state: GameState, lowest: House, others: list[House]) -> None:
    for house in others:
        lose_power(state, house, 1)
    state.pending = PendingDecision(
        decision_type=DecisionType.WILDLING_PENALTY,
        house=lowest,
        options=list(PENALTY_OPTIONS),
    )


def _loss_rattleshirts_raiders(state: GameState, lowest: House, others: list[House]) -> None:
    _change_supply(state, lowest, -2)
    for house in others:
        _change_supply(state, house, -1)


def _loss_silence_at_the_wall(state: GameState, lowest: House, others: list[House]) -> None:
    move_to_bottom(state, Track.KINGS_COURT, lowest)
    for house in others:
        lose_power(state, house, 1)


def _loss_skinchanger_scout(state: GameState, lowest: House, others: list[House]) -> None:
    lose_power(state, lowest, state.houses[lowest].power)
    for house in others:
        lose_power(state, house, 2)


def _loss_the_horde_descends(state: GameState, lowest: House, others: list[House]) -> None:
    destroy_units(state, lowest, 2, castles_first=True)
    for house in others:
        destroy_units(state, house, 1)


def _win_king_beyond_the_wall(state: GameState, highest: House, bids: dict[House, int]) -> None:
    move_to_top(state, Track.IRON_THRONE, highest)


def _win_crow_killers(state: GameState, highest: House, bids: dict[House, int]) -> None:
    _upgrade_footmen(state, highest, 2)


def _win_mammoth_riders(state: GameState, highest: House, bids: dict[House, int]) -> None:
    record = state.houses[highest]
    if record.discards:
        card_id = best_card(record.discards)
        record.discards.remove(card_id)
        record.hand.append(card_id)


def _win_massing_on_the_milkwater(state: GameState, highest: House, bids: dict[House, int]) -> None:
    record = state.houses[highest]
    record.hand.extend(record.discards)
    record.discards = []


def _win_preemptive_raid(state: GameState, highest: House, bids: dict[House, int]) -> None:
    gain_power(state, highest, 2)


def _win_rattleshirts_raiders(state: GameState, highest: House, bids: dict[House, int]) -> None:
    _change_supply(state, highest, 1)


def _win_silence_at_the_wall(state: GameState, highest: House, bids: dict[House, int]) -> None:
    gain_power(state, highest, 3)


def _win_skinchanger_scout(state: GameState, highest: House, bids: dict[House, int]) -> None:
    gain_power(state, highest, bids[highest])


def _win_the_horde_descends(state: GameState, highest: House, bids: dict[House, int]) -> None:
    areas = muster_areas(state, highest)
    if areas:
        state.pending = muster_decision(state, highest, areas, limit=1)


_LOSS_EFFECTS: dict[WildlingCardType, Callable[[GameState, House, list[House]], None]] = {
    WildlingCardType.A_KING_BEYOND_THE_WALL: _loss_king_beyond_the_wall,
    WildlingCardType.CROW_KILLERS: _loss_crow_killers,
    WildlingCardType.MAMMOTH_RIDERS: _loss_mammoth_riders,
    WildlingCardType.MASSING_ON_THE_MILKWATER: _loss_massing_on_the_milkwater,
    WildlingCardType.PREEMPTIVE_RAID: _loss_preemptive_raid,
    WildlingCardType.RATTLESHIRTS_RAIDERS: _loss_rattleshirts_raiders,
    WildlingCardType.SILENCE_AT_THE_WALL: _loss_silence_at_the_wall,
    WildlingCardType.SKINCHANGER_SCOUT: _loss_skinchanger_scout,
    WildlingCardType.THE_HORDE_DESCENDS: _loss_the_horde_descends,
}

_WIN_EFFECTS: dict[WildlingCardType, Callable[[GameState, House, dict[House, int]], None]] = {
    WildlingCardType.A_KING_BEYOND_THE_WALL: _win_king_beyond_the_wall,
    WildlingCardType.CROW_KILLERS: _win_crow_killers,
    WildlingCardType.MAMMOTH_RIDERS: _win_mammoth_riders,
    WildlingCardType.MASSING_ON_THE_MILKWATER: _win_massing_on_the_milkwater,
    WildlingCardType.PREEMPTIVE_RAID: _win_preemptive_raid,
    WildlingCardType.RATTLESHIRTS_RAIDERS: _win_rattleshirts_raiders,
    WildlingCardType.SILENCE_AT_THE_WALL: _win_silence_at_the_wall,
    WildlingCardType.SKINCHANGER_SCOUT: _win_skinchanger_scout,
    WildlingCardType.THE_HORDE_DESCENDS: _win_the_horde_descends,
}


def handle_wildling_penalty(state: GameState, action: Action) -> str:
    index = action.payload.choice_index
    options = state.pending.options
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(options):
        raise IllegalAction(f"Choice must be an index into {options}")
    if options[index] == "destroy_units":
        destroy_units(state, action.house, 2)
    else:
        move_down(state, best_track(state, action.house), action.house, 2)
    return f"{action.house.value} chose {options[index]}"
