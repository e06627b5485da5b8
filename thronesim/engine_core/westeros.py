"""
Westeros phase - Event cards, mustering and the wildling threat.

Each round after the first opens with three cards, one from each deck.
They resolve in deck order; choice cards hand one house a WESTEROS_CHOICE
decision, whose answer is pushed to the front of the queue as the card
that house picked.
"""

from __future__ import annotations
import logging

from ..games.thrones.areas import BOARD
from .action import Action
from .bidding import begin_track_bidding, begin_wildling_bidding
from .errors import IllegalAction
from .muster import muster_areas, muster_decision
from .rules import gain_power, shuffle
from .state import (
    DecisionType,
    GameState,
    OrderType,
    PendingDecision,
    Phase,
    Track,
    WesterosCard,
    WesterosCardType,
)
from .supply import calculate_supply

logger = logging.getLogger(__name__)

MAX_THREAT = 12
THREAT_PER_ICON = 2
NOTHING = "nothing"

W = WesterosCardType

# Card -> (track whose holder chooses, options)
CHOICE_CARDS: dict[WesterosCardType, tuple[Track, list[str]]] = {
    W.A_THRONE_OF_BLADES: (Track.IRON_THRONE, [W.SUPPLY.value, W.MUSTERING.value, NOTHING]),
    W.DARK_WINGS_DARK_WORDS: (Track.KINGS_COURT, [W.CLASH_OF_KINGS.value, W.GAME_OF_THRONES.value, NOTHING]),
    W.PUT_TO_THE_SWORD: (Track.FIEFDOMS, [W.STORM_OF_SWORDS.value, W.RAINS_OF_AUTUMN.value, NOTHING]),
}

# Card -> (order type forbidden, starred only?)
RESTRICTION_CARDS: dict[WesterosCardType, tuple[OrderType, bool]] = {
    W.SEA_OF_STORMS: (OrderType.RAID, False),
    W.RAINS_OF_AUTUMN: (OrderType.MARCH, True),
    W.FEAST_FOR_CROWS: (OrderType.CONSOLIDATE_POWER, False),
    W.WEB_OF_LIES: (OrderType.SUPPORT, False),
    W.STORM_OF_SWORDS: (OrderType.DEFENSE, False),
}


def step(state: GameState) -> None:
    """One Westeros phase transition."""
    if state.muster_queue:
        house = state.muster_queue.pop(0)
        areas = muster_areas(state, house)
        if areas:
            state.pending = muster_decision(state, house, areas)
        return

    if not state.westeros_cards_dealt:
        _deal(state)
        return

    if state.westeros_queue:
        card = state.westeros_queue.pop(0)
        resolve_card(state, card)
        return

    if state.wildling_attack_due:
        state.wildling_attack_due = False
        begin_wildling_bidding(state)
        return

    state.phase = Phase.PLANNING
    logger.debug(f"Round {state.round}: Planning phase")


def _draw(state: GameState, index: int) -> WesterosCard:
    deck = state.westeros_decks[index]
    if not deck:
        deck.extend(state.westeros_discards[index])
        state.westeros_discards[index] = []
        shuffle(state, deck)
    card = deck.pop(0)
    state.westeros_discards[index].append(card)
    return card


def _raise_threat(state: GameState, card: WesterosCard) -> None:
    if not card.wildling_icon:
        return
    before = state.wildling_threat
    state.wildling_threat = min(MAX_THREAT, before + THREAT_PER_ICON)
    if state.wildling_threat >= MAX_THREAT > before:
        state.wildling_attack_due = True


def _deal(state: GameState) -> None:
    drawn = [_draw(state, index) for index in range(3)]
    for card in drawn:
        _raise_threat(state, card)
    state.westeros_drawn = drawn
    state.westeros_queue = list(drawn)
    state.westeros_cards_dealt = True
    logger.debug(
        f"Round {state.round}: Westeros cards {[c.card_type.value for c in drawn]}, "
        f"threat {state.wildling_threat}"
    )


def resolve_card(state: GameState, card: WesterosCard) -> None:
    """Apply one Westeros card (already removed from the queue)."""
    card_type = card.card_type

    if card_type == W.SUPPLY:
        for house in state.playing_houses:
            state.houses[house].supply = calculate_supply(state, house)
        state.supply_check_due = True

    elif card_type == W.MUSTERING:
        state.muster_queue = list(state.turn_order)

    elif card_type in CHOICE_CARDS:
        track, options = CHOICE_CARDS[card_type]
        state.pending = PendingDecision(
            decision_type=DecisionType.WESTEROS_CHOICE,
            house=state.holder(track),
            options=list(options),
        )

    elif card_type == W.WINTER_IS_COMING:
        index = card.deck - 1
        deck = state.westeros_decks[index]
        deck.extend(state.westeros_discards[index])
        state.westeros_discards[index] = []
        shuffle(state, deck)
        replacement = _draw(state, index)
        _raise_threat(state, replacement)
        state.westeros_drawn.append(replacement)
        state.westeros_queue.insert(0, replacement)

    elif card_type == W.CLASH_OF_KINGS:
        begin_track_bidding(state)

    elif card_type == W.GAME_OF_THRONES:
        for house in state.playing_houses:
            crowns = sum(
                BOARD.area(a).power for a in state.controlled_areas(house) if BOARD.is_land(a)
            )
            gain_power(state, house, crowns)

    elif card_type == W.WILDLING_ATTACK:
        state.wildling_attack_due = False
        if state.wildling_threat > 0:
            begin_wildling_bidding(state)

    elif card_type in RESTRICTION_CARDS:
        order_type, starred_only = RESTRICTION_CARDS[card_type]
        target = state.restricted_star_orders if starred_only else state.restricted_orders
        if order_type not in target:
            target.append(order_type)

    # LAST_DAYS_OF_SUMMER: nothing happens


def handle_westeros_choice(state: GameState, action: Action) -> str:
    index = action.payload.choice_index
    options = state.pending.options
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(options):
        raise IllegalAction(f"Choice must be an index into {options}")
    choice = options[index]
    if choice != NOTHING:
        state.westeros_queue.insert(0, WesterosCard(deck=0, card_type=WesterosCardType(choice)))
    return f"{action.house.value} chose {choice}"
