"""
Shared rule helpers - small, board-aware state mutations.

Used by the phase machine, the combat and bidding resolvers and the reducer.
Everything here mutates the GameState passed in; none of it decides what
happens next.
"""

from __future__ import annotations
import random
from typing import TypeVar

from ..games.thrones.areas import BOARD
from ..games.thrones.cards import CATALOG
from .state import GameState, House, Track, Unit, UnitType

T = TypeVar("T")

_TRACK_TIEBREAK = Track.IRON_THRONE


# -- Random stream --------------------------------------------------------

def next_rng(state: GameState) -> random.Random:
    """
    A Random seeded from (seed, counter); advances the counter.

    The stream position lives in the state, so a saved game resumes the
    same sequence of shuffles.
    """
    rng = random.Random(f"{state.seed}:{state.rng_counter}")
    state.rng_counter += 1
    return rng


def shuffle(state: GameState, items: list[T]) -> None:
    next_rng(state).shuffle(items)


# -- Power ----------------------------------------------------------------

def gain_power(state: GameState, house: House, amount: int) -> int:
    """Add power up to the configured cap; returns the amount gained."""
    record = state.houses[house]
    before = record.power
    record.power = min(state.config.max_power, record.power + max(0, amount))
    return record.power - before


def lose_power(state: GameState, house: House, amount: int) -> int:
    """Remove power, floored at zero; returns the amount lost."""
    record = state.houses[house]
    lost = min(record.power, max(0, amount))
    record.power -= lost
    return lost


# -- Area control -----------------------------------------------------------

def set_control(state: GameState, area_id: int, house: House | None) -> None:
    """
    Set the controller of a land area and mirror it onto its port.

    Ships of any other house in the port are destroyed.
    """
    area = state.areas[area_id]
    if area.house != house:
        area.power_token = False
    area.house = house
    port_id = BOARD.port_of(area_id)
    if port_id is None:
        return
    port = state.areas[port_id]
    port.house = house
    for unit in [u for u in port.units if u.house != house]:
        state.remove_unit(port_id, unit)
    if port.order is not None and port.order.house != house:
        port.order = None


def refresh_sea_control(state: GameState, area_id: int) -> None:
    """Seas are controlled by whoever has ships there."""
    if not BOARD.is_sea(area_id):
        return
    area = state.areas[area_id]
    area.house = area.units[0].house if area.units else None
    if area.order is not None and area.house != area.order.house:
        area.order = None


def place_units(state: GameState, area_id: int, units: list[Unit], house: House) -> None:
    """Move units (already off the board) into an area and take control."""
    area = state.areas[area_id]
    area.units.extend(units)
    if BOARD.is_land(area_id):
        if area.house != house:
            set_control(state, area_id, house)
            if area.garrison is not None and area.garrison.house != house:
                area.garrison = None
    elif BOARD.is_sea(area_id):
        refresh_sea_control(state, area_id)


def release_if_empty(state: GameState, area_id: int) -> None:
    """A land area left with no units and no power token loses its controller."""
    area = state.areas[area_id]
    if area.units:
        return
    if BOARD.is_sea(area_id):
        refresh_sea_control(state, area_id)
        return
    if BOARD.is_land(area_id) and not area.power_token:
        home_garrison = area.garrison is not None and area.garrison.house == area.house
        if not home_garrison:
            set_control(state, area_id, None)


# -- Castles and victory ----------------------------------------------------

def castle_count(state: GameState, house: House, weighted: bool = False) -> int:
    """Castles and strongholds controlled; strongholds count 2 when weighted."""
    total = 0
    for area_id in state.controlled_areas(house):
        area = BOARD.area(area_id)
        if area.stronghold:
            total += 2 if weighted else 1
        elif area.castle:
            total += 1
    return total


def standings(state: GameState) -> list[House]:
    """Houses ranked by the end-of-game tiebreak."""
    weighted = state.config.tiebreak == "weighted"

    def key(house: House):
        record = state.houses[house]
        return (
            -castle_count(state, house, weighted),
            -record.supply,
            -record.power,
            state.position(house, _TRACK_TIEBREAK),
        )

    return sorted(state.playing_houses, key=key)


def check_victory(state: GameState) -> House | None:
    """Set and return the winner if a house holds enough castles."""
    if state.winner is not None:
        return state.winner
    for house in state.turn_order:
        if castle_count(state, house) >= state.config.castles_to_win:
            state.winner = house
            state.pending = None
            return house
    return None


# -- Influence tracks -------------------------------------------------------

def move_to_bottom(state: GameState, track: Track, house: House) -> None:
    order = state.tracks[track]
    order.remove(house)
    order.append(house)


def move_to_top(state: GameState, track: Track, house: House) -> None:
    order = state.tracks[track]
    order.remove(house)
    order.insert(0, house)


def move_down(state: GameState, track: Track, house: House, steps: int) -> None:
    order = state.tracks[track]
    index = order.index(house)
    order.remove(house)
    order.insert(min(len(order), index + steps), house)


def best_track(state: GameState, house: House) -> Track:
    """The track on which a house stands highest (first in Track order on ties)."""
    return min(Track, key=lambda t: state.position(house, t))


# -- Combat cards -----------------------------------------------------------

def refill_hand(state: GameState, house: House) -> bool:
    """Return the discard pile to an empty hand. True if anything moved."""
    record = state.houses[house]
    if record.hand or not record.discards:
        return False
    record.hand = list(record.discards)
    record.discards = []
    return True


def discard_played_card(state: GameState, house: House, card_id: str) -> None:
    """
    Put a played card on the discard pile.

    When the hand is then empty, every other discarded card goes back to
    the hand; the card just played stays discarded.
    """
    record = state.houses[house]
    record.discards.append(card_id)
    if not record.hand:
        record.hand = [c for c in record.discards if c != card_id]
        record.discards = [card_id]


def best_card(card_ids: list[str]) -> str:
    """Highest printed strength; first in list order on ties."""
    return max(card_ids, key=lambda c: CATALOG.card(c).strength)


# -- Unit removal -----------------------------------------------------------

_DESTROY_PREFERENCE = {
    UnitType.FOOTMAN: 0,
    UnitType.SHIP: 1,
    UnitType.SIEGE_ENGINE: 2,
    UnitType.KNIGHT: 3,
}


def destroy_units(state: GameState, house: House, count: int, castles_first: bool = False) -> int:
    """
    Remove count units chosen by a fixed rule: weakest type first, then
    highest area id. With castles_first, units in castles/strongholds go
    before any others. Returns the number actually removed.
    """
    candidates = []
    for area_id, unit in state.iter_units(house):
        in_castle = BOARD.area(area_id).has_castle
        rank = (0 if (castles_first and in_castle) else 1, _DESTROY_PREFERENCE[unit.unit_type], -area_id)
        candidates.append((rank, area_id, unit))
    candidates.sort(key=lambda c: c[0])
    removed = 0
    touched = set()
    for _, area_id, unit in candidates[:count]:
        state.remove_unit(area_id, unit)
        touched.add(area_id)
        removed += 1
    for area_id in touched:
        release_if_empty(state, area_id)
    return removed


def replace_unit(state: GameState, area_id: int, unit: Unit, new_type: UnitType) -> bool:
    """Swap a unit for another type from the pool (e.g. footman to knight)."""
    pool = state.houses[unit.house].pool
    if pool.available(new_type) <= 0:
        return False
    area = state.areas[area_id]
    index = area.units.index(unit)
    pool.give_back(unit.unit_type)
    pool.take(new_type)
    area.units[index] = Unit(unit_type=new_type, house=unit.house, routed=unit.routed)
    return True


# -- Turn order ---------------------------------------------------------------

def end_turn(state: GameState) -> None:
    """Pass the action phase turn to the next house in Iron Throne order."""
    state.action_player_index = (state.action_player_index + 1) % len(state.turn_order)
