"""
Navigation - Movement, transport, retreat and raid legality.

All queries read the live GameState so that ships moved earlier in the
same phase are taken into account for transport.
"""

from __future__ import annotations
from collections import deque

from ..games.thrones.areas import BOARD
from .state import GameState, House, OrderType, Unit, UnitType


def unit_strength(unit: Unit, attacking_castle: bool = False) -> int:
    """Base combat strength of a unit."""
    if unit.routed:
        return 0
    if unit.unit_type == UnitType.KNIGHT:
        return 2
    if unit.unit_type == UnitType.SIEGE_ENGINE:
        return 4 if attacking_castle else 0
    return 1


def _blocked(state: GameState, area_id: int) -> bool:
    return BOARD.is_blocked(area_id, state.player_count)


def transport_reachable(state: GameState, house: House, from_land: int) -> set[int]:
    """
    Lands reachable from a land area through a chain of seas holding the
    house's ships (breadth-first over sea adjacency).
    """
    def friendly(sea: int) -> bool:
        return not _blocked(state, sea) and any(u.house == house for u in state.areas[sea].units)

    start = [s for s in BOARD.sea_neighbors(from_land) if friendly(s)]
    seen = set(start)
    queue = deque(start)
    lands: set[int] = set()
    while queue:
        sea = queue.popleft()
        for land in BOARD.land_neighbors(sea):
            if land != from_land and not _blocked(state, land):
                lands.add(land)
        for nxt in BOARD.sea_neighbors(sea):
            if nxt not in seen and friendly(nxt):
                seen.add(nxt)
                queue.append(nxt)
    return lands


def _beats_neutral(state: GameState, house: House, from_area: int, dest: int) -> bool:
    """Whether every movable unit in from_area could overcome a neutral garrison."""
    garrison = state.areas[dest].garrison
    if garrison is None or garrison.house is not None:
        return True
    attacking_castle = BOARD.area(dest).has_castle
    order = state.areas[from_area].order
    bonus = order.strength if order is not None and order.order_type == OrderType.MARCH else 0
    strength = sum(
        unit_strength(u, attacking_castle) for u in state.areas[from_area].units_of(house)
    )
    return strength + bonus >= garrison.strength


def valid_destinations(state: GameState, house: House, from_area: int) -> list[int]:
    """Every area units in from_area may march to this order."""
    destinations: set[int] = set()
    if BOARD.is_land(from_area):
        destinations.update(BOARD.land_neighbors(from_area))
        destinations.update(transport_reachable(state, house, from_area))
    elif BOARD.is_sea(from_area):
        destinations.update(BOARD.sea_neighbors(from_area))
        for port in BOARD.port_neighbors(from_area):
            if state.areas[BOARD.land_of(port)].house == house:
                destinations.add(port)
    else:
        destinations.add(BOARD.sea_of(from_area))

    destinations.discard(from_area)
    return sorted(
        d for d in destinations
        if not _blocked(state, d) and _beats_neutral(state, house, from_area, d)
    )


def retreat_areas(state: GameState, house: House, from_area: int, attacker_origin: int | None = None) -> list[int]:
    """
    Where a defeated defender may retreat: adjacent areas of the same kind,
    not blocked, uncontrolled or controlled by the house, without foreign
    units or garrisons, and not the attacker's origin.
    """
    if BOARD.is_land(from_area):
        candidates = BOARD.land_neighbors(from_area)
    else:
        candidates = BOARD.sea_neighbors(from_area)
        candidates += [p for p in BOARD.port_neighbors(from_area)
                       if state.areas[BOARD.land_of(p)].house == house]
    result = []
    for area_id in candidates:
        if area_id == attacker_origin or _blocked(state, area_id):
            continue
        area = state.areas[area_id]
        if area.house not in (None, house):
            continue
        if area.has_enemy_units(house):
            continue
        if area.garrison is not None and area.garrison.house != house:
            continue
        result.append(area_id)
    return sorted(result)


_RAIDABLE = (OrderType.RAID, OrderType.SUPPORT, OrderType.CONSOLIDATE_POWER)


def raid_targets(state: GameState, house: House, from_area: int, starred: bool) -> list[int]:
    """Adjacent enemy orders a raid may remove; land raids cannot reach the sea."""
    allowed = _RAIDABLE + ((OrderType.DEFENSE,) if starred else ())
    targets = []
    for area_id in BOARD.neighbors(from_area):
        if _blocked(state, area_id):
            continue
        if BOARD.is_land(from_area) and not BOARD.is_land(area_id):
            continue
        order = state.areas[area_id].order
        if order is None or order.house == house:
            continue
        if order.order_type in allowed:
            targets.append(area_id)
    return sorted(targets)


def support_areas(state: GameState, battle_area: int) -> list[int]:
    """Areas with a Support order able to support a battle in battle_area."""
    result = []
    for area_id in BOARD.neighbors(battle_area):
        order = state.areas[area_id].order
        if order is None or order.order_type != OrderType.SUPPORT:
            continue
        if not state.areas[area_id].units:
            continue
        if BOARD.is_land(area_id) and not BOARD.is_land(battle_area):
            continue
        if BOARD.is_port(area_id) and not BOARD.is_sea(battle_area):
            continue
        result.append(area_id)
    return sorted(result)
