"""
Supply - Army size limits and reconciliation checks.

An army is two or more units of one house in one area. A house's supply
level (0-6) selects a tuple of allowed army sizes; higher levels never
allow less than lower ones.
"""

from __future__ import annotations

from ..games.thrones.areas import BOARD
from .state import GameState, House

MAX_SUPPLY = 6

SUPPLY_LIMITS: dict[int, tuple[int, ...]] = {
    0: (2, 2),
    1: (3, 2),
    2: (3, 2, 2),
    3: (3, 2, 2, 2),
    4: (3, 3, 2, 2),
    5: (4, 3, 2, 2),
    6: (4, 3, 2, 2, 2),
}


def supply_capacity(level: int) -> tuple[int, ...]:
    """Allowed army sizes, largest first, for a supply level."""
    return SUPPLY_LIMITS[max(0, min(MAX_SUPPLY, level))]


def fits_supply(unit_counts: list[int], level: int) -> bool:
    """True if the per-area unit counts respect the supply limits."""
    armies = sorted((n for n in unit_counts if n >= 2), reverse=True)
    slots = supply_capacity(level)
    if len(armies) > len(slots):
        return False
    return all(size <= slot for size, slot in zip(armies, slots))


def unit_counts(state: GameState, house: House, delta: dict[int, int] | None = None) -> dict[int, int]:
    """Units per area for a house, with an optional hypothetical change."""
    counts: dict[int, int] = {}
    for area_id, _unit in state.iter_units(house):
        counts[area_id] = counts.get(area_id, 0) + 1
    if state.combat is not None and state.combat.attacker == house:
        origin = state.combat.march_from
        counts[origin] = counts.get(origin, 0) + len(state.combat.attacking_units)
    for area_id, change in (delta or {}).items():
        counts[area_id] = counts.get(area_id, 0) + change
    return counts


def house_fits(state: GameState, house: House, delta: dict[int, int] | None = None) -> bool:
    counts = unit_counts(state, house, delta)
    return fits_supply(list(counts.values()), state.houses[house].supply)


def calculate_supply(state: GameState, house: House) -> int:
    """Supply barrels in controlled lands, capped at six."""
    total = sum(BOARD.area(a).supply for a in state.controlled_areas(house) if BOARD.is_land(a))
    return min(MAX_SUPPLY, total)


def find_violations(state: GameState) -> list[House]:
    """Houses over their supply limit, in Iron Throne order."""
    return [h for h in state.turn_order if not house_fits(state, h)]


def reconcile_areas(state: GameState, house: House) -> list[int]:
    """Areas holding an army the house may disband a unit from."""
    counts = unit_counts(state, house)
    return sorted(a for a, n in counts.items() if n >= 2 and state.areas[a].units_of(house))
