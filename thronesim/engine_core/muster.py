"""
Mustering - Building and upgrading units with castle muster points.

Costs: footman 1, knight 2, siege engine 2, ship 1, footman -> knight
upgrade 1. Land units appear in the castle area, ships in its port.
"""

from __future__ import annotations
from collections import Counter

from ..games.thrones.areas import BOARD
from .action import Action, MusterStep
from .errors import IllegalAction
from .rules import end_turn, gain_power, replace_unit
from .state import DecisionType, GameState, House, MusterArea, PendingDecision, UnitType
from .supply import house_fits

UNIT_COSTS = {
    UnitType.FOOTMAN: 1,
    UnitType.KNIGHT: 2,
    UnitType.SIEGE_ENGINE: 2,
    UnitType.SHIP: 1,
}
UPGRADE_COST = 1


def muster_areas(state: GameState, house: House) -> list[MusterArea]:
    """Controlled castles and strongholds with their muster points."""
    result = []
    for area_id in state.controlled_areas(house):
        points = BOARD.muster_points(area_id)
        if points and BOARD.is_land(area_id) and not BOARD.is_blocked(area_id, state.player_count):
            result.append(MusterArea(area_id=area_id, points=points))
    return result


def muster_decision(
    state: GameState,
    house: House,
    areas: list[MusterArea],
    limit: int | None = None,
    area_id: int | None = None,
) -> PendingDecision:
    return PendingDecision(
        decision_type=DecisionType.MUSTER,
        house=house,
        area_id=area_id,
        muster_areas=areas,
        limit=limit,
    )


def _target_of(state: GameState, house: House, muster: MusterStep) -> int:
    """Area the new unit appears in, validated."""
    if muster.unit_type == UnitType.SHIP:
        port = BOARD.port_of(muster.area_id)
        if port is None or BOARD.is_blocked(port, state.player_count):
            raise IllegalAction(f"{BOARD.name(muster.area_id)} has no port to build ships in")
        if muster.target_area not in (None, port):
            raise IllegalAction("Ships are mustered in the castle's port")
        if state.areas[port].has_enemy_units(house):
            raise IllegalAction("The port holds enemy ships")
        return port
    if muster.target_area not in (None, muster.area_id):
        raise IllegalAction("Land units are mustered in the castle area")
    return muster.area_id


def validate_muster(state: GameState, house: House, decision: PendingDecision, steps: list[MusterStep]) -> list[tuple[MusterStep, int]]:
    """
    Check a list of muster steps against the decision.

    Returns (step, target area) pairs in application order. Raises
    IllegalAction on any broken rule.
    """
    points = {m.area_id: m.points for m in decision.muster_areas}
    spent: Counter[int] = Counter()
    needed: Counter[UnitType] = Counter()
    upgrades: Counter[int] = Counter()
    delta: Counter[int] = Counter()
    planned = []

    for muster in steps:
        if not isinstance(muster, MusterStep):
            raise IllegalAction("Muster steps must be MusterStep values")
        if muster.area_id not in points:
            raise IllegalAction(f"Area {muster.area_id} cannot muster")
        if muster.upgrade:
            if muster.unit_type != UnitType.KNIGHT:
                raise IllegalAction("Only footmen can be upgraded, to knights")
            spent[muster.area_id] += UPGRADE_COST
            upgrades[muster.area_id] += 1
            needed[UnitType.KNIGHT] += 1
            planned.append((muster, muster.area_id))
            continue
        if muster.unit_type not in UNIT_COSTS:
            raise IllegalAction(f"Cannot muster {muster.unit_type}")
        target = _target_of(state, house, muster)
        spent[muster.area_id] += UNIT_COSTS[muster.unit_type]
        needed[muster.unit_type] += 1
        delta[target] += 1
        planned.append((muster, target))

    if decision.limit is not None and len(spent) > decision.limit:
        raise IllegalAction(f"Muster in at most {decision.limit} area(s)")
    for area_id, cost in spent.items():
        if cost > points[area_id]:
            raise IllegalAction(f"{BOARD.name(area_id)} has only {points[area_id]} muster point(s)")
    for area_id, count in upgrades.items():
        footmen = sum(1 for u in state.areas[area_id].units_of(house) if u.unit_type == UnitType.FOOTMAN)
        if count > footmen:
            raise IllegalAction(f"Not enough footmen to upgrade in {BOARD.name(area_id)}")
    pool = state.houses[house].pool
    for unit_type, count in needed.items():
        if count > pool.available(unit_type):
            raise IllegalAction(f"No {unit_type.value} left in the pool")
    if not house_fits(state, house, dict(delta)):
        raise IllegalAction("Mustered units would exceed supply")

    # Upgrades first, so a footman built in the same area is not upgraded
    planned.sort(key=lambda p: not p[0].upgrade)
    return planned


def apply_muster(state: GameState, house: House, planned: list[tuple[MusterStep, int]]) -> None:
    for muster, target in planned:
        if muster.upgrade:
            footman = next(
                u for u in state.areas[muster.area_id].units_of(house)
                if u.unit_type == UnitType.FOOTMAN
            )
            replace_unit(state, muster.area_id, footman, UnitType.KNIGHT)
        else:
            state.add_unit(target, muster.unit_type, house)
            if state.areas[target].house is None:
                state.areas[target].house = house


def consolidate_amount(state: GameState, area_id: int) -> int:
    """Power gained by a Consolidate Power order in an area."""
    if BOARD.is_land(area_id):
        return 1 + BOARD.area(area_id).power
    if BOARD.is_port(area_id):
        return 1
    return 0


def handle_muster(state: GameState, action: Action) -> str:
    decision = state.pending
    planned = validate_muster(state, action.house, decision, action.payload.musters)
    apply_muster(state, action.house, planned)

    # A starred Consolidate Power order is consumed by its muster
    if decision.area_id is not None:
        state.areas[decision.area_id].order = None
        if not planned:
            gain_power(state, action.house, consolidate_amount(state, decision.area_id))
        end_turn(state)
    return f"{action.house.value} mustered {len(planned)} unit(s)"
