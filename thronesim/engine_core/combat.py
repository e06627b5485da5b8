"""
Combat Resolver - The combat sub-state machine.

A combat starts when a march enters an area holding enemy units (or an
enemy garrison) and runs through fixed stages:

    BEGIN -> CARD_SELECTION -> SUPPORT_DECLARATION -> STRENGTH_CALCULATION
          -> RESOLUTION -> POST_COMBAT -> END

step() performs one deterministic transition or sets a PendingDecision.
The handle_* functions answer combat decisions; each validates the action
completely before touching the state and raises IllegalAction otherwise.

Card abilities are looked up by tag. Each tag belongs to exactly one stage
(cards.ABILITY_STAGES), and each stage has its own handler table:

- CARD_SELECTION and POST_COMBAT handlers fire once, in a fixed tag order
- STRENGTH_CALCULATION handlers adjust a side's tally each time it is counted
- RESOLUTION handlers fire once, when their moment in the resolution comes
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable

from ..games.thrones.areas import BOARD
from ..games.thrones.cards import ABILITY_STAGES, CARD_SELECTION_PRIORITY, CATALOG, AbilityTag
from .action import Action
from .errors import IllegalAction
from .navigation import retreat_areas, support_areas, unit_strength
from .rules import (
    check_victory,
    discard_played_card,
    end_turn,
    gain_power,
    lose_power,
    move_to_bottom,
    place_units,
    refill_hand,
    refresh_sea_control,
    release_if_empty,
    replace_unit,
    set_control,
)
from .state import (
    CombatStage,
    CombatState,
    DecisionType,
    GameState,
    House,
    OrderType,
    PendingDecision,
    SupportChoice,
    SupportEntry,
    Track,
    Unit,
    UnitType,
)
from .supply import house_fits

logger = logging.getLogger(__name__)

_POST_COMBAT_ORDER = (
    AbilityTag.TYWIN,
    AbilityTag.RENLY,
    AbilityTag.CERSEI,
    AbilityTag.PATCHFACE,
    AbilityTag.ROOSE,
)


def begin_combat(
    state: GameState,
    attacker: House,
    defender: House,
    area_id: int,
    march_from: int,
    units: list[Unit],
    march_strength: int,
) -> CombatState:
    """Open a combat; the marching units leave the board until it ends."""
    state.combat = CombatState(
        attacker=attacker,
        defender=defender,
        area_id=area_id,
        march_from=march_from,
        attacking_units=units,
        march_strength=march_strength,
    )
    logger.debug(
        f"Combat: {attacker.value} attacks {defender.value} in {BOARD.name(area_id)} "
        f"with {len(units)} unit(s)"
    )
    return state.combat


# -- Engaged units ------------------------------------------------------------

def engaged_units(state: GameState, combat: CombatState, house: House) -> list[Unit]:
    """Units fighting for a combatant: marching units or the defending army."""
    if house == combat.attacker:
        return combat.attacking_units
    return state.areas[combat.area_id].units_of(house)


def _remove_engaged(state: GameState, combat: CombatState, house: House, unit: Unit) -> None:
    if house == combat.attacker:
        combat.attacking_units.remove(unit)
        state.houses[house].pool.give_back(unit.unit_type)
    else:
        state.remove_unit(combat.area_id, unit)


def _set_card(combat: CombatState, house: House, card_id: str | None) -> None:
    if house == combat.attacker:
        combat.attacker_card = card_id
    else:
        combat.defender_card = card_id


def _is_supported(combat: CombatState, house: House) -> bool:
    side = SupportChoice.ATTACKER if house == combat.attacker else SupportChoice.DEFENDER
    return any(entry.choice == side for entry in combat.support)


# -- Strength -------------------------------------------------------------------

@dataclass
class SideTotals:
    """Combat strength and card icons of one side."""
    strength: int = 0
    swords: int = 0
    fortifications: int = 0


@dataclass
class _Tally:
    """Modifiers the strength-stage abilities apply to one side's count."""
    attacking: bool
    supported: bool
    totals: SideTotals = field(default_factory=SideTotals)
    # Unit worth overrides for the side's own units
    unit_worth: dict[UnitType, int] = field(default_factory=dict)
    # Ships of every other house count 0 when set
    ships_only_for: House | None = None
    defense_multiplier: int = 1
    card_cancelled: bool = False


def side_totals(state: GameState, combat: CombatState, house: House) -> SideTotals:
    """
    Total strength of one side, summed in a fixed sequence: units, order,
    garrison, support, printed card strength, ability modifiers, blade.
    """
    attacking = house == combat.attacker
    tally = _Tally(attacking=attacking, supported=_is_supported(combat, house))
    for owner in (combat.attacker, combat.defender):
        handler = _ability_handler(combat.card_of(owner), CombatStage.STRENGTH_CALCULATION)
        if handler is not None:
            handler(state, combat, owner, house, tally)

    totals = tally.totals
    attacking_castle = attacking and BOARD.area(combat.area_id).has_castle

    def worth(unit: Unit) -> int:
        value = unit_strength(unit, attacking_castle)
        if value == 0:
            return 0
        if unit.unit_type == UnitType.SHIP and tally.ships_only_for not in (None, unit.house):
            return 0
        if unit.house == house:
            return tally.unit_worth.get(unit.unit_type, value)
        return value

    totals.strength += sum(worth(u) for u in engaged_units(state, combat, house))

    area = state.areas[combat.area_id]
    if attacking:
        totals.strength += combat.march_strength
    else:
        order = area.order
        if order is not None and order.house == house and order.order_type == OrderType.DEFENSE:
            totals.strength += order.strength * tally.defense_multiplier
        if area.garrison is not None and area.garrison.house == house:
            totals.strength += area.garrison.strength

    side = SupportChoice.ATTACKER if attacking else SupportChoice.DEFENDER
    for entry in combat.support:
        if entry.choice != side:
            continue
        support_area = state.areas[entry.area_id]
        order = support_area.order
        if order is None or order.order_type != OrderType.SUPPORT:
            continue
        totals.strength += order.strength
        totals.strength += sum(worth(u) for u in support_area.units)

    own_card = combat.card_of(house)
    if own_card is not None:
        card = CATALOG.card(own_card)
        if not tally.card_cancelled:
            totals.strength += card.strength
        totals.swords += card.swords
        totals.fortifications += card.fortifications

    if (combat.attacker_blade if attacking else combat.defender_blade):
        totals.strength += 1

    return totals


# -- Step -----------------------------------------------------------------------

def step(state: GameState) -> None:
    """Advance the active combat by one transition."""
    combat = state.combat
    stages: dict[CombatStage, Callable[[GameState, CombatState], None]] = {
        CombatStage.BEGIN: _step_begin,
        CombatStage.CARD_SELECTION: _step_card_selection,
        CombatStage.SUPPORT_DECLARATION: _step_support,
        CombatStage.STRENGTH_CALCULATION: _step_strength,
        CombatStage.RESOLUTION: _step_resolution,
        CombatStage.POST_COMBAT: _step_post_combat,
        CombatStage.END: _step_end,
    }
    stages[combat.stage](state, combat)


def _ask(state: GameState, decision_type: DecisionType, house: House, **fields) -> None:
    state.pending = PendingDecision(decision_type=decision_type, house=house, **fields)


def _step_begin(state: GameState, combat: CombatState) -> None:
    entries = []
    for area_id in support_areas(state, combat.area_id):
        supporter = state.areas[area_id].order.house
        choice = None
        if supporter == combat.attacker:
            choice = SupportChoice.ATTACKER
        elif supporter == combat.defender:
            choice = SupportChoice.DEFENDER
        entries.append(SupportEntry(area_id=area_id, house=supporter, choice=choice))
    combat.support = entries
    combat.stage = CombatStage.CARD_SELECTION


def _step_card_selection(state: GameState, combat: CombatState) -> None:
    for house, selected in ((combat.attacker, combat.attacker_selected),
                            (combat.defender, combat.defender_selected)):
        if selected:
            continue
        if refill_hand(state, house):
            return
        hand = state.houses[house].hand
        if not hand:
            _mark_selected(combat, house)
            return
        _ask(
            state, DecisionType.SELECT_CARD, house,
            area_id=combat.area_id, cards=list(hand), opponent=combat.opponent_of(house),
        )
        return

    if not combat.cards_revealed:
        combat.cards_revealed = True
        logger.debug(f"Cards revealed: {combat.attacker_card} vs {combat.defender_card}")
        return

    if _fire_in_order(state, combat, CombatStage.CARD_SELECTION, CARD_SELECTION_PRIORITY):
        return

    combat.stage = CombatStage.SUPPORT_DECLARATION


def _mark_selected(combat: CombatState, house: House) -> None:
    if house == combat.attacker:
        combat.attacker_selected = True
    else:
        combat.defender_selected = True


def _step_support(state: GameState, combat: CombatState) -> None:
    for entry in combat.support:
        if entry.choice is None:
            _ask(
                state, DecisionType.DECLARE_SUPPORT, entry.house,
                area_id=entry.area_id, options=[c.value for c in SupportChoice],
            )
            return
    combat.stage = CombatStage.STRENGTH_CALCULATION


def _step_strength(state: GameState, combat: CombatState) -> None:
    if not combat.blade_offered:
        combat.blade_offered = True
        holder = state.holder(Track.FIEFDOMS)
        if not state.blade_used and holder in (combat.attacker, combat.defender):
            _ask(state, DecisionType.USE_BLADE, holder, area_id=combat.area_id)
        return

    combat.attacker_strength = side_totals(state, combat, combat.attacker).strength
    combat.defender_strength = side_totals(state, combat, combat.defender).strength
    combat.stage = CombatStage.RESOLUTION
    logger.debug(f"Combat strength: {combat.attacker_strength} vs {combat.defender_strength}")


def _step_resolution(state: GameState, combat: CombatState) -> None:
    if combat.winner is None:
        _determine_outcome(state, combat)
        return

    loser = combat.loser
    if not combat.casualties_taken:
        units = engaged_units(state, combat, loser)
        if 0 < combat.casualties < len(units):
            _ask(
                state, DecisionType.CHOOSE_CASUALTIES, loser,
                area_id=combat.area_id, units=list(range(len(units))), count=combat.casualties,
            )
            return
        for unit in list(units)[:combat.casualties]:
            _remove_engaged(state, combat, loser, unit)
        combat.casualties_taken = True
        return

    if not combat.retreat_done:
        _step_retreat(state, combat)
        return

    combat.stage = CombatStage.POST_COMBAT


def _determine_outcome(state: GameState, combat: CombatState) -> None:
    attacker, defender = combat.attacker, combat.defender
    if combat.attacker_strength > combat.defender_strength:
        winner = attacker
    elif combat.defender_strength > combat.attacker_strength:
        winner = defender
    else:
        winner = min((attacker, defender), key=lambda h: state.position(h, Track.FIEFDOMS))
    loser = combat.opponent_of(winner)

    # Icons adjust the differential but never raise casualties above it
    won = side_totals(state, combat, winner)
    lost = side_totals(state, combat, loser)
    difference = abs(combat.attacker_strength - combat.defender_strength)
    casualties = min(difference, max(0, difference + won.swords - lost.fortifications))

    units = engaged_units(state, combat, loser)
    combat.winner = winner
    combat.casualties = min(casualties, len(units))
    _fire_resolution(state, combat)

    if loser == defender and units:
        if not retreat_areas(state, defender, combat.area_id, combat.march_from):
            combat.casualties = len(units)
    logger.debug(
        f"Combat in {BOARD.name(combat.area_id)} won by {winner.value}; "
        f"{loser.value} loses {combat.casualties} unit(s)"
    )


def _step_retreat(state: GameState, combat: CombatState) -> None:
    if combat.loser == combat.attacker:
        survivors = list(combat.attacking_units)
        combat.attacking_units.clear()
        for unit in survivors:
            unit.routed = True
        place_units(state, combat.march_from, survivors, combat.attacker)
        combat.retreat_done = True
        return

    defender = combat.defender
    if not state.areas[combat.area_id].units_of(defender):
        combat.retreat_done = True
        return
    if _fire_resolution(state, combat):
        return
    options = retreat_areas(state, defender, combat.area_id, combat.march_from)
    _ask(state, DecisionType.RETREAT, defender, area_id=combat.area_id, areas=options)


def _step_post_combat(state: GameState, combat: CombatState) -> None:
    if _fire_in_order(state, combat, CombatStage.POST_COMBAT, _POST_COMBAT_ORDER):
        return

    if not combat.area_transferred:
        _transfer_area(state, combat)
        combat.area_transferred = True
        return

    if not combat.cards_discarded:
        _discard_cards(state, combat)
        combat.cards_discarded = True
        return

    combat.stage = CombatStage.END


def _transfer_area(state: GameState, combat: CombatState) -> None:
    if combat.winner != combat.attacker:
        return
    area = state.areas[combat.area_id]
    if area.order is not None and area.order.house == combat.defender:
        area.order = None
    if area.garrison is not None and area.garrison.house == combat.defender:
        area.garrison = None
    units = list(combat.attacking_units)
    combat.attacking_units.clear()
    if units:
        place_units(state, combat.area_id, units, combat.attacker)
    elif BOARD.is_land(combat.area_id):
        set_control(state, combat.area_id, None)
    else:
        refresh_sea_control(state, combat.area_id)
    check_victory(state)


def _discard_cards(state: GameState, combat: CombatState) -> None:
    for house in (combat.attacker, combat.defender):
        card_id = combat.card_of(house)
        if card_id is None:
            refill_hand(state, house)
            continue
        # Already taken back into the hand by its own ability
        if card_id in state.houses[house].hand:
            continue
        discard_played_card(state, house, card_id)


def _step_end(state: GameState, combat: CombatState) -> None:
    origin = combat.march_from
    attacker = combat.attacker
    state.combat = None
    area = state.areas[origin]
    if BOARD.is_land(origin) and not area.units and area.house == attacker:
        state.vacated_area = origin
    else:
        release_if_empty(state, origin)
    if not all(house_fits(state, h) for h in (attacker, combat.defender)):
        state.supply_check_due = True
    end_turn(state)
    check_victory(state)


# -- Card selection abilities ---------------------------------------------------

def _tyrion(state: GameState, combat: CombatState, owner: House) -> None:
    opponent = combat.opponent_of(owner)
    cancelled = combat.card_of(opponent)
    if cancelled is None:
        return
    _set_card(combat, opponent, None)
    hand = state.houses[opponent].hand
    hand.append(cancelled)
    options = [c for c in hand if c != cancelled]
    if options:
        _ask(
            state, DecisionType.TYRION_REPLACE, opponent,
            area_id=combat.area_id, cards=options, opponent=owner,
        )


def _aeron(state: GameState, combat: CombatState, owner: House) -> None:
    record = state.houses[owner]
    if record.power >= 2 and record.hand:
        _ask(
            state, DecisionType.AERON_SWAP, owner,
            area_id=combat.area_id, cards=list(record.hand),
        )


def _queen_of_thorns(state: GameState, combat: CombatState, owner: House) -> None:
    opponent = combat.opponent_of(owner)
    targets = [
        a for a in BOARD.neighbors(combat.area_id)
        if state.areas[a].order is not None and state.areas[a].order.house == opponent
    ]
    if targets:
        _ask(
            state, DecisionType.QUEEN_OF_THORNS, owner,
            area_id=combat.area_id, areas=sorted(targets), opponent=opponent,
        )


def _doran(state: GameState, combat: CombatState, owner: House) -> None:
    _ask(
        state, DecisionType.DORAN_CHOOSE_TRACK, owner,
        area_id=combat.area_id, opponent=combat.opponent_of(owner),
        options=[t.value for t in Track],
    )


def _mace(state: GameState, combat: CombatState, owner: House) -> None:
    opponent = combat.opponent_of(owner)
    for unit in engaged_units(state, combat, opponent):
        if unit.unit_type == UnitType.FOOTMAN:
            _remove_engaged(state, combat, opponent, unit)
            logger.debug(f"Mace Tyrell destroys a {opponent.value} footman")
            return


_CARD_SELECTION_ABILITIES = {
    AbilityTag.TYRION: _tyrion,
    AbilityTag.AERON: _aeron,
    AbilityTag.QUEEN_OF_THORNS: _queen_of_thorns,
    AbilityTag.DORAN: _doran,
    AbilityTag.MACE: _mace,
}


# -- Strength abilities -----------------------------------------------------------
#
# Called once per side being totalled, for each combatant's card. `owner`
# played the card; `house` is the side whose totals are being counted.

def _catelyn(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner == house:
        tally.defense_multiplier = 2


def _kevan(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner == house and tally.attacking:
        tally.unit_worth[UnitType.FOOTMAN] = 2


def _victarion(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner == house and tally.attacking:
        tally.unit_worth[UnitType.SHIP] = 2


def _salladhor(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if _is_supported(combat, owner):
        tally.ships_only_for = owner


def _balon(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner != house:
        tally.card_cancelled = True


def _stannis(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner != house:
        return
    opponent = combat.opponent_of(owner)
    if state.position(opponent, Track.IRON_THRONE) < state.position(owner, Track.IRON_THRONE):
        tally.totals.strength += 1


def _davos(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner == house and "stannis_baratheon" in state.houses[owner].discards:
        tally.totals.strength += 1
        tally.totals.swords += 1


def _theon(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner == house and not tally.attacking and BOARD.area(combat.area_id).has_castle:
        tally.totals.strength += 1
        tally.totals.swords += 1


def _asha(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner == house and not tally.supported:
        tally.totals.swords += 2
        tally.totals.fortifications += 1


def _nymeria(state: GameState, combat: CombatState, owner: House, house: House, tally: _Tally) -> None:
    if owner != house:
        return
    if tally.attacking:
        tally.totals.swords += 1
    else:
        tally.totals.fortifications += 1


_STRENGTH_ABILITIES = {
    AbilityTag.CATELYN: _catelyn,
    AbilityTag.KEVAN: _kevan,
    AbilityTag.VICTARION: _victarion,
    AbilityTag.SALLADHOR: _salladhor,
    AbilityTag.BALON: _balon,
    AbilityTag.STANNIS: _stannis,
    AbilityTag.DAVOS: _davos,
    AbilityTag.THEON: _theon,
    AbilityTag.ASHA: _asha,
    AbilityTag.NYMERIA: _nymeria,
}


# -- Resolution abilities -----------------------------------------------------------

def _blackfish(state: GameState, combat: CombatState, owner: House) -> bool:
    if owner != combat.loser or combat.casualties_taken:
        return False
    combat.casualties = 0
    return True


def _robb(state: GameState, combat: CombatState, owner: House) -> bool:
    defender = combat.defender
    if owner != combat.winner or combat.loser != defender or not combat.casualties_taken:
        return False
    _ask(
        state, DecisionType.ROBB_RETREAT, owner,
        area_id=combat.area_id, opponent=defender,
        areas=retreat_areas(state, defender, combat.area_id, combat.march_from),
    )
    return True


_RESOLUTION_ABILITIES = {
    AbilityTag.BLACKFISH: _blackfish,
    AbilityTag.ROBB: _robb,
}


# -- Post combat abilities ------------------------------------------------------

def _tywin(state: GameState, combat: CombatState, owner: House) -> None:
    if owner == combat.winner:
        gain_power(state, owner, 2)


def _renly(state: GameState, combat: CombatState, owner: House) -> None:
    if owner != combat.winner or state.houses[owner].pool.available(UnitType.KNIGHT) <= 0:
        return
    if owner == combat.attacker:
        for index, unit in enumerate(combat.attacking_units):
            if unit.unit_type == UnitType.FOOTMAN:
                pool = state.houses[owner].pool
                pool.give_back(UnitType.FOOTMAN)
                pool.take(UnitType.KNIGHT)
                combat.attacking_units[index] = Unit(UnitType.KNIGHT, owner, unit.routed)
                return
    else:
        for unit in state.areas[combat.area_id].units_of(owner):
            if unit.unit_type == UnitType.FOOTMAN:
                replace_unit(state, combat.area_id, unit, UnitType.KNIGHT)
                return


def _cersei(state: GameState, combat: CombatState, owner: House) -> None:
    if owner != combat.winner:
        return
    loser = combat.loser
    targets = sorted(state.orders_of(loser))
    if targets:
        _ask(
            state, DecisionType.CERSEI_REMOVE_ORDER, owner,
            area_id=combat.area_id, areas=targets, opponent=loser,
        )


def _patchface(state: GameState, combat: CombatState, owner: House) -> None:
    opponent = combat.opponent_of(owner)
    hand = state.houses[opponent].hand
    if hand:
        _ask(
            state, DecisionType.PATCHFACE_DISCARD, owner,
            area_id=combat.area_id, cards=list(hand), opponent=opponent,
        )


def _roose(state: GameState, combat: CombatState, owner: House) -> None:
    if owner != combat.loser:
        return
    record = state.houses[owner]
    record.hand.extend(record.discards)
    record.hand.append(combat.card_of(owner))
    record.discards = []
    logger.debug(f"Roose Bolton returns {len(record.hand)} card(s) to {owner.value}")


_POST_COMBAT_ABILITIES = {
    AbilityTag.TYWIN: _tywin,
    AbilityTag.RENLY: _renly,
    AbilityTag.CERSEI: _cersei,
    AbilityTag.PATCHFACE: _patchface,
    AbilityTag.ROOSE: _roose,
}


_STAGE_ABILITIES: dict[CombatStage, dict[AbilityTag, Callable]] = {
    CombatStage.CARD_SELECTION: _CARD_SELECTION_ABILITIES,
    CombatStage.STRENGTH_CALCULATION: _STRENGTH_ABILITIES,
    CombatStage.RESOLUTION: _RESOLUTION_ABILITIES,
    CombatStage.POST_COMBAT: _POST_COMBAT_ABILITIES,
}


def _ability_handler(card_id: str | None, stage: CombatStage) -> Callable | None:
    """Handler of a card's ability at a stage, None when it does not fire there."""
    tag = CATALOG.ability(card_id)
    if tag is None or ABILITY_STAGES[tag] != stage:
        return None
    return _STAGE_ABILITIES[stage][tag]


def _fire_in_order(state: GameState, combat: CombatState, stage: CombatStage, order) -> bool:
    """Fire the first unfired ability of the stage, following the tag order."""
    for tag in order:
        for house in (combat.attacker, combat.defender):
            card_id = combat.card_of(house)
            if CATALOG.ability(card_id) != tag or card_id in combat.abilities_fired:
                continue
            combat.abilities_fired.append(card_id)
            _ability_handler(card_id, stage)(state, combat, house)
            return True
    return False


def _fire_resolution(state: GameState, combat: CombatState) -> bool:
    """Fire a resolution ability whose moment has come; True if one did."""
    for house in (combat.attacker, combat.defender):
        card_id = combat.card_of(house)
        handler = _ability_handler(card_id, CombatStage.RESOLUTION)
        if handler is None or card_id in combat.abilities_fired:
            continue
        if handler(state, combat, house):
            combat.abilities_fired.append(card_id)
            return True
    return False


# -- Decision handlers ------------------------------------------------------------

def _combat_for(state: GameState) -> CombatState:
    if state.combat is None:
        raise IllegalAction("No combat in progress")
    return state.combat


def handle_select_card(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    card_id = action.payload.card_id
    if card_id not in state.pending.cards:
        raise IllegalAction(f"Card {card_id!r} is not in hand")
    state.houses[action.house].hand.remove(card_id)
    _set_card(combat, action.house, card_id)
    _mark_selected(combat, action.house)
    return f"{action.house.value} selected a card"


def handle_tyrion_replace(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    card_id = action.payload.card_id
    if card_id not in state.pending.cards:
        raise IllegalAction(f"Card {card_id!r} is not a legal replacement")
    state.houses[action.house].hand.remove(card_id)
    _set_card(combat, action.house, card_id)
    return f"{action.house.value} replaced its card with {card_id}"


def handle_aeron_swap(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    card_id = action.payload.card_id
    if card_id is None:
        return "Aeron Damphair kept"
    if card_id not in state.pending.cards:
        raise IllegalAction(f"Card {card_id!r} is not in hand")
    if state.houses[action.house].power < 2:
        raise IllegalAction("Swapping Aeron Damphair costs two power")
    record = state.houses[action.house]
    lose_power(state, action.house, 2)
    record.discards.append(combat.card_of(action.house))
    record.hand.remove(card_id)
    _set_card(combat, action.house, card_id)
    return f"Aeron Damphair swapped for {card_id}"


def handle_queen_of_thorns(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    area_id = action.payload.area_id
    if area_id is None:
        return "Queen of Thorns declined"
    if area_id not in state.pending.areas:
        raise IllegalAction(f"Area {area_id} holds no removable order")
    state.areas[area_id].order = None
    combat.support = [e for e in combat.support if e.area_id != area_id]
    return f"Queen of Thorns removed the order in {BOARD.name(area_id)}"


def handle_doran_choose_track(state: GameState, action: Action) -> str:
    track = action.payload.track
    if not isinstance(track, Track):
        raise IllegalAction("Doran Martell needs a track")
    opponent = state.pending.opponent
    move_to_bottom(state, track, opponent)
    return f"{opponent.value} moved to the bottom of {track.value}"


def handle_declare_support(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    choice = action.payload.support
    if not isinstance(choice, SupportChoice):
        raise IllegalAction("Support must be attacker, defender or none")
    for entry in combat.support:
        if entry.area_id == state.pending.area_id and entry.choice is None:
            entry.choice = choice
            return f"{action.house.value} supports {choice.value}"
    raise IllegalAction("No undeclared support order in that area")


def handle_use_blade(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    accept = action.payload.accept
    if not isinstance(accept, bool):
        raise IllegalAction("Blade answer must be yes or no")
    if not accept:
        return "Valyrian Steel Blade not used"
    state.blade_used = True
    if action.house == combat.attacker:
        combat.attacker_blade = True
    else:
        combat.defender_blade = True
    return "Valyrian Steel Blade used"


def handle_choose_casualties(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    indices = action.payload.unit_indices or []
    decision = state.pending
    if len(indices) != decision.count or len(set(indices)) != len(indices):
        raise IllegalAction(f"Choose exactly {decision.count} distinct units")
    if any(i not in decision.units for i in indices):
        raise IllegalAction("Unit index out of range")
    units = engaged_units(state, combat, action.house)
    doomed = [units[i] for i in indices]
    for unit in doomed:
        _remove_engaged(state, combat, action.house, unit)
    combat.casualties_taken = True
    return f"{action.house.value} lost {len(doomed)} unit(s)"


def _retreat_to(state: GameState, combat: CombatState, area_id: int) -> None:
    defender = combat.defender
    battle = state.areas[combat.area_id]
    survivors = battle.units_of(defender)
    battle.units = [u for u in battle.units if u.house != defender]
    if battle.order is not None and battle.order.house == defender:
        battle.order = None
    for unit in survivors:
        unit.routed = True
    place_units(state, area_id, survivors, defender)
    combat.retreat_done = True
    if not house_fits(state, defender):
        state.supply_check_due = True


def handle_retreat(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    area_id = action.payload.area_id
    if area_id not in state.pending.areas:
        raise IllegalAction(f"Cannot retreat to area {area_id}")
    _retreat_to(state, combat, area_id)
    return f"{action.house.value} retreated to {BOARD.name(area_id)}"


def handle_robb_retreat(state: GameState, action: Action) -> str:
    combat = _combat_for(state)
    area_id = action.payload.area_id
    if area_id not in state.pending.areas:
        raise IllegalAction(f"Cannot retreat to area {area_id}")
    _retreat_to(state, combat, area_id)
    return f"Robb Stark sent {combat.defender.value} to {BOARD.name(area_id)}"


def handle_cersei_remove_order(state: GameState, action: Action) -> str:
    area_id = action.payload.area_id
    if area_id is None:
        return "Cersei Lannister declined"
    if area_id not in state.pending.areas:
        raise IllegalAction(f"Area {area_id} holds no removable order")
    state.areas[area_id].order = None
    return f"Cersei Lannister removed the order in {BOARD.name(area_id)}"


def handle_patchface_discard(state: GameState, action: Action) -> str:
    card_id = action.payload.card_id
    if card_id not in state.pending.cards:
        raise IllegalAction(f"Card {card_id!r} is not in the opponent's hand")
    record = state.houses[state.pending.opponent]
    record.hand.remove(card_id)
    record.discards.append(card_id)
    return f"Patchface discarded {card_id}"
