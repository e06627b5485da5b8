"""
Visibility - The masked projection of a GameState shown to one house.

A PlayerView carries everything the viewing house is allowed to know:
- Its own hand and discard pile; for other houses only hand sizes and
  their (public) discard piles
- Other houses' orders only as hidden markers until orders are revealed
- Sealed bids only as "has bid" until the contest resolves
- Deck sizes, never deck order
- Combat cards only once both sides have chosen
- The pending decision only if it belongs to the viewer

Units, garrisons, power, supply and tracks are public.
"""

from copy import deepcopy
from typing import Optional

from pydantic import BaseModel, Field

from ..games.thrones.areas import BOARD
from ..games.thrones.cards import CATALOG
from .rules import castle_count
from .state import (
    ActionSubPhase,
    BiddingType,
    CombatStage,
    GameState,
    House,
    OrderType,
    PendingDecision,
    Phase,
    SupportChoice,
    Track,
    UnitType,
    WesterosCardType,
    WildlingCardType,
)


# =============================================================================
# Board Models
# =============================================================================

class UnitView(BaseModel):
    unit_type: UnitType
    house: House
    routed: bool = False

    model_config = {"from_attributes": True}


class OrderView(BaseModel):
    """An order token; only house is set while it is face down."""
    house: House
    hidden: bool = False
    order_type: Optional[OrderType] = None
    strength: Optional[int] = None
    star: Optional[bool] = None
    token_index: Optional[int] = None


class AreaView(BaseModel):
    area_id: int
    name: str
    kind: str = Field(description="land, sea or port")
    blocked: bool = False
    house: Optional[House] = None
    units: list[UnitView] = Field(default_factory=list)
    order: Optional[OrderView] = None
    garrison_house: Optional[House] = None
    garrison_strength: int = 0
    power_token: bool = False


# =============================================================================
# House Models
# =============================================================================

class HouseView(BaseModel):
    """Public record of a house, plus its hand when it is the viewer."""
    house: House
    supply: int
    power: int
    castles: int
    hand_size: int
    hand: Optional[list[str]] = Field(None, description="Only set for the viewing house")
    discards: list[str] = Field(default_factory=list)
    possible_cards: list[str] = Field(
        default_factory=list, description="Cards not known to be discarded"
    )
    pool: dict[str, int] = Field(default_factory=dict)
    iron_throne: int
    fiefdoms: int
    kings_court: int


# =============================================================================
# Sub-phase Models
# =============================================================================

class SupportView(BaseModel):
    area_id: int
    house: House
    choice: Optional[SupportChoice] = None

    model_config = {"from_attributes": True}


class CombatView(BaseModel):
    attacker: House
    defender: House
    area_id: int
    march_from: int
    stage: CombatStage
    attacking_units: list[UnitView] = Field(default_factory=list)
    attacker_card: Optional[str] = None
    defender_card: Optional[str] = None
    support: list[SupportView] = Field(default_factory=list)
    attacker_strength: int = 0
    defender_strength: int = 0
    winner: Optional[House] = None
    casualties: int = 0


class BiddingView(BaseModel):
    bidding_type: BiddingType
    track: Optional[Track] = None
    bid_order: list[House] = Field(default_factory=list)
    houses_bid: list[House] = Field(default_factory=list)
    my_bid: Optional[int] = None


class PlayerView(BaseModel):
    """Everything one house may see."""
    viewer: House
    player_count: int
    round: int
    phase: Phase
    action_sub_phase: Optional[ActionSubPhase] = None
    wildling_threat: int
    tracks: dict[Track, list[House]]
    houses: dict[House, HouseView]
    areas: list[AreaView]
    combat: Optional[CombatView] = None
    bidding: Optional[BiddingView] = None
    revealed_bids: dict[House, int] = Field(default_factory=dict)
    westeros_drawn: list[WesterosCardType] = Field(default_factory=list)
    westeros_deck_sizes: list[int] = Field(default_factory=list)
    wildling_deck_size: int = 0
    last_wildling_card: Optional[WildlingCardType] = None
    restricted_orders: list[OrderType] = Field(default_factory=list)
    restricted_star_orders: list[OrderType] = Field(default_factory=list)
    orders_revealed: bool = False
    blade_used: bool = False
    pending: Optional[PendingDecision] = None
    winner: Optional[House] = None

    @property
    def me(self) -> HouseView:
        return self.houses[self.viewer]


# =============================================================================
# Projection
# =============================================================================

def _order_view(state: GameState, viewer: House, area_id: int) -> Optional[OrderView]:
    order = state.areas[area_id].order
    if order is None:
        return None
    if order.house != viewer and not state.orders_revealed:
        return OrderView(house=order.house, hidden=True)
    return OrderView(
        house=order.house,
        order_type=order.order_type,
        strength=order.strength,
        star=order.star,
        token_index=order.token_index,
    )


def _area_views(state: GameState, viewer: House) -> list[AreaView]:
    views = []
    for area_id, area in enumerate(state.areas):
        garrison = area.garrison
        views.append(AreaView(
            area_id=area_id,
            name=BOARD.name(area_id),
            kind=BOARD.area(area_id).kind.value,
            blocked=BOARD.is_blocked(area_id, state.player_count),
            house=area.house,
            units=[UnitView.model_validate(u) for u in area.units],
            order=_order_view(state, viewer, area_id),
            garrison_house=garrison.house if garrison else None,
            garrison_strength=garrison.strength if garrison else 0,
            power_token=area.power_token,
        ))
    return views


def _house_views(state: GameState, viewer: House) -> dict[House, HouseView]:
    views = {}
    for house, record in state.houses.items():
        visible = house == viewer
        views[house] = HouseView(
            house=house,
            supply=record.supply,
            power=record.power,
            castles=castle_count(state, house),
            hand_size=len(record.hand),
            hand=list(record.hand) if visible else None,
            discards=list(record.discards),
            possible_cards=[c for c in CATALOG.house_card_ids(house) if c not in record.discards],
            pool={t.value: record.pool.available(t) for t in UnitType},
            iron_throne=state.position(house, Track.IRON_THRONE),
            fiefdoms=state.position(house, Track.FIEFDOMS),
            kings_court=state.position(house, Track.KINGS_COURT),
        )
    return views


def _combat_view(state: GameState) -> Optional[CombatView]:
    combat = state.combat
    if combat is None:
        return None
    return CombatView(
        attacker=combat.attacker,
        defender=combat.defender,
        area_id=combat.area_id,
        march_from=combat.march_from,
        stage=combat.stage,
        attacking_units=[UnitView.model_validate(u) for u in combat.attacking_units],
        attacker_card=combat.attacker_card if combat.cards_revealed else None,
        defender_card=combat.defender_card if combat.cards_revealed else None,
        support=[SupportView.model_validate(s) for s in combat.support],
        attacker_strength=combat.attacker_strength,
        defender_strength=combat.defender_strength,
        winner=combat.winner,
        casualties=combat.casualties,
    )


def _bidding_view(state: GameState, viewer: House) -> Optional[BiddingView]:
    bidding = state.bidding
    if bidding is None:
        return None
    return BiddingView(
        bidding_type=bidding.bidding_type,
        track=bidding.track,
        bid_order=list(bidding.bid_order),
        houses_bid=[h for h in bidding.bid_order if h in bidding.bids],
        my_bid=bidding.bids.get(viewer),
    )


def player_view(state: GameState, house: House) -> PlayerView:
    """
    Project the state for one house.

    The view shares no mutable objects with the state.
    """
    pending = None
    if state.pending is not None and state.pending.house == house:
        pending = deepcopy(state.pending)

    return PlayerView(
        viewer=house,
        player_count=state.player_count,
        round=state.round,
        phase=state.phase,
        action_sub_phase=state.action_sub_phase,
        wildling_threat=state.wildling_threat,
        tracks={t: list(order) for t, order in state.tracks.items()},
        houses=_house_views(state, house),
        areas=_area_views(state, house),
        combat=_combat_view(state),
        bidding=_bidding_view(state, house),
        revealed_bids=dict(state.revealed_bids),
        westeros_drawn=[c.card_type for c in state.westeros_drawn],
        westeros_deck_sizes=[len(d) for d in state.westeros_decks],
        wildling_deck_size=len(state.wildling_deck),
        last_wildling_card=state.last_wildling_card,
        restricted_orders=list(state.restricted_orders),
        restricted_star_orders=list(state.restricted_star_orders),
        orders_revealed=state.orders_revealed,
        blade_used=state.blade_used,
        pending=pending,
        winner=state.winner,
    )
