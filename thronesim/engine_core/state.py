"""
Game State - The complete mutable record the engine operates on.

Design principles:
- Plain dataclasses, mutated in place by the state machine only
- Serializable: every field round-trips through engine_core.record
- Board and card definitions are NOT stored here; only ids referencing
  the static tables in games.thrones
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from ..config import RulesConfig
from .errors import EngineInvariantError


class House(Enum):
    """The six playable houses."""
    STARK = "stark"
    LANNISTER = "lannister"
    BARATHEON = "baratheon"
    GREYJOY = "greyjoy"
    TYRELL = "tyrell"
    MARTELL = "martell"


class UnitType(Enum):
    FOOTMAN = "footman"
    KNIGHT = "knight"
    SHIP = "ship"
    SIEGE_ENGINE = "siege_engine"


class OrderType(Enum):
    MARCH = "march"
    DEFENSE = "defense"
    SUPPORT = "support"
    RAID = "raid"
    CONSOLIDATE_POWER = "consolidate_power"


class Track(Enum):
    """Influence tracks, in the order a Clash of Kings resolves them."""
    IRON_THRONE = "iron_throne"
    FIEFDOMS = "fiefdoms"
    KINGS_COURT = "kings_court"


class Phase(Enum):
    WESTEROS = "westeros"
    PLANNING = "planning"
    ACTION = "action"


class ActionSubPhase(Enum):
    RAID = "raid"
    MARCH = "march"
    CONSOLIDATE_POWER = "consolidate_power"


class CombatStage(Enum):
    BEGIN = "begin"
    CARD_SELECTION = "card_selection"
    SUPPORT_DECLARATION = "support_declaration"
    STRENGTH_CALCULATION = "strength_calculation"
    RESOLUTION = "resolution"
    POST_COMBAT = "post_combat"
    END = "end"


class SupportChoice(Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"
    NONE = "none"


class BiddingType(Enum):
    TRACK = "track"
    WILDLING = "wildling"


class WesterosCardType(Enum):
    SUPPLY = "supply"
    MUSTERING = "mustering"
    A_THRONE_OF_BLADES = "a_throne_of_blades"
    WINTER_IS_COMING = "winter_is_coming"
    LAST_DAYS_OF_SUMMER = "last_days_of_summer"
    CLASH_OF_KINGS = "clash_of_kings"
    GAME_OF_THRONES = "game_of_thrones"
    DARK_WINGS_DARK_WORDS = "dark_wings_dark_words"
    WILDLING_ATTACK = "wildling_attack"
    PUT_TO_THE_SWORD = "put_to_the_sword"
    SEA_OF_STORMS = "sea_of_storms"
    RAINS_OF_AUTUMN = "rains_of_autumn"
    FEAST_FOR_CROWS = "feast_for_crows"
    WEB_OF_LIES = "web_of_lies"
    STORM_OF_SWORDS = "storm_of_swords"


class WildlingCardType(Enum):
    A_KING_BEYOND_THE_WALL = "a_king_beyond_the_wall"
    CROW_KILLERS = "crow_killers"
    MAMMOTH_RIDERS = "mammoth_riders"
    MASSING_ON_THE_MILKWATER = "massing_on_the_milkwater"
    PREEMPTIVE_RAID = "preemptive_raid"
    RATTLESHIRTS_RAIDERS = "rattleshirts_raiders"
    SILENCE_AT_THE_WALL = "silence_at_the_wall"
    SKINCHANGER_SCOUT = "skinchanger_scout"
    THE_HORDE_DESCENDS = "the_horde_descends"


class DecisionType(Enum):
    """
    Tag shared by a PendingDecision and the Action that answers it.

    An Action is only accepted when its tag equals the pending tag.
    """
    # Planning
    PLACE_ORDERS = "place_orders"
    MESSENGER_RAVEN = "messenger_raven"

    # Action phase
    CHOOSE_RAID = "choose_raid"
    CHOOSE_MARCH = "choose_march"
    LEAVE_POWER_TOKEN = "leave_power_token"
    MUSTER = "muster"

    # Westeros phase
    RECONCILE = "reconcile"
    BID = "bid"
    WESTEROS_CHOICE = "westeros_choice"
    WILDLING_PENALTY = "wildling_penalty"

    # Combat
    SELECT_CARD = "select_card"
    DECLARE_SUPPORT = "declare_support"
    USE_BLADE = "use_blade"
    CHOOSE_CASUALTIES = "choose_casualties"
    RETREAT = "retreat"

    # Card abilities
    TYRION_REPLACE = "tyrion_replace"
    AERON_SWAP = "aeron_swap"
    QUEEN_OF_THORNS = "queen_of_thorns"
    DORAN_CHOOSE_TRACK = "doran_choose_track"
    ROBB_RETREAT = "robb_retreat"
    CERSEI_REMOVE_ORDER = "cersei_remove_order"
    PATCHFACE_DISCARD = "patchface_discard"


@dataclass
class Unit:
    unit_type: UnitType
    house: House
    routed: bool = False


@dataclass
class Order:
    """An order token placed on the board."""
    order_type: OrderType
    strength: int
    star: bool
    house: House
    token_index: int


@dataclass
class Garrison:
    """Garrison token; house is None for neutral forces."""
    house: House | None
    strength: int


@dataclass
class AreaState:
    """Runtime state of one board area."""
    units: list[Unit] = field(default_factory=list)
    order: Order | None = None
    house: House | None = None
    garrison: Garrison | None = None
    power_token: bool = False

    def units_of(self, house: House) -> list[Unit]:
        return [u for u in self.units if u.house == house]

    def has_enemy_units(self, house: House) -> bool:
        return any(u.house != house for u in self.units)


@dataclass
class UnitPool:
    """Units a house has not yet placed on the board."""
    footmen: int = 10
    knights: int = 5
    ships: int = 6
    siege_engines: int = 2

    _FIELDS = {
        UnitType.FOOTMAN: "footmen",
        UnitType.KNIGHT: "knights",
        UnitType.SHIP: "ships",
        UnitType.SIEGE_ENGINE: "siege_engines",
    }

    def available(self, unit_type: UnitType) -> int:
        return getattr(self, self._FIELDS[unit_type])

    def take(self, unit_type: UnitType) -> None:
        name = self._FIELDS[unit_type]
        setattr(self, name, getattr(self, name) - 1)

    def give_back(self, unit_type: UnitType) -> None:
        name = self._FIELDS[unit_type]
        setattr(self, name, getattr(self, name) + 1)


@dataclass
class HouseState:
    """Per-house record: economy, cards and unit pool."""
    house: House
    supply: int
    power: int
    pool: UnitPool = field(default_factory=UnitPool)
    hand: list[str] = field(default_factory=list)
    discards: list[str] = field(default_factory=list)


@dataclass
class WesterosCard:
    deck: int
    card_type: WesterosCardType
    wildling_icon: bool = False


@dataclass
class MusterArea:
    """A castle or stronghold a house may muster from, with its points."""
    area_id: int
    points: int


@dataclass
class PendingDecision:
    """
    A suspended question for exactly one house.

    Generic container; which fields are filled depends on decision_type:
    - PLACE_ORDERS: areas (eligible), tokens (usable), count (orders
      required), limit (star orders allowed)
    - CHOOSE_MARCH / CHOOSE_RAID: area_id (origin), areas (destinations or
      targets), units (movable unit indices)
    - SELECT_CARD / TYRION_REPLACE / AERON_SWAP / PATCHFACE_DISCARD: cards
    - CHOOSE_CASUALTIES: units (candidate indices), count
    - RETREAT / ROBB_RETREAT: area_id (battle area), areas (retreat options)
    - MUSTER: muster_areas, limit (max distinct areas)
    - BID: bidding_type, track, limit (power available)
    - WESTEROS_CHOICE / WILDLING_PENALTY: options
    """
    decision_type: DecisionType
    house: House
    area_id: int | None = None
    areas: list[int] = field(default_factory=list)
    cards: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)
    tokens: list[int] = field(default_factory=list)
    units: list[int] = field(default_factory=list)
    muster_areas: list[MusterArea] = field(default_factory=list)
    count: int | None = None
    limit: int | None = None
    opponent: House | None = None
    track: Track | None = None
    bidding_type: BiddingType | None = None


@dataclass
class SupportEntry:
    """One support order adjacent to a battle; choice None until declared."""
    area_id: int
    house: House
    choice: SupportChoice | None = None


@dataclass
class CombatState:
    """Active combat; present only while a march is being fought out."""
    attacker: House
    defender: House
    area_id: int
    march_from: int
    attacking_units: list[Unit] = field(default_factory=list)
    # Strength of the march order that started the combat
    march_strength: int = 0
    stage: CombatStage = CombatStage.BEGIN

    attacker_card: str | None = None
    defender_card: str | None = None
    attacker_selected: bool = False
    defender_selected: bool = False
    cards_revealed: bool = False
    # Card ids whose ability already fired this combat
    abilities_fired: list[str] = field(default_factory=list)

    support: list[SupportEntry] = field(default_factory=list)

    blade_offered: bool = False
    attacker_blade: bool = False
    defender_blade: bool = False

    attacker_strength: int = 0
    defender_strength: int = 0

    winner: House | None = None
    casualties: int = 0
    casualties_taken: bool = False
    retreat_done: bool = False
    area_transferred: bool = False
    cards_discarded: bool = False

    def opponent_of(self, house: House) -> House:
        return self.defender if house == self.attacker else self.attacker

    def card_of(self, house: House) -> str | None:
        return self.attacker_card if house == self.attacker else self.defender_card

    @property
    def loser(self) -> House | None:
        if self.winner is None:
            return None
        return self.opponent_of(self.winner)


@dataclass
class BiddingState:
    """Active sealed-bid contest (influence tracks or wildlings)."""
    bidding_type: BiddingType
    bid_order: list[House]
    track: Track | None = None
    remaining_tracks: list[Track] = field(default_factory=list)
    bids: dict[House, int] = field(default_factory=dict)


@dataclass
class GameState:
    """
    Complete game record.

    Owned and mutated exclusively by the state machine
    (machine.advance and reducer.apply_action).
    """
    seed: int
    houses: dict[House, HouseState]
    areas: list[AreaState]
    tracks: dict[Track, list[House]]
    config: RulesConfig = field(default_factory=RulesConfig)

    round: int = 1
    phase: Phase = Phase.PLANNING
    action_sub_phase: ActionSubPhase | None = None
    action_player_index: int = 0

    wildling_threat: int = 2
    wildling_deck: list[WildlingCardType] = field(default_factory=list)
    last_wildling_card: WildlingCardType | None = None
    wildling_attack_due: bool = False

    westeros_decks: list[list[WesterosCard]] = field(default_factory=lambda: [[], [], []])
    westeros_discards: list[list[WesterosCard]] = field(default_factory=lambda: [[], [], []])
    westeros_drawn: list[WesterosCard] = field(default_factory=list)
    westeros_queue: list[WesterosCard] = field(default_factory=list)
    westeros_cards_dealt: bool = False

    restricted_orders: list[OrderType] = field(default_factory=list)
    restricted_star_orders: list[OrderType] = field(default_factory=list)
    houses_ordered: list[House] = field(default_factory=list)
    orders_revealed: bool = False
    raven_used: bool = False
    blade_used: bool = False

    supply_check_due: bool = False
    muster_queue: list[House] = field(default_factory=list)
    vacated_area: int | None = None

    combat: CombatState | None = None
    bidding: BiddingState | None = None
    revealed_bids: dict[House, int] = field(default_factory=dict)

    pending: PendingDecision | None = None
    winner: House | None = None
    rng_counter: int = 0

    # -- Lookups -----------------------------------------------------------

    @property
    def playing_houses(self) -> list[House]:
        return list(self.houses)

    @property
    def player_count(self) -> int:
        return len(self.houses)

    @property
    def turn_order(self) -> list[House]:
        return self.tracks[Track.IRON_THRONE]

    def position(self, house: House, track: Track) -> int:
        """1-based position of a house on a track."""
        return self.tracks[track].index(house) + 1

    def holder(self, track: Track) -> House:
        """House in first position on a track."""
        return self.tracks[track][0]

    def iter_units(self, house: House) -> Iterator[tuple[int, Unit]]:
        for area_id, area in enumerate(self.areas):
            for unit in area.units:
                if unit.house == house:
                    yield area_id, unit

    def unit_count(self, house: House) -> int:
        return sum(1 for _ in self.iter_units(house))

    def areas_with_units(self, house: House) -> list[int]:
        return [i for i, a in enumerate(self.areas) if any(u.house == house for u in a.units)]

    def controlled_areas(self, house: House) -> list[int]:
        return [i for i, a in enumerate(self.areas) if a.house == house]

    def orders_of(self, house: House) -> dict[int, Order]:
        return {
            i: a.order for i, a in enumerate(self.areas)
            if a.order is not None and a.order.house == house
        }

    # -- Unit bookkeeping ----------------------------------------------------

    def add_unit(self, area_id: int, unit_type: UnitType, house: House) -> Unit:
        """Take a unit from the house pool and place it."""
        pool = self.houses[house].pool
        if pool.available(unit_type) <= 0:
            raise EngineInvariantError(f"{house.value} has no {unit_type.value} left in its pool")
        pool.take(unit_type)
        unit = Unit(unit_type=unit_type, house=house)
        self.areas[area_id].units.append(unit)
        return unit

    def remove_unit(self, area_id: int, unit: Unit) -> None:
        """Remove a unit from the board and return it to its pool."""
        self.areas[area_id].units.remove(unit)
        self.houses[unit.house].pool.give_back(unit.unit_type)
