"""
Game Setup - Creates the initial game state.

This module handles:
- Choosing the houses that play at a given player count
- Starting units, supply, power and influence positions
- Home and neutral garrisons
- Shuffling the Westeros and wildling decks from the seeded stream

Identical (player_count, seed, config) always produce an identical state.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from ...config import RulesConfig
from ...engine_core.errors import InvalidPlayerCount, InvalidSeed
from ...engine_core.rules import shuffle
from ...engine_core.state import (
    AreaState,
    Garrison,
    GameState,
    House,
    HouseState,
    Phase,
    Track,
    UnitPool,
    UnitType,
)
from . import areas as A
from .areas import BOARD, NUM_AREAS
from .cards import CATALOG

logger = logging.getLogger(__name__)

MIN_PLAYERS = 3
MAX_PLAYERS = 6
MAX_SEED = 2 ** 64

HOME_GARRISON = 2
NEUTRAL_HOME_GARRISON = 5
STARTING_POWER = 5

F, K, S = UnitType.FOOTMAN, UnitType.KNIGHT, UnitType.SHIP


@dataclass(frozen=True)
class HouseSetup:
    """Printed starting position of a house."""
    home: int
    supply: int
    min_players: int
    iron_throne: int
    fiefdoms: int
    kings_court: int
    units: tuple[tuple[int, tuple[UnitType, ...]], ...]


HOUSE_SETUPS: dict[House, HouseSetup] = {
    House.STARK: HouseSetup(
        home=A.WINTERFELL, supply=1, min_players=3,
        iron_throne=3, fiefdoms=4, kings_court=2,
        units=((A.WINTERFELL, (K, F)), (A.WHITE_HARBOR, (F,)), (A.THE_SHIVERING_SEA, (S,))),
    ),
    House.LANNISTER: HouseSetup(
        home=A.LANNISPORT, supply=2, min_players=3,
        iron_throne=2, fiefdoms=6, kings_court=1,
        units=((A.LANNISPORT, (K, F)), (A.STONEY_SEPT, (F,)), (A.THE_GOLDEN_SOUND, (S,))),
    ),
    House.BARATHEON: HouseSetup(
        home=A.DRAGONSTONE, supply=2, min_players=3,
        iron_throne=1, fiefdoms=5, kings_court=4,
        units=((A.DRAGONSTONE, (K, F)), (A.KINGSWOOD, (F,)), (A.SHIPBREAKER_BAY, (S, S))),
    ),
    House.GREYJOY: HouseSetup(
        home=A.PYKE, supply=2, min_players=4,
        iron_throne=5, fiefdoms=1, kings_court=6,
        units=(
            (A.PYKE, (K, F)), (A.PYKE_PORT, (S,)),
            (A.GREYWATER_WATCH, (F,)), (A.IRONMANS_BAY, (S,)),
        ),
    ),
    House.TYRELL: HouseSetup(
        home=A.HIGHGARDEN, supply=2, min_players=5,
        iron_throne=6, fiefdoms=2, kings_court=5,
        units=((A.HIGHGARDEN, (K, F)), (A.DORNISH_MARCHES, (F,)), (A.REDWYNE_STRAITS, (S,))),
    ),
    House.MARTELL: HouseSetup(
        home=A.SUNSPEAR, supply=2, min_players=6,
        iron_throne=4, fiefdoms=3, kings_court=3,
        units=((A.SUNSPEAR, (K, F)), (A.SALT_SHORE, (F,)), (A.SEA_OF_DORNE, (S,))),
    ),
}

# Neutral forces present at every player count
NEUTRAL_GARRISONS = {
    A.KINGS_LANDING: 5,
    A.THE_EYRIE: 6,
}


def houses_for(player_count: int) -> list[House]:
    """Houses playing at a player count, in canonical order."""
    return [h for h, s in HOUSE_SETUPS.items() if s.min_players <= player_count]


def create_initial_state(
    player_count: int,
    seed: int,
    config: RulesConfig | None = None,
) -> GameState:
    """
    Set up a new game.

    Args:
        player_count: Number of houses (3-6)
        seed: Non-negative 64-bit integer seeding every shuffle and draw
        config: Rules constants (defaults to the printed rules)

    Returns:
        Initial GameState, positioned at round 1 Planning with no decision
        pending yet; call advance() to get the first decision.

    Raises:
        InvalidPlayerCount, InvalidSeed
    """
    if isinstance(player_count, bool) or not isinstance(player_count, int):
        raise InvalidPlayerCount(player_count)
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise InvalidPlayerCount(player_count)
    if isinstance(seed, bool) or not isinstance(seed, int) or not 0 <= seed < MAX_SEED:
        raise InvalidSeed(seed)

    config = config or RulesConfig()
    playing = houses_for(player_count)

    state = GameState(
        seed=seed,
        houses=_create_houses(playing),
        areas=[AreaState() for _ in range(NUM_AREAS)],
        tracks=_create_tracks(playing),
        config=config,
        round=1,
        phase=Phase.PLANNING,
        wildling_threat=config.starting_threat,
    )

    _place_starting_units(state, playing)
    _place_garrisons(state, playing)
    _create_decks(state)

    logger.debug(f"Created {player_count}-player game with seed {seed}: {[h.value for h in playing]}")
    return state


def _create_houses(playing: list[House]) -> dict[House, HouseState]:
    return {
        house: HouseState(
            house=house,
            supply=HOUSE_SETUPS[house].supply,
            power=STARTING_POWER,
            pool=UnitPool(),
            hand=CATALOG.house_card_ids(house),
            discards=[],
        )
        for house in playing
    }


def _create_tracks(playing: list[House]) -> dict[Track, list[House]]:
    def ordered(attr: str) -> list[House]:
        return sorted(playing, key=lambda h: getattr(HOUSE_SETUPS[h], attr))

    return {
        Track.IRON_THRONE: ordered("iron_throne"),
        Track.FIEFDOMS: ordered("fiefdoms"),
        Track.KINGS_COURT: ordered("kings_court"),
    }


def _place_starting_units(state: GameState, playing: list[House]) -> None:
    for house in playing:
        setup = HOUSE_SETUPS[house]
        for area_id, unit_types in setup.units:
            for unit_type in unit_types:
                state.add_unit(area_id, unit_type, house)
            state.areas[area_id].house = house
        state.areas[setup.home].house = house
        port = BOARD.port_of(setup.home)
        if port is not None:
            state.areas[port].house = house


def _place_garrisons(state: GameState, playing: list[House]) -> None:
    blocked = BOARD.blocked_areas(len(playing))
    for house, setup in HOUSE_SETUPS.items():
        if house in playing:
            state.areas[setup.home].garrison = Garrison(house=house, strength=HOME_GARRISON)
        elif setup.home not in blocked:
            state.areas[setup.home].garrison = Garrison(house=None, strength=NEUTRAL_HOME_GARRISON)
    for area_id, strength in NEUTRAL_GARRISONS.items():
        state.areas[area_id].garrison = Garrison(house=None, strength=strength)


def _create_decks(state: GameState) -> None:
    for index in range(3):
        deck = CATALOG.westeros_deck(index + 1)
        shuffle(state, deck)
        state.westeros_decks[index] = deck
    wildlings = CATALOG.wildling_deck()
    shuffle(state, wildlings)
    state.wildling_deck = wildlings
