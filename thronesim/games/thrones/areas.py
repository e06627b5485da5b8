"""
Board areas - Static map topology.

The map has three kinds of area:
- Land (0-37): may hold a castle or stronghold, supply barrels, crowns
- Sea (38-49)
- Port (50-58): linked to exactly one land area and one sea area

Adjacency is declared once per area below and closed symmetrically when
the AreaGraph is built. The graph is a process-wide read-only singleton
(BOARD).
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class AreaKind(Enum):
    LAND = "land"
    SEA = "sea"
    PORT = "port"


@dataclass(frozen=True)
class AreaDef:
    """Static description of one area."""
    id: int
    name: str
    kind: AreaKind
    castle: bool = False
    stronghold: bool = False
    supply: int = 0
    power: int = 0
    adjacent: tuple[int, ...] = ()
    port_land: int | None = None
    port_sea: int | None = None

    @property
    def has_castle(self) -> bool:
        """Castle or stronghold."""
        return self.castle or self.stronghold

    @property
    def muster_points(self) -> int:
        if self.stronghold:
            return 2
        if self.castle:
            return 1
        return 0


# Lands - The North
CASTLE_BLACK = 0
KARHOLD = 1
THE_STONY_SHORE = 2
WINTERFELL = 3
WHITE_HARBOR = 4
WIDOWS_WATCH = 5
# Lands - Riverlands and the Vale
MOAT_CAILIN = 6
GREYWATER_WATCH = 7
FLINTS_FINGER = 8
SEAGARD = 9
THE_TWINS = 10
THE_FINGERS = 11
MOUNTAINS_OF_THE_MOON = 12
THE_EYRIE = 13
# Lands - Westerlands
RIVERRUN = 14
LANNISPORT = 15
STONEY_SEPT = 16
SEAROAD_MARCHES = 17
# Lands - Crownlands
HARRENHAL = 18
CRACKCLAW_POINT = 19
KINGS_LANDING = 20
BLACKWATER = 21
# Lands - The South
KINGSWOOD = 22
STORMS_END = 23
HIGHGARDEN = 24
THE_REACH = 25
DORNISH_MARCHES = 26
OLDTOWN = 27
THREE_TOWERS = 28
# Lands - Dorne
THE_BONEWAY = 29
PRINCES_PASS = 30
YRONWOOD = 31
STARFALL = 32
SALT_SHORE = 33
SUNSPEAR = 34
# Lands - Islands
PYKE = 35
DRAGONSTONE = 36
THE_ARBOR = 37
# Seas
BAY_OF_ICE = 38
THE_SHIVERING_SEA = 39
SUNSET_SEA = 40
IRONMANS_BAY = 41
THE_GOLDEN_SOUND = 42
THE_NARROW_SEA = 43
BLACKWATER_BAY = 44
SHIPBREAKER_BAY = 45
REDWYNE_STRAITS = 46
WEST_SUMMER_SEA = 47
EAST_SUMMER_SEA = 48
SEA_OF_DORNE = 49
# Ports
WINTERFELL_PORT = 50
WHITE_HARBOR_PORT = 51
PYKE_PORT = 52
LANNISPORT_PORT = 53
DRAGONSTONE_PORT = 54
STORMS_END_PORT = 55
HIGHGARDEN_PORT = 56
OLDTOWN_PORT = 57
SUNSPEAR_PORT = 58

NUM_AREAS = 59


def _land(id, name, adjacent, castle=False, stronghold=False, supply=0, power=0) -> AreaDef:
    return AreaDef(
        id=id, name=name, kind=AreaKind.LAND, castle=castle, stronghold=stronghold,
        supply=supply, power=power, adjacent=tuple(adjacent),
    )


def _sea(id, name, adjacent) -> AreaDef:
    return AreaDef(id=id, name=name, kind=AreaKind.SEA, adjacent=tuple(adjacent))


def _port(id, name, land, sea) -> AreaDef:
    return AreaDef(
        id=id, name=name, kind=AreaKind.PORT, adjacent=(land, sea),
        port_land=land, port_sea=sea,
    )


AREA_DEFS: tuple[AreaDef, ...] = (
    _land(CASTLE_BLACK, "Castle Black", [WINTERFELL, KARHOLD, BAY_OF_ICE, THE_SHIVERING_SEA], power=1),
    _land(KARHOLD, "Karhold", [CASTLE_BLACK, WINTERFELL, THE_SHIVERING_SEA], power=1),
    _land(THE_STONY_SHORE, "The Stony Shore", [WINTERFELL, BAY_OF_ICE], supply=1),
    _land(
        WINTERFELL, "Winterfell",
        [CASTLE_BLACK, KARHOLD, THE_STONY_SHORE, WHITE_HARBOR, MOAT_CAILIN, BAY_OF_ICE, THE_SHIVERING_SEA],
        stronghold=True, supply=1, power=1,
    ),
    _land(
        WHITE_HARBOR, "White Harbor",
        [WINTERFELL, MOAT_CAILIN, WIDOWS_WATCH, THE_NARROW_SEA, THE_SHIVERING_SEA],
        castle=True,
    ),
    _land(WIDOWS_WATCH, "Widow's Watch", [WHITE_HARBOR, THE_NARROW_SEA, THE_SHIVERING_SEA], supply=1),
    _land(
        MOAT_CAILIN, "Moat Cailin",
        [WINTERFELL, WHITE_HARBOR, GREYWATER_WATCH, SEAGARD, THE_TWINS, THE_NARROW_SEA],
        castle=True,
    ),
    _land(
        GREYWATER_WATCH, "Greywater Watch",
        [MOAT_CAILIN, SEAGARD, FLINTS_FINGER, BAY_OF_ICE, IRONMANS_BAY],
        supply=1,
    ),
    _land(FLINTS_FINGER, "Flint's Finger", [GREYWATER_WATCH, BAY_OF_ICE, IRONMANS_BAY, SUNSET_SEA], castle=True),
    _land(
        SEAGARD, "Seagard",
        [MOAT_CAILIN, GREYWATER_WATCH, THE_TWINS, RIVERRUN, IRONMANS_BAY],
        stronghold=True, supply=1, power=1,
    ),
    _land(
        THE_TWINS, "The Twins",
        [MOAT_CAILIN, SEAGARD, THE_FINGERS, MOUNTAINS_OF_THE_MOON, THE_NARROW_SEA],
        power=1,
    ),
    _land(THE_FINGERS, "The Fingers", [THE_TWINS, MOUNTAINS_OF_THE_MOON, THE_NARROW_SEA], supply=1),
    _land(
        MOUNTAINS_OF_THE_MOON, "The Mountains of the Moon",
        [THE_TWINS, THE_FINGERS, THE_EYRIE, CRACKCLAW_POINT, THE_NARROW_SEA],
        supply=1,
    ),
    _land(THE_EYRIE, "The Eyrie", [MOUNTAINS_OF_THE_MOON, THE_NARROW_SEA], castle=True, supply=1, power=1),
    _land(
        RIVERRUN, "Riverrun",
        [SEAGARD, LANNISPORT, STONEY_SEPT, HARRENHAL, IRONMANS_BAY, THE_GOLDEN_SOUND],
        stronghold=True, supply=1, power=1,
    ),
    _land(
        LANNISPORT, "Lannisport",
        [RIVERRUN, STONEY_SEPT, SEAROAD_MARCHES, THE_GOLDEN_SOUND],
        stronghold=True, supply=2,
    ),
    _land(
        STONEY_SEPT, "Stoney Sept",
        [RIVERRUN, LANNISPORT, HARRENHAL, SEAROAD_MARCHES, BLACKWATER],
        power=1,
    ),
    _land(
        SEAROAD_MARCHES, "Searoad Marches",
        [LANNISPORT, STONEY_SEPT, HIGHGARDEN, BLACKWATER, THE_REACH, SUNSET_SEA, THE_GOLDEN_SOUND, WEST_SUMMER_SEA],
        supply=1,
    ),
    _land(HARRENHAL, "Harrenhal", [RIVERRUN, STONEY_SEPT, CRACKCLAW_POINT, KINGS_LANDING], castle=True, power=1),
    _land(
        CRACKCLAW_POINT, "Crackclaw Point",
        [HARRENHAL, KINGS_LANDING, MOUNTAINS_OF_THE_MOON, BLACKWATER_BAY, SHIPBREAKER_BAY, THE_NARROW_SEA],
        castle=True,
    ),
    _land(
        KINGS_LANDING, "King's Landing",
        [HARRENHAL, CRACKCLAW_POINT, BLACKWATER, KINGSWOOD, THE_REACH, BLACKWATER_BAY],
        stronghold=True, power=2,
    ),
    _land(
        BLACKWATER, "Blackwater",
        [KINGS_LANDING, STONEY_SEPT, SEAROAD_MARCHES, CRACKCLAW_POINT, THE_REACH, KINGSWOOD,
         THE_BONEWAY, DORNISH_MARCHES],
        supply=2,
    ),
    _land(
        KINGSWOOD, "Kingswood",
        [KINGS_LANDING, BLACKWATER, STORMS_END, THE_BONEWAY, THE_REACH, BLACKWATER_BAY, SHIPBREAKER_BAY],
        supply=1, power=1,
    ),
    _land(
        STORMS_END, "Storm's End",
        [KINGSWOOD, THE_BONEWAY, EAST_SUMMER_SEA, SEA_OF_DORNE, SHIPBREAKER_BAY],
        castle=True,
    ),
    _land(
        HIGHGARDEN, "Highgarden",
        [SEAROAD_MARCHES, THE_REACH, DORNISH_MARCHES, OLDTOWN, REDWYNE_STRAITS, WEST_SUMMER_SEA],
        stronghold=True, supply=2,
    ),
    _land(
        THE_REACH, "The Reach",
        [HIGHGARDEN, SEAROAD_MARCHES, BLACKWATER, KINGS_LANDING, KINGSWOOD, DORNISH_MARCHES, THE_BONEWAY, OLDTOWN],
        castle=True,
    ),
    _land(
        DORNISH_MARCHES, "Dornish Marches",
        [HIGHGARDEN, THE_REACH, BLACKWATER, THE_BONEWAY, PRINCES_PASS, OLDTOWN, THREE_TOWERS],
        power=1,
    ),
    _land(
        OLDTOWN, "Oldtown",
        [HIGHGARDEN, THE_REACH, DORNISH_MARCHES, THREE_TOWERS, REDWYNE_STRAITS],
        stronghold=True,
    ),
    _land(
        THREE_TOWERS, "Three Towers",
        [OLDTOWN, DORNISH_MARCHES, PRINCES_PASS, REDWYNE_STRAITS, WEST_SUMMER_SEA],
        supply=1,
    ),
    _land(
        THE_BONEWAY, "The Boneway",
        [DORNISH_MARCHES, PRINCES_PASS, THE_REACH, KINGSWOOD, BLACKWATER, STORMS_END, YRONWOOD, SEA_OF_DORNE],
        power=1,
    ),
    _land(
        PRINCES_PASS, "Prince's Pass",
        [DORNISH_MARCHES, THE_BONEWAY, THREE_TOWERS, STARFALL, YRONWOOD],
        supply=1, power=1,
    ),
    _land(
        YRONWOOD, "Yronwood",
        [PRINCES_PASS, THE_BONEWAY, STARFALL, SALT_SHORE, SUNSPEAR, SEA_OF_DORNE],
        castle=True,
    ),
    _land(
        STARFALL, "Starfall",
        [PRINCES_PASS, YRONWOOD, SALT_SHORE, EAST_SUMMER_SEA, WEST_SUMMER_SEA],
        castle=True, supply=1,
    ),
    _land(SALT_SHORE, "Salt Shore", [YRONWOOD, STARFALL, SUNSPEAR, EAST_SUMMER_SEA], supply=1),
    _land(
        SUNSPEAR, "Sunspear",
        [YRONWOOD, SALT_SHORE, EAST_SUMMER_SEA, SEA_OF_DORNE],
        stronghold=True, supply=1, power=1,
    ),
    _land(PYKE, "Pyke", [IRONMANS_BAY], stronghold=True, supply=1, power=1),
    _land(DRAGONSTONE, "Dragonstone", [SHIPBREAKER_BAY], stronghold=True, supply=1, power=1),
    _land(THE_ARBOR, "The Arbor", [REDWYNE_STRAITS, WEST_SUMMER_SEA], power=1),

    _sea(BAY_OF_ICE, "Bay of Ice",
         [CASTLE_BLACK, THE_STONY_SHORE, WINTERFELL, FLINTS_FINGER, GREYWATER_WATCH, SUNSET_SEA]),
    _sea(THE_SHIVERING_SEA, "The Shivering Sea",
         [CASTLE_BLACK, KARHOLD, WINTERFELL, WHITE_HARBOR, WIDOWS_WATCH, THE_NARROW_SEA]),
    _sea(SUNSET_SEA, "Sunset Sea",
         [FLINTS_FINGER, SEAROAD_MARCHES, BAY_OF_ICE, IRONMANS_BAY, THE_GOLDEN_SOUND, WEST_SUMMER_SEA]),
    _sea(IRONMANS_BAY, "Ironman's Bay",
         [PYKE, FLINTS_FINGER, GREYWATER_WATCH, SEAGARD, RIVERRUN, SUNSET_SEA, THE_GOLDEN_SOUND]),
    _sea(THE_GOLDEN_SOUND, "The Golden Sound",
         [LANNISPORT, RIVERRUN, SEAROAD_MARCHES, IRONMANS_BAY, SUNSET_SEA]),
    _sea(THE_NARROW_SEA, "The Narrow Sea",
         [MOAT_CAILIN, WHITE_HARBOR, WIDOWS_WATCH, THE_TWINS, THE_FINGERS, MOUNTAINS_OF_THE_MOON,
          THE_EYRIE, CRACKCLAW_POINT, THE_SHIVERING_SEA, SHIPBREAKER_BAY]),
    _sea(BLACKWATER_BAY, "Blackwater Bay",
         [KINGS_LANDING, CRACKCLAW_POINT, KINGSWOOD, SHIPBREAKER_BAY]),
    _sea(SHIPBREAKER_BAY, "Shipbreaker Bay",
         [DRAGONSTONE, CRACKCLAW_POINT, KINGSWOOD, STORMS_END, THE_NARROW_SEA, BLACKWATER_BAY, EAST_SUMMER_SEA]),
    _sea(REDWYNE_STRAITS, "Redwyne Straits",
         [HIGHGARDEN, OLDTOWN, THE_ARBOR, THREE_TOWERS, WEST_SUMMER_SEA]),
    _sea(WEST_SUMMER_SEA, "West Summer Sea",
         [HIGHGARDEN, SEAROAD_MARCHES, THREE_TOWERS, THE_ARBOR, STARFALL, SUNSET_SEA, REDWYNE_STRAITS,
          EAST_SUMMER_SEA]),
    _sea(EAST_SUMMER_SEA, "East Summer Sea",
         [SUNSPEAR, SALT_SHORE, STARFALL, STORMS_END, WEST_SUMMER_SEA, SEA_OF_DORNE, SHIPBREAKER_BAY]),
    _sea(SEA_OF_DORNE, "Sea of Dorne",
         [SUNSPEAR, YRONWOOD, STORMS_END, THE_BONEWAY, EAST_SUMMER_SEA]),

    _port(WINTERFELL_PORT, "Winterfell Port", WINTERFELL, BAY_OF_ICE),
    _port(WHITE_HARBOR_PORT, "White Harbor Port", WHITE_HARBOR, THE_NARROW_SEA),
    _port(PYKE_PORT, "Pyke Port", PYKE, IRONMANS_BAY),
    _port(LANNISPORT_PORT, "Lannisport Port", LANNISPORT, THE_GOLDEN_SOUND),
    _port(DRAGONSTONE_PORT, "Dragonstone Port", DRAGONSTONE, SHIPBREAKER_BAY),
    _port(STORMS_END_PORT, "Storm's End Port", STORMS_END, SHIPBREAKER_BAY),
    _port(HIGHGARDEN_PORT, "Highgarden Port", HIGHGARDEN, REDWYNE_STRAITS),
    _port(OLDTOWN_PORT, "Oldtown Port", OLDTOWN, REDWYNE_STRAITS),
    _port(SUNSPEAR_PORT, "Sunspear Port", SUNSPEAR, EAST_SUMMER_SEA),
)

# Southern areas out of play in a 3-player game
THREE_PLAYER_BLOCKED = frozenset({
    SUNSPEAR, SALT_SHORE, STARFALL, YRONWOOD, PRINCES_PASS,
    THE_BONEWAY, THREE_TOWERS, DORNISH_MARCHES,
    HIGHGARDEN, OLDTOWN, THE_ARBOR,
    SEA_OF_DORNE, EAST_SUMMER_SEA, WEST_SUMMER_SEA, REDWYNE_STRAITS,
    SUNSPEAR_PORT, HIGHGARDEN_PORT, OLDTOWN_PORT,
})


class AreaGraph:
    """
    Read-only board topology.

    Adjacency is the symmetric closure of the declared lists. A port is
    adjacent to its own land and its own sea and nothing else.
    """

    def __init__(self, defs: tuple[AreaDef, ...]):
        for index, area in enumerate(defs):
            if area.id != index:
                raise ValueError(f"Area table out of order at index {index}: {area.name}")
        self._defs = defs
        neighbors: list[set[int]] = [set() for _ in defs]
        for area in defs:
            for other in area.adjacent:
                if area.kind == AreaKind.PORT or defs[other].kind != AreaKind.PORT:
                    neighbors[area.id].add(other)
                    neighbors[other].add(area.id)
        self._neighbors = tuple(tuple(sorted(n)) for n in neighbors)
        self._port_of = {
            area.port_land: area.id for area in defs if area.kind == AreaKind.PORT
        }

    def __len__(self) -> int:
        return len(self._defs)

    def __iter__(self):
        return iter(self._defs)

    def area(self, area_id: int) -> AreaDef:
        return self._defs[area_id]

    def name(self, area_id: int) -> str:
        return self._defs[area_id].name

    def find(self, name: str) -> int:
        """Area id by (case-insensitive) name."""
        wanted = name.lower()
        for area in self._defs:
            if area.name.lower() == wanted:
                return area.id
        raise KeyError(name)

    def is_land(self, area_id: int) -> bool:
        return self._defs[area_id].kind == AreaKind.LAND

    def is_sea(self, area_id: int) -> bool:
        return self._defs[area_id].kind == AreaKind.SEA

    def is_port(self, area_id: int) -> bool:
        return self._defs[area_id].kind == AreaKind.PORT

    def neighbors(self, area_id: int) -> tuple[int, ...]:
        """All adjacent areas, any kind."""
        return self._neighbors[area_id]

    def land_neighbors(self, area_id: int) -> list[int]:
        return [n for n in self._neighbors[area_id] if self.is_land(n)]

    def sea_neighbors(self, area_id: int) -> list[int]:
        return [n for n in self._neighbors[area_id] if self.is_sea(n)]

    def port_neighbors(self, area_id: int) -> list[int]:
        return [n for n in self._neighbors[area_id] if self.is_port(n)]

    def port_of(self, land_id: int) -> int | None:
        return self._port_of.get(land_id)

    def land_of(self, port_id: int) -> int | None:
        return self._defs[port_id].port_land

    def sea_of(self, port_id: int) -> int | None:
        return self._defs[port_id].port_sea

    def muster_points(self, area_id: int) -> int:
        """Stronghold 2, castle 1, otherwise 0."""
        return self._defs[area_id].muster_points

    def blocked_areas(self, player_count: int) -> frozenset[int]:
        if player_count == 3:
            return THREE_PLAYER_BLOCKED
        return frozenset()

    def is_blocked(self, area_id: int, player_count: int) -> bool:
        return area_id in self.blocked_areas(player_count)


BOARD = AreaGraph(AREA_DEFS)
