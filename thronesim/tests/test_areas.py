"""
Tests for the board graph.

Tests:
- Area table shape
- Symmetric adjacency
- Ports
- Player-count blocking
"""

import pytest

from ..games.thrones import areas as A
from ..games.thrones.areas import BOARD, NUM_AREAS, AreaKind


class TestAreaTable:
    """Tests for the static area definitions."""

    def test_area_count(self):
        """The board has 59 areas."""
        assert NUM_AREAS == 59
        assert len(BOARD) == NUM_AREAS

    def test_kinds(self):
        """Lands, seas and ports are laid out in id blocks."""
        kinds = [area.kind for area in BOARD]
        assert kinds.count(AreaKind.LAND) == 38
        assert kinds.count(AreaKind.SEA) == 12
        assert kinds.count(AreaKind.PORT) == 9

    def test_find_by_name(self):
        """Areas can be looked up by name, case-insensitively."""
        assert BOARD.find("Winterfell") == A.WINTERFELL
        assert BOARD.find("king's landing") == A.KINGS_LANDING

    def test_find_unknown(self):
        """Unknown names raise KeyError."""
        with pytest.raises(KeyError):
            BOARD.find("Valyria")

    def test_strongholds_muster_two(self):
        """Strongholds give 2 muster points, castles 1."""
        assert BOARD.area(A.WINTERFELL).muster_points == 2
        assert BOARD.area(A.WHITE_HARBOR).muster_points == 1
        assert BOARD.area(A.KARHOLD).muster_points == 0
        assert BOARD.muster_points(A.RIVERRUN) == 2


class TestAdjacency:
    """Tests for the adjacency closure."""

    def test_symmetric(self):
        """Adjacency is symmetric for every pair."""
        for area in BOARD:
            for other in BOARD.neighbors(area.id):
                assert area.id in BOARD.neighbors(other), (area.name, BOARD.name(other))

    def test_no_self_loops(self):
        for area in BOARD:
            assert area.id not in BOARD.neighbors(area.id)

    def test_every_area_connected(self):
        """No area is isolated."""
        for area in BOARD:
            assert BOARD.neighbors(area.id)

    def test_island_strongholds(self):
        """Pyke and Dragonstone only touch the sea and their ports."""
        assert BOARD.land_neighbors(A.PYKE) == []
        assert BOARD.land_neighbors(A.DRAGONSTONE) == []
        assert A.PYKE_PORT in BOARD.neighbors(A.PYKE)


class TestPorts:
    """Tests for port links."""

    def test_port_touches_only_land_and_sea(self):
        """A port is adjacent to exactly its land and its sea."""
        for area in BOARD:
            if area.kind != AreaKind.PORT:
                continue
            assert set(BOARD.neighbors(area.id)) == {area.port_land, area.port_sea}

    def test_port_lookup(self):
        assert BOARD.port_of(A.WINTERFELL) == A.WINTERFELL_PORT
        assert BOARD.land_of(A.WINTERFELL_PORT) == A.WINTERFELL
        assert BOARD.sea_of(A.WINTERFELL_PORT) == A.BAY_OF_ICE
        assert BOARD.port_of(A.KARHOLD) is None

    def test_ports_not_adjacent_to_other_lands(self):
        """Declaring a port on a land's list does not create extra links."""
        assert A.WINTERFELL_PORT not in BOARD.neighbors(A.KARHOLD)


class TestBlocking:
    """Tests for areas out of play."""

    def test_three_player_south_blocked(self):
        assert BOARD.is_blocked(A.SUNSPEAR, 3)
        assert BOARD.is_blocked(A.HIGHGARDEN, 3)
        assert not BOARD.is_blocked(A.WINTERFELL, 3)

    @pytest.mark.parametrize("player_count", [4, 5, 6])
    def test_nothing_blocked_with_more_players(self, player_count):
        assert BOARD.blocked_areas(player_count) == frozenset()
