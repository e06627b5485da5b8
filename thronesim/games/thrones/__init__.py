"""
A Game of Thrones (second edition) - board, cards and setup.

Setup is not re-exported here: it imports the engine's rule helpers, which
themselves depend on the board and card tables in this package.
"""

from .areas import AreaDef, AreaGraph, AreaKind, BOARD, NUM_AREAS
from .cards import AbilityTag, CardCatalog, CATALOG, HouseCard

__all__ = [
    "AreaDef",
    "AreaGraph",
    "AreaKind",
    "BOARD",
    "NUM_AREAS",
    "AbilityTag",
    "CardCatalog",
    "CATALOG",
    "HouseCard",
]
