"""
Games module - Game-specific static data.

Each game has its own subpackage with:
- Board definition (areas and adjacency)
- Card definitions
- Setup (starting positions and decks)
"""
