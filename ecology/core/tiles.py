"""
Tile kinds and the tile registry.

A tile is a terrain category (water, sand, grass, forest, ...) represented
by a stable integer id. The registry maps ids to names and display colors:

    registry = TileRegistry()
    mountain = registry.add_tile_type("mountain", "#7f8c8d")
    registry.tile_name(mountain)   # "mountain"

The simulation core only ever compares and hashes tiles. Names and colors
are used by visualization and by the command line.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import NotFound


@dataclass(frozen=True, order=True)
class Tile:
    """
    Opaque terrain kind identified by an integer id.

    Equality, hashing and ordering all use the id only.
    """
    id: int

    def __repr__(self) -> str:
        return DEFAULT_REGISTRY.describe(self)


class TileRegistry:
    """
    Registry of tile ids, names and display colors.

    Ids are assigned sequentially starting at 1. Registering a name that
    already exists gives it a new id; the old id keeps its name for display
    but `tile_from_name` resolves to the newest registration.
    """

    def __init__(self):
        self._names: Dict[int, str] = {}
        self._colors: Dict[int, str] = {}
        self._instances: Dict[str, Tile] = {}
        self._next_id = 1

    def add_tile(self, name: str) -> int:
        """Register a new tile type and return its id."""
        tile_id = self._next_id
        self._next_id += 1

        self._names[tile_id] = name
        self._instances[name] = Tile(tile_id)
        return tile_id

    def add_tile_color(self, tile_id: int, color: str) -> None:
        """Associate a display color (any matplotlib color spec) with an id."""
        if tile_id not in self._names:
            raise NotFound(tile_id)
        self._colors[tile_id] = color

    def add_tile_type(self, name: str, color: str) -> Tile:
        """Register a tile with a color and return the Tile."""
        tile_id = self.add_tile(name)
        self.add_tile_color(tile_id, color)
        return self._instances[name]

    def tile_from_name(self, name: str) -> Tile:
        if name not in self._instances:
            raise NotFound(name)
        return self._instances[name]

    def tile_from_id(self, tile_id: int) -> Tile:
        if tile_id not in self._names:
            raise NotFound(tile_id)
        return Tile(tile_id)

    def tile_name(self, tile: Tile) -> str:
        if tile.id not in self._names:
            raise NotFound(tile.id)
        return self._names[tile.id]

    def tile_color(self, tile: Tile) -> str:
        if tile.id not in self._colors:
            raise NotFound(tile.id, f"No color registered for tile id {tile.id}")
        return self._colors[tile.id]

    def resolve(self, key) -> Tile:
        """Accept a Tile, a registered name or an id and return the Tile."""
        if isinstance(key, Tile):
            return key
        if isinstance(key, str):
            return self.tile_from_name(key)
        return self.tile_from_id(int(key))

    @property
    def tiles(self) -> List[Tile]:
        """All registered tiles ordered by id."""
        return [Tile(i) for i in sorted(self._names)]

    def describe(self, tile: Tile) -> str:
        name = self._names.get(tile.id)
        if name is None:
            return f"Tile(id={tile.id})"
        return f"Tile({name})"

    def __contains__(self, tile: object) -> bool:
        return isinstance(tile, Tile) and tile.id in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"TileRegistry({len(self)} tiles)"


# ===== Default registry with the base terrain kinds =====

DEFAULT_REGISTRY = TileRegistry()

WATER = DEFAULT_REGISTRY.add_tile_type("water", "royalblue")
SAND = DEFAULT_REGISTRY.add_tile_type("sand", "goldenrod")
GRASS = DEFAULT_REGISTRY.add_tile_type("grass", "yellowgreen")
FOREST = DEFAULT_REGISTRY.add_tile_type("forest", "forestgreen")

BASE_TILES = (WATER, SAND, GRASS, FOREST)


def add_tile_type(name: str, color: str, registry: Optional[TileRegistry] = None) -> Tile:
    """Register a new tile kind in the default (or given) registry."""
    return (registry or DEFAULT_REGISTRY).add_tile_type(name, color)


def tile_from_name(name: str) -> Tile:
    return DEFAULT_REGISTRY.tile_from_name(name)


def tile_from_id(tile_id: int) -> Tile:
    return DEFAULT_REGISTRY.tile_from_id(tile_id)


def get_tile_name(tile: Tile) -> str:
    return DEFAULT_REGISTRY.tile_name(tile)


def get_tile_color(tile: Tile) -> str:
    return DEFAULT_REGISTRY.tile_color(tile)
