"""
Grid representation for resolved terrain maps.

A grid is a fixed-size 2D array of tile ids stored row-major:

    grid.cells[row, col] -> tile id
    grid.tile_at(row, col) -> Tile

Key concepts:
- GridState: immutable snapshot (one element of a simulation history)
- Direction: the four cardinal directions used by adjacency rules
- 8-neighborhood: the up to eight cells around a cell, without wraparound
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple
import numpy as np

from .errors import InvalidArgument
from .tiles import Tile


class Direction(Enum):
    """Cardinal directions as (row, col) offsets."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def offset(self) -> Tuple[int, int]:
        return _OFFSETS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, value) -> "Direction":
        """Accept a Direction or its name ("up", "UP", ...)."""
        if isinstance(value, Direction):
            return value
        return cls(str(value).lower())


_OFFSETS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


def validate_dimensions(width: int, height: int) -> None:
    """Raise InvalidArgument unless both dimensions are positive integers."""
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidArgument(f"Grid dimensions must be integers, got {value!r}")
    if width <= 0 or height <= 0:
        raise InvalidArgument(f"Grid dimensions must be positive, got {width}x{height}")


@dataclass
class GridState:
    """
    Immutable snapshot of a resolved grid.

    Attributes:
        cells: Tile ids, shape (height, width), read-only
        step: Simulation step this snapshot belongs to (0 = WFC output)
    """
    cells: np.ndarray
    step: int = 0

    def __post_init__(self):
        cells = np.array(self.cells, dtype=np.int32)
        if cells.ndim != 2:
            raise InvalidArgument(f"Grid must be 2D, got shape {cells.shape}")
        validate_dimensions(cells.shape[1], cells.shape[0])
        cells.flags.writeable = False
        self.cells = cells

    @classmethod
    def from_tiles(cls, rows: Sequence[Sequence[Tile]], step: int = 0) -> "GridState":
        """Build a grid from nested rows of Tile objects."""
        return cls(cells=[[tile.id for tile in row] for row in rows], step=step)

    @classmethod
    def filled(cls, tile: Tile, width: int, height: int) -> "GridState":
        validate_dimensions(width, height)
        return cls(cells=np.full((height, width), tile.id, dtype=np.int32))

    @property
    def height(self) -> int:
        return self.cells.shape[0]

    @property
    def width(self) -> int:
        return self.cells.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.cells.shape

    @property
    def size(self) -> int:
        return self.cells.size

    def tile_at(self, row: int, col: int) -> Tile:
        return Tile(int(self.cells[row, col]))

    def __getitem__(self, index: Tuple[int, int]) -> Tile:
        row, col = index
        return self.tile_at(row, col)

    def rows(self) -> Iterator[List[Tile]]:
        """Iterate rows top to bottom, each row left to right."""
        for row in self.cells:
            yield [Tile(int(v)) for v in row]

    def to_tiles(self) -> List[List[Tile]]:
        return list(self.rows())

    def tiles(self) -> List[Tile]:
        """Distinct tiles present in the grid, ordered by id."""
        return [Tile(int(v)) for v in np.unique(self.cells)]

    def counts(self) -> Dict[Tile, int]:
        """Number of cells holding each tile."""
        values, counts = np.unique(self.cells, return_counts=True)
        return {Tile(int(v)): int(c) for v, c in zip(values, counts)}

    def fractions(self, tiles: Iterable[Tile]) -> Dict[Tile, float]:
        """Fraction of cells holding each of the given tiles."""
        return {tile: float(np.mean(self.cells == tile.id)) for tile in tiles}

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def neighbors8(self, row: int, col: int) -> List[Tuple[int, int]]:
        """In-bounds positions of the 8-neighborhood (no wraparound)."""
        positions = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                r, c = row + dr, col + dc
                if self.in_bounds(r, c):
                    positions.append((r, c))
        return positions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridState):
            return False
        return np.array_equal(self.cells, other.cells)

    def __hash__(self) -> int:
        return hash((self.cells.shape, self.cells.tobytes()))

    def __repr__(self) -> str:
        return f"GridState({self.width}x{self.height}, step={self.step})"
