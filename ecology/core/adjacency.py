"""
Adjacency rules for wave function collapse.

The rule table maps (tile, direction) to the set of tiles permitted as the
neighbor of `tile` on that side:

    table.allowed_neighbors(WATER, Direction.DOWN)  # {WATER}

Key properties:
- Permissive default: a missing (tile, direction) entry allows every tile
- No implicit symmetrization: asymmetric tables are honored as authored
- Copy on install: the table never aliases caller data
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence
import numpy as np

from .grid import Direction, GridState
from .tiles import Tile, WATER, SAND, GRASS, FOREST, BASE_TILES

logger = logging.getLogger(__name__)


RuleMapping = Mapping[Tile, Mapping[object, Iterable[Tile]]]


DEFAULT_ADJACENCY_RULES: Dict[Tile, Dict[Direction, List[Tile]]] = {
    WATER: {
        Direction.UP: [WATER, SAND],
        Direction.DOWN: [WATER],
        Direction.LEFT: [WATER, SAND],
        Direction.RIGHT: [WATER, SAND],
    },
    SAND: {
        Direction.UP: [SAND, GRASS],
        Direction.DOWN: [WATER, SAND],
        Direction.LEFT: [WATER, SAND, GRASS],
        Direction.RIGHT: [WATER, SAND, GRASS],
    },
    GRASS: {
        Direction.UP: [GRASS, FOREST],
        Direction.DOWN: [SAND, GRASS],
        Direction.LEFT: [SAND, GRASS, FOREST],
        Direction.RIGHT: [SAND, GRASS, FOREST],
    },
    FOREST: {
        Direction.UP: [FOREST],
        Direction.DOWN: [GRASS, FOREST],
        Direction.LEFT: [GRASS, FOREST],
        Direction.RIGHT: [GRASS, FOREST],
    },
}


@dataclass(frozen=True)
class Violation:
    """An edge of a resolved grid that breaks the adjacency rules."""
    row: int
    col: int
    direction: Direction
    tile: Tile
    neighbor: Tile


class AdjacencyRuleTable:
    """
    Directional adjacency constraints between tile kinds.

    Example:
        table = AdjacencyRuleTable()          # built-in defaults
        table.install({WATER: {"down": [WATER, SAND]}})
        table.allowed_neighbors(WATER, Direction.DOWN)  # {WATER, SAND}
        table.allowed_neighbors(SAND, Direction.UP)     # full universe
        table.reset()                         # back to defaults
    """

    def __init__(
        self,
        rules: Optional[RuleMapping] = None,
        universe: Optional[Sequence[Tile]] = None,
    ):
        """
        Initialize rule table.

        Args:
            rules: Initial rules (built-in defaults if None)
            universe: Tiles allowed where no rule exists (base tiles if None)
        """
        self.universe: FrozenSet[Tile] = frozenset(universe if universe is not None else BASE_TILES)
        self._rules: Dict[Tile, Dict[Direction, FrozenSet[Tile]]] = {}
        if rules is None:
            self.reset()
        else:
            self.install(rules)

    def install(self, rules: RuleMapping) -> None:
        """
        Replace the active table with a copy of `rules`.

        Direction keys may be Direction members or their names. Entries that
        cannot be read are skipped, leaving that pair unconstrained. A non-mapping
        argument installs an empty, fully permissive table.
        """
        table: Dict[Tile, Dict[Direction, FrozenSet[Tile]]] = {}
        if not isinstance(rules, Mapping):
            logger.warning(f"Ignoring adjacency rules of type {type(rules).__name__}; expected a mapping")
            self._rules = table
            return
        for tile, by_direction in rules.items():
            if not isinstance(tile, Tile) or not isinstance(by_direction, Mapping):
                logger.warning(f"Ignoring malformed adjacency entry for {tile!r}")
                continue
            entry: Dict[Direction, FrozenSet[Tile]] = {}
            for key, allowed in by_direction.items():
                try:
                    direction = Direction.parse(key)
                    allowed_set = frozenset(allowed)
                except (ValueError, TypeError):
                    logger.warning(f"Ignoring malformed adjacency rule {tile!r}/{key!r}")
                    continue
                if not all(isinstance(t, Tile) for t in allowed_set):
                    logger.warning(f"Ignoring non-tile neighbors in rule {tile!r}/{key!r}")
                    continue
                entry[direction] = allowed_set
            table[tile] = entry
        self._rules = table

    def reset(self) -> None:
        """Restore the built-in default rules."""
        self.install(DEFAULT_ADJACENCY_RULES)

    def allowed_neighbors(
        self,
        tile: Tile,
        direction: Direction,
        universe: Optional[Iterable[Tile]] = None,
    ) -> FrozenSet[Tile]:
        """
        Tiles allowed as `tile`'s neighbor in `direction`.

        Falls back to the whole universe (the given one, else the table's)
        when no rule exists for the pair.
        """
        entry = self._rules.get(tile)
        if entry is not None and direction in entry:
            return entry[direction]
        return frozenset(universe) if universe is not None else self.universe

    def is_valid_neighbor(self, tile: Tile, neighbor: Tile, direction: Direction) -> bool:
        """Check if `neighbor` may sit next to `tile` on the `direction` side."""
        entry = self._rules.get(tile)
        if entry is None or direction not in entry:
            return True
        return neighbor in entry[direction]

    def compatibility(self, universe: Sequence[Tile], direction: Direction) -> np.ndarray:
        """
        Boolean matrix M with M[i, j] true when universe[j] is allowed as the
        `direction` neighbor of universe[i].
        """
        n = len(universe)
        matrix = np.zeros((n, n), dtype=bool)
        for i, tile in enumerate(universe):
            allowed = self.allowed_neighbors(tile, direction, universe)
            for j, candidate in enumerate(universe):
                matrix[i, j] = candidate in allowed
        return matrix

    def find_violations(self, grid: GridState) -> List[Violation]:
        """List every directed edge of `grid` that breaks the rules."""
        violations = []
        for row in range(grid.height):
            for col in range(grid.width):
                tile = grid.tile_at(row, col)
                for direction in Direction:
                    dr, dc = direction.offset
                    r, c = row + dr, col + dc
                    if not grid.in_bounds(r, c):
                        continue
                    neighbor = grid.tile_at(r, c)
                    if not self.is_valid_neighbor(tile, neighbor, direction):
                        violations.append(Violation(row, col, direction, tile, neighbor))
        return violations

    def as_dict(self) -> Dict[Tile, Dict[Direction, FrozenSet[Tile]]]:
        """Copy of the active table."""
        return {tile: dict(entry) for tile, entry in self._rules.items()}

    def __len__(self) -> int:
        return sum(len(entry) for entry in self._rules.values())

    def __repr__(self) -> str:
        return f"AdjacencyRuleTable({len(self._rules)} tiles, {len(self)} rules)"
