"""
Wave function collapse for initial terrain generation.

Every cell starts in superposition over the whole tile universe. The solver
repeatedly

1. selects the uncollapsed cell with minimum entropy (candidates - 1),
   ties broken in row-major order,
2. collapses it to a uniformly random candidate,
3. propagates adjacency constraints breadth-first from that cell.

Contradictions (a neighbor left with no consistent candidate) are repaired
by forcing the neighbor to a random tile from its prior candidates. There is
no backtracking: the run always terminates, but a repaired grid may break
the adjacency rules at the repaired cells.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
import logging
import time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import numpy as np

from .adjacency import AdjacencyRuleTable
from .errors import InvalidArgument
from .grid import Direction, GridState, validate_dimensions
from .tiles import Tile

logger = logging.getLogger(__name__)


@dataclass
class WFCStats:
    """Statistics from one generate() call."""
    width: int = 0
    height: int = 0
    num_tiles: int = 0
    selections: int = 0
    updates: int = 0
    contradictions: int = 0

    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def elapsed_time(self) -> float:
        return self.end_time - self.start_time


class WaveState:
    """
    Mutable superposition grid.

    Attributes:
        universe: Tiles in index order
        possible: Boolean array (height, width, n_tiles); True = candidate
        uncollapsed: Boolean array (height, width); True until a cell is
            chosen for collapse or narrowed to a single candidate
    """

    def __init__(self, width: int, height: int, universe: Sequence[Tile]):
        self.universe = list(universe)
        self.possible = np.ones((height, width, len(self.universe)), dtype=bool)
        self.uncollapsed = np.ones((height, width), dtype=bool)

    @property
    def height(self) -> int:
        return self.possible.shape[0]

    @property
    def width(self) -> int:
        return self.possible.shape[1]

    def counts(self) -> np.ndarray:
        """Candidate count per cell."""
        return self.possible.sum(axis=2)

    def entropy(self) -> np.ndarray:
        return self.counts() - 1

    def candidates(self, row: int, col: int) -> List[Tile]:
        return [self.universe[i] for i in np.flatnonzero(self.possible[row, col])]

    def is_done(self) -> bool:
        return not self.uncollapsed.any()

    def set_single(self, row: int, col: int, index: int) -> None:
        self.possible[row, col] = False
        self.possible[row, col, index] = True
        self.uncollapsed[row, col] = False

    def to_grid(self) -> GridState:
        """Resolve to a GridState (first candidate per cell)."""
        ids = np.array([tile.id for tile in self.universe], dtype=np.int32)
        return GridState(cells=ids[np.argmax(self.possible, axis=2)], step=0)


class WFCSolver:
    """
    Entropy-driven wave function collapse solver.

    The rule table and random generator are constructor state, so two
    solvers never share rules.

    Example:
        solver = WFCSolver(AdjacencyRuleTable(), rng=np.random.default_rng(7))
        grid = solver.generate(32, 32)
        print(solver.last_stats.contradictions)
    """

    def __init__(
        self,
        rules: Optional[AdjacencyRuleTable] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize solver.

        Args:
            rules: Adjacency rules (built-in defaults if None)
            rng: Random generator used for collapse and repair
            seed: Seed for a new generator when rng is None
        """
        self.rules = rules if rules is not None else AdjacencyRuleTable()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.last_stats: Optional[WFCStats] = None

    def generate(
        self,
        width: int,
        height: int,
        universe: Optional[Iterable[Tile]] = None,
    ) -> GridState:
        """
        Generate a fully resolved grid.

        Args:
            width: Number of columns (> 0)
            height: Number of rows (> 0)
            universe: Tiles to choose from (the rule table's universe if None)

        Returns:
            GridState of shape (height, width), step 0

        Raises:
            InvalidArgument: non-positive dimensions or empty universe
        """
        validate_dimensions(width, height)
        tiles = sorted(set(universe if universe is not None else self.rules.universe))
        if not tiles:
            raise InvalidArgument("Tile universe must not be empty")

        stats = WFCStats(width=width, height=height, num_tiles=len(tiles),
                         start_time=time.time())
        compat = {d: self.rules.compatibility(tiles, d) for d in Direction}
        wave = WaveState(width, height, tiles)

        while not wave.is_done():
            row, col = self._select(wave)
            self._collapse(wave, row, col)
            stats.selections += 1
            self._propagate(wave, row, col, compat, stats)

        stats.end_time = time.time()
        self.last_stats = stats
        logger.info(
            f"WFC generated {width}x{height} grid: {stats.selections} selections, "
            f"{stats.updates} updates, {stats.contradictions} contradictions "
            f"({stats.elapsed_time:.3f}s)"
        )
        return wave.to_grid()

    def _select(self, wave: WaveState) -> Tuple[int, int]:
        """Minimum-entropy uncollapsed cell; argmin gives row-major ties."""
        entropy = wave.entropy()
        masked = np.where(wave.uncollapsed, entropy, np.iinfo(entropy.dtype).max)
        index = int(np.argmin(masked))
        return divmod(index, wave.width)

    def _collapse(self, wave: WaveState, row: int, col: int) -> None:
        options = np.flatnonzero(wave.possible[row, col])
        choice = options[self.rng.integers(len(options))]
        wave.set_single(row, col, choice)

    def _propagate(
        self,
        wave: WaveState,
        row: int,
        col: int,
        compat: Dict[Direction, np.ndarray],
        stats: WFCStats,
    ) -> None:
        """Breadth-first constraint propagation seeded at (row, col)."""
        queue = deque([(row, col)])

        while queue:
            r, c = queue.popleft()
            current = wave.possible[r, c]

            for direction in Direction:
                dr, dc = direction.offset
                nr, nc = r + dr, c + dc
                if not (0 <= nr < wave.height and 0 <= nc < wave.width):
                    continue

                neighbor = wave.possible[nr, nc]
                supported = compat[direction][current].any(axis=0)
                narrowed = neighbor & supported
                old_count = int(neighbor.sum())
                new_count = int(narrowed.sum())

                if new_count == 0:
                    stats.contradictions += 1
                    prior = np.flatnonzero(neighbor)
                    if len(prior) > 1:
                        forced = prior[self.rng.integers(len(prior))]
                        wave.set_single(nr, nc, forced)
                        queue.append((nr, nc))
                    else:
                        # Already a singleton: nothing to narrow, keep it.
                        forced = prior[0]
                        wave.uncollapsed[nr, nc] = False
                    logger.debug(
                        f"Contradiction at ({nr}, {nc}) from ({r}, {c}) {direction.value}: "
                        f"forced {wave.universe[forced]!r}"
                    )
                elif new_count < old_count:
                    wave.possible[nr, nc] = narrowed
                    stats.updates += 1
                    queue.append((nr, nc))
                    if new_count == 1:
                        wave.uncollapsed[nr, nc] = False


def generate_map(
    width: int,
    height: int,
    rules: Optional[AdjacencyRuleTable] = None,
    universe: Optional[Iterable[Tile]] = None,
    seed: Optional[int] = None,
) -> GridState:
    """Convenience wrapper: one-shot WFC generation."""
    return WFCSolver(rules, seed=seed).generate(width, height, universe)
