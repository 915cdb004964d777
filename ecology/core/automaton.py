"""
Cellular automaton transition rules.

A rule pairs a selector (a Tile, or WILDCARD for any tile) with a transform

    transform(current: Tile, counts: Counter[Tile]) -> Tile

where `counts` holds how often each tile occurs in the cell's 8-neighborhood
(missing tiles count 0, no wraparound at the edges).

Resolution for a cell holding tile t:
1. Most recently added rule whose selector is exactly t
2. Otherwise the most recently added WILDCARD rule
3. Otherwise no change

Every step reads one fixed input snapshot and writes a new one, so the
order in which cells are evaluated never matters.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union
import numpy as np
from scipy.ndimage import convolve

from .grid import GridState
from .tiles import Tile, WATER, SAND, GRASS, FOREST

logger = logging.getLogger(__name__)


WILDCARD = None

Transform = Callable[[Tile, Counter], Tile]

# 8-neighborhood, center excluded
NEIGHBORHOOD_KERNEL = np.array([
    [1, 1, 1],
    [1, 0, 1],
    [1, 1, 1],
], dtype=np.int32)


@dataclass
class CARule:
    """
    Transition rule for one tile kind (or all, via WILDCARD).

    Example:
        def burn(current, counts):
            return FIRE if counts[FIRE] >= 2 else current

        rule = CARule(selector=FOREST, transform=burn, name="burn")
    """
    selector: Optional[Tile]
    transform: Transform
    name: str = ""

    def __post_init__(self):
        if not self.name:
            self.name = getattr(self.transform, "__name__", "rule")

    @property
    def is_wildcard(self) -> bool:
        return self.selector is WILDCARD

    def matches(self, tile: Tile) -> bool:
        return self.is_wildcard or self.selector == tile

    def apply(self, current: Tile, counts: Counter) -> Tile:
        return self.transform(current, counts)

    def __repr__(self) -> str:
        target = "*" if self.is_wildcard else repr(self.selector)
        return f"CARule('{self.name}': {target})"


# ===== Built-in transitions for the base tiles =====

def water_rule(current: Tile, counts: Counter) -> Tile:
    """Water stays water."""
    return WATER


def sand_rule(current: Tile, counts: Counter) -> Tile:
    """Sand floods when surrounded by water, greens next to grass."""
    if counts[WATER] >= 5:
        return WATER
    if counts[GRASS] >= 3:
        return GRASS
    return SAND


def grass_rule(current: Tile, counts: Counter) -> Tile:
    """Grass grows into forest, or dries to sand."""
    if counts[FOREST] >= 3:
        return FOREST
    if counts[SAND] >= 5:
        return SAND
    return GRASS


def forest_rule(current: Tile, counts: Counter) -> Tile:
    """Forest thins to grass near too much water or sand."""
    if counts[WATER] >= 4 or counts[SAND] >= 5:
        return GRASS
    return FOREST


def default_rules() -> List[CARule]:
    """One built-in rule per base tile."""
    return [
        CARule(WATER, water_rule),
        CARule(SAND, sand_rule),
        CARule(GRASS, grass_rule),
        CARule(FOREST, forest_rule),
    ]


RuleSpec = Union[Iterable[CARule], Mapping[Optional[Tile], Transform]]


class CARuleEngine:
    """
    Ordered collection of CA rules with a pure step function.

    Example:
        engine = CARuleEngine()
        next_grid = engine.step(grid)

        # Override the built-in sand rule
        engine.add_rule(SAND, lambda current, counts: SAND)
        engine.reset_rules()  # back to defaults
    """

    def __init__(self, rules: Optional[RuleSpec] = None):
        self.rules: List[CARule] = default_rules()
        if rules is not None:
            self.install(rules)

    def add(self, rule: CARule) -> "CARuleEngine":
        """Add a rule; it takes precedence over earlier rules of the same selector."""
        self.rules.append(rule)
        return self

    def add_rule(
        self,
        selector: Optional[Tile],
        transform: Transform,
        name: str = "",
    ) -> CARule:
        rule = CARule(selector=selector, transform=transform, name=name)
        self.add(rule)
        return rule

    def reset_rules(self) -> None:
        """Restore the built-in defaults, dropping every added rule."""
        self.rules = default_rules()

    def install(self, rules: RuleSpec) -> None:
        """
        Reset to defaults, then add `rules`.

        Accepts CARule objects, (selector, transform) pairs, or a mapping
        from selector to transform.
        """
        self.reset_rules()
        items = rules.items() if isinstance(rules, Mapping) else rules
        for item in items:
            if isinstance(item, CARule):
                self.add(item)
            else:
                selector, transform = item
                self.add_rule(selector, transform)

    def rule_for(self, tile: Tile) -> Optional[CARule]:
        """Rule governing `tile`: exact selector first, newest first."""
        for rule in reversed(self.rules):
            if not rule.is_wildcard and rule.selector == tile:
                return rule
        for rule in reversed(self.rules):
            if rule.is_wildcard:
                return rule
        return None

    def neighbor_counts(self, grid: GridState) -> Dict[Tile, np.ndarray]:
        """
        Per-tile 8-neighbor counts for every cell.

        Returns:
            Mapping tile -> int array of shape grid.shape
        """
        counts = {}
        for tile in grid.tiles():
            mask = (grid.cells == tile.id).astype(np.int32)
            counts[tile] = convolve(mask, NEIGHBORHOOD_KERNEL, mode="constant", cval=0)
        return counts

    def step(self, grid: GridState) -> GridState:
        """
        Compute the next grid from `grid` without modifying it.

        Returns:
            New GridState with step = grid.step + 1
        """
        counts = self.neighbor_counts(grid)
        rule_cache = {tile: self.rule_for(tile) for tile in counts}
        output = np.array(grid.cells, dtype=np.int32)
        changed = 0

        for (row, col), value in np.ndenumerate(grid.cells):
            tile = Tile(int(value))
            rule = rule_cache[tile]
            if rule is None:
                continue
            cell_counts = Counter({
                t: int(c[row, col]) for t, c in counts.items() if c[row, col]
            })
            result = rule.apply(tile, cell_counts)
            if result != tile:
                output[row, col] = result.id
                changed += 1

        logger.debug(f"CA step {grid.step} -> {grid.step + 1}: {changed} cells changed")
        return GridState(cells=output, step=grid.step + 1)

    def run(self, grid: GridState, steps: int) -> List[GridState]:
        """Apply `steps` successive updates, returning each new state."""
        states = []
        current = grid
        for _ in range(steps):
            current = self.step(current)
            states.append(current)
        return states

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def __repr__(self) -> str:
        return f"CARuleEngine({len(self.rules)} rules)"
