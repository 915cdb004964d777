"""
Core module for Emergent Ecology.

Contains:
- Tile / TileRegistry: terrain kinds with ids, names and colors
- GridState / Direction: resolved grid snapshots and cardinal directions
- AdjacencyRuleTable: directional neighbor constraints for WFC
- WFCSolver: wave function collapse with contradiction repair
- CARuleEngine / CARule: cellular automaton transitions
"""

from .errors import InvalidArgument, NotFound
from .tiles import (
    Tile, TileRegistry, DEFAULT_REGISTRY, BASE_TILES,
    WATER, SAND, GRASS, FOREST,
    add_tile_type, tile_from_name, tile_from_id, get_tile_name, get_tile_color,
)
from .grid import Direction, GridState
from .adjacency import AdjacencyRuleTable, Violation, DEFAULT_ADJACENCY_RULES
from .wfc import WFCSolver, WFCStats, WaveState, generate_map
from .automaton import (
    CARule, CARuleEngine, WILDCARD, default_rules,
    water_rule, sand_rule, grass_rule, forest_rule,
)

__all__ = [
    "InvalidArgument",
    "NotFound",
    # Tiles
    "Tile",
    "TileRegistry",
    "DEFAULT_REGISTRY",
    "BASE_TILES",
    "WATER",
    "SAND",
    "GRASS",
    "FOREST",
    "add_tile_type",
    "tile_from_name",
    "tile_from_id",
    "get_tile_name",
    "get_tile_color",
    # Grid
    "Direction",
    "GridState",
    # Wave function collapse
    "AdjacencyRuleTable",
    "Violation",
    "DEFAULT_ADJACENCY_RULES",
    "WFCSolver",
    "WFCStats",
    "WaveState",
    "generate_map",
    # Cellular automaton
    "CARule",
    "CARuleEngine",
    "WILDCARD",
    "default_rules",
    "water_rule",
    "sand_rule",
    "grass_rule",
    "forest_rule",
]
