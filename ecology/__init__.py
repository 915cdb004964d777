"""
Emergent Ecology

Procedural 2D terrain: wave function collapse builds a coherent initial map,
then cellular automaton rules evolve it step by step.

Main components:
- core: tiles, grids, adjacency rules, WFC solver, CA rule engine
- simulation: orchestrator producing the full history of a run
- config: run parameters with JSON persistence
- visualization: grid images, comparisons, animations
"""

__version__ = "0.1.0"
__author__ = "Emergent Ecology Team"

from .core import (
    Tile, TileRegistry, WATER, SAND, GRASS, FOREST,
    Direction, GridState,
    AdjacencyRuleTable, WFCSolver,
    CARule, CARuleEngine, WILDCARD,
    InvalidArgument, NotFound,
)
from .simulation import Simulation, SimulationHistory, SimulationOptions, run_simulation
from .config import SimulationConfig

__all__ = [
    "Tile",
    "TileRegistry",
    "WATER",
    "SAND",
    "GRASS",
    "FOREST",
    "Direction",
    "GridState",
    "AdjacencyRuleTable",
    "WFCSolver",
    "CARule",
    "CARuleEngine",
    "WILDCARD",
    "InvalidArgument",
    "NotFound",
    "Simulation",
    "SimulationHistory",
    "SimulationOptions",
    "run_simulation",
    "SimulationConfig",
]
