"""
Simulation orchestrator: one WFC generation followed by N CA steps.

    history[0] = WFCSolver.generate(width, height)
    history[k] = CARuleEngine.step(history[k - 1])

Each Simulation owns its adjacency table, rule engine and random generator,
so runs on different Simulation objects never see each other's rules.
Overrides installed by `run` stay installed on that Simulation afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import time
from typing import Dict, Iterator, List, Optional
import numpy as np

from .config import SimulationConfig
from .core import (
    AdjacencyRuleTable, CARuleEngine, GridState, InvalidArgument, Tile,
    WFCSolver, WFCStats,
)
from .core.adjacency import RuleMapping
from .core.grid import validate_dimensions
from .core.automaton import RuleSpec, Transform, WILDCARD

logger = logging.getLogger(__name__)


@dataclass
class SimulationOptions:
    """Optional inputs of a run."""
    random_seed: Optional[int] = None
    adjacency_rules: Optional[RuleMapping] = None
    evolution_rules: Optional[RuleSpec] = None


@dataclass
class SimulationHistory:
    """
    Ordered grid states of a run.

    Contains:
    - states[0]: WFC output
    - states[k]: CA state after k steps
    - WFC statistics and timing
    """
    states: List[GridState] = field(default_factory=list)
    wfc_stats: Optional[WFCStats] = None
    random_seed: Optional[int] = None
    elapsed_time: float = 0.0

    @property
    def initial(self) -> GridState:
        return self.states[0]

    @property
    def final(self) -> GridState:
        return self.states[-1]

    @property
    def steps(self) -> int:
        return len(self.states) - 1

    def fraction_series(self, tiles) -> Dict[Tile, np.ndarray]:
        """Fraction of cells holding each tile, per step."""
        tiles = list(tiles)
        series = {tile: np.zeros(len(self.states)) for tile in tiles}
        for i, state in enumerate(self.states):
            for tile, value in state.fractions(tiles).items():
                series[tile][i] = value
        return series

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, index: int) -> GridState:
        return self.states[index]

    def __iter__(self) -> Iterator[GridState]:
        return iter(self.states)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SimulationHistory):
            return False
        return self.states == other.states


class Simulation:
    """
    Drives a WFC run followed by CA evolution.

    Example:
        sim = Simulation()
        history = sim.run(64, 64, 20, random_seed=42)
        final = history.final
    """

    def __init__(
        self,
        adjacency: Optional[AdjacencyRuleTable] = None,
        engine: Optional[CARuleEngine] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.adjacency = adjacency if adjacency is not None else AdjacencyRuleTable()
        self.engine = engine if engine is not None else CARuleEngine()
        self.rng = rng if rng is not None else np.random.default_rng()

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "Simulation":
        return cls(rng=np.random.default_rng(config.random_seed))

    def add_evolution_rule(self, transform: Transform, tile: Optional[Tile] = WILDCARD) -> None:
        """Register an extra CA rule for `tile` (all tiles if None)."""
        self.engine.add_rule(tile, transform)

    def run(
        self,
        width: int,
        height: int,
        steps: int,
        options: Optional[SimulationOptions] = None,
        **overrides,
    ) -> SimulationHistory:
        """
        Run the full simulation.

        Args:
            width: Grid width (> 0)
            height: Grid height (> 0)
            steps: Number of CA steps (>= 0)
            options: Seed and rule overrides
            **overrides: Individual SimulationOptions fields

        Returns:
            SimulationHistory of length steps + 1

        Raises:
            InvalidArgument: bad dimensions, negative steps or negative seed
        """
        options = options or SimulationOptions()
        if overrides:
            options = SimulationOptions(**{**options.__dict__, **overrides})

        validate_dimensions(width, height)
        if steps < 0:
            raise InvalidArgument(f"steps must be non-negative, got {steps}")
        if options.random_seed is not None and options.random_seed < 0:
            raise InvalidArgument(f"random_seed must be non-negative, got {options.random_seed}")

        if options.random_seed is not None:
            self.rng = np.random.default_rng(options.random_seed)
        if options.adjacency_rules is not None:
            self.adjacency.install(options.adjacency_rules)
        if options.evolution_rules is not None:
            self.engine.install(options.evolution_rules)

        start = time.time()
        logger.info("Generating initial state with WFC...")
        solver = WFCSolver(self.adjacency, rng=self.rng)
        initial = solver.generate(width, height)

        history = SimulationHistory(
            states=[initial],
            wfc_stats=solver.last_stats,
            random_seed=options.random_seed,
        )

        logger.info("Evolving with Cellular Automata...")
        current = initial
        for step in range(1, steps + 1):
            current = self.engine.step(current)
            history.states.append(current)

            if step % 5 == 0 or step == steps:
                logger.info(f"Completed step {step} of {steps}")

        history.elapsed_time = time.time() - start
        return history

    def run_config(self, config: SimulationConfig) -> SimulationHistory:
        """Run with the dimensions, steps and seed of `config`."""
        issues = config.validate()
        if issues:
            raise InvalidArgument("Invalid configuration: " + "; ".join(issues))
        return self.run(config.width, config.height, config.steps,
                        SimulationOptions(random_seed=config.random_seed))


def run_simulation(
    width: int,
    height: int,
    steps: int,
    *,
    adjacency_rules: Optional[RuleMapping] = None,
    evolution_rules: Optional[RuleSpec] = None,
    random_seed: Optional[int] = None,
) -> SimulationHistory:
    """
    Run the full simulation on a fresh Simulation.

    Every call starts from the built-in rules, so overrides never leak into
    later calls.
    """
    return Simulation().run(
        width, height, steps,
        SimulationOptions(
            random_seed=random_seed,
            adjacency_rules=adjacency_rules,
            evolution_rules=evolution_rules,
        ),
    )
