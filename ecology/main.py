"""
Emergent Ecology - WFC terrain generation evolved by cellular automata.

Main entry point for simulations.
"""

from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from ecology.config import SimulationConfig, VisualizationParams
from ecology.core import BASE_TILES, DEFAULT_REGISTRY
from ecology.simulation import Simulation, SimulationHistory


logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Merge a config file (if any) with command-line flags."""
    if args.config is not None:
        config = SimulationConfig.load(args.config)
    else:
        config = SimulationConfig()

    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    if args.steps is not None:
        config.steps = args.steps
    if args.seed is not None:
        config.random_seed = args.seed
    if args.fps is not None:
        config.visualization.fps = args.fps
    if args.animation is not None:
        config.visualization.animation_path = Path(args.animation)
    if args.comparison is not None:
        config.visualization.comparison_path = Path(args.comparison)

    return config


def summarize(history: SimulationHistory) -> None:
    """Log tile fractions of the initial and final grids."""
    for label, state in (("Initial", history.initial), ("Final", history.final)):
        fractions = state.fractions(BASE_TILES)
        parts = ", ".join(
            f"{DEFAULT_REGISTRY.tile_name(tile)}={value:.3f}"
            for tile, value in fractions.items()
        )
        logger.info(f"{label} composition: {parts}")


def render(history: SimulationHistory, viz: VisualizationParams) -> None:
    """Write the requested comparison image and animation."""
    if viz.comparison_path is None and viz.animation_path is None:
        return

    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from ecology.visualization import animate_history, plot_comparison

    if viz.comparison_path is not None:
        fig = plot_comparison(history.initial, history.final, figsize=viz.figsize)
        Path(viz.comparison_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(viz.comparison_path, dpi=viz.dpi)
        plt.close(fig)
        logger.info(f"Comparison saved to: {viz.comparison_path}")

    if viz.animation_path is not None:
        logger.info("Generating animation...")
        animate_history(history.states, fps=viz.fps, save_path=viz.animation_path)
        plt.close("all")
        logger.info(f"Animation saved to: {viz.animation_path}")


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for running simulations."""
    parser = argparse.ArgumentParser(description="Emergent Ecology: WFC + cellular automata terrain")

    parser.add_argument('--width', type=int, default=None,
                       help='Grid width (default: 64)')
    parser.add_argument('--height', type=int, default=None,
                       help='Grid height (default: 64)')
    parser.add_argument('--steps', type=int, default=None,
                       help='Number of CA steps (default: 20)')
    parser.add_argument('--seed', type=int, default=None,
                       help='Random seed (default: None)')
    parser.add_argument('--config', type=str, default=None,
                       help='Load settings from a JSON config file')
    parser.add_argument('--save-config', type=str, default=None,
                       help='Write the effective config to a JSON file')
    parser.add_argument('--animation', type=str, default=None,
                       help='Write a GIF animation of the history')
    parser.add_argument('--comparison', type=str, default=None,
                       help='Write an initial/final comparison image')
    parser.add_argument('--fps', type=int, default=None,
                       help='Animation frames per second (default: 2)')
    parser.add_argument('--log-level', type=str, default='INFO',
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                       help='Logging level (default: INFO)')

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    config = build_config(args)
    issues = config.validate()
    if issues:
        for issue in issues:
            logger.error(f"Invalid configuration: {issue}")
        return 2

    if args.save_config is not None:
        config.save(args.save_config)
        logger.info(f"Config saved to: {args.save_config}")

    logger.info(f"Size: {config.width}x{config.height}, Steps: {config.steps}, "
                f"Seed: {config.random_seed}")

    history = Simulation.from_config(config).run_config(config)
    summarize(history)
    render(history, config.visualization)

    logger.info(f"Done in {history.elapsed_time:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
