"""
Grid visualization functions.

Renders resolved grids, before/after comparisons and history animations
using the tile colors of a TileRegistry.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple
import logging
import numpy as np

from ..core.grid import GridState
from ..core.tiles import Tile, TileRegistry, DEFAULT_REGISTRY

logger = logging.getLogger(__name__)

# Lazy import for matplotlib
_plt = None
_animation = None
_colors = None

def _get_plt():
    global _plt
    if _plt is None:
        import matplotlib.pyplot as plt
        _plt = plt
    return _plt

def _get_animation():
    global _animation
    if _animation is None:
        from matplotlib import animation
        _animation = animation
    return _animation

def _get_colors():
    global _colors
    if _colors is None:
        from matplotlib import colors
        _colors = colors
    return _colors


UNKNOWN_COLOR = (0.0, 0.0, 0.0)


def grid_to_rgb(grid: GridState, registry: Optional[TileRegistry] = None) -> np.ndarray:
    """
    Convert a grid to an RGB image.

    Tiles without a registered color are drawn black.

    Returns:
        Float array of shape (height, width, 3) in [0, 1]
    """
    colors = _get_colors()
    registry = registry or DEFAULT_REGISTRY

    image = np.zeros(grid.shape + (3,), dtype=float)
    for tile in grid.tiles():
        if tile in registry:
            try:
                rgb = colors.to_rgb(registry.tile_color(tile))
            except KeyError:
                rgb = UNKNOWN_COLOR
        else:
            rgb = UNKNOWN_COLOR
        image[grid.cells == tile.id] = rgb
    return image


def plot_grid(
    grid: GridState,
    ax: Optional[Any] = None,
    title: str = "",
    registry: Optional[TileRegistry] = None,
) -> Any:
    """
    Plot a single grid.

    Args:
        grid: Grid to draw
        ax: Matplotlib axis (created if None)
        title: Plot title
        registry: Color source (default registry if None)

    Returns:
        Matplotlib axis
    """
    plt = _get_plt()

    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 6))

    ax.imshow(grid_to_rgb(grid, registry), interpolation="nearest")
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])

    if title:
        ax.set_title(title)

    return ax


def plot_comparison(
    initial: GridState,
    final: GridState,
    title_initial: str = "Initial State (WFC)",
    title_final: str = "Final State (after CA evolution)",
    figsize: Tuple[float, float] = (8, 4),
    registry: Optional[TileRegistry] = None,
) -> Any:
    """Side-by-side plot of two grids. Returns the figure."""
    plt = _get_plt()

    fig, (ax_initial, ax_final) = plt.subplots(1, 2, figsize=figsize)
    plot_grid(initial, ax=ax_initial, title=title_initial, registry=registry)
    plot_grid(final, ax=ax_final, title=title_final, registry=registry)
    fig.tight_layout()
    return fig


def plot_tile_fractions(
    history: Sequence[GridState],
    tiles: Optional[Sequence[Tile]] = None,
    ax: Optional[Any] = None,
    registry: Optional[TileRegistry] = None,
) -> Any:
    """Plot the fraction of cells per tile over the history."""
    plt = _get_plt()
    registry = registry or DEFAULT_REGISTRY
    tiles = list(tiles) if tiles is not None else registry.tiles

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 4))

    steps = np.arange(len(history))
    for tile in tiles:
        values = [state.fractions([tile])[tile] for state in history]
        label = registry.describe(tile)
        color = registry.tile_color(tile) if tile in registry else None
        ax.plot(steps, values, label=label, color=color)

    ax.set_xlabel("Step")
    ax.set_ylabel("Fraction of cells")
    ax.set_ylim(0, 1)
    ax.legend()
    return ax


def animate_history(
    history: Sequence[GridState],
    fps: int = 2,
    save_path: Optional[Path] = None,
    figsize: Tuple[float, float] = (6, 6),
    registry: Optional[TileRegistry] = None,
) -> Any:
    """
    Animate a simulation history, one frame per step.

    Args:
        history: Sequence of grids (frame k is titled "Step k")
        fps: Frames per second
        save_path: Write the animation here (gif via pillow) if given

    Returns:
        matplotlib.animation.FuncAnimation
    """
    plt = _get_plt()
    animation = _get_animation()

    states = list(history)
    if not states:
        raise ValueError("Cannot animate an empty history")

    fig, ax = plt.subplots(figsize=figsize)
    image = ax.imshow(grid_to_rgb(states[0], registry), interpolation="nearest")
    ax.set_xticks([])
    ax.set_yticks([])
    title = ax.set_title("Step 0")

    def update(frame):
        image.set_data(grid_to_rgb(states[frame], registry))
        title.set_text(f"Step {frame}")
        return [image, title]

    anim = animation.FuncAnimation(
        fig, update, frames=len(states), interval=1000 / fps, blit=False
    )

    if save_path is not None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Writing animation ({len(states)} frames) to {save_path}")
        anim.save(str(save_path), writer=animation.PillowWriter(fps=fps))

    return anim
