"""
Visualization module for Emergent Ecology.

Provides:
- Grid images colored by tile
- Initial/final comparison plots
- Tile fraction time series
- History animations
"""

from .grid_viz import (
    grid_to_rgb,
    plot_grid,
    plot_comparison,
    plot_tile_fractions,
    animate_history,
)

__all__ = [
    "grid_to_rgb",
    "plot_grid",
    "plot_comparison",
    "plot_tile_fractions",
    "animate_history",
]
