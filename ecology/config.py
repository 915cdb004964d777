"""
Configuration module for Emergent Ecology.

Contains the run parameters of a simulation plus rendering options.
Adjacency and evolution rule overrides are Python objects and are passed to
the orchestrator directly rather than stored here.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import json
from pathlib import Path


@dataclass
class VisualizationParams:
    """Rendering parameters for grids and animations."""
    fps: int = 2
    figsize: Tuple[float, float] = (12.8, 7.2)
    dpi: int = 100

    # Output files (None = not written)
    animation_path: Optional[Path] = None
    comparison_path: Optional[Path] = None


@dataclass
class SimulationConfig:
    """
    Main configuration container for a simulation run.

    Example:
        config = SimulationConfig(width=128, height=128, steps=30, random_seed=7)
        config.save("my_config.json")
    """
    # Grid dimensions
    width: int = 64
    height: int = 64

    # Cellular automaton steps after WFC
    steps: int = 20

    random_seed: Optional[int] = None  # None = fresh entropy

    visualization: VisualizationParams = field(default_factory=VisualizationParams)

    def save(self, path) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self._to_dict(), f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path) -> "SimulationConfig":
        """Load configuration from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls._from_dict(data)

    def _to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        def convert(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif hasattr(obj, '__dataclass_fields__'):
                return {k: convert(v) for k, v in obj.__dict__.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert(x) for x in obj]
            return obj

        return convert(self)

    @classmethod
    def _from_dict(cls, data: dict) -> "SimulationConfig":
        """Reconstruct from dictionary."""
        data = dict(data)
        if 'visualization' in data:
            viz = dict(data['visualization'])
            if 'figsize' in viz:
                viz['figsize'] = tuple(viz['figsize'])
            for key in ('animation_path', 'comparison_path'):
                if viz.get(key) is not None:
                    viz[key] = Path(viz[key])
            data['visualization'] = VisualizationParams(**viz)

        return cls(**data)

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        issues = []

        if self.width <= 0:
            issues.append("width must be positive")
        if self.height <= 0:
            issues.append("height must be positive")
        if self.steps < 0:
            issues.append("steps must be non-negative")
        if self.random_seed is not None and self.random_seed < 0:
            issues.append("random_seed must be non-negative")

        if self.visualization.fps <= 0:
            issues.append("fps must be positive")
        if self.visualization.dpi <= 0:
            issues.append("dpi must be positive")

        return issues


# Preset configurations
def minimal_config() -> SimulationConfig:
    """Minimal configuration for quick testing."""
    return SimulationConfig(width=8, height=8, steps=3, random_seed=0)


def standard_config() -> SimulationConfig:
    """256x256 map evolved for 20 steps, seed 42."""
    return SimulationConfig(width=256, height=256, steps=20, random_seed=42)


def demo_config() -> SimulationConfig:
    """Small map with an animation written to ./wfc_ca_hybrid.gif."""
    return SimulationConfig(
        width=64,
        height=64,
        steps=20,
        random_seed=42,
        visualization=VisualizationParams(animation_path=Path("wfc_ca_hybrid.gif")),
    )
