"""
Tests for the wave function collapse solver.
"""

import pytest
import numpy as np
from ecology.core import (
    AdjacencyRuleTable, Direction, InvalidArgument, WFCSolver, WFCStats, WaveState,
    WATER, SAND, GRASS, FOREST, BASE_TILES, generate_map,
)


def exclusive_rules(*tiles):
    """Every tile forbids every neighbor, including itself."""
    return {tile: {d: [] for d in Direction} for tile in tiles}


class TestGenerate:
    """Tests for WFCSolver.generate."""

    @pytest.mark.parametrize("width,height", [(1, 1), (1, 7), (6, 1), (5, 4), (12, 9)])
    def test_dimensions_and_universe(self, width, height):
        """Every cell resolves to one tile from the universe."""
        grid = WFCSolver(seed=0).generate(width, height)
        assert grid.shape == (height, width)
        assert grid.size == width * height
        assert set(grid.tiles()) <= set(BASE_TILES)
        assert grid.step == 0

    def test_custom_universe(self):
        grid = WFCSolver(seed=1).generate(6, 6, universe=[SAND, GRASS])
        assert set(grid.tiles()) <= {SAND, GRASS}

    @pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 2)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(InvalidArgument):
            WFCSolver(seed=0).generate(width, height)

    def test_empty_universe(self):
        with pytest.raises(InvalidArgument):
            WFCSolver(seed=0).generate(3, 3, universe=[])

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 99])
    def test_single_tile_universe(self, seed):
        """A water-only universe always yields an all-water grid."""
        rules = AdjacencyRuleTable({WATER: {d: [WATER] for d in Direction}})
        grid = WFCSolver(rules, seed=seed).generate(4, 4, universe=[WATER])
        assert np.all(grid.cells == WATER.id)

    def test_reproducible_with_seed(self):
        a = WFCSolver(seed=11).generate(10, 8)
        b = WFCSolver(seed=11).generate(10, 8)
        assert a == b

    def test_self_only_rules_give_uniform_grid(self):
        """If each tile only tolerates itself, the first collapse decides the map."""
        rules = AdjacencyRuleTable({
            WATER: {d: [WATER] for d in Direction},
            SAND: {d: [SAND] for d in Direction},
        })
        solver = WFCSolver(rules, seed=5)
        grid = solver.generate(5, 5, universe=[WATER, SAND])
        assert len(grid.tiles()) == 1
        assert solver.last_stats.contradictions == 0
        assert solver.last_stats.selections == 1

    @pytest.mark.parametrize("seed", range(5))
    def test_consistent_without_contradictions(self, seed):
        """With no contradiction repaired, the map satisfies every rule."""
        rules = AdjacencyRuleTable()
        solver = WFCSolver(rules, seed=seed)
        grid = solver.generate(16, 16)
        if solver.last_stats.contradictions == 0:
            assert rules.find_violations(grid) == []


class TestContradictions:
    """Tests for contradiction repair."""

    def test_unsatisfiable_rules_terminate(self):
        """Mutually exclusive tiles still yield a fully resolved grid."""
        rules = AdjacencyRuleTable(exclusive_rules(WATER, SAND))
        solver = WFCSolver(rules, seed=3)
        grid = solver.generate(3, 3, universe=[WATER, SAND])

        assert grid.shape == (3, 3)
        assert set(grid.tiles()) <= {WATER, SAND}
        assert solver.last_stats.contradictions > 0
        assert len(rules.find_violations(grid)) > 0

    @pytest.mark.parametrize("width,height", [(3, 1), (5, 5), (10, 3)])
    def test_unsatisfiable_rules_various_sizes(self, width, height):
        rules = AdjacencyRuleTable(exclusive_rules(*BASE_TILES))
        grid = WFCSolver(rules, seed=8).generate(width, height)
        assert grid.size == width * height
        assert len(rules.find_violations(grid)) > 0

    def test_contradiction_on_single_tile_universe(self):
        rules = AdjacencyRuleTable(exclusive_rules(WATER))
        solver = WFCSolver(rules, seed=0)
        grid = solver.generate(3, 3, universe=[WATER])
        assert np.all(grid.cells == WATER.id)
        assert solver.last_stats.contradictions > 0


class TestSelection:
    """Tests for minimum-entropy selection."""

    def test_row_major_tie_break(self):
        solver = WFCSolver(seed=0)
        wave = WaveState(3, 3, list(BASE_TILES))
        assert solver._select(wave) == (0, 0)

        wave.set_single(0, 0, 2)
        assert solver._select(wave) == (0, 1)

    def test_minimum_entropy(self):
        solver = WFCSolver(seed=0)
        wave = WaveState(3, 3, list(BASE_TILES))
        wave.possible[2, 1, 0] = False
        wave.possible[2, 1, 1] = False
        wave.possible[1, 2, 0] = False
        assert solver._select(wave) == (2, 1)

    def test_ignores_collapsed_cells(self):
        """Collapsed cells (entropy 0) are never reselected."""
        solver = WFCSolver(seed=0)
        wave = WaveState(2, 2, list(BASE_TILES))
        for row, col in [(0, 0), (0, 1), (1, 0)]:
            wave.set_single(row, col, 0)
        assert solver._select(wave) == (1, 1)

    def test_collapse_picks_candidate(self):
        solver = WFCSolver(seed=4)
        wave = WaveState(1, 1, list(BASE_TILES))
        wave.possible[0, 0, 0] = False
        solver._collapse(wave, 0, 0)
        candidates = wave.candidates(0, 0)
        assert len(candidates) == 1
        assert candidates[0] in (SAND, GRASS, FOREST)
        assert not wave.uncollapsed[0, 0]


class TestPropagation:
    """Tests for constraint propagation."""

    def test_narrows_neighbors(self):
        """Collapsing to WATER leaves only WATER below (default rules)."""
        rules = AdjacencyRuleTable()
        solver = WFCSolver(rules, seed=0)
        tiles = list(BASE_TILES)
        wave = WaveState(1, 3, tiles)
        wave.set_single(0, 0, tiles.index(WATER))

        compat = {d: rules.compatibility(tiles, d) for d in Direction}
        solver._propagate(wave, 0, 0, compat, WFCStats())

        assert wave.candidates(1, 0) == [WATER]
        assert not wave.uncollapsed[1, 0]
        assert wave.candidates(2, 0) == [WATER]

    def test_directional(self):
        """Only the rule of the propagating cell's direction is applied."""
        rules = AdjacencyRuleTable({FOREST: {Direction.RIGHT: [GRASS]}})
        solver = WFCSolver(rules, seed=0)
        tiles = list(BASE_TILES)
        wave = WaveState(2, 1, tiles)
        wave.set_single(0, 0, tiles.index(FOREST))

        compat = {d: rules.compatibility(tiles, d) for d in Direction}
        solver._propagate(wave, 0, 0, compat, WFCStats())
        assert wave.candidates(0, 1) == [GRASS]


def test_generate_map_helper():
    grid = generate_map(4, 3, seed=2)
    assert grid.shape == (3, 4)
