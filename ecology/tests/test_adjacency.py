"""
Tests for grids and adjacency rules.
"""

import pytest
import numpy as np
from ecology.core import (
    AdjacencyRuleTable, Direction, GridState, InvalidArgument, Tile,
    WATER, SAND, GRASS, FOREST, BASE_TILES,
)
from ecology.core.grid import validate_dimensions


class TestDirection:
    """Tests for Direction."""

    def test_opposites(self):
        assert Direction.UP.opposite == Direction.DOWN
        assert Direction.DOWN.opposite == Direction.UP
        assert Direction.LEFT.opposite == Direction.RIGHT
        assert Direction.RIGHT.opposite == Direction.LEFT

    def test_offsets(self):
        assert Direction.UP.offset == (-1, 0)
        assert Direction.RIGHT.offset == (0, 1)

    def test_parse(self):
        assert Direction.parse("up") == Direction.UP
        assert Direction.parse("LEFT") == Direction.LEFT
        assert Direction.parse(Direction.DOWN) == Direction.DOWN
        with pytest.raises(ValueError):
            Direction.parse("sideways")


class TestGridState:
    """Tests for GridState snapshots."""

    def test_from_tiles(self):
        grid = GridState.from_tiles([[WATER, SAND, GRASS], [FOREST, WATER, SAND]])
        assert grid.width == 3
        assert grid.height == 2
        assert grid.tile_at(1, 0) == FOREST
        assert grid[0, 2] == GRASS

    def test_row_major_iteration(self):
        rows = [[WATER, SAND], [GRASS, FOREST]]
        grid = GridState.from_tiles(rows)
        assert grid.to_tiles() == rows

    def test_immutable(self):
        grid = GridState.filled(WATER, 3, 3)
        with pytest.raises(ValueError):
            grid.cells[0, 0] = SAND.id

    def test_does_not_alias_input(self):
        data = np.full((2, 2), WATER.id)
        grid = GridState(cells=data)
        data[0, 0] = SAND.id
        assert grid.tile_at(0, 0) == WATER

    def test_invalid_dimensions(self):
        with pytest.raises(InvalidArgument):
            GridState.filled(WATER, 0, 3)
        with pytest.raises(InvalidArgument):
            GridState(cells=[1, 2, 3])

    def test_non_integer_dimensions(self):
        with pytest.raises(InvalidArgument):
            GridState.filled(WATER, 3.0, 2)
        with pytest.raises(InvalidArgument):
            validate_dimensions(4, "4")
        validate_dimensions(np.int64(2), 3)

    def test_counts_and_fractions(self):
        grid = GridState.from_tiles([[WATER, WATER], [SAND, WATER]])
        assert grid.counts() == {WATER: 3, SAND: 1}
        assert grid.fractions([WATER, GRASS]) == {WATER: 0.75, GRASS: 0.0}

    def test_neighbors8(self):
        grid = GridState.filled(WATER, 4, 3)
        assert len(grid.neighbors8(0, 0)) == 3
        assert len(grid.neighbors8(0, 1)) == 5
        assert len(grid.neighbors8(1, 1)) == 8

    def test_equality_and_hash(self):
        a = GridState.filled(SAND, 2, 2)
        b = GridState(cells=a.cells, step=5)
        assert a == b
        assert hash(a) == hash(b)
        assert a != GridState.filled(WATER, 2, 2)


class TestAdjacencyRuleTable:
    """Tests for AdjacencyRuleTable."""

    def test_defaults(self):
        table = AdjacencyRuleTable()
        assert table.allowed_neighbors(WATER, Direction.DOWN) == {WATER}
        assert table.allowed_neighbors(WATER, Direction.UP) == {WATER, SAND}
        assert table.allowed_neighbors(FOREST, Direction.UP) == {FOREST}
        assert table.allowed_neighbors(GRASS, Direction.LEFT) == {SAND, GRASS, FOREST}

    def test_missing_entry_is_permissive(self):
        """No rule for a pair means every tile is allowed."""
        table = AdjacencyRuleTable()
        assert table.allowed_neighbors(Tile(99), Direction.UP) == set(BASE_TILES)

        universe = [WATER, Tile(99)]
        assert table.allowed_neighbors(Tile(99), Direction.UP, universe) == set(universe)

    def test_install_copies(self):
        rules = {WATER: {Direction.DOWN: [WATER, SAND]}}
        table = AdjacencyRuleTable()
        table.install(rules)

        rules[WATER][Direction.DOWN].append(FOREST)
        rules[SAND] = {Direction.UP: [SAND]}

        assert table.allowed_neighbors(WATER, Direction.DOWN) == {WATER, SAND}
        assert table.allowed_neighbors(SAND, Direction.UP) == set(BASE_TILES)

    def test_install_replaces_table(self):
        table = AdjacencyRuleTable()
        table.install({WATER: {"down": [SAND]}})
        assert table.allowed_neighbors(WATER, Direction.DOWN) == {SAND}
        # The default entry for WATER/UP is gone
        assert table.allowed_neighbors(WATER, Direction.UP) == set(BASE_TILES)

    def test_reset(self):
        table = AdjacencyRuleTable({WATER: {Direction.DOWN: [SAND]}})
        table.reset()
        assert table.allowed_neighbors(WATER, Direction.DOWN) == {WATER}

    def test_no_symmetrization(self):
        """Asymmetric rules are kept exactly as written."""
        table = AdjacencyRuleTable({WATER: {Direction.DOWN: [SAND]}})
        assert table.is_valid_neighbor(WATER, SAND, Direction.DOWN)
        assert not table.is_valid_neighbor(WATER, WATER, Direction.DOWN)
        assert table.is_valid_neighbor(SAND, GRASS, Direction.UP)

    def test_malformed_entries_degrade(self):
        table = AdjacencyRuleTable({
            WATER: {"sideways": [SAND], "up": 5, Direction.LEFT: ["sand"]},
            "not-a-tile": {Direction.UP: [WATER]},
        })
        for direction in (Direction.UP, Direction.LEFT):
            assert table.allowed_neighbors(WATER, direction) == set(BASE_TILES)

    def test_non_mapping_rules_are_permissive(self):
        table = AdjacencyRuleTable()
        table.install([(WATER, {"up": [WATER]})])
        assert len(table) == 0
        assert table.allowed_neighbors(WATER, Direction.UP) == set(BASE_TILES)
        assert table.allowed_neighbors(WATER, Direction.DOWN) == set(BASE_TILES)

    def test_as_dict_is_a_copy(self):
        table = AdjacencyRuleTable({WATER: {Direction.DOWN: [SAND]}})
        snapshot = table.as_dict()
        assert snapshot == {WATER: {Direction.DOWN: frozenset({SAND})}}

        snapshot[WATER][Direction.DOWN] = frozenset({FOREST})
        assert table.allowed_neighbors(WATER, Direction.DOWN) == {SAND}

    def test_compatibility_matrix(self):
        table = AdjacencyRuleTable()
        universe = [WATER, SAND, GRASS, FOREST]
        matrix = table.compatibility(universe, Direction.DOWN)
        assert matrix.shape == (4, 4)
        # WATER allows only WATER below
        np.testing.assert_array_equal(matrix[0], [True, False, False, False])
        # FOREST allows GRASS and FOREST below
        np.testing.assert_array_equal(matrix[3], [False, False, True, True])

    def test_find_violations(self):
        table = AdjacencyRuleTable()
        # FOREST above WATER breaks FOREST/DOWN and WATER/UP
        grid = GridState.from_tiles([[FOREST], [WATER]])
        violations = table.find_violations(grid)
        assert len(violations) == 2
        directions = {v.direction for v in violations}
        assert directions == {Direction.DOWN, Direction.UP}

        assert table.find_violations(GridState.filled(WATER, 3, 3)) == []
