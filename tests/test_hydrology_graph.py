"""Tests for grid topology validation and lookups."""

import numpy as np
import pytest

from py_climate.core.constants import LAND_FRICTION_PER_METER, SEA_FRICTION
from py_climate.core.hydrology_graph import (
    GridTopologyError,
    HydrologyGraph,
    TerrainType,
    friction_coefficients,
)

from conftest import ring_graph_arrays, square_graph_arrays


class TestValidation:
    """Test that malformed grids fail fast."""

    def test_valid_grids(self, square_graph, ring_graph):
        assert square_graph.n_tiles == 2
        assert square_graph.n_edges == 4
        assert square_graph.n_corners == 4
        assert ring_graph.n_tiles == 5

    def test_tile_without_edges(self):
        arrays = square_graph_arrays()
        arrays["tile_edges"][1] = []

        with pytest.raises(GridTopologyError, match="no edges"):
            HydrologyGraph(**arrays)

    def test_edge_tile_out_of_range(self):
        arrays = square_graph_arrays()
        arrays["edge_tiles"][0] = [0, 5]

        with pytest.raises(GridTopologyError, match="out of range"):
            HydrologyGraph(**arrays)

    def test_neighbor_not_across_edge(self):
        arrays = ring_graph_arrays()
        arrays["tile_neighbors"][2] = [3, 1]

        with pytest.raises(GridTopologyError, match="neighbor"):
            HydrologyGraph(**arrays)

    def test_corner_without_neighbors(self):
        arrays = square_graph_arrays()
        arrays["corner_corners"][0] = []
        arrays["corner_edges"][0] = []

        with pytest.raises(GridTopologyError, match="Corner 0"):
            HydrologyGraph(**arrays)

    def test_mismatched_array_lengths(self):
        arrays = square_graph_arrays()
        arrays["tile_area"] = [1.0]

        with pytest.raises(GridTopologyError):
            HydrologyGraph(**arrays)

    def test_topology_error_is_value_error(self):
        assert issubclass(GridTopologyError, ValueError)


class TestLookups:
    """Test index helpers."""

    def test_edge_sign(self, square_graph):
        assert square_graph.edge_sign(0, 0) == 1
        assert square_graph.edge_sign(0, 1) == -1
        assert square_graph.edge_sign(0, 7) == 0

    def test_lowest_tile_corner(self, square_graph):
        # Corner C (index 2) sits at 10 m
        assert square_graph.lowest_tile_corner(0) == 2
        assert square_graph.lowest_tile_corner(1) == 2

    def test_lowest_corner_tie_breaks_by_index(self, ring_graph):
        assert ring_graph.lowest_tile_corner(3) == 0

    def test_edge_between(self, square_graph):
        assert square_graph.edge_between(0, 1) == 0
        assert square_graph.edge_between(2, 1) == 1
        assert square_graph.edge_between(0, 2) == -1

    def test_water_flags(self):
        terrain = [TerrainType.WATER, TerrainType.COAST, TerrainType.LAND,
                   TerrainType.LAND, TerrainType.LAND]
        graph = HydrologyGraph(**ring_graph_arrays(terrain=terrain))

        assert graph.is_water_tile(0)
        assert not graph.is_water_tile(1)
        assert graph.has_water(1)
        assert not graph.has_water(2)

    def test_default_north_and_friction(self, square_graph):
        assert np.allclose(square_graph.tile_north, np.pi / 2)
        assert square_graph.tile_friction[0] == pytest.approx(25 * LAND_FRICTION_PER_METER + SEA_FRICTION)


def test_friction_coefficients():
    friction = friction_coefficients(np.array([-500.0, 0.0, 1000.0]))

    assert friction[0] == SEA_FRICTION
    assert friction[1] == SEA_FRICTION
    assert friction[2] == pytest.approx(1000.0 * LAND_FRICTION_PER_METER + SEA_FRICTION)
