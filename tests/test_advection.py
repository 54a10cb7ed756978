"""Tests for humidity advection and precipitation."""

import numpy as np
import pytest

from py_climate.core.advection import HumidityAdvection, get_humidity_change
from py_climate.core.air_column import build_air_column
from py_climate.core.hydrology_graph import HydrologyGraph, TerrainType
from py_climate.core.season import SeasonOptions, TileClimate

from conftest import ring_graph_arrays

FLOW = 1.0e9


def make_climates(atmosphere, n, temperature=290.0):
    climates = []
    for _ in range(n):
        cells = build_air_column(atmosphere, 0.0, temperature)
        climates.append(TileClimate(temperature, cells[0].pressure, cells))
    return climates


class TestHumidityChange:
    """Test the convergence measure."""

    def test_rise_from_nothing(self):
        assert get_humidity_change(0.0, 0.01) == 1.0
        assert get_humidity_change(0.0, 0.0) == 0.0

    def test_proportional_change(self):
        assert get_humidity_change(0.5, 1.0) == pytest.approx(0.5)
        assert get_humidity_change(1.0, 1.0) == 0.0


class TestHumidityAdvection:
    """Test the worklist solver on a ring of tiles."""

    @pytest.fixture
    def ocean_ring(self):
        terrain = [TerrainType.WATER] + [TerrainType.LAND] * 4
        return HydrologyGraph(**ring_graph_arrays(terrain=terrain))

    def test_ocean_feeds_downwind_land(self, ocean_ring, atmosphere):
        climates = make_climates(atmosphere, 5)
        # Negative flow on edge i carries air from tile i into tile i + 1
        flows = np.full(5, -FLOW)

        visits = HumidityAdvection(ocean_ring, SeasonOptions()).run(climates, flows, 0.25)

        surface = climates[0].air_cells[0]
        assert surface.absolute_humidity == pytest.approx(1.1 * surface.saturation_humidity)
        assert visits[0] == 0
        assert list(visits[1:]) == [1, 1, 1, 1]

        # Supersaturated ocean air rains out on the first land tile
        assert climates[1].precipitation > 0
        for climate in climates[1:]:
            cell = climate.air_cells[0]
            assert cell.absolute_humidity == pytest.approx(cell.saturation_humidity)

    def test_sea_ice_dampens_ocean_humidity(self, ocean_ring, atmosphere):
        climates = make_climates(atmosphere, 5)
        climates[0].sea_ice = 0.5

        HumidityAdvection(ocean_ring, SeasonOptions()).run(climates, np.full(5, -FLOW), 0.25)

        surface = climates[0].air_cells[0]
        assert surface.absolute_humidity == pytest.approx(0.55 * surface.saturation_humidity)

    def test_visit_cap_bounds_relaxation(self, ring_graph, atmosphere):
        previous = make_climates(atmosphere, 5)
        for i, climate in enumerate(previous):
            for cell in climate.air_cells:
                cell.absolute_humidity = (i + 1) * 0.15 * cell.saturation_humidity
        climates = make_climates(atmosphere, 5)
        # Positive flow on edge i carries air from tile i + 1 into tile i
        flows = np.full(5, FLOW)

        visits = HumidityAdvection(ring_graph, SeasonOptions()).run(
            climates, flows, 0.25, previous
        )

        assert visits.max() <= 5
        assert visits.sum() > 5
        for climate in climates:
            for cell in climate.air_cells:
                assert cell.absolute_humidity <= cell.saturation_humidity * (1 + 1e-9)

    def test_still_air_does_not_rain(self, ring_graph, atmosphere):
        previous = make_climates(atmosphere, 5)
        for climate in previous:
            climate.air_cells[0].absolute_humidity = 0.002
        climates = make_climates(atmosphere, 5)

        visits = HumidityAdvection(ring_graph, SeasonOptions()).run(
            climates, np.zeros(5), 0.25, previous
        )

        assert list(visits) == [1] * 5
        assert all(c.precipitation == 0 for c in climates)
        # Without inbound air the column is not replenished
        assert all(c.air_cells[0].absolute_humidity == 0 for c in climates)

    def test_cold_air_snows(self, ocean_ring, atmosphere):
        climates = make_climates(atmosphere, 5, temperature=260.0)

        HumidityAdvection(ocean_ring, SeasonOptions()).run(climates, np.full(5, -FLOW), 0.25)

        assert climates[1].snow_fall > 0
        assert climates[1].snow_fall == pytest.approx(climates[1].precipitation)

    def test_short_upstream_column_brings_no_high_air(self, atmosphere):
        """
        Tile 1 draws air from ocean tiles 0 and 2 and loses as much to tile 2.

        Tile 0's column is a single layer, so above the surface only tile 2
        supplies air and inflow exactly balances outflow.
        """
        arrays = ring_graph_arrays(n=3, terrain=[TerrainType.WATER, TerrainType.LAND, TerrainType.WATER])
        arrays["tile_edges"] = [[2, 0], [0, 1, 3, 4], [1, 2, 3, 4]]
        arrays["tile_neighbors"] = [[2, 1], [0, 2, 2, 2], [1, 0, 1, 1]]
        arrays["tile_corners"] = [[0, 1], [0, 1, 0, 1], [0, 1, 0, 1]]
        arrays["edge_tiles"] = arrays["edge_tiles"] + [[1, 2], [1, 2]]
        arrays["edge_corners"] = [[0, 1]] * 5
        arrays["edge_length"] = [1.0e5] * 5
        arrays["corner_corners"] = [[1] * 5, [0] * 5]
        arrays["corner_edges"] = [list(range(5)), list(range(5))]
        graph = HydrologyGraph(**arrays)

        climates = make_climates(atmosphere, 3)
        climates[0].air_cells = climates[0].air_cells[:1]
        assert len(climates[1].air_cells) > 1
        # Edges 0 and 1 flow into tile 1, edge 3 flows out of it
        flows = np.array([-FLOW, FLOW, 0.0, -FLOW, 0.0])

        HumidityAdvection(graph, SeasonOptions(ocean_supersaturation=0.5)).run(climates, flows, 0.25)

        for land, ocean in zip(climates[1].air_cells[1:], climates[2].air_cells[1:]):
            assert land.absolute_humidity == pytest.approx(ocean.absolute_humidity)
            assert land.absolute_humidity == pytest.approx(0.5 * land.saturation_humidity)
        assert climates[1].precipitation == 0.0
