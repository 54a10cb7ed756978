"""Tests for compact season records."""

import numpy as np
import pytest

from py_climate.core.records import SeasonRecord, restore_season, to_record
from py_climate.core.season import SeasonSimulator


class TestSeasonRecords:
    """Test compressing and restoring seasons."""

    @pytest.fixture
    def simulator(self, planet_graph, atmosphere):
        return SeasonSimulator(planet_graph, atmosphere)

    @pytest.fixture
    def season(self, simulator):
        return simulator.simulate(0, 0.0, 1 / 12, 3.15581e7 / 12)

    def test_record_restores_through_json(self, simulator, season):
        payload = to_record(season).model_dump_json()
        restored = restore_season(SeasonRecord.model_validate_json(payload), simulator)

        assert np.array_equal(restored.tile_values("temperature"), season.tile_values("temperature"))
        assert np.array_equal(restored.tile_values("runoff"), season.tile_values("runoff"))
        assert np.array_equal(restored.edge_river_flows, season.edge_river_flows)
        assert np.array_equal(
            restored.river_trace.edge_river_direction, season.river_trace.edge_river_direction
        )
        for original, copy in zip(season.tile_climates, restored.tile_climates):
            assert [c.absolute_humidity for c in copy.air_cells] == [
                c.absolute_humidity for c in original.air_cells
            ]

    def test_restored_season_chains(self, simulator, season):
        restored = restore_season(to_record(season), simulator)
        nxt = simulator.simulate(1, 1 / 12, 1 / 12, 3.15581e7 / 12, restored)

        assert len(nxt.tile_climates) == len(season.tile_climates)

    def test_relative_humidity_recomputed(self, simulator, season):
        restored = restore_season(to_record(season), simulator)

        for climate in restored.tile_climates:
            for cell in climate.air_cells:
                if cell.saturation_humidity > 0:
                    assert cell.relative_humidity == pytest.approx(
                        cell.absolute_humidity / cell.saturation_humidity
                    )

    def test_mismatched_grid_rejected(self, simulator, season):
        record = to_record(season)
        truncated = record.model_copy(update={"tiles": record.tiles[:-1]})

        with pytest.raises(ValueError):
            restore_season(truncated, simulator)
