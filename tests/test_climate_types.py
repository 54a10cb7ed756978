"""Tests for climate, humidity, biome and ecology classification."""

import numpy as np

from py_climate.core.climate_types import (
    BIOME_NAMES,
    ECOLOGY_MATRIX,
    BiomeType,
    ClimateClassifier,
    ClimateType,
    EcologyType,
    HumidityType,
    get_climate_type,
    get_ecology,
    get_humidity_type,
)
from py_climate.core.constants import FREEZING_POINT
from py_climate.core.hydrology_graph import HydrologyGraph, TerrainType

from conftest import ring_graph_arrays


class TestClassification:
    """Test classification thresholds and the ecology matrix."""

    def test_climate_bands(self):
        assert get_climate_type(200.0) == ClimateType.POLAR
        assert get_climate_type(FREEZING_POINT + 1.5) == ClimateType.POLAR
        assert get_climate_type(FREEZING_POINT + 2.0) == ClimateType.SUBPOLAR
        assert get_climate_type(FREEZING_POINT + 15.0) == ClimateType.WARM_TEMPERATE
        assert get_climate_type(FREEZING_POINT + 30.0) == ClimateType.TROPICAL
        assert get_climate_type(FREEZING_POINT + 50.0) == ClimateType.TROPICAL
        assert get_climate_type(FREEZING_POINT + 68.0) == ClimateType.TROPICAL
        assert get_climate_type(FREEZING_POINT + 70.0) == ClimateType.SUPERTROPICAL

    def test_humidity_provinces(self):
        assert get_humidity_type(0.0) == HumidityType.SUPERARID
        assert get_humidity_type(124.9) == HumidityType.SUPERARID
        assert get_humidity_type(125.0) == HumidityType.PERARID
        assert get_humidity_type(1500.0) == HumidityType.SUBHUMID
        assert get_humidity_type(9000.0) == HumidityType.SUPERHUMID

    def test_water_is_superhumid_sea(self):
        assert get_humidity_type(0.0, water=True) == HumidityType.SUPERHUMID
        assert get_ecology(ClimateType.POLAR, HumidityType.ARID, water=True) == (
            BiomeType.SEA, EcologyType.SEA
        )

    def test_matrix_is_complete(self):
        for climate in ClimateType:
            assert len(ECOLOGY_MATRIX[climate]) == len(HumidityType)
        for biome in BiomeType:
            assert biome in BIOME_NAMES

    def test_matrix_samples(self):
        assert get_ecology(ClimateType.POLAR, HumidityType.SUPERARID) == (BiomeType.POLAR, EcologyType.DESERT)
        assert get_ecology(ClimateType.BOREAL, HumidityType.ARID) == (
            BiomeType.CONIFEROUS_FOREST, EcologyType.MOIST_FOREST
        )
        assert get_ecology(ClimateType.TROPICAL, HumidityType.SUPERHUMID) == (
            BiomeType.RAIN_FOREST, EcologyType.RAIN_FOREST
        )
        assert get_ecology(ClimateType.SUPERTROPICAL, HumidityType.HUMID) == (
            BiomeType.HOT_DESERT, EcologyType.DESERT
        )


class TestClimateClassifier:
    """Test per-tile classification."""

    def test_classify_tiles(self):
        terrain = [TerrainType.WATER, TerrainType.COAST] + [TerrainType.LAND] * 3
        graph = HydrologyGraph(**ring_graph_arrays(terrain=terrain))
        mean_temperature = np.array([300.0, 300.0, 300.0, 250.0, 283.0])
        precipitation = np.array([0.0, 3000.0, 50.0, 500.0, 800.0])

        result = ClimateClassifier(graph).classify(mean_temperature, precipitation)

        assert result.biome[0] == BiomeType.SEA
        assert result.ecology[0] == EcologyType.SEA
        # Coast tiles are classified like land
        assert result.climate[1] == ClimateType.TROPICAL
        assert result.biome[1] == BiomeType.RAIN_FOREST
        assert result.biome[2] == BiomeType.HOT_DESERT
        assert result.biome[3] == BiomeType.POLAR
        assert result.climate[4] == ClimateType.COOL_TEMPERATE
        assert result.humidity[4] == HumidityType.SEMIARID
