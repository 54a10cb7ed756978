"""
Climate, humidity, biome and ecology classification.

This module implements:
- Climate bands from yearly mean temperature
- Humidity provinces from annual precipitation
- A Holdridge-style matrix mapping both to biome and ecology types
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

import numpy as np
import structlog

from .constants import FREEZING_POINT
from .hydrology_graph import HydrologyGraph, TerrainType

logger = structlog.get_logger()


class ClimateType(IntEnum):
    """Temperature bands, coldest first."""

    POLAR = 0
    SUBPOLAR = 1
    BOREAL = 2
    COOL_TEMPERATE = 3
    WARM_TEMPERATE = 4
    SUBTROPICAL = 5
    TROPICAL = 6
    SUPERTROPICAL = 7


class HumidityType(IntEnum):
    """Humidity provinces, driest first."""

    SUPERARID = 0
    PERARID = 1
    ARID = 2
    SEMIARID = 3
    SUBHUMID = 4
    HUMID = 5
    PERHUMID = 6
    SUPERHUMID = 7


class BiomeType(IntEnum):
    """Broad biome types."""

    POLAR = 0
    TUNDRA = 1
    LICHEN_WOODLAND = 2
    CONIFEROUS_FOREST = 3
    MIXED_FOREST = 4
    STEPPE = 5
    COLD_DESERT = 6
    DECIDUOUS_FOREST = 7
    SHRUBLAND = 8
    HOT_DESERT = 9
    SAVANNA = 10
    MONSOON_FOREST = 11
    RAIN_FOREST = 12
    SEA = 13


class EcologyType(IntEnum):
    """Life zones within a biome."""

    DESERT = 1
    ICE = 2
    DRY_TUNDRA = 3
    MOIST_TUNDRA = 4
    WET_TUNDRA = 5
    RAIN_TUNDRA = 6
    DESERT_SCRUB = 7
    DRY_SCRUB = 8
    STEPPE = 9
    THORN_SCRUB = 10
    THORN_WOODLAND = 11
    VERY_DRY_FOREST = 12
    DRY_FOREST = 13
    MOIST_FOREST = 14
    WET_FOREST = 15
    RAIN_FOREST = 16
    SEA = 17


# Biome names for display
BIOME_NAMES = {
    BiomeType.POLAR: "Polar",
    BiomeType.TUNDRA: "Tundra",
    BiomeType.LICHEN_WOODLAND: "Lichen Woodland",
    BiomeType.CONIFEROUS_FOREST: "Coniferous Forest",
    BiomeType.MIXED_FOREST: "Mixed Forest",
    BiomeType.STEPPE: "Steppe",
    BiomeType.COLD_DESERT: "Cold Desert",
    BiomeType.DECIDUOUS_FOREST: "Deciduous Forest",
    BiomeType.SHRUBLAND: "Shrubland",
    BiomeType.HOT_DESERT: "Hot Desert",
    BiomeType.SAVANNA: "Savanna",
    BiomeType.MONSOON_FOREST: "Monsoon Forest",
    BiomeType.RAIN_FOREST: "Rain Forest",
    BiomeType.SEA: "Sea",
}

# Upper bounds of mean temperature above freezing, in K
CLIMATE_THRESHOLDS = (
    (1.5, ClimateType.POLAR),
    (3.0, ClimateType.SUBPOLAR),
    (6.0, ClimateType.BOREAL),
    (12.0, ClimateType.COOL_TEMPERATE),
    (18.0, ClimateType.WARM_TEMPERATE),
    (24.0, ClimateType.SUBTROPICAL),
    (68.0, ClimateType.TROPICAL),
)

# Exclusive upper bounds of annual precipitation, in mm
HUMIDITY_THRESHOLDS = (
    (125.0, HumidityType.SUPERARID),
    (250.0, HumidityType.PERARID),
    (500.0, HumidityType.ARID),
    (1000.0, HumidityType.SEMIARID),
    (2000.0, HumidityType.SUBHUMID),
    (4000.0, HumidityType.HUMID),
    (8000.0, HumidityType.PERHUMID),
)

B = BiomeType
E = EcologyType

# Per climate band: (biome, ecology) for each humidity province, driest first
ECOLOGY_MATRIX = {
    ClimateType.POLAR: [
        (B.POLAR, E.DESERT), (B.POLAR, E.DESERT), (B.POLAR, E.ICE), (B.POLAR, E.ICE),
        (B.POLAR, E.ICE), (B.POLAR, E.ICE), (B.POLAR, E.ICE), (B.POLAR, E.ICE),
    ],
    ClimateType.SUBPOLAR: [
        (B.TUNDRA, E.DRY_TUNDRA), (B.TUNDRA, E.MOIST_TUNDRA), (B.TUNDRA, E.WET_TUNDRA),
        (B.TUNDRA, E.RAIN_TUNDRA), (B.TUNDRA, E.RAIN_TUNDRA), (B.TUNDRA, E.RAIN_TUNDRA),
        (B.TUNDRA, E.RAIN_TUNDRA), (B.TUNDRA, E.RAIN_TUNDRA),
    ],
    ClimateType.BOREAL: [
        (B.LICHEN_WOODLAND, E.DESERT), (B.LICHEN_WOODLAND, E.DRY_SCRUB),
        (B.CONIFEROUS_FOREST, E.MOIST_FOREST), (B.CONIFEROUS_FOREST, E.WET_FOREST),
        (B.CONIFEROUS_FOREST, E.RAIN_FOREST), (B.CONIFEROUS_FOREST, E.RAIN_FOREST),
        (B.CONIFEROUS_FOREST, E.RAIN_FOREST), (B.CONIFEROUS_FOREST, E.RAIN_FOREST),
    ],
    ClimateType.COOL_TEMPERATE: [
        (B.COLD_DESERT, E.DESERT), (B.COLD_DESERT, E.DESERT_SCRUB), (B.STEPPE, E.STEPPE),
        (B.MIXED_FOREST, E.MOIST_FOREST), (B.MIXED_FOREST, E.WET_FOREST),
        (B.MIXED_FOREST, E.RAIN_FOREST), (B.MIXED_FOREST, E.RAIN_FOREST),
        (B.MIXED_FOREST, E.RAIN_FOREST),
    ],
    ClimateType.WARM_TEMPERATE: [
        (B.HOT_DESERT, E.DESERT), (B.HOT_DESERT, E.DESERT_SCRUB), (B.SHRUBLAND, E.THORN_SCRUB),
        (B.SHRUBLAND, E.DRY_FOREST), (B.DECIDUOUS_FOREST, E.MOIST_FOREST),
        (B.DECIDUOUS_FOREST, E.WET_FOREST), (B.DECIDUOUS_FOREST, E.RAIN_FOREST),
        (B.DECIDUOUS_FOREST, E.RAIN_FOREST),
    ],
    ClimateType.SUBTROPICAL: [
        (B.HOT_DESERT, E.DESERT), (B.HOT_DESERT, E.DESERT_SCRUB), (B.SAVANNA, E.THORN_WOODLAND),
        (B.MONSOON_FOREST, E.DRY_FOREST), (B.MONSOON_FOREST, E.MOIST_FOREST),
        (B.RAIN_FOREST, E.WET_FOREST), (B.RAIN_FOREST, E.RAIN_FOREST),
        (B.RAIN_FOREST, E.RAIN_FOREST),
    ],
    ClimateType.TROPICAL: [
        (B.HOT_DESERT, E.DESERT), (B.HOT_DESERT, E.DESERT_SCRUB), (B.SAVANNA, E.THORN_WOODLAND),
        (B.SAVANNA, E.VERY_DRY_FOREST), (B.MONSOON_FOREST, E.DRY_FOREST),
        (B.RAIN_FOREST, E.MOIST_FOREST), (B.RAIN_FOREST, E.WET_FOREST),
        (B.RAIN_FOREST, E.RAIN_FOREST),
    ],
    ClimateType.SUPERTROPICAL: [(B.HOT_DESERT, E.DESERT)] * 8,
}


def get_climate_type(mean_temperature: float) -> ClimateType:
    """Climate band of a yearly mean temperature in K."""
    for bound, climate in CLIMATE_THRESHOLDS:
        if mean_temperature <= FREEZING_POINT + bound:
            return climate
    return ClimateType.SUPERTROPICAL


def get_humidity_type(annual_precipitation: float, water: bool = False) -> HumidityType:
    """Humidity province of an annual precipitation in mm; open water is superhumid."""
    if water:
        return HumidityType.SUPERHUMID
    for bound, humidity in HUMIDITY_THRESHOLDS:
        if annual_precipitation < bound:
            return humidity
    return HumidityType.SUPERHUMID


def get_ecology(climate: ClimateType, humidity: HumidityType, water: bool = False) -> Tuple[BiomeType, EcologyType]:
    """Biome and ecology for a climate band and humidity province."""
    if water:
        return BiomeType.SEA, EcologyType.SEA
    return ECOLOGY_MATRIX[climate][humidity]


@dataclass
class TileClassification:
    """Per-tile classification arrays."""
    climate: np.ndarray
    humidity: np.ndarray
    biome: np.ndarray
    ecology: np.ndarray


class ClimateClassifier:
    """Classifies every tile from its yearly climate summary."""

    def __init__(self, graph: HydrologyGraph):
        self.graph = graph

    def classify(self, mean_temperature: np.ndarray, annual_precipitation: np.ndarray) -> TileClassification:
        """
        Classify all tiles.

        Args:
            mean_temperature: Yearly mean temperature per tile in K
            annual_precipitation: Annual precipitation per tile in mm

        Returns:
            TileClassification with enum values per tile
        """
        n = self.graph.n_tiles
        climate = np.zeros(n, dtype=np.int8)
        humidity = np.zeros(n, dtype=np.int8)
        biome = np.zeros(n, dtype=np.int8)
        ecology = np.zeros(n, dtype=np.int8)

        for t in range(n):
            water = self.graph.tile_terrain[t] == TerrainType.WATER
            climate[t] = get_climate_type(float(mean_temperature[t]))
            humidity[t] = get_humidity_type(float(annual_precipitation[t]), water)
            biome[t], ecology[t] = get_ecology(
                ClimateType(climate[t]), HumidityType(humidity[t]), water
            )

        counts = np.bincount(biome, minlength=len(BiomeType))
        logger.info(
            "Tiles classified",
            biomes={BIOME_NAMES[b]: int(counts[b]) for b in BiomeType if counts[b]},
        )
        return TileClassification(climate, humidity, biome, ecology)
