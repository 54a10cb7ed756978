"""
Compact, serializable season records.

Only the summary fields of each tile and the absolute humidity of each air
layer are kept; everything else in an air column is recomputed on restore.
"""

from typing import List

import numpy as np
from pydantic import BaseModel, Field

from .air_column import build_air_column
from .hydrology import RiverTrace
from .season import Season, SeasonSimulator, TileClimate


class TileClimateRecord(BaseModel):
    """Compact climate of one tile."""

    temperature: float = Field(..., description="Surface temperature in K")
    atmospheric_pressure: float = Field(..., description="Surface pressure in kPa")
    precipitation: float = Field(default=0.0, description="Precipitation in mm")
    snow_fall: float = Field(default=0.0, description="Snowfall in mm water equivalent")
    snow_cover: float = Field(default=0.0, description="Snow cover in mm")
    sea_ice: float = Field(default=0.0, description="Sea ice thickness in m")
    runoff: float = Field(default=0.0, description="Runoff in m³/s")
    wind_direction: float = Field(default=0.0, description="Wind direction in rad")
    wind_speed: float = Field(default=0.0, description="Wind speed in m/s")
    absolute_humidity: List[float] = Field(
        default_factory=list, description="Absolute humidity per air layer, bottom-up"
    )


class SeasonRecord(BaseModel):
    """Compact form of a season."""

    index: int
    elapsed_year: float
    proportion: float
    duration: float
    tropical_equator: float
    tiles: List[TileClimateRecord]
    edge_air_flows: List[float]
    edge_river_flows: List[float]
    edge_river_sources: List[int]
    edge_river_directions: List[int]
    corner_lake_depths: List[float]


def to_record(season: Season) -> SeasonRecord:
    """Compress a season into its serializable record."""
    tiles = [
        TileClimateRecord(
            temperature=climate.temperature,
            atmospheric_pressure=climate.atmospheric_pressure,
            precipitation=climate.precipitation,
            snow_fall=climate.snow_fall,
            snow_cover=climate.snow_cover,
            sea_ice=climate.sea_ice,
            runoff=climate.runoff,
            wind_direction=climate.wind_direction,
            wind_speed=climate.wind_speed,
            absolute_humidity=[cell.absolute_humidity for cell in climate.air_cells],
        )
        for climate in season.tile_climates
    ]
    trace = season.river_trace
    return SeasonRecord(
        index=season.index,
        elapsed_year=season.elapsed_year,
        proportion=season.proportion,
        duration=season.duration,
        tropical_equator=season.tropical_equator,
        tiles=tiles,
        edge_air_flows=season.edge_air_flows.tolist(),
        edge_river_flows=trace.edge_river_flow.tolist(),
        edge_river_sources=trace.edge_river_source.tolist(),
        edge_river_directions=trace.edge_river_direction.tolist(),
        corner_lake_depths=trace.corner_lake_depth.tolist(),
    )


def restore_season(record: SeasonRecord, simulator: SeasonSimulator) -> Season:
    """
    Rebuild a full season from its record.

    Air columns are regenerated from the stored temperatures; the stored
    humidities are applied layer by layer and relative humidity follows.

    Raises:
        ValueError: If the record does not match the simulator's grid
    """
    graph = simulator.graph
    if len(record.tiles) != graph.n_tiles:
        raise ValueError(f"Record has {len(record.tiles)} tiles, grid has {graph.n_tiles}")
    if len(record.edge_air_flows) != graph.n_edges or len(record.edge_river_flows) != graph.n_edges:
        raise ValueError("Record edge arrays do not match the grid")
    if len(record.corner_lake_depths) != graph.n_corners:
        raise ValueError("Record corner arrays do not match the grid")

    tile_climates = []
    for t, tile in enumerate(record.tiles):
        cells = build_air_column(
            simulator.atmosphere,
            float(graph.tile_elevation[t]),
            tile.temperature,
            simulator.options.max_air_layers,
        )
        for cell, humidity in zip(cells, tile.absolute_humidity):
            cell.absolute_humidity = humidity
            if cell.saturation_humidity > 0:
                cell.relative_humidity = humidity / cell.saturation_humidity
            else:
                cell.relative_humidity = 1.0 if humidity > 0 else 0.0
        tile_climates.append(
            TileClimate(
                temperature=tile.temperature,
                atmospheric_pressure=tile.atmospheric_pressure,
                air_cells=cells,
                precipitation=tile.precipitation,
                snow_fall=tile.snow_fall,
                snow_cover=tile.snow_cover,
                sea_ice=tile.sea_ice,
                runoff=tile.runoff,
                wind_direction=tile.wind_direction,
                wind_speed=tile.wind_speed,
            )
        )

    trace = RiverTrace(
        edge_river_flow=np.array(record.edge_river_flows, dtype=np.float64),
        edge_river_source=np.array(record.edge_river_sources, dtype=np.int64),
        edge_river_direction=np.array(record.edge_river_directions, dtype=np.int64),
        corner_lake_depth=np.array(record.corner_lake_depths, dtype=np.float64),
    )
    return Season(
        index=record.index,
        elapsed_year=record.elapsed_year,
        proportion=record.proportion,
        duration=record.duration,
        tropical_equator=record.tropical_equator,
        tile_climates=tile_climates,
        edge_air_flows=np.array(record.edge_air_flows, dtype=np.float64),
        river_trace=trace,
        advection_visits=np.zeros(graph.n_tiles, dtype=np.int64),
    )
