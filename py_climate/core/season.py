"""
Seasonal climate simulation.

One season is computed as a strict waterfall over the whole grid:
temperature, air columns, wind, sea ice, precipitation (iterative humidity
advection), ground water and river flow. Each stage only reads the outputs
of earlier stages and the previous season.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import structlog

from .advection import HumidityAdvection
from .air_column import AirCell, build_air_column
from .atmosphere import AtmosphereModel
from .constants import (
    FREEZING_POINT,
    HALF_PI,
    LAYER_HEIGHT,
    MAX_AIR_LAYERS,
    RUNOFF_FACTOR,
    SALT_WATER_FREEZING_OFFSET,
    SALT_WATER_FREEZING_POINT,
    SEA_ICE_EXPONENT,
    SEA_ICE_PER_SECOND,
    SNOW_MELT_PER_KELVIN_SECOND,
    SNOW_TO_RAIN_RATIO,
    TWO_PI,
)
from .hydrology import HydrologyOptions, RiverRouter, RiverTrace
from .hydrology_graph import HydrologyGraph

logger = structlog.get_logger()


@dataclass
class SeasonOptions:
    """Season simulation options."""

    max_air_layers: int = MAX_AIR_LAYERS
    half_itcz_width: float = 0.0872665  # rad, about 5° either side of the tropical equator
    itcz_pressure_factor: float = 1.25  # Pressure gradient boost inside the ITCZ
    advection_tolerance: float = 1e-4  # Proportional humidity rise that re-queues neighbours
    max_advection_visits: int = 5  # Hard cap on updates per tile and season
    ocean_supersaturation: float = 1.1  # Ocean humidity relative to saturation
    sea_ice_humidity_factor: float = 0.5  # Ocean humidity reduction under ice
    cloud_condensation_factor: float = 16.0  # Empirical precipitation multiplier
    runoff_weight: float = 3.0  # Weight of the larger of current and previous runoff
    cache_precision: int = 6  # Decimal places of latitude/elevation cache keys
    hydrology: HydrologyOptions = field(default_factory=HydrologyOptions)

    def __post_init__(self):
        if self.max_air_layers < 1:
            raise ValueError("max_air_layers must be at least 1")
        if self.max_advection_visits < 1:
            raise ValueError("max_advection_visits must be at least 1")
        if self.advection_tolerance <= 0:
            raise ValueError("advection_tolerance must be positive")

    @classmethod
    def from_settings(cls, settings) -> "SeasonOptions":
        """Build options from application Settings."""
        return cls(
            max_air_layers=settings.max_air_layers,
            advection_tolerance=settings.advection_tolerance,
            max_advection_visits=settings.max_advection_visits,
            cache_precision=settings.cache_precision,
        )


@dataclass
class TileClimate:
    """Climate of one tile during one season."""

    temperature: float  # K
    atmospheric_pressure: float  # kPa
    air_cells: List[AirCell]
    precipitation: float = 0.0  # mm
    snow_fall: float = 0.0  # mm water equivalent
    snow_cover: float = 0.0  # mm of snow
    sea_ice: float = 0.0  # m
    runoff: float = 0.0  # m³/s
    wind_direction: float = 0.0  # rad, in the tile's local frame
    wind_speed: float = 0.0  # m/s


@dataclass
class Season:
    """Complete climate state of one time slice of the year."""

    index: int
    elapsed_year: float  # fraction of the year at the start of the season
    proportion: float  # fraction of the year the season covers
    duration: float  # s
    tropical_equator: float  # rad
    tile_climates: List[TileClimate]
    edge_air_flows: np.ndarray
    river_trace: RiverTrace
    advection_visits: np.ndarray

    @property
    def edge_river_flows(self) -> np.ndarray:
        return self.river_trace.edge_river_flow

    def tile_values(self, name: str) -> np.ndarray:
        """Array of one TileClimate field across all tiles."""
        return np.array([getattr(climate, name) for climate in self.tile_climates])


class ClimateCache:
    """
    Memo of pure functions of latitude and elevation.

    Keys are rounded to a fixed number of decimals and the wrapped function
    is evaluated on the rounded values, so equal keys always map to
    bit-identical results regardless of evaluation order. Entries live for
    one season: the simulator clears the cache before every season.
    """

    def __init__(self, precision: int = 6):
        self.precision = precision
        self._values: Dict[Tuple, float] = {}

    def get(self, namespace: str, values: Tuple[float, ...], factory: Callable[..., float]) -> float:
        key = (namespace,) + tuple(round(v, self.precision) for v in values)
        result = self._values.get(key)
        if result is None:
            result = factory(*key[1:])
            self._values[key] = result
        return result

    def clear(self):
        self._values.clear()

    def __len__(self):
        return len(self._values)


def get_seasonal_latitude(latitude: float, tropical_equator: float) -> float:
    """Latitude relative to the tropical equator, reflected into [-π/2, π/2]."""
    lat = latitude - tropical_equator
    if lat > HALF_PI:
        return math.pi - lat
    if lat < -HALF_PI:
        return -math.pi - lat
    return lat


def get_snow_melt(temperature: float, duration: float) -> float:
    """Snow (or ice) melted over a duration at a temperature, in water equivalent."""
    return SNOW_MELT_PER_KELVIN_SECOND * (temperature - FREEZING_POINT) * duration


def get_sea_ice_growth(temperature: float, duration: float) -> float:
    """Sea ice grown over a duration; zero at or above the salt-water freezing point."""
    if temperature >= SALT_WATER_FREEZING_POINT:
        return 0.0
    return SEA_ICE_PER_SECOND * duration * (SALT_WATER_FREEZING_POINT - temperature) ** SEA_ICE_EXPONENT


class SeasonSimulator:
    """Computes seasons for one planet and grid."""

    def __init__(
        self,
        graph: HydrologyGraph,
        atmosphere: AtmosphereModel,
        options: Optional[SeasonOptions] = None,
    ):
        """
        Initialize the season simulator.

        Args:
            graph: Validated grid with tile polygons
            atmosphere: Atmosphere model of the planet
            options: Season options
        """
        if graph.tile_polygons is None:
            raise ValueError("Grid has no tile polygons; wind flow cannot be decomposed")
        self.graph = graph
        self.atmosphere = atmosphere
        self.planet = atmosphere.planet
        self.options = options or SeasonOptions()
        self.cache = ClimateCache(self.options.cache_precision)
        self.advection = HumidityAdvection(graph, self.options)
        self.router = RiverRouter(graph, self.options.hydrology)

    def simulate(
        self,
        index: int,
        elapsed_year: float,
        proportion: float,
        duration: float,
        previous: Optional[Season] = None,
    ) -> Season:
        """
        Compute one season.

        Args:
            index: Season index within the year
            elapsed_year: Fraction of the orbital year elapsed at the season start
            proportion: Fraction of the year covered by the season
            duration: Season length in s
            previous: Previous season, None for a cold start

        Returns:
            Fully populated Season
        """
        if duration <= 0:
            raise ValueError("Season duration must be positive")
        if not 0 < proportion <= 1:
            raise ValueError("Season proportion must be in (0, 1]")

        self.cache.clear()
        tropical_equator = self.get_tropical_equator(elapsed_year)
        logger.info(
            "Simulating season",
            index=index,
            elapsed_year=round(elapsed_year, 4),
            tropical_equator=round(tropical_equator, 4),
            cold_start=previous is None,
        )

        temperatures = self.calculate_temperatures(elapsed_year, tropical_equator)
        tile_climates = self.build_tile_climates(temperatures)
        edge_air_flows = self.calculate_wind(tile_climates, tropical_equator)
        self.calculate_sea_ice(tile_climates, duration, previous)
        visits = self.advection.run(
            tile_climates,
            edge_air_flows,
            proportion,
            previous.tile_climates if previous is not None else None,
        )
        self.calculate_ground_water(tile_climates, duration, previous)
        trace = self.router.route(np.array([climate.runoff for climate in tile_climates]))

        return Season(
            index=index,
            elapsed_year=elapsed_year,
            proportion=proportion,
            duration=duration,
            tropical_equator=tropical_equator,
            tile_climates=tile_climates,
            edge_air_flows=edge_air_flows,
            river_trace=trace,
            advection_visits=visits,
        )

    def get_tropical_equator(self, elapsed_year: float) -> float:
        """Latitude of peak insolation, following the axial tilt through the year."""
        return self.planet.axial_tilt * math.sin(TWO_PI * elapsed_year + HALF_PI) * 0.6666667

    def calculate_temperatures(self, elapsed_year: float, tropical_equator: float) -> np.ndarray:
        """
        Surface temperature of every tile.

        Returns:
            Temperature per tile in K
        """
        atmosphere = self.atmosphere
        equatorial = atmosphere.get_surface_temperature_at_position(elapsed_year)
        polar = atmosphere.get_surface_temperature_at_position(elapsed_year, polar=True)

        def at_latitude(latitude):
            return self.cache.get(
                "surface", (latitude,),
                lambda lat: atmosphere.get_temperature_at_latitude(equatorial, polar, lat),
            )

        def at_elevation(latitude, elevation):
            return atmosphere.get_temperature_at_elevation(at_latitude(latitude), elevation)

        temperatures = np.empty(self.graph.n_tiles)
        latitudes = self.graph.tile_latitude.tolist()
        elevations = self.graph.tile_elevation.tolist()
        for t in range(self.graph.n_tiles):
            latitude = abs(get_seasonal_latitude(latitudes[t], tropical_equator))
            temperatures[t] = self.cache.get("elevation", (latitude, elevations[t]), at_elevation)

        logger.debug(
            "Temperatures assigned",
            equatorial=round(equatorial, 2),
            polar=round(polar, 2),
            cached=len(self.cache),
        )
        return temperatures

    def build_tile_climates(self, temperatures: np.ndarray) -> List[TileClimate]:
        """Build air columns and the per-tile climate records."""
        tile_climates = []
        elevations = self.graph.tile_elevation.tolist()
        for t, temperature in enumerate(temperatures.tolist()):
            cells = build_air_column(
                self.atmosphere, elevations[t], temperature, self.options.max_air_layers
            )
            tile_climates.append(
                TileClimate(
                    temperature=temperature,
                    atmospheric_pressure=cells[0].pressure,
                    air_cells=cells,
                )
            )
        return tile_climates

    def get_pressure_gradient_force(self, latitude: float, tropical_equator: float) -> float:
        """
        Meridional pressure-gradient force at a latitude.

        Three alternating bands per hemisphere between the tropical equator
        and the pole, boosted inside the ITCZ.
        """
        def force(lat):
            c = 3 * math.pi / (HALF_PI + tropical_equator * (-1 if lat > tropical_equator else 1))
            pgf = -0.001 * math.sin(c * (lat - tropical_equator)) + 3.333333e-4
            if abs(lat - tropical_equator) < self.options.half_itcz_width:
                pgf *= self.options.itcz_pressure_factor
            return pgf

        return self.cache.get("pressure_gradient", (latitude,), force)

    def calculate_wind(self, tile_climates: List[TileClimate], tropical_equator: float) -> np.ndarray:
        """
        Wind per tile and the resulting air flow across every edge.

        Positive edge flow runs into the edge's first tile, negative flow
        into its second.

        Returns:
            Signed air flow per edge
        """
        graph = self.graph
        omega = self.planet.angular_velocity
        flows = np.zeros(graph.n_edges)

        for t, climate in enumerate(tile_climates):
            latitude = float(graph.tile_latitude[t])
            pgf = self.get_pressure_gradient_force(latitude, tropical_equator)
            coriolis = 2 * omega * math.sin(latitude)
            friction = float(graph.tile_friction[t])

            angle = (math.pi if pgf < 0 else 0.0) - math.atan2(coriolis, friction)
            angle = math.atan2(math.sin(angle), math.cos(angle))
            climate.wind_direction = angle + float(graph.tile_north[t])
            climate.wind_speed = abs(pgf) / math.hypot(coriolis, friction)
            self.add_tile_air_flow(t, climate.wind_direction, climate.wind_speed, flows)

        logger.debug("Wind computed", max_flow=float(np.max(np.abs(flows))) if len(flows) else 0.0)
        return flows

    def add_tile_air_flow(self, tile: int, wind_direction: float, wind_speed: float,
                          flows: np.ndarray):
        """
        Add the air a tile's wind pushes across each of its edges.

        The tile polygon lies in a local (east, north) frame, so rotating it
        by -wind_direction makes the wind blow along +x. Edges on the
        downwind side carry air out of the tile and edges on the upwind side
        carry it in, in proportion to their extent across the wind.
        """
        graph = self.graph
        cos_a = math.cos(-wind_direction)
        sin_a = math.sin(-wind_direction)
        polygon = graph.tile_polygons[tile]
        xs = (polygon[:, 0] * cos_a - polygon[:, 1] * sin_a).tolist()
        ys = (polygon[:, 0] * sin_a + polygon[:, 1] * cos_a).tolist()
        n = len(xs)
        for k, e in enumerate(graph.tile_edges[tile]):
            x1, y1 = xs[k], ys[k]
            x2, y2 = xs[(k + 1) % n], ys[(k + 1) % n]
            chord = math.hypot(x1 - x2, y1 - y2)
            if chord <= 0:
                continue
            direction = graph.edge_sign(e, tile)
            if x1 + x2 < 0:
                direction = -direction
            profile = abs(y1 - y2) / chord
            flows[e] -= direction * wind_speed * float(graph.edge_length[e]) * profile * LAYER_HEIGHT

    def calculate_sea_ice(self, tile_climates: List[TileClimate], duration: float,
                          previous: Optional[Season] = None):
        """Grow or melt sea ice on water and coast tiles."""
        for t, climate in enumerate(tile_climates):
            if not self.graph.has_water(t):
                continue
            previous_ice = previous.tile_climates[t].sea_ice if previous is not None else 0.0
            ice = get_sea_ice_growth(climate.temperature, duration)
            if ice == 0 and previous_ice > 0:
                melt = get_snow_melt(climate.temperature + SALT_WATER_FREEZING_OFFSET, duration)
                previous_ice -= min(max(melt, 0.0), previous_ice)
            climate.sea_ice = max(previous_ice, ice)

    def calculate_ground_water(self, tile_climates: List[TileClimate], duration: float,
                               previous: Optional[Season] = None):
        """
        Snow cover and runoff of land and coast tiles.

        Snow is carried over in water equivalent and melts above freezing.
        Runoff leans towards the wetter of the current and previous season
        to mimic slow aquifer response.
        """
        weight = self.options.runoff_weight
        for t, climate in enumerate(tile_climates):
            if self.graph.is_water_tile(t):
                continue
            prior = previous.tile_climates[t] if previous is not None else None

            previous_snow = (prior.snow_cover if prior is not None else 0.0) / SNOW_TO_RAIN_RATIO
            melt = 0.0
            if climate.temperature > FREEZING_POINT and previous_snow > 0:
                melt = min(get_snow_melt(climate.temperature, duration), previous_snow)
                previous_snow -= melt
            climate.snow_cover = max(previous_snow, climate.snow_fall) * SNOW_TO_RAIN_RATIO

            runoff = (
                (climate.precipitation - climate.snow_fall + melt)
                * RUNOFF_FACTOR
                * float(self.graph.tile_area[t])
                / duration
            )
            previous_runoff = prior.runoff if prior is not None else runoff
            climate.runoff = (
                weight * max(runoff, previous_runoff) + min(runoff, previous_runoff)
            ) / (weight + 1)
