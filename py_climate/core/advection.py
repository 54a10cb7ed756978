"""
Horizontal humidity advection and precipitation.

Oceans act as humidity sources; land tiles are relaxed with a FIFO worklist.
Each update mixes the humidity carried in by inbound edges, condenses any
supersaturation into rain or snow, and re-queues downstream land tiles while
the humidity keeps rising by more than the tolerance. A per-tile visit cap
bounds the relaxation.
"""

from collections import deque
from typing import List, Optional

import numpy as np
import structlog

from .constants import (
    FREEZING_POINT,
    LAYER_HEIGHT,
    NEARLY_ZERO,
    SPECIFIC_GAS_CONSTANT_WATER,
)
from .hydrology_graph import HydrologyGraph

logger = structlog.get_logger()


def get_humidity_change(first: float, second: float) -> float:
    """Proportional change between two humidities, 1 for a rise from nothing."""
    if first < NEARLY_ZERO:
        return 1.0 if second > NEARLY_ZERO else 0.0
    if second == 0:
        return 1.0
    return 1 - first / second


class HumidityAdvection:
    """Worklist solver for one season's humidity field."""

    def __init__(self, graph: HydrologyGraph, options):
        """
        Initialize the solver.

        Args:
            graph: Grid topology
            options: SeasonOptions providing tolerance, visit cap and empirical factors
        """
        self.graph = graph
        self.options = options

    def run(self, tile_climates: List, edge_air_flows: np.ndarray, proportion: float,
            previous: Optional[List] = None) -> np.ndarray:
        """
        Advect humidity and set precipitation and snowfall on every land tile.

        Args:
            tile_climates: TileClimate per tile, with air columns built
            edge_air_flows: Signed air flow per edge
            proportion: Fraction of the year covered by the season
            previous: Previous season's TileClimates, if any

        Returns:
            Number of updates performed on each tile
        """
        graph = self.graph
        options = self.options
        flows = edge_air_flows.tolist()

        queue = deque()
        queued = set()
        for t, climate in enumerate(tile_climates):
            if graph.is_water_tile(t):
                factor = options.ocean_supersaturation
                if climate.sea_ice > 0:
                    factor *= options.sea_ice_humidity_factor
                for cell in climate.air_cells:
                    cell.absolute_humidity = cell.saturation_humidity * factor
                    cell.relative_humidity = factor if cell.saturation_humidity > 0 else 0.0
                continue

            if previous is not None:
                for cell, previous_cell in zip(climate.air_cells, previous[t].air_cells):
                    cell.absolute_humidity = previous_cell.absolute_humidity
            queue.append(t)
            queued.add(t)

        visits = np.zeros(len(tile_climates), dtype=np.int64)
        updates = 0
        while queue:
            t = queue.popleft()
            queued.discard(t)
            visits[t] += 1
            updates += 1
            for destination in self._update_tile(t, tile_climates, flows, proportion):
                if destination not in queued and visits[destination] < options.max_advection_visits:
                    queue.append(destination)
                    queued.add(destination)

        logger.info(
            "Humidity advection converged",
            updates=updates,
            capped_tiles=int(np.sum(visits >= options.max_advection_visits)),
        )
        return visits

    def _update_tile(self, t: int, tile_climates: List, flows: List[float], proportion: float) -> List[int]:
        """
        Relax one tile and return the land tiles downstream of it if it changed.
        """
        graph = self.graph
        climate = tile_climates[t]
        cells = climate.air_cells
        n_layers = len(cells)
        original = [cell.absolute_humidity for cell in cells]

        # Per inbound edge: the (air flow, humidity flux) of each layer
        inflows = []
        outflow = 0.0
        destinations = []
        for k, e in enumerate(graph.tile_edges[t]):
            flow = flows[e] * graph.edge_sign(e, t)
            neighbor = graph.tile_neighbors[t][k]
            if flow > 0:
                neighbor_cells = tile_climates[neighbor].air_cells
                layers = []
                for j in range(n_layers):
                    # Layers above a shorter upstream column bring no air
                    if j < len(neighbor_cells):
                        layers.append((flow, neighbor_cells[j].absolute_humidity * flow))
                    else:
                        layers.append((0.0, 0.0))
                if any(flux > 0 for _, flux in layers):
                    inflows.append(layers)
            elif flow < 0:
                outflow -= flow
                if not graph.is_water_tile(neighbor):
                    destinations.append(neighbor)

        if not inflows and sum(original) == 0:
            return []

        for j in range(n_layers):
            total_air = sum(layers[j][0] for layers in inflows)
            total_flux = sum(layers[j][1] for layers in inflows)
            density = 0.0
            if total_flux > 0:
                convection = outflow - total_air
                for layers in inflows:
                    air, flux = layers[j]
                    if flux == 0:
                        continue
                    share = flux / total_flux
                    density += share * flux / (air + max(convection, 0.0))
                if convection < 0:
                    density += density * (-convection / total_air)
            cells[j].absolute_humidity = density

        self._precipitate(climate, proportion)

        delta = 0.0
        for j in range(n_layers):
            new = cells[j].absolute_humidity
            if original[j] > new:
                continue
            delta = max(delta, get_humidity_change(original[j], new))

        if delta > self.options.advection_tolerance:
            return destinations
        return []

    def _precipitate(self, climate, proportion: float):
        """Condense supersaturated layers into rain or snow."""
        factor = self.options.cloud_condensation_factor
        rain = 0.0
        snow = 0.0
        for cell in climate.air_cells:
            humidity = cell.absolute_humidity
            if cell.saturation_vapor_pressure <= 0:
                vapor_mixing_ratio = humidity / max(cell.density - humidity, NEARLY_ZERO)
                cell.relative_humidity = 1.0 if humidity > 0 else 0.0
            else:
                cell.relative_humidity = (
                    humidity * SPECIFIC_GAS_CONSTANT_WATER * cell.temperature
                    / cell.saturation_vapor_pressure
                )
                vapor_mixing_ratio = cell.saturation_mixing_ratio * cell.relative_humidity

            if vapor_mixing_ratio > cell.saturation_mixing_ratio:
                cell.absolute_humidity = cell.saturation_humidity
                cell.relative_humidity = 1.0
                cloud = (vapor_mixing_ratio - cell.saturation_mixing_ratio) * factor
                amount = cloud * cell.density * LAYER_HEIGHT * proportion
                if climate.temperature > FREEZING_POINT:
                    rain += amount
                else:
                    snow += amount

        climate.snow_fall = snow
        climate.precipitation = rain + snow
