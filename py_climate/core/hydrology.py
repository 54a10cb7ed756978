"""
River routing over grid corners.

This module implements:
- Seeding river sources at the lowest corner of every draining tile
- Greedy highest-first tracing towards the lowest neighbouring corner
- Lake formation in local basins, with overflow into an outlet
- Flow accumulation along existing downstream river chains
"""

import heapq
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import structlog

from .hydrology_graph import HydrologyGraph, TerrainType

logger = structlog.get_logger()


@dataclass
class HydrologyOptions:
    """River routing options."""
    min_runoff: float = 0.0  # Tiles must exceed this runoff (m³/s) to seed a river


@dataclass
class RiverTrace:
    """Per-season river state, indexed like the grid's edges and corners."""
    edge_river_flow: np.ndarray  # m³/s
    edge_river_source: np.ndarray  # upstream corner of a river edge, -1 if none
    edge_river_direction: np.ndarray  # downstream corner of a river edge, -1 if none
    corner_lake_depth: np.ndarray  # m

    @classmethod
    def empty(cls, n_edges: int, n_corners: int) -> "RiverTrace":
        return cls(
            edge_river_flow=np.zeros(n_edges),
            edge_river_source=np.full(n_edges, -1, dtype=np.int64),
            edge_river_direction=np.full(n_edges, -1, dtype=np.int64),
            corner_lake_depth=np.zeros(n_corners),
        )

    @property
    def river_edges(self) -> np.ndarray:
        """Indices of edges that carry a river."""
        return np.flatnonzero(self.edge_river_source >= 0)

    @property
    def lake_corners(self) -> np.ndarray:
        """Indices of corners holding a lake."""
        return np.flatnonzero(self.corner_lake_depth > 0)


class RiverRouter:
    """Traces rivers and lakes for one season's runoff."""

    def __init__(self, graph: HydrologyGraph, options: Optional[HydrologyOptions] = None):
        """
        Initialize river router.

        Args:
            graph: Grid topology, read only
            options: Routing options
        """
        self.graph = graph
        self.options = options or HydrologyOptions()

    def route(self, tile_runoff: np.ndarray) -> RiverTrace:
        """
        Route tile runoff into rivers.

        Each draining tile contributes its runoff to its lowest corner;
        tiles sharing a lowest corner add up.

        Args:
            tile_runoff: Runoff per tile in m³/s

        Returns:
            RiverTrace for the season
        """
        corner_runoff: Dict[int, float] = {}
        for t in np.flatnonzero(np.asarray(tile_runoff) > self.options.min_runoff):
            corner = self.graph.lowest_tile_corner(int(t))
            corner_runoff[corner] = corner_runoff.get(corner, 0.0) + float(tile_runoff[t])
        return self.route_from_corners(corner_runoff)

    def route_from_corners(self, corner_runoff: Dict[int, float]) -> RiverTrace:
        """
        Trace rivers from corners with known runoff.

        Corners are processed highest first (ties by index) so flow always
        moves towards corners that are resolved later.

        Args:
            corner_runoff: Runoff entering the network at each corner

        Returns:
            RiverTrace with flows, river markers and lake depths
        """
        graph = self.graph
        elevation = graph.corner_elevation
        trace = RiverTrace.empty(graph.n_edges, graph.n_corners)
        outflow: Dict[int, int] = {}  # corner -> river edge leaving it

        heap = [(-elevation[c], c) for c in corner_runoff]
        heapq.heapify(heap)
        queued = set(corner_runoff)
        previous = None

        while heap:
            _, corner = heapq.heappop(heap)
            downstream = self._get_downstream_corner(corner, outflow)
            basin = elevation[downstream] > elevation[corner]

            if basin and (previous is None or trace.corner_lake_depth[previous] == 0):
                trace.corner_lake_depth[corner] = self._get_lake_depth(corner)

            overflows = trace.corner_lake_depth[corner] + elevation[corner] >= elevation[downstream]
            if not basin or overflows:
                edge = graph.edge_between(corner, downstream)
                # A lake may not spill back up a river that feeds it
                if trace.edge_river_source[edge] == -1:
                    flow = corner_runoff.get(corner, 0.0) + self._get_inflow(trace, corner)
                    trace.edge_river_source[edge] = corner
                    trace.edge_river_direction[edge] = downstream
                    trace.edge_river_flow[edge] = flow
                    outflow[corner] = edge
                    self._propagate_downstream(trace, outflow, downstream, flow)

                    if (
                        graph.corner_terrain[downstream] == TerrainType.LAND
                        and trace.corner_lake_depth[downstream] == 0
                        and downstream not in queued
                        and downstream not in outflow
                    ):
                        heapq.heappush(heap, (-elevation[downstream], downstream))
                        queued.add(downstream)

            previous = corner

        logger.info(
            "Rivers traced",
            sources=len(corner_runoff),
            river_edges=len(outflow),
            lakes=int(np.sum(trace.corner_lake_depth > 0)),
        )
        return trace

    def _get_downstream_corner(self, corner: int, outflow: Dict[int, int]) -> int:
        """Lowest neighbour, joining an existing river when that is not uphill."""
        elevation = self.graph.corner_elevation
        neighbors = self.graph.corner_corners[corner]

        def key(c):
            return (elevation[c], c)

        sources = [c for c in neighbors if c in outflow]
        if sources:
            lowest_source = min(sources, key=key)
            if elevation[lowest_source] <= elevation[corner]:
                return lowest_source
        return min(neighbors, key=key)

    def _get_lake_depth(self, corner: int) -> float:
        """Depth to the lowest surrounding corner or tile."""
        graph = self.graph
        rim = min(graph.corner_elevation[c] for c in graph.corner_corners[corner])
        if graph.corner_tiles[corner]:
            rim = min(rim, min(graph.tile_elevation[t] for t in graph.corner_tiles[corner]))
        return max(0.0, float(rim - graph.corner_elevation[corner]))

    def _get_inflow(self, trace: RiverTrace, corner: int) -> float:
        """Total flow of rivers ending at a corner."""
        return float(
            sum(
                trace.edge_river_flow[e]
                for e in self.graph.corner_edges[corner]
                if trace.edge_river_direction[e] == corner
            )
        )

    @staticmethod
    def _propagate_downstream(trace: RiverTrace, outflow: Dict[int, int], corner: int, flow: float):
        """Add flow to every river edge below a corner."""
        visited = set()
        while corner in outflow and corner not in visited:
            visited.add(corner)
            edge = outflow[corner]
            trace.edge_river_flow[edge] += flow
            corner = int(trace.edge_river_direction[edge])
