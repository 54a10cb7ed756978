"""
Tile/edge/corner topology of a planetary grid.

The graph is index based: every attribute is an array (or a list of index
lists) addressed by tile, edge or corner index. It is read-only input for
the climate engine; per-season state lives in side tables.

Ordering convention for tile k-lists: edge ``tile_edges[t][k]`` joins corners
``tile_corners[t][k]`` and ``tile_corners[t][k + 1]`` (wrapping), and
``tile_neighbors[t][k]`` is the tile across that edge.
"""

from dataclasses import dataclass, field
from enum import IntFlag
from typing import List, Optional

import numpy as np
import structlog

from .constants import LAND_FRICTION_PER_METER, SEA_FRICTION

logger = structlog.get_logger()


class TerrainType(IntFlag):
    """Terrain flags. Coast is both land and water."""

    LAND = 1
    WATER = 2
    COAST = LAND | WATER


class GridTopologyError(ValueError):
    """Raised when a grid violates the topology the climate engine relies on."""


def friction_coefficients(elevation: np.ndarray) -> np.ndarray:
    """Wind friction per tile: constant over the sea, rising with land elevation."""
    elevation = np.asarray(elevation, dtype=np.float64)
    return np.where(
        elevation <= 0, SEA_FRICTION, elevation * LAND_FRICTION_PER_METER + SEA_FRICTION
    )


@dataclass
class HydrologyGraph:
    """Planet grid topology used for advection and river routing."""

    # Tile data
    tile_elevation: np.ndarray  # m
    tile_latitude: np.ndarray  # rad
    tile_longitude: np.ndarray  # rad
    tile_area: np.ndarray  # m²
    tile_terrain: np.ndarray  # TerrainType values
    tile_neighbors: List[List[int]]
    tile_edges: List[List[int]]
    tile_corners: List[List[int]]

    # Edge data
    edge_tiles: np.ndarray  # (n_edges, 2)
    edge_corners: np.ndarray  # (n_edges, 2)
    edge_length: np.ndarray  # m

    # Corner data
    corner_elevation: np.ndarray  # m
    corner_terrain: np.ndarray
    corner_corners: List[List[int]]
    corner_edges: List[List[int]]  # corner_edges[c][k] joins c and corner_corners[c][k]
    corner_tiles: List[List[int]]

    # Corner positions are informational only
    corner_latitude: Optional[np.ndarray] = field(default=None)
    corner_longitude: Optional[np.ndarray] = field(default=None)

    # Tile polygons in a local (east, north) tangent frame, in m
    tile_polygons: Optional[List[np.ndarray]] = field(default=None)
    tile_north: Optional[np.ndarray] = field(default=None)  # rad, angle of north in the frame
    tile_friction: Optional[np.ndarray] = field(default=None)

    radius: float = 6.371e6  # m

    def __post_init__(self):
        self.tile_elevation = np.asarray(self.tile_elevation, dtype=np.float64)
        self.tile_latitude = np.asarray(self.tile_latitude, dtype=np.float64)
        self.tile_longitude = np.asarray(self.tile_longitude, dtype=np.float64)
        self.tile_area = np.asarray(self.tile_area, dtype=np.float64)
        self.tile_terrain = np.asarray(self.tile_terrain, dtype=np.int8)
        self.edge_tiles = np.asarray(self.edge_tiles, dtype=np.int64).reshape(-1, 2)
        self.edge_corners = np.asarray(self.edge_corners, dtype=np.int64).reshape(-1, 2)
        self.edge_length = np.asarray(self.edge_length, dtype=np.float64)
        self.corner_elevation = np.asarray(self.corner_elevation, dtype=np.float64)
        self.corner_terrain = np.asarray(self.corner_terrain, dtype=np.int8)

        n_corners = len(self.corner_elevation)
        if self.corner_latitude is None:
            self.corner_latitude = np.zeros(n_corners)
        if self.corner_longitude is None:
            self.corner_longitude = np.zeros(n_corners)
        if self.tile_north is None:
            self.tile_north = np.full(len(self.tile_elevation), np.pi / 2)
        if self.tile_friction is None:
            self.tile_friction = friction_coefficients(self.tile_elevation)

        self.validate()

    @property
    def n_tiles(self) -> int:
        return len(self.tile_elevation)

    @property
    def n_edges(self) -> int:
        return len(self.edge_length)

    @property
    def n_corners(self) -> int:
        return len(self.corner_elevation)

    def validate(self):
        """
        Check topology invariants, failing fast with a descriptive error.

        Raises:
            GridTopologyError: On missing edges, inconsistent adjacency or
                out-of-range indices
        """
        n_tiles, n_edges, n_corners = self.n_tiles, self.n_edges, self.n_corners

        for name in ("tile_latitude", "tile_longitude", "tile_area", "tile_terrain", "tile_north"):
            if len(getattr(self, name)) != n_tiles:
                raise GridTopologyError(f"{name} has {len(getattr(self, name))} entries, expected {n_tiles}")
        for name in ("tile_neighbors", "tile_edges", "tile_corners"):
            if len(getattr(self, name)) != n_tiles:
                raise GridTopologyError(f"{name} has {len(getattr(self, name))} entries, expected {n_tiles}")
        if len(self.edge_tiles) != n_edges or len(self.edge_corners) != n_edges:
            raise GridTopologyError("edge_tiles and edge_corners must match edge_length")
        for name in ("corner_terrain", "corner_corners", "corner_edges", "corner_tiles"):
            if len(getattr(self, name)) != n_corners:
                raise GridTopologyError(f"{name} has {len(getattr(self, name))} entries, expected {n_corners}")
        if self.tile_polygons is not None and len(self.tile_polygons) != n_tiles:
            raise GridTopologyError("tile_polygons must have one polygon per tile")

        if n_edges and (self.edge_tiles.min() < 0 or self.edge_tiles.max() >= n_tiles):
            raise GridTopologyError("edge_tiles references a tile out of range")
        if n_edges and (self.edge_corners.min() < 0 or self.edge_corners.max() >= n_corners):
            raise GridTopologyError("edge_corners references a corner out of range")

        for t in range(n_tiles):
            edges = self.tile_edges[t]
            if not edges:
                raise GridTopologyError(f"Tile {t} has no edges")
            corners = self.tile_corners[t]
            neighbors = self.tile_neighbors[t]
            if len(corners) != len(edges) or len(neighbors) != len(edges):
                raise GridTopologyError(
                    f"Tile {t} has {len(edges)} edges, {len(corners)} corners "
                    f"and {len(neighbors)} neighbors"
                )
            for k, e in enumerate(edges):
                if not 0 <= e < n_edges:
                    raise GridTopologyError(f"Tile {t} references edge {e} out of range")
                a, b = self.edge_tiles[e]
                if t not in (a, b):
                    raise GridTopologyError(f"Edge {e} does not list tile {t}")
                if neighbors[k] != (b if a == t else a):
                    raise GridTopologyError(f"Tile {t} neighbor {k} is not across edge {e}")
                expected = {corners[k], corners[(k + 1) % len(corners)]}
                if set(self.edge_corners[e].tolist()) != expected:
                    raise GridTopologyError(f"Edge {e} does not join corners {sorted(expected)} of tile {t}")

        for c in range(n_corners):
            if not self.corner_corners[c]:
                raise GridTopologyError(f"Corner {c} has no neighboring corners")
            if len(self.corner_edges[c]) != len(self.corner_corners[c]):
                raise GridTopologyError(f"Corner {c} edge and corner lists differ in length")
            for k, e in enumerate(self.corner_edges[c]):
                if not 0 <= e < n_edges:
                    raise GridTopologyError(f"Corner {c} references edge {e} out of range")
                if set(self.edge_corners[e].tolist()) != {c, self.corner_corners[c][k]}:
                    raise GridTopologyError(f"Edge {e} does not join corner {c} and its neighbor {k}")

        logger.debug("Grid validated", tiles=n_tiles, edges=n_edges, corners=n_corners)

    def edge_sign(self, edge: int, tile: int) -> int:
        """+1 when queried from the edge's first tile, -1 from its second, else 0."""
        a, b = self.edge_tiles[edge]
        if tile == a:
            return 1
        if tile == b:
            return -1
        return 0

    def is_water_tile(self, tile: int) -> bool:
        """True for open water only, not coast."""
        return self.tile_terrain[tile] == TerrainType.WATER

    def has_water(self, tile: int) -> bool:
        """True for water and coast tiles."""
        return bool(self.tile_terrain[tile] & TerrainType.WATER)

    def lowest_tile_corner(self, tile: int) -> int:
        """Lowest bounding corner of a tile, ties broken by corner index."""
        return min(self.tile_corners[tile], key=lambda c: (self.corner_elevation[c], c))

    def edge_between(self, corner: int, other: int) -> int:
        """Index of the edge joining two corners, or -1."""
        for k, neighbor in enumerate(self.corner_corners[corner]):
            if neighbor == other:
                return self.corner_edges[corner][k]
        return -1
