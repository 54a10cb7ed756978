"""Spherical Voronoi grid generation for planetary climate runs."""

import math
from typing import List, NamedTuple, Tuple

import numpy as np
import structlog
from scipy.spatial import SphericalVoronoi

from .alea_prng import AleaPRNG
from .hydrology_graph import GridTopologyError, HydrologyGraph, TerrainType

logger = structlog.get_logger()

GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))


class SphericalGridConfig(NamedTuple):
    """Configuration for spherical grid generation."""
    n_tiles: int
    radius: float = 6.371e6  # m
    water_ratio: float = 0.65  # fraction of tiles below sea level
    max_elevation: float = 6000.0  # m, amplitude of terrain bumps
    n_bumps: int = 24  # number of random terrain bumps
    jitter: float = 0.3  # point displacement as a fraction of spacing


def get_jittered_sphere_points(n_points: int, jitter: float, prng: AleaPRNG) -> np.ndarray:
    """
    Generate evenly spread unit vectors with random jitter.

    Starts from a Fibonacci lattice and nudges each point inside its own
    neighbourhood so no four points are cocircular.

    Args:
        n_points: Number of points
        jitter: Maximum displacement as a fraction of the mean spacing
        prng: Seeded random generator

    Returns:
        (n_points, 3) array of unit vectors
    """
    spacing = math.sqrt(4 * math.pi / n_points)
    amplitude = spacing * jitter
    points = np.empty((n_points, 3))
    for i in range(n_points):
        z = 1 - 2 * (i + 0.5) / n_points
        r = math.sqrt(1 - z * z)
        theta = GOLDEN_ANGLE * i
        p = np.array([r * math.cos(theta), r * math.sin(theta), z])
        east, north = _tangent_frame(p)
        du, dv = prng.jitter(amplitude)
        p = p + east * du + north * dv
        points[i] = p / np.linalg.norm(p)
    return points


def _tangent_frame(p: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Local east and north unit vectors at a point on the unit sphere."""
    east = np.cross([0.0, 0.0, 1.0], p)
    norm = np.linalg.norm(east)
    if norm < 1e-12:
        east = np.array([1.0, 0.0, 0.0])
    else:
        east = east / norm
    north = np.cross(p, east)
    return east, north


def get_bump_elevation(vectors: np.ndarray, config: SphericalGridConfig, prng: AleaPRNG) -> np.ndarray:
    """
    Elevation field made of random Gaussian bumps on the sphere.

    The same prng sequence produces the same bumps, so evaluating tiles and
    corners with generators seeded identically gives a consistent surface.
    """
    centers = np.array([prng.unit_vector() for _ in range(config.n_bumps)])
    amplitudes = np.array(
        [prng.uniform(-1.0, 1.0) * config.max_elevation for _ in range(config.n_bumps)]
    )
    widths = np.array([prng.uniform(0.2, 0.8) for _ in range(config.n_bumps)])

    angles = np.arccos(np.clip(vectors @ centers.T, -1.0, 1.0))
    return (amplitudes * np.exp(-((angles / widths) ** 2))).sum(axis=1)


def build_edges(regions: List[List[int]]) -> Tuple[np.ndarray, np.ndarray, List[List[int]], List[List[int]]]:
    """
    Build edge connectivity from ordered region vertex lists.

    Args:
        regions: Vertex indices of each Voronoi region, in boundary order

    Returns:
        Tuple of (edge_tiles, edge_corners, tile_edges, tile_neighbors)
    """
    edge_index = {}
    edge_tiles = []
    edge_corners = []
    tile_edges = [[] for _ in range(len(regions))]

    for t, region in enumerate(regions):
        n = len(region)
        for k in range(n):
            a, b = region[k], region[(k + 1) % n]
            key = (a, b) if a < b else (b, a)
            e = edge_index.get(key)
            if e is None:
                e = len(edge_corners)
                edge_index[key] = e
                edge_corners.append((a, b))
                edge_tiles.append([t, -1])
            else:
                edge_tiles[e][1] = t
            tile_edges[t].append(e)

    for e, (a, b) in enumerate(edge_tiles):
        if b == -1:
            raise GridTopologyError(f"Edge {e} borders only tile {a}")

    tile_neighbors = []
    for t, edges in enumerate(tile_edges):
        tile_neighbors.append(
            [edge_tiles[e][1] if edge_tiles[e][0] == t else edge_tiles[e][0] for e in edges]
        )

    return np.array(edge_tiles), np.array(edge_corners), tile_edges, tile_neighbors


def build_corner_connectivity(
    n_corners: int, edge_corners: np.ndarray, regions: List[List[int]]
) -> Tuple[List[List[int]], List[List[int]], List[List[int]]]:
    """
    Build corner adjacency.

    Returns:
        Tuple of (corner_corners, corner_edges, corner_tiles)
    """
    corner_corners = [[] for _ in range(n_corners)]
    corner_edges = [[] for _ in range(n_corners)]
    corner_tiles = [[] for _ in range(n_corners)]

    for e, (a, b) in enumerate(edge_corners):
        corner_corners[a].append(int(b))
        corner_edges[a].append(e)
        corner_corners[b].append(int(a))
        corner_edges[b].append(e)

    for t, region in enumerate(regions):
        for c in region:
            corner_tiles[c].append(t)

    return corner_corners, corner_edges, corner_tiles


def classify_terrain(
    tile_elevation: np.ndarray,
    corner_elevation: np.ndarray,
    tile_corners: List[List[int]],
    corner_corners: List[List[int]],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Assign land, water and coast flags.

    A tile is coast when its centre and corners straddle sea level. A water
    corner is coast when any neighbouring corner is dry.
    """
    tile_terrain = np.zeros(len(tile_elevation), dtype=np.int8)
    for t, corners in enumerate(tile_corners):
        heights = [tile_elevation[t]] + [corner_elevation[c] for c in corners]
        terrain = 0
        if any(h >= 0 for h in heights):
            terrain |= TerrainType.LAND
        if any(h < 0 for h in heights):
            terrain |= TerrainType.WATER
        tile_terrain[t] = terrain

    corner_terrain = np.zeros(len(corner_elevation), dtype=np.int8)
    for c, neighbors in enumerate(corner_corners):
        if corner_elevation[c] >= 0:
            corner_terrain[c] = TerrainType.LAND
        elif any(corner_elevation[n] >= 0 for n in neighbors):
            corner_terrain[c] = TerrainType.COAST
        else:
            corner_terrain[c] = TerrainType.WATER

    return tile_terrain, corner_terrain


def generate_planet_grid(config: SphericalGridConfig, seed: str = "planet") -> HydrologyGraph:
    """
    Generate a complete planetary grid.

    Args:
        config: Grid configuration
        seed: Seed for point jitter and terrain

    Returns:
        Validated HydrologyGraph
    """
    if config.n_tiles < 12:
        raise ValueError("A spherical grid needs at least 12 tiles")
    if not 0 <= config.water_ratio <= 1:
        raise ValueError("water_ratio must be in [0, 1]")

    logger.info("Generating planet grid", tiles=config.n_tiles, seed=seed)

    points = get_jittered_sphere_points(config.n_tiles, config.jitter, AleaPRNG(seed))
    sv = SphericalVoronoi(points, radius=1.0, center=np.zeros(3))
    sv.sort_vertices_of_regions()
    regions = [list(map(int, region)) for region in sv.regions]
    vertices = sv.vertices / np.linalg.norm(sv.vertices, axis=1)[:, None]

    edge_tiles, edge_corners, tile_edges, tile_neighbors = build_edges(regions)
    corner_corners, corner_edges, corner_tiles = build_corner_connectivity(
        len(vertices), edge_corners, regions
    )
    logger.info("Voronoi connectivity built", edges=len(edge_corners), corners=len(vertices))

    # Identical seeds make tiles and corners sample the same bump field
    terrain_seed = f"{seed}:terrain"
    tile_elevation = get_bump_elevation(points, config, AleaPRNG(terrain_seed))
    corner_elevation = get_bump_elevation(vertices, config, AleaPRNG(terrain_seed))
    sea_level = float(np.quantile(tile_elevation, config.water_ratio))
    tile_elevation -= sea_level
    corner_elevation -= sea_level

    tile_terrain, corner_terrain = classify_terrain(
        tile_elevation, corner_elevation, regions, corner_corners
    )

    polygons = []
    for t, region in enumerate(regions):
        east, north = _tangent_frame(points[t])
        offsets = vertices[region] - points[t]
        polygons.append(np.column_stack([offsets @ east, offsets @ north]) * config.radius)

    a = vertices[edge_corners[:, 0]]
    b = vertices[edge_corners[:, 1]]
    edge_length = np.arccos(np.clip(np.einsum("ij,ij->i", a, b), -1.0, 1.0)) * config.radius

    graph = HydrologyGraph(
        tile_elevation=tile_elevation,
        tile_latitude=np.arcsin(np.clip(points[:, 2], -1.0, 1.0)),
        tile_longitude=np.arctan2(points[:, 1], points[:, 0]),
        tile_area=sv.calculate_areas() * config.radius * config.radius,
        tile_terrain=tile_terrain,
        tile_neighbors=tile_neighbors,
        tile_edges=tile_edges,
        tile_corners=regions,
        edge_tiles=edge_tiles,
        edge_corners=edge_corners,
        edge_length=edge_length,
        corner_elevation=corner_elevation,
        corner_terrain=corner_terrain,
        corner_corners=corner_corners,
        corner_edges=corner_edges,
        corner_tiles=corner_tiles,
        corner_latitude=np.arcsin(np.clip(vertices[:, 2], -1.0, 1.0)),
        corner_longitude=np.arctan2(vertices[:, 1], vertices[:, 0]),
        tile_polygons=polygons,
        radius=config.radius,
    )

    logger.info(
        "Planet grid generated",
        tiles=graph.n_tiles,
        land_tiles=int(np.sum(tile_terrain == TerrainType.LAND)),
        water_tiles=int(np.sum(tile_terrain == TerrainType.WATER)),
        coast_tiles=int(np.sum(tile_terrain == TerrainType.COAST)),
    )
    return graph
