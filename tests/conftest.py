"""Shared fixtures: small synthetic grids and an Earth-like atmosphere."""

import numpy as np
import pytest

from py_climate.core.atmosphere import AtmosphereModel
from py_climate.core.hydrology_graph import HydrologyGraph, TerrainType
from py_climate.core.planet import PlanetParams
from py_climate.core.planet_grid import SphericalGridConfig, generate_planet_grid


def square_graph_arrays():
    """
    Two hemispherical tiles bounded by a four-corner loop A-B-C-D.

    Corner elevations are A=30, B=20, C=10, D=40 so water runs A -> B -> C.
    Edges: 0=(A,B), 1=(B,C), 2=(C,D), 3=(D,A).
    """
    return dict(
        tile_elevation=[25.0, 25.0],
        tile_latitude=[0.5, -0.5],
        tile_longitude=[0.0, 0.0],
        tile_area=[1.0e6, 1.0e6],
        tile_terrain=[TerrainType.LAND, TerrainType.LAND],
        tile_neighbors=[[1, 1, 1, 1], [0, 0, 0, 0]],
        tile_edges=[[0, 1, 2, 3], [3, 2, 1, 0]],
        tile_corners=[[0, 1, 2, 3], [0, 3, 2, 1]],
        edge_tiles=[[0, 1], [0, 1], [0, 1], [0, 1]],
        edge_corners=[[0, 1], [1, 2], [2, 3], [3, 0]],
        edge_length=[1000.0, 1000.0, 1000.0, 1000.0],
        corner_elevation=[30.0, 20.0, 10.0, 40.0],
        corner_terrain=[TerrainType.LAND] * 4,
        corner_corners=[[1, 3], [0, 2], [1, 3], [2, 0]],
        corner_edges=[[0, 3], [0, 1], [1, 2], [2, 3]],
        corner_tiles=[[0, 1], [0, 1], [0, 1], [0, 1]],
    )


def ring_graph_arrays(n=5, terrain=None):
    """
    A ring of n lune-shaped tiles between two pole corners.

    Edge i separates tile i from tile i + 1; both edges of every tile join
    the north (0) and south (1) corners.
    """
    terrain = terrain or [TerrainType.LAND] * n
    half = 5.0e4
    return dict(
        tile_elevation=[0.0] * n,
        tile_latitude=[0.0] * n,
        tile_longitude=[2 * np.pi * i / n for i in range(n)],
        tile_area=[1.0e9] * n,
        tile_terrain=terrain,
        tile_neighbors=[[(i - 1) % n, (i + 1) % n] for i in range(n)],
        tile_edges=[[(i - 1) % n, i] for i in range(n)],
        tile_corners=[[0, 1] for _ in range(n)],
        edge_tiles=[[i, (i + 1) % n] for i in range(n)],
        edge_corners=[[0, 1] for _ in range(n)],
        edge_length=[1.0e5] * n,
        corner_elevation=[0.0, 0.0],
        corner_terrain=[TerrainType.LAND, TerrainType.LAND],
        corner_corners=[[1] * n, [0] * n],
        corner_edges=[list(range(n)), list(range(n))],
        corner_tiles=[list(range(n)), list(range(n))],
        tile_polygons=[np.array([[0.0, half], [0.0, -half]]) for _ in range(n)],
    )


@pytest.fixture
def square_graph():
    return HydrologyGraph(**square_graph_arrays())


@pytest.fixture
def ring_graph():
    return HydrologyGraph(**ring_graph_arrays())


@pytest.fixture
def planet():
    return PlanetParams()


@pytest.fixture
def atmosphere(planet):
    return AtmosphereModel(planet)


@pytest.fixture(scope="module")
def planet_graph():
    """A small generated planet shared by the tests of one module."""
    return generate_planet_grid(SphericalGridConfig(n_tiles=120), seed="climate_test")
