"""
Core climate simulation functionality.
"""

from .atmosphere import AtmosphereModel
from .air_column import AirCell, build_air_column
from .hydrology_graph import GridTopologyError, HydrologyGraph, TerrainType
from .planet import OrbitParams, PlanetParams
from .planet_grid import SphericalGridConfig, generate_planet_grid
from .season import Season, SeasonOptions, SeasonSimulator, TileClimate
from .hydrology import HydrologyOptions, RiverRouter, RiverTrace
from .orchestrator import ClimateOrchestrator, OrchestratorOptions, YearResult

__all__ = ['AtmosphereModel', 'AirCell', 'build_air_column',
           'GridTopologyError', 'HydrologyGraph', 'TerrainType',
           'OrbitParams', 'PlanetParams', 'SphericalGridConfig', 'generate_planet_grid',
           'Season', 'SeasonOptions', 'SeasonSimulator', 'TileClimate',
           'HydrologyOptions', 'RiverRouter', 'RiverTrace',
           'ClimateOrchestrator', 'OrchestratorOptions', 'YearResult']
