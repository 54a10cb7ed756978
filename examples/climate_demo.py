"""
Example demonstrating a full climate year on a generated planet.
"""

import argparse

import numpy as np

from py_climate.config import settings
from py_climate.core import (
    AtmosphereModel,
    ClimateOrchestrator,
    OrchestratorOptions,
    PlanetParams,
    SphericalGridConfig,
    TerrainType,
    generate_planet_grid,
)
from py_climate.core.climate_types import BIOME_NAMES, BiomeType
from py_climate.utils.log import configure_logging


def main():
    parser = argparse.ArgumentParser(description="Simulate one climate year")
    parser.add_argument("--tiles", type=int, default=settings.default_tiles)
    parser.add_argument("--seed", default=settings.default_seed)
    parser.add_argument("--plot", action="store_true", help="Show maps with matplotlib")
    args = parser.parse_args()

    configure_logging(settings)

    graph = generate_planet_grid(SphericalGridConfig(n_tiles=args.tiles), seed=args.seed)
    atmosphere = AtmosphereModel(PlanetParams())
    orchestrator = ClimateOrchestrator(
        graph, atmosphere, OrchestratorOptions.from_settings(settings)
    )

    print("Calculating climate...")
    result = orchestrator.set_climate()
    summary = result.summary
    land = graph.tile_terrain != TerrainType.WATER

    print(f"Temperature range: {summary.temperature_min.min() - 273.15:.1f}°C "
          f"to {summary.temperature_max.max() - 273.15:.1f}°C")
    print(f"Average temperature: {summary.temperature_mean.mean() - 273.15:.1f}°C")
    print(f"Average land precipitation: {summary.precipitation[land].mean():.1f} mm")
    print(f"River edges: {len(result.final_season.river_trace.river_edges)}")

    counts = np.bincount(result.classification.biome, minlength=len(BiomeType))
    for biome in BiomeType:
        if counts[biome]:
            print(f"  {BIOME_NAMES[biome]}: {counts[biome]} tiles")

    if args.plot:
        import matplotlib.pyplot as plt

        lon = np.degrees(graph.tile_longitude)
        lat = np.degrees(graph.tile_latitude)
        fig, axes = plt.subplots(2, 2, figsize=(12, 8))
        panels = [
            (graph.tile_elevation, "terrain", "Elevation (m)"),
            (summary.temperature_mean - 273.15, "RdYlBu_r", "Mean temperature (°C)"),
            (summary.precipitation, "Blues", "Precipitation (mm/year)"),
            (result.classification.biome, "tab20", "Biome"),
        ]
        for ax, (values, cmap, title) in zip(axes.flat, panels):
            scatter = ax.scatter(lon, lat, c=values, cmap=cmap, s=6)
            ax.set_title(title)
            ax.set_xlim(-180, 180)
            ax.set_ylim(-90, 90)
            plt.colorbar(scatter, ax=ax)
        plt.tight_layout()
        plt.show()


if __name__ == "__main__":
    main()
