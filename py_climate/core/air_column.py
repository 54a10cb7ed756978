"""Vertical air column above a surface tile."""

from dataclasses import dataclass
from typing import List

from .atmosphere import AtmosphereModel
from .constants import LAYER_HEIGHT, MAX_AIR_LAYERS, TROPOPAUSE_ELEVATION


@dataclass
class AirCell:
    """One fixed-height layer of atmosphere above a tile."""

    elevation: float  # m above the datum, bottom of the layer
    temperature: float  # K
    pressure: float  # kPa
    density: float  # kg/m³
    saturation_vapor_pressure: float  # Pa
    saturation_humidity: float  # kg/m³
    saturation_mixing_ratio: float  # kg/kg
    absolute_humidity: float = 0.0  # kg/m³
    relative_humidity: float = 0.0


def build_air_cell(
    atmosphere: AtmosphereModel, elevation: float, temperature: float
) -> AirCell:
    """Compute the thermodynamic state of a layer at an elevation and temperature."""
    pressure = atmosphere.get_atmospheric_pressure(temperature, elevation)
    density = atmosphere.get_atmospheric_density(temperature, pressure)
    if elevation >= TROPOPAUSE_ELEVATION:
        # Above the tropopause all water vapour has already precipitated
        return AirCell(elevation, temperature, pressure, density, 0.0, 0.0, 0.0)
    svp = atmosphere.get_saturation_vapor_pressure(temperature)
    return AirCell(
        elevation=elevation,
        temperature=temperature,
        pressure=pressure,
        density=density,
        saturation_vapor_pressure=svp,
        saturation_humidity=atmosphere.get_saturation_humidity(svp, temperature),
        saturation_mixing_ratio=atmosphere.get_saturation_mixing_ratio(svp, pressure),
    )


def build_air_column(
    atmosphere: AtmosphereModel,
    tile_elevation: float,
    surface_temperature: float,
    max_layers: int = MAX_AIR_LAYERS,
) -> List[AirCell]:
    """
    Build the stack of air layers above a tile, bottom-up.

    Layers start at the tile surface, or at sea level for submerged tiles,
    and are generated until max_layers is reached or a layer has no
    saturation vapour pressure left. That layer is kept as the last one.

    Args:
        atmosphere: Planet atmosphere model
        tile_elevation: Tile elevation in m (negative below sea level)
        surface_temperature: Temperature of the lowest layer in K
        max_layers: Upper bound on the number of layers

    Returns:
        AirCells ordered from the surface upwards
    """
    base = max(0.0, tile_elevation)
    cells = []
    for index in range(max_layers):
        height = index * LAYER_HEIGHT
        if index == 0:
            temperature = surface_temperature
        else:
            temperature = atmosphere.get_temperature_at_elevation(surface_temperature, height)
        cell = build_air_cell(atmosphere, base + height, temperature)
        cells.append(cell)
        if cell.saturation_vapor_pressure <= 0:
            break
    return cells
