"""
Planet and orbit parameters consumed by the climate engine.

These are plain input structs: the engine never randomizes them. Defaults
describe an Earth-like world so that a grid alone is enough to run a year.
"""

import math
from dataclasses import dataclass, field

from .constants import GRAVITATIONAL_CONSTANT, TWO_PI


@dataclass
class OrbitParams:
    """Keplerian orbit of the planet around its star."""

    semi_major_axis: float = 1.496e11  # m
    eccentricity: float = 0.0167
    period: float = 3.15581e7  # s, one orbital year

    def __post_init__(self):
        if self.semi_major_axis <= 0:
            raise ValueError("semi_major_axis must be positive")
        if not 0 <= self.eccentricity < 1:
            raise ValueError("eccentricity must be in [0, 1)")
        if self.period <= 0:
            raise ValueError("period must be positive")

    def distance_at(self, year_fraction: float) -> float:
        """
        Distance from the star after the given fraction of the year.

        The fraction is measured from periapsis; Kepler's equation is solved
        with a fixed number of Newton steps so the result is reproducible.
        """
        mean_anomaly = TWO_PI * (year_fraction % 1.0)
        e = self.eccentricity
        eccentric_anomaly = mean_anomaly if e < 0.8 else math.pi
        for _ in range(16):
            delta = (eccentric_anomaly - e * math.sin(eccentric_anomaly) - mean_anomaly) / (
                1 - e * math.cos(eccentric_anomaly)
            )
            eccentric_anomaly -= delta
            if abs(delta) < 1e-12:
                break
        return self.semi_major_axis * (1 - e * math.cos(eccentric_anomaly))


@dataclass
class PlanetParams:
    """Physical parameters of a terrestrial planet and its atmosphere."""

    radius: float = 6.371e6  # m
    mass: float = 5.972e24  # kg
    rotational_period: float = 86164.0  # s, sidereal day
    axial_tilt: float = 0.4091  # rad
    albedo: float = 0.3
    stellar_luminosity: float = 3.828e26  # W
    orbit: OrbitParams = field(default_factory=OrbitParams)

    # Atmosphere
    surface_pressure: float = 101.325  # kPa
    greenhouse_potential: float = 0.22  # composition-derived, 0 disables the effect
    water_vapor_ratio: float = 0.0025  # mass fraction, > 0 selects the moist lapse rate

    def __post_init__(self):
        if self.radius <= 0:
            raise ValueError("radius must be positive")
        if self.mass <= 0:
            raise ValueError("mass must be positive")
        if self.rotational_period == 0:
            raise ValueError("rotational_period must be non-zero")
        if self.surface_pressure <= 0:
            raise ValueError("surface_pressure must be positive")
        if not 0 <= self.albedo < 1:
            raise ValueError("albedo must be in [0, 1)")

    @property
    def surface_gravity(self) -> float:
        """Surface gravitational acceleration in m/s²."""
        return GRAVITATIONAL_CONSTANT * self.mass / (self.radius * self.radius)

    @property
    def angular_velocity(self) -> float:
        """Rotation rate in rad/s."""
        return TWO_PI / self.rotational_period
