"""
Planet-wide atmospheric model.

This module implements:
- Blackbody and surface temperatures from orbital distance
- Greenhouse factor and latitude-dependent insolation factors
- Lapse-rate temperature extrapolation with elevation
- Simplified barometric pressure, density and saturation helpers
"""

import math

import structlog

from .constants import (
    COSMIC_BACKGROUND_TEMPERATURE,
    FREEZING_POINT,
    GAS_CONSTANT_RATIO,
    HEAT_OF_VAPORIZATION_WATER,
    IDEAL_GAS_CONSTANT,
    INSOLATION_ATTENUATION,
    INSOLATION_SCALE,
    MAGNUS_ABOVE_FREEZING,
    MAGNUS_BELOW_FREEZING,
    MOLAR_MASS_OF_AIR,
    POLAR_AIR_MASS_EXPONENT,
    POLAR_COS_ANGLE,
    SATURATION_MIXING_RATIO_FACTOR,
    SPECIFIC_GAS_CONSTANT_DRY_AIR,
    SPECIFIC_GAS_CONSTANT_WATER,
    SPECIFIC_HEAT_DRY_AIR,
    STEFAN_BOLTZMANN,
    TOP_OF_ATMOSPHERE_PRESSURE,
    VAPOR_PRESSURE_CLAMP,
)
from .planet import PlanetParams

logger = structlog.get_logger()


class AtmosphereModel:
    """Derived atmospheric properties of one planet."""

    def __init__(self, planet: PlanetParams):
        """
        Initialize the atmosphere model.

        Args:
            planet: Planet, orbit and atmosphere parameters
        """
        self.planet = planet
        self.pressure = planet.surface_pressure
        self.gravity = planet.surface_gravity

        self.average_blackbody_temperature = self.get_blackbody_temperature(
            planet.orbit.semi_major_axis
        )
        self.atmospheric_mass = (
            4 * math.pi * planet.radius * planet.radius * self.pressure * 1000 / self.gravity
        )
        self.scale_height = (
            self.pressure
            * 1000
            / (
                self.gravity
                * self.get_atmospheric_density(
                    self.average_blackbody_temperature, self.pressure
                )
            )
        )
        self.greenhouse_factor = self._calculate_greenhouse_factor()
        self.insolation_factor_equatorial = self._calculate_insolation_factor(polar=False)
        self.insolation_factor_polar = self._calculate_insolation_factor(polar=True)

        self.greenhouse_effect = max(
            0.0,
            self.average_blackbody_temperature
            * self.insolation_factor_equatorial
            * self.greenhouse_factor
            - self.average_blackbody_temperature,
        )

        average_surface = (
            self.get_surface_temperature_at_distance(planet.orbit.semi_major_axis)
            + self.get_surface_temperature_at_distance(
                planet.orbit.semi_major_axis, polar=True
            )
        ) / 2
        self.atmospheric_height = (
            math.log(TOP_OF_ATMOSPHERE_PRESSURE / self.pressure)
            * IDEAL_GAS_CONSTANT
            * average_surface
            / (-self.gravity * MOLAR_MASS_OF_AIR)
        )

        logger.info(
            "Atmosphere initialized",
            pressure=self.pressure,
            scale_height=round(self.scale_height, 1),
            greenhouse_factor=round(self.greenhouse_factor, 4),
            greenhouse_effect=round(self.greenhouse_effect, 2),
            atmospheric_height=round(self.atmospheric_height, 1),
        )

    def _calculate_greenhouse_factor(self) -> float:
        potential = self.planet.greenhouse_potential
        if potential == 0:
            return 1.0
        return 0.933835 + 0.0441533 * math.exp(1.79077 * potential) * (
            1.11169 + math.log(self.pressure)
        )

    def _calculate_insolation_factor(self, polar: bool) -> float:
        """
        Fraction of insolation reaching the surface.

        At the poles sunlight crosses a longer path through the atmosphere;
        the relative air mass is that of a spherical shell one scale height
        thick seen at the polar incidence angle.
        """
        if polar:
            r = self.planet.radius / self.scale_height
            rc = r * POLAR_COS_ANGLE
            air_mass = math.sqrt(rc * rc + 2 * r + 1) - rc
            attenuation = INSOLATION_ATTENUATION ** (air_mass ** POLAR_AIR_MASS_EXPONENT)
        else:
            attenuation = INSOLATION_ATTENUATION
        return (
            INSOLATION_SCALE * self.atmospheric_mass * attenuation / self.planet.mass
        ) ** 0.25

    def get_blackbody_temperature(self, distance: float) -> float:
        """Equilibrium blackbody temperature at a distance from the star, in K."""
        absorbed = self.planet.stellar_luminosity * (1 - self.planet.albedo)
        return (absorbed / (16 * math.pi * STEFAN_BOLTZMANN * distance * distance)) ** 0.25

    def get_surface_temperature_at_distance(self, distance: float, polar: bool = False) -> float:
        """
        Surface temperature at the equator (or poles) at an orbital distance.

        Args:
            distance: Distance from the star in m
            polar: Use the polar insolation factor instead of the equatorial one

        Returns:
            Temperature in K
        """
        factor = self.insolation_factor_polar if polar else self.insolation_factor_equatorial
        return self.get_blackbody_temperature(distance) * factor + self.greenhouse_effect

    def get_surface_temperature_at_position(self, year_fraction: float, polar: bool = False) -> float:
        """Surface temperature at the orbital position after a fraction of the year."""
        return self.get_surface_temperature_at_distance(
            self.planet.orbit.distance_at(year_fraction), polar
        )

    @staticmethod
    def get_temperature_at_latitude(equatorial: float, polar: float, latitude: float) -> float:
        """Interpolate between polar and equatorial temperatures."""
        return polar + (equatorial - polar) * math.cos(latitude * 0.8)

    def get_lapse_rate(self, surface_temperature: float) -> float:
        """
        Temperature decrease per metre of altitude.

        Uses the saturated adiabatic lapse rate when the atmosphere carries
        water vapour, otherwise the dry rate g/cp.
        """
        ratio = self.planet.water_vapor_ratio
        if ratio <= 0:
            return self.gravity / SPECIFIC_HEAT_DRY_AIR
        t2 = surface_temperature * surface_temperature
        numerator = (
            SPECIFIC_GAS_CONSTANT_DRY_AIR * t2
            + HEAT_OF_VAPORIZATION_WATER * ratio * surface_temperature
        )
        denominator = (
            SPECIFIC_HEAT_DRY_AIR * SPECIFIC_GAS_CONSTANT_DRY_AIR * t2
            + HEAT_OF_VAPORIZATION_WATER * HEAT_OF_VAPORIZATION_WATER * ratio * GAS_CONSTANT_RATIO
        )
        return self.gravity * numerator / denominator

    def get_temperature_at_elevation(self, surface_temperature: float, elevation: float) -> float:
        """
        Extrapolate a surface temperature to an elevation.

        Args:
            surface_temperature: Temperature at elevation 0, in K
            elevation: Elevation above the datum in m

        Returns:
            Temperature in K; the blackbody temperature above the top of the atmosphere
        """
        if elevation <= 0:
            return surface_temperature
        if elevation >= self.atmospheric_height:
            return self.average_blackbody_temperature
        return max(
            COSMIC_BACKGROUND_TEMPERATURE,
            surface_temperature - elevation * self.get_lapse_rate(surface_temperature),
        )

    def get_atmospheric_pressure(self, temperature: float, elevation: float) -> float:
        """Pressure in kPa at an elevation, from the simplified barometric formula."""
        if elevation <= 0:
            return self.pressure
        return self.pressure * math.exp(
            -self.gravity * MOLAR_MASS_OF_AIR * elevation / (IDEAL_GAS_CONSTANT * temperature)
        )

    @staticmethod
    def get_atmospheric_density(temperature: float, pressure: float) -> float:
        """Dry air density in kg/m³ for a temperature in K and pressure in kPa."""
        return pressure * 1000 / (SPECIFIC_GAS_CONSTANT_DRY_AIR * temperature)

    @staticmethod
    def get_saturation_vapor_pressure(temperature: float) -> float:
        """Saturation vapour pressure of water in Pa (Magnus-type approximation)."""
        a, b, c, d = MAGNUS_ABOVE_FREEZING if temperature > FREEZING_POINT else MAGNUS_BELOW_FREEZING
        t = temperature - FREEZING_POINT
        return a * math.exp((b - t / c) * (t / (d + t)))

    @staticmethod
    def get_saturation_humidity(saturation_vapor_pressure: float, temperature: float) -> float:
        """Saturation absolute humidity in kg/m³."""
        return saturation_vapor_pressure / (SPECIFIC_GAS_CONSTANT_WATER * temperature)

    @staticmethod
    def get_saturation_mixing_ratio(saturation_vapor_pressure: float, pressure: float) -> float:
        """
        Saturation mixing ratio of water vapour in kg/kg.

        Args:
            saturation_vapor_pressure: In Pa
            pressure: Total pressure in kPa
        """
        vapor_pressure = saturation_vapor_pressure / 1000
        if vapor_pressure >= pressure:
            vapor_pressure = pressure * VAPOR_PRESSURE_CLAMP
        return SATURATION_MIXING_RATIO_FACTOR * vapor_pressure / (pressure - vapor_pressure)
