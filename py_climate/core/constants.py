"""
Physical constants and empirical coefficients shared by the climate engine.

Units are SI unless noted: temperatures in K, pressures in kPa (saturation
vapour pressure in Pa), elevations in m, durations in s.
"""

import math

# Universal and gas constants
GRAVITATIONAL_CONSTANT = 6.67408e-11  # m^3 kg^-1 s^-2
STEFAN_BOLTZMANN = 5.670367e-8  # W m^-2 K^-4
IDEAL_GAS_CONSTANT = 8.31446  # J mol^-1 K^-1
MOLAR_MASS_OF_AIR = 0.0289644  # kg/mol
SPECIFIC_GAS_CONSTANT_DRY_AIR = 287.058  # J kg^-1 K^-1
SPECIFIC_GAS_CONSTANT_WATER = 461.5  # J kg^-1 K^-1
SPECIFIC_HEAT_DRY_AIR = 1005.0  # J kg^-1 K^-1
HEAT_OF_VAPORIZATION_WATER = 2.501e6  # J/kg
GAS_CONSTANT_RATIO = 0.622  # Rd / Rv
SATURATION_MIXING_RATIO_FACTOR = 0.6219907
VAPOR_PRESSURE_CLAMP = 0.99999  # fraction of total pressure

# Water
FREEZING_POINT = 273.15  # K
SALT_WATER_FREEZING_OFFSET = 1.8  # K below fresh water
SALT_WATER_FREEZING_POINT = FREEZING_POINT - SALT_WATER_FREEZING_OFFSET

# Magnus-type saturation vapour pressure coefficients (a, b, c, d)
MAGNUS_ABOVE_FREEZING = (611.21, 18.678, 234.5, 257.14)
MAGNUS_BELOW_FREEZING = (611.15, 23.036, 333.7, 279.82)

# Air column
LAYER_HEIGHT = 2000.0  # m
TROPOPAUSE_ELEVATION = 20000.0  # m
MAX_AIR_LAYERS = 12
TOP_OF_ATMOSPHERE_PRESSURE = 5e-4  # kPa, pressure taken as the edge of the atmosphere
COSMIC_BACKGROUND_TEMPERATURE = 2.725  # K, lower bound of extrapolated temperatures

# Friction
SEA_FRICTION = 0.000025
LAND_FRICTION_PER_METER = 6.667e-9

# Insolation
INSOLATION_SCALE = 1320000.0
INSOLATION_ATTENUATION = 0.7
POLAR_AIR_MASS_EXPONENT = 0.678
POLAR_COS_ANGLE = 0.04305822778985774  # cosine of the polar incidence angle

# Sea ice, snow and runoff
SEA_ICE_PER_SECOND = 1.53935e-4
SEA_ICE_EXPONENT = 0.58
SNOW_MELT_PER_KELVIN_SECOND = 2.44e-6
SNOW_TO_RAIN_RATIO = 13.0
RUNOFF_FACTOR = 0.004

# Numerics
NEARLY_ZERO = 1e-30
HALF_PI = math.pi / 2
TWO_PI = math.pi * 2
