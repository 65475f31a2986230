"""
Wind Model
==========
Simplified wind corrections overlaid on the still-air trajectory.

These are empirical approximations, not a rigorous aerodynamic wind
model: drift uses a constant average velocity and a fixed scale factor,
and head/tail wind only derates muzzle velocity linearly.

Direction convention (same for every function here):
    0°   = headwind (12 o'clock)
    90°  = right crosswind (3 o'clock), drifts the bullet right
    180° = tailwind (6 o'clock)
    270° = left crosswind (9 o'clock)
"""

import math


DRIFT_SCALE_FACTOR = 100.0        # empirical, kept for compatibility with stored DOPE
HEADWIND_VELOCITY_FACTOR = 0.001  # fraction of V0 per m/s of headwind


def crosswind_component(wind_speed: float, wind_direction_deg: float) -> float:
    """Wind component across the line of fire (m/s), + = towards the right."""
    return wind_speed * math.sin(math.radians(wind_direction_deg))


def headwind_component(wind_speed: float, wind_direction_deg: float) -> float:
    """Wind component against the shot (m/s), negative for a tailwind."""
    return wind_speed * math.cos(math.radians(wind_direction_deg))


def crosswind_drift(wind_speed: float, wind_direction_deg: float,
                    time_of_flight: float, avg_velocity: float) -> float:
    """
    Lateral drift (m, + = right):

        drift = crosswind · tof² / (2 · avg_velocity) · 100
    """
    if avg_velocity <= 0:
        return 0.0
    crosswind = crosswind_component(wind_speed, wind_direction_deg)
    return crosswind * time_of_flight ** 2 / (2 * avg_velocity) * DRIFT_SCALE_FACTOR


def velocity_effect(wind_speed: float, wind_direction_deg: float) -> float:
    """Multiplier on muzzle velocity; < 1 in a headwind, > 1 in a tailwind."""
    headwind = headwind_component(wind_speed, wind_direction_deg)
    return 1 - headwind * HEADWIND_VELOCITY_FACTOR


def clock_to_degrees(clock: float) -> float:
    """Wind clock position (12 = headwind, 3 = right) to degrees."""
    return (clock % 12) * 30.0


def degrees_to_clock(direction_deg: float) -> int:
    """Nearest whole clock position for a wind direction."""
    hour = int(round((direction_deg % 360.0) / 30.0)) % 12
    return 12 if hour == 0 else hour
