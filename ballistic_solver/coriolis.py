"""
Coriolis correction for small-arms shots.

Constant-average-velocity approximation over the time of flight, giving
additive holds on top of the ballistic solution. Northern hemisphere:
firing north drifts right, firing east strikes high (Eötvös effect).

Hold sign convention: windage + = dial LEFT (bullet went right),
elevation − = dial DOWN (bullet went high).
"""

import math
from dataclasses import dataclass

from .units import mil_to_moa


EARTH_ROTATION_RATE = 7.2921159e-5  # rad/s


@dataclass(frozen=True)
class CoriolisHold:
    elev_mil: float = 0.0
    elev_moa: float = 0.0
    wind_mil: float = 0.0
    wind_moa: float = 0.0
    east_drift_m: float = 0.0     # + = impact right of aim
    up_shift_m: float = 0.0       # + = impact above aim


def compute_coriolis_hold(range_m: float, tof_s: float, muzzle_velocity: float,
                          impact_velocity: float, latitude_deg: float,
                          azimuth_deg: float) -> CoriolisHold:
    """
    east drift ≈ Ω · V_north · sin φ · t²
    up shift   ≈ Ω · V_east  · cos φ · t²

    with V = (muzzle + impact) / 2 resolved along the azimuth
    (0° = north, 90° = east).
    """
    if not range_m or not tof_s:
        return CoriolisHold()

    phi = math.radians(latitude_deg)
    psi = math.radians(azimuth_deg)

    v_avg = max(0.0, (muzzle_velocity + impact_velocity) / 2)
    v_north = v_avg * math.cos(psi)
    v_east = v_avg * math.sin(psi)

    east_drift = EARTH_ROTATION_RATE * v_north * math.sin(phi) * tof_s ** 2
    up_shift = EARTH_ROTATION_RATE * v_east * math.cos(phi) * tof_s ** 2

    wind_mil = east_drift / range_m * 1000.0
    elev_mil = -up_shift / range_m * 1000.0

    return CoriolisHold(
        elev_mil=elev_mil,
        elev_moa=mil_to_moa(elev_mil),
        wind_mil=wind_mil,
        wind_moa=mil_to_moa(wind_mil),
        east_drift_m=east_drift,
        up_shift_m=up_shift,
    )
