"""
Analytic no-drag solver.

Vacuum trajectory in closed form:

    x(t) = V0 cosθ t
    y(t) = -h + V0 sinθ t - g t² / 2

Used when no drag model is selected, and as the reference the numerical
integrator is checked against.
"""

import logging
import math
from typing import Optional, Tuple

from .atmosphere import GRAVITY, compute_air_density
from .drag_model import DragModelKind
from .errors import SolveStatus
from .integrator import TrajectoryResult
from .projectile import FiringSolution
from .units import hold_from_drop

logger = logging.getLogger(__name__)


def no_drag_zero_angle(muzzle_velocity: float, zero_distance: float,
                       height_over_bore: float = 0.0) -> Optional[float]:
    """
    Bore angle (degrees) hitting the line of sight at `zero_distance`.

    y(x) = 0 is a quadratic in tanθ:
        a·tan²θ - x·tanθ + (a + h) = 0,   a = g x² / (2 V0²)
    The smaller root is the flat-fire solution. None when out of reach.
    """
    x = zero_distance
    a = GRAVITY * x * x / (2.0 * muzzle_velocity * muzzle_velocity)
    disc = x * x - 4.0 * a * (a + height_over_bore)
    if disc < 0:
        return None
    tan_theta = (x - math.sqrt(disc)) / (2.0 * a)
    return math.degrees(math.atan(tan_theta))


def no_drag_height(muzzle_velocity: float, angle_deg: float, range_m: float,
                   height_over_bore: float = 0.0) -> Tuple[float, float, float]:
    """(time of flight, height above line of sight, impact speed) at `range_m`."""
    theta = math.radians(angle_deg)
    vx = muzzle_velocity * math.cos(theta)
    vy0 = muzzle_velocity * math.sin(theta)

    t = range_m / vx
    y = -height_over_bore + vy0 * t - 0.5 * GRAVITY * t * t
    vy = vy0 - GRAVITY * t
    return t, y, math.hypot(vx, vy)


def solve_no_drag(solution: FiringSolution, bore_angle_deg: float,
                  muzzle_velocity: Optional[float] = None) -> TrajectoryResult:
    """No-drag counterpart of integrator.solve_drag (no wind)."""
    v0 = solution.projectile.muzzle_velocity_ms if muzzle_velocity is None else muzzle_velocity
    rho = compute_air_density(solution.environment)

    if math.cos(math.radians(bore_angle_deg)) <= 0:
        logger.warning("Bore angle %.3f° never travels downrange", bore_angle_deg)
        return TrajectoryResult.failed(SolveStatus.NON_CONVERGENT, DragModelKind.NONE,
                                       range_m=solution.range_m, air_density_used=rho)

    tof, height, impact_velocity = no_drag_height(
        v0, bore_angle_deg, solution.range_m, solution.height_over_bore_m)
    drop = -height
    hold_mil, hold_moa = hold_from_drop(drop, solution.range_m)

    return TrajectoryResult(
        time_of_flight_s=tof,
        impact_velocity_ms=impact_velocity,
        drop_m=drop,
        wind_drift_m=0.0,
        hold_mil=hold_mil,
        hold_moa=hold_moa,
        air_density_used=rho,
        model_used=DragModelKind.NONE,
        range_m=solution.range_m,
        launch_angle_deg=bore_angle_deg,
    )
