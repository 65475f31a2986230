"""
Public solver API.

Ties the pieces together for one request:

    validate → temperature-corrected V0 → zero angle → wind-derated V0
             → integrate (or closed form) → wind drift overlay

Every entry point returns a TrajectoryResult; bad input and runaway shots
come back as failure markers rather than exceptions.
"""

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from .atmosphere import compute_air_density
from .drag_model import DragModelKind
from .errors import SolveStatus, ValidationIssue, validate_firing_solution
from .integrator import (
    TrajectoryPath,
    TrajectoryResult,
    path_result,
    simulate,
    solve_drag,
    solve_zero_angle,
)
from .no_drag import no_drag_zero_angle, solve_no_drag
from .projectile import FiringSolution
from .units import mil_to_moa, moa_to_mil, suggest_scope_correction
from .wind import crosswind_drift, velocity_effect

logger = logging.getLogger(__name__)

__all__ = [
    'compute_air_density',
    'solve_trajectory',
    'build_dope_table',
    'trace_trajectory',
    'suggest_scope_correction',
    'mil_to_moa',
    'moa_to_mil',
]


def _safe_range(range_m) -> float:
    try:
        return float(range_m) if math.isfinite(range_m) else 0.0
    except TypeError:
        return 0.0


def _safe_density(solution: FiringSolution) -> float:
    try:
        rho = compute_air_density(solution.environment)
    except (TypeError, ValueError, ArithmeticError):
        return 0.0
    return rho if math.isfinite(rho) else 0.0


def _bore_angle(solution: FiringSolution, muzzle_velocity: float) -> Optional[float]:
    """Bore elevation for the shot: zero angle plus the requested launch angle."""
    if not solution.is_zeroed:
        return solution.launch_angle_deg

    if solution.projectile.drag_model is DragModelKind.NONE:
        zero_angle = no_drag_zero_angle(muzzle_velocity, solution.zero_distance_m,
                                        solution.height_over_bore_m)
    else:
        zero_angle = solve_zero_angle(solution, muzzle_velocity)

    if zero_angle is None:
        return None
    return zero_angle + solution.launch_angle_deg


def _prepare(solution: FiringSolution) -> Tuple[Optional[TrajectoryResult], float, float]:
    """
    Shared front half of every solve.

    Returns (failure, bore_angle_deg, effective_v0); `failure` is None when
    the request can be integrated.
    """
    model = solution.projectile.drag_model

    issues = validate_firing_solution(solution)
    if issues:
        logger.warning("Invalid firing solution: %s", "; ".join(map(str, issues)))
        failure = TrajectoryResult.failed(
            SolveStatus.INVALID_INPUT, model,
            range_m=_safe_range(solution.range_m),
            air_density_used=_safe_density(solution),
            issues=issues,
        )
        return failure, 0.0, 0.0

    rho = compute_air_density(solution.environment)
    mv = solution.projectile.corrected_muzzle_velocity(solution.environment)
    if mv <= 0:
        issue = ValidationIssue("projectile.mv_temp_sensitivity",
                                "Temperature correction leaves no muzzle velocity")
        logger.warning("Invalid firing solution: %s", issue)
        return TrajectoryResult.failed(SolveStatus.INVALID_INPUT, model,
                                       range_m=solution.range_m, air_density_used=rho,
                                       issues=[issue]), 0.0, 0.0

    bore_angle = _bore_angle(solution, mv)
    if bore_angle is None:
        return TrajectoryResult.failed(SolveStatus.NON_CONVERGENT, model,
                                       range_m=solution.range_m,
                                       air_density_used=rho), 0.0, 0.0

    effective_v0 = mv * velocity_effect(solution.wind_speed_ms, solution.wind_direction_deg)
    if effective_v0 <= 0:
        logger.warning("Headwind of %.1f m/s cancels the muzzle velocity",
                       solution.wind_speed_ms)
        return TrajectoryResult.failed(SolveStatus.NON_CONVERGENT, model,
                                       range_m=solution.range_m,
                                       air_density_used=rho), 0.0, 0.0

    return None, bore_angle, effective_v0


def _apply_wind(result: TrajectoryResult, solution: FiringSolution,
                effective_v0: float) -> TrajectoryResult:
    if not result.valid or not solution.wind_speed_ms:
        return result
    avg_velocity = (effective_v0 + result.impact_velocity_ms) / 2
    drift = crosswind_drift(solution.wind_speed_ms, solution.wind_direction_deg,
                            result.time_of_flight_s, avg_velocity)
    return replace(result, wind_drift_m=drift)


def solve_trajectory(solution: FiringSolution) -> TrajectoryResult:
    """
    Solve one shot.

    Parameters
    ----------
    solution : FiringSolution
        Projectile, range, environment, zero and wind.

    Returns
    -------
    TrajectoryResult
        `status` is OK, INVALID_INPUT (with `issues`) or NON_CONVERGENT.
    """
    failure, bore_angle, effective_v0 = _prepare(solution)
    if failure is not None:
        return failure

    if solution.projectile.drag_model is DragModelKind.NONE:
        result = solve_no_drag(solution, bore_angle, effective_v0)
    else:
        result = solve_drag(solution, bore_angle, effective_v0)

    logger.debug("Solved %.1f m: bore %.4f°, drop %.3f m", solution.range_m,
                 bore_angle, result.drop_m)
    return _apply_wind(result, solution, effective_v0)


def build_dope_table(solution: FiringSolution,
                     ranges: Iterable[float]) -> List[TrajectoryResult]:
    """
    One result per range, sharing a single zero.

    The bore angle is solved once from `solution`; with a drag model a single
    path is integrated out to the longest range and sampled at each one.
    `solution.range_m` is ignored.
    """
    ranges = list(ranges)
    valid_ranges = [r for r in ranges if _safe_range(r) > 0]
    if not valid_ranges:
        return [_bad_range_row(solution, r) for r in ranges]

    failure, bore_angle, effective_v0 = _prepare(solution.with_range(max(valid_ranges)))
    if failure is not None:
        return [replace(failure, range_m=_safe_range(r)) for r in ranges]

    path = None
    if solution.projectile.drag_model is not DragModelKind.NONE:
        path = simulate(solution, bore_angle, effective_v0, max(valid_ranges))

    rows = []
    for r in ranges:
        if _safe_range(r) <= 0:
            rows.append(_bad_range_row(solution, r))
            continue
        shot = solution.with_range(r)
        if path is None:
            row = solve_no_drag(shot, bore_angle, effective_v0)
        else:
            row = path_result(path, shot, r, bore_angle)
        rows.append(_apply_wind(row, shot, effective_v0))
    return rows


def _bad_range_row(solution: FiringSolution, range_m) -> TrajectoryResult:
    issue = ValidationIssue("range_m", "Range must be a positive finite number")
    return TrajectoryResult.failed(SolveStatus.INVALID_INPUT,
                                   solution.projectile.drag_model,
                                   range_m=_safe_range(range_m),
                                   air_density_used=_safe_density(solution),
                                   issues=[issue])


def trace_trajectory(solution: FiringSolution) -> TrajectoryPath:
    """
    Full integrated path for plotting, using the same bore angle and
    effective muzzle velocity as `solve_trajectory`.

    Raises ValueError when the request cannot be solved.
    """
    failure, bore_angle, effective_v0 = _prepare(solution)
    if failure is not None:
        reasons = "; ".join(map(str, failure.issues)) or failure.status.value
        raise ValueError(f"Cannot trace trajectory: {reasons}")
    return simulate(solution, bore_angle, effective_v0)
