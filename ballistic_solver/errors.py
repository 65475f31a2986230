"""
Input validation and failure taxonomy.

Validation never raises: each check returns a list of ValidationIssue so a
caller can show one message per field. The solver refuses to integrate
while any issue is present.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List

from .atmosphere import Environment
from .drag_model import DragModelKind
from .projectile import FiringSolution, ProjectileSpec, INTEGRATION_METHODS, MIN_DT

logger = logging.getLogger(__name__)


# Plausible shooting weather; humidity is clamped instead of rejected
TEMPERATURE_RANGE_C = (-50.0, 60.0)
PRESSURE_RANGE_HPA = (300.0, 1200.0)


class SolveStatus(str, Enum):
    OK = "ok"
    INVALID_INPUT = "invalid_input"
    NON_CONVERGENT = "non_convergent"


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str

    def __str__(self):
        return f"{self.field}: {self.message}"


def _finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _require_positive(issues: List[ValidationIssue], name: str, value, label: str):
    if not _finite(value):
        issues.append(ValidationIssue(name, f"{label} must be a finite number"))
    elif value <= 0:
        issues.append(ValidationIssue(name, f"{label} must be positive"))


def validate_projectile(spec: ProjectileSpec, prefix: str = "projectile") -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    _require_positive(issues, f"{prefix}.muzzle_velocity_ms",
                      spec.muzzle_velocity_ms, "Muzzle velocity")
    if spec.drag_model is not DragModelKind.NONE:
        _require_positive(issues, f"{prefix}.ballistic_coefficient",
                          spec.ballistic_coefficient, "Ballistic coefficient")
    _require_positive(issues, f"{prefix}.bullet_mass_grams",
                      spec.bullet_mass_grams, "Bullet mass")
    _require_positive(issues, f"{prefix}.bullet_diameter_mm",
                      spec.bullet_diameter_mm, "Bullet diameter")
    if not _finite(spec.mv_temp_sensitivity):
        issues.append(ValidationIssue(f"{prefix}.mv_temp_sensitivity",
                                      "Temperature sensitivity must be a finite number"))
    return issues


def validate_environment(env: Environment, prefix: str = "environment") -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    t_lo, t_hi = TEMPERATURE_RANGE_C
    if not _finite(env.temperature_c):
        issues.append(ValidationIssue(f"{prefix}.temperature_c",
                                      "Temperature must be a finite number"))
    elif not t_lo <= env.temperature_c <= t_hi:
        issues.append(ValidationIssue(f"{prefix}.temperature_c",
                                      f"Temperature must be between {t_lo:g}°C and {t_hi:g}°C"))

    p_lo, p_hi = PRESSURE_RANGE_HPA
    if not _finite(env.pressure_hpa):
        issues.append(ValidationIssue(f"{prefix}.pressure_hpa",
                                      "Pressure must be a finite number"))
    elif not p_lo <= env.pressure_hpa <= p_hi:
        issues.append(ValidationIssue(f"{prefix}.pressure_hpa",
                                      f"Pressure must be between {p_lo:g} and {p_hi:g} hPa"))

    if not _finite(env.humidity_pct):
        issues.append(ValidationIssue(f"{prefix}.humidity_pct",
                                      "Humidity must be a finite number"))
    return issues


def validate_firing_solution(solution: FiringSolution) -> List[ValidationIssue]:
    """All problems with a request, empty when it is safe to solve."""
    issues = validate_projectile(solution.projectile)
    issues += validate_environment(solution.environment)

    _require_positive(issues, "range_m", solution.range_m, "Range")
    _require_positive(issues, "dt", solution.dt, "Time step")
    if _finite(solution.dt) and 0 < solution.dt < MIN_DT:
        issues.append(ValidationIssue("dt", f"Time step must be at least {MIN_DT:g} s"))
    _require_positive(issues, "speed_of_sound_ms", solution.speed_of_sound_ms,
                      "Speed of sound")

    if not _finite(solution.launch_angle_deg):
        issues.append(ValidationIssue("launch_angle_deg",
                                      "Launch angle must be a finite number"))
    elif abs(solution.launch_angle_deg) >= 90.0:
        issues.append(ValidationIssue("launch_angle_deg",
                                      "Launch angle must be between -90° and 90°"))

    if not _finite(solution.height_over_bore_m):
        issues.append(ValidationIssue("height_over_bore_m",
                                      "Height over bore must be a finite number"))

    if solution.zero_distance_m is not None:
        if not _finite(solution.zero_distance_m):
            issues.append(ValidationIssue("zero_distance_m",
                                          "Zero distance must be a finite number"))
        elif solution.zero_distance_m < 0:
            issues.append(ValidationIssue("zero_distance_m",
                                          "Zero distance cannot be negative"))

    if not _finite(solution.wind_speed_ms):
        issues.append(ValidationIssue("wind_speed_ms", "Wind speed must be a finite number"))
    elif solution.wind_speed_ms < 0:
        issues.append(ValidationIssue("wind_speed_ms", "Wind speed cannot be negative"))

    if not _finite(solution.wind_direction_deg):
        issues.append(ValidationIssue("wind_direction_deg",
                                      "Wind direction must be a finite number"))
    elif not 0.0 <= solution.wind_direction_deg < 360.0:
        issues.append(ValidationIssue("wind_direction_deg",
                                      "Wind direction must be between 0° and 359°"))

    if solution.method not in INTEGRATION_METHODS:
        issues.append(ValidationIssue("method",
                                      f"Integration method must be one of {INTEGRATION_METHODS}"))

    if issues:
        logger.debug("Rejected firing solution: %s", "; ".join(map(str, issues)))
    return issues
