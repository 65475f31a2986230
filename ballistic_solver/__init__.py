"""
Point-Mass Ballistic Solver
===========================
Computes the flight of a small-arms bullet from muzzle to target and the
scope adjustment needed to hit it:
  - Gravity
  - Mach-dependent drag from the G1 / G7 standard tables, scaled by the
    ballistic coefficient
  - Moist-air density (Magnus-Tetens)
  - Zeroing at a chosen distance
  - Simplified crosswind drift and headwind velocity loss
  - Coriolis hold

Trajectories are integrated with RK4 (or Euler) at a fixed 1 ms step;
with drag disabled the vacuum solution is evaluated in closed form.
Holds come out in mil and MOA.
"""

from .atmosphere import (
    Environment, standard_environment, saturation_vapor_pressure,
    compute_air_density, isa_pressure, density_profile,
)
from .drag_model import (
    DragModelKind, DragTable, G1_TABLE, G7_TABLE, ALL_MODELS,
    drag_coefficient, drag_deceleration,
)
from .projectile import ProjectileSpec, FiringSolution, compute_acceleration
from .errors import (
    SolveStatus, ValidationIssue,
    validate_projectile, validate_environment, validate_firing_solution,
)
from .integrator import (
    TrajectoryPath, TrajectoryResult,
    simulate_euler, simulate_rk4, solve_zero_angle, solve_drag,
)
from .no_drag import no_drag_zero_angle, no_drag_height, solve_no_drag
from .wind import (
    crosswind_component, headwind_component, crosswind_drift,
    velocity_effect, clock_to_degrees, degrees_to_clock,
)
from .units import (
    ScopeCorrection, mil_to_moa, moa_to_mil, hold_from_drop, cm_to_mil,
    mil_from_offset, moa_from_offset, suggest_scope_correction, to_clicks,
)
from .coriolis import CoriolisHold, compute_coriolis_hold
from .solver import solve_trajectory, build_dope_table, trace_trajectory
from .validation import (
    validate_against_reference, REFERENCE_NO_DRAG, ReferenceCheck,
)

__version__ = "1.0.0"
__all__ = [
    'Environment', 'standard_environment', 'saturation_vapor_pressure',
    'compute_air_density', 'isa_pressure', 'density_profile',
    'DragModelKind', 'DragTable', 'G1_TABLE', 'G7_TABLE', 'ALL_MODELS',
    'drag_coefficient', 'drag_deceleration',
    'ProjectileSpec', 'FiringSolution', 'compute_acceleration',
    'SolveStatus', 'ValidationIssue',
    'validate_projectile', 'validate_environment', 'validate_firing_solution',
    'TrajectoryPath', 'TrajectoryResult',
    'simulate_euler', 'simulate_rk4', 'solve_zero_angle', 'solve_drag',
    'no_drag_zero_angle', 'no_drag_height', 'solve_no_drag',
    'crosswind_component', 'headwind_component', 'crosswind_drift',
    'velocity_effect', 'clock_to_degrees', 'degrees_to_clock',
    'ScopeCorrection', 'mil_to_moa', 'moa_to_mil', 'hold_from_drop',
    'cm_to_mil', 'mil_from_offset', 'moa_from_offset',
    'suggest_scope_correction', 'to_clicks',
    'CoriolisHold', 'compute_coriolis_hold',
    'solve_trajectory', 'build_dope_table', 'trace_trajectory',
    'validate_against_reference', 'REFERENCE_NO_DRAG', 'ReferenceCheck',
]
