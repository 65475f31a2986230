"""
Validation Against Closed-Form Reference
=========================================
Checks the solver against the vacuum trajectory, where the answer is
known exactly:

    x(t) = V0 cosθ t
    y(t) = V0 sinθ t - g t² / 2

Reference case: V0 = 800 m/s, 300 m, sight line at the bore (h = 0).
Each row is checked twice:
  - the analytic no-drag solver through solve_trajectory
  - the RK4 integrator run with drag disabled, which must land on the
    same numbers to within the integration error
"""

import numpy as np
from dataclasses import dataclass
from typing import List

from .drag_model import DragModelKind
from .integrator import simulate_rk4
from .no_drag import no_drag_zero_angle
from .projectile import FiringSolution, ProjectileSpec
from .solver import solve_trajectory


# ══════════════════════════════════════════════════════════════════════════
#  Reference data: vacuum trajectory, V0 800 m/s at 300 m
# ══════════════════════════════════════════════════════════════════════════

# Heights are above the line of sight (negative = below)
REFERENCE_NO_DRAG = {
    'name': 'No-drag 800 m/s @ 300 m',
    'muzzle_velocity': 800.0,
    'range': 300.0,
    'height_over_bore': 0.0,
    'cases': [
        # (angle°, tof_s, height_m, height_mil)
        (0.0,    0.375,  -0.690,   -2.30),
        (2.0,    0.375,   9.79,    32.6),
    ],
    'zero_angle_deg': 0.132,
}

# Agreement required to call a row a pass
TOF_TOLERANCE_S = 0.001
HEIGHT_TOLERANCE_M = 0.01
MIL_TOLERANCE = 0.05


@dataclass
class ReferenceCheck:
    """Result of one reference comparison."""
    angle_deg: float
    ref_tof: float
    ref_height: float
    ref_mil: float
    analytic_tof: float
    analytic_height: float
    analytic_mil: float
    integrated_height: float

    @property
    def height_error(self) -> float:
        return abs(self.analytic_height - self.ref_height)

    @property
    def integration_error(self) -> float:
        return abs(self.integrated_height - self.analytic_height)

    @property
    def passed(self) -> bool:
        return (abs(self.analytic_tof - self.ref_tof) <= TOF_TOLERANCE_S
                and self.height_error <= HEIGHT_TOLERANCE_M
                and abs(self.analytic_mil - self.ref_mil) <= MIL_TOLERANCE
                and self.integration_error <= HEIGHT_TOLERANCE_M)


def validate_against_reference(reference: dict = REFERENCE_NO_DRAG,
                               verbose: bool = True) -> List[ReferenceCheck]:
    """
    Solve every reference case and compare against the tabulated values.

    Returns list of ReferenceCheck, one per case.
    """
    projectile = ProjectileSpec(
        muzzle_velocity_ms=reference['muzzle_velocity'],
        drag_model=DragModelKind.NONE,
    )
    rng = reference['range']

    results = []

    if verbose:
        print(f"\n{'='*72}")
        print(f"  VALIDATION: {reference['name']}")
        print(f"{'='*72}")
        print(f"{'Angle°':>7} {'Ref ToF':>8} {'Sim ToF':>8} "
              f"{'Ref h (m)':>10} {'Sim h (m)':>10} {'RK4 h (m)':>10} "
              f"{'Ref mil':>8} {'Sim mil':>8}")
        print("-" * 72)

    for angle, ref_tof, ref_height, ref_mil in reference['cases']:
        solution = FiringSolution(
            projectile=projectile,
            range_m=rng,
            launch_angle_deg=angle,
            height_over_bore_m=reference['height_over_bore'],
        )

        result = solve_trajectory(solution)
        path = simulate_rk4(solution, angle)
        _, integrated_height, _ = path.at_range(rng)

        check = ReferenceCheck(
            angle_deg=angle,
            ref_tof=ref_tof,
            ref_height=ref_height,
            ref_mil=ref_mil,
            analytic_tof=result.time_of_flight_s,
            analytic_height=result.height_m,
            analytic_mil=-result.hold_mil,
            integrated_height=integrated_height,
        )
        results.append(check)

        if verbose:
            print(f"{angle:>7.1f} {ref_tof:>8.3f} {check.analytic_tof:>8.3f} "
                  f"{ref_height:>10.3f} {check.analytic_height:>10.3f} "
                  f"{integrated_height:>10.3f} "
                  f"{ref_mil:>8.2f} {check.analytic_mil:>8.2f}")

    if verbose:
        worst = np.max([r.integration_error for r in results])
        print("-" * 72)
        print(f"  Max RK4 vs closed-form height difference: {worst*1000:.3f} mm")
        zero = no_drag_zero_angle(reference['muzzle_velocity'], rng,
                                  reference['height_over_bore'])
        print(f"  Zero angle for {rng:.0f} m: {zero:.4f}° "
              f"(reference {reference['zero_angle_deg']:.3f}°)")
        status = "✓ PASS" if all(r.passed for r in results) else "✗ MISMATCH"
        print(f"  Status: {status}")
        print(f"{'='*72}\n")

    return results


if __name__ == "__main__":
    validate_against_reference(verbose=True)
