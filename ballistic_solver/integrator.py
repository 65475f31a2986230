"""
Numerical Integration Engine
=============================
Fixed-step time integration of the point-mass equations of motion:

    dx/dt = v
    dv/dt = a(v)        (gravity + drag, from compute_acceleration)

Two steppers are available:

1. **Euler Method** (1st order): simple, needs a small dt.
2. **Runge-Kutta 4th Order (RK4)**: default, accurate at dt = 1 ms.

The line of sight is the x axis; the bullet leaves the muzzle
height-over-bore below it. Integration stops once the bullet passes the
requested range, and the state is interpolated back onto that range.
A vertical floor and a bounded step count guard against runaway input.

Also holds the zero-angle search: the bore elevation that puts the
trajectory back on the line of sight at the zero distance.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from scipy.optimize import brentq

from .atmosphere import compute_air_density
from .drag_model import DragModelKind, DragTable, get_drag_table
from .errors import SolveStatus, ValidationIssue
from .projectile import MIN_DT, FiringSolution, ProjectileSpec, compute_acceleration
from .units import hold_from_drop

logger = logging.getLogger(__name__)


VERTICAL_FLOOR_M = -50.0          # m below line of sight
MAX_FLIGHT_TIME = 20.0            # s
ZERO_BRACKET_DEG = (-5.0, 10.0)   # bore angle search interval
MAX_STEPS = int(MAX_FLIGHT_TIME / MIN_DT)


@dataclass
class TrajectoryPath:
    """Sampled state history of one integration run."""
    method: str               # 'euler' or 'rk4'
    dt: float                 # timestep used
    termination: str          # 'range', 'floor', 'max_steps' or 'non_finite'

    # Arrays, each has shape (N,)
    time: np.ndarray
    x: np.ndarray             # downrange
    y: np.ndarray             # height above line of sight
    vx: np.ndarray
    vy: np.ndarray
    speed: np.ndarray
    mach_history: np.ndarray
    cd_history: np.ndarray

    @property
    def range_total(self) -> float:
        return float(self.x[-1])

    @property
    def flight_time(self) -> float:
        return float(self.time[-1])

    @property
    def impact_velocity(self) -> float:
        return float(self.speed[-1])

    def reached(self, range_m: float) -> bool:
        return self.range_total >= range_m

    def at_range(self, range_m: float) -> Tuple[float, float, float]:
        """(time, height, speed) linearly interpolated at `range_m`."""
        t = float(np.interp(range_m, self.x, self.time))
        y = float(np.interp(range_m, self.x, self.y))
        v = float(np.interp(range_m, self.x, self.speed))
        return t, y, v


@dataclass(frozen=True)
class TrajectoryResult:
    """Flat solver output for one range."""
    time_of_flight_s: float
    impact_velocity_ms: float
    drop_m: float             # positive = below line of sight
    wind_drift_m: float       # positive = right
    hold_mil: float
    hold_moa: float
    air_density_used: float
    model_used: DragModelKind
    range_m: float = 0.0
    launch_angle_deg: float = 0.0
    status: SolveStatus = SolveStatus.OK
    issues: Tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @classmethod
    def failed(cls, status: SolveStatus, model_used: DragModelKind,
               range_m: float = 0.0, air_density_used: float = 0.0,
               issues=()) -> "TrajectoryResult":
        """Result carrying a failure marker and zeros instead of NaN."""
        return cls(
            time_of_flight_s=0.0, impact_velocity_ms=0.0, drop_m=0.0,
            wind_drift_m=0.0, hold_mil=0.0, hold_moa=0.0,
            air_density_used=air_density_used, model_used=model_used,
            range_m=range_m, status=status, issues=tuple(issues),
        )

    @property
    def valid(self) -> bool:
        return self.status is SolveStatus.OK

    @property
    def height_m(self) -> float:
        """Signed height of the impact above the line of sight."""
        return -self.drop_m

    @property
    def windage_mil(self) -> float:
        """Wind dial (mil), + = dial right; a drift to the right dials left."""
        if not self.range_m:
            return 0.0
        return -self.wind_drift_m / self.range_m * 1000.0

    def summary(self) -> str:
        """Human-readable summary string."""
        if not self.valid:
            lines = [f"No valid trajectory ({self.status.value})"]
            lines += [f"  - {issue}" for issue in self.issues]
            return '\n'.join(lines)
        lines = [
            f"╔══════════════════════════════════════════════╗",
            f"║  FIRING SOLUTION — {self.model_used.value:<26s}║",
            f"╠══════════════════════════════════════════════╣",
            f"║  Range        : {self.range_m:>10.1f} m{'':<18s}║",
            f"║  Bore angle   : {self.launch_angle_deg:>10.4f} °{'':<18s}║",
            f"║  Air density  : {self.air_density_used:>10.4f} kg/m³{'':<14s}║",
            f"╠══════════════════════════════════════════════╣",
            f"║  Flight time  : {self.time_of_flight_s:>10.3f} s{'':<18s}║",
            f"║  Impact vel   : {self.impact_velocity_ms:>10.1f} m/s{'':<16s}║",
            f"║  Drop         : {self.drop_m:>10.3f} m{'':<18s}║",
            f"║  Wind drift   : {self.wind_drift_m:>10.3f} m{'':<18s}║",
            f"║  Hold         : {self.hold_mil:>10.2f} mil / {self.hold_moa:>6.2f} MOA ║",
            f"╚══════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def _drag_table(projectile: ProjectileSpec) -> Optional[DragTable]:
    if projectile.drag_model is DragModelKind.NONE:
        return None
    return get_drag_table(projectile.drag_model)


def _record_state(t, x, y, vx, vy, table, speed_of_sound):
    """Helper to compute and record derived quantities."""
    spd = math.hypot(vx, vy)
    m = spd / speed_of_sound
    cd = table.cd(m) if table is not None else 0.0
    return t, x, y, vx, vy, spd, m, cd


def _step_euler(vx, vy, accel, dt):
    """
    x_{n+1} = x_n + v_n * dt
    v_{n+1} = v_n + a(v_n) * dt
    """
    ax, ay = accel(vx, vy)
    return vx * dt, vy * dt, ax * dt, ay * dt


def _step_rk4(vx, vy, accel, dt):
    """Classic RK4; acceleration depends on velocity only."""
    k1x, k1y = vx, vy
    k1vx, k1vy = accel(vx, vy)

    k2x, k2y = vx + 0.5 * dt * k1vx, vy + 0.5 * dt * k1vy
    k2vx, k2vy = accel(k2x, k2y)

    k3x, k3y = vx + 0.5 * dt * k2vx, vy + 0.5 * dt * k2vy
    k3vx, k3vy = accel(k3x, k3y)

    k4x, k4y = vx + dt * k3vx, vy + dt * k3vy
    k4vx, k4vy = accel(k4x, k4y)

    return ((dt / 6.0) * (k1x + 2 * k2x + 2 * k3x + k4x),
            (dt / 6.0) * (k1y + 2 * k2y + 2 * k3y + k4y),
            (dt / 6.0) * (k1vx + 2 * k2vx + 2 * k3vx + k4vx),
            (dt / 6.0) * (k1vy + 2 * k2vy + 2 * k3vy + k4vy))


_STEPPERS = {'euler': _step_euler, 'rk4': _step_rk4}


def _simulate(solution: FiringSolution, bore_angle_deg: float, method: str,
              muzzle_velocity: Optional[float] = None,
              max_range: Optional[float] = None) -> TrajectoryPath:
    try:
        step = _STEPPERS[method]
    except KeyError:
        raise ValueError(
            f"Unknown integration method '{method}'. "
            f"Available: {list(_STEPPERS)}"
        ) from None

    projectile = solution.projectile
    table = _drag_table(projectile)
    rho = compute_air_density(solution.environment)
    a_sound = solution.speed_of_sound_ms
    bc = projectile.ballistic_coefficient
    dt = solution.dt

    v0 = projectile.muzzle_velocity_ms if muzzle_velocity is None else muzzle_velocity
    max_range = solution.range_m if max_range is None else max_range
    max_steps = min(int(math.ceil(MAX_FLIGHT_TIME / dt)), MAX_STEPS)

    def accel(vx, vy):
        return compute_acceleration(vx, vy, table, rho, bc, a_sound)

    theta = math.radians(bore_angle_deg)
    t, x, y = 0.0, 0.0, -solution.height_over_bore_m
    vx, vy = v0 * math.cos(theta), v0 * math.sin(theta)

    history = [_record_state(t, x, y, vx, vy, table, a_sound)]
    termination = 'max_steps'

    for _ in range(max_steps):
        dx, dy, dvx, dvy = step(vx, vy, accel, dt)
        x, y = x + dx, y + dy
        vx, vy = vx + dvx, vy + dvy
        t += dt

        if not all(math.isfinite(q) for q in (x, y, vx, vy)):
            termination = 'non_finite'
            break

        history.append(_record_state(t, x, y, vx, vy, table, a_sound))

        if x >= max_range:
            termination = 'range'
            break
        if y < VERTICAL_FLOOR_M:
            termination = 'floor'
            break

    return _build_path(history, method, dt, termination)


def simulate_euler(solution: FiringSolution, bore_angle_deg: float,
                   muzzle_velocity: Optional[float] = None,
                   max_range: Optional[float] = None) -> TrajectoryPath:
    """Forward Euler integration out to `max_range` (default: the request range)."""
    return _simulate(solution, bore_angle_deg, 'euler', muzzle_velocity, max_range)


def simulate_rk4(solution: FiringSolution, bore_angle_deg: float,
                 muzzle_velocity: Optional[float] = None,
                 max_range: Optional[float] = None) -> TrajectoryPath:
    """4th-order Runge-Kutta integration out to `max_range`."""
    return _simulate(solution, bore_angle_deg, 'rk4', muzzle_velocity, max_range)


def _build_path(history, method, dt, termination):
    """Convert history list to TrajectoryPath."""
    times, xs, ys, vxs, vys, speeds, machs, cds = zip(*history)
    return TrajectoryPath(
        method=method,
        dt=dt,
        termination=termination,
        time=np.array(times),
        x=np.array(xs),
        y=np.array(ys),
        vx=np.array(vxs),
        vy=np.array(vys),
        speed=np.array(speeds),
        mach_history=np.array(machs),
        cd_history=np.array(cds),
    )


def solve_zero_angle(solution: FiringSolution,
                     muzzle_velocity: Optional[float] = None) -> Optional[float]:
    """
    Bore angle (degrees) that puts the bullet on the line of sight at the
    zero distance, or None when no angle in the search bracket does.
    """
    zero = solution.zero_distance_m

    def height_at_zero(angle_deg):
        path = simulate(solution, angle_deg, muzzle_velocity, zero)
        if path.reached(zero):
            return path.at_range(zero)[1]
        return VERTICAL_FLOOR_M - 1.0

    lo, hi = ZERO_BRACKET_DEG
    if height_at_zero(lo) * height_at_zero(hi) > 0:
        logger.warning("No zero angle within %s° for a %.1f m zero", ZERO_BRACKET_DEG, zero)
        return None

    angle = brentq(height_at_zero, lo, hi, xtol=1e-9, maxiter=100)
    logger.debug("Zero angle for %.1f m: %.6f°", zero, angle)
    return float(angle)


def simulate(solution: FiringSolution, bore_angle_deg: float,
             muzzle_velocity: Optional[float] = None,
             max_range: Optional[float] = None) -> TrajectoryPath:
    """Integrate with the stepper named by `solution.method`."""
    return _simulate(solution, bore_angle_deg, solution.method, muzzle_velocity, max_range)


def path_result(path: TrajectoryPath, solution: FiringSolution, range_m: float,
                bore_angle_deg: float) -> TrajectoryResult:
    """Reduce an integrated path to the TrajectoryResult at `range_m` (no wind)."""
    model = solution.projectile.drag_model
    rho = compute_air_density(solution.environment)

    if not path.reached(range_m):
        logger.warning(
            "Trajectory did not reach %.1f m (stopped by %s at x=%.1f m, t=%.2f s)",
            range_m, path.termination, path.range_total, path.flight_time,
        )
        return TrajectoryResult.failed(SolveStatus.NON_CONVERGENT, model,
                                       range_m=range_m, air_density_used=rho)

    tof, height, impact_velocity = path.at_range(range_m)
    drop = -height
    hold_mil, hold_moa = hold_from_drop(drop, range_m)

    return TrajectoryResult(
        time_of_flight_s=tof,
        impact_velocity_ms=impact_velocity,
        drop_m=drop,
        wind_drift_m=0.0,
        hold_mil=hold_mil,
        hold_moa=hold_moa,
        air_density_used=rho,
        model_used=model,
        range_m=range_m,
        launch_angle_deg=bore_angle_deg,
    )


def solve_drag(solution: FiringSolution, bore_angle_deg: float,
               muzzle_velocity: Optional[float] = None) -> TrajectoryResult:
    """Integrate one shot and reduce it to a TrajectoryResult (no wind)."""
    path = simulate(solution, bore_angle_deg, muzzle_velocity)
    logger.debug("Integrated %d %s steps towards %.1f m", len(path.time) - 1,
                 path.method, solution.range_m)
    return path_result(path, solution, solution.range_m, bore_angle_deg)
