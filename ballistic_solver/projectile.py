"""
Projectile Definition & Forces
===============================
Defines the projectile and firing-request dataclasses and computes the
acceleration acting on a point-mass bullet:
  - Gravity
  - Aerodynamic drag (standard G1/G7 Cd scaled by the ballistic coefficient)

Coordinate system:
  x = downrange (horizontal, along the line of sight)
  y = vertical, up positive, y = 0 is the line of sight
  Lateral wind drift is overlaid afterwards (see wind.py).
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .atmosphere import Environment, GRAVITY, SPEED_OF_SOUND, standard_environment
from .drag_model import DragModelKind, DragTable, drag_deceleration


GRAMS_PER_GRAIN = 0.06479891
GRAMS_PER_POUND = 453.59237
MM_PER_INCH = 25.4

DEFAULT_DT = 0.001                # s
MIN_DT = 1e-5                     # s, smallest accepted step
INTEGRATION_METHODS = ('rk4', 'euler')


@dataclass(frozen=True)
class ProjectileSpec:
    """
    Bullet and load as the solver sees it.
    """
    muzzle_velocity_ms: float = 800.0
    drag_model: DragModelKind = DragModelKind.G1
    ballistic_coefficient: float = 0.45        # lb/in², ignored without drag
    bullet_mass_grams: float = 11.34           # 175 gr
    bullet_diameter_mm: float = 7.82           # .308"
    mv_temp_sensitivity: float = 0.0           # m/s per °C
    mv_reference_temp_c: float = 15.0

    def __post_init__(self):
        object.__setattr__(self, 'drag_model', DragModelKind.parse(self.drag_model))

    @classmethod
    def from_grains(cls, muzzle_velocity_ms: float, weight_grains: float,
                    **kwargs) -> "ProjectileSpec":
        return cls(muzzle_velocity_ms=muzzle_velocity_ms,
                   bullet_mass_grams=weight_grains * GRAMS_PER_GRAIN, **kwargs)

    @property
    def mass_kg(self) -> float:
        return self.bullet_mass_grams / 1000.0

    @property
    def diameter_m(self) -> float:
        return self.bullet_diameter_mm / 1000.0

    @property
    def area(self) -> float:
        """Reference cross-sectional area (m²)."""
        return math.pi * (self.diameter_m / 2) ** 2

    @property
    def sectional_density(self) -> float:
        """Sectional density in lb/in²."""
        mass_lb = self.bullet_mass_grams / GRAMS_PER_POUND
        diameter_in = self.bullet_diameter_mm / MM_PER_INCH
        return mass_lb / diameter_in ** 2

    @property
    def form_factor(self) -> Optional[float]:
        """i = SD / BC, drag relative to the standard projectile."""
        if self.drag_model is DragModelKind.NONE:
            return None
        return self.sectional_density / self.ballistic_coefficient

    def corrected_muzzle_velocity(self, env: Environment) -> float:
        """Muzzle velocity adjusted for powder temperature."""
        if not self.mv_temp_sensitivity:
            return self.muzzle_velocity_ms
        dT = env.temperature_c - self.mv_reference_temp_c
        return self.muzzle_velocity_ms + self.mv_temp_sensitivity * dT


@dataclass(frozen=True)
class FiringSolution:
    """
    Complete request for one shot.

    `launch_angle_deg` is elevation added on top of the zero. With no zero
    distance (None or 0) it is the bore angle itself.
    Wind direction: 0° = headwind (12 o'clock), 90° = right crosswind.
    """
    projectile: ProjectileSpec = field(default_factory=ProjectileSpec)
    range_m: float = 300.0
    launch_angle_deg: float = 0.0
    height_over_bore_m: float = 0.0
    zero_distance_m: Optional[float] = None
    environment: Environment = field(default_factory=standard_environment)
    wind_speed_ms: float = 0.0
    wind_direction_deg: float = 0.0

    dt: float = DEFAULT_DT
    method: str = 'rk4'
    speed_of_sound_ms: float = SPEED_OF_SOUND

    @property
    def is_zeroed(self) -> bool:
        return bool(self.zero_distance_m) and self.zero_distance_m > 0

    def with_range(self, range_m: float) -> "FiringSolution":
        return replace(self, range_m=range_m)


def compute_acceleration(vx: float, vy: float, table: Optional[DragTable],
                         density: float, bc: float,
                         speed_of_sound: float = SPEED_OF_SOUND) -> Tuple[float, float]:
    """
    Acceleration (ax, ay) in m/s² at velocity (vx, vy).

    `table=None` means no drag: gravity only.
    """
    v = math.hypot(vx, vy)
    if table is None or v < 1e-10:
        return 0.0, -GRAVITY

    cd = table.cd(v / speed_of_sound)
    a_drag = drag_deceleration(v, cd, density, bc)
    return -a_drag * vx / v, -(GRAVITY + a_drag * vy / v)
