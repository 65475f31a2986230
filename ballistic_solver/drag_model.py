"""
Standard Drag Model
===================
Mach-dependent drag coefficients (Cd) for the two standard reference
projectiles used by small-arms ballistic coefficients:

- G1: flat-base spitzer (Ingalls / Mayevski family)
- G7: long boat-tail, secant ogive (modern long-range standard)

Each table is a fixed list of (Mach, Cd) pairs with strictly increasing
Mach. Lookup is piecewise linear between breakpoints and flat outside
the table: below Mach 0 the first Cd is used, above Mach 5 the last.

A projectile's ballistic coefficient (lb/in²) scales the reference Cd to
the actual bullet; see `drag_deceleration` for the scaling used.
"""

import math
from enum import Enum
from functools import lru_cache
from typing import Union

import numpy as np
from scipy.interpolate import interp1d


# lb/in² → kg/m²
BC_TO_SI = 703.0695796


class DragModelKind(str, Enum):
    """Drag model selected for a projectile."""
    NONE = "NONE"
    G1 = "G1"
    G7 = "G7"

    @classmethod
    def parse(cls, value: Union[str, "DragModelKind", None]) -> "DragModelKind":
        """Accepts enum members, 'G1'/'g7' and the usual no-drag spellings."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        key = str(value).strip().upper()
        if key in ("", "NONE", "NODRAG", "NO_DRAG", "VACUUM"):
            return cls.NONE
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown drag model '{value}'. "
                f"Available: {[m.value for m in cls]}"
            ) from None


# ══════════════════════════════════════════════════════════════════════════
#  Cd vs Mach tables: (Mach, Cd) pairs, standard reference projectiles
# ══════════════════════════════════════════════════════════════════════════

G1_TABLE = np.array([
    [0.00, 0.2629], [0.05, 0.2558], [0.10, 0.2487], [0.15, 0.2413],
    [0.20, 0.2344], [0.25, 0.2278], [0.30, 0.2214], [0.35, 0.2155],
    [0.40, 0.2104], [0.45, 0.2061], [0.50, 0.2032], [0.55, 0.2020],
    [0.60, 0.2034], [0.65, 0.2165], [0.70, 0.2230], [0.75, 0.2313],
    [0.80, 0.2417], [0.85, 0.2546], [0.90, 0.2706], [0.925, 0.2838],
    [0.95, 0.3017], [0.975, 0.3237], [1.00, 0.3537], [1.025, 0.3860],
    [1.05, 0.4041], [1.075, 0.4147], [1.10, 0.4209], [1.125, 0.4248],
    [1.15, 0.4270], [1.175, 0.4280], [1.20, 0.4280], [1.25, 0.4263],
    [1.30, 0.4230], [1.35, 0.4183], [1.40, 0.4127], [1.45, 0.4068],
    [1.50, 0.4008], [1.55, 0.3947], [1.60, 0.3887], [1.65, 0.3828],
    [1.70, 0.3770], [1.75, 0.3715], [1.80, 0.3663], [1.85, 0.3612],
    [1.90, 0.3564], [1.95, 0.3518], [2.00, 0.3474], [2.05, 0.3432],
    [2.10, 0.3392], [2.15, 0.3354], [2.20, 0.3318], [2.25, 0.3284],
    [2.30, 0.3251], [2.35, 0.3219], [2.40, 0.3188], [2.45, 0.3159],
    [2.50, 0.3131], [2.60, 0.3078], [2.70, 0.3029], [2.80, 0.2984],
    [2.90, 0.2943], [3.00, 0.2906], [3.10, 0.2872], [3.20, 0.2842],
    [3.30, 0.2814], [3.40, 0.2788], [3.50, 0.2764], [3.60, 0.2742],
    [3.70, 0.2721], [3.80, 0.2702], [3.90, 0.2684], [4.00, 0.2668],
    [4.20, 0.2638], [4.40, 0.2614], [4.60, 0.2594], [4.80, 0.2577],
    [5.00, 0.2563],
])

G7_TABLE = np.array([
    [0.00, 0.1198], [0.05, 0.1197], [0.10, 0.1196], [0.15, 0.1194],
    [0.20, 0.1193], [0.25, 0.1194], [0.30, 0.1194], [0.35, 0.1194],
    [0.40, 0.1193], [0.45, 0.1193], [0.50, 0.1194], [0.55, 0.1193],
    [0.60, 0.1194], [0.65, 0.1197], [0.70, 0.1202], [0.725, 0.1207],
    [0.75, 0.1215], [0.775, 0.1226], [0.80, 0.1242], [0.825, 0.1266],
    [0.85, 0.1306], [0.875, 0.1368], [0.90, 0.1464], [0.925, 0.1660],
    [0.95, 0.2054], [0.975, 0.2993], [1.00, 0.3803], [1.025, 0.4015],
    [1.05, 0.4043], [1.075, 0.4034], [1.10, 0.4014], [1.125, 0.3987],
    [1.15, 0.3955], [1.20, 0.3884], [1.25, 0.3810], [1.30, 0.3732],
    [1.35, 0.3657], [1.40, 0.3580], [1.50, 0.3440], [1.55, 0.3376],
    [1.60, 0.3315], [1.65, 0.3260], [1.70, 0.3209], [1.75, 0.3160],
    [1.80, 0.3117], [1.85, 0.3078], [1.90, 0.3042], [1.95, 0.3010],
    [2.00, 0.2980], [2.05, 0.2951], [2.10, 0.2922], [2.15, 0.2892],
    [2.20, 0.2864], [2.25, 0.2835], [2.30, 0.2807], [2.35, 0.2779],
    [2.40, 0.2752], [2.45, 0.2725], [2.50, 0.2697], [2.55, 0.2670],
    [2.60, 0.2643], [2.65, 0.2615], [2.70, 0.2588], [2.75, 0.2561],
    [2.80, 0.2533], [2.85, 0.2506], [2.90, 0.2479], [2.95, 0.2451],
    [3.00, 0.2424], [3.10, 0.2368], [3.20, 0.2313], [3.30, 0.2258],
    [3.40, 0.2205], [3.50, 0.2154], [3.60, 0.2106], [3.70, 0.2060],
    [3.80, 0.2017], [3.90, 0.1975], [4.00, 0.1935], [4.20, 0.1861],
    [4.40, 0.1793], [4.60, 0.1730], [4.80, 0.1672], [5.00, 0.1618],
])

ALL_MODELS = {
    DragModelKind.G1: {
        'name': 'G1 (flat base)',
        'color': '#ff6b35',
        'linestyle': '-',
        'table': G1_TABLE,
    },
    DragModelKind.G7: {
        'name': 'G7 (boat tail)',
        'color': '#00d4ff',
        'linestyle': '--',
        'table': G7_TABLE,
    },
}


# ══════════════════════════════════════════════════════════════════════════
#  Table lookup
# ══════════════════════════════════════════════════════════════════════════

class DragTable:
    """
    Drag coefficient lookup for one standard model.

    Linear interpolation between breakpoints, end values held flat outside
    the table.
    """

    def __init__(self, model: Union[str, DragModelKind] = DragModelKind.G7):
        kind = DragModelKind.parse(model)
        if kind not in ALL_MODELS:
            raise ValueError(
                f"No drag table for model '{kind.value}'; "
                f"no-drag shots go through the analytic solver"
            )

        data = ALL_MODELS[kind]
        self.kind = kind
        self.name = data['name']
        self.color = data['color']
        self.linestyle = data['linestyle']

        table = data['table']
        self.mach_values = table[:, 0].copy()
        self.cd_values = table[:, 1].copy()
        self.mach_values.setflags(write=False)
        self.cd_values.setflags(write=False)
        self.mach_min = float(self.mach_values[0])
        self.mach_max = float(self.mach_values[-1])

        # Linear, no extrapolation beyond the table ends
        self._interp = interp1d(
            self.mach_values, self.cd_values,
            kind='linear',
            bounds_error=False,
            fill_value=(self.cd_values[0], self.cd_values[-1]),
            assume_sorted=True,
        )

    def cd(self, mach: float) -> float:
        """Return drag coefficient at the given Mach number."""
        return float(self._interp(mach))

    def cd_array(self, mach_array: np.ndarray) -> np.ndarray:
        """Vectorized Cd lookup."""
        return self._interp(np.asarray(mach_array, dtype=float))

    def __repr__(self):
        return f"DragTable({self.kind.value}, {len(self.mach_values)} points)"


@lru_cache(maxsize=None)
def get_drag_table(model: DragModelKind) -> DragTable:
    """Shared read-only table instance per model."""
    return DragTable(model)


def drag_coefficient(mach: float, model: Union[str, DragModelKind]) -> float:
    """Cd of the standard projectile `model` at `mach`."""
    return get_drag_table(DragModelKind.parse(model)).cd(mach)


def drag_deceleration(speed: float, cd: float, density: float,
                      bc: float) -> float:
    """
    Drag deceleration magnitude (m/s²).

    For the standard projectile, a = ½ ρ v² Cd A / m. A real bullet with
    sectional density SD = m/d² and form factor i = SD / BC gives

        a = ½ ρ v² Cd · i · (π d² / 4) / m  =  ρ v² Cd π / (8 · BC)

    with BC in kg/m². Mass and diameter cancel, so only BC is needed.
    """
    return density * speed * speed * cd * math.pi / (8.0 * bc * BC_TO_SI)


if __name__ == "__main__":
    print("Standard Drag Tables — Cd spot values")
    print("=" * 40)
    print(f"{'Mach':>6} {'G1':>10} {'G7':>10}")
    for mach in [0.5, 0.9, 1.0, 1.2, 2.0, 3.0, 6.0]:
        print(f"{mach:>6.2f} {drag_coefficient(mach, 'G1'):>10.4f} "
              f"{drag_coefficient(mach, 'G7'):>10.4f}")
