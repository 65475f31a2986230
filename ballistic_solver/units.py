"""
Angular Units & Scope Corrections
=================================
Linear drop / offset on target → angular scope adjustment.

Constants are fixed rather than re-derived so that stored DOPE data and
round trips (mil → MOA → mil) stay bit-stable:

  - 1 mil = 3.43774677 MOA
  - offset → mil uses 10   (1 cm at 100 m is 0.1 mil)
  - offset → MOA uses 34.38

Sign convention for corrections: an impact ABOVE the aim point (+up)
needs the turret dialled DOWN, i.e. a negative "up" correction; an impact
to the RIGHT (+right) needs a negative "right" correction (dial left).
"""

from dataclasses import dataclass
from typing import Tuple


MIL_TO_MOA = 3.43774677
CM_TO_MIL_FACTOR = 10.0
CM_TO_MOA_FACTOR = 34.38

SCOPE_UNITS = ('MIL', 'MOA')
DEFAULT_CLICK = {'MIL': 0.1, 'MOA': 0.25}


@dataclass(frozen=True)
class ScopeCorrection:
    """Turret adjustment; positive up = dial up, positive right = dial right."""
    up: float
    right: float
    units: str = 'MIL'


def _check_units(units: str) -> str:
    units = units.upper()
    if units not in SCOPE_UNITS:
        raise ValueError(f"Unknown scope units '{units}'. Available: {list(SCOPE_UNITS)}")
    return units


def mil_to_moa(mil: float) -> float:
    return mil * MIL_TO_MOA


def moa_to_mil(moa: float) -> float:
    return moa / MIL_TO_MOA


def hold_from_drop(drop_m: float, range_m: float) -> Tuple[float, float]:
    """(mil, MOA) hold that compensates `drop_m` at `range_m`."""
    hold_mil = (drop_m / range_m) * 1000.0
    return hold_mil, mil_to_moa(hold_mil)


def cm_to_mil(offset_cm: float, range_m: float) -> float:
    """Angular size of a linear offset (cm) at `range_m`, in mil."""
    return (offset_cm / 100.0) / range_m * 1000.0


def mil_from_offset(range_m: float, offset_up_cm: float,
                    offset_right_cm: float) -> ScopeCorrection:
    """Dial correction (mil) that removes an observed group offset."""
    return ScopeCorrection(
        up=(-offset_up_cm * CM_TO_MIL_FACTOR) / range_m,
        right=(-offset_right_cm * CM_TO_MIL_FACTOR) / range_m,
        units='MIL',
    )


def moa_from_offset(range_m: float, offset_up_cm: float,
                    offset_right_cm: float) -> ScopeCorrection:
    """Dial correction (MOA) that removes an observed group offset."""
    return ScopeCorrection(
        up=(-offset_up_cm * CM_TO_MOA_FACTOR) / range_m,
        right=(-offset_right_cm * CM_TO_MOA_FACTOR) / range_m,
        units='MOA',
    )


def suggest_scope_correction(predicted_hold_mil: float, offset_up_cm: float,
                             offset_right_cm: float, range_m: float,
                             units: str = 'MIL',
                             predicted_windage_mil: float = 0.0) -> ScopeCorrection:
    """
    Final dial for a range: the solver's predicted hold plus whatever it
    takes to pull the observed group onto the aim point.

    `predicted_windage_mil` is a dial like `ScopeCorrection.right`
    (+ = dial right), as given by `TrajectoryResult.windage_mil`.
    """
    units = _check_units(units)
    correction = mil_from_offset(range_m, offset_up_cm, offset_right_cm)

    up_mil = predicted_hold_mil + correction.up
    right_mil = predicted_windage_mil + correction.right
    if units == 'MOA':
        return ScopeCorrection(mil_to_moa(up_mil), mil_to_moa(right_mil), 'MOA')
    return ScopeCorrection(up_mil, right_mil, 'MIL')


def to_clicks(correction: ScopeCorrection, click_value: float = None) -> Tuple[int, int]:
    """Correction rounded to whole turret clicks (up, right)."""
    units = _check_units(correction.units)
    click = click_value or DEFAULT_CLICK[units]
    return round(correction.up / click), round(correction.right / click)
