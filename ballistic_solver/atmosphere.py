"""
Shooter's Atmosphere Model
==========================
Computes moist-air density from a snapshot of the local weather
(temperature, station pressure, relative humidity).

Air is treated as a mixture of two ideal gases, dry air and water vapour.
The vapour partial pressure comes from the Magnus-Tetens approximation of
the saturation vapour pressure over water:

    es = 6.112 * exp(17.62 * T / (243.12 + T))      [hPa, T in °C]

Humid air is lighter than dry air at the same temperature and pressure,
so density drops slightly as humidity rises.

When only a station altitude is known, the troposphere layer of the
ISA 1976 model supplies the pressure.

Reference: U.S. Standard Atmosphere, 1976 (NASA-TM-X-74335)
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np


# ── Gas constants ──────────────────────────────────────────────────────────
R_DRY_AIR            = 287.058     # J/(kg·K)
R_WATER_VAPOR        = 461.495     # J/(kg·K)
KELVIN_OFFSET        = 273.15

# ── Magnus-Tetens coefficients (over water) ───────────────────────────────
MAGNUS_ES0_HPA       = 6.112
MAGNUS_A             = 17.62
MAGNUS_B_C           = 243.12

# ── ICAO / ISA reference values ───────────────────────────────────────────
STANDARD_TEMP_C      = 15.0
STANDARD_PRESSURE_HPA = 1013.25
STANDARD_HUMIDITY_PCT = 0.0
STANDARD_DENSITY     = 1.225       # kg/m³
SEA_LEVEL_TEMP       = 288.15      # K
LAPSE_RATE_TROPO     = -0.0065     # K/m
TROPOPAUSE_ALT       = 11000.0     # m
GRAVITY              = 9.80665     # m/s²
MOLAR_MASS_AIR       = 0.0289644   # kg/mol
GAS_CONSTANT         = 8.31447     # J/(mol·K)

# Fixed speed of sound used for Mach lookups (not temperature corrected)
SPEED_OF_SOUND       = 343.0       # m/s


@dataclass(frozen=True)
class Environment:
    """
    Weather snapshot handed to the solver for one calculation.

    Manual entry, a weather service or the standard atmosphere all end up
    here; the solver does not care where the numbers came from.
    """
    temperature_c: float = STANDARD_TEMP_C
    pressure_hpa: float = STANDARD_PRESSURE_HPA
    humidity_pct: float = STANDARD_HUMIDITY_PCT   # 0–100
    altitude_m: Optional[float] = None

    @classmethod
    def from_altitude(cls, temperature_c: float, humidity_pct: float,
                      altitude_m: float) -> "Environment":
        """Snapshot whose station pressure is derived from altitude (ISA)."""
        return cls(
            temperature_c=temperature_c,
            pressure_hpa=isa_pressure(altitude_m) / 100.0,
            humidity_pct=humidity_pct,
            altitude_m=altitude_m,
        )

    @property
    def temperature_k(self) -> float:
        return self.temperature_c + KELVIN_OFFSET


def standard_environment() -> Environment:
    """ICAO sea-level conditions: 15 °C, 1013.25 hPa, dry air."""
    return Environment(
        temperature_c=STANDARD_TEMP_C,
        pressure_hpa=STANDARD_PRESSURE_HPA,
        humidity_pct=STANDARD_HUMIDITY_PCT,
        altitude_m=0.0,
    )


def isa_pressure(altitude: float) -> float:
    """
    Atmospheric pressure (Pa) at a geometric altitude (m), troposphere
    barometric formula. Altitudes above the tropopause use the
    tropopause value; small-arms shooting never gets there.
    """
    altitude = min(altitude, TROPOPAUSE_ALT)
    exponent = GRAVITY * MOLAR_MASS_AIR / (GAS_CONSTANT * abs(LAPSE_RATE_TROPO))
    T = SEA_LEVEL_TEMP + LAPSE_RATE_TROPO * altitude
    return STANDARD_PRESSURE_HPA * 100.0 * (T / SEA_LEVEL_TEMP) ** exponent


def saturation_vapor_pressure(temperature_c: float) -> float:
    """Magnus-Tetens saturation vapour pressure over water (hPa)."""
    return MAGNUS_ES0_HPA * math.exp(
        MAGNUS_A * temperature_c / (MAGNUS_B_C + temperature_c)
    )


def compute_air_density(env: Environment) -> float:
    """
    Moist-air density (kg/m³).

    ρ = pd / (Rd·T) + e / (Rv·T)

    Humidity is clamped to [0, 100] and the dry-air partial pressure to
    ≥ 0, so the result is never negative.
    """
    humidity = min(max(env.humidity_pct, 0.0), 100.0)
    T_k = env.temperature_k

    e_pa = (humidity / 100.0) * saturation_vapor_pressure(env.temperature_c) * 100.0
    pd_pa = max(0.0, env.pressure_hpa * 100.0 - e_pa)

    return pd_pa / (R_DRY_AIR * T_k) + e_pa / (R_WATER_VAPOR * T_k)


# ── Vectorized version for plotting ───────────────────────────────────────
def density_profile(temperatures: np.ndarray,
                    pressure_hpa: float = STANDARD_PRESSURE_HPA,
                    humidity_pct: float = STANDARD_HUMIDITY_PCT) -> np.ndarray:
    """Air density for an array of temperatures (°C) at fixed P and RH."""
    temperatures = np.asarray(temperatures, dtype=float)
    humidity = np.clip(humidity_pct, 0.0, 100.0)
    T_k = temperatures + KELVIN_OFFSET

    es = MAGNUS_ES0_HPA * np.exp(MAGNUS_A * temperatures / (MAGNUS_B_C + temperatures))
    e_pa = (humidity / 100.0) * es * 100.0
    pd_pa = np.clip(pressure_hpa * 100.0 - e_pa, 0.0, None)
    return pd_pa / (R_DRY_AIR * T_k) + e_pa / (R_WATER_VAPOR * T_k)


if __name__ == "__main__":
    print("Air Density Check (1013.25 hPa)")
    print("=" * 48)
    print(f"{'T (°C)':>8} {'ρ dry':>12} {'ρ 50% RH':>12} {'ρ 100% RH':>12}")
    print("-" * 48)
    for t in [-20, 0, 15, 25, 35]:
        dry = compute_air_density(Environment(t, STANDARD_PRESSURE_HPA, 0.0))
        half = compute_air_density(Environment(t, STANDARD_PRESSURE_HPA, 50.0))
        wet = compute_air_density(Environment(t, STANDARD_PRESSURE_HPA, 100.0))
        print(f"{t:>8} {dry:>12.5f} {half:>12.5f} {wet:>12.5f}")
