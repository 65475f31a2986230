#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  BALLISTIC SOLVER — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete solver pipeline:
    1. Air density check (temperature / humidity)
    2. G1 / G7 drag table spot values
    3. Validation against the closed-form no-drag trajectory
    4. Single firing solution (zeroed .308, G7)
    5. DOPE table 100-800 m with a crosswind
    6. Euler vs RK4 accuracy comparison
    7. Coriolis holds
    8. Scope correction from an observed group

  Plots are saved to the outputs/ directory.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip plots (faster)
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ballistic_solver.atmosphere import Environment, compute_air_density, STANDARD_PRESSURE_HPA
from ballistic_solver.drag_model import DragModelKind, ALL_MODELS, get_drag_table
from ballistic_solver.projectile import ProjectileSpec, FiringSolution
from ballistic_solver.integrator import simulate_euler, simulate_rk4
from ballistic_solver.solver import (
    solve_trajectory, build_dope_table, trace_trajectory,
)
from ballistic_solver.validation import validate_against_reference, REFERENCE_NO_DRAG
from ballistic_solver.coriolis import compute_coriolis_hold
from ballistic_solver.units import suggest_scope_correction, to_clicks
from ballistic_solver.wind import clock_to_degrees
from ballistic_solver.visualization import (
    plot_trajectory, plot_cd_vs_mach, plot_density_vs_temperature,
    plot_dope_table, plot_euler_vs_rk4, ensure_output_dir,
)

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     POINT-MASS BALLISTIC SOLVER                                       ║
║     ─────────────────────────────────────────────────────             ║
║     Gravity · Drag G1/G7(Mach) · Moist Air · Wind · Coriolis          ║
║     Methods: Euler · RK4 │ Holds in mil and MOA                       ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv
    logging.basicConfig(level=logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    banner()
    out = ensure_output_dir('outputs')
    saved = []

    def save(fig, name):
        if not quick:
            fig.savefig(f'{out}/{name}', dpi=150, bbox_inches='tight',
                        facecolor=fig.get_facecolor())
            saved.append(name)
            print(f"  ✓ Saved: {out}/{name}")
        plt.close(fig)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Air Density
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Air Density (1013.25 hPa)")
    print(f"  {'T (°C)':>8} {'ρ dry':>10} {'ρ 50% RH':>10} {'ρ 100% RH':>10}")
    for t in [-20, 0, 15, 25, 35]:
        row = [compute_air_density(Environment(t, STANDARD_PRESSURE_HPA, rh))
               for rh in (0.0, 50.0, 100.0)]
        print(f"  {t:>8} {row[0]:>10.5f} {row[1]:>10.5f} {row[2]:>10.5f}")
    if not quick:
        save(plot_density_vs_temperature(), '01_density_vs_temperature.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Drag Tables
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Cd vs Mach")
    for kind, data in ALL_MODELS.items():
        table = get_drag_table(kind)
        print(f"  {data['name']:<16s}  Cd @ M0.5={table.cd(0.5):.4f}  "
              f"Cd @ M1.0={table.cd(1.0):.4f}  Cd @ M2.0={table.cd(2.0):.4f}")
    if not quick:
        save(plot_cd_vs_mach(), '02_cd_vs_mach.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Validation Against Closed Form
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Validation — No-Drag Reference")
    validate_against_reference(REFERENCE_NO_DRAG)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Single Firing Solution
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Firing Solution (.308 175 gr, G7, 100 m zero)")

    load = ProjectileSpec.from_grains(
        muzzle_velocity_ms=790.0,
        weight_grains=175,
        drag_model=DragModelKind.G7,
        ballistic_coefficient=0.243,
        bullet_diameter_mm=7.82,
        mv_temp_sensitivity=0.3,
    )
    shot = FiringSolution(
        projectile=load,
        range_m=600.0,
        height_over_bore_m=0.045,
        zero_distance_m=100.0,
        environment=Environment(temperature_c=25.0, pressure_hpa=1005.0,
                                humidity_pct=60.0),
        wind_speed_ms=4.0,
        wind_direction_deg=clock_to_degrees(3),
    )

    result = solve_trajectory(shot)
    print(result.summary())
    if not quick:
        path = trace_trajectory(shot)
        save(plot_trajectory(path), '03_trajectory_600m.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: DOPE Table
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: DOPE Table (4 m/s from 3 o'clock)")
    dope = build_dope_table(shot, range(100, 900, 100))
    print(f"  {'Range':>6} {'ToF (s)':>8} {'V (m/s)':>8} {'Drop (cm)':>10} "
          f"{'Elev mil':>9} {'Elev MOA':>9} {'Wind dial':>9}")
    for row in dope:
        if not row.valid:
            print(f"  {row.range_m:>6.0f}  ({row.status.value})")
            continue
        print(f"  {row.range_m:>6.0f} {row.time_of_flight_s:>8.3f} "
              f"{row.impact_velocity_ms:>8.1f} {row.drop_m*100:>10.1f} "
              f"{row.hold_mil:>9.2f} {row.hold_moa:>9.2f} {row.windage_mil:>9.2f}")
    if not quick:
        save(plot_dope_table(dope), '04_dope_table.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Euler vs RK4 Accuracy
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Euler vs RK4 Numerical Accuracy")

    dt_test = 0.01  # Coarse timestep to show differences
    coarse = FiringSolution(projectile=load, range_m=800.0, dt=dt_test)
    path_euler = simulate_euler(coarse, 0.0)
    path_rk4 = simulate_rk4(coarse, 0.0)

    _, y_e, v_e = path_euler.at_range(800.0)
    _, y_r, v_r = path_rk4.at_range(800.0)
    print(f"  Timestep: {dt_test} s, bore angle 0°")
    print(f"  Euler  — Drop @ 800 m: {-y_e:.3f} m  |  Velocity: {v_e:.1f} m/s")
    print(f"  RK4    — Drop @ 800 m: {-y_r:.3f} m  |  Velocity: {v_r:.1f} m/s")
    print(f"  Δ Drop: {(y_r - y_e)*100:+.2f} cm")
    if not quick:
        save(plot_euler_vs_rk4(path_euler, path_rk4), '05_euler_vs_rk4.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Coriolis
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 7: Coriolis Holds at 800 m, 45°N")
    far = dope[-1]
    if far.valid:
        for label, azimuth in [("North", 0.0), ("East", 90.0),
                               ("South", 180.0), ("West", 270.0)]:
            hold = compute_coriolis_hold(far.range_m, far.time_of_flight_s,
                                         load.muzzle_velocity_ms,
                                         far.impact_velocity_ms, 45.0, azimuth)
            print(f"  {label:<6s}  Elev: {hold.elev_mil:>+7.3f} mil  "
                  f"Wind: {hold.wind_mil:>+7.3f} mil  "
                  f"(drift {hold.east_drift_m*100:+.1f} cm, "
                  f"lift {hold.up_shift_m*100:+.1f} cm)")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Scope Correction
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 8: Scope Correction (group 5 cm high, 3 cm left at 300 m)")
    at_300 = dope[2]
    for units in ('MIL', 'MOA'):
        corr = suggest_scope_correction(at_300.hold_mil, 5.0, -3.0, 300.0,
                                        units=units,
                                        predicted_windage_mil=at_300.windage_mil)
        up, right = to_clicks(corr)
        print(f"  {units}: up {corr.up:+.2f}  right {corr.right:+.2f}  "
              f"→ {up:+d} / {right:+d} clicks")

    # ══════════════════════════════════════════════════════════════════════
    #  SUMMARY
    # ══════════════════════════════════════════════════════════════════════
    elapsed = time.time() - start_time
    section("COMPLETE")
    if quick:
        print("  Plots skipped (--quick mode)")
    else:
        print(f"  All outputs saved to: {os.path.abspath(out)}/")
        for name in saved:
            print(f"    {name}")
    print(f"\n  Total runtime: {elapsed:.1f} seconds\n")


if __name__ == "__main__":
    main()
