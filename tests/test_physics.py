"""
Unit Tests for the Ballistic Solver
===================================
Tests core physics modules for correctness.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ballistic_solver.atmosphere import (
    Environment, compute_air_density, density_profile, isa_pressure,
    saturation_vapor_pressure, standard_environment,
    GRAVITY, STANDARD_PRESSURE_HPA, STANDARD_DENSITY,
)
from ballistic_solver.drag_model import (
    DragModelKind, DragTable, G1_TABLE, G7_TABLE,
    drag_coefficient, drag_deceleration,
)
from ballistic_solver.projectile import (
    ProjectileSpec, FiringSolution, compute_acceleration, MIN_DT,
)
from ballistic_solver.errors import SolveStatus, validate_firing_solution
from ballistic_solver.integrator import (
    simulate_euler, simulate_rk4, solve_zero_angle, VERTICAL_FLOOR_M,
    MAX_FLIGHT_TIME, MAX_STEPS,
)
from ballistic_solver.no_drag import no_drag_zero_angle, no_drag_height
from ballistic_solver.solver import solve_trajectory, build_dope_table
import ballistic_solver.solver as solver_module


NO_DRAG = ProjectileSpec(muzzle_velocity_ms=800.0, drag_model=DragModelKind.NONE)
G7_308 = ProjectileSpec(muzzle_velocity_ms=790.0, drag_model=DragModelKind.G7,
                        ballistic_coefficient=0.243)


class TestAtmosphere:
    """Moist-air density against known standard values."""

    def test_standard_dry_density(self):
        assert abs(compute_air_density(standard_environment()) - STANDARD_DENSITY) < 0.001

    def test_saturation_pressure_at_15c(self):
        """Magnus-Tetens gives ~17.0 hPa at 15 °C."""
        assert abs(saturation_vapor_pressure(15.0) - 17.02) < 0.05

    def test_density_decreases_with_temperature(self):
        temps = np.arange(-40, 51, 5)
        rho = [compute_air_density(Environment(t, STANDARD_PRESSURE_HPA, 50.0))
               for t in temps]
        assert all(a > b for a, b in zip(rho, rho[1:]))

    def test_profile_matches_scalar(self):
        temps = np.linspace(-40, 50, 19)
        profile = density_profile(temps, STANDARD_PRESSURE_HPA, 70.0)
        assert np.all(np.diff(profile) < 0)
        for t, rho in zip(temps, profile):
            scalar = compute_air_density(Environment(t, STANDARD_PRESSURE_HPA, 70.0))
            assert rho == pytest.approx(scalar, rel=1e-12)

    def test_humid_air_lighter(self):
        dry = compute_air_density(Environment(15.0, STANDARD_PRESSURE_HPA, 0.0))
        wet = compute_air_density(Environment(15.0, STANDARD_PRESSURE_HPA, 100.0))
        assert wet < dry
        assert (dry - wet) / dry < 0.02

    def test_humidity_is_clamped(self):
        at_100 = compute_air_density(Environment(20.0, 1000.0, 100.0))
        at_150 = compute_air_density(Environment(20.0, 1000.0, 150.0))
        assert at_150 == at_100
        at_0 = compute_air_density(Environment(20.0, 1000.0, 0.0))
        assert compute_air_density(Environment(20.0, 1000.0, -10.0)) == at_0

    def test_density_increases_with_pressure(self):
        low = compute_air_density(Environment(15.0, 900.0, 30.0))
        high = compute_air_density(Environment(15.0, 1030.0, 30.0))
        assert high > low

    def test_isa_sea_level_pressure(self):
        assert abs(isa_pressure(0) - 101325.0) < 1.0
        assert isa_pressure(2000) < isa_pressure(0)

    def test_environment_from_altitude(self):
        env = Environment.from_altitude(15.0, 0.0, 0.0)
        assert env.pressure_hpa == pytest.approx(STANDARD_PRESSURE_HPA, abs=0.01)
        assert Environment.from_altitude(15.0, 0.0, 1500.0).pressure_hpa < 900.0


class TestDragModel:
    """Verify drag coefficient interpolation."""

    @pytest.mark.parametrize("kind, table", [
        (DragModelKind.G1, G1_TABLE), (DragModelKind.G7, G7_TABLE),
    ])
    def test_exact_at_breakpoints(self, kind, table):
        model = DragTable(kind)
        for mach, cd in table:
            assert model.cd(mach) == pytest.approx(cd, abs=1e-12)

    def test_mach_strictly_increasing(self):
        for table in (G1_TABLE, G7_TABLE):
            assert np.all(np.diff(table[:, 0]) > 0)

    @pytest.mark.parametrize("kind, lo, hi", [
        (DragModelKind.G1, 0.90, 0.925),
        (DragModelKind.G1, 2.0, 2.05),
        (DragModelKind.G7, 0.95, 0.975),
        (DragModelKind.G7, 3.0, 3.1),
    ])
    def test_between_neighbours(self, kind, lo, hi):
        model = DragTable(kind)
        cd_lo, cd_hi = model.cd(lo), model.cd(hi)
        mid = model.cd((lo + hi) / 2)
        assert min(cd_lo, cd_hi) < mid < max(cd_lo, cd_hi)
        assert mid == pytest.approx((cd_lo + cd_hi) / 2, abs=1e-12)

    def test_flat_outside_table(self):
        g1 = DragTable(DragModelKind.G1)
        assert g1.cd(-1.0) == pytest.approx(G1_TABLE[0, 1])
        assert g1.cd(8.0) == pytest.approx(G1_TABLE[-1, 1])
        g7 = DragTable(DragModelKind.G7)
        assert g7.cd(5.0) == g7.cd(50.0)

    def test_transonic_drag_rise(self):
        """Cd should spike in the transonic region."""
        for kind in (DragModelKind.G1, DragModelKind.G7):
            assert drag_coefficient(1.0, kind) > drag_coefficient(0.5, kind)

    def test_g7_below_g1_subsonic(self):
        for mach in (0.3, 0.5, 0.8):
            assert drag_coefficient(mach, 'G7') < drag_coefficient(mach, 'G1')

    def test_vectorized_lookup(self):
        model = DragTable('G7')
        machs = np.array([0.5, 1.0, 2.5])
        np.testing.assert_allclose(model.cd_array(machs), [model.cd(m) for m in machs])

    def test_tables_are_read_only(self):
        model = DragTable(DragModelKind.G1)
        with pytest.raises(ValueError):
            model.cd_values[0] = 1.0

    def test_none_model_has_no_table(self):
        with pytest.raises(ValueError):
            DragTable(DragModelKind.NONE)

    def test_parse_model_names(self):
        assert DragModelKind.parse('g7') is DragModelKind.G7
        assert DragModelKind.parse('noDrag') is DragModelKind.NONE
        assert DragModelKind.parse(None) is DragModelKind.NONE
        with pytest.raises(ValueError):
            DragModelKind.parse('G8')

    def test_deceleration_matches_form_factor(self):
        """BC scaling equals ½ρv²·Cd·i·A/m with i = SD / BC."""
        spec = ProjectileSpec(ballistic_coefficient=0.45,
                              bullet_mass_grams=11.34, bullet_diameter_mm=7.82)
        rho, v, cd = 1.2, 700.0, 0.35
        expected = 0.5 * rho * v ** 2 * cd * spec.form_factor * spec.area / spec.mass_kg
        actual = drag_deceleration(v, cd, rho, spec.ballistic_coefficient)
        assert actual == pytest.approx(expected, rel=1e-6)


class TestProjectile:
    """Verify force calculations."""

    def test_gravity_only_without_table(self):
        ax, ay = compute_acceleration(800.0, 0.0, None, 1.225, 0.5)
        assert ax == 0.0
        assert ay == pytest.approx(-GRAVITY)

    def test_drag_opposes_velocity(self):
        table = DragTable(DragModelKind.G1)
        ax, ay = compute_acceleration(800.0, 0.0, table, 1.225, 0.5)
        assert ax < 0
        assert ay == pytest.approx(-GRAVITY)

    def test_denser_air_more_drag(self):
        table = DragTable(DragModelKind.G1)
        ax_thin, _ = compute_acceleration(800.0, 0.0, table, 1.0, 0.5)
        ax_thick, _ = compute_acceleration(800.0, 0.0, table, 1.3, 0.5)
        assert ax_thick < ax_thin

    def test_temperature_corrected_velocity(self):
        spec = ProjectileSpec(muzzle_velocity_ms=800.0, mv_temp_sensitivity=0.5,
                              mv_reference_temp_c=15.0)
        assert spec.corrected_muzzle_velocity(Environment(25.0, 1013.25, 0.0)) == 805.0
        assert spec.corrected_muzzle_velocity(Environment(5.0, 1013.25, 0.0)) == 795.0

    def test_from_grains(self):
        spec = ProjectileSpec.from_grains(800.0, 175)
        assert spec.bullet_mass_grams == pytest.approx(11.34, abs=0.01)

    def test_unknown_model_rejected(self):
        with pytest.raises(ValueError):
            ProjectileSpec(drag_model='G8')


class TestNoDrag:
    """Closed-form vacuum trajectory, V0 = 800 m/s at 300 m."""

    def test_flat_shot_drop(self):
        result = solve_trajectory(FiringSolution(projectile=NO_DRAG, range_m=300.0))
        assert result.status is SolveStatus.OK
        assert result.time_of_flight_s == pytest.approx(0.375, abs=1e-9)
        assert result.height_m == pytest.approx(-0.690, abs=0.005)
        assert result.drop_m == pytest.approx(0.690, abs=0.005)
        assert result.hold_mil == pytest.approx(2.30, abs=0.01)
        assert result.model_used is DragModelKind.NONE

    def test_two_degree_shot(self):
        result = solve_trajectory(FiringSolution(projectile=NO_DRAG, range_m=300.0,
                                                 launch_angle_deg=2.0))
        assert result.time_of_flight_s == pytest.approx(0.375, abs=0.001)
        assert result.height_m == pytest.approx(9.79, abs=0.01)
        assert result.hold_mil == pytest.approx(-32.6, abs=0.05)

    def test_zero_angle(self):
        angle = no_drag_zero_angle(800.0, 300.0)
        assert angle == pytest.approx(0.1317, abs=0.001)
        _, height, _ = no_drag_height(800.0, angle, 300.0)
        assert abs(height) < 1e-9

    def test_zero_out_of_reach(self):
        assert no_drag_zero_angle(100.0, 5000.0) is None

    def test_zeroed_shot_hits_at_zero(self):
        result = solve_trajectory(FiringSolution(projectile=NO_DRAG, range_m=300.0,
                                                 zero_distance_m=300.0))
        assert abs(result.drop_m) < 1e-9
        assert result.launch_angle_deg == pytest.approx(0.1317, abs=0.001)

    def test_height_over_bore_raises_zero_angle(self):
        flat = no_drag_zero_angle(800.0, 100.0, 0.0)
        scoped = no_drag_zero_angle(800.0, 100.0, 0.05)
        assert scoped > flat

    def test_rk4_matches_closed_form(self):
        """RK4 is exact for constant acceleration."""
        solution = FiringSolution(projectile=NO_DRAG, range_m=300.0)
        for angle in (0.0, 2.0):
            path = simulate_rk4(solution, angle)
            t, y, _ = path.at_range(300.0)
            tof, height, _ = no_drag_height(800.0, angle, 300.0)
            assert t == pytest.approx(tof, abs=1e-6)
            assert y == pytest.approx(height, abs=1e-4)


class TestIntegrator:
    """Verify numerical integration."""

    def test_paths_start_below_sight_line(self):
        solution = FiringSolution(projectile=G7_308, range_m=300.0,
                                  height_over_bore_m=0.045)
        path = simulate_rk4(solution, 0.0)
        assert path.y[0] == pytest.approx(-0.045)
        assert path.time[0] == 0.0
        assert path.termination == 'range'
        assert path.range_total >= 300.0

    def test_euler_less_accurate_than_rk4(self):
        solution = FiringSolution(projectile=NO_DRAG, range_m=300.0)
        _, exact, _ = no_drag_height(800.0, 0.0, 300.0)
        _, y_euler, _ = simulate_euler(solution, 0.0).at_range(300.0)
        _, y_rk4, _ = simulate_rk4(solution, 0.0).at_range(300.0)
        assert abs(y_euler - exact) > abs(y_rk4 - exact)
        assert abs(y_euler - exact) < 0.01

    def test_euler_converges_to_rk4_with_drag(self):
        solution = FiringSolution(projectile=G7_308, range_m=500.0, dt=0.0005)
        _, y_euler, _ = simulate_euler(solution, 0.0).at_range(500.0)
        _, y_rk4, _ = simulate_rk4(solution, 0.0).at_range(500.0)
        assert y_euler == pytest.approx(y_rk4, abs=0.02)

    def test_drag_slows_and_drops_more(self):
        with_drag = solve_trajectory(FiringSolution(projectile=G7_308, range_m=500.0))
        vacuum = solve_trajectory(FiringSolution(
            projectile=ProjectileSpec(muzzle_velocity_ms=790.0,
                                      drag_model=DragModelKind.NONE),
            range_m=500.0))
        assert with_drag.impact_velocity_ms < vacuum.impact_velocity_ms
        assert with_drag.drop_m > vacuum.drop_m
        assert with_drag.time_of_flight_s > vacuum.time_of_flight_s

    def test_tiny_drag_approaches_no_drag(self):
        slick = ProjectileSpec(muzzle_velocity_ms=800.0, drag_model=DragModelKind.G1,
                               ballistic_coefficient=10000.0)
        drag = solve_trajectory(FiringSolution(projectile=slick, range_m=300.0))
        vacuum = solve_trajectory(FiringSolution(projectile=NO_DRAG, range_m=300.0))
        assert drag.drop_m == pytest.approx(vacuum.drop_m, abs=0.005)
        assert drag.time_of_flight_s == pytest.approx(vacuum.time_of_flight_s, abs=1e-4)

    def test_higher_bc_flies_flatter(self):
        low = ProjectileSpec(muzzle_velocity_ms=800.0, ballistic_coefficient=0.3)
        high = ProjectileSpec(muzzle_velocity_ms=800.0, ballistic_coefficient=0.6)
        r_low = solve_trajectory(FiringSolution(projectile=low, range_m=600.0))
        r_high = solve_trajectory(FiringSolution(projectile=high, range_m=600.0))
        assert r_high.drop_m < r_low.drop_m
        assert r_high.impact_velocity_ms > r_low.impact_velocity_ms


class TestZeroing:
    """Zero-angle search with drag."""

    def test_zero_range_gives_zero_drop(self):
        solution = FiringSolution(projectile=G7_308, range_m=100.0,
                                  height_over_bore_m=0.045, zero_distance_m=100.0)
        result = solve_trajectory(solution)
        assert result.status is SolveStatus.OK
        assert abs(result.drop_m) < 1e-4
        assert abs(result.hold_mil) < 1e-3

    def test_drag_zero_above_vacuum_zero(self):
        solution = FiringSolution(projectile=G7_308, zero_distance_m=300.0)
        with_drag = solve_zero_angle(solution)
        assert with_drag > no_drag_zero_angle(790.0, 300.0)

    def test_launch_angle_adds_to_zero(self):
        base = FiringSolution(projectile=G7_308, range_m=300.0, zero_distance_m=100.0)
        zeroed = solve_trajectory(base)
        raised = solve_trajectory(FiringSolution(projectile=G7_308, range_m=300.0,
                                                 zero_distance_m=100.0,
                                                 launch_angle_deg=0.1))
        assert raised.launch_angle_deg == pytest.approx(zeroed.launch_angle_deg + 0.1)
        assert raised.drop_m < zeroed.drop_m

    def test_zero_of_none_or_zero_means_unzeroed(self):
        a = solve_trajectory(FiringSolution(projectile=G7_308, zero_distance_m=None))
        b = solve_trajectory(FiringSolution(projectile=G7_308, zero_distance_m=0.0))
        assert a.launch_angle_deg == b.launch_angle_deg == 0.0
        assert a.drop_m == b.drop_m


class TestRangeMonotonicity:
    """Further targets take longer and fall further."""

    def test_dope_monotonic_beyond_zero(self):
        solution = FiringSolution(projectile=G7_308, height_over_bore_m=0.045,
                                  zero_distance_m=100.0)
        rows = build_dope_table(solution, range(100, 900, 100))
        assert all(r.valid for r in rows)
        tofs = [r.time_of_flight_s for r in rows]
        drops = [r.drop_m for r in rows]
        assert all(a < b for a, b in zip(tofs, tofs[1:]))
        assert all(a <= b for a, b in zip(drops, drops[1:]))

    def test_single_shots_monotonic(self):
        results = [solve_trajectory(FiringSolution(projectile=G7_308, range_m=r))
                   for r in (200.0, 400.0, 600.0)]
        assert results[0].time_of_flight_s < results[1].time_of_flight_s \
            < results[2].time_of_flight_s
        assert results[0].drop_m <= results[1].drop_m <= results[2].drop_m

    def test_dope_row_matches_single_solve(self):
        solution = FiringSolution(projectile=G7_308, range_m=300.0,
                                  zero_distance_m=100.0)
        single = solve_trajectory(solution)
        row = build_dope_table(solution, [100.0, 300.0, 600.0])[1]
        assert row.drop_m == pytest.approx(single.drop_m, abs=1e-9)
        assert row.time_of_flight_s == pytest.approx(single.time_of_flight_s, abs=1e-9)


class TestFailures:
    """Invalid and non-convergent requests come back as markers."""

    def _assert_zeroed(self, result):
        for value in (result.time_of_flight_s, result.impact_velocity_ms,
                      result.drop_m, result.wind_drift_m, result.hold_mil,
                      result.hold_moa):
            assert value == 0.0
        assert math.isfinite(result.air_density_used)

    def test_negative_range(self):
        result = solve_trajectory(FiringSolution(projectile=G7_308, range_m=-100.0))
        assert result.status is SolveStatus.INVALID_INPUT
        assert any(issue.field == 'range_m' for issue in result.issues)
        self._assert_zeroed(result)

    def test_nan_range_reports_zero(self):
        result = solve_trajectory(FiringSolution(projectile=G7_308,
                                                 range_m=float('nan')))
        assert result.status is SolveStatus.INVALID_INPUT
        assert result.range_m == 0.0
        self._assert_zeroed(result)

    def test_invalid_input_does_not_integrate(self, monkeypatch):
        def boom(*args, **kwargs):
            raise AssertionError("integrator called")
        monkeypatch.setattr(solver_module, 'solve_drag', boom)
        monkeypatch.setattr(solver_module, 'solve_zero_angle', boom)

        spec = ProjectileSpec(muzzle_velocity_ms=0.0, drag_model=DragModelKind.G7,
                              ballistic_coefficient=0.0)
        result = solve_trajectory(FiringSolution(projectile=spec, zero_distance_m=100.0))
        fields = {issue.field for issue in result.issues}
        assert result.status is SolveStatus.INVALID_INPUT
        assert 'projectile.muzzle_velocity_ms' in fields
        assert 'projectile.ballistic_coefficient' in fields

    def test_bc_ignored_without_drag(self):
        spec = ProjectileSpec(muzzle_velocity_ms=800.0, drag_model=DragModelKind.NONE,
                              ballistic_coefficient=0.0)
        assert solve_trajectory(FiringSolution(projectile=spec)).valid

    def test_floor_is_non_convergent(self):
        slow = ProjectileSpec(muzzle_velocity_ms=100.0, ballistic_coefficient=0.2)
        result = solve_trajectory(FiringSolution(projectile=slow, range_m=2000.0))
        assert result.status is SolveStatus.NON_CONVERGENT
        self._assert_zeroed(result)
        assert result.air_density_used > 0

    def test_floor_stops_path(self):
        slow = ProjectileSpec(muzzle_velocity_ms=100.0, ballistic_coefficient=0.2)
        path = simulate_rk4(FiringSolution(projectile=slow, range_m=2000.0), 0.0)
        assert path.termination == 'floor'
        assert path.y[-1] < VERTICAL_FLOOR_M
        assert not path.reached(2000.0)

    def test_unreachable_zero(self):
        slow = ProjectileSpec(muzzle_velocity_ms=300.0, ballistic_coefficient=0.2)
        result = solve_trajectory(FiringSolution(projectile=slow, range_m=100.0,
                                                 zero_distance_m=5000.0))
        assert result.status is SolveStatus.NON_CONVERGENT
        self._assert_zeroed(result)

    def test_long_drop_above_floor_is_valid(self):
        """More than 10 m of drop is fine while the bullet stays above the floor."""
        result = solve_trajectory(FiringSolution(projectile=G7_308, range_m=1200.0))
        assert result.status is SolveStatus.OK
        assert 10.0 < result.drop_m < -VERTICAL_FLOOR_M
        assert VERTICAL_FLOOR_M == -50.0

    def test_tiny_timestep_rejected(self):
        result = solve_trajectory(FiringSolution(projectile=G7_308, dt=1e-9))
        assert result.status is SolveStatus.INVALID_INPUT
        assert [issue.field for issue in result.issues] == ['dt']
        assert validate_firing_solution(FiringSolution(projectile=G7_308, dt=MIN_DT)) == []

    def test_step_count_is_capped(self):
        assert MAX_STEPS == int(MAX_FLIGHT_TIME / MIN_DT)
