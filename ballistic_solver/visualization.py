"""
Visualization Engine
====================
Plots for trajectory analysis:
  1. Trajectory (height above line of sight vs range)
  2. Cd vs Mach curves (G1 / G7)
  3. Air density vs temperature
  4. DOPE table (hold and drift vs range)
  5. Euler vs RK4 accuracy comparison
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import List, Sequence
import os

from .integrator import TrajectoryPath, TrajectoryResult
from .drag_model import ALL_MODELS, get_drag_table
from .atmosphere import (
    STANDARD_PRESSURE_HPA, density_profile,
)


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
    'font_family': 'monospace',
}

def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _legend(ax, **kwargs):
    ax.legend(facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'], **kwargs)


def _save(fig, save_path):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(path: TrajectoryPath, save_path: str = None,
                    title: str = None) -> plt.Figure:
    """Height above the line of sight (cm) vs downrange (m)."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    ax.plot(path.x, path.y * 100, color=STYLE['accent_colors'][0],
            linewidth=2.5, label=f'{path.method.upper()} (dt={path.dt}s)')
    ax.axhline(y=0, color='#888', linewidth=1, linestyle=':',
               label='Line of sight')

    ax.plot(0, path.y[0] * 100, 'o', color='#00e676', markersize=10,
            label='Muzzle', zorder=5)
    ax.plot(path.x[-1], path.y[-1] * 100, 'x',
            color='#ff5252', markersize=12, markeredgewidth=3,
            label='Target', zorder=5)

    idx_max = np.argmax(path.y)
    ax.plot(path.x[idx_max], path.y[idx_max] * 100, '^',
            color='#ffeb3b', markersize=10, label='Apex', zorder=5)

    ax.set_xlabel('Downrange (m)', fontsize=12)
    ax.set_ylabel('Height above line of sight (cm)', fontsize=12)
    ax.set_title(title or f'Trajectory — v₀={path.speed[0]:.0f} m/s, '
                          f'ToF={path.flight_time:.3f} s',
                 fontsize=13, fontweight='bold')
    _legend(ax, loc='lower left', fontsize=10)
    ax.set_xlim(left=0)

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Cd vs Mach Curves
# ══════════════════════════════════════════════════════════════════════════

def plot_cd_vs_mach(save_path: str = None) -> plt.Figure:
    """Plot Cd vs Mach for the standard drag functions."""
    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    mach_range = np.linspace(0, 5.0, 500)
    for kind, data in ALL_MODELS.items():
        table = get_drag_table(kind)
        ax.plot(mach_range, table.cd_array(mach_range), color=data['color'],
                linestyle=data['linestyle'], linewidth=2.5,
                label=data['name'])
        ax.plot(table.mach_values, table.cd_values, '.', color=data['color'],
                markersize=4, alpha=0.6)

    # Annotate transonic region
    ax.axvspan(0.8, 1.2, alpha=0.08, color='#ff5252')
    ax.text(1.0, 0.05, 'Transonic\nRegion', ha='center',
            color='#ff5252', fontsize=10, alpha=0.7)

    ax.set_xlabel('Mach Number', fontsize=12)
    ax.set_ylabel('Drag Coefficient (Cd)', fontsize=12)
    ax.set_title('Drag Coefficient vs Mach Number — Standard Projectiles',
                 fontsize=14, fontweight='bold')
    _legend(ax, fontsize=11)
    ax.set_xlim(0, 5.0)
    ax.set_ylim(0, 0.8)

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Air Density
# ══════════════════════════════════════════════════════════════════════════

def plot_density_vs_temperature(save_path: str = None,
                                pressure_hpa: float = STANDARD_PRESSURE_HPA,
                                humidities: Sequence[float] = (0.0, 50.0, 100.0)
                                ) -> plt.Figure:
    """Moist-air density from -40 °C to 50 °C for a few humidities."""
    temperatures = np.linspace(-40, 50, 181)

    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    for rh, color in zip(humidities, STYLE['accent_colors']):
        rho = density_profile(temperatures, pressure_hpa, rh)
        ax.plot(temperatures, rho, color=color, linewidth=2,
                label=f'RH {rh:.0f}%')

    ax.set_xlabel('Temperature (°C)', fontsize=12)
    ax.set_ylabel('Density (kg/m³)', fontsize=12)
    ax.set_title(f'Air Density at {pressure_hpa:.2f} hPa',
                 fontsize=14, fontweight='bold')
    _legend(ax, fontsize=10)

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. DOPE Table
# ══════════════════════════════════════════════════════════════════════════

def plot_dope_table(results: List[TrajectoryResult],
                    save_path: str = None) -> plt.Figure:
    """Elevation hold, wind hold and remaining velocity against range."""
    rows = [r for r in results if r.valid]
    ranges = [r.range_m for r in rows]

    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(ranges, [r.hold_mil for r in rows], 'o-',
            color=STYLE['accent_colors'][0], linewidth=2, markersize=6)
    ax.axhline(y=0, color='#888', linewidth=0.5)
    ax.set_xlabel('Range (m)')
    ax.set_ylabel('Elevation hold (mil)')
    ax.set_title('Elevation', fontweight='bold')

    ax = axes[1]
    ax.plot(ranges, [r.windage_mil for r in rows], 's-',
            color=STYLE['accent_colors'][1], linewidth=2, markersize=6)
    ax.set_xlabel('Range (m)')
    ax.set_ylabel('Wind dial (mil, + = right)')
    ax.set_title('Windage', fontweight='bold')

    ax = axes[2]
    ax.plot(ranges, [r.impact_velocity_ms for r in rows], '^-',
            color=STYLE['accent_colors'][2], linewidth=2, markersize=6)
    ax.set_xlabel('Range (m)')
    ax.set_ylabel('Velocity (m/s)')
    ax.set_title('Remaining Velocity', fontweight='bold')

    model = rows[0].model_used.value if rows else '-'
    fig.suptitle(f'DOPE — {model}', fontsize=14, fontweight='bold',
                 color=STYLE['text_color'], y=1.02)
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Euler vs RK4 Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_euler_vs_rk4(euler_path: TrajectoryPath,
                      rk4_path: TrajectoryPath,
                      save_path: str = None) -> plt.Figure:
    """Compare Euler and RK4 trajectories to show accuracy difference."""
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    _apply_dark_style(fig, axes)

    # Trajectory
    ax = axes[0]
    ax.plot(euler_path.x, euler_path.y * 100,
            color='#ff6b35', linewidth=2, linestyle='--', label=f'Euler (dt={euler_path.dt}s)')
    ax.plot(rk4_path.x, rk4_path.y * 100,
            color='#00d4ff', linewidth=2, label=f'RK4 (dt={rk4_path.dt}s)')
    ax.set_xlabel('Range (m)')
    ax.set_ylabel('Height (cm)')
    ax.set_title('Trajectory Comparison', fontweight='bold')
    _legend(ax, fontsize=10)

    # Speed
    ax = axes[1]
    ax.plot(euler_path.time, euler_path.speed,
            color='#ff6b35', linewidth=2, linestyle='--', label='Euler')
    ax.plot(rk4_path.time, rk4_path.speed,
            color='#00d4ff', linewidth=2, label='RK4')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Speed (m/s)')
    ax.set_title('Speed vs Time', fontweight='bold')
    _legend(ax, fontsize=10)

    # Metrics comparison
    ax = axes[2]
    ax.axis('off')
    ax.set_facecolor('#111111')

    drop_e, drop_r = -euler_path.y[-1] * 100, -rk4_path.y[-1] * 100
    text_lines = [
        f"{'Metric':<18} {'Euler':>12} {'RK4':>12} {'Δ':>10}",
        f"{'─'*52}",
        f"{'Range (m)':<18} {euler_path.range_total:>12.1f} "
        f"{rk4_path.range_total:>12.1f} "
        f"{euler_path.range_total - rk4_path.range_total:>+10.2f}",
        f"{'Drop (cm)':<18} {drop_e:>12.2f} {drop_r:>12.2f} "
        f"{drop_e - drop_r:>+10.3f}",
        f"{'Flight Time (s)':<18} {euler_path.flight_time:>12.4f} "
        f"{rk4_path.flight_time:>12.4f} "
        f"{euler_path.flight_time - rk4_path.flight_time:>+10.4f}",
        f"{'Impact Vel (m/s)':<18} {euler_path.impact_velocity:>12.1f} "
        f"{rk4_path.impact_velocity:>12.1f} "
        f"{euler_path.impact_velocity - rk4_path.impact_velocity:>+10.2f}",
    ]

    ax.text(0.05, 0.85, '\n'.join(text_lines), transform=ax.transAxes,
            fontsize=10, fontfamily='monospace', color=STYLE['text_color'],
            verticalalignment='top')
    ax.set_title('Numerical Comparison', fontweight='bold',
                 color=STYLE['text_color'])

    fig.suptitle('Euler vs Runge-Kutta 4th Order — Accuracy Comparison',
                 fontsize=14, fontweight='bold', color=STYLE['text_color'], y=1.02)
    _save(fig, save_path)
    return fig
