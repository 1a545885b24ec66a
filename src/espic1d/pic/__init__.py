"""
Particle-in-Cell (PIC) Module

Per-species kernels of the 1D electrostatic PIC cycle.

Components:
- mover: leap-frog pusher, linear field interpolation, charge deposition
- diagnostics: phase-space histograms, charge and particle reports
"""

from .mover import (
    advance,
    advance_time,
    deposit_charge,
    grid_size,
    interpolate_field_linear_1d,
    push_leapfrog_1d,
    deposit_charge_linear_1d,
    apply_periodic_bc_1d,
    apply_absorbing_bc_1d,
)
from .diagnostics import (
    deposit_phase_space,
    deposit_charge_report,
    particle_report,
    report,
)

__all__ = [
    # Mover
    "advance",
    "advance_time",
    "deposit_charge",
    "grid_size",
    "interpolate_field_linear_1d",
    "push_leapfrog_1d",
    "deposit_charge_linear_1d",
    "apply_periodic_bc_1d",
    "apply_absorbing_bc_1d",
    # Diagnostics
    "deposit_phase_space",
    "deposit_charge_report",
    "particle_report",
    "report",
]
