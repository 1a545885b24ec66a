"""
PIC Demonstration: Two-Stream Instability

Drives two counter-streaming electron species through the espic1d kernel:
- Linear charge deposition (particles -> grid)
- Spectral Gauss-law field solve (grid charge -> E)
- Linear field interpolation + leap-frog push (grid -> particles)
- Phase-space diagnostics

Physics:
    Two cold beams at +/- v0 over a fixed neutralizing ion background
    -> Electrostatic perturbations grow exponentially
    -> Beams trap into phase-space vortices
    -> Field energy saturates

Units: normalized (omega_pe = 1 for the total electron density).
"""

import numpy as np
import matplotlib.pyplot as plt

from espic1d import Species, DensityProfile, PHASESPACE, X1, V1
from espic1d.pic import advance, deposit_charge, deposit_phase_space, advance_time

# ==================== SIMULATION PARAMETERS ====================

# Domain
box = 4 * np.pi  # Two fastest-growing wavelengths for v0 = 0.2 [c/omega_pe]
nx = 128

# Beams
v0 = 0.2
vth = 0.001
ppc = 250

# Time integration
dt = 0.1
n_steps = 500
snapshot_steps = (0, 200, 499)

# ==================== FIELD SOLVER ====================


def solve_field(rho, dx):
    """
    Periodic Gauss law dE/dx = rho on nodes (spectral).

    Args:
        rho: Net charge density at nodes [nx]
        dx: Cell size

    Returns:
        E: Electric field at nodes [nx]
    """
    n = rho.shape[0]
    rho_k = np.fft.rfft(rho)
    k = 2 * np.pi * np.fft.rfftfreq(n, d=dx)

    E_k = np.zeros_like(rho_k)
    E_k[1:] = rho_k[1:] / (1j * k[1:])

    return np.fft.irfft(E_k, n)


# ==================== SETUP ====================

print("=" * 60)
print("PIC Demo: Two-Stream Instability")
print("=" * 60)
print()

# Each beam carries half of the electron density
beam = DensityProfile(n=0.5)
right = Species("right", m_q=-1.0, ppc=ppc, vfl=v0, vth=vth,
                nx=nx, box=box, dt=dt, density=beam, seed=1)
left = Species("left", m_q=-1.0, ppc=ppc, vfl=-v0, vth=vth,
               nx=nx, box=box, dt=dt, density=beam, seed=2)
species = [right, left]

print("Setup:")
print(f"  Domain: {box:.3f} ({nx} cells, dx = {right.dx:.4f})")
print(f"  Beams: +/-{v0}, vth = {vth}, {right.n_particles} particles each")
print(f"  Timestep: {dt}, {n_steps} steps")
print()

charge = np.zeros(nx)
for s in species:
    deposit_charge(s, charge)
E = solve_field(charge + 1.0, right.dx)

# ==================== MAIN LOOP ====================

field_energy = np.zeros(n_steps)
kinetic_energy = np.zeros(n_steps)
snapshots = {}

for step in range(n_steps):
    charge[:] = 0.0
    for s in species:
        advance(s, E, charge)

    E = solve_field(charge + 1.0, right.dx)

    field_energy[step] = 0.5 * np.sum(E**2) * right.dx
    kinetic_energy[step] = sum(s.energy for s in species) * right.dx

    if step in snapshot_steps:
        snapshots[step] = sum(
            deposit_phase_space(s, PHASESPACE(X1, V1), [128, 96], [[0.0, box], [-0.5, 0.5]])
            for s in species
        )

    if step % 100 == 0:
        print(f"  step {step:4d}: field energy = {field_energy[step]:.3e}")

print()
print(f"Time in particle advance: {advance_time():.2f} s")

# ==================== PLOTS ====================

fig, axes = plt.subplots(1, len(snapshot_steps) + 1, figsize=(16, 4))

for ax, step in zip(axes, snapshot_steps):
    ax.imshow(
        np.abs(snapshots[step]),
        origin="lower",
        aspect="auto",
        extent=[0.0, box, -0.5, 0.5],
        cmap="viridis",
    )
    ax.set_title(f"t = {(step + 1) * dt:.1f}")
    ax.set_xlabel("x")
    ax.set_ylabel("v")

t = (np.arange(n_steps) + 1) * dt
axes[-1].semilogy(t, field_energy, label="field")
axes[-1].semilogy(t, kinetic_energy, label="kinetic")
axes[-1].set_xlabel("t")
axes[-1].legend()

plt.tight_layout()
plt.savefig("two_stream.png", dpi=150)
print("Saved two_stream.png")
