"""
Plasma Species: particle buffer plus physical parameters

A species binds a ParticleBuffer to its charge, mass-to-charge ratio,
drift and thermal velocities, grid geometry and timestep, and owns the
injection policy driven by its DensityProfile.

Injection uses equal-weight particles: every particle carries the same
charge q = sign(m_q) * n / ppc, and non-uniform profiles change the
number of particles per cell. Fractional counts are carried from cell to
cell through the profile counters so the injected total follows the
density integral.
"""

import logging

import numpy as np
from scipy.special import ndtri

from .constants import PERIODIC, BOUNDARY_CONDITIONS
from .density import DensityProfile
from .particles import ParticleBuffer

logger = logging.getLogger(__name__)


class Species:
    """
    One plasma species on a uniform 1D grid.

    Attributes:
        name: Species name
        particles: ParticleBuffer owned by the species
        m_q: Mass-to-charge ratio
        q: Charge of one macro-particle
        ppc: Target number of particles per cell
        vfl: Drift (fluid) velocity
        vth: Thermal velocity
        nx: Number of cells
        dx: Cell size
        box: Domain length (nx * dx)
        dt: Timestep
        iter: Iteration counter
        energy: Kinetic energy from the last advance
        density: DensityProfile used for injection
        boundary: "periodic" or "absorbing"
        quiet_start: Use quiet-start thermal loading
        n_absorbed: Particles absorbed during the last advance
        total_absorbed: Particles absorbed since creation
    """

    def __init__(
        self,
        name,
        m_q,
        ppc,
        vfl,
        vth,
        nx,
        box,
        dt,
        density=None,
        boundary=PERIODIC,
        quiet_start=True,
        seed=None,
    ):
        """
        Create a species and load its initial particles.

        Args:
            name: Species name
            m_q: Mass-to-charge ratio (sign sets the charge sign)
            ppc: Particles per cell for the reference density
            vfl: Drift velocity
            vth: Thermal velocity spread
            nx: Number of cells
            box: Domain length
            dt: Timestep
            density: DensityProfile (default: uniform, n = 1). The species
                keeps its own copy, so counters never leak between species.
            boundary: "periodic" (default) or "absorbing"
            quiet_start: Quiet-start thermal loading (default: True)
            seed: Seed for the velocity generator

        Raises:
            ValueError: On invalid parameters
            DensityConfigError: On an invalid density profile
            ParticleAllocationError: If the initial buffer cannot be allocated
        """
        if m_q == 0:
            raise ValueError("Mass-to-charge ratio must be non-zero")
        if int(ppc) < 1:
            raise ValueError(f"Particles per cell must be >= 1, got {ppc}")
        if int(nx) < 1:
            raise ValueError(f"Number of cells must be >= 1, got {nx}")
        if not box > 0:
            raise ValueError(f"Box length must be positive, got {box}")
        if not dt > 0:
            raise ValueError(f"Timestep must be positive, got {dt}")
        if vth < 0:
            raise ValueError(f"Thermal velocity must be >= 0, got {vth}")
        if boundary not in BOUNDARY_CONDITIONS:
            raise ValueError(f"Unknown boundary condition: {boundary}")

        if density is None:
            density = DensityProfile()
        else:
            density.validate()
            density = density.copy()

        self.name = str(name)
        self.m_q = float(m_q)
        self.ppc = int(ppc)
        self.vfl = float(vfl)
        self.vth = float(vth)

        self.nx = int(nx)
        self.box = float(box)
        self.dx = self.box / self.nx

        self.dt = float(dt)
        self.iter = 0
        self.energy = 0.0

        self.boundary = boundary
        self.quiet_start = quiet_start
        self.rng = np.random.default_rng(seed)

        self.n_absorbed = 0
        self.total_absorbed = 0

        # All particles carry the same charge
        self.q = np.copysign(1.0, self.m_q) * density.n / self.ppc
        self.density = density

        self.particles = ParticleBuffer(self.nx * self.ppc)

        inject_particles(self, (0, self.nx))

        logger.info(
            "Created species '%s': %d particles, q = %g, dx = %g",
            self.name, self.particles.n_particles, self.q, self.dx,
        )

    @property
    def n_particles(self):
        return self.particles.n_particles

    @property
    def mass(self):
        """Macro-particle mass (q * m_q, never negative)."""
        return self.q * self.m_q

    def delete(self):
        """Release the particle buffer."""
        self.particles.release()
        logger.debug("Species '%s' released its particle buffer", self.name)

    def __repr__(self):
        """String representation."""
        return (
            f"Species(name={self.name!r}, n_particles={self.n_particles}, "
            f"nx={self.nx}, dx={self.dx:.4g}, iter={self.iter})"
        )


def inject_particles(species, cell_range):
    """
    Inject particles following the species density profile.

    Each cell in [cell_range[0], cell_range[1]) receives
    round(cumulative target) - already injected particles, evenly spaced
    inside the cell. The buffer is grown before any particle is written.

    Args:
        species: Species instance (modified in-place)
        cell_range: (first cell, one past last cell)

    Returns:
        n_injected: Number of particles added
    """
    i0, i1 = int(cell_range[0]), int(cell_range[1])
    if i0 < 0 or i1 > species.nx or i0 > i1:
        raise ValueError(f"Invalid injection range {cell_range} for nx = {species.nx}")

    profile = species.density
    dx = species.dx
    ppc = species.ppc

    # Count per cell first so the buffer grows once, before writing
    counts = np.zeros(i1 - i0, dtype=np.int64)
    total = profile.total_np_inj
    q_inj = profile.custom_q_inj
    for k, i in enumerate(range(i0, i1)):
        q_inj += profile.shape_at((i + 0.5) * dx) * ppc
        target = int(np.floor(q_inj + 0.5))
        counts[k] = max(target - total, 0)
        total += counts[k]

    n_inject = int(np.sum(counts))

    cells = np.repeat(np.arange(i0, i1, dtype=np.int32), counts)
    offsets = np.empty(n_inject, dtype=np.float64)
    pos = 0
    for c in counts:
        if c > 0:
            offsets[pos:pos + c] = (np.arange(c) + 0.5) / c
            pos += c

    start = species.particles.n_particles
    species.particles.add_particles(cells, offsets)

    # Counters only advance once the particles are in the buffer
    profile.custom_q_inj = q_inj
    profile.total_np_inj = total

    set_velocities(species, start, start + n_inject)

    logger.debug(
        "Injected %d particles into cells [%d, %d) of species '%s'",
        n_inject, i0, i1, species.name,
    )

    return n_inject


def set_velocities(species, start, end):
    """
    Load drift + thermal velocities for particles [start, end).

    The thermal part is symmetric and zero-mean by construction: either a
    quiet start (inverse normal CDF of evenly spaced quantiles, randomly
    permuted) or normal samples with their mean removed.

    Args:
        species: Species instance (modified in-place)
        start: First particle index
        end: One past the last particle index
    """
    n = end - start
    if n <= 0:
        return

    if species.vth == 0.0:
        species.particles.vx[start:end] = species.vfl
        return

    if species.quiet_start:
        g = ndtri((np.arange(n) + 0.5) / n)
        g = species.rng.permutation(g)
    else:
        g = species.rng.standard_normal(n)
        if n > 1:
            g -= np.mean(g)

    species.particles.vx[start:end] = species.vfl + species.vth * g
