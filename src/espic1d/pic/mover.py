"""
PIC Particle Mover with Leap-Frog Push and Linear Weighting

Implements:
- Linear (area / CIC) field interpolation (grid -> particles)
- Leap-frog particle push on (cell index, offset) positions
- Boundary conditions (periodic, absorbing)
- Linear charge deposition (particles -> grid)

Grid layout:
    Field and charge live on grid nodes. Node i sits at x = i * dx, so a
    particle in cell ix with offset x is bracketed by nodes ix and ix + 1
    with weights (1 - x, x).

    periodic:  nx nodes, node nx is node 0
    absorbing: nx + 1 nodes

Time centering:
    Velocities are stored at half steps. The velocities loaded at
    construction are taken as v^{-1/2}; no bootstrap half-push is done.

        v^{n+1/2} = v^{n-1/2} + E(x^n) * dt / m_q
        x^{n+1}   = x^n + v^{n+1/2} * dt

Reference:
    Birdsall & Langdon (2004), "Plasma Physics via Computer Simulation"
    Chapter 4: The Electrostatic Program
"""

import logging
import math
import time

import numpy as np
import numba

from ..constants import PERIODIC

logger = logging.getLogger(__name__)

# Wall time spent in advance(), all species
_advance_time = 0.0


# ==================== FIELD INTERPOLATION ====================


@numba.njit
def interpolate_field_linear_1d(ix, x, E_grid, nx, periodic, E_particles_out, n_particles):
    """
    Interpolate the grid field to particle positions with linear weights.

    Uses the same weights as deposit_charge_linear_1d so that the
    self-force of a particle vanishes (momentum conservation).

    Args:
        ix: Particle cell indices [n_particles]
        x: Particle offsets inside the cell [n_particles]
        E_grid: Field at grid nodes [nx] (periodic) or [nx+1]
        nx: Number of cells
        periodic: True for periodic grids
        E_particles_out: Output field at particles [n_particles] (modified in-place)
        n_particles: Number of particles
    """
    for i in range(n_particles):
        i0 = ix[i]
        i1 = i0 + 1
        if periodic and i1 >= nx:
            i1 -= nx

        w = x[i]
        E_particles_out[i] = (1.0 - w) * E_grid[i0] + w * E_grid[i1]


# ==================== LEAP-FROG PUSHER ====================


@numba.njit
def push_leapfrog_1d(ix, x, vx, E_particles, tem, dtdx, n_particles):
    """
    Advance velocities and positions by one timestep.

    Offsets are renormalized to [0, 1) with the carry moved into the cell
    index. Cell indices are not wrapped here (see the boundary functions).

    Args:
        ix: Particle cell indices [n_particles] (modified in-place)
        x: Particle offsets [n_particles] (modified in-place)
        vx: Particle velocities [n_particles] (modified in-place)
        E_particles: Field at particles [n_particles]
        tem: dt / m_q
        dtdx: dt / dx
        n_particles: Number of particles

    Returns:
        v2_sum: Sum of v^{n+1/2} squared over all particles
    """
    v2_sum = 0.0

    for i in range(n_particles):
        v = vx[i] + tem * E_particles[i]
        vx[i] = v
        v2_sum += v * v

        x_new = x[i] + v * dtdx
        di = math.floor(x_new)
        x_new -= di

        # x_new - floor(x_new) can round up to 1.0 for tiny negative x_new
        if x_new >= 1.0:
            x_new -= 1.0
            di += 1

        x[i] = x_new
        ix[i] += di

    return v2_sum


# ==================== BOUNDARY CONDITIONS ====================


@numba.njit
def apply_periodic_bc_1d(ix, nx, n_particles):
    """
    Wrap cell indices into [0, nx).

    Args:
        ix: Particle cell indices [n_particles] (modified in-place)
        nx: Number of cells
        n_particles: Number of particles
    """
    for i in range(n_particles):
        while ix[i] < 0:
            ix[i] += nx
        while ix[i] >= nx:
            ix[i] -= nx


@numba.njit
def apply_absorbing_bc_1d(ix, nx, keep, n_particles):
    """
    Flag particles that left [0, nx).

    Args:
        ix: Particle cell indices [n_particles]
        nx: Number of cells
        keep: Output flags [n_particles], False for absorbed particles
        n_particles: Number of particles

    Returns:
        n_absorbed: Number of particles absorbed
    """
    n_absorbed = 0

    for i in range(n_particles):
        if ix[i] < 0 or ix[i] >= nx:
            keep[i] = False
            n_absorbed += 1
        else:
            keep[i] = True

    return n_absorbed


# ==================== CHARGE DEPOSITION ====================


@numba.njit
def deposit_charge_linear_1d(ix, x, q, nx, periodic, rho_out, n_particles):
    """
    Scatter particle charge onto the two bracketing grid nodes.

    Accumulates into rho_out; the caller decides when to zero it.
    The deposited total is exactly q * n_particles up to round-off.

    Args:
        ix: Particle cell indices [n_particles]
        x: Particle offsets [n_particles]
        q: Charge of one particle
        nx: Number of cells
        periodic: True for periodic grids
        rho_out: Charge at grid nodes [nx] or [nx+1] (modified in-place)
        n_particles: Number of particles
    """
    for i in range(n_particles):
        i0 = ix[i]
        i1 = i0 + 1
        if periodic and i1 >= nx:
            i1 -= nx

        w = x[i]
        rho_out[i0] += q * (1.0 - w)
        rho_out[i1] += q * w


# ==================== PRECONDITIONS ====================


def grid_size(species):
    """Number of grid nodes expected for the species boundary condition."""
    return species.nx if species.boundary == PERIODIC else species.nx + 1


def _check_grid_buffer(species, buf, name):
    n_nodes = grid_size(species)
    if np.ndim(buf) != 1 or len(buf) != n_nodes:
        raise ValueError(
            f"{name} buffer has shape {np.shape(buf)}, expected ({n_nodes},) "
            f"for {species.boundary} species '{species.name}'"
        )


def _check_charge_buffer(species, charge):
    _check_grid_buffer(species, charge, "Charge")
    if not isinstance(charge, np.ndarray) or charge.dtype != np.float64:
        raise ValueError("Charge buffer must be a float64 numpy array")
    if not charge.flags.writeable:
        raise ValueError("Charge buffer must be writeable")


# ==================== MAIN INTEGRATION FUNCTIONS ====================


def deposit_charge(species, charge):
    """
    Deposit the species charge onto a grid buffer (linear weighting).

    The buffer is accumulated into, not zeroed: in a multi-species run
    the caller zeroes it once per step and every species adds to it.

    Args:
        species: Species instance (read only)
        charge: float64 array [nx] (periodic) or [nx+1] (absorbing)
            (modified in-place)

    Raises:
        ValueError: If the buffer does not match the species grid
    """
    _check_charge_buffer(species, charge)

    p = species.particles
    deposit_charge_linear_1d(
        p.ix,
        p.x,
        species.q,
        species.nx,
        species.boundary == PERIODIC,
        charge,
        p.n_particles,
    )


def advance(species, field, charge, zero_charge=False):
    """
    Advance a species by one timestep and deposit its new charge.

    Sequence:
        1. Interpolate E to particle positions (linear)
        2. Push particles (leap-frog), renormalizing offsets
        3. Apply boundary conditions (wrap or absorb)
        4. Deposit charge at the new positions
        5. Increment the iteration counter

    Args:
        species: Species instance (modified in-place)
        field: Field at grid nodes, [nx] (periodic) or [nx+1] (absorbing)
        charge: Charge accumulator, same size as field (modified in-place)
        zero_charge: Zero the charge buffer before depositing; only set
            this when the species is the sole contributor (default: False)

    Returns:
        diagnostics: dict with keys:
            - energy: Kinetic energy after the push
            - n_absorbed: Particles removed at the walls this step

    Raises:
        ValueError: If field or charge do not match the species grid
    """
    global _advance_time

    t0 = time.perf_counter()

    _check_grid_buffer(species, field, "Field")
    _check_charge_buffer(species, charge)

    E_grid = np.ascontiguousarray(field, dtype=np.float64)

    p = species.particles
    n_particles = p.n_particles
    periodic = species.boundary == PERIODIC

    # 1. Interpolate E field to particles
    E_particles = np.zeros(n_particles, dtype=np.float64)
    interpolate_field_linear_1d(
        p.ix, p.x, E_grid, species.nx, periodic, E_particles, n_particles
    )

    # 2. Push particles
    v2_sum = push_leapfrog_1d(
        p.ix,
        p.x,
        p.vx,
        E_particles,
        species.dt / species.m_q,
        species.dt / species.dx,
        n_particles,
    )
    species.energy = 0.5 * species.mass * v2_sum

    # 3. Apply boundary conditions
    if periodic:
        apply_periodic_bc_1d(p.ix, species.nx, n_particles)
        n_absorbed = 0
    else:
        keep = np.ones(n_particles, dtype=np.bool_)
        n_absorbed = apply_absorbing_bc_1d(p.ix, species.nx, keep, n_particles)
        if n_absorbed > 0:
            p.compact(keep)
            logger.debug(
                "Species '%s' iter %d: %d particles absorbed",
                species.name, species.iter, n_absorbed,
            )

    species.n_absorbed = n_absorbed
    species.total_absorbed += n_absorbed

    # 4. Deposit charge
    if zero_charge:
        charge[:] = 0.0
    deposit_charge(species, charge)

    # 5. Next iteration
    species.iter += 1

    _advance_time += time.perf_counter() - t0

    return {"energy": species.energy, "n_absorbed": n_absorbed}


def advance_time():
    """
    Total wall time spent in advance() so far.

    Returns:
        seconds: Cumulative time over all species [s]
    """
    return _advance_time
