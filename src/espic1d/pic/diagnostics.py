"""
Species Diagnostics: phase-space histograms, charge and particle reports

All functions here are read-only over the species and return freshly
allocated numpy buffers; persistence and formatting belong to the caller.

Binning convention:
    Nearest-bin for every histogram. A value v falls into bin
    floor((v - lo) / (hi - lo) * n_bins); bins are half-open [lo, hi) and
    particles outside the range are dropped without error. Each particle
    contributes its charge q, so the histograms are charge phase-space
    densities (negative for negative species).

Report codes (see constants):
    CHARGE                  charge density on the grid nodes
    PHA + X1, PHA + V1      1D histograms of position / velocity
    PHASESPACE(X1, V1)      2D histogram, shape (n_bins_v1, n_bins_x1)
    PARTICLES               raw particle positions and velocities
"""

import numpy as np
from numba import njit

from ..constants import (
    CHARGE,
    PHA,
    PARTICLES,
    REPORT_FAMILY_MASK,
    X1,
    V1,
    PHASE_QUANTITIES,
)
from .mover import deposit_charge, grid_size


# ==================== HISTOGRAM KERNELS ====================


@njit
def deposit_histogram_1d(values, n_particles, q, lo, hi, n_bins, buf):
    """
    Accumulate q per particle into a 1D nearest-bin histogram.

    Args:
        values: Quantity per particle [n_particles]
        n_particles: Number of particles
        q: Contribution of each particle
        lo, hi: Histogram range
        n_bins: Number of bins
        buf: Histogram [n_bins] (modified in-place)

    Returns:
        n_dropped: Particles outside [lo, hi)
    """
    scale = n_bins / (hi - lo)
    n_dropped = 0

    for i in range(n_particles):
        v = values[i]
        if not (v >= lo and v < hi):
            n_dropped += 1
            continue

        k = int((v - lo) * scale)
        if k >= n_bins:
            n_dropped += 1
            continue

        buf[k] += q

    return n_dropped


@njit
def deposit_histogram_2d(values1, values2, n_particles, q, lo1, hi1, n1, lo2, hi2, n2, buf):
    """
    Accumulate q per particle into a 2D nearest-bin histogram.

    Args:
        values1: First quantity per particle [n_particles] (columns)
        values2: Second quantity per particle [n_particles] (rows)
        n_particles: Number of particles
        q: Contribution of each particle
        lo1, hi1, n1: Range and bins of the first quantity
        lo2, hi2, n2: Range and bins of the second quantity
        buf: Histogram [n2, n1] (modified in-place)

    Returns:
        n_dropped: Particles outside the range
    """
    scale1 = n1 / (hi1 - lo1)
    scale2 = n2 / (hi2 - lo2)
    n_dropped = 0

    for i in range(n_particles):
        a = values1[i]
        b = values2[i]
        if not (a >= lo1 and a < hi1 and b >= lo2 and b < hi2):
            n_dropped += 1
            continue

        k1 = int((a - lo1) * scale1)
        k2 = int((b - lo2) * scale2)
        if k1 >= n1 or k2 >= n2:
            n_dropped += 1
            continue

        buf[k2, k1] += q

    return n_dropped


# ==================== REPORTS ====================


def _quantity(species, quant):
    """Physical values of a phase-space quantity (copies)."""
    p = species.particles
    if quant == X1:
        return p.positions(species.dx)
    if quant == V1:
        return p.vx[:p.n_particles].copy()
    raise ValueError(f"Unknown phase-space quantity: {quant:#x}")


def _bins_and_ranges(pha_nx, pha_range, n_dims):
    pha_nx = np.atleast_1d(np.asarray(pha_nx))
    pha_range = np.atleast_2d(np.asarray(pha_range, dtype=np.float64))

    if pha_nx.shape[0] < n_dims or pha_range.shape[0] < n_dims or pha_range.shape[1] != 2:
        raise ValueError(
            f"Need {n_dims} bin count(s) and {n_dims} (min, max) range(s), "
            f"got pha_nx={pha_nx.tolist()}, pha_range={pha_range.tolist()}"
        )

    bins = []
    ranges = []
    for d in range(n_dims):
        n_bins = int(pha_nx[d])
        lo, hi = float(pha_range[d, 0]), float(pha_range[d, 1])
        if n_bins < 1:
            raise ValueError(f"Number of bins must be >= 1, got {n_bins}")
        if not (np.isfinite(lo) and np.isfinite(hi) and lo < hi):
            raise ValueError(f"Invalid histogram range ({lo}, {hi})")
        bins.append(n_bins)
        ranges.append((lo, hi))

    return bins, ranges


def decode_phasespace(rep_type):
    """
    Split a phase-space report code into its quantities.

    Args:
        rep_type: PHA + quant or PHASESPACE(quant1, quant2)

    Returns:
        (quant1, quant2): quant2 is 0 for 1D histograms

    Raises:
        ValueError: If the code is not a valid phase-space report
    """
    if rep_type & REPORT_FAMILY_MASK != PHA:
        raise ValueError(f"Not a phase-space report type: {rep_type:#x}")

    quant1 = rep_type & 0x000F
    quant2 = (rep_type & 0x00F0) >> 4

    if quant1 not in PHASE_QUANTITIES:
        raise ValueError(f"Unknown phase-space quantity: {quant1:#x}")
    if quant2 != 0 and quant2 not in PHASE_QUANTITIES:
        raise ValueError(f"Unknown phase-space quantity: {quant2:#x}")

    return quant1, quant2


def deposit_phase_space(species, rep_type, pha_nx, pha_range):
    """
    Histogram particle positions and/or velocities.

    Args:
        species: Species instance (read only)
        rep_type: PHA + X1, PHA + V1 or PHASESPACE(a, b)
        pha_nx: Number of bins per axis, e.g. [64] or [64, 32]
        pha_range: (min, max) per axis, e.g. [[0, box], [-1, 1]]

    Returns:
        buf: Histogram of shape (n_bins,) for 1D or (n_bins_2, n_bins_1) for 2D

    Raises:
        ValueError: On an invalid report code, bin count or range

    Example:
        >>> buf = deposit_phase_space(electrons, PHASESPACE(X1, V1),
        ...                           [128, 64], [[0.0, 20.0], [-0.5, 0.5]])
        >>> buf.shape
        (64, 128)
    """
    quant1, quant2 = decode_phasespace(rep_type)

    n = species.particles.n_particles
    q = species.q

    if quant2 == 0:
        (n_bins,), ((lo, hi),) = _bins_and_ranges(pha_nx, pha_range, 1)
        buf = np.zeros(n_bins, dtype=np.float64)
        deposit_histogram_1d(_quantity(species, quant1), n, q, lo, hi, n_bins, buf)
        return buf

    (n1, n2), ((lo1, hi1), (lo2, hi2)) = _bins_and_ranges(pha_nx, pha_range, 2)
    buf = np.zeros((n2, n1), dtype=np.float64)
    deposit_histogram_2d(
        _quantity(species, quant1),
        _quantity(species, quant2),
        n,
        q,
        lo1, hi1, n1,
        lo2, hi2, n2,
        buf,
    )
    return buf


def deposit_charge_report(species):
    """
    Charge density of the species on the grid nodes.

    Args:
        species: Species instance (read only)

    Returns:
        rho: Array [nx] (periodic) or [nx+1] (absorbing)
    """
    rho = np.zeros(grid_size(species), dtype=np.float64)
    deposit_charge(species, rho)
    return rho


def particle_report(species):
    """
    Copies of the physical particle data.

    Args:
        species: Species instance (read only)

    Returns:
        data: dict with keys "x1" (positions) and "v1" (velocities)
    """
    return {
        PHASE_QUANTITIES[X1]: _quantity(species, X1),
        PHASE_QUANTITIES[V1]: _quantity(species, V1),
    }


def report(species, rep_type, pha_nx=None, pha_range=None):
    """
    Build the buffer for any report code.

    Args:
        species: Species instance (read only)
        rep_type: CHARGE, PARTICLES, PHA + quant or PHASESPACE(a, b)
        pha_nx: Bins per axis (phase-space reports only)
        pha_range: Ranges per axis (phase-space reports only)

    Returns:
        buf: numpy array, or dict for PARTICLES

    Raises:
        ValueError: On an unknown report type
    """
    family = rep_type & REPORT_FAMILY_MASK

    if family == CHARGE:
        return deposit_charge_report(species)
    if family == PHA:
        if pha_nx is None or pha_range is None:
            raise ValueError("Phase-space reports need pha_nx and pha_range")
        return deposit_phase_space(species, rep_type, pha_nx, pha_range)
    if family == PARTICLES:
        return particle_report(species)

    raise ValueError(f"Unknown report type: {rep_type:#x}")
