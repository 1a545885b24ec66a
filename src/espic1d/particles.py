"""
Particle Buffer for 1D PIC Species

Uses Structure-of-Arrays (SoA) layout for cache efficiency and Numba performance.
Positions are stored as (cell index, offset inside the cell) so that the
physical position is (ix + x) * dx without round-off growing with the box size.
"""

import logging

import numpy as np

from .constants import BUFFER_CHUNK
from .errors import ParticleAllocationError

logger = logging.getLogger(__name__)


class ParticleBuffer:
    """
    Growable particle container for one species.

    Attributes:
        ix: Cell index [max_particles] (int32)
        x: Offset inside the cell, in [0, 1) [max_particles]
        vx: Velocity [max_particles]
        n_particles: Current number of particles
        max_particles: Allocated capacity
    """

    def __init__(self, max_particles=0):
        """
        Initialize particle arrays.

        Args:
            max_particles: Initial capacity (rounded up to BUFFER_CHUNK)
        """
        self.n_particles = 0
        self.max_particles = 0

        self.ix = np.zeros(0, dtype=np.int32)
        self.x = np.zeros(0, dtype=np.float64)
        self.vx = np.zeros(0, dtype=np.float64)

        if max_particles > 0:
            self.reserve(max_particles)

    def reserve(self, size):
        """
        Grow capacity so that at least `size` particles fit.

        Existing particles keep their order. New arrays are allocated
        before any swap, so on failure the buffer is left untouched.

        Args:
            size: Required capacity

        Raises:
            ParticleAllocationError: If the new arrays cannot be allocated
        """
        if size <= self.max_particles:
            return

        new_max = (size // BUFFER_CHUNK + 1) * BUFFER_CHUNK

        try:
            ix = np.zeros(new_max, dtype=np.int32)
            x = np.zeros(new_max, dtype=np.float64)
            vx = np.zeros(new_max, dtype=np.float64)
        except (MemoryError, ValueError) as err:
            raise ParticleAllocationError(
                f"Unable to grow particle buffer to {new_max} particles"
            ) from err

        n = self.n_particles
        ix[:n] = self.ix[:n]
        x[:n] = self.x[:n]
        vx[:n] = self.vx[:n]

        self.ix, self.x, self.vx = ix, x, vx

        logger.debug("Particle buffer grown from %d to %d", self.max_particles, new_max)
        self.max_particles = new_max

    def add_particles(self, ix, x, vx=0.0):
        """
        Append particles, growing the buffer first if needed.

        Args:
            ix: Cell indices, shape (n,) or scalar
            x: Offsets inside the cell, shape (n,) or scalar
            vx: Velocities, shape (n,) or scalar (default 0.0)

        Returns:
            indices: Array indices of added particles

        Raises:
            ParticleAllocationError: If the buffer cannot grow
        """
        ix = np.atleast_1d(np.asarray(ix, dtype=np.int32))
        x = np.atleast_1d(np.asarray(x, dtype=np.float64))
        n_add = ix.shape[0]

        if x.shape[0] != n_add:
            raise ValueError(
                f"Cell index and offset arrays differ in length: {n_add} != {x.shape[0]}"
            )

        start_idx = self.n_particles
        end_idx = start_idx + n_add

        self.reserve(end_idx)

        self.ix[start_idx:end_idx] = ix
        self.x[start_idx:end_idx] = x
        self.vx[start_idx:end_idx] = vx

        self.n_particles = end_idx

        return np.arange(start_idx, end_idx)

    def compact(self, keep):
        """
        Remove particles, preserving the order of the survivors.

        Args:
            keep: Boolean mask of shape (n_particles,)

        Returns:
            n_removed: Number of particles removed
        """
        n = self.n_particles
        keep = np.asarray(keep, dtype=np.bool_)

        if keep.shape[0] != n:
            raise ValueError(f"Mask length {keep.shape[0]} != n_particles {n}")

        n_keep = int(np.sum(keep))
        if n_keep == n:
            return 0

        self.ix[:n_keep] = self.ix[:n][keep]
        self.x[:n_keep] = self.x[:n][keep]
        self.vx[:n_keep] = self.vx[:n][keep]

        self.n_particles = n_keep

        return n - n_keep

    def release(self):
        """Drop all particle storage."""
        self.ix = np.zeros(0, dtype=np.int32)
        self.x = np.zeros(0, dtype=np.float64)
        self.vx = np.zeros(0, dtype=np.float64)
        self.n_particles = 0
        self.max_particles = 0

    def positions(self, dx):
        """
        Physical positions of all particles.

        Args:
            dx: Cell size

        Returns:
            pos: Array of shape (n_particles,)
        """
        n = self.n_particles
        return (self.ix[:n] + self.x[:n]) * dx

    def __repr__(self):
        """String representation."""
        return f"ParticleBuffer(n_particles={self.n_particles}, max={self.max_particles})"

    def __len__(self):
        """Return number of particles."""
        return self.n_particles
