"""
Unit tests for the particle buffer
"""

import pytest
import numpy as np
from espic1d.particles import ParticleBuffer
from espic1d.constants import BUFFER_CHUNK
from espic1d.errors import ParticleAllocationError


class TestParticleBuffer:
    """Test ParticleBuffer class."""

    def test_initialization(self):
        particles = ParticleBuffer(max_particles=1000)

        assert particles.max_particles == BUFFER_CHUNK
        assert particles.n_particles == 0
        assert particles.ix.shape == (BUFFER_CHUNK,)
        assert particles.ix.dtype == np.int32
        assert particles.x.shape == (BUFFER_CHUNK,)
        assert particles.vx.shape == (BUFFER_CHUNK,)

    def test_empty_buffer(self):
        particles = ParticleBuffer()

        assert particles.max_particles == 0
        assert len(particles) == 0

    def test_capacity_rounding(self):
        """Capacity is always a whole number of chunks above the request."""
        particles = ParticleBuffer(BUFFER_CHUNK)

        assert particles.max_particles == 2 * BUFFER_CHUNK

    def test_add_particles(self):
        particles = ParticleBuffer(10)

        indices = particles.add_particles([0, 1, 2], [0.1, 0.5, 0.9], [1.0, -1.0, 0.0])

        assert particles.n_particles == 3
        np.testing.assert_array_equal(indices, [0, 1, 2])
        np.testing.assert_array_equal(particles.ix[:3], [0, 1, 2])
        np.testing.assert_array_almost_equal(particles.x[:3], [0.1, 0.5, 0.9])
        np.testing.assert_array_almost_equal(particles.vx[:3], [1.0, -1.0, 0.0])

    def test_add_scalar_velocity(self):
        particles = ParticleBuffer()

        particles.add_particles([3, 4], [0.25, 0.75], 2.0)

        np.testing.assert_array_equal(particles.vx[:2], [2.0, 2.0])

    def test_growth_preserves_order(self):
        """Growing the buffer keeps existing particles in place."""
        particles = ParticleBuffer(4)
        n_first = particles.max_particles

        ix = np.arange(n_first, dtype=np.int32)
        x = np.linspace(0.0, 0.99, n_first)
        particles.add_particles(ix, x, x * 2)

        # Force a reallocation
        particles.add_particles(np.zeros(10, dtype=np.int32), np.full(10, 0.5))

        assert particles.max_particles > n_first
        assert particles.n_particles == n_first + 10
        np.testing.assert_array_equal(particles.ix[:n_first], ix)
        np.testing.assert_array_equal(particles.x[:n_first], x)
        np.testing.assert_array_equal(particles.vx[:n_first], x * 2)

    def test_length_mismatch(self):
        particles = ParticleBuffer()

        with pytest.raises(ValueError, match="differ in length"):
            particles.add_particles([0, 1], [0.5])

    def test_allocation_failure_leaves_buffer_intact(self):
        particles = ParticleBuffer(10)
        particles.add_particles([1, 2], [0.3, 0.6], [5.0, 6.0])
        capacity = particles.max_particles

        with pytest.raises(ParticleAllocationError):
            particles.reserve(2**62)

        assert particles.max_particles == capacity
        assert particles.n_particles == 2
        np.testing.assert_array_equal(particles.ix[:2], [1, 2])
        np.testing.assert_array_equal(particles.vx[:2], [5.0, 6.0])

    def test_compact_preserves_order(self):
        particles = ParticleBuffer()
        particles.add_particles(np.arange(6), np.full(6, 0.5), np.arange(6.0))

        keep = np.array([True, False, True, True, False, True])
        n_removed = particles.compact(keep)

        assert n_removed == 2
        assert particles.n_particles == 4
        np.testing.assert_array_equal(particles.ix[:4], [0, 2, 3, 5])
        np.testing.assert_array_equal(particles.vx[:4], [0.0, 2.0, 3.0, 5.0])

    def test_compact_nothing(self):
        particles = ParticleBuffer()
        particles.add_particles([0, 1], [0.5, 0.5])

        assert particles.compact(np.ones(2, dtype=bool)) == 0
        assert particles.n_particles == 2

    def test_compact_bad_mask(self):
        particles = ParticleBuffer()
        particles.add_particles([0, 1], [0.5, 0.5])

        with pytest.raises(ValueError):
            particles.compact(np.ones(3, dtype=bool))

    def test_release(self):
        particles = ParticleBuffer(100)
        particles.add_particles([0], [0.5])

        particles.release()

        assert particles.n_particles == 0
        assert particles.max_particles == 0
        assert particles.x.size == 0

    def test_positions(self):
        particles = ParticleBuffer()
        particles.add_particles([0, 3], [0.5, 0.25])

        np.testing.assert_array_almost_equal(particles.positions(0.5), [0.25, 1.625])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
