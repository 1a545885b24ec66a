"""
Exceptions raised by the species kernel.
"""


class DensityConfigError(ValueError):
    """Malformed density profile parameters."""


class ParticleAllocationError(MemoryError):
    """Particle buffer could not be grown to the requested capacity."""
