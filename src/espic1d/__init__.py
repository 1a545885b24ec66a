"""
espic1d: Particle Kinetics Core for 1D Electrostatic PIC

Macro-particle species with density-profile injection, leap-frog push,
linear charge deposition and phase-space diagnostics.
"""

__version__ = "0.1.0"

# Import key classes for convenient access
from .constants import *
from .errors import DensityConfigError, ParticleAllocationError
from .density import DensityProfile, density_at
from .particles import ParticleBuffer
from .species import Species, inject_particles, set_velocities

__all__ = [
    "DensityProfile",
    "density_at",
    "ParticleBuffer",
    "Species",
    "inject_particles",
    "set_velocities",
    "DensityConfigError",
    "ParticleAllocationError",
]
