"""
espic1d Test Suite

Tests organized by:
- test_density.py: Density profile evaluation and validation
- test_particles.py: Particle buffer
- test_species.py: Species construction and injection
- test_pic_mover.py: Leap-frog push, boundaries, charge deposition
- test_diagnostics.py: Phase-space, charge and particle reports
- test_config.py: Pydantic configuration models
"""
