"""
Names and Codes Shared Across the Species Kernel

All quantities are in normalized simulation units.
"""

# ==================== BOUNDARY CONDITIONS ====================

PERIODIC = "periodic"
ABSORBING = "absorbing"

BOUNDARY_CONDITIONS = (PERIODIC, ABSORBING)

# ==================== DENSITY PROFILE KINDS ====================

UNIFORM = "uniform"
STEP = "step"
SLAB = "slab"
RAMP = "ramp"
CUSTOM = "custom"

DENSITY_KINDS = (UNIFORM, STEP, SLAB, RAMP, CUSTOM)

# ==================== PARTICLE BUFFER ====================

# Buffer capacity is always grown to a multiple of this
BUFFER_CHUNK = 1024

# ==================== REPORT CODES ====================

# Report families (upper nibbles)
CHARGE = 0x1000
PHA = 0x2000
PARTICLES = 0x3000

REPORT_FAMILY_MASK = 0xF000

# Phase-space quantities
X1 = 0x0001
V1 = 0x0004

PHASE_QUANTITIES = {
    X1: "x1",
    V1: "v1",
}


def PHASESPACE(a, b):
    """
    Build a phase-space report code from two quantities.

    Args:
        a: First (fastest varying) quantity, X1 or V1
        b: Second quantity, X1 or V1

    Returns:
        rep_type: Integer report code

    Example:
        >>> PHASESPACE(X1, V1) == 0x2041
        True
    """
    return a + b * 16 + PHA
