"""
Density Profiles for Particle Injection

A profile describes the target number density n(x) along the box:

- uniform: n everywhere
- step:    n for x >= start
- slab:    n for start <= x < end
- ramp:    linear from ramp[0]*n at start to ramp[1]*n at end, 0 outside
- custom:  n * custom(x) (or n * custom(x, custom_data))

The profile also carries the injection counters used by the species to
place an integer number of particles per cell without systematic bias.
"""

import math

from .constants import UNIFORM, STEP, SLAB, RAMP, CUSTOM, DENSITY_KINDS
from .errors import DensityConfigError


class DensityProfile:
    """
    Target density profile along x.

    Attributes:
        n: Reference density (multiplies the profile shape)
        type: Profile kind, one of DENSITY_KINDS
        start: Plasma start position [simulation units]
        end: Plasma end position [simulation units]
        ramp: (initial, final) ramp density, relative to n
        custom: Callable returning the relative density at x. Called as
            custom(x) when custom_data is None, else custom(x, custom_data)
        custom_data: Optional context passed as second argument to custom
        total_np_inj: Number of particles injected so far
        custom_q_inj: Cumulative target particle count (density integral * ppc)
    """

    def __init__(
        self,
        type=UNIFORM,
        n=1.0,
        start=0.0,
        end=0.0,
        ramp=(0.0, 0.0),
        custom=None,
        custom_data=None,
    ):
        """
        Create and validate a density profile.

        Args:
            type: Profile kind (default: "uniform")
            n: Reference density (default: 1.0)
            start: Start position, used by step, slab and ramp
            end: End position, used by slab and ramp
            ramp: (initial, final) relative densities for the ramp kind
            custom: Callable for the custom kind, custom(x) or
                custom(x, custom_data)
            custom_data: Context handed to custom; the profile keeps a
                reference only. None means custom takes x alone

        Raises:
            DensityConfigError: If the parameters are inconsistent
        """
        self.type = type
        self.n = float(n)
        self.start = float(start)
        self.end = float(end)
        self.ramp = (float(ramp[0]), float(ramp[1]))
        self.custom = custom
        self.custom_data = custom_data

        self.total_np_inj = 0
        self.custom_q_inj = 0.0

        self.validate()

    def validate(self):
        """
        Check profile parameters.

        Raises:
            DensityConfigError: On unknown kind, negative densities,
                reversed bounds or a custom kind without a callable
        """
        if self.type not in DENSITY_KINDS:
            raise DensityConfigError(
                f"Unknown density type: {self.type!r} (expected one of {DENSITY_KINDS})"
            )

        if not math.isfinite(self.n) or self.n < 0.0:
            raise DensityConfigError(f"Reference density must be >= 0, got {self.n}")

        if self.type == SLAB and self.start > self.end:
            raise DensityConfigError(
                f"Slab start ({self.start}) must not exceed end ({self.end})"
            )

        if self.type == RAMP:
            if self.start >= self.end:
                raise DensityConfigError(
                    f"Ramp start ({self.start}) must be smaller than end ({self.end})"
                )
            if self.ramp[0] < 0.0 or self.ramp[1] < 0.0:
                raise DensityConfigError(f"Ramp densities must be >= 0, got {self.ramp}")

        if self.type == CUSTOM and not callable(self.custom):
            raise DensityConfigError("Custom density profile requires a callable 'custom'")

    def shape_at(self, x):
        """
        Profile shape at x, i.e. the density relative to n.

        Args:
            x: Position [simulation units]

        Returns:
            shape: Non-negative relative density
        """
        if self.type == UNIFORM:
            return 1.0

        if self.type == STEP:
            return 1.0 if x >= self.start else 0.0

        if self.type == SLAB:
            return 1.0 if self.start <= x < self.end else 0.0

        if self.type == RAMP:
            if x < self.start or x > self.end:
                return 0.0
            # Convex combination: exact at both ends
            w = (x - self.start) / (self.end - self.start)
            return self.ramp[0] * (1.0 - w) + self.ramp[1] * w

        if self.type == CUSTOM:
            if not callable(self.custom):
                raise DensityConfigError("Custom density profile has no evaluator set")
            if self.custom_data is None:
                value = float(self.custom(x))
            else:
                value = float(self.custom(x, self.custom_data))
            if not math.isfinite(value) or value < 0.0:
                raise DensityConfigError(
                    f"Custom density must be finite and non-negative, got {value} at x = {x}"
                )
            return value

        raise DensityConfigError(f"Unknown density type: {self.type!r}")

    def reset_counters(self):
        """Reset the injection counters."""
        self.total_np_inj = 0
        self.custom_q_inj = 0.0

    def copy(self):
        """Return a new profile with the same parameters and zeroed counters."""
        return DensityProfile(
            type=self.type,
            n=self.n,
            start=self.start,
            end=self.end,
            ramp=self.ramp,
            custom=self.custom,
            custom_data=self.custom_data,
        )

    def __repr__(self):
        """String representation."""
        if self.type == UNIFORM:
            return f"DensityProfile(type='uniform', n={self.n})"
        if self.type == RAMP:
            return (
                f"DensityProfile(type='ramp', n={self.n}, start={self.start}, "
                f"end={self.end}, ramp={self.ramp})"
            )
        return (
            f"DensityProfile(type={self.type!r}, n={self.n}, "
            f"start={self.start}, end={self.end})"
        )


def density_at(profile, x):
    """
    Evaluate the target density of a profile at position x.

    Pure: the injection counters are not touched.

    Args:
        profile: DensityProfile instance
        x: Position [simulation units]

    Returns:
        density: n * shape(x), never negative

    Raises:
        DensityConfigError: If a custom profile has no evaluator or
            returns a negative value
    """
    return profile.n * profile.shape_at(x)
