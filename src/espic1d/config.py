"""Pydantic v2 configuration models for species setup.

Validates species and density-profile parameters before any particle
buffer is allocated, then builds the runtime objects.
"""

from __future__ import annotations

from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .density import DensityProfile
from .species import Species


class DensityConfig(BaseModel):
    """Initial / injected density profile."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: Literal["uniform", "step", "slab", "ramp", "custom"] = Field(
        "uniform", description="Profile kind"
    )
    n: float = Field(1.0, ge=0, description="Reference density")
    start: float = Field(0.0, description="Plasma start position")
    end: float = Field(0.0, description="Plasma end position")
    ramp: tuple[float, float] = Field(
        (0.0, 0.0), description="Initial and final ramp density (relative to n)"
    )
    custom: Callable[..., float] | None = Field(
        None, description="Relative density function for the custom kind"
    )
    custom_data: Any = Field(None, description="Context passed to the custom function")

    @model_validator(mode="after")
    def check_bounds(self) -> DensityConfig:
        if self.type == "slab" and self.start > self.end:
            raise ValueError("slab start must not exceed end")
        if self.type == "ramp":
            if self.start >= self.end:
                raise ValueError("ramp start must be smaller than end")
            if min(self.ramp) < 0:
                raise ValueError("ramp densities must be non-negative")
        if self.type == "custom" and self.custom is None:
            raise ValueError("custom density requires a 'custom' function")
        return self

    def to_profile(self) -> DensityProfile:
        return DensityProfile(
            type=self.type,
            n=self.n,
            start=self.start,
            end=self.end,
            ramp=self.ramp,
            custom=self.custom,
            custom_data=self.custom_data,
        )


class SpeciesConfig(BaseModel):
    """Physical and numerical parameters of one species."""

    name: str = Field(..., min_length=1, description="Species name")
    m_q: float = Field(..., description="Mass-to-charge ratio (e.g. -1 for electrons)")
    ppc: int = Field(..., ge=1, description="Particles per cell")
    vfl: float = Field(0.0, description="Drift velocity")
    vth: float = Field(0.0, ge=0, description="Thermal velocity")
    nx: int = Field(..., ge=1, description="Number of cells")
    box: float = Field(..., gt=0, description="Domain length")
    dt: float = Field(..., gt=0, description="Timestep")
    boundary: Literal["periodic", "absorbing"] = Field(
        "periodic", description="Particle boundary condition"
    )
    quiet_start: bool = Field(True, description="Quiet-start thermal loading")
    seed: int | None = Field(None, description="Velocity sampling seed")
    density: DensityConfig = Field(default_factory=DensityConfig)

    @model_validator(mode="after")
    def check_species(self) -> SpeciesConfig:
        if self.m_q == 0:
            raise ValueError("m_q must be non-zero")
        return self

    @property
    def dx(self) -> float:
        return self.box / self.nx

    def build(self) -> Species:
        """Create the species described by this configuration."""
        return Species(
            self.name,
            m_q=self.m_q,
            ppc=self.ppc,
            vfl=self.vfl,
            vth=self.vth,
            nx=self.nx,
            box=self.box,
            dt=self.dt,
            density=self.density.to_profile(),
            boundary=self.boundary,
            quiet_start=self.quiet_start,
            seed=self.seed,
        )
