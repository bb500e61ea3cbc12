"""Immutable per-tick parameter record."""

import math
from dataclasses import dataclass, replace

from modules.ConfigBase import ConfigError
from .Definitions import FalloffProfile, PointerState
from .FluidConfig import FluidConfig


@dataclass(frozen=True)
class SimParams:
    """Everything one tick needs, fixed for the whole pipeline.

    The driver builds a fresh record before every tick; nothing inside the
    solver mutates it.
    """

    grid_size: int
    dt: float
    pointer_active: bool =                  False
    viscosity: float =                      0.0
    dissipation: float =                    1.0
    add_strength: float =                   1.0
    pointer_pos: tuple[float, float] =      (0.0, 0.0)
    pointer_delta: tuple[float, float] =    (0.0, 0.0)
    radius: float =                         1.0
    jacobi_iterations: int =                40
    falloff: FalloffProfile =               FalloffProfile.GAUSSIAN
    vorticity: float =                      0.0

    def __post_init__(self) -> None:
        if self.grid_size <= 0:
            raise ConfigError(f"grid_size must be > 0, got {self.grid_size}")
        if not self.dt > 0.0:
            raise ConfigError(f"dt must be > 0, got {self.dt}")
        if self.viscosity < 0.0:
            raise ConfigError(f"viscosity must be >= 0, got {self.viscosity}")
        if not 0.0 < self.dissipation <= 1.0:
            raise ConfigError(f"dissipation must be in (0, 1], got {self.dissipation}")
        if self.radius < 0.0:
            raise ConfigError(f"radius must be >= 0, got {self.radius}")
        if self.jacobi_iterations < 1:
            raise ConfigError(f"jacobi_iterations must be >= 1, got {self.jacobi_iterations}")
        if self.vorticity < 0.0:
            raise ConfigError(f"vorticity must be >= 0, got {self.vorticity}")
        for name in ('dt', 'viscosity', 'add_strength', 'radius', 'vorticity'):
            if not math.isfinite(getattr(self, name)):
                raise ConfigError(f"{name} must be finite")

    @classmethod
    def from_config(cls, config: FluidConfig, pointer: PointerState | None = None) -> 'SimParams':
        pointer = pointer or PointerState()
        return cls(
            grid_size=config.grid_size,
            dt=config.dt,
            pointer_active=pointer.active,
            viscosity=config.viscosity,
            dissipation=config.dissipation,
            add_strength=config.add_strength,
            pointer_pos=(float(pointer.pos[0]), float(pointer.pos[1])),
            pointer_delta=(float(pointer.delta[0]), float(pointer.delta[1])),
            radius=config.radius,
            jacobi_iterations=config.jacobi_iterations,
            falloff=config.falloff,
            vorticity=config.vorticity,
        )

    def with_pointer(self, pointer: PointerState) -> 'SimParams':
        """Copy of these params with a new pointer sample."""
        return replace(
            self,
            pointer_active=pointer.active,
            pointer_pos=(float(pointer.pos[0]), float(pointer.pos[1])),
            pointer_delta=(float(pointer.delta[0]), float(pointer.delta[1])),
        )
