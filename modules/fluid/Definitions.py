from dataclasses import dataclass
from enum import Enum

import numpy as np

from modules.ConfigBase import ConfigError

FIELD_DTYPE =               np.float32
DEFAULT_GRID_SIZE: int =    256
VELOCITY_CHANNELS: int =    2
SCALAR_CHANNELS: int =      1


class TickCancelled(RuntimeError):
    """Raised when a tick is cancelled before its final commit."""


class FieldName(Enum):
    VELOCITY =      'velocity'
    DENSITY =       'density'
    PRESSURE =      'pressure'
    DIVERGENCE =    'divergence'


class FalloffProfile(Enum):
    GAUSSIAN =  0
    LINEAR =    1
    SMOOTH =    2


@dataclass(frozen=True)
class PointerState:
    """Grid-space pointer sample for one tick."""
    pos: tuple[float, float] =      (0.0, 0.0)
    delta: tuple[float, float] =    (0.0, 0.0)
    active: bool =                  False


@dataclass(frozen=True)
class DensitySeed:
    """Density blob written once at initialization."""
    center: tuple[float, float]
    radius: float
    amount: float =                 1.0
    falloff: FalloffProfile =       FalloffProfile.GAUSSIAN

    def __post_init__(self) -> None:
        if self.radius < 0.0:
            raise ConfigError(f"DensitySeed.radius must be >= 0, got {self.radius}")


@dataclass(frozen=True)
class TickStats:
    tick: int
    divergence: float   # mean |divergence| over interior cells before projection
    elapsed_ms: float
