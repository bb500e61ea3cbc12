from .Definitions import (
    TickCancelled, FieldName, FalloffProfile, PointerState, DensitySeed, TickStats
)
from .FluidConfig import FluidConfig
from .SimParams import SimParams
from .SwapField import SwapField
from .FieldStore import FieldStore
from .FluidUtil import FluidUtil
from .FluidFlow import FluidFlow
from .PointerInput import PointerInput

from modules.ConfigBase import ConfigError

__all__ = [
    'ConfigError', 'TickCancelled', 'FieldName', 'FalloffProfile', 'PointerState',
    'DensitySeed', 'TickStats', 'FluidConfig', 'SimParams', 'SwapField', 'FieldStore',
    'FluidUtil', 'FluidFlow', 'PointerInput',
]
