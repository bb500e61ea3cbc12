"""Fluid simulation kernels."""

from .Kernel import Kernel
from .AddForce import AddForce
from .Advect import Advect
from .Dissipate import Dissipate
from .JacobiDiffusion import JacobiDiffusion
from .Divergence import Divergence
from .JacobiPressure import JacobiPressure
from .Gradient import Gradient
from .VorticityCurl import VorticityCurl
from .VorticityForce import VorticityForce

__all__ = [
    "Kernel",
    "AddForce",
    "Advect",
    "Dissipate",
    "JacobiDiffusion",
    "Divergence",
    "JacobiPressure",
    "Gradient",
    "VorticityCurl",
    "VorticityForce",
]
