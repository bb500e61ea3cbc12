"""Advect kernel - semi-Lagrangian transport.

Each cell traces back along the velocity, p = c - dt * velocity(c), and takes
the bilinear sample of the source field at p, with p clamped to the grid.
"""

import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil


class Advect(Kernel):
    """Backward-trace advection of a scalar or vector field."""

    def use(self, out: np.ndarray, source: np.ndarray, velocity: np.ndarray, dt: float) -> None:
        """Apply advection.

        Args:
            out: Next generation of the advected field
            source: Committed field to advect (density or velocity)
            velocity: Committed velocity (N, N, 2) used for the back trace
            dt: Timestep
        """
        if not self._ready(out, source, velocity):
            return

        px: np.ndarray = self.xs - dt * velocity[..., 0]
        py: np.ndarray = self.ys - dt * velocity[..., 1]
        out[...] = FluidUtil.sample(source, px, py)
