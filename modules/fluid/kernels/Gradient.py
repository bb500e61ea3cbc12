"""Gradient kernel - subtract the pressure gradient from velocity."""

import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil


class Gradient(Kernel):
    """velocity -= 0.5 * (p[x+1] - p[x-1], p[y+1] - p[y-1]), neighbours clamped."""

    def use(self, out: np.ndarray, velocity: np.ndarray, pressure: np.ndarray) -> None:
        """Apply pressure gradient subtraction.

        Args:
            out: Next velocity generation
            velocity: Committed velocity (N, N, 2)
            pressure: Solved pressure (N, N)
        """
        if not self._ready(out, velocity, pressure):
            return

        left, right, down, up = FluidUtil.neighbours(pressure)
        out[..., 0] = velocity[..., 0] - 0.5 * (right - left)
        out[..., 1] = velocity[..., 1] - 0.5 * (up - down)
