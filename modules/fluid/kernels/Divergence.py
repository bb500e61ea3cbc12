"""Divergence kernel - central differences of the velocity field."""

import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil


class Divergence(Kernel):
    """div = ((vx[x+1] - vx[x-1]) + (vy[y+1] - vy[y-1])) / 2, neighbours clamped."""

    def use(self, out: np.ndarray, velocity: np.ndarray) -> None:
        if not self._ready(out, velocity):
            return

        left, right, down, up = FluidUtil.neighbours(velocity)
        out[...] = ((right[..., 0] - left[..., 0]) + (up[..., 1] - down[..., 1])) * 0.5
