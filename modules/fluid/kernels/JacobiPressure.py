"""JacobiPressure kernel - iterative Poisson pressure solver.

Solves laplacian(p) = divergence with a fixed number of sweeps:

    p_next = (p_left + p_right + p_down + p_up - divergence) / 4

Every sweep reads the whole previous iterate and writes the whole next one.
Convergence is approximate; there is no residual check.
"""

import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil
from ..SwapField import SwapField


class JacobiPressure(Kernel):
    """Jacobi iterative solver for the pressure Poisson equation."""

    def use(self, out: np.ndarray, source: np.ndarray, divergence: np.ndarray) -> None:
        """Apply one Jacobi iteration.

        Args:
            out: Next pressure iterate
            source: Previous pressure iterate
            divergence: Velocity divergence
        """
        if not self._ready(out, source, divergence):
            return

        left, right, down, up = FluidUtil.neighbours(source)
        out[...] = (left + right + down + up - divergence) * 0.25

    def solve(self, pressure: SwapField, divergence: np.ndarray, iterations: int) -> np.ndarray:
        """Zero the pressure, then run all sweeps with automatic ping-pong.

        Returns:
            The buffer holding the final pressure (pressure.texture)
        """
        pressure.clear_all(0.0)
        for _ in range(iterations):
            self.use(pressure.back, pressure.texture, divergence)
            pressure.swap()
        return pressure.texture
