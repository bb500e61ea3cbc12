"""JacobiDiffusion kernel - iterative viscous relaxation.

Solves (I - viscosity * dt * laplacian) u = u0 with fixed Jacobi sweeps:

    u_next = (u_left + u_right + u_down + u_up + gamma * u0) * beta
    gamma  = 1 / (viscosity * dt),  beta = 1 / (4 + gamma)
"""

import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil
from ..SwapField import SwapField


class JacobiDiffusion(Kernel):
    """Jacobi iterative solver for diffusion (viscosity)."""

    def use(self, out: np.ndarray, source: np.ndarray, initial: np.ndarray, viscosity_dt: float) -> None:
        """Apply one Jacobi iteration.

        Args:
            out: Next iterate
            source: Previous iterate
            initial: Field before diffusion started
            viscosity_dt: viscosity * dt, must be > 0
        """
        if not self._ready(out, source, initial):
            return

        gamma: float = 1.0 / viscosity_dt
        beta: float = 1.0 / (4.0 + gamma)

        left, right, down, up = FluidUtil.neighbours(source)
        out[...] = (left + right + down + up + gamma * initial) * beta

    def solve(self, field: SwapField, viscosity_dt: float, iterations: int) -> None:
        """Run all sweeps, alternating the two buffers of `field` every sweep."""
        initial: np.ndarray = field.texture.copy()
        for _ in range(iterations):
            self.use(field.back, field.texture, initial, viscosity_dt)
            field.swap()
