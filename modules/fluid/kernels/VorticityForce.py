"""VorticityForce kernel - vorticity confinement.

Pushes velocity along N x curl, where N is the normalised gradient of |curl|,
re-injecting the small swirls that advection smears out.
"""

import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil


class VorticityForce(Kernel):
    """Add the confinement force to velocity."""

    EPSILON: float = 1e-5

    def use(self, out: np.ndarray, velocity: np.ndarray, curl: np.ndarray, strength_dt: float) -> None:
        """Apply vorticity confinement.

        Args:
            out: Next velocity generation
            velocity: Committed velocity (N, N, 2)
            curl: Curl of the committed velocity
            strength_dt: Confinement strength * dt
        """
        if not self._ready(out, velocity, curl):
            return

        left, right, down, up = FluidUtil.neighbours(np.abs(curl))
        gx: np.ndarray = (right - left) * 0.5
        gy: np.ndarray = (up - down) * 0.5
        length: np.ndarray = np.sqrt(gx * gx + gy * gy) + self.EPSILON

        out[..., 0] = velocity[..., 0] + strength_dt * (gy / length) * curl
        out[..., 1] = velocity[..., 1] - strength_dt * (gx / length) * curl
