"""AddForce kernel - pointer splat into velocity and density.

velocity += delta * strength / dt * falloff(d)
density  += strength * dt * falloff(d)
"""

import numpy as np

from .Kernel import Kernel
from ..Definitions import FalloffProfile
from ..FluidUtil import FluidUtil


class AddForce(Kernel):
    """Radial pointer impulse."""

    def weights(self, center: tuple[float, float], radius: float, profile: FalloffProfile) -> np.ndarray:
        distance: np.ndarray = np.hypot(self.xs - center[0], self.ys - center[1])
        return FluidUtil.falloff(distance, radius, profile)

    def use(self, velocity_out: np.ndarray, density_out: np.ndarray,
            velocity: np.ndarray, density: np.ndarray,
            center: tuple[float, float], delta: tuple[float, float],
            radius: float, strength: float, dt: float,
            profile: FalloffProfile = FalloffProfile.GAUSSIAN) -> None:
        """Apply the splat.

        Args:
            velocity_out: Next velocity generation (N, N, 2)
            density_out: Next density generation (N, N)
            velocity: Committed velocity
            density: Committed density
            center: Pointer position in grid space
            delta: Pointer movement this tick in grid space
            radius: Influence radius in cells
            strength: Injection strength
            dt: Timestep
            profile: Falloff profile
        """
        if not self._ready(velocity_out, velocity, density):
            return
        if not self._ready(density_out, velocity, density):
            return

        weight: np.ndarray = self.weights(center, radius, profile)
        impulse: np.ndarray = np.array(delta, dtype=velocity.dtype) * (strength / dt)

        np.add(velocity, weight[..., np.newaxis] * impulse, out=velocity_out)
        np.add(density, weight * (strength * dt), out=density_out)
