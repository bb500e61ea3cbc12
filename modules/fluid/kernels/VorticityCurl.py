import numpy as np

from .Kernel import Kernel
from ..FluidUtil import FluidUtil


class VorticityCurl(Kernel):
    """Scalar curl of the velocity field, central differences."""

    def use(self, out: np.ndarray, velocity: np.ndarray) -> None:
        if not self._ready(out, velocity):
            return

        left, right, down, up = FluidUtil.neighbours(velocity)
        out[...] = ((right[..., 1] - left[..., 1]) - (up[..., 0] - down[..., 0])) * 0.5
