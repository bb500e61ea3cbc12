import numpy as np

from .Kernel import Kernel


class Dissipate(Kernel):
    """Multiplicative decay, applied once per tick per field."""

    def use(self, out: np.ndarray, source: np.ndarray, dissipation: float) -> None:
        if not self._ready(out, source):
            return
        np.multiply(source, dissipation, out=out)
