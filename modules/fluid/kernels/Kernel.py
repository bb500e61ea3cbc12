import logging

import numpy as np

from ..FluidUtil import FluidUtil


class Kernel():
    """Whole-grid stage function.

    use() reads committed arrays and writes every cell of an output array in
    one vectorised pass. Outputs must never alias inputs.
    """

    def __init__(self) -> None:
        self.kernel_name: str = self.__class__.__name__
        self.allocated: bool = False
        self.width: int = 0
        self.height: int = 0
        self.xs: np.ndarray = np.empty((0, 0))
        self.ys: np.ndarray = np.empty((0, 0))

    def allocate(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.xs, self.ys = FluidUtil.grid_coordinates(width, height)
        self.allocated = True

    def deallocate(self) -> None:
        self.xs = np.empty((0, 0))
        self.ys = np.empty((0, 0))
        self.allocated = False

    def _ready(self, out: np.ndarray, *sources: np.ndarray) -> bool:
        if not self.allocated:
            logging.error(f"{self.kernel_name}: kernel not allocated")
            return False
        for source in sources:
            if np.may_share_memory(out, source):
                raise ValueError(f"{self.kernel_name}: output aliases an input buffer")
        return True
