import numpy as np

from .Definitions import FIELD_DTYPE


class SwapField():
    """Ping-pong pair of grid buffers.

    `texture` is the committed generation, `back` is the generation a stage
    writes into. A stage reads only `texture` and writes only `back`, then
    swap() promotes `back` to `texture`.
    """

    def __init__(self) -> None:
        self.width: int = 0
        self.height: int = 0
        self.channels: int = 0
        self.buffers: list[np.ndarray] = []
        self.swap_state: int = 0
        self.allocated: bool = False

    def allocate(self, width: int, height: int, channels: int = 1) -> None:
        self.width = width
        self.height = height
        self.channels = channels
        shape: tuple[int, ...] = (height, width) if channels == 1 else (height, width, channels)
        self.buffers = [np.zeros(shape, dtype=FIELD_DTYPE), np.zeros(shape, dtype=FIELD_DTYPE)]
        self.swap_state = 0
        self.allocated = True

    @property
    def shape(self) -> tuple[int, ...]:
        return self.buffers[0].shape

    @property
    def texture(self) -> np.ndarray:
        """Committed generation."""
        return self.buffers[self.swap_state]

    @property
    def back(self) -> np.ndarray:
        """Next generation, the only buffer a stage may write."""
        return self.buffers[1 - self.swap_state]

    def swap(self) -> None:
        self.swap_state = 1 - self.swap_state

    def commit(self) -> None:
        self.swap()

    def carry(self) -> None:
        """Copy the committed generation into the next one before a partial write."""
        np.copyto(self.back, self.texture)

    def clear_all(self, value: float = 0.0) -> None:
        for buffer in self.buffers:
            buffer.fill(value)

    def view(self) -> np.ndarray:
        """Read-only view of the committed generation."""
        view: np.ndarray = self.texture.view()
        view.flags.writeable = False
        return view
