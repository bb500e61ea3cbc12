"""Pointer collaborator - window pointer samples to grid-space tick input.

Window toolkits report the cursor normalised to [0, 1] over the window. This
adapter maps those samples onto the simulation grid, accumulates movement
between ticks while pressed, and hands out one PointerState per tick.
"""

import threading

from .Definitions import PointerState


class PointerInput:
    """Accumulates pointer samples between ticks.

    Example:
        >>> pointer = PointerInput(grid_size=256)
        >>> pointer.press(0.5, 0.5)
        >>> pointer.move(0.6, 0.5)
        >>> state = pointer.consume()   # pos (153.0, 127.5), delta (25.5, 0.0)
    """

    def __init__(self, grid_size: int) -> None:
        self._scale: float = float(grid_size - 1)
        self._lock = threading.Lock()
        self._pos: tuple[float, float] = (0.0, 0.0)
        self._delta: tuple[float, float] = (0.0, 0.0)
        self._active: bool = False

    def _to_grid(self, x: float, y: float) -> tuple[float, float]:
        return (x * self._scale, y * self._scale)

    def press(self, x: float, y: float) -> None:
        with self._lock:
            self._pos = self._to_grid(x, y)
            self._delta = (0.0, 0.0)
            self._active = True

    def move(self, x: float, y: float) -> None:
        pos: tuple[float, float] = self._to_grid(x, y)
        with self._lock:
            if self._active:
                self._delta = (self._delta[0] + pos[0] - self._pos[0],
                               self._delta[1] + pos[1] - self._pos[1])
            self._pos = pos

    def release(self) -> None:
        with self._lock:
            self._active = False
            self._delta = (0.0, 0.0)

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def consume(self) -> PointerState:
        """State for the coming tick; the delta restarts from zero afterwards."""
        with self._lock:
            state = PointerState(pos=self._pos, delta=self._delta, active=self._active)
            self._delta = (0.0, 0.0)
        return state
