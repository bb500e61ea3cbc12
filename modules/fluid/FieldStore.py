"""Grid Field Store - owns both generations of every simulation field."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

import numpy as np

from modules.ConfigBase import ConfigError
from .Definitions import FieldName, SCALAR_CHANNELS, VELOCITY_CHANNELS
from .SwapField import SwapField


class FieldStore:
    """Double-buffered velocity, density, pressure and divergence over an N x N grid.

    Stages read the committed generation and write the next one; commit()
    promotes next to committed. Velocity and density persist between ticks,
    pressure and divergence are per-tick working state.
    """

    PERSISTENT: tuple[FieldName, ...] = (FieldName.VELOCITY, FieldName.DENSITY)

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ConfigError(f"grid size must be > 0, got {size}")

        self._size: int = size
        self._lock = threading.RLock()
        self._tick: int = 0

        self._fields: dict[FieldName, SwapField] = {name: SwapField() for name in FieldName}
        self._fields[FieldName.VELOCITY].allocate(size, size, VELOCITY_CHANNELS)
        for name in (FieldName.DENSITY, FieldName.PRESSURE, FieldName.DIVERGENCE):
            self._fields[name].allocate(size, size, SCALAR_CHANNELS)

        logging.info(f"FieldStore allocated {size}x{size} grid")

    @property
    def size(self) -> int:
        return self._size

    @property
    def tick(self) -> int:
        """Number of fully committed ticks."""
        return self._tick

    def field(self, name: FieldName) -> SwapField:
        return self._fields[name]

    # ========== Whole-array access (kernels) ==========

    def current(self, name: FieldName) -> np.ndarray:
        return self._fields[name].texture

    def next(self, name: FieldName) -> np.ndarray:
        return self._fields[name].back

    def commit(self, name: FieldName) -> None:
        self._fields[name].commit()

    # ========== Per-cell access ==========

    def read(self, name: FieldName, x: int, y: int) -> float | tuple[float, ...]:
        """Committed value at (x, y), coordinates clamped to the grid."""
        last: int = self._size - 1
        cx: int = min(max(int(x), 0), last)
        cy: int = min(max(int(y), 0), last)
        value = self._fields[name].texture[cy, cx]
        if np.ndim(value) == 0:
            return float(value)
        return tuple(float(v) for v in value)

    def write(self, name: FieldName, x: int, y: int, value: float | tuple[float, ...]) -> None:
        """Write one cell of the next generation.

        Raises:
            IndexError: If (x, y) lies outside the grid.
        """
        if not (0 <= x < self._size and 0 <= y < self._size):
            raise IndexError(f"cell ({x}, {y}) outside {self._size}x{self._size} grid")
        self._fields[name].back[y, x] = value

    # ========== Tick lifecycle ==========

    @contextmanager
    def transaction(self) -> Iterator['FieldStore']:
        """Run one tick atomically.

        The committed generation of every field is saved on entry. If the
        body raises, it is restored before the exception propagates, so the
        store stays at its last fully committed tick.
        """
        with self._lock:
            saved: dict[FieldName, np.ndarray] = {
                name: swap_field.texture.copy() for name, swap_field in self._fields.items()
            }
            try:
                yield self
            except BaseException:
                for name, data in saved.items():
                    np.copyto(self._fields[name].texture, data)
                logging.info(f"FieldStore rolled back to tick {self._tick}")
                raise
            self._tick += 1

    def snapshot(self) -> dict[FieldName, np.ndarray]:
        """Copies of the committed persistent fields, never mid-tick."""
        with self._lock:
            return {name: self._fields[name].texture.copy() for name in self.PERSISTENT}

    def reset(self) -> None:
        with self._lock:
            for swap_field in self._fields.values():
                swap_field.clear_all(0.0)
            self._tick = 0
