"""Stencil and sampling helpers shared by the fluid kernels.

All lookups clamp to the grid edge: a neighbour outside [0, N-1] reads the
nearest edge cell.
"""

import numpy as np

from .Definitions import FIELD_DTYPE, FalloffProfile


class FluidUtil:
    """Static helpers for whole-grid field operations."""

    @staticmethod
    def pad_edge(field: np.ndarray) -> np.ndarray:
        """Pad the two grid axes by one cell, repeating the edge."""
        pad: list[tuple[int, int]] = [(1, 1), (1, 1)] + [(0, 0)] * (field.ndim - 2)
        return np.pad(field, pad, mode='edge')

    @staticmethod
    def neighbours(field: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Clamped neighbour fields (x-1, x+1, y-1, y+1), each shaped like `field`."""
        p: np.ndarray = FluidUtil.pad_edge(field)
        left = p[1:-1, :-2]
        right = p[1:-1, 2:]
        down = p[:-2, 1:-1]
        up = p[2:, 1:-1]
        return left, right, down, up

    @staticmethod
    def grid_coordinates(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
        """Cell coordinates as float arrays, indexed [y, x]."""
        ys, xs = np.mgrid[0:height, 0:width]
        return xs.astype(FIELD_DTYPE), ys.astype(FIELD_DTYPE)

    @staticmethod
    def sample(field: np.ndarray, px: np.ndarray, py: np.ndarray) -> np.ndarray:
        """Bilinear sample of `field` at fractional positions (px, py).

        Positions are clamped to [0, N-1] per axis first, so any input lands
        inside the grid. NaN positions read the first cell; field values are
        never altered.
        """
        height, width = field.shape[0], field.shape[1]
        px = np.clip(np.nan_to_num(px, nan=0.0, posinf=width - 1, neginf=0.0), 0.0, width - 1)
        py = np.clip(np.nan_to_num(py, nan=0.0, posinf=height - 1, neginf=0.0), 0.0, height - 1)

        x0 = np.floor(px).astype(np.intp)
        y0 = np.floor(py).astype(np.intp)
        x1 = np.minimum(x0 + 1, width - 1)
        y1 = np.minimum(y0 + 1, height - 1)
        fx = (px - x0).astype(FIELD_DTYPE)
        fy = (py - y0).astype(FIELD_DTYPE)

        if field.ndim == 3:
            fx = fx[..., np.newaxis]
            fy = fy[..., np.newaxis]

        return (field[y0, x0] * (1.0 - fx) * (1.0 - fy)
                + field[y0, x1] * fx * (1.0 - fy)
                + field[y1, x0] * (1.0 - fx) * fy
                + field[y1, x1] * fx * fy)

    @staticmethod
    def falloff(distance: np.ndarray, radius: float, profile: FalloffProfile) -> np.ndarray:
        """Splat weight: 1 at the centre, decreasing outward, 0 beyond radius."""
        if radius <= 0.0:
            return (distance == 0.0).astype(FIELD_DTYPE)

        t: np.ndarray = distance / radius
        if profile is FalloffProfile.LINEAR:
            weight = 1.0 - t
        elif profile is FalloffProfile.SMOOTH:
            weight = (1.0 - t * t) ** 2
        else:
            weight = np.exp(-t * t)
        return np.where(distance <= radius, weight, 0.0).astype(FIELD_DTYPE)

    @staticmethod
    def interior_mean_abs(field: np.ndarray) -> float:
        """Mean |value| over cells not on the grid border."""
        interior: np.ndarray = field[1:-1, 1:-1]
        if interior.size == 0:
            return 0.0
        return float(np.mean(np.abs(interior)))
