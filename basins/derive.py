"""Derived preview rasters from height grids."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from basins.analyze import LowPoint, find_basin_at
from basins.config import BARRIER_HEIGHT, MAX_HEIGHT
from basins.grid import HeightGrid


def height_preview_u8(grid: HeightGrid) -> np.ndarray:
    """Map heights 0..9 linearly onto 8-bit grayscale."""

    norm = grid.rows().astype(np.float32) / float(MAX_HEIGHT)
    return np.round(norm * 255.0).astype(np.uint8)


def low_point_mask_u8(grid: HeightGrid, low_points: Iterable[LowPoint], *, value: int = 255) -> np.ndarray:
    """Encode low point positions as an 8-bit mask."""

    width, height = grid.size()
    out = np.zeros((height, width), dtype=np.uint8)
    for lp in low_points:
        x, y = lp.position
        out[y, x] = np.uint8(value)
    return out


def basin_mask_u8(
    grid: HeightGrid,
    low_points: Iterable[LowPoint],
    *,
    barrier_height: int = BARRIER_HEIGHT,
    basin_value: int = 160,
    low_point_value: int = 255,
) -> np.ndarray:
    """Encode the union of all basins, with low points drawn on top."""

    width, height = grid.size()
    out = np.zeros((height, width), dtype=np.uint8)
    points = list(low_points)
    for lp in points:
        for x, y in find_basin_at(grid, lp.position, barrier_height=barrier_height):
            out[y, x] = np.uint8(basin_value)
    for lp in points:
        x, y = lp.position
        out[y, x] = np.uint8(low_point_value)
    return out
