"""Immutable height grid and text parsing."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from basins.config import MAX_HEIGHT

Point = tuple[int, int]

# Fixed up, down, left, right order keeps neighbor enumeration reproducible.
_NEIGHBOR_DELTAS = [
    (0, -1),
    (0, 1),
    (-1, 0),
    (1, 0),
]
_DIGITS = frozenset("0123456789")


class GridParseError(ValueError):
    """Raised when height map text is empty, ragged, or contains non-digits."""


@dataclass(frozen=True, eq=False)
class HeightGrid:
    """Row-major grid of heights in [0, 9] stored as a flat read-only array.

    The height at ``(x, y)`` is ``heights[y * stride + x]``.
    """

    heights: np.ndarray
    stride: int

    def __post_init__(self) -> None:
        heights = np.asarray(self.heights)
        if heights.ndim != 1:
            raise ValueError("HeightGrid expects a flat 1D heights array")
        if not np.issubdtype(heights.dtype, np.integer):
            raise ValueError("HeightGrid heights must be integers")
        if self.stride <= 0:
            raise ValueError("stride must be positive")
        if heights.size == 0:
            raise ValueError("HeightGrid cannot be empty")
        if heights.size % self.stride != 0:
            raise ValueError(f"heights length {heights.size} is not a multiple of stride {self.stride}")
        if int(heights.min()) < 0 or int(heights.max()) > MAX_HEIGHT:
            raise ValueError(f"heights must lie in [0, {MAX_HEIGHT}]")

        frozen = heights.astype(np.uint8, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "heights", frozen)
        object.__setattr__(self, "stride", int(self.stride))

    @classmethod
    def from_array(cls, values: np.ndarray | list[list[int]]) -> HeightGrid:
        """Build a grid from a 2D ``(rows, cols)`` array."""

        arr = np.asarray(values)
        if arr.ndim != 2:
            raise ValueError("from_array expects a 2D array")
        return cls(arr.ravel(), arr.shape[1])

    def size(self) -> tuple[int, int]:
        """Return ``(width, height)`` in cells."""

        return self.stride, self.heights.size // self.stride

    def in_bounds(self, x: int, y: int) -> bool:
        width, height = self.size()
        return 0 <= x < width and 0 <= y < height

    def get(self, point: Point) -> int:
        """Return the height at an in-bounds point.

        Out-of-bounds points raise ``IndexError``; callers bounds-check first.
        """

        x, y = point
        if not self.in_bounds(x, y):
            width, height = self.size()
            raise IndexError(f"point {point} is outside the {width}x{height} grid")
        return int(self.heights[y * self.stride + x])

    def neighbors_of(self, point: Point) -> list[Point]:
        """Return in-bounds 4-neighbors in up, down, left, right order."""

        x, y = point
        return [(x + dx, y + dy) for dx, dy in _NEIGHBOR_DELTAS if self.in_bounds(x + dx, y + dy)]

    def rows(self) -> np.ndarray:
        """Return a read-only ``(height, width)`` view of the grid."""

        width, height = self.size()
        return self.heights.reshape((height, width))


def parse_height_map(text: str) -> HeightGrid:
    """Parse equal-length lines of ASCII digits into a `HeightGrid`."""

    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        raise GridParseError("Height map is empty.")

    stride = len(lines[0])
    if stride == 0:
        raise GridParseError("Line 1 is empty.")

    heights = np.empty(stride * len(lines), dtype=np.uint8)
    for row, line in enumerate(lines):
        if len(line) != stride:
            raise GridParseError(f"Line {row + 1} has {len(line)} columns; expected {stride}.")
        for col, char in enumerate(line):
            if char not in _DIGITS:
                raise GridParseError(f"Invalid height {char!r} at line {row + 1}, column {col + 1}.")
        heights[row * stride : (row + 1) * stride] = np.frombuffer(line.encode("ascii"), dtype=np.uint8) - ord("0")

    return HeightGrid(heights, stride)
