"""Low point detection and basin sizing."""

from __future__ import annotations

from collections.abc import Iterable, Sequence, Set
from dataclasses import dataclass
import heapq
import math

from loguru import logger

from basins.config import BARRIER_HEIGHT, AnalyzerConfig
from basins.flood import scanline_fill
from basins.grid import HeightGrid, Point


class InsufficientBasinsError(ValueError):
    """Raised when fewer basins exist than the requested top-k product needs."""

    def __init__(self, found: int, required: int) -> None:
        super().__init__(f"Need at least {required} basins to multiply, found {found}.")
        self.found = found
        self.required = required


@dataclass(frozen=True)
class LowPoint:
    """A cell strictly lower than all of its in-bounds 4-neighbors."""

    position: Point
    height: int

    @property
    def risk_level(self) -> int:
        return self.height + 1


@dataclass(frozen=True)
class BasinReport:
    """Low points of a grid with their basin sizes, in matching order."""

    low_points: tuple[LowPoint, ...]
    basin_sizes: tuple[int, ...]
    risk_level_sum: int


def find_low_points(grid: HeightGrid) -> list[LowPoint]:
    """Scan the grid row-major and return cells below every neighbor.

    Ties disqualify a cell. A cell with no neighbors (1x1 grid) qualifies
    unless it is a barrier cell.
    """

    width, height = grid.size()
    low_points: list[LowPoint] = []
    for y in range(height):
        for x in range(width):
            point = (x, y)
            value = grid.get(point)
            lowest_neighbor = min((grid.get(n) for n in grid.neighbors_of(point)), default=None)
            if lowest_neighbor is None:
                if value < BARRIER_HEIGHT:
                    low_points.append(LowPoint(point, value))
            elif value < lowest_neighbor:
                low_points.append(LowPoint(point, value))
    return low_points


def find_basin_at(grid: HeightGrid, position: Point, *, barrier_height: int = BARRIER_HEIGHT) -> set[Point]:
    """Flood the basin around `position` through cells below `barrier_height`."""

    def is_inside(x: int, y: int, visited: Set[Point]) -> bool:
        if not grid.in_bounds(x, y) or (x, y) in visited:
            return False
        return grid.get((x, y)) < barrier_height

    return scanline_fill(position, is_inside)


def basin_size_at(grid: HeightGrid, low_point: LowPoint, *, barrier_height: int = BARRIER_HEIGHT) -> int:
    """Return the number of cells in the basin draining to `low_point`."""

    return len(find_basin_at(grid, low_point.position, barrier_height=barrier_height))


def basin_sizes(
    grid: HeightGrid,
    low_points: Iterable[LowPoint],
    *,
    barrier_height: int = BARRIER_HEIGHT,
) -> list[int]:
    return [basin_size_at(grid, lp, barrier_height=barrier_height) for lp in low_points]


def risk_level_sum(low_points: Iterable[LowPoint]) -> int:
    """Sum of ``height + 1`` over all low points."""

    return sum(lp.risk_level for lp in low_points)


def top_k_product(sizes: Sequence[int], k: int) -> int:
    """Multiply the `k` largest sizes; duplicates count separately."""

    if k <= 0:
        raise ValueError("k must be positive")
    if len(sizes) < k:
        raise InsufficientBasinsError(len(sizes), k)
    return math.prod(heapq.nlargest(k, sizes))


def top_three_product(grid: HeightGrid, *, barrier_height: int = BARRIER_HEIGHT) -> int:
    """Product of the three largest basin sizes in `grid`."""

    sizes = basin_sizes(grid, find_low_points(grid), barrier_height=barrier_height)
    return top_k_product(sizes, 3)


def analyze_height_map(grid: HeightGrid, *, config: AnalyzerConfig | None = None) -> BasinReport:
    """Find low points and size every basin once."""

    cfg = config or AnalyzerConfig()
    width, height = grid.size()
    logger.debug("Analyzing {}x{} height grid", width, height)

    low_points = find_low_points(grid)
    logger.debug("Found {} low points", len(low_points))

    sizes = basin_sizes(grid, low_points, barrier_height=cfg.basin.barrier_height)
    if sizes:
        logger.debug("Basin sizes range {}..{} over {} basins", min(sizes), max(sizes), len(sizes))

    return BasinReport(
        low_points=tuple(low_points),
        basin_sizes=tuple(sizes),
        risk_level_sum=risk_level_sum(low_points),
    )
