from __future__ import annotations

from collections import Counter
from pathlib import Path

import numpy as np
import pytest
from scipy import ndimage

from basins.analyze import (
    InsufficientBasinsError,
    LowPoint,
    analyze_height_map,
    basin_size_at,
    basin_sizes,
    find_basin_at,
    find_low_points,
    risk_level_sum,
    top_k_product,
    top_three_product,
)
from basins.config import AnalyzerConfig, BasinConfig
from basins.grid import HeightGrid, parse_height_map

EXAMPLE_PATH = Path(__file__).resolve().parents[1] / "data" / "example.txt"


@pytest.fixture()
def example_grid() -> HeightGrid:
    return parse_height_map(EXAMPLE_PATH.read_text(encoding="ascii"))


def _random_grid(seed: int, shape: tuple[int, int] = (20, 31)) -> HeightGrid:
    rng = np.random.default_rng(seed)
    return HeightGrid.from_array(rng.integers(0, 10, size=shape))


def test_example_low_points(example_grid: HeightGrid) -> None:
    low_points = find_low_points(example_grid)

    assert [lp.height for lp in low_points] == [1, 0, 5, 5]
    assert [lp.position for lp in low_points] == [(1, 0), (9, 0), (2, 2), (6, 4)]
    assert risk_level_sum(low_points) == 15


def test_example_basin_sizes_and_product(example_grid: HeightGrid) -> None:
    low_points = find_low_points(example_grid)

    assert basin_sizes(example_grid, low_points) == [3, 9, 14, 9]
    assert top_three_product(example_grid) == 1134


def test_example_report(example_grid: HeightGrid) -> None:
    report = analyze_height_map(example_grid)

    assert report.risk_level_sum == 15
    assert report.basin_sizes == (3, 9, 14, 9)
    assert len(report.low_points) == 4
    assert top_k_product(report.basin_sizes, 3) == 1134


@pytest.mark.parametrize("shape", [(4, 6), (1, 1), (1, 3)])
def test_all_nines_has_no_low_points(shape: tuple[int, int]) -> None:
    grid = HeightGrid.from_array(np.full(shape, 9, dtype=np.uint8))

    assert find_low_points(grid) == []
    with pytest.raises(InsufficientBasinsError) as exc:
        top_three_product(grid)
    assert exc.value.found == 0
    assert exc.value.required == 3


def test_single_cell_grid() -> None:
    grid = HeightGrid.from_array([[0]])
    low_points = find_low_points(grid)

    assert low_points == [LowPoint((0, 0), 0)]
    assert basin_size_at(grid, low_points[0]) == 1
    with pytest.raises(InsufficientBasinsError) as exc:
        top_three_product(grid)
    assert exc.value.found == 1


def test_ties_disqualify_low_points() -> None:
    grid = HeightGrid.from_array(
        [
            [3, 3, 4],
            [4, 4, 4],
        ]
    )

    assert find_low_points(grid) == []


def test_top_k_product_counts_duplicates() -> None:
    assert top_k_product([2, 7, 7, 1, 7], 3) == 343
    assert top_k_product([4, 5], 2) == 20
    with pytest.raises(InsufficientBasinsError):
        top_k_product([4, 5], 3)
    with pytest.raises(ValueError):
        top_k_product([4, 5], 0)


def test_custom_barrier_height_shrinks_basin(example_grid: HeightGrid) -> None:
    low_point = find_low_points(example_grid)[2]

    assert basin_size_at(example_grid, low_point) == 14
    assert basin_size_at(example_grid, low_point, barrier_height=6) < 14


def test_report_uses_configured_barrier(example_grid: HeightGrid) -> None:
    config = AnalyzerConfig(basin=BasinConfig(barrier_height=1))
    report = analyze_height_map(example_grid, config=config)

    assert report.basin_sizes == (0, 1, 0, 0)


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_low_points_are_strictly_lower_than_neighbors(seed: int) -> None:
    grid = _random_grid(seed)

    for lp in find_low_points(grid):
        assert grid.get(lp.position) == lp.height
        for neighbor in grid.neighbors_of(lp.position):
            assert lp.height < grid.get(neighbor)


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_basins_are_connected_and_exclude_barrier(seed: int) -> None:
    grid = _random_grid(seed)

    for lp in find_low_points(grid):
        basin = find_basin_at(grid, lp.position)
        assert lp.position in basin
        for point in basin:
            assert grid.get(point) < 9
            if point != lp.position:
                assert any(n in basin for n in grid.neighbors_of(point))


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_basin_sizes_match_component_labels(seed: int) -> None:
    grid = _random_grid(seed)
    labels, _ = ndimage.label(grid.rows() < 9)
    counts = np.bincount(labels.ravel())

    for lp in find_low_points(grid):
        x, y = lp.position
        assert basin_size_at(grid, lp) == counts[labels[y, x]]


def test_basin_size_is_idempotent(example_grid: HeightGrid) -> None:
    for lp in find_low_points(example_grid):
        assert basin_size_at(example_grid, lp) == basin_size_at(example_grid, lp)


@pytest.mark.parametrize("seed", [5, 6])
def test_basin_sizes_independent_of_scan_order(seed: int) -> None:
    grid = _random_grid(seed)
    low_points = find_low_points(grid)

    forward = basin_sizes(grid, low_points)
    backward = basin_sizes(grid, list(reversed(low_points)))
    by_column = basin_sizes(grid, sorted(low_points, key=lambda lp: lp.position))

    assert Counter(forward) == Counter(backward) == Counter(by_column)
