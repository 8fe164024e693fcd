"""Span-filling (scan-line) flood fill over integer coordinates."""

from __future__ import annotations

from collections.abc import Callable, Set

from basins.grid import Point

InsidePredicate = Callable[[int, int, Set[Point]], bool]


def scanline_fill(seed: Point, is_inside: InsidePredicate) -> set[Point]:
    """Return every point reachable from `seed` under `is_inside`.

    ``is_inside(x, y, visited)`` must reject out-of-range coordinates and
    points already in ``visited``; it receives the live visited set and must
    not mutate it. Coordinates passed to it may be negative or past the far
    edge while probing. Each popped seed fills its whole horizontal run, then
    the rows above and below are scanned across that run and one new seed is
    pushed per contiguous inside run. Seeds are rechecked only when popped,
    so a seed covered by another span in the meantime expands to nothing.

    Returns an empty set when the seed itself is not inside.
    """

    sx, sy = seed
    visited: set[Point] = set()
    if not is_inside(sx, sy, visited):
        return visited

    stack: list[Point] = [(sx, sy)]
    while stack:
        x, y = stack.pop()

        lx = x
        while is_inside(lx - 1, y, visited):
            visited.add((lx - 1, y))
            lx -= 1
        while is_inside(x, y, visited):
            visited.add((x, y))
            x += 1

        _scan_row(stack, visited, lx, x - 1, y + 1, is_inside)
        _scan_row(stack, visited, lx, x - 1, y - 1, is_inside)

    return visited


def _scan_row(
    stack: list[Point],
    visited: set[Point],
    lx: int,
    rx: int,
    y: int,
    is_inside: InsidePredicate,
) -> None:
    added = False
    for x in range(lx, rx + 1):
        if not is_inside(x, y, visited):
            added = False
        elif not added:
            stack.append((x, y))
            added = True
