"""Bresenham traversal of the grid cells between two cells."""

from __future__ import annotations

from typing import List, Tuple

Cell = Tuple[int, int]


def grid_line_core(start: Cell, end: Cell) -> List[Cell]:
    """Cells on the line between ``start`` and ``end``.

    The cells run along the major axis in increasing order, so the list may
    begin at either end point.
    """
    sx, sy = start
    ex, ey = end
    dx = abs(ex - sx)
    dy = abs(ey - sy)
    points: List[Cell] = []

    if dy <= dx:
        d = 2 * dy - dx
        incr1 = 2 * dy
        incr2 = 2 * (dy - dx)
        if sx > ex:
            x, y, ydir, xend = ex, ey, -1, sx
        else:
            x, y, ydir, xend = sx, sy, 1, ex
        points.append((x, y))
        step = 1 if (ey - sy) * ydir > 0 else -1
        while x < xend:
            x += 1
            if d < 0:
                d += incr1
            else:
                y += step
                d += incr2
            points.append((x, y))
    else:
        d = 2 * dx - dy
        incr1 = 2 * dx
        incr2 = 2 * (dx - dy)
        if sy > ey:
            x, y, xdir, yend = ex, ey, -1, sy
        else:
            x, y, xdir, yend = sx, sy, 1, ey
        points.append((x, y))
        step = 1 if (ex - sx) * xdir > 0 else -1
        while y < yend:
            y += 1
            if d < 0:
                d += incr1
            else:
                x += step
                d += incr2
            points.append((x, y))
    return points


def grid_line(start: Cell, end: Cell) -> List[Cell]:
    """Cells on the line from ``start`` to ``end``, beginning at ``start``."""
    points = grid_line_core(start, end)
    if points[0] != tuple(start):
        points.reverse()
    return points