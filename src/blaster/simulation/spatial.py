# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""SpatialGrid — cell-hash broad phase for collision queries.

Rebuilt once per collision pass from the live enemy list, then queried
once per projectile (``query_radius``) and once per beam (``query_rect``).
A cell size of 64px keeps a shot's query to a 2x2 or 3x3 block of cells
even against the 40px boss hit radius.
"""

from __future__ import annotations

import math
from typing import Generic, Iterable, Protocol, TypeVar


class _Positioned(Protocol):
    @property
    def position(self) -> tuple[float, float]: ...


T = TypeVar("T", bound=_Positioned)


class SpatialGrid(Generic[T]):
    """Grid-based spatial partitioning for O(1) neighbour queries."""

    def __init__(self, cell_size: float = 64.0) -> None:
        self._cell_size = cell_size
        self._inv_cell_size = 1.0 / cell_size
        self._cells: dict[tuple[int, int], list[T]] = {}

    def _cell_key(self, x: float, y: float) -> tuple[int, int]:
        """Convert world position to cell key."""
        return (int(math.floor(x * self._inv_cell_size)),
                int(math.floor(y * self._inv_cell_size)))

    def rebuild(self, items: Iterable[T]) -> None:
        """Rebuild the entire grid from scratch (once per pass)."""
        cells: dict[tuple[int, int], list[T]] = {}
        for item in items:
            x, y = item.position
            cells.setdefault(self._cell_key(x, y), []).append(item)
        self._cells = cells

    def _cells_in(self, x_min: float, y_min: float, x_max: float, y_max: float):
        min_cx = int(math.floor(x_min * self._inv_cell_size))
        max_cx = int(math.floor(x_max * self._inv_cell_size))
        min_cy = int(math.floor(y_min * self._inv_cell_size))
        max_cy = int(math.floor(y_max * self._inv_cell_size))
        cells = self._cells
        for cx in range(min_cx, max_cx + 1):
            for cy in range(min_cy, max_cy + 1):
                bucket = cells.get((cx, cy))
                if bucket is not None:
                    yield bucket

    def query_radius(self, pos: tuple[float, float], radius: float) -> list[T]:
        """Return all items within ``radius`` of ``pos``."""
        px, py = pos
        r2 = radius * radius
        result: list[T] = []
        for bucket in self._cells_in(px - radius, py - radius, px + radius, py + radius):
            for item in bucket:
                dx = item.position[0] - px
                dy = item.position[1] - py
                if dx * dx + dy * dy <= r2:
                    result.append(item)
        return result

    def query_rect(self, min_xy: tuple[float, float], max_xy: tuple[float, float]) -> list[T]:
        """Return all items inside the bounding box [min_xy, max_xy]."""
        x_min, y_min = min_xy
        x_max, y_max = max_xy
        result: list[T] = []
        for bucket in self._cells_in(x_min, y_min, x_max, y_max):
            for item in bucket:
                tx, ty = item.position
                if x_min <= tx <= x_max and y_min <= ty <= y_max:
                    result.append(item)
        return result
