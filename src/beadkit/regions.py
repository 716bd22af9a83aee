"""
Connected same-color regions of a pattern grid.

A region is a maximal 4-connected set of non-external cells sharing one key.
All flood fills use an explicit stack, never recursion.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Tuple

import numpy as np

from .grid import Coord, PatternGrid

__all__ = [
    "Coord",
    "Region",
    "regions_of",
    "region_containing",
    "is_complete",
    "region_progress",
]


@dataclass
class Region:
    """Cells of one connected region, in flood-fill visit order."""
    key: str
    cells: List[Coord] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __bool__(self) -> bool:
        return bool(self.cells)

    @property
    def bounding_box(self) -> Optional[Tuple[int, int, int, int]]:
        """(min_row, min_col, max_row, max_col), or None for an empty region."""
        if not self.cells:
            return None
        rows = [c.row for c in self.cells]
        cols = [c.col for c in self.cells]
        return min(rows), min(cols), max(rows), max(cols)

    @property
    def center(self) -> Optional[Tuple[float, float]]:
        """Mean row and column; not necessarily a cell of the region."""
        if not self.cells:
            return None
        n = len(self.cells)
        return (
            sum(c.row for c in self.cells) / n,
            sum(c.col for c in self.cells) / n,
        )

    def touches_edge(self, grid: PatternGrid) -> bool:
        """Check whether any cell lies on the grid's outer boundary."""
        return any(grid.is_border(r, c) for r, c in self.cells)


def _matches(grid: PatternGrid, row: int, col: int, key: str) -> bool:
    cell = grid.cells[row][col]
    return cell.key == key and not cell.is_external


def _flood(grid: PatternGrid, row: int, col: int, key: str, visited: np.ndarray) -> List[Coord]:
    """Collect the region seeded at (row, col), marking ``visited`` as it goes."""
    cells: List[Coord] = []
    stack = [(row, col)]
    visited[row, col] = True
    while stack:
        r, c = stack.pop()
        cells.append(Coord(r, c))
        for nr, nc in ((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)):
            if not grid.in_bounds(nr, nc) or visited[nr, nc]:
                continue
            if _matches(grid, nr, nc, key):
                visited[nr, nc] = True
                stack.append((nr, nc))
    return cells


def regions_of(grid: PatternGrid, key: str) -> List[Region]:
    """
    Partition the non-external cells carrying ``key`` into regions.

    Regions are returned in discovery order: sorted by their first cell in
    row-major scan order.
    """
    visited = np.zeros(grid.shape, dtype=bool)
    regions: List[Region] = []
    for r in range(grid.rows):
        for c in range(grid.cols):
            if visited[r, c] or not _matches(grid, r, c, key):
                continue
            regions.append(Region(key, _flood(grid, r, c, key, visited)))
    return regions


def region_containing(grid: PatternGrid, row: int, col: int, key: str) -> Region:
    """
    The region of ``key`` that contains (row, col).

    Out-of-range coordinates, or a cell that is external or carries another
    key, yield an empty region.
    """
    if not grid.in_bounds(row, col) or not _matches(grid, row, col, key):
        return Region(key)
    visited = np.zeros(grid.shape, dtype=bool)
    return Region(key, _flood(grid, row, col, key, visited))


def is_complete(region: Region, completed: AbstractSet[Tuple[int, int]]) -> bool:
    """True iff every cell of the region is in the completion set."""
    return all(cell in completed for cell in region.cells)


def region_progress(regions: List[Region], completed: AbstractSet[Tuple[int, int]]) -> Tuple[int, int]:
    """(completed cells, total cells) across a list of regions."""
    total = sum(len(region) for region in regions)
    done = sum(1 for region in regions for cell in region.cells if cell in completed)
    return done, total
