"""
Focus session: track bead placement progress one color at a time.
"""

from typing import Dict, List, Optional, Set, Tuple

from .grid import Coord, PatternGrid
from .recommend import GuidancePolicy, Recommendation, default_reference, recommend_next_region
from .regions import is_complete, region_containing


class FocusSession:
    """
    Placement progress for one pattern.

    Holds the grid, the color being placed, the set of completed cells, the
    last clicked cell and the guidance policy. Clicking a cell of the current
    color toggles its whole region.
    """

    def __init__(self, grid: PatternGrid, color: Optional[str] = None,
                 policy=GuidancePolicy.NEAREST):
        self.grid = grid
        self.policy = GuidancePolicy.parse(policy)
        self.colors: List[str] = grid.distinct_keys()
        self.completed: Set[Coord] = set()
        self.finished_colors: Set[str] = set()
        self.selected_cell: Optional[Coord] = None

        if color is not None and color not in self.colors:
            raise ValueError(f"Color '{color}' does not occur in the pattern")
        self.current_color: Optional[str] = color or (self.colors[0] if self.colors else None)

    @property
    def reference_point(self) -> Tuple[int, int]:
        """Last clicked cell, or the grid center before the first click."""
        if self.selected_cell is not None:
            return self.selected_cell
        return default_reference(self.grid)

    def click(self, row: int, col: int) -> bool:
        """
        Toggle completion of the region under (row, col).

        A complete region is cleared, anything else is marked complete.
        Clicks outside the grid, on external cells or on other colors do
        nothing. Returns True if the completion set changed.
        """
        if self.current_color is None:
            return False
        region = region_containing(self.grid, row, col, self.current_color)
        if not region:
            return False

        if is_complete(region, self.completed):
            self.completed.difference_update(region.cells)
        else:
            self.completed.update(region.cells)
        self.selected_cell = Coord(row, col)
        return True

    def switch_color(self, color: str):
        """
        Start placing another color; completion and selection restart.

        A color left fully complete is remembered as finished.
        """
        if color not in self.colors:
            raise ValueError(f"Color '{color}' does not occur in the pattern")
        if self.is_color_complete():
            self.finished_colors.add(self.current_color)
        self.current_color = color
        self.completed = set()
        self.selected_cell = None

    def set_policy(self, policy):
        self.policy = GuidancePolicy.parse(policy)

    def progress(self) -> Dict[str, float]:
        """Completed and total cells of the current color, with a percentage."""
        total = 0
        done = 0
        for r, c, cell in self.grid.iter_cells():
            if cell.is_external or cell.key != self.current_color:
                continue
            total += 1
            if (r, c) in self.completed:
                done += 1
        percentage = round(done / total * 100) if total else 0
        return {"completed": done, "total": total, "percentage": percentage}

    def is_color_complete(self) -> bool:
        progress = self.progress()
        return progress["total"] > 0 and progress["completed"] == progress["total"]

    def recommendation(self) -> Optional[Recommendation]:
        """Next region to place, or None when the current color is done."""
        if self.current_color is None:
            return None
        return recommend_next_region(
            self.grid, self.current_color, self.completed,
            reference=self.reference_point, policy=self.policy,
        )

    def next_incomplete_color(self) -> Optional[str]:
        """
        First color after the current one that is not yet finished.

        The color list is walked cyclically, skipping colors finished before
        a switch.
        """
        if not self.colors or self.current_color is None:
            return None
        start = self.colors.index(self.current_color)
        for offset in range(1, len(self.colors)):
            candidate = self.colors[(start + offset) % len(self.colors)]
            if candidate not in self.finished_colors:
                return candidate
        return None
