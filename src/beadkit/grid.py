"""
Bead pattern grid with color counting, JSON form and in-place edit operations.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Set, Tuple

from .catalog import EMPTY_KEY
from .color_math import normalize_hex

# Display color of erased cells.
ERASED_COLOR = "#FFFFFF"


class Coord(NamedTuple):
    """Grid coordinate (row, col)."""
    row: int
    col: int


@dataclass
class Cell:
    """Represents a single bead position in the pattern grid."""
    key: str
    color: str
    is_external: bool = False

    @property
    def is_empty(self) -> bool:
        return self.key == EMPTY_KEY

    @property
    def is_bead(self) -> bool:
        """True for cells that need a physical bead."""
        return not self.is_empty and not self.is_external

    def to_dict(self) -> dict:
        return {"key": self.key, "color": self.color, "isExternal": self.is_external}

    @classmethod
    def from_dict(cls, data: dict) -> "Cell":
        return cls(
            key=str(data["key"]),
            color=str(data.get("color", data["key"])),
            is_external=bool(data.get("isExternal", False)),
        )


class PatternGrid:
    """
    Rectangular rows x cols matrix of cells.

    Dimensions are fixed at creation; post-processors and edit operations
    mutate cells in place.
    """

    def __init__(self, rows: int, cols: int, cells: Optional[List[List[Cell]]] = None):
        """Create a grid, filled with empty cells unless cells are given."""
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")

        if cells is None:
            cells = [[Cell(EMPTY_KEY, ERASED_COLOR) for _ in range(cols)] for _ in range(rows)]
        elif len(cells) != rows or any(len(row) != cols for row in cells):
            raise ValueError(f"Cell matrix does not match {rows}x{cols}")

        self._rows = rows
        self._cols = cols
        self.cells = cells

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        return self._rows, self._cols

    @property
    def total_cells(self) -> int:
        return self._rows * self._cols

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._rows and 0 <= col < self._cols

    def is_border(self, row: int, col: int) -> bool:
        """Check whether a cell lies on the outer boundary of the grid."""
        return row == 0 or col == 0 or row == self._rows - 1 or col == self._cols - 1

    def get(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at specified coordinates, None when out of bounds."""
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def __getitem__(self, coord) -> Cell:
        row, col = coord
        if not self.in_bounds(row, col):
            raise IndexError(f"Coordinates ({row}, {col}) outside grid bounds")
        return self.cells[row][col]

    def iter_cells(self) -> Iterator[Tuple[int, int, Cell]]:
        """Row-major iteration over (row, col, cell)."""
        for row_idx, row in enumerate(self.cells):
            for col_idx, cell in enumerate(row):
                yield row_idx, col_idx, cell

    def color_counts(self) -> Dict[str, Dict]:
        """
        Bead count per identifier.

        External and empty cells are excluded. Keys appear in row-major order
        of first occurrence.
        """
        counts: Dict[str, Dict] = {}
        for _, _, cell in self.iter_cells():
            if not cell.is_bead:
                continue
            if cell.key not in counts:
                counts[cell.key] = {"count": 0, "color": cell.color}
            counts[cell.key]["count"] += 1
        return counts

    def distinct_keys(self) -> List[str]:
        return list(self.color_counts())

    def bead_count(self) -> int:
        return sum(1 for _, _, cell in self.iter_cells() if cell.is_bead)

    def external_cells(self) -> Set[Coord]:
        return {Coord(r, c) for r, c, cell in self.iter_cells() if cell.is_external}

    def copy(self) -> "PatternGrid":
        """Deep copy of the grid."""
        cells = [[Cell(c.key, c.color, c.is_external) for c in row] for row in self.cells]
        return PatternGrid(self._rows, self._cols, cells)

    def to_dict(self) -> dict:
        """JSON-serialisable form: dimensions plus a rows x cols cell matrix."""
        return {
            "rows": self._rows,
            "cols": self._cols,
            "cells": [[cell.to_dict() for cell in row] for row in self.cells],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PatternGrid":
        cells = [[Cell.from_dict(item) for item in row] for row in data["cells"]]
        return cls(int(data["rows"]), int(data["cols"]), cells)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PatternGrid):
            return NotImplemented
        return self.shape == other.shape and self.cells == other.cells

    # ------------------------------------------------------------------
    # Manual edits
    # ------------------------------------------------------------------

    def paint_cell(self, row: int, col: int, color) -> bool:
        """
        Set one cell to a palette color (entry or hex string).

        External and out-of-range cells are left alone. Returns True if the
        cell changed.
        """
        key, hex_value = _resolve_color(color)
        cell = self.get(row, col)
        if cell is None or cell.is_external or cell.key == key:
            return False
        cell.key = key
        cell.color = hex_value
        return True

    def erase_region(self, row: int, col: int) -> List[Coord]:
        """Erase the 4-connected same-color region containing a cell."""
        from .regions import region_containing

        cell = self.get(row, col)
        if cell is None or cell.is_external or cell.is_empty:
            return []

        region = region_containing(self, row, col, cell.key)
        for r, c in region.cells:
            target = self.cells[r][c]
            target.key = EMPTY_KEY
            target.color = ERASED_COLOR
        return list(region.cells)

    def replace_color(self, source_key: str, color) -> int:
        """Replace every non-external cell of one identifier; returns cells changed."""
        key, hex_value = _resolve_color(color)
        if source_key == key:
            return 0

        changed = 0
        for _, _, cell in self.iter_cells():
            if cell.key == source_key and not cell.is_external:
                cell.key = key
                cell.color = hex_value
                changed += 1
        return changed

    def fill_cells(self, coords: Iterable[Tuple[int, int]], color) -> int:
        """Paint every in-bounds, non-external coordinate of a selection."""
        key, hex_value = _resolve_color(color)
        changed = 0
        for row, col in coords:
            cell = self.get(row, col)
            if cell is None or cell.is_external:
                continue
            cell.key = key
            cell.color = hex_value
            changed += 1
        return changed

    def clear_cells(self, coords: Iterable[Tuple[int, int]]) -> int:
        """Reset a selection to the empty sentinel."""
        return self.fill_cells(coords, (EMPTY_KEY, ERASED_COLOR))

    def wand_select(self, row: int, col: int) -> Set[Coord]:
        """4-connected cells sharing the clicked cell's display color."""
        start = self.get(row, col)
        if start is None:
            return set()

        target = start.color
        selection: Set[Coord] = set()
        stack = [(row, col)]
        while stack:
            r, c = stack.pop()
            if (r, c) in selection or not self.in_bounds(r, c):
                continue
            if self.cells[r][c].color != target:
                continue
            selection.add(Coord(r, c))
            stack.extend(((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)))
        return selection

    def invert_selection(self, selection: Iterable[Tuple[int, int]]) -> Set[Coord]:
        selected = {Coord(r, c) for r, c in selection}
        return {
            Coord(r, c)
            for r in range(self._rows)
            for c in range(self._cols)
            if Coord(r, c) not in selected
        }


def _resolve_color(color) -> Tuple[str, str]:
    """Accept a PaletteColor-like object, a (key, hex) pair or a hex string."""
    if isinstance(color, tuple):
        return color[0], color[1]
    if hasattr(color, "key") and hasattr(color, "hex"):
        return color.key, color.hex
    normalized = normalize_hex(color)
    if normalized is None:
        raise ValueError(f"Invalid color: {color!r}")
    return normalized, normalized


class EditHistory:
    """Bounded undo/redo stack of grid snapshots."""

    def __init__(self, max_entries: int = 50):
        if max_entries < 1:
            raise ValueError("History must keep at least one entry")
        self.max_entries = max_entries
        self._undo: List[PatternGrid] = []
        self._redo: List[PatternGrid] = []

    def record(self, grid: PatternGrid):
        """Snapshot the grid before an edit; discards the redo branch."""
        self._undo.append(grid.copy())
        if len(self._undo) > self.max_entries:
            self._undo.pop(0)
        self._redo.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self, current: PatternGrid) -> Optional[PatternGrid]:
        """Return the previous grid state, or None if there is none."""
        if not self._undo:
            return None
        self._redo.append(current.copy())
        return self._undo.pop()

    def redo(self, current: PatternGrid) -> Optional[PatternGrid]:
        """Return the state undone last, or None."""
        if not self._redo:
            return None
        self._undo.append(current.copy())
        return self._redo.pop()
