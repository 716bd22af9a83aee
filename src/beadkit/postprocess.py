"""
Grid post-processors: greedy color merging and background removal.

Both mutate the grid in place and never change its dimensions.
"""

from typing import Dict, List, Optional, Tuple

import numpy as np

from .color_math import color_distance, hex_to_rgb
from .grid import PatternGrid


def _tally_colors(grid: PatternGrid) -> Tuple[Dict[str, int], Dict[str, str]]:
    """Occurrence count and display color per key, first-seen order."""
    counts: Dict[str, int] = {}
    colors: Dict[str, str] = {}
    for _, _, cell in grid.iter_cells():
        if not cell.is_bead:
            continue
        if cell.key not in counts:
            counts[cell.key] = 0
            colors[cell.key] = cell.color
        counts[cell.key] += 1
    return counts, colors


def merge_similar_colors(grid: PatternGrid, threshold: float) -> Dict[str, str]:
    """
    Fold similar colors into more frequent ones.

    Colors are visited by descending frequency. Each color not yet absorbed
    becomes a representative and absorbs every later, unabsorbed color
    closer than ``threshold`` (RGB Euclidean). Merges are not re-evaluated
    once made, so the result depends on the frequency order.

    Args:
        grid: Pattern grid, rewritten in place
        threshold: Distance below which two colors merge; 0 merges nothing

    Returns:
        Mapping of merged key -> representative key
    """
    if threshold < 0:
        raise ValueError(f"Merge threshold must be non-negative, got {threshold}")

    counts, colors = _tally_colors(grid)
    # sorted() is stable: equal counts keep first-seen order
    ordered = sorted(counts, key=lambda k: counts[k], reverse=True)
    rgb = {key: hex_to_rgb(colors[key]) or (0, 0, 0) for key in ordered}

    merged: Dict[str, str] = {}
    for i, rep in enumerate(ordered):
        if rep in merged:
            continue
        for other in ordered[i + 1:]:
            if other in merged:
                continue
            if color_distance(rgb[rep], rgb[other]) < threshold:
                merged[other] = rep

    if merged:
        for _, _, cell in grid.iter_cells():
            if cell.is_external:
                continue
            rep = merged.get(cell.key)
            if rep is not None:
                cell.key = rep
                cell.color = colors[rep]

    return merged


def _border_positions(rows: int, cols: int) -> List[Tuple[int, int]]:
    """Border cells: top row, bottom row, left column, right column; corners once."""
    positions = [(0, c) for c in range(cols)]
    if rows > 1:
        positions.extend((rows - 1, c) for c in range(cols))
    for r in range(1, rows - 1):
        positions.append((r, 0))
        if cols > 1:
            positions.append((r, cols - 1))
    return positions


def find_background_key(grid: PatternGrid) -> Optional[str]:
    """
    Most frequent key on the grid border, or None when the border is empty.

    Ties go to the key encountered first along the border.
    """
    tally: Dict[str, int] = {}
    for r, c in _border_positions(grid.rows, grid.cols):
        cell = grid.cells[r][c]
        if cell.is_empty:
            continue
        tally[cell.key] = tally.get(cell.key, 0) + 1

    background, best = None, 0
    for key, count in tally.items():
        if count > best:
            background, best = key, count
    return background


def remove_background(grid: PatternGrid) -> Tuple[Optional[str], int]:
    """
    Mark the background as external.

    Flood fills 4-connected cells of the background key from every border
    cell that carries it. Colors are untouched; only ``is_external`` is set.
    Running it again marks nothing new.

    Returns:
        (background key or None, number of cells newly marked)
    """
    background = find_background_key(grid)
    if background is None:
        return None, 0

    # Cells marked by an earlier run are walked through, not treated as walls
    visited = np.zeros(grid.shape, dtype=bool)
    marked = 0
    stack = [
        (r, c) for r, c in _border_positions(grid.rows, grid.cols)
        if grid.cells[r][c].key == background
    ]
    while stack:
        r, c = stack.pop()
        if not grid.in_bounds(r, c) or visited[r, c]:
            continue
        cell = grid.cells[r][c]
        if cell.key != background:
            continue
        visited[r, c] = True
        if not cell.is_external:
            cell.is_external = True
            marked += 1
        stack.extend(((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)))

    return background, marked
