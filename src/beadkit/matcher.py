"""
Palette matching: map raw grid samples to the nearest palette entry.
"""

from typing import Optional

import numpy as np

from .catalog import EMPTY_KEY
from .color_math import squared_distances
from .grid import ERASED_COLOR, Cell, PatternGrid
from .palette import BeadPalette, PaletteColor


# Colors matched per distance matrix; bounds the (batch, K, 3) temporary
MATCH_BATCH_SIZE = 4096


def nearest_palette_indices(rgb: np.ndarray, palette: BeadPalette,
                            batch_size: int = MATCH_BATCH_SIZE) -> np.ndarray:
    """
    Index of the closest palette entry for each (N, 3) color.

    np.argmin returns the first minimum, so equidistant entries resolve to the
    one listed first in the palette.
    """
    if batch_size < 1:
        raise ValueError("Batch size must be at least 1")

    rgb = np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
    palette_rgb = palette.rgb_array
    indices = np.empty(len(rgb), dtype=np.intp)

    for i in range(0, len(rgb), batch_size):
        distances = squared_distances(rgb[i:i + batch_size], palette_rgb)
        indices[i:i + batch_size] = np.argmin(distances, axis=1)

    return indices


def match_to_palette(samples: np.ndarray, palette: BeadPalette,
                     fallback: Optional[PaletteColor] = None) -> PatternGrid:
    """
    Build a pattern grid from (rows, cols, 4) RGBA samples.

    Transparent samples become empty cells. When the palette is empty every
    opaque sample gets the fallback entry (the palette's own fallback unless
    one is given). No cell is marked external.
    """
    samples = np.asarray(samples)
    if samples.ndim != 3 or samples.shape[2] < 3:
        raise ValueError(f"Expected (rows, cols, 3|4) samples, got shape {samples.shape}")

    rows, cols = samples.shape[:2]
    if samples.shape[2] == 4:
        opaque = samples[..., 3] > 0
    else:
        opaque = np.ones((rows, cols), dtype=bool)

    flat_rgb = samples[..., :3].reshape(-1, 3)
    flat_opaque = opaque.reshape(-1)

    if len(palette) == 0:
        entry = fallback or palette.fallback
        assigned = [entry] * len(flat_rgb)
    else:
        assigned = [None] * len(flat_rgb)
        opaque_idx = np.flatnonzero(flat_opaque)
        if len(opaque_idx):
            nearest = nearest_palette_indices(flat_rgb[opaque_idx], palette)
            for pos, color_idx in zip(opaque_idx, nearest):
                assigned[pos] = palette.colors[color_idx]

    cells = []
    for r in range(rows):
        row_cells = []
        for c in range(cols):
            pos = r * cols + c
            if not flat_opaque[pos]:
                row_cells.append(Cell(EMPTY_KEY, ERASED_COLOR))
            else:
                entry = assigned[pos]
                row_cells.append(Cell(entry.key, entry.hex))
        cells.append(row_cells)

    return PatternGrid(rows, cols, cells)
