"""
Low-level color utilities shared across the bead pattern pipeline.

Provides:
    - Hex string parsing and normalisation (``#RRGGBB``, uppercase)
    - Plain RGB Euclidean distance, scalar and vectorised
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

import numpy as np

RGB = Tuple[int, int, int]

_HEX_PATTERN = re.compile(r"^[0-9A-F]{6}$")


def _to_ndarray(color) -> np.ndarray:
    arr = np.asarray(color, dtype=np.float64)
    if arr.shape[-1] != 3:
        raise ValueError("Input color must have three channels")
    return arr


def normalize_hex(value: str) -> Optional[str]:
    """
    Normalise a hex color string to ``#RRGGBB`` uppercase.

    Accepts an optional leading ``#``, surrounding whitespace and the
    three-digit shorthand. Returns None when the string cannot be read as a
    color.
    """
    if not isinstance(value, str):
        return None
    digits = value.strip().lstrip("#").upper()
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if not _HEX_PATTERN.match(digits):
        return None
    return f"#{digits}"


def hex_to_rgb(value: str) -> Optional[RGB]:
    """Convert ``#RRGGBB`` to an (R, G, B) tuple, or None if malformed."""
    normalized = normalize_hex(value)
    if normalized is None:
        return None
    return (
        int(normalized[1:3], 16),
        int(normalized[3:5], 16),
        int(normalized[5:7], 16),
    )


def rgb_to_hex(rgb) -> str:
    """Convert an (R, G, B) triple to uppercase ``#RRGGBB``."""
    r, g, b = (int(np.clip(round(float(c)), 0, 255)) for c in list(rgb)[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def color_distance(rgb1, rgb2) -> float:
    """Euclidean distance between two RGB colors."""
    diff = _to_ndarray(rgb1) - _to_ndarray(rgb2)
    return float(np.sqrt(np.sum(diff * diff)))


def squared_distances(colors, palette_rgb) -> np.ndarray:
    """
    Squared RGB distances between every color and every palette entry.

    colors has shape (N, 3), palette_rgb has shape (K, 3); the result has
    shape (N, K). Squared values are enough for nearest-neighbour search and
    avoid the square root.
    """
    colors = _to_ndarray(colors).reshape(-1, 3)
    palette_rgb = _to_ndarray(palette_rgb).reshape(-1, 3)
    diff = colors[:, np.newaxis, :] - palette_rgb[np.newaxis, :, :]
    return np.sum(diff * diff, axis=2)
