"""
Grid sampling: reduce a decoded RGBA pixel buffer to one color per grid cell.

Cell rectangles partition the image on integer boundaries
``floor(i * size / count)``; every pixel belongs to exactly one rectangle.
When the grid is finer than the image some rectangles are empty and sample
as transparent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

MIN_GRID_WIDTH = 10
MAX_GRID_WIDTH = 300


class SamplingMode(Enum):
    """Strategy for reducing a block of pixels to one color."""
    AVERAGE = "average"
    DOMINANT = "dominant"

    @classmethod
    def parse(cls, value) -> "SamplingMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown sampling mode '{value}'. Available: {[m.value for m in cls]}"
            ) from None


@dataclass
class PixelBuffer:
    """Decoded image: (height, width, 4) uint8 RGBA array."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Image dimensions must be positive")
        data = np.asarray(self.data, dtype=np.uint8)
        if data.ndim == 1:
            data = data.reshape(self.height, self.width, 4)
        if data.shape == (self.height, self.width, 3):
            alpha = np.full((self.height, self.width, 1), 255, dtype=np.uint8)
            data = np.concatenate([data, alpha], axis=2)
        if data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel data shape {data.shape} does not match {self.width}x{self.height} RGBA"
            )
        self.data = data

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 3|4) array."""
        array = np.asarray(array)
        return cls(width=array.shape[1], height=array.shape[0], data=array)

    @classmethod
    def from_bytes(cls, raw: bytes, width: int, height: int) -> "PixelBuffer":
        """Wrap raw RGBA bytes, one byte per channel, row-major."""
        return cls(width, height, np.frombuffer(raw, dtype=np.uint8))


def compute_grid_size(image_width: int, image_height: int, width: int,
                      height: Optional[int] = None, clamp: bool = True) -> Tuple[int, int]:
    """
    Grid (cols, rows) for an image.

    ``width`` is clamped to [MIN_GRID_WIDTH, MAX_GRID_WIDTH] unless disabled;
    without an explicit height, rows follow the image aspect ratio.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    cols = int(width)
    if clamp:
        cols = max(MIN_GRID_WIDTH, min(MAX_GRID_WIDTH, cols))
    if height is None:
        rows = max(1, int(round(cols * image_height / image_width)))
    else:
        rows = int(height)

    if cols <= 0 or rows <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {cols}x{rows}")
    return cols, rows


def cell_bounds(length: int, count: int) -> np.ndarray:
    """Integer boundaries splitting ``length`` pixels into ``count`` cells."""
    return (np.arange(count + 1, dtype=np.int64) * length) // count


def sample_grid(pixels: PixelBuffer, cols: int, rows: int,
                mode=SamplingMode.DOMINANT, quantize_step: int = 8) -> np.ndarray:
    """
    Sample an image into a (rows, cols, 4) uint8 array of RGBA colors.

    Fully transparent pixels (alpha 0) are ignored; a cell without any other
    pixel comes out fully transparent.

    Args:
        pixels: Decoded RGBA image
        cols: Grid cells across
        rows: Grid cells down
        mode: AVERAGE (channel means) or DOMINANT (most frequent color)
        quantize_step: Histogram bucket width per channel for DOMINANT

    Returns:
        Raw color samples, not yet matched to a palette
    """
    if cols <= 0 or rows <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {cols}x{rows}")

    mode = SamplingMode.parse(mode)
    x_bounds = cell_bounds(pixels.width, cols)
    y_bounds = cell_bounds(pixels.height, rows)

    if mode is SamplingMode.AVERAGE:
        return _sample_average(pixels.data, x_bounds, y_bounds)
    return _sample_dominant(pixels.data, x_bounds, y_bounds, max(1, int(quantize_step)))


def _sample_average(data: np.ndarray, x_bounds: np.ndarray, y_bounds: np.ndarray) -> np.ndarray:
    """Per-cell channel means from a summed-area table."""
    opaque = (data[..., 3] > 0).astype(np.int64)
    weighted = data[..., :3].astype(np.int64) * opaque[..., np.newaxis]
    channels = np.concatenate([weighted, opaque[..., np.newaxis]], axis=2)

    # Summed-area table with a leading row/column of zeros
    table = np.zeros((data.shape[0] + 1, data.shape[1] + 1, 4), dtype=np.int64)
    table[1:, 1:] = channels.cumsum(axis=0).cumsum(axis=1)

    y0, y1 = y_bounds[:-1, np.newaxis], y_bounds[1:, np.newaxis]
    x0, x1 = x_bounds[np.newaxis, :-1], x_bounds[np.newaxis, 1:]
    sums = table[y1, x1] - table[y0, x1] - table[y1, x0] + table[y0, x0]

    counts = sums[..., 3]
    result = np.zeros(counts.shape + (4,), dtype=np.uint8)
    filled = counts > 0
    means = np.floor(sums[filled][:, :3] / counts[filled][:, np.newaxis] + 0.5)
    result[filled, :3] = np.clip(means, 0, 255).astype(np.uint8)
    result[filled, 3] = 255
    return result


def _sample_dominant(data: np.ndarray, x_bounds: np.ndarray, y_bounds: np.ndarray,
                     step: int) -> np.ndarray:
    """
    Most frequent quantized color per cell.

    Ties go to the bucket whose first pixel comes earliest in row-major scan
    order. The output is the mean of the winning bucket's pixels.
    """
    rows, cols = len(y_bounds) - 1, len(x_bounds) - 1
    height, width = data.shape[:2]
    result = np.zeros((rows * cols, 4), dtype=np.uint8)

    # Owning cell of every pixel; zero-length cells own nothing
    cell_row = np.searchsorted(y_bounds, np.arange(height), side="right") - 1
    cell_col = np.searchsorted(x_bounds, np.arange(width), side="right") - 1
    cell_ids = (cell_row[:, np.newaxis] * cols + cell_col[np.newaxis, :]).reshape(-1)

    flat = data.reshape(-1, 4)
    opaque = flat[:, 3] > 0
    if not opaque.any():
        return result.reshape(rows, cols, 4)

    rgb = flat[opaque, :3].astype(np.int64)
    quantized = rgb // step
    packed = (quantized[:, 0] << 16) | (quantized[:, 1] << 8) | quantized[:, 2]
    combined = (cell_ids[opaque].astype(np.int64) << 24) | packed

    # Image row-major order restricted to one cell is that cell's own scan order
    pairs, first_index, inverse, counts = np.unique(
        combined, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    pair_cells = pairs >> 24

    order = np.lexsort((first_index, -counts, pair_cells))
    leading = np.ones(len(order), dtype=bool)
    leading[1:] = pair_cells[order][1:] != pair_cells[order][:-1]
    winners = order[leading]

    sums = np.stack(
        [np.bincount(inverse, weights=rgb[:, ch], minlength=len(pairs)) for ch in range(3)],
        axis=1,
    )
    means = np.floor(sums[winners] / counts[winners][:, np.newaxis] + 0.5)
    winner_cells = pair_cells[winners]
    result[winner_cells, :3] = np.clip(means, 0, 255).astype(np.uint8)
    result[winner_cells, 3] = 255

    return result.reshape(rows, cols, 4)
