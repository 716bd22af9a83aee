"""
Image loading into RGBA pixel buffers.
"""

import os
from typing import Tuple

import numpy as np
from PIL import Image, ImageOps

from .color_math import hex_to_rgb
from .sampler import PixelBuffer


def load_image(image_path: str) -> Tuple[PixelBuffer, dict]:
    """
    Decode an image file into an RGBA pixel buffer.

    Args:
        image_path: Path to input image

    Returns:
        Tuple of (pixel buffer, metadata)
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Image not found: {image_path}")

    with Image.open(image_path) as pil_image:
        metadata = {
            'original_size': pil_image.size,
            'original_mode': pil_image.mode,
            'filename': os.path.basename(image_path)
        }

        # Auto-orient image based on EXIF
        oriented = ImageOps.exif_transpose(pil_image)
        rgba = oriented.convert('RGBA')

    pixels = PixelBuffer.from_array(np.array(rgba, dtype=np.uint8))
    metadata['size'] = (pixels.width, pixels.height)
    return pixels, metadata


def render_preview(grid, cell_size: int = 10) -> Image.Image:
    """
    Render a grid as an RGBA image, one ``cell_size`` square per cell.

    Empty and external cells are left transparent.
    """
    if cell_size < 1:
        raise ValueError("Cell size must be at least 1")

    canvas = np.zeros((grid.rows, grid.cols, 4), dtype=np.uint8)
    for r, c, cell in grid.iter_cells():
        if not cell.is_bead:
            continue
        rgb = hex_to_rgb(cell.color) or (0, 0, 0)
        canvas[r, c, :3] = rgb
        canvas[r, c, 3] = 255

    scaled = np.repeat(np.repeat(canvas, cell_size, axis=0), cell_size, axis=1)
    return Image.fromarray(scaled)
