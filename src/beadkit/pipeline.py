"""
End-to-end bead pattern generation: sample, match, merge, remove background.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .catalog import ColorCatalog, ColorSystem, get_color_catalog
from .config import MAX_MERGE_THRESHOLD, Config
from .grid import PatternGrid
from .image_io import load_image
from .matcher import match_to_palette
from .palette import BeadPalette, PaletteColor, get_preset_palette
from .postprocess import merge_similar_colors, remove_background
from .sampler import PixelBuffer, SamplingMode, compute_grid_size, sample_grid


@dataclass
class PatternResult:
    """Generated grid with its palette and processing statistics."""
    grid: PatternGrid
    palette: BeadPalette
    background_key: Optional[str] = None
    merged: Dict[str, str] = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)

    @property
    def color_counts(self) -> Dict[str, Dict]:
        return self.grid.color_counts()


class PatternGenerator:
    """Turns images into bead patterns according to a Config."""

    def __init__(self, config: Optional[Config] = None,
                 catalog: Optional[ColorCatalog] = None, verbose: bool = False):
        self.config = config or Config()
        self.verbose = verbose
        if catalog is not None:
            self.catalog = catalog
        elif self.config.catalog.mapping_file:
            self.catalog = ColorCatalog(self.config.catalog.mapping_file)
        else:
            self.catalog = get_color_catalog()
        self.palette = self.build_palette()

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def build_palette(self) -> BeadPalette:
        """Explicit palette colors if configured, otherwise the preset's catalog colors."""
        if self.config.palette.colors:
            return BeadPalette.from_hex_list(self.config.palette.colors)
        return get_preset_palette(self.config.palette.preset, self.catalog)

    @property
    def fallback(self) -> PaletteColor:
        return PaletteColor.from_hex(self.config.palette.fallback) or self.palette.fallback

    def generate(self, source: Union[str, PixelBuffer]) -> PatternResult:
        """
        Generate a pattern from an image path or a decoded pixel buffer.

        Args:
            source: Image file path or RGBA PixelBuffer

        Returns:
            PatternResult with the processed grid
        """
        metadata: dict = {}
        if isinstance(source, PixelBuffer):
            pixels = source
        else:
            self._log(f"Loading image: {source}")
            pixels, metadata = load_image(source)

        grid_cfg = self.config.grid
        mode = SamplingMode.parse(grid_cfg.mode)
        cols, rows = compute_grid_size(pixels.width, pixels.height, grid_cfg.width, grid_cfg.height)
        if cols != grid_cfg.width:
            self._log(f"[WARN] Grid width {grid_cfg.width} clamped to {cols}")

        self._log(f"Sampling {pixels.width}x{pixels.height} image into {cols}x{rows} grid ({mode.value})...")
        samples = sample_grid(pixels, cols, rows, mode, grid_cfg.quantize_step)

        if len(self.palette) == 0:
            self._log(f"[WARN] Palette is empty; using fallback color {self.fallback.hex}")
        self._log(f"Matching to palette of {len(self.palette)} colors...")
        grid = match_to_palette(samples, self.palette, self.fallback)

        threshold = self.config.processing.merge_threshold
        effective = self.config.effective_merge_threshold
        if effective != threshold:
            self._log(f"[WARN] Merge threshold {threshold} clamped to [0, {MAX_MERGE_THRESHOLD}]")
        colors_before = len(grid.color_counts())
        merged = merge_similar_colors(grid, effective)
        self._log(f"Merged {len(merged)} similar colors ({colors_before} -> {len(grid.color_counts())})")

        background_key = None
        if self.config.processing.remove_background:
            background_key, marked = remove_background(grid)
            if background_key is None:
                self._log("[WARN] No background color found on the grid border")
            else:
                self._log(f"Background {background_key}: {marked} cells marked external")

        metadata.update({
            'grid_size': (cols, rows),
            'mode': mode.value,
            'merge_threshold': effective,
            'palette_size': len(self.palette),
            'bead_count': grid.bead_count(),
            'color_count': len(grid.color_counts()),
        })

        self._log(f"[OK] Pattern generated: {cols}x{rows} ({grid.total_cells:,} cells, "
                  f"{metadata['bead_count']:,} beads, {metadata['color_count']} colors)")

        return PatternResult(grid, self.palette, background_key, merged, metadata)

    @property
    def display_system(self) -> ColorSystem:
        return ColorSystem.parse(self.config.catalog.system)


def generate_pattern(source: Union[str, PixelBuffer], config: Optional[Config] = None,
                     verbose: bool = False) -> PatternResult:
    """Convenience wrapper around PatternGenerator."""
    return PatternGenerator(config, verbose=verbose).generate(source)
