"""
Bead Pattern Generator

Turns images into fuse-bead patterns: grid sampling, palette matching, color
merging, background removal, per-brand color codes and region-by-region
placement guidance.
"""

__version__ = "1.0.0"
__author__ = "Bead Pattern Generator"

from .config import Config
from .catalog import ColorCatalog, ColorSystem, UNMAPPED, EMPTY_KEY, get_color_catalog
from .palette import BeadPalette, PaletteColor
from .grid import Cell, Coord, PatternGrid, EditHistory
from .sampler import PixelBuffer, SamplingMode, sample_grid
from .matcher import match_to_palette
from .postprocess import merge_similar_colors, remove_background
from .regions import Region, regions_of, region_containing, is_complete
from .recommend import GuidancePolicy, Recommendation, recommend_next_region
from .session import FocusSession
from .pipeline import PatternGenerator, PatternResult, generate_pattern
from . import cli

__all__ = [
    "Config",
    "ColorCatalog",
    "ColorSystem",
    "UNMAPPED",
    "EMPTY_KEY",
    "get_color_catalog",
    "BeadPalette",
    "PaletteColor",
    "Cell",
    "Coord",
    "PatternGrid",
    "EditHistory",
    "PixelBuffer",
    "SamplingMode",
    "sample_grid",
    "match_to_palette",
    "merge_similar_colors",
    "remove_background",
    "Region",
    "regions_of",
    "region_containing",
    "is_complete",
    "GuidancePolicy",
    "Recommendation",
    "recommend_next_region",
    "FocusSession",
    "PatternGenerator",
    "PatternResult",
    "generate_pattern",
    "cli",
]
