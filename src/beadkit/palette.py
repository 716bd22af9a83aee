"""
Bead palettes: the ordered, finite set of colors a pattern may use.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .catalog import ColorCatalog, ColorSystem, UNMAPPED, get_color_catalog
from .color_math import hex_to_rgb, normalize_hex


@dataclass(frozen=True)
class PaletteColor:
    """A single palette entry. ``key`` is the matcher's identifier."""
    key: str
    hex: str
    rgb: Tuple[int, int, int]

    @classmethod
    def from_hex(cls, hex_value: str, key: Optional[str] = None) -> Optional["PaletteColor"]:
        """Build an entry keyed by its own hex value, or None if malformed."""
        normalized = normalize_hex(hex_value)
        if normalized is None:
            return None
        return cls(key or normalized, normalized, hex_to_rgb(normalized))


DEFAULT_FALLBACK = PaletteColor("#000000", "#000000", (0, 0, 0))


class BeadPalette:
    """Ordered palette with unique keys."""

    def __init__(self, colors: Iterable[PaletteColor] = ()):
        """Initialize palette, rejecting duplicate keys."""
        self.colors: List[PaletteColor] = list(colors)
        self._lookup: Dict[str, PaletteColor] = {}

        for color in self.colors:
            if color.key in self._lookup:
                raise ValueError(f"Duplicate palette key: {color.key}")
            self._lookup[color.key] = color

        self._rgb_array: Optional[np.ndarray] = None

    @classmethod
    def from_hex_list(cls, hex_values: Iterable[str]) -> "BeadPalette":
        """
        Build a palette from hex strings.

        Malformed values are dropped and repeats collapsed; first occurrence
        order is kept.
        """
        colors = []
        seen = set()
        for value in hex_values:
            color = PaletteColor.from_hex(value)
            if color is None:
                print(f"Warning: Skipping invalid palette color: {value!r}")
                continue
            if color.key in seen:
                continue
            seen.add(color.key)
            colors.append(color)
        return cls(colors)

    @classmethod
    def from_catalog(cls, system=ColorSystem.MARD,
                     catalog: Optional[ColorCatalog] = None) -> "BeadPalette":
        """Every color the given catalog carries, in table order."""
        catalog = catalog or get_color_catalog()
        return cls.from_hex_list(catalog.hex_values(system))

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[PaletteColor]:
        return iter(self.colors)

    def __contains__(self, key) -> bool:
        return key in self._lookup

    def get(self, key: str) -> Optional[PaletteColor]:
        """Get palette entry by key."""
        return self._lookup.get(key)

    @property
    def keys(self) -> List[str]:
        return [color.key for color in self.colors]

    @property
    def rgb_array(self) -> np.ndarray:
        """(K, 3) float array of palette RGB values, cached."""
        if self._rgb_array is None:
            self._rgb_array = np.array(
                [color.rgb for color in self.colors], dtype=np.float64
            ).reshape(-1, 3)
        return self._rgb_array

    @property
    def fallback(self) -> PaletteColor:
        """Entry used when nothing else is available: first color or black."""
        return self.colors[0] if self.colors else DEFAULT_FALLBACK

    def export_to_dict(self) -> dict:
        """Export palette to dictionary format."""
        return {
            color.key: {"hex": color.hex, "rgb": list(color.rgb)}
            for color in self.colors
        }


def convert_palette_to_system(palette: Iterable[PaletteColor], system,
                              catalog: Optional[ColorCatalog] = None) -> List[PaletteColor]:
    """
    Relabel palette entries with their codes in ``system``.

    Entries the catalog does not carry keep their current key.
    """
    catalog = catalog or get_color_catalog()
    system = ColorSystem.parse(system)
    converted = []
    for color in palette:
        code = catalog.lookup(color.hex, system)
        converted.append(color if code == UNMAPPED else replace(color, key=code))
    return converted


def list_presets() -> List[str]:
    """Names of the built-in palette presets (one per catalog)."""
    return [system.value for system in ColorSystem]


def get_preset_palette(name: str, catalog: Optional[ColorCatalog] = None) -> BeadPalette:
    """Palette preset by catalog name."""
    return BeadPalette.from_catalog(ColorSystem.parse(name), catalog)
