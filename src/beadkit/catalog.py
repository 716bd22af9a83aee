"""
Bead color catalogs and hex-indexed code translation.

Every bead brand publishes its own codes for physical colors. The catalog
table maps a normalised hex value to the code each brand uses for it.
"""

import csv
import os
from enum import Enum
from typing import Dict, List, Optional

from .color_math import normalize_hex

# Returned when a catalog carries no code for a color.
UNMAPPED = "?"

# Identifier of an erased / empty cell.
EMPTY_KEY = "transparent"

DEFAULT_MAPPING_FILE = os.path.join(os.path.dirname(__file__), "data", "color_mapping.csv")


class ColorSystem(Enum):
    """Named external bead catalogs."""
    MARD = "MARD"
    COCO = "COCO"
    MANMAN = "MANMAN"
    PANPAN = "PANPAN"
    MIXIAOWO = "MIXIAOWO"

    @property
    def display_name(self) -> str:
        """Brand name as printed on the bead packaging."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, name) -> "ColorSystem":
        """Resolve a catalog from its key or brand name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        text = str(name).strip()
        for system in cls:
            if text.upper() == system.value or text == system.display_name:
                return system
        raise ValueError(
            f"Unknown color system '{name}'. Available: {[s.value for s in cls]}"
        )


_DISPLAY_NAMES = {
    ColorSystem.MARD: "MARD",
    ColorSystem.COCO: "COCO",
    ColorSystem.MANMAN: "漫漫",
    ColorSystem.PANPAN: "盼盼",
    ColorSystem.MIXIAOWO: "咪小窝",
}


def _is_special_key(key: str) -> bool:
    return not key or key in (EMPTY_KEY, UNMAPPED, "ERASE")


class ColorCatalog:
    """Static hex -> per-catalog code table, read-only after loading."""

    def __init__(self, csv_path: str = DEFAULT_MAPPING_FILE):
        """Initialize catalog from CSV file."""
        self.entries: Dict[str, Dict[ColorSystem, str]] = {}
        self.version: str = "unversioned"
        self.source = csv_path

        if os.path.exists(csv_path):
            self.load_from_csv(csv_path)
        else:
            raise FileNotFoundError(f"Color mapping file not found: {csv_path}")

    def load_from_csv(self, csv_path: str):
        """
        Load the mapping table.

        Leading lines starting with ``#`` are metadata; ``# version: X`` sets
        the table version. The header names the hex column and one column per
        catalog; empty cells mean the catalog has no code for that color.
        """
        self.entries.clear()

        try:
            with open(csv_path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except UnicodeDecodeError:
            with open(csv_path, "r", encoding="latin-1") as f:
                lines = f.readlines()

        body: List[str] = []
        for line in lines:
            stripped = line.strip()
            if not body and stripped.startswith("#"):
                key, _, value = stripped.lstrip("#").partition(":")
                if key.strip().lower() == "version":
                    self.version = value.strip()
                continue
            body.append(line)

        for row in csv.DictReader(body):
            hex_value = normalize_hex(row.get("hex") or "")
            if hex_value is None:
                print(f"Warning: Skipping invalid mapping entry: {row}")
                continue

            codes: Dict[ColorSystem, str] = {}
            for system in ColorSystem:
                code = (row.get(system.value) or "").strip()
                if code:
                    codes[system] = code
            self.entries[hex_value] = codes

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, hex_value) -> bool:
        return normalize_hex(hex_value) in self.entries

    def lookup(self, hex_value: str, system=ColorSystem.MARD) -> str:
        """
        Code used by ``system`` for a color, or UNMAPPED.

        Malformed hex strings are normalised best-effort and otherwise
        reported as UNMAPPED.
        """
        system = ColorSystem.parse(system)
        normalized = normalize_hex(hex_value)
        if normalized is None:
            return UNMAPPED
        codes = self.entries.get(normalized)
        if not codes:
            return UNMAPPED
        return codes.get(system, UNMAPPED)

    def reverse_lookup(self, code: str, system=ColorSystem.MARD) -> Optional[str]:
        """Hex value that ``system`` labels ``code``, or None. Linear scan."""
        system = ColorSystem.parse(system)
        wanted = str(code).strip()
        for hex_value, codes in self.entries.items():
            if codes.get(system) == wanted:
                return hex_value
        return None

    def is_valid_in_system(self, hex_value: str, system) -> bool:
        """Check whether the catalog carries a code for this color."""
        return self.lookup(hex_value, system) != UNMAPPED

    def display_key(self, identifier: str, system) -> str:
        """
        Code to show for a cell identifier in the chosen catalog.

        Identifiers are normally hex values. Legacy MARD codes are accepted as
        well and translated through their hex value; when no translation
        exists the original code is kept. Special keys pass through.
        """
        system = ColorSystem.parse(system)
        if _is_special_key(identifier):
            return identifier
        # Short codes such as "A11" also read as 3-digit hex, so require the "#"
        if identifier.startswith("#") and normalize_hex(identifier) is not None:
            return self.lookup(identifier, system)
        if system is ColorSystem.MARD:
            return identifier
        hex_value = self.reverse_lookup(identifier, ColorSystem.MARD)
        if hex_value is None:
            return identifier
        code = self.lookup(hex_value, system)
        return identifier if code == UNMAPPED else code

    def to_base_key(self, display_key: str, system) -> str:
        """Translate a code of ``system`` back to its MARD code."""
        system = ColorSystem.parse(system)
        if system is ColorSystem.MARD:
            return display_key
        hex_value = self.reverse_lookup(display_key, system)
        if hex_value is None:
            return display_key
        base = self.lookup(hex_value, ColorSystem.MARD)
        return display_key if base == UNMAPPED else base

    def hex_values(self, system=None) -> List[str]:
        """All hex values in table order, optionally only those ``system`` carries."""
        if system is None:
            return list(self.entries)
        system = ColorSystem.parse(system)
        return [h for h, codes in self.entries.items() if system in codes]

    def mard_to_hex(self) -> Dict[str, str]:
        """MARD code -> hex mapping for every color MARD carries."""
        return {
            codes[ColorSystem.MARD]: hex_value
            for hex_value, codes in self.entries.items()
            if ColorSystem.MARD in codes
        }

    def codes_for(self, hex_value: str) -> Dict[str, str]:
        """Codes in every catalog for one color (UNMAPPED where missing)."""
        return {system.value: self.lookup(hex_value, system) for system in ColorSystem}


# Global catalog instance
_color_catalog: Optional[ColorCatalog] = None


def get_color_catalog(csv_path: Optional[str] = None) -> ColorCatalog:
    """
    Get the shared catalog instance.

    The bundled table is loaded on first use. Passing a path loads that table
    instead and replaces the shared instance.
    """
    global _color_catalog
    if csv_path is not None:
        _color_catalog = ColorCatalog(csv_path)
    elif _color_catalog is None:
        _color_catalog = ColorCatalog(DEFAULT_MAPPING_FILE)
    return _color_catalog


def lookup(hex_value: str, system=ColorSystem.MARD) -> str:
    """Code of ``hex_value`` in ``system`` using the shared catalog."""
    return get_color_catalog().lookup(hex_value, system)
