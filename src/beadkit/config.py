"""
Configuration management for bead pattern generation.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import List, Optional

from .catalog import ColorSystem
from .color_math import normalize_hex
from .recommend import GuidancePolicy
from .sampler import SamplingMode

MAX_MERGE_THRESHOLD = 450


@dataclass
class GridConfig:
    """Grid size and sampling parameters."""
    width: int = 100
    height: Optional[int] = None
    mode: str = "dominant"
    quantize_step: int = 8


@dataclass
class PaletteConfig:
    """Palette selection. Explicit colors win over the preset."""
    preset: str = "MARD"
    colors: List[str] = field(default_factory=list)
    fallback: str = "#000000"


@dataclass
class ProcessingConfig:
    """Post-processing configuration."""
    merge_threshold: float = 30
    remove_background: bool = False


@dataclass
class CatalogConfig:
    """Catalog used for displayed codes."""
    system: str = "MARD"
    mapping_file: Optional[str] = None


@dataclass
class GuidanceConfig:
    """Focus-mode recommendation policy."""
    policy: str = "nearest"


@dataclass
class Config:
    """Main configuration class."""
    # File paths
    input: str = ""
    output_dir: str = "out"
    config_file: Optional[str] = None

    # Component configurations
    grid: GridConfig = field(default_factory=GridConfig)
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    guidance: GuidanceConfig = field(default_factory=GuidanceConfig)

    @classmethod
    def from_yaml(cls, config_path: str, **overrides) -> "Config":
        """Load configuration from YAML file with optional overrides."""
        if not os.path.exists(config_path):
            config = cls()
            config.config_file = config_path
        else:
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except UnicodeDecodeError:
                with open(config_path, 'r', encoding='latin-1') as f:
                    data = yaml.safe_load(f) or {}

            config = cls(
                input=data.get('input', ''),
                output_dir=data.get('output_dir', 'out'),
                config_file=config_path,
                grid=GridConfig(**data.get('grid', {})),
                palette=PaletteConfig(**data.get('palette', {})),
                processing=ProcessingConfig(**data.get('processing', {})),
                catalog=CatalogConfig(**data.get('catalog', {})),
                guidance=GuidanceConfig(**data.get('guidance', {})),
            )

        config.apply_overrides(**overrides)
        config.validate()
        return config

    def apply_overrides(self, **overrides):
        """Set each value on whichever section owns the attribute; None is skipped."""
        sections = (self.grid, self.palette, self.processing, self.catalog, self.guidance)
        for key, value in overrides.items():
            if value is None:
                continue
            if key in ('input', 'output_dir', 'config_file'):
                setattr(self, key, value)
                continue
            for section in sections:
                if hasattr(section, key):
                    setattr(section, key, value)
                    break

    def validate(self):
        """Validate configuration parameters."""
        if self.grid.width <= 0:
            raise ValueError("Grid width must be positive")

        if self.grid.height is not None and self.grid.height <= 0:
            raise ValueError("Grid height must be positive")

        if self.grid.quantize_step < 1:
            raise ValueError("Quantize step must be at least 1")

        if self.processing.merge_threshold < 0:
            raise ValueError("Merge threshold must be non-negative")

        if normalize_hex(self.palette.fallback) is None:
            raise ValueError(f"Invalid fallback color: {self.palette.fallback}")

        # Raise ValueError for unknown names
        SamplingMode.parse(self.grid.mode)
        GuidancePolicy.parse(self.guidance.policy)
        ColorSystem.parse(self.catalog.system)
        ColorSystem.parse(self.palette.preset)

        if self.catalog.mapping_file and not os.path.exists(self.catalog.mapping_file):
            raise ValueError(f"Mapping file not found: {self.catalog.mapping_file}")

    @property
    def effective_merge_threshold(self) -> float:
        """Merge threshold clamped to the supported range."""
        return max(0, min(MAX_MERGE_THRESHOLD, self.processing.merge_threshold))

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            'input': self.input,
            'output_dir': self.output_dir,
            'grid': {
                'width': self.grid.width,
                'height': self.grid.height,
                'mode': self.grid.mode,
                'quantize_step': self.grid.quantize_step
            },
            'palette': {
                'preset': self.palette.preset,
                'colors': list(self.palette.colors),
                'fallback': self.palette.fallback
            },
            'processing': {
                'merge_threshold': self.processing.merge_threshold,
                'remove_background': self.processing.remove_background
            },
            'catalog': {
                'system': self.catalog.system,
                'mapping_file': self.catalog.mapping_file
            },
            'guidance': {
                'policy': self.guidance.policy
            }
        }

    def save_yaml(self, path: Optional[str] = None):
        """Save configuration to YAML file."""
        if path is None:
            path = self.config_file or "config.yaml"

        dir_path = os.path.dirname(path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2, allow_unicode=True)
