from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.config import Config


def test_missing_file_returns_defaults(tmp_path):
    config = Config.from_yaml(str(tmp_path / "none.yaml"))
    assert config.grid.width == 100
    assert config.grid.mode == "dominant"
    assert config.processing.merge_threshold == 30
    assert config.processing.remove_background is False
    assert config.catalog.system == "MARD"
    assert config.guidance.policy == "nearest"
    assert config.palette.fallback == "#000000"


def test_yaml_sections_and_overrides(tmp_path):
    path = tmp_path / "beads.yaml"
    path.write_text(
        "grid:\n"
        "  width: 64\n"
        "  mode: average\n"
        "palette:\n"
        "  colors: ['#000000', '#FFFFFF']\n"
        "catalog:\n"
        "  system: COCO\n",
        encoding="utf-8",
    )
    config = Config.from_yaml(str(path), merge_threshold=12, policy="edge-first", width=None)
    assert config.grid.width == 64
    assert config.grid.mode == "average"
    assert config.palette.colors == ["#000000", "#FFFFFF"]
    assert config.catalog.system == "COCO"
    assert config.processing.merge_threshold == 12
    assert config.guidance.policy == "edge-first"


def test_save_and_reload_round_trip(tmp_path):
    config = Config()
    config.grid.height = 40
    config.catalog.system = "漫漫"
    path = tmp_path / "out" / "config.yaml"
    config.save_yaml(str(path))
    reloaded = Config.from_yaml(str(path))
    assert reloaded.to_dict() == config.to_dict()


@pytest.mark.parametrize("override", [
    {"width": 0},
    {"height": -2},
    {"quantize_step": 0},
    {"merge_threshold": -1},
    {"fallback": "nope"},
    {"mode": "median"},
    {"policy": "random"},
    {"system": "NOBRAND"},
])
def test_validation_errors(tmp_path, override):
    with pytest.raises(ValueError):
        Config.from_yaml(str(tmp_path / "none.yaml"), **override)


def test_merge_threshold_is_clamped_for_use():
    config = Config()
    config.processing.merge_threshold = 1000
    assert config.effective_merge_threshold == 450
