from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.catalog import EMPTY_KEY
from beadkit.export import load_pattern, save_pattern
from beadkit.grid import ERASED_COLOR, Cell, Coord, EditHistory, PatternGrid
from beadkit.palette import PaletteColor

RED = "#E01E22"
BLACK = "#000000"


def _grid():
    keys = [
        [RED, RED, BLACK],
        [BLACK, RED, BLACK],
        [RED, BLACK, BLACK],
    ]
    return PatternGrid(3, 3, [[Cell(k, k) for k in row] for row in keys])


def test_grid_rejects_bad_dimensions():
    with pytest.raises(ValueError):
        PatternGrid(0, 3)
    with pytest.raises(ValueError):
        PatternGrid(2, 2, [[Cell(RED, RED)]])


def test_get_and_index_bounds():
    grid = _grid()
    assert grid.get(5, 0) is None
    with pytest.raises(IndexError):
        grid[3, 0]
    assert grid[2, 0].key == RED


def test_color_counts_exclude_external_and_empty():
    grid = _grid()
    grid[0, 2].is_external = True
    grid.clear_cells([(1, 0)])
    counts = grid.color_counts()
    assert counts == {RED: {"count": 4, "color": RED}, BLACK: {"count": 3, "color": BLACK}}
    assert grid.bead_count() == 7


def test_paint_cell_and_external_guard():
    grid = _grid()
    assert grid.paint_cell(0, 0, BLACK)
    assert grid[0, 0].key == BLACK
    assert not grid.paint_cell(0, 0, BLACK)
    grid[1, 1].is_external = True
    assert not grid.paint_cell(1, 1, BLACK)
    assert not grid.paint_cell(9, 9, BLACK)
    entry = PaletteColor("F4", RED, (224, 30, 34))
    assert grid.paint_cell(2, 2, entry)
    assert (grid[2, 2].key, grid[2, 2].color) == ("F4", RED)


def test_paint_rejects_malformed_color():
    with pytest.raises(ValueError):
        _grid().paint_cell(0, 0, "not-a-color")


def test_erase_region_clears_connected_cells():
    grid = _grid()
    erased = grid.erase_region(0, 0)
    assert set(erased) == {Coord(0, 0), Coord(0, 1), Coord(1, 1)}
    assert grid[1, 1].key == EMPTY_KEY
    assert grid[1, 1].color == ERASED_COLOR
    assert grid[2, 0].key == RED
    assert grid.erase_region(0, 0) == []


def test_replace_color_skips_external():
    grid = _grid()
    grid[2, 0].is_external = True
    assert grid.replace_color(RED, BLACK) == 3
    assert grid[2, 0].key == RED
    assert grid.replace_color(BLACK, BLACK) == 0


def test_wand_and_inverted_selection():
    grid = _grid()
    selection = grid.wand_select(0, 2)
    assert selection == {Coord(0, 2), Coord(1, 2), Coord(2, 2), Coord(2, 1)}
    inverted = grid.invert_selection(selection)
    assert len(inverted) == 5
    assert not inverted & selection
    assert grid.wand_select(-1, 0) == set()

    assert grid.fill_cells(selection, RED) == 4
    assert grid.distinct_keys() == [RED, BLACK]


def test_edit_history_undo_redo():
    grid = _grid()
    history = EditHistory()
    history.record(grid)
    grid.paint_cell(0, 0, BLACK)

    previous = history.undo(grid)
    assert previous[0, 0].key == RED
    assert history.can_redo
    restored = history.redo(previous)
    assert restored[0, 0].key == BLACK
    assert history.redo(restored) is None


def test_edit_history_is_bounded():
    grid = _grid()
    history = EditHistory(max_entries=50)
    for _ in range(60):
        history.record(grid)
    undone = 0
    while history.undo(grid) is not None:
        undone += 1
    assert undone == 50
    with pytest.raises(ValueError):
        EditHistory(max_entries=0)


def test_json_persistence_keeps_cells_and_flags(tmp_path):
    grid = _grid()
    grid[0, 2].is_external = True
    grid.clear_cells([(2, 2)])
    path = tmp_path / "nested" / "pattern.json"
    save_pattern(grid, str(path))

    data = path.read_text(encoding="utf-8")
    assert '"isExternal": true' in data
    loaded = load_pattern(str(path))
    assert loaded == grid
    assert loaded is not grid


def test_load_pattern_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_pattern(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text('{"rows": 1}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_pattern(str(bad))
