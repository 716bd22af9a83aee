from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.grid import Cell, Coord, PatternGrid
from beadkit.recommend import GuidancePolicy
from beadkit.session import FocusSession

RED = "#E01E22"
BLUE = "#1FA4E0"
WHITE = "#FFFFFF"


def _grid():
    legend = {"R": RED, "B": BLUE, "W": WHITE}
    pattern = [
        "RRWB",
        "WWWB",
        "RWWW",
    ]
    cells = [[Cell(legend[ch], legend[ch]) for ch in line] for line in pattern]
    return PatternGrid(3, 4, cells)


def test_session_starts_on_first_color():
    session = FocusSession(_grid())
    assert session.colors == [RED, WHITE, BLUE]
    assert session.current_color == RED
    assert session.reference_point == (1, 2)
    assert session.progress() == {"completed": 0, "total": 3, "percentage": 0}


def test_click_toggles_whole_region():
    session = FocusSession(_grid())
    assert session.click(0, 1)
    assert session.completed == {Coord(0, 0), Coord(0, 1)}
    assert session.selected_cell == (0, 1)
    assert session.progress()["percentage"] == 67

    assert session.click(0, 0)
    assert session.completed == set()


def test_click_on_other_color_or_outside_is_ignored():
    session = FocusSession(_grid())
    assert not session.click(1, 1)
    assert not session.click(10, 10)
    assert session.completed == set()
    assert session.selected_cell is None


def test_recommendation_follows_clicks_until_exhausted():
    session = FocusSession(_grid(), policy="nearest")
    first = session.recommendation()
    assert set(first.region.cells) == {Coord(0, 0), Coord(0, 1)}

    session.click(0, 0)
    second = session.recommendation()
    assert second.region.cells == [Coord(2, 0)]

    session.click(2, 0)
    assert session.recommendation() is None
    assert session.is_color_complete()


def test_switch_color_restarts_progress():
    session = FocusSession(_grid())
    session.click(0, 0)
    session.switch_color(BLUE)
    assert session.current_color == BLUE
    assert session.completed == set()
    assert session.selected_cell is None
    assert session.progress()["total"] == 2

    with pytest.raises(ValueError):
        session.switch_color("#123456")


def test_next_incomplete_color_cycles_and_skips_finished():
    session = FocusSession(_grid())
    assert session.next_incomplete_color() == WHITE

    session.click(0, 0)
    session.click(2, 0)
    session.switch_color(BLUE)
    assert RED in session.finished_colors
    assert session.next_incomplete_color() == WHITE

    session.switch_color(WHITE)
    assert session.next_incomplete_color() == BLUE


def test_policy_can_change():
    session = FocusSession(_grid())
    session.set_policy("largest")
    assert session.policy is GuidancePolicy.LARGEST
    assert len(session.recommendation().region) == 2


def test_external_cells_do_not_count():
    grid = _grid()
    grid[2, 0].is_external = True
    session = FocusSession(grid)
    assert session.progress()["total"] == 2
    assert not session.click(2, 0)
