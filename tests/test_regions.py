from pathlib import Path
import sys

import numpy as np
from scipy import ndimage

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.grid import Cell, Coord, PatternGrid
from beadkit.regions import (
    Region,
    is_complete,
    region_containing,
    region_progress,
    regions_of,
)

RED = "#FF0000"
GREEN = "#00FF00"
BLUE = "#0000FF"


def _grid(keys):
    cells = [[Cell(key, key) for key in row] for row in keys]
    return PatternGrid(len(keys), len(keys[0]), cells)


def test_ring_and_center_are_separate_regions():
    grid = _grid([[RED, RED, RED], [RED, GREEN, RED], [RED, RED, RED]])
    red = regions_of(grid, RED)
    green = regions_of(grid, GREEN)
    assert len(red) == 1 and red[0].size == 8
    assert Coord(1, 1) not in red[0].cells
    assert len(green) == 1 and green[0].cells == [Coord(1, 1)]


def test_diagonal_cells_are_not_connected():
    grid = _grid([[RED, GREEN], [GREEN, RED]])
    assert len(regions_of(grid, RED)) == 2


def test_regions_in_discovery_order():
    grid = _grid([
        [GREEN, RED, GREEN, GREEN],
        [GREEN, GREEN, GREEN, RED],
        [RED, RED, GREEN, RED],
    ])
    firsts = [min(region.cells) for region in regions_of(grid, RED)]
    assert firsts == [Coord(0, 1), Coord(1, 3), Coord(2, 0)]


def test_external_cells_are_excluded():
    grid = _grid([[RED, RED, RED]])
    grid[0, 1].is_external = True
    regions = regions_of(grid, RED)
    assert [r.cells for r in regions] == [[Coord(0, 0)], [Coord(0, 2)]]


def test_partition_matches_connected_component_labelling():
    rng = np.random.default_rng(3)
    keys = np.array([RED, GREEN, BLUE])
    layout = rng.integers(0, 3, size=(14, 17))
    external = rng.random((14, 17)) < 0.15
    grid = _grid(keys[layout].tolist())
    for r, c in zip(*np.nonzero(external)):
        grid[int(r), int(c)].is_external = True

    for idx, key in enumerate(keys):
        mask = (layout == idx) & ~external
        labels, count = ndimage.label(mask)
        expected = {
            frozenset(Coord(int(r), int(c)) for r, c in zip(*np.nonzero(labels == n)))
            for n in range(1, count + 1)
        }
        regions = regions_of(grid, str(key))
        found = [frozenset(region.cells) for region in regions]
        assert len(found) == len(set(found)) == count
        assert set(found) == expected
        assert sum(len(region) for region in regions) == int(mask.sum())


def test_large_single_region_does_not_recurse():
    grid = PatternGrid(300, 300, [[Cell(RED, RED) for _ in range(300)] for _ in range(300)])
    regions = regions_of(grid, RED)
    assert len(regions) == 1
    assert regions[0].size == 90000


def test_region_containing_matches_full_scan():
    grid = _grid([[RED, RED, GREEN], [GREEN, RED, GREEN], [RED, GREEN, GREEN]])
    region = region_containing(grid, 1, 1, RED)
    assert set(region.cells) == {Coord(0, 0), Coord(0, 1), Coord(1, 1)}
    assert set(region.cells) == set(regions_of(grid, RED)[0].cells)


def test_region_containing_out_of_range_or_mismatch_is_empty():
    grid = _grid([[RED, GREEN]])
    assert not region_containing(grid, 5, 5, RED)
    assert not region_containing(grid, -1, 0, RED)
    assert not region_containing(grid, 0, 1, RED)
    grid[0, 0].is_external = True
    assert region_containing(grid, 0, 0, RED).size == 0


def test_bounding_box_and_center():
    region = Region(RED, [Coord(1, 2), Coord(1, 3), Coord(2, 3), Coord(4, 3)])
    assert region.bounding_box == (1, 2, 4, 3)
    assert region.center == (2.0, 2.75)
    assert Region(RED).bounding_box is None
    assert Region(RED).center is None


def test_touches_edge():
    grid = _grid([[GREEN] * 4 for _ in range(4)])
    assert Region(GREEN, [Coord(0, 2)]).touches_edge(grid)
    assert Region(GREEN, [Coord(2, 3)]).touches_edge(grid)
    assert not Region(GREEN, [Coord(1, 1), Coord(2, 2)]).touches_edge(grid)


def test_completion_checks():
    region = Region(RED, [Coord(0, 0), Coord(0, 1)])
    assert not is_complete(region, set())
    assert not is_complete(region, {Coord(0, 0)})
    assert is_complete(region, {(0, 0), (0, 1)})
    assert region_progress([region], {(0, 1), (5, 5)}) == (1, 2)


def test_completion_is_monotonic():
    rng = np.random.default_rng(11)
    grid = _grid(np.array([RED, GREEN])[rng.integers(0, 2, size=(8, 8))].tolist())
    regions = regions_of(grid, RED)
    all_cells = [Coord(r, c) for r in range(8) for c in range(8)]
    completed = set()
    complete_before = {id(r) for r in regions if is_complete(r, completed)}
    for idx in rng.permutation(len(all_cells)):
        completed.add(all_cells[idx])
        complete_now = {id(r) for r in regions if is_complete(r, completed)}
        assert complete_before <= complete_now
        complete_before = complete_now
    assert len(complete_before) == len(regions)
