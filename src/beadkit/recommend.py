"""
Work recommender: which incomplete region of the current color to do next.

Recommendations are pure functions of the grid, the color key, the
completion set, a reference point and a policy; nothing is cached between
calls.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, List, Optional, Sequence, Tuple

from .grid import PatternGrid
from .regions import Region, is_complete, regions_of


class GuidancePolicy(Enum):
    """How the next region is chosen."""
    NEAREST = "nearest"
    LARGEST = "largest"
    EDGE_FIRST = "edge-first"

    @classmethod
    def parse(cls, value) -> "GuidancePolicy":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("_", "-")
        try:
            return cls(text)
        except ValueError:
            raise ValueError(
                f"Unknown guidance policy '{value}'. Available: {[p.value for p in cls]}"
            ) from None


@dataclass
class Recommendation:
    """Chosen region and its geometric center (average row, average column)."""
    region: Region
    center: Tuple[float, float]

    def to_dict(self) -> dict:
        return {
            "region": [list(cell) for cell in self.region.cells],
            "center": list(self.center),
        }


def default_reference(grid: PatternGrid) -> Tuple[int, int]:
    """Grid center used before any cell has been clicked."""
    return grid.rows // 2, grid.cols // 2


def _distance_to(region: Region, reference: Tuple[float, float]) -> float:
    ref_row, ref_col = reference
    return min(math.hypot(r - ref_row, c - ref_col) for r, c in region.cells)


def choose_region(regions: Sequence[Region], completed: AbstractSet[Tuple[int, int]],
                  grid: PatternGrid, reference: Optional[Tuple[float, float]] = None,
                  policy=GuidancePolicy.NEAREST) -> Optional[Region]:
    """
    Pick one incomplete region from ``regions`` (in discovery order).

    Every policy breaks ties in favour of the earlier region.
    """
    policy = GuidancePolicy.parse(policy)
    candidates: List[Region] = [
        region for region in regions if region and not is_complete(region, completed)
    ]
    if not candidates:
        return None

    if policy is GuidancePolicy.LARGEST:
        best = candidates[0]
        for region in candidates[1:]:
            if len(region) > len(best):
                best = region
        return best

    if policy is GuidancePolicy.EDGE_FIRST:
        for region in candidates:
            if region.touches_edge(grid):
                return region
        return candidates[0]

    if reference is None:
        reference = default_reference(grid)
    best, best_distance = candidates[0], _distance_to(candidates[0], reference)
    for region in candidates[1:]:
        distance = _distance_to(region, reference)
        if distance < best_distance:
            best, best_distance = region, distance
    return best


def recommend_next_region(grid: PatternGrid, key: str,
                          completed: AbstractSet[Tuple[int, int]],
                          reference: Optional[Tuple[float, float]] = None,
                          policy=GuidancePolicy.NEAREST) -> Optional[Recommendation]:
    """
    Recommend the next region of ``key`` to work on.

    Args:
        grid: Pattern grid
        key: Color key currently being placed
        completed: Coordinates already done
        reference: Last clicked cell; defaults to the grid center
        policy: NEAREST, LARGEST or EDGE_FIRST (enum or its string value)

    Returns:
        Recommendation, or None once every region of ``key`` is complete
    """
    region = choose_region(regions_of(grid, key), completed, grid, reference, policy)
    if region is None:
        return None
    return Recommendation(region, region.center)
