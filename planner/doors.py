"""Door selection on a room perimeter.

A door must open onto something walkable: for rectangular rooms that is a
free interior tile (inside the room, no furniture on it); for irregular
rooms it is one of the entrance-hint tiles the furniture layout marks as
wall-free.  Among the qualifying edge tiles the one on the preferred side
and closest to that side's midpoint wins.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import AbstractSet, Iterable, Optional

from config import DOOR_OFF_SIDE_PENALTY
from planner.geometry import (
    Adjacency,
    Area,
    Tile,
    area_center,
    neighbors,
    perimeter_tiles,
)

log = logging.getLogger(__name__)


class Side(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: "str | Side") -> Side:
        if isinstance(value, Side):
            return value
        try:
            return cls(str(value).strip().lower().lstrip(":"))
        except ValueError:
            raise ValueError(
                f"Unknown side {value!r}; expected one of "
                f"{', '.join(s.value for s in cls)}"
            ) from None


def ideal_door_position(area: Area, side: Side) -> tuple[float, float]:
    """Midpoint of *side*, one tile outside the area."""
    min_x, min_y, max_x, max_y = area.bounds()
    cx, cy = area_center(area)
    if side is Side.TOP:
        return cx, min_y - 1
    if side is Side.BOTTOM:
        return cx, max_y + 1
    if side is Side.LEFT:
        return min_x - 1, cy
    return max_x + 1, cy


def is_on_side(tile: tuple[int, int], area: Area, side: Side) -> bool:
    min_x, min_y, max_x, max_y = area.bounds()
    x, y = tile
    if side is Side.TOP:
        return y == min_y - 1
    if side is Side.BOTTOM:
        return y == max_y + 1
    if side is Side.LEFT:
        return x == min_x - 1
    return x == max_x + 1


def door_candidates(
    area: Area,
    edge: Iterable[Tile],
    occupied: AbstractSet[tuple[int, int]] = frozenset(),
    entrance_hints: Optional[AbstractSet[tuple[int, int]]] = None,
) -> list[Tile]:
    """Edge tiles that could hold the door, in *edge* order."""
    if entrance_hints is not None:
        hints = {Tile(*t) for t in entrance_hints}

        def qualifies(tile: Tile) -> bool:
            return any(n in hints for n in neighbors(tile, Adjacency.FOUR))
    else:
        taken = {Tile(*t) for t in occupied}

        def qualifies(tile: Tile) -> bool:
            return any(
                area.contains(n) and n not in taken
                for n in neighbors(tile, Adjacency.FOUR)
            )

    return [t for t in edge if qualifies(t)]


def door_rank(tile: tuple[int, int], area: Area, side: Side) -> float:
    """Lower is better.  Off-side tiles carry DOOR_OFF_SIDE_PENALTY."""
    ix, iy = ideal_door_position(area, side)
    distance = math.hypot(tile[0] - ix, tile[1] - iy)
    if is_on_side(tile, area, side):
        return distance
    return DOOR_OFF_SIDE_PENALTY + distance


def select_door(
    area: Area,
    occupied: AbstractSet[tuple[int, int]] = frozenset(),
    preferred_side: "Side | str" = Side.TOP,
    entrance_hints: Optional[AbstractSet[tuple[int, int]]] = None,
) -> Optional[Tile]:
    """Pick exactly one perimeter tile for the door, or None.

    On-side candidates are ranked by distance to the side's midpoint, which
    is at most half a side length, so they always beat off-side candidates.
    Ties fall back to perimeter enumeration order (row-major), which keeps
    the result deterministic.
    """
    side = Side.parse(preferred_side)
    edge = perimeter_tiles(area, Adjacency.EIGHT)
    candidates = door_candidates(area, edge, occupied, entrance_hints)
    if not candidates:
        log.debug("No door candidate for area %s (side=%s)", area, side.value)
        return None

    # min() keeps the first of equal ranks, i.e. perimeter order.
    return min(candidates, key=lambda t: door_rank(t, area, side))
