"""Tile geometry for room planning.

Areas are either a rectangle (origin + size) or an explicit tile set for
irregular rooms.  The perimeter of an area is every tile outside it that
touches it under the chosen adjacency.

Pure Python, no world access.  Everything here is safe to call from any
thread for dry-run evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Union


class Tile(NamedTuple):
    """A cell on the world tile grid."""
    x: int
    y: int


# ---------------------------------------------------------------------------
# Adjacency
# ---------------------------------------------------------------------------

ORTHOGONAL_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, -1),   # N
    (0, 1),    # S
    (1, 0),    # E
    (-1, 0),   # W
)

DIAGONAL_OFFSETS: tuple[tuple[int, int], ...] = (
    (1, -1),   # NE
    (-1, -1),  # NW
    (1, 1),    # SE
    (-1, 1),   # SW
)


class Adjacency(Enum):
    FOUR = "4"
    EIGHT = "8"

    @property
    def offsets(self) -> tuple[tuple[int, int], ...]:
        if self is Adjacency.FOUR:
            return ORTHOGONAL_OFFSETS
        return ORTHOGONAL_OFFSETS + DIAGONAL_OFFSETS


def neighbors(tile: tuple[int, int], adjacency: Adjacency = Adjacency.EIGHT) -> list[Tile]:
    x, y = tile
    return [Tile(x + dx, y + dy) for dx, dy in adjacency.offsets]


def bounding_box(tiles: Iterable[tuple[int, int]]) -> tuple[int, int, int, int]:
    """Return inclusive (min_x, min_y, max_x, max_y) of a non-empty tile collection."""
    xs: list[int] = []
    ys: list[int] = []
    for x, y in tiles:
        xs.append(x)
        ys.append(y)
    if not xs:
        raise ValueError("bounding_box() of an empty tile collection")
    return min(xs), min(ys), max(xs), max(ys)


# ---------------------------------------------------------------------------
# Areas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RectArea:
    """A rectangular placement area.  ``bounds()`` is inclusive on both ends."""
    origin_x: int
    origin_y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"RectArea needs a positive size, got {self.width}x{self.height}"
            )

    @classmethod
    def centered(cls, center_x: int, center_y: int, width: int, height: int) -> RectArea:
        """Build the rectangle the console commands describe by its center tile."""
        return cls(center_x - width // 2, center_y - height // 2, width, height)

    @property
    def origin(self) -> Tile:
        return Tile(self.origin_x, self.origin_y)

    @property
    def min_x(self) -> int:
        return self.origin_x

    @property
    def min_y(self) -> int:
        return self.origin_y

    @property
    def max_x(self) -> int:
        return self.origin_x + self.width - 1

    @property
    def max_y(self) -> int:
        return self.origin_y + self.height - 1

    def bounds(self) -> tuple[int, int, int, int]:
        return self.min_x, self.min_y, self.max_x, self.max_y

    def contains(self, tile: tuple[int, int]) -> bool:
        x, y = tile
        return (self.origin_x <= x < self.origin_x + self.width
                and self.origin_y <= y < self.origin_y + self.height)

    def tiles(self) -> list[Tile]:
        return [
            Tile(x, y)
            for y in range(self.origin_y, self.origin_y + self.height)
            for x in range(self.origin_x, self.origin_x + self.width)
        ]

    def __len__(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class TileSetArea:
    """An irregular area given as an explicit set of tiles."""
    tile_set: frozenset[Tile]

    def __post_init__(self):
        if not self.tile_set:
            raise ValueError("TileSetArea needs at least one tile")

    @classmethod
    def from_tiles(cls, tiles: Iterable[tuple[int, int]]) -> TileSetArea:
        """Build from any iterable of (x, y) pairs, rejecting duplicates."""
        listed = [Tile(int(x), int(y)) for x, y in tiles]
        unique = frozenset(listed)
        if len(unique) != len(listed):
            raise ValueError("TileSetArea tiles must not contain duplicates")
        return cls(unique)

    @property
    def min_x(self) -> int:
        return self.bounds()[0]

    @property
    def min_y(self) -> int:
        return self.bounds()[1]

    @property
    def max_x(self) -> int:
        return self.bounds()[2]

    @property
    def max_y(self) -> int:
        return self.bounds()[3]

    @property
    def origin(self) -> Tile:
        min_x, min_y, _, _ = self.bounds()
        return Tile(min_x, min_y)

    @property
    def width(self) -> int:
        min_x, _, max_x, _ = self.bounds()
        return max_x - min_x + 1

    @property
    def height(self) -> int:
        _, min_y, _, max_y = self.bounds()
        return max_y - min_y + 1

    def bounds(self) -> tuple[int, int, int, int]:
        return bounding_box(self.tile_set)

    def contains(self, tile: tuple[int, int]) -> bool:
        return Tile(*tile) in self.tile_set

    def tiles(self) -> list[Tile]:
        return sorted(self.tile_set, key=lambda t: (t.y, t.x))

    def __len__(self) -> int:
        return len(self.tile_set)


Area = Union[RectArea, TileSetArea]


# ---------------------------------------------------------------------------
# Perimeter
# ---------------------------------------------------------------------------

def perimeter_tiles(area: Area, adjacency: Adjacency = Adjacency.EIGHT) -> list[Tile]:
    """Edge tiles of *area* in row-major scan order.

    Scans the bounding box grown by one tile on every side.  A scanned tile
    is an edge tile iff it lies outside the area and at least one of its
    neighbors (under *adjacency*) lies inside.
    """
    min_x, min_y, max_x, max_y = area.bounds()
    offsets = adjacency.offsets
    edge: list[Tile] = []
    for y in range(min_y - 1, max_y + 2):
        for x in range(min_x - 1, max_x + 2):
            if area.contains((x, y)):
                continue
            if any(area.contains((x + dx, y + dy)) for dx, dy in offsets):
                edge.append(Tile(x, y))
    return edge


def perimeter(area: Area, adjacency: Adjacency = Adjacency.EIGHT) -> frozenset[Tile]:
    return frozenset(perimeter_tiles(area, adjacency))


def area_center(area: Area) -> tuple[float, float]:
    """Midpoint of the area's bounding box (may fall between tiles)."""
    min_x, min_y, max_x, max_y = area.bounds()
    return (min_x + max_x) / 2, (min_y + max_y) / 2
