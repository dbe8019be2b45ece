"""Furniture variant selection and grid layout inside a room area.

Furniture groups come in a short list of discrete sizes.  The planner picks
the largest size that fits the room, then tiles copies of it across the
area on a spacing grid that always leaves a one-tile walkway between items.
Rooms with several furniture groups (workbench + tool racks) lay each group
out in turn; later groups give way to earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from config import MIN_FURNITURE_SPACING
from planner.geometry import Area, Tile, TileSetArea

# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FurnitureVariant:
    """One selectable size of a furniture group.

    ``entrances`` lists the item's wall-free tiles as offsets from its
    top-left corner.  A door next to one of them is always reachable.
    """
    size_index: int
    width: int
    height: int
    entrances: tuple[tuple[int, int], ...] = ()

    @property
    def area(self) -> int:
        return self.width * self.height

    def fits(self, area: Area) -> bool:
        return self.width <= area.width and self.height <= area.height


@dataclass(frozen=True)
class Placement:
    """A furniture item anchored at its top-left tile."""
    origin: Tile
    item: FurnitureVariant
    group: str = ""

    def footprint(self, item: Optional[FurnitureVariant] = None) -> list[Tile]:
        it = item or self.item
        ox, oy = self.origin
        return [
            Tile(ox + dx, oy + dy)
            for dy in range(it.height)
            for dx in range(it.width)
        ]

    def entrance_tiles(self) -> list[Tile]:
        ox, oy = self.origin
        return [Tile(ox + dx, oy + dy) for dx, dy in self.item.entrances]


# ---------------------------------------------------------------------------
# Variant selection
# ---------------------------------------------------------------------------

def select_variant(area: Area, candidates: Sequence[FurnitureVariant]) -> FurnitureVariant:
    """Largest-index variant that fits *area*, else the smallest-index one.

    The fallback never fails even though the returned variant may not fit;
    callers then get an empty layout rather than an error.
    """
    if not candidates:
        raise ValueError("select_variant() needs at least one candidate")
    fitting = [c for c in candidates if c.fits(area)]
    if not fitting:
        return min(candidates, key=lambda c: c.size_index)
    return max(fitting, key=lambda c: c.size_index)


def restrict_variants(
    candidates: Iterable[FurnitureVariant],
    allowed_size_indices: Optional[Iterable[int]],
) -> list[FurnitureVariant]:
    """Apply an allow-list of size indices.  ``None`` means no restriction."""
    ordered = sorted(candidates, key=lambda c: c.size_index)
    if allowed_size_indices is None:
        return ordered
    allowed = set(allowed_size_indices)
    return [c for c in ordered if c.size_index in allowed]


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def grid_spacing(item: FurnitureVariant) -> tuple[int, int]:
    return (
        max(MIN_FURNITURE_SPACING, item.width + 1),
        max(MIN_FURNITURE_SPACING, item.height + 1),
    )


def _footprint_inside(area: Area, origin: Tile, item: FurnitureVariant) -> bool:
    min_x, min_y, max_x, max_y = area.bounds()
    if origin.x < min_x or origin.y < min_y:
        return False
    if origin.x + item.width > max_x + 1 or origin.y + item.height > max_y + 1:
        return False
    if isinstance(area, TileSetArea):
        return all(area.contains(t) for t in Placement(origin, item).footprint())
    return True


def layout(area: Area, item: FurnitureVariant) -> list[Placement]:
    """Place copies of *item* on a spacing grid, row-major from the top-left.

    The emission order is part of the contract.  Returns an empty list when
    the item does not fit anywhere.
    """
    spacing_x, spacing_y = grid_spacing(item)
    min_x, min_y, max_x, max_y = area.bounds()
    placements: list[Placement] = []
    for y in range(min_y, max_y + 1, spacing_y):
        for x in range(min_x, max_x + 1, spacing_x):
            origin = Tile(x, y)
            if _footprint_inside(area, origin, item):
                placements.append(Placement(origin, item))
    return placements


def centered_placement(area: Area, item: FurnitureVariant) -> list[Placement]:
    """Single item centered in the area (hearths, wells, homes).

    Uses the same integer centering as the console commands: center tile is
    ``origin + size // 2``, item origin is ``center - item_size // 2``.
    """
    min_x, min_y, _, _ = area.bounds()
    cx = min_x + area.width // 2
    cy = min_y + area.height // 2
    origin = Tile(cx - item.width // 2, cy - item.height // 2)
    if not _footprint_inside(area, origin, item):
        return []
    return [Placement(origin, item)]


def occupied_tiles(
    placements: Iterable[Placement],
    item: Optional[FurnitureVariant] = None,
) -> frozenset[Tile]:
    """Union of the footprints of *placements*.

    If *item* is given it overrides each placement's own variant.
    """
    occupied: set[Tile] = set()
    for p in placements:
        occupied.update(p.footprint(item))
    return frozenset(occupied)


def entrance_tiles(placements: Iterable[Placement]) -> frozenset[Tile]:
    """Union of the wall-free entrance tiles of *placements*."""
    tiles: set[Tile] = set()
    for p in placements:
        tiles.update(p.entrance_tiles())
    return frozenset(tiles)


def merge_groups(
    groups: Iterable[tuple[str, Sequence[Placement], Optional[int]]],
) -> list[Placement]:
    """Combine per-group placements into one collision-free list.

    Groups are taken in order, each as ``(name, placements, limit)``.  A
    placement whose footprint touches a tile already taken by an earlier
    placement is dropped, and a group stops after *limit* kept items.
    Kept placements are tagged with their group name.
    """
    taken: set[Tile] = set()
    merged: list[Placement] = []
    for name, placements, limit in groups:
        kept = 0
        for p in placements:
            if limit is not None and kept >= limit:
                break
            footprint = p.footprint()
            if any(t in taken for t in footprint):
                continue
            taken.update(footprint)
            merged.append(Placement(Tile(*p.origin), p.item, name))
            kept += 1
    return merged
