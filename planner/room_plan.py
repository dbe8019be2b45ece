"""Room plans: the fully computed result of planning, before commit.

Planning chains the pure pieces:
  perimeter -> variant + layout per furniture group -> occupied set
  -> door -> walls

A RoomPlan is frozen and has no identity; it is built fresh per request and
thrown away once its commands reach the world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Any, Iterable, Mapping, Optional, Sequence

from planner.doors import Side, select_door
from planner.furniture import (
    FurnitureVariant,
    Placement,
    centered_placement,
    entrance_tiles,
    layout,
    merge_groups,
    occupied_tiles,
    restrict_variants,
    select_variant,
)
from planner.geometry import Adjacency, Area, Tile, perimeter_tiles
from planner.errors import PreconditionError
from planner.room_types import CENTER, GRID, FurnitureGroup, RoomType


@dataclass(frozen=True)
class RoomPlan:
    area: Area
    room_type: str
    material: Any
    upgrade: int
    preferred_side: Side
    walled: bool
    variants: dict[str, FurnitureVariant]     # selected variant per group
    placements: tuple[Placement, ...]
    occupied_tiles: frozenset[Tile]
    perimeter: tuple[Tile, ...]               # row-major enumeration order
    door_tile: Optional[Tile]
    wall_tiles: frozenset[Tile]
    entrance_tiles: frozenset[Tile] = frozenset()
    metadata: dict = field(default_factory=dict, compare=False)

    @property
    def enclosed(self) -> bool:
        """Walled with no entrance.  Almost never what the caller wants."""
        return self.walled and self.door_tile is None

    def placements_for(self, group: str) -> list[Placement]:
        return [p for p in self.placements if p.group == group]

    def empty_groups(self) -> list[str]:
        """Groups that got a variant but no placement (nothing fits)."""
        return [name for name in self.variants if not self.placements_for(name)]


def _group_placements(
    area: Area,
    room_type: RoomType,
    group: FurnitureGroup,
    candidates: Sequence[FurnitureVariant],
    positions: Optional[Iterable[tuple[int, int]]],
) -> tuple[FurnitureVariant, list[Placement]]:
    allowed = restrict_variants(candidates, group.allowed_sizes)
    if not allowed:
        raise PreconditionError(
            f"No {group.name} variants available for {room_type.key}; "
            f"is the room type initialised?"
        )
    variant = select_variant(area, allowed)
    if positions is not None:
        return variant, [Placement(Tile(*pos), variant) for pos in positions]
    if group.mode == GRID:
        return variant, layout(area, variant)
    if group.mode == CENTER:
        return variant, centered_placement(area, variant)
    raise PreconditionError(f"Unknown furniture mode '{group.mode}'")


def _plan_furniture(
    area: Area,
    room_type: RoomType,
    candidates: Mapping[str, Sequence[FurnitureVariant]],
    positions: Optional[Mapping[str, Iterable[tuple[int, int]]]] = None,
) -> tuple[dict[str, FurnitureVariant], list[Placement]]:
    positions = positions or {}
    for name in positions:
        room_type.group(name)  # unknown group names fail here

    variants: dict[str, FurnitureVariant] = {}
    groups = []
    for group in room_type.furniture:
        variant, placements = _group_placements(
            area, room_type, group, candidates.get(group.name, ()),
            positions.get(group.name),
        )
        variants[group.name] = variant
        groups.append((group.name, placements, group.limit))
    return variants, merge_groups(groups)


def build_plan(
    area: Area,
    room_type: RoomType,
    candidates: Mapping[str, Sequence[FurnitureVariant]],
    preferred_side: "Side | str",
    material: Any,
    upgrade: int = 0,
    entrance_hints: Optional[AbstractSet[tuple[int, int]]] = None,
    positions: Optional[Mapping[str, Iterable[tuple[int, int]]]] = None,
) -> RoomPlan:
    """Compute a RoomPlan.  No side effects.

    *candidates* maps each furniture group name to its catalog variants.
    *positions* optionally fixes the item origins of some groups instead
    of laying them out.  Without *entrance_hints*, the placed items' own
    entrance tiles are used when they declare any.
    """
    side = Side.parse(preferred_side)
    variants, placements = _plan_furniture(area, room_type, candidates, positions)
    occupied = occupied_tiles(placements)
    entrances = entrance_tiles(placements)
    edge = tuple(perimeter_tiles(area, Adjacency.EIGHT))

    if entrance_hints is None and entrances:
        entrance_hints = entrances

    door: Optional[Tile] = None
    walls: frozenset[Tile] = frozenset()
    if room_type.walled:
        door = select_door(area, occupied, side, entrance_hints)
        walls = frozenset(t for t in edge if t != door)

    metadata = {
        "placement_count": len(placements),
        "free_interior": len(area) - len(occupied & frozenset(area.tiles())),
        "variant_fits": {name: v.fits(area) for name, v in variants.items()},
    }
    return RoomPlan(
        area=area,
        room_type=room_type.key,
        material=material,
        upgrade=upgrade,
        preferred_side=side,
        walled=room_type.walled,
        variants=variants,
        placements=tuple(placements),
        occupied_tiles=occupied,
        perimeter=edge,
        door_tile=door,
        wall_tiles=walls,
        entrance_tiles=entrances,
        metadata=metadata,
    )
