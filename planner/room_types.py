"""Room types the planner knows how to build.

Each entry lists the room's furniture groups and how each is laid out,
whether the room is walled, and any hard constraints the game imposes
(fixed size, required material).  Constraints are checked up front so a
bad request never reaches the world.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import DEFAULT_MATERIAL
from planner.errors import PreconditionError
from planner.geometry import Area, RectArea

# Furniture modes
GRID = "grid"        # tile copies of one item on a spacing grid
CENTER = "center"    # a single item centered in the area


@dataclass(frozen=True)
class FurnitureGroup:
    """One furniture group of a room, in placement order."""
    name: str
    index: int                                # group index in the catalog
    mode: str = GRID
    # Allow-list over the catalog's size indices.  Used where the game data
    # offers sizes the room is not meant to have.
    allowed_sizes: Optional[tuple[int, ...]] = None
    limit: Optional[int] = None               # max items, None = fill the grid


@dataclass(frozen=True)
class RoomType:
    key: str
    label: str
    furniture: tuple[FurnitureGroup, ...]
    walled: bool
    default_material: str = DEFAULT_MATERIAL
    fixed_size: Optional[tuple[int, int]] = None
    required_material: Optional[str] = None

    def group(self, name: str) -> FurnitureGroup:
        for g in self.furniture:
            if g.name == name:
                return g
        raise PreconditionError(
            f"{self.label} has no furniture group '{name}'. "
            f"Groups: {', '.join(g.name for g in self.furniture) or 'none'}"
        )


def _make_room_types() -> dict[str, RoomType]:
    """Standard room definitions."""
    types = [
        RoomType(
            key="STOCKPILE", label="Warehouse",
            furniture=(FurnitureGroup("crate", 0),),
            walled=False,
        ),
        # One workbench along the top row, tool racks in the rows below.
        RoomType(
            key="JANITOR", label="Maintenance station",
            furniture=(
                FurnitureGroup("workbench", 0, limit=1),
                FurnitureGroup("tool_rack", 1),
            ),
            walled=True,
        ),
        RoomType(
            key="HOME", label="Home",
            furniture=(FurnitureGroup("bed", 0, mode=CENTER),),
            walled=True,
        ),
        RoomType(
            key="HEARTH", label="Hearth",
            furniture=(FurnitureGroup("fire_pit", 0, mode=CENTER),),
            walled=False,
        ),
        # The game's constructor lists 3x3, 5x5 and 6x6 wells.  Only the
        # 3x3 one is intended.
        RoomType(
            key="WELL", label="Well",
            furniture=(FurnitureGroup("well", 0, mode=CENTER, allowed_sizes=(0,)),),
            walled=False,
            default_material="STONE",
            fixed_size=(3, 3),
            required_material="STONE",
        ),
        RoomType(
            key="FARM_VEG", label="Vegetable farm",
            furniture=(), walled=False,
        ),
        RoomType(
            key="REFINER_SMELTER", label="Smelter",
            furniture=(), walled=False,
        ),
    ]
    return {t.key: t for t in types}


ROOM_TYPES: dict[str, RoomType] = _make_room_types()

# Console aliases
ALIASES = {
    "WAREHOUSE": "STOCKPILE",
    "MAINTENANCE": "JANITOR",
    "FARM": "FARM_VEG",
    "SMELTER": "REFINER_SMELTER",
}


def get_room_type(key: str, registry: Optional[dict[str, RoomType]] = None) -> RoomType:
    """Look up a room type by key or alias; PreconditionError if unknown."""
    reg = ROOM_TYPES if registry is None else registry
    norm = str(key).strip().upper()
    norm = ALIASES.get(norm, norm)
    room_type = reg.get(norm)
    if room_type is None:
        raise PreconditionError(
            f"Room type '{key}' is not registered. Known: {', '.join(sorted(reg))}"
        )
    return room_type


def check_preconditions(room_type: RoomType, area: Area, material: str) -> None:
    """Raise PreconditionError if *area* / *material* break the type's rules."""
    if room_type.required_material is not None:
        if str(material).upper() != room_type.required_material.upper():
            raise PreconditionError(
                f"{room_type.label} must use {room_type.required_material} material, "
                f"got {material}"
            )
    if room_type.fixed_size is not None:
        fw, fh = room_type.fixed_size
        if not isinstance(area, RectArea) or (area.width, area.height) != (fw, fh):
            raise PreconditionError(
                f"{room_type.label} is fixed at {fw}x{fh}, "
                f"got {area.width}x{area.height}"
            )
