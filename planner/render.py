"""Text rendering and dict export of room plans."""

from __future__ import annotations

from planner.geometry import bounding_box
from planner.room_plan import RoomPlan

WALL_CHAR = "#"
DOOR_CHAR = "D"
FURNITURE_CHAR = "F"
FLOOR_CHAR = "."
EMPTY_CHAR = " "


def render_ascii(plan: RoomPlan) -> str:
    """Draw the plan on a character grid, top row first.

    ``#`` wall, ``D`` door, ``F`` furniture, ``.`` free floor.  Perimeter
    tiles of an unwalled room are left blank.
    """
    tiles = list(plan.area.tiles()) + list(plan.perimeter)
    min_x, min_y, max_x, max_y = bounding_box(tiles)
    rows = []
    for y in range(min_y, max_y + 1):
        row = []
        for x in range(min_x, max_x + 1):
            t = (x, y)
            if plan.door_tile is not None and t == plan.door_tile:
                row.append(DOOR_CHAR)
            elif t in plan.wall_tiles:
                row.append(WALL_CHAR)
            elif t in plan.occupied_tiles:
                row.append(FURNITURE_CHAR)
            elif plan.area.contains(t):
                row.append(FLOOR_CHAR)
            else:
                row.append(EMPTY_CHAR)
        rows.append("".join(row).rstrip())
    return "\n".join(rows)


def plan_to_dict(plan: RoomPlan) -> dict:
    """JSON-friendly summary of a plan."""
    min_x, min_y, max_x, max_y = plan.area.bounds()
    return {
        "room_type": plan.room_type,
        "area": {
            "x": min_x,
            "y": min_y,
            "width": plan.area.width,
            "height": plan.area.height,
            "tiles": len(plan.area),
        },
        "material": str(plan.material),
        "upgrade": plan.upgrade,
        "preferred_side": plan.preferred_side.value,
        "walled": plan.walled,
        "variants": {
            name: {"size_index": v.size_index, "width": v.width, "height": v.height}
            for name, v in plan.variants.items()
        },
        "placements": [[p.origin.x, p.origin.y] for p in plan.placements],
        "furniture": {name: len(plan.placements_for(name)) for name in plan.variants},
        "occupied_tiles": len(plan.occupied_tiles),
        "door_tile": list(plan.door_tile) if plan.door_tile is not None else None,
        "wall_tiles": len(plan.wall_tiles),
        "enclosed": plan.enclosed,
    }
