"""System prompt and tool definitions for the room planning console."""

SYSTEM_PROMPT = """\
You are a colony builder's assistant. You plan and build rooms in a tile-based \
colony world by calling the provided tools.

COORDINATES: Tiles are integer (x, y) pairs. x grows to the right, y grows \
downwards. A room area is given by its top-left tile and its width and height \
in tiles. If the user gives a center tile instead, set "centered" to true.

ROOM TYPES:
- STOCKPILE (warehouse): crates on a grid, no walls.
- JANITOR (maintenance station): one workbench on the top row, tool racks on a
  grid below it, walled, one door.
- HOME: one bed set centered, walled, one door.
- HEARTH: one fire pit centered, no walls. Needs at least a 6x6 area.
- WELL: exactly 3x3 and STONE only, no walls.
- FARM_VEG and REFINER_SMELTER: the area only, no furniture, no walls.

HOW TO WORK:
1. Call plan_room first. It never changes the world. Read the result: the \
number of furniture placements, the door tile and the wall count.
2. If the plan looks wrong (no furniture fits, no door), tell the user and \
suggest a bigger area or a different door side before building anything.
3. Use area_status to check an area is clear before committing. Use \
find_clear_area when the user asks for "somewhere" in a region.
4. Call commit_room only when the user asked to build. Report the furniture \
and walls that were skipped, if any.

DOOR SIDE: top, bottom, left or right. Default top. The planner picks the \
tile closest to the middle of that side that opens onto free floor.

Keep replies short. Give coordinates as (x, y).
"""

_AREA_PROPERTIES = {
    "x": {"type": "integer", "description": "Top-left tile x (or center x if centered)."},
    "y": {"type": "integer", "description": "Top-left tile y (or center y if centered)."},
    "width": {"type": "integer", "description": "Area width in tiles."},
    "height": {"type": "integer", "description": "Area height in tiles."},
    "centered": {
        "type": "boolean",
        "description": "Treat x, y as the center tile. Default false.",
        "default": False,
    },
}

TOOL_DEFINITIONS = [
    {
        "name": "list_room_types",
        "description": "List the room types the planner can build with their rules.",
        "input_schema": {"type": "object", "properties": {}},
    },
    {
        "name": "plan_room",
        "description": (
            "Plan a room without touching the world. Returns the furniture "
            "placements, the door tile and the wall count. The plan is kept "
            "as the current plan for render_plan and commit_room."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                **_AREA_PROPERTIES,
                "room_type": {
                    "type": "string",
                    "description": "Room type key, e.g. JANITOR, HOME, WELL.",
                },
                "preferred_side": {
                    "type": "string",
                    "enum": ["top", "bottom", "left", "right"],
                    "description": "Side the door should be on. Default top.",
                    "default": "top",
                },
                "material": {
                    "type": "string",
                    "description": "Building material, e.g. WOOD or STONE. Default per room type.",
                },
                "upgrade": {
                    "type": "integer",
                    "description": "Upgrade level. Default 0.",
                    "default": 0,
                },
                "positions": {
                    "type": "object",
                    "description": (
                        "Optional explicit item origins per furniture group, e.g. "
                        '{"workbench": [[100, 100]]}. Other groups are laid out automatically.'
                    ),
                    "additionalProperties": {
                        "type": "array",
                        "items": {"type": "array", "items": {"type": "integer"}},
                    },
                },
            },
            "required": ["x", "y", "width", "height", "room_type"],
        },
    },
    {
        "name": "render_plan",
        "description": (
            "Draw the current plan as text: # wall, D door, F furniture, . floor."
        ),
        "input_schema": {"type": "object", "properties": {}},
    },
    {
        "name": "commit_room",
        "description": (
            "Build the current plan in the world on the next tick. Fails if "
            "the area has settlers, furniture or construction sites on it "
            "unless require_clear is false."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "require_clear": {
                    "type": "boolean",
                    "description": "Refuse to build on an obstructed area. Default true.",
                    "default": True,
                },
            },
        },
    },
    {
        "name": "area_status",
        "description": "Report what currently blocks an area (settlers, furniture, constructions).",
        "input_schema": {
            "type": "object",
            "properties": dict(_AREA_PROPERTIES),
            "required": ["x", "y", "width", "height"],
        },
    },
    {
        "name": "find_clear_area",
        "description": (
            "Search a region for the first clear width x height area. "
            "Returns its top-left tile or null."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                **_AREA_PROPERTIES,
                "room_width": {"type": "integer", "description": "Wanted area width."},
                "room_height": {"type": "integer", "description": "Wanted area height."},
                "spacing": {
                    "type": "integer",
                    "description": "Search step in tiles. Default 5.",
                    "default": 5,
                },
            },
            "required": ["x", "y", "width", "height", "room_width", "room_height"],
        },
    },
]
