"""Wall and opening commands for a room perimeter.

Every perimeter tile except the door gets a wall; the door tile gets an
opening (a roofed gap with no wall).  Commands are plain data so they can
be computed off-tick and applied later inside the tick callback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from planner.errors import PlacementRejected
from planner.geometry import Tile

log = logging.getLogger(__name__)

WALL = "wall"
OPENING = "opening"


@dataclass(frozen=True)
class BuildCommand:
    kind: str            # "wall" or "opening"
    tile: Tile
    material: Any


@dataclass
class WallReport:
    """What the world accepted when the commands were applied."""
    walls_built: list[Tile] = field(default_factory=list)
    walls_skipped: list[Tile] = field(default_factory=list)
    opening_built: Optional[Tile] = None
    opening_skipped: Optional[Tile] = None

    @property
    def skipped_count(self) -> int:
        return len(self.walls_skipped) + (1 if self.opening_skipped else 0)


def build_commands(
    perimeter_tiles: Iterable[tuple[int, int]],
    door_tile: Optional[tuple[int, int]],
    material: Any,
) -> tuple[list[BuildCommand], Optional[BuildCommand]]:
    """Split the perimeter into wall commands and at most one opening.

    With no door every perimeter tile gets a wall (a fully enclosed room).
    """
    door = Tile(*door_tile) if door_tile is not None else None
    walls = [
        BuildCommand(WALL, Tile(*t), material)
        for t in perimeter_tiles
        if door is None or Tile(*t) != door
    ]
    opening = BuildCommand(OPENING, door, material) if door is not None else None
    return walls, opening


def _try_build(world, cmd: BuildCommand) -> bool:
    if cmd.kind == OPENING:
        if not world.can_build_opening(cmd.tile):
            return False
        build = world.build_opening
    else:
        if not world.can_build_wall(cmd.tile):
            return False
        build = world.build_wall
    try:
        result = build(cmd.tile, cmd.material)
    except PlacementRejected as e:
        log.debug("%s skipped: %s", cmd.kind, e)
        return False
    return bool(result)


def apply_commands(
    world,
    wall_ops: Iterable[BuildCommand],
    opening_op: Optional[BuildCommand],
) -> WallReport:
    """Submit the opening, then the walls.

    A tile the world cannot build on is skipped, never retried.  If the
    opening is refused the door gap is left with neither wall nor opening.
    Any exception other than PlacementRejected propagates to the caller.
    """
    report = WallReport()
    if opening_op is not None:
        if _try_build(world, opening_op):
            report.opening_built = opening_op.tile
        else:
            report.opening_skipped = opening_op.tile
            log.warning("Door opening at %s refused; gap left open", tuple(opening_op.tile))

    for cmd in wall_ops:
        if _try_build(world, cmd):
            report.walls_built.append(cmd.tile)
        else:
            report.walls_skipped.append(cmd.tile)

    if report.walls_skipped:
        log.info("Skipped %d wall tile(s) the world could not build", len(report.walls_skipped))
    return report
