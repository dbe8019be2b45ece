"""Turn a RoomPlan into a closed-over batch of world commands.

The batch is built off-tick from pure data and handed to the tick executor
as one unit.  It can also be rendered as a readable command script, which
is what the console prints for a dry run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from planner.furniture import Placement
from planner.geometry import Area
from planner.room_plan import RoomPlan
from planner.walls import BuildCommand, build_commands


@dataclass(frozen=True)
class CommandBatch:
    """Everything one commit will submit, in submission order."""
    area: Area
    room_type: str
    material: Any
    upgrade: int
    placements: tuple[Placement, ...]
    opening_op: Optional[BuildCommand]
    wall_ops: tuple[BuildCommand, ...]
    walled: bool
    door_tile: Optional[tuple[int, int]] = None
    notes: tuple[str, ...] = field(default=())

    @classmethod
    def from_plan(cls, plan: RoomPlan) -> CommandBatch:
        notes = []
        if plan.walled:
            walls, opening = build_commands(plan.perimeter, plan.door_tile, plan.material)
            if opening is None:
                notes.append("no door candidate: room will be fully enclosed")
        else:
            walls, opening = [], None
        for name in plan.empty_groups():
            v = plan.variants[name]
            notes.append(f"{name} {v.width}x{v.height} does not fit the area")
        return cls(
            area=plan.area,
            room_type=plan.room_type,
            material=plan.material,
            upgrade=plan.upgrade,
            placements=plan.placements,
            opening_op=opening,
            wall_ops=tuple(walls),
            walled=plan.walled,
            door_tile=plan.door_tile,
            notes=tuple(notes),
        )

    @property
    def op_count(self) -> int:
        # reserve + furniture + opening + walls + commit + release
        return 3 + len(self.placements) + len(self.wall_ops) + (1 if self.opening_op else 0)

    def script(self) -> str:
        """Human-readable listing of the batch, one command per line."""
        lines = [f"# {self.room_type} at {_area_label(self.area)} ({self.material}, upgrade {self.upgrade})"]
        lines.append(f"reserve-area {_area_label(self.area)}")
        for p in self.placements:
            lines.append(
                f"place-furniture {p.origin.x} {p.origin.y} {p.group or '-'} "
                f"size={p.item.size_index} ({p.item.width}x{p.item.height})"
            )
        if self.opening_op is not None:
            t = self.opening_op.tile
            lines.append(f"build-opening {t.x} {t.y} {self.material}")
        for cmd in self.wall_ops:
            lines.append(f"build-wall {cmd.tile.x} {cmd.tile.y} {self.material}")
        lines.append(f"commit-construction {self.room_type} upgrade={self.upgrade}")
        lines.append("release-reservation")
        for note in self.notes:
            lines.append(f"# NOTE: {note}")
        return "\n".join(lines)


def _area_label(area: Area) -> str:
    min_x, min_y, _, _ = area.bounds()
    return f"({min_x},{min_y}) {area.width}x{area.height}"
