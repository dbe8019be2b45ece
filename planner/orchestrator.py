"""Commit a room plan to the world as one unit of work.

Pipeline (linear, no retries):
  1. reserve the area in scratch state
  2. place furniture (must precede the commit: the furniture layer binds
     items to the pending construction record by reference)
  3. take the plan's door tile
  4. build the opening and walls
  5. commit the construction record
  6. release the reservation

Single rejected ops are skipped.  Anything else raised after step 1 becomes
a PartialCommitError; work already applied stays in the world.  The
reservation is always released so later plans are not blocked by it.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from planner.command_batch import CommandBatch
from planner.errors import PartialCommitError, PlacementRejected
from planner.geometry import Tile
from planner.room_plan import RoomPlan
from planner.walls import WallReport, apply_commands

log = logging.getLogger(__name__)


class Stage(str, Enum):
    PENDING = "pending"
    AREA_RESERVED = "area_reserved"
    FURNITURE_PLACED = "furniture_placed"
    DOOR_SELECTED = "door_selected"
    WALLS_BUILT = "walls_built"
    COMMITTED = "committed"
    RELEASED = "released"


@dataclass
class CommitReport:
    room_type: str
    stage: Stage = Stage.PENDING
    furniture_placed: list[Tile] = field(default_factory=list)
    furniture_skipped: list[Tile] = field(default_factory=list)
    door_tile: Optional[Tile] = None
    walls: WallReport = field(default_factory=WallReport)
    committed: bool = False
    released: bool = False
    message: str = ""

    @property
    def skipped_count(self) -> int:
        return len(self.furniture_skipped) + self.walls.skipped_count

    def to_dict(self) -> dict:
        return {
            "room_type": self.room_type,
            "stage": self.stage.value,
            "furniture_placed": len(self.furniture_placed),
            "furniture_skipped": len(self.furniture_skipped),
            "door_tile": list(self.door_tile) if self.door_tile else None,
            "walls_built": len(self.walls.walls_built),
            "walls_skipped": len(self.walls.walls_skipped),
            "opening_built": self.walls.opening_built is not None,
            "committed": self.committed,
            "released": self.released,
            "message": self.message,
        }


class RoomConstructionOrchestrator:
    """Runs command batches against a world, optionally via a tick executor."""

    def __init__(self, world, executor=None):
        self.world = world
        self.executor = executor

    # === Scheduling =========================================================

    def submit(self, plan: RoomPlan) -> "Future[CommitReport]":
        """Schedule *plan* for the next tick.  Returns a Future for the report."""
        if self.executor is None:
            raise RuntimeError("No tick executor configured; call execute() inside a tick")
        batch = CommandBatch.from_plan(plan)
        log.info(
            "Scheduling %s: %d furniture, %d walls, door=%s",
            batch.room_type, len(batch.placements), len(batch.wall_ops),
            tuple(batch.door_tile) if batch.door_tile else None,
        )
        return self.executor.submit(lambda _ds: self.execute(batch))

    # === Pipeline ===========================================================

    def execute(self, batch: "CommandBatch | RoomPlan") -> CommitReport:
        """Run the whole pipeline now.  Call only from inside a tick callback."""
        if isinstance(batch, RoomPlan):
            batch = CommandBatch.from_plan(batch)

        report = CommitReport(room_type=batch.room_type)
        handle = self.world.reserve_area(batch.area)
        report.stage = Stage.AREA_RESERVED

        try:
            self._place_furniture(batch, handle, report)
            report.stage = Stage.FURNITURE_PLACED

            report.door_tile = Tile(*batch.door_tile) if batch.door_tile else None
            if batch.walled and report.door_tile is None:
                log.warning(
                    "%s has no reachable door tile; building a fully enclosed room",
                    batch.room_type,
                )
            report.stage = Stage.DOOR_SELECTED

            if batch.walled:
                report.walls = apply_commands(self.world, batch.wall_ops, batch.opening_op)
            report.stage = Stage.WALLS_BUILT

            result = self.world.commit_construction(batch.area, batch.material, batch.upgrade)
            if not result:
                raise RuntimeError(f"construction record refused: {result.message}")
            report.committed = True
            report.stage = Stage.COMMITTED
        except Exception as e:
            report.message = str(e)
            log.error("Commit of %s failed after %s: %s", batch.room_type, report.stage.value, e)
            raise PartialCommitError(report.stage, report, e) from e
        finally:
            self.world.release_reservation(handle)
            report.released = True

        report.stage = Stage.RELEASED
        log.info(
            "Committed %s: furniture %d placed / %d skipped, walls %d built / %d skipped",
            batch.room_type,
            len(report.furniture_placed), len(report.furniture_skipped),
            len(report.walls.walls_built), len(report.walls.walls_skipped),
        )
        return report

    def _place_furniture(self, batch: CommandBatch, handle, report: CommitReport):
        for p in batch.placements:
            try:
                result = self.world.place_furniture(p.origin, p.item, handle)
            except PlacementRejected as e:
                log.debug("Furniture skipped: %s", e)
                report.furniture_skipped.append(p.origin)
                continue
            if result:
                report.furniture_placed.append(p.origin)
            else:
                log.debug("Furniture at %s skipped: %s", tuple(p.origin), result.message)
                report.furniture_skipped.append(p.origin)
