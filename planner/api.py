"""RoomPlanner: the entry point consoles use to plan and commit rooms.

``plan_room`` is pure and may be called from any thread.  ``commit_room``
validates synchronously and then hands the work to the tick executor; the
returned Future resolves to a CommitReport once the tick has run.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import AbstractSet, Any, Iterable, Mapping, Optional

from config import CLEAR_AREA_SEARCH_SPACING, DEFAULT_PREFERRED_SIDE, DEFAULT_UPGRADE
from planner.doors import Side
from planner.errors import PreconditionError
from planner.geometry import Area, RectArea
from planner.orchestrator import CommitReport, RoomConstructionOrchestrator
from planner.room_plan import RoomPlan, build_plan
from planner.room_types import RoomType, check_preconditions, get_room_type

log = logging.getLogger(__name__)


class RoomPlanner:
    """Plans rooms from a furniture catalog and commits them to a world."""

    def __init__(self, catalog, world=None, executor=None,
                 registry: Optional[dict[str, RoomType]] = None):
        self.catalog = catalog
        self.world = world
        self.executor = executor
        self.registry = registry
        self.orchestrator = (
            RoomConstructionOrchestrator(world, executor) if world is not None else None
        )

    # === Planning ===========================================================

    def room_type(self, key: str) -> RoomType:
        return get_room_type(key, self.registry)

    def plan_room(
        self,
        area: Area,
        room_type: str,
        preferred_side: "Side | str" = DEFAULT_PREFERRED_SIDE,
        material: Any = None,
        upgrade: int = DEFAULT_UPGRADE,
        entrance_hints: Optional[AbstractSet[tuple[int, int]]] = None,
        positions: Optional[Mapping[str, Iterable[tuple[int, int]]]] = None,
    ) -> RoomPlan:
        """Compute a RoomPlan for *room_type* over *area*.  No side effects.

        *positions* maps furniture group names (e.g. ``"workbench"``) to
        explicit item origins, replacing the computed layout for that group.
        """
        rtype = self.room_type(room_type)
        if material is None:
            material = rtype.default_material
        check_preconditions(rtype, area, material)

        candidates = {
            g.name: self.catalog.variants_for(rtype.key, g.index) for g in rtype.furniture
        }
        plan = build_plan(
            area, rtype, candidates, preferred_side, material,
            upgrade=upgrade, entrance_hints=entrance_hints, positions=positions,
        )
        log.info(
            "Planned %s at %s: %d furniture, door=%s, %d walls",
            rtype.key, tuple(area.origin), len(plan.placements),
            tuple(plan.door_tile) if plan.door_tile else None, len(plan.wall_tiles),
        )
        return plan

    # === Commit =============================================================

    def _require_world(self):
        if self.world is None or self.orchestrator is None:
            raise PreconditionError("No world attached; this planner can only dry-run")

    def check_clear(self, area: Area) -> None:
        self._require_world()
        obstructions = self.world.area_obstructions(area)
        if not obstructions.clear:
            raise PreconditionError(f"Area is not clear: {obstructions.describe()}")

    def commit_room(self, plan: RoomPlan, require_clear: bool = True) -> "Future[CommitReport]":
        """Schedule *plan* on the next tick.

        PreconditionError is raised here, before anything is scheduled.
        """
        self._require_world()
        if self.executor is None:
            raise PreconditionError("No tick executor attached")
        if require_clear:
            self.check_clear(plan.area)
        return self.orchestrator.submit(plan)

    def commit_now(self, plan: RoomPlan, require_clear: bool = True) -> CommitReport:
        """Run the pipeline immediately.  Only valid inside a tick or a dry-run world."""
        self._require_world()
        if require_clear:
            self.check_clear(plan.area)
        return self.orchestrator.execute(plan)

    # === Search =============================================================

    def find_clear_area(
        self,
        region: Area,
        width: int,
        height: int,
        spacing: int = CLEAR_AREA_SEARCH_SPACING,
    ) -> Optional[RectArea]:
        """First clear width x height rectangle inside *region*, or None.

        Candidates are tried row-major on a *spacing* grid from the region's
        top-left corner.
        """
        self._require_world()
        if spacing <= 0:
            raise ValueError("spacing must be positive")
        min_x, min_y, max_x, max_y = region.bounds()
        for y in range(min_y, max_y - height + 2, spacing):
            for x in range(min_x, max_x - width + 2, spacing):
                candidate = RectArea(x, y, width, height)
                if not all(region.contains(t) for t in candidate.tiles()):
                    continue
                if self.world.area_obstructions(candidate).clear:
                    log.debug("Clear area found at (%d,%d)", x, y)
                    return candidate
        return None
