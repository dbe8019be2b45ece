"""In-process world used for dry runs, the console tools and tests.

Tracks walls, openings, furniture, construction records, scratch
reservations and settler entities on a sparse tile grid.  Tiles in
``blocked`` are unbuildable terrain (rock, water).  Individual operations
can be made to fail through ``reject_furniture_at`` / ``reject_walls_at``
(soft rejections) and ``fail_on`` (raise an exception from a named method).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from planner.errors import PlacementRejected
from planner.furniture import FurnitureVariant, Placement
from planner.geometry import Area, Tile
from world.world_state import AreaObstructions, ReservationHandle, Result

log = logging.getLogger(__name__)


@dataclass
class FurnitureRecord:
    origin: Tile
    item: FurnitureVariant
    reservation: str

    @property
    def tiles(self) -> list[Tile]:
        return Placement(self.origin, self.item).footprint()


@dataclass
class ConstructionRecord:
    area: Any
    material: Any
    upgrade: int
    furniture: list[FurnitureRecord] = field(default_factory=list)


class InMemoryWorld:
    """Sparse tile world implementing the WorldStateAccessor protocol."""

    def __init__(
        self,
        blocked: Iterable[tuple[int, int]] = (),
        entities: Iterable[tuple[int, int]] = (),
        reservation_prefix: str = "room_planner",
    ):
        self.blocked: set[Tile] = {Tile(*t) for t in blocked}
        self.entities: set[Tile] = {Tile(*t) for t in entities}
        self.walls: dict[Tile, Any] = {}
        self.openings: dict[Tile, Any] = {}
        self.furniture: list[FurnitureRecord] = []
        self.constructions: list[ConstructionRecord] = []
        self.reservations: dict[str, ReservationHandle] = {}
        self.reservation_prefix = reservation_prefix

        # Failure injection
        self.reject_furniture_at: set[Tile] = set()
        self.reject_walls_at: set[Tile] = set()
        self.fail_on: dict[str, BaseException] = {}

        self.journal: list[tuple] = []

    # === Queries ============================================================

    def tile_inside_area(self, tile: tuple[int, int], area: Area) -> bool:
        return area.contains(tile)

    def furniture_at(self, tile: tuple[int, int]) -> Optional[FurnitureRecord]:
        t = Tile(*tile)
        for rec in self.furniture:
            if t in rec.tiles:
                return rec
        return None

    def _structure_at(self, tile: Tile) -> bool:
        return tile in self.walls or tile in self.openings

    def can_build_wall(self, tile: tuple[int, int]) -> bool:
        t = Tile(*tile)
        return not (
            t in self.blocked
            or self._structure_at(t)
            or self.furniture_at(t) is not None
        )

    def can_build_opening(self, tile: tuple[int, int]) -> bool:
        return self.can_build_wall(tile)

    def area_obstructions(self, area: Area) -> AreaObstructions:
        entities = tuple(sorted(t for t in self.entities if area.contains(t)))
        furniture = tuple(
            rec for rec in self.furniture
            if any(area.contains(t) for t in rec.tiles)
        )
        constructions = tuple(
            rec for rec in self.constructions
            if any(area.contains(t) for t in rec.area.tiles())
        )
        return AreaObstructions(entities, furniture, constructions)

    # === Mutations ==========================================================

    def _maybe_fail(self, op: str):
        exc = self.fail_on.get(op)
        if exc is not None:
            raise exc

    def build_wall(self, tile: tuple[int, int], material: Any) -> Result:
        self._maybe_fail("build_wall")
        t = Tile(*tile)
        if t in self.reject_walls_at:
            raise PlacementRejected(t, "wall rejected")
        if not self.can_build_wall(t):
            return Result.failure(f"cannot build wall at {tuple(t)}")
        self.walls[t] = material
        self.journal.append(("wall", t, material))
        return Result.success()

    def build_opening(self, tile: tuple[int, int], material: Any) -> Result:
        self._maybe_fail("build_opening")
        t = Tile(*tile)
        if not self.can_build_opening(t):
            return Result.failure(f"cannot build opening at {tuple(t)}")
        self.openings[t] = material
        self.journal.append(("opening", t, material))
        return Result.success()

    def reserve_area(self, area: Area) -> ReservationHandle:
        self._maybe_fail("reserve_area")
        name = f"{self.reservation_prefix}_{uuid.uuid4().hex}"
        handle = ReservationHandle(name, area)
        self.reservations[name] = handle
        self.journal.append(("reserve", name))
        log.debug("Reserved %s", name)
        return handle

    def release_reservation(self, handle: ReservationHandle) -> None:
        self.reservations.pop(handle.name, None)
        self.journal.append(("release", handle.name))
        log.debug("Released %s", handle.name)

    def place_furniture(self, tile: tuple[int, int], item: FurnitureVariant,
                        handle: ReservationHandle) -> Result:
        self._maybe_fail("place_furniture")
        t = Tile(*tile)
        if handle.name not in self.reservations:
            return Result.failure(f"reservation {handle.name} is not active")
        if t in self.reject_furniture_at:
            raise PlacementRejected(t, "furniture rejected")
        footprint = Placement(t, item).footprint()
        for ft in footprint:
            if not handle.area.contains(ft):
                return Result.failure(f"tile {tuple(ft)} is outside the reserved area")
            if ft in self.blocked or self._structure_at(ft) or self.furniture_at(ft):
                return Result.failure(f"tile {tuple(ft)} is not free")
        rec = FurnitureRecord(t, item, handle.name)
        self.furniture.append(rec)
        self.journal.append(("furniture", t, item.size_index))
        return Result.success(origin=t)

    def commit_construction(self, area: Area, material: Any, upgrade: int) -> Result:
        self._maybe_fail("commit_construction")
        owned = [
            rec for rec in self.furniture
            if rec.reservation in self.reservations
            and self.reservations[rec.reservation].area == area
        ]
        record = ConstructionRecord(area, material, upgrade, owned)
        self.constructions.append(record)
        self.journal.append(("commit", material, upgrade))
        return Result.success(furniture=len(owned))

    # === Convenience ========================================================

    def journal_kinds(self) -> list[str]:
        return [entry[0] for entry in self.journal]
