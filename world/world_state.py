"""Capability interfaces between the planner and the live world.

The planner never touches engine objects directly.  Everything it reads or
mutates goes through a WorldStateAccessor, and furniture sizes come from a
FurnitureCatalog.  ``world.memory_world`` provides the in-process
implementation used for dry runs and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from planner.furniture import FurnitureVariant
from planner.geometry import Area


@dataclass(frozen=True)
class Result:
    """Outcome of a single world mutation."""
    ok: bool
    message: str = ""
    data: dict = field(default_factory=dict)

    @classmethod
    def success(cls, message: str = "", **data) -> Result:
        return cls(True, message, data)

    @classmethod
    def failure(cls, message: str, **data) -> Result:
        return cls(False, message, data)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class ReservationHandle:
    """Scratch reservation of an area ("about to be built", not committed)."""
    name: str
    area: Any


@dataclass(frozen=True)
class AreaObstructions:
    """What currently blocks an area."""
    entities: tuple = ()
    furniture: tuple = ()
    constructions: tuple = ()

    @property
    def clear(self) -> bool:
        return not (self.entities or self.furniture or self.constructions)

    def describe(self) -> str:
        issues = []
        if self.entities:
            issues.append(f"{len(self.entities)} entities present")
        if self.furniture:
            issues.append(f"{len(self.furniture)} furniture items present")
        if self.constructions:
            issues.append(f"{len(self.constructions)} construction sites present")
        return ", ".join(issues) or "clear"


@runtime_checkable
class WorldStateAccessor(Protocol):
    def tile_inside_area(self, tile: tuple[int, int], area: Area) -> bool: ...

    def can_build_wall(self, tile: tuple[int, int]) -> bool: ...

    def can_build_opening(self, tile: tuple[int, int]) -> bool: ...

    def build_wall(self, tile: tuple[int, int], material: Any) -> Result: ...

    def build_opening(self, tile: tuple[int, int], material: Any) -> Result: ...

    def reserve_area(self, area: Area) -> ReservationHandle: ...

    def release_reservation(self, handle: ReservationHandle) -> None: ...

    def place_furniture(self, tile: tuple[int, int], item: FurnitureVariant,
                        handle: ReservationHandle) -> Result: ...

    def commit_construction(self, area: Area, material: Any, upgrade: int) -> Result: ...

    def area_obstructions(self, area: Area) -> AreaObstructions: ...


@runtime_checkable
class FurnitureCatalog(Protocol):
    def variants_for(self, room_type: str, group: int = 0) -> list[FurnitureVariant]: ...
