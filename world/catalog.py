"""Static furniture catalog.

Sizes mirror the game's construction menus.  Each room type maps to a list
of furniture groups (by group index), each group a list of variants
ascending by size index, which is the order the planner expects.
"""

from __future__ import annotations

import logging
from typing import Optional

from planner.furniture import FurnitureVariant

log = logging.getLogger(__name__)


def _variants(*sizes: tuple[int, int]) -> list[FurnitureVariant]:
    return [FurnitureVariant(i, w, h) for i, (w, h) in enumerate(sizes)]


DEFAULT_VARIANTS: dict[str, list[list[FurnitureVariant]]] = {
    # crate
    "STOCKPILE": [_variants((1, 1))],
    # workbench, tool racks
    "JANITOR": [_variants((5, 1)), _variants((2, 1), (3, 1), (4, 1))],
    # bed + table
    "HOME": [_variants((2, 2), (3, 2), (3, 3))],
    # fire pit, square
    "HEARTH": [_variants((6, 6), (10, 10), (14, 14))],
    # only size 0 is meant to be built; see room_types WELL
    "WELL": [_variants((3, 3), (5, 5), (6, 6))],
}


class StaticFurnitureCatalog:
    """FurnitureCatalog backed by a plain dict of variant lists per group."""

    def __init__(self, variants: Optional[dict[str, list[list[FurnitureVariant]]]] = None):
        source = DEFAULT_VARIANTS if variants is None else variants
        self._groups = {
            key.upper(): [sorted(group, key=lambda v: v.size_index) for group in groups]
            for key, groups in source.items()
        }

    def variants_for(self, room_type: str, group: int = 0) -> list[FurnitureVariant]:
        groups = self._groups.get(str(room_type).upper(), [])
        if not 0 <= group < len(groups):
            log.debug("No furniture group %d for %s", group, room_type)
            return []
        return list(groups[group])
