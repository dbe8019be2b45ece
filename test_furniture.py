"""Tests for furniture variant selection and layout."""
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from planner.furniture import (
    FurnitureVariant,
    Placement,
    centered_placement,
    entrance_tiles,
    grid_spacing,
    layout,
    merge_groups,
    occupied_tiles,
    restrict_variants,
    select_variant,
)
from planner.geometry import RectArea, TileSetArea

TOOL_RACKS = [
    FurnitureVariant(0, 2, 1),
    FurnitureVariant(1, 3, 1),
    FurnitureVariant(2, 4, 1),
]


def test_select_largest_fitting_variant():
    item = select_variant(RectArea(100, 100, 5, 5), TOOL_RACKS)
    assert item.size_index == 2, item
    item = select_variant(RectArea(0, 0, 3, 3), TOOL_RACKS)
    assert item.size_index == 1, item
    print("  PASSED: select_variant picks largest fitting index")


def test_select_variant_fallback_to_smallest():
    """Nothing fits: smallest index comes back anyway."""
    big = [FurnitureVariant(0, 3, 3), FurnitureVariant(1, 5, 5)]
    item = select_variant(RectArea(0, 0, 2, 2), big)
    assert item.size_index == 0
    assert not item.fits(RectArea(0, 0, 2, 2))
    assert layout(RectArea(0, 0, 2, 2), item) == []
    print("  PASSED: select_variant fallback")


def test_select_variant_narrow_areas():
    assert select_variant(RectArea(0, 0, 3, 5), TOOL_RACKS) == FurnitureVariant(1, 3, 1)
    # 1 wide: nothing fits, smallest comes back
    assert select_variant(RectArea(0, 0, 1, 5), TOOL_RACKS) == FurnitureVariant(0, 2, 1)
    print("  PASSED: select_variant on narrow areas")


def test_select_variant_empty_candidates():
    try:
        select_variant(RectArea(0, 0, 5, 5), [])
    except ValueError:
        pass
    else:
        raise AssertionError("empty candidate list should raise ValueError")
    print("  PASSED: select_variant rejects empty candidates")


def test_grid_spacing_floor():
    assert grid_spacing(FurnitureVariant(0, 1, 1)) == (2, 2)
    assert grid_spacing(FurnitureVariant(0, 2, 1)) == (3, 2)
    assert grid_spacing(FurnitureVariant(0, 4, 3)) == (5, 4)
    print("  PASSED: grid spacing keeps a walkway")


def test_layout_5x5_with_2x1():
    """Grid on (100,100) 5x5: columns 100 and 103, rows 100, 102, 104."""
    item = FurnitureVariant(0, 2, 1)
    placements = layout(RectArea(100, 100, 5, 5), item)
    origins = [tuple(p.origin) for p in placements]
    assert origins == [
        (100, 100), (103, 100),
        (100, 102), (103, 102),
        (100, 104), (103, 104),
    ], origins
    occupied = occupied_tiles(placements)
    assert len(occupied) == 12
    assert (102, 100) not in occupied, "walkway column stays free"
    assert (100, 101) not in occupied, "walkway row stays free"
    print("  PASSED: 5x5 layout with 2x1 item")


def test_layout_stays_inside_area():
    area = RectArea(0, 0, 7, 4)
    for item in TOOL_RACKS + [FurnitureVariant(3, 2, 2)]:
        for p in layout(area, item):
            for t in p.footprint():
                assert area.contains(t), f"{item}: {t} outside area"
    print("  PASSED: every footprint is inside the area")


def test_layout_item_too_big():
    assert layout(RectArea(0, 0, 3, 1), FurnitureVariant(0, 4, 1)) == []
    print("  PASSED: oversized item yields empty layout")


def test_layout_tile_set_area():
    """Footprints must be inside the tile set, not just its bounding box."""
    tiles = [t for t in RectArea(0, 0, 3, 3).tiles() if t != (2, 2)]
    area = TileSetArea.from_tiles(tiles)
    placements = layout(area, FurnitureVariant(0, 1, 1))
    origins = [tuple(p.origin) for p in placements]
    assert origins == [(0, 0), (2, 0), (0, 2)], origins
    print("  PASSED: tile-set layout skips missing tiles")


def test_centered_placement():
    placements = centered_placement(RectArea(0, 0, 7, 7), FurnitureVariant(0, 3, 3))
    assert [tuple(p.origin) for p in placements] == [(2, 2)]

    placements = centered_placement(RectArea(99, 99, 3, 3), FurnitureVariant(0, 3, 3))
    assert [tuple(p.origin) for p in placements] == [(99, 99)]

    assert centered_placement(RectArea(0, 0, 5, 5), FurnitureVariant(0, 6, 6)) == []
    print("  PASSED: centered placement")


def test_restrict_variants():
    wells = [FurnitureVariant(2, 6, 6), FurnitureVariant(0, 3, 3), FurnitureVariant(1, 5, 5)]
    only_small = restrict_variants(wells, (0,))
    assert only_small == [FurnitureVariant(0, 3, 3)]
    everything = restrict_variants(wells, None)
    assert [v.size_index for v in everything] == [0, 1, 2]
    assert restrict_variants(wells, ()) == []
    print("  PASSED: restrict_variants allow-list")


def test_occupied_tiles_override_item():
    placements = [Placement((0, 0), FurnitureVariant(0, 1, 1))]
    assert occupied_tiles(placements) == {(0, 0)}
    assert occupied_tiles(placements, FurnitureVariant(1, 2, 2)) == {(0, 0), (1, 0), (0, 1), (1, 1)}
    assert occupied_tiles([]) == frozenset()
    print("  PASSED: occupied tiles")


def test_merge_groups_later_groups_give_way():
    """Workbench first (one only), racks skip the tiles it took."""
    area = RectArea(0, 0, 5, 5)
    bench = FurnitureVariant(0, 5, 1)
    rack = FurnitureVariant(2, 4, 1)
    merged = merge_groups([
        ("workbench", layout(area, bench), 1),
        ("tool_rack", layout(area, rack), None),
    ])
    assert [(tuple(p.origin), p.group) for p in merged] == [
        ((0, 0), "workbench"),
        ((0, 2), "tool_rack"),
        ((0, 4), "tool_rack"),
    ]
    assert len(occupied_tiles(merged)) == 13

    capped = merge_groups([("tool_rack", layout(area, rack), 2)])
    assert [tuple(p.origin) for p in capped] == [(0, 0), (0, 2)]
    assert merge_groups([("crate", [], None)]) == []
    print("  PASSED: merge_groups")


def test_entrance_tiles():
    bed = FurnitureVariant(0, 2, 2, entrances=((0, 2), (1, 2)))
    p = Placement((2, 3), bed)
    assert p.entrance_tiles() == [(2, 5), (3, 5)]
    assert entrance_tiles([p, Placement((0, 0), FurnitureVariant(0, 1, 1))]) == {(2, 5), (3, 5)}
    assert entrance_tiles([]) == frozenset()
    print("  PASSED: entrance tiles")


if __name__ == "__main__":
    tests = [
        test_select_largest_fitting_variant,
        test_select_variant_fallback_to_smallest,
        test_select_variant_narrow_areas,
        test_select_variant_empty_candidates,
        test_grid_spacing_floor,
        test_layout_5x5_with_2x1,
        test_layout_stays_inside_area,
        test_layout_item_too_big,
        test_layout_tile_set_area,
        test_centered_placement,
        test_restrict_variants,
        test_occupied_tiles_override_item,
        test_merge_groups_later_groups_give_way,
        test_entrance_tiles,
    ]

    passed = 0
    failed = 0
    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"  FAILED: {test.__name__}: {e}")
            failed += 1

    print(f"\n{'='*50}")
    print(f"Results: {passed} passed, {failed} failed, {len(tests)} total")
    if failed == 0:
        print("ALL TESTS PASSED")
    else:
        print(f"{failed} TEST(S) FAILED")
