"""Tests for RoomPlanner: room types, preconditions, search and rendering."""
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from planner.api import RoomPlanner
from planner.errors import PreconditionError
from planner.furniture import FurnitureVariant
from planner.geometry import RectArea
from planner.render import plan_to_dict, render_ascii
from planner.room_types import get_room_type
from world.catalog import StaticFurnitureCatalog
from world.memory_world import InMemoryWorld
from world.tick import TickExecutor


def _planner(world=None):
    return RoomPlanner(StaticFurnitureCatalog(), world or InMemoryWorld(), TickExecutor())


def _expect_precondition(fn, *args, **kwargs):
    try:
        fn(*args, **kwargs)
    except PreconditionError as e:
        return e
    raise AssertionError(f"{fn.__name__} should raise PreconditionError")


def test_maintenance_room_plan():
    """Workbench along the top row, tool racks in the rows below it."""
    plan = _planner().plan_room(RectArea(100, 100, 5, 5), "JANITOR")
    assert plan.variants["workbench"].width == 5
    assert plan.variants["tool_rack"].size_index == 2, "4x1 racks fit a 5x5 room"
    assert [tuple(p.origin) for p in plan.placements_for("workbench")] == [(100, 100)]
    assert [tuple(p.origin) for p in plan.placements_for("tool_rack")] == [(100, 102), (100, 104)]
    assert plan.door_tile == (99, 101), "top row is blocked by the workbench"
    assert plan.material == "WOOD"
    assert plan.wall_tiles == frozenset(plan.perimeter) - {plan.door_tile}
    assert len(plan.occupied_tiles) == 13
    assert plan.metadata["free_interior"] == 12
    assert plan.empty_groups() == []
    print("  PASSED: maintenance room plan")


def test_explicit_positions():
    planner = _planner()
    plan = planner.plan_room(RectArea(100, 100, 5, 5), "JANITOR",
                             positions={"workbench": [(100, 104)]})
    assert [(tuple(p.origin), p.group) for p in plan.placements] == [
        ((100, 104), "workbench"),
        ((100, 100), "tool_rack"),
        ((100, 102), "tool_rack"),
    ]
    assert plan.door_tile == (104, 99)

    e = _expect_precondition(planner.plan_room, RectArea(100, 100, 5, 5), "JANITOR",
                             positions={"sink": [(100, 100)]})
    assert "sink" in str(e)
    print("  PASSED: explicit positions")


def test_door_follows_furniture_entrance():
    """Entrance tiles declared by the furniture steer the door."""
    bed = FurnitureVariant(0, 3, 3, entrances=((0, 1),))
    planner = RoomPlanner(StaticFurnitureCatalog({"HOME": [[bed]]}), InMemoryWorld(), TickExecutor())
    area = RectArea(0, 0, 3, 3)

    plan = planner.plan_room(area, "HOME")
    assert [tuple(p.origin) for p in plan.placements] == [(0, 0)]
    assert plan.entrance_tiles == {(0, 1)}
    assert plan.door_tile == (-1, 1), "bed fills the room; only its entrance is reachable"

    plan = planner.plan_room(area, "HOME", entrance_hints={(1, 0)})
    assert plan.door_tile == (1, -1), "caller hints win"

    plain = _planner().plan_room(area, "HOME")
    assert plain.door_tile is None and plain.enclosed
    print("  PASSED: door follows furniture entrance")


def test_plan_is_pure():
    world = InMemoryWorld()
    planner = _planner(world)
    first = planner.plan_room(RectArea(0, 0, 6, 4), "HOME", preferred_side="left")
    second = planner.plan_room(RectArea(0, 0, 6, 4), "HOME", preferred_side="left")
    assert first == second
    assert world.journal == []
    print("  PASSED: planning has no side effects")


def test_home_centered_and_walled():
    plan = _planner().plan_room(RectArea(0, 0, 5, 5), "HOME")
    assert [tuple(p.origin) for p in plan.placements] == [(1, 1)]
    assert plan.walled and plan.door_tile == (2, -1)
    print("  PASSED: home centered with a door")


def test_well_fixed_size_and_material():
    planner = _planner()
    plan = planner.plan_room(RectArea.centered(100, 100, 3, 3), "WELL")
    assert plan.material == "STONE"
    assert plan.variants["well"].size_index == 0
    assert [tuple(p.origin) for p in plan.placements] == [(99, 99)]
    assert not plan.walled and plan.door_tile is None and plan.wall_tiles == frozenset()

    _expect_precondition(planner.plan_room, RectArea(0, 0, 5, 5), "WELL")
    _expect_precondition(planner.plan_room, RectArea(0, 0, 3, 3), "WELL", material="WOOD")
    print("  PASSED: well constraints")


def test_hearth_unwalled():
    plan = _planner().plan_room(RectArea(0, 0, 7, 7), "HEARTH")
    assert plan.variants["fire_pit"].width == 6
    assert [tuple(p.origin) for p in plan.placements] == [(0, 0)]
    assert plan.door_tile is None and not plan.wall_tiles
    print("  PASSED: hearth")


def test_farm_has_no_furniture():
    plan = _planner().plan_room(RectArea(0, 0, 8, 8), "farm")
    assert plan.room_type == "FARM_VEG"
    assert plan.variants == {} and plan.placements == ()
    assert plan.door_tile is None
    print("  PASSED: farm area only")


def test_unknown_room_type():
    e = _expect_precondition(_planner().plan_room, RectArea(0, 0, 3, 3), "DUNGEON")
    assert "DUNGEON" in str(e)
    assert get_room_type("maintenance").key == "JANITOR"
    print("  PASSED: unknown room type")


def test_uninitialised_room_type():
    """A furnished type with no catalog entry is a precondition failure."""
    planner = RoomPlanner(StaticFurnitureCatalog({}), InMemoryWorld(), TickExecutor())
    _expect_precondition(planner.plan_room, RectArea(0, 0, 5, 5), "JANITOR")
    print("  PASSED: room type without furniture data")


def test_commit_requires_clear_area():
    world = InMemoryWorld(entities=[(101, 101)])
    planner = _planner(world)
    plan = planner.plan_room(RectArea(100, 100, 5, 5), "JANITOR")
    e = _expect_precondition(planner.commit_room, plan)
    assert "entities" in str(e)
    assert planner.executor.pending == 0, "nothing scheduled"

    future = planner.commit_room(plan, require_clear=False)
    planner.executor.run_tick()
    assert future.result(timeout=1).committed
    print("  PASSED: clear-area precondition")


def test_commit_without_world():
    planner = RoomPlanner(StaticFurnitureCatalog())
    plan = planner.plan_room(RectArea(0, 0, 5, 5), "JANITOR")
    _expect_precondition(planner.commit_room, plan)
    print("  PASSED: dry-run planner cannot commit")


def test_find_clear_area():
    world = InMemoryWorld(entities=[(2, 2)])
    planner = _planner(world)
    found = planner.find_clear_area(RectArea(0, 0, 20, 20), 5, 5)
    assert found == RectArea(5, 0, 5, 5), found

    assert planner.find_clear_area(RectArea(0, 0, 5, 5), 5, 5) is None
    assert planner.find_clear_area(RectArea(0, 0, 3, 3), 5, 5) is None
    print("  PASSED: find_clear_area")


def test_render_enclosed_room():
    plan = _planner().plan_room(RectArea(0, 0, 3, 1), "JANITOR")
    assert render_ascii(plan) == "#####\n#FFF#\n#####"
    assert plan.empty_groups() == ["workbench"], "5x1 workbench cannot fit a 3x1 room"
    data = plan_to_dict(plan)
    assert data["door_tile"] is None and data["enclosed"] is True
    assert data["wall_tiles"] == 12
    print("  PASSED: render enclosed room")


def test_render_with_door():
    plan = _planner().plan_room(RectArea(100, 100, 5, 5), "JANITOR")
    lines = render_ascii(plan).splitlines()
    assert lines[0] == "#######", lines
    assert lines[1] == "#FFFFF#", lines
    assert lines[2] == "D.....#", lines
    assert lines[3] == "#FFFF.#", lines
    assert len(lines) == 7
    assert plan_to_dict(plan)["door_tile"] == [99, 101]
    print("  PASSED: render with door")


if __name__ == "__main__":
    tests = [
        test_maintenance_room_plan,
        test_explicit_positions,
        test_door_follows_furniture_entrance,
        test_plan_is_pure,
        test_home_centered_and_walled,
        test_well_fixed_size_and_material,
        test_hearth_unwalled,
        test_farm_has_no_furniture,
        test_unknown_room_type,
        test_uninitialised_room_type,
        test_commit_requires_clear_area,
        test_commit_without_world,
        test_find_clear_area,
        test_render_enclosed_room,
        test_render_with_door,
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
