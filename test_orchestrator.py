"""Tests for the commit pipeline and the tick executor."""
import os
import sys
import threading
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from planner.api import RoomPlanner
from planner.errors import PartialCommitError
from planner.geometry import RectArea, Tile
from planner.orchestrator import RoomConstructionOrchestrator, Stage
from world.catalog import StaticFurnitureCatalog
from world.memory_world import InMemoryWorld
from world.tick import TickExecutor

AREA = RectArea(100, 100, 5, 5)


def _setup(world=None):
    world = world or InMemoryWorld()
    executor = TickExecutor()
    planner = RoomPlanner(StaticFurnitureCatalog(), world, executor)
    return planner, world, executor


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def test_pipeline_order():
    """reserve -> furniture -> opening -> walls -> commit -> release."""
    planner, world, _ = _setup()
    plan = planner.plan_room(AREA, "JANITOR")
    report = RoomConstructionOrchestrator(world).execute(plan)

    kinds = world.journal_kinds()
    assert kinds == (
        ["reserve"] + ["furniture"] * 3 + ["opening"] + ["wall"] * 23
        + ["commit", "release"]
    ), kinds
    assert report.stage == Stage.RELEASED
    assert report.committed and report.released
    assert report.door_tile == (99, 101)
    assert len(report.furniture_placed) == 3
    assert len(report.walls.walls_built) == 23
    assert report.skipped_count == 0
    assert world.reservations == {}
    assert len(world.constructions) == 1
    assert len(world.constructions[0].furniture) == 3, "furniture bound to the record"
    print("  PASSED: pipeline order")


def test_rejected_furniture_is_skipped():
    planner, world, _ = _setup()
    world.reject_furniture_at.add(Tile(100, 100))
    plan = planner.plan_room(AREA, "JANITOR")
    report = planner.commit_now(plan)
    assert report.furniture_skipped == [(100, 100)]
    assert len(report.furniture_placed) == 2
    assert report.committed
    print("  PASSED: rejected furniture counted as skipped")


def test_failure_after_furniture_leaves_partial_build():
    """No rollback: furniture stays, no record, reservation released."""
    planner, world, _ = _setup()
    world.fail_on["build_wall"] = RuntimeError("engine refused wall job")
    plan = planner.plan_room(AREA, "JANITOR")

    try:
        RoomConstructionOrchestrator(world).execute(plan)
    except PartialCommitError as e:
        err = e
    else:
        raise AssertionError("expected PartialCommitError")

    assert err.stage == Stage.DOOR_SELECTED, err.stage
    assert isinstance(err.cause, RuntimeError)
    assert len(world.furniture) == 3, "furniture is not rolled back"
    assert Tile(99, 101) in world.openings, "opening built before the failure"
    assert world.walls == {}
    assert world.constructions == [], "no construction record"
    assert world.reservations == {}, "reservation always released"
    assert err.report.released and not err.report.committed
    assert world.journal_kinds()[-1] == "release"
    print("  PASSED: forced failure after furniture placement")


def test_commit_failure_reports_walls_built():
    planner, world, _ = _setup()
    world.fail_on["commit_construction"] = RuntimeError("record store full")
    plan = planner.plan_room(AREA, "JANITOR")
    try:
        planner.commit_now(plan)
    except PartialCommitError as e:
        assert e.stage == Stage.WALLS_BUILT
        assert len(e.report.walls.walls_built) == 23
        assert len(world.walls) == 23
    else:
        raise AssertionError("expected PartialCommitError")
    assert world.reservations == {}
    print("  PASSED: commit failure after walls")


def test_enclosed_room_without_door():
    """3x1 maintenance room filled by one rack: walls all round, no opening."""
    planner, world, _ = _setup()
    plan = planner.plan_room(RectArea(0, 0, 3, 1), "JANITOR")
    assert plan.door_tile is None and plan.enclosed
    assert len(plan.wall_tiles) == 12

    report = planner.commit_now(plan)
    assert report.door_tile is None
    assert report.walls.opening_built is None
    assert len(report.walls.walls_built) == 12
    assert world.openings == {}
    assert report.committed
    print("  PASSED: enclosed room commits without a door")


def test_unwalled_room_builds_no_walls():
    planner, world, _ = _setup()
    plan = planner.plan_room(RectArea(0, 0, 4, 4), "STOCKPILE")
    report = planner.commit_now(plan)
    assert "wall" not in world.journal_kinds()
    assert "opening" not in world.journal_kinds()
    assert len(report.furniture_placed) == 4
    assert report.committed
    print("  PASSED: unwalled room")


# ---------------------------------------------------------------------------
# Tick executor
# ---------------------------------------------------------------------------

def test_commit_waits_for_tick():
    planner, world, executor = _setup()
    plan = planner.plan_room(AREA, "JANITOR")
    future = planner.commit_room(plan)
    assert not future.done()
    assert world.journal == [], "nothing mutates before the tick"

    assert executor.run_tick() == 1
    report = future.result(timeout=1)
    assert report.committed

    executor.run_tick()
    assert world.journal_kinds().count("commit") == 1, "batch runs exactly once"
    print("  PASSED: commit runs on the next tick, once")


def test_partial_failure_through_future():
    planner, world, executor = _setup()
    world.fail_on["build_wall"] = RuntimeError("boom")
    future = planner.commit_room(planner.plan_room(AREA, "JANITOR"))
    executor.run_tick()
    try:
        future.result(timeout=1)
    except PartialCommitError as e:
        assert e.report.released
    else:
        raise AssertionError("expected PartialCommitError from the future")
    print("  PASSED: partial failure delivered through the future")


def test_submit_needs_executor():
    world = InMemoryWorld()
    planner = RoomPlanner(StaticFurnitureCatalog(), world)
    plan = planner.plan_room(AREA, "JANITOR")
    try:
        RoomConstructionOrchestrator(world).submit(plan)
    except RuntimeError:
        pass
    else:
        raise AssertionError("submit without an executor should raise")
    print("  PASSED: submit requires an executor")


def test_tick_runs_in_order_and_survives_errors():
    executor = TickExecutor()
    seen = []

    def boom(_ds):
        raise ValueError("bad callback")

    f1 = executor.submit(lambda ds: seen.append(1) or "one")
    f2 = executor.submit(boom)
    f3 = executor.submit(lambda ds: seen.append(3) or "three")
    assert executor.pending == 3

    assert executor.run_tick(ds=0.05) == 3
    assert seen == [1, 3]
    assert f1.result() == "one" and f3.result() == "three"
    assert isinstance(f2.exception(), ValueError)
    assert executor.tick_count == 1
    assert executor.run_tick() == 0
    print("  PASSED: tick order and error isolation")


def test_submit_during_tick_waits_for_next():
    executor = TickExecutor()
    inner = {}

    def outer(_ds):
        inner["future"] = executor.submit(lambda ds: "later")
        return "now"

    executor.submit(outer)
    executor.run_tick()
    assert not inner["future"].done()
    executor.run_tick()
    assert inner["future"].result() == "later"
    print("  PASSED: callbacks queued mid-tick run next tick")


def test_background_thread():
    executor = TickExecutor(interval=0.01)
    executor.start()
    try:
        assert executor.is_running
        caller = threading.get_ident()
        future = executor.submit(lambda ds: threading.get_ident())
        assert future.result(timeout=2) != caller
    finally:
        executor.stop()
    assert not executor.is_running
    print("  PASSED: background tick thread")


def test_stop_timeout_keeps_busy_thread():
    """A stop() that times out mid-callback must not orphan the tick thread."""
    executor = TickExecutor(interval=0.01)
    entered = threading.Event()
    gate = threading.Event()

    def slow(ds):
        entered.set()
        gate.wait(5)
        return "done"

    executor.start()
    try:
        future = executor.submit(slow)
        assert entered.wait(2)
        thread = executor._thread

        executor.stop(timeout=0.05)
        assert executor.is_running, "busy thread is still tracked"
        executor.start()
        assert executor._thread is thread, "no second tick thread"

        gate.set()
        assert future.result(timeout=2) == "done"
        assert executor.submit(lambda ds: "again").result(timeout=2) == "again"
    finally:
        gate.set()
        executor.stop()
    assert not executor.is_running
    print("  PASSED: stop timeout keeps the busy thread")


if __name__ == "__main__":
    tests = [
        test_pipeline_order,
        test_rejected_furniture_is_skipped,
        test_failure_after_furniture_leaves_partial_build,
        test_commit_failure_reports_walls_built,
        test_enclosed_room_without_door,
        test_unwalled_room_builds_no_walls,
        test_commit_waits_for_tick,
        test_partial_failure_through_future,
        test_submit_needs_executor,
        test_tick_runs_in_order_and_survives_errors,
        test_submit_during_tick_waits_for_next,
        test_background_thread,
        test_stop_timeout_keeps_busy_thread,
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
