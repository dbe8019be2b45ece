"""Colony Room Planner

Plan rooms from the command line, run the agent console headless, or
launch the GUI.

Usage:
    python main.py                                    # Launch GUI
    python main.py --plan 100 100 5 5 --room-type JANITOR --side top
    python main.py --plan 100 100 3 3 --room-type WELL --centered --commit
    python main.py --headless "Build a 5x5 home at 40,60"
"""

import argparse
import json
import logging
import os
import sys

# Load API keys from .env file before anything else imports them
from dotenv import load_dotenv

_env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
load_dotenv(_env_path, override=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

log = logging.getLogger("main")


def main(argv=None):
    from config import DEFAULT_MODEL, DEFAULT_PREFERRED_SIDE, DEFAULT_UPGRADE

    parser = argparse.ArgumentParser(description="Colony Room Planner")
    parser.add_argument(
        "--plan",
        type=int,
        nargs=4,
        metavar=("X", "Y", "W", "H"),
        default=None,
        help="Plan a room over the given area and print it (no GUI).",
    )
    parser.add_argument(
        "--room-type",
        type=str,
        default="JANITOR",
        help="Room type key or alias (STOCKPILE, JANITOR, HOME, HEARTH, WELL, ...).",
    )
    parser.add_argument(
        "--side",
        type=str,
        default=DEFAULT_PREFERRED_SIDE,
        choices=["top", "bottom", "left", "right"],
        help="Preferred door side.",
    )
    parser.add_argument(
        "--material",
        type=str,
        default=None,
        help="Building material (default depends on the room type).",
    )
    parser.add_argument(
        "--upgrade",
        type=int,
        default=DEFAULT_UPGRADE,
        help="Upgrade level.",
    )
    parser.add_argument(
        "--centered",
        action="store_true",
        help="Treat X Y as the center tile of the area.",
    )
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Also commit the plan to an in-memory world and print the report.",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Write the plan as JSON into the output directory.",
    )
    parser.add_argument(
        "--headless",
        type=str,
        default=None,
        help="Run the agent console with the given prompt (no GUI).",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Anthropic API key (or set ANTHROPIC_API_KEY env var).",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_MODEL,
        help="Model to use.",
    )
    args = parser.parse_args(argv)

    if args.plan:
        return _run_plan(args)
    if args.headless:
        _run_headless(args.headless, args.api_key, args.model)
        return 0
    _run_gui()
    return 0


def _make_planner():
    from planner.api import RoomPlanner
    from world.catalog import StaticFurnitureCatalog
    from world.memory_world import InMemoryWorld
    from world.tick import TickExecutor

    return RoomPlanner(StaticFurnitureCatalog(), InMemoryWorld(), TickExecutor())


def _run_plan(args) -> int:
    from config import OUTPUT_DIR
    from planner.command_batch import CommandBatch
    from planner.errors import PartialCommitError, PlannerError
    from planner.geometry import RectArea
    from planner.render import plan_to_dict, render_ascii

    planner = _make_planner()
    x, y, w, h = args.plan
    try:
        area = RectArea.centered(x, y, w, h) if args.centered else RectArea(x, y, w, h)
        plan = planner.plan_room(
            area,
            args.room_type,
            preferred_side=args.side,
            material=args.material,
            upgrade=args.upgrade,
        )
    except (PlannerError, ValueError) as e:
        log.error("Cannot plan room: %s", e)
        return 2

    print(render_ascii(plan))
    print(json.dumps(plan_to_dict(plan), indent=2))
    print(CommandBatch.from_plan(plan).script())

    if args.save:
        os.makedirs(OUTPUT_DIR, exist_ok=True)
        path = os.path.join(OUTPUT_DIR, f"{plan.room_type.lower()}_{x}_{y}.json")
        with open(path, "w") as f:
            json.dump(plan_to_dict(plan), f, indent=2)
        log.info("Plan written to %s", path)

    if args.commit:
        try:
            report = planner.commit_now(plan)
        except PartialCommitError as e:
            log.error("%s", e)
            print(json.dumps(e.report.to_dict(), indent=2))
            return 1
        except PlannerError as e:
            log.error("Cannot commit room: %s", e)
            return 2
        print(json.dumps(report.to_dict(), indent=2))
    return 0


def _run_headless(prompt: str, api_key: str | None, model: str):
    from agent.agent import AgentState, run_agent

    planner = _make_planner()
    planner.executor.start()
    state = AgentState(planner)

    def on_message(role, text):
        prefix = {
            "user": "[YOU]",
            "assistant": "[AGENT]",
            "tool": "[TOOL]",
            "tool_result": "[RESULT]",
            "system": "[SYS]",
            "error": "[ERROR]",
        }.get(role, "")
        print(f"{prefix} {text}")

    try:
        run_agent(
            user_prompt=prompt,
            state=state,
            on_message=on_message,
            api_key=api_key,
            model=model,
        )
    finally:
        planner.executor.stop()


def _run_gui():
    import tkinter as tk

    from gui.app import RoomPlannerGUI

    planner = _make_planner()
    planner.executor.start()
    root = tk.Tk()
    RoomPlannerGUI(root, planner)
    try:
        root.mainloop()
    finally:
        planner.executor.stop()


if __name__ == "__main__":
    sys.exit(main())
