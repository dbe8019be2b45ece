"""Room planning console agent.

Runs an agentic loop: user prompt -> LLM -> tool calls -> RoomPlanner.
Planning tools never touch the world; commit_room schedules the batch on
the tick executor and waits for the tick to report back.
Supports pause/stop via threading events.
"""

import json
import logging
import os
import threading
from typing import Callable

import anthropic

from agent.prompts import SYSTEM_PROMPT, TOOL_DEFINITIONS
from config import ANTHROPIC_API_KEY, DEFAULT_MODEL
from planner.api import RoomPlanner
from planner.errors import PartialCommitError, PlannerError
from planner.geometry import RectArea
from planner.render import plan_to_dict, render_ascii
from planner.room_plan import RoomPlan
from planner.room_types import ROOM_TYPES

log = logging.getLogger(__name__)

COMMIT_TIMEOUT_SECS = 10.0

MODEL_CHOICES = [
    "claude-sonnet-4-5-20250929",
    "claude-haiku-4-5-20251001",
    "claude-opus-4-6",
]


class AgentState:
    """Thread-safe state for the agent loop."""

    def __init__(self, planner: RoomPlanner):
        self.pause_event = threading.Event()
        self.stop_event = threading.Event()
        self.pause_event.set()  # Start un-paused
        self.messages: list[dict] = []
        self.is_running = False
        self.planner = planner
        self.current_plan: RoomPlan | None = None
        self.commits: list[dict] = []

    def pause(self):
        self.pause_event.clear()

    def resume(self):
        self.pause_event.set()

    def stop(self):
        self.stop_event.set()
        self.pause_event.set()  # Unblock if paused

    def reset(self):
        self.pause_event.set()
        self.stop_event.clear()
        self.messages.clear()
        self.is_running = False
        self.current_plan = None
        self.commits.clear()

    @property
    def is_paused(self) -> bool:
        return not self.pause_event.is_set()


def _area_from_args(args: dict) -> RectArea:
    x, y = int(args["x"]), int(args["y"])
    w, h = int(args["width"]), int(args["height"])
    if args.get("centered"):
        return RectArea.centered(x, y, w, h)
    return RectArea(x, y, w, h)


def _wait_for_commit(state: AgentState, future):
    executor = state.planner.executor
    if not executor.is_running:
        executor.run_until_idle()
    return future.result(timeout=COMMIT_TIMEOUT_SECS)


def _execute_tool(name: str, input_args: dict, state: AgentState) -> str:
    """Run one console tool against the planner. Returns a JSON string."""
    planner = state.planner

    try:
        if name == "list_room_types":
            types = [
                {
                    "key": t.key,
                    "label": t.label,
                    "furniture": [{"group": g.name, "mode": g.mode} for g in t.furniture],
                    "walled": t.walled,
                    "default_material": t.default_material,
                    "fixed_size": list(t.fixed_size) if t.fixed_size else None,
                    "required_material": t.required_material,
                }
                for t in (planner.registry or ROOM_TYPES).values()
            ]
            return json.dumps({"status": "ok", "room_types": types})

        elif name == "plan_room":
            area = _area_from_args(input_args)
            plan = planner.plan_room(
                area,
                input_args["room_type"],
                preferred_side=input_args.get("preferred_side", "top"),
                material=input_args.get("material"),
                upgrade=int(input_args.get("upgrade", 0)),
                positions=input_args.get("positions"),
            )
            state.current_plan = plan
            resp = {"status": "ok", "plan": plan_to_dict(plan)}
            warnings = []
            for group in plan.empty_groups():
                warnings.append(f"No {group} fits this area.")
            if plan.enclosed:
                warnings.append("No door tile reaches free floor; the room would be sealed.")
            if warnings:
                resp["warnings"] = warnings
            return json.dumps(resp)

        elif name == "render_plan":
            if state.current_plan is None:
                return json.dumps({"error": "No current plan. Call plan_room first."})
            return json.dumps({"status": "ok", "render": render_ascii(state.current_plan)})

        elif name == "commit_room":
            if state.current_plan is None:
                return json.dumps({"error": "No current plan. Call plan_room first."})
            future = planner.commit_room(
                state.current_plan,
                require_clear=bool(input_args.get("require_clear", True)),
            )
            report = _wait_for_commit(state, future)
            state.commits.append(report.to_dict())
            return json.dumps({"status": "ok", "report": report.to_dict()})

        elif name == "area_status":
            area = _area_from_args(input_args)
            obstructions = planner.world.area_obstructions(area)
            return json.dumps({
                "status": "ok",
                "clear": obstructions.clear,
                "details": obstructions.describe(),
            })

        elif name == "find_clear_area":
            region = _area_from_args(input_args)
            found = planner.find_clear_area(
                region,
                int(input_args["room_width"]),
                int(input_args["room_height"]),
                spacing=int(input_args.get("spacing", 5)),
            )
            if found is None:
                return json.dumps({"status": "ok", "area": None})
            return json.dumps({
                "status": "ok",
                "area": {"x": found.origin_x, "y": found.origin_y,
                         "width": found.width, "height": found.height},
            })

        else:
            return json.dumps({"error": f"Unknown tool: {name}"})

    except PartialCommitError as e:
        log.exception(f"Tool {name} left a partial build")
        return json.dumps({"error": str(e), "report": e.report.to_dict()})
    except (PlannerError, ValueError, KeyError) as e:
        log.warning("Tool %s rejected: %s", name, e)
        return json.dumps({"error": str(e)})
    except Exception as e:
        log.exception(f"Tool {name} failed")
        return json.dumps({"error": str(e)})


def _run_loop(
    client: anthropic.Anthropic,
    state: AgentState,
    on_message,
    model: str,
    max_turns: int,
) -> bool:
    """Run the Anthropic tool-calling loop. Returns True if the turn completed normally."""
    turn = 0
    while turn < max_turns:
        if state.stop_event.is_set():
            if on_message:
                on_message("system", "Agent stopped by user.")
            return False

        # Wait if paused
        state.pause_event.wait()
        if state.stop_event.is_set():
            return False

        if on_message:
            on_message("system", f"Thinking... (turn {turn + 1})")

        response = client.messages.create(
            model=model,
            max_tokens=4096,
            system=SYSTEM_PROMPT,
            tools=TOOL_DEFINITIONS,
            messages=state.messages,
        )

        turn += 1

        assistant_content = response.content
        state.messages.append({"role": "assistant", "content": assistant_content})

        for block in assistant_content:
            if hasattr(block, "text"):
                if on_message:
                    on_message("assistant", block.text)

        if response.stop_reason == "end_turn":
            return True

        tool_results = []
        for block in assistant_content:
            if block.type == "tool_use":
                if state.stop_event.is_set():
                    break

                state.pause_event.wait()
                if state.stop_event.is_set():
                    break

                if on_message:
                    on_message(
                        "tool",
                        f"Calling {block.name}({json.dumps(block.input, indent=2)})",
                    )

                result = _execute_tool(block.name, block.input, state)

                if on_message:
                    on_message("tool_result", f"{block.name} -> {result}")

                tool_results.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": block.id,
                        "content": result,
                    }
                )

        if state.stop_event.is_set():
            return False

        if tool_results:
            state.messages.append({"role": "user", "content": tool_results})

    if on_message:
        on_message("system", "Max turns reached.")
    return True


def _create_client(api_key: str | None = None) -> anthropic.Anthropic:
    key = api_key or ANTHROPIC_API_KEY or os.environ.get("ANTHROPIC_API_KEY")
    return anthropic.Anthropic(api_key=key) if key else anthropic.Anthropic()


def run_agent(
    user_prompt: str,
    state: AgentState,
    on_message: Callable[[str, str], None] | None = None,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    max_turns: int = 25,
):
    """Run one user request through the tool-calling loop.

    Args:
        user_prompt: The user's request, e.g. "build a maintenance room at 100,100".
        state: AgentState holding the planner and pause/stop control.
        on_message: Callback(role, text) for streaming updates to the GUI.
        api_key: API key override (otherwise ANTHROPIC_API_KEY).
        model: Anthropic model id.
        max_turns: Maximum number of LLM round-trips.
    """
    state.is_running = True
    state.messages.append({"role": "user", "content": user_prompt})
    if on_message:
        on_message("user", user_prompt)

    try:
        client = _create_client(api_key)
        if on_message:
            on_message("system", f"Using model: {model}")
        _run_loop(client, state, on_message, model, max_turns)
    except anthropic.APIError as e:
        if on_message:
            on_message("error", f"Anthropic API error: {e}")
        log.exception("Anthropic API error")
    except Exception as e:
        if on_message:
            on_message("error", f"Error: {e}")
        log.exception("Agent error")
    finally:
        state.is_running = False
        if on_message:
            on_message("system", "Agent finished.")
