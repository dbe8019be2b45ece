"""Tkinter GUI for the colony room planner."""

import logging
import threading
import tkinter as tk
from tkinter import messagebox, scrolledtext, ttk

from agent.agent import AgentState, MODEL_CHOICES, run_agent
from config import DEFAULT_MODEL, DEFAULT_PREFERRED_SIDE
from planner.api import RoomPlanner
from planner.errors import PartialCommitError, PlannerError
from planner.geometry import RectArea
from planner.render import render_ascii
from planner.room_plan import RoomPlan
from planner.room_types import ROOM_TYPES

log = logging.getLogger(__name__)

CELL_PX = 18
COLORS = {
    "wall": "#57534e",
    "door": "#f59e0b",
    "furniture": "#2563eb",
    "floor": "#e7e5e4",
    "built_wall": "#1c1917",
}


class RoomPlannerGUI:
    """Main application window."""

    def __init__(self, root: tk.Tk, planner: RoomPlanner):
        self.root = root
        self.root.title("Colony Room Planner")
        self.root.geometry("1000x780")
        self.root.minsize(760, 520)

        self.planner = planner
        self.state = AgentState(planner)
        self.agent_thread: threading.Thread | None = None
        self.pending_commit = None

        self._build_ui()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self):
        # Plan form
        form = ttk.LabelFrame(self.root, text="Room", padding=5)
        form.pack(fill=tk.X, padx=5, pady=5)

        self.x_var = tk.IntVar(value=100)
        self.y_var = tk.IntVar(value=100)
        self.w_var = tk.IntVar(value=5)
        self.h_var = tk.IntVar(value=5)
        for label, var in (("X", self.x_var), ("Y", self.y_var),
                           ("W", self.w_var), ("H", self.h_var)):
            ttk.Label(form, text=f"{label}:").pack(side=tk.LEFT)
            ttk.Spinbox(form, from_=-9999, to=9999, textvariable=var, width=6).pack(
                side=tk.LEFT, padx=(0, 6)
            )

        self.centered_var = tk.BooleanVar(value=False)
        ttk.Checkbutton(form, text="Centered", variable=self.centered_var).pack(side=tk.LEFT)

        ttk.Label(form, text="Type:").pack(side=tk.LEFT, padx=(8, 0))
        self.type_var = tk.StringVar(value="JANITOR")
        ttk.Combobox(
            form, textvariable=self.type_var, values=sorted(ROOM_TYPES),
            state="readonly", width=16,
        ).pack(side=tk.LEFT, padx=3)

        ttk.Label(form, text="Door:").pack(side=tk.LEFT)
        self.side_var = tk.StringVar(value=DEFAULT_PREFERRED_SIDE)
        ttk.Combobox(
            form, textvariable=self.side_var, values=["top", "bottom", "left", "right"],
            state="readonly", width=7,
        ).pack(side=tk.LEFT, padx=3)

        ttk.Label(form, text="Material:").pack(side=tk.LEFT)
        self.material_var = tk.StringVar(value="")
        ttk.Entry(form, textvariable=self.material_var, width=8).pack(side=tk.LEFT, padx=3)

        self.plan_btn = ttk.Button(form, text="Plan", command=self._on_plan, width=8)
        self.plan_btn.pack(side=tk.LEFT, padx=5)
        self.commit_btn = ttk.Button(
            form, text="Commit", command=self._on_commit, state=tk.DISABLED, width=8
        )
        self.commit_btn.pack(side=tk.LEFT)

        # Plan canvas
        view = ttk.LabelFrame(self.root, text="Plan", padding=5)
        view.pack(fill=tk.BOTH, expand=True, padx=5)
        self.canvas = tk.Canvas(view, background="white", height=260)
        self.canvas.pack(fill=tk.BOTH, expand=True)

        # Agent request
        top = ttk.Frame(self.root, padding=5)
        top.pack(fill=tk.X)
        ttk.Label(top, text="Model:").pack(side=tk.LEFT)
        self.model_var = tk.StringVar(value=DEFAULT_MODEL)
        ttk.Combobox(
            top, textvariable=self.model_var, values=MODEL_CHOICES,
            state="readonly", width=35,
        ).pack(side=tk.LEFT, padx=5)

        prompt_frame = ttk.LabelFrame(self.root, text="Request", padding=5)
        prompt_frame.pack(fill=tk.X, padx=5, pady=5)
        self.prompt_text = tk.Text(prompt_frame, height=3, wrap=tk.WORD)
        self.prompt_text.pack(fill=tk.X)
        self.prompt_text.insert(
            "1.0",
            "Plan a 5x5 maintenance station at (100, 100) with the door on top, "
            "show me the plan, then build it.",
        )

        btn_frame = ttk.Frame(self.root, padding=5)
        btn_frame.pack(fill=tk.X, padx=5)

        self.start_btn = ttk.Button(btn_frame, text="Start", command=self._on_start, width=12)
        self.start_btn.pack(side=tk.LEFT, padx=5)
        self.pause_btn = ttk.Button(
            btn_frame, text="Pause", command=self._on_pause, state=tk.DISABLED, width=12
        )
        self.pause_btn.pack(side=tk.LEFT, padx=5)
        self.stop_btn = ttk.Button(
            btn_frame, text="Stop", command=self._on_stop, state=tk.DISABLED, width=12
        )
        self.stop_btn.pack(side=tk.LEFT, padx=5)
        self.reset_btn = ttk.Button(btn_frame, text="Reset", command=self._on_reset, width=12)
        self.reset_btn.pack(side=tk.LEFT, padx=5)

        self.status_var = tk.StringVar(value="Ready")
        ttk.Label(btn_frame, textvariable=self.status_var).pack(side=tk.RIGHT, padx=10)

        # Log
        log_frame = ttk.LabelFrame(self.root, text="Log", padding=5)
        log_frame.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)
        self.log_text = scrolledtext.ScrolledText(
            log_frame, wrap=tk.WORD, state=tk.DISABLED, font=("Consolas", 10), height=10
        )
        self.log_text.pack(fill=tk.BOTH, expand=True)

        self.log_text.tag_configure("user", foreground="#2563eb")
        self.log_text.tag_configure("assistant", foreground="#16a34a")
        self.log_text.tag_configure("tool", foreground="#9333ea")
        self.log_text.tag_configure("tool_result", foreground="#7c3aed")
        self.log_text.tag_configure("system", foreground="#6b7280")
        self.log_text.tag_configure("error", foreground="#dc2626")

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _append_log(self, role: str, text: str):
        """Thread-safe log append. Called from the agent thread."""
        self.root.after(0, self._do_append_log, role, text)

    def _do_append_log(self, role: str, text: str):
        self.log_text.configure(state=tk.NORMAL)
        prefix = {
            "user": "[YOU] ",
            "assistant": "[AGENT] ",
            "tool": "[TOOL] ",
            "tool_result": "[RESULT] ",
            "system": "[SYS] ",
            "error": "[ERROR] ",
        }.get(role, "")
        self.log_text.insert(tk.END, f"{prefix}{text}\n\n", role)
        self.log_text.see(tk.END)
        self.log_text.configure(state=tk.DISABLED)

        # Redraw whenever the agent produced or committed a plan
        if role == "tool_result" and self.state.current_plan is not None:
            self._draw_plan(self.state.current_plan)

    def _clear_log(self):
        self.log_text.configure(state=tk.NORMAL)
        self.log_text.delete("1.0", tk.END)
        self.log_text.configure(state=tk.DISABLED)

    # ------------------------------------------------------------------
    # Plan view
    # ------------------------------------------------------------------

    def _draw_plan(self, plan: RoomPlan):
        self.canvas.delete("all")
        min_x, min_y, max_x, max_y = plan.area.bounds()
        # one tile of margin for the perimeter
        ox, oy = min_x - 1, min_y - 1
        world = self.planner.world

        def cell(tile, color, outline="#a8a29e"):
            x0 = (tile[0] - ox) * CELL_PX + 10
            y0 = (tile[1] - oy) * CELL_PX + 10
            self.canvas.create_rectangle(
                x0, y0, x0 + CELL_PX, y0 + CELL_PX, fill=color, outline=outline
            )

        for t in plan.area.tiles():
            cell(t, COLORS["furniture"] if t in plan.occupied_tiles else COLORS["floor"])
        for t in plan.perimeter:
            if t == plan.door_tile:
                cell(t, COLORS["door"])
            elif t in plan.wall_tiles:
                built = world is not None and t in getattr(world, "walls", {})
                cell(t, COLORS["built_wall"] if built else COLORS["wall"])

        self.canvas.create_text(
            10, (max_y - oy + 2) * CELL_PX + 14, anchor=tk.NW,
            text=(
                f"{plan.room_type}: {len(plan.placements)} furniture, "
                f"door {tuple(plan.door_tile) if plan.door_tile else 'none'}, "
                f"{len(plan.wall_tiles)} walls"
            ),
        )

    # ------------------------------------------------------------------
    # Button handlers
    # ------------------------------------------------------------------

    def _form_area(self) -> RectArea:
        x, y, w, h = self.x_var.get(), self.y_var.get(), self.w_var.get(), self.h_var.get()
        if self.centered_var.get():
            return RectArea.centered(x, y, w, h)
        return RectArea(x, y, w, h)

    def _on_plan(self):
        try:
            plan = self.planner.plan_room(
                self._form_area(),
                self.type_var.get(),
                preferred_side=self.side_var.get(),
                material=self.material_var.get().strip() or None,
            )
        except (PlannerError, ValueError, tk.TclError) as e:
            messagebox.showerror("Plan", str(e))
            return
        self.state.current_plan = plan
        self._draw_plan(plan)
        self._do_append_log("system", render_ascii(plan))
        self.commit_btn.configure(state=tk.NORMAL)

    def _on_commit(self):
        plan = self.state.current_plan
        if plan is None:
            return
        try:
            self.pending_commit = self.planner.commit_room(plan)
        except PlannerError as e:
            messagebox.showerror("Commit", str(e))
            return
        self.commit_btn.configure(state=tk.DISABLED)
        self.status_var.set("Waiting for tick...")
        self.root.after(50, self._poll_commit)

    def _poll_commit(self):
        future = self.pending_commit
        if future is None:
            return
        if not future.done():
            self.root.after(50, self._poll_commit)
            return
        self.pending_commit = None
        self.status_var.set("Ready")
        try:
            report = future.result()
        except PartialCommitError as e:
            log.exception("Commit left a partial build")
            messagebox.showerror("Commit", str(e))
            return
        except Exception as e:
            log.exception("Commit failed")
            messagebox.showerror("Commit", str(e))
            return
        self._do_append_log(
            "system",
            f"Committed {report.room_type}: {len(report.furniture_placed)} furniture, "
            f"{len(report.walls.walls_built)} walls, {report.skipped_count} skipped",
        )
        self._draw_plan(self.state.current_plan)

    def _set_running_state(self, running: bool):
        if running:
            self.start_btn.configure(state=tk.DISABLED)
            self.pause_btn.configure(state=tk.NORMAL)
            self.stop_btn.configure(state=tk.NORMAL)
            self.prompt_text.configure(state=tk.DISABLED)
            self.status_var.set("Running...")
        else:
            self.start_btn.configure(state=tk.NORMAL)
            self.pause_btn.configure(state=tk.DISABLED, text="Pause")
            self.stop_btn.configure(state=tk.DISABLED)
            self.prompt_text.configure(state=tk.NORMAL)
            self.status_var.set("Ready")

    def _on_start(self):
        prompt = self.prompt_text.get("1.0", tk.END).strip()
        if not prompt:
            self._append_log("error", "Please enter a request.")
            return

        model = self.model_var.get()
        self.state.reset()
        self._set_running_state(True)
        self._clear_log()

        def _run():
            try:
                run_agent(
                    user_prompt=prompt,
                    state=self.state,
                    on_message=self._append_log,
                    model=model,
                )
            finally:
                self.root.after(0, self._set_running_state, False)

        self.agent_thread = threading.Thread(target=_run, daemon=True)
        self.agent_thread.start()

    def _on_pause(self):
        if self.state.is_paused:
            self.state.resume()
            self.pause_btn.configure(text="Pause")
            self.status_var.set("Running...")
        else:
            self.state.pause()
            self.pause_btn.configure(text="Resume")
            self.status_var.set("Paused")

    def _on_stop(self):
        self.state.stop()
        self.status_var.set("Stopping...")

    def _on_reset(self):
        self.state.reset()
        self._set_running_state(False)
        self._clear_log()
        self.canvas.delete("all")
        self.commit_btn.configure(state=tk.DISABLED)
        self.status_var.set("Reset - Ready")
