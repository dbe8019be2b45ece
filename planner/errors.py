"""Exceptions raised by the room planner."""

from __future__ import annotations

from typing import Any, Optional


class PlannerError(Exception):
    """Base class for planner failures."""


class PreconditionError(PlannerError):
    """The request is invalid; raised before any world mutation is scheduled.

    Unknown or uninitialised room type, or a fixed-shape room given an
    incompatible size or material.
    """


class PlacementRejected(PlannerError):
    """The world refused a single op (furniture, wall or opening).

    The orchestrator catches this, counts the op as skipped and carries on.
    """

    def __init__(self, tile: tuple[int, int], reason: str = ""):
        self.tile = tuple(tile)
        self.reason = reason
        msg = f"Rejected at ({tile[0]},{tile[1]})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PartialCommitError(PlannerError):
    """A commit failed after the area was reserved.

    Mutations applied before the failure stay in the world; nothing is
    rolled back.  ``report`` describes what had been applied and ``stage``
    is the last stage that completed.
    """

    def __init__(self, stage: Any, report: Any, cause: Optional[BaseException] = None):
        self.stage = stage
        self.report = report
        self.cause = cause
        stage_name = getattr(stage, "value", stage)
        msg = f"Commit failed after stage '{stage_name}'; world left partially built"
        if cause is not None:
            msg += f" ({type(cause).__name__}: {cause})"
        super().__init__(msg)
