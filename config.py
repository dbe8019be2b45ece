"""Configuration defaults for the colony room planner."""

import os

# Anthropic (agent console)
DEFAULT_MODEL = os.environ.get("PLANNER_MODEL", "claude-sonnet-4-5-20250929")
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")

# Construction defaults
DEFAULT_MATERIAL = os.environ.get("PLANNER_DEFAULT_MATERIAL", "WOOD")
DEFAULT_UPGRADE = int(os.environ.get("PLANNER_DEFAULT_UPGRADE", "0"))
DEFAULT_PREFERRED_SIDE = os.environ.get("PLANNER_DEFAULT_SIDE", "top")

# Layout rules (tiles)
MIN_FURNITURE_SPACING = 2       # grid step floor, keeps a walkway between items
DOOR_OFF_SIDE_PENALTY = 1000    # added to the rank of doors off the preferred side
CLEAR_AREA_SEARCH_SPACING = 5   # step used by find_clear_area

# Tick executor
TICK_INTERVAL_SECS = float(os.environ.get("PLANNER_TICK_INTERVAL", "0.05"))

# Output
OUTPUT_DIR = os.environ.get(
    "PLANNER_OUTPUT_DIR", os.path.join(os.path.dirname(__file__), "output")
)
