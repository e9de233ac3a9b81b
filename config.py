from __future__ import annotations
import logging
import os
import sys
from pathlib import Path


APP_NAME = "StudyPlanner"

# Fixed planner parameters
SESSION_CAP_HOURS = 2.0
RESCHEDULE_HORIZON_DAYS = 60
TIMETABLE_DAYS = 14
DEFAULT_DAILY_HOURS = 4.0
DEFAULT_TOPIC_HOURS = 2.0


def get_data_dir() -> Path:
    """
    Resolve the directory used for storing local app data.
    Uses an environment override when provided, otherwise falls back to a
    per-OS user data location.
    """
    override = os.environ.get("STUDY_PLANNER_DATA_DIR")
    if override:
        base = Path(override).expanduser()
    else:
        home = Path.home()
        platform = sys.platform
        if platform == "darwin":
            base = home / "Library" / "Application Support" / APP_NAME
        elif platform.startswith("win"):
            roaming = os.environ.get("APPDATA")
            base = Path(roaming) / APP_NAME if roaming else home / "AppData" / "Roaming" / APP_NAME
        else:
            base = home / ".local" / "share" / "study-planner"

    base.mkdir(parents=True, exist_ok=True)
    return base


def configure_logging() -> None:
    level_name = os.environ.get("STUDY_PLANNER_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
