from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models import AppState, ScheduleEntry, Settings, Subject
from storage import ensure_data_dir, load_json, save_json

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"


class ProfileStore:
    """
    Named planner states. ``profiles.json`` lists the names in creation
    order; each profile's subjects, schedule and settings live in its own
    ``state__<slug>.json``.
    """

    INDEX_FILE = "profiles.json"

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = root or ensure_data_dir()

    def _state_file(self, name: str) -> Path:
        slug = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip()).strip("_")
        return self.root / f"state__{(slug or DEFAULT_PROFILE)[:80]}.json"

    def _write_index(self, names: List[str]) -> None:
        save_json(self.root / self.INDEX_FILE, {"profiles": names})

    def names(self) -> List[str]:
        raw = load_json(self.root / self.INDEX_FILE, {"profiles": []})
        names = [n for n in raw.get("profiles", []) if isinstance(n, str) and n.strip()]
        return names or [DEFAULT_PROFILE]

    def load(self, name: str) -> AppState:
        raw = load_json(self._state_file(name))
        if not raw:
            return AppState(profile=name)
        try:
            state = AppState.model_validate(raw)
        except ValidationError:
            logger.warning("Stored state for profile %r is invalid; starting fresh", name, exc_info=True)
            state = AppState(profile=name)
            self.save(name, state)
        state.profile = name
        return state

    def save(self, name: str, state: AppState) -> None:
        state.profile = name
        save_json(self._state_file(name), state.model_dump(mode="json"))
        names = self.names()
        if name not in names:
            self._write_index(names + [name])

    def create(self, name: str) -> AppState:
        name = name.strip()
        if not name:
            raise ValueError("Profile name cannot be empty.")
        if any(n.lower() == name.lower() for n in self.names()) or self._state_file(name).exists():
            raise ValueError("Profile already exists.")

        state = AppState(profile=name)
        self.save(name, state)
        logger.info("Created profile %r", name)
        return state

    def delete(self, name: str) -> None:
        self._state_file(name).unlink(missing_ok=True)
        remaining = [n for n in self.names() if n != name]
        self._write_index(remaining or [DEFAULT_PROFILE])
        logger.info("Deleted profile %r", name)


def load(profile: str, store: Optional[ProfileStore] = None) -> Dict[str, Any]:
    """The planner's view of a profile: subjects, schedule and daily budget."""
    state = (store or ProfileStore()).load(profile)
    return {
        "subjects": state.subjects,
        "schedule": state.schedule,
        "daily_hours": state.settings.daily_hours,
    }


def save(
    profile: str,
    subjects: List[Subject],
    schedule: List[ScheduleEntry],
    daily_hours: float,
    store: Optional[ProfileStore] = None,
) -> None:
    """
    Replace the subjects, schedule and daily budget of a profile, keeping
    its other settings. An out-of-range budget raises before anything is
    written.
    """
    store = store or ProfileStore()
    state = store.load(profile)
    state.settings = Settings(
        daily_hours=daily_hours,
        preferred_start_hour=state.settings.preferred_start_hour,
    )
    state.subjects = list(subjects)
    state.schedule = list(schedule)
    store.save(profile, state)
