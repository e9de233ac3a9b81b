from __future__ import annotations
import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

from config import get_data_dir

logger = logging.getLogger(__name__)


def ensure_data_dir() -> Path:
    return get_data_dir()


def data_path(filename: str | Path) -> Path:
    """Resolve a file path inside the app data directory."""
    return ensure_data_dir() / Path(filename)


def _read_text(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("Could not read %s", path, exc_info=True)
        return None


def _quarantine(path: Path, raw_text: str, default: Any) -> None:
    """Keep the unreadable content next to the file, then overwrite it."""
    backup = path.with_suffix(path.suffix + ".bak")
    try:
        backup.write_text(raw_text, encoding="utf-8")
    except OSError:
        logger.warning("Could not write backup %s", backup, exc_info=True)
    else:
        logger.warning("Moved unreadable %s aside to %s", path.name, backup.name)
    save_json(path, default)


def load_json(path: Path | str, default: Any = None) -> Any:
    """
    Return the decoded JSON at ``path``, or a copy of ``default`` when the
    file is missing. Empty or malformed files are backed up to ``.bak`` and
    reset to ``default``.
    """
    path = Path(path)
    fallback = {} if default is None else default

    raw_text = _read_text(path)
    if raw_text is None:
        return copy.deepcopy(fallback)

    if raw_text.strip():
        try:
            return json.loads(raw_text)
        except json.JSONDecodeError as e:
            logger.warning("Malformed JSON in %s: %s", path.name, e)
    _quarantine(path, raw_text, fallback)
    return copy.deepcopy(fallback)


def save_json(path: Path | str, payload: Any) -> None:
    """Write through a temp file so readers never see half a document."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    temp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    temp.replace(path)
