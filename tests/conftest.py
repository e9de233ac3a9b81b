from __future__ import annotations
from datetime import date
from itertools import count

import pytest

from models import Subject, Topic


TODAY = date(2026, 3, 2)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def ids():
    """Deterministic identity generator: id-1, id-2, ..."""
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("STUDY_PLANNER_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def make_subject():
    """Build a subject whose topics are given as (name, hours) pairs."""
    def _make(subject_id: str, exam_date: date, *topics, name: str | None = None) -> Subject:
        return Subject(
            id=subject_id,
            name=name or subject_id.title(),
            exam_date=exam_date,
            topics=[Topic(id=f"{subject_id}-{tid}", name=tid, hours_needed=h) for tid, h in topics],
            color="hsl(168, 70%, 38%)",
        )
    return _make
