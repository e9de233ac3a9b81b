from __future__ import annotations
import logging
import math
from datetime import date
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from config import DEFAULT_TOPIC_HOURS
from models import ScheduleEntry, Subject, Topic

logger = logging.getLogger(__name__)

SUBJECT_COLORS = [
    "hsl(168, 70%, 38%)",
    "hsl(262, 60%, 55%)",
    "hsl(43, 96%, 56%)",
    "hsl(200, 70%, 50%)",
    "hsl(340, 65%, 55%)",
    "hsl(25, 80%, 55%)",
]


def _new_id() -> str:
    return str(uuid4())


def find_subject(subjects: List[Subject], subject_id: str) -> Optional[Subject]:
    return next((s for s in subjects if s.id == subject_id), None)


def _parse_hours(value: object) -> float:
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TOPIC_HOURS
    if math.isnan(hours) or hours <= 0:
        return DEFAULT_TOPIC_HOURS
    return hours


def add_subject(
    subjects: List[Subject],
    name: str,
    exam_date: Optional[date],
    today: Optional[date] = None,
    new_id: Optional[Callable[[], str]] = None,
) -> Subject:
    """
    Append a new subject and return it. Colors cycle through
    ``SUBJECT_COLORS`` by position.
    """
    name = (name or "").strip()
    if not name or exam_date is None:
        raise ValueError("Enter subject name and exam date.")
    today = today or date.today()
    if exam_date < today:
        raise ValueError("Exam date cannot be in the past.")

    subject = Subject(
        id=(new_id or _new_id)(),
        name=name,
        exam_date=exam_date,
        topics=[],
        color=SUBJECT_COLORS[len(subjects) % len(SUBJECT_COLORS)],
    )
    subjects.append(subject)
    logger.info("Added subject %s (exam %s)", subject.name, subject.exam_date)
    return subject


def remove_subject(
    subjects: List[Subject],
    schedule: List[ScheduleEntry],
    subject_id: str,
) -> Tuple[List[Subject], List[ScheduleEntry]]:
    kept_subjects = [s for s in subjects if s.id != subject_id]
    kept_schedule = [e for e in schedule if e.subject_id != subject_id]
    logger.info(
        "Removed subject %s and %d sessions",
        subject_id, len(schedule) - len(kept_schedule),
    )
    return kept_subjects, kept_schedule


def add_topic(
    subjects: List[Subject],
    subject_id: str,
    name: str,
    hours_needed: object = DEFAULT_TOPIC_HOURS,
    new_id: Optional[Callable[[], str]] = None,
) -> Topic:
    name = (name or "").strip()
    if not name:
        raise ValueError("Topic name is required.")
    subject = find_subject(subjects, subject_id)
    if subject is None:
        raise ValueError("Subject not found.")

    topic = Topic(
        id=(new_id or _new_id)(),
        name=name,
        hours_needed=_parse_hours(hours_needed),
    )
    subject.topics.append(topic)
    return topic


def remove_topic(
    subjects: List[Subject],
    schedule: List[ScheduleEntry],
    subject_id: str,
    topic_id: str,
) -> Tuple[List[Subject], List[ScheduleEntry]]:
    updated = []
    for s in subjects:
        if s.id == subject_id:
            s = s.model_copy(update={"topics": [t for t in s.topics if t.id != topic_id]})
        updated.append(s)
    kept_schedule = [e for e in schedule if e.topic_id != topic_id]
    return updated, kept_schedule
