from __future__ import annotations
import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from config import RESCHEDULE_HORIZON_DAYS, SESSION_CAP_HOURS, TIMETABLE_DAYS
from models import (
    RescheduleResult,
    ScheduleEntry,
    ScheduleResult,
    Subject,
    UnallocatedTopic,
)

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def _new_id() -> str:
    return str(uuid4())


def _round_hours(hours: float) -> float:
    return round(hours * 10) / 10


def _days_left(today: date, exam_date: date) -> int:
    return max(0, (exam_date - today).days)


def generate_schedule(
    subjects: List[Subject],
    daily_hours: float,
    today: Optional[date] = None,
    new_id: Optional[IdFactory] = None,
) -> ScheduleResult:
    """
    Spread every topic's hours over the days before its subject's exam.

    Topics are planned earliest exam first. Each day holds at most
    ``daily_hours`` across all subjects and each session at most
    ``SESSION_CAP_HOURS``. Hours that do not fit before the exam are
    reported in ``unallocated`` instead of raising.
    """
    today = today or date.today()
    new_id = new_id or _new_id

    flat = []
    for s in subjects:
        for t in s.topics:
            flat.append((s, t))
    # sorted() is stable, so topics sharing an exam date keep registry order
    flat.sort(key=lambda pair: pair[0].exam_date)

    entries: List[ScheduleEntry] = []
    unallocated: List[UnallocatedTopic] = []
    used: Dict[date, float] = {}

    for subject, topic in flat:
        remaining = topic.hours_needed
        day = today
        while _round_hours(remaining) > 0 and day < subject.exam_date and daily_hours > 0:
            available = max(0.0, daily_hours - used.get(day, 0.0))
            give = min(remaining, available, SESSION_CAP_HOURS)
            # float crumbs left on a day are not a session
            if _round_hours(give) > 0:
                entries.append(ScheduleEntry(
                    id=new_id(),
                    subject_id=subject.id,
                    subject_name=subject.name,
                    topic_id=topic.id,
                    topic_name=topic.name,
                    day=day,
                    hours=_round_hours(give),
                    completed=False,
                    color=subject.color,
                ))
                used[day] = used.get(day, 0.0) + give
                remaining -= give
            day = day + timedelta(days=1)

        if _round_hours(remaining) > 0:
            unallocated.append(UnallocatedTopic(
                subject_id=subject.id,
                subject_name=subject.name,
                topic_id=topic.id,
                topic_name=topic.name,
                exam_date=subject.exam_date,
                unallocated_hours=_round_hours(remaining),
            ))

    logger.info(
        "Generated %d sessions for %d topics (budget %.1fh/day)",
        len(entries), len(flat), daily_hours,
    )
    for gap in unallocated:
        logger.warning(
            "Topic %s/%s has %.1fh that do not fit before %s",
            gap.subject_name, gap.topic_name, gap.unallocated_hours, gap.exam_date,
        )
    return ScheduleResult(entries=entries, unallocated=unallocated)


def _is_missed(entry: ScheduleEntry, today: date) -> bool:
    return not entry.completed and entry.day < today


def missed_entries(schedule: List[ScheduleEntry], today: Optional[date] = None) -> List[ScheduleEntry]:
    today = today or date.today()
    return [e for e in schedule if _is_missed(e, today)]


def reschedule_missed(
    schedule: List[ScheduleEntry],
    daily_hours: float,
    today: Optional[date] = None,
    new_id: Optional[IdFactory] = None,
) -> RescheduleResult:
    """
    Move incomplete past sessions onto the earliest day from today that
    still has room. Every missed entry restarts its search at today, so the
    input order decides who gets the earliest slots. Entries with no room
    within ``RESCHEDULE_HORIZON_DAYS`` are dropped and reported.
    """
    today = today or date.today()
    new_id = new_id or _new_id

    missed = [e for e in schedule if _is_missed(e, today)]
    if not missed:
        return RescheduleResult(schedule=list(schedule))

    kept = [e for e in schedule if not _is_missed(e, today)]
    used: Dict[date, float] = {}
    for e in kept:
        used[e.day] = used.get(e.day, 0.0) + e.hours

    moved: List[ScheduleEntry] = []
    dropped: List[ScheduleEntry] = []
    for entry in missed:
        placed = False
        for offset in range(RESCHEDULE_HORIZON_DAYS):
            candidate = today + timedelta(days=offset)
            current = used.get(candidate, 0.0)
            if current + entry.hours <= daily_hours:
                moved.append(entry.model_copy(update={"id": new_id(), "day": candidate}))
                used[candidate] = current + entry.hours
                placed = True
                break
        if not placed:
            dropped.append(entry)

    logger.info("Rescheduled %d of %d missed sessions", len(moved), len(missed))
    if dropped:
        logger.warning(
            "Dropped %d missed sessions with no room in the next %d days",
            len(dropped), RESCHEDULE_HORIZON_DAYS,
        )
    return RescheduleResult(schedule=kept + moved, moved=moved, dropped=dropped)


def _replace_entry(schedule: List[ScheduleEntry], entry_id: str, **changes) -> List[ScheduleEntry]:
    if not any(e.id == entry_id for e in schedule):
        raise ValueError("Study session not found.")
    return [e.model_copy(update=changes) if e.id == entry_id else e for e in schedule]


def move_entry(schedule: List[ScheduleEntry], entry_id: str, target_day: date) -> List[ScheduleEntry]:
    # No capacity check; overloaded days are only flagged in the timetable.
    return _replace_entry(schedule, entry_id, day=target_day)


def toggle_completed(schedule: List[ScheduleEntry], entry_id: str) -> List[ScheduleEntry]:
    current = next((e for e in schedule if e.id == entry_id), None)
    if current is None:
        raise ValueError("Study session not found.")
    return _replace_entry(schedule, entry_id, completed=not current.completed)


def hours_by_day(schedule: List[ScheduleEntry]) -> Dict[date, float]:
    totals: Dict[date, float] = {}
    for e in schedule:
        totals[e.day] = totals.get(e.day, 0.0) + e.hours
    return totals


def overloaded_days(schedule: List[ScheduleEntry], daily_hours: float) -> List[date]:
    totals = hours_by_day(schedule)
    return sorted(d for d, h in totals.items() if h > daily_hours)


def hours_by_subject(schedule: List[ScheduleEntry]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for e in schedule:
        totals[e.subject_name] = totals.get(e.subject_name, 0.0) + e.hours
    return totals


def timetable_days(today: Optional[date] = None, num_days: int = TIMETABLE_DAYS) -> List[date]:
    today = today or date.today()
    return [today + timedelta(days=i) for i in range(num_days)]


def build_coverage_report(
    subjects: List[Subject],
    schedule: List[ScheduleEntry],
    today: Optional[date] = None,
) -> List[dict]:
    """Per-subject view of how much of the needed study time is on the plan."""
    today = today or date.today()
    scheduled: Dict[str, float] = {}
    completed: Dict[str, float] = {}
    for e in schedule:
        scheduled[e.subject_id] = scheduled.get(e.subject_id, 0.0) + e.hours
        if e.completed:
            completed[e.subject_id] = completed.get(e.subject_id, 0.0) + e.hours

    rows = []
    for s in subjects:
        needed = sum(t.hours_needed for t in s.topics)
        planned = scheduled.get(s.id, 0.0)
        gap = max(0.0, needed - planned)
        days_left = _days_left(today, s.exam_date)
        if gap < 0.05:
            level = "OK"
        elif days_left <= 3 or gap >= needed / 2:
            level = "HIGH"
        elif days_left <= 7:
            level = "MED"
        else:
            level = "LOW"
        rows.append({
            "subject_id": s.id,
            "subject": s.name,
            "exam_date": s.exam_date,
            "days_left": days_left,
            "topics": len(s.topics),
            "needed_hours": _round_hours(needed),
            "scheduled_hours": _round_hours(planned),
            "completed_hours": _round_hours(completed.get(s.id, 0.0)),
            "unscheduled_hours": _round_hours(gap),
            "level": level,
        })

    order = {"HIGH": 0, "MED": 1, "LOW": 2, "OK": 3}
    rows.sort(key=lambda r: (order[r["level"]], r["exam_date"]))
    return rows
