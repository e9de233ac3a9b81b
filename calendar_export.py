from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Tuple
from icalendar import Calendar, Event as IcsEvent
from models import ScheduleEntry, Settings
from planner import overloaded_days


def schedule_to_ics(
    entries: List[ScheduleEntry],
    settings: Settings,
) -> Tuple[bytes, List[str]]:
    """
    Build an ICS calendar with one event per study session. Sessions on the
    same day are stacked back to back from the preferred start hour.
    """
    cal = Calendar()
    cal.add("PRODID", "-//Study Planner//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Plan")

    warnings: List[str] = []
    if not entries:
        return cal.to_ical(), warnings

    cursors: Dict[date, datetime] = {}
    late_days = set()

    for entry in sorted(entries, key=lambda x: (x.day, x.subject_name.lower(), x.topic_name.lower())):
        if entry.hours <= 0:
            continue
        start = cursors.get(entry.day) or datetime.combine(
            entry.day, time(hour=settings.preferred_start_hour)
        )
        end = start + timedelta(hours=entry.hours)
        cursors[entry.day] = end
        if end.date() != entry.day:
            late_days.add(entry.day)

        event = IcsEvent()
        event.add("uid", f"{entry.id}@study-planner")
        event.add("summary", f"Study: {entry.subject_name} - {entry.topic_name}")
        event.add("dtstart", start)
        event.add("dtend", end)
        status = "completed" if entry.completed else "planned"
        event.add("description", f"{entry.hours:g}h {status}.")
        cal.add_component(event)

    for d in overloaded_days(entries, settings.daily_hours):
        warnings.append(f"{d.isoformat()} has more than {settings.daily_hours:g}h of study planned.")
    for d in sorted(late_days):
        warnings.append(f"Sessions on {d.isoformat()} run past midnight.")

    return cal.to_ical(), warnings
