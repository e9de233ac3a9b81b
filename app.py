from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from datetime import date

from calendar_export import schedule_to_ics
from config import TIMETABLE_DAYS, configure_logging
from models import AppState, Settings, UnallocatedTopic
from pdf_export import schedule_to_pdf
from planner import (
    build_coverage_report,
    generate_schedule,
    hours_by_day,
    hours_by_subject,
    missed_entries,
    move_entry,
    reschedule_missed,
    timetable_days,
    toggle_completed,
)
from registry import add_subject, add_topic, remove_subject, remove_topic
from profiles import ProfileStore, save as save_planner

configure_logging()
logger = logging.getLogger(__name__)
store = ProfileStore()

st.set_page_config(page_title="Study Planner", page_icon="📚", layout="wide")


def _ensure_session_state() -> list[str]:
    profiles = store.names()

    if "profile_name" not in st.session_state:
        st.session_state.profile_name = profiles[0]

    if st.session_state.profile_name not in profiles:
        st.session_state.profile_name = profiles[0]

    if "state" not in st.session_state:
        st.session_state.state = store.load(st.session_state.profile_name)

    return profiles


def _persist(state: AppState) -> None:
    save_planner(current_profile, state.subjects, state.schedule, state.settings.daily_hours, store)


def _switch_profile(name: str) -> None:
    logger.info("Switching to profile %r", name)
    st.session_state.profile_name = name
    st.session_state.state = store.load(name)
    st.session_state.pop("unallocated", None)


def _coerce_date(value: object) -> date | None:
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def _render_unallocated(gaps: list[UnallocatedTopic]) -> None:
    if not gaps:
        return
    lines = [
        f"{g.subject_name} / {g.topic_name}: {g.unallocated_hours:g}h do not fit before {g.exam_date.isoformat()}"
        for g in gaps
    ]
    st.warning("Some topics could not be fully scheduled:\n\n- " + "\n- ".join(lines))


def render_subjects(state: AppState) -> None:
    st.header("Subjects")

    st.subheader("Add subject")
    st.caption("Add a subject with its exam date, then add topics to it.")
    with st.form("add_subject_form", clear_on_submit=True):
        col1, col2 = st.columns([3, 1])
        with col1:
            name = st.text_input("Name", placeholder="Subject name (e.g. Mathematics)")
        with col2:
            exam_date = st.date_input("Exam date", value=None, min_value=date.today())
        if st.form_submit_button("Add", type="primary"):
            try:
                subject = add_subject(state.subjects, name, exam_date)
            except ValueError as e:
                st.warning(str(e))
            else:
                _persist(state)
                st.toast(f"{subject.name} added with exam on {subject.exam_date.isoformat()}")

    if not state.subjects:
        st.info("No subjects yet.")
        return

    st.divider()
    today = date.today()
    cols = st.columns(2)
    for idx, subject in enumerate(state.subjects):
        with cols[idx % 2]:
            with st.container(border=True):
                head, action = st.columns([4, 1])
                head.markdown(f"**{subject.name}** · exam {subject.exam_date.isoformat()}")
                head.caption(
                    f"{(subject.exam_date - today).days} days until exam · {len(subject.topics)} topics"
                )
                if action.button("Delete", key=f"del_subject_{subject.id}"):
                    state.subjects, state.schedule = remove_subject(
                        state.subjects, state.schedule, subject.id
                    )
                    _persist(state)
                    _queue_toast("Subject removed.")
                    st.rerun()

                for topic in subject.topics:
                    t_name, t_hours, t_action = st.columns([4, 1, 1])
                    t_name.write(topic.name)
                    t_hours.caption(f"{topic.hours_needed:g}h")
                    if t_action.button("✕", key=f"del_topic_{topic.id}"):
                        state.subjects, state.schedule = remove_topic(
                            state.subjects, state.schedule, subject.id, topic.id
                        )
                        _persist(state)
                        st.rerun()

                with st.form(f"add_topic_{subject.id}", clear_on_submit=True):
                    n_col, h_col = st.columns([3, 1])
                    topic_name = n_col.text_input("Topic name", key=f"topic_name_{subject.id}")
                    topic_hours = h_col.number_input(
                        "Hrs", min_value=0.5, max_value=100.0, value=2.0, step=0.5,
                        key=f"topic_hours_{subject.id}",
                    )
                    if st.form_submit_button("Add topic"):
                        try:
                            add_topic(state.subjects, subject.id, topic_name, topic_hours)
                        except ValueError as e:
                            st.warning(str(e))
                        else:
                            _persist(state)
                            st.rerun()


def _render_timetable(state: AppState, today: date) -> None:
    budget = state.settings.daily_hours
    totals = hours_by_day(state.schedule)
    days = timetable_days(today, TIMETABLE_DAYS)
    for week_start in range(0, len(days), 7):
        cols = st.columns(7)
        for col, d in zip(cols, days[week_start:week_start + 7]):
            with col:
                total = round(totals.get(d, 0.0), 1)
                marker = " ⚠️" if total > budget else ""
                label = "Today" if d == today else d.strftime("%a")
                st.markdown(f"**{label}** {d.strftime('%d %b')}")
                if total > 0:
                    st.caption(f"{total:g}h / {budget:g}h{marker}")
                for entry in [e for e in state.schedule if e.day == d]:
                    text = f"{entry.subject_name}: {entry.topic_name} · {entry.hours:g}h"
                    if entry.completed:
                        text = f"~~{text}~~"
                    if st.button(text, key=f"toggle_{entry.id}", use_container_width=True):
                        state.schedule = toggle_completed(state.schedule, entry.id)
                        _persist(state)
                        st.rerun()


def _render_move_form(state: AppState, today: date) -> None:
    upcoming = sorted(state.schedule, key=lambda e: (e.day, e.subject_name.lower()))
    if not upcoming:
        return
    labels = {
        e.id: f"{e.day.isoformat()} · {e.subject_name}: {e.topic_name} ({e.hours:g}h)"
        for e in upcoming
    }
    with st.form("move_session_form"):
        st.caption("Move a session to another day. Days may go over the daily budget.")
        col1, col2 = st.columns([3, 1])
        entry_id = col1.selectbox("Session", options=list(labels), format_func=labels.get)
        target = col2.date_input("New date", value=today)
        if st.form_submit_button("Move session"):
            target_day = _coerce_date(target)
            if target_day is None:
                st.warning("Pick a date.")
            else:
                state.schedule = move_entry(state.schedule, entry_id, target_day)
                _persist(state)
                _queue_toast("Session moved.")
                st.rerun()


def render_plan(state: AppState) -> None:
    st.header("Study Plan")
    today = date.today()

    col_hours, col_generate, col_missed = st.columns([1, 1, 1])
    with col_hours:
        hours = st.number_input(
            "Study hours/day", min_value=1.0, max_value=12.0,
            value=float(state.settings.daily_hours), step=0.5, key="plan_daily_hours",
        )
        if hours != state.settings.daily_hours:
            state.settings.daily_hours = hours
            _persist(state)
    with col_generate:
        if st.button("Generate Study Plan", type="primary"):
            if not any(s.topics for s in state.subjects):
                st.warning("Add subjects and topics first.")
            else:
                result = generate_schedule(state.subjects, state.settings.daily_hours, today)
                state.schedule = result.entries
                _persist(state)
                st.session_state.unallocated = result.unallocated
                st.toast(f"{len(result.entries)} study sessions planned")
    with col_missed:
        missed = missed_entries(state.schedule, today)
        if missed and st.button(f"Reschedule {len(missed)} missed"):
            result = reschedule_missed(state.schedule, state.settings.daily_hours, today)
            state.schedule = result.schedule
            _persist(state)
            message = f"{len(result.moved)} missed sessions moved forward"
            if result.dropped:
                message += (
                    f"; {len(result.dropped)} found no free day in the next two months and were removed"
                )
            _queue_toast(message)
            st.rerun()

    _render_unallocated(st.session_state.get("unallocated", []))

    if not state.schedule:
        st.info("No study plan yet.")
        return

    st.divider()
    st.subheader("Daily Study Plan")
    st.caption("Click a session to mark it complete.")
    _render_timetable(state, today)
    st.divider()
    _render_move_form(state, today)

    st.divider()
    st.subheader("Exports")
    coverage = build_coverage_report(state.subjects, state.schedule, today)
    ics_bytes, ics_warnings = schedule_to_ics(state.schedule, state.settings)
    st.download_button(
        "Download ICS",
        data=ics_bytes,
        file_name=f"study_plan_{today.isoformat()}.ics",
        mime="text/calendar",
    )
    if ics_warnings:
        st.warning(" | ".join(ics_warnings))

    pdf_bytes = schedule_to_pdf(state.schedule, state.settings, today, TIMETABLE_DAYS, coverage)
    st.download_button(
        "Print Schedule (PDF)",
        data=pdf_bytes,
        file_name=f"study_plan_{today.isoformat()}.pdf",
        mime="application/pdf",
    )


def render_progress(state: AppState) -> None:
    st.header("Progress")
    if not state.schedule:
        st.info("No study plan yet.")
        return

    total = sum(e.hours for e in state.schedule)
    done = sum(e.hours for e in state.schedule if e.completed)
    a, b, c = st.columns(3)
    a.metric("Planned hours", round(total, 1))
    b.metric("Completed hours", round(done, 1))
    c.metric("Remaining hours", round(total - done, 1))

    st.subheader("Study hours by subject")
    by_subject = hours_by_subject(state.schedule)
    st.bar_chart(pd.DataFrame({"Hours": by_subject}))

    st.subheader("Coverage")
    badge = {"HIGH": "🔴 HIGH", "MED": "🟠 MED", "LOW": "🟢 LOW", "OK": "✅ OK"}
    rows = [
        {
            "Subject": r["subject"],
            "Level": badge.get(r["level"], r["level"]),
            "Exam": r["exam_date"],
            "Days left": r["days_left"],
            "Needed (h)": r["needed_hours"],
            "Planned (h)": r["scheduled_hours"],
            "Done (h)": r["completed_hours"],
            "Unplanned (h)": r["unscheduled_hours"],
        }
        for r in build_coverage_report(state.subjects, state.schedule, date.today())
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def render_settings(state: AppState) -> None:
    st.header("Settings")
    daily_hours = st.number_input(
        "Study hours per day", min_value=1.0, max_value=12.0,
        value=float(state.settings.daily_hours), step=0.5, key="settings_daily_hours",
    )
    start_hour = st.slider(
        "Calendar export start hour", 0, 23, state.settings.preferred_start_hour,
        key="settings_start_hour",
    )
    if st.button("Save settings", type="primary", key="save_settings"):
        state.settings = Settings(daily_hours=daily_hours, preferred_start_hour=start_hour)
        store.save(current_profile, state)
        st.toast("Settings saved.")

    if st.button("Reset current profile (keep settings)"):

        @st.dialog("Reset current profile?")
        def _confirm_reset() -> None:
            st.write("This will clear subjects and the study plan. Settings stay.")
            if st.button("Reset profile", type="primary"):
                state.subjects = []
                state.schedule = []
                _persist(state)
                st.session_state.pop("unallocated", None)
                _queue_toast("Profile reset.")
                st.rerun()

        _confirm_reset()


profiles = _ensure_session_state()
state: AppState = st.session_state.state
current_profile = st.session_state.profile_name

st.title("Study Planner")
st.caption("Plan your study schedule across subjects and topics.")
_flush_toast()

with st.sidebar:
    st.header("Profile")
    profiles = store.names()
    selected_profile = st.selectbox(
        "Active profile",
        options=profiles,
        index=profiles.index(current_profile) if current_profile in profiles else 0,
    )
    if selected_profile != current_profile:
        _switch_profile(selected_profile)
        st.rerun()

    with st.form("create_profile_form"):
        new_profile_name = st.text_input("New profile name", placeholder="e.g. Semester A")
        if st.form_submit_button("Create profile"):
            try:
                new_state = store.create(new_profile_name)
            except ValueError as e:
                st.error(str(e))
            else:
                _queue_toast(f"Profile '{new_profile_name.strip()}' created.")
                st.session_state.profile_name = new_profile_name.strip()
                st.session_state.state = new_state
                st.session_state.pop("unallocated", None)
                st.rerun()

    if st.button("Delete profile", disabled=len(profiles) <= 1):

        @st.dialog("Delete profile?")
        def _confirm_delete_profile() -> None:
            st.write(f"Delete profile '{current_profile}' and its data?")
            if st.button("Delete", type="primary"):
                store.delete(current_profile)
                _switch_profile(store.names()[0])
                _queue_toast("Profile deleted.")
                st.rerun()

        _confirm_delete_profile()

    st.divider()
    st.header("Navigate")
    pages = ["Subjects", "Plan", "Progress", "Settings"]
    page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")

if page == "Subjects":
    render_subjects(state)
elif page == "Plan":
    render_plan(state)
elif page == "Progress":
    render_progress(state)
elif page == "Settings":
    render_settings(state)
