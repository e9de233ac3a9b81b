from __future__ import annotations
from datetime import date, timedelta
from io import BytesIO
from typing import List
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import ScheduleEntry, Settings


def schedule_to_pdf(
    entries: List[ScheduleEntry],
    settings: Settings,
    start: date,
    num_days: int,
    coverage: List[dict],
) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    end = start + timedelta(days=num_days - 1)
    elems.append(Paragraph(f"Study Plan: {start.isoformat()} - {end.isoformat()}", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(f"Study hours/day: {settings.daily_hours:g}", styles["Normal"]))
    elems.append(Spacer(1, 12))

    if coverage:
        elems.append(Paragraph("Subjects", styles["Heading3"]))
        summary = [["Subject", "Exam", "Days left", "Needed (h)", "Planned (h)", "Done (h)", "Unplanned (h)"]]
        for r in coverage:
            summary.append([
                r["subject"],
                r["exam_date"].isoformat(),
                str(r["days_left"]),
                f"{r['needed_hours']:g}",
                f"{r['scheduled_hours']:g}",
                f"{r['completed_hours']:g}",
                f"{r['unscheduled_hours']:g}",
            ])
        summary_table = Table(summary, hAlign="LEFT")
        summary_table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
        ]))
        elems.append(summary_table)
        elems.append(Spacer(1, 12))

    by_day: dict[date, List[ScheduleEntry]] = {}
    for e in entries:
        if start <= e.day <= end:
            by_day.setdefault(e.day, []).append(e)

    for day in sorted(by_day.keys()):
        elems.append(Paragraph(day.strftime("%A, %Y-%m-%d"), styles["Heading3"]))
        day_entries = sorted(by_day[day], key=lambda x: (x.subject_name.lower(), x.topic_name.lower()))
        table_data = [["Subject", "Topic", "Hours", "Done"]]
        total = 0.0
        for e in day_entries:
            total += e.hours
            table_data.append([
                e.subject_name,
                e.topic_name,
                f"{e.hours:g}",
                "Yes" if e.completed else "No",
            ])
        table_data.append(["Total", "", f"{round(total, 1):g}", ""])

        table = Table(table_data, hAlign="LEFT", colWidths=[140, 200, 50, 50])
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
            ("ALIGN", (2, 1), (3, -1), "RIGHT"),
        ]
        if total > settings.daily_hours:
            style.append(("TEXTCOLOR", (2, -1), (2, -1), colors.orange))
        table.setStyle(TableStyle(style))
        elems.append(table)
        elems.append(Spacer(1, 8))

    if not by_day:
        elems.append(Paragraph("No study sessions in this window.", styles["Normal"]))

    doc.build(elems)
    return buf.getvalue()
