from __future__ import annotations
from datetime import timedelta

import pytest

from models import ScheduleEntry
from registry import SUBJECT_COLORS, add_subject, add_topic, find_subject, remove_subject, remove_topic


def _entry(entry_id, subject_id, topic_id, day):
    return ScheduleEntry(
        id=entry_id,
        subject_id=subject_id,
        subject_name=subject_id,
        topic_id=topic_id,
        topic_name=topic_id,
        day=day,
        hours=1,
    )


class TestSubjects:

    def test_add_subject_assigns_colors_round_robin(self, today, ids):
        subjects = []
        for i in range(len(SUBJECT_COLORS) + 1):
            add_subject(subjects, f"Subject {i}", today + timedelta(days=7), today=today, new_id=ids)

        assert [s.color for s in subjects[:len(SUBJECT_COLORS)]] == SUBJECT_COLORS
        assert subjects[-1].color == SUBJECT_COLORS[0]
        assert subjects[0].id == "id-1"

    def test_add_subject_strips_name(self, today):
        subjects = []
        subject = add_subject(subjects, "  Chemistry ", today, today=today)

        assert subject.name == "Chemistry"
        assert subject.topics == []
        assert subjects == [subject]

    @pytest.mark.parametrize("name, offset", [("", 3), ("   ", 3), ("Math", None), ("Math", -1)])
    def test_add_subject_rejects_bad_input(self, today, name, offset):
        exam = None if offset is None else today + timedelta(days=offset)
        subjects = []

        with pytest.raises(ValueError):
            add_subject(subjects, name, exam, today=today)
        assert subjects == []

    def test_remove_subject_cascades_to_schedule(self, today, make_subject):
        math = make_subject("math", today + timedelta(days=4), ("algebra", 2))
        bio = make_subject("bio", today + timedelta(days=4), ("cells", 2))
        schedule = [
            _entry("e1", "math", "math-algebra", today),
            _entry("e2", "bio", "bio-cells", today),
        ]

        subjects, schedule = remove_subject([math, bio], schedule, "math")

        assert [s.id for s in subjects] == ["bio"]
        assert [e.id for e in schedule] == ["e2"]


class TestTopics:

    def test_add_topic_appends_to_subject(self, today, make_subject, ids):
        math = make_subject("math", today + timedelta(days=4))

        topic = add_topic([math], "math", " Algebra ", 3.5, new_id=ids)

        assert math.topics == [topic]
        assert (topic.id, topic.name, topic.hours_needed) == ("id-1", "Algebra", 3.5)

    @pytest.mark.parametrize("raw, expected", [("4", 4.0), ("abc", 2.0), (0, 2.0), (-1, 2.0), (None, 2.0)])
    def test_add_topic_falls_back_to_default_hours(self, today, make_subject, raw, expected):
        math = make_subject("math", today + timedelta(days=4))

        topic = add_topic([math], "math", "Algebra", raw)

        assert topic.hours_needed == expected

    def test_add_topic_requires_name_and_subject(self, today, make_subject):
        math = make_subject("math", today + timedelta(days=4))

        with pytest.raises(ValueError):
            add_topic([math], "math", "  ")
        with pytest.raises(ValueError):
            add_topic([math], "nope", "Algebra")

    def test_remove_topic_cascades_only_that_topic(self, today, make_subject):
        math = make_subject("math", today + timedelta(days=4), ("algebra", 2), ("geometry", 1))
        schedule = [
            _entry("e1", "math", "math-algebra", today),
            _entry("e2", "math", "math-geometry", today),
        ]

        subjects, schedule = remove_topic([math], schedule, "math", "math-algebra")

        assert [t.id for t in find_subject(subjects, "math").topics] == ["math-geometry"]
        assert [e.id for e in schedule] == ["e2"]
        assert len(math.topics) == 2
