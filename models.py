from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import date
from typing import List

from config import DEFAULT_DAILY_HOURS, SESSION_CAP_HOURS


class Topic(BaseModel):
    id: str
    name: str
    hours_needed: float = Field(gt=0)


class Subject(BaseModel):
    id: str
    name: str
    exam_date: date
    topics: List[Topic] = Field(default_factory=list)
    color: str = ""


class ScheduleEntry(BaseModel):
    id: str
    subject_id: str
    subject_name: str
    topic_id: str
    topic_name: str
    day: date
    hours: float = Field(gt=0, le=SESSION_CAP_HOURS)
    completed: bool = False
    color: str = ""


class Settings(BaseModel):
    daily_hours: float = Field(default=DEFAULT_DAILY_HOURS, ge=1, le=12)
    preferred_start_hour: int = Field(default=18, ge=0, le=23)


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    schedule: List[ScheduleEntry] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)
    profile: str = "default"


class UnallocatedTopic(BaseModel):
    subject_id: str
    subject_name: str
    topic_id: str
    topic_name: str
    exam_date: date
    unallocated_hours: float


class ScheduleResult(BaseModel):
    entries: List[ScheduleEntry] = Field(default_factory=list)
    unallocated: List[UnallocatedTopic] = Field(default_factory=list)


class RescheduleResult(BaseModel):
    schedule: List[ScheduleEntry] = Field(default_factory=list)
    moved: List[ScheduleEntry] = Field(default_factory=list)
    dropped: List[ScheduleEntry] = Field(default_factory=list)
