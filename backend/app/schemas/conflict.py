from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.services.catalog import ClassSession, campus_code_for, campus_name_for
from app.services.conflict_service import Conflict, describe_conflict
from app.services.normalizer import format_minutes, parse_time, parse_weekday, weekday_abbreviation


class SessionIn(BaseModel):
    """A candidate session as the client holds it; not necessarily saved yet."""

    id: str = Field(min_length=1, max_length=120)
    course_code: str = Field(default="", alias="courseCode", max_length=50)
    class_no: str = Field(default="", alias="classNo", max_length=20)
    title: str = Field(default="", max_length=200)
    weekday: int | None = Field(default=None, ge=0, le=6)
    day: str | None = None
    start_minute: int | None = Field(default=None, alias="startMinute", ge=0, le=1439)
    end_minute: int | None = Field(default=None, alias="endMinute", ge=0, le=1439)
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    room: str = Field(default="", max_length=100)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def resolve_schedule(self) -> "SessionIn":
        if self.weekday is None:
            if self.day is None:
                raise ValueError("Either weekday or day is required")
            self.weekday = parse_weekday(self.day)
        if self.start_minute is None:
            if self.start_time is None:
                raise ValueError("Either startMinute or startTime is required")
            self.start_minute = parse_time(self.start_time)
        if self.end_minute is None:
            if self.end_time is None:
                raise ValueError("Either endMinute or endTime is required")
            self.end_minute = parse_time(self.end_time)
        if self.start_minute >= self.end_minute:
            raise ValueError("Session must end after it starts")
        return self

    def to_session(self) -> ClassSession:
        return ClassSession(
            id=self.id,
            course_code=self.course_code or self.id,
            class_no=self.class_no,
            weekday=self.weekday,
            start_minute=self.start_minute,
            end_minute=self.end_minute,
            room=self.room,
            campus_code=campus_code_for(self.room),
            title=self.title,
            campus=campus_name_for(self.room),
        )


class ConflictCheckRequest(BaseModel):
    sessions: list[SessionIn] = Field(default_factory=list, max_length=200)


class ConflictOut(BaseModel):
    session_id_a: str = Field(alias="sessionIdA")
    session_id_b: str = Field(alias="sessionIdB")
    weekday: int
    day: str
    overlap_start_minute: int = Field(alias="overlapStartMinute")
    overlap_end_minute: int = Field(alias="overlapEndMinute")
    overlap_start: str = Field(alias="overlapStart")
    overlap_end: str = Field(alias="overlapEnd")
    description: str

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_conflict(cls, conflict: Conflict, sessions_by_id: dict[str, ClassSession]) -> "ConflictOut":
        return cls(
            session_id_a=conflict.session_id_a,
            session_id_b=conflict.session_id_b,
            weekday=conflict.weekday,
            day=weekday_abbreviation(conflict.weekday),
            overlap_start_minute=conflict.overlap_start_minute,
            overlap_end_minute=conflict.overlap_end_minute,
            overlap_start=format_minutes(conflict.overlap_start_minute),
            overlap_end=format_minutes(conflict.overlap_end_minute),
            description=describe_conflict(conflict, sessions_by_id),
        )


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool = Field(alias="hasConflicts")
    conflicts: list[ConflictOut]

    model_config = ConfigDict(populate_by_name=True)
