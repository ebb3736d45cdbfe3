from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.conflict import ConflictOut
from app.services.catalog import ClassSession
from app.services.colors import color_for


class SessionOut(BaseModel):
    id: str
    course_code: str = Field(alias="courseCode")
    class_no: str = Field(alias="classNo")
    title: str
    description: str = ""
    weekday: int
    day: str
    start_minute: int = Field(alias="startMinute")
    end_minute: int = Field(alias="endMinute")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    room: str
    campus: str
    campus_code: str = Field(alias="campusCode")
    instructor: str = ""
    color: str

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_session(cls, session: ClassSession) -> "SessionOut":
        return cls(
            id=session.id,
            course_code=session.course_code,
            class_no=session.class_no,
            title=session.title,
            description=session.description,
            weekday=session.weekday,
            day=session.day,
            start_minute=session.start_minute,
            end_minute=session.end_minute,
            start_time=session.start_time,
            end_time=session.end_time,
            room=session.room,
            campus=session.campus,
            campus_code=session.campus_code,
            instructor=session.instructor,
            color=color_for(session.course_code),
        )


class OccurrenceOut(BaseModel):
    id: str
    session_id: str = Field(alias="sessionId")
    occurrence_index: int = Field(alias="occurrenceIndex")
    title: str
    start: datetime
    end: datetime
    full_title: str = Field(alias="fullTitle")
    description: str = ""
    room: str
    campus: str
    campus_code: str = Field(alias="campusCode")
    class_no: str = Field(alias="classNo")
    instructor: str = ""
    background_color: str = Field(alias="backgroundColor")
    border_color: str = Field(alias="borderColor")
    text_color: str = Field(alias="textColor")
    all_day: bool = Field(default=False, alias="allDay")

    model_config = ConfigDict(populate_by_name=True)


class PersonalTimetableUpdate(BaseModel):
    session_ids: list[str] = Field(default_factory=list, alias="sessionIds", max_length=200)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("session_ids")
    @classmethod
    def validate_session_ids(cls, value: list[str]) -> list[str]:
        for item in value:
            if len(item) > 120:
                raise ValueError("Session id length cannot exceed 120 characters")
        return value


class PersonalTimetableOut(BaseModel):
    student_id: str = Field(alias="studentId")
    session_ids: list[str] = Field(default_factory=list, alias="sessionIds")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


class SelectionViewOut(PersonalTimetableOut):
    state: str
    sessions: list[SessionOut] = Field(default_factory=list)
    missing_session_ids: list[str] = Field(default_factory=list, alias="missingSessionIds")
    has_conflicts: bool = Field(default=False, alias="hasConflicts")
    conflicts: list[ConflictOut] = Field(default_factory=list)
    occurrences: list[OccurrenceOut] = Field(default_factory=list)
