from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from app.services.catalog import ClassSession
from app.services.colors import colors_for

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class Occurrence:
    session_id: str
    occurrence_index: int
    start: datetime
    end: datetime

    @property
    def id(self) -> str:
        return f"{self.session_id}-{self.occurrence_index}"


def align_to_week_start(value: datetime | date) -> datetime:
    """Return local midnight of the Monday on or before ``value``."""
    day = value.date() if isinstance(value, datetime) else value
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min)


def week_offset(weekday: int) -> int:
    # Sunday=0 indexing inside a Monday-first week: Monday -> 0 ... Sunday -> 6.
    return (weekday - 1) % DAYS_PER_WEEK


def current_window_start(now: datetime | None = None) -> datetime:
    return align_to_week_start(now or datetime.now())


def generate_occurrences(
    sessions: Iterable[ClassSession],
    window_start: datetime | date,
    weeks: int,
    *,
    until: datetime | None = None,
) -> list[Occurrence]:
    """Expand weekly sessions into dated occurrences.

    The window covers ``weeks`` whole weeks starting at the Monday on or
    before ``window_start``. When ``until`` is given, occurrences starting at
    or after it are left out. The result depends only on the arguments.
    """
    if weeks < 0:
        raise ValueError("weeks must not be negative")

    week_start = align_to_week_start(window_start)
    occurrences: list[Occurrence] = []
    for session in sessions:
        for week in range(weeks):
            day = week_start + timedelta(days=week * DAYS_PER_WEEK + week_offset(session.weekday))
            start = day + timedelta(minutes=session.start_minute)
            if until is not None and start >= until:
                continue
            occurrences.append(
                Occurrence(
                    session_id=session.id,
                    occurrence_index=week,
                    start=start,
                    end=day + timedelta(minutes=session.end_minute),
                )
            )

    occurrences.sort(key=lambda item: (item.start, item.session_id, item.occurrence_index))
    return occurrences


def decorate_occurrence(occurrence: Occurrence, session: ClassSession) -> dict:
    colors = colors_for(session.course_code)
    return {
        "id": occurrence.id,
        "session_id": occurrence.session_id,
        "occurrence_index": occurrence.occurrence_index,
        "title": session.label,
        "start": occurrence.start,
        "end": occurrence.end,
        "full_title": session.title,
        "description": session.description,
        "room": session.room,
        "campus": session.campus,
        "campus_code": session.campus_code,
        "class_no": session.class_no,
        "instructor": session.instructor,
        "background_color": colors.background,
        "border_color": colors.border,
        "text_color": colors.text,
    }


def render_occurrences(
    sessions: Iterable[ClassSession],
    window_start: datetime | date,
    weeks: int,
    *,
    until: datetime | None = None,
) -> list[dict]:
    session_list = list(sessions)
    by_id = {session.id: session for session in session_list}
    return [
        decorate_occurrence(occurrence, by_id[occurrence.session_id])
        for occurrence in generate_occurrences(session_list, window_start, weeks, until=until)
    ]
