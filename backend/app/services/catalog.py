from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreUnavailableError
from app.models.course import Course
from app.services.normalizer import (
    ParseError,
    ValidationError,
    format_minutes,
    parse_time_range,
    parse_weekday,
    weekday_abbreviation,
)

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NO = "01"
UNKNOWN_CAMPUS = "Unknown Campus"

# Room codes start with a three-letter campus prefix.
CAMPUS_NAMES: dict[str, str] = {
    "ADC": "Admiralty Learning Centre, 18 Harcourt Road, Hong Kong",
    "CIT": "CITA Learning Centre, Kowloon Bay",
    "FTC": "HKU SPACE Fortress Tower Learning Centre, North Point",
    "HPC": "HPSHCC Campus, Causeway Bay",
    "IEC": "Island East Campus, North Point",
    "ISP": "Po Kong Village Road Campus, Pokfulam",
    "KEC": "Kowloon East Campus, Kowloon Bay",
    "KEE": "Kowloon East (Exchange) Learning Centre",
    "KEK": "Kowloon East (Kingston) Learning Centre",
    "KWC": "Kowloon West Campus, Cheung Sha Wan",
    "UNC": "United Centre, Admiralty",
    "SSC": "Sheung Shui Learning Centre",
}


@dataclass(frozen=True)
class ClassSession:
    """One weekly meeting block of one course section."""

    id: str
    course_code: str
    class_no: str
    weekday: int
    start_minute: int
    end_minute: int
    room: str
    campus_code: str
    title: str
    campus: str = UNKNOWN_CAMPUS
    description: str = ""
    instructor: str = ""

    @property
    def day(self) -> str:
        return weekday_abbreviation(self.weekday)

    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minute)

    @property
    def label(self) -> str:
        return f"{self.course_code} - {self.class_no}" if self.class_no else self.course_code


@dataclass(frozen=True)
class SkippedRecord:
    course_code: str
    class_no: str
    reason: str


@dataclass
class CatalogLoadResult:
    sessions: list[ClassSession] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)

    def by_id(self) -> dict[str, ClassSession]:
        return {session.id: session for session in self.sessions}


def campus_code_for(room: str) -> str:
    return room.strip()[:3].upper()


def campus_name_for(room: str) -> str:
    room = room.strip()
    if not room:
        return UNKNOWN_CAMPUS
    return CAMPUS_NAMES.get(campus_code_for(room), room)


def _text(value: object) -> str:
    return str(value).strip() if value is not None else ""


def load_catalog(raw_courses: Iterable[Mapping]) -> CatalogLoadResult:
    """Normalize raw course timetable rows into sessions.

    Rows whose day or time cannot be normalized are dropped and recorded in
    ``skipped``; one bad row never fails the whole catalog.
    """
    result = CatalogLoadResult()
    parsed: list[dict] = []

    for course in raw_courses:
        code = _text(course.get("code"))
        title = _text(course.get("title"))
        description = _text(course.get("description"))
        rows = course.get("timetable") or []
        if not code:
            result.skipped.append(SkippedRecord(course_code="", class_no="", reason="Course has no code"))
            continue

        for row in rows:
            if not isinstance(row, Mapping):
                result.skipped.append(SkippedRecord(course_code=code, class_no="", reason="Malformed timetable row"))
                continue
            class_no = _text(row.get("classNo"))
            try:
                weekday = parse_weekday(_text(row.get("day")))
                start_minute, end_minute = parse_time_range(_text(row.get("time")))
            except (ParseError, ValidationError) as exc:
                result.skipped.append(SkippedRecord(course_code=code, class_no=class_no, reason=str(exc)))
                continue
            parsed.append(
                {
                    "course_code": code,
                    "class_no": class_no,
                    "title": title,
                    "weekday": weekday,
                    "start_minute": start_minute,
                    "end_minute": end_minute,
                    "room": _text(row.get("room")),
                    "description": description,
                    "instructor": _text(row.get("instructor")),
                }
            )

    parsed.sort(key=lambda item: (item["course_code"], item["class_no"]))

    emitted_ids: set[str] = set()
    block_counts: dict[str, int] = {}
    for item in parsed:
        base_id = f"{item['course_code']}-{item['class_no'] or DEFAULT_CLASS_NO}"
        session_id = base_id
        count = block_counts.get(base_id, 1)
        # A literal classNo such as "01-2" may already hold a suffixed id.
        while session_id in emitted_ids:
            count += 1
            session_id = f"{base_id}-{count}"
        block_counts[base_id] = count
        emitted_ids.add(session_id)
        room = item["room"]
        result.sessions.append(
            ClassSession(
                id=session_id,
                campus_code=campus_code_for(room),
                campus=campus_name_for(room),
                **item,
            )
        )

    for record in result.skipped:
        logger.warning(
            "Skipped timetable row for %s %s: %s",
            record.course_code or "<no code>",
            record.class_no or DEFAULT_CLASS_NO,
            record.reason,
        )
    logger.info("Loaded %d session(s), skipped %d row(s)", len(result.sessions), len(result.skipped))
    return result


def fetch_course_records(db: Session) -> list[dict]:
    try:
        courses = db.execute(select(Course).order_by(Course.code.asc())).scalars().all()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Course catalog query failed")
        raise StoreUnavailableError("Course catalog is unavailable") from exc
    return [
        {
            "code": course.code,
            "title": course.title,
            "description": course.description or "",
            "timetable": list(course.timetable or []),
        }
        for course in courses
        if course.timetable
    ]


def load_catalog_from_db(db: Session) -> CatalogLoadResult:
    return load_catalog(fetch_course_records(db))


def filter_sessions(sessions: Iterable[ClassSession], term: str | None) -> list[ClassSession]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(sessions)
    return [
        session
        for session in sessions
        if needle in session.course_code.lower()
        or needle in session.title.lower()
        or needle in session.class_no.lower()
        or needle in session.campus_code.lower()
    ]
