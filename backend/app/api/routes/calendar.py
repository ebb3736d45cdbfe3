from __future__ import annotations

from datetime import date, datetime
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_own_timetable
from app.core.config import get_settings
from app.core.exceptions import StoreUnavailableError
from app.schemas.conflict import ConflictCheckRequest, ConflictCheckResponse, ConflictOut
from app.schemas.timetable import (
    OccurrenceOut,
    PersonalTimetableOut,
    PersonalTimetableUpdate,
    SelectionViewOut,
    SessionOut,
)
from app.services.catalog import ClassSession, filter_sessions, load_catalog_from_db
from app.services.conflict_service import detect_conflicts
from app.services.occurrences import current_window_start, render_occurrences
from app.services.personal_timetable import PersonalTimetableStore, normalize_session_ids
from app.services.selection import TimetableSelection

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


def _window_start(start: date | None) -> datetime | date:
    return current_window_start() if start is None else start


def build_selection_view(
    student_id: str,
    selection: TimetableSelection,
    *,
    updated_at: datetime | None = None,
    start: date | None = None,
) -> SelectionViewOut:
    view = selection.view(_window_start(start), settings.default_window_weeks)
    sessions_by_id = {session.id: session for session in view.sessions}
    return SelectionViewOut(
        student_id=student_id,
        session_ids=view.session_ids,
        updated_at=updated_at,
        state=view.state.value,
        sessions=[SessionOut.from_session(session) for session in view.sessions],
        missing_session_ids=view.missing_session_ids,
        has_conflicts=bool(view.conflicts),
        conflicts=[ConflictOut.from_conflict(conflict, sessions_by_id) for conflict in view.conflicts],
        occurrences=[OccurrenceOut.model_validate(item) for item in view.occurrences],
    )


def _save_selection(db: Session, student_id: str, selection: TimetableSelection) -> SelectionViewOut:
    record = PersonalTimetableStore(db).save(student_id, selection.session_ids)
    return build_selection_view(student_id, selection, updated_at=record.updated_at)


def _catalog_for_save(db: Session, attempted_ids: list[str]) -> dict[str, ClassSession]:
    try:
        return load_catalog_from_db(db).by_id()
    except StoreUnavailableError as exc:
        raise StoreUnavailableError(
            "Personal timetable could not be saved; please retry",
            details={"sessionIds": normalize_session_ids(attempted_ids)},
        ) from exc


@router.get("/sessions", response_model=list[SessionOut])
def list_sessions(
    q: str | None = Query(default=None, max_length=100),
    db: Session = Depends(get_db),
) -> list[SessionOut]:
    catalog = load_catalog_from_db(db)
    return [SessionOut.from_session(session) for session in filter_sessions(catalog.sessions, q)]


@router.get("/occurrences", response_model=list[OccurrenceOut])
def list_occurrences(
    weeks: int | None = Query(default=None, ge=0),
    start: date | None = Query(default=None),
    session_ids: list[str] | None = Query(default=None, alias="sessionIds"),
    db: Session = Depends(get_db),
) -> list[OccurrenceOut]:
    window_weeks = settings.default_window_weeks if weeks is None else min(weeks, settings.max_window_weeks)
    sessions = load_catalog_from_db(db).sessions
    if session_ids:
        wanted = set(session_ids)
        sessions = [session for session in sessions if session.id in wanted]
    occurrences = render_occurrences(sessions, _window_start(start), window_weeks)
    return [OccurrenceOut.model_validate(item) for item in occurrences]


@router.get("/events", response_model=list[OccurrenceOut])
def list_events(
    start: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[OccurrenceOut]:
    sessions = load_catalog_from_db(db).sessions
    occurrences = render_occurrences(sessions, _window_start(start), settings.bulk_window_weeks)
    return [OccurrenceOut.model_validate(item) for item in occurrences]


@router.post("/conflicts/check", response_model=ConflictCheckResponse)
def check_conflicts(payload: ConflictCheckRequest) -> ConflictCheckResponse:
    sessions = [item.to_session() for item in payload.sessions]
    sessions_by_id = {}
    for session in sessions:
        sessions_by_id.setdefault(session.id, session)
    conflicts = detect_conflicts(sessions)
    return ConflictCheckResponse(
        has_conflicts=bool(conflicts),
        conflicts=[ConflictOut.from_conflict(conflict, sessions_by_id) for conflict in conflicts],
    )


@router.get("/students/{student_id}/timetable", response_model=PersonalTimetableOut)
def get_personal_timetable(
    owner_id: str = Depends(require_own_timetable),
    db: Session = Depends(get_db),
) -> PersonalTimetableOut:
    record = PersonalTimetableStore(db).load_document(owner_id)
    if record is None:
        return PersonalTimetableOut(student_id=owner_id, session_ids=[], updated_at=None)
    return PersonalTimetableOut(
        student_id=owner_id,
        session_ids=list(record.session_ids or []),
        updated_at=record.updated_at,
    )


@router.put("/students/{student_id}/timetable", response_model=SelectionViewOut)
def save_personal_timetable(
    payload: PersonalTimetableUpdate,
    owner_id: str = Depends(require_own_timetable),
    db: Session = Depends(get_db),
) -> SelectionViewOut:
    selection = TimetableSelection(payload.session_ids, _catalog_for_save(db, payload.session_ids))
    return _save_selection(db, owner_id, selection)


@router.get("/students/{student_id}/timetable/view", response_model=SelectionViewOut)
def get_selection_view(
    start: date | None = Query(default=None),
    owner_id: str = Depends(require_own_timetable),
    db: Session = Depends(get_db),
) -> SelectionViewOut:
    store = PersonalTimetableStore(db)
    record = store.load_document(owner_id)
    session_ids = list(record.session_ids or []) if record is not None else []
    selection = TimetableSelection(session_ids, load_catalog_from_db(db).by_id())
    return build_selection_view(
        owner_id,
        selection,
        updated_at=record.updated_at if record is not None else None,
        start=start,
    )


@router.post("/students/{student_id}/timetable/sessions/{session_id}", response_model=SelectionViewOut)
def add_session(
    session_id: str,
    owner_id: str = Depends(require_own_timetable),
    db: Session = Depends(get_db),
) -> SelectionViewOut:
    current_ids = PersonalTimetableStore(db).load(owner_id)
    selection = TimetableSelection(current_ids, _catalog_for_save(db, [*current_ids, session_id]))
    if selection.add(session_id):
        logger.info("Student %s added session %s", owner_id, session_id)
    return _save_selection(db, owner_id, selection)


@router.delete("/students/{student_id}/timetable/sessions/{session_id}", response_model=SelectionViewOut)
def remove_session(
    session_id: str,
    owner_id: str = Depends(require_own_timetable),
    db: Session = Depends(get_db),
) -> SelectionViewOut:
    current_ids = PersonalTimetableStore(db).load(owner_id)
    attempted_ids = [item for item in current_ids if item != session_id]
    selection = TimetableSelection(current_ids, _catalog_for_save(db, attempted_ids))
    if selection.remove(session_id):
        logger.info("Student %s removed session %s", owner_id, session_id)
    return _save_selection(db, owner_id, selection)


@router.delete("/students/{student_id}/timetable", response_model=SelectionViewOut)
def clear_personal_timetable(
    owner_id: str = Depends(require_own_timetable),
    db: Session = Depends(get_db),
) -> SelectionViewOut:
    selection = TimetableSelection([], {})
    return _save_selection(db, owner_id, selection)
