from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreUnavailableError
from app.models.personal_timetable import PersonalTimetable

logger = logging.getLogger(__name__)


def normalize_session_ids(session_ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    normalized: list[str] = []
    for item in session_ids:
        session_id = str(item).strip()
        if not session_id or session_id in seen:
            continue
        seen.add(session_id)
        normalized.append(session_id)
    return normalized


class PersonalTimetableStore:
    """One selection document per student; ``save`` replaces it wholesale.

    Concurrent saves for the same student are last-write-wins.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def load_document(self, student_id: str) -> PersonalTimetable | None:
        try:
            return self.db.get(PersonalTimetable, student_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Personal timetable lookup failed for student %s", student_id)
            raise StoreUnavailableError("Personal timetable store is unavailable") from exc

    def load(self, student_id: str) -> list[str]:
        record = self.load_document(student_id)
        if record is None:
            return []
        return list(record.session_ids or [])

    def _write(self, student_id: str, selection: list[str]) -> PersonalTimetable:
        record = self.db.get(PersonalTimetable, student_id)
        if record is None:
            record = PersonalTimetable(student_id=student_id)
            self.db.add(record)
        record.session_ids = selection
        record.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(record)
        return record

    def save(self, student_id: str, session_ids: Iterable[str]) -> PersonalTimetable:
        selection = normalize_session_ids(session_ids)
        try:
            try:
                record = self._write(student_id, selection)
            except IntegrityError:
                # A concurrent first save inserted the row; overwrite it.
                self.db.rollback()
                record = self._write(student_id, selection)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Saving personal timetable failed for student %s", student_id)
            raise StoreUnavailableError(
                "Personal timetable could not be saved; please retry",
                details={"sessionIds": selection},
            ) from exc

        logger.info("Saved %d session(s) for student %s", len(selection), student_id)
        return record
