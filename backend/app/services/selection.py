from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from app.core.exceptions import ResourceNotFoundError
from app.services.catalog import ClassSession
from app.services.conflict_service import Conflict, detect_conflicts
from app.services.occurrences import render_occurrences
from app.services.personal_timetable import normalize_session_ids


class SelectionState(str, Enum):
    empty = "empty"
    populated = "populated"


@dataclass(frozen=True)
class SelectionView:
    session_ids: list[str]
    sessions: list[ClassSession]
    missing_session_ids: list[str]
    conflicts: list[Conflict]
    occurrences: list[dict]

    @property
    def state(self) -> SelectionState:
        return SelectionState.populated if self.session_ids else SelectionState.empty


class TimetableSelection:
    """A student's chosen session ids, resolved against the loaded catalog.

    Derived data is only computed by :meth:`view`, so it always reflects the
    selection after the latest mutation.
    """

    def __init__(self, session_ids: Iterable[str], catalog: Mapping[str, ClassSession]) -> None:
        self._session_ids = normalize_session_ids(session_ids)
        self._catalog = catalog

    @property
    def session_ids(self) -> list[str]:
        return list(self._session_ids)

    @property
    def state(self) -> SelectionState:
        return SelectionState.populated if self._session_ids else SelectionState.empty

    def add(self, session_id: str) -> bool:
        if session_id not in self._catalog:
            raise ResourceNotFoundError("Session", session_id)
        if session_id in self._session_ids:
            return False
        self._session_ids.append(session_id)
        return True

    def remove(self, session_id: str) -> bool:
        if session_id not in self._session_ids:
            return False
        self._session_ids.remove(session_id)
        return True

    def clear(self) -> None:
        self._session_ids.clear()

    def resolved_sessions(self) -> list[ClassSession]:
        return [self._catalog[item] for item in self._session_ids if item in self._catalog]

    def view(self, window_start: datetime | date, weeks: int) -> SelectionView:
        sessions = self.resolved_sessions()
        return SelectionView(
            session_ids=self.session_ids,
            sessions=sessions,
            missing_session_ids=[item for item in self._session_ids if item not in self._catalog],
            conflicts=detect_conflicts(sessions),
            occurrences=render_occurrences(sessions, window_start, weeks),
        )
