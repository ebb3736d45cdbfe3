from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from app.services.catalog import ClassSession
from app.services.normalizer import format_time_range, weekday_abbreviation


@dataclass(frozen=True)
class Conflict:
    session_id_a: str
    session_id_b: str
    weekday: int
    overlap_start_minute: int
    overlap_end_minute: int


def slots_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


def unique_sessions(sessions: Iterable[ClassSession]) -> list[ClassSession]:
    seen: set[str] = set()
    unique: list[ClassSession] = []
    for session in sessions:
        if session.id in seen:
            continue
        seen.add(session.id)
        unique.append(session)
    return unique


def detect_conflicts(selected: Iterable[ClassSession]) -> list[Conflict]:
    """Report every pair of selected sessions that overlap on the same weekday.

    Intervals are half-open, so a session ending at 10:00 does not clash with
    one starting at 10:00. Each unordered pair is reported once with its ids
    in sorted order.
    """
    sessions_by_day: dict[int, list[ClassSession]] = defaultdict(list)
    for session in unique_sessions(selected):
        sessions_by_day[session.weekday].append(session)

    conflicts: list[Conflict] = []
    for weekday, day_sessions in sessions_by_day.items():
        n = len(day_sessions)
        for i in range(n):
            s1 = day_sessions[i]
            for j in range(i + 1, n):
                s2 = day_sessions[j]
                if not slots_overlap(s1.start_minute, s1.end_minute, s2.start_minute, s2.end_minute):
                    continue
                first, second = sorted((s1.id, s2.id))
                conflicts.append(
                    Conflict(
                        session_id_a=first,
                        session_id_b=second,
                        weekday=weekday,
                        overlap_start_minute=max(s1.start_minute, s2.start_minute),
                        overlap_end_minute=min(s1.end_minute, s2.end_minute),
                    )
                )

    conflicts.sort(
        key=lambda item: (item.weekday, item.overlap_start_minute, item.session_id_a, item.session_id_b)
    )
    return conflicts


def describe_conflict(conflict: Conflict, sessions_by_id: dict[str, ClassSession]) -> str:
    first = sessions_by_id.get(conflict.session_id_a)
    second = sessions_by_id.get(conflict.session_id_b)
    label_a = first.label if first else conflict.session_id_a
    label_b = second.label if second else conflict.session_id_b
    window = format_time_range(conflict.overlap_start_minute, conflict.overlap_end_minute)
    return f"{label_a} conflicts with {label_b} on {weekday_abbreviation(conflict.weekday)} {window}"
