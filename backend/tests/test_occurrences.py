from datetime import date, datetime

import pytest

from app.services.catalog import ClassSession
from app.services.occurrences import (
    align_to_week_start,
    current_window_start,
    generate_occurrences,
    render_occurrences,
    week_offset,
)


def make_session(session_id, weekday, start, end, code="AD113"):
    return ClassSession(
        id=session_id,
        course_code=code,
        class_no="01",
        weekday=weekday,
        start_minute=start,
        end_minute=end,
        room="ADC101",
        campus_code="ADC",
        title="Accounting Principles",
        campus="Admiralty Learning Centre",
    )


MONDAY = make_session("mon", 1, 540, 660)
SUNDAY = make_session("sun", 0, 600, 720)
SATURDAY = make_session("sat", 6, 1380, 1439)


def test_window_aligns_to_monday_midnight():
    # 2026-10-21 is a Wednesday.
    assert align_to_week_start(datetime(2026, 10, 21, 15, 30)) == datetime(2026, 10, 19)
    assert align_to_week_start(datetime(2026, 10, 19, 0, 0)) == datetime(2026, 10, 19)
    assert align_to_week_start(date(2026, 10, 25)) == datetime(2026, 10, 19)
    assert current_window_start(datetime(2026, 10, 25, 23, 59)) == datetime(2026, 10, 19)


def test_week_offset_places_sunday_last():
    assert [week_offset(weekday) for weekday in range(7)] == [6, 0, 1, 2, 3, 4, 5]


def test_single_week_has_one_occurrence_per_session():
    occurrences = generate_occurrences([MONDAY, SUNDAY, SATURDAY], datetime(2026, 10, 21, 12), 1)

    assert len(occurrences) == 3
    by_session = {item.session_id: item for item in occurrences}
    assert by_session["mon"].start == datetime(2026, 10, 19, 9, 0)
    assert by_session["mon"].end == datetime(2026, 10, 19, 11, 0)
    assert by_session["sat"].start == datetime(2026, 10, 24, 23, 0)
    assert by_session["sun"].start == datetime(2026, 10, 25, 10, 0)
    assert [item.session_id for item in occurrences] == ["mon", "sat", "sun"]


def test_zero_weeks_is_empty():
    assert generate_occurrences([MONDAY, SUNDAY], datetime(2026, 10, 21), 0) == []


def test_negative_weeks_rejected():
    with pytest.raises(ValueError):
        generate_occurrences([MONDAY], datetime(2026, 10, 21), -1)


def test_multi_week_window_indexes_weeks():
    occurrences = generate_occurrences([MONDAY], datetime(2026, 10, 19), 4)

    assert [item.occurrence_index for item in occurrences] == [0, 1, 2, 3]
    assert [item.start.date() for item in occurrences] == [
        date(2026, 10, 19),
        date(2026, 10, 26),
        date(2026, 11, 2),
        date(2026, 11, 9),
    ]
    assert occurrences[2].id == "mon-2"


def test_truncated_window_drops_late_weekdays():
    occurrences = generate_occurrences(
        [MONDAY, SUNDAY, SATURDAY],
        datetime(2026, 10, 19),
        1,
        until=datetime(2026, 10, 24),
    )
    assert [item.session_id for item in occurrences] == ["mon"]


def test_generation_is_pure():
    args = ([SUNDAY, MONDAY, SATURDAY], datetime(2026, 10, 22, 8), 3)
    assert generate_occurrences(*args) == generate_occurrences(*args)
    assert generate_occurrences(*args) == generate_occurrences([MONDAY, SATURDAY, SUNDAY], *args[1:])


def test_weekly_and_bulk_windows_agree_on_first_week():
    weekly = render_occurrences([MONDAY, SUNDAY], datetime(2026, 10, 21), 1)
    bulk = render_occurrences([MONDAY, SUNDAY], datetime(2026, 10, 21), 4)
    assert bulk[: len(weekly)] == weekly


def test_rendered_occurrence_carries_display_metadata():
    [event] = render_occurrences([MONDAY], datetime(2026, 10, 21), 1)
    assert event["id"] == "mon-0"
    assert event["title"] == "AD113 - 01"
    assert event["full_title"] == "Accounting Principles"
    assert event["room"] == "ADC101"
    assert event["campus"] == "Admiralty Learning Centre"
    assert event["background_color"].startswith("#")
    assert event["text_color"] == "#ffffff"
