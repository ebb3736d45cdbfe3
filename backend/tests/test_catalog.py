import logging

from app.services.catalog import (
    UNKNOWN_CAMPUS,
    campus_name_for,
    fetch_course_records,
    filter_sessions,
    load_catalog,
    load_catalog_from_db,
)
from app.services.conflict_service import detect_conflicts

RAW_COURSES = [
    {
        "code": "HD101",
        "title": "Healthcare Foundations",
        "timetable": [
            {"day": "Mon", "time": "10:00-12:00", "room": "HPC201", "classNo": "02"},
            {"day": "Funday", "time": "10:00-12:00", "room": "HPC201", "classNo": "03"},
            {"day": "Wed", "time": "2pm-4pm", "room": "XYZ9", "classNo": "01"},
        ],
    },
    {
        "code": "AD113",
        "title": "Accounting Principles",
        "timetable": [
            {"day": "mon", "time": "09:00-11:00", "room": "ADC101", "classNo": "01"},
            {"day": "Thu", "time": "11:00-09:00", "room": "ADC101", "classNo": "01"},
            {"day": "Fri", "time": "09:00-11:00", "room": "", "classNo": "01"},
        ],
    },
]


def test_load_catalog_normalizes_rows():
    result = load_catalog(RAW_COURSES)

    ids = [session.id for session in result.sessions]
    assert ids == ["AD113-01", "AD113-01-2", "HD101-01", "HD101-02"]

    monday = result.sessions[0]
    assert monday.course_code == "AD113"
    assert monday.weekday == 1
    assert (monday.start_minute, monday.end_minute) == (540, 660)
    assert monday.campus_code == "ADC"
    assert monday.campus.startswith("Admiralty Learning Centre")
    assert monday.title == "Accounting Principles"

    wednesday = result.by_id()["HD101-01"]
    assert (wednesday.start_minute, wednesday.end_minute) == (840, 960)
    assert wednesday.campus == "XYZ9"


def test_bad_rows_are_skipped_not_fatal(caplog):
    with caplog.at_level(logging.WARNING, logger="app.services.catalog"):
        result = load_catalog(RAW_COURSES)

    assert len(result.skipped) == 2
    reasons = {(item.course_code, item.class_no) for item in result.skipped}
    assert reasons == {("HD101", "03"), ("AD113", "01")}
    assert "Skipped timetable row" in caplog.text


def test_load_catalog_is_deterministic():
    first = load_catalog(RAW_COURSES).sessions
    second = load_catalog(RAW_COURSES).sessions
    assert first == second


def test_missing_class_number_uses_default_id():
    result = load_catalog([{"code": "CS100", "title": "Intro", "timetable": [{"day": "Tue", "time": "09:00-10:00"}]}])
    assert [session.id for session in result.sessions] == ["CS100-01"]
    assert result.sessions[0].campus == UNKNOWN_CAMPUS


def test_courses_without_code_or_rows():
    result = load_catalog([{"title": "No code", "timetable": [{"day": "Mon", "time": "09:00-10:00"}]}, {"code": "X1"}])
    assert result.sessions == []
    assert len(result.skipped) == 1


def test_campus_lookup_falls_back_to_room():
    assert campus_name_for("kwc305") == "Kowloon West Campus, Cheung Sha Wan"
    assert campus_name_for("Online") == "Online"
    assert campus_name_for("  ") == UNKNOWN_CAMPUS


def test_filter_sessions_matches_code_title_class_and_campus():
    sessions = load_catalog(RAW_COURSES).sessions
    assert {session.id for session in filter_sessions(sessions, "hd1")} == {"HD101-01", "HD101-02"}
    assert {session.id for session in filter_sessions(sessions, "accounting")} == {"AD113-01", "AD113-01-2"}
    assert {session.id for session in filter_sessions(sessions, "hpc")} == {"HD101-02"}
    assert len(filter_sessions(sessions, "  ")) == len(sessions)


def test_catalog_reads_courses_from_database(db, seed_courses):
    seed_courses(
        {"code": "HD101", "title": "Healthcare", "timetable": [{"day": "Mon", "time": "10:00-12:00", "room": "HPC201"}]},
        {"code": "ZZ000", "title": "No sessions", "timetable": []},
    )

    records = fetch_course_records(db)
    assert [record["code"] for record in records] == ["HD101"]

    result = load_catalog_from_db(db)
    assert [session.id for session in result.sessions] == ["HD101-01"]


def test_literal_class_number_does_not_reuse_a_block_id():
    result = load_catalog(
        [
            {
                "code": "AD113",
                "title": "Accounting Principles",
                "timetable": [
                    {"day": "Mon", "time": "09:00-11:00", "classNo": "01"},
                    {"day": "Tue", "time": "09:00-11:00", "classNo": "01"},
                    {"day": "Tue", "time": "10:00-12:00", "classNo": "01-2"},
                ],
            }
        ]
    )

    ids = [session.id for session in result.sessions]
    assert ids == ["AD113-01", "AD113-01-2", "AD113-01-2-2"]
    assert len(result.by_id()) == 3

    conflicts = detect_conflicts(result.sessions)
    assert len(conflicts) == 1
    assert conflicts[0].weekday == 2
    assert (conflicts[0].overlap_start_minute, conflicts[0].overlap_end_minute) == (600, 660)


def test_instructor_is_carried_onto_sessions():
    result = load_catalog(
        [
            {
                "code": "CS100",
                "title": "Intro",
                "timetable": [
                    {"day": "Tue", "time": "09:00-10:00", "instructor": " Dr Chan "},
                    {"day": "Wed", "time": "09:00-10:00"},
                ],
            }
        ]
    )
    assert [session.instructor for session in result.sessions] == ["Dr Chan", ""]
