import logging
from types import SimpleNamespace

from app.services.faculty_timetable import build_faculty_timetable, teaching_overview

FIRST_SLOT = "08:30-09:20"


def stored(batch, grid):
    return SimpleNamespace(batch=batch, grid=grid)


def period(code, faculty="Dr. Rao"):
    return {"code": code, "faculty": faculty, "type": "Theory", "slotType": "Theory"}


def test_later_batch_wins_a_shared_slot_and_is_logged(caplog):
    records = [
        stored("A", {"Monday": {FIRST_SLOT: period("CS301")}}),
        stored("B", {"Monday": {FIRST_SLOT: period("CS302")}}),
    ]

    with caplog.at_level(logging.DEBUG, logger="app.services.faculty_timetable"):
        view = build_faculty_timetable(records, "dr. rao")

    assert view["Monday"][FIRST_SLOT]["batch"] == "B"
    assert view["Monday"][FIRST_SLOT]["code"] == "CS302"
    assert "Faculty slot claimed twice" in caplog.text
    assert "kept=B dropped=A" in caplog.text


def test_view_ignores_other_faculty_and_malformed_grids():
    records = [
        stored("A", {"Monday": {FIRST_SLOT: period("CS301", faculty="Dr. Iyer")}}),
        stored("B", {"Tuesday": "not-a-day"}),
        stored("C", None),
    ]

    view = build_faculty_timetable(records, "Dr. Rao")

    assert all(cell is None for day in view.values() for cell in day.values())


def test_overview_counts_hours_and_distinct_courses():
    records = [
        stored("A", {"Monday": {FIRST_SLOT: period("CS301")}, "Tuesday": {FIRST_SLOT: period("CS301")}}),
        stored("B", {"Monday": {"09:25-10:15": period("CS302", faculty=" DR. RAO ")}}),
    ]

    assert teaching_overview(records, "Dr. Rao") == {"totalHours": 3, "classesHandled": 2}
