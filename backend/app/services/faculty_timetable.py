from __future__ import annotations

import logging
from collections.abc import Iterable

from app.models.timetable import BatchTimetable
from app.services.schedule_grid import DAYS, TIME_SLOTS

logger = logging.getLogger(__name__)


def _matches(period: object, name: str) -> bool:
    if not isinstance(period, dict):
        return False
    faculty = period.get("faculty")
    return isinstance(faculty, str) and faculty.strip().lower() == name


def build_faculty_timetable(records: Iterable[BatchTimetable], faculty_name: str) -> dict[str, dict[str, dict | None]]:
    """Collects one faculty member's periods from every stored batch grid.

    Later records overwrite earlier ones when two batches claim the same slot.
    """
    name = faculty_name.strip().lower()
    view: dict[str, dict[str, dict | None]] = {day: {slot: None for slot in TIME_SLOTS} for day in DAYS}
    for record in records:
        grid = record.grid if isinstance(record.grid, dict) else {}
        for day in DAYS:
            day_slots = grid.get(day)
            if not isinstance(day_slots, dict):
                continue
            for slot in TIME_SLOTS:
                period = day_slots.get(slot)
                if _matches(period, name):
                    previous = view[day][slot]
                    if previous is not None:
                        logger.debug(
                            "Faculty slot claimed twice | faculty=%s day=%s slot=%s kept=%s dropped=%s",
                            faculty_name,
                            day,
                            slot,
                            record.batch,
                            previous["batch"],
                        )
                    view[day][slot] = {**period, "batch": record.batch, "day": day, "slot": slot}
    return view


def teaching_overview(records: Iterable[BatchTimetable], faculty_name: str) -> dict[str, int]:
    name = faculty_name.strip().lower()
    total_hours = 0
    course_codes: set[str] = set()
    for record in records:
        grid = record.grid if isinstance(record.grid, dict) else {}
        for day_slots in grid.values():
            if not isinstance(day_slots, dict):
                continue
            for period in day_slots.values():
                if not _matches(period, name):
                    continue
                total_hours += 1
                if period.get("code"):
                    course_codes.add(period["code"])
    return {"totalHours": total_hours, "classesHandled": len(course_codes)}
