from __future__ import annotations

import logging
from enum import Enum
from typing import NamedTuple

logger = logging.getLogger(__name__)


class CourseCategory(str, Enum):
    theory = "Theory"
    lab = "Lab"
    lab_integrated = "LabIntegrated"


CATEGORY_ALIASES = {
    "theory": CourseCategory.theory,
    "lab": CourseCategory.lab,
    "labintegrated": CourseCategory.lab_integrated,
    "lab integrated": CourseCategory.lab_integrated,
    "lab integrated theory": CourseCategory.lab_integrated,
    "lab-integrated": CourseCategory.lab_integrated,
}


class SessionHours(NamedTuple):
    theory: int
    lab: int
    lab_integrated: int
    block_length: int

    @property
    def is_empty(self) -> bool:
        return not any(self)


NO_SESSIONS = SessionHours(0, 0, 0, 0)

_LAB_INTEGRATED_HOURS = {
    2: SessionHours(0, 3, 3, 3),
    3: SessionHours(2, 2, 4, 2),
    4: SessionHours(3, 2, 5, 2),
    5: SessionHours(3, 4, 7, 4),
    6: SessionHours(3, 4, 7, 4),
}


def normalize_category(value: str | CourseCategory) -> CourseCategory:
    if isinstance(value, CourseCategory):
        return value
    key = " ".join(str(value).strip().lower().replace("_", " ").split())
    category = CATEGORY_ALIASES.get(key)
    if category is None:
        raise ValueError(f"Unknown course category: {value}")
    return category


def resolve_session_hours(credits: int, category: CourseCategory) -> SessionHours:
    """Maps a course's credits and category to its weekly session counts.

    Combinations outside the table resolve to no sessions at all; such a
    course is never placed and never reported as unscheduled.
    """
    if category == CourseCategory.theory:
        if 1 <= credits <= 4:
            return SessionHours(credits, 0, 0, 0)
    elif category == CourseCategory.lab:
        if credits == 2:
            return SessionHours(0, 2, 0, 2)
    elif category == CourseCategory.lab_integrated:
        hours = _LAB_INTEGRATED_HOURS.get(credits)
        if hours is not None:
            return hours

    logger.debug("No session mapping | category=%s credits=%s", category.value, credits)
    return NO_SESSIONS
