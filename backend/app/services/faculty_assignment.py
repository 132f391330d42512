from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.faculty import Faculty


def load_faculty_directory(db: Session) -> list[Faculty]:
    """Faculty rows in the order they were added to the directory."""
    query = select(Faculty).order_by(Faculty.directory_order, Faculty.created_at, Faculty.faculty_code)
    return list(db.execute(query).scalars())


def next_directory_order(db: Session) -> int:
    current = db.execute(select(func.max(Faculty.directory_order))).scalar_one_or_none()
    return (current or 0) + 1


@dataclass(frozen=True)
class FacultyCourseLink:
    faculty_name: str
    course_code: str
    role: str
    batch: str


def links_from_directory(faculty_rows: Iterable[Faculty]) -> list[FacultyCourseLink]:
    links: list[FacultyCourseLink] = []
    for faculty in faculty_rows:
        for entry in faculty.course_handled or []:
            links.append(
                FacultyCourseLink(
                    faculty_name=faculty.name,
                    course_code=str(entry.get("course_code", "")).strip(),
                    role=str(entry.get("role", "")),
                    batch=str(entry.get("batch", "")).strip(),
                )
            )
    return links


def index_links_by_course(links: Iterable[FacultyCourseLink]) -> dict[str, list[FacultyCourseLink]]:
    by_course: dict[str, list[FacultyCourseLink]] = defaultdict(list)
    for link in links:
        by_course[link.course_code].append(link)
    return dict(by_course)


def resolve_faculty(
    course_code: str,
    batch: str,
    links_by_course: dict[str, list[FacultyCourseLink]],
) -> str | None:
    """Returns the faculty teaching `course_code` for `batch`, or None.

    A link for the exact batch wins; otherwise the first link listed for the
    course is used.
    """
    candidates = links_by_course.get(course_code)
    if not candidates:
        return None
    for link in candidates:
        if link.batch == batch:
            return link.faculty_name
    return candidates[0].faculty_name
