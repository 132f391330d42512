from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceError
from app.models.timetable import BatchTimetable

logger = logging.getLogger(__name__)


def find_timetable(db: Session, *, semester: str, batch: str | None = None) -> BatchTimetable | None:
    query = select(BatchTimetable).where(BatchTimetable.semester == semester)
    if batch is not None:
        query = query.where(BatchTimetable.batch == batch)
    return db.execute(query.order_by(BatchTimetable.batch)).scalars().first()


def list_timetables(db: Session) -> list[BatchTimetable]:
    query = select(BatchTimetable).order_by(BatchTimetable.semester, BatchTimetable.batch)
    return list(db.execute(query).scalars())


def upsert_timetable(db: Session, *, semester: str, batch: str, grid: dict) -> BatchTimetable:
    """Writes one batch grid keyed by (semester, batch) and commits it on its own."""
    try:
        record = find_timetable(db, semester=semester, batch=batch)
        if record is None:
            record = BatchTimetable(semester=semester, batch=batch, grid=grid)
            db.add(record)
        else:
            record.grid = grid
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Timetable upsert failed | semester=%s batch=%s error=%s", semester, batch, exc)
        raise PersistenceError(semester, batch, str(exc)) from exc
    db.refresh(record)
    return record


def upsert_timetables(db: Session, *, semester: str, grids: dict[str, dict]) -> list[BatchTimetable]:
    """Upserts each batch in order; batches stored before a failure stay stored."""
    saved: list[BatchTimetable] = []
    for batch, grid in grids.items():
        saved.append(upsert_timetable(db, semester=semester, batch=batch, grid=grid))
    logger.info("Stored timetables | semester=%s batches=%s", semester, len(saved))
    return saved


def get_timetable(db: Session, timetable_id: str) -> BatchTimetable | None:
    return db.get(BatchTimetable, timetable_id)


def update_timetable(
    db: Session,
    record: BatchTimetable,
    *,
    semester: str | None = None,
    batch: str | None = None,
    grid: dict | None = None,
) -> BatchTimetable:
    if semester is not None:
        record.semester = semester
    if batch is not None:
        record.batch = batch
    if grid is not None:
        record.grid = grid
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Timetable update failed | id=%s error=%s", record.id, exc)
        raise PersistenceError(record.semester, record.batch, str(exc)) from exc
    db.refresh(record)
    return record


def delete_timetable(db: Session, record: BatchTimetable) -> None:
    db.delete(record)
    db.commit()
    logger.info("Deleted timetable | semester=%s batch=%s", record.semester, record.batch)
