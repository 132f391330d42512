from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Inspector

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "faculty": {"id", "name", "faculty_code", "course_handled", "directory_order"},
    "batch_timetables": {"id", "semester", "batch", "grid"},
}

# Columns added after the first release; older databases get them in place.
FACULTY_BACKFILL_COLUMNS: dict[str, str] = {
    "designation": "VARCHAR(100)",
    "directory_order": "INTEGER NOT NULL DEFAULT 0",
}


def _ensure_faculty_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "faculty" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("faculty")}
        for column_name, ddl in FACULTY_BACKFILL_COLUMNS.items():
            if column_name in column_names:
                continue
            connection.execute(text(f"ALTER TABLE faculty ADD COLUMN {column_name} {ddl}"))
            logger.info("Added missing faculty column | column=%s", column_name)


def missing_schema(inspector: Inspector) -> tuple[list[str], dict[str, list[str]]]:
    """Returns (missing tables, missing columns per present table)."""
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        absent = sorted(columns - existing)
        if absent:
            missing_columns[table_name] = absent
    return missing_tables, missing_columns


def _assert_required_columns() -> None:
    with engine.connect() as connection:
        missing_tables, missing_columns = missing_schema(inspect(connection))
    if missing_tables or missing_columns:
        raise RuntimeError(
            f"Database schema is incomplete: tables={missing_tables} columns={missing_columns}"
        )


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_faculty_columns()
        _assert_required_columns()
    except Exception as exc:
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
