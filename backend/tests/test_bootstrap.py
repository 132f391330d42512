import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_ensure_faculty_columns", lambda: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_runtime_schema_bootstrap_creates_required_tables():
    bootstrap.ensure_runtime_schema_compatibility()
    bootstrap._assert_required_columns()


def test_missing_schema_lists_absent_tables():
    engine = create_engine("sqlite+pysqlite://")
    try:
        with engine.begin() as connection:
            connection.execute(text("CREATE TABLE faculty (id VARCHAR(36) PRIMARY KEY, name VARCHAR(200))"))
            missing_tables, missing_columns = bootstrap.missing_schema(inspect(connection))
    finally:
        engine.dispose()

    assert missing_tables == ["batch_timetables"]
    assert missing_columns == {"faculty": ["course_handled", "directory_order", "faculty_code"]}


def test_faculty_columns_are_backfilled_on_old_tables(monkeypatch):
    engine = create_engine("sqlite+pysqlite://", poolclass=StaticPool)
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE faculty (id VARCHAR(36) PRIMARY KEY, name VARCHAR(200))"))
        connection.execute(text("INSERT INTO faculty (id, name) VALUES ('f1', 'Dr. Rao')"))
    monkeypatch.setattr(bootstrap, "engine", engine)

    bootstrap._ensure_faculty_columns()

    with engine.connect() as connection:
        columns = {item["name"] for item in inspect(connection).get_columns("faculty")}
        order = connection.execute(text("SELECT directory_order FROM faculty")).scalar_one()
    engine.dispose()
    assert {"designation", "directory_order"} <= columns
    assert order == 0
