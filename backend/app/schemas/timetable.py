from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.services.schedule_grid import DAYS, TIME_SLOTS

DAY_VALUES = set(DAYS)
SLOT_VALUES = set(TIME_SLOTS)

WeeklyGridIn = dict[str, dict[str, dict | None]]


def _strip_required(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("Value cannot be blank")
    return stripped


def _check_grid_keys(value: WeeklyGridIn) -> WeeklyGridIn:
    invalid_days = sorted(day for day in value if day not in DAY_VALUES)
    if invalid_days:
        raise ValueError(f"Invalid day value(s): {', '.join(invalid_days)}")
    for day, slots in value.items():
        invalid_slots = sorted(slot for slot in slots if slot not in SLOT_VALUES)
        if invalid_slots:
            raise ValueError(f"Invalid time slot(s) on {day}: {', '.join(invalid_slots)}")
    return value


class StoredTimetableIn(BaseModel):
    semester: str = Field(min_length=1, max_length=20)
    batch: str = Field(min_length=1, max_length=50)
    timetable: WeeklyGridIn

    @field_validator("semester", "batch")
    @classmethod
    def strip_value(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("timetable")
    @classmethod
    def validate_grid_keys(cls, value: WeeklyGridIn) -> WeeklyGridIn:
        return _check_grid_keys(value)


class StoredTimetableUpdate(BaseModel):
    semester: str | None = Field(default=None, min_length=1, max_length=20)
    batch: str | None = Field(default=None, min_length=1, max_length=50)
    timetable: WeeklyGridIn | None = None

    @field_validator("semester", "batch")
    @classmethod
    def strip_value(cls, value: str | None) -> str | None:
        return None if value is None else _strip_required(value)

    @field_validator("timetable")
    @classmethod
    def validate_grid_keys(cls, value: WeeklyGridIn | None) -> WeeklyGridIn | None:
        return None if value is None else _check_grid_keys(value)


class StoredTimetableOut(BaseModel):
    id: str
    semester: str
    batch: str
    timetable: dict[str, dict[str, dict | None]] = Field(validation_alias=AliasChoices("grid", "timetable"))
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class FacultyTimetableOut(BaseModel):
    timetable: dict[str, dict[str, dict | None]]


class TeachingOverviewOut(BaseModel):
    totalHours: int
    classesHandled: int
