from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.services.hour_mapping import CourseCategory, normalize_category

PhaseName = Literal["first_hour", "labs", "theory", "free_day", "balance"]
DEFAULT_PHASES: tuple[PhaseName, ...] = ("first_hour", "labs", "theory", "free_day", "balance")
StudentType = Literal["UG", "PG"]


class CourseRequestIn(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str | None = Field(default=None, max_length=200)
    credits: int = Field(ge=1, le=8)
    category: CourseCategory
    batch: str = Field(min_length=1, max_length=50)
    semester: str | None = Field(default=None, max_length=20)

    @field_validator("code", "batch")
    @classmethod
    def strip_identifier(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category_label(cls, value):
        if isinstance(value, str):
            return normalize_category(value)
        return value


class ScheduleOptions(BaseModel):
    course_order: Literal["input", "code"] = "input"
    faculty_order: Literal["discovery", "name"] = "discovery"
    batch_order: Literal["input", "name"] = "input"
    phases: list[PhaseName] = Field(default_factory=lambda: list(DEFAULT_PHASES))

    @field_validator("phases")
    @classmethod
    def reject_duplicate_phases(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        for item in value:
            if item in seen:
                raise ValueError(f"Phase {item} listed more than once")
            seen.add(item)
        return value


class AutoScheduleRequest(BaseModel):
    semester: str = Field(min_length=1, max_length=20)
    courses: list[CourseRequestIn] = Field(default_factory=list)
    batches: list[str] = Field(min_length=1)
    student_type: StudentType = Field(default="UG", alias="studentType")
    persist: bool = True
    options: ScheduleOptions = Field(default_factory=ScheduleOptions)

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("batches")
    @classmethod
    def normalize_batches(cls, value: list[str]) -> list[str]:
        unique: list[str] = []
        seen: set[str] = set()
        for item in value:
            batch = item.strip()
            if not batch:
                raise ValueError("Batch names cannot be blank")
            if batch in seen:
                continue
            seen.add(batch)
            unique.append(batch)
        return unique


class ScheduleCellOut(BaseModel):
    code: str
    name: str | None = None
    faculty: str
    type: Literal["Theory", "Lab", "LabIntegrated"]
    slotType: Literal["FirstHour", "Theory", "Lab", "LabIntegrated"]
    blockLength: int = 0
    semester: str | None = None


class UnscheduledEntryOut(BaseModel):
    code: str
    faculty: str
    semester: str
    batch: str
    reason: str


class ForcedClearOut(BaseModel):
    faculty: str
    day: str
    cleared_cells: int


class ScheduleDiagnostics(BaseModel):
    phases: list[PhaseName]
    placed_sessions: int
    balancer_moves: int
    forced_clears: list[ForcedClearOut] = Field(default_factory=list)
    runtime_ms: int


WeeklyGridOut = dict[str, dict[str, ScheduleCellOut | None]]


class AutoScheduleResponse(BaseModel):
    timetable: dict[str, WeeklyGridOut]
    unscheduled: list[UnscheduledEntryOut] = Field(default_factory=list)
    diagnostics: ScheduleDiagnostics
    persisted: bool = False
