from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from app.services.hour_mapping import CourseCategory, SessionHours

DAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
TIME_SLOTS: tuple[str, ...] = (
    "08:30-09:20",
    "09:25-10:15",
    "10:30-11:20",
    "11:25-12:15",
    "01:10-02:00",
    "02:05-02:55",
    "03:00-03:50",
    "03:55-04:45",
)
SLOTS_PER_DAY = len(TIME_SLOTS)
# First slot index after lunch; slots [0, LUNCH_BOUNDARY) are before lunch.
LUNCH_BOUNDARY = 4
UNASSIGNED_FACULTY = "Unassigned"


class SessionType(str, Enum):
    theory = "Theory"
    lab = "Lab"
    lab_integrated = "LabIntegrated"


class SlotRole(str, Enum):
    first_hour = "FirstHour"
    theory = "Theory"
    lab = "Lab"
    lab_integrated = "LabIntegrated"


@dataclass(frozen=True)
class CoursePlan:
    """A course request for one batch with its resolved hours and faculty."""

    course_code: str
    course_name: str | None
    batch: str
    semester: str
    category: CourseCategory
    faculty: str | None
    hours: SessionHours

    @property
    def faculty_label(self) -> str:
        return self.faculty or UNASSIGNED_FACULTY


@dataclass(frozen=True)
class ScheduleCell:
    course_code: str
    faculty: str | None
    session_type: SessionType
    slot_role: SlotRole
    block_length: int = 0
    course_name: str | None = None
    semester: str | None = None

    @property
    def is_theory(self) -> bool:
        return self.session_type == SessionType.theory

    @property
    def is_lab(self) -> bool:
        return self.session_type in (SessionType.lab, SessionType.lab_integrated)

    def to_payload(self) -> dict:
        return {
            "code": self.course_code,
            "name": self.course_name,
            "faculty": self.faculty or UNASSIGNED_FACULTY,
            "type": self.session_type.value,
            "slotType": self.slot_role.value,
            "blockLength": self.block_length,
            "semester": self.semester,
        }


@dataclass(frozen=True)
class OccupancyCell:
    course_code: str
    is_lab: bool = False


@dataclass(frozen=True)
class UnscheduledEntry:
    course_code: str
    faculty: str | None
    semester: str
    batch: str
    reason: str

    def to_payload(self) -> dict:
        return {
            "code": self.course_code,
            "faculty": self.faculty or UNASSIGNED_FACULTY,
            "semester": self.semester,
            "batch": self.batch,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ForcedClear:
    faculty: str
    day: str
    cleared_cells: int


def _empty_week() -> dict[str, list]:
    return {day: [None] * SLOTS_PER_DAY for day in DAYS}


@dataclass
class SchedulingContext:
    """Mutable state shared by the allocation phases of one scheduling run."""

    semester: str
    batches: list[str]
    faculty: list[str]
    plans: list[CoursePlan]
    grids: dict[str, dict[str, list[ScheduleCell | None]]] = field(default_factory=dict)
    occupancy: dict[str, dict[str, list[OccupancyCell | None]]] = field(default_factory=dict)
    unscheduled: list[UnscheduledEntry] = field(default_factory=list)
    first_hour_plans: set[int] = field(default_factory=set)
    forced_clears: list[ForcedClear] = field(default_factory=list)
    balancer_moves: int = 0

    def __post_init__(self) -> None:
        for batch in self.batches:
            self.grids.setdefault(batch, _empty_week())
        for name in self.faculty:
            self.occupancy.setdefault(name, _empty_week())

    # Batch grid

    def cell(self, batch: str, day: str, slot_index: int) -> ScheduleCell | None:
        return self.grids[batch][day][slot_index]

    def day_cells(self, batch: str, day: str) -> list[ScheduleCell | None]:
        return self.grids[batch][day]

    def occupied_count(self, batch: str, day: str) -> int:
        return sum(1 for item in self.grids[batch][day] if item is not None)

    def has_lab_on_day(self, batch: str, day: str) -> bool:
        return any(item is not None and item.is_lab for item in self.grids[batch][day])

    def has_course_theory_on_day(self, batch: str, day: str, course_code: str) -> bool:
        return any(
            item is not None and item.is_theory and item.course_code == course_code
            for item in self.grids[batch][day]
        )

    def is_theory_at(self, batch: str, day: str, slot_index: int) -> bool:
        if slot_index < 0 or slot_index >= SLOTS_PER_DAY:
            return False
        item = self.grids[batch][day][slot_index]
        return item is not None and item.is_theory

    def other_batch_theory_with_faculty(self, batch: str, day: str, slot_index: int, faculty: str) -> bool:
        for other_batch, week in self.grids.items():
            if other_batch == batch:
                continue
            item = week[day][slot_index]
            if item is not None and item.is_theory and item.faculty == faculty:
                return True
        return False

    # Faculty occupancy

    def faculty_free(self, faculty: str | None, day: str, slot_index: int) -> bool:
        if faculty is None:
            return True
        return self.occupancy[faculty][day][slot_index] is None

    def faculty_has_lab_day(self, faculty: str | None, day: str) -> bool:
        if faculty is None:
            return False
        return any(item is not None and item.is_lab for item in self.occupancy[faculty][day])

    def faculty_load(self, faculty: str, day: str) -> int:
        return sum(1 for item in self.occupancy[faculty][day] if item is not None)

    # Mutation

    def place(self, batch: str, day: str, slot_index: int, cell: ScheduleCell) -> None:
        self.grids[batch][day][slot_index] = cell
        if cell.faculty is not None:
            self.occupancy[cell.faculty][day][slot_index] = OccupancyCell(
                course_code=cell.course_code,
                is_lab=cell.is_lab,
            )

    def clear(self, batch: str, day: str, slot_index: int) -> ScheduleCell | None:
        cell = self.grids[batch][day][slot_index]
        if cell is None:
            return None
        self.grids[batch][day][slot_index] = None
        if cell.faculty is not None:
            self.occupancy[cell.faculty][day][slot_index] = None
        return cell

    def record_unscheduled(self, plan: CoursePlan, reason: str) -> None:
        self.unscheduled.append(
            UnscheduledEntry(
                course_code=plan.course_code,
                faculty=plan.faculty,
                semester=plan.semester,
                batch=plan.batch,
                reason=reason,
            )
        )

    # Output

    def placed_sessions(self) -> int:
        return sum(self.occupied_count(batch, day) for batch in self.grids for day in DAYS)

    def grid_payload(self, batch: str) -> dict[str, dict[str, dict | None]]:
        week = self.grids[batch]
        return {
            day: {
                label: (week[day][index].to_payload() if week[day][index] is not None else None)
                for index, label in enumerate(TIME_SLOTS)
            }
            for day in DAYS
        }

    def timetable_payload(self) -> dict[str, dict[str, dict[str, dict | None]]]:
        return {batch: self.grid_payload(batch) for batch in self.batches}
