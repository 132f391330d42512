from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from time import perf_counter

from app.core.exceptions import SchedulerError
from app.schemas.schedule import (
    DEFAULT_PHASES,
    AutoScheduleResponse,
    CourseRequestIn,
    ScheduleDiagnostics,
    ScheduleOptions,
)
from app.services.faculty_assignment import FacultyCourseLink, index_links_by_course, resolve_faculty
from app.services.hour_mapping import CourseCategory, resolve_session_hours
from app.services.schedule_grid import (
    DAYS,
    LUNCH_BOUNDARY,
    SLOTS_PER_DAY,
    CoursePlan,
    ForcedClear,
    ScheduleCell,
    SchedulingContext,
    SessionType,
    SlotRole,
)

logger = logging.getLogger(__name__)

LAB_BLOCK_REASON = "Lab/Lab-Integrated block could not be scheduled as a single continuous block"
THEORY_SPREAD_REASON = "Not enough days/slots for theory (spread required)"


def build_course_plans(
    *,
    semester: str,
    courses: Sequence[CourseRequestIn],
    batches: Sequence[str],
    links: Sequence[FacultyCourseLink],
    course_order: str = "input",
) -> list[CoursePlan]:
    ordered = list(courses)
    if course_order == "code":
        ordered = sorted(ordered, key=lambda item: item.code)

    links_by_course = index_links_by_course(links)
    batch_set = set(batches)
    plans: list[CoursePlan] = []
    for course in ordered:
        if course.batch not in batch_set:
            logger.debug("Skipping course outside requested batches | course=%s batch=%s", course.code, course.batch)
            continue
        plans.append(
            CoursePlan(
                course_code=course.code,
                course_name=course.name,
                batch=course.batch,
                semester=course.semester or semester,
                category=course.category,
                faculty=resolve_faculty(course.code, course.batch, links_by_course),
                hours=resolve_session_hours(course.credits, course.category),
            )
        )
    return plans


def discover_faculty(plans: Sequence[CoursePlan], faculty_order: str = "discovery") -> list[str]:
    discovered: list[str] = []
    seen: set[str] = set()
    for plan in plans:
        if plan.faculty is None or plan.faculty in seen:
            continue
        seen.add(plan.faculty)
        discovered.append(plan.faculty)
    if faculty_order == "name":
        return sorted(discovered)
    return discovered


def allocate_first_hours(ctx: SchedulingContext) -> None:
    """Gives each faculty member at most one theory session in a day's first slot."""
    for faculty in ctx.faculty:
        placed = False
        for batch in ctx.batches:
            plan_index = next(
                (
                    index
                    for index, plan in enumerate(ctx.plans)
                    if plan.faculty == faculty and plan.batch == batch and plan.hours.theory > 0
                ),
                None,
            )
            if plan_index is None:
                continue
            plan = ctx.plans[plan_index]
            for day in DAYS:
                if ctx.cell(batch, day, 0) is not None or not ctx.faculty_free(faculty, day, 0):
                    continue
                ctx.place(
                    batch,
                    day,
                    0,
                    ScheduleCell(
                        course_code=plan.course_code,
                        faculty=faculty,
                        session_type=SessionType.theory,
                        slot_role=SlotRole.first_hour,
                        course_name=plan.course_name,
                        semester=plan.semester,
                    ),
                )
                ctx.first_hour_plans.add(plan_index)
                logger.debug("First hour placed | faculty=%s course=%s batch=%s day=%s", faculty, plan.course_code, batch, day)
                placed = True
                break
            if placed:
                break


def lab_block_starts(block_length: int) -> list[int]:
    """Start indices of every block that stays on one side of lunch."""
    starts: list[int] = []
    if block_length <= LUNCH_BOUNDARY:
        starts.extend(range(0, LUNCH_BOUNDARY - block_length + 1))
    if block_length <= SLOTS_PER_DAY - LUNCH_BOUNDARY:
        starts.extend(range(LUNCH_BOUNDARY, SLOTS_PER_DAY - block_length + 1))
    return starts


def _find_lab_block(ctx: SchedulingContext, plan: CoursePlan, block_length: int) -> tuple[str, int] | None:
    starts = lab_block_starts(block_length)
    for day in DAYS:
        if ctx.has_lab_on_day(plan.batch, day):
            continue
        if ctx.faculty_has_lab_day(plan.faculty, day):
            continue
        for start in starts:
            span = range(start, start + block_length)
            if all(
                ctx.cell(plan.batch, day, index) is None and ctx.faculty_free(plan.faculty, day, index)
                for index in span
            ):
                return day, start
    return None


def allocate_lab_blocks(ctx: SchedulingContext) -> None:
    for plan in ctx.plans:
        block_length = plan.hours.block_length
        if block_length <= 0:
            continue

        placement = _find_lab_block(ctx, plan, block_length)
        if placement is None:
            ctx.record_unscheduled(plan, LAB_BLOCK_REASON)
            logger.info(
                "Lab block unscheduled | course=%s batch=%s faculty=%s length=%s",
                plan.course_code,
                plan.batch,
                plan.faculty_label,
                block_length,
            )
            continue

        day, start = placement
        if plan.category == CourseCategory.lab_integrated:
            session_type, slot_role = SessionType.lab_integrated, SlotRole.lab_integrated
        else:
            session_type, slot_role = SessionType.lab, SlotRole.lab
        for index in range(start, start + block_length):
            ctx.place(
                plan.batch,
                day,
                index,
                ScheduleCell(
                    course_code=plan.course_code,
                    faculty=plan.faculty,
                    session_type=session_type,
                    slot_role=slot_role,
                    block_length=block_length,
                    course_name=plan.course_name,
                    semester=plan.semester,
                ),
            )


def _collect_theory_slots(ctx: SchedulingContext, plan: CoursePlan, needed: int) -> list[tuple[str, int]]:
    batch = plan.batch
    picks: list[tuple[str, int]] = []
    for day in DAYS:
        if len(picks) >= needed:
            break
        if ctx.occupied_count(batch, day) >= SLOTS_PER_DAY:
            continue
        if ctx.has_course_theory_on_day(batch, day, plan.course_code):
            continue
        for slot_index in range(SLOTS_PER_DAY):
            # No two theory sessions back to back, whatever the course.
            if ctx.is_theory_at(batch, day, slot_index - 1):
                continue
            if ctx.cell(batch, day, slot_index) is not None:
                continue
            if not ctx.faculty_free(plan.faculty, day, slot_index):
                continue
            if plan.faculty is not None and ctx.other_batch_theory_with_faculty(batch, day, slot_index, plan.faculty):
                continue
            picks.append((day, slot_index))
            break
    return picks


def _withdraw_first_hour(ctx: SchedulingContext, plan_index: int, plan: CoursePlan) -> None:
    ctx.first_hour_plans.discard(plan_index)
    for day in DAYS:
        cell = ctx.cell(plan.batch, day, 0)
        if cell is not None and cell.slot_role == SlotRole.first_hour and cell.course_code == plan.course_code:
            ctx.clear(plan.batch, day, 0)
            logger.debug("First hour withdrawn | course=%s batch=%s day=%s", plan.course_code, plan.batch, day)
            return


def distribute_theory(ctx: SchedulingContext) -> None:
    """Places each course's remaining theory hours on distinct days, all or nothing.

    A course that cannot be spread also gives back its first-hour session.
    """
    for plan_index, plan in enumerate(ctx.plans):
        needed = plan.hours.theory - (1 if plan_index in ctx.first_hour_plans else 0)
        if needed <= 0:
            continue

        picks = _collect_theory_slots(ctx, plan, needed)
        if len(picks) < needed:
            if plan_index in ctx.first_hour_plans:
                _withdraw_first_hour(ctx, plan_index, plan)
            ctx.record_unscheduled(plan, THEORY_SPREAD_REASON)
            logger.info(
                "Theory unscheduled | course=%s batch=%s faculty=%s needed=%s found=%s",
                plan.course_code,
                plan.batch,
                plan.faculty_label,
                needed,
                len(picks),
            )
            continue

        for day, slot_index in picks:
            ctx.place(
                plan.batch,
                day,
                slot_index,
                ScheduleCell(
                    course_code=plan.course_code,
                    faculty=plan.faculty,
                    session_type=SessionType.theory,
                    slot_role=SlotRole.theory,
                    course_name=plan.course_name,
                    semester=plan.semester,
                ),
            )


def enforce_free_days(ctx: SchedulingContext) -> None:
    """Empties the lightest day of any faculty member who teaches every day.

    Cleared sessions are dropped without being reported as unscheduled.
    """
    for faculty in ctx.faculty:
        loads = {day: ctx.faculty_load(faculty, day) for day in DAYS}
        if any(load == 0 for load in loads.values()):
            continue

        target_day = min(DAYS, key=lambda day: loads[day])
        cleared = 0
        for batch in ctx.batches:
            for slot_index in range(SLOTS_PER_DAY):
                cell = ctx.cell(batch, target_day, slot_index)
                if cell is not None and cell.faculty == faculty:
                    ctx.clear(batch, target_day, slot_index)
                    cleared += 1
        ctx.forced_clears.append(ForcedClear(faculty=faculty, day=target_day, cleared_cells=cleared))
        logger.warning(
            "Free day forced | faculty=%s day=%s cleared_cells=%s",
            faculty,
            target_day,
            cleared,
        )


def _can_move(ctx: SchedulingContext, batch: str, target_day: str, slot_index: int, cell: ScheduleCell) -> bool:
    if cell.is_theory:
        if ctx.is_theory_at(batch, target_day, slot_index - 1) or ctx.is_theory_at(batch, target_day, slot_index + 1):
            return False
        return not ctx.has_course_theory_on_day(batch, target_day, cell.course_code)
    if cell.is_lab:
        if cell.block_length > 1:
            return False
        return not ctx.has_lab_on_day(batch, target_day)
    return False


def _fill_one_empty_day(ctx: SchedulingContext, batch: str) -> bool:
    for day in DAYS:
        if ctx.occupied_count(batch, day) > 0:
            continue
        for donor_day in DAYS:
            if donor_day == day or ctx.occupied_count(batch, donor_day) <= 1:
                continue
            for slot_index, cell in enumerate(ctx.day_cells(batch, donor_day)):
                if cell is None or not _can_move(ctx, batch, day, slot_index, cell):
                    continue
                # Same slot index on the new day; faculty occupancy moves with the cell unchecked.
                ctx.clear(batch, donor_day, slot_index)
                ctx.place(batch, day, slot_index, cell)
                logger.debug(
                    "Balanced day | batch=%s course=%s from=%s to=%s slot=%s",
                    batch,
                    cell.course_code,
                    donor_day,
                    day,
                    slot_index,
                )
                return True
    return False


def balance_days(ctx: SchedulingContext) -> None:
    """Moves single-slot sessions into days a batch would otherwise have empty."""
    for batch in ctx.batches:
        while _fill_one_empty_day(ctx, batch):
            ctx.balancer_moves += 1


PHASE_HANDLERS: dict[str, Callable[[SchedulingContext], None]] = {
    "first_hour": allocate_first_hours,
    "labs": allocate_lab_blocks,
    "theory": distribute_theory,
    "free_day": enforce_free_days,
    "balance": balance_days,
}


@dataclass
class ScheduleResult:
    context: SchedulingContext
    phases: list[str]
    runtime_ms: int

    def to_response(self, *, persisted: bool = False) -> AutoScheduleResponse:
        ctx = self.context
        return AutoScheduleResponse(
            timetable=ctx.timetable_payload(),
            unscheduled=[entry.to_payload() for entry in ctx.unscheduled],
            diagnostics=ScheduleDiagnostics(
                phases=self.phases,
                placed_sessions=ctx.placed_sessions(),
                balancer_moves=ctx.balancer_moves,
                forced_clears=[
                    {"faculty": item.faculty, "day": item.day, "cleared_cells": item.cleared_cells}
                    for item in ctx.forced_clears
                ],
                runtime_ms=self.runtime_ms,
            ),
            persisted=persisted,
        )


class WeeklyScheduler:
    """Greedy multi-phase scheduler for one semester's batches.

    Every decision is first-fit in the configured orderings and never
    revisited, except by the free-day and balancing passes.
    """

    def __init__(
        self,
        *,
        semester: str,
        courses: Sequence[CourseRequestIn],
        batches: Sequence[str],
        links: Sequence[FacultyCourseLink],
        options: ScheduleOptions | None = None,
    ) -> None:
        self.semester = semester
        self.options = options or ScheduleOptions()
        unknown = [phase for phase in self.options.phases if phase not in PHASE_HANDLERS]
        if unknown:
            raise SchedulerError(
                message="Unknown scheduling phase",
                details={"phases": unknown, "allowed": list(DEFAULT_PHASES)},
            )

        self.batches = list(batches)
        if self.options.batch_order == "name":
            self.batches = sorted(self.batches)
        self.plans = build_course_plans(
            semester=semester,
            courses=courses,
            batches=self.batches,
            links=links,
            course_order=self.options.course_order,
        )
        self.faculty = discover_faculty(self.plans, self.options.faculty_order)

    def new_context(self) -> SchedulingContext:
        return SchedulingContext(
            semester=self.semester,
            batches=list(self.batches),
            faculty=list(self.faculty),
            plans=list(self.plans),
        )

    def run(self) -> ScheduleResult:
        started = perf_counter()
        phases = list(self.options.phases)
        logger.info(
            "Scheduler run semester=%s batches=%s courses=%s faculty=%s phases=%s",
            self.semester,
            len(self.batches),
            len(self.plans),
            len(self.faculty),
            ",".join(phases),
        )

        ctx = self.new_context()
        for phase in phases:
            PHASE_HANDLERS[phase](ctx)

        runtime_ms = int((perf_counter() - started) * 1000)
        logger.info(
            "Scheduler finished semester=%s placed=%s unscheduled=%s forced_clears=%s moves=%s runtime_ms=%s",
            self.semester,
            ctx.placed_sessions(),
            len(ctx.unscheduled),
            len(ctx.forced_clears),
            ctx.balancer_moves,
            runtime_ms,
        )
        return ScheduleResult(context=ctx, phases=phases, runtime_ms=runtime_ms)
