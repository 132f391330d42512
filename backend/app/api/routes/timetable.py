import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import get_settings
from app.core.exceptions import ResourceNotFoundError
from app.schemas.schedule import AutoScheduleRequest, AutoScheduleResponse
from app.schemas.timetable import (
    FacultyTimetableOut,
    StoredTimetableIn,
    StoredTimetableOut,
    StoredTimetableUpdate,
    TeachingOverviewOut,
)
from app.services.faculty_assignment import links_from_directory, load_faculty_directory
from app.services.faculty_timetable import build_faculty_timetable, teaching_overview
from app.services.timetable_store import (
    delete_timetable,
    find_timetable,
    get_timetable,
    list_timetables,
    update_timetable,
    upsert_timetable,
    upsert_timetables,
)
from app.services.weekly_scheduler import WeeklyScheduler

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


@router.post("/auto-schedule", response_model=AutoScheduleResponse)
def auto_schedule_timetable(payload: AutoScheduleRequest, db: Session = Depends(get_db)) -> AutoScheduleResponse:
    faculty_rows = load_faculty_directory(db)
    scheduler = WeeklyScheduler(
        semester=payload.semester,
        courses=payload.courses,
        batches=payload.batches,
        links=links_from_directory(faculty_rows),
        options=payload.options,
    )
    result = scheduler.run()

    persisted = False
    if payload.persist and settings.persist_generated_timetables:
        upsert_timetables(db, semester=payload.semester, grids=result.context.timetable_payload())
        persisted = True
    else:
        logger.info("Generated timetable not persisted | semester=%s student_type=%s", payload.semester, payload.student_type)
    return result.to_response(persisted=persisted)


@router.post("", response_model=list[StoredTimetableOut])
def save_timetables(payload: list[StoredTimetableIn], db: Session = Depends(get_db)) -> list[StoredTimetableOut]:
    if not payload:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No timetable data provided.")
    return [
        upsert_timetable(db, semester=item.semester, batch=item.batch, grid=item.timetable)
        for item in payload
    ]


@router.get("", response_model=list[StoredTimetableOut])
def get_all_timetables(db: Session = Depends(get_db)) -> list[StoredTimetableOut]:
    return list_timetables(db)


@router.get("/batch", response_model=StoredTimetableOut)
def get_timetable_by_batch(
    type: str = Query(default=""),
    batch: str | None = Query(default=None),
    semester: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> StoredTimetableOut:
    if type not in {"UG", "PG"}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Type (UG or PG) is required")
    if type == "UG" and (not batch or not semester):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Batch and semester are required for UG")
    if type == "PG" and not semester:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Semester is required for PG")

    record = find_timetable(db, semester=semester, batch=batch if type == "UG" else None)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No timetable found for the selected criteria")
    return record


@router.get("/faculty", response_model=FacultyTimetableOut)
def get_timetable_by_faculty_name(name: str = Query(default=""), db: Session = Depends(get_db)) -> FacultyTimetableOut:
    if not name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Faculty name is required")
    return FacultyTimetableOut(timetable=build_faculty_timetable(list_timetables(db), name))


@router.get("/faculty/overview", response_model=TeachingOverviewOut)
def get_teaching_overview(name: str = Query(default=""), db: Session = Depends(get_db)) -> TeachingOverviewOut:
    if not name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Faculty name is required")
    return TeachingOverviewOut(**teaching_overview(list_timetables(db), name))


@router.get("/{timetable_id}", response_model=StoredTimetableOut)
def get_timetable_by_id(timetable_id: str, db: Session = Depends(get_db)) -> StoredTimetableOut:
    record = get_timetable(db, timetable_id)
    if record is None:
        raise ResourceNotFoundError("Timetable", timetable_id)
    return record


@router.put("/{timetable_id}", response_model=StoredTimetableOut)
def update_timetable_by_id(
    timetable_id: str,
    payload: StoredTimetableUpdate,
    db: Session = Depends(get_db),
) -> StoredTimetableOut:
    record = get_timetable(db, timetable_id)
    if record is None:
        raise ResourceNotFoundError("Timetable", timetable_id)

    semester = payload.semester or record.semester
    batch = payload.batch or record.batch
    existing = find_timetable(db, semester=semester, batch=batch)
    if existing is not None and existing.id != record.id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A timetable already exists for this semester and batch",
        )
    return update_timetable(db, record, semester=payload.semester, batch=payload.batch, grid=payload.timetable)


@router.delete("/{timetable_id}")
def delete_timetable_by_id(timetable_id: str, db: Session = Depends(get_db)) -> dict:
    record = get_timetable(db, timetable_id)
    if record is None:
        raise ResourceNotFoundError("Timetable", timetable_id)
    delete_timetable(db, record)
    return {"success": True}
