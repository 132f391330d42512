from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.faculty import Faculty
from app.schemas.faculty import FacultyCreate, FacultyOut, FacultyUpdate
from app.services.faculty_assignment import load_faculty_directory, next_directory_order

router = APIRouter()


@router.get("/", response_model=list[FacultyOut])
def list_faculty(db: Session = Depends(get_db)) -> list[FacultyOut]:
    return load_faculty_directory(db)


@router.post("/", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(payload: FacultyCreate, db: Session = Depends(get_db)) -> FacultyOut:
    existing = db.execute(select(Faculty).where(Faculty.faculty_code == payload.faculty_code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty id already exists")
    faculty = Faculty(**payload.model_dump(mode="json"), directory_order=next_directory_order(db))
    db.add(faculty)
    db.commit()
    db.refresh(faculty)
    return faculty


@router.put("/{faculty_id}", response_model=FacultyOut)
def update_faculty(faculty_id: str, payload: FacultyUpdate, db: Session = Depends(get_db)) -> FacultyOut:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise ResourceNotFoundError("Faculty", faculty_id)

    data = payload.model_dump(mode="json", exclude_unset=True)
    if "faculty_code" in data:
        existing = db.execute(
            select(Faculty).where(Faculty.faculty_code == data["faculty_code"], Faculty.id != faculty_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty id already exists")

    for key, value in data.items():
        setattr(faculty, key, value)
    db.commit()
    db.refresh(faculty)
    return faculty


@router.delete("/{faculty_id}")
def delete_faculty(faculty_id: str, db: Session = Depends(get_db)) -> dict:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise ResourceNotFoundError("Faculty", faculty_id)
    db.delete(faculty)
    db.commit()
    return {"success": True}
