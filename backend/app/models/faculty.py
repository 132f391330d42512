import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class CourseRole(str, Enum):
    theory_teacher = "Theory Teacher"
    lab_incharge = "Lab Incharge"
    lab_assistant = "Lab Assistant"


class Faculty(Base):
    __tablename__ = "faculty"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    faculty_code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    designation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Ordered list of {"course_code", "role", "batch"}; order drives faculty resolution.
    course_handled: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    # Insertion position in the directory; the fallback faculty for a course is the first row in this order.
    directory_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
