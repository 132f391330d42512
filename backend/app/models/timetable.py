import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class BatchTimetable(Base):
    __tablename__ = "batch_timetables"
    __table_args__ = (UniqueConstraint("semester", "batch", name="uq_batch_timetables_semester_batch"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    semester: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    batch: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    grid: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
