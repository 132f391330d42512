from app.models.faculty import CourseRole, Faculty  # noqa: F401
from app.models.timetable import BatchTimetable  # noqa: F401
