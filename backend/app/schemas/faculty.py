from pydantic import BaseModel, Field, field_validator

from app.models.faculty import CourseRole


class CourseHandledEntry(BaseModel):
    course_code: str = Field(min_length=1, max_length=50)
    role: CourseRole
    batch: str = Field(min_length=1, max_length=50)

    @field_validator("course_code", "batch")
    @classmethod
    def strip_value(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped


class FacultyBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    faculty_code: str = Field(min_length=1, max_length=50)
    department: str = Field(default="", max_length=200)
    designation: str | None = Field(default=None, max_length=100)
    course_handled: list[CourseHandledEntry] = Field(default_factory=list, max_length=100)


class FacultyCreate(FacultyBase):
    pass


class FacultyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    faculty_code: str | None = Field(default=None, min_length=1, max_length=50)
    department: str | None = Field(default=None, max_length=200)
    designation: str | None = Field(default=None, max_length=100)
    course_handled: list[CourseHandledEntry] | None = Field(default=None, max_length=100)


class FacultyOut(FacultyBase):
    id: str

    model_config = {"from_attributes": True}
