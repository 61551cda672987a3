from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MathDayRegistration(BaseModel):
    full_name: str
    date_of_birth: Optional[str]
    contact_number: str
    email_id: str
    college_name: str
    department: str
    year_semester: str
    area_of_interest: str
    competition_course: str
    course_interest: str
    registration_date: datetime = Field(default_factory=utc_now)


class SchoolProgramRegistration(BaseModel):
    student_name: str
    grade: str
    school_name: Optional[str] = None
    parent_name: str
    contact_number: str
    email: Optional[str] = None
    city: Optional[str] = None


class PongalRegistration(BaseModel):
    full_name: str
    category: str
    standard: Optional[str] = None
    degree: Optional[str] = None
    major: Optional[str] = None
    institute_name: str
    email_id: str
    contact_number: str
    registration_date: datetime = Field(default_factory=utc_now)


class ProjectUpload(BaseModel):
    registration_id: str
    email_id: str
    full_name: Optional[str]
    competition_course: Optional[str]
    file_path: str
    file_type: str
    status: str = "uploaded"
    uploaded_at: datetime = Field(default_factory=utc_now)


class ContestSubmission(BaseModel):
    email_id: str
    drive_link: str
    instagram_link: str
    submitted_at: datetime = Field(default_factory=utc_now)
