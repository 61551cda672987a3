"""
Catalog of the events served by the site.

Each ``EventDefinition`` names the tables an event writes to, the form it
accepts, how its registrations are identified and searched, and the date
window during which registration is open.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Mapping, Optional, Tuple, Type

from core.config import settings
from schemas.registration import (
    RegistrationForm,
    MathDayRegistrationForm,
    SchoolProgramRegistrationForm,
    PongalRegistrationForm,
)
from utils.validation import ALLOWED_PROJECT_TYPES


@dataclass(frozen=True)
class UploadConfig:
    table: str
    folder: str
    timestamp_column: str = "uploaded_at"
    allowed_types: Tuple[str, ...] = ALLOWED_PROJECT_TYPES
    search_fields: Tuple[str, ...] = ("full_name", "email_id", "registration_id")
    conflict_message: str = (
        "You have already uploaded a project. Each email can only submit once. "
        "If you need to update your submission, please contact the organizers."
    )


@dataclass(frozen=True)
class SubmissionConfig:
    table: str
    timestamp_column: str = "submitted_at"
    search_fields: Tuple[str, ...] = ("email_id", "drive_link")
    conflict_message: str = "You have already submitted a video."


@dataclass(frozen=True)
class EventDefinition:
    slug: str
    title: str
    table: str
    form: Type[RegistrationForm]
    email_column: str = "email_id"
    name_column: str = "full_name"
    category_column: Optional[str] = None
    lowercase_email: bool = False
    unique_email: bool = False
    id_prefix: Optional[str] = None
    timestamp_column: str = "registration_date"
    registration_start: Optional[date] = None
    registration_end: Optional[date] = None
    search_fields: Tuple[str, ...] = ()
    export_columns: Tuple[str, ...] = ()
    success_message: str = "Thank you! Your registration has been saved successfully."
    conflict_message: str = (
        "This email is already registered. Please use a different email address "
        "or contact us if you need assistance."
    )
    admin_description: Optional[str] = None
    uploads: Optional[UploadConfig] = None
    submissions: Optional[SubmissionConfig] = None

    def normalize_email(self, email: Optional[str]) -> str:
        email = (email or "").strip()
        return email.lower() if self.lowercase_email else email


def is_registration_open(
    event: EventDefinition,
    today: Optional[date] = None,
    overrides: Optional[Mapping[str, bool]] = None,
) -> bool:
    """
    An explicit override wins; otherwise registration is open inside the
    event's inclusive date window, and always open for events without one.
    """
    overrides = settings.REGISTRATION_OVERRIDES if overrides is None else overrides
    if event.slug in overrides:
        return bool(overrides[event.slug])

    today = today or datetime.now(timezone.utc).date()
    if event.registration_start and today < event.registration_start:
        return False
    if event.registration_end and today > event.registration_end:
        return False
    return True


def display_registration_id(event: EventDefinition, row: Mapping) -> Optional[str]:
    """
    Human readable identifier of a stored registration: the store's own
    identifier when it has one, else ``{prefix}-{id:04d}`` from the numeric key.
    """
    for column in ("registration_id", "registration_no"):
        if row.get(column):
            return str(row[column])
    if event.id_prefix and row.get("id") is not None:
        return f"{event.id_prefix}-{str(row['id']).zfill(4)}"
    return None


MATH_DAY = EventDefinition(
    slug="math-day-2025",
    title="Mathematics Day 2025",
    table="math_lead_registrations",
    form=MathDayRegistrationForm,
    category_column="competition_course",
    lowercase_email=True,
    unique_email=True,
    id_prefix="MATH2025",
    registration_start=date(2025, 12, 17),
    registration_end=date(2025, 12, 20),
    search_fields=("full_name", "email_id", "college_name", "competition_course"),
    export_columns=(
        "id", "full_name", "email_id", "contact_number", "date_of_birth", "college_name",
        "department", "year_semester", "area_of_interest", "course_interest",
        "competition_course", "registration_date",
    ),
    success_message=(
        "Registration submitted successfully! Your data has been saved. "
        "We will contact you soon."
    ),
    admin_description="View uploaded student projects.",
    uploads=UploadConfig(table="math_project_uploads", folder="math_day_2025"),
)

NXTZEN_WINTER = EventDefinition(
    slug="nxtzen-winter-2025",
    title="NxtZen Winter Camp 2025",
    table="nxtzenwinter2025_registrations",
    form=SchoolProgramRegistrationForm,
    email_column="email",
    name_column="student_name",
    category_column="grade",
    timestamp_column="created_at",
    search_fields=("student_name", "parent_name", "school_name", "email", "city"),
    export_columns=(
        "id", "student_name", "grade", "school_name", "parent_name",
        "contact_number", "email", "city", "created_at",
    ),
)

LINGUISTIC_TORNADO = EventDefinition(
    slug="linguistic-tornado-2025",
    title="Linguistic Tornado 2025",
    table="linguistic2025_registrations",
    form=SchoolProgramRegistrationForm,
    email_column="email",
    name_column="student_name",
    category_column="grade",
    timestamp_column="created_at",
    search_fields=NXTZEN_WINTER.search_fields,
    export_columns=NXTZEN_WINTER.export_columns,
    success_message=(
        "Thank you! Your details have been recorded. "
        "Final confirmation will be shared later."
    ),
)

VIRUTHAI_PONGAL = EventDefinition(
    slug="viruthai-pongal-2026",
    title="Viruthai Pongal 2026",
    table="viruthaipongal_registrations",
    form=PongalRegistrationForm,
    category_column="category",
    unique_email=True,
    id_prefix="VP2026",
    search_fields=(
        "full_name", "email_id", "institute_name", "category", "standard", "degree", "major",
    ),
    export_columns=(
        "registration_no", "full_name", "category", "standard", "degree", "major",
        "institute_name", "email_id", "contact_number", "registration_date",
    ),
    success_message="Registration successful! Please proceed to the video submission.",
    conflict_message="Email already registered. Please proceed to submission.",
    admin_description="View registrations and video submissions.",
    submissions=SubmissionConfig(table="viruthaipongal_submissions"),
)

EVENTS: Dict[str, EventDefinition] = {
    e.slug: e for e in (MATH_DAY, NXTZEN_WINTER, LINGUISTIC_TORNADO, VIRUTHAI_PONGAL)
}


def get_event(slug: str) -> Optional[EventDefinition]:
    return EVENTS.get(slug)
