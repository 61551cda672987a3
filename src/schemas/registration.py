from pydantic import BaseModel, model_validator
from pydantic_core import PydanticCustomError
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from models.registration import MathDayRegistration, SchoolProgramRegistration, PongalRegistration
from utils.validation import email_error, is_blank, phone_digits, phone_error


FORM_RULE = "form_rule"


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class RegistrationForm(BaseModel):
    """
    Base of the per-event forms.

    Fields default to empty strings so a blank form can be echoed back; the
    ``check_form`` validator enforces the required fields first and then the
    form's own rules, raising one ``form_rule`` error with the message of the
    first failure.
    """

    required: ClassVar[Tuple[str, ...]] = ()
    required_message: ClassVar[str] = "Please fill in all required fields."
    options: ClassVar[Dict[str, List[str]]] = {}

    @model_validator(mode="after")
    def check_form(self):
        for name in self.required:
            if is_blank(getattr(self, name)):
                raise PydanticCustomError(FORM_RULE, self.required_message)
        message = self.rule_error()
        if message:
            raise PydanticCustomError(FORM_RULE, message)
        return self

    def rule_error(self) -> Optional[str]:
        return None

    @classmethod
    def blank(cls) -> Dict[str, Any]:
        return cls.model_construct().model_dump()

    @classmethod
    def echo(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {name: data.get(name, field.default) for name, field in cls.model_fields.items()}

    def to_record(self) -> Dict[str, Any]:
        raise NotImplementedError


class MathDayRegistrationForm(RegistrationForm):
    fullName: str = ""
    dateOfBirth: str = ""
    contactNumber: str = ""
    emailId: str = ""
    collegeName: str = ""
    department: str = ""
    yearSemester: str = ""
    areaOfInterest: str = ""
    courseInterest: str = ""
    competitionCourse: str = ""

    required: ClassVar[Tuple[str, ...]] = (
        "fullName", "dateOfBirth", "contactNumber", "emailId", "collegeName",
        "department", "yearSemester", "areaOfInterest", "courseInterest",
        "competitionCourse",
    )
    options: ClassVar[Dict[str, List[str]]] = {
        "department": ["B.Com", "BSc", "BCA", "BA", "MBA", "B.E", "Other"],
        "yearSemester": [
            "1st Year / 1st Semester", "1st Year / 2nd Semester",
            "2nd Year / 3rd Semester", "2nd Year / 4th Semester",
            "3rd Year / 5th Semester", "3rd Year / 6th Semester",
            "4th Year / 7th Semester", "4th Year / 8th Semester",
            "Other",
        ],
        "areaOfInterest": [
            "Edukoot", "AI & Robotics", "Accounting & Taxation",
            "Digital Marketing", "Business Administration",
        ],
        "courseInterest": ["Yes", "No", "Maybe (Need more information)"],
        "competitionCourse": [
            "Math + AI = Innovation",
            "Applied Maths + AI Case Challenges",
            "AI in Finance - Simulation Challenge",
        ],
    }

    def rule_error(self) -> Optional[str]:
        return email_error(self.emailId) or phone_error(self.contactNumber)

    def to_record(self) -> Dict[str, Any]:
        return MathDayRegistration(
            full_name=self.fullName.strip(),
            date_of_birth=_clean(self.dateOfBirth),
            contact_number=self.contactNumber.strip(),
            email_id=self.emailId.strip().lower(),
            college_name=self.collegeName.strip(),
            department=self.department,
            year_semester=self.yearSemester.strip(),
            area_of_interest=self.areaOfInterest,
            competition_course=self.competitionCourse,
            course_interest=self.courseInterest,
        ).model_dump(mode="json")


class SchoolProgramRegistrationForm(RegistrationForm):
    studentName: str = ""
    grade: str = ""
    schoolName: str = ""
    parentName: str = ""
    contactNumber: str = ""
    email: str = ""
    city: str = ""

    required: ClassVar[Tuple[str, ...]] = ("studentName", "grade", "parentName", "contactNumber")
    required_message: ClassVar[str] = "Please fill in all required fields (marked with *)."
    options: ClassVar[Dict[str, List[str]]] = {
        "grade": ["1", "2", "3", "4", "5"],
    }

    def rule_error(self) -> Optional[str]:
        return email_error(self.email, optional=True) or phone_error(self.contactNumber, exact=False)

    def to_record(self) -> Dict[str, Any]:
        return SchoolProgramRegistration(
            student_name=self.studentName.strip(),
            grade=self.grade,
            school_name=_clean(self.schoolName),
            parent_name=self.parentName.strip(),
            contact_number=self.contactNumber.strip(),
            email=_clean(self.email),
            city=_clean(self.city),
        ).model_dump(mode="json")


class PongalRegistrationForm(RegistrationForm):
    fullName: str = ""
    category: str = "School"
    standard: str = ""
    degree: str = ""
    major: str = ""
    instituteName: str = ""
    emailId: str = ""
    contactNumber: str = ""
    agreedToTerms: bool = False

    required: ClassVar[Tuple[str, ...]] = ("fullName", "category", "instituteName", "emailId", "contactNumber")
    options: ClassVar[Dict[str, List[str]]] = {
        "category": ["School", "College"],
        "standard": [
            "1st Std", "2nd Std", "3rd Std", "4th Std", "5th Std", "6th Std",
            "7th Std", "8th Std", "9th Std", "10th Std", "11th Std", "12th Std",
        ],
        "degree": ["BSc", "BA", "B.Com", "BCA", "B.E / B.Tech", "MSc", "MA", "M.Com", "MCA", "MBA", "Other"],
    }

    def rule_error(self) -> Optional[str]:
        message = email_error(self.emailId) or phone_error(
            self.contactNumber, message="Please enter a valid 10-digit mobile number."
        )
        if message:
            return message
        if self.category not in ("School", "College"):
            return "Please choose School or College."
        if self.category == "School" and not self.standard.strip():
            return "Please fill in all required fields."
        if self.category == "College" and not (self.degree.strip() and self.major.strip()):
            return "Please fill in all required fields."
        if not self.agreedToTerms:
            return "You must agree to the rules and regulations."
        return None

    def to_record(self) -> Dict[str, Any]:
        school = self.category == "School"
        return PongalRegistration(
            full_name=self.fullName.strip(),
            category=self.category,
            standard=self.standard if school else None,
            degree=None if school else self.degree,
            major=None if school else self.major.strip(),
            institute_name=self.instituteName.strip(),
            email_id=self.emailId.strip(),
            contact_number=phone_digits(self.contactNumber),
        ).model_dump(mode="json")


class FormResponse(BaseModel):
    status: str
    message: str
    form: Dict[str, Any] = {}
    registrationId: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class LookupResponse(BaseModel):
    registrationId: Optional[str]
    fullName: Optional[str]
    category: Optional[str]
    message: str


class EventOut(BaseModel):
    slug: str
    title: str
    registrationOpen: bool
    registrationStart: Optional[str] = None
    registrationEnd: Optional[str] = None
    acceptsProjects: bool = False
    acceptsSubmissions: bool = False
    options: Dict[str, List[str]] = {}
