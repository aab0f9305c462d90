"""
API request and response models for the portal REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
academics/models.py, which own the internal domain representation. Route
handlers map between the two through the from_* factory classmethods.

Request models declare every field Optional on purpose: "field is missing"
is a domain rule (AuthService raises ValidationError naming the fields), not a
schema error, so the client gets one 400 that lists everything it left out.

UserResponse has no password field at all. Whatever the store returns, a
password hash cannot be serialized through it.

Identifiers and names are whitespace-stripped on the way in. Passwords are
not: "pw12345 " and "pw12345" are different passwords.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from academics.models import Course, Enrollment
from auth.models import User

_StudentId = Annotated[str, StringConstraints(strip_whitespace=True, max_length=32)]
_Text = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)]

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    student_id: Optional[_StudentId] = None
    password: Optional[str] = Field(default=None, max_length=255)


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    student_id: Optional[_StudentId] = None
    name: Optional[_Text] = None
    email: Optional[_Text] = None
    password: Optional[str] = Field(default=None, max_length=255)
    program: Optional[_Text] = None
    year: Optional[int] = Field(default=None, ge=1, le=10)


class EnrollRequest(BaseModel):
    """Request body for POST /api/student/enrollments."""

    course_id: Optional[int] = Field(default=None, ge=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """A student as the API shows it. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    student_id: str
    name: str
    email: str
    program: str
    year: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            student_id=user.student_id,
            name=user.name,
            email=user.email,
            program=user.program,
            year=user.year,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(BaseModel):
    """Response for POST /api/auth/login and POST /api/auth/register."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: UserResponse


class VerifyResponse(BaseModel):
    """Response for GET /api/auth/verify."""

    model_config = ConfigDict(frozen=True)

    valid: bool = True
    user: UserResponse


class CourseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    course_code: str
    course_name: str
    description: Optional[str]
    credits: int
    instructor: Optional[str]
    semester: Optional[str]
    created_at: str

    @classmethod
    def from_course(cls, course: Course) -> "CourseResponse":
        return cls(
            id=course.id,
            course_code=course.course_code,
            course_name=course.course_name,
            description=course.description,
            credits=course.credits,
            instructor=course.instructor,
            semester=course.semester,
            created_at=course.created_at,
        )


class EnrollmentResponse(BaseModel):
    """One enrollment row joined with its course, as returned by GET /api/student/enrollments."""

    model_config = ConfigDict(frozen=True)

    id: int
    student_id: int
    course_id: int
    grade: Optional[str]
    enrolled_at: str
    course_code: str
    course_name: str
    description: Optional[str]
    credits: int
    instructor: Optional[str]
    semester: Optional[str]

    @classmethod
    def from_enrollment(cls, enrollment: Enrollment) -> "EnrollmentResponse":
        return cls(
            id=enrollment.id,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            grade=enrollment.grade,
            enrolled_at=enrollment.enrolled_at,
            course_code=enrollment.course_code,
            course_name=enrollment.course_name,
            description=enrollment.description,
            credits=enrollment.credits,
            instructor=enrollment.instructor,
            semester=enrollment.semester,
        )


class EnrollmentCreatedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    fields: Optional[list[str]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "OK"
    message: str = "Server is running"
