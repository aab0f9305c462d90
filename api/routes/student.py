"""
api/routes/student.py -- The signed-in student's own profile and enrollments.

Routes:
  GET  /api/student/profile      -- current user (requires auth)
  GET  /api/student/enrollments  -- enrollments joined with courses (requires auth)
  POST /api/student/enrollments  -- enroll in a course (requires auth)

Every route acts on the user resolved from the Bearer token. There is no
student id in the path, so one student cannot read or change another's data.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from academics.store import CourseStore
from api.models import EnrollmentCreatedResponse, EnrollmentResponse, EnrollRequest, UserResponse
from auth.dependencies import get_current_user
from auth.models import User
from core.errors import ValidationError

router = APIRouter()


@router.get("/student/profile", response_model=UserResponse)
def profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_user(current_user)


@router.get("/student/enrollments", response_model=list[EnrollmentResponse])
def list_enrollments(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> list[EnrollmentResponse]:
    """List the current student's enrollments ordered by course code. Empty list if none."""
    course_store: CourseStore = request.app.state.course_store
    rows = course_store.list_enrollments(current_user.student_id)
    return [EnrollmentResponse.from_enrollment(r) for r in rows]


@router.post("/student/enrollments", response_model=EnrollmentCreatedResponse, status_code=201)
def enroll(
    request: Request,
    body: EnrollRequest,
    current_user: User = Depends(get_current_user),
) -> EnrollmentCreatedResponse:
    """Enroll the current student in a course. 404 unknown course, 409 already enrolled."""
    if body.course_id is None:
        raise ValidationError(missing=["course_id"])
    course_store: CourseStore = request.app.state.course_store
    enrollment_id = course_store.enroll(current_user.student_id, body.course_id)
    return EnrollmentCreatedResponse(id=enrollment_id)
