"""
api/routes/courses.py -- Read-only course catalog.

Routes:
  GET /api/courses              -- all courses ordered by course code (requires auth)
  GET /api/courses/{course_id}  -- one course (requires auth)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from academics.store import CourseStore
from api.models import CourseResponse
from auth.dependencies import get_current_user
from auth.models import User
from core.errors import NotFound

router = APIRouter()


@router.get("/courses", response_model=list[CourseResponse])
def list_courses(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> list[CourseResponse]:
    course_store: CourseStore = request.app.state.course_store
    return [CourseResponse.from_course(c) for c in course_store.list_courses()]


@router.get("/courses/{course_id}", response_model=CourseResponse)
def get_course(
    request: Request,
    course_id: int,
    current_user: User = Depends(get_current_user),
) -> CourseResponse:
    course_store: CourseStore = request.app.state.course_store
    course = course_store.get_course_by_id(course_id)
    if course is None:
        raise NotFound("Course not found.")
    return CourseResponse.from_course(course)
