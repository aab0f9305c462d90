"""
academics/store.py -- SQLAlchemy-backed persistence for courses and enrollments.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in
academics/models.py remain the authoritative domain representation.

Pattern: Repository + Data Mapper. CourseStore is the repository; the _row_to_*
functions are the mappers. Route handlers never touch SQL directly.

Enrollment operations take the public student identifier ("12345") and
resolve it against the users table here. The store reads users directly from
the shared schema rather than going through auth/, so academics/ has no
dependency on the credential layer.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    engine = create_db_engine("sqlite:///university.db")
    store = CourseStore(engine)
    course_id = store.create_course(Course("CS101", "Intro to CS", 3))
    store.enroll("12345", course_id)
    rows = store.list_enrollments("12345")
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from academics.models import Course, Enrollment
from core.database import courses, enrollments, now_iso, users
from core.errors import ConflictError, NotFound

logger = logging.getLogger("portal.academics")


class CourseStore:
    """Repository for Course and Enrollment entities."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def create_course(self, course: Course) -> int:
        """Insert a course and return its id. Raises ConflictError on a duplicate code."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    courses.insert().values(
                        course_code=course.course_code,
                        course_name=course.course_name,
                        description=course.description,
                        credits=course.credits,
                        instructor=course.instructor,
                        semester=course.semester,
                        created_at=now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            # The CHECK on credits also raises IntegrityError; tell them apart
            # by whether the code is already taken.
            if self._course_code_exists(course.course_code):
                raise ConflictError(f"Course {course.course_code} already exists.") from exc
            raise

    def list_courses(self) -> list[Course]:
        """Return every course ordered by course code."""
        with self.engine.connect() as conn:
            rows = conn.execute(courses.select().order_by(courses.c.course_code)).fetchall()
        return [_row_to_course(r) for r in rows]

    def get_course_by_id(self, course_id: int) -> Optional[Course]:
        """Look up a course by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(courses.select().where(courses.c.id == course_id)).fetchone()
        return _row_to_course(row) if row is not None else None

    # ------------------------------------------------------------------
    # Enrollments
    # ------------------------------------------------------------------

    def enroll(self, student_id: str, course_id: int, grade: Optional[str] = None) -> int:
        """Enroll a student in a course and return the enrollment id.

        Raises NotFound if the student or course does not exist and
        ConflictError if the student is already enrolled in that course.
        The (student, course) UNIQUE constraint decides duplicates, so two
        concurrent identical requests produce one row and one ConflictError.
        """
        with self.engine.connect() as conn:
            user_id = _resolve_student(conn, student_id)
            course = conn.execute(select(courses.c.id).where(courses.c.id == course_id)).fetchone()
            if course is None:
                raise NotFound("Course not found.")
            try:
                result = conn.execute(
                    enrollments.insert().values(
                        student_id=user_id,
                        course_id=course_id,
                        grade=grade,
                        enrolled_at=now_iso(),
                    )
                )
                conn.commit()
            except IntegrityError as exc:
                conn.rollback()
                raise ConflictError("Student is already enrolled in this course.") from exc
            enrollment_id = result.inserted_primary_key[0]
        logger.info("Enrolled student_id=%s in course_id=%d", student_id, course_id)
        return enrollment_id

    def list_enrollments(self, student_id: str) -> list[Enrollment]:
        """Return a student's enrollments joined with course details, ordered by course code.

        Raises NotFound if the student does not exist. A student with no
        enrollments gets an empty list.
        """
        query = (
            select(
                enrollments,
                courses.c.course_code,
                courses.c.course_name,
                courses.c.description,
                courses.c.credits,
                courses.c.instructor,
                courses.c.semester,
            )
            .select_from(enrollments.join(courses, enrollments.c.course_id == courses.c.id))
            .order_by(courses.c.course_code)
        )
        with self.engine.connect() as conn:
            user_id = _resolve_student(conn, student_id)
            rows = conn.execute(query.where(enrollments.c.student_id == user_id)).fetchall()
        return [_row_to_enrollment(r) for r in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _course_code_exists(self, course_code: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(courses.c.id).where(courses.c.course_code == course_code)).fetchone()
        return row is not None


def _resolve_student(conn: Connection, student_id: str) -> int:
    """Map a public student identifier to users.id, or raise NotFound."""
    row = conn.execute(select(users.c.id).where(users.c.student_id == student_id)).fetchone()
    if row is None:
        raise NotFound("Student not found.")
    return row.id


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_course(row) -> Course:
    return Course(
        id=row.id,
        course_code=row.course_code,
        course_name=row.course_name,
        description=row.description,
        credits=row.credits,
        instructor=row.instructor,
        semester=row.semester,
        created_at=row.created_at,
    )


def _row_to_enrollment(row) -> Enrollment:
    return Enrollment(
        id=row.id,
        student_id=row.student_id,
        course_id=row.course_id,
        grade=row.grade,
        enrolled_at=row.enrolled_at,
        course_code=row.course_code,
        course_name=row.course_name,
        description=row.description,
        credits=row.credits,
        instructor=row.instructor,
        semester=row.semester,
    )
