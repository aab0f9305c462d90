"""
academics/models.py -- Domain dataclasses for courses and enrollments.

These are pure data containers with zero logic. Lookups, uniqueness, and the
student-id resolution for enrollments live in academics/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Course:
    """A course in the catalog. Read-only through the API; seeded or CLI-created.

    id is None before the record is written to the database.
    """

    course_code: str  # "CS101"; unique
    course_name: str
    credits: int  # > 0, enforced by a CHECK constraint
    description: Optional[str] = None
    instructor: Optional[str] = None
    semester: Optional[str] = None  # "Fall 2024"
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Enrollment:
    """One student's enrollment in one course, joined with the course fields.

    student_id here is the internal users.id (the foreign key), not the public
    student identifier string.
    """

    id: int
    student_id: int
    course_id: int
    enrolled_at: str
    course_code: str
    course_name: str
    credits: int
    grade: Optional[str] = None
    description: Optional[str] = None
    instructor: Optional[str] = None
    semester: Optional[str] = None
