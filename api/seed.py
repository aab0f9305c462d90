"""
api/seed.py -- First-run demo data.

Populates three demo students and three demo courses when the users table is
empty. Called from the API lifespan (when SEED_DEMO_DATA is true) and from
`python main.py init-db`.

The check-then-insert is not atomic. Two processes starting against the same
empty database at once could both try to seed; the loser hits the UNIQUE
constraints and the ConflictError propagates, failing its startup loudly
rather than writing duplicates.
"""

import logging

from academics.models import Course
from academics.store import CourseStore
from auth.store import UserStore

logger = logging.getLogger("portal.seed")

DEMO_PASSWORD = "password123"

DEMO_STUDENTS = [
    {
        "student_id": "12345",
        "name": "John Doe",
        "email": "john.doe@university.edu",
        "program": "Computer Science",
        "year": 3,
    },
    {
        "student_id": "67890",
        "name": "Jane Smith",
        "email": "jane.smith@university.edu",
        "program": "Business Administration",
        "year": 2,
    },
    {
        "student_id": "11111",
        "name": "Bob Johnson",
        "email": "bob.johnson@university.edu",
        "program": "Engineering",
        "year": 4,
    },
]

DEMO_COURSES = [
    Course(
        course_code="CS101",
        course_name="Introduction to Computer Science",
        description="Basic programming concepts",
        credits=3,
        instructor="Dr. Smith",
        semester="Fall 2024",
    ),
    Course(
        course_code="CS201",
        course_name="Data Structures",
        description="Advanced data structures and algorithms",
        credits=4,
        instructor="Dr. Johnson",
        semester="Spring 2025",
    ),
    Course(
        course_code="MATH101",
        course_name="Calculus I",
        description="Differential and integral calculus",
        credits=4,
        instructor="Prof. Davis",
        semester="Fall 2024",
    ),
]


def seed_demo_data(user_store: UserStore, course_store: CourseStore) -> bool:
    """Insert demo students and courses if no users exist yet.

    Returns True if data was written, False if the database was already
    populated.
    """
    if user_store.has_users():
        return False

    for student in DEMO_STUDENTS:
        user_store.create(password=DEMO_PASSWORD, **student)
    existing_codes = {c.course_code for c in course_store.list_courses()}
    for course in DEMO_COURSES:
        if course.course_code not in existing_codes:
            course_store.create_course(course)

    logger.info(
        "Database seeded with %d demo students and %d demo courses",
        len(DEMO_STUDENTS),
        len(DEMO_COURSES),
    )
    return True
