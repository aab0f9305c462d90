#!/usr/bin/env python3
"""
University portal -- server launcher and admin CLI.

Usage:
  python main.py serve
  python main.py serve --port 3000 --reload
  python main.py init-db
  python main.py init-db --no-seed
  python main.py add-student 99999 "Ann Lee" ann@university.edu --program Physics --year 2
  python main.py courses
  python main.py enroll 12345 2
  python main.py enrollments 12345

Environment variables:
  SECRET_KEY    Token signing key (32+ chars). Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL. Defaults to sqlite:///university.db in the repo root.
"""

import argparse
import getpass
import sys

from academics.store import CourseStore
from api.seed import seed_demo_data
from auth.service import AuthService
from auth.store import UserStore
from core.config import get_settings
from core.database import create_db_engine
from core.errors import PortalError


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _cmd_init_db(args: argparse.Namespace, user_store: UserStore, course_store: CourseStore) -> int:
    print(f"Schema ready at {get_settings().database_url}")
    if args.no_seed:
        return 0
    if seed_demo_data(user_store, course_store):
        print("Demo students and courses added.")
    else:
        print("Users already exist; demo data not loaded.")
    return 0


def _cmd_add_student(args: argparse.Namespace, user_store: UserStore) -> int:
    password = args.password or getpass.getpass("Password: ")
    # Same field and password-length checks as POST /api/auth/register.
    result = AuthService(user_store).register(
        student_id=args.student_id,
        name=args.name,
        email=args.email,
        password=password,
        program=args.program,
        year=args.year,
    )
    user = result.user
    print(f"Created student {user.student_id} ({user.name}, id={user.id}).")
    return 0


def _cmd_courses(course_store: CourseStore) -> int:
    rows = course_store.list_courses()
    if not rows:
        print("No courses.")
        return 0
    for c in rows:
        print(f"  [{c.id:>3}] {c.course_code:<10} {c.course_name:<40} {c.credits} cr  {c.semester or ''}")
    return 0


def _cmd_enroll(args: argparse.Namespace, course_store: CourseStore) -> int:
    enrollment_id = course_store.enroll(args.student_id, args.course_id)
    print(f"Enrolled {args.student_id} in course {args.course_id} (enrollment {enrollment_id}).")
    return 0


def _cmd_enrollments(args: argparse.Namespace, course_store: CourseStore) -> int:
    rows = course_store.list_enrollments(args.student_id)
    if not rows:
        print(f"{args.student_id} has no enrollments.")
        return 0
    for e in rows:
        grade = e.grade or "-"
        print(f"  {e.course_code:<10} {e.course_name:<40} {e.credits} cr  grade {grade}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="university-portal",
        description="Run the university portal API or manage its database.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the API server with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    init_db = sub.add_parser("init-db", help="Create tables and load demo data on an empty database")
    init_db.add_argument("--no-seed", action="store_true", help="Create tables only")

    add = sub.add_parser("add-student", help="Register a student account")
    add.add_argument("student_id")
    add.add_argument("name")
    add.add_argument("email")
    add.add_argument("--password", help="Prompted for when omitted")
    add.add_argument("--program", default="")
    add.add_argument("--year", type=int, default=1)

    sub.add_parser("courses", help="List the course catalog")

    enroll = sub.add_parser("enroll", help="Enroll a student in a course")
    enroll.add_argument("student_id")
    enroll.add_argument("course_id", type=int)

    enrollments = sub.add_parser("enrollments", help="List a student's enrollments")
    enrollments.add_argument("student_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1
    if args.command == "serve":
        return _cmd_serve(args)

    engine = create_db_engine(get_settings().database_url)
    user_store = UserStore(engine)
    course_store = CourseStore(engine)
    try:
        if args.command == "init-db":
            return _cmd_init_db(args, user_store, course_store)
        if args.command == "add-student":
            return _cmd_add_student(args, user_store)
        if args.command == "courses":
            return _cmd_courses(course_store)
        if args.command == "enroll":
            return _cmd_enroll(args, course_store)
        if args.command == "enrollments":
            return _cmd_enrollments(args, course_store)
    except PortalError as e:
        print(f"  [!] {e.message}", file=sys.stderr)
        return 2
    finally:
        engine.dispose()
    return 1


if __name__ == "__main__":
    sys.exit(main())
