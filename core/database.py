"""
core/database.py -- SQLAlchemy Core schema and engine factory.

One schema, three tables: users, courses, enrollments. They live in a single
database because enrollments carry foreign keys into both of the others.

The engine is NOT a module-level singleton. Whoever owns the process
lifetime (api/main.py lifespan, the CLI in main.py, or a test fixture) calls
create_db_engine() once and hands the Engine to each store's constructor.
Stores never open their own connections to a URL they chose themselves.

Security: all queries elsewhere use bound parameters against these Table
objects. No f-strings in SQL.

Layer rule: core/ is the kernel and imports nothing from the rest of the app.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("student_id", String(32), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("program", String(255), nullable=False, server_default=""),
    Column("year", Integer, nullable=False, server_default="1"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

courses = Table(
    "courses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("course_code", String(20), nullable=False, unique=True),
    Column("course_name", String(255), nullable=False),
    Column("description", Text),
    Column("credits", Integer, nullable=False),
    Column("instructor", String(255)),
    Column("semester", String(50)),
    Column("created_at", String(32), nullable=False),
    CheckConstraint("credits > 0", name="ck_course_credits_positive"),
)

# No ON DELETE clause: with foreign_keys=ON, deleting a user or course that
# still has enrollments is rejected by SQLite.
enrollments = Table(
    "enrollments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("student_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("course_id", Integer, ForeignKey("courses.id"), nullable=False),
    Column("grade", String(5)),
    Column("enrolled_at", String(32), nullable=False),
    UniqueConstraint("student_id", "course_id", name="uq_student_course"),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys is OFF by default in SQLite.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Create an Engine for db_url and make sure the schema exists.

    check_same_thread=False is required for SQLite because FastAPI runs sync
    route handlers in a thread pool; the pool hands connections across threads.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    metadata.create_all(engine)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
