"""Tests for the admin CLI in main.py against a throwaway file database."""

import pytest

from core.config import get_settings
from main import build_parser, main


@pytest.fixture
def db_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "COMMAND" in capsys.readouterr().out


def test_serve_defaults():
    args = build_parser().parse_args(["serve"])
    assert args.port == 3000
    assert args.host == "127.0.0.1"
    assert not args.reload


def test_init_db_seeds_once(db_env, capsys):
    assert main(["init-db"]) == 0
    assert "Demo students and courses added." in capsys.readouterr().out
    assert main(["init-db"]) == 0
    assert "demo data not loaded" in capsys.readouterr().out


def test_courses_lists_catalog(db_env, capsys):
    main(["init-db"])
    capsys.readouterr()
    assert main(["courses"]) == 0
    out = capsys.readouterr().out
    assert "CS101" in out and "MATH101" in out


def test_courses_empty(db_env, capsys):
    main(["init-db", "--no-seed"])
    capsys.readouterr()
    assert main(["courses"]) == 0
    assert "No courses." in capsys.readouterr().out


def test_add_student_and_duplicate(db_env, capsys):
    argv = ["add-student", "99999", "Ann Lee", "ann@u.edu", "--password", "pw12345", "--year", "2"]
    assert main(argv) == 0
    assert "Created student 99999" in capsys.readouterr().out

    assert main(argv) == 2
    assert "[!]" in capsys.readouterr().err


def test_add_student_rejects_overlong_password(db_env, capsys):
    argv = ["add-student", "99999", "Ann Lee", "ann@u.edu", "--password", "x" * 80]
    assert main(argv) == 2
    assert "72 bytes" in capsys.readouterr().err

    assert main(["add-student", "99999", "Ann Lee", "ann@u.edu", "--password", "pw12345"]) == 0


def test_add_student_rejects_blank_name(db_env, capsys):
    assert main(["add-student", "99999", "  ", "ann@u.edu", "--password", "pw12345"]) == 2
    assert "name" in capsys.readouterr().err


def test_enroll_and_list(db_env, capsys):
    main(["init-db"])
    assert main(["enroll", "11111", "1"]) == 0
    capsys.readouterr()
    assert main(["enrollments", "11111"]) == 0
    assert "CS101" in capsys.readouterr().out


def test_enrollments_for_unknown_student(db_env, capsys):
    main(["init-db", "--no-seed"])
    assert main(["enrollments", "00000"]) == 2
    assert "Student not found." in capsys.readouterr().err
