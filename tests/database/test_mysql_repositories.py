from __future__ import annotations

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from school_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from school_attendance.core.enums import AttendanceStatus, Role
from school_attendance.core.exceptions import ConflictError
from school_attendance.database.mysql_base import db_cursor, is_duplicate_key
from school_attendance.users.mysql_user_repository import MySQLUserRepository


class FakeConnFactory:
    def __init__(self, cursor):
        self.conn = MagicMock()
        self.conn.cursor.return_value = cursor

    def connect(self, *, with_database: bool = True):
        return self.conn


def _row(**overrides):
    row = {
        "attendance_id": 5,
        "user_id": 10,
        "marked_by": 1,
        "work_date": date(2024, 1, 15),
        "status": "late",
        "notes": None,
        "created_at": datetime(2024, 1, 15, 8, 0),
        "updated_at": datetime(2024, 1, 15, 8, 0),
    }
    row.update(overrides)
    return row


def test_db_cursor_commits_on_success():
    cur = MagicMock()
    factory = FakeConnFactory(cur)

    with db_cursor(factory) as (_, c):
        c.execute("SELECT 1")

    factory.conn.commit.assert_called_once()
    factory.conn.rollback.assert_not_called()
    cur.close.assert_called_once()
    factory.conn.close.assert_called_once()


def test_db_cursor_rolls_back_on_error():
    factory = FakeConnFactory(MagicMock())

    with pytest.raises(RuntimeError):
        with db_cursor(factory):
            raise RuntimeError("boom")

    factory.conn.rollback.assert_called_once()
    factory.conn.commit.assert_not_called()
    factory.conn.close.assert_called_once()


def test_is_duplicate_key():
    assert is_duplicate_key(IntegrityError(msg="dup", errno=errorcode.ER_DUP_ENTRY))
    assert not is_duplicate_key(IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    assert not is_duplicate_key(ValueError("x"))


def test_create_maps_duplicate_entry_to_conflict():
    cur = MagicMock()
    cur.execute.side_effect = IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    with pytest.raises(ConflictError):
        repo.create(user_id=10, marked_by=1, work_date=date(2024, 1, 15), status=AttendanceStatus.PRESENT)


def test_create_propagates_other_integrity_errors():
    cur = MagicMock()
    cur.execute.side_effect = IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    with pytest.raises(IntegrityError):
        repo.create(user_id=10, marked_by=1, work_date=date(2024, 1, 15), status=AttendanceStatus.PRESENT)


def test_create_returns_inserted_row():
    cur = MagicMock()
    cur.lastrowid = 5
    cur.fetchone.return_value = _row(status="present")
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    rec = repo.create(user_id=10, marked_by=1, work_date=date(2024, 1, 15), status=AttendanceStatus.PRESENT)

    assert rec.attendance_id == 5
    assert rec.status == AttendanceStatus.PRESENT
    insert_params = cur.execute.call_args_list[0].args[1]
    assert insert_params == (10, 1, date(2024, 1, 15), "present", None)


def test_update_rereads_row():
    cur = MagicMock()
    cur.fetchone.return_value = _row(notes="n")
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    rec = repo.update(5, marked_by=1, status=AttendanceStatus.LATE, notes="n")

    assert rec.notes == "n"
    assert cur.execute.call_args_list[0].args[1] == (1, "late", "n", 5)


def test_update_missing_row_returns_none():
    cur = MagicMock()
    cur.fetchone.return_value = None
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    assert repo.update(5, marked_by=1, status=AttendanceStatus.LATE) is None


def test_list_by_user_builds_page():
    cur = MagicMock()
    cur.fetchone.return_value = {"total": 12}
    cur.fetchall.return_value = [_row(attendance_id=i) for i in (7, 6)]
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    page = repo.list_by_user(10, page=2, page_size=10)

    assert page.total == 12
    assert [r.attendance_id for r in page.items] == [7, 6]
    assert cur.execute.call_args_list[1].args[1] == (10, 10, 10)


def test_list_by_teacher_for_date_maps_left_join():
    cur = MagicMock()
    student_cols = {
        "u_user_id": 10,
        "u_full_name": "Bob",
        "u_email": "bob@school.test",
        "u_role": "student",
        "u_teacher_id": 1,
        "u_student_code": "STU1001",
        "u_is_active": 1,
    }
    cur.fetchall.return_value = [
        {**student_cols, **_row()},
        {**student_cols, "u_user_id": 11, "u_full_name": "Cid", "attendance_id": None, "user_id": None},
    ]
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    rows = repo.list_by_teacher_for_date(1, date(2024, 1, 15))

    assert [s.user_id for s, _ in rows] == [10, 11]
    assert rows[0][1].status == AttendanceStatus.LATE
    assert rows[1][1] is None
    assert rows[0][0].role == Role.STUDENT


def test_user_repository_maps_row():
    cur = MagicMock()
    cur.fetchone.return_value = {
        "user_id": 3,
        "full_name": "T",
        "email": "t@school.test",
        "password_hash": "h",
        "role": "teacher",
        "teacher_id": None,
        "student_code": None,
        "is_active": 1,
    }
    repo = MySQLUserRepository(FakeConnFactory(cur))

    user = repo.get_by_id(3)

    assert user.role == Role.TEACHER
    assert user.teacher_id is None
    assert user.is_active is True


def test_reads_join_the_marker_name():
    cur = MagicMock()
    cur.fetchone.return_value = _row(marker_name="Teacher 1")
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    rec = repo.find_by_user_and_date(10, date(2024, 1, 15))

    assert rec.marker_name == "Teacher 1"
    sql = cur.execute.call_args.args[0]
    assert "LEFT JOIN users m ON m.user_id = ar.marked_by" in sql
    assert cur.execute.call_args.args[1] == (10, date(2024, 1, 15))


def test_teacher_roster_carries_marker_name():
    cur = MagicMock()
    cur.fetchall.return_value = [
        {
            "u_user_id": 10,
            "u_full_name": "Bob",
            "u_email": "bob@school.test",
            "u_role": "student",
            "u_teacher_id": 1,
            "u_student_code": None,
            "u_is_active": 1,
            **_row(marked_by=10, marker_name="Bob"),
        }
    ]
    repo = MySQLAttendanceRepository(FakeConnFactory(cur))

    (_, rec), = repo.list_by_teacher_for_date(1, date(2024, 1, 15))

    assert (rec.marked_by, rec.marker_name) == (10, "Bob")
