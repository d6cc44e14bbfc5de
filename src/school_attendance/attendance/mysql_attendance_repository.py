from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

from ..common.pagination import Page, offset_for
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..users.model import User
from ..users.mysql_user_repository import row_to_user
from .model import AttendanceRecord
from .repository import AttendanceRepository

RECORD_COLUMNS = (
    "ar.attendance_id, ar.user_id, ar.marked_by, ar.work_date, ar.status, ar.notes, ar.created_at, ar.updated_at, "
    "m.full_name AS marker_name"
)
RECORD_FROM = "attendance_records ar LEFT JOIN users m ON m.user_id = ar.marked_by"


def row_to_record(row: Dict[str, Any]) -> AttendanceRecord:
    marked_by = row.get("marked_by")
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        user_id=int(row["user_id"]),
        marked_by=int(marked_by) if marked_by is not None else None,
        work_date=row["work_date"],
        status=AttendanceStatus(row["status"]),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        marker_name=row.get("marker_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, where: str, params: tuple) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {RECORD_COLUMNS} FROM {RECORD_FROM} WHERE {where}", params)
        row = fetchone(cur)
        return row_to_record(row) if row else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, "ar.attendance_id=%s", (int(attendance_id),))

    def find_by_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, "ar.user_id=%s AND ar.work_date=%s", (int(user_id), work_date))

    def create(
        self,
        *,
        user_id: int,
        marked_by: int,
        work_date: date,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, marked_by, work_date, status, notes)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), int(marked_by), work_date, status.value, notes),
                )
                attendance_id = int(cur.lastrowid)
                record = self._select_one(cur, "ar.attendance_id=%s", (attendance_id,))
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError(f"Attendance for user {user_id} on {work_date} already exists") from e
            raise

        if record is None:
            raise ConflictError(f"Attendance row {attendance_id} vanished after insert")
        return record

    def update(
        self,
        attendance_id: int,
        *,
        marked_by: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET marked_by=%s, status=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (int(marked_by), status.value, notes, int(attendance_id)),
            )
            # rowcount is 0 for an identical re-write too, so re-read instead.
            return self._select_one(cur, "ar.attendance_id=%s", (int(attendance_id),))

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_by_user(self, user_id: int, *, page: int, page_size: int) -> Page[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM attendance_records WHERE user_id=%s", (int(user_id),))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM {RECORD_FROM}
                WHERE ar.user_id=%s
                ORDER BY ar.work_date DESC
                LIMIT %s OFFSET %s
                """,
                (int(user_id), int(page_size), offset_for(page, page_size)),
            )
            items = [row_to_record(r) for r in fetchall(cur)]

        return Page(items=items, page=page, per_page=page_size, total=total)

    def list_by_teacher_for_date(
        self, teacher_id: int, work_date: date
    ) -> Sequence[Tuple[User, Optional[AttendanceRecord]]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    u.user_id AS u_user_id, u.full_name AS u_full_name, u.email AS u_email,
                    u.role AS u_role, u.teacher_id AS u_teacher_id, u.student_code AS u_student_code,
                    u.is_active AS u_is_active,
                    ar.attendance_id, ar.user_id, ar.marked_by, ar.work_date, ar.status, ar.notes,
                    ar.created_at, ar.updated_at, m.full_name AS marker_name
                FROM users u
                LEFT JOIN attendance_records ar ON ar.user_id = u.user_id AND ar.work_date = %s
                LEFT JOIN users m ON m.user_id = ar.marked_by
                WHERE u.teacher_id = %s AND u.role = 'student'
                ORDER BY u.full_name ASC
                """,
                (work_date, int(teacher_id)),
            )
            rows = fetchall(cur)

        out: list[Tuple[User, Optional[AttendanceRecord]]] = []
        for r in rows:
            student = row_to_user(r, prefix="u_")
            record = row_to_record(r) if r.get("attendance_id") is not None else None
            out.append((student, record))
        return out
