from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

USER_COLUMNS = "user_id, full_name, email, password_hash, role, teacher_id, student_code, is_active"


def row_to_user(row: Dict[str, Any], *, prefix: str = "") -> User:
    teacher_id = row.get(f"{prefix}teacher_id")
    return User(
        user_id=int(row[f"{prefix}user_id"]),
        full_name=row[f"{prefix}full_name"],
        email=row[f"{prefix}email"],
        password_hash=row.get(f"{prefix}password_hash") or "",
        role=Role(row[f"{prefix}role"]),
        teacher_id=int(teacher_id) if teacher_id is not None else None,
        student_code=row.get(f"{prefix}student_code"),
        is_active=bool(row.get(f"{prefix}is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return row_to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        teacher_id: Optional[int] = None,
        student_code: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, teacher_id, student_code, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (full_name, email, password_hash, role.value, teacher_id, student_code),
            )
            return int(cur.lastrowid)

    def list_students_of(self, teacher_id: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE teacher_id=%s AND role='student'
                ORDER BY full_name ASC
                """,
                (int(teacher_id),),
            )
            return [row_to_user(r) for r in fetchall(cur)]
