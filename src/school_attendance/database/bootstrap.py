from __future__ import annotations

import logging
import random
import re
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_PASSWORD = "password"

# Weighted towards "present", like a real class.
_DEMO_STUDENT_STATUSES = ["present", "present", "present", "present", "absent", "sick", "excused", "late"]
_DEMO_TEACHER_STATUSES = ["present", "absent", "sick", "late"]


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Optional[Path] = None) -> None:
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path or SCHEMA_PATH).read_text(encoding="utf-8"))

    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to database %s", db_config.get("database"))


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def _upsert_user(cur, *, full_name: str, email: str, role: str, teacher_id: Optional[int] = None,
                 student_code: Optional[str] = None) -> int:
    password_hash = generate_password_hash(DEMO_PASSWORD)
    cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
    existing = cur.fetchone()
    if existing:
        cur.execute(
            """
            UPDATE users
            SET full_name=%s, password_hash=%s, role=%s, teacher_id=%s, student_code=%s, is_active=1
            WHERE email=%s
            """,
            (full_name, password_hash, role, teacher_id, student_code, email),
        )
        return int(existing["user_id"])

    cur.execute(
        """
        INSERT INTO users (full_name, email, password_hash, role, teacher_id, student_code)
        VALUES (%s, %s, %s, %s, %s, %s)
        """,
        (full_name, email, password_hash, role, teacher_id, student_code),
    )
    return int(cur.lastrowid)


def _seed_record(cur, *, user_id: int, marked_by: int, work_date: date, status: str) -> None:
    cur.execute(
        """
        INSERT INTO attendance_records (user_id, marked_by, work_date, status)
        VALUES (%s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE status=VALUES(status), marked_by=VALUES(marked_by)
        """,
        (user_id, marked_by, work_date, status),
    )


def seed_demo_data(
    db_config: dict,
    *,
    teachers: int = 3,
    students_per_teacher: int = 6,
    unassigned_students: int = 3,
    days: int = 30,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> None:
    """Create demo teachers/students and a month of attendance.

    All demo accounts use the password ``DEMO_PASSWORD``. Re-running is safe:
    users are matched by email and records by (user, date).
    """

    today = today or date.today()
    rng = rng or random.Random(42)

    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)
        code = 1000

        for t in range(1, teachers + 1):
            teacher_id = _upsert_user(cur, full_name=f"Teacher {t}", email=f"teacher{t}@school.test", role="teacher")
            student_ids = []
            for s in range(1, students_per_teacher + 1):
                code += 1
                student_ids.append(
                    _upsert_user(
                        cur,
                        full_name=f"Student {t}-{s}",
                        email=f"student{t}-{s}@school.test",
                        role="student",
                        teacher_id=teacher_id,
                        student_code=f"STU{code}",
                    )
                )

            for i in range(days):
                work_date = today - timedelta(days=i)
                if rng.random() < 0.8:
                    _seed_record(
                        cur,
                        user_id=teacher_id,
                        marked_by=teacher_id,
                        work_date=work_date,
                        status=rng.choice(_DEMO_TEACHER_STATUSES),
                    )
                for student_id in student_ids:
                    if rng.random() < 0.85:
                        _seed_record(
                            cur,
                            user_id=student_id,
                            marked_by=teacher_id,
                            work_date=work_date,
                            status=rng.choice(_DEMO_STUDENT_STATUSES),
                        )

        for u in range(1, unassigned_students + 1):
            code += 1
            student_id = _upsert_user(
                cur,
                full_name=f"Unassigned Student {u}",
                email=f"unassigned{u}@school.test",
                role="student",
                student_code=f"STU{code}",
            )
            for i in range(min(days, 15)):
                if rng.random() < 0.7:
                    _seed_record(
                        cur,
                        user_id=student_id,
                        marked_by=student_id,
                        work_date=today - timedelta(days=i),
                        status=rng.choice(_DEMO_STUDENT_STATUSES),
                    )

        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.info("Demo data seeded (%d teachers, %d days)", teachers, days)
