from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from school_attendance.attendance.model import AttendanceRecord
from school_attendance.attendance.service import AttendanceService
from school_attendance.common.pagination import Page, offset_for
from school_attendance.core.enums import AttendanceStatus, Role
from school_attendance.core.exceptions import ConflictError
from school_attendance.users.model import User

TODAY = date(2024, 1, 20)


class InMemoryUsers:
    def __init__(self, users=()):
        self.users_by_id: dict[int, User] = {u.user_id: u for u in users}
        self._id = max(self.users_by_id, default=0)

    def add(self, user: User) -> User:
        self.users_by_id[user.user_id] = user
        self._id = max(self._id, user.user_id)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.email == email), None)

    def create_user(self, *, full_name, email, password_hash, role, teacher_id=None, student_code=None) -> int:
        self._id += 1
        self.users_by_id[self._id] = User(
            user_id=self._id,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
            teacher_id=teacher_id,
            student_code=student_code,
        )
        return self._id

    def list_students_of(self, teacher_id: int):
        students = [u for u in self.users_by_id.values() if u.teacher_id == teacher_id and u.role == Role.STUDENT]
        return sorted(students, key=lambda u: u.full_name)


class InMemoryAttendance:
    """Mirrors the unique (user_id, work_date) index of the real table."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.rows: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _marker_name(self, marked_by) -> Optional[str]:
        marker = self._users.get_by_id(marked_by)
        return marker.full_name if marker else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(attendance_id)

    def find_by_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next((r for r in self.rows.values() if r.user_id == user_id and r.work_date == work_date), None)

    def create(self, *, user_id, marked_by, work_date, status, notes=None) -> AttendanceRecord:
        if self.find_by_user_and_date(user_id, work_date):
            raise ConflictError("duplicate")
        self._id += 1
        now = datetime(2024, 1, 20, 8, 0, 0)
        rec = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            marked_by=marked_by,
            work_date=work_date,
            status=status,
            notes=notes,
            created_at=now,
            updated_at=now,
            marker_name=self._marker_name(marked_by),
        )
        self.rows[self._id] = rec
        return rec

    def update(self, attendance_id, *, marked_by, status, notes=None) -> Optional[AttendanceRecord]:
        rec = self.rows.get(attendance_id)
        if rec is None:
            return None
        rec = replace(
            rec,
            marked_by=marked_by,
            marker_name=self._marker_name(marked_by),
            status=status,
            notes=notes,
            updated_at=datetime(2024, 1, 20, 9, 0, 0),
        )
        self.rows[attendance_id] = rec
        return rec

    def delete(self, attendance_id: int) -> bool:
        return self.rows.pop(attendance_id, None) is not None

    def list_by_user(self, user_id: int, *, page: int, page_size: int) -> Page[AttendanceRecord]:
        items = sorted((r for r in self.rows.values() if r.user_id == user_id), key=lambda r: r.work_date, reverse=True)
        start = offset_for(page, page_size)
        return Page(items=items[start:start + page_size], page=page, per_page=page_size, total=len(items))

    def list_by_teacher_for_date(self, teacher_id: int, work_date: date):
        return [(s, self.find_by_user_and_date(s.user_id, work_date)) for s in self._users.list_students_of(teacher_id)]


def make_user(user_id: int, role: Role, *, teacher_id=None, name=None, password="password") -> User:
    return User(
        user_id=user_id,
        full_name=name or f"{role.value.title()} {user_id}",
        email=f"{role.value}{user_id}@school.test",
        password_hash=generate_password_hash(password, method="pbkdf2:sha256:1000"),
        role=role,
        teacher_id=teacher_id,
    )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def teacher() -> User:
    return make_user(1, Role.TEACHER)


@pytest.fixture
def other_teacher() -> User:
    return make_user(2, Role.TEACHER)


@pytest.fixture
def student(teacher) -> User:
    return make_user(10, Role.STUDENT, teacher_id=teacher.user_id, name="Bob")


@pytest.fixture
def classmate(teacher) -> User:
    return make_user(11, Role.STUDENT, teacher_id=teacher.user_id, name="Alice")


@pytest.fixture
def other_student(other_teacher) -> User:
    return make_user(20, Role.STUDENT, teacher_id=other_teacher.user_id)


@pytest.fixture
def unassigned_student() -> User:
    return make_user(30, Role.STUDENT)


@pytest.fixture
def users_repo(teacher, other_teacher, student, classmate, other_student, unassigned_student) -> InMemoryUsers:
    return InMemoryUsers([teacher, other_teacher, student, classmate, other_student, unassigned_student])


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def service(attendance_repo, users_repo) -> AttendanceService:
    return AttendanceService(attendance_repo, users_repo)


@pytest.fixture
def mark(service, today):
    """Shortcut: mark with today's fixed date unless given."""

    def _mark(actor, status=AttendanceStatus.PRESENT, *, work_date=None, notes=None, target_user_id=None):
        return service.mark_attendance(
            actor,
            work_date=work_date or today,
            status=status,
            notes=notes,
            target_user_id=target_user_id,
            today=today,
        )

    return _mark
