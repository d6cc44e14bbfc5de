from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Tuple

from ..common.pagination import Page
from ..core.enums import AttendanceStatus
from ..users.model import User
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store.

    The store is the final authority on "one record per (user, date)": ``create``
    raises ``ConflictError`` when the unique index rejects a duplicate.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_by_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        marked_by: int,
        work_date: date,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def update(
        self,
        attendance_id: int,
        *,
        marked_by: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Replace the mutable fields; None when the row no longer exists."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_by_user(self, user_id: int, *, page: int, page_size: int) -> Page[AttendanceRecord]:
        """Newest date first."""

        raise NotImplementedError

    def list_by_teacher_for_date(
        self, teacher_id: int, work_date: date
    ) -> Sequence[Tuple[User, Optional[AttendanceRecord]]]:
        """Every student of ``teacher_id`` (by name) with their record for ``work_date``."""

        raise NotImplementedError
