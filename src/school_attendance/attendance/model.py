from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..common.pagination import Page
from ..core.enums import AttendanceStatus
from ..users.model import User


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance on one calendar date.

    ``marked_by`` is the user who performed the last write (self or the
    supervising teacher). It is None only when that user has been deleted.
    ``marker_name`` is that user's display name, read alongside the row.
    """

    attendance_id: int
    user_id: int
    marked_by: Optional[int]
    work_date: date
    status: AttendanceStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    marker_name: Optional[str] = None


@dataclass(frozen=True)
class StudentAttendance:
    """Read-model row for the teacher dashboard."""

    student: User
    record: Optional[AttendanceRecord]


@dataclass(frozen=True)
class TeacherView:
    teacher: User
    selected_date: date
    students: Sequence[StudentAttendance] = field(default_factory=tuple)
    own_record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class StudentView:
    student: User
    history: Page[AttendanceRecord]
    today_record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class StudentHistory:
    student: User
    history: Page[AttendanceRecord]


DashboardView = Union[TeacherView, StudentView]
