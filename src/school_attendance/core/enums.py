from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization decisions."""

    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance status tokens as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    SICK = "sick"
    EXCUSED = "excused"
    LATE = "late"
