from __future__ import annotations

from typing import Iterable, Optional

from ..common.pagination import Page
from ..core.enums import AttendanceStatus
from ..users.model import User
from .model import AttendanceRecord, StudentHistory, StudentView, TeacherView

STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.ABSENT: "Absent",
    AttendanceStatus.SICK: "Sick",
    AttendanceStatus.EXCUSED: "Excused",
    AttendanceStatus.LATE: "Late",
}

STATUS_COLORS = {
    AttendanceStatus.PRESENT: "green",
    AttendanceStatus.ABSENT: "red",
    AttendanceStatus.SICK: "orange",
    AttendanceStatus.EXCUSED: "blue",
    AttendanceStatus.LATE: "yellow",
}


def status_label(status: AttendanceStatus) -> str:
    return STATUS_LABELS.get(status, str(status.value).capitalize())


def status_color(status: AttendanceStatus) -> str:
    return STATUS_COLORS.get(status, "gray")


def status_breakdown(records: Iterable[AttendanceRecord]) -> dict[str, int]:
    counts = {s.value: 0 for s in AttendanceStatus}
    for r in records:
        counts[r.status.value] += 1
    return counts


def attendance_rate(records: Iterable[AttendanceRecord]) -> int:
    """Whole-number percentage of ``present`` records; 0 with no records."""

    records = list(records)
    if not records:
        return 0
    present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
    return int(round(present * 100 / len(records)))


def teacher_summary(view: TeacherView) -> dict[str, int]:
    # Students without a record for the day count as absent.
    present = sum(1 for row in view.students if row.record and row.record.status == AttendanceStatus.PRESENT)
    absent = sum(
        1 for row in view.students if row.record is None or row.record.status == AttendanceStatus.ABSENT
    )
    return {"total": len(view.students), "present": present, "absent": absent}


def user_to_dict(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.full_name,
        "email": user.email,
        "role": user.role.value,
        "teacher_id": user.teacher_id,
        "student_id": user.student_code,
    }


def record_to_dict(record: Optional[AttendanceRecord]) -> Optional[dict]:
    if record is None:
        return None
    return {
        "id": record.attendance_id,
        "user_id": record.user_id,
        "marked_by": record.marked_by,
        "marker": {"id": record.marked_by, "name": record.marker_name} if record.marked_by is not None else None,
        "date": record.work_date.isoformat(),
        "status": record.status.value,
        "status_label": status_label(record.status),
        "status_color": status_color(record.status),
        "notes": record.notes,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def page_to_dict(page: Page[AttendanceRecord]) -> dict:
    return {
        "data": [record_to_dict(r) for r in page.items],
        "current_page": page.page,
        "per_page": page.per_page,
        "total": page.total,
        "last_page": max(page.pages, 1),
        "has_next": page.has_next,
        "has_prev": page.has_prev,
    }


def teacher_view_to_dict(view: TeacherView) -> dict:
    return {
        "view": "teacher",
        "selected_date": view.selected_date.isoformat(),
        "teacher": user_to_dict(view.teacher),
        "teacher_attendance": record_to_dict(view.own_record),
        "students": [
            {**user_to_dict(row.student), "attendance": record_to_dict(row.record)} for row in view.students
        ],
        "summary": teacher_summary(view),
    }


def student_view_to_dict(view: StudentView) -> dict:
    # Stats cover the visible page only.
    return {
        "view": "student",
        "student": user_to_dict(view.student),
        "today_attendance": record_to_dict(view.today_record),
        "attendance_records": page_to_dict(view.history),
        "attendance_rate": attendance_rate(view.history.items),
    }


def student_history_to_dict(history: StudentHistory) -> dict:
    items = history.history.items
    return {
        "student": user_to_dict(history.student),
        "attendance_records": page_to_dict(history.history),
        "attendance_rate": attendance_rate(items),
        "breakdown": status_breakdown(items),
    }
