from __future__ import annotations

from datetime import date

from school_attendance.attendance.model import AttendanceRecord, StudentAttendance, TeacherView
from school_attendance.attendance.presentation import (
    attendance_rate,
    record_to_dict,
    status_breakdown,
    status_color,
    status_label,
    teacher_summary,
    teacher_view_to_dict,
)
from school_attendance.core.enums import AttendanceStatus


def _rec(i: int, status: AttendanceStatus, user_id: int = 10) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=i, user_id=user_id, marked_by=1, work_date=date(2024, 1, i), status=status
    )


def test_labels_and_colors():
    assert status_label(AttendanceStatus.EXCUSED) == "Excused"
    assert status_color(AttendanceStatus.PRESENT) == "green"
    assert status_color(AttendanceStatus.SICK) == "orange"
    assert status_color(AttendanceStatus.LATE) == "yellow"


def test_rate_rounds_present_share():
    records = [_rec(1, AttendanceStatus.PRESENT), _rec(2, AttendanceStatus.PRESENT), _rec(3, AttendanceStatus.LATE)]
    assert attendance_rate(records) == 67
    assert attendance_rate([]) == 0


def test_breakdown_counts_every_status():
    counts = status_breakdown([_rec(1, AttendanceStatus.SICK), _rec(2, AttendanceStatus.SICK)])
    assert counts == {"present": 0, "absent": 0, "sick": 2, "excused": 0, "late": 0}


def test_teacher_summary_counts_missing_records_as_absent(teacher, student, classmate, unassigned_student):
    view = TeacherView(
        teacher=teacher,
        selected_date=date(2024, 1, 5),
        students=(
            StudentAttendance(student=student, record=_rec(5, AttendanceStatus.PRESENT)),
            StudentAttendance(student=classmate, record=None),
            StudentAttendance(student=unassigned_student, record=_rec(5, AttendanceStatus.ABSENT, 30)),
        ),
    )

    assert teacher_summary(view) == {"total": 3, "present": 1, "absent": 2}

    payload = teacher_view_to_dict(view)
    assert payload["selected_date"] == "2024-01-05"
    assert payload["students"][1]["attendance"] is None
    assert payload["teacher_attendance"] is None


def test_record_to_dict():
    payload = record_to_dict(_rec(3, AttendanceStatus.LATE))

    assert payload["date"] == "2024-01-03"
    assert payload["status"] == "late"
    assert payload["status_label"] == "Late"
    assert payload["created_at"] is None
    assert record_to_dict(None) is None


def test_record_to_dict_names_the_marker():
    rec = AttendanceRecord(
        attendance_id=1,
        user_id=10,
        marked_by=1,
        work_date=date(2024, 1, 15),
        status=AttendanceStatus.PRESENT,
        marker_name="Teacher 1",
    )
    assert record_to_dict(rec)["marker"] == {"id": 1, "name": "Teacher 1"}


def test_record_to_dict_without_marker():
    rec = AttendanceRecord(
        attendance_id=1, user_id=10, marked_by=None, work_date=date(2024, 1, 15), status=AttendanceStatus.SICK
    )
    assert record_to_dict(rec)["marker"] is None
