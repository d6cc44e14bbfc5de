from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, NoReturn, Optional

from ..common.datetime_utils import parse_iso_date, today_local
from ..common.pagination import Page, normalize_page
from ..common.validators import (
    collect_errors,
    optional_notes,
    optional_user_id,
    require_attendance_date,
    require_status,
)
from ..core.constants import SELF_HISTORY_PAGE_SIZE, STUDENT_HISTORY_PAGE_SIZE
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from . import policy
from .model import (
    AttendanceRecord,
    DashboardView,
    StudentAttendance,
    StudentHistory,
    StudentView,
    TeacherView,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Authorization and upsert rules for attendance records.

    Stateless: every call receives the acting user explicitly and all state
    lives in the repositories.
    """

    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def _resolve_user(self, actor: User, user_id: int) -> Optional[User]:
        if user_id == actor.user_id:
            return actor
        return self._users.get_by_id(user_id)

    def _get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found.")
        return record

    def _deny(self, actor: User, action: str, target_id: int, err: AuthorizationError) -> NoReturn:
        logger.warning("Denied %s by user_id=%s on user_id=%s", action, actor.user_id, target_id)
        raise err

    # ----- mutations -----

    def mark_attendance(
        self,
        actor: User,
        *,
        work_date,
        status,
        notes=None,
        target_user_id=None,
        today: Optional[date] = None,
    ) -> AttendanceRecord:
        """Create or overwrite the (target, date) record.

        ``target_user_id`` None means self-marking. Re-marking replaces status
        and notes wholesale (missing notes clears them) and hands ``marked_by``
        to ``actor``.
        """

        today = today or today_local()
        work_date, status, notes, target_user_id = collect_errors(
            lambda: require_attendance_date(work_date, today=today),
            lambda: require_status(status),
            lambda: optional_notes(notes),
            lambda: optional_user_id(target_user_id),
        )

        target_id = actor.user_id if target_user_id is None else target_user_id
        target = self._resolve_user(actor, target_id)
        if target is None:
            raise ValidationError.for_field("user_id", "Selected user does not exist.")

        try:
            policy.authorize_mark(actor, target)
        except AuthorizationError as e:
            self._deny(actor, "mark", target_id, e)

        record = self._upsert(actor, target_id=target_id, work_date=work_date, status=status, notes=notes)
        logger.info(
            "Attendance marked: user_id=%s date=%s status=%s by user_id=%s",
            target_id,
            work_date.isoformat(),
            status.value,
            actor.user_id,
        )
        return record

    def _upsert(
        self,
        actor: User,
        *,
        target_id: int,
        work_date: date,
        status: AttendanceStatus,
        notes: Optional[str],
    ) -> AttendanceRecord:
        existing = self._attendance.find_by_user_and_date(target_id, work_date)
        if existing:
            return self._overwrite(existing, actor=actor, status=status, notes=notes)

        try:
            return self._attendance.create(
                user_id=target_id,
                marked_by=actor.user_id,
                work_date=work_date,
                status=status,
                notes=notes,
            )
        except ConflictError:
            # Lost the insert race; the unique index decided, so update the winner once.
            logger.info("Concurrent create for user_id=%s date=%s, retrying as update", target_id, work_date)
            existing = self._attendance.find_by_user_and_date(target_id, work_date)
            if not existing:
                raise
            return self._overwrite(existing, actor=actor, status=status, notes=notes)

    def _overwrite(
        self,
        record: AttendanceRecord,
        *,
        actor: User,
        status: AttendanceStatus,
        notes: Optional[str],
    ) -> AttendanceRecord:
        updated = self._attendance.update(
            record.attendance_id,
            marked_by=actor.user_id,
            status=status,
            notes=notes,
        )
        if updated is None:
            raise ConflictError("Attendance record was removed while being updated.")
        return updated

    def update_attendance(self, actor: User, attendance_id: int, patch: Mapping[str, Any]) -> AttendanceRecord:
        record = self._get_record(attendance_id)
        owner = self._resolve_user(actor, record.user_id)
        try:
            policy.authorize_record_change(actor, owner=owner, owner_id=record.user_id)
        except AuthorizationError as e:
            self._deny(actor, "update", record.user_id, e)

        patch = patch or {}
        status, notes = collect_errors(
            lambda: require_status(patch["status"]) if "status" in patch else record.status,
            lambda: optional_notes(patch["notes"]) if "notes" in patch else record.notes,
        )

        updated = self._attendance.update(record.attendance_id, marked_by=actor.user_id, status=status, notes=notes)
        if updated is None:
            raise NotFoundError("Attendance record not found.")
        logger.info(
            "Attendance updated: attendance_id=%s status=%s by user_id=%s",
            updated.attendance_id,
            updated.status.value,
            actor.user_id,
        )
        return updated

    def delete_attendance(self, actor: User, attendance_id: int) -> None:
        record = self._get_record(attendance_id)
        owner = self._resolve_user(actor, record.user_id)
        try:
            policy.authorize_record_change(actor, owner=owner, owner_id=record.user_id)
        except AuthorizationError as e:
            self._deny(actor, "delete", record.user_id, e)

        if not self._attendance.delete(record.attendance_id):
            raise NotFoundError("Attendance record not found.")
        logger.info("Attendance deleted: attendance_id=%s by user_id=%s", record.attendance_id, actor.user_id)

    # ----- queries -----

    def list_attendance(
        self,
        actor: User,
        target_user_id: int,
        *,
        page: int = 1,
    ) -> Page[AttendanceRecord]:
        """Newest-first page of a user's records.

        Page size is fixed: 10 for the actor's own history, 20 for a student's.
        """

        target_id = int(target_user_id)
        target = self._resolve_user(actor, target_id)
        if target is None and actor.role == Role.TEACHER:
            raise NotFoundError("User not found.")

        try:
            policy.authorize_history(actor, target, target_id=target_id)
        except AuthorizationError as e:
            self._deny(actor, "history", target_id, e)

        page_size = SELF_HISTORY_PAGE_SIZE if target_id == actor.user_id else STUDENT_HISTORY_PAGE_SIZE
        page, page_size = normalize_page(page, page_size, default_per_page=page_size)
        return self._attendance.list_by_user(target_id, page=page, page_size=page_size)

    def student_history(self, actor: User, student_id: int, *, page: int = 1) -> StudentHistory:
        """Teacher-only detailed history of one assigned student."""

        if actor.role != Role.TEACHER:
            self._deny(actor, "student history", int(student_id), AuthorizationError(policy.FORBIDDEN_MESSAGE))

        student = self._users.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("User not found.")
        if not policy.is_supervising_teacher(actor, student):
            self._deny(actor, "student history", student.user_id, AuthorizationError(policy.FORBIDDEN_MESSAGE))

        history = self.list_attendance(actor, student.user_id, page=page)
        return StudentHistory(student=student, history=history)

    def dashboard_snapshot(
        self,
        actor: User,
        work_date=None,
        *,
        page: int = 1,
        today: Optional[date] = None,
    ) -> DashboardView:
        today = today or today_local()
        selected = self._parse_view_date(work_date, default=today)

        if actor.role == Role.TEACHER:
            rows = self._attendance.list_by_teacher_for_date(actor.user_id, selected)
            return TeacherView(
                teacher=actor,
                selected_date=selected,
                students=tuple(StudentAttendance(student=s, record=r) for s, r in rows),
                own_record=self._attendance.find_by_user_and_date(actor.user_id, selected),
            )

        page, page_size = normalize_page(page, SELF_HISTORY_PAGE_SIZE, default_per_page=SELF_HISTORY_PAGE_SIZE)
        return StudentView(
            student=actor,
            history=self._attendance.list_by_user(actor.user_id, page=page, page_size=page_size),
            today_record=self._attendance.find_by_user_and_date(actor.user_id, today),
        )

    @staticmethod
    def _parse_view_date(value, *, default: date) -> date:
        # Viewing a future date is allowed; only marking is restricted.
        if value is None or value == "":
            return default
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return parse_iso_date(str(value).strip())
        except ValueError:
            raise ValidationError.for_field("date", "Please provide a valid date.")
