from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.constants import MAX_NOTES_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError.for_field(field_name, f"The {field_name} field is required.")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError.for_field(field_name, f"The {field_name} must be at least {min_len} characters.")
    return value


def require_attendance_date(value, *, today: date) -> date:
    """Accept a ``date`` or a YYYY-MM-DD string that is not after ``today``."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError.for_field("date", "Date is required.")

    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = parse_iso_date(value.strip())
        except ValueError:
            raise ValidationError.for_field("date", "Please provide a valid date.")
    else:
        raise ValidationError.for_field("date", "Please provide a valid date.")

    if parsed > today:
        raise ValidationError.for_field("date", "Cannot mark attendance for future dates.")
    return parsed


def require_status(value) -> AttendanceStatus:
    if value is None or value == "":
        raise ValidationError.for_field("status", "Attendance status is required.")
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError.for_field("status", "Please select a valid attendance status.")


def optional_notes(value) -> Optional[str]:
    """Blank notes are stored as absent."""

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError.for_field("notes", "Notes must be a string.")
    if len(value) > MAX_NOTES_LENGTH:
        raise ValidationError.for_field("notes", f"Notes cannot exceed {MAX_NOTES_LENGTH} characters.")
    return value if value.strip() else None


def optional_user_id(value) -> Optional[int]:
    if value is None or value == "":
        return None
    # bool is an int subclass; floats would truncate.
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    raise ValidationError.for_field("user_id", "Selected user does not exist.")


def collect_errors(*checks) -> list:
    """Run zero-arg callables and merge their ValidationErrors into one.

    Returns the list of values produced by the checks, in order.
    """

    values: list = []
    errors: dict[str, str] = {}
    for check in checks:
        try:
            values.append(check())
        except ValidationError as e:
            errors.update(e.errors)
            values.append(None)
    if errors:
        raise ValidationError(errors=errors)
    return values
