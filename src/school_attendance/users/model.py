from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a teacher or a student.

    Plain data object (no DB access). ``teacher_id`` is only ever set for
    students and points at their supervising teacher.
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    teacher_id: Optional[int] = None
    student_code: Optional[str] = None
    is_active: bool = True
