from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for users (the user directory).

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        teacher_id: Optional[int] = None,
        student_code: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def list_students_of(self, teacher_id: int) -> Sequence[User]:
        """Students whose ``teacher_id`` is ``teacher_id``, ordered by name."""

        raise NotImplementedError
