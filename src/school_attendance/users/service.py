from __future__ import annotations

import logging
import re
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import collect_errors, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("These credentials do not match our records.")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            logger.warning("Failed login for user_id=%s", user.user_id)
            raise AuthenticationError("These credentials do not match our records.")

        return user

    def get_active_user(self, user_id: Optional[int]) -> Optional[User]:
        """Resolve the session's user id; inactive or deleted users resolve to None."""

        if user_id is None:
            return None
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            return None
        return user


class UserService:
    """Use case: register teachers and students."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        role,
        teacher_id: Optional[int] = None,
        student_code: Optional[str] = None,
    ) -> User:
        full_name, email, _, role = collect_errors(
            lambda: require_non_empty(full_name, "name"),
            lambda: self._require_email(email),
            lambda: require_min_length(password, "password", MIN_PASSWORD_LENGTH),
            lambda: self._require_role(role),
        )

        if self._users.get_by_email(email):
            raise ValidationError.for_field("email", "The email has already been taken.")

        if role == Role.TEACHER:
            # Teachers are not supervised.
            teacher_id = None
            student_code = None
        elif teacher_id is not None:
            try:
                teacher = self._users.get_by_id(int(teacher_id))
            except (TypeError, ValueError):
                teacher = None
            if not teacher or teacher.role != Role.TEACHER:
                raise ValidationError.for_field("teacher_id", "The selected teacher is invalid.")
            teacher_id = teacher.user_id

        student_code = (student_code or "").strip() or None

        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            teacher_id=teacher_id,
            student_code=student_code,
        )
        logger.info("Registered %s user_id=%s", role.value, user_id)

        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("Registration failed.")
        return user

    @staticmethod
    def _require_email(email: str) -> str:
        email = require_non_empty(email, "email").lower()
        if not _EMAIL_RE.match(email):
            raise ValidationError.for_field("email", "The email must be a valid email address.")
        return email

    @staticmethod
    def _require_role(role) -> Role:
        try:
            return role if isinstance(role, Role) else Role(str(role or "").strip().lower())
        except ValueError:
            raise ValidationError.for_field("role", "The selected role is invalid.")
