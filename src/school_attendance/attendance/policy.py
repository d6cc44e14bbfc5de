"""Who may touch whose attendance.

Every rule is an explicit branch on ``Role`` so the whole authorization model
can be read in this one file. All functions raise ``AuthorizationError`` on
denial and never say why.
"""

from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..users.model import User

FORBIDDEN_MESSAGE = "This action is unauthorized."


def is_supervising_teacher(actor: User, target: Optional[User]) -> bool:
    return actor.role == Role.TEACHER and target is not None and target.teacher_id == actor.user_id


def authorize_mark(actor: User, target: Optional[User]) -> None:
    """Create-or-update for ``target`` on any date."""

    if target is not None and target.user_id == actor.user_id:
        return

    if actor.role == Role.TEACHER:
        if is_supervising_teacher(actor, target):
            return
        raise AuthorizationError(FORBIDDEN_MESSAGE)

    # Students may only self-mark.
    raise AuthorizationError(FORBIDDEN_MESSAGE)


def authorize_record_change(actor: User, *, owner: Optional[User], owner_id: int) -> None:
    """Update or delete of an existing record owned by ``owner_id``.

    A supervising teacher may change the record no matter who marked it; a
    student may only change their own.
    """

    if owner_id == actor.user_id:
        return

    if actor.role == Role.TEACHER:
        if is_supervising_teacher(actor, owner):
            return
        raise AuthorizationError(FORBIDDEN_MESSAGE)

    raise AuthorizationError(FORBIDDEN_MESSAGE)


def authorize_history(actor: User, target: Optional[User], *, target_id: int) -> None:
    if target_id == actor.user_id:
        return

    if actor.role == Role.TEACHER and is_supervising_teacher(actor, target):
        return

    raise AuthorizationError(FORBIDDEN_MESSAGE)
