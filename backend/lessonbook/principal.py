"""Actor abstraction for authenticated callers of the booking core."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import RoleName


@dataclass(frozen=True)
class Actor:
    """
    The resolved identity and role of the caller performing an operation.

    Passed explicitly into every service method; never read from ambient state.
    """

    user_id: str
    role: RoleName

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == RoleName.STUDENT
