from __future__ import annotations

from enum import Enum, IntEnum


class SubjectType(str, Enum):
    """Kinds of subject a role can be bound to; also the type of roles and permissions."""

    ADMIN = "admin"
    USER = "user"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class RecordStatus(IntEnum):
    INACTIVE = 0
    ACTIVE = 1


class SystemFlag(IntEnum):
    NO = 0
    YES = 1
