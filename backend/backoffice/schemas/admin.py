import uuid
from datetime import datetime

from pydantic import Field

from ..models.enums import RecordStatus
from .common import EMAIL_PATTERN, CamelModel
from .role import PermissionRead, RoleRead


class AdminRead(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    status: int
    is_system: int
    created_at: datetime
    updated_at: datetime


class AdminCreate(CamelModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    status: RecordStatus = RecordStatus.ACTIVE


class AdminUpdate(CamelModel):
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    name: str | None = Field(None, min_length=1, max_length=255)
    password: str | None = Field(None, min_length=6, max_length=128)
    status: RecordStatus | None = None


class ProfileRead(AdminRead):
    roles: list[RoleRead] = Field(default_factory=list)
    permissions: list[PermissionRead] = Field(default_factory=list)


class ProfileUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class PasswordUpdate(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)
