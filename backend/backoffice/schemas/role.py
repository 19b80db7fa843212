import uuid
from datetime import datetime

from pydantic import Field

from ..models.enums import RecordStatus, SubjectType
from .common import CamelModel


class PermissionRead(CamelModel):
    id: uuid.UUID
    name: str
    type: str
    parent_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class PermissionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: SubjectType
    parent_id: uuid.UUID | None = None


class RoleRead(CamelModel):
    id: uuid.UUID
    name: str
    type: str
    status: int
    is_system: int
    created_at: datetime
    updated_at: datetime


class RoleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: SubjectType
    status: RecordStatus = RecordStatus.ACTIVE


class RoleUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    type: SubjectType | None = None
    status: RecordStatus | None = None


class RoleHasPermissionRead(CamelModel):
    role_id: uuid.UUID
    permission_id: uuid.UUID


class PermissionsAndRolesRead(CamelModel):
    permissions: list[PermissionRead]
    roles: list[RoleRead]
    role_has_permissions: list[RoleHasPermissionRead]


class RolePermissionsUpdate(CamelModel):
    permission_ids: list[uuid.UUID]


class SubjectBinding(CamelModel):
    model_id: uuid.UUID
    model_type: SubjectType


class SubjectBindingRead(CamelModel):
    id: uuid.UUID
    role_id: uuid.UUID
    model_id: uuid.UUID
    model_type: str
    created_at: datetime
