"""Listing definitions: public field names, search, filter and bulk-update rules per entity."""
from __future__ import annotations

from ..errors import ValidationError
from ..models import Admin, Permission, RecordStatus, Role, User
from .paginate import Listing


def validate_status(value: int) -> int:
    try:
        return RecordStatus(value).value
    except ValueError:
        raise ValidationError(
            "status must be one of " + ", ".join(str(s.value) for s in RecordStatus),
            details={"field": "status", "value": value},
        ) from None


ADMIN_LISTING = Listing(
    label="admin",
    model=Admin,
    fields={
        "id": "id",
        "email": "email",
        "name": "name",
        "status": "status",
        "isSystem": "is_system",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    },
    searchable=frozenset({"email", "name"}),
    mutable={"status": validate_status},
    system_flag="is_system",
)

USER_LISTING = Listing(
    label="user",
    model=User,
    fields={
        "id": "id",
        "email": "email",
        "name": "name",
        "phoneNo": "phone_no",
        "status": "status",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    },
    searchable=frozenset({"email", "name", "phoneNo"}),
    mutable={"status": validate_status},
)

ROLE_LISTING = Listing(
    label="role",
    model=Role,
    fields={
        "id": "id",
        "name": "name",
        "type": "type",
        "status": "status",
        "isSystem": "is_system",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    },
    searchable=frozenset({"name"}),
    mutable={"status": validate_status},
    system_flag="is_system",
)

PERMISSION_LISTING = Listing(
    label="permission",
    model=Permission,
    fields={
        "id": "id",
        "name": "name",
        "type": "type",
        "parentId": "parent_id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    },
    searchable=frozenset({"name"}),
)
