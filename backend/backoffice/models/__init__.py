from .base import Base
from .admin import Admin
from .user import User
from .role import Role
from .permission import Permission
from .role_has_permission import RoleHasPermission
from .model_has_role import ModelHasRole
from .admin_session import AdminSession
from .enums import RecordStatus, SubjectType, SystemFlag

__all__ = [
    "Base",
    "Admin",
    "User",
    "Role",
    "Permission",
    "RoleHasPermission",
    "ModelHasRole",
    "AdminSession",
    "RecordStatus",
    "SubjectType",
    "SystemFlag",
]
