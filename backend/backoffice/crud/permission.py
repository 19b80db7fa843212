import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.model_has_role import ModelHasRole
from ..models.permission import Permission
from ..models.role import Role
from ..models.role_has_permission import RoleHasPermission
from .bulk import BulkResult, bulk_delete
from .listings import PERMISSION_LISTING


class PermissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, type: str, parent_id: uuid.UUID | None = None) -> Permission:
        permission = Permission(name=name, type=type, parent_id=parent_id)
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def get_by_id(self, permission_id: uuid.UUID) -> Permission | None:
        return await self.session.get(Permission, permission_id)

    async def get_by_name(self, name: str) -> Permission | None:
        result = await self.session.execute(
            select(Permission).where(Permission.name == name)
        )
        return result.scalar_one_or_none()

    async def get_many(self, permission_ids: Iterable[uuid.UUID]) -> list[Permission]:
        ids = list(permission_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(Permission).where(Permission.id.in_(ids))
        )
        return list(result.scalars().all())

    async def list_by_type(self, permission_type: str) -> list[Permission]:
        result = await self.session.execute(
            select(Permission)
            .where(Permission.type == permission_type)
            .order_by(Permission.name, Permission.id)
        )
        return list(result.scalars().all())

    async def bulk_delete(self, ids: list[uuid.UUID]) -> BulkResult:
        return await bulk_delete(self.session, PERMISSION_LISTING, ids)

    async def get_role_permissions(self, role_id: uuid.UUID) -> list[Permission]:
        result = await self.session.execute(
            select(Permission)
            .join(RoleHasPermission, RoleHasPermission.permission_id == Permission.id)
            .where(RoleHasPermission.role_id == role_id)
            .order_by(Permission.name)
        )
        return list(result.scalars().all())

    async def get_subject_permissions(
        self, model_id: uuid.UUID, model_type: str
    ) -> list[Permission]:
        """Permissions granted through the subject's active roles."""
        result = await self.session.execute(
            select(Permission)
            .join(RoleHasPermission, RoleHasPermission.permission_id == Permission.id)
            .join(Role, Role.id == RoleHasPermission.role_id)
            .join(ModelHasRole, ModelHasRole.role_id == Role.id)
            .where(ModelHasRole.model_id == model_id)
            .where(ModelHasRole.model_type == model_type)
            .where(Role.status == 1)
            .distinct()
            .order_by(Permission.name)
        )
        return list(result.scalars().all())
