import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.model_has_role import ModelHasRole
from ..models.role import Role
from ..models.role_has_permission import RoleHasPermission
from .bulk import BulkResult, FieldUpdate, bulk_delete, bulk_update_field
from .listings import ROLE_LISTING
from .paginate import Page, PaginateOptions, find_all_paginate


class RoleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, type: str, status: int = 1, is_system: int = 0) -> Role:
        role = Role(name=name, type=type, status=status, is_system=is_system)
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_id(self, role_id: uuid.UUID) -> Role | None:
        return await self.session.get(Role, role_id)

    async def get_by_name(self, name: str) -> Role | None:
        result = await self.session.execute(
            select(Role).where(Role.name == name)
        )
        return result.scalar_one_or_none()

    async def list_by_type(self, role_type: str) -> list[Role]:
        result = await self.session.execute(
            select(Role).where(Role.type == role_type).order_by(Role.name, Role.id)
        )
        return list(result.scalars().all())

    async def paginate(self, options: PaginateOptions) -> Page[Role]:
        return await find_all_paginate(self.session, ROLE_LISTING, options)

    async def update(self, role: Role, values: dict[str, Any]) -> Role:
        for name, value in values.items():
            setattr(role, name, value)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def bulk_delete(self, ids: list[uuid.UUID]) -> BulkResult:
        # role_has_permissions and model_has_roles rows go with the role (ON DELETE CASCADE)
        return await bulk_delete(self.session, ROLE_LISTING, ids)

    async def bulk_update(self, ids: list[uuid.UUID], field_update: FieldUpdate) -> BulkResult:
        return await bulk_update_field(self.session, ROLE_LISTING, ids, field_update)

    async def count_bindings(self, role_id: uuid.UUID) -> tuple[int, int]:
        """Return (permission count, subject count) bound to the role."""
        permissions = await self.session.execute(
            select(func.count()).select_from(RoleHasPermission).where(RoleHasPermission.role_id == role_id)
        )
        subjects = await self.session.execute(
            select(func.count()).select_from(ModelHasRole).where(ModelHasRole.role_id == role_id)
        )
        return permissions.scalar() or 0, subjects.scalar() or 0

    # role <-> permission

    async def get_permission_ids(self, role_id: uuid.UUID) -> set[uuid.UUID]:
        result = await self.session.execute(
            select(RoleHasPermission.permission_id).where(RoleHasPermission.role_id == role_id)
        )
        return set(result.scalars().all())

    async def list_role_permissions(self, role_ids: Iterable[uuid.UUID]) -> list[RoleHasPermission]:
        ids = list(role_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(RoleHasPermission)
            .where(RoleHasPermission.role_id.in_(ids))
            .order_by(RoleHasPermission.role_id, RoleHasPermission.permission_id)
        )
        return list(result.scalars().all())

    async def replace_permissions(
        self, role_id: uuid.UUID, permission_ids: set[uuid.UUID]
    ) -> tuple[set[uuid.UUID], set[uuid.UUID]]:
        """Diff the stored set against ``permission_ids``; returns (added, removed)."""
        current = await self.get_permission_ids(role_id)
        added = permission_ids - current
        removed = current - permission_ids
        if removed:
            await self.session.execute(
                delete(RoleHasPermission).where(
                    RoleHasPermission.role_id == role_id,
                    RoleHasPermission.permission_id.in_(removed),
                )
            )
        for permission_id in added:
            self.session.add(RoleHasPermission(role_id=role_id, permission_id=permission_id))
        await self.session.flush()
        return added, removed

    # role <-> subject

    async def get_binding(
        self, role_id: uuid.UUID, model_id: uuid.UUID, model_type: str
    ) -> ModelHasRole | None:
        result = await self.session.execute(
            select(ModelHasRole).where(
                ModelHasRole.role_id == role_id,
                ModelHasRole.model_id == model_id,
                ModelHasRole.model_type == model_type,
            )
        )
        return result.scalar_one_or_none()

    async def bind(self, role_id: uuid.UUID, model_id: uuid.UUID, model_type: str) -> ModelHasRole:
        binding = ModelHasRole(role_id=role_id, model_id=model_id, model_type=model_type)
        self.session.add(binding)
        await self.session.flush()
        await self.session.refresh(binding)
        return binding

    async def unbind(self, binding: ModelHasRole) -> None:
        await self.session.delete(binding)
        await self.session.flush()

    async def get_subject_roles(self, model_id: uuid.UUID, model_type: str) -> list[Role]:
        result = await self.session.execute(
            select(Role)
            .join(ModelHasRole, ModelHasRole.role_id == Role.id)
            .where(ModelHasRole.model_id == model_id, ModelHasRole.model_type == model_type)
            .order_by(Role.name)
        )
        return list(result.scalars().all())
