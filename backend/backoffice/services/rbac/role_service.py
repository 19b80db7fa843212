"""
Role management and role bindings.

A role has a type (``admin`` or ``user``) and may only hold permissions of the
same type and be bound to subjects of the same type. Bindings are kept in
``role_has_permissions`` and ``model_has_roles``; both are removed with the
role by ON DELETE CASCADE.
"""
import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.account import AccountRepository, AdminRepository, UserRepository
from ...crud.bulk import BulkResult, FieldUpdate
from ...crud.paginate import Page, PaginateOptions
from ...crud.permission import PermissionRepository
from ...crud.role import RoleRepository
from ...errors import ConflictError, NotFoundError, ValidationError
from ...models.enums import SubjectType
from ...models.model_has_role import ModelHasRole
from ...models.permission import Permission
from ...models.role import Role
from ..transaction import run_in_transaction

logger = logging.getLogger("backoffice.rbac")


def parse_subject_type(value: str | None) -> SubjectType:
    if not value:
        raise ValidationError("Type is Required", details={"field": "type"})
    try:
        return SubjectType(value)
    except ValueError:
        raise ValidationError(
            f"Unknown type '{value}'",
            details={"field": "type", "allowed": SubjectType.values()},
        ) from None


class RoleService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.role_repo = RoleRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.subject_repos: dict[SubjectType, AccountRepository[Any]] = {
            SubjectType.ADMIN: AdminRepository(session),
            SubjectType.USER: UserRepository(session),
        }

    async def list_permissions_and_roles(self, subject_type: str | None) -> dict[str, list[Any]]:
        """Every permission and role of one type plus the bindings between them."""
        kind = parse_subject_type(subject_type)
        permissions = await self.permission_repo.list_by_type(kind.value)
        roles = await self.role_repo.list_by_type(kind.value)
        role_has_permissions = await self.role_repo.list_role_permissions(
            role.id for role in roles
        )
        return {
            "permissions": permissions,
            "roles": roles,
            "role_has_permissions": role_has_permissions,
        }

    async def find_roles_paginate(self, options: PaginateOptions) -> Page[Role]:
        return await self.role_repo.paginate(options)

    async def get_role(self, role_id: uuid.UUID) -> Role:
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found", details={"id": str(role_id)})
        return role

    async def _ensure_name_available(
        self, name: str, *, exclude_id: uuid.UUID | None = None
    ) -> None:
        existing = await self.role_repo.get_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Role {name} already exists", details={"field": "name"})

    async def create_role(self, data: dict[str, Any]) -> Role:
        role_type = parse_subject_type(data.get("type"))

        async def _create() -> Role:
            await self._ensure_name_available(data["name"])
            return await self.role_repo.create(
                name=data["name"],
                type=role_type.value,
                status=data.get("status", 1),
            )

        role = await run_in_transaction(self.session, _create, action="create_role")
        logger.info("role_created id=%s type=%s", role.id, role.type)
        return role

    async def update_role(self, role_id: uuid.UUID, data: dict[str, Any]) -> Role:
        values = {name: value for name, value in data.items() if value is not None}
        if "type" in values:
            values["type"] = parse_subject_type(values["type"]).value

        async def _update() -> Role:
            role = await self.get_role(role_id)
            if "name" in values and values["name"] != role.name:
                await self._ensure_name_available(values["name"], exclude_id=role.id)
            if "type" in values and values["type"] != role.type:
                permission_count, subject_count = await self.role_repo.count_bindings(role.id)
                if permission_count or subject_count:
                    raise ConflictError(
                        "Role type cannot change while it has permissions or subjects",
                        details={"permissions": permission_count, "subjects": subject_count},
                    )
            return await self.role_repo.update(role, values)

        role = await run_in_transaction(self.session, _update, action="update_role")
        logger.info("role_updated id=%s", role.id)
        return role

    async def _get_subject(self, model_id: uuid.UUID, model_type: SubjectType) -> Any:
        subject = await self.subject_repos[model_type].get_by_id(model_id)
        if subject is None:
            raise NotFoundError(
                f"{model_type.value.capitalize()} not found", details={"id": str(model_id)}
            )
        return subject

    async def bind_role_to_subject(
        self, role_id: uuid.UUID, model_id: uuid.UUID, model_type: str
    ) -> ModelHasRole:
        kind = parse_subject_type(model_type)

        async def _bind() -> ModelHasRole:
            role = await self.get_role(role_id)
            if role.type != kind.value:
                raise ValidationError(
                    f"A {role.type} role cannot be assigned to a {kind.value}",
                    details={"roleType": role.type, "modelType": kind.value},
                )
            await self._get_subject(model_id, kind)
            if await self.role_repo.get_binding(role.id, model_id, kind.value) is not None:
                raise ConflictError("Role is already assigned to this subject")
            return await self.role_repo.bind(role.id, model_id, kind.value)

        binding = await run_in_transaction(self.session, _bind, action="bind_role")
        logger.info(
            "role_bound role_id=%s model_type=%s model_id=%s", role_id, kind.value, model_id
        )
        return binding

    async def unbind_role_from_subject(
        self, role_id: uuid.UUID, model_id: uuid.UUID, model_type: str
    ) -> None:
        kind = parse_subject_type(model_type)

        async def _unbind() -> None:
            binding = await self.role_repo.get_binding(role_id, model_id, kind.value)
            if binding is None:
                raise NotFoundError("Role is not assigned to this subject")
            await self.role_repo.unbind(binding)

        await run_in_transaction(self.session, _unbind, action="unbind_role")
        logger.info(
            "role_unbound role_id=%s model_type=%s model_id=%s", role_id, kind.value, model_id
        )

    async def list_subject_roles(self, model_id: uuid.UUID, model_type: str) -> list[Role]:
        kind = parse_subject_type(model_type)
        return await self.role_repo.get_subject_roles(model_id, kind.value)

    async def list_subject_permissions(
        self, model_id: uuid.UUID, model_type: str
    ) -> list[Permission]:
        kind = parse_subject_type(model_type)
        return await self.permission_repo.get_subject_permissions(model_id, kind.value)

    async def set_role_permissions(
        self, role_id: uuid.UUID, permission_ids: list[uuid.UUID]
    ) -> list[Permission]:
        """Replace the role's permission set with exactly ``permission_ids``."""
        wanted = set(permission_ids)

        async def _replace() -> list[Permission]:
            role = await self.get_role(role_id)
            permissions = await self.permission_repo.get_many(wanted)
            missing = wanted - {permission.id for permission in permissions}
            if missing:
                raise NotFoundError(
                    "Permission not found",
                    details={"ids": sorted(str(permission_id) for permission_id in missing)},
                )
            mismatched = [p.name for p in permissions if p.type != role.type]
            if mismatched:
                raise ValidationError(
                    f"Permissions must be of type {role.type}",
                    details={"permissions": sorted(mismatched)},
                )
            added, removed = await self.role_repo.replace_permissions(role.id, wanted)
            logger.info(
                "role_permissions_replaced role_id=%s added=%s removed=%s",
                role.id,
                len(added),
                len(removed),
            )
            return await self.permission_repo.get_role_permissions(role.id)

        return await run_in_transaction(self.session, _replace, action="set_role_permissions")

    async def delete_roles(self, ids: list[uuid.UUID]) -> BulkResult:
        return await run_in_transaction(
            self.session, lambda: self.role_repo.bulk_delete(ids), action="delete_roles"
        )

    async def update_roles_action(
        self, ids: list[uuid.UUID], field_update: FieldUpdate
    ) -> BulkResult:
        return await run_in_transaction(
            self.session,
            lambda: self.role_repo.bulk_update(ids, field_update),
            action="update_roles_action",
        )
