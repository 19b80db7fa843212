import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.bulk import BulkResult
from ...crud.permission import PermissionRepository
from ...errors import ConflictError, NotFoundError, ValidationError
from ...models.permission import Permission
from ..transaction import run_in_transaction
from .role_service import parse_subject_type

logger = logging.getLogger("backoffice.rbac")


class PermissionService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.permission_repo = PermissionRepository(session)

    async def list_permissions(self, permission_type: str | None) -> list[Permission]:
        kind = parse_subject_type(permission_type)
        return await self.permission_repo.list_by_type(kind.value)

    async def create_permission(self, data: dict[str, Any]) -> Permission:
        kind = parse_subject_type(data.get("type"))
        parent_id: uuid.UUID | None = data.get("parent_id")

        async def _create() -> Permission:
            if await self.permission_repo.get_by_name(data["name"]) is not None:
                raise ConflictError(
                    f"Permission {data['name']} already exists", details={"field": "name"}
                )
            if parent_id is not None:
                parent = await self.permission_repo.get_by_id(parent_id)
                if parent is None:
                    raise NotFoundError(
                        "Parent permission not found", details={"parentId": str(parent_id)}
                    )
                if parent.type != kind.value:
                    raise ValidationError(
                        f"Parent permission must be of type {kind.value}",
                        details={"parentId": str(parent_id)},
                    )
            return await self.permission_repo.create(
                name=data["name"], type=kind.value, parent_id=parent_id
            )

        permission = await run_in_transaction(self.session, _create, action="create_permission")
        logger.info("permission_created id=%s type=%s", permission.id, permission.type)
        return permission

    async def delete_permissions(self, ids: list[uuid.UUID]) -> BulkResult:
        # children keep existing with parent_id cleared (ON DELETE SET NULL)
        return await run_in_transaction(
            self.session,
            lambda: self.permission_repo.bulk_delete(ids),
            action="delete_permissions",
        )
