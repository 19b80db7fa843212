from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_current_admin, get_permission_service
from ..schemas.common import BulkResultRead, DeleteAction, Envelope
from ..schemas.role import PermissionCreate, PermissionRead
from ..services.rbac.permission_service import PermissionService
from .responses import bulk_read

router = APIRouter(
    prefix="/permissions",
    tags=["permissions"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=Envelope[list[PermissionRead]])
async def list_permissions(
    type: str | None = Query(None),
    service: PermissionService = Depends(get_permission_service),
):
    permissions = await service.list_permissions(type)
    return Envelope[list[PermissionRead]](
        data=[PermissionRead.model_validate(permission) for permission in permissions],
        message="findAll",
    )


@router.post("", response_model=Envelope[PermissionRead], status_code=status.HTTP_201_CREATED)
async def create_permission(
    payload: PermissionCreate,
    service: PermissionService = Depends(get_permission_service),
):
    permission = await service.create_permission(payload.model_dump())
    return Envelope[PermissionRead](
        data=PermissionRead.model_validate(permission), message="created"
    )


@router.delete("", response_model=Envelope[BulkResultRead])
async def delete_permissions(
    payload: DeleteAction,
    service: PermissionService = Depends(get_permission_service),
):
    result = await service.delete_permissions(payload.ids)
    return Envelope[BulkResultRead](data=bulk_read(result), message="deleted")
