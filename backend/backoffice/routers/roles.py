import uuid

from fastapi import APIRouter, Depends, Query, status

from ..crud.paginate import PaginateOptions
from ..dependencies import get_current_admin, get_paginate_options, get_role_service
from ..schemas.common import BulkResultRead, DeleteAction, Envelope, PageRead, UpdateAction
from ..schemas.role import (
    PermissionRead,
    PermissionsAndRolesRead,
    RoleCreate,
    RoleHasPermissionRead,
    RolePermissionsUpdate,
    RoleRead,
    RoleUpdate,
    SubjectBinding,
    SubjectBindingRead,
)
from ..services.rbac.role_service import RoleService
from .responses import bulk_read, field_update, page_read

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=Envelope[PageRead[RoleRead]])
async def list_roles(
    options: PaginateOptions = Depends(get_paginate_options),
    service: RoleService = Depends(get_role_service),
):
    page = await service.find_roles_paginate(options)
    return Envelope[PageRead[RoleRead]](data=page_read(page, RoleRead), message="findAll")


@router.get("/permissions", response_model=Envelope[PermissionsAndRolesRead])
async def list_permissions_and_roles(
    type: str | None = Query(None),
    service: RoleService = Depends(get_role_service),
):
    listing = await service.list_permissions_and_roles(type)
    data = PermissionsAndRolesRead(
        permissions=[PermissionRead.model_validate(p) for p in listing["permissions"]],
        roles=[RoleRead.model_validate(role) for role in listing["roles"]],
        role_has_permissions=[
            RoleHasPermissionRead.model_validate(binding)
            for binding in listing["role_has_permissions"]
        ],
    )
    return Envelope[PermissionsAndRolesRead](data=data, message="findAll")


@router.post("/action", response_model=Envelope[BulkResultRead])
async def update_roles_action(
    payload: UpdateAction,
    service: RoleService = Depends(get_role_service),
):
    result = await service.update_roles_action(payload.ids, field_update(payload.field))
    return Envelope[BulkResultRead](data=bulk_read(result), message="Updated Bulk Action")


@router.get("/{role_id}", response_model=Envelope[RoleRead])
async def get_role(
    role_id: uuid.UUID,
    service: RoleService = Depends(get_role_service),
):
    role = await service.get_role(role_id)
    return Envelope[RoleRead](data=RoleRead.model_validate(role), message="findOne")


@router.post("", response_model=Envelope[RoleRead], status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    service: RoleService = Depends(get_role_service),
):
    role = await service.create_role(payload.model_dump())
    return Envelope[RoleRead](data=RoleRead.model_validate(role), message="created")


@router.put("/{role_id}", response_model=Envelope[RoleRead])
async def update_role(
    role_id: uuid.UUID,
    payload: RoleUpdate,
    service: RoleService = Depends(get_role_service),
):
    role = await service.update_role(role_id, payload.model_dump(exclude_unset=True))
    return Envelope[RoleRead](data=RoleRead.model_validate(role), message="updated")


@router.delete("", response_model=Envelope[BulkResultRead])
async def delete_roles(
    payload: DeleteAction,
    service: RoleService = Depends(get_role_service),
):
    result = await service.delete_roles(payload.ids)
    return Envelope[BulkResultRead](data=bulk_read(result), message="deleted")


@router.put("/{role_id}/permissions", response_model=Envelope[list[PermissionRead]])
async def set_role_permissions(
    role_id: uuid.UUID,
    payload: RolePermissionsUpdate,
    service: RoleService = Depends(get_role_service),
):
    permissions = await service.set_role_permissions(role_id, payload.permission_ids)
    return Envelope[list[PermissionRead]](
        data=[PermissionRead.model_validate(permission) for permission in permissions],
        message="updated",
    )


@router.post(
    "/{role_id}/subjects",
    response_model=Envelope[SubjectBindingRead],
    status_code=status.HTTP_201_CREATED,
)
async def bind_role(
    role_id: uuid.UUID,
    payload: SubjectBinding,
    service: RoleService = Depends(get_role_service),
):
    binding = await service.bind_role_to_subject(
        role_id, payload.model_id, payload.model_type.value
    )
    return Envelope[SubjectBindingRead](
        data=SubjectBindingRead.model_validate(binding), message="created"
    )


@router.delete("/{role_id}/subjects", response_model=Envelope[None])
async def unbind_role(
    role_id: uuid.UUID,
    payload: SubjectBinding,
    service: RoleService = Depends(get_role_service),
):
    await service.unbind_role_from_subject(role_id, payload.model_id, payload.model_type.value)
    return Envelope[None](data=None, message="deleted")
