import uuid

from fastapi import APIRouter, Depends, status

from ..crud.paginate import PaginateOptions
from ..dependencies import get_admin_service, get_current_admin, get_paginate_options
from ..schemas.admin import AdminCreate, AdminRead, AdminUpdate
from ..schemas.common import BulkResultRead, DeleteAction, Envelope, PageRead, UpdateAction
from ..services.accounts.admin_service import AdminService
from .responses import bulk_read, field_update, page_read

router = APIRouter(
    prefix="/admin/users",
    tags=["admin-users"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=Envelope[PageRead[AdminRead]])
async def list_admins(
    options: PaginateOptions = Depends(get_paginate_options),
    service: AdminService = Depends(get_admin_service),
):
    page = await service.find_all_paginate(options)
    return Envelope[PageRead[AdminRead]](data=page_read(page, AdminRead), message="findAll")


@router.post("/action", response_model=Envelope[BulkResultRead])
async def update_admins_action(
    payload: UpdateAction,
    service: AdminService = Depends(get_admin_service),
):
    result = await service.update_action(payload.ids, field_update(payload.field))
    return Envelope[BulkResultRead](data=bulk_read(result), message="Updated Bulk Action")


@router.get("/{admin_id}", response_model=Envelope[AdminRead])
async def get_admin(
    admin_id: uuid.UUID,
    service: AdminService = Depends(get_admin_service),
):
    admin = await service.find_by_id(admin_id)
    return Envelope[AdminRead](data=AdminRead.model_validate(admin), message="findOne")


@router.post("", response_model=Envelope[AdminRead], status_code=status.HTTP_201_CREATED)
async def create_admin(
    payload: AdminCreate,
    service: AdminService = Depends(get_admin_service),
):
    admin = await service.create(payload.model_dump())
    return Envelope[AdminRead](data=AdminRead.model_validate(admin), message="created")


@router.put("/{admin_id}", response_model=Envelope[AdminRead])
async def update_admin(
    admin_id: uuid.UUID,
    payload: AdminUpdate,
    service: AdminService = Depends(get_admin_service),
):
    admin = await service.update(admin_id, payload.model_dump(exclude_unset=True))
    return Envelope[AdminRead](data=AdminRead.model_validate(admin), message="updated")


@router.delete("", response_model=Envelope[BulkResultRead])
async def delete_admins(
    payload: DeleteAction,
    service: AdminService = Depends(get_admin_service),
):
    result = await service.delete(payload.ids)
    return Envelope[BulkResultRead](data=bulk_read(result), message="deleted")
