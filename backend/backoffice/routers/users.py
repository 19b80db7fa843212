import uuid

from fastapi import APIRouter, Depends, status

from ..crud.paginate import PaginateOptions
from ..dependencies import get_current_admin, get_paginate_options, get_user_service
from ..schemas.common import BulkResultRead, DeleteAction, Envelope, PageRead, UpdateAction
from ..schemas.user import UserCreate, UserRead, UserUpdate
from ..services.accounts.user_service import UserService
from .responses import bulk_read, field_update, page_read

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=Envelope[PageRead[UserRead]])
async def list_users(
    options: PaginateOptions = Depends(get_paginate_options),
    service: UserService = Depends(get_user_service),
):
    page = await service.find_all_paginate(options)
    return Envelope[PageRead[UserRead]](data=page_read(page, UserRead), message="findAll")


@router.post("/action", response_model=Envelope[BulkResultRead])
async def update_users_action(
    payload: UpdateAction,
    service: UserService = Depends(get_user_service),
):
    result = await service.update_action(payload.ids, field_update(payload.field))
    return Envelope[BulkResultRead](data=bulk_read(result), message="Updated Bulk Action")


@router.get("/{user_id}", response_model=Envelope[UserRead])
async def get_user(
    user_id: uuid.UUID,
    service: UserService = Depends(get_user_service),
):
    user = await service.find_by_id(user_id)
    return Envelope[UserRead](data=UserRead.model_validate(user), message="findOne")


@router.post("", response_model=Envelope[UserRead], status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
):
    user = await service.create(payload.model_dump())
    return Envelope[UserRead](data=UserRead.model_validate(user), message="created")


@router.put("/{user_id}", response_model=Envelope[UserRead])
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    service: UserService = Depends(get_user_service),
):
    user = await service.update(user_id, payload.model_dump(exclude_unset=True))
    return Envelope[UserRead](data=UserRead.model_validate(user), message="updated")


@router.delete("", response_model=Envelope[BulkResultRead])
async def delete_users(
    payload: DeleteAction,
    service: UserService = Depends(get_user_service),
):
    result = await service.delete(payload.ids)
    return Envelope[BulkResultRead](data=bulk_read(result), message="deleted")
