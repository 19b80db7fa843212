import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Admin, ModelHasRole, SubjectType, User
from .bulk import BulkResult, FieldUpdate, bulk_delete, bulk_update_field
from .listings import ADMIN_LISTING, USER_LISTING
from .paginate import Listing, Page, PaginateOptions, find_all_paginate

AccountT = TypeVar("AccountT", Admin, User)


class AccountRepository(Generic[AccountT]):
    """Persistence for subject accounts (admins and users)."""

    model: type[AccountT]
    listing: Listing
    subject_type: SubjectType

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: uuid.UUID) -> AccountT | None:
        return await self.session.get(self.model, account_id)

    async def get_by_email_insensitive(self, email: str) -> AccountT | None:
        result = await self.session.execute(
            select(self.model).where(func.lower(self.model.email) == email.lower())
        )
        return result.scalars().first()

    async def create(self, **values: Any) -> AccountT:
        account = self.model(**values)
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def update(self, account: AccountT, values: dict[str, Any]) -> AccountT:
        for name, value in values.items():
            setattr(account, name, value)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def paginate(self, options: PaginateOptions) -> Page[AccountT]:
        return await find_all_paginate(self.session, self.listing, options)

    async def bulk_delete(self, ids: list[uuid.UUID]) -> BulkResult:
        result = await bulk_delete(self.session, self.listing, ids)
        # model_id is polymorphic and has no FK, so bindings are removed here
        await self.session.execute(
            delete(ModelHasRole).where(
                ModelHasRole.model_type == self.subject_type.value,
                ModelHasRole.model_id.in_(result.ids),
            )
        )
        return result

    async def bulk_update(self, ids: list[uuid.UUID], field_update: FieldUpdate) -> BulkResult:
        return await bulk_update_field(self.session, self.listing, ids, field_update)


class AdminRepository(AccountRepository[Admin]):
    model = Admin
    listing = ADMIN_LISTING
    subject_type = SubjectType.ADMIN

    async def set_password(self, admin: Admin, password_hash: str) -> Admin:
        return await self.update(
            admin, {"previous_password": admin.password, "password": password_hash}
        )


class UserRepository(AccountRepository[User]):
    model = User
    listing = USER_LISTING
    subject_type = SubjectType.USER
