"""
Shared service logic for subject accounts.

Admins and end users are managed the same way: paginated listing, lookup,
create/update with email uniqueness and password hashing, and bulk actions.
Every write runs through ``run_in_transaction`` so it commits once and rolls
back on failure.
"""
import logging
import uuid
from typing import Any, Generic

from ...crud.account import AccountRepository, AccountT
from ...crud.bulk import BulkResult, FieldUpdate
from ...crud.paginate import Page, PaginateOptions
from ...domain.ports.hasher import PasswordHasher
from ...errors import ConflictError, NotFoundError
from ..transaction import run_in_transaction

logger = logging.getLogger("backoffice.accounts")


class AccountService(Generic[AccountT]):
    label = "account"
    # fields an update may explicitly clear with null
    nullable_fields: frozenset[str] = frozenset()

    def __init__(self, repository: AccountRepository[AccountT], hasher: PasswordHasher):
        self.repository = repository
        self.hasher = hasher
        self.session = repository.session

    async def find_all_paginate(self, options: PaginateOptions) -> Page[AccountT]:
        return await self.repository.paginate(options)

    async def find_by_id(self, account_id: uuid.UUID) -> AccountT:
        account = await self.repository.get_by_id(account_id)
        if account is None:
            raise NotFoundError(
                f"{self.label.capitalize()} not found", details={"id": str(account_id)}
            )
        return account

    async def _ensure_email_available(
        self, email: str, *, exclude_id: uuid.UUID | None = None
    ) -> None:
        existing = await self.repository.get_by_email_insensitive(email)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(
                f"This email {email} already exists", details={"field": "email"}
            )

    async def create(self, data: dict[str, Any]) -> AccountT:
        values = dict(data)

        async def _create() -> AccountT:
            await self._ensure_email_available(values["email"])
            values["password"] = self.hasher.hash(data["password"])
            return await self.repository.create(**values)

        account = await run_in_transaction(self.session, _create, action=f"create_{self.label}")
        logger.info("%s_created id=%s", self.label, account.id)
        return account

    async def update(self, account_id: uuid.UUID, data: dict[str, Any]) -> AccountT:
        """Apply the supplied fields; omitted fields are left unchanged."""

        async def _update() -> AccountT:
            account = await self.find_by_id(account_id)
            values = {
                name: value
                for name, value in data.items()
                if value is not None or name in self.nullable_fields
            }
            email = values.get("email")
            if email is not None and email.lower() != account.email.lower():
                await self._ensure_email_available(email, exclude_id=account.id)
            if "password" in values:
                values["password"] = self.hasher.hash(values["password"])
            return await self._save(account, values)

        account = await run_in_transaction(self.session, _update, action=f"update_{self.label}")
        logger.info("%s_updated id=%s", self.label, account.id)
        return account

    async def _save(self, account: AccountT, values: dict[str, Any]) -> AccountT:
        return await self.repository.update(account, values)

    async def delete(self, ids: list[uuid.UUID]) -> BulkResult:
        return await run_in_transaction(
            self.session,
            lambda: self.repository.bulk_delete(ids),
            action=f"delete_{self.label}s",
        )

    async def update_action(self, ids: list[uuid.UUID], field_update: FieldUpdate) -> BulkResult:
        return await run_in_transaction(
            self.session,
            lambda: self.repository.bulk_update(ids, field_update),
            action=f"update_{self.label}s_action",
        )
