import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.account import AdminRepository
from ...domain.ports.hasher import PasswordHasher
from ...errors import AuthError, ConflictError, ValidationError
from ...models.admin import Admin
from ...models.enums import RecordStatus
from ..transaction import run_in_transaction
from .base import AccountService

logger = logging.getLogger("backoffice.accounts.admin")


class AdminService(AccountService[Admin]):
    """Admin accounts plus the self-service operations of a signed-in admin."""

    label = "admin"
    repository: AdminRepository

    def __init__(self, session: AsyncSession, hasher: PasswordHasher):
        super().__init__(AdminRepository(session), hasher)

    async def authenticate(self, email: str, password: str) -> Admin:
        admin = await self.repository.get_by_email_insensitive(email.strip())
        if admin is None or not self.hasher.verify(password, admin.password):
            raise AuthError("Invalid email or password")
        if admin.status != RecordStatus.ACTIVE:
            raise AuthError("Account is inactive")
        return admin

    async def _save(self, admin: Admin, values: dict[str, Any]) -> Admin:
        # a new password always rotates through previous_password
        password_hash = values.pop("password", None)
        if password_hash is not None:
            admin = await self.repository.set_password(admin, password_hash)
        return await self.repository.update(admin, values)

    async def update_profile(self, admin_id: uuid.UUID, *, name: str, email: str) -> Admin:
        return await self.update(admin_id, {"name": name, "email": email})

    async def update_password(
        self, admin_id: uuid.UUID, current_password: str, new_password: str
    ) -> Admin:
        """Replace the password, rejecting reuse of the current or previous one."""

        async def _update_password() -> Admin:
            admin = await self.find_by_id(admin_id)
            if not self.hasher.verify(current_password, admin.password):
                raise ValidationError(
                    "Current password is incorrect", details={"field": "currentPassword"}
                )
            if self.hasher.verify(new_password, admin.password) or self.hasher.verify(
                new_password, admin.previous_password
            ):
                raise ConflictError(
                    "New password must differ from the current and previous passwords",
                    details={"field": "newPassword"},
                )
            return await self.repository.set_password(admin, self.hasher.hash(new_password))

        admin = await run_in_transaction(
            self.session, _update_password, action="update_admin_password"
        )
        logger.info("admin_password_changed id=%s", admin.id)
        return admin
