from __future__ import annotations

from datetime import datetime
import uuid
from typing import Protocol


class AdminSessionData(Protocol):
    admin_id: uuid.UUID
    token_hash: str
    expires_at: datetime
    revoked: bool


class AdminSessionPort(Protocol):
    async def create_or_rotate(
        self, admin_id: uuid.UUID, token_hash: str, expires_at: datetime
    ) -> AdminSessionData:
        ...

    async def get_by_admin_id(self, admin_id: uuid.UUID) -> AdminSessionData | None:
        ...

    async def revoke(self, admin_id: uuid.UUID) -> AdminSessionData | None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
