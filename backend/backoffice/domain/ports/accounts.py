from __future__ import annotations

import uuid
from typing import Protocol


class AdminAccount(Protocol):
    id: uuid.UUID
    email: str
    status: int


class AdminAuthenticator(Protocol):
    async def authenticate(self, email: str, password: str) -> AdminAccount:
        ...
