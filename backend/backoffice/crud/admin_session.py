import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.ports.session import AdminSessionData, AdminSessionPort
from ..models.admin_session import AdminSession


async def create_or_rotate_admin_session(
    session: AsyncSession, admin_id: uuid.UUID, token_hash: str, expires_at: datetime
) -> AdminSession:
    existing = await get_admin_session(session, admin_id)
    if existing:
        existing.token_hash = token_hash
        existing.expires_at = expires_at
        existing.revoked = False
        await session.flush()
        return existing

    admin_session = AdminSession(
        admin_id=admin_id,
        token_hash=token_hash,
        expires_at=expires_at,
        revoked=False,
    )
    session.add(admin_session)
    await session.flush()
    return admin_session


async def get_admin_session(
    session: AsyncSession, admin_id: uuid.UUID
) -> AdminSession | None:
    result = await session.execute(
        select(AdminSession).where(AdminSession.admin_id == admin_id)
    )
    return result.scalars().first()


async def revoke_admin_session(
    session: AsyncSession, admin_id: uuid.UUID
) -> AdminSession | None:
    admin_session = await get_admin_session(session, admin_id)
    if admin_session:
        admin_session.revoked = True
        await session.flush()
    return admin_session


class AdminSessionRepository(AdminSessionPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_or_rotate(
        self, admin_id: uuid.UUID, token_hash: str, expires_at: datetime
    ) -> AdminSessionData:
        return await create_or_rotate_admin_session(
            self._session, admin_id, token_hash, expires_at
        )

    async def get_by_admin_id(self, admin_id: uuid.UUID) -> AdminSessionData | None:
        return await get_admin_session(self._session, admin_id)

    async def revoke(self, admin_id: uuid.UUID) -> AdminSessionData | None:
        return await revoke_admin_session(self._session, admin_id)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
