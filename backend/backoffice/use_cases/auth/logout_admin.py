import logging
import uuid

from ...domain.ports.session import AdminSessionPort

logger = logging.getLogger("backoffice.auth")


async def logout_admin(session_port: AdminSessionPort, admin_id: uuid.UUID) -> None:
    try:
        revoked = await session_port.revoke(admin_id)
        if revoked is None:
            return
        await session_port.commit()
    except Exception:
        await session_port.rollback()
        raise
    logger.info("admin_logout id=%s", admin_id)
