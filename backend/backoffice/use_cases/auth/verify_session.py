import uuid
from datetime import datetime, timezone

from ...domain.ports.session import AdminSessionPort
from ...errors import AuthError
from ...security.tokens import hash_session_id


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def verify_admin_session(
    session_port: AdminSessionPort,
    admin_id: uuid.UUID,
    session_id: str,
    *,
    now: datetime | None = None,
) -> None:
    """Raise ``AuthError`` unless ``session_id`` is the admin's live session."""
    stored = await session_port.get_by_admin_id(admin_id)
    if stored is None or stored.revoked:
        raise AuthError("Session is no longer valid")
    if stored.token_hash != hash_session_id(session_id):
        raise AuthError("Session is no longer valid")
    current = now or datetime.now(timezone.utc)
    if _as_aware(stored.expires_at) <= current:
        raise AuthError("Session has expired")
