import logging
from dataclasses import dataclass
from datetime import datetime

from ...application.auth_rate_limit import (
    RateLimitExceededError,
    check_login_rate_limit,
    record_login_failure,
    reset_login_limit,
)
from ...domain.ports.accounts import AdminAccount, AdminAuthenticator
from ...domain.ports.session import AdminSessionPort
from ...errors import AuthError, RateLimitError
from ...security.tokens import (
    access_token_expiry,
    create_access_token,
    hash_session_id,
    new_session_id,
)

logger = logging.getLogger("backoffice.auth")


@dataclass
class LoginResult:
    admin: AdminAccount
    access_token: str
    expires_at: datetime


async def login_admin(
    authenticator: AdminAuthenticator,
    session_port: AdminSessionPort,
    email: str,
    password: str,
    *,
    client_ip: str | None = None,
) -> LoginResult:
    try:
        rate_key = check_login_rate_limit(email, client_ip)
    except RateLimitExceededError as exc:
        logger.warning("admin_login_rate_limited ip=%s", client_ip)
        raise RateLimitError() from exc

    try:
        admin = await authenticator.authenticate(email, password)
    except AuthError:
        record_login_failure(rate_key)
        logger.warning("admin_login_failed ip=%s", client_ip)
        raise
    reset_login_limit(rate_key)

    session_id = new_session_id()
    expires_at = access_token_expiry()
    try:
        await session_port.create_or_rotate(admin.id, hash_session_id(session_id), expires_at)
        await session_port.commit()
    except Exception:
        await session_port.rollback()
        raise

    logger.info("admin_login id=%s", admin.id)
    return LoginResult(
        admin=admin,
        access_token=create_access_token(admin.id, session_id, expires_at),
        expires_at=expires_at,
    )
