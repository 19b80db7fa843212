import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from ..config import settings

SESSION_ID_BYTES = 32


class InvalidTokenError(Exception):
    """Raised when a token cannot be parsed or is malformed."""


class ExpiredTokenError(Exception):
    """Raised when a token has expired."""


def new_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def hash_session_id(session_id: str) -> str:
    return hashlib.sha256(session_id.encode("utf-8")).hexdigest()


def access_token_expiry(now: datetime | None = None) -> datetime:
    current = now or datetime.now(timezone.utc)
    return current + timedelta(minutes=settings.access_token_expire_minutes)


def create_access_token(admin_id: uuid.UUID, session_id: str, expires_at: datetime) -> str:
    payload = {
        "sub": str(admin_id),
        "sid": session_id,
        "exp": expires_at,
        "type": "access",
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def _parse_token_payload(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError from exc


def validate_access_token(token: str) -> Dict[str, Any]:
    payload = _parse_token_payload(token)

    subject = payload.get("sub")
    session_id = payload.get("sid")
    if not isinstance(subject, str) or not isinstance(session_id, str):
        raise InvalidTokenError()
    if payload.get("type") != "access":
        raise InvalidTokenError()
    try:
        payload["sub"] = uuid.UUID(subject)
    except ValueError as exc:
        raise InvalidTokenError from exc

    return payload
