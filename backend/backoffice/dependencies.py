from collections.abc import AsyncGenerator

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .crud.admin_session import AdminSessionRepository
from .crud.paginate import PaginateOptions
from .database import get_session
from .domain.ports.hasher import PasswordHasher
from .domain.ports.session import AdminSessionPort
from .errors import AuthError
from .models.admin import Admin
from .models.enums import RecordStatus
from .security.passwords import BcryptHasher
from .security.tokens import ExpiredTokenError, InvalidTokenError, validate_access_token
from .services.accounts.admin_service import AdminService
from .services.accounts.user_service import UserService
from .services.rbac.permission_service import PermissionService
from .services.rbac.role_service import RoleService
from .use_cases.auth.verify_session import verify_admin_session

bearer_scheme = HTTPBearer(auto_error=False)

AUTH_COOKIE_NAME = "Authorization"
PAGINATION_QUERY_PARAMS = frozenset(
    {"pageNumber", "perPage", "sort", "order", "q", "ignoreGlobal"}
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_password_hasher() -> PasswordHasher:
    return BcryptHasher()


def get_admin_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AdminService:
    return AdminService(db, hasher)


def get_user_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db, hasher)


def get_role_service(db: AsyncSession = Depends(get_db)) -> RoleService:
    return RoleService(db)


def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    return PermissionService(db)


def get_admin_session_port(db: AsyncSession = Depends(get_db)) -> AdminSessionPort:
    return AdminSessionRepository(db)


def get_paginate_options(
    request: Request,
    page_number: int = Query(0, alias="pageNumber"),
    per_page: int | None = Query(None, alias="perPage"),
    sort: str = Query("createdAt"),
    order: str = Query("ASC"),
    q: str | None = Query(None),
    ignore_global: str | None = Query(None, alias="ignoreGlobal"),
) -> PaginateOptions:
    """Build list options; every query parameter that is not a paging knob is a filter."""
    filters = {
        key: value
        for key, value in request.query_params.items()
        if key not in PAGINATION_QUERY_PARAMS
    }
    ignored = frozenset(
        name.strip() for name in (ignore_global or "").split(",") if name.strip()
    )
    return PaginateOptions(
        page_number=page_number,
        per_page=per_page,
        sort=sort,
        order=order,
        filters=filters,
        q=q,
        ignore_global=ignored,
    )


def _extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    cookie = request.cookies.get(AUTH_COOKIE_NAME)
    if cookie:
        return cookie.strip() or None
    return None


async def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    session_port: AdminSessionPort = Depends(get_admin_session_port),
) -> Admin:
    token = _extract_token(request, credentials)
    if token is None:
        raise AuthError("Not authenticated")

    try:
        payload = validate_access_token(token)
    except ExpiredTokenError:
        raise AuthError("Token has expired") from None
    except InvalidTokenError:
        raise AuthError("Invalid token") from None

    admin = await db.get(Admin, payload["sub"])
    if admin is None:
        raise AuthError("Admin not found")
    if admin.status != RecordStatus.ACTIVE:
        raise AuthError("Account is inactive")

    await verify_admin_session(session_port, admin.id, payload["sid"])
    return admin
