from fastapi import APIRouter, Depends, Request, Response

from ..config import settings
from ..dependencies import (
    AUTH_COOKIE_NAME,
    get_admin_service,
    get_admin_session_port,
    get_current_admin,
    get_role_service,
)
from ..domain.ports.session import AdminSessionPort
from ..models.admin import Admin
from ..models.enums import SubjectType
from ..schemas.admin import AdminRead, PasswordUpdate, ProfileRead, ProfileUpdate
from ..schemas.auth import LoginRead, LoginRequest
from ..schemas.common import Envelope
from ..schemas.role import PermissionRead, RoleRead
from ..services.accounts.admin_service import AdminService
from ..services.rbac.role_service import RoleService
from ..use_cases.auth.login_admin import login_admin
from ..use_cases.auth.logout_admin import logout_admin

router = APIRouter(prefix="/admin", tags=["auth"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/login", response_model=Envelope[LoginRead])
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    service: AdminService = Depends(get_admin_service),
    session_port: AdminSessionPort = Depends(get_admin_session_port),
):
    result = await login_admin(
        service,
        session_port,
        payload.email,
        payload.password,
        client_ip=_client_ip(request),
    )
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=result.access_token,
        httponly=True,
        samesite="lax",
        secure=not settings.debug,
        max_age=settings.access_token_expire_minutes * 60,
    )
    return Envelope[LoginRead](
        data=LoginRead(
            access_token=result.access_token,
            expires_at=result.expires_at,
            admin=AdminRead.model_validate(result.admin),
        ),
        message="Logged in successfully",
    )


@router.post("/logout", response_model=Envelope[None])
async def logout(
    response: Response,
    admin: Admin = Depends(get_current_admin),
    session_port: AdminSessionPort = Depends(get_admin_session_port),
):
    await logout_admin(session_port, admin.id)
    response.delete_cookie(AUTH_COOKIE_NAME)
    return Envelope[None](data=None, message="Logged out successfully")


async def _profile(admin: Admin, role_service: RoleService) -> ProfileRead:
    roles = await role_service.list_subject_roles(admin.id, SubjectType.ADMIN.value)
    permissions = await role_service.list_subject_permissions(admin.id, SubjectType.ADMIN.value)
    profile = ProfileRead.model_validate(admin)
    profile.roles = [RoleRead.model_validate(role) for role in roles]
    profile.permissions = [PermissionRead.model_validate(p) for p in permissions]
    return profile


@router.get("/profile", response_model=Envelope[ProfileRead])
async def get_profile(
    admin: Admin = Depends(get_current_admin),
    role_service: RoleService = Depends(get_role_service),
):
    return Envelope[ProfileRead](data=await _profile(admin, role_service), message="findOne")


@router.put("/profile", response_model=Envelope[ProfileRead])
async def update_profile(
    payload: ProfileUpdate,
    admin: Admin = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
    role_service: RoleService = Depends(get_role_service),
):
    updated = await service.update_profile(admin.id, name=payload.name, email=payload.email)
    return Envelope[ProfileRead](
        data=await _profile(updated, role_service),
        message="Profile updated successfully",
    )


@router.put("/password", response_model=Envelope[None])
async def update_password(
    payload: PasswordUpdate,
    admin: Admin = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    await service.update_password(admin.id, payload.current_password, payload.new_password)
    return Envelope[None](data=None, message="Password updated successfully")
