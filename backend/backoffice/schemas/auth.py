from datetime import datetime

from pydantic import Field

from .admin import AdminRead
from .common import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class LoginRead(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    admin: AdminRead
