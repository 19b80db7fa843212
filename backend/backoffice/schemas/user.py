import uuid
from datetime import datetime

from pydantic import Field

from ..models.enums import RecordStatus
from .common import EMAIL_PATTERN, CamelModel


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    phone_no: str | None = None
    status: int
    created_at: datetime
    updated_at: datetime


class UserCreate(CamelModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    phone_no: str | None = Field(None, max_length=32)
    password: str = Field(..., min_length=6, max_length=128)
    status: RecordStatus = RecordStatus.ACTIVE


class UserUpdate(CamelModel):
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    name: str | None = Field(None, min_length=1, max_length=255)
    phone_no: str | None = Field(None, max_length=32)
    password: str | None = Field(None, min_length=6, max_length=128)
    status: RecordStatus | None = None
