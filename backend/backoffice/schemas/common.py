import uuid
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    """Base for every request/response body: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        protected_namespaces=(),
    )


class Envelope(CamelModel, Generic[T]):
    data: T
    message: str


class PageRead(CamelModel, Generic[T]):
    rows: list[T]
    total: int
    page: int
    per_page: int


class DeleteAction(CamelModel):
    ids: list[uuid.UUID] = Field(..., min_length=1)


class FieldChange(CamelModel):
    name: str = Field(..., min_length=1)
    value: Any


class UpdateAction(CamelModel):
    ids: list[uuid.UUID] = Field(..., min_length=1)
    field: FieldChange


class BulkResultRead(CamelModel):
    requested: int
    affected: int
    ids: list[uuid.UUID]
