from typing import Any, TypeVar

from pydantic import BaseModel

from ..crud.bulk import BulkResult, FieldUpdate
from ..crud.paginate import Page
from ..schemas.common import BulkResultRead, FieldChange, PageRead

ReadT = TypeVar("ReadT", bound=BaseModel)


def page_read(page: Page[Any], schema: type[ReadT]) -> PageRead[ReadT]:
    return PageRead[schema](  # type: ignore[valid-type]
        rows=[schema.model_validate(row) for row in page.rows],
        total=page.total,
        page=page.page,
        per_page=page.per_page,
    )


def bulk_read(result: BulkResult) -> BulkResultRead:
    return BulkResultRead(requested=result.requested, affected=result.affected, ids=result.ids)


def field_update(change: FieldChange) -> FieldUpdate:
    return FieldUpdate(name=change.name, value=change.value)
