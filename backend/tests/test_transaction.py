from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from backoffice.errors import ConflictError, NotFoundError
from backoffice.services.transaction import run_in_transaction


def _integrity_error() -> IntegrityError:
    return IntegrityError("INSERT INTO roles ...", {}, Exception("duplicate key"))


def _session() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.mark.anyio
async def test_commits_once_on_success() -> None:
    session = _session()

    result = await run_in_transaction(session, AsyncMock(return_value="ok"), action="test")

    assert result == "ok"
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


@pytest.mark.anyio
async def test_integrity_error_is_retried_then_succeeds() -> None:
    session = _session()
    work = AsyncMock(side_effect=[_integrity_error(), "ok"])

    result = await run_in_transaction(session, work, action="test", retries=1)

    assert result == "ok"
    assert work.await_count == 2
    session.rollback.assert_awaited_once()


@pytest.mark.anyio
async def test_persistent_integrity_error_becomes_retryable_conflict() -> None:
    session = _session()
    work = AsyncMock(side_effect=_integrity_error())

    with pytest.raises(ConflictError) as exc_info:
        await run_in_transaction(session, work, action="test", retries=2)

    assert exc_info.value.details == {"retryable": True}
    assert "duplicate key" not in exc_info.value.message
    assert work.await_count == 3
    assert session.rollback.await_count == 3
    session.commit.assert_not_awaited()


@pytest.mark.anyio
async def test_app_errors_roll_back_without_retry() -> None:
    session = _session()
    work = AsyncMock(side_effect=NotFoundError("missing"))

    with pytest.raises(NotFoundError):
        await run_in_transaction(session, work, action="test")

    assert work.await_count == 1
    session.rollback.assert_awaited_once()
