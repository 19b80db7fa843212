import pytest
from sqlalchemy import func, select

from backoffice.crud.bulk import FieldUpdate
from backoffice.crud.paginate import PaginateOptions
from backoffice.errors import ConflictError, NotFoundError
from backoffice.models import ModelHasRole, User
from backoffice.services.accounts.user_service import UserService


@pytest.mark.anyio
async def test_create_and_clear_phone_number(session, hasher) -> None:
    service = UserService(session, hasher)

    user = await service.create(
        {
            "email": "user@example.com",
            "name": "User",
            "phone_no": "555-0100",
            "password": "secret123",
        }
    )
    assert user.phone_no == "555-0100"
    assert hasher.verify("secret123", user.password)

    updated = await service.update(user.id, {"phone_no": None})
    assert updated.phone_no is None


@pytest.mark.anyio
async def test_duplicate_email_conflicts(session, hasher, make_user) -> None:
    await make_user("user@example.com")

    with pytest.raises(ConflictError):
        await UserService(session, hasher).create(
            {"email": "user@example.com", "name": "Dup", "password": "secret123"}
        )

    count = await session.execute(select(func.count()).select_from(User))
    assert count.scalar() == 1


@pytest.mark.anyio
async def test_paginate_through_service(session, hasher, make_user) -> None:
    await make_user("a@example.com", name="Alpha", status=1)
    await make_user("b@example.com", name="Beta", status=0)

    page = await UserService(session, hasher).find_all_paginate(
        PaginateOptions(filters={"status": "1"})
    )

    assert [user.name for user in page.rows] == ["Alpha"]


@pytest.mark.anyio
async def test_delete_removes_user_and_bindings(session, hasher, make_user, make_role) -> None:
    user = await make_user()
    role = await make_role("customer", "user")
    admin_role = await make_role("editor", "admin")
    session.add_all(
        [
            ModelHasRole(role_id=role.id, model_id=user.id, model_type="user"),
            # same id bound as an admin subject is left alone
            ModelHasRole(role_id=admin_role.id, model_id=user.id, model_type="admin"),
        ]
    )
    await session.commit()
    user_id = user.id
    service = UserService(session, hasher)

    result = await service.delete([user_id])

    assert result.affected == 1
    remaining = await session.execute(select(ModelHasRole.model_type))
    assert remaining.scalars().all() == ["admin"]
    with pytest.raises(NotFoundError):
        await service.find_by_id(user_id)


@pytest.mark.anyio
async def test_update_action_sets_status(session, hasher, make_user) -> None:
    first = await make_user("a@example.com")
    second = await make_user("b@example.com")

    result = await UserService(session, hasher).update_action(
        [first.id, second.id], FieldUpdate("status", 0)
    )

    assert result.affected == 2
    statuses = await session.execute(select(User.status))
    assert set(statuses.scalars().all()) == {0}
