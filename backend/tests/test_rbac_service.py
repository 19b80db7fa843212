import uuid

import pytest
from sqlalchemy import func, select

from backoffice.crud.bulk import FieldUpdate
from backoffice.crud.paginate import PaginateOptions
from backoffice.errors import ConflictError, NotFoundError, ValidationError
from backoffice.models import ModelHasRole, Permission, Role, RoleHasPermission
from backoffice.services.rbac.permission_service import PermissionService
from backoffice.services.rbac.role_service import RoleService


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar()


@pytest.mark.anyio
@pytest.mark.parametrize("subject_type", [None, "", "robot"])
async def test_listing_requires_a_known_type(session, subject_type) -> None:
    with pytest.raises(ValidationError):
        await RoleService(session).list_permissions_and_roles(subject_type)


@pytest.mark.anyio
async def test_listing_is_restricted_to_type(session, make_role, make_permission) -> None:
    admin_role = await make_role("editor", "admin")
    await make_role("customer", "user")
    admin_permission = await make_permission("posts.edit", "admin")
    await make_permission("profile.view", "user")
    session.add(RoleHasPermission(role_id=admin_role.id, permission_id=admin_permission.id))
    await session.commit()

    listing = await RoleService(session).list_permissions_and_roles("admin")

    assert [p.name for p in listing["permissions"]] == ["posts.edit"]
    assert [r.name for r in listing["roles"]] == ["editor"]
    assert [(b.role_id, b.permission_id) for b in listing["role_has_permissions"]] == [
        (admin_role.id, admin_permission.id)
    ]


@pytest.mark.anyio
async def test_duplicate_role_name_conflicts_without_creating(session, make_role) -> None:
    await make_role("editor", "admin")

    with pytest.raises(ConflictError):
        await RoleService(session).create_role({"name": "editor", "type": "user"})

    assert await _count(session, Role) == 1


@pytest.mark.anyio
async def test_create_role_requires_type(session) -> None:
    with pytest.raises(ValidationError):
        await RoleService(session).create_role({"name": "editor"})


@pytest.mark.anyio
async def test_roles_paginate_filters_by_type(session, make_role) -> None:
    await make_role("editor", "admin")
    await make_role("auditor", "admin")
    await make_role("customer", "user")

    page = await RoleService(session).find_roles_paginate(
        PaginateOptions(sort="name", filters={"type": "admin"})
    )

    assert page.total == 2
    assert [role.name for role in page.rows] == ["auditor", "editor"]


@pytest.mark.anyio
async def test_get_missing_role_is_not_found(session) -> None:
    with pytest.raises(NotFoundError):
        await RoleService(session).get_role(uuid.uuid4())


@pytest.mark.anyio
async def test_role_type_change_is_blocked_while_bound(session, make_role, make_permission) -> None:
    role = await make_role("editor", "admin")
    permission = await make_permission("posts.edit", "admin")
    role_id, permission_id = role.id, permission.id
    service = RoleService(session)
    await service.set_role_permissions(role_id, [permission_id])

    with pytest.raises(ConflictError):
        await service.update_role(role_id, {"type": "user"})

    await service.set_role_permissions(role_id, [])
    updated = await service.update_role(role_id, {"type": "user", "name": "customer"})
    assert updated.type == "user"
    assert updated.name == "customer"


@pytest.mark.anyio
async def test_rename_to_existing_name_conflicts(session, make_role) -> None:
    await make_role("editor", "admin")
    other = await make_role("viewer", "admin")
    other_id = other.id
    service = RoleService(session)

    with pytest.raises(ConflictError):
        await service.update_role(other_id, {"name": "editor"})

    same = await service.update_role(other_id, {"name": "viewer"})
    assert same.name == "viewer"


@pytest.mark.anyio
async def test_admin_role_cannot_bind_to_user_subject(session, make_role, make_user) -> None:
    role = await make_role("editor", "admin")
    user = await make_user()

    with pytest.raises(ValidationError):
        await RoleService(session).bind_role_to_subject(role.id, user.id, "user")

    assert await _count(session, ModelHasRole) == 0


@pytest.mark.anyio
async def test_bind_checks_subject_and_duplicates(session, make_role, make_admin) -> None:
    role = await make_role("editor", "admin")
    admin = await make_admin()
    role_id, admin_id = role.id, admin.id
    service = RoleService(session)

    with pytest.raises(NotFoundError):
        await service.bind_role_to_subject(role_id, uuid.uuid4(), "admin")
    with pytest.raises(ValidationError):
        await service.bind_role_to_subject(role_id, admin_id, "robot")

    binding = await service.bind_role_to_subject(role_id, admin_id, "admin")
    assert binding.model_type == "admin"

    with pytest.raises(ConflictError):
        await service.bind_role_to_subject(role_id, admin_id, "admin")
    assert await _count(session, ModelHasRole) == 1


@pytest.mark.anyio
async def test_subject_may_hold_several_roles(session, make_role, make_admin) -> None:
    editor = await make_role("editor", "admin")
    viewer = await make_role("viewer", "admin")
    admin = await make_admin()
    service = RoleService(session)

    await service.bind_role_to_subject(editor.id, admin.id, "admin")
    await service.bind_role_to_subject(viewer.id, admin.id, "admin")

    roles = await service.list_subject_roles(admin.id, "admin")
    assert [role.name for role in roles] == ["editor", "viewer"]


@pytest.mark.anyio
async def test_unbind(session, make_role, make_admin) -> None:
    role = await make_role("editor", "admin")
    admin = await make_admin()
    role_id, admin_id = role.id, admin.id
    service = RoleService(session)
    await service.bind_role_to_subject(role_id, admin_id, "admin")

    await service.unbind_role_from_subject(role_id, admin_id, "admin")

    assert await _count(session, ModelHasRole) == 0
    with pytest.raises(NotFoundError):
        await service.unbind_role_from_subject(role_id, admin_id, "admin")


@pytest.mark.anyio
async def test_set_role_permissions_replaces_the_set(session, make_role, make_permission) -> None:
    role = await make_role("editor", "admin")
    first = await make_permission("posts.view", "admin")
    second = await make_permission("posts.edit", "admin")
    third = await make_permission("posts.delete", "admin")
    service = RoleService(session)

    await service.set_role_permissions(role.id, [first.id, second.id])
    permissions = await service.set_role_permissions(role.id, [second.id, third.id, third.id])

    assert sorted(p.name for p in permissions) == ["posts.delete", "posts.edit"]
    stored = await session.execute(
        select(RoleHasPermission.permission_id).where(RoleHasPermission.role_id == role.id)
    )
    assert set(stored.scalars().all()) == {second.id, third.id}


@pytest.mark.anyio
async def test_set_role_permissions_validates_ids_and_type(
    session, make_role, make_permission
) -> None:
    role = await make_role("editor", "admin")
    admin_permission = await make_permission("posts.edit", "admin")
    user_permission = await make_permission("profile.view", "user")
    role_id = role.id
    admin_permission_id, user_permission_id = admin_permission.id, user_permission.id
    service = RoleService(session)

    with pytest.raises(NotFoundError):
        await service.set_role_permissions(role_id, [admin_permission_id, uuid.uuid4()])
    with pytest.raises(ValidationError):
        await service.set_role_permissions(role_id, [admin_permission_id, user_permission_id])

    assert await _count(session, RoleHasPermission) == 0


@pytest.mark.anyio
async def test_deleting_a_role_cascades_to_bindings(
    session, make_role, make_permission, make_admin
) -> None:
    role = await make_role("editor", "admin")
    permission = await make_permission("posts.edit", "admin")
    admin = await make_admin()
    service = RoleService(session)
    await service.set_role_permissions(role.id, [permission.id])
    await service.bind_role_to_subject(role.id, admin.id, "admin")

    result = await service.delete_roles([role.id])

    assert result.affected == 1
    assert await _count(session, Role) == 0
    assert await _count(session, RoleHasPermission) == 0
    assert await _count(session, ModelHasRole) == 0
    assert await _count(session, Permission) == 1


@pytest.mark.anyio
async def test_system_roles_are_protected(session, make_role) -> None:
    system_role = await make_role("super_admin", "admin", is_system=1)
    role = await make_role("editor", "admin")
    system_id, role_id = system_role.id, role.id
    service = RoleService(session)

    with pytest.raises(NotFoundError):
        await service.delete_roles([system_id])

    result = await service.update_roles_action([system_id, role_id], FieldUpdate("status", 0))
    assert result.affected == 1
    statuses = dict((await session.execute(select(Role.name, Role.status))).all())
    assert statuses == {"super_admin": 1, "editor": 0}


@pytest.mark.anyio
async def test_editor_role_end_to_end(session, make_admin) -> None:
    admin = await make_admin("editor@example.com")
    permissions = PermissionService(session)
    roles = RoleService(session)

    posts = await permissions.create_permission({"name": "posts", "type": "admin"})
    edit = await permissions.create_permission(
        {"name": "posts.edit", "type": "admin", "parent_id": posts.id}
    )
    editor = await roles.create_role({"name": "editor", "type": "admin"})
    await roles.set_role_permissions(editor.id, [edit.id])
    await roles.bind_role_to_subject(editor.id, admin.id, "admin")

    granted = await roles.list_subject_permissions(admin.id, "admin")
    assert [p.name for p in granted] == ["posts.edit"]

    listing = await roles.list_permissions_and_roles("admin")
    assert [r.name for r in listing["roles"]] == ["editor"]
    assert {p.name for p in listing["permissions"]} == {"posts", "posts.edit"}
    assert [(b.role_id, b.permission_id) for b in listing["role_has_permissions"]] == [
        (editor.id, edit.id)
    ]

    await roles.update_roles_action([editor.id], FieldUpdate("status", 0))
    assert await roles.list_subject_permissions(admin.id, "admin") == []


@pytest.mark.anyio
async def test_permission_parent_must_exist_and_match_type(session, make_permission) -> None:
    admin_parent = await make_permission("posts", "admin")
    parent_id = admin_parent.id
    service = PermissionService(session)

    with pytest.raises(NotFoundError):
        await service.create_permission(
            {"name": "posts.edit", "type": "admin", "parent_id": uuid.uuid4()}
        )
    with pytest.raises(ValidationError):
        await service.create_permission(
            {"name": "posts.edit", "type": "user", "parent_id": parent_id}
        )
    with pytest.raises(ConflictError):
        await service.create_permission({"name": "posts", "type": "admin"})

    assert await _count(session, Permission) == 1


@pytest.mark.anyio
async def test_deleting_parent_permission_keeps_children(session, make_permission) -> None:
    parent = await make_permission("posts", "admin")
    child = await make_permission("posts.edit", "admin", parent_id=parent.id)
    child_id = child.id

    result = await PermissionService(session).delete_permissions([parent.id])

    assert result.affected == 1
    remaining = await session.execute(
        select(Permission.id, Permission.parent_id)
    )
    assert remaining.all() == [(child_id, None)]


@pytest.mark.anyio
async def test_list_permissions_by_type(session, make_permission) -> None:
    await make_permission("posts.edit", "admin")
    await make_permission("profile.view", "user")

    permissions = await PermissionService(session).list_permissions("user")

    assert [p.name for p in permissions] == ["profile.view"]
