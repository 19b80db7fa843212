"""
Seed the system admin, system roles and default permissions.

Safe to run repeatedly: existing records (matched by email or name) are kept.

Usage:
    SEED_ADMIN_EMAIL=... SEED_ADMIN_PASSWORD=... python -m scripts.seed_backoffice
"""
import asyncio
import os
import sys

# Add parent directory to path to import backoffice modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backoffice.crud.account import AdminRepository
from backoffice.crud.permission import PermissionRepository
from backoffice.crud.role import RoleRepository
from backoffice.database import AsyncSessionLocal
from backoffice.models.enums import SubjectType, SystemFlag
from backoffice.security.passwords import BcryptHasher

# (name, parent name)
DEFAULT_PERMISSIONS = {
    SubjectType.ADMIN: [
        ("admins", None),
        ("admins.view", "admins"),
        ("admins.manage", "admins"),
        ("users", None),
        ("users.view", "users"),
        ("users.manage", "users"),
        ("roles", None),
        ("roles.view", "roles"),
        ("roles.manage", "roles"),
    ],
    SubjectType.USER: [
        ("profile", None),
        ("profile.view", "profile"),
        ("profile.edit", "profile"),
    ],
}

SYSTEM_ROLES = {
    "super_admin": SubjectType.ADMIN,
    "customer": SubjectType.USER,
}


async def seed_backoffice() -> None:
    email = os.getenv("SEED_ADMIN_EMAIL", "").strip()
    password = os.getenv("SEED_ADMIN_PASSWORD", "")
    if not email or not password:
        raise SystemExit("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set")

    async with AsyncSessionLocal() as session:
        admin_repo = AdminRepository(session)
        role_repo = RoleRepository(session)
        permission_repo = PermissionRepository(session)

        print("Seeding permissions...")
        permission_ids = {kind: set() for kind in DEFAULT_PERMISSIONS}
        for kind, entries in DEFAULT_PERMISSIONS.items():
            for name, parent_name in entries:
                permission = await permission_repo.get_by_name(name)
                if permission is None:
                    parent = await permission_repo.get_by_name(parent_name) if parent_name else None
                    permission = await permission_repo.create(
                        name=name, type=kind.value, parent_id=parent.id if parent else None
                    )
                    print(f"  + {kind.value}:{name}")
                permission_ids[kind].add(permission.id)

        print("Seeding system roles...")
        roles = {}
        for name, kind in SYSTEM_ROLES.items():
            role = await role_repo.get_by_name(name)
            if role is None:
                role = await role_repo.create(name=name, type=kind.value, is_system=SystemFlag.YES)
                print(f"  + {name}")
            await role_repo.replace_permissions(role.id, permission_ids[kind])
            roles[name] = role

        print("Seeding system admin...")
        admin = await admin_repo.get_by_email_insensitive(email)
        if admin is None:
            admin = await admin_repo.create(
                email=email,
                name="System Admin",
                password=BcryptHasher().hash(password),
                is_system=SystemFlag.YES,
            )
            print(f"  + {email}")
        super_admin = roles["super_admin"]
        if await role_repo.get_binding(super_admin.id, admin.id, SubjectType.ADMIN.value) is None:
            await role_repo.bind(super_admin.id, admin.id, SubjectType.ADMIN.value)

        await session.commit()
    print("Done.")


if __name__ == "__main__":
    asyncio.run(seed_backoffice())
