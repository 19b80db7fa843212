"""Create back-office account and RBAC tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str | None = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Apply schema changes."""
    op.create_table(
        'admins',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('previous_password', sa.String(length=255), nullable=True),
        sa.Column('status', sa.SmallInteger(), server_default='1', nullable=False),
        sa.Column('is_system', sa.SmallInteger(), server_default='0', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_admins')),
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone_no', sa.String(length=32), nullable=True),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('status', sa.SmallInteger(), server_default='1', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'roles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.SmallInteger(), server_default='1', nullable=False),
        sa.Column('is_system', sa.SmallInteger(), server_default='0', nullable=False),
        *_timestamps(),
        sa.CheckConstraint("type IN ('admin', 'user')", name='ck_roles_type'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_roles')),
    )
    op.create_index('ix_roles_name', 'roles', ['name'], unique=True)
    op.create_index('ix_roles_type', 'roles', ['type'], unique=False)

    op.create_table(
        'permissions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('parent_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("type IN ('admin', 'user')", name='ck_permissions_type'),
        sa.ForeignKeyConstraint(['parent_id'], ['permissions.id'], name=op.f('fk_permissions_parent_id_permissions'), ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_permissions')),
    )
    op.create_index('ix_permissions_name', 'permissions', ['name'], unique=True)
    op.create_index('ix_permissions_type', 'permissions', ['type'], unique=False)
    op.create_index('ix_permissions_parent_id', 'permissions', ['parent_id'], unique=False)

    op.create_table(
        'role_has_permissions',
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('permission_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], name=op.f('fk_role_has_permissions_role_id_roles'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id'], name=op.f('fk_role_has_permissions_permission_id_permissions'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('role_id', 'permission_id', name=op.f('pk_role_has_permissions')),
    )
    op.create_index('ix_role_has_permissions_permission_id', 'role_has_permissions', ['permission_id'], unique=False)

    op.create_table(
        'model_has_roles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('model_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('model_type', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("model_type IN ('admin', 'user')", name='ck_model_has_roles_model_type'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], name=op.f('fk_model_has_roles_role_id_roles'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_model_has_roles')),
        sa.UniqueConstraint('role_id', 'model_id', 'model_type', name='uq_model_has_roles_role_model'),
    )
    op.create_index('ix_model_has_roles_role_id', 'model_has_roles', ['role_id'], unique=False)
    op.create_index('ix_model_has_roles_model_id', 'model_has_roles', ['model_id'], unique=False)

    op.create_table(
        'admin_sessions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('admin_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('token_hash', sa.String(length=128), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['admin_id'], ['admins.id'], name=op.f('fk_admin_sessions_admin_id_admins'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_admin_sessions')),
    )
    op.create_index('ix_admin_sessions_admin_id', 'admin_sessions', ['admin_id'], unique=True)
    op.create_index('ix_admin_sessions_token_hash', 'admin_sessions', ['token_hash'], unique=False)


def downgrade() -> None:
    """Revert schema changes."""
    op.drop_index('ix_admin_sessions_token_hash', table_name='admin_sessions')
    op.drop_index('ix_admin_sessions_admin_id', table_name='admin_sessions')
    op.drop_table('admin_sessions')

    op.drop_index('ix_model_has_roles_model_id', table_name='model_has_roles')
    op.drop_index('ix_model_has_roles_role_id', table_name='model_has_roles')
    op.drop_table('model_has_roles')

    op.drop_index('ix_role_has_permissions_permission_id', table_name='role_has_permissions')
    op.drop_table('role_has_permissions')

    op.drop_index('ix_permissions_parent_id', table_name='permissions')
    op.drop_index('ix_permissions_type', table_name='permissions')
    op.drop_index('ix_permissions_name', table_name='permissions')
    op.drop_table('permissions')

    op.drop_index('ix_roles_type', table_name='roles')
    op.drop_index('ix_roles_name', table_name='roles')
    op.drop_table('roles')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    op.drop_index('ix_admins_email', table_name='admins')
    op.drop_table('admins')
