"""Create tenants, users, roles, user_roles and user_logins tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_id = sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def upgrade() -> None:
    op.create_table(
        'tenants',
        sa.Column('id', _id, primary_key=True, autoincrement=True),
        sa.Column('tenancy_name', sa.String(64), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint('tenancy_name', name='uq_tenants_tenancy_name'),
    )

    op.create_table(
        'users',
        sa.Column('id', _id, primary_key=True, autoincrement=True),
        sa.Column('tenant_id', _id, sa.ForeignKey('tenants.id'), nullable=True),
        sa.Column('user_name', sa.String(32), nullable=False),
        sa.Column('name', sa.String(32), nullable=True),
        sa.Column('surname', sa.String(32), nullable=True),
        sa.Column('email_address', sa.String(256), nullable=False),
        sa.Column('is_email_confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('password', sa.String(128), nullable=True),
        sa.Column('email_confirmation_code', sa.String(128), nullable=True),
        sa.Column('password_reset_code', sa.String(128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint('tenant_id', 'user_name', name='uq_users_tenant_user_name'),
    )
    op.create_index('idx_users_email_address', 'users', ['email_address'], unique=False)

    op.create_table(
        'roles',
        sa.Column('id', _id, primary_key=True, autoincrement=True),
        sa.Column('tenant_id', _id, sa.ForeignKey('tenants.id'), nullable=True),
        sa.Column('name', sa.String(32), nullable=False),
        sa.Column('display_name', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_roles_tenant_name'),
    )

    op.create_table(
        'user_roles',
        sa.Column('id', _id, primary_key=True, autoincrement=True),
        sa.Column('user_id', _id, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', _id, sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'role_id', name='uq_user_roles_user_role'),
    )
    op.create_index('idx_user_roles_user_id', 'user_roles', ['user_id'], unique=False)

    op.create_table(
        'user_logins',
        sa.Column('id', _id, primary_key=True, autoincrement=True),
        sa.Column('user_id', _id, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('login_provider', sa.String(128), nullable=False),
        sa.Column('provider_key', sa.String(256), nullable=False),
        sa.UniqueConstraint('login_provider', 'provider_key', name='uq_user_logins_provider_key'),
    )
    op.create_index('idx_user_logins_user_id', 'user_logins', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_user_logins_user_id', table_name='user_logins')
    op.drop_table('user_logins')
    op.drop_index('idx_user_roles_user_id', table_name='user_roles')
    op.drop_table('user_roles')
    op.drop_table('roles')
    op.drop_index('idx_users_email_address', table_name='users')
    op.drop_table('users')
    op.drop_table('tenants')
