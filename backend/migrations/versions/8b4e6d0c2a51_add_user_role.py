"""add role to users

Revision ID: 8b4e6d0c2a51
Revises: 3f1c9a2b7d10
Create Date: 2025-02-03 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '8b4e6d0c2a51'
down_revision = '3f1c9a2b7d10'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.add_column(sa.Column('role', sa.String(length=50), server_default='user', nullable=False))
        batch_op.create_check_constraint(
            op.f('ck_users_role_allowed'), "role IN ('user', 'admin', 'manager')"
        )
        batch_op.create_index('ix_users_role', ['role'], unique=False)


def downgrade():
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index('ix_users_role')
        batch_op.drop_constraint(op.f('ck_users_role_allowed'), type_='check')
        batch_op.drop_column('role')
