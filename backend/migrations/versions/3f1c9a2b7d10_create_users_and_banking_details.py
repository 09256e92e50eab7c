"""create users and banking_details

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2025-01-20 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '3f1c9a2b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('profile_picture_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_created_at', 'users', ['created_at'], unique=False)

    op.create_table(
        'banking_details',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('agency', sa.String(length=10), nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_banking_details_user_id_users'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_banking_details')),
        sa.UniqueConstraint('user_id', name=op.f('uq_banking_details_user_id')),
    )
    op.create_index('ix_banking_details_agency_account', 'banking_details', ['agency', 'account_number'], unique=False)


def downgrade():
    op.drop_index('ix_banking_details_agency_account', table_name='banking_details')
    op.drop_table('banking_details')
    op.drop_index('ix_users_created_at', table_name='users')
    op.drop_table('users')
