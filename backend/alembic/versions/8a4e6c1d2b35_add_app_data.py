"""Add app_data table

Revision ID: 8a4e6c1d2b35
Revises: 3f1c2a9b7d10
Create Date: 2026-10-19 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers used by Alembic
revision: str = '8a4e6c1d2b35'
down_revision: Union[str, Sequence[str], None] = '3f1c2a9b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # One client snapshot per user, removed together with the user
    op.create_table(
        'app_data',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_app_data_id'), 'app_data', ['id'], unique=False)
    op.create_index(op.f('ix_app_data_user_id'), 'app_data', ['user_id'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_app_data_user_id'), table_name='app_data')
    op.drop_index(op.f('ix_app_data_id'), table_name='app_data')
    op.drop_table('app_data')
