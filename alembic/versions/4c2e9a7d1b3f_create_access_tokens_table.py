"""create_access_tokens_table

Revision ID: 4c2e9a7d1b3f
Revises:
Create Date: 2026-10-18 09:12:41.207318

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c2e9a7d1b3f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'access_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('description', sa.String(length=1024), nullable=False),
        sa.Column('salt_id', sa.String(length=8), nullable=False),
        sa.Column('salt_value', sa.String(length=128), nullable=False),
        sa.Column('value_hash', sa.String(length=128), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('auth_config_id', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=True),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('revoke_cause', sa.Text(), nullable=True),
        sa.Column('revoked_by', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('salt_id', name='uq_access_token_salt_id'),
    )
    op.create_index('ix_access_token_username', 'access_tokens', ['username'])
    op.create_index('ix_access_token_revoked', 'access_tokens', ['revoked'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_access_token_revoked', table_name='access_tokens')
    op.drop_index('ix_access_token_username', table_name='access_tokens')
    op.drop_table('access_tokens')
