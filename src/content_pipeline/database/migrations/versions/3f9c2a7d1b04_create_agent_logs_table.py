"""create agent_logs table

Revision ID: 3f9c2a7d1b04
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b04'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create agent_logs table for the per-run execution log."""

    op.create_table(
        'agent_logs',
        sa.Column('id', UUID(), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('run_id', UUID(), nullable=False),
        sa.Column(
            'agent',
            sa.Enum('researcher', 'writer', 'fact-checker', 'polisher', name='agent_name'),
            nullable=False
        ),
        sa.Column('input', sa.Text(), nullable=False, server_default=''),
        sa.Column('output', sa.Text(), nullable=False, server_default=''),
        sa.Column('metadata', JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )

    # Timeline queries filter by run and sort by creation time
    op.create_index('ix_agent_logs_run_id', 'agent_logs', ['run_id'])
    op.create_index('ix_agent_logs_created_at', 'agent_logs', ['created_at'])


def downgrade() -> None:
    """Drop agent_logs table and enum type."""
    op.drop_index('ix_agent_logs_created_at', table_name='agent_logs')
    op.drop_index('ix_agent_logs_run_id', table_name='agent_logs')
    op.drop_table('agent_logs')
    op.execute("DROP TYPE IF EXISTS agent_name")
