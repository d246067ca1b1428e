"""initial_schema_scan_runs_and_corrections

Revision ID: 001
Revises: 
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'scan_runs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('uuid', sa.String(64), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('state', sa.String(16), nullable=False),
        sa.Column('state_internal', sa.Text(), nullable=True),
        sa.Column('run_start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('run_end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('debugging_info', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_scan_runs_id'), 'scan_runs', ['id'], unique=False)
    op.create_index('idx_scan_runs_uuid', 'scan_runs', ['uuid'], unique=False)
    op.create_index('idx_scan_runs_start', 'scan_runs', ['run_start_time'], unique=False)

    op.create_table(
        'scan_corrections',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('scan_run_id', sa.Integer(), nullable=False),
        sa.Column('issue_type', sa.String(32), nullable=False),
        sa.Column('original_text', sa.Text(), nullable=False),
        sa.Column('corrected_text', sa.Text(), nullable=False),
        sa.Column('surrounding_text', sa.Text(), nullable=False),
        sa.Column('explanation_for_correction', sa.Text(), nullable=False),
        sa.Column('probability_of_correctness', sa.Float(), nullable=False),
        sa.Column('severity', sa.String(16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['scan_run_id'], ['scan_runs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_scan_corrections_id'), 'scan_corrections', ['id'], unique=False)
    op.create_index(op.f('ix_scan_corrections_severity'), 'scan_corrections', ['severity'], unique=False)
    op.create_index('idx_scan_corrections_uuid', 'scan_corrections', ['uuid'], unique=False)
    op.create_index('idx_scan_corrections_run', 'scan_corrections', ['scan_run_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_scan_corrections_run', table_name='scan_corrections')
    op.drop_index('idx_scan_corrections_uuid', table_name='scan_corrections')
    op.drop_index(op.f('ix_scan_corrections_severity'), table_name='scan_corrections')
    op.drop_index(op.f('ix_scan_corrections_id'), table_name='scan_corrections')
    op.drop_table('scan_corrections')

    op.drop_index('idx_scan_runs_start', table_name='scan_runs')
    op.drop_index('idx_scan_runs_uuid', table_name='scan_runs')
    op.drop_index(op.f('ix_scan_runs_id'), table_name='scan_runs')
    op.drop_table('scan_runs')
