"""Initial schema - entries, crisis flags

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the check-in schema:
- entries: Persisted check-ins; video_ref is patched at most once
- crisis_flags: Best-effort crisis monitoring records
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create entries table
    op.create_table(
        'entries',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('mood_tag', sa.String(20), nullable=False),
        sa.Column('transcript', sa.Text(), nullable=False),
        sa.Column('text_summary', sa.Text(), nullable=False),
        sa.Column('voice_note_ref', sa.String(500), nullable=True),
        sa.Column('ai_response_audio_ref', sa.String(500), nullable=True),
        sa.Column('video_ref', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_entries_user_id', 'entries', ['user_id'])
    op.create_index('ix_entries_created_at', 'entries', ['created_at'])
    op.create_index('ix_entries_user_created', 'entries', ['user_id', 'created_at'])

    # Create crisis_flags table
    op.create_table(
        'crisis_flags',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('severity_score', sa.Integer(), nullable=False),
        sa.Column('keywords_detected', postgresql.ARRAY(sa.String(50)), nullable=False, server_default='{}'),
        sa.Column('context_snippet', sa.String(200), nullable=False),
        sa.Column('assessment', sa.Text(), nullable=False, server_default=''),
        sa.Column('flagged_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_crisis_flags_user_id', 'crisis_flags', ['user_id'])
    op.create_index('ix_crisis_flags_severity_score', 'crisis_flags', ['severity_score'])
    op.create_index('ix_crisis_flags_flagged_at', 'crisis_flags', ['flagged_at'])


def downgrade() -> None:
    op.drop_table('crisis_flags')
    op.drop_table('entries')
