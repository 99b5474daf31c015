"""create pastes table

Revision ID: 001_create_pastes
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_pastes'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'pastes',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_views', sa.Integer(), nullable=True),
        sa.Column('remaining_views', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('max_views >= 1', name='ck_pastes_max_views_min_1'),
        sa.CheckConstraint('remaining_views >= 0', name='ck_pastes_remaining_views_non_negative'),
        sa.CheckConstraint('remaining_views <= max_views', name='ck_pastes_remaining_views_le_max_views'),
        sa.CheckConstraint('(max_views IS NULL) = (remaining_views IS NULL)', name='ck_pastes_view_budget_paired'),
    )


def downgrade() -> None:
    op.drop_table('pastes')
