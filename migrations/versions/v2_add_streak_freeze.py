"""Add streak freeze columns to user_gamification_stats

Revision ID: v2
Revises: v1
Create Date: 2025-02-03 10:00:00

A user may freeze a running streak once per ISO week; the freeze protects the
streak from expiring for a fixed number of hours
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v2'
down_revision = 'v1'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('user_gamification_stats', sa.Column('streak_frozen', sa.Boolean(), nullable=False, server_default='false'))
    op.add_column('user_gamification_stats', sa.Column('streak_frozen_at', sa.DateTime(), nullable=True))
    op.add_column('user_gamification_stats', sa.Column('streak_freeze_used_this_week', sa.Boolean(), nullable=False, server_default='false'))
    op.add_column('user_gamification_stats', sa.Column('streak_freeze_week_start', sa.Date(), nullable=True))


def downgrade() -> None:
    op.drop_column('user_gamification_stats', 'streak_freeze_week_start')
    op.drop_column('user_gamification_stats', 'streak_freeze_used_this_week')
    op.drop_column('user_gamification_stats', 'streak_frozen_at')
    op.drop_column('user_gamification_stats', 'streak_frozen')
