"""Create FitClub schema

Revision ID: v1
Revises: 
Create Date: 2025-01-06 00:00:00

Profiles, gym check-ins, gamification stats, achievements, challenges and
workout sessions
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v1'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create user_profiles table
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("user_type", sa.String(), nullable=False, server_default="member"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_profiles_email"), "user_profiles", ["email"], unique=True)
    op.create_index(op.f("ix_user_profiles_username"), "user_profiles", ["username"], unique=True)

    # Create gym_checkins table
    op.create_table(
        "gym_checkins",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("user_type", sa.String(), nullable=False, server_default="member"),
        sa.Column("check_in_time", sa.DateTime(), nullable=False),
        sa.Column("check_out_time", sa.DateTime(), nullable=True),
        sa.Column("is_checked_in", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("check_in_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_gym_checkins_id"), "gym_checkins", ["id"], unique=False)
    op.create_index(op.f("ix_gym_checkins_user_id"), "gym_checkins", ["user_id"], unique=False)
    op.create_index(op.f("ix_gym_checkins_check_in_time"), "gym_checkins", ["check_in_time"], unique=False)
    op.create_index(op.f("ix_gym_checkins_is_checked_in"), "gym_checkins", ["is_checked_in"], unique=False)
    # At most one open session per user
    op.create_index(
        "uq_gym_checkins_open_per_user",
        "gym_checkins",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_checked_in"),
    )

    # Create user_gamification_stats table
    op.create_table(
        "user_gamification_stats",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("current_level", sa.Integer(), nullable=False, server_default='1'),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("total_workouts", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("total_checkins", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("total_goals_achieved", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("achievements_unlocked", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("challenges_completed", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("last_checkin_date", sa.Date(), nullable=True),
        sa.Column("last_workout_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_user_gamification_stats_user_id"),
    )
    op.create_index(op.f("ix_user_gamification_stats_user_id"), "user_gamification_stats", ["user_id"], unique=False)
    op.create_index(op.f("ix_user_gamification_stats_total_points"), "user_gamification_stats", ["total_points"], unique=False)

    # Create available_achievements table
    op.create_table(
        "available_achievements",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("icon", sa.String(50), nullable=False, server_default=""),
        sa.Column("points", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("requirement_type", sa.String(50), nullable=False),
        sa.Column("requirement_value", sa.Integer(), nullable=False, server_default='1'),
        sa.Column("requirement_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_available_achievements_category"), "available_achievements", ["category"], unique=False)

    # Create user_achievements table
    op.create_table(
        "user_achievements",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("achievement_id", sa.String(), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("points_earned", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["achievement_id"], ["available_achievements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )
    op.create_index(op.f("ix_user_achievements_user_id"), "user_achievements", ["user_id"], unique=False)

    # Create available_challenges table
    op.create_table(
        "available_challenges",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("target_value", sa.Integer(), nullable=False),
        sa.Column("reward_points", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("challenge_category", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_available_challenges_end_date"), "available_challenges", ["end_date"], unique=False)
    op.create_index(op.f("ix_available_challenges_is_active"), "available_challenges", ["is_active"], unique=False)

    # Create user_challenges table
    op.create_table(
        "user_challenges",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("challenge_id", sa.String(), nullable=False),
        sa.Column("current_progress", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["challenge_id"], ["available_challenges.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "challenge_id", name="uq_user_challenge"),
    )
    op.create_index(op.f("ix_user_challenges_user_id"), "user_challenges", ["user_id"], unique=False)

    # Create user_workout_sessions table
    op.create_table(
        "user_workout_sessions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("workout_date", sa.Date(), nullable=False),
        sa.Column("workout_type", sa.String(100), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("calories_burned", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_workout_sessions_user_id"), "user_workout_sessions", ["user_id"], unique=False)
    op.create_index(op.f("ix_user_workout_sessions_workout_date"), "user_workout_sessions", ["workout_date"], unique=False)


def downgrade() -> None:
    # Drop all tables in reverse order
    op.drop_table("user_workout_sessions")
    op.drop_table("user_challenges")
    op.drop_table("available_challenges")
    op.drop_table("user_achievements")
    op.drop_table("available_achievements")
    op.drop_table("user_gamification_stats")
    op.drop_index("uq_gym_checkins_open_per_user", table_name="gym_checkins")
    op.drop_table("gym_checkins")
    op.drop_table("user_profiles")
