"""initial schema: users, habits, progression, analytics events

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("current_tier", sa.String(length=16), nullable=False, server_default="baseline"),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "event_record",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id")),
        sa.Column("habit_id", sa.Integer()),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_event_record_event_type", "event_record", ["event_type"])
    op.create_index("ix_event_record_user_id", "event_record", ["user_id"])
    op.create_index("ix_event_record_user_created_at", "event_record", ["user_id", "created_at"])
    op.create_index("ix_event_record_habit_id", "event_record", ["habit_id"])
    op.create_index("ix_event_record_habit_event_type", "event_record", ["habit_id", "event_type"])

    op.create_table(
        "habits_habit",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("frequency", sa.String(length=16), nullable=False, server_default="daily"),
        sa.Column("reminder_time", sa.String(length=5)),
        sa.Column("notes", sa.Text()),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="medium"),
        sa.Column("streak_tracking", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("skip_allowed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_habits_habit_user_id", "habits_habit", ["user_id"])
    op.create_index("ix_habits_habit_user_tier", "habits_habit", ["user_id", "tier"])
    op.create_index("ix_habits_habit_user_category", "habits_habit", ["user_id", "category"])

    op.create_table(
        "habits_completion",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "habit_id",
            sa.Integer(),
            sa.ForeignKey("habits_habit.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("notes", sa.Text()),
        sa.Column("duration", sa.Integer()),
        sa.Column("intensity", sa.String(length=16)),
        sa.Column("additional_data", sa.JSON()),
    )
    op.create_index("ix_habits_completion_habit_id", "habits_completion", ["habit_id"])
    op.create_index("ix_habits_completion_user_id", "habits_completion", ["user_id"])
    op.create_index(
        "ix_habits_completion_user_tier_at", "habits_completion", ["user_id", "tier", "completed_at"]
    )
    op.create_index("ix_habits_completion_habit_at", "habits_completion", ["habit_id", "completed_at"])

    op.create_table(
        "habits_skip",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "habit_id",
            sa.Integer(),
            sa.ForeignKey("habits_habit.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("skipped_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("reason", sa.Text(), nullable=False),
    )
    op.create_index("ix_habits_skip_habit_id", "habits_skip", ["habit_id"])
    op.create_index("ix_habits_skip_user_id", "habits_skip", ["user_id"])
    op.create_index("ix_habits_skip_user_at", "habits_skip", ["user_id", "skipped_at"])

    op.create_table(
        "progression_rule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("from_tier", sa.String(length=16), nullable=False),
        sa.Column("to_tier", sa.String(length=16), nullable=False),
        sa.Column("condition_type", sa.String(length=32), nullable=False),
        sa.Column("condition_value", sa.Integer(), nullable=False),
        sa.Column("timeframe_days", sa.Integer()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_progression_rule_user_id", "progression_rule", ["user_id"])
    op.create_index("ix_progression_rule_user_from_tier", "progression_rule", ["user_id", "from_tier"])

    op.create_table(
        "progression_event",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column(
            "rule_id",
            sa.Integer(),
            sa.ForeignKey("progression_rule.id", ondelete="SET NULL"),
        ),
        sa.Column("from_tier", sa.String(length=16), nullable=False),
        sa.Column("to_tier", sa.String(length=16), nullable=False),
        sa.Column("condition_type", sa.String(length=32), nullable=False),
        sa.Column("condition_value", sa.Integer(), nullable=False),
        sa.Column("timeframe_days", sa.Integer()),
        sa.Column("was_penalty", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("triggered_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_progression_event_user_id", "progression_event", ["user_id"])
    op.create_index(
        "ix_progression_event_user_triggered_at", "progression_event", ["user_id", "triggered_at"]
    )


def downgrade():
    op.drop_index("ix_progression_event_user_triggered_at", table_name="progression_event")
    op.drop_index("ix_progression_event_user_id", table_name="progression_event")
    op.drop_table("progression_event")

    op.drop_index("ix_progression_rule_user_from_tier", table_name="progression_rule")
    op.drop_index("ix_progression_rule_user_id", table_name="progression_rule")
    op.drop_table("progression_rule")

    op.drop_index("ix_habits_skip_user_at", table_name="habits_skip")
    op.drop_index("ix_habits_skip_user_id", table_name="habits_skip")
    op.drop_index("ix_habits_skip_habit_id", table_name="habits_skip")
    op.drop_table("habits_skip")

    op.drop_index("ix_habits_completion_habit_at", table_name="habits_completion")
    op.drop_index("ix_habits_completion_user_tier_at", table_name="habits_completion")
    op.drop_index("ix_habits_completion_user_id", table_name="habits_completion")
    op.drop_index("ix_habits_completion_habit_id", table_name="habits_completion")
    op.drop_table("habits_completion")

    op.drop_index("ix_habits_habit_user_category", table_name="habits_habit")
    op.drop_index("ix_habits_habit_user_tier", table_name="habits_habit")
    op.drop_index("ix_habits_habit_user_id", table_name="habits_habit")
    op.drop_table("habits_habit")

    op.drop_index("ix_event_record_habit_event_type", table_name="event_record")
    op.drop_index("ix_event_record_habit_id", table_name="event_record")
    op.drop_index("ix_event_record_user_created_at", table_name="event_record")
    op.drop_index("ix_event_record_user_id", table_name="event_record")
    op.drop_index("ix_event_record_event_type", table_name="event_record")
    op.drop_table("event_record")

    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
