# File: migrations/versions/3b1f6c2a9d10_initial_fitness_schema.py

"""Initial fitness schema: users, plans, sessions, achievements, analysis, wearables

Revision ID: 3b1f6c2a9d10
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3b1f6c2a9d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ---- usuarios ----
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=150), nullable=False, unique=True),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=80)),
        sa.Column("last_name", sa.String(length=80)),
        sa.Column("profile_image_url", sa.String(length=500)),
        sa.Column("fitness_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("goals", sa.Text()),
        sa.Column("stripe_customer_id", sa.String(length=120)),
        sa.Column("stripe_subscription_id", sa.String(length=120)),
        sa.Column("subscription_status", sa.String(length=20), nullable=False, server_default="inactive"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("fitness_level BETWEEN 1 AND 5", name="ck_users_fitness_level"),
    )

    op.create_table(
        "user_stats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_workouts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_calories_burned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_goal", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("weekly_progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_workout_date", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "user_questionnaires",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("questionnaire_type", sa.String(length=50), nullable=False),
        sa.Column("responses", sa.Text(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_questionnaires_user_id", "user_questionnaires", ["user_id"])

    # ---- planes y sesiones ----
    op.create_table(
        "workout_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("difficulty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_workout_plans_difficulty"),
    )
    op.create_index("ix_workout_plans_user_id", "workout_plans", ["user_id"])

    op.create_table(
        "exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("plan_id", sa.Integer(), sa.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="strength"),
        sa.Column("difficulty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("target_muscles", sa.Text()),
        sa.Column("day", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("order", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("duration", sa.Integer()),
        sa.Column("sets", sa.Integer()),
        sa.Column("reps", sa.Integer()),
        sa.Column("weight", sa.Float()),
    )
    op.create_index("ix_exercises_plan_id", "exercises", ["plan_id"])

    op.create_table(
        "workout_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("plan_id", sa.Integer(), sa.ForeignKey("workout_plans.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=20)),
        sa.Column("duration", sa.Integer()),
        sa.Column("calories_burned", sa.Integer()),
        sa.Column("intensity", sa.String(length=20)),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workout_sessions_user_id", "workout_sessions", ["user_id"])
    op.create_index("ix_workout_sessions_completed_at", "workout_sessions", ["completed_at"])

    # ---- logros ----
    op.create_table(
        "achievements",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("points", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("earned_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "type", "title", name="uq_achievements_user_type_title"),
    )
    op.create_index("ix_achievements_user_id", "achievements", ["user_id"])

    # ---- análisis de técnica ----
    op.create_table(
        "movement_analysis",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("session_id", sa.String(length=120)),
        sa.Column("exercise_name", sa.String(length=200), nullable=False),
        sa.Column("video_url", sa.Text()),
        sa.Column("analysis_result", sa.Text(), nullable=False),
        sa.Column("confidence_score", sa.Float()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_movement_analysis_user_id", "movement_analysis", ["user_id"])
    op.create_index("ix_movement_analysis_created_at", "movement_analysis", ["created_at"])

    op.create_table(
        "exercise_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=120)),
        sa.Column("category", sa.String(length=50)),
        sa.Column("reference_keypoints", sa.Text()),
        sa.Column("difficulty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("target_muscles", sa.Text()),
        sa.Column("common_mistakes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "biomechanical_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("template_id", sa.Integer(), sa.ForeignKey("exercise_templates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rule_name", sa.String(length=120), nullable=False),
        sa.Column("rule_type", sa.String(length=20), nullable=False),
        sa.Column("body_parts", sa.Text(), nullable=False),
        sa.Column("min_value", sa.Float()),
        sa.Column("max_value", sa.Float()),
        sa.Column("severity", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("correction_feedback", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("template_id", "rule_name", name="uq_biomechanical_rules_template_name"),
    )
    op.create_index("ix_biomechanical_rules_template_id", "biomechanical_rules", ["template_id"])

    # ---- wearables ----
    op.create_table(
        "wearable_integrations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("provider", sa.String(length=30), nullable=False),
        sa.Column("access_token", sa.Text()),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("expires_at", sa.DateTime()),
        sa.Column("last_sync", sa.DateTime()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "provider", name="uq_wearable_integrations_user_provider"),
    )
    op.create_index("ix_wearable_integrations_user_id", "wearable_integrations", ["user_id"])

    op.create_table(
        "health_data",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("data_type", sa.String(length=40), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("source", sa.String(length=30), nullable=False, server_default="manual"),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_health_data_user_id", "health_data", ["user_id"])
    op.create_index("ix_health_data_recorded_at", "health_data", ["recorded_at"])


def downgrade():
    for table in (
        "health_data",
        "wearable_integrations",
        "biomechanical_rules",
        "exercise_templates",
        "movement_analysis",
        "achievements",
        "workout_sessions",
        "exercises",
        "workout_plans",
        "user_questionnaires",
        "user_stats",
        "users",
    ):
        op.drop_table(table)
