"""initial schema

Revision ID: 5b1f0c2d9e41
Revises:
Create Date: 2026-10-19 10:12:03.418220
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "5b1f0c2d9e41"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REVIEW_STATUS_CHECK = "status IN ('pending','in_progress','completed')"


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("first_name", sa.String(length=200), nullable=True),
        sa.Column("last_name", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "otp_codes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_otp_codes_email_code", "otp_codes", ["email", "code"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("designation", sa.String(length=200), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("project_name", sa.String(length=200), nullable=True),
        sa.Column("profile_image", sa.String(length=500), nullable=True),
        sa.Column("manager_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("lead_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("role IN ('employee','manager','lead')", name="ck_employees_role"),
    )
    op.create_index("ix_employees_email", "employees", ["email"], unique=True)
    op.create_index("ix_employees_manager_id", "employees", ["manager_id"])
    op.create_index("ix_employees_lead_id", "employees", ["lead_id"])
    op.create_index("ix_employees_user_id", "employees", ["user_id"])

    op.create_table(
        "appraisal_cycles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    # At most one active cycle
    op.create_index(
        "uq_appraisal_cycles_single_active",
        "appraisal_cycles",
        ["is_active"],
        unique=True,
        postgresql_where=sa.text("is_active = true"),
        sqlite_where=sa.text("is_active = 1"),
    )

    op.create_table(
        "feedback_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("target_employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("reviewer_employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appraisal_cycle_id", sa.Uuid(), sa.ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "appraisal_cycle_id", "reviewer_employee_id", "target_employee_id",
            name="uq_feedback_request_cycle_reviewer_target",
        ),
        sa.CheckConstraint("status IN ('pending','submitted')", name="ck_feedback_requests_status"),
    )
    op.create_index("ix_feedback_requests_target_employee_id", "feedback_requests", ["target_employee_id"])
    op.create_index("ix_feedback_requests_reviewer_employee_id", "feedback_requests", ["reviewer_employee_id"])
    op.create_index("ix_feedback_requests_appraisal_cycle_id", "feedback_requests", ["appraisal_cycle_id"])

    op.create_table(
        "peer_feedback",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("feedback_request_id", sa.Uuid(), sa.ForeignKey("feedback_requests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reviewer_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("target_employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appraisal_cycle_id", sa.Uuid(), sa.ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("technical_skills", sa.Integer(), nullable=False),
        sa.Column("communication", sa.Integer(), nullable=False),
        sa.Column("teamwork", sa.Integer(), nullable=False),
        sa.Column("problem_solving", sa.Integer(), nullable=False),
        sa.Column("leadership", sa.Integer(), nullable=False),
        sa.Column("strengths", sa.Text(), nullable=False),
        sa.Column("areas_of_improvement", sa.Text(), nullable=False),
        sa.Column("additional_comments", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("feedback_request_id", name="uq_peer_feedback_request"),
        sa.CheckConstraint("technical_skills BETWEEN 1 AND 5", name="ck_peer_feedback_technical_skills"),
        sa.CheckConstraint("communication BETWEEN 1 AND 5", name="ck_peer_feedback_communication"),
        sa.CheckConstraint("teamwork BETWEEN 1 AND 5", name="ck_peer_feedback_teamwork"),
        sa.CheckConstraint("problem_solving BETWEEN 1 AND 5", name="ck_peer_feedback_problem_solving"),
        sa.CheckConstraint("leadership BETWEEN 1 AND 5", name="ck_peer_feedback_leadership"),
    )
    op.create_index("ix_peer_feedback_target_employee_id", "peer_feedback", ["target_employee_id"])
    op.create_index("ix_peer_feedback_appraisal_cycle_id", "peer_feedback", ["appraisal_cycle_id"])

    op.create_table(
        "manager_reviews",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("manager_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appraisal_cycle_id", sa.Uuid(), sa.ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("performance_rating", sa.Integer(), nullable=False),
        sa.Column("goals_achieved", sa.Text(), nullable=False),
        sa.Column("areas_of_growth", sa.Text(), nullable=False),
        sa.Column("training_needs", sa.Text(), nullable=True),
        sa.Column("promotion_readiness", sa.String(length=100), nullable=False),
        sa.Column("overall_comments", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("employee_id", "appraisal_cycle_id", name="uq_manager_review_employee_cycle"),
        sa.CheckConstraint(REVIEW_STATUS_CHECK, name="ck_manager_reviews_status"),
        sa.CheckConstraint("performance_rating BETWEEN 1 AND 5", name="ck_manager_reviews_rating"),
    )
    op.create_index("ix_manager_reviews_manager_id", "manager_reviews", ["manager_id"])

    op.create_table(
        "lead_reviews",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("lead_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appraisal_cycle_id", sa.Uuid(), sa.ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("final_rating", sa.Integer(), nullable=False),
        sa.Column("increment_percentage", sa.String(length=50), nullable=True),
        sa.Column("promotion_decision", sa.String(length=100), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("employee_id", "appraisal_cycle_id", name="uq_lead_review_employee_cycle"),
        sa.CheckConstraint(REVIEW_STATUS_CHECK, name="ck_lead_reviews_status"),
        sa.CheckConstraint("final_rating BETWEEN 1 AND 5", name="ck_lead_reviews_rating"),
    )
    op.create_index("ix_lead_reviews_lead_id", "lead_reviews", ["lead_id"])

    op.create_table(
        "know_about_me",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False),
        sa.Column("appraisal_cycle_id", sa.Uuid(), sa.ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False),
        *[
            sa.Column(name, sa.Text(), nullable=True)
            for name in (
                "project_contributions",
                "role_and_responsibilities",
                "key_achievements",
                "learnings",
                "certifications",
                "technologies_worked_on",
                "mentorship",
                "volunteering_activities",
                "leadership_roles",
                "team_building_activities",
                "problems_solved",
                "strengths",
                "extra_efforts",
                "improvements",
            )
        ],
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("employee_id", "appraisal_cycle_id", name="uq_know_about_me_employee_cycle"),
    )


def downgrade() -> None:
    op.drop_table("know_about_me")
    op.drop_index("ix_lead_reviews_lead_id", table_name="lead_reviews")
    op.drop_table("lead_reviews")
    op.drop_index("ix_manager_reviews_manager_id", table_name="manager_reviews")
    op.drop_table("manager_reviews")
    op.drop_index("ix_peer_feedback_appraisal_cycle_id", table_name="peer_feedback")
    op.drop_index("ix_peer_feedback_target_employee_id", table_name="peer_feedback")
    op.drop_table("peer_feedback")
    op.drop_index("ix_feedback_requests_appraisal_cycle_id", table_name="feedback_requests")
    op.drop_index("ix_feedback_requests_reviewer_employee_id", table_name="feedback_requests")
    op.drop_index("ix_feedback_requests_target_employee_id", table_name="feedback_requests")
    op.drop_table("feedback_requests")
    op.drop_index("uq_appraisal_cycles_single_active", table_name="appraisal_cycles")
    op.drop_table("appraisal_cycles")
    op.drop_index("ix_employees_user_id", table_name="employees")
    op.drop_index("ix_employees_lead_id", table_name="employees")
    op.drop_index("ix_employees_manager_id", table_name="employees")
    op.drop_index("ix_employees_email", table_name="employees")
    op.drop_table("employees")
    op.drop_index("ix_otp_codes_email_code", table_name="otp_codes")
    op.drop_table("otp_codes")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
