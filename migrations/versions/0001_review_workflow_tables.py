"""review workflow tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

record_status = sa.Enum(
    "pending", "updated", "approved", "needs_revision",
    name="record_status_enum", create_constraint=True,
)
change_log_status = sa.Enum(
    "pending", "approved", "needs_revision",
    name="change_log_status_enum", create_constraint=True,
)
comment_scope = sa.Enum(
    "row", "field", name="comment_scope_enum", create_constraint=True,
)
notification_type = sa.Enum(
    "info", "success", "warning",
    name="notification_type_enum", create_constraint=True,
)
app_role = sa.Enum(
    "admin", "officer", "viewer", "finance",
    name="app_role_enum", create_constraint=True,
)


def upgrade() -> None:
    op.create_table(
        "monthly_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.String(50), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("total_savings", sa.Numeric(19, 4), nullable=False),
        sa.Column("total_loans", sa.Numeric(19, 4), nullable=False),
        sa.Column("loan_balance", sa.Numeric(19, 4), nullable=False),
        sa.Column("monthly_contribution", sa.Numeric(19, 4), nullable=False),
        sa.Column("monthly_repayment", sa.Numeric(19, 4), nullable=False),
        sa.Column("status", record_status, nullable=False),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "member_id", "month", name="uq_monthly_records_member_month"
        ),
    )
    op.create_index(
        "ix_monthly_records_member_id", "monthly_records", ["member_id"]
    )
    op.create_index("ix_monthly_records_month", "monthly_records", ["month"])

    op.create_table(
        "change_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "monthly_record_id",
            sa.Integer(),
            sa.ForeignKey("monthly_records.id"),
            nullable=False,
        ),
        sa.Column("field_name", sa.String(50), nullable=False),
        sa.Column("old_value", sa.String(50), nullable=True),
        sa.Column("new_value", sa.String(50), nullable=True),
        sa.Column("status", change_log_status, nullable=False),
        sa.Column("changed_by", sa.String(100), nullable=True),
        sa.Column("reviewed_by", sa.String(100), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_change_logs_monthly_record_id", "change_logs", ["monthly_record_id"]
    )
    op.create_index("ix_change_logs_status", "change_logs", ["status"])

    op.create_table(
        "change_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "change_log_id",
            sa.Integer(),
            sa.ForeignKey("change_logs.id"),
            nullable=False,
        ),
        sa.Column("author_id", sa.String(100), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("scope", comment_scope, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_change_comments_change_log_id", "change_comments", ["change_log_id"]
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column(
            "related_change_log_id",
            sa.Integer(),
            sa.ForeignKey("change_logs.id"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(100), nullable=False, unique=True),
        sa.Column("role", app_role, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_roles_role", "user_roles", ["role"])


def downgrade() -> None:
    op.drop_table("user_roles")
    op.drop_table("notifications")
    op.drop_table("change_comments")
    op.drop_table("change_logs")
    op.drop_table("monthly_records")
    for enum_type in (
        app_role, notification_type, comment_scope,
        change_log_status, record_status,
    ):
        enum_type.drop(op.get_bind(), checkfirst=True)
