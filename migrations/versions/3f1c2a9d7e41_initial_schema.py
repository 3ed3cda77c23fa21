"""initial schema

Revision ID: 3f1c2a9d7e41
Revises:
Create Date: 2026-10-18 12:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "3f1c2a9d7e41"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("admin_token", sa.String(length=36), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_groups_slug", "groups", ["slug"], unique=True)

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("token", sa.String(length=36), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_members_group_id", "members", ["group_id"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("paid_by_member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("added_by_member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_expenses_group_id", "expenses", ["group_id"])

    op.create_table(
        "expense_splits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id"), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.UniqueConstraint("expense_id", "member_id", name="uq_expense_splits_member"),
        sa.CheckConstraint("amount >= 0", name="ck_expense_splits_amount"),
    )
    op.create_index("ix_expense_splits_expense_id", "expense_splits", ["expense_id"])


def downgrade():
    op.drop_index("ix_expense_splits_expense_id", table_name="expense_splits")
    op.drop_table("expense_splits")
    op.drop_index("ix_expenses_group_id", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_members_group_id", table_name="members")
    op.drop_table("members")
    op.drop_index("ix_groups_slug", table_name="groups")
    op.drop_table("groups")
