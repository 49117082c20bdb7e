"""Initial schema — teams, users, team_memberships, pull_requests, pr_reviewers.

Revision ID: 001_initial
Revises: None
Create Date: 2025-11-10

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("team_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("team_name", sa.String(255), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "users",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "team_memberships",
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.team_id", ondelete="CASCADE"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_team_memberships_team_id", "team_memberships", ["team_id"])

    op.create_table(
        "pull_requests",
        sa.Column("pull_request_id", sa.String(255), primary_key=True),
        sa.Column("pull_request_name", sa.String(500), nullable=False),
        sa.Column("author_id", sa.String(255), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="OPEN"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("merged_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('OPEN', 'MERGED')", name="ck_pull_requests_status"),
    )
    op.create_index("ix_pull_requests_author_id", "pull_requests", ["author_id"])

    op.create_table(
        "pr_reviewers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pull_request_id", sa.String(255), sa.ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"), nullable=False),
        sa.Column("reviewer_id", sa.String(255), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("pull_request_id", "reviewer_id", name="uq_pr_reviewers_pull_request_reviewer"),
    )
    op.create_index("ix_pr_reviewers_reviewer_id", "pr_reviewers", ["reviewer_id"])


def downgrade() -> None:
    op.drop_table("pr_reviewers")
    op.drop_table("pull_requests")
    op.drop_table("team_memberships")
    op.drop_table("users")
    op.drop_table("teams")
