"""Initial schema: users, project tree, agents, jobs.

Revision ID: v001
Revises:
Create Date: 2026-10-18 00:00:00.000000

Runs against both SQLite (dev) and PostgreSQL (production) unchanged.

To apply:
    cd backend/
    alembic upgrade head
"""
from __future__ import annotations
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "v001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── users ───────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("github", sa.String(256), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("access_level", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_users_github", "users", ["github"], unique=True)

    # ── projects / subprojects / repos ──────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("fullname", sa.Text(), nullable=False),
    )
    op.create_table(
        "subprojects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("fullname", sa.Text(), nullable=False),
    )
    op.create_index("ix_subprojects_project_id", "subprojects", ["project_id"])
    op.create_table(
        "repos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("subproject_id", sa.Integer(), sa.ForeignKey("subprojects.id"), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
    )
    op.create_index("ix_repos_subproject_id", "repos", ["subproject_id"])

    # ── branches / pulls ────────────────────────────────────────────────────
    op.create_table(
        "repo_branches",
        sa.Column("repo_id", sa.Integer(), sa.ForeignKey("repos.id"), primary_key=True),
        sa.Column("branch", sa.String(256), primary_key=True),
    )
    op.create_table(
        "repo_pulls",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("repo_id", sa.Integer(), nullable=False),
        sa.Column("branch", sa.String(256), nullable=False),
        sa.Column("pulled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("commit", sa.String(64), nullable=False, server_default=""),
        sa.Column("tag", sa.String(256), nullable=False, server_default=""),
        sa.Column("spdx_id", sa.String(256), nullable=False, server_default=""),
        sa.ForeignKeyConstraint(
            ["repo_id", "branch"], ["repo_branches.repo_id", "repo_branches.branch"]
        ),
    )
    op.create_index("ix_repo_pulls_repo_id", "repo_pulls", ["repo_id"])

    # ── agents / jobs ───────────────────────────────────────────────────────
    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(256), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("port", sa.Integer(), nullable=False),
        sa.Column("is_codereader", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_spdxreader", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_codewriter", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_spdxwriter", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("repopull_id", sa.Integer(), sa.ForeignKey("repo_pulls.id"), nullable=False),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=False),
        sa.Column("priorjob_ids_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="startup"),
        sa.Column("health", sa.String(32), nullable=False, server_default="ok"),
        sa.Column("output", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_ready", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("config_json", sa.Text(), nullable=False, server_default="{}"),
    )
    op.create_index("ix_jobs_repopull_id", "jobs", ["repopull_id"])


def downgrade() -> None:
    op.drop_index("ix_jobs_repopull_id", table_name="jobs")
    op.drop_table("jobs")
    op.drop_table("agents")
    op.drop_index("ix_repo_pulls_repo_id", table_name="repo_pulls")
    op.drop_table("repo_pulls")
    op.drop_table("repo_branches")
    op.drop_index("ix_repos_subproject_id", table_name="repos")
    op.drop_table("repos")
    op.drop_index("ix_subprojects_project_id", table_name="subprojects")
    op.drop_table("subprojects")
    op.drop_table("projects")
    op.drop_index("ix_users_github", table_name="users")
    op.drop_table("users")
