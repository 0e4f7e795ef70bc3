"""ORM models: users, the project tree, agents and jobs."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


# ── Users ───────────────────────────────────────────────────────


class User(Base):
    __tablename__ = "users"

    # IDs are assigned by the service layer (max + 1) so the initial
    # admin can always be seeded as ID 1.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    github: Mapped[str] = mapped_column(String(256), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    access_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ── Project tree ────────────────────────────────────────────────


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    fullname: Mapped[str] = mapped_column(Text, nullable=False)


class Subproject(Base):
    __tablename__ = "subprojects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    fullname: Mapped[str] = mapped_column(Text, nullable=False)


class Repo(Base):
    __tablename__ = "repos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subproject_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subprojects.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)


class RepoBranch(Base):
    __tablename__ = "repo_branches"

    repo_id: Mapped[int] = mapped_column(Integer, ForeignKey("repos.id"), primary_key=True)
    branch: Mapped[str] = mapped_column(String(256), primary_key=True)


class RepoPull(Base):
    __tablename__ = "repo_pulls"
    __table_args__ = (
        ForeignKeyConstraint(
            ["repo_id", "branch"], ["repo_branches.repo_id", "repo_branches.branch"]
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repo_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    branch: Mapped[str] = mapped_column(String(256), nullable=False)
    pulled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    commit: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    tag: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    spdx_id: Mapped[str] = mapped_column(String(256), nullable=False, default="")


# ── Agents & jobs ───────────────────────────────────────────────


class Agent(Base):
    __tablename__ = "agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    port: Mapped[int] = mapped_column(Integer, nullable=False)
    is_codereader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_spdxreader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_codewriter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_spdxwriter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repopull_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repo_pulls.id"), nullable=False, index=True
    )
    agent_id: Mapped[int] = mapped_column(Integer, ForeignKey("agents.id"), nullable=False)
    priorjob_ids_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")  # JSON list
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="startup")
    health: Mapped[str] = mapped_column(String(32), nullable=False, default="ok")
    output: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    config_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")  # JSON object


# Children first, for bulk deletes.
DELETE_ORDER: tuple[type[Base], ...] = (
    Job,
    Agent,
    RepoPull,
    RepoBranch,
    Repo,
    Subproject,
    Project,
    User,
)
