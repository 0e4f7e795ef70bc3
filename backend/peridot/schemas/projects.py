"""Pydantic models for the project tree: projects, subprojects, repos, pulls."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# ── Projects ────────────────────────────────────────────────────


class ProjectCreate(BaseModel):
    name: str
    fullname: str


class ProjectUpdate(BaseModel):
    name: str | None = None
    fullname: str | None = None


class ProjectOut(BaseModel):
    id: int
    name: str
    fullname: str

    model_config = {"from_attributes": True}


# ── Subprojects ─────────────────────────────────────────────────


class SubprojectCreate(BaseModel):
    project_id: int
    name: str
    fullname: str


class SubprojectCreateUnder(BaseModel):
    """POST /projects/{id}/subprojects: the project comes from the path."""

    name: str
    fullname: str


class SubprojectUpdate(BaseModel):
    project_id: int | None = None
    name: str | None = None
    fullname: str | None = None


class SubprojectOut(BaseModel):
    id: int
    project_id: int
    name: str
    fullname: str

    model_config = {"from_attributes": True}


# ── Repos ───────────────────────────────────────────────────────


class RepoCreate(BaseModel):
    subproject_id: int
    name: str
    address: str


class RepoCreateUnder(BaseModel):
    name: str
    address: str


class RepoUpdate(BaseModel):
    name: str | None = None
    address: str | None = None


class RepoOut(BaseModel):
    id: int
    subproject_id: int
    name: str
    address: str

    model_config = {"from_attributes": True}


# ── Branches & pulls ────────────────────────────────────────────


class BranchCreate(BaseModel):
    branch: str


class RepoPullCreate(BaseModel):
    commit: str
    tag: str = ""
    spdx_id: str = ""


class RepoPullOut(BaseModel):
    id: int
    repo_id: int
    branch: str
    pulled_at: datetime | None = None
    commit: str
    tag: str
    spdx_id: str

    model_config = {"from_attributes": True}
