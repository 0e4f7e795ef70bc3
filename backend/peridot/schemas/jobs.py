"""Pydantic models for jobs and agents."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from peridot.db.models import Job
from peridot.services.job_service import job_config_of, priorjob_ids_of


# ── Agents ──────────────────────────────────────────────────────


class AgentCreate(BaseModel):
    name: str
    is_active: bool
    address: str
    port: int
    is_codereader: bool
    is_spdxreader: bool
    is_codewriter: bool
    is_spdxwriter: bool


class AgentUpdate(BaseModel):
    name: str | None = None
    is_active: bool | None = None
    address: str | None = None
    port: int | None = None
    is_codereader: bool | None = None
    is_spdxreader: bool | None = None
    is_codewriter: bool | None = None
    is_spdxwriter: bool | None = None


class AgentOut(BaseModel):
    id: int
    name: str
    is_active: bool
    address: str
    port: int
    is_codereader: bool
    is_spdxreader: bool
    is_codewriter: bool
    is_spdxwriter: bool

    model_config = {"from_attributes": True}


# ── Jobs ────────────────────────────────────────────────────────


class JobCreate(BaseModel):
    agent_id: int
    priorjob_ids: list[int] = []
    is_ready: bool = False
    # Parsed by job_service.parse_job_config; kept loose here so the
    # parser can report precise reasons.
    config: Any


class JobUpdate(BaseModel):
    is_ready: bool


class JobOut(BaseModel):
    id: int
    repopull_id: int
    agent_id: int
    priorjob_ids: list[int]
    started_at: datetime | None = None
    finished_at: datetime | None = None
    status: str
    health: str
    output: str
    is_ready: bool
    config: dict[str, Any]

    @classmethod
    def from_job(cls, job: Job) -> "JobOut":
        return cls(
            id=job.id,
            repopull_id=job.repopull_id,
            agent_id=job.agent_id,
            priorjob_ids=priorjob_ids_of(job),
            started_at=job.started_at,
            finished_at=job.finished_at,
            status=job.status,
            health=job.health,
            output=job.output,
            is_ready=job.is_ready,
            config=job_config_of(job),
        )
