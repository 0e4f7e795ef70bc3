"""Job service: CRUD plus parsing of the per-job ``config`` document.

A job config has three optional sections::

    {
      "kv":         {"prefer": "primary"},
      "codereader": {"primary": {"path": "/code"}},
      "spdxreader": {"godeps": {"priorjob_id": 7}}
    }

Each ``codereader`` / ``spdxreader`` entry names exactly one source: a
``path`` string or the ``priorjob_id`` of an earlier job whose output to
read.  The document is stored as JSON text in ``jobs.config_json``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.db.models import Job

logger = logging.getLogger("peridot.jobs")

READER_SECTIONS = ("codereader", "spdxreader")


class JobConfigError(ValueError):
    """The submitted config document is malformed."""


@dataclass(frozen=True)
class JobPathConfig:
    path: str | None = None
    priorjob_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.priorjob_id is not None:
            return {"priorjob_id": self.priorjob_id}
        return {"path": self.path}


@dataclass
class JobConfig:
    kv: dict[str, str] = field(default_factory=dict)
    codereader: dict[str, JobPathConfig] = field(default_factory=dict)
    spdxreader: dict[str, JobPathConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.kv:
            out["kv"] = dict(self.kv)
        for section in READER_SECTIONS:
            entries: dict[str, JobPathConfig] = getattr(self, section)
            if entries:
                out[section] = {k: v.to_dict() for k, v in entries.items()}
        return out


# ── Config parsing ────────────────────────────────────────────


def _parse_path_configs(raw: dict[str, Any], which: str) -> dict[str, JobPathConfig]:
    section = raw.get(which)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise JobConfigError(f"Invalid value for '{which}'")

    parsed: dict[str, JobPathConfig] = {}
    for key, record in section.items():
        if not isinstance(record, dict):
            raise JobConfigError(f"Error parsing value for '{which}' with key {key}")
        if len(record) > 1:
            raise JobConfigError(f"More than one sub-key present for '{which}' with key {key}")
        if not record:
            raise JobConfigError(f"Missing sub-key for '{which}' with key {key}")

        ((subkey, value),) = record.items()
        if subkey == "path":
            if not isinstance(value, str):
                raise JobConfigError(f"Invalid non-string value for '{which}' with key 'path'")
            parsed[key] = JobPathConfig(path=value)
        elif subkey == "priorjob_id":
            if isinstance(value, bool) or not isinstance(value, int):
                raise JobConfigError(
                    f"Invalid non-integer value for '{which}' with key 'priorjob_id'"
                )
            parsed[key] = JobPathConfig(priorjob_id=value)
        else:
            raise JobConfigError(f"Invalid sub-key '{subkey}' for '{which}' with key {key}")
    return parsed


def parse_job_config(raw: Any) -> JobConfig:
    """Validate a decoded JSON config document.

    Raises :class:`JobConfigError` with a client-facing reason.
    """
    if not isinstance(raw, dict):
        raise JobConfigError("config must be a JSON object")

    kv: dict[str, str] = {}
    raw_kv = raw.get("kv")
    if raw_kv is not None:
        if not isinstance(raw_kv, dict):
            raise JobConfigError("Invalid value for 'kv'")
        for key, value in raw_kv.items():
            if not isinstance(value, str):
                raise JobConfigError(f"Invalid non-string value for 'kv' with key {key}")
            kv[key] = value

    return JobConfig(
        kv=kv,
        codereader=_parse_path_configs(raw, "codereader"),
        spdxreader=_parse_path_configs(raw, "spdxreader"),
    )


def job_config_of(job: Job) -> dict[str, Any]:
    return json.loads(job.config_json or "{}")


def priorjob_ids_of(job: Job) -> list[int]:
    return json.loads(job.priorjob_ids_json or "[]")


# ── CRUD ──────────────────────────────────────────────────────


async def list_jobs_for_repopull(db: AsyncSession, repopull_id: int) -> list[Job]:
    result = await db.execute(
        select(Job).where(Job.repopull_id == repopull_id).order_by(Job.id)
    )
    return list(result.scalars().all())


async def get_job(db: AsyncSession, job_id: int) -> Job | None:
    result = await db.execute(select(Job).where(Job.id == job_id))
    return result.scalar_one_or_none()


async def add_job(
    db: AsyncSession,
    *,
    repopull_id: int,
    agent_id: int,
    priorjob_ids: list[int],
    config: JobConfig,
    is_ready: bool = False,
) -> Job:
    job = Job(
        repopull_id=repopull_id,
        agent_id=agent_id,
        priorjob_ids_json=json.dumps(list(priorjob_ids)),
        config_json=json.dumps(config.to_dict()),
        status="startup",
        health="ok",
        output="",
        is_ready=is_ready,
    )
    db.add(job)
    await db.flush()
    await db.refresh(job)
    logger.info("Created job id=%d repopull=%d agent=%d", job.id, repopull_id, agent_id)
    return job


async def set_job_ready(db: AsyncSession, job: Job, is_ready: bool) -> Job:
    job.is_ready = is_ready
    await db.flush()
    await db.refresh(job)
    return job


async def delete_job(db: AsyncSession, job_id: int) -> bool:
    job = await get_job(db, job_id)
    if not job:
        return False
    await db.delete(job)
    await db.flush()
    return True
