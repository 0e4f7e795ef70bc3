"""Repo pulls API router.

GET    /repopulls/{id}       viewer
DELETE /repopulls/{id}       admin
GET    /repopulls/{id}/jobs  viewer
POST   /repopulls/{id}/jobs  operator
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.db.engine import get_db
from peridot.schemas.jobs import JobCreate, JobOut
from peridot.schemas.projects import RepoPullOut
from peridot.services import agent_service, job_service, repopull_service
from peridot.services.job_service import JobConfigError

logger = logging.getLogger("peridot.api.repopulls")
router = APIRouter()


@router.get("/{repopull_id}")
async def get_repopull(
    repopull_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    rp = await repopull_service.get_repopull(db, repopull_id)
    if not rp:
        raise HTTPException(status_code=404, detail="Unknown repopull ID")
    return {"repopull": RepoPullOut.model_validate(rp)}


@router.delete("/{repopull_id}", status_code=204)
async def delete_repopull(
    repopull_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.ADMIN)),
):
    try:
        deleted = await repopull_service.delete_repopull(db, repopull_id)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to delete repopull") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Unknown repopull ID")
    return Response(status_code=204)


# ── Jobs of a pull ──────────────────────────────────────────────


@router.get("/{repopull_id}/jobs")
async def list_repopull_jobs(
    repopull_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    if not await repopull_service.get_repopull(db, repopull_id):
        raise HTTPException(status_code=404, detail="Unknown repopull ID")
    jobs = await job_service.list_jobs_for_repopull(db, repopull_id)
    return {"jobs": [JobOut.from_job(j) for j in jobs]}


@router.post("/{repopull_id}/jobs", status_code=201)
async def create_repopull_job(
    repopull_id: int,
    body: JobCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.OPERATOR)),
):
    if not await repopull_service.get_repopull(db, repopull_id):
        raise HTTPException(status_code=404, detail="Unknown repopull ID")
    try:
        config = job_service.parse_job_config(body.config)
    except JobConfigError as exc:
        raise HTTPException(
            status_code=400, detail=f"Error parsing value for 'config': {exc}"
        ) from exc
    if not await agent_service.get_agent(db, body.agent_id):
        raise HTTPException(status_code=400, detail="Invalid value for 'agent_id'")

    job = await job_service.add_job(
        db,
        repopull_id=repopull_id,
        agent_id=body.agent_id,
        priorjob_ids=body.priorjob_ids,
        config=config,
        is_ready=body.is_ready,
    )
    logger.info("Job %d created for repopull %d by '%s'", job.id, repopull_id, identity.github)
    return {"id": job.id}
