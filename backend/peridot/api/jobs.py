"""Jobs API router.

GET    /jobs/{id}  viewer
PUT    /jobs/{id}  operator  (only ``is_ready`` can change)
DELETE /jobs/{id}  admin
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.db.engine import get_db
from peridot.schemas.jobs import JobOut, JobUpdate
from peridot.services import job_service

router = APIRouter()


@router.get("/{job_id}")
async def get_job(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    job = await job_service.get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Unknown job ID")
    return {"job": JobOut.from_job(job)}


@router.put("/{job_id}", status_code=204)
async def update_job(
    job_id: int,
    body: JobUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    job = await job_service.get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Unknown job ID")
    await job_service.set_job_ready(db, job, body.is_ready)
    return Response(status_code=204)


@router.delete("/{job_id}", status_code=204)
async def delete_job(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.ADMIN)),
):
    if not await job_service.delete_job(db, job_id):
        raise HTTPException(status_code=404, detail="Unknown job ID")
    return Response(status_code=204)
