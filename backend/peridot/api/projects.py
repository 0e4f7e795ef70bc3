"""Projects API router.

GET    /projects                   viewer
POST   /projects                   operator
GET    /projects/{id}              viewer
PUT    /projects/{id}              operator
DELETE /projects/{id}              admin
GET    /projects/{id}/subprojects  viewer
POST   /projects/{id}/subprojects  operator
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.db.engine import get_db
from peridot.schemas.projects import (
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    SubprojectCreateUnder,
    SubprojectOut,
)
from peridot.services import project_service

logger = logging.getLogger("peridot.api.projects")
router = APIRouter()


@router.get("")
async def list_projects(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    projects = await project_service.list_projects(db)
    return {"projects": [ProjectOut.model_validate(p) for p in projects]}


@router.post("", status_code=201)
async def create_project(
    body: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    proj = await project_service.add_project(db, body.name, body.fullname)
    return {"id": proj.id}


@router.get("/{project_id}")
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    proj = await project_service.get_project(db, project_id)
    if not proj:
        raise HTTPException(status_code=404, detail="Unknown project ID")
    return {"project": ProjectOut.model_validate(proj)}


@router.put("/{project_id}", status_code=204)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    proj = await project_service.get_project(db, project_id)
    if not proj:
        raise HTTPException(status_code=404, detail="Unknown project ID")
    await project_service.update_project(db, proj, body.name, body.fullname)
    return Response(status_code=204)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.ADMIN)),
):
    try:
        deleted = await project_service.delete_project(db, project_id)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to delete project") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Unknown project ID")
    logger.info("Project %d deleted by '%s'", project_id, identity.github)
    return Response(status_code=204)


# ── Subprojects of a project ────────────────────────────────────


@router.get("/{project_id}/subprojects")
async def list_project_subprojects(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    if not await project_service.get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Unknown project ID")
    subprojects = await project_service.list_subprojects(db, project_id)
    return {"subprojects": [SubprojectOut.model_validate(sp) for sp in subprojects]}


@router.post("/{project_id}/subprojects", status_code=201)
async def create_project_subproject(
    project_id: int,
    body: SubprojectCreateUnder,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    if not await project_service.get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Unknown project ID")
    sp = await project_service.add_subproject(db, project_id, body.name, body.fullname)
    return {"id": sp.id}
