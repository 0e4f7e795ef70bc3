"""Subprojects API router.

GET    /subprojects             viewer
POST   /subprojects             operator
GET    /subprojects/{id}        viewer
PUT    /subprojects/{id}        operator
DELETE /subprojects/{id}        admin
GET    /subprojects/{id}/repos  viewer
POST   /subprojects/{id}/repos  operator
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.db.engine import get_db
from peridot.schemas.projects import (
    RepoCreateUnder,
    RepoOut,
    SubprojectCreate,
    SubprojectOut,
    SubprojectUpdate,
)
from peridot.services import project_service, repo_service

logger = logging.getLogger("peridot.api.subprojects")
router = APIRouter()


@router.get("")
async def list_subprojects(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    subprojects = await project_service.list_subprojects(db)
    return {"subprojects": [SubprojectOut.model_validate(sp) for sp in subprojects]}


@router.post("", status_code=201)
async def create_subproject(
    body: SubprojectCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    if not await project_service.get_project(db, body.project_id):
        raise HTTPException(status_code=400, detail="Unable to create subproject")
    sp = await project_service.add_subproject(db, body.project_id, body.name, body.fullname)
    return {"id": sp.id}


@router.get("/{subproject_id}")
async def get_subproject(
    subproject_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    sp = await project_service.get_subproject(db, subproject_id)
    if not sp:
        raise HTTPException(status_code=404, detail="Unknown subproject ID")
    return {"subproject": SubprojectOut.model_validate(sp)}


@router.put("/{subproject_id}", status_code=204)
async def update_subproject(
    subproject_id: int,
    body: SubprojectUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    sp = await project_service.get_subproject(db, subproject_id)
    if not sp:
        raise HTTPException(status_code=404, detail="Unknown subproject ID")
    if body.project_id is not None and body.project_id != sp.project_id:
        if not await project_service.get_project(db, body.project_id):
            raise HTTPException(status_code=400, detail="Invalid value for 'project_id'")
        sp.project_id = body.project_id
    await project_service.update_subproject(db, sp, body.name, body.fullname)
    return Response(status_code=204)


@router.delete("/{subproject_id}", status_code=204)
async def delete_subproject(
    subproject_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.ADMIN)),
):
    try:
        deleted = await project_service.delete_subproject(db, subproject_id)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to delete subproject") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Unknown subproject ID")
    return Response(status_code=204)


# ── Repos of a subproject ───────────────────────────────────────


@router.get("/{subproject_id}/repos")
async def list_subproject_repos(
    subproject_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    if not await project_service.get_subproject(db, subproject_id):
        raise HTTPException(status_code=404, detail="Unknown subproject ID")
    repos = await repo_service.list_repos(db, subproject_id)
    return {"repos": [RepoOut.model_validate(r) for r in repos]}


@router.post("/{subproject_id}/repos", status_code=201)
async def create_subproject_repo(
    subproject_id: int,
    body: RepoCreateUnder,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    if not await project_service.get_subproject(db, subproject_id):
        raise HTTPException(status_code=404, detail="Unknown subproject ID")
    repo = await repo_service.add_repo(db, subproject_id, body.name, body.address)
    return {"id": repo.id}
