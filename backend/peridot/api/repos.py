"""Repos API router, including branches and the pulls of a branch.

GET    /repos                           viewer
POST   /repos                           operator
GET    /repos/{id}                      viewer
PUT    /repos/{id}                      operator
DELETE /repos/{id}                      admin
GET    /repos/{id}/branches             viewer
POST   /repos/{id}/branches             operator
GET    /repos/{id}/branches/{branch}    viewer   (pulls of that branch)
POST   /repos/{id}/branches/{branch}    operator (record a new pull)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.db.engine import get_db
from peridot.schemas.projects import (
    BranchCreate,
    RepoCreate,
    RepoOut,
    RepoPullCreate,
    RepoPullOut,
    RepoUpdate,
)
from peridot.services import project_service, repo_service, repopull_service

logger = logging.getLogger("peridot.api.repos")
router = APIRouter()


async def _require_repo(db: AsyncSession, repo_id: int):
    repo = await repo_service.get_repo(db, repo_id)
    if not repo:
        raise HTTPException(status_code=404, detail="Unknown repo ID")
    return repo


@router.get("")
async def list_repos(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    repos = await repo_service.list_repos(db)
    return {"repos": [RepoOut.model_validate(r) for r in repos]}


@router.post("", status_code=201)
async def create_repo(
    body: RepoCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    if not await project_service.get_subproject(db, body.subproject_id):
        raise HTTPException(status_code=400, detail="Unable to create repo")
    repo = await repo_service.add_repo(db, body.subproject_id, body.name, body.address)
    return {"id": repo.id}


@router.get("/{repo_id}")
async def get_repo(
    repo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    repo = await _require_repo(db, repo_id)
    return {"repo": RepoOut.model_validate(repo)}


@router.put("/{repo_id}", status_code=204)
async def update_repo(
    repo_id: int,
    body: RepoUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    repo = await _require_repo(db, repo_id)
    await repo_service.update_repo(db, repo, body.name, body.address)
    return Response(status_code=204)


@router.delete("/{repo_id}", status_code=204)
async def delete_repo(
    repo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.ADMIN)),
):
    try:
        deleted = await repo_service.delete_repo(db, repo_id)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to delete repo") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Unknown repo ID")
    return Response(status_code=204)


# ── Branches ────────────────────────────────────────────────────


@router.get("/{repo_id}/branches")
async def list_branches(
    repo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    await _require_repo(db, repo_id)
    return {"branches": await repo_service.list_branches(db, repo_id)}


@router.post("/{repo_id}/branches", status_code=201)
async def create_branch(
    repo_id: int,
    body: BranchCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    await _require_repo(db, repo_id)
    if not body.branch or await repo_service.get_branch(db, repo_id, body.branch):
        raise HTTPException(status_code=400, detail="Unable to create repo branch")
    rb = await repo_service.add_branch(db, repo_id, body.branch)
    return {"branch": rb.branch}


# ── Pulls of a branch ───────────────────────────────────────────


@router.get("/{repo_id}/branches/{branch}")
async def list_branch_pulls(
    repo_id: int,
    branch: str,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    await _require_repo(db, repo_id)
    if not await repo_service.get_branch(db, repo_id, branch):
        raise HTTPException(status_code=404, detail="Unknown repo branch")
    pulls = await repopull_service.list_repopulls(db, repo_id, branch)
    return {"pulls": [RepoPullOut.model_validate(p) for p in pulls]}


@router.post("/{repo_id}/branches/{branch}", status_code=201)
async def create_branch_pull(
    repo_id: int,
    branch: str,
    body: RepoPullCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.OPERATOR)),
):
    await _require_repo(db, repo_id)
    if not await repo_service.get_branch(db, repo_id, branch):
        raise HTTPException(status_code=404, detail="Unknown repo branch")
    rp = await repopull_service.add_repopull(
        db, repo_id, branch, body.commit, tag=body.tag, spdx_id=body.spdx_id
    )
    logger.info("Pull %d recorded for repo %d/%s by '%s'", rp.id, repo_id, branch, identity.github)
    return {"id": rp.id}
