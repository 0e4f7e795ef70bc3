"""Repo and repo-branch CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.db.models import Repo, RepoBranch


async def list_repos(db: AsyncSession, subproject_id: int | None = None) -> list[Repo]:
    stmt = select(Repo).order_by(Repo.id)
    if subproject_id is not None:
        stmt = stmt.where(Repo.subproject_id == subproject_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_repo(db: AsyncSession, repo_id: int) -> Repo | None:
    result = await db.execute(select(Repo).where(Repo.id == repo_id))
    return result.scalar_one_or_none()


async def add_repo(db: AsyncSession, subproject_id: int, name: str, address: str) -> Repo:
    repo = Repo(subproject_id=subproject_id, name=name, address=address)
    db.add(repo)
    await db.flush()
    await db.refresh(repo)
    return repo


async def update_repo(
    db: AsyncSession,
    repo: Repo,
    name: str | None = None,
    address: str | None = None,
) -> Repo:
    if name is not None:
        repo.name = name
    if address is not None:
        repo.address = address
    await db.flush()
    await db.refresh(repo)
    return repo


async def delete_repo(db: AsyncSession, repo_id: int) -> bool:
    repo = await get_repo(db, repo_id)
    if not repo:
        return False
    await db.delete(repo)
    await db.flush()
    return True


# ── Branches ──────────────────────────────────────────────────


async def list_branches(db: AsyncSession, repo_id: int) -> list[str]:
    """Branch names for *repo_id*, sorted."""
    result = await db.execute(
        select(RepoBranch.branch).where(RepoBranch.repo_id == repo_id).order_by(RepoBranch.branch)
    )
    return list(result.scalars().all())


async def get_branch(db: AsyncSession, repo_id: int, branch: str) -> RepoBranch | None:
    return await db.get(RepoBranch, (repo_id, branch))


async def add_branch(db: AsyncSession, repo_id: int, branch: str) -> RepoBranch:
    rb = RepoBranch(repo_id=repo_id, branch=branch)
    db.add(rb)
    await db.flush()
    return rb
