"""Repo pull CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.db.models import RepoPull


async def list_repopulls(db: AsyncSession, repo_id: int, branch: str) -> list[RepoPull]:
    result = await db.execute(
        select(RepoPull)
        .where(RepoPull.repo_id == repo_id, RepoPull.branch == branch)
        .order_by(RepoPull.id)
    )
    return list(result.scalars().all())


async def get_repopull(db: AsyncSession, repopull_id: int) -> RepoPull | None:
    result = await db.execute(select(RepoPull).where(RepoPull.id == repopull_id))
    return result.scalar_one_or_none()


async def add_repopull(
    db: AsyncSession,
    repo_id: int,
    branch: str,
    commit: str,
    tag: str = "",
    spdx_id: str = "",
) -> RepoPull:
    rp = RepoPull(repo_id=repo_id, branch=branch, commit=commit, tag=tag, spdx_id=spdx_id)
    db.add(rp)
    await db.flush()
    await db.refresh(rp)
    return rp


async def delete_repopull(db: AsyncSession, repopull_id: int) -> bool:
    rp = await get_repopull(db, repopull_id)
    if not rp:
        return False
    await db.delete(rp)
    await db.flush()
    return True
