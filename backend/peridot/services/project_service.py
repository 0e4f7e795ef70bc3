"""Project and subproject CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.db.models import Project, Subproject


# ── Projects ──────────────────────────────────────────────────


async def list_projects(db: AsyncSession) -> list[Project]:
    result = await db.execute(select(Project).order_by(Project.id))
    return list(result.scalars().all())


async def get_project(db: AsyncSession, project_id: int) -> Project | None:
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def add_project(db: AsyncSession, name: str, fullname: str) -> Project:
    proj = Project(name=name, fullname=fullname)
    db.add(proj)
    await db.flush()
    await db.refresh(proj)
    return proj


async def update_project(
    db: AsyncSession,
    project: Project,
    name: str | None = None,
    fullname: str | None = None,
) -> Project:
    if name is not None:
        project.name = name
    if fullname is not None:
        project.fullname = fullname
    await db.flush()
    await db.refresh(project)
    return project


async def delete_project(db: AsyncSession, project_id: int) -> bool:
    proj = await get_project(db, project_id)
    if not proj:
        return False
    await db.delete(proj)
    await db.flush()
    return True


# ── Subprojects ───────────────────────────────────────────────


async def list_subprojects(db: AsyncSession, project_id: int | None = None) -> list[Subproject]:
    stmt = select(Subproject).order_by(Subproject.id)
    if project_id is not None:
        stmt = stmt.where(Subproject.project_id == project_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_subproject(db: AsyncSession, subproject_id: int) -> Subproject | None:
    result = await db.execute(select(Subproject).where(Subproject.id == subproject_id))
    return result.scalar_one_or_none()


async def add_subproject(db: AsyncSession, project_id: int, name: str, fullname: str) -> Subproject:
    sp = Subproject(project_id=project_id, name=name, fullname=fullname)
    db.add(sp)
    await db.flush()
    await db.refresh(sp)
    return sp


async def update_subproject(
    db: AsyncSession,
    subproject: Subproject,
    name: str | None = None,
    fullname: str | None = None,
) -> Subproject:
    if name is not None:
        subproject.name = name
    if fullname is not None:
        subproject.fullname = fullname
    await db.flush()
    await db.refresh(subproject)
    return subproject


async def delete_subproject(db: AsyncSession, subproject_id: int) -> bool:
    sp = await get_subproject(db, subproject_id)
    if not sp:
        return False
    await db.delete(sp)
    await db.flush()
    return True
