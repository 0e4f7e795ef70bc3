"""User records service.

Access levels are stored as plain integers (see ``peridot.auth.roles.Role``).
User IDs are assigned here as ``max(id) + 1`` so the initial administrator
can always be seeded as ID 1 on an empty table.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.db.models import User

logger = logging.getLogger("peridot.users")


# ── Queries ───────────────────────────────────────────────────


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_github(db: AsyncSession, github: str) -> User | None:
    result = await db.execute(select(User).where(User.github == github))
    return result.scalar_one_or_none()


async def count_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return int(result.scalar_one())


async def next_user_id(db: AsyncSession) -> int:
    result = await db.execute(select(func.max(User.id)))
    current = result.scalar_one_or_none()
    return (current or 0) + 1


# ── Mutations ─────────────────────────────────────────────────


async def add_user(
    db: AsyncSession,
    *,
    name: str,
    github: str,
    access_level: int,
    user_id: int | None = None,
) -> User:
    if user_id is None:
        user_id = await next_user_id(db)
    user = User(id=user_id, name=name, github=github, access_level=int(access_level))
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Created user id=%d github='%s' access_level=%d", user.id, github, user.access_level)
    return user


async def update_user(
    db: AsyncSession,
    user: User,
    *,
    name: str | None = None,
    github: str | None = None,
    access_level: int | None = None,
) -> User:
    if name is not None:
        user.name = name
    if github is not None:
        user.github = github
    if access_level is not None:
        user.access_level = int(access_level)
    await db.flush()
    await db.refresh(user)
    return user
