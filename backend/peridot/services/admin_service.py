"""Administrative database operations."""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth.roles import Role
from peridot.db.models import DELETE_ORDER
from peridot.services import user_service

logger = logging.getLogger("peridot.admin")

INITIAL_ADMIN_ID = 1
INITIAL_ADMIN_NAME = "Admin"


async def seed_initial_admin(db: AsyncSession, github: str | None) -> bool:
    """Create the initial admin (ID 1) if *github* is set and no users exist.

    Returns True if a user was created.
    """
    if not github:
        return False
    if await user_service.count_users(db) > 0:
        return False
    await user_service.add_user(
        db,
        user_id=INITIAL_ADMIN_ID,
        name=INITIAL_ADMIN_NAME,
        github=github,
        access_level=Role.ADMIN,
    )
    logger.info("Seeded initial admin user (github=%s)", github)
    return True


async def reset_db(db: AsyncSession, initial_admin_github: str | None) -> None:
    """Delete every row of every table, then re-seed the initial admin."""
    for model in DELETE_ORDER:
        await db.execute(delete(model))
    await db.flush()
    logger.warning("Database reset: all tables cleared")
    await seed_initial_admin(db, initial_admin_github)
