"""Administrative commands.

POST /admin/db  {"command": "resetDB"}  (admin)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.config import Settings, get_settings
from peridot.db.engine import get_db
from peridot.services import admin_service

logger = logging.getLogger("peridot.api.admin")
router = APIRouter()


class DbCommand(BaseModel):
    command: str | None = None


@router.post("/db")
async def db_command(
    body: DbCommand,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    identity: Identity = Depends(require_role(Role.ADMIN)),
):
    if not body.command:
        raise HTTPException(status_code=400, detail="No command specified")
    if body.command != "resetDB":
        raise HTTPException(status_code=400, detail=f"Unknown command '{body.command}'")

    logger.warning("resetDB requested by '%s'", identity.github)
    await admin_service.reset_db(db, settings.INITIAL_ADMIN_GITHUB)
    return {"success": True}
