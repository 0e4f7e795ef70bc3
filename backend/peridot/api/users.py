"""Users management API.

Endpoints
---------
GET  /users       list users (viewer; only admins see full records)
POST /users       create user (admin)
GET  /users/{id}  get user (viewer; full record for admin or self)
PUT  /users/{id}  update user (admin: any field; self: fields allowed
                  by ``peridot.auth.policy.USER_FIELD_POLICY``)
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.auth import policy
from peridot.db.engine import get_db
from peridot.schemas.users import UserCreate, UserOut, UserRedacted, UserUpdate
from peridot.services import user_service

logger = logging.getLogger("peridot.api.users")
router = APIRouter(tags=["users"])


def _parse_access(value: str) -> Role:
    try:
        return Role.from_label(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid value for 'access'") from exc


# ── Routes ──────────────────────────────────────────────────────


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.VIEWER)),
):
    users = await user_service.list_users(db)
    if policy.is_admin(identity):
        return {"users": [UserOut.from_user(u) for u in users]}
    return {"users": [UserRedacted.from_user(u) for u in users]}


@router.post("", status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.ADMIN)),
):
    role = _parse_access(body.access)
    if await user_service.get_user_by_github(db, body.github):
        raise HTTPException(status_code=400, detail="Unable to create user")
    try:
        user = await user_service.add_user(
            db, name=body.name, github=body.github, access_level=role
        )
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to create user") from exc
    logger.info("User '%s' created by '%s'", user.github, identity.github)
    return {"id": user.id}


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.VIEWER)),
):
    user = await user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Unknown user ID")
    if policy.can_view_full_user(identity, user.id):
        return {"user": UserOut.from_user(user)}
    return {"user": UserRedacted.from_user(user)}


async def _raw_update_body(request: Request) -> dict[str, Any]:
    try:
        raw = json.loads(await request.body())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON request") from exc
    if not isinstance(raw, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON request")
    return raw


@router.put("/{user_id}", status_code=204)
async def update_user(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_role(Role.VIEWER)),
):
    # Ownership and the field policy are checked before any value in the
    # body is validated.
    policy.check_user_target(identity, user_id)

    user = await user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Unknown user ID")

    raw = await _raw_update_body(request)
    policy.check_user_fields(identity, user_id, set(raw))

    try:
        body = UserUpdate.model_validate(raw)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in exc.errors()]
        ) from exc

    fields = body.present_fields()
    access_level = _parse_access(body.access) if "access" in fields else None
    try:
        await user_service.update_user(
            db,
            user,
            name=body.name if "name" in fields else None,
            github=body.github if "github" in fields else None,
            access_level=access_level,
        )
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to update user") from exc
    logger.info("User %d updated by '%s' (fields=%s)", user_id, identity.github, sorted(fields))
    return Response(status_code=204)
