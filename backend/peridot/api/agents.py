"""Agents API router.

GET  /agents       viewer
POST /agents       operator
GET  /agents/{id}  viewer
PUT  /agents/{id}  operator
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth import Identity, Role, require_role
from peridot.db.engine import get_db
from peridot.schemas.jobs import AgentCreate, AgentOut, AgentUpdate
from peridot.services import agent_service

router = APIRouter()


@router.get("")
async def list_agents(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    agents = await agent_service.list_agents(db)
    return {"agents": [AgentOut.model_validate(a) for a in agents]}


@router.post("", status_code=201)
async def create_agent(
    body: AgentCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    if await agent_service.get_agent_by_name(db, body.name):
        raise HTTPException(status_code=400, detail="Unable to create agent")
    agent = await agent_service.add_agent(db, **body.model_dump())
    return {"id": agent.id}


@router.get("/{agent_id}")
async def get_agent(
    agent_id: int,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.VIEWER)),
):
    agent = await agent_service.get_agent(db, agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Unknown agent ID")
    return {"agent": AgentOut.model_validate(agent)}


@router.put("/{agent_id}", status_code=204)
async def update_agent(
    agent_id: int,
    body: AgentUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_role(Role.OPERATOR)),
):
    agent = await agent_service.get_agent(db, agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Unknown agent ID")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    try:
        await agent_service.update_agent(db, agent, changes)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Unable to update agent") from exc
    return Response(status_code=204)
