"""Agent registry service."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.db.models import Agent

logger = logging.getLogger("peridot.agents")


async def list_agents(db: AsyncSession) -> list[Agent]:
    result = await db.execute(select(Agent).order_by(Agent.id))
    return list(result.scalars().all())


async def get_agent(db: AsyncSession, agent_id: int) -> Agent | None:
    result = await db.execute(select(Agent).where(Agent.id == agent_id))
    return result.scalar_one_or_none()


async def get_agent_by_name(db: AsyncSession, name: str) -> Agent | None:
    result = await db.execute(select(Agent).where(Agent.name == name))
    return result.scalar_one_or_none()


async def add_agent(
    db: AsyncSession,
    *,
    name: str,
    is_active: bool,
    address: str,
    port: int,
    is_codereader: bool,
    is_spdxreader: bool,
    is_codewriter: bool,
    is_spdxwriter: bool,
) -> Agent:
    agent = Agent(
        name=name,
        is_active=is_active,
        address=address,
        port=port,
        is_codereader=is_codereader,
        is_spdxreader=is_spdxreader,
        is_codewriter=is_codewriter,
        is_spdxwriter=is_spdxwriter,
    )
    db.add(agent)
    await db.flush()
    await db.refresh(agent)
    logger.info("Registered agent id=%d name='%s' at %s:%d", agent.id, name, address, port)
    return agent


async def update_agent(db: AsyncSession, agent: Agent, changes: dict[str, Any]) -> Agent:
    """Apply *changes* (column name -> new value) to *agent*."""
    for key, value in changes.items():
        setattr(agent, key, value)
    await db.flush()
    await db.refresh(agent)
    return agent
