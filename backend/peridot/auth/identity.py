"""Identity resolution: GitHub login -> who is calling.

:func:`lookup_user` returns a tagged :class:`Found` / :class:`NotFound`
result.  Only :func:`resolve_identity`, called at the gate, collapses
``NotFound`` into the unregistered sentinel (ID 0, role ``disabled``), so
no code that handles real users ever sees ID 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth.errors import IdentityLookupError
from peridot.auth.roles import Role
from peridot.db.models import User
from peridot.services import user_service

logger = logging.getLogger("peridot.auth")

UNREGISTERED_ID = 0


@dataclass(frozen=True)
class Identity:
    """The resolved caller for one request."""

    id: int
    github: str
    name: str
    role: Role

    @property
    def is_registered(self) -> bool:
        return self.id != UNREGISTERED_ID

    @classmethod
    def from_user(cls, user: User) -> Identity:
        return cls(
            id=user.id,
            github=user.github,
            name=user.name,
            role=Role.from_level(user.access_level),
        )

    @classmethod
    def unregistered(cls, github: str) -> Identity:
        return cls(id=UNREGISTERED_ID, github=github, name="", role=Role.DISABLED)


@dataclass(frozen=True)
class Found:
    user: User


@dataclass(frozen=True)
class NotFound:
    github: str


LookupResult = Union[Found, NotFound]


async def lookup_user(db: AsyncSession, github: str) -> LookupResult:
    """Look up a registered user by GitHub login.

    Raises :class:`IdentityLookupError` when the database itself fails;
    a missing row is a normal :class:`NotFound`.
    """
    try:
        user = await user_service.get_user_by_github(db, github)
    except SQLAlchemyError as exc:
        logger.error("User lookup failed for github=%s", github, exc_info=True)
        raise IdentityLookupError() from exc
    if user is None:
        return NotFound(github)
    return Found(user)


async def resolve_identity(db: AsyncSession, github: str) -> Identity:
    result = await lookup_user(db, github)
    if isinstance(result, Found):
        return Identity.from_user(result.user)
    return Identity.unregistered(result.github)
