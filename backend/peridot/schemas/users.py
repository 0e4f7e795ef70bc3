"""Pydantic models for user records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from peridot.auth.roles import Role
from peridot.db.models import User


class UserOut(BaseModel):
    id: int
    name: str
    github: str
    access: str

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            github=user.github,
            access=Role.from_level(user.access_level).label,
        )


class UserRedacted(BaseModel):
    """What a non-admin sees of someone else's record."""

    id: int
    github: str

    @classmethod
    def from_user(cls, user: User) -> "UserRedacted":
        return cls(id=user.id, github=user.github)


class UserCreate(BaseModel):
    name: str
    github: str
    access: str


class UserUpdate(BaseModel):
    """Partial update.  ``model_fields_set`` says which fields were sent.

    An omitted field is left unchanged; an explicit ``null`` is rejected.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    github: str | None = None
    access: str | None = None

    @field_validator("name", "github", "access")
    @classmethod
    def _not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("value must not be null")
        return v

    def present_fields(self) -> set[str]:
        return set(self.model_fields_set)
