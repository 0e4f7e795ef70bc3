"""Role hierarchy.

``disabled`` < ``viewer`` < ``commenter`` < ``operator`` < ``admin``

Roles compare by their integer value, which is also what the ``users``
table stores in ``access_level``.  The gaps leave room for new tiers
without rewriting stored rows.
"""

from __future__ import annotations

from enum import IntEnum


class Role(IntEnum):
    DISABLED = 0
    VIEWER = 10
    COMMENTER = 20
    OPERATOR = 30
    ADMIN = 99

    @property
    def label(self) -> str:
        """Wire name, e.g. ``"operator"``."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> Role:
        """Parse a wire name.  Raises ``ValueError`` for anything unknown."""
        for role in cls:
            if role.label == label:
                return role
        raise ValueError(f"Unknown access level '{label}'")

    @classmethod
    def from_level(cls, level: int) -> Role:
        """Parse a stored ``access_level`` integer."""
        return cls(level)

    def at_least(self, minimum: Role) -> bool:
        """Return True if this role is *minimum* or higher."""
        return self >= minimum


ROLE_LABELS: tuple[str, ...] = tuple(r.label for r in Role)
