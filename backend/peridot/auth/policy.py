"""Self-vs-other rules for user records.

``USER_FIELD_POLICY`` is the single place that says who may change which
user field.  Admins may change every field on every record; anyone else
may change only the fields marked ``self_editable``, and only on their
own record.
"""

from __future__ import annotations

from dataclasses import dataclass

from peridot.auth.errors import OwnerMismatch
from peridot.auth.identity import Identity
from peridot.auth.roles import Role


@dataclass(frozen=True)
class FieldRule:
    self_editable: bool = False


USER_FIELD_POLICY: dict[str, FieldRule] = {
    "name": FieldRule(self_editable=True),
    "github": FieldRule(self_editable=False),
    "access": FieldRule(self_editable=False),
}


def is_admin(identity: Identity) -> bool:
    return identity.role.at_least(Role.ADMIN)


def can_view_full_user(identity: Identity, target_id: int) -> bool:
    """Admins and the record's owner see the full record."""
    return is_admin(identity) or identity.id == target_id


def check_user_target(identity: Identity, target_id: int) -> None:
    """Non-admins may only modify their own record."""
    if not is_admin(identity) and identity.id != target_id:
        raise OwnerMismatch()


def check_user_fields(identity: Identity, target_id: int, fields: set[str]) -> None:
    """Reject the update unless every field in *fields* is allowed.

    Unknown field names are treated as not self-editable.
    """
    if is_admin(identity):
        return
    check_user_target(identity, target_id)
    for field in fields:
        rule = USER_FIELD_POLICY.get(field, FieldRule())
        if not rule.self_editable:
            raise OwnerMismatch()
